"""
Tests for PluginContext

Covers payload replacement, the metadata and state side channels, error
collection and the typed accessors used by plugins.
"""

import pytest

from plugpipe.core.exceptions import MissingContextValueError, PipelineStageError, TypeMismatchError
from plugpipe.core.pipeline import PluginContext


class TestPluginContextData:
    """Test the primary payload."""

    def test_default_context_is_empty(self):
        """A new context has no data, metadata, state or errors."""
        context = PluginContext()
        assert context.data is None
        assert context.metadata == {}
        assert context.state == {}
        assert context.errors == []
        assert not context.has_errors

    def test_set_data_replaces_payload(self):
        """set_data swaps the payload, even for a different type."""
        context = PluginContext("text")
        context.set_data(42)
        assert context.get_data() == 42

    def test_contexts_do_not_share_maps(self):
        """Each context gets its own metadata and state dictionaries."""
        first = PluginContext()
        second = PluginContext()
        first.set("key", 1)
        first.set_state("key", 2)
        assert not second.has("key")
        assert not second.has_state("key")


class TestPluginContextSideChannels:
    """Test metadata and state access."""

    def test_metadata_round_trip(self):
        context = PluginContext()
        context.set("score", 0.5)
        assert context.has("score")
        assert context.get("score") == 0.5

    def test_metadata_default(self):
        """Missing metadata returns the supplied default."""
        context = PluginContext()
        assert context.get("missing") is None
        assert context.get("missing", "fallback") == "fallback"

    def test_state_is_separate_from_metadata(self):
        """State and metadata are independent namespaces."""
        context = PluginContext()
        context.set("key", "metadata")
        context.set_state("key", "state")
        assert context.get("key") == "metadata"
        assert context.get_state("key") == "state"

    def test_state_can_be_supplied(self):
        """A caller can hand in state carried over from an earlier run."""
        state = {"conversation:abc": ["hello"]}
        context = PluginContext("next", state=state)
        assert context.get_state("conversation:abc") == ["hello"]
        context.set_state("conversation:abc", ["hello", "next"])
        assert state["conversation:abc"] == ["hello", "next"]

    def test_add_error(self):
        """Collected errors keep their insertion order."""
        context = PluginContext()
        first = PipelineStageError(0, ValueError("a"))
        second = PipelineStageError(2, ValueError("b"))
        context.add_error(first)
        context.add_error(second)
        assert context.has_errors
        assert context.errors == [first, second]


class TestTypedAccessors:
    """Test expect_data and expect_metadata."""

    def test_expect_data_returns_payload(self):
        context = PluginContext("hello")
        assert context.expect_data(str) == "hello"

    def test_expect_data_accepts_tuple_of_types(self):
        context = PluginContext(3)
        assert context.expect_data((int, float)) == 3

    def test_expect_data_mismatch(self):
        """A payload of the wrong type raises TypeMismatchError."""
        context = PluginContext(42)
        with pytest.raises(TypeMismatchError) as exc_info:
            context.expect_data(str)
        assert "expected str" in str(exc_info.value)
        assert "got int" in str(exc_info.value)

    def test_expect_metadata_missing(self):
        """A missing metadata key raises MissingContextValueError."""
        context = PluginContext()
        with pytest.raises(MissingContextValueError) as exc_info:
            context.expect_metadata("moderation_score", float)
        assert str(exc_info.value) == "moderation_score not found in context"
        assert exc_info.value.key == "moderation_score"

    def test_expect_metadata_wrong_type(self):
        context = PluginContext()
        context.set("intent", "greeting")
        with pytest.raises(TypeMismatchError):
            context.expect_metadata("intent", int)

    def test_expect_metadata_present_none_is_mismatch(self):
        """A key explicitly set to None is present but of the wrong type."""
        context = PluginContext()
        context.set("value", None)
        with pytest.raises(TypeMismatchError):
            context.expect_metadata("value", str)
