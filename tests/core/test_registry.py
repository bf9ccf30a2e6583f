"""
Tests for PluginRegistry

Registration, lookup, pipeline construction from names and concurrent access.
"""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from conftest import CounterPlugin, RecordingPlugin
from plugpipe.core.exceptions import (
    DuplicatePluginError, ErrorCode, PipelineBuildError, PluginNotFoundError, RegistryError,
)
from plugpipe.core.pipeline import ErrorStrategy, PluginContext


class TestRegistration:
    """Test register and get."""

    def test_register_and_get(self, registry):
        """get returns the very instance that was registered."""
        counter = CounterPlugin()
        registry.register("counter", counter)
        assert registry.get("counter") is counter
        assert "counter" in registry
        assert len(registry) == 1

    def test_duplicate_name_rejected(self, registry):
        """A second registration under the same name fails and keeps the first."""
        first = CounterPlugin()
        registry.register("counter", first)

        with pytest.raises(DuplicatePluginError) as exc_info:
            registry.register("counter", CounterPlugin())

        assert isinstance(exc_info.value, RegistryError)
        assert exc_info.value.error_code == ErrorCode.REGISTRY_DUPLICATE_NAME
        assert "counter" in str(exc_info.value)
        assert registry.get("counter") is first

    def test_same_instance_under_two_names(self, registry):
        counter = CounterPlugin()
        registry.register("one", counter)
        registry.register("two", counter)
        assert registry.get("one") is registry.get("two")

    def test_get_unknown_name(self, registry):
        with pytest.raises(PluginNotFoundError) as exc_info:
            registry.get("missing")
        assert str(exc_info.value) == "plugin 'missing' not found in registry"
        assert exc_info.value.suggestions[0].command == "plugpipe plugins"

    def test_names_are_sorted(self, registry):
        registry.register("b", CounterPlugin())
        registry.register("a", CounterPlugin())
        assert registry.names() == ["a", "b"]


class TestBuildPipeline:
    """Test building pipelines from plugin names."""

    def test_build_preserves_order(self, registry):
        """Plugins run in the order of the name list."""
        for i in range(3):
            registry.register(f"step{i}", RecordingPlugin(i))

        pipeline = registry.build_pipeline(["step2", "step0", "step1"])
        context = PluginContext()
        pipeline.execute(context)

        assert context.get("order") == [2, 0, 1]
        assert pipeline.strategy is ErrorStrategy.ABORT_ON_ERROR

    def test_build_with_strategy(self, registry):
        registry.register("counter", CounterPlugin())
        pipeline = registry.build_pipeline(["counter"], ErrorStrategy.CONTINUE_ON_ERROR)
        assert pipeline.strategy is ErrorStrategy.CONTINUE_ON_ERROR

    def test_build_accepts_strategy_name(self, registry):
        pipeline = registry.build_pipeline([], "continue")
        assert pipeline.strategy is ErrorStrategy.CONTINUE_ON_ERROR

    def test_build_with_repeated_name(self, registry):
        registry.register("counter", CounterPlugin())
        pipeline = registry.build_pipeline(["counter", "counter", "counter"])
        context = PluginContext(0)
        pipeline.execute(context)
        assert context.get_data() == 3

    def test_build_empty_list(self, registry):
        assert len(registry.build_pipeline([])) == 0

    def test_build_fails_on_unknown_name(self, registry):
        """The error names the missing plugin and the step it was requested at."""
        registry.register("counter", CounterPlugin())

        with pytest.raises(PipelineBuildError) as exc_info:
            registry.build_pipeline(["counter", "missing", "counter"])

        error = exc_info.value
        assert "missing" in str(error)
        assert str(error).startswith("failed to build pipeline at step 1:")
        assert error.step == 1
        assert error.plugin_name == "missing"
        assert isinstance(error.cause, PluginNotFoundError)
        assert isinstance(error.__cause__, PluginNotFoundError)


class TestConcurrentAccess:
    """Test the registry under concurrent use."""

    def test_concurrent_lookups(self, example_registry):
        """Many threads can look up plugins at once."""
        names = example_registry.names()

        def lookup(i):
            return example_registry.get(names[i % len(names)])

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lookup, range(200)))

        assert len(results) == 200
        assert all(result is not None for result in results)

    def test_concurrent_registration(self, registry):
        """Each distinct name registered from many threads ends up in the registry once."""
        barrier = threading.Barrier(10)

        def register(i):
            barrier.wait()
            registry.register(f"plugin{i}", CounterPlugin())

        threads = [threading.Thread(target=register, args=(i,)) for i in range(10)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(registry) == 10

    def test_concurrent_duplicate_registration(self, registry):
        """Exactly one of several racing registrations of a name succeeds."""
        barrier = threading.Barrier(8)
        failures = []

        def register():
            barrier.wait()
            try:
                registry.register("shared", CounterPlugin())
            except DuplicatePluginError as e:
                failures.append(e)

        threads = [threading.Thread(target=register) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(failures) == 7
        assert len(registry) == 1
