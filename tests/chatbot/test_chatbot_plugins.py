"""
Tests for the Chatbot Plugins

Intent classification, entity extraction, conversation tracking, response
generation, personality styling and the assembled chatbot pipeline.
"""

import pytest

from plugpipe.chatbot import (
    ContextManagerPlugin, ConversationState, Entity, EntityExtractorPlugin, Intent,
    IntentClassifierPlugin, Message, PersonalityFilterPlugin, Response, ResponseGeneratorPlugin,
    DEFAULT_CHATBOT_PLUGINS, build_chatbot_pipeline, conversation_key, register_chatbot_plugins,
)
from plugpipe.core.config import ChatbotConfig, PersonalityConfig
from plugpipe.core.exceptions import (
    DuplicatePluginError, PipelineBuildError, PipelineStageError, TypeMismatchError,
)
from plugpipe.core.pipeline import ErrorStrategy, PluginContext
from plugpipe.core.plugins import PluginRegistry


class TestIntentClassifier:
    """Test keyword based intent classification."""

    def setup_method(self):
        self.classifier = IntentClassifierPlugin()

    def test_greeting(self):
        intent = self.classifier.classify("Hello there!")
        assert intent.type == "greeting"
        assert intent.confidence == pytest.approx(1 / 7)

    def test_question_beats_command(self):
        """The intent with the most keyword hits wins."""
        intent = self.classifier.classify("Can you help me?")
        assert intent.type == "question"
        assert intent.confidence == pytest.approx(0.2)

    def test_farewell(self):
        assert self.classifier.classify("bye").type == "farewell"

    def test_unknown(self):
        intent = self.classifier.classify("xyz")
        assert intent == Intent(type="unknown", confidence=0.0)

    def test_question_mark_fallback(self):
        """With no keyword hit, a question mark still marks a question."""
        classifier = IntentClassifierPlugin({"greeting": ["hello"]})
        assert classifier.classify("really?") == Intent(type="question", confidence=0.5)

    def test_ties_go_to_first_intent(self):
        classifier = IntentClassifierPlugin({"alpha": ["x"], "beta": ["y"]})
        assert classifier.classify("x y").type == "alpha"

    def test_execute_sets_metadata(self):
        context = PluginContext(Message(text="hello"))
        self.classifier.execute(context)
        assert context.get("intent").type == "greeting"

    def test_requires_message_payload(self):
        with pytest.raises(TypeMismatchError):
            self.classifier.execute(PluginContext("hello"))


class TestEntityExtractor:
    """Test regex based entity extraction."""

    def setup_method(self):
        self.extractor = EntityExtractorPlugin()

    def test_number(self):
        entities = self.extractor.extract("I have 42 apples")
        assert entities == [Entity(type="number", value="42", start=7, end=9)]

    def test_email(self):
        entities = self.extractor.extract("Mail john@example.com")
        assert any(e.type == "email" and e.value == "john@example.com" for e in entities)

    def test_date_and_name(self):
        entities = self.extractor.extract("I met John Smith today")
        assert [(e.type, e.value) for e in entities] == [("date", "today"), ("name", "John Smith")]

    def test_non_ascii_digits_ignored(self):
        """Digit classes match ASCII digits only."""
        assert self.extractor.extract("I have \u0664\u0662 apples") == []

    def test_no_entities(self):
        assert self.extractor.extract("nothing here") == []

    def test_custom_patterns(self):
        extractor = EntityExtractorPlugin({"hashtag": r"#\w+"})
        entities = extractor.extract("loving #python")
        assert [(e.type, e.value) for e in entities] == [("hashtag", "#python")]

    def test_execute_sets_metadata(self):
        context = PluginContext(Message(text="call 911"))
        self.extractor.execute(context)
        assert [e.value for e in context.get("entities")] == ["911"]


class TestContextManager:
    """Test conversation history tracking."""

    def test_first_message_starts_history(self):
        context = PluginContext(Message(text="hi", session_id="s1"))
        context.set("intent", Intent(type="greeting", confidence=0.5))

        ContextManagerPlugin().execute(context)

        conversation = context.get_state(conversation_key("s1"))
        assert [m.text for m in conversation.history] == ["hi"]
        assert conversation.last_intent.type == "greeting"
        assert context.get("conversation_state") is conversation

    def test_history_carried_in_state(self):
        """State from an earlier run is extended, not replaced."""
        plugin = ContextManagerPlugin()
        state = {}
        for text in ("one", "two", "three"):
            plugin.execute(PluginContext(Message(text=text, session_id="s1"), state=state))

        conversation = state[conversation_key("s1")]
        assert [m.text for m in conversation.history] == ["one", "two", "three"]

    def test_history_trimmed(self):
        plugin = ContextManagerPlugin(max_history_size=2)
        state = {}
        for text in ("one", "two", "three"):
            plugin.execute(PluginContext(Message(text=text, session_id="s1"), state=state))

        assert [m.text for m in state[conversation_key("s1")].history] == ["two", "three"]

    def test_previous_state_not_mutated(self):
        previous = ConversationState(history=[Message(text="old", session_id="s1")])
        context = PluginContext(Message(text="new", session_id="s1"))
        context.set_state(conversation_key("s1"), previous)

        ContextManagerPlugin().execute(context)

        assert [m.text for m in previous.history] == ["old"]
        assert len(context.get_state(conversation_key("s1")).history) == 2

    def test_sessions_are_separate(self):
        plugin = ContextManagerPlugin()
        state = {}
        plugin.execute(PluginContext(Message(text="a", session_id="s1"), state=state))
        plugin.execute(PluginContext(Message(text="b", session_id="s2"), state=state))
        assert len(state[conversation_key("s1")].history) == 1
        assert len(state[conversation_key("s2")].history) == 1

    def test_non_positive_size_uses_default(self):
        assert ContextManagerPlugin(max_history_size=0).max_history_size == 10


class TestResponseGenerator:
    """Test response construction."""

    def setup_method(self):
        self.generator = ResponseGeneratorPlugin()

    def _run(self, intent=None, entities=None, conversation=None):
        context = PluginContext(Message(text="ignored"))
        if intent is not None:
            context.set("intent", intent)
        if entities is not None:
            context.set("entities", entities)
        if conversation is not None:
            context.set("conversation_state", conversation)
        self.generator.execute(context)
        return context.get_data()

    def test_greeting_template(self):
        response = self._run(intent=Intent(type="greeting", confidence=1.0))
        assert isinstance(response, Response)
        assert response.text == "Hello! How can I help you today?"

    def test_missing_intent_is_unknown(self):
        response = self._run()
        assert response.intent.type == "unknown"
        assert response.text == "I'm not sure I understand. Could you rephrase that?"

    def test_mentions_entities(self):
        response = self._run(
            intent=Intent(type="command", confidence=0.1),
            entities=[Entity(type="number", value="42", start=0, end=2)],
        )
        assert response.text == "I'll help you with that right away. I noticed you mentioned: 42 (number)"
        assert len(response.entities) == 1

    def test_counts_messages(self):
        conversation = ConversationState(history=[Message(text="a"), Message(text="b")])
        response = self._run(intent=Intent(type="greeting", confidence=1.0), conversation=conversation)
        assert response.text.endswith("(This is message #2 in our conversation)")


class TestPersonalityFilter:
    """Test personality styling."""

    def _response(self, text, intent_type="greeting"):
        return Response(text=text, intent=Intent(type=intent_type, confidence=1.0))

    def test_default_is_casual_with_emoji(self):
        plugin = PersonalityFilterPlugin()
        assert plugin.apply(self._response("Hello! I am here.")) == "Hey! I'm here. 👋"

    def test_enthusiastic(self):
        plugin = PersonalityFilterPlugin(PersonalityConfig(emojis=False, casual=False, enthusiastic=True))
        assert plugin.apply(self._response("Sure. Done.")) == "Sure! Done!"

    def test_prefix_and_suffix(self):
        plugin = PersonalityFilterPlugin(PersonalityConfig(emojis=False, prefix="[bot]", suffix="~"))
        assert plugin.apply(self._response("Hi")) == "[bot] Hi ~"

    def test_unknown_intent_has_no_emoji(self):
        plugin = PersonalityFilterPlugin()
        assert plugin.apply(self._response("Hmm", intent_type="unknown")) == "Hmm"

    def test_execute_replaces_response(self):
        original = self._response("Hello!")
        context = PluginContext(original)
        PersonalityFilterPlugin().execute(context)
        assert context.get_data().text == "Hey! 👋"
        assert original.text == "Hello!"


@pytest.mark.integration
class TestChatbotPipeline:
    """Test the assembled chatbot pipeline."""

    def test_greeting_round_trip(self):
        context = PluginContext(Message(text="Hello there!"))
        build_chatbot_pipeline().execute(context)

        response = context.get_data()
        assert response.text == "Hey! How can I help you today? 👋"
        assert response.intent.type == "greeting"

    def test_conversation_across_runs(self):
        """A state dict reused across contexts keeps the conversation going."""
        pipeline = build_chatbot_pipeline()
        state = {}
        for text in ("Hello!", "Can you help me?"):
            context = PluginContext(Message(text=text, session_id="abc"), state=state)
            pipeline.execute(context)

        assert "(This is message #2 in our conversation)" in context.get_data().text
        assert len(state[conversation_key("abc")].history) == 2

    def test_wrong_payload_aborts_at_first_plugin(self):
        with pytest.raises(PipelineStageError) as exc_info:
            build_chatbot_pipeline().execute(PluginContext("plain text"))
        assert exc_info.value.plugin_index == 0
        assert isinstance(exc_info.value.unwrap(), TypeMismatchError)

    def test_continue_strategy_collects_errors(self):
        config = ChatbotConfig(pipeline={"error_strategy": "continue"})
        context = PluginContext("plain text")
        build_chatbot_pipeline(config).execute(context)
        # Plugins reading a Message fail; response generation falls back to the unknown intent.
        assert [e.plugin_index for e in context.errors] == [0, 1, 2]
        assert isinstance(context.get_data(), Response)

    def test_custom_plugin_order(self):
        config = ChatbotConfig(pipeline={"plugins": ["intent_classifier", "response_generator"]})
        pipeline = build_chatbot_pipeline(config)
        context = PluginContext(Message(text="bye"))
        pipeline.execute(context)
        assert context.get_data().text == "Goodbye! Have a great day!"

    def test_unknown_plugin_name(self):
        config = ChatbotConfig(pipeline={"plugins": ["intent_classifier", "missing"]})
        with pytest.raises(PipelineBuildError) as exc_info:
            build_chatbot_pipeline(config)
        assert "missing" in str(exc_info.value)

    def test_shared_registry(self):
        registry = PluginRegistry()
        register_chatbot_plugins(registry)
        assert registry.names() == sorted(DEFAULT_CHATBOT_PLUGINS)
        pipeline = build_chatbot_pipeline(registry=registry)
        assert pipeline.strategy is ErrorStrategy.ABORT_ON_ERROR
        assert len(pipeline) == 5

    def test_register_twice(self):
        registry = PluginRegistry()
        register_chatbot_plugins(registry)
        with pytest.raises(DuplicatePluginError):
            register_chatbot_plugins(registry)
