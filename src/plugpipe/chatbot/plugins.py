"""
Chatbot Plugins

Keyword and regex based conversational plugins. The expected order is::

    IntentClassifierPlugin → EntityExtractorPlugin → ContextManagerPlugin
        → ResponseGeneratorPlugin → PersonalityFilterPlugin

The first three read a Message payload and publish their results in metadata
(``intent``, ``entities``, ``conversation_state``). ResponseGeneratorPlugin
replaces the payload with a Response, which PersonalityFilterPlugin then
rewrites.

Word lists, patterns and templates are plain data passed to the constructors;
the module-level defaults are never mutated.
"""

import re
from typing import Dict, List, Mapping, Optional, Pattern, Sequence

from plugpipe.core.config.models import PersonalityConfig
from plugpipe.core.pipeline import Plugin, PluginContext
from .models import ConversationState, Entity, Intent, Message, Response


DEFAULT_INTENT_KEYWORDS: Mapping[str, Sequence[str]] = {
    "greeting": ("hello", "hi", "hey", "good morning", "good afternoon", "good evening", "greetings"),
    "farewell": ("bye", "goodbye", "see you", "farewell", "take care", "later"),
    "question": ("what", "when", "where", "who", "why", "how", "can you", "could you", "would you", "?"),
    "command": ("do", "make", "create", "show", "tell", "give", "send", "help"),
}

DEFAULT_ENTITY_PATTERNS: Mapping[str, str] = {
    "date": r"\b(\d{1,2}[/-]\d{1,2}[/-]\d{2,4}|(?:jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]* "
            r"\d{1,2}(?:st|nd|rd|th)?(?:,? \d{4})?|today|tomorrow|yesterday)\b",
    "number": r"\b\d+(?:\.\d+)?\b",
    "email": r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Z|a-z]{2,}\b",
    "phone": r"\b(?:\+\d{1,3}[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}\b",
    "name": r"\b[A-Z][a-z]+ [A-Z][a-z]+\b",
}

DEFAULT_RESPONSE_TEMPLATES: Mapping[str, Sequence[str]] = {
    "greeting": (
        "Hello! How can I help you today?",
        "Hi there! What can I do for you?",
        "Hey! Nice to see you. What's on your mind?",
    ),
    "farewell": (
        "Goodbye! Have a great day!",
        "See you later! Take care!",
        "Bye! Feel free to come back anytime!",
    ),
    "question": (
        "That's a great question. Let me help you with that.",
        "I understand you're asking about something. Here's what I know.",
        "Good question! Let me provide you with some information.",
    ),
    "command": (
        "I'll help you with that right away.",
        "Sure, I can do that for you.",
        "Consider it done!",
    ),
    "unknown": (
        "I'm not sure I understand. Could you rephrase that?",
        "Hmm, I didn't quite get that. Can you tell me more?",
        "I'm still learning. Could you explain that differently?",
    ),
}

INTENT_EMOJIS: Mapping[str, str] = {
    "greeting": "👋",
    "farewell": "👋",
    "question": "🤔",
    "command": "✅",
}

CASUAL_REPLACEMENTS = (
    ("Hello!", "Hey!"),
    ("Goodbye!", "Bye!"),
    ("I will", "I'll"),
    ("I am", "I'm"),
)


def conversation_key(session_id: str) -> str:
    """State key under which a session's ConversationState is stored."""
    return f"conversation:{session_id}"


class IntentClassifierPlugin(Plugin):
    """
    Classifies the message intent by counting keyword occurrences.

    The intent with the most matching keywords wins; ties go to the intent
    listed first. Confidence is the share of that intent's keywords found in
    the text. A text with no keyword hits but a question mark is a question
    with confidence 0.5.
    """

    def __init__(self, keywords: Optional[Mapping[str, Sequence[str]]] = None):
        self.keywords: Dict[str, List[str]] = {
            intent: [k.lower() for k in words]
            for intent, words in (keywords or DEFAULT_INTENT_KEYWORDS).items()
        }

    def classify(self, text: str) -> Intent:
        text = text.lower()
        intent = Intent(type="unknown", confidence=0.0)

        max_matches = 0
        for intent_type, keywords in self.keywords.items():
            matches = sum(1 for keyword in keywords if keyword in text)
            if matches > max_matches:
                max_matches = matches
                intent = Intent(type=intent_type, confidence=min(matches / len(keywords), 1.0))

        if intent.type == "unknown" and "?" in text:
            intent = Intent(type="question", confidence=0.5)

        return intent

    def execute(self, context: PluginContext) -> None:
        message = context.expect_data(Message)
        intent = self.classify(message.text)
        self.logger.debug(f"Classified intent {intent.type} ({intent.confidence:.2f})")
        context.set("intent", intent)


class EntityExtractorPlugin(Plugin):
    """Extracts dates, numbers, emails, phone numbers and names with regexes.

    Patterns are compiled with ``re.ASCII``, so ``\\d`` and ``\\b`` only match ASCII digits
    and word boundaries.
    """

    def __init__(self, patterns: Optional[Mapping[str, str]] = None):
        self.patterns: Dict[str, Pattern] = {
            entity_type: re.compile(pattern, re.ASCII)
            for entity_type, pattern in (patterns or DEFAULT_ENTITY_PATTERNS).items()
        }

    def extract(self, text: str) -> List[Entity]:
        entities = []
        for entity_type, pattern in self.patterns.items():
            for match in pattern.finditer(text):
                entities.append(Entity(
                    type=entity_type,
                    value=match.group(0),
                    start=match.start(),
                    end=match.end(),
                ))
        return entities

    def execute(self, context: PluginContext) -> None:
        message = context.expect_data(Message)
        context.set("entities", self.extract(message.text))


class ContextManagerPlugin(Plugin):
    """
    Maintains per-session conversation history in the context state.

    The message is appended to the ``conversation:<session_id>`` state entry,
    trimmed to the last ``max_history_size`` messages, and tagged with the
    intent found earlier in the run. The updated state is also published in
    metadata as ``conversation_state`` for later plugins.
    """

    def __init__(self, max_history_size: int = 10):
        if max_history_size <= 0:
            max_history_size = 10
        self.max_history_size = max_history_size

    def execute(self, context: PluginContext) -> None:
        message = context.expect_data(Message)
        state_key = conversation_key(message.session_id)

        previous = context.get_state(state_key)
        if isinstance(previous, ConversationState):
            conversation = previous.model_copy(update={"history": list(previous.history)})
        else:
            conversation = ConversationState()

        conversation.history.append(message)
        if len(conversation.history) > self.max_history_size:
            conversation.history = conversation.history[-self.max_history_size:]

        intent = context.get("intent")
        if isinstance(intent, Intent):
            conversation.last_intent = intent

        context.set_state(state_key, conversation)
        context.set("conversation_state", conversation)


class ResponseGeneratorPlugin(Plugin):
    """
    Builds a Response from the intent, entities and conversation history.

    Uses the first template of the detected intent, mentions any extracted
    entities, and notes the message number once a conversation has more than
    one message. Replaces the payload with the Response.
    """

    def __init__(self, templates: Optional[Mapping[str, Sequence[str]]] = None):
        self.templates: Dict[str, List[str]] = {
            intent: list(options) for intent, options in (templates or DEFAULT_RESPONSE_TEMPLATES).items()
        }
        if not self.templates.get("unknown"):
            self.templates["unknown"] = list(DEFAULT_RESPONSE_TEMPLATES["unknown"])

    def execute(self, context: PluginContext) -> None:
        intent = context.get("intent")
        if not isinstance(intent, Intent):
            intent = Intent(type="unknown", confidence=0.0)

        entities = context.get("entities")
        if not isinstance(entities, list):
            entities = []

        templates = self.templates.get(intent.type) or self.templates["unknown"]
        text = templates[0]

        if entities:
            mentioned = ", ".join(f"{entity.value} ({entity.type})" for entity in entities)
            text += f" I noticed you mentioned: {mentioned}"

        conversation = context.get("conversation_state")
        if isinstance(conversation, ConversationState) and len(conversation.history) > 1:
            text += f" (This is message #{len(conversation.history)} in our conversation)"

        context.set_data(Response(text=text, intent=intent, entities=entities))


class PersonalityFilterPlugin(Plugin):
    """Applies tone and style transformations to the Response payload."""

    def __init__(self, config: Optional[PersonalityConfig] = None):
        self.config = config or PersonalityConfig()

    def apply(self, response: Response) -> str:
        config = self.config
        text = response.text

        if config.prefix:
            text = f"{config.prefix} {text}"

        if config.casual:
            for formal, casual in CASUAL_REPLACEMENTS:
                text = text.replace(formal, casual)

        if config.enthusiastic:
            text = text.replace(".", "!").replace("!!", "!")

        if config.emojis:
            emoji = INTENT_EMOJIS.get(response.intent.type)
            if emoji:
                text += f" {emoji}"

        if config.suffix:
            text = f"{text} {config.suffix}"

        return text

    def execute(self, context: PluginContext) -> None:
        response = context.expect_data(Response)
        context.set_data(response.model_copy(update={"text": self.apply(response)}))
