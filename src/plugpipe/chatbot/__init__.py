"""
Example Chatbot

Intent classification, entity extraction, conversation tracking, response
generation and personality styling expressed as pipeline plugins.
"""

from .models import ConversationState, Entity, Intent, Message, Response
from .plugins import (
    ContextManagerPlugin, EntityExtractorPlugin, IntentClassifierPlugin,
    PersonalityFilterPlugin, ResponseGeneratorPlugin, conversation_key,
)
from .pipeline import DEFAULT_CHATBOT_PLUGINS, build_chatbot_pipeline, register_chatbot_plugins

__all__ = [
    'ConversationState',
    'Entity',
    'Intent',
    'Message',
    'Response',
    'ContextManagerPlugin',
    'EntityExtractorPlugin',
    'IntentClassifierPlugin',
    'PersonalityFilterPlugin',
    'ResponseGeneratorPlugin',
    'conversation_key',
    'DEFAULT_CHATBOT_PLUGINS',
    'build_chatbot_pipeline',
    'register_chatbot_plugins',
]
