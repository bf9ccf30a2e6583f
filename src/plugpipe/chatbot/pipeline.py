"""
Chatbot Pipeline Assembly

Registers the chatbot plugins under stable names and builds the chatbot
pipeline from configuration.
"""

from typing import List, Optional

from plugpipe.core.config.models import ChatbotConfig
from plugpipe.core.pipeline import ErrorStrategy, Pipeline
from plugpipe.core.plugins import PluginRegistry
from .plugins import (
    ContextManagerPlugin, EntityExtractorPlugin, IntentClassifierPlugin,
    PersonalityFilterPlugin, ResponseGeneratorPlugin,
)


DEFAULT_CHATBOT_PLUGINS: List[str] = [
    "intent_classifier",
    "entity_extractor",
    "context_manager",
    "response_generator",
    "personality_filter",
]


def register_chatbot_plugins(registry: PluginRegistry, config: Optional[ChatbotConfig] = None) -> None:
    """
    Register every chatbot plugin in ``registry``.

    Raises:
        DuplicatePluginError: If one of the names is already taken
    """
    config = config or ChatbotConfig()
    registry.register("intent_classifier", IntentClassifierPlugin())
    registry.register("entity_extractor", EntityExtractorPlugin())
    registry.register("context_manager", ContextManagerPlugin(config.max_history_size))
    registry.register("response_generator", ResponseGeneratorPlugin())
    registry.register("personality_filter", PersonalityFilterPlugin(config.personality))


def build_chatbot_pipeline(config: Optional[ChatbotConfig] = None,
                           registry: Optional[PluginRegistry] = None) -> Pipeline:
    """
    Build the chatbot pipeline described by ``config``.

    Plugins are resolved by name from ``registry``; when no registry is given
    a fresh one is populated from ``config``.

    Raises:
        PipelineBuildError: If the configured plugin list names an unknown plugin
    """
    config = config or ChatbotConfig()
    if registry is None:
        registry = PluginRegistry()
        register_chatbot_plugins(registry, config)

    names = config.pipeline.plugins or DEFAULT_CHATBOT_PLUGINS
    return registry.build_pipeline(names, ErrorStrategy.parse(config.pipeline.error_strategy))
