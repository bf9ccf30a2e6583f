"""
Moderation Pipeline Assembly

Registers the moderation plugins under stable names and builds the
moderation pipeline from configuration.
"""

from typing import List, Optional

from plugpipe.core.config.models import ModerationConfig
from plugpipe.core.pipeline import ErrorStrategy, Pipeline
from plugpipe.core.plugins import PluginRegistry
from .plugins import (
    ActionHandlerPlugin, DecisionRouterPlugin, ProfanityFilterPlugin,
    ScoringPlugin, SentimentAnalyzerPlugin, SpamDetectorPlugin,
)


DEFAULT_MODERATION_PLUGINS: List[str] = [
    "profanity_filter",
    "spam_detector",
    "sentiment_analyzer",
    "scoring",
    "decision_router",
    "action_handler",
]


def register_moderation_plugins(registry: PluginRegistry, config: Optional[ModerationConfig] = None) -> None:
    """
    Register every moderation plugin in ``registry``.

    Raises:
        DuplicatePluginError: If one of the names is already taken
    """
    config = config or ModerationConfig()
    registry.register("profanity_filter", ProfanityFilterPlugin(config.profanity_words))
    registry.register("spam_detector", SpamDetectorPlugin())
    registry.register("sentiment_analyzer", SentimentAnalyzerPlugin())
    registry.register("scoring", ScoringPlugin(
        profanity_weight=config.profanity_weight,
        spam_weight=config.spam_weight,
        toxicity_weight=config.toxicity_weight,
    ))
    registry.register("decision_router", DecisionRouterPlugin(
        approve_threshold=config.approve_threshold,
        review_threshold=config.review_threshold,
    ))
    registry.register("action_handler", ActionHandlerPlugin())


def build_moderation_pipeline(config: Optional[ModerationConfig] = None,
                              registry: Optional[PluginRegistry] = None) -> Pipeline:
    """
    Build the moderation pipeline described by ``config``.

    Raises:
        PipelineBuildError: If the configured plugin list names an unknown plugin
    """
    config = config or ModerationConfig()
    if registry is None:
        registry = PluginRegistry()
        register_moderation_plugins(registry, config)

    names = config.pipeline.plugins or DEFAULT_MODERATION_PLUGINS
    return registry.build_pipeline(names, ErrorStrategy.parse(config.pipeline.error_strategy))
