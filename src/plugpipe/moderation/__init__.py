"""
Example Content Moderation

Profanity, spam and sentiment checks, weighted scoring and threshold based
decisions expressed as pipeline plugins.
"""

from .models import (
    APPROVE_THRESHOLD, REVIEW_THRESHOLD,
    Content, ModerationDecision, ModerationResult, ModerationScore,
)
from .plugins import (
    ActionHandlerPlugin, DecisionRouterPlugin, ProfanityFilterPlugin,
    ScoringPlugin, SentimentAnalyzerPlugin, SpamDetectorPlugin,
)
from .pipeline import DEFAULT_MODERATION_PLUGINS, build_moderation_pipeline, register_moderation_plugins

__all__ = [
    'APPROVE_THRESHOLD',
    'REVIEW_THRESHOLD',
    'Content',
    'ModerationDecision',
    'ModerationResult',
    'ModerationScore',
    'ActionHandlerPlugin',
    'DecisionRouterPlugin',
    'ProfanityFilterPlugin',
    'ScoringPlugin',
    'SentimentAnalyzerPlugin',
    'SpamDetectorPlugin',
    'DEFAULT_MODERATION_PLUGINS',
    'build_moderation_pipeline',
    'register_moderation_plugins',
]
