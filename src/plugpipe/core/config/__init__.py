"""
Configuration Management Package

Provides Pydantic-based configuration models and management for plugpipe.
"""

from plugpipe.core.config.models import (
    AppConfig, ChatbotConfig, ModerationConfig, PersonalityConfig, PipelineConfig, ServerConfig
)
from plugpipe.core.config.manager import ConfigManager

__all__ = [
    "AppConfig",
    "ChatbotConfig",
    "ModerationConfig",
    "PersonalityConfig",
    "PipelineConfig",
    "ServerConfig",
    "ConfigManager",
]
