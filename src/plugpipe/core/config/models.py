"""
Configuration Models

Pydantic models for type-safe configuration of pipelines, the example chatbot
and moderation plugins and the HTTP servers.
"""

from typing import List, Optional
from pydantic import BaseModel, Field, field_validator, model_validator


DEFAULT_PROFANITY_WORDS = [
    "badword1", "badword2", "offensive", "inappropriate",
    "profanity", "vulgar", "obscene", "explicit",
]


class PipelineConfig(BaseModel):
    """Configuration for a pipeline assembled from registry names."""

    error_strategy: str = Field(
        default="abort",
        description="Error handling strategy: 'abort' stops at the first failure, "
                    "'continue' records failures in the context and carries on"
    )
    plugins: Optional[List[str]] = Field(
        default=None,
        description="Registered plugin names in execution order (None uses the default order)"
    )

    @field_validator('error_strategy')
    @classmethod
    def validate_error_strategy(cls, v):
        """Validate error strategy is supported."""
        normalized = v.strip().lower()
        aliases = {
            'abort': 'abort', 'abort_on_error': 'abort',
            'continue': 'continue', 'continue_on_error': 'continue',
        }
        if normalized not in aliases:
            raise ValueError(f"Unsupported error strategy: {v}. Supported: abort, continue")
        return aliases[normalized]


class PersonalityConfig(BaseModel):
    """Tone and style applied to chatbot responses."""

    name: str = Field(default="Friendly Bot", description="Display name of the bot")
    emojis: bool = Field(default=True, description="Append an emoji matching the intent")
    casual: bool = Field(default=True, description="Use contractions and casual greetings")
    enthusiastic: bool = Field(default=False, description="Turn full stops into exclamation marks")
    prefix: str = Field(default="", description="Text prepended to every response")
    suffix: str = Field(default="", description="Text appended to every response")


class ChatbotConfig(BaseModel):
    """Configuration for the chatbot plugins."""

    max_history_size: int = Field(
        default=10,
        ge=1,
        le=1000,
        description="Number of messages kept in a conversation's history"
    )
    personality: PersonalityConfig = Field(
        default_factory=PersonalityConfig,
        description="Personality filter settings"
    )
    pipeline: PipelineConfig = Field(
        default_factory=PipelineConfig,
        description="Chatbot pipeline composition"
    )


class ModerationConfig(BaseModel):
    """Configuration for the moderation plugins."""

    approve_threshold: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        description="Overall scores below this are approved"
    )
    review_threshold: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Overall scores below this (and above approve) go to review; the rest are rejected"
    )
    profanity_weight: float = Field(default=0.4, ge=0.0, le=1.0, description="Weight of the profanity score")
    spam_weight: float = Field(default=0.3, ge=0.0, le=1.0, description="Weight of the spam score")
    toxicity_weight: float = Field(default=0.3, ge=0.0, le=1.0, description="Weight of the toxicity score")
    profanity_words: List[str] = Field(
        default_factory=lambda: list(DEFAULT_PROFANITY_WORDS),
        description="Words counted by the profanity filter"
    )
    pipeline: PipelineConfig = Field(
        default_factory=PipelineConfig,
        description="Moderation pipeline composition"
    )

    @model_validator(mode='after')
    def validate_thresholds(self):
        """Ensure the approve threshold sits below the review threshold."""
        if self.approve_threshold >= self.review_threshold:
            raise ValueError(
                f"approve_threshold ({self.approve_threshold}) must be lower than "
                f"review_threshold ({self.review_threshold})"
            )
        return self


class ServerConfig(BaseModel):
    """Configuration for the HTTP servers."""

    host: str = Field(default="127.0.0.1", description="Host to bind to")
    chatbot_port: int = Field(default=8080, ge=1, le=65535, description="Chatbot server port")
    moderation_port: int = Field(default=8081, ge=1, le=65535, description="Moderation server port")


class AppConfig(BaseModel):
    """Root application configuration model."""

    version: str = Field(default="0.1.0", description="Configuration version")

    chatbot: ChatbotConfig = Field(default_factory=ChatbotConfig, description="Chatbot configuration")
    moderation: ModerationConfig = Field(default_factory=ModerationConfig, description="Moderation configuration")
    server: ServerConfig = Field(default_factory=ServerConfig, description="HTTP server configuration")

    log_level: str = Field(default="WARNING", description="Logging level")
    debug: bool = Field(default=False, description="Enable debug mode with detailed logging")

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        """Validate logging level name."""
        levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        if v.upper() not in levels:
            raise ValueError(f"Unsupported log level: {v}")
        return v.upper()

    def get_log_level(self) -> str:
        """Effective log level, forced to DEBUG in debug mode."""
        return "DEBUG" if self.debug else self.log_level
