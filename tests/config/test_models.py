"""
Tests for Configuration Models

Defaults and validation rules of the Pydantic configuration models.
"""

import pytest
from pydantic import ValidationError

from plugpipe.core.config import (
    AppConfig, ChatbotConfig, ModerationConfig, PersonalityConfig, PipelineConfig, ServerConfig,
)


class TestPipelineConfig:
    """Test pipeline composition settings."""

    def test_defaults(self):
        config = PipelineConfig()
        assert config.error_strategy == "abort"
        assert config.plugins is None

    @pytest.mark.parametrize("value,expected", [
        ("abort", "abort"),
        ("CONTINUE", "continue"),
        ("abort_on_error", "abort"),
        (" continue_on_error ", "continue"),
    ])
    def test_error_strategy_normalized(self, value, expected):
        assert PipelineConfig(error_strategy=value).error_strategy == expected

    def test_invalid_error_strategy(self):
        with pytest.raises(ValidationError) as exc_info:
            PipelineConfig(error_strategy="retry")
        assert "Unsupported error strategy" in str(exc_info.value)


class TestChatbotConfig:
    """Test chatbot settings."""

    def test_defaults(self):
        config = ChatbotConfig()
        assert config.max_history_size == 10
        assert config.personality == PersonalityConfig()
        assert config.personality.name == "Friendly Bot"
        assert config.personality.emojis is True
        assert config.personality.casual is True
        assert config.personality.enthusiastic is False

    @pytest.mark.parametrize("size", [0, -1, 1001])
    def test_history_size_bounds(self, size):
        with pytest.raises(ValidationError):
            ChatbotConfig(max_history_size=size)


class TestModerationConfig:
    """Test moderation settings."""

    def test_defaults(self):
        config = ModerationConfig()
        assert config.approve_threshold == 0.3
        assert config.review_threshold == 0.7
        assert (config.profanity_weight, config.spam_weight, config.toxicity_weight) == (0.4, 0.3, 0.3)
        assert "offensive" in config.profanity_words

    def test_profanity_words_not_shared(self):
        """Each config gets its own copy of the default word list."""
        first = ModerationConfig()
        first.profanity_words.append("extra")
        assert "extra" not in ModerationConfig().profanity_words

    def test_thresholds_must_be_ordered(self):
        with pytest.raises(ValidationError) as exc_info:
            ModerationConfig(approve_threshold=0.8, review_threshold=0.5)
        assert "must be lower than" in str(exc_info.value)

    def test_threshold_range(self):
        with pytest.raises(ValidationError):
            ModerationConfig(review_threshold=1.5)


class TestServerConfig:
    def test_defaults(self):
        config = ServerConfig()
        assert config.host == "127.0.0.1"
        assert config.chatbot_port == 8080
        assert config.moderation_port == 8081

    def test_port_range(self):
        with pytest.raises(ValidationError):
            ServerConfig(chatbot_port=70000)


class TestAppConfig:
    """Test the root configuration."""

    def test_defaults(self):
        config = AppConfig()
        assert config.log_level == "WARNING"
        assert config.debug is False
        assert config.get_log_level() == "WARNING"

    def test_log_level_uppercased(self):
        assert AppConfig(log_level="info").log_level == "INFO"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            AppConfig(log_level="LOUD")

    def test_debug_forces_debug_level(self):
        assert AppConfig(log_level="ERROR", debug=True).get_log_level() == "DEBUG"

    def test_nested_dicts(self):
        config = AppConfig(**{
            "chatbot": {"personality": {"name": "Robo"}, "pipeline": {"error_strategy": "continue"}},
            "moderation": {"approve_threshold": 0.2},
        })
        assert config.chatbot.personality.name == "Robo"
        assert config.chatbot.pipeline.error_strategy == "continue"
        assert config.moderation.approve_threshold == 0.2
