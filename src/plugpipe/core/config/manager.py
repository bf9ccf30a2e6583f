"""
Configuration Manager

Builds an AppConfig from layered sources. Later layers win:

    defaults < config file (YAML or JSON) < PLUGPIPE_* environment < CLI options
"""

import copy
import json
import os
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Tuple, Union

import yaml
from pydantic import ValidationError

from plugpipe.core.config.models import AppConfig
from plugpipe.core.exceptions import ConfigurationError, ErrorCode


SettingPath = Tuple[str, ...]


def parse_flag(value: Union[str, bool]) -> bool:
    """Interpret an environment string such as ``yes`` or ``0`` as a boolean."""
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {'true', '1', 'yes', 'on', 'enabled'}


def parse_names(value: Union[str, List[str]]) -> List[str]:
    """Split a comma separated string into a list of non-empty names."""
    if isinstance(value, list):
        return value
    return [part.strip() for part in str(value).split(',') if part.strip()]


# Environment variable suffix -> (setting path, parser)
ENV_SETTINGS: Dict[str, Tuple[SettingPath, Callable[[str], Any]]] = {
    "MAX_HISTORY_SIZE": (("chatbot", "max_history_size"), int),
    "CHATBOT_ERROR_STRATEGY": (("chatbot", "pipeline", "error_strategy"), str),
    "CHATBOT_PLUGINS": (("chatbot", "pipeline", "plugins"), parse_names),
    "PERSONALITY_EMOJIS": (("chatbot", "personality", "emojis"), parse_flag),
    "PERSONALITY_CASUAL": (("chatbot", "personality", "casual"), parse_flag),
    "APPROVE_THRESHOLD": (("moderation", "approve_threshold"), float),
    "REVIEW_THRESHOLD": (("moderation", "review_threshold"), float),
    "MODERATION_ERROR_STRATEGY": (("moderation", "pipeline", "error_strategy"), str),
    "MODERATION_PLUGINS": (("moderation", "pipeline", "plugins"), parse_names),
    "PROFANITY_WORDS": (("moderation", "profanity_words"), parse_names),
    "HOST": (("server", "host"), str),
    "CHATBOT_PORT": (("server", "chatbot_port"), int),
    "MODERATION_PORT": (("server", "moderation_port"), int),
    "LOG_LEVEL": (("log_level",), str),
    "DEBUG": (("debug",), parse_flag),
}

# CLI option name -> setting path
CLI_SETTINGS: Dict[str, SettingPath] = {
    "debug": ("debug",),
    "log_level": ("log_level",),
    "history": ("chatbot", "max_history_size"),
    "chatbot_strategy": ("chatbot", "pipeline", "error_strategy"),
    "emojis": ("chatbot", "personality", "emojis"),
    "casual": ("chatbot", "personality", "casual"),
    "enthusiastic": ("chatbot", "personality", "enthusiastic"),
    "moderation_strategy": ("moderation", "pipeline", "error_strategy"),
    "approve_threshold": ("moderation", "approve_threshold"),
    "review_threshold": ("moderation", "review_threshold"),
    "host": ("server", "host"),
    "chatbot_port": ("server", "chatbot_port"),
    "moderation_port": ("server", "moderation_port"),
}

# Example profiles written by create_example_config, as overrides of the defaults
PROFILES: Dict[str, Dict[str, Any]] = {
    "default": {},
    "lenient": {
        "chatbot": {
            "personality": {"enthusiastic": True},
            "pipeline": {"error_strategy": "continue"},
        },
        "moderation": {"pipeline": {"error_strategy": "continue"}},
    },
    "strict": {
        "moderation": {"approve_threshold": 0.1, "review_threshold": 0.4},
        "log_level": "INFO",
    },
}


def merge_settings(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """Recursively overlay ``override`` on a copy of ``base``; nested sections merge key by key."""
    merged = copy.deepcopy(dict(base))
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            merged[key] = merge_settings(current, value)
        else:
            merged[key] = value
    return merged


def _assign(target: Dict[str, Any], path: SettingPath, value: Any) -> None:
    *sections, leaf = path
    for section in sections:
        target = target.setdefault(section, {})
    target[leaf] = value


class ConfigManager:
    """
    Loads and validates the application configuration.

    An explicit ``config_file`` must exist. Without one, the first existing
    file on the search path is used (``./plugpipe.yaml``, ``./plugpipe.yml``,
    ``./.plugpipe.yaml``, ``~/.config/plugpipe/config.yaml`` and
    ``$XDG_CONFIG_HOME/plugpipe/config.yaml``); no file at all is fine.
    """

    def __init__(self, config_file: Optional[Union[str, Path]] = None):
        self.config_file = Path(config_file) if config_file else None
        self._config: Optional[AppConfig] = None

    @staticmethod
    def search_paths() -> Iterator[Path]:
        cwd = Path.cwd()
        yield cwd / "plugpipe.yaml"
        yield cwd / "plugpipe.yml"
        yield cwd / ".plugpipe.yaml"
        yield Path.home() / ".config" / "plugpipe" / "config.yaml"
        xdg_home = os.environ.get('XDG_CONFIG_HOME')
        if xdg_home:
            yield Path(xdg_home) / "plugpipe" / "config.yaml"

    def load_config(
        self,
        cli_args: Optional[Dict[str, Any]] = None,
        env_prefix: str = "PLUGPIPE_"
    ) -> AppConfig:
        """
        Merge every source and validate the result.

        Args:
            cli_args: Option values from the command line; ``None`` values are
                treated as "not given"
            env_prefix: Prefix of the environment variables to read

        Returns:
            The validated configuration, also kept in ``self.config``

        Raises:
            ConfigurationError: If a source cannot be read or the merged
                settings fail validation
        """
        settings = self._read_file_settings()
        settings = merge_settings(settings, self._read_env_settings(env_prefix))
        settings = merge_settings(settings, self._read_cli_settings(cli_args or {}))

        try:
            self._config = AppConfig.model_validate(settings)
        except ValidationError as e:
            raise ConfigurationError(
                f"Configuration validation failed: {e}",
                error_code=ErrorCode.CONFIG_SCHEMA_VALIDATION,
                cause=e
            )
        return self._config

    def _resolve_file(self) -> Optional[Path]:
        if self.config_file is not None:
            if not self.config_file.exists():
                raise ConfigurationError(
                    f"Configuration file not found: {self.config_file}",
                    error_code=ErrorCode.CONFIG_FILE_NOT_FOUND,
                    config_key="config_file",
                    config_value=str(self.config_file)
                )
            return self.config_file
        return next((path for path in self.search_paths() if path.is_file()), None)

    def _read_file_settings(self) -> Dict[str, Any]:
        path = self._resolve_file()
        if path is None:
            return {}

        try:
            text = path.read_text(encoding='utf-8')
            data = json.loads(text) if path.suffix.lower() == '.json' else yaml.safe_load(text)
        except (OSError, UnicodeDecodeError, yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigurationError(
                f"Failed to load config file {path}: {e}",
                error_code=ErrorCode.CONFIG_INVALID_FORMAT,
                cause=e
            )

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Config file {path} must contain a mapping at the top level",
                error_code=ErrorCode.CONFIG_INVALID_FORMAT
            )
        return data

    def _read_env_settings(self, prefix: str) -> Dict[str, Any]:
        settings: Dict[str, Any] = {}
        for suffix, (path, parser) in ENV_SETTINGS.items():
            name = prefix + suffix
            raw = os.environ.get(name)
            if raw is None:
                continue
            try:
                _assign(settings, path, parser(raw))
            except (ValueError, TypeError) as e:
                raise ConfigurationError(
                    f"Invalid value for {name}: {raw} ({e})",
                    config_key=name,
                    config_value=raw
                )
        return settings

    def _read_cli_settings(self, cli_args: Dict[str, Any]) -> Dict[str, Any]:
        settings: Dict[str, Any] = {}
        for option, value in cli_args.items():
            path = CLI_SETTINGS.get(option)
            if path is not None and value is not None:
                _assign(settings, path, value)
        return settings

    def generate_schema(self, output_file: Optional[Path] = None) -> Dict[str, Any]:
        """Return the JSON schema of AppConfig, writing it to ``output_file`` when given."""
        schema = AppConfig.model_json_schema()
        if output_file:
            Path(output_file).write_text(json.dumps(schema, indent=2), encoding='utf-8')
        return schema

    def create_example_config(self, output_file: Path, profile: str = "default") -> None:
        """
        Write a complete YAML configuration for one of the example profiles.

        ``default`` is the stock configuration, ``lenient`` runs both pipelines
        with continue-on-error and ``strict`` lowers the moderation thresholds.

        Raises:
            ConfigurationError: If the profile is unknown
        """
        if profile not in PROFILES:
            raise ConfigurationError(
                f"Unknown configuration profile: {profile}",
                config_key="profile",
                config_value=profile
            )

        config = AppConfig.model_validate(merge_settings(AppConfig().model_dump(), PROFILES[profile]))
        with open(output_file, 'w', encoding='utf-8') as f:
            yaml.safe_dump(config.model_dump(mode='json'), f, default_flow_style=False, indent=2, sort_keys=False)

    @property
    def config(self) -> Optional[AppConfig]:
        """The configuration from the last successful load, if any."""
        return self._config
