"""
Shared Test Configuration and Fixtures

Recording plugins, registries populated with the example plugins and
configuration helpers used across the test suite.
"""

import os
from typing import List

import pytest

from plugpipe.core.config import AppConfig
from plugpipe.core.pipeline import Plugin, PluginContext
from plugpipe.core.plugins import PluginRegistry
from plugpipe.chatbot import register_chatbot_plugins
from plugpipe.moderation import register_moderation_plugins


class RecordingPlugin(Plugin):
    """Appends its index to ``context.metadata['order']`` and optionally fails."""

    def __init__(self, index: int, fail: bool = False):
        self.index = index
        self.fail = fail

    def execute(self, context: PluginContext) -> None:
        context.metadata.setdefault("order", []).append(self.index)
        if self.fail:
            raise RuntimeError(f"failure in plugin {self.index}")


class CounterPlugin(Plugin):
    """Increments the integer payload."""

    def execute(self, context: PluginContext) -> None:
        context.set_data(context.get_data() + 1)


class FailingPlugin(Plugin):
    """Always raises the configured exception."""

    def __init__(self, error: Exception):
        self.error = error

    def execute(self, context: PluginContext) -> None:
        raise self.error


@pytest.fixture
def recording_plugins():
    """Factory for a list of recording plugins failing at the given indices."""
    def make(count: int, failing: tuple = ()) -> List[RecordingPlugin]:
        return [RecordingPlugin(i, fail=i in failing) for i in range(count)]
    return make


@pytest.fixture
def registry():
    """Empty plugin registry."""
    return PluginRegistry()


@pytest.fixture
def example_registry():
    """Registry holding every chatbot and moderation plugin."""
    registry = PluginRegistry()
    register_chatbot_plugins(registry)
    register_moderation_plugins(registry)
    return registry


@pytest.fixture
def app_config():
    """Default application configuration."""
    return AppConfig()


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every PLUGPIPE_ environment variable for the test."""
    for key in list(os.environ):
        if key.startswith("PLUGPIPE_"):
            monkeypatch.delenv(key)
    return monkeypatch


@pytest.fixture
def isolated_cwd(tmp_path, monkeypatch):
    """Run the test from an empty directory so no stray config file is found."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
    return tmp_path
