"""
Pipeline Executor

Runs an ordered sequence of plugins against a single context under one error
handling strategy. Execution is synchronous: plugins run one after another on
the caller's thread.
"""

import logging
from enum import Enum
from typing import Iterator, List, Optional, Tuple, Union

from plugpipe.core.exceptions import ConfigurationError, ErrorCode, PipelineStageError
from .interfaces import Plugin, PluginContext


class ErrorStrategy(Enum):
    """How a pipeline reacts to a failing plugin."""

    ABORT_ON_ERROR = "abort"  # stop at the first failure and raise it
    CONTINUE_ON_ERROR = "continue"  # record the failure in the context and go on

    @classmethod
    def parse(cls, value: Union["ErrorStrategy", str]) -> "ErrorStrategy":
        """
        Resolve a strategy from an enum member or its configured name.

        Accepts ``"abort"``/``"continue"`` as well as the member names, case
        insensitively.

        Raises:
            ConfigurationError: If the name is unknown
        """
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        for strategy in cls:
            if normalized in (strategy.value, strategy.name.lower()):
                return strategy
        raise ConfigurationError(
            f"Unknown error strategy: {value!r} (expected 'abort' or 'continue')",
            error_code=ErrorCode.CONFIG_INVALID_VALUE,
            config_key="error_strategy",
            config_value=value
        )


class Pipeline:
    """
    Ordered composition of plugins with a fixed error strategy.

    A pipeline holds no per-run state, so one instance can be executed many
    times, including concurrently against different contexts as long as its
    plugins do not share mutable state. Appending plugins with ``use`` while an
    ``execute`` call is in flight is not supported.

    Example::

        pipeline = (
            Pipeline(ErrorStrategy.ABORT_ON_ERROR)
            .use(IntentClassifierPlugin())
            .use(ResponseGeneratorPlugin())
        )
        pipeline.execute(PluginContext(message))
    """

    def __init__(self, strategy: ErrorStrategy = ErrorStrategy.ABORT_ON_ERROR,
                 plugins: Optional[List[Plugin]] = None):
        """
        Initialize the pipeline.

        Args:
            strategy: Error handling strategy, fixed for the pipeline's lifetime
            plugins: Initial plugins, in execution order
        """
        self._strategy = ErrorStrategy.parse(strategy)
        self._plugins: List[Plugin] = list(plugins or [])
        self.logger = logging.getLogger("plugpipe.pipeline")

    @property
    def strategy(self) -> ErrorStrategy:
        return self._strategy

    @property
    def plugins(self) -> Tuple[Plugin, ...]:
        return tuple(self._plugins)

    def use(self, plugin: Plugin) -> "Pipeline":
        """
        Append a plugin to the end of the pipeline.

        Args:
            plugin: Plugin to append

        Returns:
            The pipeline itself, for chained calls
        """
        self._plugins.append(plugin)
        self.logger.debug(f"Added plugin '{_plugin_name(plugin)}' at position {len(self._plugins) - 1}")
        return self

    def execute(self, context: PluginContext) -> None:
        """
        Run every plugin in insertion order against ``context``.

        Under ABORT_ON_ERROR the first failure is raised as a
        PipelineStageError and later plugins do not run. Under
        CONTINUE_ON_ERROR each failure is wrapped, appended to
        ``context.errors`` and execution continues; the call itself then
        returns normally.

        Args:
            context: Context owned by this run

        Raises:
            PipelineStageError: On the first plugin failure under ABORT_ON_ERROR
        """
        total = len(self._plugins)
        self.logger.debug(f"Executing pipeline with {total} plugins ({self._strategy.value} on error)")

        for index, plugin in enumerate(self._plugins):
            name = _plugin_name(plugin)
            self.logger.debug(f"Executing plugin {index + 1}/{total}: {name}")
            try:
                plugin.execute(context)
            except Exception as e:
                error = PipelineStageError(index, e, plugin_name=name)
                self._handle_plugin_error(error, context)

    def _handle_plugin_error(self, error: PipelineStageError, context: PluginContext) -> None:
        """
        Apply the error strategy to a wrapped plugin failure.

        Raises:
            PipelineStageError: If the strategy is ABORT_ON_ERROR
        """
        if self._strategy is ErrorStrategy.ABORT_ON_ERROR:
            self.logger.error(f"Aborting pipeline: {error}")
            raise error from error.cause

        self.logger.warning(f"Continuing pipeline despite error: {error}")
        context.add_error(error)

    def __len__(self) -> int:
        return len(self._plugins)

    def __iter__(self) -> Iterator[Plugin]:
        return iter(tuple(self._plugins))

    def __repr__(self) -> str:
        names = [_plugin_name(p) for p in self._plugins]
        return f"Pipeline(strategy={self._strategy.value!r}, plugins={names})"


def _plugin_name(plugin: Plugin) -> str:
    return getattr(plugin, 'name', type(plugin).__name__)
