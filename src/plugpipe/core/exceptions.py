"""
Core Exception Hierarchy for plugpipe

Every error raised by the framework derives from PlugPipeError, which carries
a numeric ErrorCode, an ErrorContext describing where it happened and
optional RecoverySuggestions for the CLI to display.

    PlugPipeError
    ├── PluginExecutionError
    ├── PipelineStageError
    ├── RegistryError
    │   ├── DuplicatePluginError
    │   ├── PluginNotFoundError
    │   └── PipelineBuildError
    ├── ContextValidationError
    │   ├── TypeMismatchError
    │   └── MissingContextValueError
    └── ConfigurationError
"""

import platform
import sys
import time
import traceback
import uuid
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCode(Enum):
    """Numeric error codes, grouped by thousands per subsystem."""

    # Pipeline execution (1xxx)
    PIPELINE_STAGE_FAILED = 1001
    PLUGIN_EXECUTION_FAILED = 1002

    # Plugin registry (2xxx)
    REGISTRY_DUPLICATE_NAME = 2001
    REGISTRY_NOT_FOUND = 2002
    REGISTRY_BUILD_FAILED = 2003

    # Configuration (3xxx)
    CONFIG_INVALID_FORMAT = 3001
    CONFIG_INVALID_VALUE = 3002
    CONFIG_FILE_NOT_FOUND = 3003
    CONFIG_SCHEMA_VALIDATION = 3004

    # Context contract (4xxx)
    VALIDATION_TYPE_MISMATCH = 4001
    VALIDATION_MISSING_VALUE = 4002

    UNKNOWN_ERROR = 9000


@dataclass
class ErrorContext:
    """Where and when an error happened."""

    operation: str = ""
    plugin_name: Optional[str] = None
    plugin_index: Optional[int] = None
    correlation_id: Optional[str] = None
    timestamp: float = field(default_factory=time.time)
    system_info: Dict[str, Any] = field(default_factory=dict)
    user_context: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class RecoverySuggestion:
    """A step the user can take to resolve an error; lower priority sorts first."""

    action: str
    description: str
    command: Optional[str] = None
    priority: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class PlugPipeError(Exception):
    """
    Base exception for all plugpipe errors.

    Args:
        message: Human-readable description, also the ``str()`` of the error
        error_code: Classification of the error
        context: Where the error happened; a fresh one is created if omitted
        cause: Underlying exception, also set as ``__cause__``
        recoverable: Whether retrying or fixing input can succeed
        suggestions: Recovery suggestions shown to the user
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        context: Optional[ErrorContext] = None,
        cause: Optional[BaseException] = None,
        recoverable: bool = True,
        suggestions: Optional[List[RecoverySuggestion]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context if context is not None else ErrorContext()
        self.cause = cause
        self.recoverable = recoverable
        self.suggestions: List[RecoverySuggestion] = sorted(suggestions or [], key=lambda s: s.priority)

        if cause is not None:
            self.__cause__ = cause

        self.context.correlation_id = self.context.correlation_id or uuid.uuid4().hex[:8]
        self.context.system_info = self.context.system_info or {
            'platform': sys.platform,
            'python_version': platform.python_version(),
        }

    def add_suggestion(self, suggestion: RecoverySuggestion) -> None:
        """Attach a suggestion, keeping the list ordered by priority."""
        self.suggestions.append(suggestion)
        self.suggestions.sort(key=lambda s: s.priority)

    def get_user_message(self) -> str:
        """Plain-text rendering with code, trace id and the top three suggestions."""
        lines = [f"Error: {self.message}"]
        if self.error_code is not ErrorCode.UNKNOWN_ERROR:
            lines.append(f"Error Code: {self.error_code.value}")
        lines.append(f"Correlation ID: {self.context.correlation_id}")

        if self.suggestions:
            lines.append("")
            lines.append("Suggested solutions:")
        for number, suggestion in enumerate(self.suggestions[:3], 1):
            lines.append(f"  {number}. {suggestion.action}")
            lines.append(f"     {suggestion.description}")
            if suggestion.command:
                lines.append(f"     Command: {suggestion.command}")

        return "\n".join(lines)

    def get_debug_info(self) -> Dict[str, Any]:
        """Everything known about the error, as a JSON-friendly dict."""
        cause = self.cause
        return {
            'error_type': type(self).__name__,
            'message': self.message,
            'error_code': self.error_code.value,
            'recoverable': self.recoverable,
            'context': self.context.to_dict(),
            'cause': {
                'type': type(cause).__name__ if cause is not None else None,
                'message': str(cause) if cause is not None else None,
            },
            'suggestions': [s.to_dict() for s in self.suggestions],
            'stack_trace': ''.join(traceback.format_exception(type(self), self, self.__traceback__)),
        }


class PluginExecutionError(PlugPipeError):
    """Failure reported by a plugin while processing a context."""

    def __init__(self, message: str, plugin_name: Optional[str] = None, **kwargs):
        kwargs['context'] = kwargs.get('context') or ErrorContext(operation="plugin_execute")
        kwargs.setdefault('error_code', ErrorCode.PLUGIN_EXECUTION_FAILED)
        if plugin_name:
            kwargs['context'].plugin_name = plugin_name
        super().__init__(message, **kwargs)


class PipelineStageError(PlugPipeError):
    """
    Wraps a plugin failure with the zero-based index of the failing plugin.

    The original exception is kept both as ``cause`` and as ``__cause__`` so
    that callers can recover it either way.
    """

    def __init__(self, plugin_index: int, cause: BaseException, plugin_name: Optional[str] = None):
        super().__init__(
            f"plugin {plugin_index} failed: {cause}",
            error_code=ErrorCode.PIPELINE_STAGE_FAILED,
            context=ErrorContext(
                operation="pipeline_execute",
                plugin_name=plugin_name,
                plugin_index=plugin_index
            ),
            cause=cause
        )
        self.plugin_index = plugin_index
        self.plugin_name = plugin_name

    def unwrap(self) -> BaseException:
        """Return the original plugin failure."""
        return self.cause


class RegistryError(PlugPipeError):
    """Base class for plugin registry errors."""


class DuplicatePluginError(RegistryError):
    """Raised when registering a name that is already bound."""

    def __init__(self, name: str):
        super().__init__(
            f"plugin {name!r} is already registered",
            error_code=ErrorCode.REGISTRY_DUPLICATE_NAME,
            context=ErrorContext(operation="registry_register", plugin_name=name),
            recoverable=False
        )
        self.name = name


class PluginNotFoundError(RegistryError):
    """Raised when looking up a name that is not bound."""

    def __init__(self, name: str):
        super().__init__(
            f"plugin {name!r} not found in registry",
            error_code=ErrorCode.REGISTRY_NOT_FOUND,
            context=ErrorContext(operation="registry_get", plugin_name=name),
            recoverable=False,
            suggestions=[RecoverySuggestion(
                action="Check registered plugins",
                description="List the registered plugin names and fix the pipeline definition.",
                command="plugpipe plugins"
            )]
        )
        self.name = name


class PipelineBuildError(RegistryError):
    """Raised when a pipeline cannot be built from a list of plugin names."""

    def __init__(self, step: int, plugin_name: str, cause: PluginNotFoundError):
        super().__init__(
            f"failed to build pipeline at step {step}: {cause}",
            error_code=ErrorCode.REGISTRY_BUILD_FAILED,
            context=ErrorContext(
                operation="registry_build_pipeline",
                plugin_name=plugin_name,
                plugin_index=step
            ),
            cause=cause,
            recoverable=False,
            suggestions=list(cause.suggestions)
        )
        self.step = step
        self.plugin_name = plugin_name


class ContextValidationError(PlugPipeError):
    """Base class for context contract violations detected by plugins."""


class TypeMismatchError(ContextValidationError):
    """Raised when a context value has a different runtime type than expected."""

    def __init__(self, expected: Any, actual: Any, field_name: str = "data", **kwargs):
        expected_name = getattr(expected, '__name__', str(expected))
        kwargs.setdefault('error_code', ErrorCode.VALIDATION_TYPE_MISMATCH)
        super().__init__(
            f"expected {expected_name} in context {field_name}, got {type(actual).__name__}",
            **kwargs
        )
        self.expected = expected
        self.actual_type = type(actual)
        self.field_name = field_name


class MissingContextValueError(ContextValidationError):
    """Raised when a required metadata key is absent from the context."""

    def __init__(self, key: str, **kwargs):
        kwargs.setdefault('error_code', ErrorCode.VALIDATION_MISSING_VALUE)
        super().__init__(f"{key} not found in context", **kwargs)
        self.key = key


_CONFIG_SUGGESTIONS = {
    ErrorCode.CONFIG_FILE_NOT_FOUND: RecoverySuggestion(
        action="Create a configuration file",
        description="Write an example configuration and adjust it.",
        command="plugpipe config init"
    ),
    ErrorCode.CONFIG_INVALID_VALUE: RecoverySuggestion(
        action="Check configuration values",
        description="Compare the offending value with the configuration schema.",
        command="plugpipe config schema"
    ),
    ErrorCode.CONFIG_SCHEMA_VALIDATION: RecoverySuggestion(
        action="Inspect the effective configuration",
        description="Show the merged settings from files, environment and options.",
        command="plugpipe config show"
    ),
}


class ConfigurationError(PlugPipeError):
    """Invalid, unreadable or missing configuration."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.CONFIG_INVALID_VALUE,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        **kwargs
    ):
        context = kwargs.pop('context', None) or ErrorContext(operation="load_config")
        if config_key:
            context.user_context.update(config_key=config_key, config_value=config_value)

        super().__init__(message, error_code=error_code, context=context, **kwargs)

        suggestion = _CONFIG_SUGGESTIONS.get(error_code)
        if suggestion is not None:
            self.add_suggestion(RecoverySuggestion(**suggestion.to_dict()))


def config_error(message: str, key: Optional[str] = None, **kwargs) -> ConfigurationError:
    """Shorthand for a ConfigurationError about one configuration key."""
    return ConfigurationError(message, config_key=key, **kwargs)
