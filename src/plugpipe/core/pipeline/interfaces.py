"""
Pipeline Architecture Interfaces

Abstract base class and data structures for the plugin pipeline. Defines the
contract every plugin implements and the context object that flows through a
pipeline run.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, List, Optional, Type, TypeVar, TYPE_CHECKING
import logging

from plugpipe.core.exceptions import MissingContextValueError, TypeMismatchError

if TYPE_CHECKING:
    from plugpipe.core.exceptions import PipelineStageError


T = TypeVar("T")
V = TypeVar("V")

_MISSING = object()


@dataclass
class PluginContext(Generic[T]):
    """
    Per-run carrier passed to every plugin of a pipeline.

    A context belongs to exactly one pipeline run at a time and is not safe
    for concurrent mutation.

    Attributes:
        data: Primary payload being transformed. Plugins may replace it with a
            value of any type; the expected type at each position is agreed
            between the plugins of a pipeline.
        metadata: Intra-run side channel for additive values such as
            intermediate scores or classifications.
        state: Side channel for values meant to outlive a single run, such as
            conversation history. Mechanically identical to metadata.
        errors: Failures collected under the continue-on-error strategy.
    """
    data: T = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    state: Dict[str, Any] = field(default_factory=dict)
    errors: List['PipelineStageError'] = field(default_factory=list)

    def set(self, key: str, value: Any) -> None:
        """Store a metadata value."""
        self.metadata[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        """Get metadata value with default fallback."""
        return self.metadata.get(key, default)

    def has(self, key: str) -> bool:
        """Check whether a metadata key is present."""
        return key in self.metadata

    def set_data(self, data: Any) -> None:
        """Replace the primary payload."""
        self.data = data

    def get_data(self) -> T:
        """Return the primary payload."""
        return self.data

    def set_state(self, key: str, value: Any) -> None:
        """Store a state value."""
        self.state[key] = value

    def get_state(self, key: str, default: Any = None) -> Any:
        """Get state value with default fallback."""
        return self.state.get(key, default)

    def has_state(self, key: str) -> bool:
        """Check whether a state key is present."""
        return key in self.state

    def add_error(self, error: 'PipelineStageError') -> None:
        """Record a failure without stopping the run."""
        self.errors.append(error)

    @property
    def has_errors(self) -> bool:
        """Whether any failure was collected during the run."""
        return bool(self.errors)

    def expect_data(self, expected_type: Type[V]) -> V:
        """
        Return ``data`` narrowed to ``expected_type``.

        Args:
            expected_type: Type (or tuple of types) the payload must have

        Returns:
            The payload, unchanged

        Raises:
            TypeMismatchError: If the payload has a different type
        """
        if not isinstance(self.data, expected_type):
            raise TypeMismatchError(expected_type, self.data, field_name="data")
        return self.data

    def expect_metadata(self, key: str, expected_type: Type[V]) -> V:
        """
        Return a required metadata value narrowed to ``expected_type``.

        Raises:
            MissingContextValueError: If ``key`` is absent
            TypeMismatchError: If the value has a different type
        """
        value = self.metadata.get(key, _MISSING)
        if value is _MISSING:
            raise MissingContextValueError(key)
        if not isinstance(value, expected_type):
            raise TypeMismatchError(expected_type, value, field_name=f"metadata[{key!r}]")
        return value


class Plugin(ABC):
    """
    Abstract base class for all pipeline plugins.

    A plugin receives a context, performs its processing and returns normally
    on success. Failure is reported by raising an exception; the executor
    decides whether the run stops or continues.

    Plugins should be stateless with respect to individual runs: the same
    instance may be installed in pipelines that execute concurrently against
    different contexts. A plugin must not keep a reference to the context
    after ``execute`` returns.
    """

    @property
    def name(self) -> str:
        """Name used in log messages."""
        return self.__class__.__name__

    @property
    def logger(self) -> logging.Logger:
        return logging.getLogger(f"{self.__class__.__module__}.{self.name}")

    @abstractmethod
    def execute(self, context: PluginContext) -> None:
        """
        Process the context in place.

        Args:
            context: The context of the current run

        Raises:
            Exception: Any failure. Mutations made before raising stand.
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class FunctionPlugin(Plugin):
    """Adapts a plain callable taking a context into a Plugin."""

    def __init__(self, fn: Callable[[PluginContext], Any], name: Optional[str] = None):
        self._fn = fn
        self._name = name or getattr(fn, '__name__', 'function_plugin')

    @property
    def name(self) -> str:
        return self._name

    def execute(self, context: PluginContext) -> None:
        self._fn(context)

    def __repr__(self) -> str:
        return f"FunctionPlugin(name='{self._name}')"


def plugin(fn: Callable[[PluginContext], Any]) -> FunctionPlugin:
    """Decorator turning a function into a FunctionPlugin."""
    return FunctionPlugin(fn)
