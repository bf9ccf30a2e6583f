"""
plugpipe Core

The plugin contract, the context carrier, the sequential pipeline executor
and the thread-safe plugin registry.
"""

from plugpipe.core.pipeline import ErrorStrategy, FunctionPlugin, Pipeline, Plugin, PluginContext, plugin
from plugpipe.core.plugins import PluginRegistry
from plugpipe.core.exceptions import (
    PlugPipeError, PluginExecutionError, PipelineStageError, RegistryError,
    DuplicatePluginError, PluginNotFoundError, PipelineBuildError,
    ContextValidationError, TypeMismatchError, MissingContextValueError,
    ConfigurationError, ErrorCode,
)

__all__ = [
    'ErrorStrategy',
    'FunctionPlugin',
    'Pipeline',
    'Plugin',
    'PluginContext',
    'plugin',
    'PluginRegistry',
    'PlugPipeError',
    'PluginExecutionError',
    'PipelineStageError',
    'RegistryError',
    'DuplicatePluginError',
    'PluginNotFoundError',
    'PipelineBuildError',
    'ContextValidationError',
    'TypeMismatchError',
    'MissingContextValueError',
    'ConfigurationError',
    'ErrorCode',
]
