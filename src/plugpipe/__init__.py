"""
plugpipe - sequential plugin pipelines

Independently written plugins transform a shared per-run context in a fixed
order under an abort-on-error or continue-on-error policy. Example chatbot and
content moderation plugins, an HTTP adapter and a CLI are built on the core.
"""

__version__ = "0.1.0"

from plugpipe.core import (
    ErrorStrategy, FunctionPlugin, Pipeline, Plugin, PluginContext, PluginRegistry, plugin,
    PipelineStageError, DuplicatePluginError, PluginNotFoundError, PipelineBuildError,
    TypeMismatchError,
)

__all__ = [
    '__version__',
    'ErrorStrategy',
    'FunctionPlugin',
    'Pipeline',
    'Plugin',
    'PluginContext',
    'PluginRegistry',
    'plugin',
    'PipelineStageError',
    'DuplicatePluginError',
    'PluginNotFoundError',
    'PipelineBuildError',
    'TypeMismatchError',
]
