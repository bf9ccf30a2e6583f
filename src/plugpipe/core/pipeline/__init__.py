"""
Pipeline Infrastructure

Plugin contract, per-run context carrier and the sequential executor.
"""

from .interfaces import Plugin, PluginContext, FunctionPlugin, plugin
from .executor import Pipeline, ErrorStrategy

__all__ = [
    'Plugin',
    'PluginContext',
    'FunctionPlugin',
    'plugin',
    'Pipeline',
    'ErrorStrategy',
]
