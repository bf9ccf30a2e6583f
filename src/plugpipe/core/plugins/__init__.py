"""
plugpipe Plugin Registry

Named, thread-safe storage of plugin instances and pipeline assembly from
lists of names.
"""

from .registry import PluginRegistry

__all__ = [
    'PluginRegistry',
]
