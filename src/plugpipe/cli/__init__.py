"""
plugpipe Command Line Interface
"""

from plugpipe import __version__

__all__ = ['__version__']
