"""
Concurrency Primitives

Locking used by the process-wide plugin registry.
"""

from .locks import ReadWriteLock

__all__ = [
    'ReadWriteLock',
]
