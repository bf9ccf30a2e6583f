"""
Read/Write Lock

A readers-writer lock built on ``threading.Condition``. Any number of readers
may hold the lock together; a writer holds it alone. Once a writer is waiting,
new readers queue behind it so a steady stream of lookups cannot starve
registration.
"""

import threading
from contextlib import contextmanager
from typing import Iterator


class ReadWriteLock:
    """Shared/exclusive lock for structures that are read far more than written."""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer_active = False
        self._writers_waiting = 0

    def acquire_read(self) -> None:
        """Block until shared access is granted."""
        with self._cond:
            while self._writer_active or self._writers_waiting:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        """Release shared access."""
        with self._cond:
            if self._readers <= 0:
                raise RuntimeError("release_read called without a matching acquire_read")
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        """Block until exclusive access is granted."""
        with self._cond:
            self._writers_waiting += 1
            acquired = False
            try:
                while self._writer_active or self._readers:
                    self._cond.wait()
                self._writer_active = acquired = True
            finally:
                self._writers_waiting -= 1
                if not acquired:
                    # Readers held back by this writer must re-check.
                    self._cond.notify_all()

    def release_write(self) -> None:
        """Release exclusive access."""
        with self._cond:
            if not self._writer_active:
                raise RuntimeError("release_write called without a matching acquire_write")
            self._writer_active = False
            self._cond.notify_all()

    @contextmanager
    def read_lock(self) -> Iterator[None]:
        """Context manager holding shared access for the block."""
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_lock(self) -> Iterator[None]:
        """Context manager holding exclusive access for the block."""
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()

    @property
    def readers(self) -> int:
        """Number of readers currently holding the lock."""
        with self._cond:
            return self._readers

    @property
    def write_locked(self) -> bool:
        """Whether a writer currently holds the lock."""
        with self._cond:
            return self._writer_active
