# -*- encoding: utf-8 -*-
"""
KCQL Kind cache - memoized identifier -> ResourceCoordinate mapping.

Reads share the lock; inserts take it exclusively. Entries are written
once per key and are only dropped by clear().
"""

import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from kcql.discovery.model import ResourceCoordinate


class ReadWriteLock:
    """Many concurrent readers or a single writer."""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writing = False

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writing:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            while self._writing or self._readers:
                self._cond.wait()
            self._writing = True
        try:
            yield
        finally:
            with self._cond:
                self._writing = False
                self._cond.notify_all()


class KindCache:
    """
    Session-owned cache of resolved resource kinds.

    Keys are normalized to lower case.
    """

    def __init__(self):
        self._entries: dict[str, ResourceCoordinate] = {}
        self._lock = ReadWriteLock()

    def get(self, identifier: str) -> Optional[ResourceCoordinate]:
        with self._lock.read():
            return self._entries.get(identifier.lower())

    def put(self, identifier: str, coordinate: ResourceCoordinate) -> ResourceCoordinate:
        """
        Insert a coordinate unless the key is already cached.

        Returns:
            The coordinate stored under the key
        """
        key = identifier.lower()
        with self._lock.write():
            return self._entries.setdefault(key, coordinate)

    def clear(self) -> None:
        with self._lock.write():
            self._entries.clear()

    def dump(self) -> dict[str, str]:
        """Snapshot of identifier -> "group/version/resource"."""
        with self._lock.read():
            return {key: str(coord) for key, coord in self._entries.items()}

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._entries)

    def __contains__(self, identifier: str) -> bool:
        return self.get(identifier) is not None
