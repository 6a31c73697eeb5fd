"""String-keyed hashtables with plain, locked and reader/writer-locked variants."""

from __future__ import annotations

import itertools
import threading
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from kvtoolkit.hashstring import HashString


def _collect(
    table: dict[HashString, Any], key: str | None, n: int | None
) -> list[tuple[str, Any]]:
    """Return up to ``n`` pairs, starting at ``key`` (or the beginning)."""
    items: Iterator[tuple[HashString, Any]] = iter(list(table.items()))
    if key is not None:
        target = HashString(key)
        items = itertools.dropwhile(lambda kv: kv[0] != target, items)
    if n is not None and n >= 0:
        items = itertools.islice(items, n)
    return [(k.value, v) for k, v in items]


class StringHashtable(ABC):
    """Interface of a table mapping strings to values; missing keys give None."""

    @abstractmethod
    def get(self, key: str) -> Any:
        """Return the value for ``key``, or None if it is absent."""

    @abstractmethod
    def insert(self, key: str | None, value: Any) -> bool:
        """Add ``key``; return False if it is None or already present."""

    @abstractmethod
    def update(self, key: str, value: Any) -> Any:
        """Replace the value of ``key``; return the old value or None."""

    @abstractmethod
    def remove(self, key: str) -> Any:
        """Delete ``key``; return its value or None if it was absent."""

    @abstractmethod
    def entries(
        self, key: str | None = None, n: int | None = None
    ) -> list[tuple[str, Any]]:
        """Return up to ``n`` pairs in table order, starting at ``key``."""

    @abstractmethod
    def __len__(self) -> int:
        """Number of stored keys."""


class StlHashtable(StringHashtable):
    """An unsynchronised hashtable keyed by :class:`HashString`."""

    def __init__(self, num_buckets: int = 11, max_load_factor: float = 2.0) -> None:
        if num_buckets < 0:
            raise ValueError("num_buckets must not be negative")
        if not max_load_factor > 0:
            raise ValueError("max_load_factor must be positive")
        self.num_buckets = num_buckets
        self.max_load_factor = float(max_load_factor)
        self._table: dict[HashString, Any] = {}

    def get(self, key: str) -> Any:
        return self._table.get(HashString(key))

    def insert(self, key: str | None, value: Any) -> bool:
        if key is None:
            return False
        skey = HashString(key)
        if skey in self._table:
            return False
        self._table[skey] = value
        return True

    def update(self, key: str, value: Any) -> Any:
        skey = HashString(key)
        if skey not in self._table:
            return None
        old = self._table[skey]
        self._table[skey] = value
        return old

    def remove(self, key: str) -> Any:
        return self._table.pop(HashString(key), None)

    def entries(
        self, key: str | None = None, n: int | None = None
    ) -> list[tuple[str, Any]]:
        return _collect(self._table, key, n)

    def __len__(self) -> int:
        return len(self._table)


class LockStlHashtable(StlHashtable):
    """A :class:`StlHashtable` whose every operation holds one mutex."""

    def __init__(self, num_buckets: int = 11, max_load_factor: float = 2.0) -> None:
        super().__init__(num_buckets, max_load_factor)
        self._lock = threading.Lock()

    def get(self, key: str) -> Any:
        with self._lock:
            return super().get(key)

    def insert(self, key: str | None, value: Any) -> bool:
        with self._lock:
            return super().insert(key, value)

    def update(self, key: str, value: Any) -> Any:
        with self._lock:
            return super().update(key, value)

    def remove(self, key: str) -> Any:
        with self._lock:
            return super().remove(key)

    def entries(
        self, key: str | None = None, n: int | None = None
    ) -> list[tuple[str, Any]]:
        with self._lock:
            return super().entries(key, n)

    def __len__(self) -> int:
        with self._lock:
            return super().__len__()


class _RWLock:
    """A reader/writer lock: many readers or one writer at a time."""

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._readers = 0
        self._writer = False

    @contextmanager
    def reading(self) -> Iterator[None]:
        with self._cond:
            while self._writer:
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
    def writing(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._readers:
                self._cond.wait()
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class _ConcurrentTable(StringHashtable):
    """Shared storage for the reader/writer-locked tables."""

    def __init__(self) -> None:
        self._table: dict[HashString, Any] = {}
        self._rw = _RWLock()
        # Guards single-element read-modify-write steps taken under a shared lock.
        self._element_lock = threading.Lock()

    def _get(self, key: str) -> Any:
        return self._table.get(HashString(key))

    def _insert(self, key: str | None, value: Any) -> bool:
        if key is None:
            return False
        skey = HashString(key)
        with self._element_lock:
            if skey in self._table:
                return False
            self._table[skey] = value
            return True

    def _update(self, key: str, value: Any) -> Any:
        skey = HashString(key)
        with self._element_lock:
            if skey not in self._table:
                return None
            old = self._table[skey]
            self._table[skey] = value
            return old

    def _remove(self, key: str) -> Any:
        skey = HashString(key)
        with self._element_lock:
            return self._table.pop(skey, None)

    def _entries(self, key: str | None, n: int | None) -> list[tuple[str, Any]]:
        with self._element_lock:
            snapshot = dict(self._table)
        return _collect(snapshot, key, n)

    def __len__(self) -> int:
        return len(self._table)


class RandHashtable(_ConcurrentTable):
    """Concurrent table tuned for random access: only scans take the exclusive lock."""

    def __init__(self) -> None:
        super().__init__()

    def get(self, key: str) -> Any:
        with self._rw.reading():
            return self._get(key)

    def insert(self, key: str | None, value: Any) -> bool:
        with self._rw.reading():
            return self._insert(key, value)

    def update(self, key: str, value: Any) -> Any:
        with self._rw.reading():
            return self._update(key, value)

    def remove(self, key: str) -> Any:
        with self._rw.reading():
            return self._remove(key)

    def entries(
        self, key: str | None = None, n: int | None = None
    ) -> list[tuple[str, Any]]:
        with self._rw.writing():
            return self._entries(key, n)

    def __len__(self) -> int:
        return super().__len__()


class ScanHashtable(_ConcurrentTable):
    """Concurrent table tuned for scans: updates and removals are exclusive."""

    def __init__(self) -> None:
        super().__init__()
        self.max_load_factor = 2.0

    def get(self, key: str) -> Any:
        with self._rw.reading():
            return self._get(key)

    def insert(self, key: str | None, value: Any) -> bool:
        with self._rw.reading():
            return self._insert(key, value)

    def update(self, key: str, value: Any) -> Any:
        with self._rw.writing():
            return self._update(key, value)

    def remove(self, key: str) -> Any:
        with self._rw.writing():
            return self._remove(key)

    def entries(
        self, key: str | None = None, n: int | None = None
    ) -> list[tuple[str, Any]]:
        with self._rw.reading():
            return self._entries(key, n)

    def __len__(self) -> int:
        return super().__len__()