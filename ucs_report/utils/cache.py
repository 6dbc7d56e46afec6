"""Basic LRU cache utility.

This module provides a thin, typed wrapper over :class:`cachetools.LRUCache`
with a single `get_or_compute` entry point. It memoizes repeated lookups against the
large per-pass snapshots (counter queries, capability catalog names), which
are immutable for the lifetime of one collection pass.
"""

from __future__ import annotations

from collections.abc import Hashable
from typing import Callable, Generic, TypeVar

from cachetools import LRUCache  # type: ignore[import-untyped]

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class Cache(Generic[K, V]):
    """Simple LRU cache.

    Parameters
    ----------
    maxsize: int
        Maximum number of entries to retain.
        When the cache is full, the least-recently-used entry is discarded.
    """

    def __init__(self, maxsize: int = 1024) -> None:
        self._cache: LRUCache[K, V] = LRUCache(maxsize=maxsize)

    def get_or_compute(self, key: K, compute: Callable[[], V]) -> V:
        """Return the cached value for `key`, computing and storing it on miss."""
        if key in self._cache:
            return self._cache[key]
        value = compute()
        self._cache[key] = value
        return value

    def __len__(self) -> int:
        return len(self._cache)
