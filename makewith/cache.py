# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Construction cache for capability objects.

Binding the same state to the same table yields the same capability
object. Entries are keyed jointly by the identity of both and pin them, so
an identity cannot be recycled while its entry is alive. The cache is
bounded with LRU eviction.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .ln import LazyInit, synchronized

if TYPE_CHECKING:
    from .capability import Capability
    from .table import OperationTable

__all__ = (
    "CacheStats",
    "ConstructionCache",
    "default_cache",
    "reset_default_cache",
)

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class CacheStats:
    hits: int
    misses: int
    size: int
    max_size: int
    enabled: bool


@dataclass(slots=True, frozen=True)
class _Entry:
    state: Any
    table: OperationTable
    capability: Capability


class ConstructionCache:
    """Thread-safe LRU of capability objects keyed by (state, table).

    ``get_or_build`` runs the factory outside the lock: factories may bind
    other pairs through this same cache. When two threads build the same
    pair, the first insert wins and both callers receive it.
    """

    __slots__ = ("_entries", "_lock", "max_size", "enabled", "_hits", "_misses")

    def __init__(self, max_size: int = 10000, enabled: bool = True) -> None:
        if max_size <= 0:
            raise ValueError(f"max_size must be positive, got {max_size}")
        self._entries: OrderedDict[tuple[int, int], _Entry] = OrderedDict()
        self._lock = threading.RLock()
        self.max_size = max_size
        self.enabled = enabled
        self._hits = 0
        self._misses = 0

    def get_or_build(
        self,
        state: Any,
        table: OperationTable,
        factory: Callable[[], Capability],
    ) -> Capability:
        if not self.enabled:
            return factory()

        key = (id(state), id(table))
        cached = self._lookup(key)
        if cached is not None:
            return cached

        logger.debug("cache miss for table %r", table)
        return self._insert(key, _Entry(state, table, factory()))

    @synchronized
    def _lookup(self, key: tuple[int, int]) -> Capability | None:
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None
        self._entries.move_to_end(key)
        self._hits += 1
        return entry.capability

    @synchronized
    def _insert(self, key: tuple[int, int], entry: _Entry) -> Capability:
        existing = self._entries.get(key)
        if existing is not None:
            # another builder got here first
            self._entries.move_to_end(key)
            return existing.capability

        self._entries[key] = entry
        while len(self._entries) > self.max_size:
            _, evicted = self._entries.popitem(last=False)
            logger.debug("evicted capability for table %r", evicted.table)
        return entry.capability

    @synchronized
    def contains(self, state: Any, table: OperationTable) -> bool:
        return (id(state), id(table)) in self._entries

    @synchronized
    def clear(self) -> None:
        self._entries.clear()
        self._hits = 0
        self._misses = 0

    @synchronized
    def stats(self) -> CacheStats:
        return CacheStats(
            hits=self._hits,
            misses=self._misses,
            size=len(self._entries),
            max_size=self.max_size,
            enabled=self.enabled,
        )

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return (
            f"ConstructionCache(size={len(self._entries)}, "
            f"max_size={self.max_size}, enabled={self.enabled})"
        )


_lazy = LazyInit()
_DEFAULT_CACHE: ConstructionCache | None = None


def _init_default_cache() -> None:
    global _DEFAULT_CACHE
    from .config import settings

    _DEFAULT_CACHE = ConstructionCache(
        max_size=settings.MAKEWITH_CACHE_SIZE,
        enabled=settings.MAKEWITH_CACHE_ENABLED,
    )


def default_cache() -> ConstructionCache:
    """Process-wide cache, built from settings on first use."""
    _lazy.ensure(_init_default_cache)
    return _DEFAULT_CACHE


def reset_default_cache() -> None:
    """Rebuild the process-wide cache from settings on its next use."""
    _lazy.reset()
