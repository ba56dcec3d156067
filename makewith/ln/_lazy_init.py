# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Thread-safe lazy initialization utility."""

import threading
from collections.abc import Callable

__all__ = ("LazyInit",)


class LazyInit:
    """Run an initializer exactly once using double-checked locking.

    Used to defer work that depends on settings, such as building the
    process-wide construction cache, until the first bind needs it.

    Example:
        _lazy = LazyInit()
        _CACHE = None

        def _do_init():
            global _CACHE
            from makewith.config import settings
            _CACHE = ConstructionCache(max_size=settings.MAKEWITH_CACHE_SIZE)

        def default_cache():
            _lazy.ensure(_do_init)
            return _CACHE
    """

    __slots__ = ("_initialized", "_lock")

    def __init__(self) -> None:
        self._initialized = False
        self._lock = threading.RLock()

    @property
    def initialized(self) -> bool:
        return self._initialized

    def ensure(self, init_func: Callable[[], None]) -> None:
        """Execute init_func once; later calls return without locking."""
        if self._initialized:
            return
        with self._lock:
            if self._initialized:
                return
            init_func()
            self._initialized = True

    def reset(self) -> None:
        """Forget a completed initialization so the next ensure() reruns."""
        with self._lock:
            self._initialized = False
