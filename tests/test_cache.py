# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Tests for the construction cache."""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from makewith import (
    CacheStats,
    Capability,
    ConstructionCache,
    bind,
    chainable,
    default_cache,
    make,
    state_of,
)


def get(state):
    return state["count"]


def increment(state):
    return {**state, "count": state["count"] + 1}


class TestMemoization:
    """The same (state, table) pair yields the same capability."""

    def test_same_pair_same_object(self, cache):
        state, table = {"count": 0}, make(get)
        first = bind(state, table, cache=cache)
        assert bind(state, table, cache=cache) is first

    def test_keyed_by_identity_not_equality(self, cache):
        table = make(get)
        first = bind({"count": 0}, table, cache=cache)
        second = bind({"count": 0}, table, cache=cache)
        assert first is not second

    def test_different_tables(self, cache):
        state = {"count": 0}
        assert bind(state, make(get), cache=cache) is not bind(
            state, make(get), cache=cache
        )

    def test_default_cache_is_used(self):
        state, table = {"count": 0}, make(get)
        assert bind(state, table) is bind(state, table)
        assert default_cache().contains(state, table)

    def test_rebinds_share_the_cache(self, cache):
        table = chainable(increment)
        api = bind({"count": 0}, table, cache=cache)
        result = api.increment()
        assert len(cache) == 2
        assert cache.contains(state_of(result), table)

    def test_mapping_tables_are_normalized_per_call(self, cache):
        """A plain mapping becomes a new table each time."""
        state, ops = {"count": 0}, {"get": get}
        first = bind(state, ops, cache=cache)
        assert bind(state, ops, cache=cache) is not first


class TestTransparency:
    """Disabling the cache changes identity only, never behavior."""

    def test_disabled_cache_builds_fresh(self):
        cache = ConstructionCache(enabled=False)
        state, table = {"count": 3}, chainable(increment)
        first = bind(state, table, cache=cache)
        second = bind(state, table, cache=cache)
        assert first is not second
        assert len(cache) == 0

    def test_same_results_with_and_without_cache(self):
        table = chainable(increment)
        on = bind({"count": 3}, table, cache=ConstructionCache())
        off = bind({"count": 3}, table, cache=ConstructionCache(enabled=False))
        assert list(on) == list(off)
        assert state_of(on.increment().increment()) == state_of(
            off.increment().increment()
        )


class TestEviction:
    """The cache is bounded with LRU eviction."""

    def test_evicts_oldest(self):
        cache = ConstructionCache(max_size=2)
        table = make(get)
        states = [{"count": i} for i in range(3)]
        for state in states:
            bind(state, table, cache=cache)
        assert len(cache) == 2
        assert not cache.contains(states[0], table)
        assert cache.contains(states[2], table)

    def test_hit_refreshes_entry(self):
        cache = ConstructionCache(max_size=2)
        table = make(get)
        a, b, c = {"count": 1}, {"count": 2}, {"count": 3}
        bind(a, table, cache=cache)
        bind(b, table, cache=cache)
        bind(a, table, cache=cache)
        bind(c, table, cache=cache)
        assert cache.contains(a, table)
        assert not cache.contains(b, table)

    def test_evicted_pair_rebuilds(self):
        cache = ConstructionCache(max_size=1)
        table = make(get)
        a, b = {"count": 1}, {"count": 2}
        first = bind(a, table, cache=cache)
        bind(b, table, cache=cache)
        rebuilt = bind(a, table, cache=cache)
        assert rebuilt is not first
        assert rebuilt.get() == first.get() == 1

    @pytest.mark.parametrize("size", [0, -1])
    def test_size_must_be_positive(self, size):
        with pytest.raises(ValueError):
            ConstructionCache(max_size=size)


class TestStats:
    def test_counts_hits_and_misses(self, cache):
        state, table = {"count": 0}, make(get)
        bind(state, table, cache=cache)
        bind(state, table, cache=cache)
        bind(state, table, cache=cache)
        assert cache.stats() == CacheStats(
            hits=2, misses=1, size=1, max_size=128, enabled=True
        )

    def test_clear(self, cache):
        state, table = {"count": 0}, make(get)
        bind(state, table, cache=cache)
        cache.clear()
        assert len(cache) == 0
        assert cache.stats().misses == 0
        assert not cache.contains(state, table)

    def test_repr(self):
        assert (
            repr(ConstructionCache(max_size=4))
            == "ConstructionCache(size=0, max_size=4, enabled=True)"
        )


class TestConcurrency:
    """Concurrent binds of one pair agree on a single capability."""

    def test_parallel_binds_share_one_object(self, cache):
        state, table = {"count": 0}, chainable(increment)
        barrier = threading.Barrier(8, timeout=10)

        def worker(_):
            barrier.wait()
            return bind(state, table, cache=cache)

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(worker, range(8)))

        assert len({id(result) for result in results}) == 1
        assert len(cache) == 1

    def test_parallel_chains(self, cache):
        table = chainable(increment)

        def run(start):
            api = bind({"count": start}, table, cache=cache)
            for _ in range(50):
                api = api.increment()
            return state_of(api)["count"]

        with ThreadPoolExecutor(max_workers=4) as pool:
            totals = list(pool.map(run, range(4)))

        assert totals == [50, 51, 52, 53]

    def test_factory_may_reenter(self, cache):
        """A factory can bind other pairs through the same cache."""
        outer_state, inner_state = {"count": 1}, {"count": 2}
        table = make(get)

        def factory():
            bind(inner_state, table, cache=cache)
            return Capability({}, outer_state)

        capability = cache.get_or_build(outer_state, table, factory)
        assert state_of(capability) is outer_state
        assert cache.contains(inner_state, table)
        assert cache.contains(outer_state, table)
