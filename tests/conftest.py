# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

import pytest

from makewith import ConstructionCache, chainable, reset_default_cache


def increment(state):
    return {**state, "count": state["count"] + 1}


def add(state, n):
    return {**state, "count": state["count"] + n}


def get(state):
    return state["count"]


@pytest.fixture(autouse=True)
def fresh_default_cache():
    """Every test starts from a freshly built process-wide cache."""
    reset_default_cache()
    yield
    reset_default_cache()


@pytest.fixture
def cache():
    return ConstructionCache(max_size=128)


@pytest.fixture
def counter_ops():
    """Chainable counter table: increment and add."""
    return chainable(increment, add)


@pytest.fixture
def counter_state():
    return {"count": 0}
