# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Tests for capability objects and their descriptors."""

import copy

import pytest

from makewith import (
    Capability,
    OperationDescriptor,
    OperationKind,
    bind,
    chainable,
    compose,
    describe,
    layer,
    operations_of,
    state_of,
    unwrap,
)
from makewith._errors import InputValidationError


def total(state, *extra):
    return state["count"] + sum(extra)


def scale(state, factor, offset=0):
    return state["count"] * factor + offset


class TestAccess:
    """Operations are reachable as attributes and as items."""

    def test_attribute_and_item(self):
        api = bind({"count": 3}, {"scale": scale})
        assert api.scale(2) == 6
        assert api["scale"](2, offset=1) == 7

    def test_missing_attribute(self):
        api = bind({"count": 3}, {"scale": scale})
        with pytest.raises(AttributeError, match="no operation 'nope'"):
            api.nope

    def test_missing_item(self):
        api = bind({"count": 3}, {"scale": scale})
        with pytest.raises(KeyError):
            api["nope"]

    def test_iteration_covers_operations_only(self):
        api = bind({"count": 3}, {"scale": scale, "total": total})
        assert list(api) == ["scale", "total"]
        assert len(api) == 2
        assert "scale" in api
        assert "count" not in api

    def test_mapping_method_names_are_operations(self):
        """get and keys are ordinary operation names."""
        api = bind(
            {"a": 1},
            {"get": lambda s, key: s[key], "keys": lambda s: sorted(s)},
        )
        assert api.get("a") == 1
        assert api.keys() == ["a"]

    def test_dir_lists_operations(self):
        api = bind({"count": 3}, {"scale": scale})
        assert "scale" in dir(api)

    def test_repr(self):
        api = bind({"count": 3}, {"scale": scale, "total": total})
        assert repr(api) == "Capability(['scale', 'total'])"


class TestImmutability:
    """Capability objects cannot be modified."""

    def test_no_attribute_assignment(self):
        api = bind({"count": 3}, {"scale": scale})
        with pytest.raises(AttributeError, match="immutable"):
            api.scale = total

    def test_no_new_attributes(self):
        api = bind({"count": 3}, {"scale": scale})
        with pytest.raises(AttributeError):
            api.extra = 1

    def test_no_deletion(self):
        api = bind({"count": 3}, {"scale": scale})
        with pytest.raises(AttributeError):
            del api.scale

    def test_operations_view_is_read_only(self):
        api = bind({"count": 3}, {"scale": scale})
        with pytest.raises(TypeError):
            operations_of(api)["total"] = total

    def test_copy_returns_same_object(self):
        api = bind({"count": 3}, {"scale": scale})
        assert copy.copy(api) is api
        assert copy.deepcopy(api) is api
        assert copy.deepcopy({"api": api})["api"] is api


class TestStateAccess:
    """state_of and unwrap read the bound state."""

    def test_state_of(self):
        state = {"count": 3}
        assert state_of(bind(state, {"scale": scale})) is state

    def test_state_of_rejects_other_values(self):
        with pytest.raises(InputValidationError) as exc_info:
            state_of({"count": 3})
        assert exc_info.value.context == "state_of"

    def test_operations_of_rejects_other_values(self):
        with pytest.raises(InputValidationError):
            operations_of(object())

    def test_unwrap(self):
        state = {"count": 3}
        api = bind(state, {"scale": scale})
        assert unwrap(api) is state
        assert unwrap(42) == 42
        assert unwrap(None) is None

    def test_constructor_copies_operations(self):
        ops = {"scale": scale}
        api = Capability(ops, {"count": 1})
        ops["total"] = total
        assert list(api) == ["scale"]


class TestDescribe:
    """describe() reports name, arity and kind per operation."""

    def test_readers_and_mutators(self):
        api = bind({"count": 0}, {"scale": scale, "total": total})
        assert describe(api) == (
            OperationDescriptor("scale", 2, OperationKind.READER),
            OperationDescriptor("total", None, OperationKind.READER),
        )

    def test_mutator(self):
        api = bind({"count": 0}, chainable({"add": lambda s, n: s}))
        (descriptor,) = describe(api)
        assert descriptor.kind is OperationKind.MUTATOR
        assert descriptor.arity == 1

    def test_composed_arity_excludes_continuation(self):
        api = layer({"count": 0}, {"scale": scale})(
            compose({"scale": lambda cap, factor, prev: prev(factor)})
        )()
        (descriptor,) = describe(api)
        assert descriptor.kind is OperationKind.COMPOSED
        assert descriptor.arity == 1

    def test_plain_callables(self):
        api = Capability({"len": len}, {"count": 0})
        (descriptor,) = describe(api)
        assert descriptor.name == "len"
        assert descriptor.kind is OperationKind.READER

    def test_kind_values(self):
        assert OperationKind.READER == "reader"
        assert OperationKind("composed") is OperationKind.COMPOSED
