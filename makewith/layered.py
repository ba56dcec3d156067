# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Layered builder - grows a capability object one layer at a time.

Each layer is bound with the capability built so far as its subject, then
merged over it; later names shadow earlier ones. A layer is either a table
of operations or a function of one argument that receives the current
capability and returns such a table::

    api = (
        layer({"count": 1}, chainable({"add": add}))
        ({"double": lambda cap: cap.add(state_of(cap)["count"])})
        (lambda cap: {"add_and_read": lambda _, n: state_of(cap.add(n))})
        ()
    )

Calling the builder with no argument finalizes it and returns the
capability object.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any

from ._errors import (
    CapabilityError,
    InputValidationError,
    InvalidStateError,
    LayerArityError,
    LayerProtocolError,
    LayerReturnError,
)
from .binder import bind
from .cache import ConstructionCache
from .capability import Capability, operations_of, state_of
from .composition import resolve
from .ln import Unset, is_record, signature_shape
from .table import OperationTable, make

__all__ = (
    "BuilderStage",
    "LayeredBuilder",
    "layer",
    "make_layered",
)

logger = logging.getLogger(__name__)


class BuilderStage(str, Enum):
    EMPTY = "empty"
    ACCUMULATING = "accumulating"
    FINALIZED = "finalized"


def _is_unary(fn: Callable[..., Any]) -> bool:
    shape = signature_shape(fn)
    if shape is None:
        return True
    return shape.required <= 1 and (shape.positional >= 1 or shape.variadic)


class LayeredBuilder:
    """Curried accumulator over a growing capability object.

    Builders are not shared between steps: every accepted layer returns a
    new builder, so a partially built chain can be branched. The terminal
    call finalizes this builder only.
    """

    __slots__ = ("_state", "_capability", "_depth", "_stage", "_cache")

    def __init__(
        self,
        state: Any,
        capability: Capability | None = None,
        *,
        depth: int = 0,
        cache: ConstructionCache | None = None,
    ) -> None:
        self._state = state
        self._capability = capability
        self._depth = depth
        self._stage = (
            BuilderStage.EMPTY if capability is None else BuilderStage.ACCUMULATING
        )
        self._cache = cache

    @property
    def stage(self) -> BuilderStage:
        return self._stage

    @property
    def depth(self) -> int:
        """Number of layers stacked on the base table."""
        return self._depth

    @property
    def capability(self) -> Capability | None:
        return self._capability

    def __call__(self, next_layer: Any = Unset) -> Any:
        if next_layer is Unset:
            return self._finalize()
        if self._stage is BuilderStage.FINALIZED:
            raise LayerProtocolError(
                "Cannot add a layer to a finalized builder",
                context="layer",
                details={"layer": self._depth + 1},
            )
        if self._stage is BuilderStage.EMPTY:
            base = bind(self._state, next_layer, cache=self._cache)
            logger.debug("base table bound with %d operations", len(base))
            return LayeredBuilder(self._state, base, cache=self._cache)

        extended = self._extend(next_layer, self._depth + 1)
        return LayeredBuilder(
            self._state, extended, depth=self._depth + 1, cache=self._cache
        )

    def _finalize(self) -> Capability:
        if self._stage is BuilderStage.EMPTY:
            raise LayerProtocolError(
                "A base table must be provided before finalizing",
                context="layer",
            )
        self._stage = BuilderStage.FINALIZED
        return self._capability

    def _extend(self, next_layer: Any, index: int) -> Capability:
        current = self._capability
        if callable(next_layer) and not isinstance(next_layer, Mapping):
            table = self._call_layer_function(next_layer, current, index)
        elif isinstance(next_layer, (Mapping, list, tuple)):
            table = make(next_layer)
        else:
            raise LayerProtocolError(
                "Layer must be either a function or a mapping of methods, "
                f"got {type(next_layer).__name__}",
                context="layer",
                details={"layer": index},
            )

        if table.is_composable:
            table = resolve(table, current)

        bound = bind(current, table, cache=self._cache)
        logger.debug("layer %d added %s", index, list(table))
        return Capability(
            {**operations_of(current), **operations_of(bound)},
            state_of(current),
        )

    @staticmethod
    def _call_layer_function(
        fn: Callable[[Capability], Any], current: Capability, index: int
    ) -> OperationTable:
        if not _is_unary(fn):
            shape = signature_shape(fn)
            raise LayerArityError(
                "Layer function must accept exactly one parameter (the "
                f"current API), got function with {shape.positional} parameters",
                context="layer",
                details={"layer": index, "parameters": shape.positional},
            )
        try:
            result = fn(current)
        except CapabilityError:
            raise
        except Exception as exc:
            raise LayerProtocolError(
                f"Layer function {index} failed",
                context="layer",
                details={"layer": index},
                cause=exc,
            ) from exc

        if not isinstance(result, Mapping):
            raise LayerReturnError(
                "Layer function must return a mapping of methods, "
                f"got {type(result).__name__}",
                context="layer",
                details={"layer": index, "type": type(result).__name__},
            )
        try:
            return make(result)
        except InputValidationError as exc:
            raise LayerReturnError(
                f"Layer function {index} returned an invalid table",
                context="layer",
                details={"layer": index},
                cause=exc,
            ) from exc

    def __repr__(self) -> str:
        size = 0 if self._capability is None else len(self._capability)
        return (
            f"LayeredBuilder(stage={self._stage.value}, depth={self._depth}, "
            f"operations={size})"
        )


def make_layered(
    state: Any, *, cache: ConstructionCache | None = None
) -> LayeredBuilder:
    """Start a layered build; the first call supplies the base table."""
    if not is_record(state):
        raise InvalidStateError.from_value(
            state,
            expected="record",
            message=f"Subject must be a record, got {type(state).__name__}",
            context="layer",
        )
    return LayeredBuilder(state, cache=cache)


def layer(
    state: Any,
    base_table: Any,
    *,
    cache: ConstructionCache | None = None,
) -> LayeredBuilder:
    """Bind ``base_table`` to ``state`` and return an accumulating builder."""
    return make_layered(state, cache=cache)(base_table)
