# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Capability objects and their descriptors."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any

from typing_extensions import override

from ._errors import InputValidationError
from .ln import positional_arity
from .table import RESERVED_NAMES

__all__ = (
    "Capability",
    "OperationDescriptor",
    "OperationKind",
    "describe",
    "operations_of",
    "state_of",
    "unwrap",
)


class OperationKind(str, Enum):
    READER = "reader"
    MUTATOR = "mutator"
    COMPOSED = "composed"


@dataclass(slots=True, frozen=True)
class OperationDescriptor:
    """Static description of one capability entry.

    ``arity`` counts positional parameters after the subject, leaving out
    the continuation of a composed operation. None means variadic.
    """

    name: str
    arity: int | None
    kind: OperationKind


class Capability:
    """Bound API produced by binding a state to an operation table.

    Operations are reachable as attributes and items::

        api.add(5)
        api["add"](5)

    Iteration, ``len`` and ``in`` cover operation names only. The bound state
    is kept out of that namespace; use :func:`state_of` to read it. The
    object defines no public methods so that any name can be an operation.
    """

    __slots__ = ("_capability_ops", "_capability_state")

    def __init__(
        self, operations: Mapping[str, Callable[..., Any]], state: Any
    ) -> None:
        object.__setattr__(
            self, "_capability_ops", MappingProxyType(dict(operations))
        )
        object.__setattr__(self, "_capability_state", state)

    def __getattr__(self, name: str) -> Callable[..., Any]:
        if name in RESERVED_NAMES:
            raise AttributeError(name)
        try:
            return self._capability_ops[name]
        except KeyError:
            raise AttributeError(
                f"Capability has no operation '{name}'"
            ) from None

    def __copy__(self) -> Capability:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> Capability:
        return self

    @override
    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("Capability objects are immutable")

    @override
    def __delattr__(self, name: str) -> None:
        raise AttributeError("Capability objects are immutable")

    def __getitem__(self, name: str) -> Callable[..., Any]:
        return self._capability_ops[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._capability_ops)

    def __len__(self) -> int:
        return len(self._capability_ops)

    def __contains__(self, name: object) -> bool:
        return name in self._capability_ops

    @override
    def __dir__(self) -> list[str]:
        return sorted(set(object.__dir__(self)) | set(self._capability_ops))

    def __repr__(self) -> str:
        return f"Capability({list(self._capability_ops)})"


def _require_capability(value: Any, context: str) -> Capability:
    if not isinstance(value, Capability):
        raise InputValidationError.from_value(
            value,
            expected="Capability",
            message=f"Expected a capability object, got {type(value).__name__}",
            context=context,
        )
    return value


def state_of(capability: Capability) -> Any:
    """Return the state a capability object was bound from."""
    return _require_capability(capability, "state_of")._capability_state


def operations_of(capability: Capability) -> Mapping[str, Callable[..., Any]]:
    """Read-only view of a capability's bound operations."""
    return _require_capability(capability, "operations_of")._capability_ops


def unwrap(result: Any) -> Any:
    """Strip the capability wrapper from a chainable result.

    Capability objects yield their bound state; other values pass through.
    """
    if isinstance(result, Capability):
        return result._capability_state
    return result


def describe(capability: Capability) -> tuple[OperationDescriptor, ...]:
    """Describe every operation of ``capability`` in binding order."""
    descriptors = []
    for name, op in operations_of(capability).items():
        kind = getattr(op, "kind", None)
        if isinstance(kind, OperationKind):
            arity = op.arity
        else:
            kind, arity = OperationKind.READER, positional_arity(op)
        descriptors.append(OperationDescriptor(name, arity, kind))
    return tuple(descriptors)
