# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Operation tables: normalization and tagging.

A table is an immutable, ordered ``name -> function`` mapping carrying two
independent flags. ``is_mutating`` turns every operation of the table into a
state replacer whose bound form returns a rebuilt capability object.
``is_composable`` makes the layered builder hand each operation the previous
operation of the same name as a trailing continuation.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from typing_extensions import override

from ._errors import (
    AnonymousFunctionError,
    DuplicateNameError,
    EmptyInputError,
    InputValidationError,
    InvalidOperationNameError,
    NotAFunctionError,
)
from .ln import function_name

__all__ = (
    "Operation",
    "OperationTable",
    "RESERVED_NAMES",
    "chainable",
    "collect_fns",
    "compose",
    "make",
    "make_chainable",
    "rebind",
)

Operation = Callable[..., Any]

# Attribute slots of a capability object; operations may not shadow them.
RESERVED_NAMES = frozenset({"_capability_ops", "_capability_state"})


def _check_name(name: Any, context: str) -> str:
    if not isinstance(name, str) or not name.strip():
        raise InvalidOperationNameError.from_value(
            name,
            expected="non-empty str",
            message=f"Operation names must be non-empty strings, got {name!r}",
            context=context,
        )
    if name.startswith("__") or name in RESERVED_NAMES:
        raise InvalidOperationNameError(
            f'Operation name "{name}" is reserved',
            context=context,
            details={"name": name},
        )
    return name


@dataclass(slots=True, frozen=True, init=False, eq=False, repr=False)
class OperationTable(Mapping[str, Operation]):
    """Immutable mapping of operation names to functions.

    Validation happens once, in the constructor. The cache keys tables by
    identity; tagging returns a new table and leaves the source untouched.
    """

    operations: Mapping[str, Operation]
    is_mutating: bool
    is_composable: bool

    def __init__(
        self,
        operations: Mapping[str, Operation] | None = None,
        *,
        is_mutating: bool = False,
        is_composable: bool = False,
        context: str = "make",
    ) -> None:
        if operations is not None and not isinstance(operations, Mapping):
            raise InputValidationError.from_value(
                operations,
                expected="mapping of functions",
                message="Operations must be a mapping of names to functions",
                context=context,
            )
        ops: dict[str, Operation] = {}
        for name, fn in (operations or {}).items():
            _check_name(name, context)
            if not callable(fn):
                raise NotAFunctionError(
                    f'Invalid method "{name}": expected function, '
                    f"got {type(fn).__name__}",
                    context=context,
                    details={"name": name, "type": type(fn).__name__},
                )
            ops[name] = fn
        object.__setattr__(self, "operations", MappingProxyType(ops))
        object.__setattr__(self, "is_mutating", bool(is_mutating))
        object.__setattr__(self, "is_composable", bool(is_composable))

    def __getitem__(self, name: str) -> Operation:
        return self.operations[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self.operations)

    def __len__(self) -> int:
        return len(self.operations)

    @override
    def __repr__(self) -> str:
        flags = [
            flag
            for flag, on in (
                ("mutating", self.is_mutating),
                ("composable", self.is_composable),
            )
            if on
        ]
        suffix = f", {'|'.join(flags)}" if flags else ""
        return f"OperationTable({list(self.operations)}{suffix})"

    def tagged(
        self,
        *,
        is_mutating: bool | None = None,
        is_composable: bool | None = None,
    ) -> OperationTable:
        """Return a table with the given flags, or self if nothing changes."""
        mutating = self.is_mutating if is_mutating is None else is_mutating
        composable = (
            self.is_composable if is_composable is None else is_composable
        )
        if mutating == self.is_mutating and composable == self.is_composable:
            return self
        # operations were validated when self was built
        table = object.__new__(type(self))
        object.__setattr__(table, "operations", self.operations)
        object.__setattr__(table, "is_mutating", bool(mutating))
        object.__setattr__(table, "is_composable", bool(composable))
        return table


def _normalize(fns_or_map: tuple[Any, ...], context: str) -> OperationTable:
    if not fns_or_map:
        raise EmptyInputError(context=context)

    if len(fns_or_map) == 1:
        only = fns_or_map[0]
        if isinstance(only, OperationTable):
            return only
        if isinstance(only, Mapping):
            return OperationTable(only, context=context)

    fns: list[Any] = []
    for item in fns_or_map:
        if isinstance(item, (list, tuple)):
            fns.extend(item)
        else:
            fns.append(item)

    ops: dict[str, Operation] = {}
    for index, fn in enumerate(fns):
        if not callable(fn):
            raise NotAFunctionError(
                f"Argument at index {index} must be a function, "
                f"got {type(fn).__name__}",
                context=context,
                details={"index": index, "type": type(fn).__name__},
            )
        name = function_name(fn)
        if name is None:
            raise AnonymousFunctionError(
                f"Function at index {index} must have a non-empty name",
                context=context,
                details={"index": index},
            )
        if name in ops:
            raise DuplicateNameError(
                f'Duplicate function name "{name}" found',
                context=context,
                details={"name": name, "index": index},
            )
        ops[name] = fn
    return OperationTable(ops, context=context)


def make(*fns_or_map: Any) -> OperationTable:
    """Normalize operations into a canonical table.

    Accepts named functions (``make(add, sub)``), a list of them
    (``make([add, sub])``), a single mapping (``make({"add": add})``) or an
    existing table, which is returned unchanged.

    Raises:
        EmptyInputError: No arguments.
        NotAFunctionError: A value is not callable.
        AnonymousFunctionError: A positional function is a lambda or unnamed.
        DuplicateNameError: Two positional functions share a name.
        InvalidOperationNameError: A mapping key is not a usable name.
    """
    return _normalize(fns_or_map, "make")


def chainable(*fns_or_map: Any) -> OperationTable:
    """Normalize and tag a table as mutating.

    Every operation of a mutating table returns a new state; its bound form
    returns a capability object rebuilt around that state.

    Example:
        >>> ops = chainable({"add": lambda s, n: {**s, "count": s["count"] + n}})
        >>> bind({"count": 0}, ops).add(2).add(3)
    """
    return _normalize(fns_or_map, "chainable").tagged(is_mutating=True)


def compose(methods: Mapping[str, Operation]) -> OperationTable:
    """Tag a table as composable for the layered builder.

    Each operation receives, after its own arguments, a continuation that
    calls the previous operation of the same name on the capability being
    extended. A continuation over a chainable operation returns the bare
    new state, so wrappers read the same for readers and mutators.
    """
    if not isinstance(methods, Mapping):
        raise InputValidationError.from_value(
            methods,
            expected="mapping of functions",
            message="Methods must be a mapping of functions",
            context="compose",
        )
    table = _normalize((methods,), "compose")
    return table.tagged(is_composable=True)


collect_fns = make
rebind = chainable
make_chainable = chainable
