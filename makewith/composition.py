# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Composition of same-named operations.

A composable layer sees, for every operation it defines, the operation of
the same name on the capability it extends. That earlier operation is handed
over as a trailing *continuation* argument::

    api = (
        layer({"count": 0}, chainable({"add": add}))
        (compose({"add": lambda s, n, prev: prev(abs(n))}))
        ()
    )

A continuation normalizes what it returns: a chainable operation yields its
bare new state rather than a capability object, anything else is returned
verbatim. A wrapper therefore reads the same whether it wraps a reader or a
mutator, and when it wraps a mutator the state it returns is rebound so the
composed operation stays chainable.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from functools import partial
from typing import Any, ClassVar

from ._errors import (
    EmptyInputError,
    InputValidationError,
    InvalidStateError,
    NoPreviousOperationError,
)
from .binder import BoundOperation, bind
from .cache import ConstructionCache
from .capability import Capability, OperationKind, operations_of, unwrap
from .ln import (
    Undefined,
    UndefinedType,
    continuation_parameter,
    is_record,
    positional_arity,
)
from .table import Operation, OperationTable, make

__all__ = (
    "ComposedOperation",
    "make_with_compose",
    "resolve",
)

logger = logging.getLogger(__name__)


def _call_with_continuation(
    func: Operation,
    subject: Any,
    args: tuple[Any, ...],
    kwargs: dict[str, Any],
    continuation: Callable[..., Any],
) -> Any:
    # with keywords present the continuation goes by its parameter name
    if kwargs:
        name = continuation_parameter(func)
        if name is not None and name not in kwargs:
            return func(subject, *args, **kwargs, **{name: continuation})
    return func(subject, *args, continuation, **kwargs)


@dataclass(slots=True, frozen=True, eq=False)
class ComposedOperation:
    """Operation rewritten to receive a continuation as last positional arg.

    Called as ``op(subject, *args, **kwargs)`` it runs
    ``func(subject, *args, continuation, **kwargs)``. When keyword arguments
    are given, the continuation is passed by the name of the last positional
    parameter instead, so ``api.scale(factor=3)`` reaches
    ``lambda cap, factor, prev: ...`` intact.
    """

    kind: ClassVar[OperationKind] = OperationKind.COMPOSED

    name: str
    func: Operation
    previous: BoundOperation | UndefinedType = Undefined

    @property
    def rebinds_through(self) -> BoundOperation | None:
        return getattr(self.previous, "mutator", None)

    @property
    def arity(self) -> int | None:
        arity = positional_arity(self.func, skip=1)
        return None if arity is None else max(arity - 1, 0)

    def continuation(self) -> Callable[..., Any]:
        previous = self.previous
        name = self.name

        if previous is Undefined:

            def no_previous(*args: Any, **kwargs: Any) -> Any:
                raise NoPreviousOperationError(
                    f'No previous method "{name}" found to compose with',
                    context="compose",
                    details={"name": name},
                )

            return no_previous

        def call_previous(*args: Any, **kwargs: Any) -> Any:
            return unwrap(previous(*args, **kwargs))

        return call_previous

    def __call__(self, subject: Any, *args: Any, **kwargs: Any) -> Any:
        return _call_with_continuation(
            self.func, subject, args, kwargs, self.continuation()
        )


def resolve(
    table: OperationTable | Mapping[str, Operation], current: Capability
) -> OperationTable:
    """Rewrite a composable table against the capability it extends.

    Only operations visible on ``current`` are considered. A name with no
    match still binds; its continuation raises
    :class:`NoPreviousOperationError` when, and only when, it is called.
    """
    table = make(table)
    existing = operations_of(current)
    rewritten = {
        name: ComposedOperation(name, fn, existing.get(name, Undefined))
        for name, fn in table.items()
    }
    logger.debug(
        "composed %s over %s",
        list(rewritten),
        [name for name in rewritten if name in existing],
    )
    return OperationTable(rewritten, context="compose")


def _stack(fn: Operation, existing: Operation) -> Operation:
    def stacked(subject: Any, *args: Any, **kwargs: Any) -> Any:
        return _call_with_continuation(
            fn, subject, args, kwargs, partial(existing, subject)
        )

    return stacked


def make_with_compose(
    state: Any, *, cache: ConstructionCache | None = None
) -> Callable[..., Capability]:
    """Bind several tables at once, composing duplicate names.

    A later definition receives the earlier one, already applied to the
    state, as its trailing argument. The result is chainable when any
    input table is.

    Example:
        >>> api = make_with_compose({"data": []})(
        ...     chainable({"save": lambda s, item: {"data": [*s["data"], item]}}),
        ...     {"save": lambda s, item, prev: prev({**item, "checked": True})},
        ... )
    """
    if not is_record(state):
        raise InvalidStateError.from_value(
            state,
            expected="record",
            message=f"Subject must be a record, got {type(state).__name__}",
            context="make_with_compose",
        )

    def _bind(*tables: Any) -> Capability:
        if not tables:
            raise EmptyInputError(
                "At least one method mapping must be provided",
                context="make_with_compose",
            )
        composed: dict[str, Operation] = {}
        mutating = False
        for index, table in enumerate(tables):
            if not isinstance(table, Mapping):
                raise InputValidationError.from_value(
                    table,
                    expected="mapping of functions",
                    message="All arguments must be mappings of functions",
                    context="make_with_compose",
                    index=index,
                )
            table = make(table)
            mutating = mutating or table.is_mutating
            for name, fn in table.items():
                existing = composed.get(name)
                composed[name] = fn if existing is None else _stack(fn, existing)
        return bind(
            state,
            OperationTable(composed, is_mutating=mutating),
            cache=cache,
        )

    return _bind
