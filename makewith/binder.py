# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""State binder - binds a state to an operation table.

Every operation of the table becomes a :class:`BoundOperation` that supplies
the state as first argument. Operations of a mutating table validate the
new state they return and answer with a capability object rebuilt around
it, which is what makes fluent chains like ``api.add(1).add(2)`` work while
no state is ever modified in place.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable, Mapping
from functools import partial
from typing import Any

from pydantic import BaseModel

from ._errors import (
    EmptyInputError,
    InputValidationError,
    InvalidMutatorResultError,
    InvalidStateError,
    NotAFunctionError,
    ShapeNarrowingError,
)
from .cache import ConstructionCache, default_cache
from .capability import Capability, OperationKind
from .ln import is_record, positional_arity
from .table import Operation, OperationTable, make

__all__ = (
    "BoundOperation",
    "bind",
    "make_with",
    "provide",
    "provide_to",
    "with_",
)

logger = logging.getLogger(__name__)


def _fields_of(state: Any) -> frozenset | None:
    if isinstance(state, Mapping):
        return frozenset(state)
    if isinstance(state, BaseModel):
        return frozenset(type(state).model_fields)
    if dataclasses.is_dataclass(state) and not isinstance(state, type):
        return frozenset(f.name for f in dataclasses.fields(state))
    return None


def _strict_shapes() -> bool:
    from .config import settings

    return settings.MAKEWITH_STRICT_SHAPES


def _validate_new_state(name: str, old: Any, new: Any) -> None:
    if new is None:
        raise InvalidMutatorResultError(
            f'Chainable method "{name}" returned None. '
            "Chainable methods must return a new state object.",
            context="bind",
            details={"name": name},
        )
    if not is_record(new):
        raise InvalidMutatorResultError(
            f'Chainable method "{name}" returned {type(new).__name__}. '
            "Chainable methods must return a new state object.",
            context="bind",
            details={"name": name, "type": type(new).__name__},
        )
    if not _strict_shapes():
        return
    before, after = _fields_of(old), _fields_of(new)
    if before is None or after is None or before <= after:
        return
    missing = sorted(map(str, before - after))
    raise ShapeNarrowingError(
        f'Chainable method "{name}" dropped fields {missing} from the state',
        context="bind",
        details={"name": name, "missing": missing},
    )


@dataclasses.dataclass(slots=True, frozen=True, eq=False)
class BoundOperation:
    """One entry of a capability object.

    Calling it runs ``func(subject, *args, **kwargs)``. For a mutating
    table the result is validated and rebound with the same table. A
    composed operation layered over a mutator rebinds a record it returns
    through that mutator, so wrapping a chainable operation keeps it
    chainable; any other return value is passed through.
    """

    name: str
    func: Operation
    subject: Any
    table: OperationTable
    cache: ConstructionCache | None = None

    @property
    def is_mutating(self) -> bool:
        return self.table.is_mutating

    @property
    def via(self) -> BoundOperation | None:
        """The mutator a composed operation rebinds its result through."""
        return getattr(self.func, "rebinds_through", None)

    @property
    def mutator(self) -> BoundOperation | None:
        return self if self.is_mutating else self.via

    @property
    def kind(self) -> OperationKind:
        if self.is_mutating:
            return OperationKind.MUTATOR
        if getattr(self.func, "kind", None) is OperationKind.COMPOSED:
            return OperationKind.COMPOSED
        return OperationKind.READER

    @property
    def arity(self) -> int | None:
        if self.kind is OperationKind.COMPOSED:
            return self.func.arity
        return positional_arity(self.func, skip=1)

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        if self.is_mutating:
            try:
                new_state = self.func(self.subject, *args, **kwargs)
            except Exception as exc:
                raise InvalidMutatorResultError(
                    f'Chainable method "{self.name}" failed',
                    context="bind",
                    details={"name": self.name},
                    cause=exc,
                ) from exc
            return self.rebind(new_state)

        result = self.func(self.subject, *args, **kwargs)
        via = self.via
        if (
            via is not None
            and is_record(result)
            and not isinstance(result, Capability)
        ):
            return via.rebind(result)
        return result

    def rebind(self, new_state: Any) -> Capability:
        """Validate ``new_state`` and bind it to this operation's table."""
        _validate_new_state(self.name, self.subject, new_state)
        return bind(new_state, self.table, cache=self.cache)

    def __repr__(self) -> str:
        return f"<BoundOperation {self.name} ({self.kind.value})>"


def bind(
    state: Any,
    table: OperationTable | Mapping[str, Operation],
    *,
    cache: ConstructionCache | None = None,
) -> Capability:
    """Bind ``state`` to every operation of ``table``.

    Args:
        state: Record-shaped state. Never modified by the engine.
        table: An operation table, or anything :func:`make` accepts as
            a single argument.
        cache: Construction cache to use; defaults to the process-wide
            one. Rebinds after mutations reuse the same cache.

    Raises:
        InvalidStateError: ``state`` is not record-shaped.
        InputValidationError: ``table`` cannot be normalized.
    """
    if not is_record(state):
        raise InvalidStateError.from_value(
            state,
            expected="record",
            message=f"Subject must be a record, got {type(state).__name__}",
            context="bind",
        )
    table = make(table)
    if cache is None:
        cache = default_cache()
    return cache.get_or_build(state, table, lambda: _build(state, table, cache))


def _build(
    state: Any, table: OperationTable, cache: ConstructionCache
) -> Capability:
    logger.debug("binding %r to %s", table, type(state).__name__)
    operations = {
        name: BoundOperation(name, fn, state, table, cache)
        for name, fn in table.items()
    }
    return Capability(operations, state)


def make_with(
    state: Any, *, cache: ConstructionCache | None = None
) -> Callable[..., Capability]:
    """Curried form of :func:`bind`.

    Example:
        >>> counter = make_with({"count": 0})(chainable(increment))
        >>> state_of(counter.increment().increment())
        {'count': 2}
    """
    if not is_record(state):
        raise InvalidStateError.from_value(
            state,
            expected="record",
            message=f"Subject must be a record, got {type(state).__name__}",
            context="make_with",
        )

    def _bind(*fns_or_map: Any) -> Capability:
        return bind(state, make(*fns_or_map), cache=cache)

    return _bind


def with_(subject: Any) -> Callable[..., list[Callable[..., Any]]]:
    """Partially apply ``subject`` to a list of functions.

    Example:
        >>> fetch, delete = with_(config)(fetch_path, delete_item)
        >>> fetch("/items")
    """
    if subject is None:
        raise InputValidationError(
            "Subject cannot be None", context="with"
        )

    def _apply(*fns: Callable[..., Any]) -> list[Callable[..., Any]]:
        if not fns:
            raise EmptyInputError(
                "At least one function must be provided", context="with"
            )
        for index, fn in enumerate(fns):
            if not callable(fn):
                raise NotAFunctionError(
                    f"Argument at index {index} must be a function, "
                    f"got {type(fn).__name__}",
                    context="with",
                    details={"index": index},
                )
        return [partial(fn, subject) for fn in fns]

    return _apply


provide = with_
provide_to = make_with
