# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from typing import Final, Literal

__all__ = (
    "SingletonType",
    "Undefined",
    "UndefinedType",
    "Unset",
    "UnsetType",
)


class _SingletonMeta(type):
    """Metaclass that guarantees exactly one instance per subclass."""

    _cache: dict[type, SingletonType] = {}

    def __call__(cls, *a, **kw):
        if cls not in cls._cache:
            cls._cache[cls] = super().__call__(*a, **kw)
        return cls._cache[cls]


class SingletonType(metaclass=_SingletonMeta):
    """Base class for falsy singleton markers that survive copying."""

    __slots__: tuple[str, ...] = ()

    def __deepcopy__(self, memo):
        return self

    def __copy__(self):
        return self

    def __bool__(self) -> bool: ...
    def __repr__(self) -> str: ...


class UndefinedType(SingletonType):
    """Marks a name that is absent, e.g. an operation a capability lacks.

    Example:
        >>> ops = {"add": add}
        >>> ops.get("sub", Undefined) is Undefined
        True
    """

    __slots__ = ()

    def __bool__(self) -> Literal[False]:
        return False

    def __repr__(self) -> Literal["Undefined"]:
        return "Undefined"

    def __reduce__(self):
        return "Undefined"


class UnsetType(SingletonType):
    """Marks an argument that was not passed at all.

    ``None`` is a value a caller can pass on purpose; ``Unset`` is what a
    parameter holds when the caller passed nothing, which is how a layered
    builder tells its terminal call apart from ``builder(None)``.
    """

    __slots__ = ()

    def __bool__(self) -> Literal[False]:
        return False

    def __repr__(self) -> Literal["Unset"]:
        return "Unset"

    def __reduce__(self):
        return "Unset"


Undefined: Final = UndefinedType()
"""A name entirely missing from a namespace."""

Unset: Final = UnsetType()
"""A parameter the caller did not provide."""
