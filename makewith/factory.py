# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from collections.abc import Callable, Mapping
from typing import Any

from ._errors import ContractViolationError, NotAFunctionError

__all__ = ("enrich",)


def _require_mapping(value: Any, role: str) -> Mapping:
    if not isinstance(value, Mapping):
        raise ContractViolationError.from_value(
            value,
            expected="mapping",
            message=f"{role} factory must return a mapping, "
            f"got {type(value).__name__}",
            context="enrich",
        )
    return value


def enrich(
    primary: Callable[..., Mapping],
    secondary: Callable[[Mapping], Mapping],
) -> Callable[..., dict[str, Any]]:
    """Chain two factories and unite their records.

    The returned factory passes its arguments to ``primary``, hands that
    record to ``secondary`` and returns both merged, ``secondary`` winning
    on shared keys.

    Example:
        >>> create_user = enrich(
        ...     lambda name: {"name": name, "id": 7},
        ...     lambda user: {"admin": user["id"] > 5},
        ... )
        >>> create_user("Ada")
        {'name': 'Ada', 'id': 7, 'admin': True}
    """
    for role, fn in (("Primary", primary), ("Secondary", secondary)):
        if not callable(fn):
            raise NotAFunctionError(
                f"{role} factory must be a function, got {type(fn).__name__}",
                context="enrich",
            )

    def enriched(*args: Any, **kwargs: Any) -> dict[str, Any]:
        first = _require_mapping(primary(*args, **kwargs), "Primary")
        second = _require_mapping(secondary(first), "Secondary")
        return {**first, **second}

    return enriched
