# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

import inspect
import numbers
from collections.abc import Callable
from dataclasses import dataclass
from functools import partial, wraps
from typing import Any, ParamSpec, TypeVar

P = ParamSpec("P")
R = TypeVar("R")

__all__ = (
    "SignatureShape",
    "continuation_parameter",
    "function_name",
    "is_record",
    "positional_arity",
    "signature_shape",
    "synchronized",
)

_SCALARS = (str, bytes, bytearray, numbers.Number)


def synchronized(func: Callable[P, R]) -> Callable[P, R]:
    """Decorator for thread-safe method execution.

    Requires decorated method's instance to have ``self._lock``
    (``threading.Lock`` or ``threading.RLock``).
    """

    @wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        self = args[0]
        with self._lock:
            return func(*args, **kwargs)

    return wrapper


def is_record(value: Any) -> bool:
    """True when ``value`` can serve as bound state.

    Records are containers and objects. ``None``, numbers, booleans,
    strings, bytes, plain functions and awaitables are not.
    """
    if value is None or isinstance(value, _SCALARS):
        return False
    if inspect.isroutine(value) or isinstance(value, partial):
        return False
    return not inspect.isawaitable(value)


def function_name(func: Callable[..., Any]) -> str | None:
    """Return the declared name of ``func`` or None when it has none.

    Lambdas count as unnamed.
    """
    name = getattr(func, "__name__", None)
    if not isinstance(name, str):
        return None
    name = name.strip()
    if not name or name == "<lambda>":
        return None
    return name


@dataclass(slots=True, frozen=True)
class SignatureShape:
    required: int
    positional: int
    variadic: bool


def signature_shape(func: Callable[..., Any]) -> SignatureShape | None:
    """Count the positional parameters of ``func``.

    Returns None for callables whose signature cannot be inspected
    (some builtins and C extensions).
    """
    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError):
        return None

    required = positional = 0
    variadic = False
    for param in sig.parameters.values():
        if param.kind is param.VAR_POSITIONAL:
            variadic = True
        elif param.kind in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD):
            positional += 1
            if param.default is param.empty:
                required += 1
    return SignatureShape(required, positional, variadic)


def positional_arity(func: Callable[..., Any], skip: int = 0) -> int | None:
    """Positional parameter count after dropping ``skip`` leading ones.

    None when the callable is variadic or cannot be inspected.
    """
    shape = signature_shape(func)
    if shape is None or shape.variadic:
        return None
    return max(shape.positional - skip, 0)


def continuation_parameter(func: Callable[..., Any]) -> str | None:
    """Name of the last positional parameter when it can be passed by keyword.

    The first positional parameter takes the subject and never qualifies.
    None for variadic or uninspectable callables and when the last
    positional parameter is positional-only.
    """
    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError):
        return None

    last, count = None, 0
    for param in sig.parameters.values():
        if param.kind is param.VAR_POSITIONAL:
            return None
        if param.kind in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD):
            last, count = param, count + 1
    if count < 2 or last.kind is not last.POSITIONAL_OR_KEYWORD:
        return None
    return last.name
