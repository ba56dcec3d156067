# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from typing import Any, ClassVar

__all__ = (
    "AnonymousFunctionError",
    "CapabilityError",
    "CompositionError",
    "ContractViolationError",
    "DuplicateNameError",
    "EmptyInputError",
    "InputValidationError",
    "InvalidMutatorResultError",
    "InvalidOperationNameError",
    "InvalidStateError",
    "LayerArityError",
    "LayerProtocolError",
    "LayerReturnError",
    "NoPreviousOperationError",
    "NotAFunctionError",
    "ShapeNarrowingError",
)


class CapabilityError(Exception):
    """Base error for every failure raised by the engine.

    ``context`` names the primitive that detected the problem (``make``,
    ``bind``, ``layer``, ``compose`` ...). ``details`` carries the offending
    operation or layer so the failing call can be located.
    """

    default_message: ClassVar[str] = "Capability error"
    default_context: ClassVar[str] = "makewith"
    __slots__ = ("message", "context", "details")

    def __init__(
        self,
        message: str | None = None,
        *,
        context: str | None = None,
        details: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ):
        self.message = message or self.default_message
        self.context = context or self.default_context
        self.details = details or {}
        super().__init__(f"[{self.context}] {self.message}")
        if cause:
            self.__cause__ = cause

    def to_dict(self, *, include_cause: bool = False) -> dict[str, Any]:
        data = {
            "error": self.__class__.__name__,
            "context": self.context,
            "message": self.message,
            **({"details": self.details} if self.details else {}),
        }
        if include_cause and (cause := self.get_cause()):
            data["cause"] = repr(cause)
        return data

    def get_cause(self) -> BaseException | None:
        """Get the cause of this error, if any."""
        return self.__cause__

    @classmethod
    def from_value(
        cls,
        value: Any,
        *,
        expected: str | None = None,
        message: str | None = None,
        context: str | None = None,
        cause: BaseException | None = None,
        **extra: Any,
    ):
        """Build an error describing an offending value."""
        details = {
            "value": value,
            "type": type(value).__name__,
            **({"expected": expected} if expected else {}),
            **extra,
        }
        return cls(message, context=context, details=details, cause=cause)


class InputValidationError(CapabilityError):
    """A bad table or state reached the engine."""

    default_message = "Invalid input"
    __slots__ = ()


class EmptyInputError(InputValidationError):
    default_message = "At least one argument must be provided"
    __slots__ = ()


class NotAFunctionError(InputValidationError):
    default_message = "Expected a function"
    __slots__ = ()


class AnonymousFunctionError(InputValidationError):
    default_message = "Functions must have a non-empty name"
    __slots__ = ()


class DuplicateNameError(InputValidationError):
    default_message = "Duplicate operation name"
    __slots__ = ()


class InvalidOperationNameError(InputValidationError):
    default_message = "Invalid operation name"
    __slots__ = ()


class InvalidStateError(InputValidationError):
    default_message = "State must be a record"
    __slots__ = ()


class ContractViolationError(CapabilityError):
    """A mutator broke its contract while running."""

    default_message = "Operation contract violated"
    __slots__ = ()


class InvalidMutatorResultError(ContractViolationError):
    default_message = "Chainable operations must return a new state object"
    __slots__ = ()


class ShapeNarrowingError(ContractViolationError):
    default_message = "Chainable operation dropped fields from the state"
    __slots__ = ()


class CompositionError(CapabilityError):
    default_message = "Composition failed"
    __slots__ = ()


class NoPreviousOperationError(CompositionError):
    default_message = "No previous operation found to compose with"
    __slots__ = ()


class LayerProtocolError(CapabilityError):
    default_message = "Invalid layer"
    __slots__ = ()


class LayerArityError(LayerProtocolError):
    default_message = "Layer function must accept exactly one parameter"
    __slots__ = ()


class LayerReturnError(LayerProtocolError):
    default_message = "Layer function must return a table of operations"
    __slots__ = ()
