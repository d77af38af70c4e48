from __future__ import annotations

from enum import Enum


class ErrorCategory(str, Enum):
    """Classification for error logging."""

    REGISTRATION = "registration"
    INSTRUCTION = "instruction"


class BusinessLogicError(Exception):
    """Base class for errors raised by the registry itself."""

    category = ErrorCategory.REGISTRATION

    def __init__(self, message: str, event_name: object = None) -> None:
        super().__init__(message)
        self.event_name = event_name


class InvalidInstructionError(BusinessLogicError, TypeError):
    """Raised in strict mode when a registration is malformed."""


class InstructionResultError(BusinessLogicError, TypeError):
    """Raised in strict mode when an instruction returns a non-bool."""

    category = ErrorCategory.INSTRUCTION
