"""Exception types raised by astkit.

All errors derive from AstError so callers can catch the whole family,
while each one also derives from the closest builtin so that ordinary
``except ValueError`` style handling keeps working.
"""

from __future__ import annotations

from typing import Optional


class AstError(Exception):
    """Base class for all astkit errors."""


class MalformedInputError(AstError, ValueError):
    """Serialized text is truncated, inconsistent or ill-typed.

    Attributes:
        line_number: 1-based line of the offending input, if known.
    """

    def __init__(self, message: str, line_number: Optional[int] = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"{message} (line {line_number})"
        super().__init__(message)


class UnknownTypeError(AstError, LookupError):
    """A type discriminator names no registered class."""

    def __init__(self, class_name: str):
        self.class_name = class_name
        super().__init__(f"Unknown object class: {class_name!r}")

    def __str__(self) -> str:
        return self.args[0]


class UnknownAttributeError(AstError, AttributeError):
    """An attribute name is not recognised, or is read-only."""


class InvalidAttributeValueError(AstError, ValueError):
    """An attribute value cannot be converted or is out of range."""
