"""Attribute descriptions shared by all astkit objects.

Objects expose their state as named attributes. Each attribute has a
canonical name (e.g. ``Title``), a value kind, a default and a short
description that is used as the trailing comment when the object is
shown. Names are case-insensitive and axis attributes of a Frame take a
1-based index, as in ``Label(2)``.

Example:
    >>> parse_options("Title=My frame, Digits(1)=5")
    [('Title', 'My frame'), ('Digits(1)', '5')]
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple, Union

from astkit.common.errors import InvalidAttributeValueError


_NAME_RE = re.compile(r"^\s*([A-Za-z][A-Za-z0-9_]*)\s*(?:\(\s*(\d+)\s*\))?\s*$")

_TRUE_STRINGS = {"1", "true", "yes", "y", "t"}
_FALSE_STRINGS = {"0", "false", "no", "n", "f"}


@dataclass(frozen=True)
class AttributeSpec:
    """Description of one attribute.

    Attributes:
        name: Canonical attribute name, as written by the channel.
        kind: Value type; one of str, int, float or bool.
        default: Default value, or a callable taking the owning object.
        comment: Short description used as a channel comment.
        readonly: Whether the attribute can only be read.
        validator: Optional callable raising InvalidAttributeValueError
            for unacceptable values.
    """

    name: str
    kind: type
    default: Union[Any, Callable[[Any], Any]]
    comment: str = ""
    readonly: bool = False
    validator: Optional[Callable[[Any], None]] = None

    @property
    def key(self) -> str:
        return self.name.lower()

    def default_for(self, owner: Any) -> Any:
        """Return the default value for the given owning object."""
        if callable(self.default):
            return self.default(owner)
        return self.default

    def coerce(self, value: Any) -> Any:
        """Convert a Python or string value to this attribute's kind."""
        try:
            if isinstance(value, str):
                converted = from_text(value, self.kind)
            elif self.kind is bool:
                converted = bool(value)
            elif self.kind is int:
                if isinstance(value, float) and not value.is_integer():
                    raise ValueError(f"{value} is not an integer")
                converted = int(value)
            else:
                converted = self.kind(value)
        except (TypeError, ValueError) as e:
            raise InvalidAttributeValueError(
                f"Invalid value {value!r} for attribute {self.name}: {e}"
            ) from e
        if self.validator is not None:
            self.validator(converted)
        return converted


def from_text(text: str, kind: type) -> Any:
    """Convert attribute text to a value of the given kind.

    Raises:
        ValueError: If the text cannot be interpreted.
    """
    if kind is str:
        return text
    stripped = text.strip()
    if kind is bool:
        lowered = stripped.lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
        raise ValueError(f"{text!r} is not a boolean")
    if kind is int:
        return int(stripped)
    if kind is float:
        return float(stripped)
    raise ValueError(f"Unsupported attribute kind {kind!r}")


def to_text(value: Any) -> str:
    """Format an attribute value the way the channel writes it."""
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, float):
        return repr(value)
    return str(value)


def split_name(name: str) -> Tuple[str, Optional[int]]:
    """Split an attribute name into its lower-case key and axis index.

    Args:
        name: Attribute name such as ``"Title"`` or ``"label(2)"``.

    Returns:
        Tuple of (lower-case key, axis index or None).

    Raises:
        InvalidAttributeValueError: If the name is not well formed.
    """
    match = _NAME_RE.match(name)
    if match is None:
        raise InvalidAttributeValueError(f"Malformed attribute name: {name!r}")
    index = int(match.group(2)) if match.group(2) is not None else None
    return match.group(1).lower(), index


def parse_options(options: str) -> List[Tuple[str, str]]:
    """Parse a comma separated ``name=value`` settings string.

    Empty entries are ignored. Values are stripped of surrounding white
    space and may not contain commas.

    Raises:
        InvalidAttributeValueError: If an entry has no ``=``.
    """
    settings = []
    for item in options.split(","):
        if not item.strip():
            continue
        if "=" not in item:
            raise InvalidAttributeValueError(f"Missing '=' in attribute setting: {item.strip()!r}")
        name, value = item.split("=", 1)
        settings.append((name.strip(), value.strip()))
    return settings


def attribute_property(name: str, doc: Optional[str] = None, readonly: bool = False) -> property:
    """Build a Python property that forwards to an object's named attribute."""

    def fget(self):
        return self.get(name)

    def fset(self, value):
        self._set_attribute(name, value)

    if readonly:
        return property(fget, doc=doc)
    return property(fget, fset, doc=doc)


def require_nonzero(value: float) -> None:
    if value == 0:
        raise InvalidAttributeValueError("Value must be non-zero")


def require_non_negative(value: int) -> None:
    if value < 0:
        raise InvalidAttributeValueError(f"Value must not be negative, got {value}")
