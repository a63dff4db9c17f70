"""Single coordinate axis.

An Axis carries the per-axis presentation attributes of a Frame: label,
symbol, unit, numeric format and plotting hints. Frames hold one Axis per
coordinate and expose these attributes with an axis index, e.g.
``frame.get("Label(2)")``.
"""

from __future__ import annotations

import math
import re
import weakref
from dataclasses import dataclass
from typing import Any, Optional

from astkit.common.attributes import (
    AttributeSpec,
    attribute_property,
    require_non_negative,
)
from astkit.common.errors import InvalidAttributeValueError
from astkit.objects.object import Object


DEFAULT_DIGITS = 7
BAD_VALUE_TEXT = "<bad>"

# Defaults an Axis inside a Frame takes from that Frame
_OWNER_DEFAULT_KEYS = ("label", "symbol", "digits")

_NUMBER_RE = re.compile(
    r"\s*([+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan))\s*",
    re.IGNORECASE,
)


@dataclass
class NReadValue:
    """Result of reading a formatted axis value.

    Attributes:
        nread: Number of characters consumed, including surrounding space.
        value: The value read, or NaN if nothing could be read.
    """

    nread: int
    value: float


def default_format(digits: int) -> str:
    """printf-style format used when no Format attribute is set."""
    return f"%1.{digits}G"


def format_value(fmt: str, value: float) -> str:
    """Format a coordinate value with a printf-style format.

    Raises:
        InvalidAttributeValueError: If the format cannot format a float.
    """
    if math.isnan(value):
        return BAD_VALUE_TEXT
    try:
        return fmt % value
    except (TypeError, ValueError) as e:
        raise InvalidAttributeValueError(f"Invalid axis format {fmt!r}: {e}") from e


def read_value(text: str) -> NReadValue:
    """Read a coordinate value from the start of text.

    Example:
        >>> read_value(" 1.5e3 deg")
        NReadValue(nread=7, value=1500.0)
    """
    stripped = text.lstrip()
    if stripped.startswith(BAD_VALUE_TEXT):
        consumed = len(text) - len(stripped) + len(BAD_VALUE_TEXT)
        rest = text[consumed:]
        consumed += len(rest) - len(rest.lstrip())
        return NReadValue(consumed, math.nan)

    match = _NUMBER_RE.match(text)
    if match is None:
        return NReadValue(0, math.nan)
    return NReadValue(match.end(), float(match.group(1)))


class Axis(Object):
    """Coordinate axis.

    Args:
        options: Attribute settings, e.g. ``"Label=Right ascension, Unit=deg"``.
    """

    _description = "Coordinate axis"
    _attributes = (
        AttributeSpec("Label", str, "Coordinate axis", "Axis label"),
        AttributeSpec("Symbol", str, "", "Axis symbol"),
        AttributeSpec("Unit", str, "", "Axis units"),
        AttributeSpec("Digits", int, DEFAULT_DIGITS, "Default formatting precision", validator=require_non_negative),
        AttributeSpec("Format", str, lambda a: default_format(a._attr("digits")), "Format specifier"),
        AttributeSpec("Direction", bool, True, "Plot in conventional direction"),
        AttributeSpec("Top", float, math.inf, "Highest axis value to display"),
        AttributeSpec("Bottom", float, -math.inf, "Lowest axis value to display"),
    )

    label = attribute_property("Label")
    symbol = attribute_property("Symbol")
    unit = attribute_property("Unit")
    digits = attribute_property("Digits")
    direction = attribute_property("Direction")
    top = attribute_property("Top")
    bottom = attribute_property("Bottom")

    def __init__(self, options: str = ""):
        self._owner: Optional[weakref.ref] = None
        self._axis_index = 0
        super().__init__(options)

    def _attach(self, frame: Object, index: int) -> None:
        """Take unset label, symbol and digits defaults from axis ``index`` of frame."""
        self._owner = weakref.ref(frame)
        self._axis_index = index

    def _default(self, spec: AttributeSpec) -> Any:
        owner = self._owner() if self._owner is not None else None
        if owner is not None and spec.key in _OWNER_DEFAULT_KEYS:
            return owner._axis_default(spec.key, self._axis_index)
        return super()._default(spec)

    def _dump(self, dumper) -> None:
        self._dump_attributes(dumper, Axis)

    def format(self, value: float) -> str:
        """Format a value for display on this axis."""
        return format_value(self._attr("format"), value)

    def unformat(self, text: str) -> NReadValue:
        """Read a value formatted for this axis."""
        return read_value(text)
