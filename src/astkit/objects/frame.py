"""Coordinate system descriptions.

A Frame describes an n-dimensional coordinate system: its title, domain,
epoch, observer location and, through one nested Axis per coordinate, the
label, unit and format of each axis. As a Mapping a Frame is the identity
on its ``naxes`` coordinates.

Axis attributes are addressed with a 1-based index::

    frame = Frame(2, "Title=Focal plane, Unit(1)=mm, Unit(2)=mm")
    frame.get("Unit(1)")          # 'mm'
    frame.set_label(2, "Y")
"""

from __future__ import annotations

import re
from typing import Any, List, Optional, Union

from astkit.common.attributes import (
    AttributeSpec,
    attribute_property,
    require_non_negative,
)
from astkit.common.errors import (
    AstError,
    InvalidAttributeValueError,
    MalformedInputError,
    UnknownAttributeError,
)
from astkit.objects.axis import (
    DEFAULT_DIGITS,
    Axis,
    NReadValue,
    default_format,
    format_value,
    read_value,
)
from astkit.objects.mapping import Mapping

# Epochs given without a B or J prefix are Besselian below this year
BESSELIAN_LIMIT = 1984.0

_EPOCH_RE = re.compile(r"^\s*([BJbj]?)\s*([+-]?\d+(?:\.\d*)?(?:[eE][+-]?\d+)?)\s*$")

# Attributes stored on the nested Axis objects
AXIS_KEYS = ("label", "symbol", "unit", "format", "digits", "direction", "top", "bottom")
_AXIS_READONLY_KEYS = ("internalunit", "normunit")


def besselian_to_julian(epoch: float) -> float:
    """Convert a Besselian epoch to the equivalent Julian epoch."""
    mjd = 15019.81352 + (epoch - 1900.0) * 365.242198781
    return 2000.0 + (mjd - 51544.5) / 365.25


def parse_epoch(text: str) -> float:
    """Parse an epoch string such as ``"J2000"``, ``"B1950"`` or ``"2010.5"``.

    Returns:
        The epoch as a Julian epoch.

    Raises:
        InvalidAttributeValueError: If the text is not a valid epoch.
    """
    match = _EPOCH_RE.match(text)
    if match is None:
        raise InvalidAttributeValueError(f"Invalid epoch: {text!r}")
    prefix = match.group(1).upper()
    value = float(match.group(2))
    if prefix == "B" or (not prefix and value < BESSELIAN_LIMIT):
        return besselian_to_julian(value)
    return value


def _require_cartesian(value: str) -> None:
    if value.strip().lower() != "cartesian":
        raise InvalidAttributeValueError(
            f"Frame only supports the Cartesian system, got {value!r}"
        )


class Frame(Mapping):
    """Coordinate system description.

    Args:
        naxes: Number of axes.
        options: Attribute settings, e.g. ``"Title=Sky, Label(1)=RA"``.

    Raises:
        ValueError: If naxes is less than 1.
    """

    _description = "Coordinate system description"
    _attributes = (
        AttributeSpec("Naxes", int, lambda f: f.n_axes, "Number of coordinate axes", readonly=True),
        AttributeSpec("Title", str, lambda f: f"{f.n_axes}-d coordinate system", "Title of coordinate system"),
        AttributeSpec("Domain", str, "", "Coordinate system domain"),
        AttributeSpec("Epoch", float, 2000.0, "Julian epoch of observation"),
        AttributeSpec("System", str, "Cartesian", "Coordinate system type", validator=_require_cartesian),
        AttributeSpec("AlignSystem", str, "Cartesian", "Alignment coordinate system", validator=_require_cartesian),
        AttributeSpec("ActiveUnit", bool, False, "Unit strings active?"),
        AttributeSpec("Dut1", float, 0.0, "UT1-UTC in seconds"),
        AttributeSpec("MatchEnd", bool, False, "Match trailing axes?"),
        AttributeSpec("MaxAxes", int, lambda f: f.n_axes, "Maximum number of axes", validator=require_non_negative),
        AttributeSpec("MinAxes", int, lambda f: f.n_axes, "Minimum number of axes", validator=require_non_negative),
        AttributeSpec("ObsAlt", float, 0.0, "Observers geodetic altitude (metres)"),
        AttributeSpec("ObsLat", str, "N0:00:00.00", "Observers geodetic latitude"),
        AttributeSpec("ObsLon", str, "E0:00:00.00", "Observers geodetic longitude"),
        AttributeSpec("Permute", bool, True, "Permute axis order?"),
        AttributeSpec("PreserveAxes", bool, False, "Preserve axes?"),
        AttributeSpec("Digits", int, DEFAULT_DIGITS, "Default formatting precision", validator=require_non_negative),
    )

    def __init__(self, naxes: int, options: str = ""):
        if naxes < 1:
            raise ValueError(f"A Frame needs at least one axis, got {naxes}")
        self._axes: List[Axis] = []
        for i in range(1, naxes + 1):
            self._add_axis(Axis(), i)
        super().__init__(naxes, naxes, options)

    def _add_axis(self, axis: Axis, index: int) -> None:
        axis._attach(self, index)
        if index <= len(self._axes):
            self._axes[index - 1] = axis
        else:
            self._axes.append(axis)

    title = attribute_property("Title")
    domain = attribute_property("Domain")
    epoch = attribute_property("Epoch")
    system = attribute_property("System")
    align_system = attribute_property("AlignSystem")
    active_unit = attribute_property("ActiveUnit")
    dut1 = attribute_property("Dut1")
    match_end = attribute_property("MatchEnd")
    max_axes = attribute_property("MaxAxes")
    min_axes = attribute_property("MinAxes")
    obs_alt = attribute_property("ObsAlt")
    obs_lat = attribute_property("ObsLat")
    obs_lon = attribute_property("ObsLon")
    permute = attribute_property("Permute")
    preserve_axes = attribute_property("PreserveAxes")

    @property
    def n_axes(self) -> int:
        return len(self._axes)

    def get_axis(self, axis: int) -> Axis:
        """Return the Axis object for a 1-based axis index.

        Raises:
            IndexError: If the index is out of range.
        """
        if not 1 <= axis <= len(self._axes):
            raise IndexError(f"Axis {axis} out of range 1-{len(self._axes)}")
        return self._axes[axis - 1]

    # Indexed attribute routing

    def _axis_default(self, key: str, axis: int) -> Any:
        if key == "label":
            return f"Axis {axis}"
        if key == "symbol":
            return f"x{axis}"
        if key == "digits":
            return self._attr("digits")
        if key == "format":
            return default_format(self._axis_value("digits", axis))
        return self.get_axis(axis)._attr(key)

    def _axis_value(self, key: str, axis: int) -> Any:
        ax = self.get_axis(axis)
        if ax.test(key):
            return ax.get(key)
        return self._axis_default(key, axis)

    def _check_axis_key(self, key: str, index: Optional[int], readonly_ok: bool) -> bool:
        """Return True if key/index address an axis attribute."""
        if index is None:
            if (key in AXIS_KEYS and key != "digits") or key in _AXIS_READONLY_KEYS:
                raise UnknownAttributeError(f"Attribute {key!r} of Frame needs an axis index")
            return False
        if key in AXIS_KEYS:
            return True
        if key in _AXIS_READONLY_KEYS:
            if not readonly_ok:
                raise UnknownAttributeError(f"Attribute {key!r} of Frame is read-only")
            return True
        raise UnknownAttributeError(f"Attribute {key!r} of Frame takes no axis index")

    def _get_attribute(self, key: str, index: Optional[int]) -> Any:
        if self._check_axis_key(key, index, readonly_ok=True):
            if key in _AXIS_READONLY_KEYS:
                return self._axis_value("unit", index)
            if not self.get_axis(index).test(key) and not self._uses_defaults():
                raise AstError(
                    f"No value has been set for {key}({index}) of {self.class_name} and UseDefs is off"
                )
            return self._axis_value(key, index)
        return super()._get_attribute(key, index)

    def _set_parsed(self, key: str, index: Optional[int], value: Any) -> None:
        if self._check_axis_key(key, index, readonly_ok=False):
            self.get_axis(index)._set_parsed(key, None, value)
            return
        if key == "epoch" and isinstance(value, str):
            value = parse_epoch(value)
        super()._set_parsed(key, index, value)

    def _clear_parsed(self, key: str, index: Optional[int]) -> None:
        if self._check_axis_key(key, index, readonly_ok=False):
            self.get_axis(index)._clear_parsed(key, None)
            return
        super()._clear_parsed(key, index)

    def _test_parsed(self, key: str, index: Optional[int]) -> bool:
        if self._check_axis_key(key, index, readonly_ok=True):
            if key in _AXIS_READONLY_KEYS:
                return False
            return self.get_axis(index).test(key)
        return super()._test_parsed(key, index)

    # Per-axis accessors

    def get_label(self, axis: int) -> str:
        return self._get_attribute("label", axis)

    def set_label(self, axis: int, label: str) -> None:
        self.get_axis(axis).label = label

    def get_symbol(self, axis: int) -> str:
        return self._get_attribute("symbol", axis)

    def set_symbol(self, axis: int, symbol: str) -> None:
        self.get_axis(axis).symbol = symbol

    def get_unit(self, axis: int) -> str:
        return self._get_attribute("unit", axis)

    def set_unit(self, axis: int, unit: str) -> None:
        self.get_axis(axis).unit = unit

    def get_internal_unit(self, axis: int) -> str:
        """Unit used internally; the same as the axis unit for a basic Frame."""
        return self.get_unit(axis)

    def get_norm_unit(self, axis: int) -> str:
        """Normalised unit string; the same as the axis unit for a basic Frame."""
        return self.get_unit(axis)

    def get_format(self, axis: int) -> str:
        return self._get_attribute("format", axis)

    def set_format(self, axis: int, fmt: str) -> None:
        self.get_axis(axis)._set_attribute("Format", fmt)

    def get_digits(self, axis: Optional[int] = None) -> int:
        """Formatting precision of one axis, or of the Frame if no axis is given."""
        if axis is None:
            return self.get("Digits")
        return self._get_attribute("digits", axis)

    def set_digits(self, *args: int) -> None:
        """Set the formatting precision.

        Called as ``set_digits(digits)`` this sets the Frame's Digits, which
        every axis without its own Digits follows. Called as
        ``set_digits(axis, digits)`` it sets the Digits of one axis.
        """
        if len(args) == 1:
            self._set_attribute("Digits", args[0])
        elif len(args) == 2:
            axis, digits = args
            self.get_axis(axis).digits = digits
        else:
            raise TypeError(f"set_digits takes (digits) or (axis, digits), got {len(args)} arguments")

    def get_direction(self, axis: int) -> bool:
        return self._get_attribute("direction", axis)

    def set_direction(self, direction: bool, axis: int) -> None:
        self.get_axis(axis).direction = direction

    def get_top(self, axis: int) -> float:
        return self._get_attribute("top", axis)

    def set_top(self, axis: int, top: float) -> None:
        self.get_axis(axis).top = top

    def get_bottom(self, axis: int) -> float:
        return self._get_attribute("bottom", axis)

    def set_bottom(self, axis: int, bottom: float) -> None:
        self.get_axis(axis).bottom = bottom

    def set_epoch(self, epoch: Union[float, str]) -> None:
        """Set the epoch from a number or a string such as ``"B1950"``."""
        self._set_attribute("Epoch", epoch)

    def format(self, axis: int, value: float) -> str:
        """Format a coordinate value for display on the given axis."""
        return format_value(self._axis_value("format", axis), value)

    def unformat(self, axis: int, text: str) -> NReadValue:
        """Read a coordinate value formatted for the given axis."""
        self.get_axis(axis)  # range check
        return read_value(text)

    # Mapping and serialization

    def _transform(self, points, forward):
        return points.copy()

    def _dump(self, dumper) -> None:
        dumper.field("Naxes", self.n_axes, "Number of coordinate axes")
        self._dump_attributes(dumper, Frame)
        for i, axis in enumerate(self._axes, start=1):
            dumper.child(f"Ax{i}", axis, f"Axis number {i}")

    @classmethod
    def _from_fields(cls, fields) -> "Frame":
        naxes = fields.pop_int("Naxes")
        if naxes < 1:
            raise MalformedInputError(f"Frame needs at least one axis, got Naxes = {naxes}", fields.line_number)
        nin = cls._pop_square_coords(fields)
        if nin != naxes:
            raise MalformedInputError(
                f"Frame has Naxes = {naxes} but Nin = {nin}", fields.line_number
            )
        # Every axis is written as its own Ax<i> field
        if naxes > len(fields) or any(f"Ax{i}" not in fields for i in range(1, naxes + 1)):
            raise MalformedInputError(
                f"Frame with Naxes = {naxes} is missing axis fields", fields.line_number
            )

        frame = cls(naxes)
        for i in range(1, naxes + 1):
            frame._add_axis(fields.pop_object(f"Ax{i}", Axis), i)
        fields.restore_attributes(frame)
        return frame
