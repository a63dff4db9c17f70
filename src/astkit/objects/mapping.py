"""Coordinate mappings.

A Mapping transforms points between an input space of ``nin`` coordinates
and an output space of ``nout`` coordinates. Points are passed as numpy
arrays of shape ``(ncoord, npoints)``.

Only the simple mappings needed by the rest of the library live here:

- UnitMap: copies its input unchanged.
- ZoomMap: scales every coordinate by the same factor.
- ShiftMap: adds a fixed offset to each coordinate.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from astkit.common.attributes import (
    AttributeSpec,
    attribute_property,
    require_nonzero,
)
from astkit.common.errors import AstError, MalformedInputError
from astkit.common.logging import get_logger
from astkit.objects.object import Object

logger = get_logger(__name__)


class Mapping(Object):
    """Abstract base of all coordinate mappings.

    Args:
        nin: Number of input coordinates.
        nout: Number of output coordinates.
        options: Attribute settings, e.g. ``"Invert=1"``.

    Raises:
        TypeError: If Mapping itself is instantiated.
        ValueError: If nin or nout is less than 1.
    """

    _description = "Mapping between coordinate systems"
    _attributes = (
        AttributeSpec("Nin", int, lambda m: m.nin, "Number of input coordinates", readonly=True),
        AttributeSpec("Nout", int, lambda m: m.nout, "Number of output coordinates", readonly=True),
        AttributeSpec("TranForward", bool, lambda m: m.has_forward, "Forward transformation defined", readonly=True),
        AttributeSpec("TranInverse", bool, lambda m: m.has_inverse, "Inverse transformation defined", readonly=True),
        AttributeSpec("Invert", bool, False, "Mapping inverted?"),
        AttributeSpec("Report", bool, False, "Report transformed coordinates?"),
    )

    def __init__(self, nin: int, nout: int, options: str = ""):
        if type(self) is Mapping:
            raise TypeError("Mapping is abstract; use one of its subclasses")
        if nin < 1 or nout < 1:
            raise ValueError(f"A Mapping needs at least one coordinate, got nin={nin}, nout={nout}")
        self._nin = int(nin)
        self._nout = int(nout)
        super().__init__(options)

    invert = attribute_property("Invert")
    report = attribute_property("Report")

    @property
    def is_inverted(self) -> bool:
        return self._attr("invert")

    @property
    def nin(self) -> int:
        return self._nout if self.is_inverted else self._nin

    @property
    def nout(self) -> int:
        return self._nin if self.is_inverted else self._nout

    @property
    def has_forward(self) -> bool:
        return True

    @property
    def has_inverse(self) -> bool:
        return True

    def inverted(self) -> "Mapping":
        """Return an inverted copy of this mapping."""
        new = self.copy()
        new.invert = not self.is_inverted
        return new

    def apply_forward(self, points: NDArray[np.float64]) -> NDArray[np.float64]:
        """Transform points in the forward direction.

        Args:
            points: Array of shape (nin, npoints).

        Returns:
            Array of shape (nout, npoints).

        Raises:
            ValueError: If points has the wrong shape.
        """
        return self._apply(points, forward=True)

    def apply_inverse(self, points: NDArray[np.float64]) -> NDArray[np.float64]:
        """Transform points in the inverse direction.

        Args:
            points: Array of shape (nout, npoints).

        Returns:
            Array of shape (nin, npoints).

        Raises:
            ValueError: If points has the wrong shape.
        """
        return self._apply(points, forward=False)

    def _apply(self, points: NDArray[np.float64], forward: bool) -> NDArray[np.float64]:
        points = np.asarray(points, dtype=np.float64)
        expected = self.nin if forward else self.nout

        if points.ndim != 2 or points.shape[0] != expected:
            raise ValueError(
                f"Expected points of shape ({expected}, npoints), got {points.shape}"
            )

        # Inversion swaps which internal direction is used
        internal_forward = forward != self.is_inverted
        if internal_forward and not self.has_forward:
            raise AstError(f"{self.class_name} has no forward transformation")
        if not internal_forward and not self.has_inverse:
            raise AstError(f"{self.class_name} has no inverse transformation")

        result = self._transform(points, internal_forward)

        if self._attr("report"):
            direction = "forward" if forward else "inverse"
            for i in range(points.shape[1]):
                logger.info(
                    f"{self.class_name} {direction}: "
                    f"{tuple(points[:, i].tolist())} -> {tuple(result[:, i].tolist())}"
                )
        return result

    def _transform(self, points: NDArray[np.float64], forward: bool) -> NDArray[np.float64]:
        raise NotImplementedError

    def _dump(self, dumper) -> None:
        dumper.field("Nin", self._nin, "Number of input coordinates")
        if self._nout != self._nin:
            dumper.field("Nout", self._nout, "Number of output coordinates")
        self._dump_attributes(dumper, Mapping)

    @staticmethod
    def _pop_square_coords(fields) -> int:
        """Read the coordinate count of a mapping with nin == nout."""
        nin = fields.pop_int("Nin")
        nout = fields.pop_int("Nout", nin)
        if nout != nin:
            raise MalformedInputError(
                f"{fields.class_name} needs Nin == Nout, got {nin} and {nout}", fields.line_number
            )
        return nin


class UnitMap(Mapping):
    """Mapping that leaves coordinates unchanged.

    Args:
        ncoord: Number of input and output coordinates.
        options: Attribute settings.
    """

    _description = "Unit (null) Mapping"

    def __init__(self, ncoord: int, options: str = ""):
        super().__init__(ncoord, ncoord, options)

    def _transform(self, points, forward):
        return points.copy()

    @classmethod
    def _from_fields(cls, fields) -> "UnitMap":
        obj = cls(cls._pop_square_coords(fields))
        fields.restore_attributes(obj)
        return obj


class ZoomMap(Mapping):
    """Mapping that multiplies every coordinate by a zoom factor.

    Args:
        ncoord: Number of input and output coordinates.
        zoom: Zoom factor; must not be zero.
        options: Attribute settings.

    Raises:
        InvalidAttributeValueError: If zoom is zero.
    """

    _description = "Zoom about the origin"
    _attributes = (
        AttributeSpec("Zoom", float, 1.0, "Zoom factor", validator=require_nonzero),
    )

    def __init__(self, ncoord: int, zoom: float, options: str = ""):
        super().__init__(ncoord, ncoord)
        self._set_attribute("Zoom", zoom)
        if options:
            self.set(options)

    zoom = attribute_property("Zoom")

    def _transform(self, points, forward):
        if forward:
            return points * self._attr("zoom")
        return points / self._attr("zoom")

    def _dump(self, dumper) -> None:
        dumper.field("Zoom", self._attr("zoom"), "Zoom factor")

    @classmethod
    def _from_fields(cls, fields) -> "ZoomMap":
        obj = cls(cls._pop_square_coords(fields), fields.pop_float("Zoom"))
        fields.restore_attributes(obj)
        return obj


class ShiftMap(Mapping):
    """Mapping that adds a fixed shift to each coordinate.

    Args:
        shift: One shift per coordinate.
        options: Attribute settings.

    Raises:
        ValueError: If shift is empty or not one-dimensional.
    """

    _description = "Shift of origin"

    def __init__(self, shift: Sequence[float], options: str = ""):
        shift_array = np.asarray(shift, dtype=np.float64)
        if shift_array.ndim != 1 or shift_array.size == 0:
            raise ValueError(f"Expected a non-empty 1-d shift, got shape {shift_array.shape}")
        self._shift = shift_array.copy()
        super().__init__(shift_array.size, shift_array.size, options)

    def get_shift(self) -> NDArray[np.float64]:
        """Return a copy of the shift vector."""
        return self._shift.copy()

    def _transform(self, points, forward):
        if forward:
            return points + self._shift[:, np.newaxis]
        return points - self._shift[:, np.newaxis]

    def _dump(self, dumper) -> None:
        for i, value in enumerate(self._shift, start=1):
            dumper.field(f"Sft{i}", float(value), f"Shift for axis {i}")

    @classmethod
    def _from_fields(cls, fields) -> "ShiftMap":
        nin = cls._pop_square_coords(fields)
        if nin > len(fields):
            raise MalformedInputError(
                f"ShiftMap with Nin = {nin} has only {len(fields)} remaining fields", fields.line_number
            )
        shift = [fields.pop_float(f"Sft{i}") for i in range(1, nin + 1)]
        obj = cls(shift)
        fields.restore_attributes(obj)
        return obj
