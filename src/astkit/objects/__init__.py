"""Object model: the base Object, coordinate Mappings, Axis and Frame."""

from astkit.objects.object import Object, ObjectMaker
from astkit.objects.mapping import Mapping, UnitMap, ZoomMap, ShiftMap
from astkit.objects.axis import Axis, NReadValue
from astkit.objects.frame import Frame

# Every class that can appear after "Begin" in a shown object
CONCRETE_CLASSES = (
    Object,
    Axis,
    Frame,
    UnitMap,
    ZoomMap,
    ShiftMap,
)

__all__ = [
    "Object",
    "ObjectMaker",
    "Mapping",
    "UnitMap",
    "ZoomMap",
    "ShiftMap",
    "Axis",
    "NReadValue",
    "Frame",
    "CONCRETE_CLASSES",
]
