"""astkit: astrometric objects and their textual channel format.

Objects such as Frame and the simple Mappings can be shown as text and
rebuilt from that text, pickled, copied and compared by value.
"""

__version__ = "0.1.0"
__author__ = "astkit developers"

from astkit.common.errors import (
    AstError,
    MalformedInputError,
    UnknownTypeError,
    UnknownAttributeError,
    InvalidAttributeValueError,
)
from astkit.objects import (
    Object,
    ObjectMaker,
    Mapping,
    UnitMap,
    ZoomMap,
    ShiftMap,
    Axis,
    NReadValue,
    Frame,
)
from astkit.io.channel import Channel
from astkit.io.stream import StringStream, FileStream
from astkit.io.dispatch import from_serialized_form

__all__ = [
    "__version__",
    "AstError",
    "MalformedInputError",
    "UnknownTypeError",
    "UnknownAttributeError",
    "InvalidAttributeValueError",
    "Object",
    "ObjectMaker",
    "Mapping",
    "UnitMap",
    "ZoomMap",
    "ShiftMap",
    "Axis",
    "NReadValue",
    "Frame",
    "Channel",
    "StringStream",
    "FileStream",
    "from_serialized_form",
]
