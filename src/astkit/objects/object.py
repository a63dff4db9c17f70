"""Base class of every astkit object.

Object provides the behaviour shared by all library classes:

- named attributes with defaults (``get``, ``set``, ``clear``, ``test``),
- serialization to the show format and reconstruction from it,
- value equality based on the shown form,
- pickling and copying through the shown form,
- a per-object lock and a live-instance count per class.

Example:
    >>> obj = Object("Ident=guide")
    >>> text = obj.show()
    >>> Object.from_string(text) == obj
    True
"""

from __future__ import annotations

import copy as _copy
import sys
import threading
import weakref
from typing import Any, Dict, List, Optional, Tuple

from astkit.common.attributes import (
    AttributeSpec,
    attribute_property,
    parse_options,
    split_name,
)
from astkit.common.errors import (
    AstError,
    InvalidAttributeValueError,
    UnknownAttributeError,
)

class ObjectMaker:
    """Rebuild an Object from the text produced by ``Object.show``.

    This is the callable returned by ``Object.__reduce__``, so that any
    object can be pickled as its shown form. It is itself picklable.
    """

    def __call__(self, state: str) -> "Object":
        from astkit.io.dispatch import from_serialized_form

        return from_serialized_form(state)

    def __reduce__(self):
        return (ObjectMaker, ())

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ObjectMaker)

    def __hash__(self) -> int:
        return hash(ObjectMaker)


class Object:
    """Base object from which all astkit classes derive.

    Args:
        options: Comma separated attribute settings applied after
            construction, e.g. ``"ID=a1, Ident=guide"``.

    Attributes are stored only when set; reading an unset attribute
    returns its default unless ``UseDefs`` has been turned off.
    """

    _description = "Base object"
    _attributes: Tuple[AttributeSpec, ...] = (
        AttributeSpec("ID", str, "", "Object identification string"),
        AttributeSpec("Ident", str, "", "Permanent Object identification string"),
        AttributeSpec("UseDefs", bool, True, "Use default values for unspecified attributes"),
    )

    # Keyed by id(); instances are unhashable
    _live: "weakref.WeakValueDictionary[int, Object]" = weakref.WeakValueDictionary()

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        cls._live = weakref.WeakValueDictionary()
        cls._spec_cache = None

    def __init__(self, options: str = ""):
        self._values: Dict[str, Any] = {}
        self._lock = threading.RLock()
        type(self)._live[id(self)] = self
        if options:
            self.set(options)

    # Class structure

    @classmethod
    def class_levels(cls) -> List[type]:
        """Classes from Object down to this class, base first."""
        return [klass for klass in reversed(cls.__mro__) if issubclass(klass, Object)]

    @classmethod
    def attribute_specs(cls) -> Dict[str, AttributeSpec]:
        """All attribute specs of this class, keyed by lower-case name."""
        cached = cls.__dict__.get("_spec_cache")
        if cached is None:
            cached = {}
            for klass in cls.class_levels():
                for spec in klass.__dict__.get("_attributes", ()):
                    cached[spec.key] = spec
            cls._spec_cache = cached
        return cached

    @property
    def class_name(self) -> str:
        return type(self).__name__

    # Generic attribute access

    def _find_spec(self, key: str) -> AttributeSpec:
        spec = type(self).attribute_specs().get(key)
        if spec is None:
            raise UnknownAttributeError(f"{self.class_name} has no attribute {key!r}")
        return spec

    def _get_attribute(self, key: str, index: Optional[int]) -> Any:
        if index is not None:
            raise UnknownAttributeError(f"Attribute {key!r} of {self.class_name} takes no axis index")
        spec = self._find_spec(key)
        if key in self._values:
            return self._values[key]
        if not spec.readonly and not self._uses_defaults():
            raise AstError(
                f"No value has been set for {spec.name} of {self.class_name} and UseDefs is off"
            )
        return self._default(spec)

    def _set_parsed(self, key: str, index: Optional[int], value: Any) -> None:
        if index is not None:
            raise UnknownAttributeError(f"Attribute {key!r} of {self.class_name} takes no axis index")
        spec = self._find_spec(key)
        if spec.readonly:
            raise UnknownAttributeError(f"Attribute {spec.name} of {self.class_name} is read-only")
        self._values[key] = spec.coerce(value)

    def _clear_parsed(self, key: str, index: Optional[int]) -> None:
        if index is not None:
            raise UnknownAttributeError(f"Attribute {key!r} of {self.class_name} takes no axis index")
        spec = self._find_spec(key)
        if spec.readonly:
            raise UnknownAttributeError(f"Attribute {spec.name} of {self.class_name} is read-only")
        self._values.pop(key, None)

    def _test_parsed(self, key: str, index: Optional[int]) -> bool:
        if index is not None:
            raise UnknownAttributeError(f"Attribute {key!r} of {self.class_name} takes no axis index")
        spec = self._find_spec(key)
        return not spec.readonly and key in self._values

    def _attr(self, key: str) -> Any:
        """Current value of an attribute by lower-case key, ignoring UseDefs."""
        if key in self._values:
            return self._values[key]
        return self._default(self._find_spec(key))

    def _default(self, spec: AttributeSpec) -> Any:
        return spec.default_for(self)

    def _uses_defaults(self) -> bool:
        return self._values.get("usedefs", True)

    def _set_attribute(self, name: str, value: Any) -> None:
        key, index = split_name(name)
        self._set_parsed(key, index, value)

    def get(self, name: str) -> Any:
        """Return the value of a named attribute.

        Raises:
            UnknownAttributeError: If the object has no such attribute.
            AstError: If the attribute is unset and ``UseDefs`` is off.
        """
        key, index = split_name(name)
        return self._get_attribute(key, index)

    def set(self, settings: str) -> None:
        """Set attributes from a ``"name=value, name=value"`` string.

        Raises:
            UnknownAttributeError: If a name is unknown or read-only.
            InvalidAttributeValueError: If a value cannot be used.
        """
        for name, value in parse_options(settings):
            self._set_attribute(name, value)

    def clear(self, attrib: str) -> None:
        """Clear an attribute so that it reverts to its default."""
        key, index = split_name(attrib)
        self._clear_parsed(key, index)

    def test(self, attrib: str) -> bool:
        """Return True if the attribute has been explicitly set."""
        key, index = split_name(attrib)
        return self._test_parsed(key, index)

    def has_attribute(self, attrib: str) -> bool:
        """Return True if the object recognises the attribute name."""
        try:
            self.get(attrib)
        except (UnknownAttributeError, InvalidAttributeValueError, IndexError):
            return False
        except AstError:
            # Unset with UseDefs off, but the attribute exists
            return True
        return True

    id = attribute_property("ID")
    ident = attribute_property("Ident")
    use_defs = attribute_property("UseDefs")

    # Serialization

    def _dump_attributes(self, dumper, klass: type) -> None:
        """Write the settable attributes declared by one class level."""
        for spec in klass.__dict__.get("_attributes", ()):
            if spec.readonly:
                continue
            if spec.key in self._values:
                dumper.field(spec.name, self._values[spec.key], spec.comment, True)
            else:
                dumper.field(spec.name, self._default(spec), spec.comment, False)

    def _dump(self, dumper) -> None:
        self._dump_attributes(dumper, Object)

    @classmethod
    def _from_fields(cls, fields) -> "Object":
        obj = cls()
        fields.restore_attributes(obj)
        return obj

    def show(self, show_comments: bool = True) -> str:
        """Return the object in the textual show format.

        Args:
            show_comments: Include descriptive comments and the defaulted
                attributes (as commented-out lines).
        """
        from astkit.io.channel import Channel
        from astkit.io.config import ChannelConfig
        from astkit.io.stream import StringStream

        stream = StringStream()
        Channel(stream, ChannelConfig.for_show(show_comments)).write(self)
        return stream.get_sink_string()

    @staticmethod
    def from_string(text: str) -> "Object":
        """Construct an object from the text produced by :meth:`show`.

        Raises:
            UnknownTypeError: If the text names an unknown class.
            MalformedInputError: If the text is truncated or inconsistent.
        """
        from astkit.io.dispatch import from_serialized_form

        return from_serialized_form(text)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the set fields to a dictionary, keyed by field name."""
        from astkit.io.channel import DictDumper

        dumper = DictDumper(self.class_name)
        for klass in self.class_levels():
            dump = klass.__dict__.get("_dump")
            if dump is not None:
                dump(self, dumper)
        return dumper.data

    @property
    def obj_size(self) -> int:
        """Size in bytes of the compact shown form."""
        return len(self.show(False).encode("utf-8"))

    # Identity, copying and life cycle

    def copy(self) -> "Object":
        """Return a deep, independent copy. The ID attribute is not copied."""
        new = _copy.deepcopy(self)
        new._values.pop("id", None)
        return new

    def same(self, other: "Object") -> bool:
        """Return True if other is this very object."""
        return self is other

    def get_n_object(self) -> int:
        """Number of live instances of this object's class."""
        return len(type(self)._live)

    def get_ref_count(self) -> int:
        """Number of references held to this object.

        References made by this call itself are not counted. The count is
        CPython's, so it includes references held by containers and frames.
        """
        return sys.getrefcount(self) - 2

    def lock(self, wait: bool = True) -> None:
        """Lock the object for use by the calling thread.

        Args:
            wait: Block until the lock is available. If False and another
                thread holds the lock, raise instead.

        Raises:
            AstError: If ``wait`` is False and the object is locked elsewhere.
        """
        if not self._lock.acquire(blocking=wait):
            raise AstError(f"{self.class_name} is locked by another thread")

    def unlock(self, report: bool = False) -> None:
        """Release a lock taken with :meth:`lock`.

        Raises:
            AstError: If ``report`` is set and the calling thread does not
                hold the lock.
        """
        try:
            self._lock.release()
        except RuntimeError:
            if report:
                raise AstError(f"{self.class_name} is not locked by this thread") from None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Object):
            return NotImplemented
        return type(self) is type(other) and self.show(False) == other.show(False)

    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    __hash__ = None

    def __str__(self) -> str:
        return self.class_name

    def __repr__(self) -> str:
        return f"astkit.{self.class_name}"

    def __reduce__(self):
        return (ObjectMaker(), (self.show(False),))
