"""Closed registry of object factories keyed by class name.

The Channel dispatches on the class name written after ``Begin`` in a
shown object. Each registered factory receives the parsed fields of that
object as a :class:`FieldSet` and returns a fully constructed instance.

The default registry holds every concrete class of the library. It is
built once, on first use, and frozen; callers that need other types pass
their own registry to the Channel.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterator, List, Optional

from astkit.common.attributes import from_text
from astkit.common.errors import (
    AstError,
    MalformedInputError,
    UnknownTypeError,
)

if TYPE_CHECKING:
    from astkit.objects.object import Object

Factory = Callable[["FieldSet"], "Object"]

STRING = "string"
NUMBER = "number"
OBJECT = "object"


@dataclass
class Field:
    """One ``name = value`` entry of a shown object.

    Attributes:
        name: Field name as written.
        kind: One of "string", "number" or "object".
        value: Unquoted text for strings and numbers, an Object otherwise.
        line_number: Source line the field started on.
    """

    name: str
    kind: str
    value: Any
    line_number: Optional[int] = None


_MISSING = object()


class FieldSet:
    """Parsed fields of one object, consumed by its factory.

    Keys are case-insensitive. Every ``pop_*`` accessor removes the field
    so that :meth:`ensure_consumed` can report anything left unexplained.
    """

    def __init__(self, class_name: str, line_number: Optional[int] = None):
        self.class_name = class_name
        self.line_number = line_number
        self._fields: Dict[str, Field] = {}

    def add(self, field: Field) -> None:
        key = field.name.lower()
        if key in self._fields:
            raise MalformedInputError(
                f"Duplicate field {field.name!r} in {self.class_name}", field.line_number
            )
        self._fields[key] = field

    def __contains__(self, name: str) -> bool:
        return name.lower() in self._fields

    def __len__(self) -> int:
        return len(self._fields)

    def __iter__(self) -> Iterator[Field]:
        return iter(list(self._fields.values()))

    def _pop(self, name: str, kind: str, default: Any) -> Any:
        field = self._fields.pop(name.lower(), None)
        if field is None:
            if default is _MISSING:
                raise MalformedInputError(
                    f"Missing required field {name!r} in {self.class_name}", self.line_number
                )
            return default
        if field.kind != kind:
            raise MalformedInputError(
                f"Field {field.name!r} in {self.class_name} should be a {kind}, got a {field.kind}",
                field.line_number,
            )
        return field

    def pop_str(self, name: str, default: Any = _MISSING) -> Any:
        field = self._pop(name, STRING, default)
        return field.value if isinstance(field, Field) else field

    def pop_int(self, name: str, default: Any = _MISSING) -> Any:
        field = self._pop(name, NUMBER, default)
        if not isinstance(field, Field):
            return field
        try:
            return int(field.value)
        except ValueError:
            raise MalformedInputError(
                f"Field {field.name!r} in {self.class_name} is not an integer: {field.value!r}",
                field.line_number,
            ) from None

    def pop_float(self, name: str, default: Any = _MISSING) -> Any:
        field = self._pop(name, NUMBER, default)
        if not isinstance(field, Field):
            return field
        try:
            return float(field.value)
        except ValueError:
            raise MalformedInputError(
                f"Field {field.name!r} in {self.class_name} is not a number: {field.value!r}",
                field.line_number,
            ) from None

    def pop_bool(self, name: str, default: Any = _MISSING) -> Any:
        if name not in self and default is not _MISSING:
            return default
        value = self.pop_int(name)
        if value not in (0, 1):
            raise MalformedInputError(
                f"Field {name!r} in {self.class_name} must be 0 or 1, got {value}",
                self.line_number,
            )
        return bool(value)

    def pop_object(self, name: str, expected: Optional[type] = None, default: Any = _MISSING) -> Any:
        field = self._pop(name, OBJECT, default)
        if not isinstance(field, Field):
            return field
        if expected is not None and not isinstance(field.value, expected):
            raise MalformedInputError(
                f"Field {field.name!r} in {self.class_name} should hold a "
                f"{expected.__name__}, got a {field.value.class_name}",
                field.line_number,
            )
        return field.value

    def restore_attributes(self, obj: "Object") -> None:
        """Apply every remaining field that names a settable attribute of obj.

        Raises:
            MalformedInputError: If a value has the wrong kind or is rejected
                by the attribute.
        """
        for key, spec in type(obj).attribute_specs().items():
            if spec.readonly or key not in self._fields:
                continue
            expected = STRING if spec.kind is str else NUMBER
            field = self._pop(spec.name, expected, _MISSING)
            try:
                value = field.value if spec.kind is str else from_text(field.value, spec.kind)
                obj._set_attribute(spec.name, value)
            except (AstError, ValueError) as e:
                raise MalformedInputError(
                    f"Bad value for {spec.name} in {self.class_name}: {e}", field.line_number
                ) from e

    def ensure_consumed(self) -> None:
        """Raise if any field was not used by the factory."""
        if self._fields:
            field = next(iter(self._fields.values()))
            raise MalformedInputError(
                f"Unexpected field {field.name!r} in {self.class_name}", field.line_number
            )


class TypeRegistry:
    """Mapping from class name to object factory.

    Factories are registered while the registry is being set up; after
    :meth:`freeze` it is read-only and safe to share between threads.
    """

    def __init__(self) -> None:
        self._factories: Dict[str, Factory] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def register(self, name: str, factory: Factory) -> None:
        """Register a factory for a class name.

        Raises:
            RuntimeError: If the registry has been frozen.
            ValueError: If the name is already registered.
        """
        if self._frozen:
            raise RuntimeError(f"Cannot register {name!r}: registry is frozen")
        if name in self._factories:
            raise ValueError(f"Class {name!r} is already registered")
        self._factories[name] = factory

    def freeze(self) -> None:
        self._frozen = True

    def lookup(self, name: str) -> Factory:
        """Return the factory for a class name.

        Raises:
            UnknownTypeError: If no factory is registered under that name.
        """
        try:
            return self._factories[name]
        except KeyError:
            raise UnknownTypeError(name) from None

    def names(self) -> List[str]:
        return sorted(self._factories)

    def __contains__(self, name: str) -> bool:
        return name in self._factories

    def __len__(self) -> int:
        return len(self._factories)


_default_registry: Optional[TypeRegistry] = None
_default_lock = threading.Lock()


def default_registry() -> TypeRegistry:
    """Return the frozen registry of all library classes."""
    global _default_registry

    if _default_registry is not None:
        return _default_registry

    with _default_lock:
        if _default_registry is None:
            from astkit.objects import CONCRETE_CLASSES

            registry = TypeRegistry()
            for cls in CONCRETE_CLASSES:
                registry.register(cls.__name__, cls._from_fields)
            registry.freeze()
            _default_registry = registry

    return _default_registry
