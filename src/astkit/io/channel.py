"""Channel: reads and writes objects in the textual show format.

A shown object looks like this::

     Begin Frame 	# Coordinate system description
    #   Ident = "" 	# Permanent Object identification string
     IsA Object 	# Base object
        Nin = 2 	# Number of input coordinates
     IsA Mapping 	# Mapping between coordinate systems
        Naxes = 2 	# Number of coordinate axes
        Title = "Sky" 	# Title of coordinate system
        Ax1 = 	# Axis number 1
           Begin Axis 	# Coordinate axis
           End Axis
        ...
     End Frame

The word after ``Begin`` is the type discriminator. Each class level from
``Object`` down writes its own fields, followed by an ``IsA`` marker for
every level but the last. A field with an empty value is followed by a
nested object. Lines starting with ``#`` are comments; in particular,
defaulted attributes are written commented out and so are never read back.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

from astkit.common.attributes import to_text
from astkit.common.errors import AstError, MalformedInputError
from astkit.common.logging import get_logger
from astkit.io.config import ChannelConfig
from astkit.io.registry import (
    NUMBER,
    OBJECT,
    STRING,
    Field,
    FieldSet,
    TypeRegistry,
    default_registry,
)
from astkit.io.stream import Stream

if TYPE_CHECKING:
    from astkit.objects.object import Object

logger = get_logger(__name__)

MAX_DEPTH = 64

_FIELD_NAME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_]*(\(\d+\))?$")
_CLASS_NAME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")

_ESCAPES = {'"': '"', "\\": "\\", "n": "\n", "r": "\r"}

# Characters str.splitlines() breaks on, written as \uXXXX so a value stays on one line
_LINE_BREAKS = "\x0b\x0c\x1c\x1d\x1e\x85\u2028\u2029"
_HEX_DIGITS = set("0123456789abcdefABCDEF")


def quote(text: str) -> str:
    """Quote a string value for the show format."""
    escaped = (
        text.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )
    for c in _LINE_BREAKS:
        escaped = escaped.replace(c, f"\\u{ord(c):04x}")
    return f'"{escaped}"'


def _unquote(text: str, line_number: int) -> Tuple[str, str]:
    """Parse a quoted string at the start of text.

    Returns:
        Tuple of (decoded string, remainder after the closing quote).
    """
    chars: List[str] = []
    i = 1
    while i < len(text):
        c = text[i]
        if c == "\\":
            escape = text[i + 1] if i + 1 < len(text) else ""
            if escape == "u":
                digits = text[i + 2:i + 6]
                if len(digits) != 4 or not set(digits) <= _HEX_DIGITS:
                    raise MalformedInputError("Bad \\u escape in string value", line_number)
                chars.append(chr(int(digits, 16)))
                i += 6
                continue
            if escape not in _ESCAPES:
                raise MalformedInputError("Bad escape sequence in string value", line_number)
            chars.append(_ESCAPES[escape])
            i += 2
            continue
        if c == '"':
            return "".join(chars), text[i + 1:]
        chars.append(c)
        i += 1
    raise MalformedInputError("Unterminated string value", line_number)


def _strip_comment(text: str) -> str:
    return text.split("#", 1)[0].strip()


class Dumper:
    """Receives the fields of an object as its class levels write them."""

    def field(self, name: str, value: Any, comment: str = "", is_set: bool = True) -> None:
        raise NotImplementedError

    def child(self, name: str, obj: "Object", comment: str = "") -> None:
        raise NotImplementedError


class _TextDumper(Dumper):
    def __init__(self, channel: "Channel", depth: int):
        self._channel = channel
        self._depth = depth

    def field(self, name: str, value: Any, comment: str = "", is_set: bool = True) -> None:
        config = self._channel.config
        if not is_set and not config.full:
            return
        text = quote(value) if isinstance(value, str) else to_text(value)
        self._channel._emit_field(self._depth, f"{name} = {text}", comment, is_set)

    def child(self, name: str, obj: "Object", comment: str = "") -> None:
        self._channel._emit_field(self._depth, f"{name} =", comment, True)
        self._channel._write_object(obj, self._depth + 1)


class DictDumper(Dumper):
    """Collects set fields into a JSON-friendly dictionary."""

    def __init__(self, class_name: str):
        self.data: Dict[str, Any] = {"class": class_name}

    def field(self, name: str, value: Any, comment: str = "", is_set: bool = True) -> None:
        if is_set:
            self.data[name] = value

    def child(self, name: str, obj: "Object", comment: str = "") -> None:
        self.data[name] = obj.to_dict()


class Channel:
    """Reads objects from, and writes objects to, a Stream.

    A Channel holds no state between calls other than the stream it was
    given; every ``read`` parses one complete object.

    Args:
        stream: Stream to read from and write to.
        config: Output settings used by :meth:`write`.
        registry: Class registry used by :meth:`read`. Defaults to the
            frozen registry of all library classes.

    Example:
        >>> from astkit.io.stream import StringStream
        >>> stream = StringStream(" Begin Object\\n End Object\\n")
        >>> Channel(stream).read().class_name
        'Object'
    """

    def __init__(
        self,
        stream: Stream,
        config: Optional[ChannelConfig] = None,
        registry: Optional[TypeRegistry] = None,
    ):
        self.stream = stream
        self.config = config or ChannelConfig()
        self.registry = registry if registry is not None else default_registry()

    # Reading

    def read(self) -> "Object":
        """Read the next object from the stream.

        Returns:
            The fully constructed object.

        Raises:
            UnknownTypeError: If a Begin line names an unregistered class.
            MalformedInputError: If the text is truncated or inconsistent.
        """
        first = self._next_line()
        if first is None:
            raise MalformedInputError("No object found in input", self.stream.line_number)
        text, line_number = first
        obj = self._read_object(text, line_number, 0)
        logger.debug(f"Read {obj.class_name} ending at line {self.stream.line_number}")
        return obj

    def expect_end(self) -> None:
        """Raise if anything but comments remains in the stream.

        Raises:
            MalformedInputError: If another significant line follows.
        """
        nxt = self._next_line()
        if nxt is not None:
            raise MalformedInputError(f"Unexpected text after object: {nxt[0]!r}", nxt[1])

    def _next_line(self) -> Optional[Tuple[str, int]]:
        """Return the next significant line and its number, skipping comments."""
        while True:
            line = self.stream.read_line()
            if line is None:
                return None
            text = line.strip()
            if text and not text.startswith("#"):
                return text, self.stream.line_number

    def _read_object(self, text: str, line_number: int, depth: int) -> "Object":
        if depth > MAX_DEPTH:
            raise MalformedInputError("Objects are nested too deeply", line_number)

        keyword, _, rest = text.partition(" ")
        class_name = _strip_comment(rest)
        if keyword != "Begin" or not _CLASS_NAME_RE.match(class_name):
            raise MalformedInputError(f"Expected 'Begin <class>', found {text!r}", line_number)
        if self.stream.at_end:
            # The class name itself may have been cut short
            raise MalformedInputError(f"Unexpected end of input after 'Begin {class_name}'", line_number)

        factory = self.registry.lookup(class_name)

        fields = FieldSet(class_name, line_number)
        markers: List[Tuple[str, int]] = []

        while True:
            nxt = self._next_line()
            if nxt is None:
                raise MalformedInputError(
                    f"Unexpected end of input inside {class_name}", self.stream.line_number
                )
            text, number = nxt
            keyword, _, rest = text.partition(" ")

            if keyword == "End":
                end_name = _strip_comment(rest)
                if end_name != class_name:
                    raise MalformedInputError(
                        f"'End {end_name}' does not close 'Begin {class_name}'", number
                    )
                break
            if keyword == "IsA":
                markers.append((_strip_comment(rest), number))
                continue
            if keyword == "Begin":
                raise MalformedInputError("Nested object without a field name", number)

            fields.add(self._read_field(text, number, depth))

        try:
            obj = factory(fields)
        except MalformedInputError:
            raise
        except (AstError, ValueError) as e:
            raise MalformedInputError(f"Cannot construct {class_name}: {e}", line_number) from e

        fields.ensure_consumed()
        self._check_markers(obj, markers)
        return obj

    def _read_field(self, text: str, line_number: int, depth: int) -> Field:
        name, sep, rest = text.partition("=")
        name = name.strip()
        if not sep or not _FIELD_NAME_RE.match(name):
            raise MalformedInputError(f"Expected 'name = value', found {text!r}", line_number)

        rest = rest.strip()
        if not rest or rest.startswith("#"):
            nxt = self._next_line()
            if nxt is None:
                raise MalformedInputError(
                    f"Unexpected end of input after {name!r}", self.stream.line_number
                )
            value = self._read_object(nxt[0], nxt[1], depth + 1)
            return Field(name, OBJECT, value, line_number)

        if rest.startswith('"'):
            value, remainder = _unquote(rest, line_number)
            remainder = remainder.strip()
            if remainder and not remainder.startswith("#"):
                raise MalformedInputError(f"Unexpected text after string value of {name!r}", line_number)
            return Field(name, STRING, value, line_number)

        token = _strip_comment(rest)
        if not token or any(c.isspace() for c in token):
            raise MalformedInputError(f"Bad value for {name!r}: {rest!r}", line_number)
        return Field(name, NUMBER, token, line_number)

    @staticmethod
    def _check_markers(obj: "Object", markers: List[Tuple[str, int]]) -> None:
        levels = [klass.__name__ for klass in obj.class_levels()]
        position = -1
        for name, number in markers:
            if name not in levels[:-1]:
                raise MalformedInputError(
                    f"'IsA {name}' is not a parent class of {obj.class_name}", number
                )
            index = levels.index(name)
            if index <= position:
                raise MalformedInputError(f"'IsA {name}' is out of order", number)
            position = index

    # Writing

    def write(self, obj: "Object") -> int:
        """Write an object to the stream's sink.

        Returns:
            The number of objects written.
        """
        self._write_object(obj, 0)
        logger.debug(f"Wrote {obj.class_name}")
        return 1

    def _write_object(self, obj: "Object", depth: int) -> None:
        levels = obj.class_levels()
        dumper = _TextDumper(self, depth)

        self._emit(depth, f"Begin {obj.class_name}", levels[-1].__dict__.get("_description", ""))
        for klass in levels:
            dump = klass.__dict__.get("_dump")
            if dump is not None:
                dump(obj, dumper)
            if klass is not levels[-1]:
                self._emit(depth, f"IsA {klass.__name__}", klass.__dict__.get("_description", ""))
        self._emit(depth, f"End {obj.class_name}", "")

    def _emit(self, depth: int, text: str, comment: str) -> None:
        prefix = " " * (depth * self.config.indent + 1)
        self.stream.write_line(self._with_comment(prefix + text, comment))

    def _emit_field(self, depth: int, text: str, comment: str, is_set: bool) -> None:
        width = depth * self.config.indent + self.config.indent + 1
        prefix = " " * width if is_set else "#" + " " * (width - 1)
        self.stream.write_line(self._with_comment(prefix + text, comment))

    def _with_comment(self, line: str, comment: str) -> str:
        if comment and self.config.comment:
            return f"{line} \t# {comment}"
        return line
