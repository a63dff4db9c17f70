"""One-shot reconstruction of objects from their shown form."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from astkit.io.channel import Channel
from astkit.io.registry import TypeRegistry
from astkit.io.stream import StringStream

if TYPE_CHECKING:
    from astkit.objects.object import Object


def from_serialized_form(text: str, registry: Optional[TypeRegistry] = None) -> "Object":
    """Build a new object from the text produced by ``Object.show``.

    Each call parses the text afresh with its own stream and channel, so
    two calls on the same text give equal but distinct objects.

    Args:
        text: Shown form of one object.
        registry: Class registry to dispatch through. Defaults to the
            registry of all library classes.

    Returns:
        The reconstructed object, typed as its concrete class.

    Raises:
        UnknownTypeError: If the text names an unregistered class.
        MalformedInputError: If the text is truncated or inconsistent.
    """
    if not isinstance(text, str):
        raise TypeError(f"Expected str, got {type(text).__name__}")

    stream = StringStream(text)
    channel = Channel(stream, registry=registry)
    obj = channel.read()
    channel.expect_end()
    return obj
