"""Serialization: streams, the Channel, the class registry and file helpers."""

from astkit.io.stream import Stream, StringStream, FileStream
from astkit.io.config import ChannelConfig
from astkit.io.registry import TypeRegistry, FieldSet, default_registry
from astkit.io.channel import Channel
from astkit.io.dispatch import from_serialized_form
from astkit.io.export import (
    save_object,
    load_object,
    export_object_json,
)

__all__ = [
    # Streams
    "Stream",
    "StringStream",
    "FileStream",
    # Channel
    "ChannelConfig",
    "Channel",
    "TypeRegistry",
    "FieldSet",
    "default_registry",
    "from_serialized_form",
    # Files
    "save_object",
    "load_object",
    "export_object_json",
]
