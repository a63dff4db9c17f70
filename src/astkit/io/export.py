"""Save and load objects as files.

Objects are stored in the show format, one object per file. A JSON report
of an object's set fields can also be exported for inspection.
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Optional

from astkit.common.logging import get_logger
from astkit.io.channel import Channel
from astkit.io.config import ChannelConfig
from astkit.io.registry import TypeRegistry
from astkit.io.stream import FileStream

if TYPE_CHECKING:
    from astkit.objects.object import Object

logger = get_logger(__name__)

REPORT_VERSION = "1.0"


def save_object(
    obj: "Object",
    output_path: Path | str,
    config: Optional[ChannelConfig] = None,
) -> Path:
    """Write an object to a file in the show format.

    Args:
        obj: The object to save.
        output_path: Path of the file to write.
        config: Channel output settings; defaults include comments.

    Returns:
        Path to the written file.
    """
    output_path = Path(output_path)

    with FileStream(output_path, "w") as stream:
        Channel(stream, config).write(obj)

    logger.info(f"Saved {obj.class_name} to {output_path}")
    return output_path


def load_object(
    input_path: Path | str,
    registry: Optional[TypeRegistry] = None,
) -> "Object":
    """Read one object from a file written by :func:`save_object`.

    Args:
        input_path: Path of the file to read.
        registry: Class registry to dispatch through.

    Returns:
        The reconstructed object.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        UnknownTypeError: If the file names an unregistered class.
        MalformedInputError: If the file content is invalid.
    """
    input_path = Path(input_path)

    with FileStream(input_path, "r") as stream:
        channel = Channel(stream, registry=registry)
        obj = channel.read()
        channel.expect_end()

    logger.info(f"Loaded {obj.class_name} from {input_path}")
    return obj


def export_object_json(
    obj: "Object",
    output_path: Path | str,
    additional_info: Optional[Dict[str, Any]] = None,
) -> Path:
    """Export a JSON report describing an object.

    The report holds the object's set fields and, for reference, its
    compact shown form.

    Args:
        obj: The object to describe.
        output_path: Path to write the JSON file.
        additional_info: Optional additional information to include.

    Returns:
        Path to the written file.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    report = {
        "report_version": REPORT_VERSION,
        "generated_at": datetime.now().isoformat(),
        "class_name": obj.class_name,
        "object": obj.to_dict(),
        "show": obj.show(False),
    }

    if additional_info:
        report["additional_info"] = additional_info

    with open(output_path, "w") as f:
        json.dump(report, f, indent=2)

    logger.info(f"Exported object report to {output_path}")
    return output_path
