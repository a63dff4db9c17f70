"""Channel output configuration."""

from __future__ import annotations

from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Dict


@dataclass
class ChannelConfig:
    """Controls how a Channel writes objects.

    Reading is unaffected: comments and defaulted lines are always skipped.

    Attributes:
        comment: Append a ``# description`` comment to written lines.
        full: Also write defaulted attributes, as commented-out lines.
        indent: Number of spaces each nesting level is indented by.
    """

    comment: bool = True
    full: bool = True
    indent: int = 3

    def __post_init__(self) -> None:
        if self.indent < 0:
            raise ValueError(f"indent must not be negative, got {self.indent}")

    @classmethod
    def for_show(cls, show_comments: bool) -> "ChannelConfig":
        """Configuration used by ``Object.show``."""
        return cls(comment=show_comments, full=show_comments)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChannelConfig":
        """Create from dictionary."""
        return cls(
            comment=bool(data.get("comment", True)),
            full=bool(data.get("full", True)),
            indent=int(data.get("indent", 3)),
        )

    @classmethod
    def from_yaml(cls, path: Path | str) -> "ChannelConfig":
        """Load from a YAML file.

        The settings may sit at the top level or under a ``channel`` key.
        """
        import yaml

        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")

        return cls.from_dict(data.get("channel", data))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)
