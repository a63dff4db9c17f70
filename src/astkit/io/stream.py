"""Line streams used by the Channel.

A Stream has two independent ends: a *source* of lines that a Channel
reads objects from, and a *sink* that a Channel writes shown objects to.
The source is consumed strictly forward; there is no seek or rewind.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from astkit.common.logging import get_logger

logger = get_logger(__name__)


class Stream:
    """Sequential, position-tracked line reader and writer.

    Subclasses provide the source lines in ``_source`` and decide what
    happens to the sink lines on :meth:`close`.
    """

    def __init__(self, source_text: str = ""):
        # Only "\n" ends a line; other separators may sit inside quoted values
        lines = source_text.split("\n")
        if lines and lines[-1] == "":
            lines.pop()
        self._source: List[str] = lines
        self._position = 0
        self._sink: List[str] = []

    @property
    def line_number(self) -> int:
        """1-based number of the last consumed source line (0 before any)."""
        return self._position

    @property
    def at_end(self) -> bool:
        return self._position >= len(self._source)

    def peek_line(self) -> Optional[str]:
        """Return the next source line without consuming it, or None at end."""
        if self.at_end:
            return None
        return self._source[self._position]

    def read_line(self) -> Optional[str]:
        """Consume and return the next source line, or None at end."""
        line = self.peek_line()
        if line is not None:
            self._position += 1
        return line

    def write_line(self, text: str) -> None:
        """Append one line to the sink."""
        self._sink.append(text)

    def get_sink_string(self) -> str:
        """Return everything written to the sink so far, newline terminated."""
        if not self._sink:
            return ""
        return "\n".join(self._sink) + "\n"

    def close(self) -> None:
        pass

    def __enter__(self) -> "Stream":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class StringStream(Stream):
    """Stream whose source is an in-memory string.

    Example:
        >>> stream = StringStream(" Begin Object\\n End Object\\n")
        >>> stream.read_line()
        ' Begin Object'
    """

    def __init__(self, text: str = ""):
        super().__init__(text)
        self._text = text

    @property
    def source_text(self) -> str:
        return self._text


class FileStream(Stream):
    """Stream backed by a text file.

    In read mode the whole file is loaded on construction. In write mode
    the sink is written to the file when the stream is closed.

    Args:
        path: File to read from or write to.
        mode: ``"r"`` to read, ``"w"`` to write.

    Raises:
        FileNotFoundError: If reading and the file does not exist.
        ValueError: If the mode is not ``"r"`` or ``"w"``.
    """

    def __init__(self, path: Path | str, mode: str = "r"):
        if mode not in ("r", "w"):
            raise ValueError(f"Unsupported FileStream mode: {mode!r}")

        self.path = Path(path)
        self.mode = mode
        self._closed = False

        text = ""
        if mode == "r":
            if not self.path.exists():
                raise FileNotFoundError(f"Object file not found: {self.path}")
            with open(self.path, "r", encoding="utf-8", newline="") as f:
                text = f.read()
            logger.debug(f"Loaded {len(text)} characters from {self.path}")
        super().__init__(text)

    def write_line(self, text: str) -> None:
        if self.mode != "w":
            raise IOError(f"FileStream for {self.path} was not opened for writing")
        super().write_line(text)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self.mode == "w":
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8", newline="") as f:
                f.write(self.get_sink_string())
            logger.debug(f"Wrote {len(self._sink)} lines to {self.path}")
