"""Rich console and logging setup shared by the library and the CLI.

Library modules log through ``get_logger(__name__)``, which places them
under the ``astkit`` logger. Nothing is shown until an application, usually
the CLI, calls :func:`setup_logging`.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme


LOGGER_NAME = "astkit"

THEME = Theme({
    "info": "cyan",
    "warning": "yellow",
    "error": "red bold",
    "success": "green",
    "classname": "magenta bold",
})

console = Console(theme=THEME)

_package_logger = logging.getLogger(LOGGER_NAME)
_package_logger.addHandler(logging.NullHandler())


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
) -> None:
    """Route astkit log records to the console, and optionally a file.

    Only the ``astkit`` logger is configured, so calling this again
    replaces the handlers it added before and leaves other loggers alone.

    Args:
        level: Logging level (e.g., logging.INFO, logging.DEBUG).
        log_file: Optional path that receives the same records, with
            timestamps and logger names.
    """
    _package_logger.setLevel(level)
    for handler in list(_package_logger.handlers):
        _package_logger.removeHandler(handler)
        handler.close()

    rich_handler = RichHandler(
        console=console,
        show_time=level <= logging.DEBUG,
        show_path=False,
        rich_tracebacks=True,
    )
    rich_handler.setFormatter(logging.Formatter("%(message)s"))
    _package_logger.addHandler(rich_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)-8s %(name)s: %(message)s")
        )
        _package_logger.addHandler(file_handler)

    # Records reach the handlers above; the root logger stays untouched
    _package_logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a module, under the ``astkit`` hierarchy."""
    if name != LOGGER_NAME and not name.startswith(LOGGER_NAME + "."):
        name = f"{LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def print_banner() -> None:
    """Print the astkit name and version."""
    from astkit import __version__

    console.print()
    console.print(f"[bold cyan]astkit[/bold cyan] [dim]{__version__}[/dim]", justify="center")
    console.print()


def _print_status(style: str, tag: str, message: str) -> None:
    console.print(f"[{style}][{tag}][/{style}] {message}")


def print_success(message: str) -> None:
    _print_status("success", "OK", message)


def print_error(message: str) -> None:
    _print_status("error", "ERROR", message)


def print_warning(message: str) -> None:
    _print_status("warning", "WARN", message)


def print_info(message: str) -> None:
    _print_status("info", "INFO", message)
