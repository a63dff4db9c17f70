"""Tests for logging and console helpers."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from astkit.common import logging as astkit_logging
from astkit.common.logging import LOGGER_NAME, get_logger, print_error, print_success, setup_logging


@pytest.fixture
def package_logger():
    """The astkit logger, restored to its previous state afterwards."""
    logger = logging.getLogger(LOGGER_NAME)
    saved = (list(logger.handlers), logger.level, logger.propagate)
    yield logger
    for handler in list(logger.handlers):
        if handler not in saved[0]:
            logger.removeHandler(handler)
            handler.close()
    for handler in saved[0]:
        if handler not in logger.handlers:
            logger.addHandler(handler)
    logger.setLevel(saved[1])
    logger.propagate = saved[2]


class TestGetLogger:
    """Tests for get_logger."""

    def test_module_names_kept(self):
        assert get_logger("astkit.io.channel").name == "astkit.io.channel"
        assert get_logger(LOGGER_NAME).name == LOGGER_NAME

    def test_other_names_nested(self):
        assert get_logger("tools.convert").name == "astkit.tools.convert"
        assert get_logger("astkitx").name == "astkit.astkitx"


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_root_logger_untouched(self, package_logger: logging.Logger):
        root_handlers = list(logging.getLogger().handlers)

        setup_logging(logging.DEBUG)

        assert logging.getLogger().handlers == root_handlers
        assert package_logger.level == logging.DEBUG
        assert package_logger.propagate is False

    def test_repeated_setup_replaces_handlers(self, package_logger: logging.Logger):
        setup_logging(logging.INFO)
        count = len(package_logger.handlers)

        setup_logging(logging.INFO)

        assert len(package_logger.handlers) == count

    def test_log_file(self, package_logger: logging.Logger, tmp_path: Path):
        log_path = tmp_path / "astkit.log"

        setup_logging(logging.INFO, log_file=log_path)
        get_logger("astkit.io.channel").info("Read Frame")
        get_logger("astkit.io.channel").debug("hidden")
        for handler in package_logger.handlers:
            handler.flush()

        text = log_path.read_text()
        assert "INFO" in text
        assert "astkit.io.channel: Read Frame" in text
        assert "hidden" not in text


class TestPrintHelpers:
    """Tests for the status line helpers."""

    def test_tags(self, monkeypatch: pytest.MonkeyPatch):
        console = astkit_logging.Console(theme=astkit_logging.THEME, record=True, width=120)
        monkeypatch.setattr(astkit_logging, "console", console)

        print_success("saved")
        print_error("broken")

        text = console.export_text()
        assert "[OK] saved" in text
        assert "[ERROR] broken" in text
