from __future__ import annotations

import io
import logging
from typing import Iterator

import pytest

from pyelevate.utils.logger import (
    ROOT_LOGGER_NAME,
    ColoredFormatter,
    disable_logging,
    get_logger,
    is_logging_configured,
    setup_logging,
)


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    yield
    disable_logging()


@pytest.mark.unit
class TestGetLogger:
    """Tests for get_logger namespacing."""

    def test_prefixes_name(self) -> None:
        assert get_logger("http").name == "pyelevate.http"

    def test_accepts_qualified_name(self) -> None:
        assert get_logger("pyelevate.http") is get_logger("http")

    def test_root_logger(self) -> None:
        assert get_logger().name == ROOT_LOGGER_NAME
        assert get_logger(ROOT_LOGGER_NAME).name == ROOT_LOGGER_NAME

    def test_root_has_handler_before_setup(self) -> None:
        get_logger("anything")

        assert logging.getLogger(ROOT_LOGGER_NAME).handlers


@pytest.mark.unit
class TestSetupLogging:
    """Tests for setup_logging."""

    def test_writes_to_stream_at_level(self) -> None:
        stream = io.StringIO()
        setup_logging(level=logging.INFO, stream=stream)

        get_logger("test").debug("hidden")
        get_logger("test").info("shown")

        output = stream.getvalue()
        assert "shown" in output
        assert "hidden" not in output
        assert is_logging_configured() is True

    def test_verbose_format_includes_logger_name(self) -> None:
        stream = io.StringIO()
        setup_logging(level=logging.DEBUG, verbose=True, stream=stream)

        get_logger("core.parser").debug("parsed")

        assert "pyelevate.core.parser" in stream.getvalue()

    def test_repeated_setup_replaces_handler(self) -> None:
        setup_logging(stream=io.StringIO())
        setup_logging(stream=io.StringIO())

        assert len(logging.getLogger(ROOT_LOGGER_NAME).handlers) == 1

    def test_does_not_propagate(self) -> None:
        setup_logging(stream=io.StringIO())

        assert logging.getLogger(ROOT_LOGGER_NAME).propagate is False

    def test_non_tty_stream_is_not_colored(self) -> None:
        stream = io.StringIO()
        setup_logging(level=logging.WARNING, stream=stream)

        get_logger("x").warning("careful")

        assert "\033[" not in stream.getvalue()


@pytest.mark.unit
class TestDisableLogging:
    def test_resets_state(self) -> None:
        setup_logging(stream=io.StringIO())

        disable_logging()

        root = logging.getLogger(ROOT_LOGGER_NAME)
        assert is_logging_configured() is False
        assert all(isinstance(h, logging.NullHandler) for h in root.handlers)


@pytest.mark.unit
class TestColoredFormatter:
    """Tests for ColoredFormatter."""

    def _record(self, level: int) -> logging.LogRecord:
        return logging.LogRecord("pyelevate", level, __file__, 1, "msg", None, None)

    def test_colors_level_name(self) -> None:
        formatter = ColoredFormatter("%(levelname)s %(message)s", use_color=True)

        output = formatter.format(self._record(logging.ERROR))

        assert output.startswith(ColoredFormatter.COLORS["ERROR"])
        assert ColoredFormatter.RESET in output

    def test_restores_level_name(self) -> None:
        formatter = ColoredFormatter("%(levelname)s", use_color=True)
        record = self._record(logging.INFO)

        formatter.format(record)

        assert record.levelname == "INFO"

    def test_plain_without_color(self) -> None:
        formatter = ColoredFormatter("%(levelname)s %(message)s", use_color=False)

        assert formatter.format(self._record(logging.INFO)) == "INFO msg"
