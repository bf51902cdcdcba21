"""Unit tests for sketchtune.utils.logging module.

Tests MultilineFormatter formatting and setup_logging configuration.

Run with: pytest test/test_logging.py -v
"""

import logging
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

from sketchtune.utils.logging import MultilineFormatter, setup_logging


def _record(msg: str, level: int = logging.INFO, name: str = "test.logger") -> logging.LogRecord:
    """Build a log record with no arguments."""
    return logging.LogRecord(name=name, level=level, pathname="", lineno=0, msg=msg, args=(), exc_info=None)


@pytest.fixture
def installed() -> Iterator[list[logging.Handler]]:
    """Collect handlers installed by a test; detach them and restore the root level afterwards."""
    handlers: list[logging.Handler] = []
    level = logging.root.level
    yield handlers
    for handler in handlers:
        logging.root.removeHandler(handler)
        handler.close()
    logging.root.setLevel(level)


class TestMultilineFormatter:
    """Tests for MultilineFormatter."""

    def test_single_line_without_metadata(self) -> None:
        """Single-line message without metadata returns just the message."""
        formatter = MultilineFormatter(msg_width=40, show_metadata=False)
        assert formatter.format(_record("hello world")) == "hello world"

    def test_single_line_with_metadata(self) -> None:
        """Metadata starts after the padded message."""
        formatter = MultilineFormatter(msg_width=50, show_metadata=True)
        result = formatter.format(_record("short", level=logging.WARNING))
        assert result.startswith("short")
        assert result.index("20") >= 50
        assert "WARNING" in result
        assert "test.logger" in result

    def test_continuation_lines_indented(self) -> None:
        """Lines after the first are indented; metadata goes on the first line only."""
        formatter = MultilineFormatter(msg_width=30, show_metadata=True)
        lines = formatter.format(_record("program p\n  block b\n    C = b(A)")).split("\n")
        assert len(lines) == 3
        assert "INFO" in lines[0]
        assert lines[1] == "      block b"
        assert lines[2] == "        C = b(A)"

    def test_exception_appended(self) -> None:
        """Exception tracebacks follow the message as indented lines."""
        formatter = MultilineFormatter(msg_width=10, show_metadata=False)
        try:
            raise ValueError("bad strategy")
        except ValueError:
            record = logging.LogRecord("x", logging.ERROR, "", 0, "failed", (), exc_info=sys.exc_info())
        result = formatter.format(record)
        assert result.startswith("failed\n    Traceback")
        assert "ValueError: bad strategy" in result


class TestSetupLogging:
    """Tests for setup_logging()."""

    def test_file_handler(self, tmp_path: Path, installed: list[logging.Handler]) -> None:
        """A log file path installs a FileHandler with the multiline formatter."""
        handler = setup_logging(str(tmp_path / "search.log"), logging.DEBUG, msg_width=120, show_metadata=True)
        installed.append(handler)
        assert isinstance(handler, logging.FileHandler)
        assert handler in logging.root.handlers
        assert isinstance(handler.formatter, MultilineFormatter)
        assert handler.formatter.msg_width == 120
        assert logging.root.level == logging.DEBUG

    def test_stream_handler(self, installed: list[logging.Handler]) -> None:
        """Without a file the handler logs to stderr."""
        handler = setup_logging(None, logging.INFO, msg_width=80, show_metadata=False)
        installed.append(handler)
        assert type(handler) is logging.StreamHandler

    def test_writes_to_log_file(self, tmp_path: Path, installed: list[logging.Handler]) -> None:
        """Messages from package loggers reach the file."""
        log_file = tmp_path / "search.log"
        handler = setup_logging(str(log_file), logging.INFO, msg_width=40, show_metadata=False)
        installed.append(handler)
        logging.getLogger("sketchtune.search").info("Generate sketch size: %d", 3)
        handler.flush()
        assert "Generate sketch size: 3" in log_file.read_text()
