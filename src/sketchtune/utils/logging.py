"""Logging utilities for sketchtune.

Provides a multiline-aligned formatter and logging configuration helper.
Program dumps produced by ``ScheduleIR.debug_string`` span many lines, so
continuation lines are indented under the first line of each record.
"""

import logging

__all__ = ["setup_logging", "MultilineFormatter"]

_CONTINUATION_INDENT = "    "


class MultilineFormatter(logging.Formatter):
    """Formatter that aligns multiline messages with indentation.

    Attributes:
        msg_width: Width the first line is padded to before metadata.
        show_metadata: Whether to append timestamp/level/name metadata.
    """

    def __init__(self, msg_width: int, show_metadata: bool) -> None:
        """Initialize the formatter.

        Args:
            msg_width: Width for message alignment.
            show_metadata: Whether to append timestamp/level/name metadata.
        """
        super().__init__(datefmt="%Y-%m-%d %H:%M:%S")
        self.msg_width = msg_width
        self.show_metadata = show_metadata

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record, indenting every line after the first.

        Args:
            record: The log record to format.

        Returns:
            Formatted log message string.
        """
        first_line, *rest = record.getMessage().split("\n")
        if self.show_metadata:
            metadata = f"{self.formatTime(record)} - {record.levelname} - {record.name}"
            first_line = f"{first_line:<{self.msg_width}}{metadata}"
        if record.exc_info:
            rest.extend(self.formatException(record.exc_info).split("\n"))
        return "\n".join([first_line] + [f"{_CONTINUATION_INDENT}{line}" for line in rest])


def setup_logging(log_file: str | None, level: int, msg_width: int, show_metadata: bool) -> logging.Handler:
    """Configure the root logger with a multiline-aligned formatter.

    Args:
        log_file: Path to the log file, or None to log to stderr.
        level: Logging level.
        msg_width: Width for message alignment.
        show_metadata: Whether to append timestamp/level/name metadata to log lines.

    Returns:
        The installed handler, so callers can detach it again.
    """
    handler: logging.Handler
    if log_file is None:
        handler = logging.StreamHandler()
    else:
        handler = logging.FileHandler(log_file, mode="w")
    handler.setFormatter(MultilineFormatter(msg_width=msg_width, show_metadata=show_metadata))
    logging.root.addHandler(handler)
    logging.root.setLevel(level)
    return handler
