"""Logger construction for check-scoped report output.

The reporter receives a logger explicitly instead of writing through the
root logger. Every record carries a ``check_name`` so that lines render as
``<timestamp> - <checkName> - <message>``.
"""

import logging
import sys
from typing import TextIO

CHECK_LOG_FORMAT = "%(asctime)s - %(check_name)s - %(message)s"
DIAGNOSTIC_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class _CheckNameDefault(logging.Filter):
    """Fill in ``check_name`` for records logged without one."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "check_name"):
            record.check_name = record.name
        return True


def build_check_logger(
    name: str = "avdcheck.report",
    level: str | int = logging.INFO,
    log_file: str | None = None,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Build a non-propagating logger for check report lines.

    Args:
        name: Logger name
        level: Logging level name or number
        log_file: Optional path of a file that receives the same lines
        stream: Console stream (defaults to stdout)

    Returns:
        Configured logger; calling again with the same name replaces its handlers
    """
    check_logger = logging.getLogger(name)
    check_logger.setLevel(level)
    check_logger.propagate = False

    for handler in list(check_logger.handlers):
        check_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(CHECK_LOG_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler(stream or sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(_CheckNameDefault())
        check_logger.addHandler(handler)

    return check_logger


def configure_diagnostics(level: str | int = logging.INFO) -> None:
    """Configure module-level diagnostic logging on stderr."""
    logging.basicConfig(
        level=level,
        format=DIAGNOSTIC_LOG_FORMAT,
        stream=sys.stderr,
    )
