"""Logging configuration for kafkascope.

Logs go to a file so that stdout stays clean when kafkascope is used in a
pipe. Context passed through ``extra=`` (topic, partition, offsets, group)
is rendered with every record.
"""

import json
import logging
import sys
import time
from datetime import datetime, timezone
from typing import Any, Optional

# Attributes every LogRecord carries; anything else came in through extra=
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


def record_context(record: logging.LogRecord) -> dict[str, Any]:
    """Return the ``extra=`` attributes attached to a record."""
    return {key: value for key, value in vars(record).items() if key not in _RECORD_ATTRS}


class StructuredFormatter(logging.Formatter):
    """Renders records as one line of text, or one JSON object, with their context."""

    def __init__(self, json_format: bool = False):
        super().__init__()
        self.json_format = json_format

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        context = record_context(record)
        error = self.formatException(record.exc_info) if record.exc_info else None

        if self.json_format:
            entry = {
                "time": created.isoformat(timespec="milliseconds"),
                "level": record.levelname,
                "logger": record.name,
                "message": record.getMessage(),
            }
            if context:
                entry["context"] = context
            if error:
                entry["exception"] = error
            return json.dumps(entry, default=str)

        line = " - ".join([
            created.strftime("%Y-%m-%d %H:%M:%S"),
            record.levelname,
            record.name,
            record.getMessage(),
        ])
        if context:
            line += " [" + ", ".join(f"{key}={value}" for key, value in context.items()) + "]"
        if error:
            line += "\n" + error
        return line


def configure_logging(
    level: str = "INFO",
    json_format: bool = False,
    log_file: Optional[str] = None,
    console: bool = False
) -> None:
    """Configure logging for kafkascope.

    The log file, when given, receives everything down to DEBUG regardless
    of ``level``; ``level`` applies to the stderr handler.

    Args:
        level: Log level name for stderr ('DEBUG', 'INFO', 'WARNING', 'ERROR')
        json_format: Whether to write JSON lines instead of text
        log_file: Optional log file path
        console: Whether to also log to stderr
    """
    console_level = logging.getLevelName(level.upper())
    if not isinstance(console_level, int):
        console_level = logging.INFO

    formatter = StructuredFormatter(json_format=json_format)
    handlers: list[logging.Handler] = []

    if log_file:
        handlers.append(logging.FileHandler(log_file))
        handlers[-1].setLevel(logging.DEBUG)

    if console:
        # stderr only, stdout carries records in unattended mode
        handlers.append(logging.StreamHandler(sys.stderr))
        handlers[-1].setLevel(console_level)

    for handler in handlers:
        handler.setFormatter(formatter)

    root_level = logging.DEBUG if log_file else console_level
    logging.basicConfig(
        level=root_level,
        handlers=handlers or [logging.NullHandler()],
        force=True
    )
    logging.getLogger("kafkascope").setLevel(root_level)


class OperationTimer:
    """Logs the start, outcome and duration of a cluster operation."""

    def __init__(self, logger: logging.Logger, operation: str, **context: Any):
        """Initialize operation timer.

        Args:
            logger: Logger to report to
            operation: Operation name, e.g. "topic creation"
            **context: Fields logged with every record, e.g. topic=...
        """
        self.logger = logger
        self.operation = operation
        self.context = context
        self.duration = 0.0
        self._started = 0.0

    def __enter__(self) -> "OperationTimer":
        self._started = time.perf_counter()
        self.logger.debug(f"Starting {self.operation}", extra=self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.duration = time.perf_counter() - self._started
        extra = dict(self.context, duration_seconds=round(self.duration, 3))

        if exc_type is None:
            self.logger.info(f"Completed {self.operation}", extra=extra)
            return

        extra["error"] = str(exc_val) or exc_type.__name__
        self.logger.error(f"Failed {self.operation}", extra=extra)
