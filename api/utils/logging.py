"""
Structured Logging Configuration

One stdout handler on the root logger, emitting either JSON lines or a
plain development format. Job workers log from threads named
``job-worker_N``; the thread name is included in every record.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

# Third-party loggers that are chatty at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "multipart")


class JSONFormatter(logging.Formatter):
    """
    JSON log formatter for structured logging.

    Structured context passed as ``extra={"metadata": {...}}`` is emitted
    under the ``metadata`` key.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "metadata"):
            log_data["metadata"] = record.metadata

        # File location for errors
        if record.levelno >= logging.ERROR:
            log_data["location"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        return json.dumps(log_data, ensure_ascii=False, default=str)


def setup_logging(log_level: str = "INFO", use_json: bool = True) -> None:
    """
    Configure application logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        use_json: JSON lines when True, human-readable lines otherwise
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    level = getattr(logging, log_level.upper(), logging.INFO)
    root_logger.setLevel(level)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)

    if use_json:
        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(threadName)s - %(levelname)s - %(message)s"
        )

    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if level > logging.DEBUG:
        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    root_logger.info(
        "Logging configured",
        extra={"metadata": {"log_level": log_level, "json_format": use_json}},
    )


def log_event(
    logger: logging.Logger, level: str, event: str, metadata: Dict[str, Any] = None
) -> None:
    """
    Log a structured event with metadata.

    Args:
        logger: Logger instance to use
        level: Log level (info, warning, error, etc.)
        event: Event description
        metadata: Additional structured data
    """
    log_func = getattr(logger, level.lower())

    if metadata:
        log_func(event, extra={"metadata": metadata})
    else:
        log_func(event)
