"""
Loguru setup shared by every entry point.

Development logs are colored and human-readable, other environments emit one
JSON object per line. Each record carries the correlation ID of the worker
that produced it, so a follow, a report or a visit can be traced end to end.
"""

import sys
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from core.correlation import get_correlation_id

if TYPE_CHECKING:
    from loguru import Record

LOG_FILE_NAME = "parley.log"

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[correlation_id]}</cyan> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


def correlation_filter(record: "Record") -> bool:
    """Stamp the record with the current correlation ID ("-" outside a worker)."""
    record["extra"]["correlation_id"] = get_correlation_id() or "-"
    return True


def configure_logging(
    environment: str = "development", logs_dir: str | Path = "logs"
) -> Path | None:
    """
    Replace Loguru's default handler with the sinks for an environment.

    Under "test" only warnings reach stderr and no file is written.

    Args:
        environment: "development", "test", or anything else for JSON output.
        logs_dir: Directory receiving the rotating log file.

    Returns:
        Path of the log file, or None when no file sink was added.
    """
    logger.remove()

    readable = environment == "development"

    if environment == "test":
        logger.add(sys.stderr, level="WARNING", filter=correlation_filter)
        return None

    logger.add(
        sys.stderr,
        format=CONSOLE_FORMAT if readable else "{message}",
        level="DEBUG" if readable else "INFO",
        filter=correlation_filter,
        colorize=readable,
        serialize=not readable,
    )

    log_file = Path(logs_dir) / LOG_FILE_NAME
    log_file.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        str(log_file),
        format=CONSOLE_FORMAT if readable else "{message}",
        level="INFO",
        filter=correlation_filter,
        rotation="10 MB",
        retention="7 days",
        serialize=not readable,
    )
    return log_file
