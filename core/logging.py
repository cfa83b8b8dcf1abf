"""
Centralized logging configuration.
Provides consistent logging format across the application.
"""

import logging
import sys
from typing import Optional


class ColoredFormatter(logging.Formatter):
    """
    Colored log formatter for console output.
    """

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        # Color a copy so other handlers see the plain level name
        record = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelname, '')
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def setup_logging(
    level: str = "INFO",
    format_string: Optional[str] = None,
    use_colors: bool = True
) -> None:
    """
    Configure application logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_string: Custom format string (optional)
        use_colors: Whether to use colored output
    """
    if format_string is None:
        format_string = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

    handler = logging.StreamHandler(sys.stdout)

    if use_colors:
        formatter = ColoredFormatter(format_string, datefmt="%H:%M:%S")
    else:
        formatter = logging.Formatter(format_string, datefmt="%H:%M:%S")

    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))
    root_logger.handlers = [handler]

    # Suppress noisy loggers
    for noisy in ("httpx", "httpcore", "hpack", "botocore", "boto3", "urllib3", "uvicorn.access"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the given name.

    Usage:
        from core.logging import get_logger
        logger = get_logger(__name__)
        logger.info("Something happened")
    """
    return logging.getLogger(name)


def pipeline_context(user_id: str = None, asset_id: str = None, face_id: str = None) -> str:
    """
    Short tag naming the records a log line is about, e.g.
    "user=u-1 asset=photo-1 face=f-9". Missing ids are left out.
    """
    parts = [
        f"{label}={value}"
        for label, value in (("user", user_id), ("asset", asset_id), ("face", face_id))
        if value
    ]
    return " ".join(parts)


def log_error(
    logger: logging.Logger,
    error: Exception,
    context: str = None,
    user_id: str = None,
    asset_id: str = None,
    face_id: str = None,
):
    """Log an error with optional context and the ids of the records involved."""
    # AppException carries a clean message; anything else falls back to str()
    detail = getattr(error, "message", None) or str(error)
    msg = f"{type(error).__name__}: {detail}"
    tag = " ".join(part for part in (context, pipeline_context(user_id, asset_id, face_id)) if part)
    if tag:
        msg = f"[{tag}] {msg}"
    logger.error(msg, exc_info=True)
