"""Logging configuration for the Easy Apply runner with structured output and file logging."""

import os
import sys
import uuid
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from loguru import logger

# Load environment variables
load_dotenv()

# Records logged before configure_logging() still need a trace_id for the format
logger.configure(extra={"trace_id": "-"})


def configure_logging(
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
    default_trace_id: Optional[str] = None,
) -> None:
    """
    Configure logging for the runner with structured output.
    Always includes trace_id in logs.

    Args:
        log_level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file (optional)
        default_trace_id: Default trace_id for startup logs (defaults to UUID)
    """
    # Remove default logger to reconfigure
    logger.remove()

    log_level = log_level or "INFO"
    log_file = log_file or os.getenv("LINKEDIN_APPLY_LOG_FILE")
    default_trace_id = default_trace_id or str(uuid.uuid4())

    console_format = (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "<magenta>linkedin-apply</magenta> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
        "trace_id={extra[trace_id]} - <level>{message}</level> {extra}"
    )

    logger.add(
        sys.stderr,
        format=console_format,
        level=log_level,
        colorize=True,
        backtrace=True,
        diagnose=False,
        enqueue=True,
    )

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_format = (
            "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
            "{level: <8} | "
            "linkedin-apply | "
            "{name}:{function}:{line} | "
            "trace_id={extra[trace_id]} | "
            "{message} | {extra}"
        )

        logger.add(
            log_file,
            format=file_format,
            level=log_level,
            rotation="10 MB",
            retention="7 days",
            compression="gz",
            backtrace=True,
            diagnose=False,
            enqueue=True,
            serialize=False,
        )

    startup_logger = logger.bind(trace_id=default_trace_id)
    startup_logger.info(
        "Logging configured",
        log_level=log_level,
        log_file=log_file or "console only",
    )


def get_logger(trace_id: Optional[str] = None) -> "logger":
    """
    Get a logger instance bound with trace_id.

    Args:
        trace_id: UUID trace ID for correlation (generates new UUID if None)

    Returns:
        Logger instance with bound trace_id
    """
    if trace_id is None:
        trace_id = str(uuid.uuid4())

    return logger.bind(trace_id=trace_id)
