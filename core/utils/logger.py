"""
Loguru-based logging configuration
"""
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<magenta>{extra[component]}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)
FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[component]} | "
    "{name}:{function}:{line} | {message}"
)


def setup_logger(log_level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Configure loguru logger with consistent formatting

    Args:
        log_level: Logging level (TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for logging to file
    """
    logger.remove()

    # records logged without a bound component still render
    logger.configure(extra={"component": "-"})

    logger.add(
        sys.stderr,
        format=CONSOLE_FORMAT,
        level=log_level,
        colorize=True,
    )

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_file,
            format=FILE_FORMAT,
            level=log_level,
            rotation="100 MB",
            retention="7 days",
            compression="zip",
            enqueue=True,  # Thread-safe, the reconciler daemon logs from its own thread
        )

    logger.info(f"Logger initialized with level: {log_level}")


def get_logger(component: Optional[str] = None):
    """
    Get the configured logger, optionally bound to a component name

    Args:
        component: Name shown in the component column of log lines
    """
    if component:
        return logger.bind(component=component)
    return logger
