"""
Logging configuration for zotero-cite.

Provides centralized logging configuration with:
- Log level detection from the environment
- Console and rotating file handlers
- Timing of sync cycles and other slow operations
"""

from datetime import datetime
import logging
import logging.handlers
import os
from pathlib import Path
import sys
import time
from typing import Any

# -------------------- Configuration --------------------


# Log directory
LOG_DIR = Path.home() / ".cache" / "zotero-cite" / "logs"

# Log retention
LOG_RETENTION_DAYS = 3

# Log format strings
CONSOLE_FORMAT = "%(name)s %(levelname)s: %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"

# Date format for logs
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


# -------------------- Global State --------------------


_loggers_configured = set()


# -------------------- Utility Functions --------------------


def get_log_level() -> int:
    """
    Get the current log level from environment configuration.

    Checks LOG_LEVEL environment variable first, then DEBUG flag.

    Returns:
        Logging level constant (logging.DEBUG, logging.INFO, etc.)
    """
    level_str = os.getenv("LOG_LEVEL", "").upper()

    level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }

    if level_str in level_map:
        return level_map[level_str]

    # Fall back to DEBUG env var
    if os.getenv("DEBUG", "").lower() in ("true", "1", "yes"):
        return logging.DEBUG

    return logging.INFO


def get_log_file_path() -> Path:
    """
    Get the path to the current log file.

    Creates log directory if it doesn't exist.

    Returns:
        Path to the log file for today
    """
    log_dir = LOG_DIR
    log_dir.mkdir(parents=True, exist_ok=True)

    today = datetime.now().strftime("%Y-%m-%d")
    return log_dir / f"zotero-cite-{today}.log"


def cleanup_old_logs() -> None:
    """Remove log files older than LOG_RETENTION_DAYS."""
    log_dir = LOG_DIR

    if not log_dir.exists():
        return

    try:
        cutoff = time.time() - (LOG_RETENTION_DAYS * 24 * 60 * 60)

        for log_file in log_dir.glob("zotero-cite-*.log"):
            if log_file.stat().st_mtime < cutoff:
                log_file.unlink()
                logging.getLogger(__name__).info(f"Removed old log file: {log_file}")

    except OSError as e:
        logging.getLogger(__name__).warning(f"Failed to cleanup old logs: {e}")


# -------------------- Setup Functions --------------------


def setup_logging(
    name: str,
    level: int | None = None,
    console: bool = True,
    file: bool = False,
) -> logging.Logger:
    """
    Setup logging for a module with consistent formatting.

    Args:
        name: Logger name (usually __name__)
        level: Log level (defaults to get_log_level())
        console: Add console handler
        file: Add rotating file handler

    Returns:
        Configured logger instance

    Example:
        >>> logger = setup_logging("zotero_cite")
        >>> logger.info("Starting sync")
    """
    # Avoid configuring the same logger twice
    if name in _loggers_configured:
        return logging.getLogger(name)

    logger = logging.getLogger(name)
    logger.setLevel(level or get_log_level())
    logger.handlers.clear()
    logger.propagate = False

    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logger.level)
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        logger.addHandler(console_handler)

    if file:
        file_handler = logging.handlers.RotatingFileHandler(
            get_log_file_path(),
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(logger.level)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, DATE_FORMAT))
        logger.addHandler(file_handler)

    _loggers_configured.add(name)

    return logger


def enable_debug_logging() -> None:
    """Enable debug logging for all configured loggers."""
    for logger_name in _loggers_configured:
        logger = logging.getLogger(logger_name)
        logger.setLevel(logging.DEBUG)
        for handler in logger.handlers:
            handler.setLevel(logging.DEBUG)


def initialize_logging(file: bool = False) -> logging.Logger:
    """
    Initialize logging for the zotero_cite package.

    Should be called once at application startup (the CLI does this).
    Library users embedding the package keep control of their own logging.

    Args:
        file: Also write to the rotating log file

    Returns:
        The package logger
    """
    logger = setup_logging("zotero_cite", file=file)
    if file:
        cleanup_old_logs()
    logger.debug(f"Logging initialized. Level: {logging.getLevelName(logger.level)}")
    return logger


# -------------------- Performance Monitoring --------------------


class PerformanceMonitor:
    """
    Context manager for monitoring operation performance.

    Logs execution time and optional metadata.

    Example:
        >>> with PerformanceMonitor(logger, "Zotero sync"):
        ...     await provider.load(session, context)
    """

    def __init__(
        self,
        logger: logging.Logger,
        operation_name: str,
        log_level: int = logging.DEBUG,
        **metadata: Any,
    ) -> None:
        self.logger = logger
        self.operation_name = operation_name
        self.log_level = log_level
        self.metadata = metadata
        self.start_time: float | None = None
        self.elapsed: float | None = None

    def __enter__(self) -> "PerformanceMonitor":
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.start_time is None:
            return

        self.elapsed = time.perf_counter() - self.start_time

        status = "failed" if exc_type is not None else "completed"
        msg = f"{self.operation_name} {status} in {self.elapsed:.2f}s"

        if self.metadata:
            metadata_str = ", ".join(f"{k}={v}" for k, v in self.metadata.items())
            msg = f"{msg} ({metadata_str})"

        self.logger.log(self.log_level, msg)
