"""
Logging configuration for Trello backup runs.

The console shows the plain progress lines of a run; HTTP traffic is
logged at DEBUG and only reaches the console with --verbose or --debug.
Log files always get the detailed format.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime, timezone

CONSOLE_FORMAT = '%(message)s'
DETAILED_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
DETAILED_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logger(
    name: str = "trello_backup",
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    log_max_size: int = 10485760,  # 10MB
    log_backup_count: int = 5,
    verbose: bool = False,
    debug: bool = False
) -> logging.Logger:
    """
    Set up the run logger.

    Args:
        name: Logger name
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Log file path (optional)
        log_max_size: Maximum log file size in bytes
        log_backup_count: Number of rotated log files to keep
        verbose: Show HTTP calls on the console
        debug: Show HTTP calls with source locations on the console

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.handlers.clear()

    if debug or verbose:
        level = logging.DEBUG
    else:
        level = getattr(logging, log_level.upper(), logging.INFO)

    logger.setLevel(level)

    detailed_formatter = logging.Formatter(fmt=DETAILED_FORMAT, datefmt=DETAILED_DATE_FORMAT)

    # Progress goes to stdout, errors are reported separately by the CLI
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(detailed_formatter if debug else logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_file,
            maxBytes=log_max_size,
            backupCount=log_backup_count,
            encoding='utf-8'
        )
        file_handler.setFormatter(detailed_formatter)
        logger.addHandler(file_handler)

    logger.propagate = False

    return logger


def get_logger(name: str = "trello_backup") -> logging.Logger:
    """Return the named logger, setting it up on first use."""
    logger = logging.getLogger(name)

    if not logger.handlers:
        logger = setup_logger(name)

    return logger


class APICallLogger:
    """
    Logs HTTP calls against Trello.

    Only the method and URL of a request are logged. Form bodies carry
    credentials and are never passed to this class.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or get_logger("trello_api")

    def log_request(self, method: str, url: str) -> None:
        self.logger.debug(f"HTTP Request: {method} {url}")

    def log_response(self, method: str, url: str, status_code: int,
                     response_time: float) -> None:
        """
        Log a response; error statuses are raised to WARNING.

        Args:
            method: HTTP method
            url: Request URL
            status_code: HTTP status code
            response_time: Response time in seconds
        """
        level = logging.DEBUG if status_code < 400 else logging.WARNING
        self.logger.log(level, f"HTTP Response: {method} {url} - {status_code} ({response_time:.2f}s)")

    def log_error(self, error: Exception, context: str = "") -> None:
        self.logger.error(f"Error {context}: {error}")


class ProgressLogger:
    """Logs the start, per-board progress and summary of a backup run."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or get_logger("trello_progress")
        self.start_time: Optional[datetime] = None

    def start_operation(self, operation: str, total_items: Optional[int] = None) -> None:
        self.start_time = datetime.now(timezone.utc)

        message = f"Starting {operation}"
        if total_items:
            message += f" ({total_items} items)"
        self.logger.info(message)

    def log_progress(self, operation: str, completed: int, total: int,
                     current_item: str = "") -> None:
        percentage = (completed / total) * 100 if total > 0 else 0

        message = f"{operation}: {completed}/{total} ({percentage:.1f}%)"
        if current_item:
            message += f" - {current_item}"
        self.logger.info(message)

    def complete_operation(self, operation: str, total_items: int,
                           success_count: int, skipped_count: int = 0) -> None:
        """
        Log the run summary.

        Args:
            operation: Operation name
            total_items: Total number of items seen
            success_count: Number of items processed
            skipped_count: Number of items skipped
        """
        message = f"Completed {operation}: {success_count}/{total_items} processed"
        if skipped_count > 0:
            message += f", {skipped_count} skipped"
        if self.start_time:
            duration = (datetime.now(timezone.utc) - self.start_time).total_seconds()
            message += f" (took {duration:.2f}s)"
        self.logger.info(message)
