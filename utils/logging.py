"""
Logging utilities for BloomWatch Atlas.

This module provides logging setup with coloured console output,
rotating file handlers with optional JSON formatting, and a timing
context manager used around data generation and layer rendering.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime
import json


class ColoredFormatter(logging.Formatter):
    """
    Colored formatter for console output.

    Adds color codes to log messages based on their level
    for better readability in terminal output.
    """

    COLORS = {
        'DEBUG': '\033[36m',    # Cyan
        'INFO': '\033[32m',     # Green
        'WARNING': '\033[33m',  # Yellow
        'ERROR': '\033[31m',    # Red
        'CRITICAL': '\033[35m', # Magenta
        'RESET': '\033[0m'
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors."""
        log_color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        reset_color = self.COLORS['RESET']

        # Colour a copy so other handlers see the plain level name
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{log_color}{record.levelname}{reset_color}"

        return super().format(record)


_RESERVED_ATTRS = {
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname',
    'filename', 'module', 'lineno', 'funcName', 'created',
    'msecs', 'relativeCreated', 'thread', 'threadName',
    'processName', 'process', 'getMessage', 'exc_info',
    'exc_text', 'stack_info', 'taskName', 'message'
}


class JsonFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs log records as JSON for easier parsing
    and integration with log analysis tools.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_entry = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        # Fields passed through ``extra=``
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_entry[key] = value

        return json.dumps(log_entry, default=str)


def setup_logging(
    name: str = 'bloomwatch',
    level: str = 'INFO',
    log_dir: Optional[str] = None,
    console_output: bool = True,
    file_output: bool = True,
    json_format: bool = False,
    max_file_size: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5
) -> logging.Logger:
    """
    Setup logging for BloomWatch Atlas.

    Args:
        name: Logger name ('' configures the root logger)
        level: Logging level ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')
        log_dir: Directory for log files (optional)
        console_output: Whether to output to console
        file_output: Whether to output to file
        json_format: Whether to use JSON format for file output
        max_file_size: Maximum size for log files before rotation
        backup_count: Number of backup files to keep

    Returns:
        logging.Logger: Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))

    logger.handlers.clear()

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(getattr(logging, level.upper()))

        console_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        console_handler.setFormatter(ColoredFormatter(console_format))

        logger.addHandler(console_handler)

    if file_output and log_dir:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        log_file = log_dir / f"{name or 'bloomwatch'}.log"
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_file_size,
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setLevel(getattr(logging, level.upper()))

        if json_format:
            file_formatter = JsonFormatter()
        else:
            file_format = '%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(lineno)d - %(message)s'
            file_formatter = logging.Formatter(file_format)

        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

    logger.info(f"Logging setup completed for {name or 'root'}")
    return logger


def get_logger(name: str = None) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Logger name (if None, uses calling module name)

    Returns:
        logging.Logger: Logger instance
    """
    if name is None:
        import inspect
        frame = inspect.currentframe().f_back
        name = frame.f_globals.get('__name__', 'bloomwatch')

    return logging.getLogger(name)


class LoggedTimer:
    """
    Context manager for timing operations with automatic logging.
    """

    def __init__(self, logger: logging.Logger, operation_name: str, **kwargs):
        """
        Initialize timer.

        Args:
            logger: Logger instance
            operation_name: Name of the operation being timed
            **kwargs: Additional context to log
        """
        self.logger = logger
        self.operation_name = operation_name
        self.context = kwargs
        self.start_time = None
        self.duration = None

    def __enter__(self):
        """Start timing."""
        self.start_time = datetime.now()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """End timing and log result."""
        self.duration = (datetime.now() - self.start_time).total_seconds()

        if exc_type is None:
            self.logger.debug(
                f"{self.operation_name} completed in {self.duration:.3f}s",
                extra={
                    'event_type': 'timing',
                    'operation': self.operation_name,
                    'duration_seconds': self.duration,
                    'status': 'success',
                    **self.context
                }
            )
        else:
            self.logger.error(
                f"{self.operation_name} failed after {self.duration:.3f}s",
                extra={
                    'event_type': 'timing',
                    'operation': self.operation_name,
                    'duration_seconds': self.duration,
                    'status': 'error',
                    'error_type': exc_type.__name__,
                    **self.context
                }
            )
        return False


def log_time(logger: logging.Logger, operation_name: str, **kwargs) -> LoggedTimer:
    """
    Context manager factory for timing operations.

    Args:
        logger: Logger instance
        operation_name: Name of the operation
        **kwargs: Additional context

    Returns:
        LoggedTimer: Context manager for timing
    """
    return LoggedTimer(logger, operation_name, **kwargs)
