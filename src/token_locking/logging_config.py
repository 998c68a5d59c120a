"""
Token Locking - Structured Logging Configuration

Configures structured JSON logging:
- JSON format for easy parsing and aggregation
- Optional log rotation to prevent disk space issues
- Structured ``extra`` fields (``event``, addresses, amounts) carried through

Usage:
    from token_locking.logging_config import setup_logging

    logger = setup_logging(name="token_locking", level="INFO")
    logger.info("Schedule armed", extra={"event": "locking.armed", "total_deposit": 100000})
"""

import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from pythonjsonlogger import jsonlogger

from .config import LockingConfig


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """
    JSON formatter with additional context fields.

    Adds timestamp, environment, service name and source location to all
    log records.
    """

    def __init__(
        self,
        fmt: str = "%(timestamp)s %(level)s %(name)s %(message)s",
        timestamp: bool = True,
        environment: Optional[str] = None,
        service_name: str = "token_locking",
    ):
        super().__init__(fmt=fmt)
        self.timestamp = timestamp
        self.environment = environment or "production"
        self.service_name = service_name

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any],
    ) -> None:
        """Add custom fields to log record."""
        super().add_fields(log_record, record, message_dict)

        if self.timestamp and not log_record.get("timestamp"):
            log_record["timestamp"] = datetime.now(timezone.utc).isoformat()

        log_record["environment"] = self.environment
        log_record["service"] = self.service_name

        if not log_record.get("level"):
            log_record["level"] = record.levelname.lower()

        log_record["source"] = {
            "function": record.funcName,
            "module": record.module,
            "line": record.lineno,
        }


def setup_logging(
    name: str = "token_locking",
    log_file: Optional[str] = None,
    level: str = "INFO",
    environment: str = "production",
    enable_console: bool = True,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
    stream=None,
) -> logging.Logger:
    """
    Setup structured JSON logging.

    Args:
        name: Logger name (typically the package name)
        log_file: Path to JSON log file (optional)
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        environment: Environment identifier (dev, staging, production)
        enable_console: Whether to log to the console stream
        max_bytes: Maximum log file size before rotation
        backup_count: Number of backup files to keep
        stream: Console stream (defaults to stdout)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))

    # Remove existing handlers to avoid duplicates
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = CustomJsonFormatter(
        environment=environment,
        service_name=name.split(".")[0],
    )

    if enable_console:
        console_handler = logging.StreamHandler(stream or sys.stdout)
        console_handler.setLevel(getattr(logging, level.upper()))
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            filename=str(log_path),
            maxBytes=max_bytes,
            backupCount=backup_count,
        )
        file_handler.setLevel(getattr(logging, level.upper()))
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def setup_logging_from_config(config: Optional[LockingConfig] = None, **kwargs: Any) -> logging.Logger:
    """Setup package logging from a ``LockingConfig`` (environment by default)."""
    config = config or LockingConfig.from_env()
    return setup_logging(
        name="token_locking",
        log_file=config.log_file,
        level=config.log_level,
        environment=config.environment,
        **kwargs,
    )


def get_logger(
    name: str,
    log_file: Optional[str] = None,
    level: str = "INFO",
) -> logging.Logger:
    """
    Get or create a logger with standard configuration.

    Only configures the logger if it has no handlers yet.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        return setup_logging(name=name, log_file=log_file, level=level)
    return logger
