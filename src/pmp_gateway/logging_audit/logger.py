"""Logging configuration and logger factory for the PMP Gateway client.

This module provides centralized logging configuration with support for:
- Console and file handlers with different log levels
- Log rotation to prevent unbounded file growth
- PHI redaction via custom formatters
- Per-stage log levels (patient, report, transport)
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from .formatters import PHIRedactingFormatter

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_LOG_FILE = Path("logs") / "pmp-gateway.log"
MAX_LOG_FILE_SIZE = 10 * 1024 * 1024  # 10MB
BACKUP_COUNT = 5

VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_logging_configured = False

OPERATION_LOGGERS = {
    "patient": "pmp_gateway.patient",
    "report": "pmp_gateway.report",
    "transport": "pmp_gateway.transport",
}

logger = logging.getLogger(__name__)


def _numeric_level(level: str) -> int:
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(
            f"Invalid log level: {level}. "
            f"Must be one of: {', '.join(VALID_LEVELS)}"
        )
    return numeric_level


def configure_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    redact_pii: bool = True,
) -> None:
    """Configure logging for the PMP Gateway client.
    
    Sets up both console and file handlers with appropriate log levels and
    formatting. Safe to call multiple times.
    
    Args:
        level: Log level for console output (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               File handler always uses DEBUG level.
        log_file: Path to log file. If None, uses PMP_GATEWAY_LOG_FILE
                 environment variable or DEFAULT_LOG_FILE.
        redact_pii: Whether to redact patient identifiers from logs
        
    Raises:
        ValueError: If invalid log level is provided
        RuntimeError: If log directory cannot be created
        
    Example:
        >>> configure_logging(level="DEBUG")
        >>> configure_logging(level="INFO", log_file=Path("custom/app.log"))
    """
    global _logging_configured
    
    numeric_level = _numeric_level(level)
    
    if log_file is None:
        env_log_file = os.environ.get("PMP_GATEWAY_LOG_FILE")
        log_file = Path(env_log_file) if env_log_file else DEFAULT_LOG_FILE
    
    log_dir = log_file.parent
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise RuntimeError(
            f"Failed to create log directory: {log_dir}. "
            f"Ensure write permissions are available. Error: {e}"
        ) from e
    
    root_logger = logging.getLogger()
    
    if _logging_configured:
        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)
            handler.close()
    
    root_logger.setLevel(logging.DEBUG)
    
    formatter = PHIRedactingFormatter(fmt=DEFAULT_LOG_FORMAT, redact_pii=redact_pii)
    
    console_handler = logging.StreamHandler()
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)
    
    try:
        file_handler = RotatingFileHandler(
            filename=str(log_file),
            maxBytes=MAX_LOG_FILE_SIZE,
            backupCount=BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
    except OSError as e:
        root_logger.warning(
            f"Failed to create file handler for {log_file}: {e}. "
            f"Logging to console only."
        )
    
    _logging_configured = True


def get_logger(module_name: str) -> logging.Logger:
    """Get a logger for the specified module.
    
    Args:
        module_name: Name of the module, typically __name__
        
    Returns:
        Logger instance for the module
    """
    return logging.getLogger(module_name)


def get_operation_logger(operation: str) -> logging.Logger:
    """Get the logger for a gateway stage.
    
    Args:
        operation: One of patient, report, transport
        
    Returns:
        Logger instance for the operation
        
    Raises:
        ValueError: If operation is not a recognized type
        
    Example:
        >>> logger = get_operation_logger("patient")
        >>> logger.info("Patient request submitted")
    """
    if operation not in OPERATION_LOGGERS:
        raise ValueError(
            f"Unknown operation: {operation}. "
            f"Must be one of: {', '.join(OPERATION_LOGGERS.keys())}"
        )
    return logging.getLogger(OPERATION_LOGGERS[operation])


def set_operation_log_level(operation: str, level: str) -> None:
    """Set log level for a gateway stage at runtime.
    
    Args:
        operation: One of patient, report, transport
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        
    Raises:
        ValueError: If operation or level is invalid
        
    Example:
        >>> set_operation_log_level("report", "DEBUG")
    """
    operation_logger = get_operation_logger(operation)
    operation_logger.setLevel(_numeric_level(level))
    logger.debug("Set %s logger level to %s", operation_logger.name, level.upper())
