"""Logging Audit module.

This module provides logging configuration and audit trail functionality.
"""

from .audit import log_audit_event, log_transaction
from .formatters import PHIRedactingFormatter
from .logger import (
    configure_logging,
    get_logger,
    get_operation_logger,
    set_operation_log_level,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "get_operation_logger",
    "set_operation_log_level",
    "log_audit_event",
    "log_transaction",
    "PHIRedactingFormatter",
]
