"""Audit trail for PMP Gateway calls.

Each gateway call is recorded with its stage, outcome, and duration. Complete
request and response bodies are logged at DEBUG level only and pass through the
PHI-redacting formatter like every other record.
"""

import time
import uuid
from typing import Any, Dict, Optional

from .logger import get_logger

logger = get_logger(__name__)


def log_audit_event(event_type: str, details: Dict[str, Any]) -> None:
    """Log an audit trail event.
    
    Audit events are logged at INFO level for successful operations and ERROR
    level for failures.
    
    Args:
        event_type: Type of operation (e.g., "PATIENT_SUBMITTED", "REPORT_FETCHED")
        details: Dictionary with event details. Common fields include:
                - status: "success" or "failure"
                - outcome: Outcome kind name
                - duration: Operation duration in seconds
                - error_message: Error details (if status is failure)
                - correlation_id: Correlation ID for tracking related events
                
    Example:
        >>> log_audit_event("PATIENT_SUBMITTED", {
        ...     "status": "success",
        ...     "outcome": "SUCCESS",
        ...     "duration": 1.2
        ... })
    """
    if "timestamp" not in details:
        details["timestamp"] = time.time()
    
    if "correlation_id" not in details:
        details["correlation_id"] = str(uuid.uuid4())
    
    message_parts = [f"AUDIT [{event_type}]"]
    
    field_order = [
        "status",
        "outcome",
        "http_status",
        "duration",
        "error_message",
        "correlation_id",
    ]
    
    for field in field_order:
        if field in details:
            value = details[field]
            if field == "duration" and isinstance(value, (int, float)):
                message_parts.append(f"{field}={value:.2f}s")
            else:
                message_parts.append(f"{field}={value}")
    
    for key, value in details.items():
        if key not in field_order and key != "timestamp":
            message_parts.append(f"{key}={value}")
    
    audit_message = " | ".join(message_parts)
    
    if details.get("status") == "failure":
        logger.error(audit_message)
    else:
        logger.info(audit_message)


def log_transaction(
    stage: str,
    request: str,
    response: Optional[str],
    status: str = "success",
    correlation_id: Optional[str] = None,
) -> str:
    """Log a complete gateway call with request and response.
    
    Args:
        stage: Gateway stage ("PATIENT" or "REPORT")
        request: Full request XML
        response: Full response body, None if no response was received
        status: Transaction status ("success" or "failure")
        correlation_id: Correlation ID; generated if not provided
        
    Returns:
        Correlation ID used for the entries
    """
    correlation_id = correlation_id or str(uuid.uuid4())
    response_text = response or ""
    
    logger.info(
        f"TRANSACTION [{stage}] | "
        f"status={status} | "
        f"correlation_id={correlation_id} | "
        f"request_size={len(request)} bytes | "
        f"response_size={len(response_text)} bytes"
    )
    
    logger.debug(
        f"TRANSACTION REQUEST [{stage}] | "
        f"correlation_id={correlation_id}\n"
        f"{request}"
    )
    
    if response is not None:
        logger.debug(
            f"TRANSACTION RESPONSE [{stage}] | "
            f"correlation_id={correlation_id}\n"
            f"{response}"
        )
    
    return correlation_id
