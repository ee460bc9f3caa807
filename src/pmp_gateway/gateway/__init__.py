"""Gateway module.

Request document construction, response classification, and the
patient → report workflow.
"""

from pmp_gateway.gateway.classifier import (
    classify_exception,
    classify_patient_response,
    classify_report_response,
    format_error_message,
)
from pmp_gateway.gateway.request_builder import (
    GATEWAY_NAMESPACE,
    build_patient_request,
    build_report_request,
)
from pmp_gateway.gateway.workflow import (
    PMPGatewayWorkflow,
    extract_report_link,
    resolve_report_link,
)

__all__ = [
    "GATEWAY_NAMESPACE",
    "build_patient_request",
    "build_report_request",
    "classify_patient_response",
    "classify_report_response",
    "classify_exception",
    "format_error_message",
    "PMPGatewayWorkflow",
    "extract_report_link",
    "resolve_report_link",
]
