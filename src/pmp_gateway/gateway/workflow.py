"""Patient → report workflow against the PMP Gateway.

Chains the request builder, the transport, and the classifier. Each operation
returns exactly one Outcome and stops at the first non-success Outcome; at most
two gateway calls are made per invocation and the second depends on the link
returned by the first.
"""

import logging
import time
from typing import Callable, Optional, Union

from lxml import etree

from pmp_gateway.gateway.classifier import (
    classify_exception,
    classify_patient_response,
    classify_report_response,
    element_value,
    error_message_from,
    find_element,
)
from pmp_gateway.gateway.request_builder import (
    GATEWAY_NAMESPACE,
    build_patient_request,
    build_report_request,
)
from pmp_gateway.logging_audit import (
    get_operation_logger,
    log_audit_event,
    log_transaction,
)
from pmp_gateway.models.outcomes import (
    Failure,
    Outcome,
    PatientOutcome,
    PatientReportOutcome,
    PMPError,
    ReportOutcome,
    Success,
)
from pmp_gateway.models.patient import Patient
from pmp_gateway.models.requester import Provider
from pmp_gateway.transport.http_client import GatewaySession, TransportResponse
from pmp_gateway.utils.exceptions import CertificateLoadError, TransportError

logger = logging.getLogger(__name__)
patient_logger = get_operation_logger("patient")
report_logger = get_operation_logger("report")

NO_REPORT_OR_ERROR_MESSAGE = (
    "Could not find ViewableReport or Error node in patient response"
)


class PMPGatewayWorkflow:
    """Runs patient and report stages against one GatewaySession.
    
    The workflow holds no per-call state, so one instance may serve concurrent
    invocations for different patients.
    
    Attributes:
        session: Gateway session used for every call
        namespace: XML namespace for request documents
        
    Example:
        >>> with GatewaySession.from_config(config) as session:
        ...     workflow = PMPGatewayWorkflow(session)
        ...     outcome = workflow.submit_patient_and_fetch_report(provider, patient)
        ...     if outcome.is_success:
        ...         html = outcome.document
    """

    def __init__(
        self, session: GatewaySession, namespace: str = GATEWAY_NAMESPACE
    ) -> None:
        self.session = session
        self.namespace = namespace

    def submit_patient(self, provider: Provider, patient: Patient) -> PatientOutcome:
        """Submit a patient lookup.
        
        Args:
            provider: Requesting provider
            patient: Patient to look up
            
        Returns:
            Success carrying the parsed response document, or the failure
            variant for the response
        """
        request_xml = build_patient_request(provider, patient, self.namespace)
        patient_logger.info("Idle -> submitting patient request")

        outcome = self._call(
            stage="PATIENT",
            uri=self.session.patient_uri,
            request_xml=request_xml,
            classify=classify_patient_response,
        )

        if outcome.is_success:
            patient_logger.info("PatientSubmitted")
        else:
            patient_logger.warning(f"Patient stage ended with {outcome.kind.name}")
        return outcome

    def fetch_report(self, provider: Provider, report_link: str) -> ReportOutcome:
        """Fetch the rendered report from its one-time link.
        
        Args:
            provider: Provider viewing the report
            report_link: Absolute URI from the patient response's ViewableReport
            
        Returns:
            Success carrying the parsed HTML report, or the failure variant for
            the response
        """
        request_xml = build_report_request(provider, self.namespace)
        report_logger.info("Fetching report")

        outcome = self._call(
            stage="REPORT",
            uri=report_link,
            request_xml=request_xml,
            classify=classify_report_response,
        )

        if outcome.is_success:
            report_logger.info("ReportFetched")
        else:
            report_logger.warning(f"Report stage ended with {outcome.kind.name}")
        return outcome

    def submit_patient_and_fetch_report(
        self, provider: Provider, patient: Patient
    ) -> PatientReportOutcome:
        """Submit a patient lookup and, when a report link comes back, fetch it.
        
        A patient response with no ViewableReport is checked for an Error node
        and returned as PMPError. Any non-success patient Outcome is returned
        unchanged without a second call.
        
        Args:
            provider: Requesting provider
            patient: Patient to look up
            
        Returns:
            The report stage Outcome, or the terminal patient stage Outcome
        """
        patient_outcome = self.submit_patient(provider, patient)
        if not isinstance(patient_outcome, Success):
            return patient_outcome

        report_link = resolve_report_link(patient_outcome.document)
        if not isinstance(report_link, str):
            return report_link

        return self.fetch_report(provider, report_link)

    def _call(
        self,
        stage: str,
        uri: str,
        request_xml: str,
        classify: Callable[[TransportResponse], Outcome],
    ) -> Outcome:
        start_time = time.time()
        response: Optional[TransportResponse] = None
        try:
            response = self.session.post(uri, request_xml)
        except (TransportError, CertificateLoadError) as e:
            logger.error(f"{stage} call failed before a response was received: {e}")
            outcome: Outcome = classify_exception(e)
        else:
            outcome = classify(response)

        status = "success" if outcome.is_success else "failure"
        correlation_id = log_transaction(
            stage,
            request_xml,
            response.text if response is not None else None,
            status=status,
        )
        details = {
            "status": status,
            "outcome": outcome.kind.name,
            "duration": time.time() - start_time,
            "correlation_id": correlation_id,
        }
        if response is not None:
            details["http_status"] = response.status_code
        if not outcome.is_success:
            details["error_message"] = outcome.message
        log_audit_event(f"{stage}_REQUEST", details)
        return outcome


def extract_report_link(document: etree._Element) -> Optional[str]:
    """Return the ViewableReport link of a patient response, or None.
    
    Args:
        document: Parsed patient stage response
        
    Returns:
        Report URI with surrounding whitespace removed, None when absent or empty
    """
    link = element_value(find_element(document, "ViewableReport")).strip()
    return link or None


def resolve_report_link(document: etree._Element) -> Union[str, PMPError, Failure]:
    """Return the report link of a patient response, or the Outcome explaining its absence.
    
    Args:
        document: Parsed patient stage response
        
    Returns:
        The report URI; PMPError when the response carries an Error node
        instead; Failure when it carries neither
    """
    report_link = extract_report_link(document)
    if report_link is not None:
        return report_link

    error_node = find_element(document, "Error")
    if error_node is not None:
        message = error_message_from(error_node)
        patient_logger.warning(f"Gateway returned an error: {message}")
        return PMPError(message)
    patient_logger.error(NO_REPORT_OR_ERROR_MESSAGE)
    return Failure(NO_REPORT_OR_ERROR_MESSAGE)
