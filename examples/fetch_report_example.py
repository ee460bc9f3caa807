"""Fetch a PMP report programmatically.

This example loads configuration, opens a GatewaySession, and runs the
patient → report workflow, handling every outcome kind.

Requirements:
    - config/config.json (see examples/config.example.json)
    - PMP_GATEWAY_PASSWORD and PMP_GATEWAY_CERTIFICATE_PASSWORD environment
      variables, plus PMP_GATEWAY_CERTIFICATE when no pkcs12_path is configured
"""

import logging
import sys
from pathlib import Path

import lxml.html

from pmp_gateway.config import load_config
from pmp_gateway.gateway import PMPGatewayWorkflow
from pmp_gateway.logging_audit import configure_logging
from pmp_gateway.models import OutcomeKind, Patient
from pmp_gateway.transport import GatewaySession

logger = logging.getLogger(__name__)


def main() -> int:
    config = load_config()
    configure_logging(
        level=config.logging.level,
        log_file=config.logging.log_file,
        redact_pii=config.logging.redact_pii,
    )

    if config.provider is None:
        print("Add a 'provider' section to config/config.json first")
        return 1
    provider = config.provider.to_provider()

    patient = Patient(
        first_name="Jane",
        last_name="Doe",
        birthdate="1970-07-01",
        street="123 Main St",
        city="Columbus",
        state_code="OH",
        zip_code="43215",
        phone="614-555-1994",
    )

    with GatewaySession.from_config(config) as session:
        workflow = PMPGatewayWorkflow(session, namespace=config.gateway.namespace)
        outcome = workflow.submit_patient_and_fetch_report(provider, patient)

    if outcome.kind is OutcomeKind.SUCCESS:
        output = Path("report.html")
        output.write_text(
            lxml.html.tostring(outcome.document, encoding="unicode"), encoding="utf-8"
        )
        print(f"Report saved to {output}")
        return 0

    if outcome.kind is OutcomeKind.COULD_NOT_IDENTIFY_UNIQUE_PATIENT:
        print(f"Refine the patient details: {outcome.message}")
    elif outcome.kind is OutcomeKind.PMP_ERROR:
        print(f"The PMP reported an error: {outcome.message}")
    elif outcome.kind is OutcomeKind.UNAUTHORIZED:
        print("Check the gateway username, password and client certificate")
    elif outcome.kind in (OutcomeKind.BAD_REQUEST, OutcomeKind.NOT_FOUND,
                          OutcomeKind.INTERNAL_SERVER_ERROR, OutcomeKind.FAILURE):
        print(f"{outcome.kind.name}: {outcome.message}")
    return 1


if __name__ == "__main__":
    sys.exit(main())
