"""Report CLI commands module.

This module provides the Click command that looks up a patient through the PMP
Gateway and retrieves the rendered report.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
import lxml.html

from pmp_gateway.config.schema import Config
from pmp_gateway.gateway.workflow import PMPGatewayWorkflow, resolve_report_link
from pmp_gateway.models.outcomes import Outcome, OutcomeKind, Success
from pmp_gateway.models.patient import Patient
from pmp_gateway.models.requester import Provider, ProviderRole
from pmp_gateway.transport.http_client import GatewaySession
from pmp_gateway.utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

EXIT_CODES = {
    OutcomeKind.SUCCESS: 0,
    OutcomeKind.BAD_REQUEST: 1,
    OutcomeKind.UNAUTHORIZED: 2,
    OutcomeKind.NOT_FOUND: 3,
    OutcomeKind.INTERNAL_SERVER_ERROR: 4,
    OutcomeKind.COULD_NOT_IDENTIFY_UNIQUE_PATIENT: 5,
    OutcomeKind.PMP_ERROR: 6,
    OutcomeKind.FAILURE: 7,
}
EXIT_CONFIGURATION_ERROR = 8

OUTCOME_LABELS = {
    OutcomeKind.SUCCESS: "Success",
    OutcomeKind.BAD_REQUEST: "Bad request",
    OutcomeKind.UNAUTHORIZED: "Unauthorized",
    OutcomeKind.NOT_FOUND: "Not found",
    OutcomeKind.INTERNAL_SERVER_ERROR: "Gateway internal server error",
    OutcomeKind.COULD_NOT_IDENTIFY_UNIQUE_PATIENT: "Could not identify a unique patient",
    OutcomeKind.PMP_ERROR: "PMP error",
    OutcomeKind.FAILURE: "Failure",
}


def build_provider(
    config: Config,
    role: Optional[str] = None,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
    dea_number: Optional[str] = None,
    npi_number: Optional[str] = None,
    location_name: Optional[str] = None,
    state_code: Optional[str] = None,
) -> Provider:
    """Combine the configured default provider with command-line overrides.
    
    Args:
        config: Loaded configuration (provider section may be absent)
        role: Gateway role override
        first_name: Provider first name override
        last_name: Provider last name override
        dea_number: DEA number override
        npi_number: NPI number override
        location_name: Location name override
        state_code: Location state code override
        
    Returns:
        Provider for gateway requests
        
    Raises:
        ConfigurationError: If a required provider field is missing or the role
            is not recognised
    """
    values = config.provider.model_dump() if config.provider is not None else {}
    overrides = {
        "role": role,
        "first_name": first_name,
        "last_name": last_name,
        "dea_number": dea_number,
        "npi_number": npi_number,
        "location_name": location_name,
        "state_code": state_code,
    }
    values.update({key: value for key, value in overrides.items() if value})
    
    required = ("first_name", "last_name", "role", "location_name", "state_code")
    missing = [field for field in required if not values.get(field)]
    if missing:
        raise ConfigurationError(
            f"Missing provider fields: {', '.join(missing)}. "
            f"Fix: add a 'provider' section to the config file or pass the "
            f"matching --provider-* options."
        )
    
    try:
        values["role"] = ProviderRole.from_value(values["role"])
    except ValueError as e:
        raise ConfigurationError(str(e)) from e
    
    return Provider(**values)


def _exit_code(outcome: Outcome) -> int:
    return EXIT_CODES[outcome.kind]


def _display_outcome_failure(outcome: Outcome) -> None:
    label = OUTCOME_LABELS[outcome.kind]
    click.echo(click.style(f"✗ {label}", fg="red", bold=True), err=True)
    if outcome.message:
        click.echo(outcome.message, err=True)


@click.command(name="report")
@click.option("--first-name", required=True, help="Patient first name")
@click.option("--last-name", required=True, help="Patient last name")
@click.option("--dob", required=True, help="Patient date of birth (YYYY-MM-DD)")
@click.option("--sex", default=None, help="Patient sex code")
@click.option("--street", default=None, help="Patient street address")
@click.option("--street2", default=None, help="Patient second street line")
@click.option("--city", default=None, help="Patient city")
@click.option("--state", default=None, help="Patient two-letter state code")
@click.option("--zip", "zip_code", default=None, help="Patient zip code")
@click.option("--phone", default=None, help="Patient phone number")
@click.option("--role", default=None, help="Provider role (overrides config)")
@click.option("--provider-first-name", default=None, help="Provider first name")
@click.option("--provider-last-name", default=None, help="Provider last name")
@click.option("--dea", default=None, help="Provider DEA number")
@click.option("--npi", default=None, help="Provider NPI number")
@click.option("--location", default=None, help="Requesting location name")
@click.option("--provider-state", default=None, help="Requesting location state code")
@click.option(
    "--patient-only",
    is_flag=True,
    help="Run only the patient lookup and print the report link",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Write the HTML report to this file instead of stdout",
)
@click.pass_context
def report(
    ctx: click.Context,
    first_name: str,
    last_name: str,
    dob: str,
    sex: Optional[str],
    street: Optional[str],
    street2: Optional[str],
    city: Optional[str],
    state: Optional[str],
    zip_code: Optional[str],
    phone: Optional[str],
    role: Optional[str],
    provider_first_name: Optional[str],
    provider_last_name: Optional[str],
    dea: Optional[str],
    npi: Optional[str],
    location: Optional[str],
    provider_state: Optional[str],
    patient_only: bool,
    output: Optional[Path],
) -> None:
    """Look up a patient and retrieve the PMP report.
    
    Exit Codes:
        0: Success
        1: Bad request
        2: Unauthorized
        3: Not found
        4: Gateway internal server error
        5: Could not identify a unique patient
        6: PMP error
        7: Failure (unexpected response, transport or certificate error)
        8: Configuration error
        
    Examples:
        # Look up a patient with the provider from config
        $ pmp-gateway report --first-name Jane --last-name Doe --dob 1970-07-01 --zip 43215
        
        # Override the provider role
        $ pmp-gateway report ... --role "Nurse Practitioner"
        
        # Save the report
        $ pmp-gateway report ... --output report.html
    """
    config_obj: Config = ctx.obj["config"]
    
    try:
        provider = build_provider(
            config_obj,
            role=role,
            first_name=provider_first_name,
            last_name=provider_last_name,
            dea_number=dea,
            npi_number=npi,
            location_name=location,
            state_code=provider_state,
        )
        session = GatewaySession.from_config(config_obj)
    except ConfigurationError as e:
        click.echo(click.style("✗ Configuration error", fg="red", bold=True), err=True)
        click.echo(str(e), err=True)
        sys.exit(EXIT_CONFIGURATION_ERROR)
    
    patient = Patient(
        first_name=first_name,
        last_name=last_name,
        birthdate=dob,
        sex_code=sex,
        street=street,
        street2=street2,
        city=city,
        state_code=state,
        zip_code=zip_code,
        phone=phone,
    )
    
    with session:
        workflow = PMPGatewayWorkflow(session, namespace=config_obj.gateway.namespace)
        if patient_only:
            outcome = workflow.submit_patient(provider, patient)
        else:
            outcome = workflow.submit_patient_and_fetch_report(provider, patient)
    logger.info(f"Report command finished with {outcome.kind.name}")
    
    if not isinstance(outcome, Success):
        _display_outcome_failure(outcome)
        sys.exit(_exit_code(outcome))
    
    if patient_only:
        link = resolve_report_link(outcome.document)
        if not isinstance(link, str):
            _display_outcome_failure(link)
            sys.exit(_exit_code(link))
        click.echo(link)
        sys.exit(EXIT_CODES[OutcomeKind.SUCCESS])
    
    html = lxml.html.tostring(outcome.document, encoding="unicode", pretty_print=True)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(html, encoding="utf-8")
        click.echo(click.style("✓", fg="green", bold=True) + f" Report saved to {output}")
    else:
        click.echo(html)
    
    sys.exit(EXIT_CODES[OutcomeKind.SUCCESS])
