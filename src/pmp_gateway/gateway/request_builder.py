"""PMP Gateway request document builders.

Builds the PatientRequest and ReportRequest XML bodies posted to the gateway.
Optional elements are only created when their source field is non-empty because
the gateway schema rejects empty values for enumerations such as StateCode.
"""

import logging
from typing import Optional

from lxml import etree

from pmp_gateway.models.patient import Patient
from pmp_gateway.models.requester import Provider

logger = logging.getLogger(__name__)

# Gateway v5 namespace
GATEWAY_NAMESPACE = "http://xml.appriss.com/gateway/v5"


def _has_text(value: Optional[str]) -> bool:
    return bool(value and value.strip())


def _add_element(
    parent: etree._Element,
    namespace: str,
    tag: str,
    text: Optional[str] = None,
) -> etree._Element:
    """Append a child element in the gateway namespace.

    Args:
        parent: Element receiving the child
        namespace: Gateway namespace URI
        tag: Local element name
        text: Element text; None produces an empty element

    Returns:
        The new child element
    """
    element = etree.SubElement(parent, f"{{{namespace}}}{tag}")
    if text is not None:
        element.text = text
    return element


def _add_optional_element(
    parent: etree._Element,
    namespace: str,
    tag: str,
    text: Optional[str],
) -> None:
    if _has_text(text):
        _add_element(parent, namespace, tag, text)


def _add_requester(root: etree._Element, provider: Provider, namespace: str) -> None:
    """Add the Requester block (Provider and Location) shared by both documents."""
    requester = _add_element(root, namespace, "Requester")

    provider_elem = _add_element(requester, namespace, "Provider")
    _add_element(provider_elem, namespace, "Role", provider.role_value)
    _add_element(provider_elem, namespace, "FirstName", provider.first_name)
    _add_element(provider_elem, namespace, "LastName", provider.last_name)
    # At least one identifier is required: DEANumber, NPINumber, or ProfessionalLicenseNumber
    _add_optional_element(provider_elem, namespace, "DEANumber", provider.dea_number)
    _add_optional_element(provider_elem, namespace, "NPINumber", provider.npi_number)
    if _has_text(provider.professional_license):
        license_elem = _add_element(provider_elem, namespace, "ProfessionalLicenseNumber")
        _add_optional_element(
            license_elem, namespace, "Type", provider.professional_license_type
        )
        _add_element(license_elem, namespace, "Value", provider.professional_license)
        _add_optional_element(license_elem, namespace, "StateCode", provider.state_code)

    location = _add_element(requester, namespace, "Location")
    _add_element(location, namespace, "Name", provider.location_name)
    _add_optional_element(location, namespace, "DEANumber", provider.dea_number)
    _add_optional_element(location, namespace, "NPINumber", provider.npi_number)
    address = _add_element(location, namespace, "Address")
    _add_element(address, namespace, "StateCode", provider.state_code)


def _serialize(root: etree._Element) -> str:
    return etree.tostring(root, pretty_print=True, encoding="unicode")


def build_patient_request(
    provider: Provider,
    patient: Patient,
    namespace: str = GATEWAY_NAMESPACE,
) -> str:
    """Build the PatientRequest document for the patient stage.
    
    Patient address StateCode follows City and Phone is the last child of
    Patient; both, and the second Street line, appear only when non-empty.
    
    Args:
        provider: Requesting provider
        patient: Patient to look up
        namespace: Gateway namespace for the target API version
        
    Returns:
        PatientRequest XML text (no XML declaration)
        
    Example:
        >>> xml = build_patient_request(provider, patient)
        >>> xml.startswith('<PatientRequest xmlns="http://xml.appriss.com/gateway/v5">')
        True
    """
    logger.debug("Building PatientRequest document")

    root = etree.Element(f"{{{namespace}}}PatientRequest", nsmap={None: namespace})
    _add_requester(root, provider, namespace)

    prescription_request = _add_element(root, namespace, "PrescriptionRequest")
    patient_elem = _add_element(prescription_request, namespace, "Patient")

    name = _add_element(patient_elem, namespace, "Name")
    _add_element(name, namespace, "First", patient.first_name)
    _add_element(name, namespace, "Last", patient.last_name)
    _add_element(patient_elem, namespace, "Birthdate", patient.birthdate)
    _add_optional_element(patient_elem, namespace, "SexCode", patient.sex_code)

    # ZipCode or Phone is required by the gateway
    address = _add_element(patient_elem, namespace, "Address")
    _add_element(address, namespace, "Street", patient.street)
    _add_optional_element(address, namespace, "Street", patient.street2)
    _add_element(address, namespace, "City", patient.city)
    _add_optional_element(address, namespace, "StateCode", patient.state_code)
    _add_element(address, namespace, "ZipCode", patient.zip_code)

    _add_optional_element(patient_elem, namespace, "Phone", patient.phone)

    return _serialize(root)


def build_report_request(
    provider: Provider,
    namespace: str = GATEWAY_NAMESPACE,
) -> str:
    """Build the ReportRequest document for the report stage.
    
    The report is addressed by its one-time link, so the document carries only
    the requester details.
    
    Args:
        provider: Provider viewing the report
        namespace: Gateway namespace for the target API version
        
    Returns:
        ReportRequest XML text (no XML declaration)
    """
    logger.debug("Building ReportRequest document")

    root = etree.Element(f"{{{namespace}}}ReportRequest", nsmap={None: namespace})
    _add_requester(root, provider, namespace)
    return _serialize(root)
