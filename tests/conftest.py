"""
Shared pytest configuration and fixtures.

This module provides fixtures and configuration used across all test suites
(unit and integration tests).
"""

import base64
from datetime import datetime, timedelta, timezone
from typing import Callable

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import BestAvailableEncryption, pkcs12
from cryptography.x509.oid import NameOID

from pmp_gateway.models.patient import Patient
from pmp_gateway.models.requester import Provider, ProviderRole
from pmp_gateway.transport.http_client import TransportResponse

GATEWAY_NS = "http://xml.appriss.com/gateway/v5"
TEST_CERT_PASSWORD = "test-password"


@pytest.fixture
def sample_provider() -> Provider:
    """
    Return a provider with a DEA number.
    
    Returns:
        Provider: Physician at a test clinic in Ohio.
    """
    return Provider(
        first_name="Gregory",
        last_name="House",
        role=ProviderRole.PHYSICIAN,
        location_name="Princeton Plainsboro Clinic",
        state_code="OH",
        dea_number="AB1234563",
    )


@pytest.fixture
def sample_patient() -> Patient:
    """
    Return a patient with every optional field populated.
    
    Returns:
        Patient: Patient with address, state, and phone.
    """
    return Patient(
        first_name="Jane",
        last_name="Doe",
        birthdate="1970-07-01",
        sex_code="F",
        street="123 Main St",
        street2="Apt 4",
        city="Columbus",
        state_code="OH",
        zip_code="43215",
        phone="614-555-1994",
    )


@pytest.fixture
def minimal_patient() -> Patient:
    """
    Return a patient without state code or phone.
    
    Returns:
        Patient: Patient with only the fields the gateway requires.
    """
    return Patient(
        first_name="John",
        last_name="Smith",
        birthdate="1980-01-01",
        street="1 Elm St",
        city="Dublin",
        zip_code="43017",
    )


@pytest.fixture
def make_response() -> Callable[..., TransportResponse]:
    """
    Return a factory for TransportResponse values.
    
    Returns:
        Callable: factory(status_code, text, reason="") -> TransportResponse
    """
    def _make(status_code: int, text: str, reason: str = "") -> TransportResponse:
        return TransportResponse(status_code=status_code, reason=reason, text=text)
    
    return _make


@pytest.fixture
def viewable_report_xml() -> str:
    """Patient response carrying a report link."""
    return (
        f'<PatientResponse xmlns="{GATEWAY_NS}">'
        "<Report>"
        "<ViewableReport>https://gateway.example.com/report/123</ViewableReport>"
        "</Report>"
        "</PatientResponse>"
    )


@pytest.fixture
def disallowed_xml() -> str:
    """Patient response for a patient that could not be uniquely identified."""
    return (
        f'<PatientResponse xmlns="{GATEWAY_NS}">'
        "<Disallowed>"
        "<Message>Multiple patients matched</Message>"
        "<Details>Refine the search criteria</Details>"
        "</Disallowed>"
        "</PatientResponse>"
    )


@pytest.fixture
def embedded_error_xml() -> str:
    """Patient response with an Error node and no report link."""
    return (
        f'<PatientResponse xmlns="{GATEWAY_NS}">'
        "<Error>"
        "<Message>State PMP unavailable</Message>"
        "<Details>Try again later</Details>"
        "</Error>"
        "</PatientResponse>"
    )


@pytest.fixture
def report_html() -> str:
    """Rendered report returned by the report stage."""
    return (
        "<html><head><title>PMP Report</title></head>"
        "<body><h1>Prescription History</h1><p>No records found.</p></body></html>"
    )


def _generate_pkcs12(password: str, days_valid: int = 365) -> bytes:
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    subject = issuer = x509.Name([
        x509.NameAttribute(NameOID.COUNTRY_NAME, "US"),
        x509.NameAttribute(NameOID.ORGANIZATION_NAME, "TestOrg"),
        x509.NameAttribute(NameOID.COMMON_NAME, "PMP Gateway Test Client"),
    ])
    now = datetime.now(timezone.utc)
    cert = x509.CertificateBuilder().subject_name(
        subject
    ).issuer_name(
        issuer
    ).public_key(
        private_key.public_key()
    ).serial_number(
        x509.random_serial_number()
    ).not_valid_before(
        now - timedelta(days=1)
    ).not_valid_after(
        now + timedelta(days=days_valid)
    ).sign(private_key, hashes.SHA256())
    
    return pkcs12.serialize_key_and_certificates(
        name=b"pmp-gateway-test",
        key=private_key,
        cert=cert,
        cas=None,
        encryption_algorithm=BestAvailableEncryption(password.encode("utf-8")),
    )


@pytest.fixture(scope="session")
def pkcs12_bytes() -> bytes:
    """
    Generate a self-signed PKCS12 client identity once per test session.
    
    Returns:
        bytes: PKCS12 bundle protected with TEST_CERT_PASSWORD.
    """
    return _generate_pkcs12(TEST_CERT_PASSWORD)


@pytest.fixture(scope="session")
def expiring_pkcs12_bytes() -> bytes:
    """PKCS12 bundle whose certificate expires in ten days."""
    return _generate_pkcs12(TEST_CERT_PASSWORD, days_valid=10)


@pytest.fixture
def pkcs12_base64(pkcs12_bytes: bytes) -> str:
    """Base64 text of the generated PKCS12 bundle."""
    return base64.b64encode(pkcs12_bytes).decode("ascii")


@pytest.fixture
def cert_password() -> str:
    """Password of the generated PKCS12 bundle."""
    return TEST_CERT_PASSWORD
