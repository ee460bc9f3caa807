"""Client certificate loading for mutual TLS with the PMP Gateway.

The gateway issues a PKCS12 (.pfx/.p12) client certificate, supplied to this
client as Base64 text plus a password. This module decodes the bundle and turns
it into an ssl.SSLContext presenting that identity.
"""

import base64
import binascii
import logging
import secrets
import ssl
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.serialization import Encoding, PrivateFormat, pkcs12
from urllib3.util.ssl_ import create_urllib3_context

from pmp_gateway.models.certificates import CertificateBundle, CertificateInfo
from pmp_gateway.utils.exceptions import CertificateLoadError

logger = logging.getLogger(__name__)

EXPIRATION_WARNING_DAYS = 30


def get_certificate_info(cert: x509.Certificate) -> CertificateInfo:
    """Extract certificate information for display and logging.

    Args:
        cert: X.509 certificate

    Returns:
        CertificateInfo dataclass with certificate details
    """
    public_key = cert.public_key()
    key_size = public_key.key_size if hasattr(public_key, "key_size") else None

    return CertificateInfo(
        subject=cert.subject.rfc4514_string(),
        issuer=cert.issuer.rfc4514_string(),
        not_before=cert.not_valid_before_utc,
        not_after=cert.not_valid_after_utc,
        serial_number=cert.serial_number,
        key_size=key_size,
    )


def check_expiration_warning(
    cert: x509.Certificate, warning_days: int = EXPIRATION_WARNING_DAYS
) -> bool:
    """Check if certificate is expiring soon and log warning.

    Args:
        cert: X.509 certificate to check
        warning_days: Number of days before expiration to warn (default: 30)

    Returns:
        True if certificate expires within warning_days, False otherwise
    """
    now = datetime.now(timezone.utc)
    warning_date = now + timedelta(days=warning_days)

    if cert.not_valid_after_utc < warning_date:
        days_remaining = (cert.not_valid_after_utc - now).days
        logger.warning(
            f"PMP Gateway client certificate expiring soon: {days_remaining} days remaining "
            f"(expires: {cert.not_valid_after_utc.strftime('%Y-%m-%d')})"
        )
        return True

    return False


def decode_certificate(certificate: str) -> bytes:
    """Decode Base64 certificate text into PKCS12 bytes.

    Args:
        certificate: Base64-encoded PKCS12 bundle

    Returns:
        Raw PKCS12 bytes

    Raises:
        CertificateLoadError: If the text is empty or not valid Base64
    """
    if not certificate or not certificate.strip():
        raise CertificateLoadError(
            "No client certificate provided. "
            "Supply the Base64-encoded PKCS12 certificate issued for the PMP Gateway."
        )
    try:
        return base64.b64decode("".join(certificate.split()), validate=True)
    except (binascii.Error, ValueError) as e:
        raise CertificateLoadError(
            f"Client certificate is not valid Base64: {e}"
        ) from e


def load_pkcs12_bundle(
    pkcs12_data: bytes, password: Optional[str] = None
) -> CertificateBundle:
    """Load certificate, private key, and chain from PKCS12 bytes.

    Args:
        pkcs12_data: Raw PKCS12 bytes
        password: Password for the PKCS12 bundle

    Returns:
        CertificateBundle with certificate, key, chain, and info

    Raises:
        CertificateLoadError: If the bundle cannot be loaded
    """
    password_bytes = password.encode("utf-8") if password else None
    try:
        private_key, certificate, additional_certs = pkcs12.load_key_and_certificates(
            pkcs12_data, password_bytes
        )
    except (ValueError, TypeError) as e:
        raise CertificateLoadError(
            f"Failed to load PKCS12 client certificate: {e}. "
            f"Ensure the certificate is valid PKCS12 and the password is correct."
        ) from e

    if certificate is None:
        raise CertificateLoadError("No certificate found in PKCS12 bundle")
    if private_key is None:
        raise CertificateLoadError("No private key found in PKCS12 bundle")

    info = get_certificate_info(certificate)
    logger.info(f"Loaded PKCS12 client certificate: {info.subject}")
    logger.info(f"Certificate expires: {info.not_after.strftime('%Y-%m-%d')}")
    if additional_certs:
        logger.info(f"Loaded {len(additional_certs)} additional certificates from chain")

    check_expiration_warning(certificate)

    return CertificateBundle(
        certificate=certificate,
        private_key=private_key,
        chain=list(additional_certs or []),
        info=info,
    )


def create_client_ssl_context(
    bundle: CertificateBundle, verify_tls: bool = True
) -> ssl.SSLContext:
    """Build a TLS 1.2+ context presenting the bundle as client identity.

    ssl.SSLContext only loads identities from files, so the certificate chain
    and an encrypted copy of the key are written to a private temporary
    directory and removed once loaded.

    Args:
        bundle: Loaded client certificate bundle
        verify_tls: Whether to verify the gateway's server certificate

    Returns:
        Configured SSL context

    Raises:
        CertificateLoadError: If the identity cannot be loaded into the context
    """
    context = create_urllib3_context()
    context.minimum_version = ssl.TLSVersion.TLSv1_2
    if verify_tls:
        context.load_default_certs()
    else:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE

    passphrase = secrets.token_bytes(32)
    cert_pem = bundle.certificate.public_bytes(Encoding.PEM) + b"".join(
        cert.public_bytes(Encoding.PEM) for cert in bundle.chain
    )
    key_pem = bundle.private_key.private_bytes(
        encoding=Encoding.PEM,
        format=PrivateFormat.PKCS8,
        encryption_algorithm=serialization.BestAvailableEncryption(passphrase),
    )

    with tempfile.TemporaryDirectory(prefix="pmp-gateway-") as temp_dir:
        cert_file = Path(temp_dir) / "client_cert.pem"
        key_file = Path(temp_dir) / "client_key.pem"
        cert_file.write_bytes(cert_pem)
        key_file.write_bytes(key_pem)
        try:
            context.load_cert_chain(
                certfile=str(cert_file), keyfile=str(key_file), password=passphrase
            )
        except ssl.SSLError as e:
            raise CertificateLoadError(
                f"Failed to load client certificate into TLS context: {e}"
            ) from e

    logger.debug("Client TLS context created")
    return context


def load_client_ssl_context(
    certificate: str, password: Optional[str], verify_tls: bool = True
) -> ssl.SSLContext:
    """Decode a Base64 PKCS12 certificate and build the client TLS context.

    Args:
        certificate: Base64-encoded PKCS12 bundle
        password: PKCS12 password
        verify_tls: Whether to verify the gateway's server certificate

    Returns:
        SSL context presenting the client certificate

    Raises:
        CertificateLoadError: If decoding or loading fails
    """
    bundle = load_pkcs12_bundle(decode_certificate(certificate), password)
    return create_client_ssl_context(bundle, verify_tls=verify_tls)


def encode_certificate_file(p12_path: Path) -> str:
    """Read a PKCS12 file and return its Base64 text.

    Args:
        p12_path: Path to a .p12 or .pfx file

    Returns:
        Base64-encoded file contents

    Raises:
        CertificateLoadError: If the file cannot be read
    """
    if not p12_path.exists():
        raise CertificateLoadError(
            f"PKCS12 file not found: {p12_path}. "
            f"Ensure the file exists and path is correct."
        )
    try:
        return base64.b64encode(p12_path.read_bytes()).decode("ascii")
    except OSError as e:
        raise CertificateLoadError(f"Failed to read PKCS12 file {p12_path}: {e}") from e
