"""Client certificate data models.

This module defines dataclasses describing the PKCS12 client identity presented
to the PMP Gateway during the mutual TLS handshake.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, List, Optional

from cryptography import x509


@dataclass
class CertificateInfo:
    """Certificate details safe to display and log.

    Attributes:
        subject: Certificate subject Distinguished Name (DN)
        issuer: Certificate issuer Distinguished Name (DN)
        not_before: Certificate validity start date
        not_after: Certificate expiration date
        serial_number: Certificate serial number
        key_size: Public key size in bits (e.g., 2048, 4096)
    """

    subject: str
    issuer: str
    not_before: datetime
    not_after: datetime
    serial_number: int
    key_size: Optional[int]


@dataclass
class CertificateBundle:
    """Certificate, private key, and chain loaded from a PKCS12 bundle.

    Attributes:
        certificate: X.509 client certificate
        private_key: Private key matching the certificate
        chain: Additional certificates shipped in the bundle
        info: Extracted certificate information
    """

    certificate: x509.Certificate
    private_key: Any
    chain: List[x509.Certificate]
    info: CertificateInfo
