"""Custom exception classes for the PMP Gateway client.

All exceptions inherit from PMPGatewayError to allow catching all custom exceptions.

Predictable gateway behaviour (HTTP 4xx/5xx, embedded error nodes, unparsable
bodies) is never raised; it is returned as an Outcome variant. These exceptions
cover local failures only.
"""


class PMPGatewayError(Exception):
    """Base exception for all PMP Gateway client custom exceptions."""

    pass


class ConfigurationError(PMPGatewayError):
    """Raised when configuration loading or validation fails.
    
    Examples:
        - Missing required configuration
        - Invalid configuration file format
        - Secret environment variable not set
    """

    pass


class TransportError(PMPGatewayError):
    """Raised when network/transport issues occur.
    
    Examples:
        - Request exceeded the five minute ceiling
        - Connection refused or TLS handshake failure
        - Session used after it was closed
    """

    pass


class CertificateLoadError(PMPGatewayError):
    """Raised when the client certificate cannot be loaded.
    
    Examples:
        - Certificate text is not valid Base64
        - PKCS12 data is corrupted
        - Incorrect certificate password
        - PKCS12 bundle has no certificate or no private key
    """

    pass
