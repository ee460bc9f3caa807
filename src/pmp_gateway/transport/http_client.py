"""Authenticated HTTPS transport for the PMP Gateway.

This module provides the GatewaySession, which owns the mutual TLS client
identity and the Basic authentication credentials for the lifetime of a caller
context and performs the raw POST calls used by both gateway stages.

The session never interprets response bodies; it returns the status code,
reason phrase, and text for the response classifier.
"""

import logging
import ssl
import time
from dataclasses import dataclass
from threading import Lock
from typing import TYPE_CHECKING, Optional

import requests
from requests.adapters import HTTPAdapter
from requests.auth import HTTPBasicAuth

from pmp_gateway.transport.certificates import load_client_ssl_context
from pmp_gateway.utils.exceptions import TransportError

if TYPE_CHECKING:
    from pmp_gateway.config.schema import Config

logger = logging.getLogger(__name__)

# Upper bound for a single gateway call: five minutes
REQUEST_TIMEOUT_SECONDS = 300
BODY_CHUNK_SIZE = 64 * 1024

# The gateway expects form content type even though the payload is XML
REQUEST_CONTENT_TYPE = "application/x-www-form-urlencoded; charset=utf-8"
ACCEPT_TYPE = "application/xml"


@dataclass(frozen=True)
class TransportResponse:
    """Raw gateway response.
    
    Attributes:
        status_code: HTTP status code
        reason: HTTP reason phrase
        text: Response body text
    """

    status_code: int
    reason: str
    text: str


class ClientCertificateAdapter(HTTPAdapter):
    """Present a client certificate for every HTTPS connection.
    
    Custom requests adapter that installs an SSL context carrying the PMP
    Gateway client identity (TLS 1.2+). Retries are disabled.
    
    Example:
        >>> session = requests.Session()
        >>> session.mount('https://', ClientCertificateAdapter(ssl_context))
    """

    def __init__(self, ssl_context: ssl.SSLContext, **kwargs) -> None:
        # HTTPAdapter.__init__ builds the pool manager, so the context must exist first
        self._ssl_context = ssl_context
        kwargs.setdefault("max_retries", 0)
        super().__init__(**kwargs)

    def init_poolmanager(self, *args, **kwargs):
        """Initialize connection pool with the client identity context."""
        kwargs["ssl_context"] = self._ssl_context
        return super().init_poolmanager(*args, **kwargs)

    def proxy_manager_for(self, *args, **kwargs):
        """Use the client identity context through proxies as well."""
        kwargs["ssl_context"] = self._ssl_context
        return super().proxy_manager_for(*args, **kwargs)


class GatewaySession:
    """Authenticated session against the PMP Gateway.
    
    Holds the base URI, API version, certificate material, and Basic
    credentials. The TLS client identity is built lazily on the first call
    and reused until close(); it is never rebuilt mid-session. Safe for
    concurrent post() calls from multiple threads.
    
    Attributes:
        base_uri: Gateway base URI (sandbox or production)
        api_version: API version path segment (e.g. "v5")
        verify_tls: Whether the gateway's server certificate is verified
        
    Example:
        >>> with GatewaySession(
        ...     base_uri="https://gateway.example.com",
        ...     api_version="v5",
        ...     certificate=certificate_b64,
        ...     certificate_password="secret",
        ...     username="user",
        ...     password="pass",
        ... ) as session:
        ...     response = session.post(session.patient_uri, patient_xml)
    """

    def __init__(
        self,
        base_uri: str,
        api_version: str,
        certificate: str,
        certificate_password: Optional[str],
        username: str,
        password: str,
        verify_tls: bool = True,
    ) -> None:
        """Initialize the session. No network or certificate work happens here.
        
        Args:
            base_uri: Gateway base URI
            api_version: API version path segment
            certificate: Base64-encoded PKCS12 client certificate
            certificate_password: PKCS12 password
            username: Gateway username
            password: Gateway password
            verify_tls: Verify the gateway's server certificate (default True)
        """
        self.base_uri = base_uri
        self.api_version = api_version
        self.verify_tls = verify_tls
        self._certificate = certificate
        self._certificate_password = certificate_password
        self._auth = HTTPBasicAuth(username, password)
        self._session: Optional[requests.Session] = None
        self._closed = False
        self._lock = Lock()

        if not verify_tls:
            logger.warning(
                "TLS certificate verification is DISABLED. "
                "This should only be used against a sandbox gateway."
            )

    @classmethod
    def from_config(cls, config: "Config") -> "GatewaySession":
        """Create a session from loaded configuration and environment secrets.
        
        Args:
            config: Loaded configuration
            
        Returns:
            New GatewaySession
            
        Raises:
            ConfigurationError: If a secret is missing from the environment
        """
        from pmp_gateway.config.manager import resolve_secrets

        secrets = resolve_secrets(config)
        return cls(
            base_uri=config.gateway.base_uri,
            api_version=config.gateway.api_version,
            certificate=secrets.certificate,
            certificate_password=secrets.certificate_password,
            username=config.credentials.username,
            password=secrets.password,
            verify_tls=config.transport.verify_tls,
        )

    @property
    def patient_uri(self) -> str:
        """Patient stage endpoint: {base_uri}/{api_version}/patient."""
        return f"{self.base_uri.rstrip('/')}/{self.api_version.strip('/')}/patient"

    @property
    def closed(self) -> bool:
        return self._closed

    def _get_session(self) -> requests.Session:
        """Get or create the requests session carrying the client identity.
        
        Returns:
            Configured requests.Session
            
        Raises:
            TransportError: If the session has been closed
            CertificateLoadError: If the client certificate cannot be loaded
        """
        with self._lock:
            if self._closed:
                raise TransportError("GatewaySession is closed")
            if self._session is None:
                self._session = self._create_session()
            return self._session

    def _create_session(self) -> requests.Session:
        ssl_context = load_client_ssl_context(
            self._certificate, self._certificate_password, verify_tls=self.verify_tls
        )

        session = requests.Session()
        session.mount("https://", ClientCertificateAdapter(ssl_context))
        session.auth = self._auth
        session.verify = self.verify_tls
        session.headers.update({"Accept": ACCEPT_TYPE})

        logger.info(f"Created PMP Gateway session for {self.base_uri}")
        return session

    def post(self, uri: str, body_xml: str) -> TransportResponse:
        """POST an XML document to the gateway.
        
        The timeout is a total deadline for the call. requests bounds the
        connect and each socket read; the body is streamed and the deadline
        is checked between chunks, so a response that trickles in is cut off.
        
        Args:
            uri: Absolute endpoint URI
            body_xml: Request document text
            
        Returns:
            TransportResponse with the raw status, reason, and body
            
        Raises:
            TransportError: On timeout, connection or TLS failure, or a closed session
            CertificateLoadError: If the client certificate cannot be loaded
        """
        session = self._get_session()

        logger.debug(f"POST {uri} ({len(body_xml)} characters)")
        deadline = time.monotonic() + REQUEST_TIMEOUT_SECONDS
        try:
            response = session.post(
                uri,
                data=body_xml.encode("utf-8"),
                headers={"Content-Type": REQUEST_CONTENT_TYPE},
                timeout=REQUEST_TIMEOUT_SECONDS,
                stream=True,
            )
            try:
                text = _read_body(response, uri, deadline)
            finally:
                response.close()
        except requests.Timeout as e:
            logger.error(f"Request to {uri} timed out after {REQUEST_TIMEOUT_SECONDS}s")
            raise TransportError(
                f"Request to PMP Gateway timed out after {REQUEST_TIMEOUT_SECONDS}s: {e}"
            ) from e
        except requests.exceptions.SSLError as e:
            logger.error(f"TLS handshake with {uri} failed: {e}")
            raise TransportError(f"TLS error communicating with PMP Gateway: {e}") from e
        except requests.RequestException as e:
            logger.error(f"Could not reach PMP Gateway at {uri}: {e}")
            raise TransportError(f"Could not reach PMP Gateway: {e}") from e

        logger.debug(f"PMP Gateway responded HTTP {response.status_code}")
        return TransportResponse(
            status_code=response.status_code,
            reason=response.reason or "",
            text=text,
        )

    def close(self) -> None:
        """Release the HTTP session and client identity.
        
        Safe to call more than once; resources are released exactly once.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            if self._session is not None:
                self._session.close()
                self._session = None
                logger.debug("GatewaySession closed")

    def __enter__(self) -> "GatewaySession":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def _read_body(response: requests.Response, uri: str, deadline: float) -> str:
    """Read a streamed response body, enforcing the call deadline.
    
    Args:
        response: Streamed response
        uri: Endpoint URI, for error messages
        deadline: time.monotonic() value by which the body must be read
        
    Returns:
        Decoded body text
        
    Raises:
        TransportError: If the deadline passes before the body is complete
    """
    chunks = []
    for chunk in response.iter_content(chunk_size=BODY_CHUNK_SIZE):
        if time.monotonic() > deadline:
            logger.error(f"Response from {uri} exceeded {REQUEST_TIMEOUT_SECONDS}s")
            raise TransportError(
                f"Request to PMP Gateway timed out after {REQUEST_TIMEOUT_SECONDS}s: "
                "response body not complete"
            )
        chunks.append(chunk)
    return b"".join(chunks).decode(response.encoding or "utf-8", errors="replace")
