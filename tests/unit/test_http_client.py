"""Unit tests for the PMP Gateway HTTP transport."""

import ssl
import threading
from unittest.mock import Mock, patch

import pytest
import requests
from requests.exceptions import ConnectionError, SSLError, Timeout

from pmp_gateway.config.schema import (
    Config,
    CertificatesConfig,
    CredentialsConfig,
    GatewayConfig,
    TransportConfig,
)
from pmp_gateway.transport.http_client import (
    ACCEPT_TYPE,
    REQUEST_CONTENT_TYPE,
    REQUEST_TIMEOUT_SECONDS,
    ClientCertificateAdapter,
    GatewaySession,
    TransportResponse,
)
from pmp_gateway.utils.exceptions import CertificateLoadError, ConfigurationError, TransportError


@pytest.fixture
def ssl_context():
    """Plain client SSL context standing in for the PKCS12 identity."""
    return ssl.create_default_context()


@pytest.fixture
def gateway_session():
    """Session with dummy credentials; certificate loading is patched per test."""
    session = GatewaySession(
        base_uri="https://gateway.example.com/",
        api_version="/v5_1/",
        certificate="Y2VydA==",
        certificate_password="secret",
        username="user",
        password="pass",
    )
    yield session
    session.close()


def _http_response(status_code=200, text="<ok/>", reason="OK"):
    response = Mock(spec=requests.Response)
    response.status_code = status_code
    response.text = text
    response.reason = reason
    response.encoding = "utf-8"
    response.iter_content.return_value = [text.encode("utf-8")]
    return response


class TestClientCertificateAdapter:
    """Test cases for ClientCertificateAdapter."""

    def test_pool_manager_uses_context(self, ssl_context):
        """Test the SSL context is handed to the connection pool."""
        # Act
        adapter = ClientCertificateAdapter(ssl_context)

        # Assert
        assert adapter.poolmanager.connection_pool_kw["ssl_context"] is ssl_context

    def test_retries_disabled(self, ssl_context):
        """Test a failed call is never retried."""
        # Act
        adapter = ClientCertificateAdapter(ssl_context)

        # Assert
        assert adapter.max_retries.total == 0


class TestGatewaySession:
    """Test cases for GatewaySession."""

    def test_patient_uri(self, gateway_session):
        """Test patient URI joins base URI and API version with single slashes."""
        assert gateway_session.patient_uri == "https://gateway.example.com/v5_1/patient"

    def test_no_certificate_work_at_construction(self):
        """Test constructing a session does not load the certificate."""
        with patch("pmp_gateway.transport.http_client.load_client_ssl_context") as mock_load:
            GatewaySession("https://g", "v5", "cert", "pw", "u", "p")

        mock_load.assert_not_called()

    def test_post_sends_expected_request(self, gateway_session, ssl_context):
        """Test headers, auth, timeout and body of a gateway POST."""
        # Arrange
        with patch(
            "pmp_gateway.transport.http_client.load_client_ssl_context",
            return_value=ssl_context,
        ), patch.object(
            requests.Session, "post", return_value=_http_response(200, "<ok/>")
        ) as mock_post:
            # Act
            response = gateway_session.post(gateway_session.patient_uri, "<PatientRequest/>")

        # Assert
        assert response == TransportResponse(status_code=200, reason="OK", text="<ok/>")
        args, kwargs = mock_post.call_args
        assert args[0] == "https://gateway.example.com/v5_1/patient"
        assert kwargs["data"] == b"<PatientRequest/>"
        assert kwargs["headers"]["Content-Type"] == REQUEST_CONTENT_TYPE
        assert kwargs["timeout"] == REQUEST_TIMEOUT_SECONDS == 300

    def test_session_carries_auth_and_accept(self, gateway_session, ssl_context):
        """Test Basic credentials and Accept header are set on the session."""
        # Arrange
        with patch(
            "pmp_gateway.transport.http_client.load_client_ssl_context",
            return_value=ssl_context,
        ):
            # Act
            session = gateway_session._get_session()

        # Assert
        assert session.auth.username == "user"
        assert session.auth.password == "pass"
        assert session.headers["Accept"] == ACCEPT_TYPE
        assert isinstance(session.get_adapter("https://gateway.example.com"), ClientCertificateAdapter)

    def test_identity_built_once(self, gateway_session, ssl_context):
        """Test the TLS identity is built lazily once and then reused."""
        # Arrange
        with patch(
            "pmp_gateway.transport.http_client.load_client_ssl_context",
            return_value=ssl_context,
        ) as mock_load, patch.object(
            requests.Session, "post", return_value=_http_response()
        ):
            # Act
            gateway_session.post("https://gateway.example.com/a", "<a/>")
            gateway_session.post("https://gateway.example.com/b", "<b/>")

        # Assert
        mock_load.assert_called_once_with("Y2VydA==", "secret", verify_tls=True)

    def test_identity_built_once_across_threads(self, gateway_session, ssl_context):
        """Test concurrent first calls build the identity only once."""
        # Arrange
        errors = []

        def worker():
            try:
                gateway_session.post("https://gateway.example.com/a", "<a/>")
            except Exception as e:
                errors.append(e)

        with patch(
            "pmp_gateway.transport.http_client.load_client_ssl_context",
            return_value=ssl_context,
        ) as mock_load, patch.object(
            requests.Session, "post", return_value=_http_response()
        ):
            threads = [threading.Thread(target=worker) for _ in range(8)]
            # Act
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join()

        # Assert
        assert errors == []
        assert mock_load.call_count == 1

    @pytest.mark.parametrize(
        "exception, expected",
        [
            (Timeout("read timed out"), "timed out"),
            (SSLError("handshake failure"), "TLS error"),
            (ConnectionError("refused"), "Could not reach"),
        ],
    )
    def test_request_exceptions_wrapped(self, gateway_session, ssl_context, exception, expected):
        """Test requests exceptions surface as TransportError."""
        # Arrange
        with patch(
            "pmp_gateway.transport.http_client.load_client_ssl_context",
            return_value=ssl_context,
        ), patch.object(requests.Session, "post", side_effect=exception):
            # Act & Assert
            with pytest.raises(TransportError, match=expected):
                gateway_session.post("https://gateway.example.com/a", "<a/>")

    def test_body_read_in_chunks(self, gateway_session, ssl_context):
        """Test the body is streamed and joined before decoding."""
        # Arrange
        http_response = _http_response(200, "")
        http_response.iter_content.return_value = [b"<Response>", "é".encode("utf-8"), b"</Response>"]
        with patch(
            "pmp_gateway.transport.http_client.load_client_ssl_context",
            return_value=ssl_context,
        ), patch.object(requests.Session, "post", return_value=http_response) as mock_post:
            # Act
            response = gateway_session.post("https://gateway.example.com/a", "<a/>")

        # Assert
        assert response.text == "<Response>é</Response>"
        assert mock_post.call_args[1]["stream"] is True
        http_response.close.assert_called_once()

    def test_total_deadline_enforced(self, gateway_session, ssl_context):
        """Test a body that trickles in past the deadline raises TransportError."""
        # Arrange
        http_response = _http_response(200, "")
        http_response.iter_content.return_value = [b"<Response>", b"</Response>"]
        mock_time = Mock()
        mock_time.monotonic.side_effect = [0.0, 10.0, REQUEST_TIMEOUT_SECONDS + 1.0]
        with patch(
            "pmp_gateway.transport.http_client.load_client_ssl_context",
            return_value=ssl_context,
        ), patch.object(
            requests.Session, "post", return_value=http_response
        ), patch("pmp_gateway.transport.http_client.time", mock_time):
            # Act & Assert
            with pytest.raises(TransportError, match="timed out after 300s"):
                gateway_session.post("https://gateway.example.com/a", "<a/>")

        http_response.close.assert_called_once()

    def test_certificate_error_propagates(self, gateway_session):
        """Test certificate failures are raised to the caller."""
        with patch(
            "pmp_gateway.transport.http_client.load_client_ssl_context",
            side_effect=CertificateLoadError("bad certificate"),
        ):
            with pytest.raises(CertificateLoadError):
                gateway_session.post("https://gateway.example.com/a", "<a/>")

    def test_close_is_idempotent(self, gateway_session, ssl_context):
        """Test close releases the session once and later posts fail."""
        # Arrange
        with patch(
            "pmp_gateway.transport.http_client.load_client_ssl_context",
            return_value=ssl_context,
        ):
            http_session = gateway_session._get_session()

        # Act
        with patch.object(http_session, "close") as mock_close:
            gateway_session.close()
            gateway_session.close()

        # Assert
        mock_close.assert_called_once()
        assert gateway_session.closed
        with pytest.raises(TransportError, match="closed"):
            gateway_session.post("https://gateway.example.com/a", "<a/>")

    def test_context_manager_closes(self):
        """Test leaving the with block closes the session."""
        # Act
        with GatewaySession("https://g", "v5", "cert", "pw", "u", "p") as session:
            pass

        # Assert
        assert session.closed

    def test_verify_disabled_warns(self, caplog):
        """Test disabling TLS verification logs a warning."""
        # Act
        GatewaySession("https://g", "v5", "cert", "pw", "u", "p", verify_tls=False)

        # Assert
        assert "verification is DISABLED" in caplog.text


class TestFromConfig:
    """Test cases for building a session from configuration."""

    def test_from_config(self, monkeypatch):
        """Test settings come from config and secrets from the environment."""
        # Arrange
        monkeypatch.setenv("PMP_GATEWAY_PASSWORD", "env-pass")
        monkeypatch.setenv("PMP_GATEWAY_CERTIFICATE", "Y2VydA==")
        monkeypatch.setenv("PMP_GATEWAY_CERTIFICATE_PASSWORD", "cert-pass")
        config = Config(
            gateway=GatewayConfig(base_uri="https://gateway.example.com", api_version="v5_1"),
            credentials=CredentialsConfig(username="svc-user"),
            certificates=CertificatesConfig(),
            transport=TransportConfig(verify_tls=False),
        )

        # Act
        session = GatewaySession.from_config(config)

        # Assert
        assert session.patient_uri == "https://gateway.example.com/v5_1/patient"
        assert session.verify_tls is False
        assert session._auth.username == "svc-user"
        assert session._auth.password == "env-pass"

    def test_from_config_missing_secret(self, monkeypatch):
        """Test a missing secret raises ConfigurationError."""
        # Arrange
        monkeypatch.delenv("PMP_GATEWAY_PASSWORD", raising=False)
        config = Config(gateway=GatewayConfig(base_uri="https://gateway.example.com"))

        # Act & Assert
        with pytest.raises(ConfigurationError, match="PMP_GATEWAY_PASSWORD"):
            GatewaySession.from_config(config)
