"""Transport module.

This module provides the authenticated HTTPS session used for gateway calls.
"""

from pmp_gateway.transport.http_client import (
    REQUEST_TIMEOUT_SECONDS,
    GatewaySession,
    TransportResponse,
)

__all__ = [
    "GatewaySession",
    "TransportResponse",
    "REQUEST_TIMEOUT_SECONDS",
]
