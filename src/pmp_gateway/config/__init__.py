"""Config module.

This module provides configuration management functionality.
"""

from pmp_gateway.config.manager import GatewaySecrets, load_config, resolve_secrets
from pmp_gateway.config.schema import (
    CertificatesConfig,
    Config,
    CredentialsConfig,
    GatewayConfig,
    LoggingConfig,
    ProviderConfig,
    TransportConfig,
)

__all__ = [
    # Main configuration loading
    "load_config",
    "resolve_secrets",
    "GatewaySecrets",
    # Configuration models
    "Config",
    "GatewayConfig",
    "CredentialsConfig",
    "CertificatesConfig",
    "TransportConfig",
    "ProviderConfig",
    "LoggingConfig",
]
