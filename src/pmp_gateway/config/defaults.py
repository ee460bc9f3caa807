"""Default configuration values.

This module defines the default configuration values used when no configuration
file is provided or when configuration values are not specified.
"""

from typing import Any

# Default configuration dictionary
# This is used as a fallback when no configuration file is present
DEFAULT_CONFIG: dict[str, Any] = {
    "gateway": {
        # Appriss PMP Gateway test environment
        "base_uri": "https://prep.pmpgateway.net",
        "api_version": "v5_1",
        "namespace": "http://xml.appriss.com/gateway/v5",
    },
    "credentials": {
        # Username is not secret; password always comes from the environment
        "username": "",
        "password_env_var": "PMP_GATEWAY_PASSWORD",
    },
    "certificates": {
        # No default PKCS12 file - Base64 certificate may come from environment
        "pkcs12_path": None,
        "certificate_env_var": "PMP_GATEWAY_CERTIFICATE",
        "password_env_var": "PMP_GATEWAY_CERTIFICATE_PASSWORD",
    },
    "transport": {
        # Verify the gateway's TLS certificate by default
        "verify_tls": True,
    },
    "provider": None,
    "logging": {
        "level": "INFO",
        "log_file": "logs/pmp-gateway.log",
        # Patient identifiers are redacted unless the user opts out
        "redact_pii": True,
    },
}

# Default configuration file path
DEFAULT_CONFIG_PATH = "config/config.json"
