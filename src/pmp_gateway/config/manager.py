"""Configuration manager for loading and managing configuration.

This module provides the main configuration loading and management functionality,
including support for JSON configuration files, environment variable overrides,
configuration validation, and resolution of secrets from the environment.
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from pmp_gateway.config.defaults import DEFAULT_CONFIG, DEFAULT_CONFIG_PATH
from pmp_gateway.config.schema import Config
from pmp_gateway.transport.certificates import encode_certificate_file
from pmp_gateway.utils.exceptions import CertificateLoadError, ConfigurationError

logger = logging.getLogger(__name__)

# Environment variable prefix for all configuration overrides
ENV_PREFIX = "PMP_GATEWAY_"

# Keys that must never appear in a configuration file
SENSITIVE_KEYS = ("password", "certificate", "certificate_password")


@dataclass(frozen=True)
class GatewaySecrets:
    """Secrets resolved from the environment.
    
    Attributes:
        password: Gateway Basic authentication password
        certificate: Base64-encoded PKCS12 client certificate
        certificate_password: PKCS12 password
    """
    
    password: str
    certificate: str
    certificate_password: str
    
    def __repr__(self) -> str:
        return "GatewaySecrets(password=***, certificate=***, certificate_password=***)"


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from file and environment variables.
    
    Configuration is loaded with the following precedence (highest to lowest):
    1. CLI arguments (handled by caller)
    2. Environment variables (PMP_GATEWAY_* prefix)
    3. Configuration file (JSON)
    4. Default values
    
    Args:
        config_path: Path to configuration file. If None, uses ./config/config.json
        
    Returns:
        Validated Config instance
        
    Raises:
        ConfigurationError: If configuration is invalid or malformed
        
    Example:
        >>> config = load_config(Path("custom/config.json"))
        >>> base_uri = config.gateway.base_uri
    """
    # Load .env file if present in project root
    load_dotenv()
    
    if config_path is None:
        config_path = Path(DEFAULT_CONFIG_PATH)
    
    config_dict = _load_config_file(config_path)
    
    # Check before env overrides so only file contents are reported
    _check_sensitive_values(config_dict)
    
    config_dict = _apply_env_overrides(config_dict)
    
    try:
        return Config(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(
            f"Configuration validation failed:\n{e}\n\n"
            f"Fix: Check your configuration file at {config_path} and ensure all "
            f"values match the expected format."
        ) from e


def _load_config_file(config_path: Path) -> dict[str, Any]:
    """Load configuration file or return defaults.
    
    Args:
        config_path: Path to configuration file
        
    Returns:
        Configuration dictionary
        
    Raises:
        ConfigurationError: If JSON is malformed or the file cannot be read
    """
    if config_path.exists():
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config_dict = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                f"Invalid JSON in config file: {config_path}\n"
                f"Error: {e}\n"
                f"Fix: Check JSON syntax at line {e.lineno}, column {e.colno}"
            ) from e
        except OSError as e:
            raise ConfigurationError(
                f"Failed to read config file: {config_path}\n"
                f"Error: {e}\n"
                f"Fix: Check file permissions and path"
            ) from e
        if not isinstance(config_dict, dict):
            raise ConfigurationError(
                f"Config file {config_path} must contain a JSON object"
            )
        logger.info(f"Loaded configuration from {config_path}")
        return config_dict
    
    logger.info(
        f"Config file not found: {config_path}. Using default configuration."
    )
    # Deep copy of defaults to avoid mutation
    return json.loads(json.dumps(DEFAULT_CONFIG))


def _apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides with PMP_GATEWAY_ prefix.
    
    Supported variables: PMP_GATEWAY_BASE_URI, PMP_GATEWAY_API_VERSION,
    PMP_GATEWAY_NAMESPACE, PMP_GATEWAY_USERNAME, PMP_GATEWAY_PKCS12_PATH,
    PMP_GATEWAY_VERIFY_TLS, PMP_GATEWAY_LOG_LEVEL, PMP_GATEWAY_LOG_FILE,
    PMP_GATEWAY_REDACT_PII.
    
    Args:
        config_dict: Configuration dictionary to update
        
    Returns:
        Updated configuration dictionary with environment overrides applied
    """
    # Gateway section
    if base_uri := os.getenv(f"{ENV_PREFIX}BASE_URI"):
        config_dict.setdefault("gateway", {})["base_uri"] = base_uri
        logger.debug("Override: base_uri from environment")
    
    if api_version := os.getenv(f"{ENV_PREFIX}API_VERSION"):
        config_dict.setdefault("gateway", {})["api_version"] = api_version
        logger.debug("Override: api_version from environment")
    
    if namespace := os.getenv(f"{ENV_PREFIX}NAMESPACE"):
        config_dict.setdefault("gateway", {})["namespace"] = namespace
        logger.debug("Override: namespace from environment")
    
    # Credentials section
    if username := os.getenv(f"{ENV_PREFIX}USERNAME"):
        config_dict.setdefault("credentials", {})["username"] = username
        logger.debug("Override: username from environment")
    
    # Certificates section
    if pkcs12_path := os.getenv(f"{ENV_PREFIX}PKCS12_PATH"):
        config_dict.setdefault("certificates", {})["pkcs12_path"] = pkcs12_path
        logger.debug("Override: pkcs12_path from environment")
    
    # Transport section
    if verify_tls := os.getenv(f"{ENV_PREFIX}VERIFY_TLS"):
        config_dict.setdefault("transport", {})["verify_tls"] = _parse_bool(
            verify_tls
        )
        logger.debug("Override: verify_tls from environment")
    
    # Logging section
    if log_level := os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
        config_dict.setdefault("logging", {})["level"] = log_level
        logger.debug("Override: log_level from environment")
    
    if log_file := os.getenv(f"{ENV_PREFIX}LOG_FILE"):
        config_dict.setdefault("logging", {})["log_file"] = log_file
        logger.debug("Override: log_file from environment")
    
    if redact_pii := os.getenv(f"{ENV_PREFIX}REDACT_PII"):
        config_dict.setdefault("logging", {})["redact_pii"] = _parse_bool(redact_pii)
        logger.debug("Override: redact_pii from environment")
    
    return config_dict


def _parse_bool(value: str) -> bool:
    """Parse boolean value from string.
    
    Args:
        value: String value to parse (case-insensitive)
        
    Returns:
        Boolean value
    """
    return value.lower() in ("true", "1", "yes", "on")


def _check_sensitive_values(config_dict: dict[str, Any]) -> None:
    """Warn when secrets are stored in the configuration file.
    
    Passwords and certificates belong in environment variables. Values found
    in the file are ignored by resolve_secrets.
    
    Args:
        config_dict: Configuration dictionary to check
    """
    for section in ("credentials", "certificates"):
        values = config_dict.get(section) or {}
        for key in SENSITIVE_KEYS:
            if key in values:
                logger.warning(
                    f"WARNING: '{section}.{key}' found in configuration file! "
                    "Secrets should be stored in environment variables, not config "
                    "files. The value will be ignored."
                )


def _require_env(name: str, description: str) -> str:
    value = os.getenv(name)
    if not value:
        raise ConfigurationError(
            f"Missing {description}: environment variable {name} is not set. "
            f"Fix: export {name} or add it to your .env file."
        )
    return value


def resolve_secrets(config: Config) -> GatewaySecrets:
    """Read the gateway password and client certificate from the environment.
    
    The certificate is taken from certificates.pkcs12_path when configured,
    otherwise from the Base64 text in the certificate environment variable.
    
    Args:
        config: Loaded configuration
        
    Returns:
        GatewaySecrets with all three values present
        
    Raises:
        ConfigurationError: If a secret is missing or the PKCS12 file is unreadable
        
    Example:
        >>> config = load_config()
        >>> secrets = resolve_secrets(config)
    """
    password = _require_env(config.credentials.password_env_var, "gateway password")
    
    if config.certificates.pkcs12_path is not None:
        try:
            certificate = encode_certificate_file(config.certificates.pkcs12_path)
        except CertificateLoadError as e:
            raise ConfigurationError(str(e)) from e
        logger.debug(f"Client certificate read from {config.certificates.pkcs12_path}")
    else:
        certificate = _require_env(
            config.certificates.certificate_env_var, "client certificate"
        )
    
    certificate_password = _require_env(
        config.certificates.password_env_var, "client certificate password"
    )
    
    return GatewaySecrets(
        password=password,
        certificate=certificate,
        certificate_password=certificate_password,
    )
