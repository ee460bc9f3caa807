"""Configuration schema models using pydantic.

This module defines the configuration structure and validation rules using pydantic.
All configuration values are validated according to the schema defined here.
Secrets are deliberately absent: the schema only names the environment
variables that hold them.
"""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from pmp_gateway.models.requester import Provider, ProviderRole


class GatewayConfig(BaseModel):
    """Configuration for the PMP Gateway endpoint.
    
    Attributes:
        base_uri: Gateway base URI, e.g. https://prep.pmpgateway.net
        api_version: API version path segment, e.g. v5_1
        namespace: XML namespace of request and response documents
    """
    
    base_uri: str = Field(..., description="PMP Gateway base URI")
    api_version: str = Field(default="v5_1", description="API version segment")
    namespace: str = Field(
        default="http://xml.appriss.com/gateway/v5",
        description="Gateway XML namespace",
    )
    
    @field_validator("base_uri")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate URL is valid HTTP/HTTPS.
        
        Args:
            v: URL string to validate
            
        Returns:
            Validated URL string
            
        Raises:
            ValueError: If URL does not start with http:// or https://
        """
        if not v.startswith(("http://", "https://")):
            raise ValueError(
                f"Invalid URL: {v}. Must start with http:// or https://"
            )
        return v
    
    @field_validator("api_version")
    @classmethod
    def validate_api_version(cls, v: str) -> str:
        """Reject an empty version segment."""
        if not v.strip("/ "):
            raise ValueError("api_version must not be empty")
        return v


class CredentialsConfig(BaseModel):
    """Basic authentication credentials.
    
    Attributes:
        username: Gateway username
        password_env_var: Environment variable holding the gateway password
    """
    
    username: str = ""
    password_env_var: str = Field(
        default="PMP_GATEWAY_PASSWORD",
        description="Environment variable for the gateway password",
    )


class CertificatesConfig(BaseModel):
    """Client certificate configuration.
    
    The PKCS12 identity is read from pkcs12_path when set, otherwise from the
    Base64 text in the certificate_env_var environment variable.
    
    Attributes:
        pkcs12_path: Path to a PKCS12 (.p12/.pfx) file
        certificate_env_var: Environment variable holding Base64 PKCS12 bytes
        password_env_var: Environment variable for the PKCS12 password
    """
    
    pkcs12_path: Optional[Path] = None
    certificate_env_var: str = Field(
        default="PMP_GATEWAY_CERTIFICATE",
        description="Environment variable for the Base64 PKCS12 certificate",
    )
    password_env_var: str = Field(
        default="PMP_GATEWAY_CERTIFICATE_PASSWORD",
        description="Environment variable for the PKCS12 password",
    )


class TransportConfig(BaseModel):
    """Configuration for HTTPS transport.
    
    Attributes:
        verify_tls: Whether to verify the gateway's TLS certificate
    """
    
    verify_tls: bool = True


class ProviderConfig(BaseModel):
    """Default requesting provider used when the CLI does not supply one.
    
    Attributes:
        first_name: Provider first name
        last_name: Provider last name
        role: Gateway role string
        location_name: Requesting location name
        state_code: Two-letter state code of the location
        dea_number: DEA number (optional)
        npi_number: NPI number (optional)
        professional_license: Professional license number (optional)
        professional_license_type: Professional license type (optional)
    """
    
    first_name: str
    last_name: str
    role: str
    location_name: str
    state_code: str
    dea_number: Optional[str] = None
    npi_number: Optional[str] = None
    professional_license: Optional[str] = None
    professional_license_type: Optional[str] = None
    
    @field_validator("role")
    @classmethod
    def validate_role(cls, v: str) -> str:
        """Validate the role against the roles the gateway accepts.
        
        Args:
            v: Role string
            
        Returns:
            Canonical role string
            
        Raises:
            ValueError: If the role is not recognised
        """
        return ProviderRole.from_value(v).value
    
    @field_validator("state_code")
    @classmethod
    def validate_state_code(cls, v: str) -> str:
        """Validate two-letter state code."""
        if len(v) != 2 or not v.isalpha():
            raise ValueError(f"Invalid state_code: {v}. Must be two letters")
        return v.upper()
    
    def to_provider(self) -> Provider:
        """Build the Provider sent with gateway requests."""
        return Provider(
            first_name=self.first_name,
            last_name=self.last_name,
            role=ProviderRole.from_value(self.role),
            location_name=self.location_name,
            state_code=self.state_code,
            dea_number=self.dea_number,
            npi_number=self.npi_number,
            professional_license=self.professional_license,
            professional_license_type=self.professional_license_type,
        )


class LoggingConfig(BaseModel):
    """Configuration for logging.
    
    Attributes:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file
        redact_pii: Whether to redact patient identifiers from logs
    """
    
    level: str = Field(
        default="INFO",
        description="Log level: DEBUG, INFO, WARNING, ERROR, CRITICAL"
    )
    log_file: Path = Field(
        default=Path("logs/pmp-gateway.log"),
        description="Path to log file"
    )
    redact_pii: bool = Field(
        default=True,
        description="Redact patient identifiers from logs"
    )
    
    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level.
        
        Args:
            v: Log level string
            
        Returns:
            Validated log level string (uppercase)
            
        Raises:
            ValueError: If log level is not valid
        """
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(
                f"Invalid log level: {v}. Must be one of: {', '.join(valid_levels)}"
            )
        return v_upper


class Config(BaseModel):
    """Main configuration model.
    
    Attributes:
        gateway: Gateway endpoint configuration
        credentials: Basic authentication configuration
        certificates: Client certificate configuration
        transport: HTTPS transport configuration
        provider: Default requesting provider (optional)
        logging: Logging configuration
    """
    
    gateway: GatewayConfig
    credentials: CredentialsConfig = Field(default_factory=CredentialsConfig)
    certificates: CertificatesConfig = Field(default_factory=CertificatesConfig)
    transport: TransportConfig = Field(default_factory=TransportConfig)
    provider: Optional[ProviderConfig] = None
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
