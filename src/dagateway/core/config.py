import os
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, field_validator, model_validator


DEFAULT_BLOB_SIZE_LIMIT = 1024 * 1024


class DaBackend(str, Enum):
    """Data availability backends the gateway can publish to."""
    CELESTIA = "celestia"
    IN_MEMORY = "inmemory"


class GatewayConfig(BaseModel):
    """Base configuration for the DA gateway.

    This model loads configuration from environment variables and defaults.
    """
    # HTTP Server Configuration
    host: str = Field(
        default="0.0.0.0",
        description="Address the HTTP API binds to"
    )
    port: int = Field(
        default=8080,
        description="Port of the HTTP API"
    )
    metrics_port: int = Field(
        default=9090,
        description="Port of the Prometheus metrics exporter"
    )

    # Data Availability Configuration
    da_backend: DaBackend = Field(
        default=DaBackend.IN_MEMORY,
        description="DA backend blobs are published to"
    )
    da_node_url: Optional[str] = Field(
        default=None,
        description="URL of the Celestia light node"
    )
    da_auth_token: Optional[str] = Field(
        default=None,
        description="Auth token for the Celestia light node"
    )
    da_blob_size_limit: int = Field(
        default=DEFAULT_BLOB_SIZE_LIMIT,
        description="Maximum size in bytes of a single dispatched blob"
    )
    da_rpc_timeout_seconds: float = Field(
        default=30.0,
        description="Timeout for each call to the Celestia node"
    )

    @field_validator('port', 'metrics_port')
    def validate_port(cls, value):
        """Validate ports are in the TCP range."""
        if not 0 < value < 65536:
            raise ValueError("Port must be between 1 and 65535")
        return value

    @field_validator('da_blob_size_limit')
    def validate_blob_size_limit(cls, value):
        """Validate blob size limit is positive."""
        if value <= 0:
            raise ValueError("Blob size limit must be greater than 0")
        return value

    @field_validator('da_rpc_timeout_seconds')
    def validate_rpc_timeout(cls, value):
        """Validate RPC timeout is positive."""
        if value <= 0:
            raise ValueError("RPC timeout must be greater than 0")
        return value

    @field_validator('da_backend', mode='before')
    def parse_backend(cls, value):
        """Accept backend names case-insensitively, empty means in-memory."""
        if isinstance(value, str):
            value = value.strip().lower() or DaBackend.IN_MEMORY.value
        return value

    @model_validator(mode='after')
    def validate_celestia_settings(self):
        """The Celestia backend needs a node URL and an auth token."""
        if self.da_backend == DaBackend.CELESTIA:
            if not self.da_node_url:
                raise ValueError("DA node URL is required for Celestia backend")
            if not self.da_auth_token:
                raise ValueError("DA auth token is required for Celestia backend")
        return self

    @property
    def app_address(self) -> str:
        return f"{self.host}:{self.port}"

    model_config = {
        "validate_assignment": True,
    }


def load_config_from_env() -> GatewayConfig:
    """Load configuration from environment variables.

    Returns:
        GatewayConfig: Configuration instance with values from environment
    """
    # Create a dict of settings from environment variables
    env_settings = {}

    # Map environment variables to config fields
    env_mappings = {
        "APP_HOST": "host",
        "PORT": "port",
        "METRICS_PORT": "metrics_port",
        "VIA_DA_CLIENT_DA_BACKEND": "da_backend",
        "VIA_DA_CLIENT_API_NODE_URL": "da_node_url",
        "VIA_DA_CLIENT_AUTH_TOKEN": "da_auth_token",
        "VIA_DA_CLIENT_BLOB_SIZE_LIMIT": "da_blob_size_limit",
        "VIA_DA_CLIENT_RPC_TIMEOUT": "da_rpc_timeout_seconds",
    }

    # Get values from environment
    for env_var, field_name in env_mappings.items():
        if env_var in os.environ:
            value = os.environ[env_var]

            # Handle type conversions
            if field_name in ["port", "metrics_port"]:
                value = int(value)
            elif field_name == "da_blob_size_limit":
                # Fall back to the default limit when the value is unusable
                try:
                    value = int(value)
                except ValueError:
                    continue
            elif field_name == "da_rpc_timeout_seconds":
                value = float(value)

            env_settings[field_name] = value

    # Create config with environment settings
    return GatewayConfig(**env_settings)
