"""
Shared configuration management for fedipost.
"""

from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="FEDIPOST_",
        case_sensitive=False,
        populate_by_name=True,
        extra="allow"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Public address
    base_url: Optional[str] = Field(default=None)
    render_external_url: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("RENDER_EXTERNAL_URL")
    )
    render_service_name: str = Field(
        default="fedify-social-network", validation_alias=AliasChoices("RENDER_SERVICE_NAME")
    )

    # Durable store
    aws_region: str = Field(default="us-east-1", validation_alias=AliasChoices("FEDIPOST_AWS_REGION", "AWS_REGION"))
    aws_access_key_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("FEDIPOST_AWS_ACCESS_KEY_ID", "AWS_ACCESS_KEY_ID")
    )
    aws_secret_access_key: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("FEDIPOST_AWS_SECRET_ACCESS_KEY", "AWS_SECRET_ACCESS_KEY")
    )
    dynamodb_endpoint_url: Optional[str] = Field(default=None)
    posts_table: str = Field(default="fedify-posts", validation_alias=AliasChoices("FEDIPOST_POSTS_TABLE", "POSTS_TABLE"))
    posts_index: str = Field(default="UsernameCreatedAtIndex")

    # Cache
    redis_url: str = Field(default="redis://localhost:6379/0", validation_alias=AliasChoices("FEDIPOST_REDIS_URL", "REDIS_URL"))
    cache_enabled: bool = Field(default=True)
    cache_required: bool = Field(default=False)
    post_cache_ttl: int = Field(default=3600, ge=1)
    list_cache_ttl: int = Field(default=300, ge=1)

    # Observability
    enable_tracing: bool = Field(default=False)
    otel_exporter: str = Field(default="http://localhost:4317")
    enable_console_tracing: bool = Field(default=False)

    # NodeInfo metadata
    software_name: str = Field(default="fedify-social-network")
    software_version: str = Field(default="1.0.0")
    node_name: str = Field(default="Fedify Social Network")
    node_description: str = Field(default="A federated social network built with Fedify")
    maintainer_name: str = Field(default="Fedify Social Network")
    maintainer_email: str = Field(default="admin@example.com")


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "0.0.0.0"

    def __init__(self, service_name: str, port: int, **kwargs):
        super().__init__(service_name=service_name, port=port, **kwargs)

    def public_base_url(self) -> str:
        """Return the address other servers use to reach this instance."""
        if self.base_url:
            return self.base_url.rstrip("/")
        if self.env == "production":
            if self.render_external_url:
                return self.render_external_url.rstrip("/")
            return f"https://{self.render_service_name}.onrender.com"
        return f"http://localhost:{self.port}"


def get_config(service_name: str, port: int, **overrides) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, port=port, **overrides)
