"""Pydantic Settings for the API client.

All environment variables use the NAVEE_API_ prefix.
Example: NAVEE_API_BASE_URL=https://api.navee.app, NAVEE_API_AUTH_TOKEN=...
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings

DEFAULT_HEADERS: dict[str, str] = {
    "Accept": "application/json",
    "Content-Type": "application/json",
}


class AppEnv(str, Enum):
    """Deployment environment reported to the backend."""

    DEV = "dev"
    STAGING = "staging"
    PROD = "prod"


class ClientConfig(BaseModel):
    """Immutable transport configuration for one ApiClient instance."""

    model_config = ConfigDict(frozen=True)

    base_url: str = ""
    connect_timeout: float = Field(default=10.0, gt=0)  # seconds
    receive_timeout: float = Field(default=25.0, gt=0)
    send_timeout: float = Field(default=25.0, gt=0)
    default_headers: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_HEADERS))

    # Retry schedule
    backoff_base_ms: int = Field(default=250, ge=0)
    jitter_ratio: float = Field(default=0.2, ge=0.0, le=1.0)


class ApiSettings(BaseSettings):
    """API client configuration validated from environment variables."""

    base_url: str  # e.g. "https://api.navee.app"
    auth_token: str | None = None
    log_level: str = "INFO"

    # Timeouts (seconds)
    connect_timeout_seconds: float = Field(default=10.0, gt=0)
    receive_timeout_seconds: float = Field(default=25.0, gt=0)
    send_timeout_seconds: float = Field(default=25.0, gt=0)

    # Diagnostics headers
    env: AppEnv = AppEnv.DEV
    app_version: str = "0.0.0"
    build_number: str = "0"

    # Retry schedule
    backoff_base_ms: int = Field(default=250, ge=0)
    jitter_ratio: float = Field(default=0.2, ge=0.0, le=1.0)

    model_config = {"env_prefix": "NAVEE_API_"}

    def to_client_config(self) -> ClientConfig:
        """Build the immutable ClientConfig, adding the diagnostics headers."""
        headers = {
            **DEFAULT_HEADERS,
            "X-App-Version": self.app_version,
            "X-Build-Number": self.build_number,
            "X-Env": self.env.value,
        }
        return ClientConfig(
            base_url=self.base_url,
            connect_timeout=self.connect_timeout_seconds,
            receive_timeout=self.receive_timeout_seconds,
            send_timeout=self.send_timeout_seconds,
            default_headers=headers,
            backoff_base_ms=self.backoff_base_ms,
            jitter_ratio=self.jitter_ratio,
        )
