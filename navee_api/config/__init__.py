"""Configuration module: environment settings and client config."""

from navee_api.config.settings import DEFAULT_HEADERS, ApiSettings, AppEnv, ClientConfig

__all__ = [
    "ApiSettings",
    "AppEnv",
    "ClientConfig",
    "DEFAULT_HEADERS",
]
