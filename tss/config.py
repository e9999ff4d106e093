"""
Centralized configuration for the Secret Server client.

Configuration is loaded from environment variables with sensible defaults.
Either a Secret Server URL (on-premises or platform) or a Secret Server Cloud
tenant must be given, never both.

Usage:
    from tss.config import get_config
    cfg = get_config()
    print(cfg.base_url)                      # "https://mytenant.secretservercloud.com/"
    print(cfg.url_for("secrets", "42"))      # ".../api/v1/secrets/42"
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from tss.errors import ConfigurationError

CLOUD_BASE_URL_TEMPLATE = "https://{tenant}.secretservercloud.{tld}/"
DEFAULT_API_PATH_URI = "/api/v1"
DEFAULT_TOKEN_PATH_URI = "/oauth2/token"
DEFAULT_TLD = "com"


@dataclass(frozen=True)
class UserCredential:
    """Credentials used to obtain an access token.

    A non-empty ``token`` is used as-is and skips the OAuth2 grant.
    """

    username: str = ""
    password: str = ""
    domain: str = ""
    token: str = ""


@dataclass(frozen=True)
class Configuration:
    """Connection parameters for one Secret Server instance."""

    credentials: UserCredential = field(default_factory=UserCredential)
    server_url: str = ""
    tenant: str = ""
    tld: str = DEFAULT_TLD
    api_path_uri: str = DEFAULT_API_PATH_URI
    token_path_uri: str = DEFAULT_TOKEN_PATH_URI
    timeout: float = 30.0

    def __post_init__(self) -> None:
        if bool(self.server_url) == bool(self.tenant):
            raise ConfigurationError(
                "either ServerURL of Secret Server/Platform or Tenant of "
                "Secret Server Cloud must be set"
            )

    @property
    def base_url(self) -> str:
        if self.server_url:
            return self.server_url
        return CLOUD_BASE_URL_TEMPLATE.format(tenant=self.tenant, tld=self.tld or DEFAULT_TLD)

    @property
    def token_url(self) -> str:
        return f"{self.base_url.strip('/')}/{self.token_path_uri.strip('/')}"

    def url_for(self, resource: str, path: str = "") -> str:
        """Return the API URL for the given resource and path."""
        parts = [
            self.base_url.strip("/"),
            self.api_path_uri.strip("/"),
            resource.strip("/"),
            path.strip("/"),
        ]
        return "/".join(p for p in parts if p)


# Singleton
_config: Configuration | None = None


def get_config() -> Configuration:
    """Get or create the singleton config from environment variables."""
    global _config
    if _config is not None:
        return _config
    _config = _load_from_env()
    return _config


def _load_from_env() -> Configuration:
    """Load configuration from environment variables."""
    credentials = UserCredential(
        username=os.environ.get("TSS_USERNAME", ""),
        password=os.environ.get("TSS_PASSWORD", ""),
        domain=os.environ.get("TSS_DOMAIN", ""),
        token=os.environ.get("TSS_TOKEN", ""),
    )

    try:
        timeout = float(os.environ.get("TSS_TIMEOUT", "30"))
    except ValueError as e:
        raise ConfigurationError(f"TSS_TIMEOUT must be a number: {e}") from e

    return Configuration(
        credentials=credentials,
        server_url=os.environ.get("TSS_SERVER_URL", ""),
        tenant=os.environ.get("TSS_TENANT", ""),
        tld=os.environ.get("TSS_TLD", DEFAULT_TLD),
        api_path_uri=os.environ.get("TSS_API_PATH", DEFAULT_API_PATH_URI),
        token_path_uri=os.environ.get("TSS_TOKEN_PATH", DEFAULT_TOKEN_PATH_URI),
        timeout=timeout,
    )


def reset_config() -> None:
    """Reset the singleton config (for testing)."""
    global _config
    _config = None
