"""SSO settings loaded from environment variables."""

from typing import Any

from pydantic_settings import BaseSettings, SettingsConfigDict

COOKIE_TTL_DEFAULT = 86_400
PROFILE_TIMEOUT_DEFAULT = 10.0


class SSOSettings(BaseSettings):
    """Identity provider, key material, and session cookie settings."""

    model_config = SettingsConfigDict(env_prefix="SSO_")

    url: str = ""
    key_id: str = ""
    key_path: str = ""
    private_key: str = ""
    cookie_name: str = "sso"
    cookie_secret: str = ""
    cookie_ttl: int = COOKIE_TTL_DEFAULT
    api_base_url: str = ""
    permissions: dict[str, Any] = {}
    is_secure: bool = False
    verify_tls: bool = True
    profile_timeout: float = PROFILE_TIMEOUT_DEFAULT
    require_profile: bool = False

    @property
    def profile_fetch_enabled(self) -> bool:
        """Profile enrichment runs only when an API base URL is configured."""
        return bool(self.api_base_url)
