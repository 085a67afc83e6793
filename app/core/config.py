"""Application configuration settings."""

from functools import lru_cache
from typing import List, Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "Sessions API"
    app_env: str = "development"
    debug: bool = True

    # Server
    host: str = "0.0.0.0"
    port: int = 4000

    # User directory
    database_url: str = "sqlite+aiosqlite:///./sessions.db"

    # Session store
    redis_url: str = "redis://localhost:6379/0"
    redis_socket_timeout: float = 5.0

    # JWT Authentication (two keys: one per token kind)
    access_token_secret: str = "change-me-access-token-secret"
    refresh_token_secret: str = "change-me-refresh-token-secret"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 15
    refresh_token_expire_days: int = 7

    # Cookies
    cookie_domain: Optional[str] = None

    # Throttling. Forwarding headers are only trusted from these peers.
    trusted_proxies: str = ""
    login_rate_limit: int = 10
    signup_rate_limit: int = 5
    rate_limit_window_seconds: int = 900

    # CORS
    cors_origins: str = "http://localhost:5173,http://127.0.0.1:5173"

    # Security
    allowed_hosts: str = "*"

    @model_validator(mode="after")
    def check_distinct_secrets(self) -> "Settings":
        if self.access_token_secret == self.refresh_token_secret:
            raise ValueError("access and refresh token secrets must differ")
        return self

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    @property
    def cookie_secure(self) -> bool:
        """Cookies are Secure-only everywhere except local development."""
        return not self.is_development

    @property
    def access_token_max_age(self) -> int:
        """Access token lifetime in seconds."""
        return self.access_token_expire_minutes * 60

    @property
    def refresh_token_max_age(self) -> int:
        """Refresh token lifetime in seconds."""
        return self.refresh_token_expire_days * 24 * 60 * 60

    @property
    def allowed_hosts_list(self) -> List[str]:
        """Get allowed hosts as a list."""
        return [host.strip() for host in self.allowed_hosts.split(",")]

    @property
    def trusted_proxies_list(self) -> List[str]:
        """Peers allowed to set X-Forwarded-For / X-Real-IP."""
        return [ip.strip() for ip in self.trusted_proxies.split(",") if ip.strip()]

    @property
    def cors_origins_list(self) -> List[str]:
        """Get CORS origins as a list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
