from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    App settings.

    Notes:
    - Defaults are local and deterministic so the app starts without setup.
    - Secrets (`encryption_secret`, `jwt_secret`) must be overridden via env vars
      (`PLANNER_ENCRYPTION_SECRET`, `PLANNER_JWT_SECRET`) outside development.
    """

    model_config = SettingsConfigDict(env_prefix="PLANNER_", extra="ignore")

    db_url: str | None = None
    security_config_path: str | None = None
    log_level: str = "INFO"

    # Session cookie
    encryption_secret: str = "dev-only-encryption-secret-change-me"
    cookie_secure: bool = False
    cookie_domain: str | None = None

    # Bearer token sealed inside the cookie
    jwt_secret: str = "dev-only-jwt-secret-change-me-dev-only-jwt-secret-change-me-0000"
    jwt_issuer: str = "planner"
    jwt_expiration_seconds: int = 86400

    def resolved_db_url(self) -> str:
        if self.db_url:
            return self.db_url

        repo_root = Path(__file__).resolve().parents[1]
        db_path = repo_root / "planner.db"
        return f"sqlite:///{db_path}"

    def resolved_security_config_path(self) -> Path:
        if self.security_config_path:
            return Path(self.security_config_path)

        repo_root = Path(__file__).resolve().parents[1]
        return repo_root / "config" / "security_config.yaml"

    def resolved_cookie_domain(self) -> str | None:
        if self.cookie_domain and self.cookie_domain.strip():
            return self.cookie_domain.strip()
        return None


@lru_cache
def get_settings() -> Settings:
    return Settings()
