from __future__ import annotations

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    env: str = "dev"
    log_level: str = "INFO"

    mongodb_uri: str
    mongodb_db: str = "forum"
    store_timeout_ms: int = 5000

    jwt_secret: str
    jwt_issuer: str = "forum"
    access_token_minutes: int = 60 * 24
    registration_token_hours: int = 24

    # comma separated, e.g. ".edu,@example.org"
    allowed_email_suffixes: str = ".edu"
    public_base_url: str = "http://localhost:3000"

    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_from: str = "Forum <registration@localhost>"

    upload_dir: str = "uploads"
    uploads_url_prefix: str = "/uploads"
    max_upload_bytes: int = 50 * 1024 * 1024

    cors_origins: str = "http://localhost:3000"

    @property
    def cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def allowed_email_suffixes_list(self) -> List[str]:
        return [s.strip().lower() for s in self.allowed_email_suffixes.split(",") if s.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
