from __future__ import annotations

from urllib.parse import urlparse

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Supabase
    SUPABASE_URL: str = "http://localhost:54321"
    SUPABASE_ANON_KEY: SecretStr = SecretStr("")
    AUTH_STORAGE_KEY: str = ""

    # HTTP
    REQUEST_TIMEOUT: int = 12
    MAX_RETRIES: int = 2
    BACKOFF_FACTOR: float = 0.4
    VERIFY_SSL: bool = True

    # Session
    SESSION_POLL_INTERVAL_SECONDS: float = 60.0
    SESSION_WARNING_SECONDS: int = 300
    SESSION_REFRESH_THRESHOLD_SECONDS: int = 60
    AUTH_TOKEN_KEY_MARKER: str = "auth-token"

    # Logging
    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False

    @property
    def storage_key(self) -> str:
        """Token store key, `sb-<project-ref>-auth-token` unless overridden."""
        if self.AUTH_STORAGE_KEY:
            return self.AUTH_STORAGE_KEY
        host = urlparse(self.SUPABASE_URL).hostname or "localhost"
        project_ref = host.split(".")[0]
        return f"sb-{project_ref}-auth-token"
