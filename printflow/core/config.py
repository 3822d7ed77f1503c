"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Required fields (e.g. SECRET_KEY) are validated at
load time.
"""

from functools import lru_cache

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    All settings are optional with defaults except those validated in
    validate_required_and_backend (secret_key, and Firebase credentials when
    the Firestore backend is selected).
    """

    # App
    app_name: str = "printflow"
    app_version: str = "1.0.0"
    debug: bool = False

    # Document store: "firestore" (Firestore REST) or "memory" (in-process, dev/tests)
    database_backend: str = "firestore"

    # Firebase / Firestore: use key (env) or path (file).
    firebase_service_account_key: SecretStr | None = None
    firebase_service_account_path: str | None = None

    # Identity provider token verification (tokens are issued elsewhere)
    secret_key: SecretStr = SecretStr("")
    algorithm: str = "HS256"

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:5173"

    # Request tracing
    request_id_header: str = "X-Request-ID"

    # Notification fan-out: max concurrent notification writes per transition
    notification_fanout_concurrency: int = Field(default=8, ge=1)

    # OpenTelemetry
    telemetry_enabled: bool = False
    telemetry_exporter: str = "console"
    telemetry_otlp_endpoint: str | None = None
    telemetry_sample_rate: float = 1.0
    telemetry_environment: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_required_and_backend(self) -> "Settings":
        """Validate required env and document store backend.

        - Firestore: FIREBASE_SERVICE_ACCOUNT_KEY or FIREBASE_SERVICE_ACCOUNT_PATH required.
        - Memory: no extra settings; data lives only as long as the process.
        """
        if self.database_backend == "firestore":
            has_key = (
                self.firebase_service_account_key
                and self.firebase_service_account_key.get_secret_value()
            )
            if not has_key and not self.firebase_service_account_path:
                raise ValueError(
                    "When database_backend is 'firestore', set FIREBASE_SERVICE_ACCOUNT_KEY (full JSON string) "
                    "or FIREBASE_SERVICE_ACCOUNT_PATH (path to JSON file)."
                )
        elif self.database_backend != "memory":
            raise ValueError(
                f"database_backend must be 'firestore' or 'memory', got: {self.database_backend!r}"
            )
        if not self.secret_key.get_secret_value():
            raise ValueError(
                "SECRET_KEY is required to verify identity provider tokens. "
                "Use the signing secret shared with the identity provider."
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
