from __future__ import annotations

from typing import ClassVar, final

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _split_csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [x.strip() for x in value.split(",") if x.strip()]


@final
class Settings(BaseSettings):
    model_config: ClassVar[SettingsConfigDict] = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )
    app_name: str = "Notes Backend"
    api_prefix: str = "/api/v1"

    # Environment (ENVIRONMENT): development | production
    environment: str = "development"

    database_url: str = "sqlite:///./dev.db"
    # Upper bound for acquiring a connection (pool) or a SQLite write lock.
    database_timeout_seconds: float = 15.0

    # Primary env: CORS_ALLOW_ORIGINS; also accept CORS_ORIGINS as alias.
    cors_allow_origins: str = Field(
        default="*",
        validation_alias=AliasChoices("CORS_ALLOW_ORIGINS", "CORS_ORIGINS"),
    )

    # Public share links
    public_base_url: str = "http://localhost:5173"
    share_token_secret: str = "share_token_secret_change_me"
    share_link_max_ttl_hours: int = 24 * 365

    # Sharing by identity
    max_grants_per_note: int = 50

    # Version archive
    version_retention_limit: int = 20

    # Optimistic concurrency: how many times a note write is re-run after losing a race.
    note_write_max_attempts: int = 3

    # Attachments
    attachments_local_dir: str = ".data/attachments"
    attachments_max_size_bytes: int = 10 * 1024 * 1024
    storage_timeout_seconds: float = 30.0

    # S3 compatible object storage
    s3_endpoint_url: str = ""
    s3_region: str = ""
    s3_bucket: str = ""
    s3_access_key_id: str = ""
    s3_secret_access_key: str = ""
    s3_force_path_style: bool = False

    # Reminders
    reminder_scheduler_enabled: bool = True
    reminder_sweep_interval_seconds: float = 60.0
    reminder_sweep_batch_size: int = 100

    # Notification dispatch: inapp | webhook
    notification_backend: str = "inapp"
    notification_webhook_url: str = ""
    notification_webhook_token: str = ""
    notification_timeout_seconds: float = 10.0

    # AI writing aids (Gemini generateContent); empty key answers 503.
    ai_api_key: str = Field(default="", validation_alias=AliasChoices("AI_API_KEY", "GEMINI_API_KEY"))
    ai_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    ai_model: str = Field(default="gemini-pro", validation_alias=AliasChoices("AI_MODEL", "GEMINI_MODEL"))
    ai_timeout_seconds: float = 30.0

    log_level: str = "INFO"

    @model_validator(mode="after")
    def _validate_production_settings(self) -> "Settings":  # pyright: ignore[reportUnusedFunction]
        if self.environment.strip().lower() != "production":
            return self

        errors: list[str] = []

        share_secret = self.share_token_secret.strip()
        if not share_secret or share_secret == "share_token_secret_change_me":
            errors.append("SHARE_TOKEN_SECRET must be set in production")

        cors_v = self.cors_allow_origins.strip()
        if not cors_v or cors_v == "*":
            errors.append("CORS_ALLOW_ORIGINS must be explicit (not '*') in production")

        if self.notification_backend_name() == "webhook" and not self.notification_webhook_url.strip():
            errors.append("NOTIFICATION_WEBHOOK_URL must be set when NOTIFICATION_BACKEND=webhook")

        # If any S3 setting is provided, require the full set to avoid silently falling back to local storage.
        s3_fields = {
            "S3_BUCKET": self.s3_bucket.strip(),
            "S3_ENDPOINT_URL": self.s3_endpoint_url.strip(),
            "S3_ACCESS_KEY_ID": self.s3_access_key_id.strip(),
            "S3_SECRET_ACCESS_KEY": self.s3_secret_access_key.strip(),
        }
        if any(v for v in s3_fields.values()) and any(not v for v in s3_fields.values()):
            missing = ",".join([k for k, v in s3_fields.items() if not v])
            errors.append(f"S3 config incomplete in production; missing: {missing}")

        if errors:
            raise ValueError("Invalid production settings: " + "; ".join(errors))
        return self

    def cors_origins_list(self) -> list[str]:
        v = self.cors_allow_origins.strip()
        if not v:
            return []
        if v == "*":
            return ["*"]
        return _split_csv(v)

    def notification_backend_name(self) -> str:
        return (self.notification_backend or "").strip().lower() or "inapp"

    def security_warnings(self) -> list[str]:
        warnings: list[str] = []
        share_secret = self.share_token_secret.strip()
        if not share_secret or share_secret == "share_token_secret_change_me":
            warnings.append("SHARE_TOKEN_SECRET is missing or using placeholder value")
        if self.cors_allow_origins.strip() == "*":
            warnings.append("CORS_ALLOW_ORIGINS='*' is permissive")
        return warnings


settings = Settings()
