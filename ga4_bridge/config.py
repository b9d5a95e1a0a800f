from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError


def project_root() -> Path:
    return Path(__file__).resolve().parents[1]


class Settings(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    ga4_measurement_id: str = Field(alias="GA4_MEASUREMENT_ID")
    ga4_api_secret: SecretStr = Field(alias="GA4_API_SECRET")
    ga4_debug_mode: str = Field(default="", alias="GA4_DEBUG_MODE")
    ga4_collector_host: str = Field(
        default="www.google-analytics.com", alias="GA4_COLLECTOR_HOST"
    )
    ga4_timeout_seconds: float = Field(default=10.0, alias="GA4_TIMEOUT_SECONDS")

    # Empty or unset disables signature verification.
    shopify_webhook_secret: SecretStr | None = Field(
        default=None, alias="SHOPIFY_WEBHOOK_SECRET"
    )

    bridge_host: str = Field(default="127.0.0.1", alias="GA4_BRIDGE_HOST")
    bridge_port: int = Field(default=8000, alias="GA4_BRIDGE_PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @property
    def debug_enabled(self) -> bool:
        return self.ga4_debug_mode == "1"

    def webhook_secret(self) -> str | None:
        if self.shopify_webhook_secret is None:
            return None
        return self.shopify_webhook_secret.get_secret_value() or None


def load_settings(env_path: Path | None = None) -> Settings:
    env_file = env_path or (project_root() / ".env")
    if env_file.exists():
        load_dotenv(env_file, override=False)
    try:
        return Settings.model_validate(dict(os.environ))
    except ValidationError as exc:
        raise RuntimeError(
            "Invalid or missing environment variables. Copy `.env.example` to `.env` and edit it."
        ) from exc
