"""Application configuration and settings management."""

from typing import Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="COURIERDESK_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Courierdesk Order Logistics API"
    api_prefix: str = "/api"
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:8080",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )
    http_timeout_seconds: float = Field(default=30.0, gt=0.0)

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for backend operations.",
    )
    storage_bucket: str = Field(default="uploads", description="Supabase Storage bucket for receipts and waybills.")

    # Courier (Ninja Van) configuration. Credentials live in the ninjavan_config table.
    courier_base_url: str = Field(default="https://api.ninjavan.co")
    courier_country_code: str = Field(default="my", description="Country segment used in courier API paths.")
    courier_address_country: str = Field(default="MY")
    courier_timezone: str = Field(default="Asia/Kuala_Lumpur")
    courier_merchant_prefix: str = Field(default="BISNESOWNER-")
    courier_name: str = Field(default="Ninjavan")
    token_expiry_margin_seconds: int = Field(default=300, ge=0)
    default_token_lifetime_seconds: int = Field(default=3600, ge=1)

    # WhatsApp gateway (Whacenter)
    whatsapp_base_url: str = Field(default="https://api.whacenter.com")
    whatsapp_country_code: str = Field(default="60")

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()

    @field_validator("courier_base_url", "whatsapp_base_url", mode="after")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


settings = Settings()
