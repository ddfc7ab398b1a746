"""Courier credentials and cached bearer tokens."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from .base import execute, first_row
from ..errors import ConfigurationMissing
from ..models.domain import CourierConfig, CourierToken

CONFIG_TABLE = "ninjavan_config"
TOKENS_TABLE = "ninjavan_tokens"


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


class CourierRepository:
    def __init__(self, client: Any) -> None:
        self.client = client

    def load_config(self) -> CourierConfig:
        row = first_row(self.client.table(CONFIG_TABLE).select("*").limit(1), "load courier configuration")
        if not row:
            raise ConfigurationMissing(
                "Ninjavan configuration not found. Please configure in Logistics Settings."
            )
        missing = [name for name in ("client_id", "client_secret") if not row.get(name)]
        if missing:
            raise ConfigurationMissing(f"Ninjavan configuration is missing {', '.join(missing)}")
        return CourierConfig(
            client_id=row["client_id"],
            client_secret=row["client_secret"],
            sender_name=row.get("sender_name") or "",
            sender_phone=row.get("sender_phone") or "",
            sender_email=row.get("sender_email") or "",
            sender_address1=row.get("sender_address1") or "",
            sender_address2=row.get("sender_address2") or "",
            sender_postcode=str(row.get("sender_postcode") or ""),
            sender_city=row.get("sender_city") or "",
            sender_state=row.get("sender_state") or "",
        )

    def latest_valid_token(self, now: datetime) -> CourierToken | None:
        """Newest token whose expiry is strictly after ``now``."""
        row = first_row(
            self.client.table(TOKENS_TABLE)
            .select("*")
            .gt("expires_at", now.isoformat())
            .order("created_at", desc=True)
            .limit(1),
            "look up courier token",
        )
        if not row or not row.get("access_token"):
            return None
        return CourierToken(access_token=row["access_token"], expires_at=_parse_timestamp(row["expires_at"]))

    def save_token(self, token: CourierToken) -> None:
        execute(
            self.client.table(TOKENS_TABLE).insert(
                {"access_token": token.access_token, "expires_at": token.expires_at.isoformat()}
            ),
            "store courier token",
        )
