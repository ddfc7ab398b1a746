"""Prospects (leads) captured from chat commands."""

from __future__ import annotations

from typing import Any

from .base import execute, first_row

PROSPECTS_TABLE = "prospects"


class ProspectRepository:
    def __init__(self, client: Any) -> None:
        self.client = client

    def exists_for_phone(self, phone: str) -> bool:
        row = first_row(
            self.client.table(PROSPECTS_TABLE).select("id").eq("no_telefon", phone).limit(1),
            "check existing prospect",
        )
        return row is not None

    def insert(self, row: dict[str, Any]) -> dict:
        rows = execute(self.client.table(PROSPECTS_TABLE).insert(row), "insert prospect")
        return rows[0] if rows else row
