"""Audit log for inbound webhook calls."""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)

WEBHOOK_LOGS_TABLE = "webhook_logs"


class WebhookLog:
    """Writes one row per webhook call. A failed write never fails the caller."""

    def __init__(self, client: Any) -> None:
        self.client = client

    def record(
        self,
        *,
        source: str,
        method: str,
        body: Any,
        headers: dict[str, str] | None = None,
        parsed: dict | None = None,
        response: dict | None = None,
        duration_ms: float | None = None,
        error_message: str | None = None,
    ) -> None:
        if self.client is None:
            return
        row = {
            "source": source,
            "method": method,
            "body": body,
            "headers": headers or {},
            "parsed": parsed,
            "response": response,
            "duration_ms": round(duration_ms) if duration_ms is not None else None,
            "error_message": error_message,
        }
        try:
            self.client.table(WEBHOOK_LOGS_TABLE).insert(row).execute()
        except Exception as exc:
            logger.warning(f"Failed to write webhook log for {source}: {exc}")
