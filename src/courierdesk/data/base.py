"""Shared helpers for Supabase-backed repositories."""

from __future__ import annotations

import logging
from typing import Any

from ..errors import TransientIOError

logger = logging.getLogger(__name__)


def execute(query: Any, action: str) -> list[dict]:
    """Run a PostgREST query builder and return its rows.

    Client and network exceptions surface as TransientIOError; nothing is retried.
    """
    try:
        response = query.execute()
    except Exception as exc:
        logger.error(f"Supabase query failed while trying to {action}: {exc}")
        raise TransientIOError(f"Database error while trying to {action}", str(exc)) from exc
    data = getattr(response, "data", None)
    if data is None:
        return []
    if isinstance(data, dict):
        return [data]
    return list(data)


def first_row(query: Any, action: str) -> dict | None:
    rows = execute(query, action)
    return rows[0] if rows else None


def coerce_float(value: Any) -> float:
    if value is None or value == "":
        return 0.0
    try:
        return float(str(value).replace(",", ""))
    except ValueError as exc:
        raise ValueError(f"Unable to parse float from value '{value}'") from exc
