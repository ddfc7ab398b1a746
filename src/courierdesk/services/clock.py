"""Clock helpers; business dates follow the courier's local timezone."""

from __future__ import annotations

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from ..config import settings


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def local_today(now: datetime | None = None, timezone_name: str | None = None) -> date:
    now = now or utc_now()
    return now.astimezone(ZoneInfo(timezone_name or settings.courier_timezone)).date()
