"""WhatsApp device settings and staff profiles."""

from __future__ import annotations

from typing import Any

from .base import first_row
from ..models.domain import DeviceSetting

DEVICES_TABLE = "device_setting"
PROFILES_TABLE = "profiles"


class DeviceRepository:
    def __init__(self, client: Any) -> None:
        self.client = client

    def _with_profile(self, row: dict) -> DeviceSetting:
        device = DeviceSetting(
            user_id=row.get("user_id"),
            device_id=row.get("device_id"),
            instance=row.get("instance"),
            status_wa=row.get("status_wa"),
            webhook_id=row.get("webhook_id"),
        )
        if device.user_id:
            profile = first_row(
                self.client.table(PROFILES_TABLE).select("idstaff, full_name").eq("id", device.user_id).limit(1),
                "load staff profile",
            )
            if profile:
                device.staff_code = profile.get("idstaff")
                device.staff_name = profile.get("full_name")
        return device

    def connected_device_for_user(self, user_id: str) -> DeviceSetting | None:
        row = first_row(
            self.client.table(DEVICES_TABLE)
            .select("*")
            .eq("user_id", user_id)
            .eq("status_wa", "connected")
            .limit(1),
            "load connected device",
        )
        if not row or not row.get("instance"):
            return None
        return DeviceSetting(
            user_id=row.get("user_id"),
            device_id=row.get("device_id"),
            instance=row.get("instance"),
            status_wa=row.get("status_wa"),
            webhook_id=row.get("webhook_id"),
        )

    def find_by_device_id(self, device_id: str) -> DeviceSetting | None:
        row = first_row(
            self.client.table(DEVICES_TABLE).select("*").eq("device_id", device_id).limit(1),
            "find device by device id",
        )
        return self._with_profile(row) if row else None

    def find_by_webhook_id(self, webhook_id: str) -> DeviceSetting | None:
        row = first_row(
            self.client.table(DEVICES_TABLE).select("*").eq("webhook_id", webhook_id).limit(1),
            "find device by webhook id",
        )
        return self._with_profile(row) if row else None
