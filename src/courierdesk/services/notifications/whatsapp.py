"""HTTP client for the Whacenter WhatsApp gateway."""

from __future__ import annotations

import logging
import re

import httpx

from ...config import settings

logger = logging.getLogger(__name__)

_NON_DIGITS = re.compile(r"\D")


def normalize_international(phone: str, country_code: str | None = None) -> str:
    """Gateway format: digits only, leading local 0 rewritten to the country code."""
    country_code = country_code or settings.whatsapp_country_code
    digits = _NON_DIGITS.sub("", phone or "")
    if digits.startswith("0"):
        digits = country_code + digits[1:]
    if not digits.startswith(country_code):
        digits = country_code + digits
    return digits


def normalize_local(phone: str, country_code: str | None = None) -> str:
    """Storage format: digits only with a leading 0 instead of the country code."""
    country_code = country_code or settings.whatsapp_country_code
    digits = _NON_DIGITS.sub("", phone or "")
    if not digits:
        return ""
    if digits.startswith(country_code):
        digits = "0" + digits[len(country_code):]
    if not digits.startswith("0"):
        digits = "0" + digits
    return digits


class WhatsAppGateway:
    def __init__(
        self,
        http_client: httpx.Client,
        base_url: str | None = None,
        country_code: str | None = None,
    ) -> None:
        self.http_client = http_client
        self.base_url = (base_url or settings.whatsapp_base_url).rstrip("/")
        self.country_code = country_code or settings.whatsapp_country_code

    def send(self, device_id: str, phone: str, message: str) -> bool:
        """Send a text message; returns False instead of raising on any failure."""
        number = normalize_international(phone, self.country_code)
        try:
            response = self.http_client.get(
                f"{self.base_url}/api/send",
                params={"device_id": device_id, "number": number, "message": message},
                follow_redirects=True,
            )
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(f"Failed to send WhatsApp message to {number}: {exc}")
            return False
        logger.info(f"WhatsApp send result for {number}: {data}")
        return isinstance(data, dict) and (data.get("status") is True or data.get("success") is True)

    def device_status(self, device_id: str) -> dict:
        try:
            response = self.http_client.get(
                f"{self.base_url}/api/statusDevice",
                params={"device_id": device_id},
                follow_redirects=True,
            )
            data = response.json()
        except ValueError:
            return {"success": False, "error": "Invalid JSON response from Whacenter", "raw": response.text}
        except httpx.HTTPError as exc:
            logger.warning(f"WhatsApp device status check failed for {device_id}: {exc}")
            return {"success": False, "error": str(exc)}
        return data if isinstance(data, dict) else {"success": False, "raw": data}
