"""HTTP client for the Ninja Van courier REST API."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ...config import settings
from ...errors import (
    CourierRejectedCancellation,
    CourierRejectedOrder,
    TransientIOError,
    WaybillFetchFailed,
)
from ...models.domain import CancellationResult

logger = logging.getLogger(__name__)


def response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def _error_message(body: Any, default: str) -> str:
    if isinstance(body, dict):
        message = body.get("message")
        if not message and isinstance(body.get("error"), dict):
            message = body["error"].get("message")
        if isinstance(message, str) and message:
            return message
    return default


class CourierClient:
    def __init__(
        self,
        http_client: httpx.Client,
        base_url: str | None = None,
        country_code: str | None = None,
    ) -> None:
        self.http_client = http_client
        self.base_url = (base_url or settings.courier_base_url).rstrip("/")
        self.country_code = country_code or settings.courier_country_code

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{self.country_code}/{path.lstrip('/')}"

    @staticmethod
    def _headers(token: str, accept: str = "application/json") -> dict[str, str]:
        return {"Authorization": f"Bearer {token}", "Accept": accept}

    def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            return self.http_client.request(method, url, **kwargs)
        except httpx.TransportError as exc:
            logger.error(f"Courier request {method} {url} failed: {exc}")
            raise TransientIOError("Could not reach courier API", str(exc)) from exc

    def submit_order(self, token: str, payload: dict) -> str:
        """Create a shipment and return the courier-assigned tracking number."""
        response = self._send("POST", self._url("4.1/orders"), json=payload, headers=self._headers(token))
        body = response_body(response)
        if not response.is_success:
            logger.error(f"Courier rejected order {payload.get('requested_tracking_number')}: {body}")
            raise CourierRejectedOrder(_error_message(body, "Failed to create Ninjavan order"), body)

        tracking_number = body.get("tracking_number") if isinstance(body, dict) else None
        if not tracking_number:
            raise CourierRejectedOrder("No tracking number returned from Ninjavan", body)
        logger.info(f"Courier accepted order, tracking number {tracking_number}")
        return tracking_number

    def cancel_order(self, token: str, tracking_number: str) -> CancellationResult:
        response = self._send("DELETE", self._url(f"2.2/orders/{tracking_number}"), headers=self._headers(token))
        body = response_body(response)
        if not response.is_success:
            logger.error(f"Courier rejected cancellation of {tracking_number}: {body}")
            raise CourierRejectedCancellation(_error_message(body, "Failed to cancel Ninjavan order"), body)

        body = body if isinstance(body, dict) else {}
        return CancellationResult(
            tracking_id=body.get("trackingId") or body.get("tracking_id") or tracking_number,
            status=body.get("status"),
        )

    def waybill_urls(self, tracking_number: str) -> list[tuple[str, dict[str, str]]]:
        """Endpoints tried in order when fetching a printable waybill."""
        return [
            (self._url("2.0/reports/waybill"), {"tids": tracking_number, "h": "0"}),
            (self._url("4.1/orders/waybill"), {"tids": tracking_number}),
            (self._url(f"4.1/orders/{tracking_number}/waybill"), {}),
        ]

    def fetch_waybill(self, token: str, tracking_number: str) -> bytes:
        """Return the waybill PDF for one tracking number.

        Callers pass a freshly issued token; the waybill scope may differ from the
        order-creation scope of cached tokens.
        """
        last_error: Any = None
        for url, params in self.waybill_urls(tracking_number):
            try:
                response = self._send("GET", url, params=params, headers=self._headers(token, "application/pdf"))
            except TransientIOError as exc:
                raise WaybillFetchFailed(tracking_number, details=exc.details) from exc
            if response.is_success and response.content:
                return response.content
            last_error = response.text if not response.is_success else "empty document"
            logger.info(f"Waybill endpoint {url} failed for {tracking_number}: {last_error}")

        raise WaybillFetchFailed(
            tracking_number,
            "Waybill access denied. Your Ninjavan API credentials may not have waybill permissions.",
            last_error,
        )
