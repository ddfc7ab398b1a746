"""Exception types raised by the courier, waybill and webhook services.

Each error carries the HTTP status the API layer answers with. Business-level
rejections (nothing to retry) answer 200 with ``success: false``; upstream and
infrastructure failures answer 5xx.
"""

from __future__ import annotations

from typing import Any, Sequence


class CourierDeskError(Exception):
    status_code: int = 500

    def __init__(self, message: str, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_payload(self) -> dict:
        payload: dict[str, Any] = {"success": False, "error": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class ConfigurationMissing(CourierDeskError):
    """Required credentials or configuration rows are absent."""

    status_code = 500


class AuthenticationError(CourierDeskError):
    """The courier OAuth exchange was rejected."""

    status_code = 502


class CourierRejectedOrder(CourierDeskError):
    status_code = 502


class CourierRejectedCancellation(CourierDeskError):
    status_code = 502


class WaybillFetchFailed(CourierDeskError):
    status_code = 502

    def __init__(self, tracking_number: str, message: str | None = None, details: Any = None) -> None:
        super().__init__(message or f"Failed to fetch waybill for {tracking_number}", details)
        self.tracking_number = tracking_number


class AllWaybillsFailed(CourierDeskError):
    status_code = 502

    def __init__(self, failed: Sequence[str]) -> None:
        super().__init__("Failed to fetch any waybills.", {"failed": list(failed)})
        self.failed = list(failed)


class RecordNotFound(CourierDeskError):
    status_code = 200


class OrderValidationError(CourierDeskError):
    status_code = 200

    def __init__(self, missing: Sequence[str]) -> None:
        super().__init__(f"Order is missing required fields: {', '.join(missing)}", {"missing": list(missing)})
        self.missing = list(missing)


class OrderAlreadySubmitted(CourierDeskError):
    status_code = 200

    def __init__(self, tracking_number: str) -> None:
        super().__init__(
            f"Order already has tracking number {tracking_number}",
            {"tracking_number": tracking_number},
        )
        self.tracking_number = tracking_number


class TransientIOError(CourierDeskError):
    """Network or database failure. Not retried automatically."""

    status_code = 503
