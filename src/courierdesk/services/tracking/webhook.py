"""Apply courier delivery-status callbacks to stored orders."""

from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Any, Callable

from .status import classify_status, is_anomalous, transition_fields
from ..clock import local_today, utc_now
from ..notifications.whatsapp import WhatsAppGateway
from ...data.devices_repository import DeviceRepository
from ...data.orders_repository import OrderRepository
from ...errors import CourierDeskError
from ...models.domain import Order, StatusUpdate
from ...persistence.webhook_log import WebhookLog

logger = logging.getLogger(__name__)

WEBHOOK_SOURCE = "courier-status"


def parse_status_update(payload: dict[str, Any], received_at: datetime) -> StatusUpdate | None:
    """Extract the status text and lookup keys; None when either is missing."""
    raw_status = str(payload.get("status") or payload.get("event") or "").strip()
    tracking_id = str(payload.get("tracking_id") or payload.get("trackingId") or "").strip() or None
    sale_id = str(payload.get("id_sale") or payload.get("sale_id") or "").strip() or None
    if not raw_status or not (tracking_id or sale_id):
        return None
    return StatusUpdate(raw_status=raw_status, tracking_id=tracking_id, sale_id=sale_id, received_at=received_at)


def status_message(order: Order, raw_status: str) -> str:
    return (
        "*Status Penghantaran*\n\n"
        f"Nama : {order.customer_name}\n"
        f"Tracking Number : {order.tracking_number or '-'}\n"
        f"Status : {raw_status}"
    )


class CourierStatusWebhook:
    def __init__(
        self,
        orders: OrderRepository,
        devices: DeviceRepository,
        gateway: WhatsAppGateway,
        webhook_log: WebhookLog,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.orders = orders
        self.devices = devices
        self.gateway = gateway
        self.webhook_log = webhook_log
        self.clock = clock

    def handle(self, payload: dict[str, Any], *, method: str = "POST", headers: dict[str, str] | None = None) -> dict:
        started = time.perf_counter()
        update = parse_status_update(payload, self.clock())
        parsed = None
        response: dict | None = None
        error_message = None
        try:
            if update is None:
                response = {
                    "success": False,
                    "error": "tracking_id (or id_sale) and status are required",
                }
            else:
                parsed = {"tracking_id": update.tracking_id, "sale_id": update.sale_id, "status": update.raw_status}
                response = self.apply(update)
            return response
        except CourierDeskError as exc:
            error_message = exc.message
            raise
        finally:
            self.webhook_log.record(
                source=WEBHOOK_SOURCE,
                method=method,
                body=payload,
                headers=headers,
                parsed=parsed,
                response=response,
                duration_ms=(time.perf_counter() - started) * 1000,
                error_message=error_message,
            )

    def find_order(self, update: StatusUpdate) -> Order | None:
        order = None
        if update.tracking_id:
            order = self.orders.find_by_tracking(update.tracking_id)
        if order is None and update.sale_id:
            order = self.orders.find_by_sale_id(update.sale_id)
        return order

    def apply(self, update: StatusUpdate) -> dict:
        logger.info(f"Courier status received: {update.tracking_id or update.sale_id} -> {update.raw_status}")
        order = self.find_order(update)
        if order is None:
            logger.info(f"Order not found for tracking_id={update.tracking_id} id_sale={update.sale_id}")
            return {
                "success": False,
                "error": "Order not found",
                "tracking_id": update.tracking_id,
                "id_sale": update.sale_id,
            }

        outcome = classify_status(update.raw_status)
        anomaly = is_anomalous(order, outcome)
        if anomaly:
            logger.warning(
                f"Order {order.id} status {order.delivery_status} overwritten by {outcome.value} "
                f"({update.raw_status})"
            )
        fields = transition_fields(order, update.raw_status, outcome, local_today(update.received_at), update.received_at)
        self.orders.update(order.id, fields)
        logger.info(f"Order {order.id} updated with {fields}")

        return {
            "success": True,
            "message": "Order updated successfully",
            "order_id": order.id,
            "tracking_id": order.tracking_number,
            "status": update.raw_status,
            "outcome": outcome.value,
            "anomaly": anomaly,
            "whatsapp_sent": self.notify(order, update.raw_status),
        }

    def notify(self, order: Order, raw_status: str) -> bool:
        """Best-effort status message from the staff member's connected device."""
        if not order.staff_id or not order.phone:
            return False
        try:
            device = self.devices.connected_device_for_user(order.staff_id)
        except CourierDeskError as exc:
            logger.warning(f"Could not load WhatsApp device for staff {order.staff_id}: {exc.message}")
            return False
        if device is None or not device.instance:
            return False
        return self.gateway.send(device.instance, order.phone, status_message(order, raw_status))
