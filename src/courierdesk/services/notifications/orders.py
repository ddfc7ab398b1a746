"""Order-booked WhatsApp notifications to customers."""

from __future__ import annotations

import logging

from .whatsapp import WhatsAppGateway
from ...data.devices_repository import DeviceRepository
from ...data.orders_repository import OrderRepository
from ...errors import OrderValidationError, RecordNotFound
from ...models.domain import DeviceSetting, Order

logger = logging.getLogger(__name__)


def booked_message(order: Order) -> str:
    return (
        "*Pesanan Anda Sudah Ditempah*\n\n"
        f"Nama : {order.customer_name}\n"
        f"Phone : {order.phone}\n"
        f"Pakej : {order.product}\n"
        f"Tarikh Membeli : {order.order_date or '-'}\n"
        f"Tracking Number : {order.tracking_number or '-'}\n"
        f"Harga Jualan : RM{order.price or 0:.2f}\n"
        f"Cara Bayaran : {order.payment_mode or '-'}"
    )


class OrderNotifier:
    def __init__(self, orders: OrderRepository, devices: DeviceRepository, gateway: WhatsAppGateway) -> None:
        self.orders = orders
        self.devices = devices
        self.gateway = gateway

    def send_order_booked(self, device: DeviceSetting, order: Order) -> bool:
        if not device.instance or not order.phone:
            return False
        return self.gateway.send(device.instance, order.phone, booked_message(order))

    def notify_order_booked(self, tracking_number: str | None = None, order_id: str | None = None) -> dict:
        if not tracking_number and not order_id:
            raise OrderValidationError(["tracking_number", "order_id"])

        order = self.orders.find_by_tracking(tracking_number) if tracking_number else None
        if order is None and order_id:
            order = self.orders.get(order_id)
        if order is None:
            raise RecordNotFound("Order not found")
        if not order.staff_id:
            return {"success": False, "error": "Order has no marketer"}

        device = self.devices.connected_device_for_user(order.staff_id)
        if device is None:
            logger.info(f"No connected WhatsApp device for marketer {order.staff_id}")
            return {"success": False, "error": "Marketer does not have a connected WhatsApp device"}

        sent = self.send_order_booked(device, order)
        return {
            "success": True,
            "whatsapp_sent": sent,
            "message": "Notification sent successfully" if sent else "Failed to send notification",
        }
