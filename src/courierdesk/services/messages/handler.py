"""Execute parsed chat-relay commands against the data store."""

from __future__ import annotations

import logging
import random
import time
from datetime import date, datetime
from typing import Any, Callable

from .parser import LeadEntry, OrderEntry, StatusQuery, Unrecognized, parse_command
from ..clock import local_today, utc_now
from ..notifications.orders import OrderNotifier
from ..notifications.whatsapp import normalize_local
from ...data.catalog_repository import CatalogRepository, bundle_price
from ...data.orders_repository import OrderRepository, order_from_row
from ...data.prospects_repository import ProspectRepository
from ...errors import CourierDeskError
from ...models.domain import DeviceSetting
from ...persistence.webhook_log import WebhookLog

logger = logging.getLogger(__name__)

WEBHOOK_SOURCE = "chat-relay"


def generate_order_number(today: date, rng: random.Random | None = None) -> str:
    """Order number in ``DDMMYY-NNNNN`` form."""
    rng = rng or random.Random()
    return f"{today.strftime('%d%m%y')}-{rng.randrange(100000):05d}"


class MessageCommandHandler:
    def __init__(
        self,
        orders: OrderRepository,
        prospects: ProspectRepository,
        catalog: CatalogRepository,
        notifier: OrderNotifier,
        webhook_log: WebhookLog,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.orders = orders
        self.prospects = prospects
        self.catalog = catalog
        self.notifier = notifier
        self.webhook_log = webhook_log
        self.clock = clock

    def handle(
        self,
        device: DeviceSetting | None,
        text: str,
        sender: str = "",
        *,
        method: str = "POST",
        body: Any = None,
    ) -> dict:
        started = time.perf_counter()
        command = parse_command(text)
        response: dict | None = None
        error_message = None
        try:
            response = self.dispatch(device, command, sender)
            return response
        except CourierDeskError as exc:
            error_message = exc.message
            raise
        finally:
            self.webhook_log.record(
                source=WEBHOOK_SOURCE,
                method=method,
                body=body if body is not None else {"message": text, "sender": sender},
                parsed={"command": type(command).__name__},
                response=response,
                duration_ms=(time.perf_counter() - started) * 1000,
                error_message=error_message,
            )

    def dispatch(self, device: DeviceSetting | None, command, sender: str) -> dict:
        if isinstance(command, Unrecognized):
            if command.command is None:
                logger.info(f"Unhandled message from {sender or 'unknown sender'}")
                return {"success": True, "message": "Message received"}
            return {"success": False, "message": f"Format salah ({command.command})", "hint": command.hint}

        if device is None or not device.staff_code:
            return {"success": False, "error": "Could not identify marketer from device"}

        if isinstance(command, LeadEntry):
            return self.save_lead(device, command)
        if isinstance(command, OrderEntry):
            return self.save_order(device, command)
        if isinstance(command, StatusQuery):
            return self.order_status(command, sender)
        raise TypeError(f"Unsupported command {command!r}")

    def save_lead(self, device: DeviceSetting, lead: LeadEntry) -> dict:
        phone = normalize_local(lead.phone)
        if not phone:
            return {"success": False, "message": "No. telefon tidak sah"}
        if self.prospects.exists_for_phone(phone):
            return {"success": False, "message": "Prospect already exists", "phone": phone}

        row = self.prospects.insert(
            {
                "nama_prospek": lead.name.upper(),
                "no_telefon": phone,
                "niche": lead.niche.upper(),
                "jenis_prospek": lead.prospect_type,
                "tarikh_phone_number": lead.date or local_today(self.clock()).isoformat(),
                "marketer_id_staff": device.staff_code,
                "created_by": device.user_id,
            }
        )
        logger.info(f"Lead saved for {device.staff_code}: {phone}")
        return {
            "success": True,
            "message": f"Lead berjaya ditambah: {lead.name}",
            "prospect": {
                "id": row.get("id"),
                "nama": lead.name,
                "phone": phone,
                "niche": lead.niche,
                "jenis": lead.prospect_type,
            },
        }

    def save_order(self, device: DeviceSetting, entry: OrderEntry) -> dict:
        phone = normalize_local(entry.phone)
        if not phone:
            return {"success": False, "message": "No. telefon tidak sah"}

        sku = entry.product
        price = entry.price
        cost = 0.0
        bundle = self.catalog.find_active_bundle(entry.product)
        if bundle:
            sku = bundle.get("name") or entry.product
            if not price:
                price = bundle_price(bundle, entry.platform)
            cost = self.catalog.bundle_cost(bundle)

        today = local_today(self.clock())
        order_number = generate_order_number(today)
        order_date = f"{today.day}/{today.month}/{today.year}"
        row = self.orders.insert(
            {
                "no_tempahan": order_number,
                "marketer_id": device.user_id,
                "marketer_id_staff": device.staff_code,
                "marketer_name": entry.name.upper(),
                "no_phone": phone,
                "alamat": entry.address.upper(),
                "poskod": entry.postcode,
                "bandar": entry.city.upper(),
                "negeri": entry.state.upper(),
                "produk": entry.product,
                "sku": sku,
                "kuantiti": entry.quantity,
                "harga_jualan_produk": price,
                "harga_jualan_sebenar": price,
                "harga_jualan_agen": price,
                "kos_produk": cost,
                "profit": price - cost,
                "tarikh_tempahan": order_date,
                "date_order": today.isoformat(),
                "jenis_platform": entry.platform,
                "jenis_customer": "NP",
                "cara_bayaran": entry.payment_mode,
                "delivery_status": "Pending",
                "status_parcel": "Pending",
                "nota_staff": "Order via WhatsApp webhook",
            }
        )
        logger.info(f"Chat order {order_number} saved for {device.staff_code}")

        whatsapp_sent = False
        if device.is_connected:
            whatsapp_sent = self.notifier.send_order_booked(device, order_from_row({"id": "", **row}))

        return {
            "success": True,
            "message": f"Order berjaya: {order_number} - {entry.name} - RM{price:.2f}",
            "order": {
                "id": row.get("id"),
                "no_tempahan": order_number,
                "nama": entry.name,
                "phone": phone,
                "produk": entry.product,
                "harga": price,
                "platform": entry.platform,
                "bayaran": entry.payment_mode,
                "marketer": device.staff_code,
            },
            "whatsapp_sent": whatsapp_sent,
        }

    def order_status(self, query: StatusQuery, sender: str) -> dict:
        phone = normalize_local(query.phone or sender)
        if not phone:
            return {"success": False, "message": "Format: #status|phone"}
        orders = self.orders.recent_for_phone(phone)
        if not orders:
            return {"success": True, "message": "Tiada order dijumpai untuk nombor ini"}
        lines = [
            f"{row.get('no_tempahan')}: {row.get('produk')} - {row.get('delivery_status')}"
            + (f" ({row['no_tracking']})" if row.get("no_tracking") else "")
            for row in orders
        ]
        return {"success": True, "message": f"Order untuk {phone}:\n" + "\n".join(lines)}
