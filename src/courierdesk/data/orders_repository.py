"""Data access for ``customer_orders``."""

from __future__ import annotations

from typing import Any

from .base import coerce_float, execute, first_row
from ..errors import TransientIOError
from ..models.domain import Order

ORDERS_TABLE = "customer_orders"


def order_from_row(row: dict) -> Order:
    return Order(
        id=str(row["id"]),
        order_number=row.get("no_tempahan"),
        sale_id=row.get("id_sale") or None,
        customer_name=(row.get("marketer_name") or "").strip(),
        phone=(row.get("no_phone") or "").strip(),
        address=(row.get("alamat") or "").strip(),
        postcode=str(row.get("poskod") or "").strip(),
        city=(row.get("bandar") or "").strip(),
        state=(row.get("negeri") or "").strip(),
        price=coerce_float(row.get("harga_jualan_sebenar")),
        payment_mode=row.get("cara_bayaran"),
        product=(row.get("produk") or "").strip(),
        staff_id=row.get("marketer_id"),
        staff_code=row.get("marketer_id_staff"),
        tracking_number=row.get("no_tracking") or None,
        delivery_status=row.get("delivery_status"),
        raw_status=row.get("seo"),
        courier=row.get("kurier"),
        order_date=row.get("tarikh_tempahan"),
        raw=row,
    )


class OrderRepository:
    def __init__(self, client: Any) -> None:
        self.client = client

    def get(self, order_id: str) -> Order | None:
        row = first_row(
            self.client.table(ORDERS_TABLE).select("*").eq("id", order_id).limit(1),
            "load order",
        )
        return order_from_row(row) if row else None

    def find_by_tracking(self, tracking_number: str) -> Order | None:
        row = first_row(
            self.client.table(ORDERS_TABLE).select("*").eq("no_tracking", tracking_number).limit(1),
            "find order by tracking number",
        )
        return order_from_row(row) if row else None

    def find_by_sale_id(self, sale_id: str) -> Order | None:
        row = first_row(
            self.client.table(ORDERS_TABLE).select("*").eq("id_sale", sale_id).limit(1),
            "find order by sale id",
        )
        return order_from_row(row) if row else None

    def recent_for_phone(self, phone: str, limit: int = 5) -> list[dict]:
        return execute(
            self.client.table(ORDERS_TABLE)
            .select("no_tempahan, produk, delivery_status, no_tracking, tarikh_tempahan")
            .eq("no_phone", phone)
            .order("created_at", desc=True)
            .limit(limit),
            "list orders for phone",
        )

    def update(self, order_id: str, fields: dict[str, Any]) -> None:
        execute(self.client.table(ORDERS_TABLE).update(fields).eq("id", order_id), "update order")

    def insert(self, row: dict[str, Any]) -> dict:
        rows = execute(self.client.table(ORDERS_TABLE).insert(row), "insert order")
        return rows[0] if rows else row

    def generate_sale_id(self) -> str:
        try:
            response = self.client.rpc("generate_sale_id", {}).execute()
        except Exception as exc:
            raise TransientIOError("Database error while trying to generate sale id", str(exc)) from exc
        data = response.data
        if isinstance(data, list):
            data = data[0] if data else None
        if isinstance(data, dict):
            data = next(iter(data.values()), None)
        if not data:
            raise TransientIOError("generate_sale_id returned no value")
        return str(data)
