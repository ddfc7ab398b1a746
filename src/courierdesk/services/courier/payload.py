"""Translate stored orders into courier order-creation payloads."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal

from ...config import settings
from ...models.domain import CourierConfig, Order

ADDRESS_LINE_LIMIT = 100
DELIVERY_LEAD_DAYS = 2
TIMESLOT_START = "09:00"
TIMESLOT_END = "18:00"
PARCEL_WEIGHT_KG = 0.5


def round_amount(value: float) -> int:
    """Round half away from zero, as the courier's dashboard does."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def split_address(address: str) -> tuple[str, str]:
    """Split an address into the courier's two 100-character lines."""
    if len(address) <= ADDRESS_LINE_LIMIT:
        return address, ""
    return address[:ADDRESS_LINE_LIMIT], address[ADDRESS_LINE_LIMIT : ADDRESS_LINE_LIMIT * 2]


def cash_on_delivery_amount(order: Order) -> int:
    return round_amount(order.price) if order.is_cod else 0


def build_order_payload(
    order: Order,
    config: CourierConfig,
    today: date,
    *,
    timezone_name: str | None = None,
    country: str | None = None,
    merchant_prefix: str | None = None,
) -> dict:
    if not order.sale_id:
        raise ValueError("Order needs a sale id before it can be sent to the courier")

    timezone_name = timezone_name or settings.courier_timezone
    country = country or settings.courier_address_country
    prefix = settings.courier_merchant_prefix if merchant_prefix is None else merchant_prefix

    address1, address2 = split_address(order.address)
    pickup_date = today.isoformat()
    delivery_date = (today + timedelta(days=DELIVERY_LEAD_DAYS)).isoformat()
    timeslot = {"start_time": TIMESLOT_START, "end_time": TIMESLOT_END, "timezone": timezone_name}

    return {
        "service_type": "Parcel",
        "service_level": "Standard",
        "requested_tracking_number": order.sale_id,
        "reference": {"merchant_order_number": f"{prefix}{order.sale_id}"},
        "from": {
            "name": config.sender_name,
            "phone_number": config.sender_phone,
            "email": config.sender_email,
            "address": {
                "address1": config.sender_address1,
                "address2": config.sender_address2 or "",
                "country": country,
                "postcode": config.sender_postcode,
                "city": config.sender_city,
                "state": config.sender_state,
            },
        },
        "to": {
            "name": order.customer_name,
            "phone_number": order.phone,
            "address": {
                "address1": address1,
                "address2": address2,
                "country": country,
                "postcode": order.postcode,
                "city": order.city,
                "state": order.state,
            },
        },
        "parcel_job": {
            "is_pickup_required": True,
            "pickup_service_type": "Scheduled",
            "pickup_service_level": "Standard",
            "pickup_date": pickup_date,
            "pickup_timeslot": dict(timeslot),
            "pickup_approx_volume": "Half-Van Load",
            "delivery_start_date": delivery_date,
            "delivery_timeslot": dict(timeslot),
            "delivery_instructions": f"{order.product} ({order.staff_code or ''}) ({pickup_date})",
            "cash_on_delivery": cash_on_delivery_amount(order),
            "insured_value": round_amount(order.price),
            "dimensions": {"weight": PARCEL_WEIGHT_KG},
        },
    }
