"""Courier API integration."""

from .client import CourierClient
from .payload import build_order_payload, cash_on_delivery_amount, split_address
from .token_cache import TokenCache

__all__ = ["CourierClient", "TokenCache", "build_order_payload", "cash_on_delivery_amount", "split_address"]
