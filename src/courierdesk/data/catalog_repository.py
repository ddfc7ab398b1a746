"""Bundle and product lookups used when chat orders are keyed in."""

from __future__ import annotations

from typing import Any

from .base import coerce_float, first_row

_PLATFORM_PRICE_COLUMNS = {
    "shopee": ("price_shopee_np", "price_shopee"),
    "tiktok": ("price_tiktok_np", "price_tiktok"),
}
_DEFAULT_PRICE_COLUMNS = ("price_normal_np", "price_normal")


def bundle_price(bundle: dict, platform: str) -> float:
    """Selling price of a bundle for the given sales platform."""
    for column in _PLATFORM_PRICE_COLUMNS.get(platform.lower(), _DEFAULT_PRICE_COLUMNS):
        value = coerce_float(bundle.get(column))
        if value:
            return value
    return 0.0


class CatalogRepository:
    def __init__(self, client: Any) -> None:
        self.client = client

    def find_active_bundle(self, name: str) -> dict | None:
        return first_row(
            self.client.table("bundles").select("*").ilike("name", f"%{name}%").eq("is_active", True).limit(1),
            "find bundle",
        )

    def bundle_cost(self, bundle: dict) -> float:
        product_id = bundle.get("product_id")
        if not product_id:
            return 0.0
        product = first_row(
            self.client.table("products").select("base_cost").eq("id", product_id).limit(1),
            "load product cost",
        )
        if not product:
            return 0.0
        units = bundle.get("units") or 1
        return coerce_float(product.get("base_cost")) * units
