"""Order lifecycle against the courier: submit, cancel and consolidated waybills."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Iterable, Sequence

from ..clock import local_today, utc_now
from ..courier.client import CourierClient
from ..courier.payload import build_order_payload
from ..courier.token_cache import TokenCache
from ..waybills.merger import WaybillMerger, build_sources
from ...config import settings
from ...data.courier_repository import CourierRepository
from ...data.orders_repository import OrderRepository
from ...errors import OrderAlreadySubmitted, OrderValidationError, RecordNotFound
from ...models.domain import CancellationResult, MergeResult, Order, SubmissionResult, WaybillSource

logger = logging.getLogger(__name__)

REQUIRED_ORDER_FIELDS = ("customer_name", "phone", "address", "postcode", "city", "state", "product")


def missing_order_fields(order: Order) -> list[str]:
    missing = [name for name in REQUIRED_ORDER_FIELDS if not getattr(order, name)]
    if order.price is None or order.price < 0:
        missing.append("price")
    return missing


class OrderLifecycleService:
    def __init__(
        self,
        orders: OrderRepository,
        courier_repository: CourierRepository,
        token_cache: TokenCache,
        courier_client: CourierClient,
        waybill_merger: WaybillMerger,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.orders = orders
        self.courier_repository = courier_repository
        self.token_cache = token_cache
        self.courier_client = courier_client
        self.waybill_merger = waybill_merger
        self.clock = clock

    def submit_order(self, order_id: str, *, postcode: str | None = None, force: bool = False) -> SubmissionResult:
        order = self.orders.get(order_id)
        if order is None:
            raise RecordNotFound(f"Order {order_id} not found")

        updates: dict[str, str] = {}
        if postcode and postcode.strip() != order.postcode:
            order.postcode = postcode.strip()
            updates["poskod"] = order.postcode

        missing = missing_order_fields(order)
        if missing:
            raise OrderValidationError(missing)
        if order.tracking_number and not force:
            raise OrderAlreadySubmitted(order.tracking_number)

        if not order.sale_id:
            order.sale_id = self.orders.generate_sale_id()
            self.orders.update(order.id, {"id_sale": order.sale_id})
            logger.info(f"Assigned sale id {order.sale_id} to order {order.id}")

        config = self.courier_repository.load_config()
        token = self.token_cache.get_valid_token(config)
        payload = build_order_payload(order, config, local_today(self.clock()))
        tracking_number = self.courier_client.submit_order(token, payload)

        updates["no_tracking"] = tracking_number
        updates["kurier"] = settings.courier_name
        self.orders.update(order.id, updates)
        logger.info(f"Order {order.id} sent to courier, tracking number {tracking_number}")
        return SubmissionResult(order_id=order.id, sale_id=order.sale_id, tracking_number=tracking_number)

    def cancel_order(self, tracking_number: str) -> CancellationResult:
        """Cancel at the courier. Delivery status is left to the status webhook."""
        tracking_number = (tracking_number or "").strip()
        if not tracking_number:
            raise OrderValidationError(["tracking_number"])
        config = self.courier_repository.load_config()
        token = self.token_cache.get_valid_token(config)
        result = self.courier_client.cancel_order(token, tracking_number)
        logger.info(f"Courier cancelled {tracking_number}, status {result.status}")
        return result

    def consolidated_waybill(
        self,
        tracking_numbers: Iterable[str] = (),
        urls: Iterable[str] = (),
        *,
        sources: Sequence[WaybillSource] = (),
    ) -> MergeResult:
        """Merge waybills. Explicit ``sources`` keep a mixed batch in caller order."""
        sources = list(sources) or build_sources(tracking_numbers, urls)
        return self.waybill_merger.merge(sources)
