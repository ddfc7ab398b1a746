from __future__ import annotations

from datetime import datetime, timezone

import httpx
import pytest

from conftest import COURIER_CONFIG_ROW, FakeSupabase, make_order_row
from courierdesk.data.courier_repository import CourierRepository
from courierdesk.data.orders_repository import OrderRepository, order_from_row
from courierdesk.errors import (
    ConfigurationMissing,
    CourierRejectedOrder,
    OrderAlreadySubmitted,
    OrderValidationError,
    RecordNotFound,
)
from courierdesk.models.domain import CancellationResult, MergeResult, WaybillSource
from courierdesk.services.courier.client import CourierClient
from courierdesk.services.courier.token_cache import TokenCache
from courierdesk.services.orders.lifecycle import OrderLifecycleService, missing_order_fields
from courierdesk.services.waybills import WaybillMerger

# 2024-05-01 23:30 UTC is already 2 May in Kuala Lumpur.
NOW = datetime(2024, 5, 1, 23, 30, tzinfo=timezone.utc)


class StubTokenCache:
    def __init__(self) -> None:
        self.calls = 0

    def get_valid_token(self, config) -> str:
        self.calls += 1
        return "cached-token"


class StubCourier:
    def __init__(self, tracking_number: str = "NVMY0001", error: Exception | None = None) -> None:
        self.tracking_number = tracking_number
        self.error = error
        self.submitted: list[tuple[str, dict]] = []
        self.cancelled: list[str] = []

    def submit_order(self, token: str, payload: dict) -> str:
        if self.error:
            raise self.error
        self.submitted.append((token, payload))
        return self.tracking_number

    def cancel_order(self, token: str, tracking_number: str) -> CancellationResult:
        self.cancelled.append(tracking_number)
        return CancellationResult(tracking_id=tracking_number, status="Cancelled")


class StubMerger:
    def __init__(self) -> None:
        self.sources = None

    def merge(self, sources):
        self.sources = sources
        return MergeResult(document=b"%PDF", succeeded=[s.identifier for s in sources], failed=[])


def _service(db: FakeSupabase, courier: StubCourier | None = None) -> tuple[OrderLifecycleService, StubCourier]:
    courier = courier or StubCourier()
    service = OrderLifecycleService(
        OrderRepository(db),
        CourierRepository(db),
        StubTokenCache(),
        courier,
        StubMerger(),
        clock=lambda: NOW,
    )
    return service, courier


def _db(**order_overrides) -> FakeSupabase:
    return FakeSupabase(
        {"ninjavan_config": [COURIER_CONFIG_ROW], "customer_orders": [make_order_row(**order_overrides)]},
        rpc_results={"generate_sale_id": "SALE777"},
    )


def test_submit_order_writes_tracking_number_back():
    db = _db()
    service, courier = _service(db)

    result = service.submit_order("order-1")

    assert result.tracking_number == "NVMY0001"
    assert result.sale_id == "SALE001"
    row = db.rows("customer_orders")[0]
    assert row["no_tracking"] == "NVMY0001"
    assert row["kurier"] == "Ninjavan"
    token, payload = courier.submitted[0]
    assert token == "cached-token"
    assert payload["parcel_job"]["pickup_date"] == "2024-05-02"
    assert db.rpc_calls == []


def test_submit_order_generates_sale_id_when_missing():
    db = _db(id_sale=None)
    service, courier = _service(db)

    result = service.submit_order("order-1")

    assert result.sale_id == "SALE777"
    assert db.rpc_calls == ["generate_sale_id"]
    assert db.rows("customer_orders")[0]["id_sale"] == "SALE777"
    assert courier.submitted[0][1]["requested_tracking_number"] == "SALE777"


def test_postcode_override_is_persisted():
    db = _db(poskod="")
    service, courier = _service(db)

    service.submit_order("order-1", postcode=" 43000 ")

    assert db.rows("customer_orders")[0]["poskod"] == "43000"
    assert courier.submitted[0][1]["to"]["address"]["postcode"] == "43000"


def test_missing_fields_are_reported_without_calling_courier():
    db = _db(alamat="", bandar=None)
    service, courier = _service(db)

    with pytest.raises(OrderValidationError) as excinfo:
        service.submit_order("order-1")

    assert excinfo.value.missing == ["address", "city"]
    assert courier.submitted == []


def test_negative_price_is_invalid():
    order = order_from_row(make_order_row(harga_jualan_sebenar=-1))
    assert missing_order_fields(order) == ["price"]


def test_unknown_order():
    service, _ = _service(_db())
    with pytest.raises(RecordNotFound):
        service.submit_order("nope")


def test_resubmission_needs_force():
    db = _db(no_tracking="NVMY-OLD")
    service, courier = _service(db)

    with pytest.raises(OrderAlreadySubmitted):
        service.submit_order("order-1")
    assert courier.submitted == []

    result = service.submit_order("order-1", force=True)
    assert result.tracking_number == "NVMY0001"
    assert db.rows("customer_orders")[0]["no_tracking"] == "NVMY0001"


def test_courier_rejection_leaves_order_untouched():
    db = _db()
    service, _ = _service(db, StubCourier(error=CourierRejectedOrder("Invalid postcode", {"code": 400})))

    with pytest.raises(CourierRejectedOrder):
        service.submit_order("order-1")

    assert db.rows("customer_orders")[0]["no_tracking"] is None


def test_cancel_order_does_not_touch_order_record():
    db = _db(no_tracking="NVMY0001")
    service, courier = _service(db)

    result = service.cancel_order("NVMY0001")

    assert result.status == "Cancelled"
    assert courier.cancelled == ["NVMY0001"]
    assert db.updates == []


def test_cancel_requires_tracking_number():
    service, _ = _service(_db())
    with pytest.raises(OrderValidationError):
        service.cancel_order("  ")


def test_consolidated_waybill_builds_sources():
    service, _ = _service(_db())
    result = service.consolidated_waybill(tracking_numbers=["T1", "", "T2"])
    assert result.succeeded == ["T1", "T2"]


def test_consolidated_waybill_keeps_mixed_sources_in_caller_order():
    service, _ = _service(_db())
    sources = [WaybillSource(url="https://files.test/a.pdf"), WaybillSource(tracking_number="T1")]

    result = service.consolidated_waybill(sources=sources)

    assert result.succeeded == ["https://files.test/a.pdf", "T1"]
    assert service.waybill_merger.sources == sources


def test_consolidated_waybill_without_courier_configuration_reports_missing_configuration():
    db = FakeSupabase()
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, content=b"%PDF")

    http_client = httpx.Client(transport=httpx.MockTransport(handler))
    courier_repository = CourierRepository(db)
    token_cache = TokenCache(courier_repository, http_client)
    courier_client = CourierClient(http_client)
    merger = WaybillMerger(
        http_client,
        courier_client=courier_client,
        token_provider=lambda: token_cache.issue_token(courier_repository.load_config()),
    )
    service = OrderLifecycleService(OrderRepository(db), courier_repository, token_cache, courier_client, merger)

    with pytest.raises(ConfigurationMissing):
        service.consolidated_waybill(tracking_numbers=["T1", "T2"])
    assert requests == []
