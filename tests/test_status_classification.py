from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from conftest import make_order_row
from courierdesk.data.orders_repository import order_from_row
from courierdesk.models.domain import DeliveryOutcome
from courierdesk.services.tracking.status import (
    STATUS_RULES,
    StatusRule,
    classify_status,
    is_anomalous,
    transition_fields,
)

TODAY = date(2024, 5, 2)
NOW = datetime(2024, 5, 2, 3, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "status, outcome",
    [
        ("Successful Delivery", DeliveryOutcome.SUCCESS),
        ("DELIVERED", DeliveryOutcome.SUCCESS),
        ("Completed", DeliveryOutcome.SUCCESS),
        ("Returned to Sender", DeliveryOutcome.RETURN),
        ("Parcel RTS", DeliveryOutcome.RETURN),
        ("Cancelled", DeliveryOutcome.RETURN),
        ("On Vehicle for Delivery", DeliveryOutcome.OTHER),
        ("Pending Pickup", DeliveryOutcome.OTHER),
    ],
)
def test_classify_status(status, outcome):
    assert classify_status(status) is outcome


def test_first_matching_rule_wins():
    # Matches both rule keyword sets; success is declared first.
    assert classify_status("Delivered (return label printed)") is DeliveryOutcome.SUCCESS
    reordered = tuple(reversed(STATUS_RULES))
    assert classify_status("Delivered (return label printed)", reordered) is DeliveryOutcome.RETURN


def test_custom_rule_table():
    rules = (StatusRule(("lost",), DeliveryOutcome.RETURN),)
    assert classify_status("Parcel lost in transit", rules) is DeliveryOutcome.RETURN
    assert classify_status("Delivered", rules) is DeliveryOutcome.OTHER


def test_delivered_stamps_payment_date_only_for_cod():
    cod = order_from_row(make_order_row(cara_bayaran="COD"))
    cash = order_from_row(make_order_row(cara_bayaran="CASH"))

    cod_fields = transition_fields(cod, "delivered", DeliveryOutcome.SUCCESS, TODAY, NOW)
    cash_fields = transition_fields(cash, "delivered", DeliveryOutcome.SUCCESS, TODAY, NOW)

    assert cod_fields["delivery_status"] == "Success"
    assert cod_fields["tarikh_bayaran"] == "2024-05-02"
    assert cash_fields["delivery_status"] == "Success"
    assert "tarikh_bayaran" not in cash_fields


@pytest.mark.parametrize("payment_mode", ["COD", "CASH"])
def test_rts_stamps_return_date_regardless_of_payment(payment_mode):
    order = order_from_row(make_order_row(cara_bayaran=payment_mode))
    fields = transition_fields(order, "RTS", DeliveryOutcome.RETURN, TODAY, NOW)
    assert fields["delivery_status"] == "Return"
    assert fields["date_return"] == "2024-05-02"
    assert "tarikh_bayaran" not in fields


def test_other_status_only_stores_raw_text():
    order = order_from_row(make_order_row())
    fields = transition_fields(order, "Arrived at Sorting Hub", DeliveryOutcome.OTHER, TODAY, NOW)
    assert fields == {"seo": "Arrived at Sorting Hub", "updated_at": NOW.isoformat()}


def test_terminal_status_overwrite_is_anomalous():
    delivered = order_from_row(make_order_row(delivery_status="Success"))
    assert is_anomalous(delivered, DeliveryOutcome.RETURN)
    assert not is_anomalous(delivered, DeliveryOutcome.SUCCESS)
    assert not is_anomalous(delivered, DeliveryOutcome.OTHER)
    assert not is_anomalous(order_from_row(make_order_row()), DeliveryOutcome.RETURN)
