"""Courier status classification.

Free-text courier statuses are mapped to a delivery outcome by an ordered rule
table: the first rule with a keyword contained in the status (case-insensitive)
wins. Anything unmatched is ``Other`` and only the raw text is stored.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from ...models.domain import DeliveryOutcome, Order


@dataclass(frozen=True, slots=True)
class StatusRule:
    keywords: tuple[str, ...]
    outcome: DeliveryOutcome

    def matches(self, status: str) -> bool:
        lowered = status.lower()
        return any(keyword in lowered for keyword in self.keywords)


STATUS_RULES: tuple[StatusRule, ...] = (
    StatusRule(("successful delivery", "completed", "delivered"), DeliveryOutcome.SUCCESS),
    StatusRule(("returned to sender", "return", "rts", "cancelled"), DeliveryOutcome.RETURN),
)

TERMINAL_STATUSES = {DeliveryOutcome.SUCCESS.value, DeliveryOutcome.RETURN.value}


def classify_status(status: str, rules: tuple[StatusRule, ...] = STATUS_RULES) -> DeliveryOutcome:
    for rule in rules:
        if rule.matches(status):
            return rule.outcome
    return DeliveryOutcome.OTHER


def transition_fields(order: Order, raw_status: str, outcome: DeliveryOutcome, today: date, now: datetime) -> dict:
    """Column updates for an order receiving a classified status."""
    fields: dict[str, str] = {"seo": raw_status, "updated_at": now.isoformat()}
    if outcome is DeliveryOutcome.SUCCESS:
        fields["delivery_status"] = DeliveryOutcome.SUCCESS.value
        if order.is_cod:
            fields["tarikh_bayaran"] = today.isoformat()
    elif outcome is DeliveryOutcome.RETURN:
        fields["delivery_status"] = DeliveryOutcome.RETURN.value
        fields["date_return"] = today.isoformat()
    return fields


def is_anomalous(order: Order, outcome: DeliveryOutcome) -> bool:
    """A terminal delivery status being overwritten by a different outcome."""
    if outcome is DeliveryOutcome.OTHER:
        return False
    return order.delivery_status in TERMINAL_STATUSES and order.delivery_status != outcome.value
