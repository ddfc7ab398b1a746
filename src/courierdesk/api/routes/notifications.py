"""Customer notification endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...schemas.notifications import NotifyOrderRequest
from ...services import factory

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.post("/order", status_code=status.HTTP_200_OK)
def notify_order_booked(payload: NotifyOrderRequest) -> dict:
    notifier = factory.get_order_notifier()
    return notifier.notify_order_booked(tracking_number=payload.tracking_number, order_id=payload.order_id)
