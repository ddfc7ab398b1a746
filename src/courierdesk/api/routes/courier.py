"""Courier order lifecycle endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Response, status

from .waybills import pdf_response
from ...schemas.courier import (
    CancelOrderRequest,
    CancelOrderResponse,
    SubmitOrderRequest,
    SubmitOrderResponse,
    WaybillRequest,
)
from ...services import factory

router = APIRouter(prefix="/courier", tags=["courier"])


@router.post("/orders", response_model=SubmitOrderResponse, status_code=status.HTTP_200_OK)
def submit_order(payload: SubmitOrderRequest) -> SubmitOrderResponse:
    service = factory.get_order_lifecycle_service()
    result = service.submit_order(payload.order_id, postcode=payload.postcode, force=payload.force)
    return SubmitOrderResponse(
        order_id=result.order_id,
        id_sale=result.sale_id,
        tracking_number=result.tracking_number,
    )


@router.post("/orders/cancel", response_model=CancelOrderResponse, status_code=status.HTTP_200_OK)
def cancel_order(payload: CancelOrderRequest) -> CancelOrderResponse:
    result = factory.get_order_lifecycle_service().cancel_order(payload.tracking_number)
    return CancelOrderResponse(tracking_id=result.tracking_id, status=result.status)


@router.post("/waybills", status_code=status.HTTP_200_OK)
def consolidated_waybill(payload: WaybillRequest) -> Response:
    tracking_numbers = [tid for tid in payload.tracking_numbers if tid and tid.strip()]
    result = factory.get_order_lifecycle_service().consolidated_waybill(tracking_numbers=tracking_numbers)
    return pdf_response(result, len(tracking_numbers))
