"""Pydantic request/response models for courier and waybill endpoints."""

from __future__ import annotations

from typing import Optional, Sequence

from pydantic import BaseModel, Field, field_validator


class SubmitOrderRequest(BaseModel):
    order_id: str = Field(..., min_length=1, description="Primary key of the customer order to dispatch.")
    postcode: Optional[str] = Field(default=None, description="Corrected postcode written back before submission.")
    force: bool = Field(default=False, description="Resubmit even when the order already has a tracking number.")


class SubmitOrderResponse(BaseModel):
    success: bool = True
    message: str = "Order created successfully"
    order_id: str
    id_sale: str
    tracking_number: str


class CancelOrderRequest(BaseModel):
    tracking_number: str = Field(..., description="Courier tracking id of the parcel to cancel.")


class CancelOrderResponse(BaseModel):
    success: bool = True
    message: str = "Order cancelled successfully"
    tracking_id: Optional[str] = None
    status: Optional[str] = None


class WaybillRequest(BaseModel):
    tracking_numbers: Sequence[str] = Field(..., description="Tracking numbers whose waybills are merged in order.")

    @field_validator("tracking_numbers")
    @classmethod
    def validate_not_empty(cls, value: Sequence[str]) -> Sequence[str]:
        if not [item for item in value if item and item.strip()]:
            raise ValueError("tracking_numbers array is required")
        return value


class MergeWaybillsRequest(BaseModel):
    waybill_urls: Sequence[str] = Field(..., description="Direct waybill PDF URLs, merged in order.")

    @field_validator("waybill_urls")
    @classmethod
    def validate_not_empty(cls, value: Sequence[str]) -> Sequence[str]:
        if not [item for item in value if item and item.strip()]:
            raise ValueError("waybill_urls array is required")
        return value
