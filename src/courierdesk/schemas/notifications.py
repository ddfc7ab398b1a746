"""Request models for notification and file endpoints."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class NotifyOrderRequest(BaseModel):
    tracking_number: Optional[str] = Field(default=None, description="Tracking number of the booked order.")
    order_id: Optional[str] = Field(default=None, description="Order id, used when there is no tracking number yet.")


class UploadResponse(BaseModel):
    success: bool = True
    url: str


class DeleteFileRequest(BaseModel):
    url: str = Field(..., min_length=1, description="Public URL of the stored object.")
