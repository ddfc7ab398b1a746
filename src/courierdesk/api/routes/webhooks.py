"""Inbound webhooks: courier status callbacks and chat-relay messages."""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Request, status

from ...services import factory

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


def _message_fields(payload: dict[str, Any]) -> tuple[str, str]:
    message = payload.get("message") or payload.get("text") or payload.get("body") or ""
    sender = payload.get("from") or payload.get("sender") or payload.get("phone") or ""
    return str(message), str(sender)


@router.post("/courier", status_code=status.HTTP_200_OK)
def courier_status(request: Request, payload: Optional[dict[str, Any]] = Body(default=None)) -> dict:
    webhook = factory.get_courier_status_webhook()
    return webhook.handle(payload or {}, method=request.method, headers=dict(request.headers))


@router.api_route("/message", methods=["GET", "POST"], status_code=status.HTTP_200_OK)
def chat_message(request: Request, payload: Optional[dict[str, Any]] = Body(default=None)) -> dict:
    if payload is None:
        payload = dict(request.query_params)
    message, sender = _message_fields(payload)
    device_id = payload.get("device_id")
    device = factory.get_device_repository().find_by_device_id(str(device_id)) if device_id else None
    if device is None:
        logger.info(f"Chat message from unknown device {device_id}")
    return factory.get_message_handler().handle(device, message, sender, method=request.method, body=payload)


@router.post("/relay/{webhook_id}", status_code=status.HTTP_200_OK)
def chat_relay(webhook_id: str, request: Request, payload: Optional[dict[str, Any]] = Body(default=None)) -> dict:
    payload = payload or {}
    message, sender = _message_fields(payload)
    device = factory.get_device_repository().find_by_webhook_id(webhook_id)
    if device is None:
        logger.info(f"Chat relay for unknown webhook id {webhook_id}")
    return factory.get_message_handler().handle(device, message, sender, method=request.method, body=payload)
