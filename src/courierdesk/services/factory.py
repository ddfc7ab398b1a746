"""Service construction from settings and the shared Supabase client.

Route modules call these functions per request; tests replace them with
``monkeypatch``.
"""

from __future__ import annotations

import httpx

from .courier.client import CourierClient
from .courier.token_cache import TokenCache
from .messages.handler import MessageCommandHandler
from .notifications.orders import OrderNotifier
from .notifications.whatsapp import WhatsAppGateway
from .orders.lifecycle import OrderLifecycleService
from .tracking.webhook import CourierStatusWebhook
from .waybills.merger import WaybillMerger
from ..config import settings
from ..data.catalog_repository import CatalogRepository
from ..data.courier_repository import CourierRepository
from ..data.devices_repository import DeviceRepository
from ..data.orders_repository import OrderRepository
from ..data.prospects_repository import ProspectRepository
from ..db.supabase import require_supabase_client
from ..persistence.storage import BlobStorage
from ..persistence.webhook_log import WebhookLog


def get_http_client() -> httpx.Client:
    return httpx.Client(timeout=settings.http_timeout_seconds)


def get_whatsapp_gateway() -> WhatsAppGateway:
    return WhatsAppGateway(get_http_client())


def get_order_lifecycle_service() -> OrderLifecycleService:
    client = require_supabase_client()
    http_client = get_http_client()
    courier_repository = CourierRepository(client)
    token_cache = TokenCache(courier_repository, http_client)
    courier_client = CourierClient(http_client)

    # Waybill endpoints are fetched with a freshly issued token rather than the cached one.
    def waybill_token() -> str:
        return token_cache.issue_token(courier_repository.load_config())

    merger = WaybillMerger(http_client, courier_client=courier_client, token_provider=waybill_token)
    return OrderLifecycleService(
        OrderRepository(client),
        courier_repository,
        token_cache,
        courier_client,
        merger,
    )


def get_waybill_merger() -> WaybillMerger:
    """URL-only merger; needs no database."""
    return WaybillMerger(get_http_client())


def get_courier_status_webhook() -> CourierStatusWebhook:
    client = require_supabase_client()
    return CourierStatusWebhook(
        OrderRepository(client),
        DeviceRepository(client),
        get_whatsapp_gateway(),
        WebhookLog(client),
    )


def get_order_notifier() -> OrderNotifier:
    client = require_supabase_client()
    return OrderNotifier(OrderRepository(client), DeviceRepository(client), get_whatsapp_gateway())


def get_device_repository() -> DeviceRepository:
    return DeviceRepository(require_supabase_client())


def get_message_handler() -> MessageCommandHandler:
    client = require_supabase_client()
    return MessageCommandHandler(
        OrderRepository(client),
        ProspectRepository(client),
        CatalogRepository(client),
        get_order_notifier(),
        WebhookLog(client),
    )


def get_blob_storage() -> BlobStorage:
    return BlobStorage(require_supabase_client(), settings.storage_bucket)
