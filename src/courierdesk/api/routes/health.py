"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


def _get_whatsapp_gateway():
    """Lazy import to avoid startup failures."""
    from ...services.factory import get_whatsapp_gateway
    return get_whatsapp_gateway()


@router.get("/health/database", status_code=status.HTTP_200_OK)
def check_database() -> dict:
    """Check that Supabase is configured and the orders table answers."""
    from ...data.orders_repository import ORDERS_TABLE
    from ...db.supabase import get_supabase_client

    supabase = get_supabase_client()
    if not supabase:
        return {
            "configured": False,
            "message": "Supabase not configured. Set COURIERDESK_SUPABASE_URL and COURIERDESK_SUPABASE_KEY environment variables.",
        }

    try:
        supabase.table(ORDERS_TABLE).select("id").limit(1).execute()
    except Exception as exc:
        return {
            "configured": True,
            "connected": False,
            "error": str(exc),
            "message": f"Database connection error: {exc}",
        }
    return {"configured": True, "connected": True, "message": "Database connected."}


@router.get("/health/whatsapp/{device_id}", status_code=status.HTTP_200_OK)
def check_whatsapp_device(device_id: str) -> dict:
    """Proxy the gateway's device status for the settings page."""
    gateway = _get_whatsapp_gateway()
    return {"service": "whatsapp", "device_id": device_id, "status": gateway.device_status(device_id)}
