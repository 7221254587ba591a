"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


def _get_geocoder_health_check():
    """Lazy import to avoid startup failures."""
    from ...services.geocoding.client import check_health as geocoder_health_check
    return geocoder_health_check


@router.get("/health/geocoder", status_code=status.HTTP_200_OK)
def health_geocoder() -> dict:
    """Check the geocoding service answers searches."""
    geocoder_health_check = _get_geocoder_health_check()
    return {"service": "geocoder", "base_url": settings.geocoder_base_url, "healthy": geocoder_health_check()}


@router.get("/health/database", status_code=status.HTTP_200_OK)
def check_database() -> dict:
    """Check the driver and order tables can be read."""
    from ...data.contracts import RepositoryError
    from ...data.drivers_repository import SupabaseDriverRepository
    from ...data.orders_repository import SupabaseOrderRepository
    from ...db.supabase import get_supabase_client

    client = get_supabase_client()
    if not client:
        return {
            "configured": False,
            "message": "Supabase not configured. Set DELIVERY_SUPABASE_URL and DELIVERY_SUPABASE_KEY environment variables.",
        }

    try:
        drivers = SupabaseDriverRepository(client=client).list_drivers()
        orders = SupabaseOrderRepository(client=client).list_open_orders()
    except RepositoryError as exc:
        return {
            "configured": True,
            "connected": False,
            "error": str(exc),
            "message": f"Database connection error: {exc}",
        }
    return {
        "configured": True,
        "connected": True,
        "drivers_count": len(drivers),
        "open_orders_count": len(orders),
        "message": f"Database connected. Found {len(drivers)} drivers and {len(orders)} open orders.",
    }
