"""System status API endpoints."""

from fastapi import APIRouter, Depends

from cleanquest.api.deps import get_device
from cleanquest.config import settings
from cleanquest.device import Device

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/ping")
def system_ping():
    """Lightweight health check."""
    return {"status": "ok"}


@router.get("/status")
def system_status(device: Device = Depends(get_device)):
    """Which stores this device can reach right now."""
    return {
        "app_name": settings.app_name,
        "remote_backend": device.remote.registry.name,
        "remote_available": device.remote.available(),
        "cached_families": len(device.families.local_families()),
        "merge_strategy": device.families.merge_strategy,
    }
