"""Liveness endpoint."""

from fastapi import APIRouter

from paybuilder.config import settings
from paybuilder.providers.container import services

router = APIRouter(tags=["health"])


@router.get("/health")
async def health():
    configured = services.has_client(settings.default_config_name)
    return {
        "status": "ok" if configured else "degraded",
        "gateway": services.get_client(settings.default_config_name).name if configured else None,
    }
