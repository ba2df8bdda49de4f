"""Health check endpoint."""

from fastapi import APIRouter

from messenger_platform.config import get_settings

router = APIRouter()


@router.get("/health")
async def health():
    """Liveness check."""
    return {"status": "ok", "environment": get_settings().env}
