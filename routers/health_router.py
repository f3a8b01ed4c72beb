from fastapi import APIRouter, Depends

from auth import get_current_identity, get_settings
from backend.utils.responses import success_response
from config import Settings
from models.user import Identity
from utils.shared_utils import utcnow

health_router = APIRouter(prefix="/api", tags=["health"])


@health_router.get("/health")
async def health(
    identity: Identity = Depends(get_current_identity),
    settings: Settings = Depends(get_settings),
):
    """Authenticated health check"""
    return success_response({
        "status": "healthy",
        "user": identity.email,
        "timestamp": utcnow().isoformat(),
        "server": settings.server_name,
    })
