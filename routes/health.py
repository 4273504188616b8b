# routes/health.py
from fastapi import APIRouter, HTTPException

from app.core.logging import get_logger
from app.core.resources import get_all_settings
from tutor.errors import ProviderUnavailable

logger = get_logger(__name__)

router = APIRouter(prefix="/health", tags=["health"])

@router.get("/")
async def health_check():
    logger.info("health check")
    return {"status": "healthy"}

@router.get("/provider") # GET : /health/provider
async def get_provider_config():
    return {"provider": get_all_settings().provider.default}

@router.get("/provider/capabilities") # GET : /health/provider/capabilities
async def get_provider_capabilities():
    from app.core.resources import get_provider
    try:
        return get_provider().capabilities()
    except ProviderUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))
