# routes/__init__.py
from fastapi import APIRouter

import routes.analysis as analysis_routes
import routes.health as health_routes

api_router = APIRouter(prefix="/api")
api_router.include_router(health_routes.router)
api_router.include_router(analysis_routes.router)
