from fastapi import APIRouter

from quiz_render.web.routers.health import router as health_router
from quiz_render.web.routers.renders import router as renders_router

api_router = APIRouter()

api_router.include_router(
    renders_router,
)

api_router.include_router(
    health_router,
)

__all__ = ["api_router"]
