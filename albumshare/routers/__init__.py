from fastapi import APIRouter
import logging

from slowapi import Limiter

from albumshare.config import Settings
from . import albums
from .health import router as health_router
from .links import router as links_router


def build_router(settings: Settings, limiter: Limiter) -> APIRouter:
    router = APIRouter()
    log = logging.getLogger("routers")

    albums_router = albums.build_router(limiter, settings.UPLOAD_RATE_LIMIT)
    for name, sub in (("albums", albums_router), ("links", links_router), ("health", health_router)):
        router.include_router(sub)
        log.info("Loaded router: %s", name)
    return router
