from datetime import datetime
import time

from fastapi import APIRouter, Depends, Request

from albumshare.config import Settings
from albumshare.core.dependencies import get_settings, get_store
from albumshare.services.storage import AlbumStore

router = APIRouter(tags=["ops"])

# Store startup time for uptime calculation
startup_time = time.time()


@router.get("/health")
async def health(
    settings: Settings = Depends(get_settings),
    store: AlbumStore = Depends(get_store),
):
    """Liveness plus a check that the storage root is reachable"""
    storage_ok = store.healthy()
    return {
        "status": "healthy" if storage_ok else "degraded",
        "storage_ok": storage_ok,
        "environment": settings.APP_ENV,
        "uptime_seconds": round(time.time() - startup_time, 2),
        "timestamp": datetime.now().isoformat(),
    }


def _walk_routes(routes, prefix: str = ""):
    """Flatten included routers and mounts into leaf routes."""
    for r in routes:
        path = prefix + getattr(r, "path", "")
        children = getattr(r, "routes", None)
        if children and not getattr(r, "methods", None):
            yield from _walk_routes(children, path)
            continue
        yield {
            "path": path,
            "methods": sorted(getattr(r, "methods", []) or []),
            "name": getattr(r, "name", ""),
        }


@router.get("/ops/routes")
async def list_routes(request: Request):
    routes = list(_walk_routes(request.app.routes))
    return {"count": len(routes), "routes": routes}
