"""
Application entry point: wires storage, share composition and routers into
a FastAPI app.
"""

import logging
import os
import socket
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from albumshare.config import Settings, settings as default_settings
from albumshare.core.exceptions import AlbumShareError
from albumshare.core.middleware import ErrorEnvelopeMiddleware, SecurityHeadersMiddleware
from albumshare.core.rate_limit import build_limiter
from albumshare.routers import build_router
from albumshare.services.album_service import AlbumReader
from albumshare.services.metrics import Metrics
from albumshare.services.observability import init_observability
from albumshare.services.shares import ShareComposer
from albumshare.services.storage import AlbumStore, LocalAlbumStore
from albumshare.utils.qr_utils import Encoder, QRCodeEncoder

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Starting album share service...")
    store: AlbumStore = app.state.store
    store.prepare()
    store.cleanup_staging()
    init_observability(app.state.settings)

    yield

    # Shutdown
    logger.info("Shutting down album share service...")


def _install_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AlbumShareError)
    async def album_share_error_handler(request: Request, exc: AlbumShareError):
        if exc.status_code >= 500:
            logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.public_message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
        return JSONResponse(status_code=400, content={"error": message})

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


def create_app(
    settings: Optional[Settings] = None,
    encoder: Optional[Encoder] = None,
    store: Optional[AlbumStore] = None,
) -> FastAPI:
    settings = settings or default_settings
    logging.getLogger().setLevel(settings.LOG_LEVEL.upper())

    store = store or LocalAlbumStore(settings)
    encoder = encoder or QRCodeEncoder(box_size=settings.QR_BOX_SIZE, border=settings.QR_BORDER)
    metrics = Metrics(enabled=settings.METRICS_ENABLED)

    app = FastAPI(
        title="Album Share API",
        description="Upload a batch of images and share them through a link and QR code",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    app.state.store = store
    app.state.reader = AlbumReader(store, settings)
    app.state.composer = ShareComposer(encoder, settings)
    app.state.metrics = metrics

    # Rate limiting
    limiter = build_limiter(settings)
    app.state.limiter = limiter
    _install_exception_handlers(app)

    app.include_router(build_router(settings, limiter))

    @app.get("/metrics", include_in_schema=False)
    async def prometheus_metrics():
        return metrics.endpoint()

    # Middleware setup
    app.add_middleware(GZipMiddleware, minimum_size=1024)
    app.add_middleware(ErrorEnvelopeMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        SecurityHeadersMiddleware,
        production=(settings.APP_ENV or "").strip().lower() == "production",
    )
    metrics.install(app)

    # Stored images are public by capability URL
    if isinstance(store, LocalAlbumStore):
        app.mount(settings.PUBLIC_PREFIX, StaticFiles(directory=store.base, check_dir=False), name="uploads")
    # Front-end (viewer page etc.) is optional and mounted last so it never shadows the API
    if os.path.isdir(settings.PUBLIC_DIR):
        app.mount("/", StaticFiles(directory=settings.PUBLIC_DIR, html=True), name="public")

    return app


def local_ip() -> str:
    """Best-effort LAN address of this host, for the startup banner."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as s:
            # No packets are sent for a UDP connect
            s.connect(("10.255.255.255", 1))
            return s.getsockname()[0]
    except OSError:
        return "localhost"


app = create_app()


def main():
    port = default_settings.PORT
    logger.info("Server running on:")
    logger.info("- Local:   http://localhost:%s", port)
    logger.info("- Network: http://%s:%s", local_ip(), port)
    uvicorn.run(
        "albumshare.main:app",
        host=default_settings.HOST,
        port=port,
        proxy_headers=default_settings.TRUST_PROXY,
        forwarded_allow_ips="*" if default_settings.TRUST_PROXY else None,
        log_level="info",
    )


if __name__ == "__main__":
    main()
