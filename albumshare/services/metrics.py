"""
Prometheus metrics for the album sharing service
"""

import time
from fastapi import FastAPI, Request
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

REQUESTS_TOTAL = Counter(
    "albumshare_http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"]
)

REQUEST_DURATION = Histogram(
    "albumshare_http_request_seconds",
    "Request duration in seconds",
    ["method", "path"]
)

UPLOADS_TOTAL = Counter(
    "albumshare_uploads_total",
    "Album upload attempts",
    ["status"]
)

ALBUM_VIEWS = Counter(
    "albumshare_album_views_total",
    "Album listing requests",
    ["status"]
)

CODES_GENERATED = Counter(
    "albumshare_codes_generated_total",
    "Standalone QR codes generated"
)


class Metrics:
    """Records metrics only when enabled; the collectors themselves are process-wide."""

    def __init__(self, enabled: bool):
        self.enabled = enabled

    def endpoint(self) -> Response:
        if not self.enabled:
            return Response(b"metrics disabled", media_type="text/plain")
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    def install(self, app: FastAPI) -> None:
        """Add request metrics middleware to the app"""
        if not self.enabled:
            return

        @app.middleware("http")
        async def _metrics(request: Request, call_next):
            start = time.time()
            response = await call_next(request)

            # Route template keeps album ids out of label values
            route = request.scope.get("route")
            path = getattr(route, "path", "unmatched")
            REQUESTS_TOTAL.labels(
                method=request.method,
                path=path,
                status=str(response.status_code)
            ).inc()
            REQUEST_DURATION.labels(
                method=request.method,
                path=path
            ).observe(time.time() - start)
            return response

    def record_upload(self, status: str):
        if self.enabled:
            UPLOADS_TOTAL.labels(status=status).inc()

    def record_album_view(self, status: str):
        if self.enabled:
            ALBUM_VIEWS.labels(status=status).inc()

    def record_code_generated(self):
        if self.enabled:
            CODES_GENERATED.inc()
