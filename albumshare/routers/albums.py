from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from slowapi import Limiter

from albumshare.config import Settings
from albumshare.core.dependencies import (
    get_composer,
    get_metrics,
    get_reader,
    get_settings,
    get_store,
)
from albumshare.core.exceptions import AlbumShareError
from albumshare.schemas.album import AlbumImagesOut, ErrorOut, UploadOut
from albumshare.services.album_service import AlbumReader
from albumshare.services.metrics import Metrics
from albumshare.services.shares import ShareComposer, request_origin
from albumshare.services.storage import AlbumStore
from albumshare.services.upload_stream import BatchReader
from albumshare.utils.qr_utils import to_data_url

# The body is parsed by BatchReader, so the form schema is declared by hand
UPLOAD_BODY = {
    "requestBody": {
        "required": True,
        "content": {
            "multipart/form-data": {
                "schema": {
                    "type": "object",
                    "properties": {
                        "images": {"type": "array", "items": {"type": "string", "format": "binary"}},
                    },
                    "required": ["images"],
                }
            }
        },
    }
}


def build_router(limiter: Limiter, upload_limit: str) -> APIRouter:
    router = APIRouter(tags=["albums"])

    @router.post(
        "/upload",
        response_model=UploadOut,
        responses={400: {"model": ErrorOut}, 500: {"model": ErrorOut}},
        openapi_extra=UPLOAD_BODY,
    )
    @limiter.limit(upload_limit)
    async def upload_album(
        request: Request,
        settings: Settings = Depends(get_settings),
        store: AlbumStore = Depends(get_store),
        composer: ShareComposer = Depends(get_composer),
        metrics: Metrics = Depends(get_metrics),
    ):
        """Store a batch of images as a new album and return its share link and QR code."""
        reader = BatchReader(settings)
        try:
            batch = await reader.read(request)
            album_id = await run_in_threadpool(store.create_album, batch)
        except AlbumShareError as exc:
            metrics.record_upload(type(exc).__name__)
            raise
        finally:
            reader.close()

        origin = request_origin(request, settings)
        shareable = await run_in_threadpool(composer.compose_shareable, album_id, origin)
        metrics.record_upload("success")
        return UploadOut(
            viewUrl=shareable.retrieval_url,
            qrCode=to_data_url(shareable.encoded_image, composer.media_type),
        )

    @router.get(
        "/api/album/{album_id}",
        response_model=AlbumImagesOut,
        responses={404: {"model": ErrorOut}},
    )
    def get_album_images(
        album_id: str,
        reader: AlbumReader = Depends(get_reader),
        metrics: Metrics = Depends(get_metrics),
    ):
        try:
            images = reader.list_images(album_id)
        except AlbumShareError as exc:
            metrics.record_album_view(type(exc).__name__)
            raise
        metrics.record_album_view("success")
        return AlbumImagesOut(images=images)

    return router
