from typing import Optional

from fastapi import APIRouter, Depends

from albumshare.core.dependencies import get_composer, get_metrics
from albumshare.schemas.album import ErrorOut, GenerateIn, GenerateOut
from albumshare.services.metrics import Metrics
from albumshare.services.shares import ShareComposer
from albumshare.utils.qr_utils import to_data_url

router = APIRouter(tags=["share"])


@router.post("/generate", response_model=GenerateOut, responses={400: {"model": ErrorOut}})
def generate_code(
    payload: Optional[GenerateIn] = None,
    composer: ShareComposer = Depends(get_composer),
    metrics: Metrics = Depends(get_metrics),
):
    """
    Encode arbitrary text or a URL as a QR code, independent of any album.
    """
    encoded = composer.encode_text(payload.text if payload else None)
    metrics.record_code_generated()
    return GenerateOut(qrCode=to_data_url(encoded, composer.media_type))
