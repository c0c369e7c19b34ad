"""
Share link and QR code composition.

Builds the public viewer link for an album and hands it to the encoder. The
same encoder also serves standalone codes for arbitrary text.
"""

from dataclasses import dataclass
from urllib.parse import urlencode

from fastapi import Request

from albumshare.config import Settings
from albumshare.core.exceptions import ValidationError
from albumshare.utils.qr_utils import Encoder


@dataclass
class ShareableCode:
    retrieval_url: str
    encoded_image: bytes


def request_origin(request: Request, settings: Settings) -> str:
    """
    Scheme and host of the inbound request, e.g. `https://photos.example.com`.

    Args:
        request: Inbound request
        settings: Honours X-Forwarded-Proto/Host when TRUST_PROXY is set

    Returns:
        Origin string without trailing slash
    """
    scheme = request.url.scheme
    host = request.headers.get("host") or request.url.netloc
    if settings.TRUST_PROXY:
        fwd_proto = request.headers.get("x-forwarded-proto")
        fwd_host = request.headers.get("x-forwarded-host")
        if fwd_proto:
            scheme = fwd_proto.split(",")[0].strip()
        if fwd_host:
            host = fwd_host.split(",")[0].strip()
    return f"{scheme}://{host}"


class ShareComposer:
    def __init__(self, encoder: Encoder, settings: Settings):
        self.encoder = encoder
        self.settings = settings

    @property
    def media_type(self) -> str:
        return self.encoder.media_type

    def retrieval_url(self, album_id: str, origin: str) -> str:
        return f"{origin.rstrip('/')}{self.settings.VIEWER_PATH}?{urlencode({'id': album_id})}"

    def compose_shareable(self, album_id: str, origin: str) -> ShareableCode:
        """Viewer link for an album plus its encoded QR image."""
        url = self.retrieval_url(album_id, origin)
        return ShareableCode(retrieval_url=url, encoded_image=self.encoder.encode(url))

    def encode_text(self, text: str | None) -> bytes:
        # Text is encoded verbatim, no URL wrapping
        if not text:
            raise ValidationError("Please enter text or URL.")
        return self.encoder.encode(text)
