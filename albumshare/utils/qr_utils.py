import base64
import io
from typing import Protocol

import qrcode


class Encoder(Protocol):
    """Turns a string into a scannable image payload."""

    media_type: str

    def encode(self, text: str) -> bytes: ...


class QRCodeEncoder:
    media_type = "image/png"

    def __init__(self, box_size: int = 10, border: int = 4):
        self.box_size = box_size
        self.border = border

    def encode(self, text: str) -> bytes:
        """
        Render text as a QR code PNG
        """
        qr = qrcode.QRCode(
            version=None,
            box_size=self.box_size,
            border=self.border
        )
        qr.add_data(text)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")
        buf = io.BytesIO()
        img.save(buf, format="PNG")
        return buf.getvalue()


def to_data_url(payload: bytes, media_type: str) -> str:
    return f"data:{media_type};base64,{base64.b64encode(payload).decode('ascii')}"
