import os
import re
from typing import Sequence

from albumshare.config import Settings
from albumshare.core.exceptions import ValidationError

ALLOWED_EXTENSIONS = frozenset({".jpeg", ".jpg", ".png", ".gif", ".webp"})
# Searched, not anchored: legacy subtypes like image/pjpeg and image/x-png count
_IMAGE_FAMILY = re.compile(r"jpeg|jpg|png|gif|webp")

DISALLOWED_MESSAGE = "Only images are allowed (jpeg, jpg, png, gif, webp)!"


def too_many_files(settings: Settings) -> ValidationError:
    return ValidationError(f"Too many files: at most {settings.MAX_FILES} images per upload.")


def file_too_large(filename: str, settings: Settings) -> ValidationError:
    limit_mb = settings.MAX_FILE_BYTES // (1024 * 1024)
    return ValidationError(f"File too large: {filename} exceeds {limit_mb} MB.")


def has_image_extension(filename: str) -> bool:
    return os.path.splitext(filename or "")[1].lower() in ALLOWED_EXTENSIONS


def is_acceptable(filename: str, content_type: str | None) -> bool:
    """Both the extension and the declared content type must be whitelisted images."""
    if not has_image_extension(filename):
        return False
    mime = (content_type or "").split(";", 1)[0].strip().lower()
    if not mime.startswith("image/"):
        return False
    return bool(_IMAGE_FAMILY.search(mime[len("image/"):]))


def validate_batch(items: Sequence, settings: Settings) -> None:
    """
    Reject a whole upload batch before anything touches disk.

    Items need `filename` and `content_type` attributes. Per-file byte size is
    checked while streaming, since it is not known up front.
    """
    if not items:
        raise ValidationError("Please upload at least one image file.")
    if len(items) > settings.MAX_FILES:
        raise too_many_files(settings)
    for item in items:
        if not is_acceptable(item.filename, item.content_type):
            raise ValidationError(DISALLOWED_MESSAGE)
