"""
Read path for albums: turns an album identifier into public image URLs.
"""

import logging
from typing import List

from albumshare.config import Settings
from albumshare.core.exceptions import NotFoundError
from albumshare.services.storage import AlbumStore
from albumshare.services.upload_validate import has_image_extension

logger = logging.getLogger(__name__)


class AlbumReader:
    def __init__(self, store: AlbumStore, settings: Settings):
        self.store = store
        self.settings = settings

    def image_url(self, album_id: str, filename: str) -> str:
        prefix = self.settings.PUBLIC_PREFIX.rstrip("/")
        return f"{prefix}/{album_id}/{filename}"

    def list_images(self, album_id: str) -> List[str]:
        """
        Public URLs of the images in an album.

        Raises NotFoundError when no album exists for the identifier. An album
        with no images left yields an empty list. Directory entries are only
        trusted as far as their extension.
        """
        if not self.store.album_exists(album_id):
            raise NotFoundError("Album not found")

        names = sorted(n for n in self.store.list_files(album_id) if has_image_extension(n))
        logger.debug("Album %s lists %d image(s)", album_id, len(names))
        return [self.image_url(album_id, n) for n in names]
