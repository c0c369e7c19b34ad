"""
Album storage backends.

An album *is* its directory: `<STORAGE_DIR>/<album_id>/<stem><ext>`. Files of a
batch are written into a private staging directory first and the whole
directory is published with one rename, so readers either see the complete
album or nothing at all.
"""

import logging
import os
import shutil
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, List, Sequence

from albumshare.config import Settings
from albumshare.core.exceptions import StorageError
from albumshare.services import ids
from albumshare.services.upload_validate import file_too_large, validate_batch

logger = logging.getLogger(__name__)

STAGING_DIRNAME = ".staging"
CHUNK_SIZE = 64 * 1024


@dataclass
class UploadItem:
    """One candidate file of an upload batch."""

    filename: str
    content_type: str | None
    stream: BinaryIO


class AlbumStore(ABC):
    """
    Interface for album storage backends.
    """

    @abstractmethod
    def create_album(self, batch: Sequence[UploadItem]) -> str:
        """Validate and persist a batch, returning the new album identifier."""
        raise NotImplementedError("create_album not implemented")

    @abstractmethod
    def album_exists(self, album_id: str) -> bool:
        raise NotImplementedError("album_exists not implemented")

    @abstractmethod
    def list_files(self, album_id: str) -> List[str]:
        """Raw filenames stored under an existing album."""
        raise NotImplementedError("list_files not implemented")

    def prepare(self) -> None:
        """Create whatever the backend needs before serving requests."""

    def cleanup_staging(self) -> int:
        return 0

    def healthy(self) -> bool:
        return True


class LocalAlbumStore(AlbumStore):
    def __init__(self, settings: Settings):
        self.settings = settings
        self.base = Path(settings.STORAGE_DIR)
        self.staging = self.base / STAGING_DIRNAME

    def prepare(self) -> None:
        self.base.mkdir(parents=True, exist_ok=True)
        self.staging.mkdir(parents=True, exist_ok=True)

    def healthy(self) -> bool:
        return self.base.is_dir()

    def album_path(self, album_id: str) -> Path:
        # Only canonical identifiers ever map to a path under the root
        if not ids.is_identifier(album_id):
            raise ValueError(f"Invalid album identifier: {album_id!r}")
        return self.base / album_id

    def album_exists(self, album_id: str) -> bool:
        if not ids.is_identifier(album_id):
            return False
        return (self.base / album_id).is_dir()

    def list_files(self, album_id: str) -> List[str]:
        path = self.album_path(album_id)
        try:
            with os.scandir(path) as entries:
                return [e.name for e in entries if e.is_file()]
        except OSError as exc:
            logger.error("Unable to read album directory %s: %s", path, exc)
            raise StorageError("Unable to read album directory") from exc

    def create_album(self, batch: Sequence[UploadItem]) -> str:
        validate_batch(batch, self.settings)

        album_id = ids.new_id()
        stage_dir = self.staging / album_id
        try:
            self.staging.mkdir(parents=True, exist_ok=True)
            stage_dir.mkdir()
        except OSError as exc:
            logger.error("Failed to create staging directory %s: %s", stage_dir, exc)
            raise StorageError("Failed to create album directory") from exc

        try:
            for item in batch:
                self._write_staged(stage_dir / ids.stored_filename(item.filename), item)
            self._publish(stage_dir, album_id)
        except BaseException:
            shutil.rmtree(stage_dir, ignore_errors=True)
            raise

        logger.info("Created album %s with %d image(s)", album_id, len(batch))
        return album_id

    def _write_staged(self, dest: Path, item: UploadItem) -> None:
        written = 0
        try:
            with open(dest, "xb") as out:
                while True:
                    chunk = item.stream.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    written += len(chunk)
                    if written > self.settings.MAX_FILE_BYTES:
                        raise file_too_large(item.filename, self.settings)
                    out.write(chunk)
                out.flush()
                os.fsync(out.fileno())
        except OSError as exc:
            logger.error("Failed to write %s: %s", dest, exc)
            raise StorageError("Failed to store uploaded file") from exc

    def _publish(self, stage_dir: Path, album_id: str) -> None:
        target = self.album_path(album_id)
        # Albums are write-once; rename would silently replace an empty dir
        if target.exists():
            logger.error("Album path collision for %s", album_id)
            raise StorageError("Album already exists")
        try:
            os.rename(stage_dir, target)
        except OSError as exc:
            logger.error("Failed to publish album %s: %s", album_id, exc)
            raise StorageError("Failed to publish album") from exc

    def cleanup_staging(self) -> int:
        """Remove staging leftovers from batches interrupted by a crash."""
        if not self.staging.is_dir():
            return 0
        removed = 0
        for leftover in self.staging.iterdir():
            shutil.rmtree(leftover, ignore_errors=True)
            removed += 1
        if removed:
            logger.warning("Removed %d stale staging director%s", removed, "y" if removed == 1 else "ies")
        return removed
