"""
Streaming reader for multipart upload batches.

Parts are checked as they arrive: a disallowed file, one file too many, or a
file over the byte limit stops the read right there, before the rest of the
request body is pulled off the wire. Accepted files are spooled into
`SpooledTemporaryFile`s capped at the per-file limit.
"""

import logging
from tempfile import SpooledTemporaryFile
from typing import Dict, List, Optional

from python_multipart.exceptions import MultipartParseError
from python_multipart.multipart import MultipartParser, parse_options_header
from starlette.requests import Request

from albumshare.config import Settings
from albumshare.core.exceptions import AlbumShareError, ValidationError
from albumshare.services.storage import UploadItem
from albumshare.services.upload_validate import (
    DISALLOWED_MESSAGE,
    file_too_large,
    is_acceptable,
    too_many_files,
)

logger = logging.getLogger(__name__)

SPOOL_MAX_SIZE = 1024 * 1024
MALFORMED_MESSAGE = "Malformed multipart upload."


class _Part:
    def __init__(self):
        self.headers: Dict[bytes, bytes] = {}
        self.item: Optional[UploadItem] = None
        self.size = 0


class BatchReader:
    """Reads the `images` file parts of one upload request."""

    def __init__(self, settings: Settings, field_name: str = "images"):
        self.settings = settings
        self.field_name = field_name
        self.items: List[UploadItem] = []
        self._part: Optional[_Part] = None
        self._header_field = bytearray()
        self._header_value = bytearray()
        self._error: Optional[AlbumShareError] = None

    async def read(self, request: Request) -> List[UploadItem]:
        content_type, params = parse_options_header(request.headers.get("content-type", ""))
        if content_type.lower() != b"multipart/form-data":
            return []
        boundary = params.get(b"boundary")
        if not boundary:
            raise ValidationError(MALFORMED_MESSAGE)

        parser = MultipartParser(boundary, callbacks={
            "on_part_begin": self._on_part_begin,
            "on_header_field": self._on_header_field,
            "on_header_value": self._on_header_value,
            "on_header_end": self._on_header_end,
            "on_headers_finished": self._on_headers_finished,
            "on_part_data": self._on_part_data,
            "on_part_end": self._on_part_end,
        })
        try:
            async for chunk in request.stream():
                parser.write(chunk)
                if self._error is not None:
                    raise self._error
            parser.finalize()
        except MultipartParseError as exc:
            self.close()
            raise ValidationError(MALFORMED_MESSAGE) from exc
        except BaseException:
            self.close()
            raise

        for item in self.items:
            item.stream.seek(0)
        return self.items

    def close(self) -> None:
        for item in self.items:
            item.stream.close()

    def _fail(self, error: AlbumShareError) -> None:
        if self._error is None:
            logger.info("Upload rejected mid-stream: %s", error.message)
            self._error = error

    def _on_part_begin(self) -> None:
        self._part = _Part()

    def _on_header_field(self, data: bytes, start: int, end: int) -> None:
        self._header_field += data[start:end]

    def _on_header_value(self, data: bytes, start: int, end: int) -> None:
        self._header_value += data[start:end]

    def _on_header_end(self) -> None:
        self._part.headers[bytes(self._header_field).lower()] = bytes(self._header_value)
        self._header_field.clear()
        self._header_value.clear()

    def _on_headers_finished(self) -> None:
        if self._error is not None:
            return
        _, options = parse_options_header(self._part.headers.get(b"content-disposition", b""))
        name = options.get(b"name", b"").decode("utf-8", "replace")
        raw_filename = options.get(b"filename")
        # Other fields and empty file inputs are drained, never buffered
        if name != self.field_name or not raw_filename:
            return

        filename = raw_filename.decode("utf-8", "replace")
        content_type = self._part.headers.get(b"content-type", b"").decode("latin-1") or None
        if len(self.items) >= self.settings.MAX_FILES:
            self._fail(too_many_files(self.settings))
            return
        if not is_acceptable(filename, content_type):
            self._fail(ValidationError(DISALLOWED_MESSAGE))
            return

        item = UploadItem(
            filename=filename,
            content_type=content_type,
            stream=SpooledTemporaryFile(max_size=SPOOL_MAX_SIZE),
        )
        self.items.append(item)
        self._part.item = item

    def _on_part_data(self, data: bytes, start: int, end: int) -> None:
        part = self._part
        if self._error is not None or part is None or part.item is None:
            return
        part.size += end - start
        if part.size > self.settings.MAX_FILE_BYTES:
            self._fail(file_too_large(part.item.filename, self.settings))
            return
        part.item.stream.write(data[start:end])

    def _on_part_end(self) -> None:
        self._part = None
