"""
Domain exceptions for the album sharing service.

Each exception carries the HTTP status it maps to and a message that is safe
to show to clients. Internal detail (paths, errno) belongs in the logs only.
"""

from fastapi import status


class AlbumShareError(Exception):
    """Base exception for all album-sharing errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    @property
    def public_message(self) -> str:
        return self.message


class ValidationError(AlbumShareError):
    """Bad input shape: disallowed file type, batch too large or small, empty text."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(AlbumShareError):
    """Unknown album identifier."""

    status_code = status.HTTP_404_NOT_FOUND


class StorageError(AlbumShareError):
    """Filesystem failure while creating directories or moving files."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    @property
    def public_message(self) -> str:
        return "Internal Server Error"
