"""
Pytest configuration and fixtures for album share tests
"""

import io
import os
import tempfile

import pytest
from fastapi.testclient import TestClient

# Ensure test-friendly environment prior to importing the app
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("STORAGE_DIR", tempfile.mkdtemp(prefix="albumshare-test-"))
os.environ.setdefault("RATE_LIMIT_ENABLED", "0")
os.environ.setdefault("PUBLIC_DIR", os.path.join(tempfile.gettempdir(), "albumshare-no-public"))

from albumshare.config import Settings  # noqa: E402
from albumshare.main import create_app  # noqa: E402
from albumshare.services.storage import LocalAlbumStore, UploadItem  # noqa: E402


class FakeEncoder:
    """Records what it was asked to encode and returns a recognisable blob."""

    media_type = "image/png"

    def __init__(self):
        self.calls = []

    def encode(self, text: str) -> bytes:
        self.calls.append(text)
        return b"\x89PNG-fake:" + text.encode("utf-8")


def make_item(name: str, data: bytes = b"\x89PNG\r\n\x1a\nimage-bytes", content_type: str = "image/png"):
    return UploadItem(filename=name, content_type=content_type, stream=io.BytesIO(data))


@pytest.fixture
def settings(tmp_path):
    return Settings(
        STORAGE_DIR=str(tmp_path / "uploads"),
        PUBLIC_DIR=str(tmp_path / "public"),
        RATE_LIMIT_ENABLED=False,
        METRICS_ENABLED=False,
        SENTRY_DSN="",
    )


@pytest.fixture
def store(settings):
    s = LocalAlbumStore(settings)
    s.prepare()
    return s


@pytest.fixture
def encoder():
    return FakeEncoder()


@pytest.fixture
def app(settings, encoder):
    return create_app(settings, encoder=encoder)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


def album_dirs(settings):
    """Published album directories under the storage root."""
    root = settings.STORAGE_DIR
    return sorted(d for d in os.listdir(root) if not d.startswith("."))
