"""
Request-scoped accessors for the components wired up in `create_app`.
"""

from fastapi import Request

from albumshare.config import Settings
from albumshare.services.album_service import AlbumReader
from albumshare.services.metrics import Metrics
from albumshare.services.shares import ShareComposer
from albumshare.services.storage import AlbumStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> AlbumStore:
    return request.app.state.store


def get_reader(request: Request) -> AlbumReader:
    return request.app.state.reader


def get_composer(request: Request) -> ShareComposer:
    return request.app.state.composer


def get_metrics(request: Request) -> Metrics:
    return request.app.state.metrics
