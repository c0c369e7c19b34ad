"""Album store and reader behaviour against a temporary storage root"""

import os

import pytest

from albumshare.core.exceptions import NotFoundError, StorageError, ValidationError
from albumshare.services import ids
from albumshare.services.album_service import AlbumReader
from albumshare.services.storage import STAGING_DIRNAME, LocalAlbumStore
from conftest import album_dirs, make_item


def test_create_then_list_round_trip(store, settings):
    album_id = store.create_album([
        make_item("cat.png", b"p" * 2048),
        make_item("dog.jpg", b"j" * 1024, "image/jpeg"),
    ])

    assert ids.is_identifier(album_id)
    urls = AlbumReader(store, settings).list_images(album_id)
    assert len(urls) == 2
    assert all(u.startswith(f"/uploads/{album_id}/") for u in urls)
    assert sorted(os.path.splitext(u)[1] for u in urls) == [".jpg", ".png"]


def test_file_contents_are_stored_verbatim(store, settings):
    payload = os.urandom(4096)
    album_id = store.create_album([make_item("a.webp", payload, "image/webp")])
    (name,) = store.list_files(album_id)
    with open(os.path.join(settings.STORAGE_DIR, album_id, name), "rb") as f:
        assert f.read() == payload


def test_rejected_batch_leaves_nothing(store, settings):
    with pytest.raises(ValidationError):
        store.create_album([make_item("a.png"), make_item("virus.exe", content_type="application/octet-stream")])
    assert album_dirs(settings) == []
    assert os.listdir(os.path.join(settings.STORAGE_DIR, STAGING_DIRNAME)) == []


def test_oversized_file_rejects_batch_and_cleans_staging(store, settings):
    too_big = b"x" * (settings.MAX_FILE_BYTES + 1)
    with pytest.raises(ValidationError, match="File too large"):
        store.create_album([make_item("ok.png"), make_item("big.png", too_big)])
    assert album_dirs(settings) == []
    assert os.listdir(os.path.join(settings.STORAGE_DIR, STAGING_DIRNAME)) == []


def test_file_exactly_at_limit_is_accepted(store):
    album_id = store.create_album([make_item("edge.png", b"x" * store.settings.MAX_FILE_BYTES)])
    assert len(store.list_files(album_id)) == 1


def test_write_failure_mid_batch_publishes_nothing(store, settings, monkeypatch):
    calls = {"n": 0}
    original = LocalAlbumStore._write_staged

    def flaky(self, dest, item):
        calls["n"] += 1
        if calls["n"] == 3:
            raise StorageError("Failed to store uploaded file")
        return original(self, dest, item)

    monkeypatch.setattr(LocalAlbumStore, "_write_staged", flaky)
    with pytest.raises(StorageError):
        store.create_album([make_item(f"{i}.png") for i in range(5)])
    assert album_dirs(settings) == []
    assert os.listdir(os.path.join(settings.STORAGE_DIR, STAGING_DIRNAME)) == []


def test_publish_refuses_existing_album(store, settings, monkeypatch):
    fixed = ids.new_id()
    os.makedirs(os.path.join(settings.STORAGE_DIR, fixed))
    monkeypatch.setattr(ids, "new_id", lambda: fixed)

    with pytest.raises(StorageError) as exc:
        store.create_album([make_item("a.png")])
    assert exc.value.public_message == "Internal Server Error"
    assert os.listdir(os.path.join(settings.STORAGE_DIR, fixed)) == []


def test_rename_failure_becomes_storage_error(store, settings, monkeypatch):
    def boom(src, dst):
        raise OSError(28, "No space left on device")

    monkeypatch.setattr("albumshare.services.storage.os.rename", boom)
    with pytest.raises(StorageError):
        store.create_album([make_item("a.png")])
    assert album_dirs(settings) == []


def test_cleanup_staging_removes_leftovers(store, settings):
    leftover = os.path.join(settings.STORAGE_DIR, STAGING_DIRNAME, ids.new_id())
    os.makedirs(leftover)
    open(os.path.join(leftover, "half.png"), "wb").close()

    assert store.cleanup_staging() == 1
    assert os.listdir(os.path.join(settings.STORAGE_DIR, STAGING_DIRNAME)) == []


def test_unknown_album_is_not_found(store, settings):
    reader = AlbumReader(store, settings)
    with pytest.raises(NotFoundError):
        reader.list_images(ids.new_id())


@pytest.mark.parametrize("album_id", ["..", STAGING_DIRNAME, "../uploads", "nope"])
def test_malformed_identifier_is_not_found(store, settings, album_id):
    with pytest.raises(NotFoundError):
        AlbumReader(store, settings).list_images(album_id)


def test_empty_album_is_distinct_from_missing(store, settings):
    album_id = ids.new_id()
    os.makedirs(os.path.join(settings.STORAGE_DIR, album_id))
    assert AlbumReader(store, settings).list_images(album_id) == []


def test_reader_ignores_non_image_entries(store, settings):
    album_id = store.create_album([make_item("cat.png")])
    album_dir = os.path.join(settings.STORAGE_DIR, album_id)
    for stray in ("notes.txt", "payload.exe", ".DS_Store"):
        open(os.path.join(album_dir, stray), "wb").close()
    os.makedirs(os.path.join(album_dir, "nested.png"))

    urls = AlbumReader(store, settings).list_images(album_id)
    assert len(urls) == 1
    assert urls[0].endswith(".png")


def test_albums_are_isolated(store, settings):
    first = store.create_album([make_item("a.png")])
    second = store.create_album([make_item("b.gif", content_type="image/gif"), make_item("c.gif", content_type="image/gif")])
    reader = AlbumReader(store, settings)

    assert first != second
    assert all(first in u for u in reader.list_images(first))
    assert len(reader.list_images(second)) == 2


def test_listing_is_repeatable(store, settings):
    album_id = store.create_album([make_item(f"{i}.jpg", content_type="image/jpeg") for i in range(4)])
    reader = AlbumReader(store, settings)
    assert reader.list_images(album_id) == reader.list_images(album_id)
