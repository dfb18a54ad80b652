"""Tests for image uploads."""

import re

import pytest

from folio.core.local_store import LocalStore
from folio.errors import BucketNotFoundError, ValidationError
from folio.models.media import ImageFile
from folio.services.image_uploader import ImageUploader


class RecordingStorage:
    def __init__(self):
        self.uploads = []

    async def upload_object(self, bucket, path, data, *, content_type, cache_control="3600", upsert=False):
        self.uploads.append({
            "bucket": bucket,
            "path": path,
            "content_type": content_type,
            "cache_control": cache_control,
            "upsert": upsert,
        })
        return path

    def public_url(self, bucket, path):
        return f"https://cdn.example/{bucket}/{path}"


@pytest.mark.asyncio
async def test_upload_uses_random_name_and_returns_public_url():
    storage = RecordingStorage()
    uploader = ImageUploader(storage)

    url = await uploader.upload(ImageFile("My Photo.JPG", "image/jpeg", b"\xff\xd8"))

    upload = storage.uploads[0]
    assert re.fullmatch(r"images/[0-9a-f-]{36}\.JPG", upload["path"])
    assert upload["bucket"] == "blog-images"
    assert upload["content_type"] == "image/jpeg"
    assert upload["cache_control"] == "3600"
    assert upload["upsert"] is False
    assert url == f"https://cdn.example/blog-images/{upload['path']}"


@pytest.mark.asyncio
async def test_two_uploads_get_distinct_paths():
    storage = RecordingStorage()
    uploader = ImageUploader(storage)
    file = ImageFile("a.png", "image/png", b"x")

    await uploader.upload(file)
    await uploader.upload(file)
    assert storage.uploads[0]["path"] != storage.uploads[1]["path"]


@pytest.mark.asyncio
async def test_empty_file_rejected_before_upload():
    storage = RecordingStorage()

    with pytest.raises(ValidationError, match="0 bytes"):
        await ImageUploader(storage).upload(ImageFile("a.png", "image/png", b""))
    assert storage.uploads == []


@pytest.mark.asyncio
async def test_local_store_upload(tmp_path):
    store = LocalStore(tmp_path / "folio.json")
    url = await ImageUploader(store).upload(ImageFile("a.png", "image/png", b"png-bytes"))

    assert url.startswith("file://")
    assert url.endswith(".png")
    stored = list((tmp_path / "storage" / "blog-images" / "images").iterdir())
    assert [p.read_bytes() for p in stored] == [b"png-bytes"]


@pytest.mark.asyncio
async def test_missing_bucket_propagates(tmp_path):
    store = LocalStore(tmp_path / "folio.json", buckets=())

    with pytest.raises(BucketNotFoundError):
        await ImageUploader(store).upload(ImageFile("a.png", "image/png", b"x"))
