"""Image uploads to object storage."""

from __future__ import annotations

import uuid

from folio.core.store import ObjectStorage
from folio.errors import ValidationError
from folio.models.media import ImageFile
from folio.utils.logging import LogContext, get_logger

logger = get_logger(__name__)


class ImageUploader:
    """Uploads images under a random name and returns their public URL."""

    def __init__(self, storage: ObjectStorage, bucket: str = "blog-images", folder: str = "images"):
        self.storage = storage
        self.bucket = bucket
        self.folder = folder

    def object_path(self, file: ImageFile) -> str:
        return f"{self.folder}/{uuid.uuid4()}.{file.extension}"

    async def upload(self, file: ImageFile) -> str:
        if file.size == 0:
            raise ValidationError(
                f"Image '{file.name}' is empty (0 bytes); choose the file again",
                operation="upload image",
            )

        path = self.object_path(file)
        logger.debug(f"Uploading {file.name} ({file.size} bytes, {file.content_type}) as {path}")
        with LogContext(logger, f"upload {file.name}"):
            stored = await self.storage.upload_object(
                self.bucket,
                path,
                file.data,
                content_type=file.content_type,
                cache_control="3600",
                upsert=False,
            )
        return self.storage.public_url(self.bucket, stored)
