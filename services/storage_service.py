"""
Product image storage on a Supabase storage bucket.

Used by the upload-images endpoint, and usable as an ImageUploadClient
backend when the wizard runs next to the database.
"""

from pathlib import PurePosixPath
from typing import Optional
from uuid import uuid4

import structlog

from config import get_admin_client, get_supabase_client, settings
from exceptions import UploadFailedError
from models.wizard import ImageFile

logger = structlog.get_logger(__name__)


class StorageService:
    """Stores image bytes and returns public URLs."""

    def __init__(self, bucket: Optional[str] = None, folder: str = "products"):
        self.client = get_admin_client() or get_supabase_client()
        self.bucket = bucket or settings.storage_bucket
        self.folder = folder

    def object_path(self, filename: str) -> str:
        extension = PurePosixPath(filename).suffix.lower() or ".jpg"
        return f"{self.folder}/{uuid4().hex}{extension}"

    def store(self, file: ImageFile) -> str:
        """
        Upload one image.

        Returns:
            Public URL of the stored object

        Raises:
            UploadFailedError: Storage rejected the object
        """
        path = self.object_path(file.filename)
        bucket = self.client.storage.from_(self.bucket)

        try:
            bucket.upload(
                path,
                file.data,
                file_options={"content-type": file.content_type or "application/octet-stream"}
            )
        except Exception as e:
            logger.error(
                "storage_upload_failed",
                bucket=self.bucket,
                filename=file.filename,
                error=str(e)
            )
            raise UploadFailedError(str(e), file.filename) from e

        url = bucket.get_public_url(path)
        logger.info("image_stored", bucket=self.bucket, path=path, size=file.size)
        return url


# Singleton instance
_service: Optional[StorageService] = None


def get_storage_service() -> StorageService:
    """Get or create StorageService instance."""
    global _service
    if _service is None:
        _service = StorageService()
    return _service
