"""
Image upload client for product photos.

Checks type and size locally, then hands the bytes to a storage backend.
A backend is any object with a blocking `store(file) -> url` method; the
client runs it off the event loop so several uploads can be in flight.
"""

import asyncio
from typing import Optional

import requests
import structlog

from config import settings
from exceptions import (
    FileTooLargeError,
    InvalidFileTypeError,
    TooManyFilesError,
    UploadFailedError,
)
from models.wizard import ImageFile

logger = structlog.get_logger(__name__)


ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/png", "image/webp")


class HttpImageStorage:
    """
    Storage backend that posts to the image storage endpoint.

    The endpoint takes multipart `images` files and answers
    {"data": {"urls": [...]}} with one URL per accepted file.
    """

    def __init__(self, url: Optional[str] = None, timeout: Optional[float] = None):
        self.url = url or settings.image_storage_url
        self.timeout = timeout or settings.upload_timeout_seconds

    def store(self, file: ImageFile) -> str:
        files = [("images", (file.filename, file.data, file.content_type))]

        try:
            response = requests.post(self.url, files=files, timeout=self.timeout)
        except requests.RequestException as e:
            raise UploadFailedError(str(e), file.filename) from e

        if not response.ok:
            raise UploadFailedError(_error_message(response), file.filename)

        try:
            urls = response.json()["data"]["urls"]
        except (ValueError, KeyError, TypeError):
            raise UploadFailedError("Malformed response from image storage", file.filename)

        if not urls:
            raise UploadFailedError("Image storage returned no URL", file.filename)
        return urls[0]


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    if isinstance(body, dict):
        message = body.get("message")
        if not message and isinstance(body.get("error"), dict):
            message = body["error"].get("message")
        if message:
            return str(message)
    return f"HTTP {response.status_code}"


class ImageUploadClient:
    """
    Validates and uploads product photos.

    Does not retry: a failed upload is reported to the caller, which owns
    the photo state and decides when to try again.
    """

    def __init__(
        self,
        storage=None,
        max_size_bytes: Optional[int] = None,
        max_files: Optional[int] = None
    ):
        self.storage = storage or HttpImageStorage()
        self.max_size_bytes = max_size_bytes or settings.max_image_size_bytes
        self.max_files = max_files or settings.max_photos

    def validate(self, file: ImageFile) -> None:
        """
        Check a single file before any network call.

        Raises:
            InvalidFileTypeError: MIME type is not jpeg, png or webp
            FileTooLargeError: File is larger than the size limit
        """
        if (file.content_type or "").lower() not in ALLOWED_IMAGE_TYPES:
            raise InvalidFileTypeError(file.filename, file.content_type, list(ALLOWED_IMAGE_TYPES))
        if file.size > self.max_size_bytes:
            raise FileTooLargeError(file.filename, file.size, self.max_size_bytes)

    def validate_batch(self, files: list[ImageFile], existing_count: int = 0) -> None:
        """
        Raises:
            TooManyFilesError: Batch plus existing photos exceeds the limit
        """
        if existing_count + len(files) > self.max_files:
            raise TooManyFilesError(len(files), existing_count, self.max_files)

    async def upload(self, file: ImageFile) -> str:
        """
        Upload one file and return its durable URL.

        Raises:
            InvalidFileTypeError, FileTooLargeError: Rejected before upload
            UploadFailedError: Transport failure or non-success response
        """
        self.validate(file)

        logger.info("photo_upload_started", filename=file.filename, size=file.size)
        try:
            url = await asyncio.to_thread(self.storage.store, file)
        except UploadFailedError as e:
            logger.warning("photo_upload_failed", filename=file.filename, reason=e.reason)
            raise
        except Exception as e:
            logger.warning(
                "photo_upload_failed",
                filename=file.filename,
                reason=str(e),
                error_type=type(e).__name__
            )
            raise UploadFailedError(str(e), file.filename) from e

        logger.info("photo_upload_completed", filename=file.filename)
        return url
