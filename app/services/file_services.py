"""File service for photo uploads to object storage.

Uploads are validated before anything leaves the process:
- size against ``MAX_PHOTO_SIZE_MB``
- content decoded with Pillow; the detected format, not the client's
  content type, decides whether the file is accepted

Only the object key is handed back to callers for persistence.
"""

import io
import uuid
from typing import Optional, List, Iterable

from fastapi import UploadFile
from PIL import Image

from app.services.base import BaseService
from app.services.exceptions import (
    FileError,
    FileUploadError,
    FileStorageError,
    InvalidFileTypeError,
    FileSizeLimitError,
)
from app.schemas.file import FileUploadInput, StoredObject
from app.api.dependencies.storage import get_minio_client
from app.core.config import settings
from app.core.observability import log_outbound_call


# Pillow format name -> MIME type
ALLOWED_IMAGE_FORMATS = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "GIF": "image/gif",
    "WEBP": "image/webp",
}


class FileService(BaseService):
    """Stores photo files in MinIO.

    The MinIO client is created lazily so that constructing the service
    (once per request) never touches the network.
    """

    def __init__(self, correlation_id: Optional[str] = None, client=None):
        """Initialize file service.

        Args:
            correlation_id: Optional request correlation ID for logging
            client: Optional MinIO-compatible client; defaults to the shared client
        """
        super().__init__(correlation_id)
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = get_minio_client()
        return self._client

    def _validate_image(self, original_name: str, data: bytes, max_size_mb: int) -> str:
        """Check size and decode the image header.

        Returns:
            MIME type of the detected image format

        Raises:
            FileSizeLimitError: Empty or oversized upload
            InvalidFileTypeError: Not an image in an accepted format
        """
        max_size_bytes = max_size_mb * 1024 * 1024
        if len(data) > max_size_bytes:
            raise FileSizeLimitError(
                filename=original_name,
                file_size=len(data),
                max_size=max_size_bytes,
                correlation_id=self.correlation_id
            )

        allowed = list(ALLOWED_IMAGE_FORMATS.values())
        try:
            with Image.open(io.BytesIO(data)) as image:
                image_format = image.format
                image.verify()
        except (OSError, SyntaxError, ValueError):
            raise InvalidFileTypeError(
                filename=original_name,
                file_type="unreadable",
                allowed_types=allowed,
                correlation_id=self.correlation_id
            )

        if image_format not in ALLOWED_IMAGE_FORMATS:
            raise InvalidFileTypeError(
                filename=original_name,
                file_type=str(image_format),
                allowed_types=allowed,
                correlation_id=self.correlation_id
            )
        return ALLOWED_IMAGE_FORMATS[image_format]

    def upload_image(self, file: UploadFile, input_data: FileUploadInput) -> StoredObject:
        """Validate an uploaded image and put it in the photo bucket.

        Args:
            file: FastAPI UploadFile object
            input_data: Validated key prefix and size limit

        Returns:
            StoredObject describing the stored file

        Raises:
            FileUploadError: Missing file name or empty file
            FileSizeLimitError: File too large
            InvalidFileTypeError: Not an accepted image
            FileStorageError: MinIO refused or could not be reached
        """
        original_name = file.filename or ""
        self.log_operation("photo_upload_attempt", original_name=original_name, folder=input_data.folder)

        if not original_name:
            raise FileUploadError(filename="unknown", reason="Filename is required", correlation_id=self.correlation_id)

        file.file.seek(0)
        data = file.file.read()
        if not data:
            raise FileUploadError(filename=original_name, reason="File is empty", correlation_id=self.correlation_id)

        mime_type = self._validate_image(original_name, data, input_data.max_size_mb)

        safe_filename = original_name.replace(" ", "_").replace("..", "_").replace("/", "_").replace("\\", "_")
        stored_name = f"{uuid.uuid4().hex}-{safe_filename}"
        key = f"{input_data.folder}/{stored_name}"

        try:
            log_outbound_call(
                "minio",
                key,
                "put_object",
                self.correlation_id,
                lambda: self.client.put_object(
                    settings.MINIO_BUCKET,
                    key,
                    io.BytesIO(data),
                    length=len(data),
                    content_type=mime_type,
                ),
            )
        except FileError:
            raise
        except Exception as storage_error:
            raise FileStorageError(
                operation="upload",
                reason=str(storage_error),
                correlation_id=self.correlation_id
            ) from storage_error

        self.log_operation("photo_upload_success", object_key=key, size=len(data), mime_type=mime_type)
        return StoredObject(
            key=key,
            filename=stored_name,
            original_name=original_name,
            mime_type=mime_type,
            size=len(data),
        )

    def upload_images(self, files: List[UploadFile], input_data: FileUploadInput) -> List[StoredObject]:
        """Upload several images; on the first failure the ones already stored are removed."""
        stored: List[StoredObject] = []
        try:
            for file in files:
                stored.append(self.upload_image(file, input_data))
        except FileError:
            self.purge_objects([s.key for s in stored])
            raise
        return stored

    def purge_objects(self, keys: Iterable[str]) -> List[str]:
        """Remove objects whose database rows are gone.

        Storage errors are logged, not raised: the rows are already deleted
        and an orphaned object is harmless.

        Returns:
            Keys that could not be removed
        """
        failed: List[str] = []
        for key in keys:
            try:
                log_outbound_call(
                    "minio",
                    key,
                    "remove_object",
                    self.correlation_id,
                    lambda key=key: self.client.remove_object(settings.MINIO_BUCKET, key),
                )
            except Exception as e:
                failed.append(key)
                self.logger.warning(
                    "Failed to remove stored object",
                    extra={
                        "correlation_id": self.correlation_id,
                        "service": self.__class__.__name__,
                        "object_key": key,
                        "error": str(e)
                    }
                )
        if failed:
            self.log_operation("purge_objects_incomplete", failed_count=len(failed))
        return failed
