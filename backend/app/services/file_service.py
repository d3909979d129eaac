"""
Foods API Backend — Photo Storage Service
===========================================

What:  Validates and stores food photos, and resolves stored photos for serving.
How:   Checks the upload's declared content type and size, names the file
       after the food (`<slug>-<id><ext>`), and writes it under
       FILE_UPLOAD_PATH with async file I/O.
Who:   FoodService.upload_photo() and the photo-serving route.

Validation order:
    1. A file was sent            → "Please upload a file"
    2. Content type is image/*    → "Please upload an image file"
    3. Size ≤ MAX_FILE_SIZE       → "Please upload an image less than or equal to <max>"
    4. Write to disk              → FileStorageError on any OS error

Re-uploading a photo for the same food overwrites the previous file when
the extension matches, since the name depends only on slug and id.
"""

import logging
import os
from pathlib import Path
from typing import Optional, Tuple

import aiofiles

from app.config import Settings
from app.exceptions import FileStorageError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class FileService:
    """
    Manages the photo directory.

    Directory Structure:
        public/uploads/
        ├── apple-pie-1c0f...e9.jpg
        └── banana-bread-77aa...02.png
    """

    def __init__(self, config: Settings, upload_path: Optional[str] = None):
        """
        Args:
            config: Application settings (MAX_FILE_SIZE, FILE_UPLOAD_PATH)
            upload_path: Override the upload directory (used in tests)
        """
        self.max_file_size = config.max_file_size
        self.upload_root = Path(upload_path or config.file_upload_path).resolve()
        self.upload_root.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with upload_root=%s", self.upload_root)

    def validate_upload(self, content_type: Optional[str], size: int) -> None:
        """
        Check the declared content type and the byte size of an upload.

        Raises:
            ValidationError: not an image, or larger than MAX_FILE_SIZE
        """
        if not (content_type or "").startswith("image"):
            raise ValidationError(
                message="Please upload an image file",
                field="file",
                context={"content_type": content_type},
            )
        if size > self.max_file_size:
            raise ValidationError(
                message=f"Please upload an image less than or equal to {self.max_file_size}",
                field="file",
                context={"max_size": self.max_file_size, "actual_size": size},
            )

    @staticmethod
    def photo_filename(slug: str, food_id: str, original_filename: str) -> str:
        """`<slug>-<id><ext>`; the extension is taken from the uploaded name."""
        extension = Path(original_filename or "").suffix.lower()
        return f"{slug}-{food_id}{extension}"

    async def store_file(self, filename: str, content: bytes) -> Tuple[str, str]:
        """
        Write photo bytes to the upload directory.

        Returns:
            Tuple of (absolute_path, filename).

        Raises:
            FileStorageError if the directory or file cannot be written.
        """
        absolute_path = self.upload_root / filename
        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store photo at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="An error occurred during file upload",
                context={"path": str(absolute_path), "os_error": str(e)},
            )

        logger.info("Photo stored: %s (%d bytes)", filename, len(content))
        return str(absolute_path), filename

    async def cleanup_file(self, file_path: str) -> None:
        """
        Remove a stored photo after a later step failed.

        Best-effort: a failure to delete is logged, not raised, so the
        original error reaches the client.
        """
        try:
            path = Path(file_path)
            if path.exists():
                os.remove(path)
                logger.info("Cleaned up file: %s", path.name)
            else:
                logger.debug("Cleanup: file already gone: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clean up file %s: %s", file_path, str(e))

    def resolve_photo(self, filename: str) -> Path:
        """
        Absolute path of a stored photo.

        Raises:
            ValidationError: the name escapes the upload directory
            NotFoundError: no such file
        """
        full_path = (self.upload_root / filename).resolve()
        if self.upload_root not in full_path.parents:
            raise ValidationError(message="Invalid file path", field="filename")
        if not full_path.is_file():
            raise NotFoundError(resource="photo", resource_id=filename)
        return full_path
