"""
Foods API Backend — File Service Unit Tests
=============================================

What:  Tests for FileService validation, naming, storage and lookup.
How:   Each test gets its own temporary upload directory; aiofiles does real I/O.

Test Strategy:
    ✅ Content type must be image/* (declared type, as sent by the client)
    ✅ Size limit is inclusive at MAX_FILE_SIZE
    ✅ Photo names follow <slug>-<id><ext>
    ✅ Storage failures become FileStorageError
    ✅ Stored photos resolve; traversal and missing files are rejected
"""

import os
import pytest
from pathlib import Path
from unittest.mock import patch

from app.config import Settings
from app.exceptions import FileStorageError, NotFoundError, ValidationError
from app.services.file_service import FileService


class TestUploadValidation:
    """Tests for validate_upload()."""

    @pytest.fixture(autouse=True)
    def _service(self, temp_storage):
        self.service = FileService(Settings(max_file_size=1000), upload_path=temp_storage)

    def test_jpeg_within_limit(self):
        self.service.validate_upload("image/jpeg", 500)

    def test_any_image_subtype_accepted(self):
        """Only the `image` prefix is checked, not the subtype."""
        self.service.validate_upload("image/png", 10)
        self.service.validate_upload("image/webp", 10)

    def test_size_exactly_at_limit(self):
        self.service.validate_upload("image/jpeg", 1000)

    def test_size_over_limit_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            self.service.validate_upload("image/jpeg", 1001)
        assert exc_info.value.message == "Please upload an image less than or equal to 1000"
        assert exc_info.value.context["actual_size"] == 1001

    def test_text_file_rejected(self):
        with pytest.raises(ValidationError, match="Please upload an image file"):
            self.service.validate_upload("text/plain", 10)

    def test_missing_content_type_rejected(self):
        with pytest.raises(ValidationError, match="Please upload an image file"):
            self.service.validate_upload(None, 10)

    def test_type_checked_before_size(self):
        """An oversized non-image reports the type problem."""
        with pytest.raises(ValidationError, match="Please upload an image file"):
            self.service.validate_upload("application/pdf", 5000)


class TestPhotoFilename:

    def test_slug_id_and_extension(self):
        name = FileService.photo_filename("apple-pie", "1234", "my pie.JPG")
        assert name == "apple-pie-1234.jpg"

    def test_no_extension(self):
        assert FileService.photo_filename("kale", "42", "blob") == "kale-42"

    def test_directory_parts_ignored(self):
        assert FileService.photo_filename("kale", "42", "../../evil.png") == "kale-42.png"


class TestStorage:
    """Tests for store_file(), cleanup_file() and resolve_photo()."""

    @pytest.fixture(autouse=True)
    def _service(self, temp_storage):
        self.root = temp_storage
        self.service = FileService(Settings(), upload_path=temp_storage)

    @pytest.mark.asyncio
    async def test_store_writes_bytes(self, sample_image_bytes):
        absolute_path, filename = await self.service.store_file("fig-1.jpg", sample_image_bytes)

        assert filename == "fig-1.jpg"
        assert Path(absolute_path).parent == Path(self.root).resolve()
        assert Path(absolute_path).read_bytes() == sample_image_bytes

    @pytest.mark.asyncio
    async def test_store_overwrites_same_name(self):
        await self.service.store_file("fig-1.jpg", b"first")
        absolute_path, _ = await self.service.store_file("fig-1.jpg", b"second")
        assert Path(absolute_path).read_bytes() == b"second"

    @pytest.mark.asyncio
    async def test_store_os_error_becomes_storage_error(self):
        with patch("app.services.file_service.aiofiles.open", side_effect=OSError("disk full")):
            with pytest.raises(FileStorageError) as exc_info:
                await self.service.store_file("fig-1.jpg", b"data")
        assert exc_info.value.message == "An error occurred during file upload"
        assert "disk full" in exc_info.value.context["os_error"]

    @pytest.mark.asyncio
    async def test_cleanup_removes_file(self):
        absolute_path, _ = await self.service.store_file("jam-7.png", b"data")
        await self.service.cleanup_file(absolute_path)
        assert not os.path.exists(absolute_path)

    @pytest.mark.asyncio
    async def test_cleanup_missing_file_is_silent(self):
        await self.service.cleanup_file(os.path.join(self.root, "never-written.jpg"))

    @pytest.mark.asyncio
    async def test_resolve_stored_photo(self):
        absolute_path, filename = await self.service.store_file("kale-3.jpg", b"data")
        assert self.service.resolve_photo(filename) == Path(absolute_path).resolve()

    def test_resolve_missing_photo(self):
        with pytest.raises(NotFoundError):
            self.service.resolve_photo("no-photo.jpg")

    def test_resolve_rejects_traversal(self):
        with pytest.raises(ValidationError, match="Invalid file path"):
            self.service.resolve_photo("../outside.jpg")

    def test_upload_root_created(self, tmp_path):
        target = tmp_path / "nested" / "uploads"
        service = FileService(Settings(), upload_path=str(target))
        assert target.is_dir()
        assert service.upload_root == target.resolve()
