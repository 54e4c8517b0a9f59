"""
TravelTales Backend: File Store Unit Tests
===========================================

What:  Tests for FileStore validation, URL mapping and disk operations.
How:   Each test works in its own temporary uploads directory.

Test Strategy:
    ✅ Allowed / rejected extensions
    ✅ Empty and oversized uploads
    ✅ URL → path mapping uses only the final path segment
    ✅ Save and delete round trips on disk
"""

import pytest

from traveltales.exceptions import NotFoundError, ValidationError
from traveltales.services.file_store import FileStore

ONE_MB = 1024 * 1024


class TestFileValidation:
    """Tests for upload validation in FileStore."""

    @pytest.fixture(autouse=True)
    def _store(self, tmp_path):
        self.store = FileStore(str(tmp_path / "uploads"), max_file_size=ONE_MB)

    # ── Extension Validation ──────────────────────────────────────────────

    @pytest.mark.parametrize("filename", ["photo.jpg", "photo.jpeg", "photo.png", "anim.gif", "pic.webp"])
    def test_validate_extension_allowed(self, filename):
        assert self.store.validate_extension(filename).startswith(".")

    def test_validate_extension_uppercase(self):
        """Extension check should be case-insensitive."""
        assert self.store.validate_extension("photo.JPG") == ".jpg"
        assert self.store.validate_extension("photo.Png") == ".png"

    @pytest.mark.parametrize("filename", ["document.pdf", "malware.exe", "noextension"])
    def test_validate_extension_rejected(self, filename):
        with pytest.raises(ValidationError, match="not supported"):
            self.store.validate_extension(filename)

    # ── Size Validation ───────────────────────────────────────────────────

    def test_validate_size_within_limit(self):
        self.store.validate_size(None, 1000)

    def test_validate_size_at_limit(self):
        self.store.validate_size(ONE_MB, ONE_MB)

    def test_validate_size_over_limit(self):
        with pytest.raises(ValidationError, match="exceeds maximum"):
            self.store.validate_size(None, ONE_MB + 1)

    def test_validate_size_reported_length_over_limit(self):
        with pytest.raises(ValidationError, match="exceeds maximum"):
            self.store.validate_size(ONE_MB + 1, 10)

    def test_validate_size_empty_file(self):
        with pytest.raises(ValidationError, match="No image uploaded"):
            self.store.validate_size(0, 0)


class TestUrlMapping:

    @pytest.fixture(autouse=True)
    def _store(self, tmp_path):
        self.store = FileStore(str(tmp_path / "uploads"), max_file_size=ONE_MB)

    def test_public_url(self):
        assert self.store.public_url("http://test", "1-ab.jpg") == "http://test/uploads/1-ab.jpg"

    def test_path_for_url_uses_final_segment(self):
        path = self.store.path_for_url("http://example.com/uploads/1718000000000-abc.jpg")
        assert path == self.store.storage_root / "1718000000000-abc.jpg"

    def test_path_for_url_ignores_query_string(self):
        path = self.store.path_for_url("http://example.com/uploads/a.png?v=2")
        assert path.name == "a.png"

    def test_path_for_url_accepts_bare_filename(self):
        assert self.store.path_for_url("a.png") == self.store.storage_root / "a.png"

    def test_path_for_url_never_leaves_storage_root(self):
        path = self.store.path_for_url("http://example.com/uploads/../../etc/passwd")
        assert path.parent == self.store.storage_root

    @pytest.mark.parametrize("url", ["http://example.com/", "http://example.com/uploads/.."])
    def test_path_for_url_rejects_empty_names(self, url):
        with pytest.raises(ValidationError):
            self.store.path_for_url(url)


class TestDiskOperations:

    @pytest.fixture(autouse=True)
    def _store(self, tmp_path):
        self.store = FileStore(str(tmp_path / "uploads"), max_file_size=ONE_MB)

    def test_init_creates_storage_root(self):
        assert self.store.storage_root.is_dir()

    @pytest.mark.asyncio
    async def test_save_writes_file_with_generated_name(self, sample_image_bytes):
        stored_name = await self.store.save("holiday photo.JPG", sample_image_bytes)

        assert stored_name.endswith(".jpg")
        assert "holiday" not in stored_name
        assert (self.store.storage_root / stored_name).read_bytes() == sample_image_bytes

    @pytest.mark.asyncio
    async def test_save_generates_distinct_names(self, sample_image_bytes):
        first = await self.store.save("a.png", sample_image_bytes)
        second = await self.store.save("a.png", sample_image_bytes)
        assert first != second

    @pytest.mark.asyncio
    async def test_save_rejects_bad_extension_without_writing(self, sample_image_bytes):
        with pytest.raises(ValidationError):
            await self.store.save("notes.txt", sample_image_bytes)
        assert list(self.store.storage_root.iterdir()) == []

    @pytest.mark.asyncio
    async def test_delete_by_url_removes_file(self, sample_image_bytes):
        stored_name = await self.store.save("a.jpg", sample_image_bytes)
        url = self.store.public_url("http://test", stored_name)

        await self.store.delete_by_url(url)

        assert not (self.store.storage_root / stored_name).exists()

    @pytest.mark.asyncio
    async def test_delete_by_url_missing_file(self):
        with pytest.raises(NotFoundError, match="Image not found!"):
            await self.store.delete_by_url("http://test/uploads/missing.jpg")
