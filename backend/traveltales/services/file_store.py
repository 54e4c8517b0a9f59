"""
TravelTales Backend: File Store
================================

What:  Stores uploaded story images on local disk and deletes them again.
How:   Files live flat in one uploads directory (served at /uploads). A public
       URL maps back to a file by its final path segment only, so the lookup
       is filename-based: the same filename always resolves to the same file.
Who:   Called by StoryService for image upload, image delete, and the image
       cleanup that follows a story delete.

Stored names follow `<epoch-ms>-<random>.<ext>`. Nothing from the client's
filename except its extension reaches the disk.
"""

import logging
import secrets
import time
from pathlib import Path, PurePosixPath
from typing import Optional
from urllib.parse import unquote, urlsplit

import aiofiles
import aiofiles.os

from traveltales.exceptions import FileStorageError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

# URL prefix the uploads directory is mounted under (see main.create_app)
UPLOADS_URL_PATH = "/uploads"

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp"}


class FileStore:
    """
    Manages the uploaded image lifecycle.

    Directory Structure:
        uploads/
        ├── 1718000000000-3f9a1c2b.jpg
        └── 1718000004211-a07be11d.png
    """

    def __init__(self, storage_root: str, max_file_size: int):
        self.storage_root = Path(storage_root).resolve()
        self.max_file_size = max_file_size
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("FileStore initialized with storage_root=%s", self.storage_root)

    # ── Validation ────────────────────────────────────────────────────────

    def validate_extension(self, filename: str) -> str:
        """
        Returns: Normalized extension (lowercase with dot).
        Raises:  ValidationError if extension is not allowed.
        """
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"File type '{ext or filename}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="image",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        """
        Rejects empty uploads and uploads above max_file_size.

        Checks the reported Content-Length first, then the actual byte count,
        since clients may report a wrong length.
        """
        max_mb = self.max_file_size / (1024 * 1024)

        if actual_size == 0:
            raise ValidationError(message="No image uploaded", field="image")

        if content_length and content_length > self.max_file_size:
            raise ValidationError(
                message=f"File size exceeds maximum of {max_mb:.0f}MB. Please upload a smaller image.",
                field="image",
                context={"max_size_mb": max_mb, "reported_size": content_length},
            )

        if actual_size > self.max_file_size:
            raise ValidationError(
                message=f"File size ({actual_size / (1024 * 1024):.1f}MB) exceeds maximum of {max_mb:.0f}MB.",
                field="image",
                context={"max_size_mb": max_mb, "actual_size": actual_size},
            )

    # ── Naming and URL mapping ────────────────────────────────────────────

    @staticmethod
    def generate_filename(extension: str) -> str:
        return f"{int(time.time() * 1000)}-{secrets.token_hex(4)}{extension}"

    @staticmethod
    def public_url(origin: str, filename: str) -> str:
        return f"{origin}{UPLOADS_URL_PATH}/{filename}"

    def path_for_url(self, image_url: str) -> Path:
        """
        Resolve an image URL to a path inside the uploads directory.

        Only the last path segment is used: both
        "http://host/uploads/a.jpg" and "a.jpg" map to <storage_root>/a.jpg.
        """
        name = PurePosixPath(unquote(urlsplit(image_url).path)).name
        if name in ("", ".", ".."):
            raise ValidationError(message="Invalid imageUrl", field="imageUrl")
        return self.storage_root / name

    # ── Disk operations ───────────────────────────────────────────────────

    async def save(
        self,
        filename: str,
        content: bytes,
        content_length: Optional[int] = None,
    ) -> str:
        """
        Validate and write an upload to disk.

        Validation order: extension (no I/O), then size, then write.
        Returns: The stored filename (not the full path).
        Raises:  ValidationError, FileStorageError
        """
        ext = self.validate_extension(filename)
        self.validate_size(content_length, len(content))

        stored_name = self.generate_filename(ext)
        absolute_path = self.storage_root / stored_name

        try:
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="Failed to save uploaded image. Please try again.",
                context={"path": str(absolute_path), "os_error": str(e)},
            ) from e

        logger.info("File stored: %s (%d bytes)", stored_name, len(content))
        return stored_name

    async def delete_by_url(self, image_url: str) -> None:
        """
        Delete the file an image URL points to.

        Raises:
            NotFoundError:    no such file in the uploads directory
            FileStorageError: the file exists but could not be removed
        """
        path = self.path_for_url(image_url)

        if not await aiofiles.os.path.isfile(path):
            raise NotFoundError(resource="image", message="Image not found!")

        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError as e:
            # Removed by a concurrent request between the check and the unlink
            raise NotFoundError(resource="image", message="Image not found!") from e
        except OSError as e:
            logger.error("Failed to delete file %s: %s", path, str(e))
            raise FileStorageError(
                message="Failed to delete image. Please try again.",
                context={"path": str(path), "os_error": str(e)},
            ) from e

        logger.info("File deleted: %s", path.name)
