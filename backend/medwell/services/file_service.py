"""
MedWell Backend — File Storage Service
========================================

What:  Validates and stores uploaded medical documents on local disk.
How:   Extension and size checks, then an async write to
       <uploads_dir>/<userId>/<uuid><ext>. The uploads directory is served
       by the /uploads static mount.
Who:   Called by DocumentService.

Attack vectors prevented:
    - Path traversal: stored filename is a UUID; the user directory name is
      reduced to [A-Za-z0-9_-]
    - DoS via large files: size limit checked against Content-Length and the
      actual byte count
"""

import logging
import re
import uuid
from pathlib import Path
from typing import Optional, Tuple

import aiofiles

from medwell.config import settings
from medwell.exceptions import FileStorageError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".pdf", ".png", ".jpg", ".jpeg"}

CONTENT_TYPES = {
    ".pdf": "application/pdf",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
}

_UNSAFE_PATH_CHARS = re.compile(r"[^A-Za-z0-9_-]")


def user_directory_name(user_id: str) -> str:
    return _UNSAFE_PATH_CHARS.sub("_", user_id)[:64] or "_"


class FileService:
    """
    Manages the lifecycle of uploaded document files.

    Directory Structure:
        uploads/
        └── <userId>/
            ├── 3f2a...-9c1d.pdf
            └── 8b7e...-1a2b.png
    """

    def __init__(self, storage_root: Optional[str] = None, max_file_size: Optional[int] = None):
        self.storage_root = Path(storage_root or settings.uploads_dir).resolve()
        self.max_file_size = max_file_size or settings.max_file_size
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with storage_root=%s", self.storage_root)

    def validate_extension(self, filename: str) -> str:
        """Returns the normalized extension (lowercase with dot)."""
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"File type '{ext or filename}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="file",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        max_mb = self.max_file_size / (1024 * 1024)

        if actual_size == 0:
            raise ValidationError(message="Uploaded file is empty.", field="file")

        if content_length and content_length > self.max_file_size:
            raise ValidationError(
                message=f"File size exceeds maximum of {max_mb:.0f}MB.",
                field="file",
                context={"max_size_mb": max_mb, "reported_size": content_length},
            )

        if actual_size > self.max_file_size:
            raise ValidationError(
                message=f"File size ({actual_size / (1024 * 1024):.1f}MB) exceeds maximum of {max_mb:.0f}MB.",
                field="file",
                context={"max_size_mb": max_mb, "actual_size": actual_size},
            )

    def resolve(self, relative_path: str) -> Path:
        """Absolute path of a stored file; refuses paths outside the storage root."""
        path = (self.storage_root / relative_path).resolve()
        if self.storage_root not in path.parents:
            raise FileStorageError(
                message="Invalid stored file path",
                context={"relative_path": relative_path},
            )
        return path

    async def store_file(self, content: bytes, user_id: str, extension: str) -> Tuple[str, str]:
        """
        Write validated content to disk.

        Returns:
            (absolute_path, relative_path) where relative_path is relative to
            the storage root and uses forward slashes.

        Raises:
            FileStorageError if directory creation or the write fails.
        """
        relative_path = f"{user_directory_name(user_id)}/{uuid.uuid4()}{extension}"
        absolute_path = self.storage_root / relative_path

        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message=f"Failed to save uploaded file: {e.strerror or e}",
                context={"path": str(absolute_path)},
            ) from e

        logger.info("File stored: %s (%d bytes)", relative_path, len(content))
        return str(absolute_path), relative_path

    async def cleanup_file(self, file_path: str) -> None:
        """
        Best-effort removal of a stored file.

        A missing file is not an error; other OS errors are logged and left for
        manual cleanup so the request outcome is not affected.
        """
        path = Path(file_path)
        try:
            path.unlink()
            logger.info("Removed file: %s", path.name)
        except FileNotFoundError:
            logger.debug("Cleanup: file already gone: %s", path.name)
        except OSError as e:
            logger.warning("Failed to remove file %s: %s", file_path, str(e))

    async def validate_and_store(
        self,
        filename: str,
        content: bytes,
        user_id: str,
        content_length: Optional[int] = None,
    ) -> Tuple[str, str]:
        """Extension check, size check, then write. Returns (absolute, relative)."""
        ext = self.validate_extension(filename)
        self.validate_size(content_length, len(content))
        return await self.store_file(content, user_id, ext)

