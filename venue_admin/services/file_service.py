"""
Venue Admin — File Storage Service
====================================

What:  Validates, stores, lists and removes venue images on local disk.
How:   Images are checked by extension, size and sniffed MIME type
       (python-magic), then written with aiofiles as
       `<storage_root>/<venue_image_dir>/<venue_id>-<original name>`.
       A venue's image list is whatever files in that directory start with
       its id, so re-uploading a file with the same name replaces it.
Who:   Called by VenueService.update_venue.

Security Model:
    1. Extension check:   png / jpg / jpeg only
    2. Size check:        strictly below settings.max_image_size (1MB)
    3. MIME type check:   libmagic reads the file header bytes
    4. Name sanitising:   only the final path component of the upload name is kept
    5. Deletion scope:    paths to delete must resolve inside the storage root,
                          and venue updates may only name that venue's images
"""

import logging
import os
import uuid
from pathlib import Path
from typing import Iterable, List, Optional

import aiofiles

from venue_admin.config import settings
from venue_admin.exceptions import FileStorageError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = {"image/png", "image/jpeg", "image/jpg"}
ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg"}


class FileService:
    """
    Manages the venue image directory.

    Directory Structure:
        storage/
        └── venues/
            ├── 6f1c...-front.jpg
            └── 6f1c...-pitch.png
    """

    def __init__(self, storage_root: Optional[str] = None, image_dir: Optional[str] = None):
        """
        Args:
            storage_root: Override the default storage path (used in tests).
            image_dir:    Override the venue image sub-directory.
        """
        self.storage_root = Path(storage_root or settings.storage_root).resolve()
        self.image_root = self.storage_root / (image_dir or settings.venue_image_dir)
        self.image_root.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with image_root=%s", self.image_root)

    # ── Validation ────────────────────────────────────────────────────────

    def validate_extension(self, filename: str) -> str:
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"File type '{ext}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="images",
                context={"extension": ext},
            )
        return ext

    def validate_size(self, size: int) -> None:
        if size >= settings.max_image_size:
            max_mb = settings.max_image_size / (1024 * 1024)
            raise ValidationError(
                message=f"Image size should be less than {max_mb:g}MB",
                field="images",
                context={"actual_size": size},
            )

    def validate_mime_type(self, content: bytes, filename: str) -> str:
        """
        Validate the MIME type detected from the content bytes.

        Raises:
            ValidationError if the content is not a PNG or JPEG image
            FileStorageError if detection itself fails
        """
        import magic

        try:
            mime_type = magic.from_buffer(content, mime=True)
        except Exception as e:
            logger.error("MIME type detection failed for %s: %s", filename, str(e))
            raise FileStorageError(
                message="Could not verify file type. Please try again.",
                context={"error": str(e)},
            )

        if mime_type not in ALLOWED_MIME_TYPES:
            raise ValidationError(
                message=(
                    f"File content type '{mime_type}' is not supported. "
                    f"The file must be a valid image (PNG or JPEG)."
                ),
                field="images",
                context={"detected_mime": mime_type},
            )
        return mime_type

    def validate_image(self, filename: str, content: bytes) -> None:
        """Extension → size → MIME type; cheapest check first."""
        self.validate_extension(filename)
        self.validate_size(len(content))
        self.validate_mime_type(content, filename)

    # ── Storage ───────────────────────────────────────────────────────────

    def _relative(self, path: Path) -> str:
        return path.relative_to(self.storage_root).as_posix()

    def _resolve_inside_root(self, relative_path: str) -> Path:
        candidate = (self.storage_root / relative_path).resolve()
        if candidate != self.storage_root and self.storage_root not in candidate.parents:
            raise ValidationError(
                message="Invalid file path",
                field="deleted_files",
                context={"path": relative_path},
            )
        return candidate

    async def store_venue_image(self, venue_id: uuid.UUID, filename: str, content: bytes) -> str:
        """
        Write an image for a venue, replacing any file with the same name.

        Returns:
            Path relative to the storage root, as stored on the venue.
        """
        safe_name = Path(filename).name
        target = self.image_root / f"{venue_id}-{safe_name}"
        try:
            self.image_root.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(target, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store image at %s: %s", target, str(e))
            raise FileStorageError(
                message="Failed to save uploaded image. Please try again.",
                context={"path": str(target), "os_error": str(e)},
            )

        logger.info("Venue image stored: %s (%d bytes)", target.name, len(content))
        return self._relative(target)

    async def remove_files(self, relative_paths: Iterable[str]) -> None:
        """
        Delete previously stored files.

        Every path is checked before anything is deleted; a path outside the
        storage root rejects the whole batch. Missing files are skipped.
        """
        targets = [self._resolve_inside_root(p) for p in relative_paths]
        for path in targets:
            if not path.exists():
                logger.debug("Delete skipped, file already gone: %s", path.name)
                continue
            try:
                os.remove(path)
            except OSError as e:
                logger.error("Failed to delete %s: %s", path, str(e))
                raise FileStorageError(
                    message="Failed to delete image. Please try again.",
                    context={"path": str(path), "os_error": str(e)},
                )
            logger.info("Deleted file: %s", path.name)

    def check_venue_image_paths(
        self, venue_id: uuid.UUID, relative_paths: Iterable[str]
    ) -> List[str]:
        """
        Normalise paths a venue update asks to delete.

        Every path must name a file of this venue in the image directory;
        files that are already gone still pass.

        Raises:
            ValidationError on `deleted_files` for any other path.
        """
        prefix = f"{venue_id}-"
        checked = []
        for relative_path in relative_paths:
            path = self._resolve_inside_root(relative_path)
            if path.parent != self.image_root or not path.name.startswith(prefix):
                raise ValidationError(
                    message="Invalid file path",
                    field="deleted_files",
                    context={"path": relative_path, "venue_id": str(venue_id)},
                )
            checked.append(self._relative(path))
        return checked

    def list_venue_images(self, venue_id: uuid.UUID) -> List[str]:
        prefix = f"{venue_id}-"
        if not self.image_root.exists():
            return []
        return sorted(
            self._relative(path)
            for path in self.image_root.iterdir()
            if path.is_file() and path.name.startswith(prefix)
        )


# ── Singleton Instance ────────────────────────────────────────────────────
file_service = FileService()
