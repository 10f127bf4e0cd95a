"""Media store for uploaded entry images."""

import logging
import secrets
import time
from pathlib import Path, PurePath

from backend.app.core.config import settings
from backend.app.core.exceptions import ReasonCode, ValidationError

logger = logging.getLogger(__name__)

UPLOADS_URL_PREFIX = "/uploads"


class MediaStore:
    """
    Store uploaded images as files in a directory.

    References returned by ``save`` are bare file names; they are resolved
    against ``uploads_dir`` and served under ``/uploads/<ref>``.
    """

    def __init__(
        self,
        uploads_dir: str | Path | None = None,
        max_size: int | None = None,
        allowed_extensions: list[str] | None = None,
    ):
        self.uploads_dir = Path(uploads_dir or settings.uploads_dir)
        self.max_size = max_size or settings.max_upload_size
        self.allowed_extensions = allowed_extensions or settings.allowed_image_extensions_list

    def validate(self, filename: str, content_type: str | None, size: int) -> str:
        """
        Check an upload's type and size.

        Returns:
            The normalized file extension including the dot (e.g. ``.png``)

        Raises:
            ValidationError: If the file is not an allowed image or is too large
        """
        extension = PurePath(filename or "").suffix.lower()
        subtype = (content_type or "").lower().partition("/")[2]

        if extension.lstrip(".") not in self.allowed_extensions or subtype not in self.allowed_extensions:
            raise ValidationError(
                message="Only image files are allowed",
                reason=ReasonCode.INVALID_IMAGE_TYPE,
                details=f"Accepted types: {', '.join(self.allowed_extensions)}",
            )
        if size > self.max_size:
            raise ValidationError(
                message=f"File size too large. Maximum size is {self.max_size // (1024 * 1024)}MB.",
                reason=ReasonCode.FILE_TOO_LARGE,
            )
        return extension

    def save(self, filename: str, content_type: str | None, data: bytes) -> str:
        """Validate and store an upload, returning its reference."""
        extension = self.validate(filename, content_type, len(data))
        ref = f"image-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{extension}"

        self.uploads_dir.mkdir(parents=True, exist_ok=True)
        self.path_for(ref).write_bytes(data)
        logger.info(f"[MEDIA] Stored {filename!r} as {ref} ({len(data)} bytes)")
        return ref

    def delete(self, ref: str) -> bool:
        """
        Delete the file behind a reference.

        Deleting a reference that does not exist is not an error.

        Returns:
            True if a file was removed, False if there was nothing to remove

        Raises:
            OSError: If the file exists but cannot be removed
        """
        path = self.path_for(ref)
        if not path.exists():
            return False
        path.unlink()
        logger.info(f"[MEDIA] Deleted {ref}")
        return True

    def path_for(self, ref: str) -> Path:
        """Resolve a reference to a path inside ``uploads_dir``."""
        name = PurePath(ref).name
        if not name or name != ref or name in (".", ".."):
            raise ValueError(f"Invalid media reference: {ref!r}")
        return self.uploads_dir / name

    @staticmethod
    def url_path(ref: str) -> str:
        return f"{UPLOADS_URL_PREFIX}/{ref}"
