from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional
from uuid import uuid4

from fastapi import UploadFile

from signdesk.core.config import Settings
from signdesk.core.exceptions import InvalidInputError
from signdesk.core.logging import get_logger

logger = get_logger(__name__)

PDF_CONTENT_TYPE = "application/pdf"


@dataclass(frozen=True)
class StoredUpload:
    original_filename: str
    file_path: str
    file_size: int


class UploadStorage:
    """Writes uploaded files under ``UPLOAD_DIR/documents/<uuid>/``."""

    def __init__(self, upload_dir: str, max_size: int, allowed_extensions: List[str]) -> None:
        self.root_dir = Path(upload_dir) / "documents"
        self.max_size = max_size
        self.allowed_extensions = allowed_extensions

    @classmethod
    def from_settings(cls, settings: Settings) -> "UploadStorage":
        return cls(settings.UPLOAD_DIR, settings.MAX_UPLOAD_SIZE, settings.allowed_extensions)

    def validate(self, filename: Optional[str], content_type: Optional[str]) -> str:
        """Return the sanitized filename or raise InvalidInputError."""
        if not filename:
            raise InvalidInputError("No file uploaded")
        safe_name = Path(filename).name
        if self.allowed_extensions:
            ext = (safe_name.rsplit(".", 1)[-1] if "." in safe_name else "").lower()
            if ext not in self.allowed_extensions and content_type != PDF_CONTENT_TYPE:
                raise InvalidInputError(
                    f"Unsupported file type. Allowed: {', '.join(sorted(set(self.allowed_extensions)))}"
                )
        return safe_name

    async def save(self, file: UploadFile) -> StoredUpload:
        safe_name = self.validate(file.filename, file.content_type)

        # One byte past the limit is enough to reject without buffering the rest
        content = await file.read(self.max_size + 1)
        if len(content) > self.max_size:
            raise InvalidInputError(f"File exceeds the {self.max_size // (1024 * 1024)}MB limit")

        dest_dir = self.root_dir / str(uuid4())
        dest_dir.mkdir(parents=True, exist_ok=True)
        dest_path = dest_dir / safe_name
        dest_path.write_bytes(content)

        logger.info(f"Stored upload {safe_name} ({len(content)} bytes)")
        return StoredUpload(
            original_filename=safe_name,
            file_path=str(dest_path),
            file_size=len(content),
        )
