import logging
import uuid
from pathlib import Path
from typing import Protocol

from tutorhub.core.config import ALLOWED_UPLOAD_EXTENSIONS, MAX_UPLOAD_BYTES
from tutorhub.core.errors import ValidationError

logger = logging.getLogger(__name__)


class FileStorage(Protocol):
    def save(self, filename: str, data: bytes) -> str:
        """Persist ``data`` and return a durable URL for it."""
        ...

    def delete(self, file_url: str) -> None:
        """Remove a file previously returned by ``save``."""
        ...


class LocalFileStorage:
    """Stores uploads on local disk and serves them under ``base_url``."""

    def __init__(self, root: Path, base_url: str):
        self.root = Path(root)
        self.base_url = base_url

    def save(self, filename: str, data: bytes) -> str:
        self.root.mkdir(parents=True, exist_ok=True)
        stored_name = f"{uuid.uuid4().hex}{Path(filename).suffix.lower()}"
        (self.root / stored_name).write_bytes(data)
        logger.info("stored upload %s as %s (%d bytes)", filename, stored_name, len(data))
        return f"{self.base_url}/{stored_name}"

    def delete(self, file_url: str) -> None:
        stored_name = file_url.rsplit("/", 1)[-1]
        (self.root / stored_name).unlink(missing_ok=True)
        logger.info("removed upload %s", stored_name)


def validate_upload(filename: str | None, size: int) -> None:
    if not filename:
        raise ValidationError("A file is required for document submissions")
    if Path(filename).suffix.lower() not in ALLOWED_UPLOAD_EXTENSIONS:
        allowed = ", ".join(ALLOWED_UPLOAD_EXTENSIONS)
        raise ValidationError(f"Unsupported file type. Allowed: {allowed}")
    if size == 0:
        raise ValidationError("Uploaded file is empty")
    if size > MAX_UPLOAD_BYTES:
        raise ValidationError(
            f"File too large. Maximum size is {MAX_UPLOAD_BYTES // (1024 * 1024)}MB"
        )
