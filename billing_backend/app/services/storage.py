"""Logo storage on the local filesystem, served back under the upload URL prefix."""

import os
import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from billing_backend.app.core.exceptions import TransportError, ValidationError
from billing_backend.app.core.logging import get_logger
from billing_backend.app.core.settings import get_settings

logger = get_logger(__name__)

LOGO_FOLDER = "business-logos"
IMAGE_EXTENSIONS = frozenset({"png", "jpg", "jpeg", "gif", "webp", "svg"})
CONTENT_TYPE_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/svg+xml": "svg",
}
_EXTENSION_RE = re.compile(r"^[a-z0-9]+$")


def _size_label(size: int) -> str:
    if size >= 1024 * 1024:
        return f"{size // (1024 * 1024)}MB"
    return f"{size // 1024}KB"


@dataclass(frozen=True)
class StoredFile:
    url: str
    path: str


class LocalLogoStorage:
    def __init__(self, root: Optional[Path] = None, url_prefix: Optional[str] = None, max_bytes: Optional[int] = None):
        settings = get_settings()
        self.root = Path(root or settings.upload_dir)
        self.url_prefix = (url_prefix or settings.upload_url_prefix).rstrip("/")
        self.max_bytes = max_bytes or settings.max_logo_bytes

    def _extension(self, filename: Optional[str], content_type: str) -> str:
        ext = os.path.splitext(os.path.basename(filename or ""))[1].lstrip(".").lower()
        if ext not in IMAGE_EXTENSIONS:
            ext = CONTENT_TYPE_EXTENSIONS.get(content_type.split(";", 1)[0].strip().lower(), "")
        if ext not in IMAGE_EXTENSIONS or not _EXTENSION_RE.match(ext):
            raise ValidationError("Unsupported image type", field="file")
        return ext

    def upload(self, business_id: int, filename: Optional[str], content: bytes, content_type: Optional[str]) -> StoredFile:
        if not content:
            raise ValidationError("No file provided", field="file")
        if not content_type or not content_type.startswith("image/"):
            raise ValidationError("File must be an image", field="file")
        if len(content) > self.max_bytes:
            raise ValidationError(f"File size must be less than {_size_label(self.max_bytes)}", field="file")

        name = f"{int(time.time() * 1000)}-logo.{self._extension(filename, content_type)}"
        relative = f"{LOGO_FOLDER}/{business_id}/{name}"
        target = self.root / LOGO_FOLDER / str(business_id) / name
        if self.root.resolve() not in target.resolve().parents:
            raise ValidationError("Invalid file name", field="file")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
        except OSError as exc:
            logger.error("logo_upload_failed", business_id=business_id, error=str(exc))
            raise TransportError(f"Failed to save file: {exc}") from exc

        logger.info("logo_uploaded", business_id=business_id, path=relative, size=len(content))
        return StoredFile(url=f"{self.url_prefix}/{relative}", path=relative)


def get_storage() -> LocalLogoStorage:
    return LocalLogoStorage()
