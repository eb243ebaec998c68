"""
Image upload storage.

Files land in ``settings.upload_path`` and are served back by the static
``/uploads`` mount, so the public URL is ``<file_url>/uploads/<filename>``.
"""
import logging
import secrets
import time
from pathlib import Path
from typing import Optional

import aiofiles
from fastapi import HTTPException, UploadFile

from ..config import settings

logger = logging.getLogger(__name__)


class UploadService:
    """Validates and stores image uploads."""

    def __init__(self, upload_dir: Optional[str] = None, max_size: Optional[int] = None):
        self.upload_dir = Path(upload_dir or settings.upload_path).resolve()
        self.max_size = max_size or settings.max_upload_size

    def ensure_dir(self) -> Path:
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        return self.upload_dir

    def validate_content_type(self, content_type: Optional[str]) -> None:
        if content_type not in settings.allowed_image_types:
            raise HTTPException(
                status_code=400,
                detail=f"Only image files are allowed. Received: {content_type}"
            )

    def validate_size(self, content_length: Optional[int], actual_size: int = 0) -> None:
        """Check the declared length before reading and the byte count after."""
        if (content_length and content_length > self.max_size) or actual_size > self.max_size:
            limit_mb = self.max_size // (1024 * 1024)
            raise HTTPException(status_code=400, detail=f"File size exceeds {limit_mb}MB limit")

    @staticmethod
    def declared_size(upload: UploadFile) -> Optional[int]:
        """Size known from the multipart parser, else the part's Content-Length."""
        if upload.size is not None:
            return upload.size
        length = upload.headers.get("content-length", "")
        return int(length) if length.isdigit() else None

    def build_filename(self, original: str) -> str:
        """``<stem>-<epoch ms>-<random><ext>``; path components are stripped."""
        name = Path(original or "upload").name
        stem, ext = Path(name).stem or "upload", Path(name).suffix.lower()
        unique_suffix = f"{int(time.time() * 1000)}-{secrets.randbelow(10 ** 9)}"
        return f"{stem}-{unique_suffix}{ext}"

    def public_url(self, filename: str) -> str:
        return f"{settings.file_url.rstrip('/')}/uploads/{filename}"

    async def save_image(self, upload: UploadFile) -> str:
        """Validate and store an uploaded image, returning its public URL."""
        self.validate_content_type(upload.content_type)
        self.validate_size(self.declared_size(upload))
        # one byte past the limit is enough to tell an oversized file apart
        content = await upload.read(self.max_size + 1)
        self.validate_size(None, len(content))

        filename = self.build_filename(upload.filename)
        target = self.ensure_dir() / filename
        async with aiofiles.open(target, "wb") as out:
            await out.write(content)

        logger.info(f"Stored upload {filename} ({len(content)} bytes)")
        return self.public_url(filename)


# Global upload service instance
upload_service = UploadService()
