"""
Local image intake: turns uploaded payloads into stored-location strings.
"""

import asyncio
import base64
import binascii
import random
import re
import time
from pathlib import Path
from typing import Any, List, Optional

from fastapi import UploadFile
import structlog

from app.core.config import settings
from app.core.exceptions import UpstreamFailure, ValidationError

_DATA_URI = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>.+)$", re.DOTALL)


class ImageService:
    """Stores product images on local disk under ``settings.upload_dir``."""

    def __init__(self, upload_dir: Optional[str] = None, max_bytes: Optional[int] = None):
        self._upload_dir = upload_dir
        self._max_bytes = max_bytes
        self._logger = structlog.get_logger().bind(component="ImageService")

    @property
    def upload_dir(self) -> Path:
        return Path(self._upload_dir or settings.upload_dir)

    @property
    def max_bytes(self) -> int:
        return self._max_bytes or settings.max_upload_bytes

    def ensure_upload_dir(self) -> None:
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    def location_for(self, filename: str) -> str:
        return "/" + (self.upload_dir / filename).as_posix().strip("/")

    @staticmethod
    def _filename(field_name: str, extension: str) -> str:
        unique_suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
        return f"{field_name}-{unique_suffix}.{extension}"

    @staticmethod
    def _extension_for(mime_type: str) -> str:
        # image/svg+xml -> svg, image/jpeg -> jpeg
        return mime_type.split("/", 1)[1].split("+", 1)[0].lower()

    def _check_image(self, mime_type: Optional[str], size: int) -> None:
        if not mime_type or not mime_type.startswith("image/"):
            raise ValidationError("Only image files are allowed")
        if size > self.max_bytes:
            raise ValidationError(f"Image exceeds the {self.max_bytes} byte limit")

    async def _write(self, filename: str, data: bytes) -> str:
        try:
            self.ensure_upload_dir()
            await asyncio.to_thread((self.upload_dir / filename).write_bytes, data)
        except OSError as e:
            self._logger.error("Failed to store image", filename=filename, error=str(e))
            raise UpstreamFailure("Failed to upload images")
        return self.location_for(filename)

    async def store_images(self, images: List[Any]) -> List[str]:
        """Store each payload and return its location, in input order.

        URLs are passed through untouched; ``data:image/...;base64,`` URIs
        are decoded and written to disk.
        """
        locations = []
        for index, payload in enumerate(images):
            if not isinstance(payload, str) or not payload.strip():
                raise ValidationError(f"Image at position {index} must be a non-empty string")
            payload = payload.strip()

            if payload.startswith(("http://", "https://")):
                locations.append(payload)
                continue

            match = _DATA_URI.match(payload)
            if not match:
                raise ValidationError(f"Image at position {index} is not a URL or base64 data URI")
            try:
                data = base64.b64decode(match.group("data"), validate=True)
            except (binascii.Error, ValueError):
                raise ValidationError(f"Image at position {index} is not valid base64")

            mime_type = match.group("mime").lower()
            self._check_image(mime_type, len(data))
            filename = self._filename("image", self._extension_for(mime_type))
            locations.append(await self._write(filename, data))

        self._logger.info("Images stored", count=len(locations))
        return locations

    async def store_upload(self, upload: UploadFile, field_name: str = "image") -> str:
        data = await upload.read()
        self._check_image(upload.content_type, len(data))

        extension = Path(upload.filename or "").suffix.lstrip(".").lower()
        if not extension:
            extension = self._extension_for(upload.content_type)
        location = await self._write(self._filename(field_name, extension), data)
        self._logger.info("Uploaded image stored", location=location, size=len(data))
        return location

    def discard(self, location: str) -> None:
        """Remove a file previously returned by ``store_upload``."""
        path = self.upload_dir / Path(location).name
        try:
            path.unlink(missing_ok=True)
            self._logger.info("Discarded stored image", location=location)
        except OSError as e:
            self._logger.warning("Failed to discard stored image", location=location, error=str(e))


image_service = ImageService()
