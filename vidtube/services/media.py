"""Media storage for avatars and cover images: local disk or Cloudinary."""

from __future__ import annotations

import asyncio
import hashlib
import logging
import time
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import TYPE_CHECKING, Any

import httpx

from vidtube.schemas.media import UploadResult

if TYPE_CHECKING:
    from vidtube.core.config import Settings

logger = logging.getLogger(__name__)

CLOUDINARY_API_BASE = "https://api.cloudinary.com/v1_1"


class MediaStorageNotConfiguredError(Exception):
    """Raised when the selected media backend is missing required settings."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class MediaUploadError(Exception):
    """Raised when the storage backend rejects or fails an upload."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


@dataclass(frozen=True)
class MediaFile:
    """An uploaded file already read into memory."""

    content: bytes
    filename: str
    content_type: str | None = None

    @property
    def extension(self) -> str:
        return PurePath(self.filename).suffix.lower()


class MediaStorage(ABC):
    """Interface for storage backends."""

    @abstractmethod
    async def upload(self, file: MediaFile, folder: str) -> UploadResult:
        """Store file under folder and return where it can be fetched."""


class LocalMediaStorage(MediaStorage):
    """Write files under root/<folder>/ and expose them below url_prefix."""

    def __init__(self, root: str | Path, url_prefix: str) -> None:
        self.root = Path(root)
        self.url_prefix = url_prefix.rstrip("/")

    @staticmethod
    def _write(target: Path, content: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)

    async def upload(self, file: MediaFile, folder: str) -> UploadResult:
        name = f"{uuid.uuid4().hex}{file.extension}"
        target = self.root / folder / name
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, self._write, target, file.content)
        except OSError as e:
            logger.exception("Writing %s to local media storage failed", file.filename)
            raise MediaUploadError(f"Could not store file: {e.strerror or e}") from e
        return UploadResult(
            url=f"{self.url_prefix}/{folder}/{name}",
            public_id=f"{folder}/{name}",
            resource_type="image",
            format=file.extension.lstrip(".") or None,
            bytes=len(file.content),
        )


def _is_cloudinary_configured(settings: Settings) -> bool:
    if not settings.CLOUDINARY_CLOUD_NAME or not settings.CLOUDINARY_CLOUD_NAME.strip():
        return False
    if not settings.CLOUDINARY_API_KEY or not settings.CLOUDINARY_API_KEY.strip():
        return False
    if settings.CLOUDINARY_API_SECRET is None:
        return False
    secret = settings.CLOUDINARY_API_SECRET.get_secret_value()
    return bool(secret and secret.strip())


def sign_params(params: dict[str, Any], api_secret: str) -> str:
    """Cloudinary signature: SHA-1 of the sorted key=value pairs followed by the API secret."""
    to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params) if params[k] not in (None, ""))
    return hashlib.sha1(f"{to_sign}{api_secret}".encode("utf-8")).hexdigest()


class CloudinaryStorage(MediaStorage):
    """Signed uploads to the Cloudinary REST API."""

    def __init__(self, settings: Settings) -> None:
        if not _is_cloudinary_configured(settings):
            raise MediaStorageNotConfiguredError(
                "Cloudinary is not configured; set CLOUDINARY_CLOUD_NAME, "
                "CLOUDINARY_API_KEY, CLOUDINARY_API_SECRET."
            )
        self.cloud_name = settings.CLOUDINARY_CLOUD_NAME.strip()
        self.api_key = settings.CLOUDINARY_API_KEY.strip()
        self._api_secret = settings.CLOUDINARY_API_SECRET.get_secret_value().strip()
        self.base_folder = (settings.CLOUDINARY_FOLDER or "").strip("/")
        self.timeout = max(1.0, min(120.0, settings.CLOUDINARY_REQUEST_TIMEOUT_SEC))

    @property
    def upload_url(self) -> str:
        return f"{CLOUDINARY_API_BASE}/{self.cloud_name}/auto/upload"

    async def upload(self, file: MediaFile, folder: str) -> UploadResult:
        target_folder = "/".join(p for p in (self.base_folder, folder) if p)
        params: dict[str, Any] = {"folder": target_folder, "timestamp": int(time.time())}
        data = {
            **params,
            "api_key": self.api_key,
            "signature": sign_params(params, self._api_secret),
        }
        files = {
            "file": (file.filename, file.content, file.content_type or "application/octet-stream")
        }
        try:
            async with httpx.AsyncClient() as client:
                resp = await client.post(
                    self.upload_url, data=data, files=files, timeout=self.timeout
                )
        except httpx.HTTPError as e:
            logger.exception("Cloudinary upload request failed")
            raise MediaUploadError(f"Cloudinary request failed: {e!s}") from e

        if resp.status_code == 401:
            raise MediaUploadError("Cloudinary authentication failed (check API key and secret).", 401)
        if resp.status_code >= 400:
            try:
                detail = resp.json().get("error", {}).get("message") or resp.text[:500]
            except Exception:
                detail = resp.text[:500] if resp.text else "Unknown error"
            raise MediaUploadError(f"Cloudinary returned {resp.status_code}: {detail}", resp.status_code)

        body = resp.json()
        url = body.get("secure_url") or body.get("url")
        if not url:
            raise MediaUploadError("Cloudinary response missing file URL.")
        return UploadResult(
            url=url,
            public_id=body.get("public_id") or "",
            resource_type=body.get("resource_type") or "image",
            format=body.get("format"),
            bytes=body.get("bytes"),
            width=body.get("width"),
            height=body.get("height"),
        )


def build_media_storage(settings: Settings) -> MediaStorage:
    """Select the storage backend named by MEDIA_BACKEND."""
    if settings.MEDIA_BACKEND == "cloudinary":
        return CloudinaryStorage(settings)
    return LocalMediaStorage(settings.MEDIA_ROOT, settings.MEDIA_URL_PREFIX)
