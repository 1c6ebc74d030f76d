from __future__ import annotations

import io
import logging

import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError

from jobnest.config import Settings, settings
from jobnest.errors import UploadError


logger = logging.getLogger(__name__)


def default_folder(content_type: str | None) -> str:
    kind = (content_type or "").lower()
    if kind.startswith("image/"):
        return "images"
    if "pdf" in kind:
        return "documents"
    return "general_uploads"


class MediaUploader:
    def __init__(self, config: Settings | None = None) -> None:
        self.config = config or settings

    def _credentials(self) -> dict[str, str]:
        return {
            "cloud_name": self.config.media_cloud_name,
            "api_key": self.config.media_api_key,
            "api_secret": self.config.media_api_secret,
        }

    def upload(
        self,
        data: bytes,
        filename: str,
        content_type: str | None = None,
        folder: str | None = None,
    ) -> str:
        if not data:
            raise UploadError("No file uploaded or invalid file format")
        credentials = self._credentials()
        if not all(credentials.values()):
            raise UploadError("Media host credentials are not configured")

        target = folder or default_folder(content_type)
        try:
            result = cloudinary.uploader.upload(
                io.BytesIO(data),
                folder=target,
                resource_type="auto",
                filename=filename or "upload",
                timeout=self.config.upload_timeout_seconds,
                **credentials,
            )
        except CloudinaryError as exc:
            logger.error("Upload of %s failed: %s", filename, exc)
            raise UploadError(f"Upload failed: {exc}") from exc

        url = result.get("secure_url") if isinstance(result, dict) else None
        if not url:
            raise UploadError("Upload failed: media host returned no URL")
        logger.info("Uploaded %s (%d bytes) to %s", filename, len(data), target)
        return url


uploader = MediaUploader()


def get_media_uploader() -> MediaUploader:
    return uploader
