"""
Cloudinary media uploader.

Unsigned uploads through an upload preset; files are organized as
``<app folder>/<user id>`` and tagged with the user and item type.
"""

import logging

import httpx

from src.core.exceptions import MediaUploadError, NotImplementedYetError
from src.core.models import SavedItemType, UploadResult
from src.core.utils import epoch_ms

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.cloudinary.com/v1_1"


class CloudinaryUploader:
    """Upload audio payloads to the Cloudinary CDN.

    Args:
        cloud_name: Cloudinary cloud name.
        upload_preset: Unsigned upload preset.
        app_folder: Top-level folder for every upload.
        base_url: API root (without trailing slash).
        timeout: Request timeout in seconds.
        transport: Optional httpx transport (tests use ``httpx.MockTransport``).
    """

    def __init__(
        self,
        cloud_name: str,
        upload_preset: str,
        app_folder: str = "afroglot",
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._cloud_name = cloud_name
        self._upload_preset = upload_preset
        self._app_folder = app_folder
        self._upload_url = f"{base_url.rstrip('/')}/{cloud_name}/upload"
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    @property
    def configured(self) -> bool:
        return bool(self._cloud_name and self._upload_preset)

    async def close(self) -> None:
        await self._client.aclose()

    async def upload(
        self,
        data: bytes,
        user_id: str,
        kind: SavedItemType | str,
        mime_type: str = "audio/wav",
    ) -> UploadResult:
        """Upload one audio payload.

        Args:
            data: Audio bytes.
            user_id: Owner; selects the folder and the ``user_<id>`` tag.
            kind: Item type (``speech-to-text`` / ``text-to-speech``).
            mime_type: Mime type of *data*.

        Returns:
            UploadResult with the secure URL and CDN metadata.

        Raises:
            MediaUploadError: If the CDN rejects the upload or is unreachable.
        """
        kind = str(kind)
        public_id = f"{kind}_{epoch_ms()}"
        form = {
            "upload_preset": self._upload_preset,
            "folder": f"{self._app_folder}/{user_id}",
            "resource_type": "auto",
            "public_id": public_id,
            "tags": f"user_{user_id},{kind}",
        }
        logger.info("Uploading %.1f KB to Cloudinary as %s", len(data) / 1024, public_id)
        try:
            response = await self._client.post(
                self._upload_url,
                data=form,
                files={"file": (f"{public_id}.wav", data, mime_type)},
            )
        except httpx.HTTPError as exc:
            logger.error("Cloudinary upload request failed: %s", exc)
            raise MediaUploadError(f"Failed to upload to Cloudinary: {exc}") from exc

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.is_error:
            error = body.get("error") if isinstance(body, dict) else None
            detail = (error or {}).get("message") or "Failed to upload to Cloudinary"
            logger.error("Cloudinary upload error %d: %s", response.status_code, detail)
            raise MediaUploadError(detail)

        for field in ("secure_url", "public_id"):
            if not isinstance(body, dict) or not body.get(field):
                logger.error("Cloudinary response has no %s: %s", field, body)
                raise MediaUploadError(f"Cloudinary response missing {field}")

        result = UploadResult(
            url=body["secure_url"],
            public_id=body["public_id"],
            format=body.get("format"),
            duration=body.get("duration") or None,
            resource_type=body.get("resource_type"),
        )
        logger.info("Uploaded %s (%s)", result.public_id, result.url)
        return result

    async def delete(self, public_id: str) -> None:
        """Delete an uploaded asset.

        Deletion needs a request signed with the account's API secret,
        which this service does not hold.

        Raises:
            ValueError: If *public_id* is empty.
            NotImplementedYetError: Always, for a non-empty *public_id*.
        """
        if not public_id:
            raise ValueError("Public ID is required to delete from Cloudinary")
        raise NotImplementedYetError("Signed Cloudinary deletion")
