"""Save-to-account pipeline for the library.

The text is written first, in its own transaction, so it survives any
audio failure. The audio upload then runs under a single timeout and its
outcome is recorded on the same row::

    item = await save_to_account(user_id, payload, audio_bytes, uploader)
    if item.audio_error:
        ...  # text saved, audio not
"""

import asyncio
import logging

from src.core.models import DeleteSavedItemResponse, SavedItemCreate
from src.services.media.cloudinary import CloudinaryUploader
from src.services.storage.database import get_session
from src.services.storage.models_db import SavedItem
from src.services.storage.repository import SavedItemRepository

logger = logging.getLogger(__name__)

SAVE_UPLOAD_TIMEOUT = 120.0
UPLOAD_TIMEOUT_MESSAGE = "Upload timed out after 2 minutes"
UPLOADS_DISABLED_MESSAGE = "Media uploads are not configured"


async def save_to_account(
    user_id: str,
    payload: SavedItemCreate,
    audio: bytes | None,
    uploader: CloudinaryUploader,
    mime_type: str = "audio/wav",
    timeout: float = SAVE_UPLOAD_TIMEOUT,
) -> SavedItem:
    """Persist *payload* for *user_id*, then upload *audio* if given.

    Args:
        user_id: Owner of the new item.
        payload: Text, language, type and voice metadata.
        audio: Audio bytes to host on the CDN, or ``None``.
        uploader: CDN uploader.
        mime_type: Mime type of *audio*.
        timeout: Seconds allowed for the upload.

    Returns:
        The saved item. On upload failure ``audio_error`` is set and
        ``error_message`` explains why; the text is never rolled back.
        Without Cloudinary credentials the upload is skipped and the item
        is marked failed with ``UPLOADS_DISABLED_MESSAGE``.
    """
    async with get_session() as session:
        item = await SavedItemRepository(session).create(user_id, payload, is_processing=True)
    logger.info("Saved %s item %s for user %s", payload.type, item.id, user_id)

    if not audio:
        async with get_session() as session:
            return await SavedItemRepository(session).finish_processing(item.id)

    if not uploader.configured:
        logger.warning("Cloudinary is not configured; audio for item %s not uploaded", item.id)
        async with get_session() as session:
            return await SavedItemRepository(session).mark_audio_failed(
                item.id, UPLOADS_DISABLED_MESSAGE
            )

    try:
        upload = await asyncio.wait_for(
            uploader.upload(audio, user_id, payload.type, mime_type),
            timeout=timeout,
        )
    except TimeoutError:
        logger.warning("Audio upload for item %s timed out after %.0fs", item.id, timeout)
        message = UPLOAD_TIMEOUT_MESSAGE
    except Exception as exc:
        logger.exception("Audio upload for item %s failed", item.id)
        message = getattr(exc, "detail", None) or str(exc) or "Audio upload failed"
    else:
        async with get_session() as session:
            return await SavedItemRepository(session).mark_audio_saved(item.id, upload)

    async with get_session() as session:
        return await SavedItemRepository(session).mark_audio_failed(item.id, message)


async def delete_saved_item(
    user_id: str,
    item_id: str,
    uploader: CloudinaryUploader,
) -> DeleteSavedItemResponse:
    """Delete the record, then try to remove its hosted audio.

    CDN deletion is best-effort: failures are logged and reported through
    ``audio_deleted`` without restoring the record.

    Raises:
        SavedItemNotFoundError: If the item does not exist for *user_id*.
    """
    async with get_session() as session:
        item = await SavedItemRepository(session).delete(user_id, item_id)
    logger.info("Deleted item %s for user %s", item_id, user_id)

    audio_deleted = False
    if item.audio_public_id:
        try:
            await uploader.delete(item.audio_public_id)
            audio_deleted = True
        except Exception as exc:
            logger.warning("Could not delete audio %s from CDN: %s", item.audio_public_id, exc)
    return DeleteSavedItemResponse(id=item_id, deleted=True, audio_deleted=audio_deleted)
