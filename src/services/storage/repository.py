"""
CRUD repository for the Afroglot library.

``SavedItemRepository`` receives an ``AsyncSession`` and provides all
data-access methods.  It calls ``flush()`` rather than ``commit()`` so
that transaction boundaries are controlled by the caller (typically
:func:`get_session`).
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import SavedItemNotFoundError
from src.core.models import SavedItemCreate, SavedItemType, UploadResult
from src.core.utils import epoch_ms, utc_iso
from src.services.storage.models_db import SavedItem

logger = logging.getLogger(__name__)

STALLED_AFTER_MS = 5 * 60 * 1000
CANCELLED_MESSAGE = "Processing timed out and was manually cancelled"


class SavedItemRepository:
    """Data-access layer for saved items.

    All methods use ``flush()`` instead of ``commit()`` so transaction
    boundaries are controlled by the caller (typically ``get_session()``
    context manager which commits on clean exit).

    Args:
        session: An active SQLAlchemy ``AsyncSession``.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        user_id: str,
        payload: SavedItemCreate,
        is_processing: bool = True,
    ) -> SavedItem:
        """Persist a new item with the processing clock started now."""
        segments = (
            [seg.model_dump() for seg in payload.segments]
            if payload.segments is not None
            else None
        )
        item = SavedItem(
            user_id=user_id,
            text=payload.text,
            language=payload.language,
            type=str(payload.type),
            voice_gender=payload.voice_gender,
            voice=payload.voice,
            segments=segments,
            timestamp=utc_iso(),
            is_processing=is_processing,
            processing_start_time=epoch_ms(),
        )
        self._session.add(item)
        await self._session.flush()
        return item

    async def _get(self, item_id: str) -> SavedItem:
        item = await self._session.get(SavedItem, item_id)
        if item is None:
            raise SavedItemNotFoundError(item_id)
        return item

    async def get(self, user_id: str, item_id: str) -> SavedItem:
        """Return the user's item or raise :class:`SavedItemNotFoundError`."""
        item = await self._session.get(SavedItem, item_id)
        if item is None or item.user_id != user_id:
            raise SavedItemNotFoundError(item_id)
        return item

    async def list_for_user(
        self,
        user_id: str,
        item_type: SavedItemType | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[SavedItem]:
        """Return the user's items, newest first, optionally filtered by type."""
        stmt = (
            select(SavedItem)
            .where(SavedItem.user_id == user_id)
            .order_by(SavedItem.processing_start_time.desc(), SavedItem.timestamp.desc())
            .limit(limit)
            .offset(offset)
        )
        if item_type is not None:
            stmt = stmt.where(SavedItem.type == str(item_type))
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def mark_audio_saved(self, item_id: str, upload: UploadResult) -> SavedItem:
        """Attach the uploaded audio and end processing."""
        item = await self._get(item_id)
        item.audio_url = upload.url
        item.audio_public_id = upload.public_id
        item.audio_duration = upload.duration
        item.audio_format = upload.format
        item.is_processing = False
        await self._session.flush()
        return item

    async def mark_audio_failed(self, item_id: str, message: str) -> SavedItem:
        """Record an audio upload failure; the text stays saved."""
        item = await self._get(item_id)
        item.is_processing = False
        item.audio_error = True
        item.error_message = message
        await self._session.flush()
        return item

    async def finish_processing(self, item_id: str) -> SavedItem:
        """End processing for an item that has no audio to upload."""
        item = await self._get(item_id)
        item.is_processing = False
        await self._session.flush()
        return item

    async def delete(self, user_id: str, item_id: str) -> SavedItem:
        """Delete the user's item and return the removed row."""
        item = await self.get(user_id, item_id)
        await self._session.delete(item)
        await self._session.flush()
        return item

    async def find_stalled(
        self,
        user_id: str,
        now_ms: int | None = None,
        threshold_ms: int = STALLED_AFTER_MS,
    ) -> list[SavedItem]:
        """Return items still processing longer than *threshold_ms*."""
        now_ms = epoch_ms() if now_ms is None else now_ms
        stmt = (
            select(SavedItem)
            .where(
                SavedItem.user_id == user_id,
                SavedItem.is_processing.is_(True),
                SavedItem.processing_start_time < now_ms - threshold_ms,
            )
            .order_by(SavedItem.processing_start_time)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def cancel_stalled(self, user_id: str, ids: list[str]) -> list[str]:
        """Mark the given processing items as failed; return the IDs changed.

        Unknown IDs, other users' items and items no longer processing are
        skipped.
        """
        if not ids:
            return []
        stmt = select(SavedItem).where(
            SavedItem.user_id == user_id,
            SavedItem.id.in_(ids),
            SavedItem.is_processing.is_(True),
        )
        result = await self._session.execute(stmt)
        cancelled = []
        for item in result.scalars().all():
            item.is_processing = False
            item.audio_error = True
            item.error_message = CANCELLED_MESSAGE
            cancelled.append(item.id)
        await self._session.flush()
        if cancelled:
            logger.info("Cancelled %d stalled item(s) for user %s", len(cancelled), user_id)
        return cancelled
