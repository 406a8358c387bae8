"""
Library REST endpoints.

Saved transcriptions and generated speech for the calling user. Saving
persists the text first and then uploads any audio (see
:mod:`src.services.saving`); the returned record tells the client
whether the audio made it.
"""

import logging

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from src.api.deps import get_controller, get_uploader, get_user_id
from src.core.config import get_settings
from src.core.exceptions import FileTooLargeError, InvalidFileTypeError
from src.core.models import (
    CancelStalledRequest,
    CancelStalledResponse,
    DeleteSavedItemResponse,
    SavedItemCreate,
    SavedItemResponse,
    SavedItemType,
    StalledItemsResponse,
)
from src.core.utils import epoch_ms
from src.services.audio.controller import AudioController
from src.services.media.cloudinary import CloudinaryUploader
from src.services.saving import delete_saved_item, save_to_account
from src.services.storage.database import get_session
from src.services.storage.repository import SavedItemRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/library", tags=["library"])


def _parse_metadata(raw: str) -> SavedItemCreate:
    try:
        return SavedItemCreate.model_validate_json(raw)
    except ValidationError as exc:
        raise RequestValidationError(exc.errors()) from exc


@router.get("", response_model=list[SavedItemResponse])
async def list_items(
    type: SavedItemType | None = Query(None),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    user_id: str = Depends(get_user_id),
):
    """List the user's saved items, newest first."""
    async with get_session() as session:
        items = await SavedItemRepository(session).list_for_user(
            user_id, item_type=type, limit=limit, offset=offset
        )
    return [SavedItemResponse.model_validate(item) for item in items]


@router.post("", response_model=SavedItemResponse, status_code=201)
async def save_item(
    metadata: str = Form(...),
    audio: UploadFile | None = File(None),
    use_recorder_audio: bool = Form(False),
    user_id: str = Depends(get_user_id),
    uploader: CloudinaryUploader = Depends(get_uploader),
    controller: AudioController = Depends(get_controller),
):
    """Save text (and optionally audio) to the user's library.

    ``metadata`` is a JSON object in the record's camelCase field names.
    Audio comes from the ``audio`` part, or from the recorder's current
    artifact when ``use_recorder_audio`` is set.
    """
    settings = get_settings()
    payload = _parse_metadata(metadata)

    data: bytes | None = None
    mime_type = "audio/wav"
    if audio is not None:
        mime_type = audio.content_type or mime_type
        if not mime_type.startswith("audio/"):
            raise InvalidFileTypeError(mime_type)
        data = await audio.read()
        if len(data) > settings.max_upload_bytes:
            raise FileTooLargeError(len(data), settings.max_upload_bytes)
    elif use_recorder_audio:
        saved = await controller.save()
        data, mime_type = saved.data, saved.mime_type

    item = await save_to_account(
        user_id,
        payload,
        data,
        uploader,
        mime_type=mime_type,
        timeout=settings.save_upload_timeout,
    )
    return SavedItemResponse.model_validate(item)


@router.get("/stalled", response_model=StalledItemsResponse)
async def list_stalled(user_id: str = Depends(get_user_id)):
    """Items whose audio has been processing longer than the stalled threshold."""
    threshold = get_settings().stalled_after_ms
    async with get_session() as session:
        items = await SavedItemRepository(session).find_stalled(
            user_id, now_ms=epoch_ms(), threshold_ms=threshold
        )
    return StalledItemsResponse(
        threshold_ms=threshold,
        items=[SavedItemResponse.model_validate(item) for item in items],
    )


@router.post("/stalled/cancel", response_model=CancelStalledResponse)
async def cancel_stalled(body: CancelStalledRequest, user_id: str = Depends(get_user_id)):
    async with get_session() as session:
        cancelled = await SavedItemRepository(session).cancel_stalled(user_id, body.ids)
    return CancelStalledResponse(cancelled=cancelled)


@router.delete("/{item_id}", response_model=DeleteSavedItemResponse)
async def delete_item(
    item_id: str,
    user_id: str = Depends(get_user_id),
    uploader: CloudinaryUploader = Depends(get_uploader),
):
    return await delete_saved_item(user_id, item_id, uploader)
