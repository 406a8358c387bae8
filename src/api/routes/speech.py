"""
Speech REST endpoints.

Direct access to the configured speech provider (Spitch or demo) for
one-off transcriptions, speech synthesis and the voice/language lists.
"""

import logging

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import Response, StreamingResponse

from src.api.deps import get_speech_client
from src.core.config import get_settings
from src.core.exceptions import FileTooLargeError, InvalidFileTypeError
from src.core.models import (
    LanguageInfo,
    SpeechRequest,
    SpeechStatusResponse,
    TranscriptionResult,
    VoiceInfo,
)
from src.services.speech.base import BaseSpeechClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/speech", tags=["speech"])

SPEECH_MEDIA_TYPE = "audio/wav"


@router.post("/transcriptions", response_model=TranscriptionResult)
async def transcribe(
    file: UploadFile = File(...),
    language: str = Form(None),
    speech_client: BaseSpeechClient = Depends(get_speech_client),
):
    """Transcribe an uploaded audio file."""
    settings = get_settings()
    mime_type = file.content_type or ""
    if not mime_type.startswith("audio/"):
        raise InvalidFileTypeError(mime_type)
    data = await file.read()
    if len(data) > settings.max_upload_bytes:
        raise FileTooLargeError(len(data), settings.max_upload_bytes)
    return await speech_client.transcribe(
        data, language or settings.default_language, mime_type
    )


@router.post("/synthesis")
async def synthesize(
    body: SpeechRequest,
    speech_client: BaseSpeechClient = Depends(get_speech_client),
):
    """Convert text to speech; ``stream=true`` relays chunks as they arrive."""
    if not body.stream:
        audio = await speech_client.synthesize(body.text, body.voice, body.language)
        return Response(content=audio, media_type=SPEECH_MEDIA_TYPE)

    chunks = speech_client.synthesize_stream(body.text, body.voice, body.language)
    # Pull the first chunk here so provider errors surface before headers are sent.
    first = await anext(chunks, b"")

    async def relay():
        if first:
            yield first
        async for chunk in chunks:
            yield chunk

    return StreamingResponse(relay(), media_type=SPEECH_MEDIA_TYPE)


@router.get("/voices", response_model=list[VoiceInfo])
async def list_voices(
    language: str | None = Query(None),
    speech_client: BaseSpeechClient = Depends(get_speech_client),
):
    return await speech_client.list_voices(language)


@router.get("/languages", response_model=list[LanguageInfo])
async def list_languages(speech_client: BaseSpeechClient = Depends(get_speech_client)):
    return await speech_client.list_languages()


@router.get("/status", response_model=SpeechStatusResponse)
async def speech_status(speech_client: BaseSpeechClient = Depends(get_speech_client)):
    """Which provider is active and whether an API key is configured."""
    return SpeechStatusResponse(
        provider=speech_client.provider,
        api_key_configured=bool(get_settings().spitch_api_key),
    )
