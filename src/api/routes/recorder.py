"""
Recorder REST endpoints.

Thin wrappers over the app's ``AudioController``: every state-changing
call returns the controller snapshot so clients can render it directly.
"""

import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import Response

from src.api.deps import get_controller, get_speech_client
from src.core.config import get_settings
from src.core.models import RecorderSnapshot, RecorderTranscriptionResponse
from src.services.audio.controller import AudioController
from src.services.speech.base import BaseSpeechClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/recorder", tags=["recorder"])


@router.get("", response_model=RecorderSnapshot)
async def get_recorder(controller: AudioController = Depends(get_controller)):
    """Current state, artifact metadata and playback observations."""
    return controller.snapshot()


@router.post("/start", response_model=RecorderSnapshot)
async def start_recording(controller: AudioController = Depends(get_controller)):
    await controller.start_recording()
    return controller.snapshot()


@router.post("/stop", response_model=RecorderSnapshot)
async def stop_recording(controller: AudioController = Depends(get_controller)):
    await controller.stop_recording()
    return controller.snapshot()


@router.post("/upload", response_model=RecorderSnapshot)
async def upload_audio(
    file: UploadFile = File(...),
    controller: AudioController = Depends(get_controller),
):
    """Make an uploaded audio file the current artifact."""
    data = await file.read()
    await controller.upload_file(data, file.content_type, file.filename)
    return controller.snapshot()


@router.post("/toggle", response_model=RecorderSnapshot)
async def toggle_play_pause(controller: AudioController = Depends(get_controller)):
    await controller.toggle_play_pause()
    return controller.snapshot()


@router.post("/clear", response_model=RecorderSnapshot)
async def clear_audio(controller: AudioController = Depends(get_controller)):
    await controller.clear()
    return controller.snapshot()


@router.get("/audio")
async def get_audio(controller: AudioController = Depends(get_controller)):
    """Return the current artifact's bytes with its mime type."""
    saved = await controller.save()
    return Response(
        content=saved.data,
        media_type=saved.mime_type,
        headers={"X-Audio-Source": str(saved.source_kind)},
    )


@router.post("/transcribe", response_model=RecorderTranscriptionResponse)
async def transcribe_current(
    language: str = Form(None),
    controller: AudioController = Depends(get_controller),
    speech_client: BaseSpeechClient = Depends(get_speech_client),
):
    """Transcribe the current artifact with the configured speech provider."""
    language = language or get_settings().default_language
    saved = await controller.save()
    result = await speech_client.transcribe(saved.data, language, saved.mime_type)
    return RecorderTranscriptionResponse(
        source_kind=saved.source_kind,
        language=language,
        transcription=result,
    )
