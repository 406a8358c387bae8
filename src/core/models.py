"""
Pydantic v2 request / response models used across the API layer.

v0.1.0: Recorder, Speech (STT/TTS), Library, Media upload, Error
"""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    """GET /health response."""

    status: str = "ok"
    version: str = "0.1.0"
    timestamp: datetime


# ---------------------------------------------------------------------------
# Recorder
# ---------------------------------------------------------------------------


class AudioSource(StrEnum):
    """Where the current artifact came from."""

    recorded = "recorded"
    uploaded = "uploaded"


class RecorderState(StrEnum):
    """States of the audio capture/playback controller."""

    idle = "idle"
    recording = "recording"
    ready = "ready"
    playing = "playing"
    paused = "paused"


class PlaybackStateResponse(BaseModel):
    """Playback observations derived from media element events."""

    is_playing: bool = False
    current_time: float = 0.0
    duration: float = 0.0
    ready: bool = False


class RecorderSnapshot(BaseModel):
    """Serializable view of the controller returned by recorder endpoints."""

    state: RecorderState
    source_kind: AudioSource | None = None
    mime_type: str | None = None
    byte_size: int = 0
    elapsed_seconds: float = 0.0
    playback: PlaybackStateResponse = Field(default_factory=PlaybackStateResponse)


# ---------------------------------------------------------------------------
# Speech
# ---------------------------------------------------------------------------


class TranscriptionSegment(BaseModel):
    """A single transcription segment with timestamps (seconds)."""

    start: float
    end: float
    text: str
    speaker: int | str | None = None


class TranscriptionResult(BaseModel):
    """Complete transcription result returned by the speech API."""

    text: str
    segments: list[TranscriptionSegment] = Field(default_factory=list)
    request_id: str | None = None


class RecorderTranscriptionResponse(BaseModel):
    """POST /recorder/transcribe response."""

    source_kind: AudioSource
    language: str
    transcription: TranscriptionResult


class SpeechRequest(BaseModel):
    """POST /speech/synthesis request body."""

    text: str = Field(min_length=1)
    voice: str = "sade"
    language: str = "yoruba"
    stream: bool = False


class VoiceInfo(BaseModel):
    """A synthesis voice offered by the provider."""

    id: str
    name: str = ""
    gender: str | None = None


class LanguageInfo(BaseModel):
    """A language offered by the provider."""

    code: str
    name: str = ""


class SpeechStatusResponse(BaseModel):
    """GET /speech/status response."""

    provider: str
    api_key_configured: bool


# ---------------------------------------------------------------------------
# Media upload
# ---------------------------------------------------------------------------


class UploadResult(BaseModel):
    """Normalized media CDN upload response."""

    url: str
    public_id: str
    format: str | None = None
    duration: float | None = None
    resource_type: str | None = None


# ---------------------------------------------------------------------------
# Library (saved items)
# ---------------------------------------------------------------------------


class SavedItemType(StrEnum):
    """What produced a saved item."""

    speech_to_text = "speech-to-text"
    text_to_speech = "text-to-speech"


class SavedItemCreate(BaseModel):
    """Metadata for POST /library (audio travels as a separate form part)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    text: str = ""
    language: str = "yoruba"
    type: SavedItemType = SavedItemType.speech_to_text
    voice_gender: str | None = None
    voice: str | None = None
    segments: list[TranscriptionSegment] | None = None


class SavedItemResponse(BaseModel):
    """Persisted record shape, serialized with the document store's field names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    id: str
    user_id: str
    text: str = ""
    language: str = "yoruba"
    type: SavedItemType
    voice_gender: str | None = None
    voice: str | None = None
    timestamp: str
    segments: list[TranscriptionSegment] | None = None
    is_processing: bool = False
    processing_start_time: int
    audio_url: str | None = Field(default=None, alias="audioURL")
    audio_public_id: str | None = None
    audio_duration: float | None = None
    audio_format: str | None = None
    audio_error: bool = False
    error_message: str | None = None


class StalledItemsResponse(BaseModel):
    """GET /library/stalled response."""

    threshold_ms: int
    items: list[SavedItemResponse] = Field(default_factory=list)


class CancelStalledRequest(BaseModel):
    """POST /library/stalled/cancel request body."""

    ids: list[str] = Field(default_factory=list)


class CancelStalledResponse(BaseModel):
    """POST /library/stalled/cancel response."""

    cancelled: list[str] = Field(default_factory=list)


class DeleteSavedItemResponse(BaseModel):
    """DELETE /library/{id} response."""

    id: str
    deleted: bool = True
    audio_deleted: bool = False
