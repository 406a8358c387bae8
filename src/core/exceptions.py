"""
Afroglot exception hierarchy.

All application-specific exceptions inherit from AfroglotError,
enabling centralized error handling in the API middleware layer.
"""

from datetime import UTC, datetime


class AfroglotError(Exception):
    """Base exception for all Afroglot errors."""

    def __init__(
        self,
        detail: str = "An unexpected error occurred",
        code: str = "AFROGLOT_ERROR",
        status_code: int = 500,
    ) -> None:
        self.detail = detail
        self.code = code
        self.status_code = status_code
        self.timestamp = datetime.now(UTC).isoformat()
        super().__init__(detail)


# ---------------------------------------------------------------------------
# Audio controller
# ---------------------------------------------------------------------------


class PermissionDeniedError(AfroglotError):
    """Raised when the host refuses microphone access."""

    def __init__(
        self, detail: str = "Please allow microphone access to use this feature"
    ) -> None:
        super().__init__(detail=detail, code="PERMISSION_DENIED", status_code=403)


class InvalidFileTypeError(AfroglotError):
    """Raised when an uploaded file is not audio."""

    def __init__(self, mime_type: str | None = None) -> None:
        super().__init__(
            detail=f"Please upload an audio file (got {mime_type or 'unknown type'})",
            code="INVALID_FILE_TYPE",
            status_code=415,
        )


class FileTooLargeError(AfroglotError):
    """Raised when an uploaded file exceeds the size limit."""

    def __init__(self, size: int, limit: int) -> None:
        super().__init__(
            detail=f"Maximum file size is {limit // (1024 * 1024)}MB (got {size} bytes)",
            code="FILE_TOO_LARGE",
            status_code=413,
        )


class PlaybackError(AfroglotError):
    """Raised when the media element rejects a play request."""

    def __init__(self, detail: str = "There was an error playing the audio") -> None:
        super().__init__(detail=detail, code="PLAYBACK_ERROR", status_code=409)


class CaptureError(AfroglotError):
    """Raised when the capture device fails and nothing was recorded."""

    def __init__(self, detail: str = "The recording could not be finished") -> None:
        super().__init__(detail=detail, code="CAPTURE_FAILED", status_code=500)


class RetrievalError(AfroglotError):
    """Raised when an artifact's binary content can no longer be read."""

    def __init__(self, detail: str = "Audio content is no longer available") -> None:
        super().__init__(detail=detail, code="RETRIEVAL_ERROR", status_code=410)


class RecorderStateError(AfroglotError):
    """Raised when a controller operation is not valid in the current state."""

    def __init__(self, detail: str, code: str = "INVALID_RECORDER_STATE") -> None:
        super().__init__(detail=detail, code=code, status_code=409)


class RecordingAlreadyActiveError(RecorderStateError):
    """Raised when trying to start a recording while one is already active."""

    def __init__(self) -> None:
        super().__init__(
            detail="A recording is already active",
            code="RECORDING_ALREADY_ACTIVE",
        )


class NoAudioError(AfroglotError):
    """Raised when an operation needs a current artifact and there is none."""

    def __init__(self) -> None:
        super().__init__(
            detail="Please record or upload audio first",
            code="NO_AUDIO",
            status_code=404,
        )


# ---------------------------------------------------------------------------
# External providers
# ---------------------------------------------------------------------------


class SpeechAPIError(AfroglotError):
    """Raised when a speech API call fails for reasons other than STT/TTS."""

    def __init__(self, detail: str = "Speech API request failed") -> None:
        super().__init__(detail=detail, code="SPEECH_API_ERROR", status_code=502)


class TranscriptionFailedError(AfroglotError):
    """Raised when the provider rejects or garbles a transcription request."""

    def __init__(self, detail: str = "Transcription failed") -> None:
        super().__init__(detail=detail, code="TRANSCRIPTION_FAILED", status_code=502)


class SpeechGenerationFailedError(AfroglotError):
    """Raised when the provider rejects a text-to-speech request."""

    def __init__(self, detail: str = "Text-to-speech conversion failed") -> None:
        super().__init__(detail=detail, code="SPEECH_GENERATION_FAILED", status_code=502)


class MediaUploadError(AfroglotError):
    """Raised when the media CDN rejects an upload."""

    def __init__(self, detail: str = "Failed to upload to Cloudinary") -> None:
        super().__init__(detail=detail, code="MEDIA_UPLOAD_ERROR", status_code=502)


# ---------------------------------------------------------------------------
# Library
# ---------------------------------------------------------------------------


class SaveError(AfroglotError):
    """Raised when a saved item could not be persisted at all."""

    def __init__(self, detail: str = "There was an error saving your item") -> None:
        super().__init__(detail=detail, code="SAVE_ERROR", status_code=500)


class SavedItemNotFoundError(AfroglotError):
    """Raised when a saved item ID does not exist for the user."""

    def __init__(self, item_id: str) -> None:
        super().__init__(
            detail=f"Saved item not found: {item_id}",
            code="SAVED_ITEM_NOT_FOUND",
            status_code=404,
        )


class NotImplementedYetError(AfroglotError):
    """Raised for operations that are deliberately left unimplemented."""

    def __init__(self, feature: str = "This feature") -> None:
        super().__init__(
            detail=f"{feature} is not implemented yet",
            code="NOT_IMPLEMENTED",
            status_code=501,
        )
