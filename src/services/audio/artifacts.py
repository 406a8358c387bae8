"""Value types owned by the audio controller.

The current artifact is a tagged variant: ``RecordedAudio`` or
``UploadedAudio``. Each wraps a ``BlobHandle`` that the controller
releases on clear, so a stale reference fails loudly instead of
returning audio that was already discarded.
"""

from dataclasses import dataclass, field
from typing import ClassVar

from src.core.exceptions import RetrievalError
from src.core.models import AudioSource


class BlobHandle:
    """Owned reference to one binary audio payload."""

    def __init__(self, data: bytes) -> None:
        self._data: bytes | None = data
        self._size = len(data)

    @property
    def size(self) -> int:
        return self._size

    @property
    def released(self) -> bool:
        return self._data is None

    def read(self) -> bytes:
        """Return the payload.

        Raises:
            RetrievalError: If the handle has already been released.
        """
        if self._data is None:
            raise RetrievalError()
        return self._data

    def release(self) -> None:
        self._data = None

    def __repr__(self) -> str:
        state = "released" if self.released else f"{self._size} bytes"
        return f"<BlobHandle {state}>"


@dataclass
class RecordingSession:
    """One active capture, from start to stop."""

    started_at: float
    active: bool = True
    elapsed_seconds: float = 0.0
    chunks: list[bytes] = field(default_factory=list)


@dataclass
class RecordedAudio:
    """Artifact finalized from a recording session.

    ``duration_seconds`` is the measured elapsed time of the session.
    """

    source_kind: ClassVar[AudioSource] = AudioSource.recorded

    handle: BlobHandle
    mime_type: str
    byte_size: int
    duration_seconds: float


@dataclass
class UploadedAudio:
    """Artifact ingested from a user-selected file.

    Duration stays ``None`` until the media element reports it.
    """

    source_kind: ClassVar[AudioSource] = AudioSource.uploaded

    handle: BlobHandle
    mime_type: str
    byte_size: int
    filename: str | None = None
    duration_seconds: float | None = None


AudioArtifact = RecordedAudio | UploadedAudio


@dataclass
class PlaybackState:
    """Observations derived from media element events."""

    is_playing: bool = False
    current_time: float = 0.0
    duration: float = 0.0
    ready: bool = False


@dataclass(frozen=True)
class SavedAudio:
    """Payload handed to the caller by ``AudioController.save()``."""

    data: bytes
    source_kind: AudioSource
    mime_type: str
    duration_seconds: float | None
    artifact: AudioArtifact
