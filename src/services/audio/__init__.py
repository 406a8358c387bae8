"""
Audio module - Capture, playback and PCM processing.

PortAudio-backed devices live in ``src.services.audio.sounddevice_io`` and
are imported on demand so the rest of the package works without an audio
backend installed.
"""

from .artifacts import (
    AudioArtifact,
    BlobHandle,
    PlaybackState,
    RecordedAudio,
    RecordingSession,
    SavedAudio,
    UploadedAudio,
)
from .controller import AudioController
from .devices import CaptureConstraints, CaptureStream, MediaElement, Microphone
from .processor import AudioProcessor

__all__ = [
    "AudioArtifact",
    "AudioController",
    "AudioProcessor",
    "BlobHandle",
    "CaptureConstraints",
    "CaptureStream",
    "MediaElement",
    "Microphone",
    "PlaybackState",
    "RecordedAudio",
    "RecordingSession",
    "SavedAudio",
    "UploadedAudio",
]
