"""Audio processing utilities for PCM data.

Packages raw PCM fragments into WAV payloads and decodes stored or
uploaded payloads into float32 sample arrays for playback.
"""

import io
import wave

import numpy as np
import soundfile as sf
from pydub import AudioSegment

# Formats libsndfile reads natively; everything else goes through ffmpeg via pydub.
_SOUNDFILE_FORMATS = {"wav", "flac", "ogg"}

_MIME_TO_FORMAT = {
    "audio/wav": "wav",
    "audio/wave": "wav",
    "audio/x-wav": "wav",
    "audio/flac": "flac",
    "audio/x-flac": "flac",
    "audio/ogg": "ogg",
    "audio/mpeg": "mp3",
    "audio/mp3": "mp3",
    "audio/mp4": "mp4",
    "audio/x-m4a": "mp4",
    "audio/aac": "aac",
    "audio/webm": "webm",
}


def mime_to_format(mime_type: str) -> str | None:
    """Return the container format for *mime_type*, ignoring parameters."""
    base = mime_type.split(";", 1)[0].strip().lower()
    return _MIME_TO_FORMAT.get(base)


class AudioProcessor:
    """Handles PCM audio data conversion.

    Provides utilities for converting raw PCM bytes to numpy arrays,
    packaging them as WAV, and decoding encoded payloads for playback.
    """

    def __init__(
        self,
        sample_rate: int = 22050,
        sample_width: int = 2,
        channels: int = 1,
    ) -> None:
        """Initialize the audio processor.

        Args:
            sample_rate: Audio sample rate in Hz (default: 22.05 kHz).
            sample_width: Bytes per sample (2 = 16-bit signed PCM).
            channels: Number of audio channels (1 = mono).
        """
        self.sample_rate = sample_rate
        self.sample_width = sample_width
        self.channels = channels

    @property
    def frame_size(self) -> int:
        return self.sample_width * self.channels

    def pcm_duration(self, pcm_data: bytes) -> float:
        """Duration in seconds of raw PCM bytes."""
        return len(pcm_data) / (self.sample_rate * self.frame_size)

    def pcm_to_ndarray(self, pcm_data: bytes) -> np.ndarray:
        """Convert raw PCM bytes (16-bit signed) to float32 numpy array.

        Args:
            pcm_data: Raw PCM bytes (16-bit).

        Returns:
            Float32 numpy array normalized to [-1.0, 1.0].

        Raises:
            ValueError: If data length is not aligned to sample frame size.
        """
        if len(pcm_data) % self.frame_size != 0:
            raise ValueError(
                f"PCM data length ({len(pcm_data)}) is not aligned to frame size "
                f"({self.frame_size})"
            )
        # Convert 16-bit signed integers to float32 in [-1.0, 1.0] range
        return np.frombuffer(pcm_data, dtype=np.int16).astype(np.float32) / 32768.0

    def pcm_to_wav_bytes(self, pcm_data: bytes) -> bytes:
        """Wrap raw PCM bytes in a WAV container.

        Trailing bytes that do not form a whole frame are dropped.
        """
        usable = len(pcm_data) - (len(pcm_data) % self.frame_size)
        buf = io.BytesIO()
        with wave.open(buf, "wb") as wf:
            wf.setnchannels(self.channels)
            wf.setsampwidth(self.sample_width)
            wf.setframerate(self.sample_rate)
            wf.writeframes(pcm_data[:usable])
        return buf.getvalue()

    def decode(self, data: bytes, mime_type: str) -> tuple[np.ndarray, int]:
        """Decode an encoded payload to a 2-D float32 array.

        Args:
            data: Encoded audio (WAV, FLAC, OGG, MP3, WebM, ...).
            mime_type: Mime type used to pick the decoder.

        Returns:
            Tuple of (samples shaped ``(frames, channels)``, sample_rate).

        Raises:
            ValueError: If the payload cannot be decoded.
        """
        fmt = mime_to_format(mime_type)
        if fmt in _SOUNDFILE_FORMATS:
            samples, rate = sf.read(io.BytesIO(data), dtype="float32", always_2d=True)
            return samples, int(rate)

        try:
            segment = AudioSegment.from_file(io.BytesIO(data), format=fmt)
        except Exception as exc:
            raise ValueError(f"Cannot decode {mime_type} audio: {exc}") from exc
        raw = np.array(segment.get_array_of_samples(), dtype=np.float32)
        scale = float(1 << (8 * segment.sample_width - 1))
        samples = (raw / scale).reshape(-1, segment.channels)
        return samples, segment.frame_rate
