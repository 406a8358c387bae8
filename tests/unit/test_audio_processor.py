"""Tests for AudioProcessor (PCM conversion, WAV packaging and decoding).

Validates that raw PCM bytes are correctly converted to normalised float32
numpy arrays, wrapped into WAV containers, and that encoded payloads are
decoded into 2-D sample arrays.
"""

import io
import wave

import numpy as np
import pytest

from src.services.audio.processor import AudioProcessor, mime_to_format


@pytest.fixture
def processor():
    """Create an AudioProcessor configured for 16 kHz, 16-bit mono audio."""
    return AudioProcessor(sample_rate=16000, sample_width=2, channels=1)


class TestPcmToNdarray:
    """Verify PCM-to-ndarray conversion produces valid float32 samples."""

    def test_converts_pcm_to_float32(self, processor, sample_pcm_bytes):
        result = processor.pcm_to_ndarray(sample_pcm_bytes)
        assert result.dtype == np.float32

    def test_output_range(self, processor, sample_pcm_bytes):
        """Normalised samples fall within [-1.0, 1.0]."""
        result = processor.pcm_to_ndarray(sample_pcm_bytes)
        assert result.max() <= 1.0
        assert result.min() >= -1.0

    def test_correct_sample_count(self, processor, sample_pcm_bytes):
        # 1 second at 16kHz = 16000 samples
        assert len(processor.pcm_to_ndarray(sample_pcm_bytes)) == 16000

    def test_rejects_misaligned_data(self, processor):
        """Raises ValueError when byte length is not a multiple of the frame size."""
        with pytest.raises(ValueError, match="not aligned"):
            processor.pcm_to_ndarray(b"\x00\x00\x00")


class TestPcmToWav:
    """WAV packaging of captured PCM."""

    def test_header_matches_format(self, processor, sample_pcm_bytes):
        payload = processor.pcm_to_wav_bytes(sample_pcm_bytes)
        assert payload[:4] == b"RIFF"
        with wave.open(io.BytesIO(payload), "rb") as wf:
            assert wf.getframerate() == 16000
            assert wf.getnchannels() == 1
            assert wf.getsampwidth() == 2
            assert wf.getnframes() == 16000

    def test_partial_trailing_frame_dropped(self, processor):
        payload = processor.pcm_to_wav_bytes(b"\x01\x00\x02\x00\x03")
        with wave.open(io.BytesIO(payload), "rb") as wf:
            assert wf.getnframes() == 2

    def test_duration(self, processor, sample_pcm_bytes):
        assert processor.pcm_duration(sample_pcm_bytes) == pytest.approx(1.0)


class TestDecode:
    """Decoding encoded payloads for playback."""

    def test_decodes_wav(self, processor, sample_wav_bytes):
        samples, rate = processor.decode(sample_wav_bytes, "audio/wav")
        assert rate == 16000
        assert samples.shape == (16000, 1)
        assert samples.dtype == np.float32

    def test_mime_parameters_ignored(self, processor, sample_wav_bytes):
        samples, rate = processor.decode(sample_wav_bytes, "audio/wav; codecs=1")
        assert rate == 16000

    def test_undecodable_payload_raises(self, processor):
        with pytest.raises(ValueError):
            processor.decode(b"definitely not audio", "audio/webm")


class TestMimeToFormat:
    def test_known_types(self):
        assert mime_to_format("audio/x-wav") == "wav"
        assert mime_to_format("audio/mpeg") == "mp3"
        assert mime_to_format("audio/webm;codecs=opus") == "webm"

    def test_unknown_type(self):
        assert mime_to_format("audio/x-unknown") is None
