"""Offline speech provider used when no Spitch API key is configured."""

import logging
from collections.abc import AsyncIterator

import numpy as np

from src.core.languages import DEFAULT_LANGUAGES, VOICES_BY_LANGUAGE
from src.core.models import LanguageInfo, TranscriptionResult, TranscriptionSegment, VoiceInfo
from src.services.audio.processor import AudioProcessor
from src.services.speech.base import BaseSpeechClient

logger = logging.getLogger(__name__)

DEMO_TRANSCRIPTIONS: dict[str, str] = {
    "yoruba": "Báwo ni o ṣe wà lónìí? Mo dúpẹ́ fún ìbẹ̀wò rẹ sí Afroglot.",
    "igbo": "Kedu ka ị mere taa? Daalụ maka ịbịa na Afroglot.",
    "hausa": "Yaya kake yau? Na gode da ziyartar Afroglot.",
}

DEMO_SEGMENTS = [
    TranscriptionSegment(start=0.0, end=2.5, text="Báwo ni o ṣe wà lónìí?", speaker=1),
    TranscriptionSegment(
        start=2.8, end=5.2, text="Mo dúpẹ́ fún ìbẹ̀wò rẹ sí Afroglot.", speaker=1
    ),
]

_CHUNK_BYTES = 16 * 1024


class DemoSpeechClient(BaseSpeechClient):
    """Returns canned transcriptions and a generated tone for speech.

    Args:
        sample_rate: Sample rate of the generated tone.
        seconds_per_word: Tone length per input word.
    """

    provider = "demo"

    def __init__(self, sample_rate: int = 22050, seconds_per_word: float = 0.4) -> None:
        self._processor = AudioProcessor(sample_rate=sample_rate)
        self._seconds_per_word = seconds_per_word

    async def transcribe(
        self,
        data: bytes,
        language: str,
        mime_type: str = "audio/wav",
    ) -> TranscriptionResult:
        logger.info("Demo transcription for %s (%d bytes)", language, len(data))
        return TranscriptionResult(
            text=DEMO_TRANSCRIPTIONS.get(language.lower(), "Demo transcription text"),
            segments=[seg.model_copy() for seg in DEMO_SEGMENTS],
            request_id=None,
        )

    def _tone(self, text: str) -> bytes:
        rate = self._processor.sample_rate
        seconds = max(1.0, len(text.split()) * self._seconds_per_word)
        t = np.arange(int(rate * seconds), dtype=np.float32) / rate
        wave_ = 0.2 * np.sin(2 * np.pi * 440.0 * t)
        pcm = (wave_ * 32767).astype("<i2").tobytes()
        return self._processor.pcm_to_wav_bytes(pcm)

    async def synthesize(self, text: str, voice: str, language: str) -> bytes:
        logger.info("Demo speech for %d chars (voice=%s)", len(text), voice)
        return self._tone(text)

    async def synthesize_stream(
        self, text: str, voice: str, language: str
    ) -> AsyncIterator[bytes]:
        payload = self._tone(text)
        for offset in range(0, len(payload), _CHUNK_BYTES):
            yield payload[offset : offset + _CHUNK_BYTES]

    async def list_voices(self, language: str | None = None) -> list[VoiceInfo]:
        if language:
            entries = VOICES_BY_LANGUAGE.get(language.lower(), [])
        else:
            entries = [v for voices in VOICES_BY_LANGUAGE.values() for v in voices]
        return [VoiceInfo(**entry) for entry in entries]

    async def list_languages(self) -> list[LanguageInfo]:
        return [LanguageInfo(**entry) for entry in DEFAULT_LANGUAGES]
