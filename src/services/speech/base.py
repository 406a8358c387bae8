"""
Abstract base class for speech API providers.

The hosted Spitch API and the offline demo provider both implement this
interface so routes and the UI never branch on which one is configured.
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

from src.core.models import LanguageInfo, TranscriptionResult, VoiceInfo


class BaseSpeechClient(ABC):
    """Interface that every speech provider must implement."""

    provider: str = "base"

    @abstractmethod
    async def transcribe(
        self,
        data: bytes,
        language: str,
        mime_type: str = "audio/wav",
    ) -> TranscriptionResult:
        """Transcribe one audio payload.

        Args:
            data: Encoded audio bytes.
            language: Language name (``"yoruba"``) or code (``"yo"``).
            mime_type: Mime type of *data*.

        Returns:
            TranscriptionResult with text, timed segments and request id.

        Raises:
            TranscriptionFailedError: If the provider rejects the request.
        """

    @abstractmethod
    async def synthesize(self, text: str, voice: str, language: str) -> bytes:
        """Convert text to speech and return the audio bytes.

        Raises:
            SpeechGenerationFailedError: If the provider rejects the request.
        """

    @abstractmethod
    def synthesize_stream(
        self, text: str, voice: str, language: str
    ) -> AsyncIterator[bytes]:
        """Convert text to speech, yielding audio bytes as they arrive."""

    @abstractmethod
    async def list_voices(self, language: str | None = None) -> list[VoiceInfo]:
        """Return the voices available, optionally filtered by language."""

    @abstractmethod
    async def list_languages(self) -> list[LanguageInfo]:
        """Return the languages the provider supports."""

    async def close(self) -> None:
        """Release provider resources."""
