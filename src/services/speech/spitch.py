"""
Spitch speech API provider.

Talks to the hosted Spitch REST API (``https://api.spi-tch.com/v1``) with
``httpx.AsyncClient``. Requests are sent once; any non-2xx response or
transport failure is normalized into the matching Afroglot exception,
using the provider's ``message`` field when the body carries one.
"""

import logging
from collections.abc import AsyncIterator

import httpx

from src.core.exceptions import (
    SpeechAPIError,
    SpeechGenerationFailedError,
    TranscriptionFailedError,
)
from src.core.languages import to_language_code
from src.core.models import LanguageInfo, TranscriptionResult, TranscriptionSegment, VoiceInfo
from src.services.speech.base import BaseSpeechClient

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.spi-tch.com/v1"
MISSING_TEXT = "Transcription failed to return text."


def _error_message(response: httpx.Response, default: str) -> str:
    """Extract the provider's ``message`` field, falling back to *default*."""
    try:
        body = response.json()
    except ValueError:
        return default
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return default


class SpitchClient(BaseSpeechClient):
    """Hosted Spitch speech provider.

    Args:
        api_key: Spitch API key sent as a bearer token.
        base_url: API root (without trailing slash).
        timeout: Request timeout in seconds.
        transport: Optional httpx transport (tests use ``httpx.MockTransport``).
    """

    provider = "spitch"

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=timeout,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Speech to text
    # ------------------------------------------------------------------

    async def transcribe(
        self,
        data: bytes,
        language: str,
        mime_type: str = "audio/wav",
    ) -> TranscriptionResult:
        """Send audio to ``POST /transcriptions`` as multipart form data."""
        code = to_language_code(language)
        logger.info(
            "Transcribing %.1f KB of %s audio (language=%s)",
            len(data) / 1024,
            mime_type,
            code,
        )
        try:
            response = await self._client.post(
                "/transcriptions",
                files={"content": ("recording.wav", data, mime_type)},
                data={"language": code, "timestamp": "true", "multispeaker": "true"},
            )
        except httpx.HTTPError as exc:
            logger.error("Spitch transcription request failed: %s", exc)
            raise TranscriptionFailedError(f"Transcription request failed: {exc}") from exc

        if response.is_error:
            detail = _error_message(response, "Transcription failed")
            logger.error("Spitch transcription error %d: %s", response.status_code, detail)
            raise TranscriptionFailedError(detail)

        try:
            body = response.json()
        except ValueError as exc:
            raise TranscriptionFailedError("Transcription response was not valid JSON") from exc

        segments = [
            TranscriptionSegment(
                start=seg.get("start", 0.0),
                end=seg.get("end", 0.0),
                text=seg.get("text", ""),
                speaker=seg.get("speaker"),
            )
            for seg in body.get("segments") or []
        ]
        result = TranscriptionResult(
            text=body.get("text") or MISSING_TEXT,
            segments=segments,
            request_id=body.get("request_id"),
        )
        logger.info(
            "Transcription complete: %d chars, %d segment(s)",
            len(result.text),
            len(segments),
        )
        return result

    # ------------------------------------------------------------------
    # Text to speech
    # ------------------------------------------------------------------

    def _speech_body(self, text: str, voice: str, language: str) -> dict[str, str]:
        return {"text": text, "voice": voice, "language": to_language_code(language)}

    async def synthesize(self, text: str, voice: str, language: str) -> bytes:
        """Request speech from ``POST /speech`` and return the full payload."""
        try:
            response = await self._client.post(
                "/speech", json=self._speech_body(text, voice, language)
            )
        except httpx.HTTPError as exc:
            logger.error("Spitch speech request failed: %s", exc)
            raise SpeechGenerationFailedError(f"Speech request failed: {exc}") from exc

        if response.is_error:
            detail = _error_message(response, "Text-to-speech conversion failed")
            logger.error("Spitch speech error %d: %s", response.status_code, detail)
            raise SpeechGenerationFailedError(detail)

        logger.info("Generated %.1f KB of speech (voice=%s)", len(response.content) / 1024, voice)
        return response.content

    async def synthesize_stream(
        self, text: str, voice: str, language: str
    ) -> AsyncIterator[bytes]:
        """Request speech from ``POST /speech?stream=true`` and yield chunks."""
        try:
            async with self._client.stream(
                "POST",
                "/speech",
                params={"stream": "true"},
                json=self._speech_body(text, voice, language),
            ) as response:
                if response.is_error:
                    await response.aread()
                    detail = _error_message(response, "Text-to-speech conversion failed")
                    logger.error("Spitch speech error %d: %s", response.status_code, detail)
                    raise SpeechGenerationFailedError(detail)
                async for chunk in response.aiter_bytes():
                    yield chunk
        except httpx.HTTPError as exc:
            logger.error("Spitch speech stream failed: %s", exc)
            raise SpeechGenerationFailedError(f"Speech request failed: {exc}") from exc

    # ------------------------------------------------------------------
    # Catalogue
    # ------------------------------------------------------------------

    async def _get_json(self, path: str, default_error: str, **params) -> dict:
        try:
            response = await self._client.get(path, params=params or None)
        except httpx.HTTPError as exc:
            logger.error("Spitch request %s failed: %s", path, exc)
            raise SpeechAPIError(f"{default_error}: {exc}") from exc
        if response.is_error:
            detail = _error_message(response, default_error)
            logger.error("Spitch %s error %d: %s", path, response.status_code, detail)
            raise SpeechAPIError(detail)
        try:
            return response.json()
        except ValueError as exc:
            raise SpeechAPIError(f"{default_error}: invalid JSON") from exc

    async def list_voices(self, language: str | None = None) -> list[VoiceInfo]:
        params = {"language": language} if language else {}
        body = await self._get_json("/voices", "Failed to fetch voices", **params)
        voices = []
        for entry in body.get("voices") or []:
            if isinstance(entry, str):
                voices.append(VoiceInfo(id=entry, name=entry.title()))
            else:
                voice_id = entry.get("id") or entry.get("name", "")
                voices.append(
                    VoiceInfo(
                        id=voice_id,
                        name=entry.get("name") or voice_id,
                        gender=entry.get("gender"),
                    )
                )
        return voices

    async def list_languages(self) -> list[LanguageInfo]:
        body = await self._get_json("/languages", "Failed to fetch languages")
        languages = []
        for entry in body.get("languages") or []:
            if isinstance(entry, str):
                languages.append(LanguageInfo(code=entry, name=entry.title()))
            else:
                code = entry.get("code") or entry.get("name", "")
                languages.append(LanguageInfo(code=code, name=entry.get("name") or code))
        return languages
