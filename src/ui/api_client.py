"""
Synchronous HTTP client for the Afroglot backend API.

Uses ``httpx.Client`` (sync) because Streamlit scripts run synchronously.
"""

import json
import logging

import httpx
import streamlit as st

logger = logging.getLogger(__name__)


# Backend status -> what the user has to do about it.
_STATUS_CATEGORIES = {
    401: "auth",  # token missing or unknown
    403: "permission",  # microphone denied on the backend host
    413: "file",
    415: "file",
    422: "validation",
    502: "server",  # speech provider or CDN rejected the request
}


class APIError(Exception):
    """User-friendly API error with categorized message.

    Categories: "connection", "timeout", "network", "unknown" for transport
    failures; "auth", "permission", "file", "validation", "server", "http"
    for backend responses (see ``_STATUS_CATEGORIES``). ``code`` carries the
    backend envelope code, e.g. "RECORDING_ALREADY_ACTIVE".
    """

    def __init__(self, message: str, category: str = "unknown", code: str | None = None) -> None:
        self.message = message
        self.category = category
        self.code = code
        super().__init__(message)


class APIClient:
    """Thin synchronous wrapper around httpx for calling the FastAPI backend.

    Uses synchronous HTTP because Streamlit scripts run on a single thread.
    All methods return parsed JSON or bytes, or raise ``APIError`` with
    user-friendly messages for display in the UI.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        token: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the HTTP client.

        Args:
            base_url: Base URL of the Afroglot FastAPI backend.
            token: Bearer token identifying the user (multi-user deployments).
            transport: Optional httpx transport (tests use ``httpx.MockTransport``).
        """
        self._base_url = base_url.rstrip("/")
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._client = httpx.Client(
            base_url=self._base_url,
            headers=headers,
            timeout=30.0,
            transport=transport,
        )

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """Execute an HTTP request with user-friendly error handling.

        Args:
            method: HTTP method name ("get", "post", "delete").
            path: API endpoint path (e.g. "/api/v1/library").
            **kwargs: Passed through to httpx (json, params, files, timeout, etc.).

        Returns:
            The httpx Response object with a successful status code.

        Raises:
            APIError: On connection, timeout, HTTP status, or network errors.
        """
        try:
            resp = getattr(self._client, method)(path, **kwargs)
            resp.raise_for_status()
            return resp
        except httpx.ConnectError:
            raise APIError(
                "Backend server is not running. "
                "Start it with: `uvicorn src.api.app:app --reload --port 8000`",
                category="connection",
            ) from None
        except httpx.TimeoutException:
            raise APIError(
                "Request timed out. The server may be overloaded.",
                category="timeout",
            ) from None
        except httpx.HTTPStatusError as exc:
            code = None
            try:
                body = exc.response.json()
                detail = body.get("detail", exc.response.text)
                code = body.get("code")
            except Exception:
                detail = exc.response.text or str(exc)
            category = _STATUS_CATEGORIES.get(exc.response.status_code, "http")
            raise APIError(str(detail), category=category, code=code) from None
        except httpx.HTTPError as exc:
            raise APIError(f"Network error: {exc}", category="network") from None

    # -- health --

    def health_check(self) -> dict:
        return self._request("get", "/health").json()

    def check_connection(self) -> tuple[bool, str]:
        """Check if the backend is reachable. Returns (ok, message)."""
        try:
            self.health_check()
            return True, "Connected"
        except APIError as exc:
            return False, exc.message

    # -- recorder --

    def recorder_state(self) -> dict:
        return self._request("get", "/api/v1/recorder").json()

    def start_recording(self) -> dict:
        return self._request("post", "/api/v1/recorder/start").json()

    def stop_recording(self) -> dict:
        return self._request("post", "/api/v1/recorder/stop").json()

    def upload_audio(self, data: bytes, filename: str, mime_type: str) -> dict:
        return self._request(
            "post",
            "/api/v1/recorder/upload",
            files={"file": (filename, data, mime_type)},
            timeout=120.0,
        ).json()

    def toggle_playback(self) -> dict:
        return self._request("post", "/api/v1/recorder/toggle").json()

    def clear_audio(self) -> dict:
        return self._request("post", "/api/v1/recorder/clear").json()

    def download_recorder_audio(self) -> tuple[bytes, str] | None:
        """Fetch the current recorder audio as (bytes, mime type). None on error."""
        try:
            resp = self._request("get", "/api/v1/recorder/audio")
        except APIError:
            return None
        return resp.content, resp.headers.get("content-type", "audio/wav")

    def transcribe_recorder(self, language: str) -> dict:
        return self._request(
            "post",
            "/api/v1/recorder/transcribe",
            data={"language": language},
            timeout=120.0,
        ).json()

    # -- speech --

    def transcribe(self, data: bytes, filename: str, mime_type: str, language: str) -> dict:
        return self._request(
            "post",
            "/api/v1/speech/transcriptions",
            files={"file": (filename, data, mime_type)},
            data={"language": language},
            timeout=120.0,
        ).json()

    def synthesize(self, text: str, voice: str, language: str) -> bytes:
        return self._request(
            "post",
            "/api/v1/speech/synthesis",
            json={"text": text, "voice": voice, "language": language},
            timeout=120.0,
        ).content

    def list_voices(self, language: str | None = None) -> list[dict]:
        params = {"language": language} if language else None
        return self._request("get", "/api/v1/speech/voices", params=params).json()

    def list_languages(self) -> list[dict]:
        return self._request("get", "/api/v1/speech/languages").json()

    def speech_status(self) -> dict:
        return self._request("get", "/api/v1/speech/status").json()

    # -- library --

    def list_saved_items(self, item_type: str | None = None) -> list[dict]:
        params = {"type": item_type} if item_type else None
        return self._request("get", "/api/v1/library", params=params).json()

    def save_item(
        self,
        metadata: dict,
        audio: bytes | None = None,
        mime_type: str = "audio/wav",
        use_recorder_audio: bool = False,
    ) -> dict:
        """Save text (and audio) to the library; metadata uses camelCase keys."""
        data = {"metadata": json.dumps(metadata)}
        if use_recorder_audio:
            data["use_recorder_audio"] = "true"
        files = {"audio": ("audio.wav", audio, mime_type)} if audio else None
        return self._request(
            "post", "/api/v1/library", data=data, files=files, timeout=180.0
        ).json()

    def list_stalled(self) -> dict:
        return self._request("get", "/api/v1/library/stalled").json()

    def cancel_stalled(self, ids: list[str]) -> dict:
        return self._request(
            "post", "/api/v1/library/stalled/cancel", json={"ids": ids}
        ).json()

    def delete_saved_item(self, item_id: str) -> dict:
        return self._request("delete", f"/api/v1/library/{item_id}").json()


@st.cache_resource
def get_api_client(base_url: str = "http://localhost:8000", token: str | None = None) -> APIClient:
    """Return a cached APIClient, keyed by base_url and token.

    Uses Streamlit's ``cache_resource`` to persist the client across reruns.
    When the base URL or token changes (e.g. user updates sidebar), a new
    client is created automatically because the cache key includes them.
    """
    return APIClient(base_url=base_url, token=token)
