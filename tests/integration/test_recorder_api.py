"""Integration tests for the recorder endpoints.

The controller behind the API runs on fake devices, so these tests walk
the full record -> play -> transcribe -> clear flow over HTTP.
"""

from src.core.exceptions import PermissionDeniedError


async def test_initial_state(async_client):
    resp = await async_client.get("/api/v1/recorder")
    assert resp.status_code == 200
    body = resp.json()
    assert body["state"] == "idle"
    assert body["source_kind"] is None
    assert body["playback"] == {
        "is_playing": False,
        "current_time": 0.0,
        "duration": 0.0,
        "ready": False,
    }


async def test_record_play_transcribe_clear(async_client, microphone, clock):
    resp = await async_client.post("/api/v1/recorder/start")
    assert resp.json()["state"] == "recording"

    microphone.last_stream.emit(b"voice-bytes")
    clock.advance(3.0)

    resp = await async_client.post("/api/v1/recorder/stop")
    body = resp.json()
    assert body["state"] == "ready"
    assert body["source_kind"] == "recorded"
    assert body["byte_size"] == len(b"voice-bytes")
    assert body["playback"]["duration"] == 3.0

    resp = await async_client.post("/api/v1/recorder/toggle")
    assert resp.json()["state"] == "playing"

    resp = await async_client.get("/api/v1/recorder/audio")
    assert resp.status_code == 200
    assert resp.content == b"voice-bytes"
    assert resp.headers["content-type"] == "audio/webm"
    assert resp.headers["x-audio-source"] == "recorded"

    resp = await async_client.post("/api/v1/recorder/transcribe", data={"language": "igbo"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["source_kind"] == "recorded"
    assert body["language"] == "igbo"
    assert body["transcription"]["text"].startswith("Kedu")

    resp = await async_client.post("/api/v1/recorder/clear")
    assert resp.json()["state"] == "idle"


async def test_double_start_conflict(async_client):
    await async_client.post("/api/v1/recorder/start")
    resp = await async_client.post("/api/v1/recorder/start")
    assert resp.status_code == 409
    body = resp.json()
    assert body["code"] == "RECORDING_ALREADY_ACTIVE"
    assert set(body) == {"detail", "code", "timestamp"}


async def test_permission_denied(async_client, microphone):
    microphone.deny = True
    resp = await async_client.post("/api/v1/recorder/start")
    assert resp.status_code == 403
    assert resp.json()["code"] == "PERMISSION_DENIED"
    assert resp.json()["detail"] == PermissionDeniedError().detail


async def test_upload_audio(async_client, sample_wav_bytes):
    resp = await async_client.post(
        "/api/v1/recorder/upload",
        files={"file": ("hello.wav", sample_wav_bytes, "audio/wav")},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["source_kind"] == "uploaded"
    assert body["mime_type"] == "audio/wav"
    assert body["playback"]["ready"] is True


async def test_upload_rejects_non_audio(async_client):
    resp = await async_client.post(
        "/api/v1/recorder/upload",
        files={"file": ("notes.txt", b"hello", "text/plain")},
    )
    assert resp.status_code == 415
    assert resp.json()["code"] == "INVALID_FILE_TYPE"


async def test_audio_without_artifact(async_client):
    resp = await async_client.get("/api/v1/recorder/audio")
    assert resp.status_code == 404
    assert resp.json()["code"] == "NO_AUDIO"


async def test_stop_without_recording(async_client):
    resp = await async_client.post("/api/v1/recorder/stop")
    assert resp.status_code == 409
    assert resp.json()["code"] == "INVALID_RECORDER_STATE"
