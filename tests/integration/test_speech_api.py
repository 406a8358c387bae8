"""Integration tests for the speech endpoints against the demo provider."""


async def test_transcribe_upload(async_client, sample_wav_bytes):
    resp = await async_client.post(
        "/api/v1/speech/transcriptions",
        files={"file": ("clip.wav", sample_wav_bytes, "audio/wav")},
        data={"language": "hausa"},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["text"].startswith("Yaya kake yau?")
    assert body["segments"][0]["start"] == 0.0


async def test_transcribe_rejects_non_audio(async_client):
    resp = await async_client.post(
        "/api/v1/speech/transcriptions",
        files={"file": ("doc.pdf", b"%PDF", "application/pdf")},
    )
    assert resp.status_code == 415


async def test_synthesis(async_client):
    resp = await async_client.post(
        "/api/v1/speech/synthesis",
        json={"text": "Bawo ni", "voice": "sade", "language": "yoruba"},
    )
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "audio/wav"
    assert resp.content[:4] == b"RIFF"


async def test_synthesis_stream(async_client):
    buffered = await async_client.post(
        "/api/v1/speech/synthesis", json={"text": "Bawo ni", "voice": "sade"}
    )
    streamed = await async_client.post(
        "/api/v1/speech/synthesis", json={"text": "Bawo ni", "voice": "sade", "stream": True}
    )
    assert streamed.status_code == 200
    assert streamed.content == buffered.content


async def test_synthesis_rejects_empty_text(async_client):
    resp = await async_client.post("/api/v1/speech/synthesis", json={"text": ""})
    assert resp.status_code == 422
    assert resp.json()["code"] == "VALIDATION_ERROR"


async def test_voices_and_languages(async_client):
    voices = (await async_client.get("/api/v1/speech/voices", params={"language": "yoruba"})).json()
    assert [v["id"] for v in voices] == ["sade", "femi"]

    languages = (await async_client.get("/api/v1/speech/languages")).json()
    assert {lang["code"] for lang in languages} == {"yoruba", "igbo", "hausa"}


async def test_status(async_client):
    resp = await async_client.get("/api/v1/speech/status")
    assert resp.json()["provider"] == "demo"
