"""End-to-end tests: require a running gateway or are skipped."""

import os

import pytest

E2E = os.environ.get("RUN_E2E", "").lower() in ("1", "true", "yes")
pytestmark = pytest.mark.skipif(not E2E, reason="E2E tests disabled (set RUN_E2E=1)")

GATEWAY_URL = os.environ.get("GATEWAY_URL", "http://localhost:8000")


@pytest.mark.asyncio
async def test_gateway_health():
    import httpx

    async with httpx.AsyncClient(timeout=10) as client:
        resp = await client.get(f"{GATEWAY_URL}/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_gateway_rejects_missing_audio():
    import httpx

    async with httpx.AsyncClient(timeout=10) as client:
        resp = await client.post(f"{GATEWAY_URL}/transcribe", json={})
        assert resp.status_code == 400
        assert "error" in resp.json()


@pytest.mark.asyncio
async def test_recorded_file_transcribes():
    """Send a real WebM/Opus recording (E2E_AUDIO_FILE) through the gateway."""
    from recorder.capture import AudioBlob
    from recorder.client import TranscriptionClient
    from recorder.encoder import build_payload

    path = os.environ.get("E2E_AUDIO_FILE")
    if not path:
        pytest.skip("E2E_AUDIO_FILE not set")
    with open(path, "rb") as f:
        blob = AudioBlob(data=f.read())

    words = await TranscriptionClient(GATEWAY_URL).transcribe(build_payload(blob))
    assert all(w.speaker >= 0 for w in words)
