"""Tests for the HTTP API."""

import io

import numpy as np
import pytest
import soundfile as sf

import bpmprobe.api.detect as detect_module
from bpmprobe.analysis.engine import TempoEngine
from bpmprobe.config import settings
from bpmprobe.errors import AudioFetchError

BASE = "https://project.supabase.co"
GOOD_URL = f"{BASE}/storage/v1/object/public/audio-files/loop.pcm"


@pytest.fixture
def storage(monkeypatch):
    monkeypatch.setattr(settings, "storage_url", BASE)
    return BASE


def test_health_endpoint(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_detect_bpm(client, storage, monkeypatch, click_120):
    fetched = {}

    def _fake_fetch(url, timeout, max_bytes):
        fetched["url"] = url
        fetched["timeout"] = timeout
        return click_120.tobytes()

    monkeypatch.setattr(detect_module, "fetch_audio", _fake_fetch)

    response = client.post("/api/detect-bpm", json={"audioUrl": GOOD_URL})

    assert response.status_code == 200
    data = response.json()
    assert data["bpm"] == 120
    assert data["confidence"] == "estimated"
    assert data["duration"] == pytest.approx(len(click_120) * 2 / (44100 * 4))
    assert fetched == {"url": GOOD_URL, "timeout": 30.0}


def test_detect_bpm_silence_is_low_confidence(client, storage, monkeypatch, silence):
    monkeypatch.setattr(detect_module, "fetch_audio", lambda *a, **kw: silence.tobytes())

    response = client.post("/api/detect-bpm", json={"audioUrl": GOOD_URL})

    assert response.status_code == 200
    assert response.json() == {"bpm": 120, "duration": 5.0, "confidence": "low"}


def test_detect_bpm_requires_url(client, storage):
    response = client.post("/api/detect-bpm", json={})
    assert response.status_code == 400
    assert response.json() == {"error": "Audio URL is required"}


def test_detect_bpm_requires_configuration(client, monkeypatch):
    monkeypatch.setattr(settings, "storage_url", None)
    response = client.post("/api/detect-bpm", json={"audioUrl": GOOD_URL})
    assert response.status_code == 500
    assert response.json() == {"error": "SUPABASE_URL not configured"}


def test_detect_bpm_rejects_http(client, storage):
    response = client.post("/api/detect-bpm", json={"audioUrl": GOOD_URL.replace("https", "http")})
    assert response.status_code == 400
    assert response.json() == {"error": "Only HTTPS URLs are allowed"}


def test_detect_bpm_rejects_foreign_host(client, storage):
    response = client.post(
        "/api/detect-bpm",
        json={"audioUrl": "https://169.254.169.254/storage/v1/object/public/audio-files/x"},
    )
    assert response.status_code == 400
    assert "storage bucket" in response.json()["error"]


def test_detect_bpm_fetch_failure(client, storage, monkeypatch):
    def _fail(*args, **kwargs):
        raise AudioFetchError("Failed to fetch audio file: 404 Not Found")

    monkeypatch.setattr(detect_module, "fetch_audio", _fail)

    response = client.post("/api/detect-bpm", json={"audioUrl": GOOD_URL})
    assert response.status_code == 502
    assert response.json() == {"error": "Failed to fetch audio file: 404 Not Found"}


def test_detect_bpm_malformed_body(client, storage):
    response = client.post(
        "/api/detect-bpm",
        content=b"not json",
        headers={"content-type": "application/json"},
    )
    assert response.status_code == 400
    assert "error" in response.json()


def test_detect_bpm_hides_internal_errors(client, storage, monkeypatch):
    monkeypatch.setattr(detect_module, "fetch_audio", lambda *a, **kw: b"\x00" * 8)

    def _boom(self, data, decode=False):
        raise RuntimeError("secret internals")

    monkeypatch.setattr(TempoEngine, "analyze_bytes", _boom)

    response = client.post("/api/detect-bpm", json={"audioUrl": GOOD_URL})
    assert response.status_code == 500
    assert response.json() == {"error": "Analysis failed"}


def test_analyze_raw_upload(client, click_120):
    response = client.post(
        "/api/analyze",
        files={"file": ("loop.pcm", click_120.tobytes(), "application/octet-stream")},
    )
    assert response.status_code == 200
    assert response.json()["bpm"] == 120


def test_analyze_wav_upload(client, click_120):
    buf = io.BytesIO()
    sf.write(buf, click_120.reshape(-1, 2), 44100, format="WAV", subtype="PCM_16")

    response = client.post(
        "/api/analyze",
        files={"file": ("loop.wav", buf.getvalue(), "audio/wav")},
    )
    assert response.status_code == 200
    assert response.json()["bpm"] == 120
    assert response.json()["confidence"] == "estimated"


def test_analyze_rejects_unknown_extension(client):
    response = client.post(
        "/api/analyze",
        files={"file": ("song.mp3", b"ID3", "audio/mpeg")},
    )
    assert response.status_code == 400
    assert response.json()["error"].startswith("Unsupported format")


def test_analyze_rejects_undecodable_container(client):
    response = client.post(
        "/api/analyze",
        files={"file": ("broken.wav", b"\x00\x01" * 64, "audio/wav")},
    )
    assert response.status_code == 400
    assert "Could not decode audio" in response.json()["error"]


def test_analyze_rejects_oversized_file(client, monkeypatch):
    monkeypatch.setattr(settings, "max_upload_mb", 1)
    payload = b"x" * (1024 * 1024 + 1)

    response = client.post(
        "/api/analyze",
        files={"file": ("big.pcm", payload, "application/octet-stream")},
    )

    assert response.status_code == 413
    assert "File too large" in response.json()["error"]


def test_analyze_without_extension_reads_raw_pcm(client):
    payload = np.zeros(44100 * 2, dtype="<i2").tobytes()
    response = client.post(
        "/api/analyze",
        files={"file": ("capture", payload, "application/octet-stream")},
    )
    assert response.status_code == 200
    assert response.json() == {"bpm": 120, "duration": 1.0, "confidence": "low"}
