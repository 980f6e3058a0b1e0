"""Shared test fixtures for tempo estimator tests."""

import numpy as np
import pytest
from fastapi.testclient import TestClient

from bpmprobe.main import app


@pytest.fixture
def client():
    """FastAPI test client."""
    return TestClient(app)


def generate_click_pcm(
    interval: float = 0.5,
    n_clicks: int = 8,
    duration_seconds: float = 7.0,
    start_seconds: float = 1.5,
    sr: int = 44100,
    hop_size: int = 256,
    amplitude: float = 20000.0,
) -> np.ndarray:
    """Generate interleaved int16 stereo PCM with short sine clicks.

    Each click starts on a hop boundary and is shorter than one hop, so it
    produces a single clean spike in the onset strength envelope.
    """
    n_samples = int(duration_seconds * sr)
    mono = np.zeros(n_samples, dtype=np.float64)

    click_samples = 64
    t_click = np.arange(click_samples) / sr
    click = np.sin(2 * np.pi * 1000 * t_click) * amplitude

    for k in range(n_clicks):
        block = int(round((start_seconds + k * interval) * sr / hop_size))
        pos = block * hop_size
        end = min(pos + click_samples, n_samples)
        if end > pos:
            mono[pos:end] += click[: end - pos]

    return np.repeat(mono, 2).astype(np.int16)


def generate_noise_pcm(duration_seconds: float = 5.0, sr: int = 44100, seed: int = 0) -> np.ndarray:
    """Interleaved int16 stereo white noise."""
    rng = np.random.default_rng(seed)
    noise = rng.normal(0.0, 3000.0, size=int(duration_seconds * sr) * 2)
    return np.clip(noise, -32768, 32767).astype(np.int16)


@pytest.fixture
def click_120():
    """Eight clicks 0.5 s apart (120 BPM)."""
    return generate_click_pcm(interval=0.5, n_clicks=8)


@pytest.fixture
def silence():
    """Five seconds of digital silence."""
    return np.zeros(5 * 44100 * 2, dtype=np.int16)
