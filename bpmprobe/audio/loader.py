"""Audio loading: raw PCM views and container decoding.

The estimator consumes interleaved signed 16-bit stereo PCM. Container
formats (WAV, FLAC, OGG, ...) are decoded here with soundfile so that the
analysis core never has to guess what the bytes are.
"""

from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path
from typing import Union

import numpy as np
import soundfile as sf

from bpmprobe.errors import UnsupportedAudio

logger = logging.getLogger(__name__)

PCM_DTYPE = np.dtype("<i2")


def pcm_from_bytes(data: bytes) -> np.ndarray:
    """View raw bytes as interleaved little-endian int16 samples.

    A dangling odd byte is ignored.
    """
    usable = len(data) - (len(data) % PCM_DTYPE.itemsize)
    return np.frombuffer(data[:usable], dtype=PCM_DTYPE)


def _to_interleaved_stereo(frames: np.ndarray) -> np.ndarray:
    """Turn a (n_frames, n_channels) block into interleaved stereo."""
    if frames.shape[1] == 1:
        frames = np.repeat(frames, 2, axis=1)
    elif frames.shape[1] > 2:
        logger.debug("Keeping first 2 of %d channels", frames.shape[1])
        frames = frames[:, :2]
    return np.ascontiguousarray(frames, dtype=np.int16).reshape(-1)


def decode_audio(data: bytes) -> tuple[np.ndarray, int]:
    """Decode a container-format file held in memory.

    Returns
    -------
    tuple[np.ndarray, int]
        Interleaved int16 stereo samples and the file's sample rate.

    Raises
    ------
    UnsupportedAudio
        If libsndfile cannot read the data.
    """
    try:
        frames, sample_rate = sf.read(BytesIO(data), dtype="int16", always_2d=True)
    except RuntimeError as e:
        raise UnsupportedAudio(f"Could not decode audio: {e}") from e
    return _to_interleaved_stereo(frames), int(sample_rate)


def load_audio_bytes(
    data: bytes,
    sample_rate: int = 44100,
    raw: bool = False,
) -> tuple[np.ndarray, int]:
    """Load audio bytes as interleaved int16 stereo.

    With ``raw=True`` the bytes are taken as s16le stereo PCM at
    *sample_rate*. Otherwise a container decode is attempted first and, if
    libsndfile does not recognise the data, the bytes are read as raw PCM.
    """
    if not raw:
        try:
            return decode_audio(data)
        except UnsupportedAudio:
            logger.info("Not a recognised container, reading %d bytes as raw PCM", len(data))
    return pcm_from_bytes(data), sample_rate


def load_audio(
    file_path: Union[str, Path],
    sample_rate: int = 44100,
    raw: bool = False,
) -> tuple[np.ndarray, int]:
    """Load an audio file from disk. See :func:`load_audio_bytes`."""
    return load_audio_bytes(Path(file_path).read_bytes(), sample_rate=sample_rate, raw=raw)
