"""Audio preprocessing utilities."""

from __future__ import annotations

import numpy as np
from scipy.signal import lfilter


def downmix(raw: np.ndarray) -> np.ndarray:
    """Average interleaved stereo samples into a mono float signal.

    A trailing unpaired sample (odd-length input) is dropped.
    """
    raw = np.asarray(raw)
    n_frames = len(raw) // 2
    pairs = raw[: n_frames * 2].astype(np.float64).reshape(n_frames, 2)
    return (pairs[:, 0] + pairs[:, 1]) / 2


def pre_emphasis(
    mono: np.ndarray,
    coefficient: float = 0.95,
) -> np.ndarray:
    """Apply a first-order pre-emphasis (high-pass) filter.

    Each output sample is ``x[n] - coefficient * x[n-1]`` with ``x[-1] = 0``.
    The recurrence runs over the input signal, not the filtered output, so
    this is a FIR difference and never feeds back.

    Parameters
    ----------
    mono:
        Mono input signal.
    coefficient:
        Weight of the previous input sample. Defaults to 0.95.
    """
    mono = np.asarray(mono, dtype=np.float64)
    if mono.size == 0:
        return mono.copy()
    return lfilter([1.0, -coefficient], [1.0], mono)


def preprocess(raw: np.ndarray, coefficient: float = 0.95) -> np.ndarray:
    """Apply the full preprocessing pipeline (downmix then pre-emphasis)."""
    return pre_emphasis(downmix(raw), coefficient)
