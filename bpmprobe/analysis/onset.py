"""Onset detection from a broadband energy-flux envelope."""

from __future__ import annotations

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view


def frame_energies(signal: np.ndarray, frame_size: int = 1024, hop_size: int = 256) -> np.ndarray:
    """Sum of squares for every full frame, frames starting every *hop_size*.

    Frames that would run past the end of the signal are not produced.
    """
    signal = np.asarray(signal, dtype=np.float64)
    if frame_size <= 0 or hop_size <= 0 or len(signal) < frame_size:
        return np.zeros(0)

    frames = sliding_window_view(signal, frame_size)[::hop_size]
    return np.einsum("ij,ij->i", frames, frames)


def onset_strength(signal: np.ndarray, frame_size: int = 1024, hop_size: int = 256) -> np.ndarray:
    """Positive frame-to-frame energy increase (a cheap spectral-flux proxy).

    The first frame has no predecessor and is always 0.
    """
    energies = frame_energies(signal, frame_size, hop_size)
    if energies.size == 0:
        return energies
    flux = np.zeros_like(energies)
    flux[1:] = np.maximum(0.0, np.diff(energies))
    return flux


def pick_onsets(
    strengths: np.ndarray,
    sample_rate: int = 44100,
    hop_size: int = 256,
    threshold_k: float = 1.5,
) -> list[float]:
    """Pick onset times from an onset strength envelope.

    A frame is an onset when it is a strict local maximum and exceeds
    ``mean + threshold_k * std`` of the frames within one window on either
    side of it (window = ``sample_rate // hop_size`` frames, about a second).
    Frames closer than a window to either edge are never considered.

    Returns onset times in seconds, ascending.
    """
    strengths = np.asarray(strengths, dtype=np.float64)
    if sample_rate <= 0 or hop_size <= 0:
        return []
    window = max(1, sample_rate // hop_size)
    n = len(strengths)
    if n < 2 * window + 1:
        return []

    span = 2 * window + 1
    # statistics must only see the window itself, never the rest of the track
    windows = sliding_window_view(strengths, span)
    mean = windows.sum(axis=1) / span
    variance = np.einsum("ij,ij->i", windows, windows) / span - mean * mean

    idx = np.arange(window, n - window)
    threshold = mean + threshold_k * np.sqrt(np.maximum(variance, 0.0))

    current = strengths[idx]
    is_onset = (
        (current > threshold)
        & (current > strengths[idx - 1])
        & (current > strengths[idx + 1])
    )
    return [float(i * hop_size / sample_rate) for i in idx[is_onset]]


def debounce_onsets(onsets: list[float], min_interval: float = 0.25) -> list[float]:
    """Drop onsets closer than *min_interval* to the last kept one."""
    kept: list[float] = []
    for t in onsets:
        if not kept or t - kept[-1] >= min_interval:
            kept.append(t)
    return kept
