"""Tempo estimation from inter-onset interval clustering."""

import math

import numpy as np

from bpmprobe.analysis.models import IntervalCluster, TempoEstimate


def round_half_up(x: float) -> int:
    """Round to nearest integer, .5 going up (not banker's rounding)."""
    return int(math.floor(x + 0.5))


def inter_onset_intervals(onsets: list[float]) -> list[float]:
    """Gaps between consecutive onsets, in seconds."""
    if len(onsets) < 2:
        return []
    return [float(d) for d in np.diff(onsets)]


def cluster_intervals(intervals: list[float], tolerance: float = 0.05) -> list[IntervalCluster]:
    """Greedily cluster intervals in ascending order.

    Each interval joins the first cluster (in creation order) whose running
    mean is closer than *tolerance*, otherwise it starts a new cluster.
    """
    clusters: list[IntervalCluster] = []
    for interval in sorted(intervals):
        for cluster in clusters:
            if abs(cluster.mean - interval) < tolerance:
                cluster.absorb(interval)
                break
        else:
            clusters.append(IntervalCluster(mean=interval))
    return clusters


def dominant_interval(
    onsets: list[float],
    min_onsets: int = 8,
    tolerance: float = 0.05,
) -> float | None:
    """Most common inter-onset interval, or None with too few onsets.

    Ties between equally populated clusters go to the one created first.
    """
    if len(onsets) < max(2, min_onsets):
        return None
    clusters = cluster_intervals(inter_onset_intervals(onsets), tolerance)
    best = clusters[0]
    for cluster in clusters[1:]:
        if cluster.count > best.count:
            best = cluster
    return best.mean


def correct_octave(bpm: int, min_bpm: int = 60, max_bpm: int = 200) -> int:
    """Fold half/double-time estimates back towards the 70-180 BPM zone.

    Two passes: first halve above *max_bpm* or double below 70, then halve
    above 180 or double below *min_bpm*. The result is clamped to
    [min_bpm, max_bpm].
    """
    if bpm > max_bpm:
        bpm = round_half_up(bpm / 2)
    elif bpm < 70:
        bpm = round_half_up(bpm * 2)

    if bpm > 180:
        bpm = round_half_up(bpm / 2)
    if bpm < min_bpm:
        bpm = round_half_up(bpm * 2)

    return min(max_bpm, max(min_bpm, bpm))


def resolve_bpm(
    interval: float | None,
    duration: float,
    onset_count: int = 0,
    default_bpm: int = 120,
    min_bpm: int = 60,
    max_bpm: int = 200,
) -> TempoEstimate:
    """Turn a dominant beat period into a TempoEstimate.

    A missing or unusable interval yields *default_bpm* with low confidence.
    """
    if interval is None or not math.isfinite(interval) or interval <= 0:
        return TempoEstimate(bpm=default_bpm, duration=duration, confidence="low",
                             onset_count=onset_count)

    raw_bpm = 60.0 / interval
    if not math.isfinite(raw_bpm):
        return TempoEstimate(bpm=default_bpm, duration=duration, confidence="low",
                             onset_count=onset_count)

    bpm = correct_octave(round_half_up(raw_bpm), min_bpm, max_bpm)
    return TempoEstimate(bpm=bpm, duration=duration, confidence="estimated",
                         onset_count=onset_count)
