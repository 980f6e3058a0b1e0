"""Analysis orchestrator - runs the tempo estimation pipeline."""

import logging
from pathlib import Path

import numpy as np

from bpmprobe.analysis.models import TempoEstimate
from bpmprobe.analysis.onset import debounce_onsets, onset_strength, pick_onsets
from bpmprobe.analysis.tempo import dominant_interval, resolve_bpm
from bpmprobe.audio.loader import load_audio, load_audio_bytes, pcm_from_bytes
from bpmprobe.audio.preprocessing import preprocess
from bpmprobe.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)

BYTES_PER_SAMPLE = 2


class TempoEngine:
    """Runs the tempo pipeline with a fixed set of parameters.

    The engine keeps no per-run state, so a single instance can serve
    concurrent requests.
    """

    def __init__(self, config: Settings | None = None, sample_rate: int | None = None):
        self.config = config or default_settings
        self.sample_rate = sample_rate or self.config.sample_rate

    def analyze_file(self, file_path: str | Path, raw: bool = False) -> TempoEstimate:
        """Analyze an audio file (decoded container, or raw PCM with *raw*)."""
        samples, sr = load_audio(file_path, sample_rate=self.sample_rate, raw=raw)
        return self.analyze_samples(samples, sample_rate=sr)

    def analyze_bytes(self, data: bytes, decode: bool = False) -> TempoEstimate:
        """Analyze audio bytes.

        By default the bytes are interpreted as s16le interleaved stereo PCM
        at the engine's sample rate. With *decode* a container decode is
        tried first.
        """
        if decode:
            samples, sr = load_audio_bytes(data, sample_rate=self.sample_rate)
            return self.analyze_samples(samples, sample_rate=sr)
        return self.analyze_samples(pcm_from_bytes(data), byte_length=len(data))

    def analyze_samples(
        self,
        samples: np.ndarray,
        sample_rate: int | None = None,
        byte_length: int | None = None,
    ) -> TempoEstimate:
        """Estimate tempo from interleaved int16 stereo samples."""
        cfg = self.config
        sr = sample_rate or self.sample_rate
        if byte_length is None:
            byte_length = len(samples) * BYTES_PER_SAMPLE
        duration = byte_length / (sr * BYTES_PER_SAMPLE * cfg.channels)
        logger.info(f"Analyzing {duration:.1f}s of audio at {sr}Hz")

        # Step 1: Downmix + pre-emphasis
        filtered = preprocess(samples, cfg.pre_emphasis)

        # Step 2: Onset strength envelope
        strengths = onset_strength(filtered, cfg.frame_size, cfg.hop_size)
        logger.debug(f"  {len(strengths)} onset strength frames")

        # Step 3: Adaptive peak picking
        onsets = pick_onsets(strengths, sr, cfg.hop_size, cfg.threshold_k)

        # Step 4: Debounce
        onsets = debounce_onsets(onsets, cfg.min_onset_interval)
        logger.debug(f"  {len(onsets)} onsets after debounce")

        # Step 5: Interval clustering
        interval = dominant_interval(onsets, cfg.min_onsets, cfg.cluster_tolerance)
        if interval is None:
            logger.info(
                f"Insufficient onsets detected ({len(onsets)}), "
                f"using default BPM: {cfg.default_bpm}"
            )

        # Step 6: BPM with octave correction
        result = resolve_bpm(
            interval,
            duration,
            onset_count=len(onsets),
            default_bpm=cfg.default_bpm,
            min_bpm=cfg.min_bpm,
            max_bpm=cfg.max_bpm,
        )
        logger.info(
            f"Detected BPM: {result.bpm}, Duration: {duration:.2f}s, "
            f"Onsets: {len(onsets)}, Confidence: {result.confidence}"
        )
        return result


def estimate_tempo(data: bytes, sample_rate: int = 44100) -> TempoEstimate:
    """Estimate the tempo of raw s16le stereo PCM bytes."""
    return TempoEngine(sample_rate=sample_rate).analyze_bytes(data)
