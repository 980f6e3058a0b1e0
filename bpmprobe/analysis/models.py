"""Core data models for tempo estimation."""

from dataclasses import dataclass
from typing import Literal

Confidence = Literal["low", "estimated"]


@dataclass
class IntervalCluster:
    """A group of similar inter-onset intervals."""
    mean: float  # seconds, running average of members
    count: int = 1

    def absorb(self, interval: float) -> None:
        self.count += 1
        self.mean = (self.mean * (self.count - 1) + interval) / self.count


@dataclass(frozen=True)
class TempoEstimate:
    """Final result of one analysis run."""
    bpm: int
    duration: float  # seconds
    confidence: Confidence
    onset_count: int = 0

    def to_dict(self) -> dict:
        return {"bpm": self.bpm, "duration": self.duration, "confidence": self.confidence}
