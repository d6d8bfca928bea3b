"""Audio data containers used by the decoding and chunking stages."""

from dataclasses import dataclass, field
from typing import List

import numpy as np

from .core.models import TranscriptLine


@dataclass
class DecodedAudio:
    """One continuous decoded recording, one float array per channel."""
    channels: List[np.ndarray]
    sample_rate: int

    @property
    def channel_count(self) -> int:
        return len(self.channels)

    @property
    def frame_count(self) -> int:
        return len(self.channels[0]) if self.channels else 0

    @property
    def duration_seconds(self) -> float:
        if not self.sample_rate:
            return 0.0
        return self.frame_count / self.sample_rate


@dataclass(frozen=True)
class SegmentWindow:
    """A planned time window of the recording."""
    index: int
    start_seconds: float
    duration_seconds: float

    @property
    def end_seconds(self) -> float:
        return self.start_seconds + self.duration_seconds


@dataclass
class AudioSegment:
    """Samples of one window, ready to be re-encoded."""
    index: int
    start_offset_seconds: float
    duration_seconds: float
    channel_data: List[np.ndarray]
    sample_rate: int


@dataclass
class SegmentResult:
    """Lines returned for one segment, timestamps still relative."""
    lines: List[TranscriptLine] = field(default_factory=list)
    repaired: bool = False
