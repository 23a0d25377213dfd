"""Speech-to-text result models."""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class TranscriptionSegment:
    """A transcribed span of speech with timing info."""

    id: int
    start: float  # Start time in seconds
    end: float  # End time in seconds
    text: str
    confidence: Optional[float] = None  # provider score, e.g. Whisper avg_logprob


@dataclass
class TranscriptionResult:
    """Full transcription result with timing data."""

    text: str
    language: str = "en"
    segments: List[TranscriptionSegment] = field(default_factory=list)

    @property
    def duration(self) -> Optional[float]:
        """End of the last segment, or None when nothing was transcribed."""
        if not self.segments:
            return None
        return self.segments[-1].end

    def validation_errors(self) -> List[str]:
        """Describe every way the segment list violates the timing contract."""
        errors = []
        previous_start = None
        for seg in self.segments:
            if not seg.start < seg.end:
                errors.append(f"segment {seg.id}: start {seg.start} is not before end {seg.end}")
            if previous_start is not None and seg.start < previous_start:
                errors.append(f"segment {seg.id}: start {seg.start} goes backwards")
            previous_start = seg.start
        return errors
