"""Common DSP helpers: level conversions, buffer utilities and biquad filters."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, List, Sequence

EPSILON = 1e-10
MIN_GAIN_DB = -120.0
A4_FREQUENCY = 440.0
A4_MIDI_NOTE = 69
MIDI_NOTE_MIN = 0
MIDI_NOTE_MAX = 127


@dataclass
class Biquad:
    """One biquad section in transposed direct form II.

    ``a0``..``a2`` are the feed-forward coefficients, ``b1`` and ``b2`` the
    feedback coefficients (the leading feedback coefficient is taken as 1).
    """

    a0: float = 1.0
    a1: float = 0.0
    a2: float = 0.0
    b1: float = 0.0
    b2: float = 0.0
    x1: float = 0.0
    x2: float = 0.0

    def process(self, sample: float) -> float:
        """Filter one sample and return the output."""
        output = sample * self.a0 + self.x1
        self.x1 = sample * self.a1 + self.x2 - self.b1 * output
        self.x2 = sample * self.a2 - self.b2 * output
        return output

    def reset(self) -> None:
        """Clear the filter history."""
        self.x1 = 0.0
        self.x2 = 0.0


@dataclass
class FilterCascade:
    """A chain of biquad sections applied one after another."""

    stages: List[Biquad] = field(default_factory=list)
    enabled: bool = True

    def process(self, samples: Iterable[float]) -> List[float]:
        """Run samples through every stage; a disabled cascade passes them through."""
        if not self.enabled:
            return list(samples)
        result = []
        for sample in samples:
            for stage in self.stages:
                sample = stage.process(sample)
            result.append(sample)
        return result

    def reset(self) -> None:
        """Clear the history of every stage."""
        for stage in self.stages:
            stage.reset()


def db_to_linear(db: float) -> float:
    """Convert a level in dB to a linear factor."""
    return 10.0 ** (db / 20.0)


def linear_to_db(linear: float) -> float:
    """Convert a linear factor to dB; tiny or non-positive values map to MIN_GAIN_DB."""
    if linear < EPSILON:
        return MIN_GAIN_DB
    return 20.0 * math.log10(linear)


def peak(samples: Iterable[float]) -> float:
    """Largest absolute sample value, 0.0 for an empty buffer."""
    return max((abs(s) for s in samples), default=0.0)


def rms(samples: Sequence[float]) -> float:
    """Root mean square of the samples, 0.0 for an empty buffer."""
    if not samples:
        return 0.0
    return math.sqrt(sum(s * s for s in samples) / len(samples))


def apply_gain(samples: Iterable[float], gain: float) -> List[float]:
    """Scale every sample by a linear gain."""
    return [s * gain for s in samples]


def mix(
    src1: Sequence[float], gain1: float, src2: Sequence[float], gain2: float
) -> List[float]:
    """Mix two equally long buffers with the given linear gains."""
    if len(src1) != len(src2):
        raise ValueError("buffers to mix must have the same length")
    return [a * gain1 + b * gain2 for a, b in zip(src1, src2)]


def soft_clip(samples: Iterable[float], threshold: float) -> List[float]:
    """Tanh soft clipping of samples whose magnitude exceeds the threshold."""
    return [
        threshold * math.tanh(s / threshold) if abs(s) > threshold else s
        for s in samples
    ]


def delay_samples(delay_ms: float, sample_rate: int) -> int:
    """Number of whole samples in a delay time."""
    if delay_ms < 0:
        raise ValueError("delay must not be negative")
    return int((delay_ms * sample_rate) / 1000.0)


def midi_note_to_frequency(note: int) -> float:
    """Frequency in Hz of a MIDI note (A4 = note 69 = 440 Hz)."""
    return A4_FREQUENCY * 2.0 ** ((note - A4_MIDI_NOTE) / 12.0)


def frequency_to_midi_note(frequency: float) -> int:
    """Nearest MIDI note for a frequency, clamped to 0..127."""
    if frequency <= 0.0:
        return MIDI_NOTE_MIN
    note = A4_MIDI_NOTE + 12.0 * math.log2(frequency / A4_FREQUENCY)
    midi_note = int(note + 0.5)
    return min(max(midi_note, MIDI_NOTE_MIN), MIDI_NOTE_MAX)


def smooth_interpolate(start: float, end: float, position: float) -> float:
    """S-curve interpolation between start and end for a position in 0..1."""
    if position <= 0.0:
        return start
    if position >= 1.0:
        return end
    smooth = 3.0 * position**2 - 2.0 * position**3
    return start + (end - start) * smooth