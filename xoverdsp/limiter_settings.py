"""Per-channel limiter settings with clamped parameter setters."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List

from .dsp_common import db_to_linear

DEFAULT_SAMPLE_RATE = 48000
DEFAULT_CHANNELS = 4
ENVELOPE_BUFFER_SIZE = 512
MAX_LOOKAHEAD_SAMPLES = 480

DEFAULT_THRESHOLD_DB = -6.0
DEFAULT_RELEASE_MS = 50.0
DEFAULT_ATTACK_MS = 0.1
DEFAULT_LOOKAHEAD_MS = 2.0
DEFAULT_CEILING_DB = -0.3

THRESHOLD_RANGE_DB = (-60.0, 0.0)
RELEASE_RANGE_MS = (10.0, 1000.0)
ATTACK_RANGE_MS = (0.05, 10.0)
LOOKAHEAD_RANGE_MS = (0.0, 10.0)
CEILING_RANGE_DB = (-12.0, 0.0)


def _clamp(value: float, bounds: tuple) -> float:
    low, high = bounds
    return min(max(value, low), high)


@dataclass
class LimiterSettings:
    """Parameters and envelope state of one channel's limiter."""

    channel: int = 0
    sample_rate: int = DEFAULT_SAMPLE_RATE
    threshold: float = DEFAULT_THRESHOLD_DB
    release: float = DEFAULT_RELEASE_MS
    attack: float = DEFAULT_ATTACK_MS
    lookahead: float = DEFAULT_LOOKAHEAD_MS
    ceiling: float = DEFAULT_CEILING_DB
    bypass: bool = False
    envelope_level: float = 0.0
    current_gain_reduction: float = 1.0
    envelope_buffer: List[float] = field(
        default_factory=lambda: [0.0] * ENVELOPE_BUFFER_SIZE
    )
    envelope_index: int = 0
    lookahead_buffer: List[float] = field(
        default_factory=lambda: [0.0] * MAX_LOOKAHEAD_SAMPLES
    )
    lookahead_index: int = 0

    def __post_init__(self) -> None:
        if self.channel < 0:
            raise ValueError(f"invalid limiter channel {self.channel}")
        if self.sample_rate <= 0:
            raise ValueError("sample rate must be positive")

    @property
    def threshold_lin(self) -> float:
        return db_to_linear(self.threshold)

    @property
    def ceiling_lin(self) -> float:
        return db_to_linear(self.ceiling)

    @property
    def attack_coeff(self) -> float:
        return math.exp(-1.0 / ((self.attack / 1000.0) * self.sample_rate))

    @property
    def release_coeff(self) -> float:
        return math.exp(-1.0 / ((self.release / 1000.0) * self.sample_rate))

    @property
    def lookahead_buffer_size(self) -> int:
        samples = int((self.lookahead / 1000.0) * self.sample_rate)
        return min(samples, MAX_LOOKAHEAD_SAMPLES)

    def set_threshold(self, threshold_db: float) -> None:
        """Set the threshold in dB, clamped to -60..0."""
        self.threshold = _clamp(threshold_db, THRESHOLD_RANGE_DB)

    def set_release(self, release_ms: float) -> None:
        """Set the release time in ms, clamped to 10..1000."""
        self.release = _clamp(release_ms, RELEASE_RANGE_MS)

    def set_attack(self, attack_ms: float) -> None:
        """Set the attack time in ms, clamped to 0.05..10."""
        self.attack = _clamp(attack_ms, ATTACK_RANGE_MS)

    def set_lookahead(self, lookahead_ms: float) -> None:
        """Set the lookahead time in ms, clamped to 0..10."""
        self.lookahead = _clamp(lookahead_ms, LOOKAHEAD_RANGE_MS)

    def set_ceiling(self, ceiling_db: float) -> None:
        """Set the output ceiling in dB, clamped to -12..0."""
        self.ceiling = _clamp(ceiling_db, CEILING_RANGE_DB)

    def reset(self) -> None:
        """Clear the envelope state and the active part of the buffers."""
        self.envelope_level = 0.0
        self.current_gain_reduction = 1.0
        self.envelope_index = 0
        self.lookahead_index = 0
        self.envelope_buffer[:] = [0.0] * len(self.envelope_buffer)
        size = self.lookahead_buffer_size
        self.lookahead_buffer[:size] = [0.0] * size


def default_settings(
    channels: int = DEFAULT_CHANNELS, sample_rate: int = DEFAULT_SAMPLE_RATE
) -> List[LimiterSettings]:
    """Default limiter settings for each output channel."""
    if channels < 1:
        raise ValueError("at least one channel is required")
    return [LimiterSettings(channel=i, sample_rate=sample_rate) for i in range(channels)]