"""A set of delay lines sharing a sample rate, interpolation and temperature compensation."""

from __future__ import annotations

from typing import Iterator, List

from .delay_line import (
    DEFAULT_MAX_DELAY_MS,
    DEFAULT_SAMPLE_RATE,
    SPEED_OF_SOUND_M_PER_SEC,
    DelayChannelConfig,
    DelayError,
    DelayLine,
    Interpolation,
)

DEFAULT_CHANNELS = 4
BASE_TEMPERATURE_C = 20.0
SOUND_SPEED_CHANGE_PER_C = 0.6


class DelaySystem:
    """Delay lines for every output channel."""

    def __init__(
        self,
        sample_rate: int = DEFAULT_SAMPLE_RATE,
        max_delay_ms: int = DEFAULT_MAX_DELAY_MS,
        channels: int = DEFAULT_CHANNELS,
    ) -> None:
        if channels < 1:
            raise DelayError("at least one delay channel is required")
        self.sample_rate = sample_rate
        self.max_delay_ms = max_delay_ms
        self.interpolation = Interpolation.LINEAR
        self.compensation_factor = 1.0
        self._lines: List[DelayLine] = [
            DelayLine(sample_rate=sample_rate, max_delay_ms=max_delay_ms)
            for _ in range(channels)
        ]

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[DelayLine]:
        return iter(self._lines)

    def channel(self, index: int) -> DelayLine:
        """The delay line of one channel."""
        if not 0 <= index < len(self._lines):
            raise DelayError(f"invalid delay channel {index}")
        return self._lines[index]

    def configure_channel(self, index: int, config: DelayChannelConfig) -> DelayLine:
        """Configure one channel with the current temperature compensation."""
        line = self.channel(index)
        line.compensation = self.compensation_factor
        line.configure(config)
        return line

    def update_temperature(self, temperature_c: float) -> float:
        """Recompute the speed-of-sound factor and re-time active, enabled channels."""
        speed = SPEED_OF_SOUND_M_PER_SEC + (
            temperature_c - BASE_TEMPERATURE_C
        ) * SOUND_SPEED_CHANGE_PER_C
        if speed <= 0.0:
            raise DelayError(f"temperature {temperature_c} C is out of range")
        self.compensation_factor = speed / SPEED_OF_SOUND_M_PER_SEC
        for line in self._lines:
            if line.active and line.enabled:
                line.apply_compensation(self.compensation_factor)
            else:
                line.compensation = self.compensation_factor
        return self.compensation_factor

    def set_interpolation(self, mode: Interpolation) -> None:
        """Choose linear or cubic interpolation for every channel."""
        if not isinstance(mode, Interpolation):
            raise DelayError(f"invalid interpolation mode {mode!r}")
        self.interpolation = mode
        for line in self._lines:
            line.interpolation = mode

    def reset_all(self) -> None:
        """Flush the buffers of every configured channel."""
        for line in self._lines:
            if line.active:
                line.flush()