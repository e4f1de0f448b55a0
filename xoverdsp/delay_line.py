"""Fractional delay line for time alignment, with phase inversion and smoothing."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterable, List

DEFAULT_SAMPLE_RATE = 48000
DEFAULT_MAX_DELAY_MS = 100
SPEED_OF_SOUND_M_PER_SEC = 343.0
BUFFER_PADDING = 16
DEFAULT_FILTER_COEFF = 0.7
METERS_PER_INCH = 0.0254


class DelayError(ValueError):
    """Raised for an invalid delay setting or an unconfigured channel."""


class DelayUnit(enum.Enum):
    """Unit in which a channel's delay is given."""

    MS = "ms"
    CM = "cm"
    INCH = "inch"


class Interpolation(enum.Enum):
    """How samples between buffer positions are read."""

    LINEAR = "linear"
    CUBIC = "cubic"


@dataclass
class DelayChannelConfig:
    """Settings of one delay channel; ``delay_value`` is in ``unit``."""

    enabled: bool = False
    delay_value: float = 0.0
    unit: DelayUnit = DelayUnit.MS
    phase_invert: bool = False


def distance_to_time_ms(distance: float, unit: DelayUnit) -> float:
    """Travel time of sound over a distance, in milliseconds.

    A value already given in milliseconds is returned unchanged.
    """
    if unit is DelayUnit.CM:
        meters = distance / 100.0
    elif unit is DelayUnit.INCH:
        meters = distance * METERS_PER_INCH
    else:
        return distance
    return meters / SPEED_OF_SOUND_M_PER_SEC * 1000.0


def _time_to_distance_cm(delay_ms: float) -> float:
    return delay_ms * SPEED_OF_SOUND_M_PER_SEC / 1000.0 * 100.0


def buffer_size(max_delay_ms: int, sample_rate: int) -> int:
    """Samples needed to hold the longest delay, plus a safety margin."""
    if max_delay_ms < 0:
        raise DelayError("maximum delay must not be negative")
    if sample_rate <= 0:
        raise DelayError("sample rate must be positive")
    return (int(max_delay_ms) * int(sample_rate)) // 1000 + BUFFER_PADDING


class DelayLine:
    """Delay line for one output channel."""

    def __init__(
        self,
        sample_rate: int = DEFAULT_SAMPLE_RATE,
        max_delay_ms: int = DEFAULT_MAX_DELAY_MS,
        interpolation: Interpolation = Interpolation.LINEAR,
        filter_coeff: float = DEFAULT_FILTER_COEFF,
    ) -> None:
        size = buffer_size(max_delay_ms, sample_rate)
        self.sample_rate = sample_rate
        self.max_delay_ms = max_delay_ms
        self.interpolation = interpolation
        self.filter_coeff = filter_coeff
        self.buffer: List[float] = [0.0] * size
        self.write_index = 0
        self.prev_sample = 0.0
        self.active = False
        self.enabled = False
        self.phase_invert = False
        self.unit = DelayUnit.MS
        self.delay_ms = 0.0
        self.delay_distance = 0.0
        self.delay_samples = 0.0
        self.compensation = 1.0

    def configure(self, config: DelayChannelConfig) -> None:
        """Apply a channel configuration and mark the channel active."""
        if config.unit in (DelayUnit.CM, DelayUnit.INCH):
            self.delay_distance = config.delay_value
            self.delay_ms = distance_to_time_ms(config.delay_value, config.unit)
        else:
            self.delay_ms = config.delay_value
            self.delay_distance = _time_to_distance_cm(self.delay_ms)
        self.unit = config.unit
        self.phase_invert = bool(config.phase_invert)
        self.enabled = bool(config.enabled)
        self._apply()
        self.active = True

    def set_time(self, delay_ms: float) -> None:
        """Set the delay in milliseconds."""
        self._require_active()
        if delay_ms < 0.0 or delay_ms > self.max_delay_ms:
            raise DelayError(
                f"invalid delay time {delay_ms:.2f} ms (max: {self.max_delay_ms})"
            )
        self.delay_ms = delay_ms
        self.unit = DelayUnit.MS
        self.delay_distance = _time_to_distance_cm(delay_ms)
        self._apply()

    def set_distance(self, distance: float, unit: DelayUnit) -> None:
        """Set the delay as a distance in centimetres or inches."""
        self._require_active()
        if unit not in (DelayUnit.CM, DelayUnit.INCH):
            raise DelayError(f"invalid distance unit {unit}")
        delay_ms = distance_to_time_ms(distance, unit)
        if delay_ms < 0.0 or delay_ms > self.max_delay_ms:
            raise DelayError(
                f"resulting delay {delay_ms:.2f} ms exceeds limit "
                f"(max: {self.max_delay_ms})"
            )
        self.delay_ms = delay_ms
        self.delay_distance = distance
        self.unit = unit
        self._apply()

    def set_phase_invert(self, invert: bool) -> None:
        """Switch 180 degree phase inversion on or off."""
        self._require_active()
        self.phase_invert = bool(invert)

    def set_enabled(self, enabled: bool) -> None:
        """Switch delay processing on or off."""
        self._require_active()
        self.enabled = bool(enabled)

    def apply_compensation(self, factor: float) -> None:
        """Scale the delay by a speed-of-sound compensation factor."""
        if factor <= 0.0:
            raise DelayError("compensation factor must be positive")
        self.compensation = factor
        self._apply()

    def process(self, samples: Iterable[float]) -> List[float]:
        """Delay a block of samples; an inactive or disabled line passes them through."""
        if not (self.active and self.enabled):
            return list(samples)
        return [self._process_sample(sample) for sample in samples]

    def settings(self) -> DelayChannelConfig:
        """Current configuration, with the value in the unit it was given in."""
        self._require_active()
        value = self.delay_ms if self.unit is DelayUnit.MS else self.delay_distance
        return DelayChannelConfig(
            enabled=self.enabled,
            delay_value=value,
            unit=self.unit,
            phase_invert=self.phase_invert,
        )

    def flush(self) -> None:
        """Clear the buffer and the smoothing state."""
        self._require_active()
        self.buffer = [0.0] * len(self.buffer)
        self.write_index = 0
        self.prev_sample = 0.0

    def _require_active(self) -> None:
        if not self.active:
            raise DelayError("delay channel is not configured")

    def _apply(self) -> None:
        compensated_ms = self.delay_ms / self.compensation
        self.delay_samples = compensated_ms * self.sample_rate / 1000.0

    def _at(self, index: int) -> float:
        return self.buffer[index % len(self.buffer)]

    def _process_sample(self, sample: float) -> float:
        size = len(self.buffer)
        self.buffer[self.write_index] = sample

        read_pos = self.write_index - self.delay_samples
        if read_pos < 0:
            read_pos %= size
        read_index = int(read_pos)
        fraction = read_pos - read_index
        read_index %= size

        if self.interpolation is Interpolation.LINEAR:
            y1 = self._at(read_index)
            output = y1 + fraction * (self._at(read_index + 1) - y1)
        else:
            y0 = self._at(read_index - 1)
            y1 = self._at(read_index)
            y2 = self._at(read_index + 1)
            y3 = self._at(read_index + 2)
            a0 = y3 - y2 - y0 + y1
            a1 = y0 - y1 - a0
            a2 = y2 - y0
            frac2 = fraction * fraction
            output = a0 * fraction * frac2 + a1 * frac2 + a2 * fraction + y1

        if self.phase_invert:
            output = -output

        output = output * (1.0 - self.filter_coeff) + self.prev_sample * self.filter_coeff
        self.prev_sample = output
        self.write_index = (self.write_index + 1) % size
        return output