"""Dynamic range compressor with RMS or peak detection and a soft knee."""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass, replace
from typing import Iterable, List, Optional

DEFAULT_SAMPLE_RATE = 48000
DB_MIN = -120.0
ENVELOPE_INIT_DB = -120.0
GAIN_SMOOTHING = 0.9995
RMS_WINDOW = 32
MIN_GAIN_DB = -60.0
MAX_GAIN_DB = 0.0
INSTANT_TIME_MS = 0.1
FACTOR_RANGE_DB = 20.0


def _db_to_linear(db: float) -> float:
    return 0.0 if db <= DB_MIN else 10.0 ** (db / 20.0)


def _linear_to_db(linear: float) -> float:
    return DB_MIN if linear <= 0.0 else 20.0 * math.log10(linear)


def _clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


def _time_coeff(time_ms: float, sample_rate: int) -> float:
    if time_ms <= INSTANT_TIME_MS:
        return 0.0
    return math.exp(-1.0 / (sample_rate * time_ms / 1000.0))


@dataclass
class CompressorParameters:
    """Compressor settings; levels in dB, times in milliseconds."""

    enabled: bool = False
    threshold_db: float = -20.0
    ratio: float = 4.0
    attack_ms: float = 20.0
    release_ms: float = 200.0
    makeup_gain_db: float = 0.0
    knee_width_db: float = 6.0
    soft_knee: bool = True
    use_rms: bool = True


@dataclass
class CompressorStatistics:
    """Metering values taken at the end of the last processed block."""

    gain_reduction_db: float = 0.0
    input_level_db: float = 0.0
    output_level_db: float = 0.0


class Compressor:
    """Compressor for one audio channel."""

    def __init__(
        self,
        params: Optional[CompressorParameters] = None,
        sample_rate: int = DEFAULT_SAMPLE_RATE,
    ) -> None:
        if sample_rate <= 0:
            raise ValueError("sample rate must be positive")
        self.sample_rate = sample_rate
        self.params = CompressorParameters()
        self.attack_coeff = 0.0
        self.release_coeff = 0.0
        self.reset()
        self.set_parameters(params if params is not None else CompressorParameters())

    def set_parameters(self, params: CompressorParameters) -> None:
        """Adopt a copy of the parameters and recompute the time coefficients."""
        if params.ratio <= 0.0:
            raise ValueError(f"invalid compressor ratio: {params.ratio}")
        if params.knee_width_db < 0.0:
            raise ValueError("knee width must not be negative")
        self.params = replace(params)
        self.attack_coeff = _time_coeff(self.params.attack_ms, self.sample_rate)
        self.release_coeff = _time_coeff(self.params.release_ms, self.sample_rate)

    def set_enabled(self, enabled: bool) -> None:
        """Switch the compressor on or off; switching off clears the gain state."""
        self.params.enabled = bool(enabled)
        if not enabled:
            self.envelope_db = ENVELOPE_INIT_DB
            self.current_gain = 1.0
            self._smoothed_gain_db = 0.0

    def reset(self) -> None:
        """Clear envelope, gain, RMS window and statistics."""
        self.envelope_db = ENVELOPE_INIT_DB
        self.current_gain = 1.0
        self._smoothed_gain_db = 0.0
        self.rms_value = 0.0
        self._rms_window: deque = deque([0.0] * RMS_WINDOW, maxlen=RMS_WINDOW)
        self.statistics = CompressorStatistics()

    def process(self, samples: Iterable[float]) -> List[float]:
        """Compress a block of samples; a disabled compressor passes them through."""
        if not self.params.enabled:
            return list(samples)

        params = self.params
        output = []
        for sample in samples:
            level = self._rms(sample) if params.use_rms else abs(sample)
            level_db = _linear_to_db(level) if level > 0.0 else DB_MIN
            envelope_db = self._envelope(level_db)
            gain_db = self._gain(envelope_db) + params.makeup_gain_db
            self._smoothed_gain_db = (
                self._smoothed_gain_db * GAIN_SMOOTHING
                + gain_db * (1.0 - GAIN_SMOOTHING)
            )
            self.current_gain = _db_to_linear(self._smoothed_gain_db)
            output.append(sample * self.current_gain)

        reduction = -self._smoothed_gain_db + params.makeup_gain_db
        input_db = _linear_to_db(self.rms_value)
        self.statistics = CompressorStatistics(
            gain_reduction_db=reduction,
            input_level_db=input_db,
            output_level_db=input_db - reduction,
        )
        return output

    def compression_factor(self) -> float:
        """Gain reduction mapped from 0..20 dB onto 0..1; 0 while disabled."""
        if not self.params.enabled:
            return 0.0
        return _clamp(self.statistics.gain_reduction_db / FACTOR_RANGE_DB, 0.0, 1.0)

    def _rms(self, sample: float) -> float:
        self._rms_window.append(sample * sample)
        self.rms_value = math.sqrt(sum(self._rms_window) / RMS_WINDOW)
        return self.rms_value

    def _envelope(self, level_db: float) -> float:
        coeff = self.attack_coeff if level_db > self.envelope_db else self.release_coeff
        self.envelope_db = coeff * self.envelope_db + (1.0 - coeff) * level_db
        return self.envelope_db

    def _gain(self, envelope_db: float) -> float:
        params = self.params
        if params.soft_knee and params.knee_width_db > 0.0:
            gain_db = self._soft_knee(envelope_db)
        elif envelope_db > params.threshold_db:
            excess = envelope_db - params.threshold_db
            gain_db = -(excess - excess / params.ratio)
        else:
            gain_db = 0.0
        return _clamp(gain_db, MIN_GAIN_DB, MAX_GAIN_DB)

    def _soft_knee(self, input_db: float) -> float:
        params = self.params
        width = params.knee_width_db
        lower = params.threshold_db - width / 2.0
        upper = params.threshold_db + width / 2.0
        if input_db < lower:
            return 0.0
        if input_db > upper:
            excess = input_db - params.threshold_db
            return -(excess - excess / params.ratio)
        position = (input_db - lower) / width
        ratio = 1.0 + (params.ratio - 1.0) * position
        excess = input_db - lower
        return -(excess - excess / ratio)