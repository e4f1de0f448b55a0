"""Peak limiter with hold, knee, inter-sample peak guard and lookahead."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Iterable, List, Optional

from .dsp_common import db_to_linear

DEFAULT_SAMPLE_RATE = 48000
MAX_LOOKAHEAD = 256
MIN_GAIN_DB = -24.0
ENVELOPE_SMOOTHING = 0.9
DEFAULT_HOLD_SAMPLES = 50
MIN_ATTACK_MS = 0.01
MIN_RELEASE_MS = 1.0
ACTIVE_GAIN = 0.94
ISP_SAME_SIGN_MARGIN = 1.05
ISP_SIGN_CHANGE_MARGIN = 1.15


class LimiterError(ValueError):
    """Raised for an invalid limiter configuration or argument."""


@dataclass
class LimiterConfig:
    """Limiter parameters.

    ``threshold`` and ``knee`` are linear levels, ``attack_time`` and
    ``release_time`` are in milliseconds and ``lookahead_time`` is in samples.
    """

    threshold: float = 0.9
    knee: float = 0.0
    attack_time: float = 1.0
    release_time: float = 100.0
    lookahead_time: int = 0
    enable_lookahead: bool = False
    enable_isp: bool = False
    adaptive_release: bool = False


class Limiter:
    """Limiter for one audio channel."""

    def __init__(
        self,
        config: Optional[LimiterConfig] = None,
        sample_rate: int = DEFAULT_SAMPLE_RATE,
    ) -> None:
        if sample_rate <= 0:
            raise LimiterError("sample rate must be positive")
        self.sample_rate = sample_rate
        self.config = LimiterConfig()
        self._attack_samples = 1.0
        self._release_samples = 1.0
        self.reset()
        self.update_config(config if config is not None else LimiterConfig())

    def update_config(self, config: LimiterConfig) -> None:
        """Validate and adopt a configuration, clamping times to their limits."""
        if not 0.0 < config.threshold <= 1.0:
            raise LimiterError(f"invalid limiter threshold: {config.threshold}")
        if config.lookahead_time < 0:
            raise LimiterError("lookahead time must not be negative")
        self.config = replace(
            config,
            attack_time=max(config.attack_time, MIN_ATTACK_MS),
            release_time=max(config.release_time, MIN_RELEASE_MS),
            lookahead_time=min(config.lookahead_time, MAX_LOOKAHEAD),
        )
        self._update_timing()

    def reset(self) -> None:
        """Return the gain, envelope and lookahead state to their initial values."""
        self._current_gain = 1.0
        self._peak_level = 0.0
        self._target_gain = 1.0
        self._hold_counter = 0
        self._prev_sample = 0.0
        self._lookahead_buffer = [0.0] * MAX_LOOKAHEAD
        self._lookahead_index = 0

    def process(self, samples: Iterable[float]) -> List[float]:
        """Limit a block of samples and return the result."""
        return [self._process_sample(sample) for sample in samples]

    def gain_reduction_db(self) -> float:
        """Current gain in dB (negative while reducing)."""
        return 20.0 * math.log10(self._current_gain)

    def is_active(self) -> bool:
        """True when more than about 0.5 dB of reduction is applied."""
        return self._current_gain < ACTIVE_GAIN

    def peak_level(self) -> float:
        """Peak level seen by the envelope follower."""
        return self._peak_level

    def set_lookahead(self, samples: int) -> None:
        """Set the lookahead in samples; zero switches lookahead off."""
        if samples < 0:
            raise LimiterError("lookahead time must not be negative")
        samples = min(samples, MAX_LOOKAHEAD)
        self.config.lookahead_time = samples
        self.config.enable_lookahead = samples > 0
        if samples == 0:
            self._lookahead_buffer = [0.0] * MAX_LOOKAHEAD
            self._lookahead_index = 0

    def set_adaptive_release(self, enable: bool) -> None:
        """Switch adaptive release on or off."""
        self.config.adaptive_release = bool(enable)

    def _update_timing(self) -> None:
        rate = float(self.sample_rate)
        self._attack_samples = max((self.config.attack_time / 1000.0) * rate, 1.0)
        self._release_samples = max((self.config.release_time / 1000.0) * rate, 1.0)

    def _process_sample(self, input_sample: float) -> float:
        processed = self._inter_sample_protection(input_sample)
        processed = self._lookahead(processed)

        level = abs(processed)
        self._peak_level = max(
            level,
            ENVELOPE_SMOOTHING * self._peak_level + (1.0 - ENVELOPE_SMOOTHING) * level,
        )

        reduction = self._gain_reduction(self._peak_level)
        output = processed * self._current_gain
        self._update_release(reduction)

        output = min(max(output, -1.0), 1.0)
        self._prev_sample = input_sample
        return output

    def _gain_reduction(self, level: float) -> float:
        config = self.config
        if level <= config.threshold:
            self._target_gain = 1.0
            if self._hold_counter > 0:
                self._hold_counter -= 1
            return 1.0

        reduction = config.threshold / level
        if config.knee > 0.0:
            knee_start = config.threshold - config.knee / 2.0
            knee_end = config.threshold + config.knee / 2.0
            if level < knee_end:
                ratio = (level - knee_start) / config.knee
                reduction = 1.0 - ratio * (1.0 - reduction)

        if reduction <= 0.0 or 20.0 * math.log10(reduction) < MIN_GAIN_DB:
            reduction = db_to_linear(MIN_GAIN_DB)

        self._target_gain = reduction
        self._hold_counter = DEFAULT_HOLD_SAMPLES
        return reduction

    def _update_release(self, reduction: float) -> None:
        if self._hold_counter > 0:
            self._current_gain = self._target_gain
            return

        gain = self._current_gain
        if reduction < gain:
            coeff = 1.0 / self._attack_samples
            self._current_gain = gain * (1.0 - coeff) + reduction * coeff
        elif reduction > gain:
            coeff = 1.0 / self._release_samples
            gain = gain * (1.0 - coeff) + reduction * coeff
            if self.config.adaptive_release:
                scaled = coeff / (1.0 + 5.0 * (1.0 - gain))
                gain = gain * (1.0 - scaled) + reduction * scaled
            self._current_gain = gain

    def _inter_sample_protection(self, sample: float) -> float:
        if not self.config.enable_isp:
            return sample

        prev = self._prev_sample
        if (sample > 0 and prev > 0) or (sample < 0 and prev < 0):
            source = sample if abs(sample) > abs(prev) else prev
            predicted = source * ISP_SAME_SIGN_MARGIN
        else:
            total = abs(prev) + abs(sample)
            if total == 0.0:
                return sample
            t = abs(prev) / total
            highest = abs(prev) * (1.0 - t) + abs(sample) * t
            predicted = highest * ISP_SIGN_CHANGE_MARGIN

        if abs(predicted) > abs(sample):
            return predicted if sample >= 0 else -predicted
        return sample

    def _lookahead(self, sample: float) -> float:
        config = self.config
        if not config.enable_lookahead or config.lookahead_time <= 0:
            return sample

        self._lookahead_buffer[self._lookahead_index] = sample
        out_index = (
            self._lookahead_index + MAX_LOOKAHEAD - config.lookahead_time
        ) % MAX_LOOKAHEAD
        delayed = self._lookahead_buffer[out_index]
        self._lookahead_index = (self._lookahead_index + 1) % MAX_LOOKAHEAD
        return delayed