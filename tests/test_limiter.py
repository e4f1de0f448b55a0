import math

import pytest

from xoverdsp.dsp_common import db_to_linear
from xoverdsp.limiter import (
    MAX_LOOKAHEAD,
    Limiter,
    LimiterConfig,
    LimiterError,
)


@pytest.mark.parametrize("threshold", [0.0, -0.5, 1.5])
def test_invalid_threshold_rejected(threshold):
    limiter = Limiter()
    with pytest.raises(LimiterError):
        limiter.update_config(LimiterConfig(threshold=threshold))


def test_constructor_rejects_invalid_config():
    with pytest.raises(LimiterError):
        Limiter(LimiterConfig(threshold=2.0))


def test_invalid_update_keeps_previous_config():
    limiter = Limiter(LimiterConfig(threshold=0.5))
    with pytest.raises(LimiterError):
        limiter.update_config(LimiterConfig(threshold=0.0))
    assert limiter.config.threshold == 0.5


def test_update_config_clamps_times():
    limiter = Limiter()
    limiter.update_config(
        LimiterConfig(
            threshold=0.8,
            attack_time=0.0,
            release_time=0.1,
            lookahead_time=MAX_LOOKAHEAD + 100,
        )
    )
    assert limiter.config.attack_time == 0.01
    assert limiter.config.release_time == 1.0
    assert limiter.config.lookahead_time == MAX_LOOKAHEAD


def test_below_threshold_passes_through():
    limiter = Limiter(LimiterConfig(threshold=0.9))
    samples = [0.1, -0.2, 0.3, -0.05]
    assert limiter.process(samples) == samples
    assert limiter.gain_reduction_db() == 0.0
    assert limiter.is_active() is False


def test_over_threshold_reduces_to_threshold():
    limiter = Limiter(LimiterConfig(threshold=0.5))
    out = limiter.process([1.0, 1.0, 1.0])
    assert out[0] == 1.0
    assert out[1] == pytest.approx(0.5)
    assert out[2] == pytest.approx(0.5)
    assert limiter.is_active() is True
    assert limiter.gain_reduction_db() == pytest.approx(20.0 * math.log10(0.5))


def test_output_is_hard_clipped():
    limiter = Limiter(LimiterConfig(threshold=1.0))
    assert limiter.process([2.0]) == [1.0]
    limiter.reset()
    assert limiter.process([-2.0]) == [-1.0]


def test_gain_reduction_limited_to_minimum():
    limiter = Limiter(LimiterConfig(threshold=0.01))
    out = limiter.process([1.0, 1.0])
    assert out[1] == pytest.approx(db_to_linear(-24.0))
    assert limiter.gain_reduction_db() == pytest.approx(-24.0)


def test_peak_level_follows_input():
    limiter = Limiter(LimiterConfig(threshold=0.9))
    limiter.process([0.3])
    assert limiter.peak_level() == pytest.approx(0.3)
    limiter.process([0.0])
    assert 0.0 < limiter.peak_level() < 0.3


def test_reset_restores_state():
    limiter = Limiter(LimiterConfig(threshold=0.5))
    limiter.process([1.0, 1.0])
    limiter.reset()
    assert limiter.gain_reduction_db() == 0.0
    assert limiter.peak_level() == 0.0
    assert limiter.is_active() is False


def test_lookahead_delays_signal():
    limiter = Limiter(LimiterConfig(threshold=1.0))
    limiter.set_lookahead(3)
    assert limiter.config.enable_lookahead is True
    out = limiter.process([0.1, 0.2, 0.3, 0.4, 0.5])
    assert out == [0.0, 0.0, 0.0, 0.1, 0.2]


def test_lookahead_zero_disables():
    limiter = Limiter(LimiterConfig(threshold=1.0))
    limiter.set_lookahead(2)
    limiter.process([0.1, 0.2])
    limiter.set_lookahead(0)
    assert limiter.config.enable_lookahead is False
    assert limiter.process([0.4, 0.5]) == [0.4, 0.5]


def test_lookahead_is_clamped():
    limiter = Limiter()
    limiter.set_lookahead(MAX_LOOKAHEAD * 4)
    assert limiter.config.lookahead_time == MAX_LOOKAHEAD


def test_negative_lookahead_rejected():
    limiter = Limiter()
    with pytest.raises(LimiterError):
        limiter.set_lookahead(-1)


def test_inter_sample_protection_raises_rising_peak():
    limiter = Limiter(LimiterConfig(threshold=1.0, enable_isp=True))
    out = limiter.process([0.5, 0.6])
    assert out[0] == pytest.approx(0.5)
    assert out[1] == pytest.approx(0.63)
    assert abs(out[1]) > 0.6


def test_inter_sample_protection_handles_silence():
    limiter = Limiter(LimiterConfig(threshold=1.0, enable_isp=True))
    assert limiter.process([0.0, 0.0]) == [0.0, 0.0]


def test_set_adaptive_release_toggles():
    limiter = Limiter()
    limiter.set_adaptive_release(True)
    assert limiter.config.adaptive_release is True
    limiter.set_adaptive_release(False)
    assert limiter.config.adaptive_release is False


def test_output_never_exceeds_unity():
    limiter = Limiter(LimiterConfig(threshold=0.7, knee=0.2, enable_isp=True))
    samples = [math.sin(i / 3.0) * 1.8 for i in range(200)]
    out = limiter.process(samples)
    assert len(out) == len(samples)
    assert all(-1.0 <= s <= 1.0 for s in out)