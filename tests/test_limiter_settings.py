import pytest

from xoverdsp.dsp_common import db_to_linear
from xoverdsp.limiter_settings import (
    ENVELOPE_BUFFER_SIZE,
    MAX_LOOKAHEAD_SAMPLES,
    LimiterSettings,
    default_settings,
)


def test_defaults():
    s = LimiterSettings()
    assert s.threshold == -6.0
    assert s.release == 50.0
    assert s.attack == 0.1
    assert s.lookahead == 2.0
    assert s.ceiling == -0.3
    assert s.bypass is False
    assert s.current_gain_reduction == 1.0
    assert len(s.envelope_buffer) == ENVELOPE_BUFFER_SIZE


def test_linear_values_follow_db():
    s = LimiterSettings()
    s.set_threshold(-20.0)
    s.set_ceiling(-3.0)
    assert s.threshold_lin == pytest.approx(db_to_linear(-20.0))
    assert s.ceiling_lin == pytest.approx(db_to_linear(-3.0))


@pytest.mark.parametrize(
    "setter,attr,value,expected",
    [
        ("set_threshold", "threshold", 5.0, 0.0),
        ("set_threshold", "threshold", -100.0, -60.0),
        ("set_threshold", "threshold", -12.0, -12.0),
        ("set_release", "release", 5000.0, 1000.0),
        ("set_release", "release", 1.0, 10.0),
        ("set_attack", "attack", 50.0, 10.0),
        ("set_attack", "attack", 0.0, 0.05),
        ("set_lookahead", "lookahead", 20.0, 10.0),
        ("set_lookahead", "lookahead", -1.0, 0.0),
        ("set_ceiling", "ceiling", 1.0, 0.0),
        ("set_ceiling", "ceiling", -40.0, -12.0),
    ],
)
def test_setters_clamp(setter, attr, value, expected):
    s = LimiterSettings()
    getattr(s, setter)(value)
    assert getattr(s, attr) == expected


def test_coefficients_grow_with_time():
    s = LimiterSettings()
    s.set_attack(0.1)
    fast = s.attack_coeff
    s.set_attack(5.0)
    assert 0.0 < fast < s.attack_coeff < 1.0
    s.set_release(10.0)
    short = s.release_coeff
    s.set_release(500.0)
    assert 0.0 < short < s.release_coeff < 1.0


def test_lookahead_buffer_size_limits():
    s = LimiterSettings()
    s.set_lookahead(0.0)
    assert s.lookahead_buffer_size == 0
    s.set_lookahead(10.0)
    assert s.lookahead_buffer_size == MAX_LOOKAHEAD_SAMPLES


def test_lookahead_size_tracks_sample_rate():
    low = LimiterSettings(sample_rate=24000)
    high = LimiterSettings(sample_rate=48000)
    assert low.lookahead_buffer_size < high.lookahead_buffer_size


def test_reset_clears_state():
    s = LimiterSettings()
    s.envelope_level = 0.8
    s.current_gain_reduction = 0.4
    s.envelope_index = 10
    s.lookahead_index = 3
    s.envelope_buffer[5] = 1.0
    s.lookahead_buffer[1] = 1.0
    s.reset()
    assert s.envelope_level == 0.0
    assert s.current_gain_reduction == 1.0
    assert s.envelope_index == 0
    assert s.lookahead_index == 0
    assert not any(s.envelope_buffer)
    assert not any(s.lookahead_buffer[: s.lookahead_buffer_size])


def test_invalid_channel_and_rate():
    with pytest.raises(ValueError):
        LimiterSettings(channel=-1)
    with pytest.raises(ValueError):
        LimiterSettings(sample_rate=0)


def test_default_settings_channels():
    settings = default_settings(4, 44100)
    assert [s.channel for s in settings] == [0, 1, 2, 3]
    assert all(s.sample_rate == 44100 for s in settings)
    settings[0].envelope_buffer[0] = 1.0
    assert settings[1].envelope_buffer[0] == 0.0


def test_default_settings_requires_channel():
    with pytest.raises(ValueError):
        default_settings(0)