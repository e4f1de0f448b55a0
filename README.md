# xoverdsp

Sample-by-sample audio processing blocks for an active multi-way loudspeaker
system, in pure Python with no third-party dependencies. Every processor works
on plain Python lists of float samples and keeps its own state between calls.

## Modules

- `xoverdsp.dsp_common`: `db_to_linear`, `linear_to_db`, `peak`, `rms`,
  `apply_gain`, `mix`, `soft_clip` (tanh), `delay_samples`,
  `midi_note_to_frequency`, `frequency_to_midi_note`, `smooth_interpolate`,
  and the `Biquad` section (transposed direct form II) and `FilterCascade`
  chain of sections.
- `xoverdsp.limiter_settings`: `LimiterSettings`, a per-channel record of
  threshold, attack, release, lookahead and ceiling whose setters clamp to
  fixed ranges, with derived coefficients and lookahead buffer size;
  `default_settings()` builds one per channel.
- `xoverdsp.limiter`: `Limiter` and `LimiterConfig`, a peak limiter with
  knee, hold, optional lookahead (in samples), inter-sample peak protection
  and adaptive release. Output is hard-clipped to -1..1.
- `xoverdsp.compressor`: `Compressor`, `CompressorParameters` and
  `CompressorStatistics`, with RMS or peak detection, soft or hard knee,
  make-up gain, smoothed gain changes and metering via `statistics` and
  `compression_factor()`.
- `xoverdsp.delay_line`: `DelayLine`, a fractional delay with linear or cubic
  interpolation, phase inversion and output smoothing; delays are set in
  milliseconds or as a distance in centimetres or inches (`DelayUnit`).
  Also `distance_to_time_ms` and `buffer_size`.
- `xoverdsp.delay_system`: `DelaySystem`, a set of delay lines sharing sample
  rate, interpolation mode and speed-of-sound temperature compensation.

## Installation

    pip install .

## Example

    from xoverdsp.dsp_common import db_to_linear, rms
    from xoverdsp.limiter import Limiter, LimiterConfig
    from xoverdsp.compressor import Compressor, CompressorParameters
    from xoverdsp.delay_line import DelayChannelConfig, DelayUnit
    from xoverdsp.delay_system import DelaySystem

    print(db_to_linear(-6.0))          # about 0.501
    print(rms([1.0, -1.0, 1.0, -1.0])) # 1.0

    limiter = Limiter(LimiterConfig(threshold=0.5))
    limited = limiter.process([0.9] * 256)
    print(limiter.is_active(), limiter.gain_reduction_db())

    compressor = Compressor(CompressorParameters(enabled=True, threshold_db=-12.0))
    compressed = compressor.process([0.8] * 1024)
    print(compressor.statistics, compressor.compression_factor())

    delays = DelaySystem()             # 4 channels, 48 kHz, up to 100 ms
    line = delays.configure_channel(
        0, DelayChannelConfig(enabled=True, delay_value=34.3, unit=DelayUnit.CM)
    )
    print(line.delay_ms, line.delay_samples)  # about 1.0 ms, 48 samples
    delays.update_temperature(30.0)

## Errors

Invalid arguments raise exceptions rather than returning status codes:
`LimiterError` and `DelayError` (both subclasses of `ValueError`), and plain
`ValueError` from the compressor and the helpers in `dsp_common`.

## What this package does not do

- It does not design crossover filters or hold crossover settings: there are
  no Butterworth, Linkwitz-Riley or Bessel coefficient calculators and no
  crossover presets. `Biquad` and `FilterCascade` run coefficients you supply.
- It does not read or write audio devices or files; it processes lists of
  samples handed to it.
- It does not store settings anywhere; all state lives in the objects.
- It provides no command-line program.

## Tests

    pip install ".[test]"
    pytest