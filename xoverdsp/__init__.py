"""Audio DSP blocks: biquad filters, limiter, compressor and delay lines."""

__version__ = "0.1.0"

__all__ = [
    "compressor",
    "delay_line",
    "delay_system",
    "dsp_common",
    "limiter",
    "limiter_settings",
]