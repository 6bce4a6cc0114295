"""
Core DSP module - numeric engine without I/O or GUI dependencies.

This module contains all signal processing logic:
- Power-of-two complex FFT and spectrum reductions
- FFT convolution and FIR filter application
- Rational-factor resampling
- Window functions and test signal generators
"""

from . import fft
from .errors import DspError, ConfigError, SizeError
from .numeric import is_power_of_2, next_power_of_2, gcd, sinc, sinc_norm, convolve
from .windows import WindowType, WindowFunction, create_window
from .signals import ToneParams, tone, multi_tone
from .spectral import SpectrumResult, MagnitudeFft, ThreeBinSumFft
from .convolution import FftConvolver
from .filters import FilterHolder, fir_low_pass, fir_high_pass, fir_band_pass, fir_notch
from .resample import (
    ResampleFactors,
    ResampleConfig,
    Resampler,
    compute_resample_factors,
    resample_range,
    resample_signal,
)

__all__ = [
    "fft",
    "DspError",
    "ConfigError",
    "SizeError",
    "is_power_of_2",
    "next_power_of_2",
    "gcd",
    "sinc",
    "sinc_norm",
    "convolve",
    "WindowType",
    "WindowFunction",
    "create_window",
    "ToneParams",
    "tone",
    "multi_tone",
    "SpectrumResult",
    "MagnitudeFft",
    "ThreeBinSumFft",
    "FftConvolver",
    "FilterHolder",
    "fir_low_pass",
    "fir_high_pass",
    "fir_band_pass",
    "fir_notch",
    "ResampleFactors",
    "ResampleConfig",
    "Resampler",
    "compute_resample_factors",
    "resample_range",
    "resample_signal",
]
