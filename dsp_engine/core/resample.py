"""
Rational Resampling

Sample-rate conversion by a rational factor U/D: zero-stuffing by U,
Kaiser-windowed FIR low-pass, decimation by D.

Technical assumptions:
- Resampled length is floor(N * U / D + 0.5)
- Zero-stuffed samples are scaled by U to keep the passband gain at 1
- The low-pass is applied with its group delay removed
- Cutoff: half the lower of input and output rate, tightened by
  max_cutoff_freq_hz when upsampling (U > D), relaxed when downsampling
- All lengths and factors are fixed at construction
"""

import logging
import math
from dataclasses import dataclass
from typing import NamedTuple, Optional
import numpy as np

from .errors import ConfigError, SizeError
from .filters import FilterHolder, fir_low_pass
from .numeric import gcd
from ..utils.formatting import format_frequency, format_ratio, format_sample_rate


logger = logging.getLogger(__name__)


class ResampleFactors(NamedTuple):
    """Upsample/downsample factor pair, both positive integers."""
    upsample: int
    downsample: int

    @property
    def ratio(self) -> float:
        return self.upsample / self.downsample


def compute_resample_factors(
    required_factor: float,
    max_numerator: int = 128,
    max_denominator: int = 128,
) -> ResampleFactors:
    """
    Best rational approximation of a resampling ratio.

    Stern-Brocot bisection: starting from floor(r)/1 and ceil(r)/1 the
    mediant of both bounds is formed, reduced by the GCD, and replaces
    the bound on its side of r. The closest admissible candidate is kept
    (both integer bounds count as candidates), the search stops once
    numerator or denominator exceed their bound.

    Args:
        required_factor: Target ratio r = target_rate / source_rate (> 0)
        max_numerator: Largest allowed upsample factor
        max_denominator: Largest allowed downsample factor

    Returns:
        ResampleFactors(upsample, downsample)

    Raises:
        ConfigError: If r is not positive or no pair fits into the bounds
    """
    if not required_factor > 0:
        raise ConfigError(
            "Resample factor must be positive", "required_factor", "> 0", required_factor
        )
    if max_numerator < 1 or max_denominator < 1:
        raise ConfigError(
            "Factor bounds must be at least 1",
            "max_numerator/max_denominator", ">= 1", (max_numerator, max_denominator),
        )

    r = float(required_factor)

    # Integral ratio: the mediant of r/1 and r/1 would never move
    if r.is_integer() and r <= max_numerator:
        return ResampleFactors(int(r), 1)

    n_a, d_a = math.floor(r), 1
    n_b, d_b = math.ceil(r), 1
    best = None
    error = math.inf

    for n in (n_a, n_b):
        if 0 < n <= max_numerator and abs(n - r) < error:
            error = abs(n - r)
            best = ResampleFactors(n, 1)

    while True:
        n_m = n_a + n_b
        d_m = d_a + d_b

        g = gcd(n_m, d_m)
        if g > 1:
            n_m //= g
            d_m //= g

        if n_m > max_numerator or d_m > max_denominator:
            break

        m = n_m / d_m
        deviation = abs(m - r)

        if deviation < error:
            error = deviation
            best = ResampleFactors(n_m, d_m)

        if m <= r:
            n_a, d_a = n_m, d_m
        else:
            n_b, d_b = n_m, d_m

    if best is None:
        raise ConfigError(
            "No factor pair within bounds",
            "required_factor", f"<= {max_numerator}/1 and >= 1/{max_denominator}", r,
        )

    logger.debug(
        "Resample factors for %.6f: %s (error %.3g)",
        r, format_ratio(best.upsample, best.downsample), error,
    )
    return best


@dataclass
class ResampleConfig:
    """
    Configuration of a Resampler.

    Attributes:
        signal_length: Input block length N
        upsample_factor: Upsampling factor U
        downsample_factor: Downsampling factor D
        sampling_freq_hz: Input sample rate
        max_cutoff_freq_hz: Requested low-pass cutoff
        num_filter_taps: Low-pass length (odd values keep the delay exact)
        kaiser_beta: Kaiser window beta of the low-pass
        use_fast_convolution: FFT convolution instead of direct convolution
    """
    signal_length: int
    upsample_factor: int
    downsample_factor: int
    sampling_freq_hz: float
    max_cutoff_freq_hz: float
    num_filter_taps: int = 1001
    kaiser_beta: float = 10.0
    use_fast_convolution: bool = True

    def __post_init__(self):
        if self.signal_length <= 0:
            raise ConfigError("Too few signal samples", "signal_length", "> 0", self.signal_length)
        if self.upsample_factor <= 0:
            raise ConfigError(
                "Invalid upsample factor", "upsample_factor", "> 0", self.upsample_factor
            )
        if self.downsample_factor <= 0:
            raise ConfigError(
                "Invalid downsample factor", "downsample_factor", "> 0", self.downsample_factor
            )
        if self.signal_length * self.upsample_factor <= 2:
            raise ConfigError(
                "Upsampled block too short for filtering",
                "signal_length * upsample_factor", "> 2",
                self.signal_length * self.upsample_factor,
            )
        if self.sampling_freq_hz <= 0:
            raise ConfigError(
                "Sampling frequency must be positive",
                "sampling_freq_hz", "> 0", self.sampling_freq_hz,
            )
        if self.max_cutoff_freq_hz <= 0:
            raise ConfigError(
                "Cutoff frequency must be positive",
                "max_cutoff_freq_hz", "> 0", format_frequency(self.max_cutoff_freq_hz),
            )
        if self.num_filter_taps <= 2:
            raise ConfigError("Filter needs more than two taps", "num_filter_taps", "> 2",
                              self.num_filter_taps)
        if self.kaiser_beta <= 0:
            raise ConfigError("Kaiser beta must be positive", "kaiser_beta", "> 0", self.kaiser_beta)

    @property
    def upsampled_length(self) -> int:
        return self.signal_length * self.upsample_factor

    @property
    def resampled_length(self) -> int:
        """floor(N * U / D + 0.5) in exact integer arithmetic."""
        return (2 * self.upsampled_length + self.downsample_factor) // (2 * self.downsample_factor)

    @property
    def upsampled_freq_hz(self) -> float:
        return self.sampling_freq_hz * self.upsample_factor

    @property
    def resampled_freq_hz(self) -> float:
        return self.sampling_freq_hz * self.upsample_factor / self.downsample_factor

    @property
    def cutoff_freq_hz(self) -> float:
        """Low-pass cutoff actually used for the design."""
        cutoff = min(self.sampling_freq_hz, self.resampled_freq_hz) / 2
        if self.upsample_factor > self.downsample_factor:
            return min(cutoff, self.max_cutoff_freq_hz)
        return max(cutoff, self.max_cutoff_freq_hz)


class Resampler:
    """
    Rational-factor resampler for blocks of fixed length.

    Usage:
        resampler = Resampler(
            signal_length=1000, upsample_factor=2, downsample_factor=3,
            sampling_freq_hz=10000.0, max_cutoff_freq_hz=3333.33,
        )
        output = resampler(block)   # resampler.resampled_length samples

    Procedure per call:
    1. U > 1: zero-stuff input * U at stride U into the workspace
    2. Low-pass at rate fs * U with delay removal
    3. D > 1: keep every D-th sample
    """

    def __init__(
        self,
        signal_length: int,
        upsample_factor: int,
        downsample_factor: int,
        sampling_freq_hz: float,
        max_cutoff_freq_hz: float,
        num_filter_taps: int = 1001,
        kaiser_beta: float = 10.0,
        use_fast_convolution: bool = True,
    ):
        config = ResampleConfig(
            signal_length=signal_length,
            upsample_factor=upsample_factor,
            downsample_factor=downsample_factor,
            sampling_freq_hz=sampling_freq_hz,
            max_cutoff_freq_hz=max_cutoff_freq_hz,
            num_filter_taps=num_filter_taps,
            kaiser_beta=kaiser_beta,
            use_fast_convolution=use_fast_convolution,
        )
        self._setup(config)

    @classmethod
    def from_config(cls, config: ResampleConfig) -> "Resampler":
        resampler = cls.__new__(cls)
        resampler._setup(config)
        return resampler

    def _setup(self, config: ResampleConfig) -> None:
        taps = fir_low_pass(
            config.num_filter_taps,
            config.cutoff_freq_hz,
            config.upsampled_freq_hz,
            window_type="kaiser",
            kaiser_beta=config.kaiser_beta,
        )

        self.config = config
        self._filter = FilterHolder(config.upsampled_length, taps, config.use_fast_convolution)
        self._workspace = np.zeros(config.upsampled_length)

        logger.debug(
            "Resampler: %s -> %s, ratio %s, cutoff %s, %d taps, %d -> %d samples",
            format_sample_rate(config.sampling_freq_hz),
            format_sample_rate(config.resampled_freq_hz),
            format_ratio(config.upsample_factor, config.downsample_factor),
            format_frequency(config.cutoff_freq_hz),
            config.num_filter_taps,
            config.signal_length,
            config.resampled_length,
        )

    def reinitialize(self, *args, **kwargs) -> None:
        """Rebind to new parameters (same arguments as the constructor)."""
        fresh = Resampler(*args, **kwargs)
        self.__dict__.update(fresh.__dict__)

    @property
    def signal_length(self) -> int:
        return self.config.signal_length

    @property
    def resampled_length(self) -> int:
        return self.config.resampled_length

    @property
    def upsample_factor(self) -> int:
        return self.config.upsample_factor

    @property
    def downsample_factor(self) -> int:
        return self.config.downsample_factor

    @property
    def resampled_freq_hz(self) -> float:
        return self.config.resampled_freq_hz

    def __call__(self, signal: np.ndarray, out: Optional[np.ndarray] = None) -> np.ndarray:
        """
        Resample one block.

        Args:
            signal: Block of exactly signal_length samples
            out: Optional destination of exactly resampled_length samples

        Returns:
            Resampled block

        Raises:
            TypeError: If signal is complex
            SizeError: If signal or out have the wrong length
        """
        signal = np.asarray(signal)
        if np.iscomplexobj(signal):
            raise TypeError(f"Resampler needs real samples, got {signal.dtype}")
        if signal.ndim != 1 or len(signal) != self.signal_length:
            raise SizeError(
                "Signal length does not match resampler",
                "len(signal)", self.signal_length, len(signal) if signal.ndim == 1 else signal.shape,
            )
        if out is not None and len(out) != self.resampled_length:
            raise SizeError("Output length mismatch", "len(out)", self.resampled_length, len(out))

        up = self.upsample_factor
        down = self.downsample_factor

        if up > 1:
            self._workspace[:] = 0.0
            self._workspace[::up] = signal * up
            self._filter(self._workspace, out=self._workspace, remove_delay=True)
        else:
            self._filter(signal, out=self._workspace, remove_delay=True)

        result = self._workspace[::down][:self.resampled_length]

        if out is None:
            return result.copy()
        out[:] = result
        return out


def resample_range(data: np.ndarray, target_length: int) -> np.ndarray:
    """
    Resize a sequence by linear interpolation.

    First and last sample are kept, intermediate samples are interpolated
    at a stride of (N - 1) / (target_length - 1). No anti-aliasing.

    Args:
        data: Source sequence (1D, not empty)
        target_length: Number of output samples (> 0)

    Returns:
        Interpolated sequence, Shape: (target_length,)
    """
    data = np.asarray(data, dtype=np.float64)
    if data.ndim != 1 or data.size == 0:
        raise SizeError("Expected a non-empty 1D sequence", "data", "length > 0", data.shape)
    if target_length <= 0:
        raise ConfigError("Target length must be positive", "target_length", "> 0", target_length)

    if target_length == data.size:
        return data.copy()

    positions = np.linspace(0.0, data.size - 1, target_length)
    return np.interp(positions, np.arange(data.size), data)


def _cast_like(values: np.ndarray, dtype: np.dtype) -> np.ndarray:
    """Convert filtered samples back to the input dtype, integers rounded and clipped."""
    if np.issubdtype(dtype, np.integer):
        info = np.iinfo(dtype)
        values = np.clip(np.rint(values), info.min, info.max)
    return values.astype(dtype)


def resample_signal(
    data: np.ndarray,
    original_sr: int,
    target_sr: int,
    max_numerator: int = 128,
    max_denominator: int = 128,
    num_filter_taps: int = 1001,
    kaiser_beta: float = 10.0,
) -> np.ndarray:
    """
    Resample signal data to a new sample rate.

    Technical details:
    - Exact factors via GCD of both rates when they fit the bounds
    - Otherwise the closest rational factor within the bounds (the
      resulting rate deviates from target_sr, a warning is logged)
    - Anti-aliasing: Kaiser-windowed FIR, group delay compensated

    Args:
        data: Signal data (1D or 2D with shape (samples, channels))
        original_sr: Original sample rate
        target_sr: Target sample rate
        max_numerator: Largest allowed upsample factor
        max_denominator: Largest allowed downsample factor
        num_filter_taps: Anti-aliasing filter length
        kaiser_beta: Kaiser window beta of the filter

    Returns:
        Resampled data (same dimensionality and dtype, integer samples
        are rounded and clipped to the dtype range)
    """
    if original_sr <= 0:
        raise ConfigError("Sample rate must be positive", "original_sr", "> 0", original_sr)
    if target_sr <= 0:
        raise ConfigError("Sample rate must be positive", "target_sr", "> 0", target_sr)

    data = np.asarray(data)
    if original_sr == target_sr:
        return data.copy()

    # Determine upsampling/downsampling factors
    divisor = gcd(original_sr, target_sr)
    up = target_sr // divisor
    down = original_sr // divisor

    if up > max_numerator or down > max_denominator:
        up, down = compute_resample_factors(target_sr / original_sr, max_numerator, max_denominator)
        logger.warning(
            "Ratio %s -> %s exceeds factor bounds, using %s (%s)",
            format_sample_rate(original_sr),
            format_sample_rate(target_sr),
            format_ratio(up, down),
            format_sample_rate(original_sr * up / down),
        )

    resampler = Resampler(
        signal_length=data.shape[0],
        upsample_factor=up,
        downsample_factor=down,
        sampling_freq_hz=original_sr,
        max_cutoff_freq_hz=min(original_sr, original_sr * up / down) / 2,
        num_filter_taps=num_filter_taps,
        kaiser_beta=kaiser_beta,
    )
    if data.ndim == 1:
        return _cast_like(resampler(data), data.dtype)
    else:
        # Resample each channel separately
        result = np.zeros((resampler.resampled_length, data.shape[1]))
        for ch in range(data.shape[1]):
            result[:, ch] = resampler(data[:, ch])
        return _cast_like(result, data.dtype)
