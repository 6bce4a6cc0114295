"""
Spectral Analysis Module

Single-block amplitude spectra of windowed signals.
Optimized for amplitude measurement of tones, not for display.

Technical assumptions:
- One block of exactly fft_size samples per call (no STFT framing)
- Periodic window: fft_size + 1 coefficients with the last one ignored
- Normalization and window gain correction happen in one step
- Results are single-sided (first N/2 bins) unless full_spectrum is set
"""

import logging
from dataclasses import dataclass
from typing import Optional
import numpy as np

from . import fft
from .errors import SizeError
from .numeric import is_power_of_2
from .windows import WindowFunction, WindowType


logger = logging.getLogger(__name__)


@dataclass
class SpectrumResult:
    """
    Result of a single-block spectrum computation.

    Attributes:
        values: Gain-corrected amplitude per bin (peak values)
        phases: Phase per bin in radians (only if requested)
        fft_size: FFT size N used for the computation
    """
    values: np.ndarray
    phases: Optional[np.ndarray]
    fft_size: int

    def bin_width(self, sample_rate: float) -> float:
        """Frequency resolution in Hz."""
        return sample_rate / self.fft_size

    def frequencies(self, sample_rate: float) -> np.ndarray:
        """Frequency axis in Hz, one entry per value."""
        return np.arange(len(self.values)) * self.bin_width(sample_rate)

    def magnitude_db(self, ref: float = 1.0, min_db: float = -120.0) -> np.ndarray:
        """
        Amplitude in dB.

        Args:
            ref: Reference value (1.0 for dBFS)
            min_db: Minimum dB value (to avoid log(0))

        Returns:
            Amplitude in dB per bin
        """
        # Avoid log(0)
        mag = np.maximum(self.values, 10 ** (min_db / 20) * ref)
        return 20 * np.log10(mag / ref)


class _WindowedFft:
    """Shared setup of the block spectrum analysers."""

    def __init__(
        self,
        window_type: WindowType,
        fft_size: int,
        kaiser_beta: float = 14.0,
    ):
        if not is_power_of_2(fft_size):
            raise SizeError("FFT size must be a power of two", "fft_size", "2^k", fft_size)

        self.fft_size = fft_size
        self.window = WindowFunction(
            window_type, fft_size + 1, ignore_last_value=True, kaiser_beta=kaiser_beta
        )
        self._workspace = np.zeros(fft_size, dtype=np.complex128)

        logger.debug(
            "%s: fft_size=%d window=%s coherent_gain=%.6f enbw=%.4f",
            type(self).__name__, fft_size, window_type,
            self.window.coherent_gain, self.window.enbw,
        )

    def _transform(self, signal: np.ndarray) -> np.ndarray:
        """Window the block into the workspace and run the forward FFT."""
        signal = np.asarray(signal)
        if signal.ndim != 1 or len(signal) != self.fft_size:
            raise SizeError(
                "Signal length does not match FFT size",
                "len(signal)", self.fft_size, signal.shape,
            )

        self._workspace[:] = signal
        self.window(self._workspace, out=self._workspace)
        return fft.forward(self._workspace, inplace=True)

    def _phases(self, length: int) -> np.ndarray:
        return np.angle(self._workspace[:length])


class MagnitudeFft(_WindowedFft):
    """
    Windowed magnitude spectrum of one block.

    Usage:
        analyzer = MagnitudeFft("hann", 1024)
        result = analyzer(block)
        peak_bin = np.argmax(result.values)

    The magnitude is divided by coherent_gain * N, so a tone centred on a
    bin reads its peak amplitude.
    """

    def __call__(
        self,
        signal: np.ndarray,
        full_spectrum: bool = False,
        with_phases: bool = False,
    ) -> SpectrumResult:
        """
        Compute the magnitude spectrum.

        Args:
            signal: Real or complex block of fft_size samples
            full_spectrum: Keep all N bins instead of N/2
            with_phases: Also return bin phases (of the raw spectrum)

        Returns:
            SpectrumResult with peak amplitudes per bin
        """
        spectrum = self._transform(signal)
        magnitude = fft.to_magnitude(spectrum, full_spectrum=full_spectrum)

        phases = self._phases(len(magnitude)) if with_phases else None

        WindowFunction.apply_gain_correction(
            magnitude, self.window.coherent_gain * self.fft_size, out=magnitude
        )
        return SpectrumResult(values=magnitude, phases=phases, fft_size=self.fft_size)


class ThreeBinSumFft(_WindowedFft):
    """
    Windowed 3-bin-sum amplitude spectrum of one block.

    The power spectrum is divided by combined_gain * N^2 and reduced with
    the 3-bin sum. Less sensitive to the exact tone position than
    MagnitudeFft, at the cost of frequency resolution.
    """

    def __call__(
        self,
        signal: np.ndarray,
        full_spectrum: bool = False,
        with_phases: bool = False,
    ) -> SpectrumResult:
        """Compute the 3-bin-sum spectrum (arguments as MagnitudeFft)."""
        spectrum = self._transform(signal)
        power = fft.to_power(spectrum, full_spectrum=full_spectrum)

        phases = self._phases(len(power)) if with_phases else None

        WindowFunction.apply_gain_correction(
            power, self.window.combined_gain * self.fft_size ** 2, out=power
        )
        values = fft.to_three_bin_sum(power, inplace=True)
        return SpectrumResult(values=values, phases=phases, fft_size=self.fft_size)
