"""
FIR Filters

Windowed-sinc FIR design and the filter holder that applies a fixed
coefficient set to fixed-length signal blocks.

Technical assumptions:
- All designs produce symmetric or anti-symmetric (linear-phase) taps,
  so the group delay is (num_taps - 1) / 2 samples and can be removed
- Frequencies are normalized to Nyquist (fs / 2)
- Design windows are symmetric (no periodic variant)
- FilterHolder uses FFT convolution by default, direct convolution optional
"""

import logging
import numpy as np

from .convolution import FftConvolver
from .errors import ConfigError, SizeError
from .numeric import convolve, sinc_norm
from .windows import WindowFunction, WindowType
from ..utils.formatting import format_frequency


logger = logging.getLogger(__name__)


def _check_design(num_taps: int, sampling_freq_hz: float) -> float:
    """Common design checks, returns the available bandwidth (Nyquist)."""
    if num_taps <= 2:
        raise ConfigError("Filter needs more than two taps", "num_taps", "> 2", num_taps)
    if sampling_freq_hz <= 0:
        raise ConfigError(
            "Sampling frequency must be positive", "sampling_freq_hz", "> 0", sampling_freq_hz
        )
    return sampling_freq_hz / 2


def _check_frequency(name: str, freq_hz: float, nyquist_hz: float) -> None:
    if freq_hz <= 0:
        raise ConfigError("Frequency must be positive", name, "> 0 Hz", format_frequency(freq_hz))
    if freq_hz > nyquist_hz:
        raise ConfigError(
            "Frequency exceeds Nyquist", name,
            f"<= {format_frequency(nyquist_hz)}", format_frequency(freq_hz),
        )


def _tap_positions(num_taps: int) -> np.ndarray:
    """Tap index relative to the filter centre."""
    return np.arange(num_taps) - (num_taps - 1) / 2


def _apply_design_window(
    coefficients: np.ndarray,
    window_type: WindowType,
    kaiser_beta: float,
) -> np.ndarray:
    window = WindowFunction(window_type, len(coefficients), kaiser_beta=kaiser_beta)
    return window(coefficients)


def fir_low_pass(
    num_taps: int,
    cutoff_freq_hz: float,
    sampling_freq_hz: float,
    window_type: WindowType = "kaiser",
    kaiser_beta: float = 10.0,
) -> np.ndarray:
    """
    Design a windowed-sinc low-pass filter.

    h[i] = fc * sinc(fc * (i - (M-1)/2)), fc = cutoff / Nyquist

    Args:
        num_taps: Number of taps M (> 2)
        cutoff_freq_hz: Cutoff frequency (0 < fc <= fs/2)
        sampling_freq_hz: Sample rate in Hz
        window_type: Design window
        kaiser_beta: Beta parameter for Kaiser window

    Returns:
        Filter coefficients, Shape: (num_taps,)
    """
    nyquist = _check_design(num_taps, sampling_freq_hz)
    _check_frequency("cutoff_freq_hz", cutoff_freq_hz, nyquist)

    fc = cutoff_freq_hz / nyquist
    arg = _tap_positions(num_taps)
    coefficients = fc * sinc_norm(fc * arg)

    return _apply_design_window(coefficients, window_type, kaiser_beta)


def fir_high_pass(
    num_taps: int,
    cutoff_freq_hz: float,
    sampling_freq_hz: float,
    window_type: WindowType = "kaiser",
    kaiser_beta: float = 10.0,
) -> np.ndarray:
    """
    Design a windowed-sinc high-pass filter (spectral inversion).

    num_taps must be odd, an even-length high-pass has a forced zero at
    Nyquist.
    """
    nyquist = _check_design(num_taps, sampling_freq_hz)
    _check_frequency("cutoff_freq_hz", cutoff_freq_hz, nyquist)
    if num_taps % 2 == 0:
        raise ConfigError("High-pass filter needs an odd number of taps", "num_taps", "odd", num_taps)

    fc = cutoff_freq_hz / nyquist
    arg = _tap_positions(num_taps)
    coefficients = sinc_norm(arg) - fc * sinc_norm(fc * arg)

    return _apply_design_window(coefficients, window_type, kaiser_beta)


def _band_edges(
    centre_freq_hz: float,
    bandwidth_hz: float,
    nyquist: float,
) -> tuple[float, float]:
    """Normalized lower and upper band edge."""
    _check_frequency("centre_freq_hz", centre_freq_hz, nyquist)
    _check_frequency("bandwidth_hz", bandwidth_hz, nyquist)

    centre = centre_freq_hz / nyquist
    half_bandwidth = bandwidth_hz / nyquist / 2
    return centre - half_bandwidth, centre + half_bandwidth


def fir_band_pass(
    num_taps: int,
    centre_freq_hz: float,
    bandwidth_hz: float,
    sampling_freq_hz: float,
    window_type: WindowType = "kaiser",
    kaiser_beta: float = 10.0,
) -> np.ndarray:
    """
    Design a windowed band-pass filter.

    h[i] = (cos(lo * pi * a) - cos(hi * pi * a)) / (pi * a), a = i - (M-1)/2

    Taps are anti-symmetric, the centre tap (a == 0, odd M) is zero.

    Args:
        num_taps: Number of taps M (> 2)
        centre_freq_hz: Band centre (0 < fc <= fs/2)
        bandwidth_hz: Band width (0 < bw <= fs/2)
        sampling_freq_hz: Sample rate in Hz
        window_type: Design window
        kaiser_beta: Beta parameter for Kaiser window

    Returns:
        Filter coefficients, Shape: (num_taps,)
    """
    nyquist = _check_design(num_taps, sampling_freq_hz)
    low, high = _band_edges(centre_freq_hz, bandwidth_hz, nyquist)

    arg = _tap_positions(num_taps)
    coefficients = np.zeros(num_taps)
    nonzero = np.abs(arg) >= 1e-3
    a = arg[nonzero]
    coefficients[nonzero] = (np.cos(low * np.pi * a) - np.cos(high * np.pi * a)) / np.pi / a

    return _apply_design_window(coefficients, window_type, kaiser_beta)


def fir_notch(
    num_taps: int,
    centre_freq_hz: float,
    bandwidth_hz: float,
    sampling_freq_hz: float,
    window_type: WindowType = "kaiser",
    kaiser_beta: float = 10.0,
) -> np.ndarray:
    """
    Design a windowed band-stop (notch) filter.

    h = delta - hi * sinc(hi * a) - lo * sinc(lo * a)
    """
    nyquist = _check_design(num_taps, sampling_freq_hz)
    low, high = _band_edges(centre_freq_hz, bandwidth_hz, nyquist)

    arg = _tap_positions(num_taps)
    coefficients = (
        sinc_norm(arg)
        - high * sinc_norm(high * arg)
        - low * sinc_norm(low * arg)
    )

    return _apply_design_window(coefficients, window_type, kaiser_beta)


class FilterHolder:
    """
    Applies fixed FIR coefficients to signal blocks of fixed length.

    Usage:
        taps = fir_low_pass(101, 1000.0, 48000.0)
        holder = FilterHolder(signal_length=4800, filter_coeffs=taps)
        filtered = holder(block, remove_delay=True)   # 4800 samples

    Output length:
    - remove_delay=False: N + M - 1 samples (full convolution)
    - remove_delay=True: N samples, shifted by (M - 1) // 2 so they line
      up with the input time axis
    """

    def __init__(
        self,
        signal_length: int,
        filter_coeffs: np.ndarray,
        use_fast_convolution: bool = True,
    ):
        """
        Bind holder to a signal length and coefficient set.

        Args:
            signal_length: Block length N (> 2)
            filter_coeffs: Coefficients (copied, must not be empty)
            use_fast_convolution: FFT convolution instead of direct convolution
        """
        coefficients = np.array(filter_coeffs, dtype=np.float64).ravel()

        if signal_length <= 2:
            raise ConfigError("Signal length too small", "signal_length", "> 2", signal_length)
        if coefficients.size == 0:
            raise ConfigError("Filter coefficients are empty", "len(filter_coeffs)", "> 0", 0)

        self._signal_length = int(signal_length)
        self._coefficients = coefficients
        self._use_fast_convolution = use_fast_convolution
        self._filtered = np.zeros(self._signal_length + coefficients.size - 1)
        self._convolver = (
            FftConvolver(self._signal_length, coefficients.size)
            if use_fast_convolution else None
        )

        logger.debug(
            "FilterHolder: signal=%d taps=%d fast=%s",
            self._signal_length, coefficients.size, use_fast_convolution,
        )

    def reinitialize(
        self,
        signal_length: int,
        filter_coeffs: np.ndarray,
        use_fast_convolution: bool = True,
    ) -> None:
        """Rebind to new parameters. On error the current state is kept."""
        fresh = FilterHolder(signal_length, filter_coeffs, use_fast_convolution)
        self.__dict__.update(fresh.__dict__)

    @property
    def signal_length(self) -> int:
        return self._signal_length

    @property
    def num_taps(self) -> int:
        return self._coefficients.size

    @property
    def group_delay(self) -> int:
        """Samples trimmed from the front when the delay is removed."""
        return (self.num_taps - 1) // 2

    @property
    def use_fast_convolution(self) -> bool:
        return self._use_fast_convolution

    @property
    def coefficients(self) -> np.ndarray:
        return self._coefficients.copy()

    def output_length(self, remove_delay: bool = False) -> int:
        if remove_delay:
            return self._signal_length
        return self._filtered.size

    def __call__(
        self,
        signal: np.ndarray,
        out: np.ndarray | None = None,
        remove_delay: bool = False,
    ) -> np.ndarray:
        """
        Filter one block.

        Args:
            signal: Block of exactly signal_length samples
            out: Optional destination of output_length(remove_delay)
                samples, may be the signal array itself when the delay
                is removed
            remove_delay: Compensate the group delay

        Returns:
            Filtered block

        Raises:
            TypeError: If signal is complex
            SizeError: If signal or out have the wrong length
        """
        signal = np.asarray(signal)
        if np.iscomplexobj(signal):
            raise TypeError(f"Filter holder needs real samples, got {signal.dtype}")
        if signal.ndim != 1 or len(signal) != self._signal_length:
            raise SizeError(
                "Signal length does not match filter holder",
                "len(signal)", self._signal_length, len(signal) if signal.ndim == 1 else signal.shape,
            )

        result_length = self.output_length(remove_delay)
        if out is not None and len(out) != result_length:
            raise SizeError("Output length mismatch", "len(out)", result_length, len(out))

        if self._convolver is not None:
            self._convolver(signal, self._coefficients, out=self._filtered)
        else:
            self._filtered[:] = convolve(signal, self._coefficients)

        if remove_delay:
            offset = self.group_delay
            result = self._filtered[offset:offset + self._signal_length]
        else:
            result = self._filtered

        if out is None:
            return result.copy()
        out[:] = result
        return out
