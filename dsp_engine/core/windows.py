"""
Window Functions

Window coefficient generators and the gain bookkeeping used for
spectral amplitude correction.

Technical assumptions:
- Coefficients are symmetric (scipy.signal.windows with sym=True)
- For FFT use the window is generated one sample longer and the last
  value is ignored, which yields the periodic variant
- Gains are computed over the effective (used) coefficients only
"""

from typing import Literal
import numpy as np
from scipy import signal

from .errors import ConfigError, SizeError


WindowType = Literal[
    "hann",
    "hamming",
    "blackman",
    "exact_blackman",
    "bartlett",
    "kaiser",
    "lanczos",
    "rectangular",
    "flat_top_1",
    "flat_top_2",
    "flat_top_3",
    "flat_top_4",
    "flat_top_5",
    "flat_top_6",
    "flat_top_7",
]

# Cosine-sum coefficients a0, a1, ... (terms alternate in sign)
_HAMMING_ALPHA = 0.53836

_EXACT_BLACKMAN = [7938 / 18608, 9240 / 18608, 1430 / 18608]

_FLAT_TOP_COEFFICIENTS = {
    "flat_top_1": [1.0, 1.933, 1.286, 0.388, 0.0322],
    "flat_top_2": [0.2810639, 0.5208972, 0.1980399],
    "flat_top_3": [0.21557895, 0.41663158, 0.277263158, 0.083578947, 0.006947368],
    "flat_top_4": [0.9994484, 1.911456, 1.076578, 0.183162],
    "flat_top_5": [1.0, 1.869032, 1.195972, 0.035928, 0.030916],
    "flat_top_6": [
        1.0,
        1.93774046310203,
        1.32530734987255,
        0.43206975880342,
        0.04359135851569,
        0.00015175580171,
    ],
    "flat_top_7": [0.1881999, 0.36923, 0.28702, 0.13077, 0.02488],
}


def create_window(
    window_type: WindowType,
    size: int,
    kaiser_beta: float = 14.0,
) -> np.ndarray:
    """
    Create symmetric window coefficients.

    Window properties:
    - hann, hamming, blackman: general purpose, moderate side lobes
    - exact_blackman: zeros placed on the third and fourth side lobes
    - kaiser: adjustable via beta, higher = more suppression
    - flat_top_*: negligible scalloping loss, for amplitude measurement
    - rectangular: no window, maximum leakage

    Args:
        window_type: Type of window function
        size: Number of coefficients (> 1)
        kaiser_beta: Beta parameter for Kaiser window (> 0)

    Returns:
        Window coefficients, Shape: (size,)

    Raises:
        ConfigError: On unknown type, size < 2 or non-positive beta
    """
    if size < 2:
        raise ConfigError("Window needs at least two coefficients", "size", ">= 2", size)

    if window_type == "hann":
        return signal.windows.hann(size)
    elif window_type == "hamming":
        return signal.windows.general_hamming(size, _HAMMING_ALPHA)
    elif window_type == "blackman":
        return signal.windows.blackman(size)
    elif window_type == "exact_blackman":
        return signal.windows.general_cosine(size, _EXACT_BLACKMAN)
    elif window_type == "bartlett":
        return signal.windows.bartlett(size)
    elif window_type == "kaiser":
        if kaiser_beta <= 0:
            raise ConfigError("Kaiser beta must be positive", "kaiser_beta", "> 0", kaiser_beta)
        return signal.windows.kaiser(size, kaiser_beta)
    elif window_type == "lanczos":
        return signal.windows.lanczos(size)
    elif window_type == "rectangular":
        return np.ones(size)
    elif window_type in _FLAT_TOP_COEFFICIENTS:
        return signal.windows.general_cosine(size, _FLAT_TOP_COEFFICIENTS[window_type])
    else:
        raise ConfigError(
            "Unknown window function", "window_type", "one of WindowType", window_type
        )


class WindowFunction:
    """
    Window coefficients together with their gains.

    Usage:
        window = WindowFunction("hann", fft_size + 1, ignore_last_value=True)
        windowed = window(block)
        spectrum_magnitude /= window.coherent_gain

    Gains (n = effective size, w = coefficients):
    - coherent_gain: sum(w) / n, amplitude correction for tones
    - enbw: n * sum(w^2) / sum(w)^2, effective noise bandwidth in bins
    - power_gain: coherent_gain^2 * enbw
    - combined_gain: coherent_gain * power_gain
    """

    def __init__(
        self,
        window_type: WindowType,
        size: int,
        ignore_last_value: bool = False,
        kaiser_beta: float = 14.0,
    ):
        """
        Create window.

        Args:
            window_type: Type of window function
            size: Number of generated coefficients
            ignore_last_value: Drop the last coefficient (periodic window for FFT)
            kaiser_beta: Beta parameter for Kaiser window
        """
        self.window_type = window_type
        self.size = size
        self.ignore_last_value = ignore_last_value
        self.effective_size = size - 1 if ignore_last_value else size

        coefficients = create_window(window_type, size, kaiser_beta)
        self._coefficients = np.ascontiguousarray(coefficients[:self.effective_size])

        self._compute_gains()

    def _compute_gains(self) -> None:
        w = self._coefficients
        n = self.effective_size

        total = float(np.sum(w))
        enbw = float(np.sum(w * w))

        divisor = total * total
        if abs(divisor) > 1e-9:
            enbw = n * enbw / divisor

        self.coherent_gain = total / n
        self.enbw = enbw
        self.power_gain = self.coherent_gain * self.coherent_gain * enbw

    @property
    def combined_gain(self) -> float:
        """Gain correction for power spectra reduced with the 3-bin sum."""
        return self.coherent_gain * self.power_gain

    @property
    def coefficients(self) -> np.ndarray:
        """Copy of the effective coefficients."""
        return self._coefficients.copy()

    def __call__(self, data: np.ndarray, out: np.ndarray | None = None) -> np.ndarray:
        """
        Multiply a block by the window coefficients.

        Works for real and complex data. `out` may be `data` itself.

        Args:
            data: Block of exactly effective_size samples
            out: Optional destination array

        Returns:
            Windowed block
        """
        data = np.asarray(data)
        if data.ndim != 1 or len(data) != self.effective_size:
            raise SizeError(
                "Data length does not match window",
                "data", self.effective_size, data.shape,
            )
        return np.multiply(data, self._coefficients, out=out)

    @staticmethod
    def apply_gain_correction(
        data: np.ndarray,
        gain: float,
        out: np.ndarray | None = None,
    ) -> np.ndarray:
        """Divide a block by a window gain."""
        return np.divide(data, gain, out=out)
