"""
Complex FFT Core

Power-of-two complex FFT and the spectrum reductions built on it.

Technical assumptions:
- Only power-of-two lengths are transformed, other lengths raise SizeError
  (no transparent zero padding)
- Forward transform is unnormalized and uses the positive-exponent kernel
  X[k] = sum(x[n] * exp(+2*pi*i*n*k/N)), i.e. N * numpy.fft.ifft(x)
- Inverse transform divides by N, inverse(forward(x)) == x
- Reductions work on a "half" (first N/2 bins) or "full" window of the
  spectrum, bins beyond the half are left untouched or zeroed on request

In-place operation:
    Every function returns a new array by default. With inplace=True the
    input array itself is modified and returned; it must then be a
    contiguous 1D numpy array of complex128 (float64 for real-valued
    power spectra), otherwise TypeError is raised.
"""

import numpy as np

from .errors import ConfigError, SizeError
from .numeric import SQRT_2, convolve, is_power_of_2


_THREE_BIN_KERNEL = np.ones(3)


def _checked_inplace(data, kinds: tuple) -> np.ndarray:
    """Validate an array that is about to be modified in place."""
    if not isinstance(data, np.ndarray):
        raise TypeError(f"In-place operation needs a numpy array, got {type(data).__name__}")
    if data.dtype not in kinds:
        raise TypeError(f"In-place operation needs dtype {kinds}, got {data.dtype}")
    if data.ndim != 1 or not data.flags.c_contiguous:
        raise TypeError("In-place operation needs a contiguous 1D array")
    return data


def _complex_input(samples, inplace: bool) -> np.ndarray:
    if inplace:
        return _checked_inplace(samples, (np.dtype(np.complex128),))

    data = np.array(samples, dtype=np.complex128)
    if data.ndim != 1:
        raise SizeError("Expected a 1D sequence", "samples", "ndim == 1", data.ndim)
    return data


def _check_fft_size(data: np.ndarray) -> None:
    n = len(data)
    if not is_power_of_2(n):
        raise SizeError("FFT length must be a power of two", "len(samples)", "2^k", n)


def _bit_reversed_indices(n: int) -> np.ndarray:
    """Index b for every index a, b being a with its log2(n) bits reversed."""
    bits = n.bit_length() - 1
    index = np.arange(n)
    reversed_index = np.zeros(n, dtype=np.intp)

    for _ in range(bits):
        reversed_index = (reversed_index << 1) | (index & 1)
        index = index >> 1

    return reversed_index


def _cooley_tukey(data: np.ndarray) -> None:
    """
    Iterative decimation-in-frequency FFT on a contiguous array.

    Each stage splits the data into blocks of n samples and combines
    sample l with sample l + n/2 of every block:
        upper = x[l] + x[l + k]
        lower = (x[l] - x[l + k]) * T^l
    The stage twiddle T is the square of the previous one (seeded with
    exp(i*pi/N)), its powers are accumulated by repeated multiplication.
    A bit-reversal permutation restores natural bin order.
    """
    size = len(data)
    if size < 2:
        return

    phi = complex(np.cos(np.pi / size), np.sin(np.pi / size))
    k = size

    while k > 1:
        n = k
        k >>= 1
        phi = phi * phi

        twiddles = np.full(k, phi, dtype=np.complex128)
        twiddles[0] = 1.0
        twiddles = np.cumprod(twiddles)

        blocks = data.reshape(-1, n)
        upper = blocks[:, :k]
        lower = blocks[:, k:]

        difference = upper - lower
        upper += lower
        np.multiply(difference, twiddles, out=lower)

    data[:] = data[_bit_reversed_indices(size)]


def forward(samples, inplace: bool = False) -> np.ndarray:
    """
    Forward (unnormalized) FFT.

    Args:
        samples: Complex or real sequence, length 2^k
        inplace: Transform the given complex128 array in place

    Returns:
        Complex spectrum, same length

    Raises:
        SizeError: If the length is not a power of two
    """
    data = _complex_input(samples, inplace)
    _check_fft_size(data)
    _cooley_tukey(data)
    return data


def inverse(spectrum, inplace: bool = False) -> np.ndarray:
    """
    Inverse FFT including the 1/N scaling.

    Conjugates, runs the forward transform and conjugates again, so no
    second twiddle recursion is needed.
    """
    data = _complex_input(spectrum, inplace)
    _check_fft_size(data)

    np.conjugate(data, out=data)
    _cooley_tukey(data)
    np.conjugate(data, out=data)
    data /= len(data)
    return data


def normalize(spectrum, inplace: bool = False) -> np.ndarray:
    """Divide every bin by the spectrum length N."""
    data = _complex_input(spectrum, inplace)
    if len(data) == 0:
        raise SizeError("Cannot normalize an empty spectrum", "len(spectrum)", "> 0", 0)
    data /= len(data)
    return data


def denormalize(spectrum, inplace: bool = False) -> np.ndarray:
    """Multiply every bin by the spectrum length N."""
    data = _complex_input(spectrum, inplace)
    if len(data) == 0:
        raise SizeError("Cannot denormalize an empty spectrum", "len(spectrum)", "> 0", 0)
    data *= len(data)
    return data


def _active_length(size: int, full_spectrum: bool) -> int:
    return size if full_spectrum else size // 2


def _store_real(
    data: np.ndarray,
    values: np.ndarray,
    zero_unused: bool,
    clear_imag: bool = True,
) -> np.ndarray:
    """Write reduced values into the real part of the active window."""
    active = len(values)
    data.real[:active] = values
    if clear_imag:
        data.imag[:active] = 0.0
    if zero_unused:
        data[active:] = 0.0
    return data


def to_magnitude(
    spectrum,
    full_spectrum: bool = False,
    inplace: bool = False,
    zero_unused: bool = False,
) -> np.ndarray:
    """
    Convert a complex spectrum to a single-sided magnitude spectrum.

    Every non-DC bin is doubled before taking the modulus, which folds the
    energy of the negative frequencies back into the positive half.

    Args:
        spectrum: Complex spectrum (usually normalized)
        full_spectrum: Use all N bins instead of the first N/2
        inplace: Write modulus into the real part and zero into the
            imaginary part of the given array
        zero_unused: With inplace, zero the bins beyond the active window

    Returns:
        Real magnitude array of the active window length, or the modified
        complex array when inplace is set
    """
    data = _complex_input(spectrum, inplace)
    window = data[:_active_length(len(data), full_spectrum)]

    magnitude = np.abs(window)
    magnitude[1:] *= 2.0

    if not inplace:
        return magnitude
    return _store_real(data, magnitude, zero_unused)


def to_power(
    spectrum,
    full_spectrum: bool = False,
    inplace: bool = False,
    zero_unused: bool = False,
) -> np.ndarray:
    """
    Convert a complex spectrum to a power spectrum (re^2 + im^2).

    Same window and in-place rules as to_magnitude(), without doubling.
    """
    data = _complex_input(spectrum, inplace)
    window = data[:_active_length(len(data), full_spectrum)]

    power = window.real ** 2 + window.imag ** 2

    if not inplace:
        return power
    return _store_real(data, power, zero_unused)


def _power_values(power, full_spectrum: bool, inplace: bool) -> tuple[np.ndarray, np.ndarray]:
    """
    Select the power values a reduction works on.

    A real sequence is used as a whole, a complex container contributes
    the real parts of its active window.

    Returns:
        Tuple of (container, values)
    """
    if inplace:
        data = _checked_inplace(power, (np.dtype(np.float64), np.dtype(np.complex128)))
    else:
        data = np.asarray(power)
        if not np.iscomplexobj(data):
            data = data.astype(np.float64)
        if data.ndim != 1:
            raise SizeError("Expected a 1D sequence", "power", "ndim == 1", data.ndim)

    if np.iscomplexobj(data):
        values = data.real[:_active_length(len(data), full_spectrum)]
    else:
        values = data
    return data, values


def to_psd(
    power,
    bin_width_hz: float,
    full_spectrum: bool = False,
    inplace: bool = False,
    zero_unused: bool = False,
) -> np.ndarray:
    """
    Convert a power spectrum to a power spectral density.

    Args:
        power: Real power spectrum, or complex container holding the power
            values in the real part (as produced by to_power(inplace=True))
        bin_width_hz: Bin width in Hz (sample_rate / N)
        full_spectrum: For complex containers, use all N bins
        inplace: Modify the given array
        zero_unused: With inplace on a complex container, zero the bins
            beyond the active window

    Returns:
        PSD values (real array, or the modified input when inplace is set)

    Raises:
        ConfigError: If bin_width_hz is not positive
    """
    if bin_width_hz <= 0:
        raise ConfigError("Bin width must be positive", "bin_width_hz", "> 0", bin_width_hz)

    data, values = _power_values(power, full_spectrum, inplace)
    psd = values / bin_width_hz

    if not inplace:
        return psd
    if np.iscomplexobj(data):
        return _store_real(data, psd, zero_unused, clear_imag=False)
    data[:] = psd
    return data


def to_three_bin_sum(
    power,
    full_spectrum: bool = False,
    inplace: bool = False,
    zero_unused: bool = False,
) -> np.ndarray:
    """
    Estimate peak tone amplitudes by summing three adjacent power bins.

    The power values are convolved with [1, 1, 1] and the first output
    sample is discarded, so bin i holds the sum of bins i-1, i and i+1.
    sqrt(sum) * sqrt(2) converts the summed RMS power back to a peak
    amplitude. Accurate for single tones near a bin centre, not an
    energy measure for broadband content.

    Args:
        power: Real power spectrum (gain corrected), or complex container
            holding the power values in the real part
        full_spectrum: For complex containers, use all N bins
        inplace: Modify the given array
        zero_unused: With inplace on a complex container, zero the bins
            beyond the active window

    Returns:
        Peak amplitude estimates (real array, or the modified input)
    """
    data, values = _power_values(power, full_spectrum, inplace)

    summed = convolve(values, _THREE_BIN_KERNEL)[1:len(values) + 1]
    magnitude = np.sqrt(summed) * SQRT_2

    if not inplace:
        return magnitude
    if np.iscomplexobj(data):
        return _store_real(data, magnitude, zero_unused, clear_imag=False)
    data[:] = magnitude
    return data
