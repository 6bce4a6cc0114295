"""
Numeric Primitives

Scalar helpers and the direct convolution used by the spectral stack.

Technical assumptions:
- Integer helpers use exact integer arithmetic (no log2 rounding)
- sinc() is the unnormalized sin(x)/x, sinc_norm() the normalized variant
- convolve() is the O(N*M) reference path, the FFT engine must agree with it
"""

import math
import numpy as np

from .errors import SizeError


SQRT_2 = math.sqrt(2.0)


def is_power_of_2(n: int) -> bool:
    """True for 1, 2, 4, 8, ...; False for zero and negative values."""
    n = int(n)
    return n > 0 and (n & (n - 1)) == 0


def next_power_of_2(n: int) -> int:
    """Smallest power of two that is greater than or equal to n."""
    n = int(n)
    if n <= 1:
        return 1
    return 1 << (n - 1).bit_length()


def gcd(a: int, b: int) -> int:
    """Greatest common divisor of two integers."""
    return math.gcd(int(a), int(b))


def sinc(x):
    """Unnormalized sinc, sin(x)/x with sinc(0) == 1."""
    return np.sinc(np.asarray(x, dtype=np.float64) / np.pi)


def sinc_norm(x):
    """Normalized sinc, sin(pi*x)/(pi*x) with sinc_norm(0) == 1."""
    return np.sinc(np.asarray(x, dtype=np.float64))


def convolve(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """
    Direct linear convolution of two sequences.

    Args:
        a: First sequence (real or complex, 1D)
        b: Second sequence (real or complex, 1D)

    Returns:
        Full convolution with len(a) + len(b) - 1 samples

    Raises:
        SizeError: If either sequence is empty
    """
    a = np.asarray(a)
    b = np.asarray(b)

    if a.size == 0:
        raise SizeError("Cannot convolve an empty sequence", "a", "length > 0", 0)
    if b.size == 0:
        raise SizeError("Cannot convolve an empty sequence", "b", "length > 0", 0)

    return np.convolve(a.ravel(), b.ravel(), mode="full")
