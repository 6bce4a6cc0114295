"""
Test Signal Generators

Sinusoidal tones for exercising the spectral and resampling code.

Technical assumptions:
- Time axis starts at t = 0 with step 1 / sample_rate
- Phase is given in radians, offset is a DC term added per tone
- sample_rate should be >= 2 * frequency (no aliasing check)
"""

from dataclasses import dataclass
from typing import Sequence
import numpy as np


@dataclass(frozen=True)
class ToneParams:
    """
    Parameters of one sinusoidal tone.

    Attributes:
        amplitude: Peak amplitude
        frequency: Frequency in Hz
        phase: Phase offset in radians
        offset: DC offset
    """
    amplitude: float
    frequency: float
    phase: float = 0.0
    offset: float = 0.0


def tone(params: ToneParams, sample_rate: float, count: int) -> np.ndarray:
    """
    Generate a single sinusoidal tone.

    Args:
        params: Tone definition
        sample_rate: Sample rate in Hz
        count: Number of samples

    Returns:
        amplitude * sin(2*pi*f*t + phase) + offset, Shape: (count,)
    """
    t = np.arange(count) / sample_rate
    return (
        params.amplitude * np.sin(2 * np.pi * params.frequency * t + params.phase)
        + params.offset
    )


def multi_tone(
    all_params: Sequence[ToneParams],
    sample_rate: float,
    count: int,
) -> np.ndarray:
    """Sum of several tones (offsets add up as well)."""
    samples = np.zeros(count)
    for params in all_params:
        samples += tone(params, sample_rate, count)
    return samples
