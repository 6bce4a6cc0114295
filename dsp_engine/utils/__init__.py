"""
Utility module for the DSP engine.

Contains helper functions used for error and log messages.
"""

from .formatting import (
    format_frequency,
    format_sample_rate,
    format_ratio,
)

__all__ = [
    "format_frequency",
    "format_sample_rate",
    "format_ratio",
]
