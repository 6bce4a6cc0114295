"""
Error taxonomy of the DSP engine.

Technical assumptions:
- All errors derive from ValueError, callers catching ValueError keep working
- ConfigError: invalid construction parameters
- SizeError: call-time length mismatch or unsupported transform size
- Every error names the offending parameter, the bound and the actual value
"""

from typing import Any, Optional


class DspError(ValueError):
    """
    Base class for all errors raised by the DSP engine.

    Attributes:
        parameter: Name of the offending argument
        expected: Bound or condition the argument had to satisfy
        actual: Value that was supplied
    """

    def __init__(
        self,
        message: str,
        parameter: Optional[str] = None,
        expected: Any = None,
        actual: Any = None,
    ):
        self.parameter = parameter
        self.expected = expected
        self.actual = actual

        if parameter is not None:
            message = f"{message} ({parameter}: expected {expected}, got {actual})"
        super().__init__(message)


class ConfigError(DspError):
    """Invalid construction parameter (length, factor, frequency, bandwidth)."""
    pass


class SizeError(DspError):
    """Sequence length does not match what the operation is bound to."""
    pass
