"""
FFT Convolution

Linear convolution of two fixed-size blocks via zero-padded FFTs.

Technical assumptions:
- Sizes are bound at construction, workspaces are allocated once
- FFT size is the smallest power of two covering signal + kernel - 1,
  which is sufficient for a linear (non-circular) result
- Inputs are real, the result is the real part of the inverse transform
- One block per call, no overlap-add for long signals
"""

import logging
import numpy as np

from . import fft
from .errors import ConfigError, SizeError
from .numeric import next_power_of_2


logger = logging.getLogger(__name__)


class FftConvolver:
    """
    FFT-accelerated linear convolution for fixed block sizes.

    Usage:
        convolver = FftConvolver(signal_length=1000, kernel_length=101)
        result = convolver(signal, kernel)   # 1100 samples

    Shorter inputs are accepted (they are zero padded as well), longer
    ones raise SizeError since they would wrap around in the workspace.
    """

    def __init__(self, signal_length: int, kernel_length: int):
        """
        Allocate workspaces.

        Args:
            signal_length: Maximum signal length (> 0)
            kernel_length: Maximum kernel length (> 0)
        """
        if signal_length <= 0:
            raise ConfigError("Signal length must be positive", "signal_length", "> 0", signal_length)
        if kernel_length <= 0:
            raise ConfigError("Kernel length must be positive", "kernel_length", "> 0", kernel_length)

        self.signal_length = int(signal_length)
        self.kernel_length = int(kernel_length)
        self.convolution_length = self.signal_length + self.kernel_length - 1
        self.fft_size = next_power_of_2(self.convolution_length)

        self._signal_workspace = np.zeros(self.fft_size, dtype=np.complex128)
        self._kernel_workspace = np.zeros(self.fft_size, dtype=np.complex128)

        logger.debug(
            "FftConvolver: signal=%d kernel=%d fft_size=%d",
            self.signal_length, self.kernel_length, self.fft_size,
        )

    def reinitialize(self, signal_length: int, kernel_length: int) -> None:
        """Rebind to new sizes. On error the current state is kept."""
        fresh = FftConvolver(signal_length, kernel_length)
        self.__dict__.update(fresh.__dict__)

    def __call__(
        self,
        signal: np.ndarray,
        kernel: np.ndarray,
        out: np.ndarray | None = None,
    ) -> np.ndarray:
        """
        Convolve signal with kernel.

        Procedure:
        1. Copy both inputs into their workspace, zero pad the rest
        2. Forward FFT of both workspaces
        3. Pointwise complex multiplication
        4. Inverse FFT, real part of the first len(signal)+len(kernel)-1 bins

        Args:
            signal: Signal block (1 .. signal_length samples)
            kernel: Kernel (1 .. kernel_length samples)
            out: Optional destination of exactly len(signal)+len(kernel)-1

        Returns:
            Linear convolution result

        Raises:
            SizeError: On empty or oversized input, or wrong out length
        """
        signal = np.asarray(signal)
        kernel = np.asarray(kernel)

        self._check_input(signal, "signal", self.signal_length)
        self._check_input(kernel, "kernel", self.kernel_length)

        result_length = len(signal) + len(kernel) - 1
        if out is not None and len(out) != result_length:
            raise SizeError("Output length mismatch", "len(out)", result_length, len(out))

        self._signal_workspace[:len(signal)] = signal
        self._signal_workspace[len(signal):] = 0.0
        self._kernel_workspace[:len(kernel)] = kernel
        self._kernel_workspace[len(kernel):] = 0.0

        fft.forward(self._signal_workspace, inplace=True)
        fft.forward(self._kernel_workspace, inplace=True)

        self._signal_workspace *= self._kernel_workspace

        fft.inverse(self._signal_workspace, inplace=True)

        result = self._signal_workspace.real[:result_length]
        if out is None:
            return result.copy()
        out[:] = result
        return out

    @staticmethod
    def _check_input(data: np.ndarray, name: str, bound: int) -> None:
        if data.ndim != 1:
            raise SizeError("Expected a 1D sequence", name, "ndim == 1", data.ndim)
        if len(data) == 0:
            raise SizeError("Cannot convolve an empty sequence", f"len({name})", "> 0", 0)
        if len(data) > bound:
            raise SizeError(
                "Input exceeds bound workspace length", f"len({name})", f"<= {bound}", len(data)
            )
