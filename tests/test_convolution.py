"""
Tests für FFT-Faltung.
"""

import pytest
import numpy as np

from dsp_engine.core.convolution import FftConvolver
from dsp_engine.core.errors import ConfigError, SizeError
from dsp_engine.core.numeric import convolve


class TestFftConvolverSetup:
    """Tests für Konstruktion des Faltungsobjekts."""

    @pytest.mark.parametrize("signal_length,kernel_length,fft_size", [
        (6, 6, 16),
        (8, 9, 16),
        (9, 9, 32),
        (1, 1, 1),
        (1000, 46500, 65536),
    ])
    def test_minimal_fft_size(self, signal_length, kernel_length, fft_size):
        """FFT-Größe ist die kleinste Zweierpotenz >= N + M - 1."""
        convolver = FftConvolver(signal_length, kernel_length)

        assert convolver.convolution_length == signal_length + kernel_length - 1
        assert convolver.fft_size == fft_size

    def test_invalid_lengths(self):
        """Längen <= 0 werden abgelehnt."""
        with pytest.raises(ConfigError):
            FftConvolver(0, 10)
        with pytest.raises(ConfigError):
            FftConvolver(10, -1)

    def test_reinitialize(self):
        """Neu-Initialisierung ersetzt alle Größen."""
        convolver = FftConvolver(4, 4)
        convolver.reinitialize(100, 20)

        assert convolver.signal_length == 100
        assert convolver.kernel_length == 20
        assert convolver.fft_size == 128
        assert len(convolver(np.ones(100), np.ones(20))) == 119

    def test_failed_reinitialize_keeps_state(self):
        """Fehlgeschlagene Neu-Initialisierung lässt Zustand unverändert."""
        convolver = FftConvolver(6, 6)

        with pytest.raises(ConfigError):
            convolver.reinitialize(0, 6)

        assert convolver.fft_size == 16
        np.testing.assert_allclose(convolver(np.ones(6), np.ones(6))[5], 6.0)


class TestFftConvolution:
    """Tests für Faltungsergebnisse."""

    def test_known_result(self):
        """[1]*6 gefaltet mit [1]*6."""
        convolver = FftConvolver(6, 6)
        result = convolver(np.ones(6), np.ones(6))

        np.testing.assert_allclose(
            result, [1, 2, 3, 4, 5, 6, 5, 4, 3, 2, 1], atol=1e-12
        )

    @pytest.mark.parametrize("signal_length,kernel_length", [
        (3, 5), (64, 64), (100, 7), (257, 1000),
    ])
    def test_matches_direct_convolution(self, signal_length, kernel_length):
        """Entspricht direkter Faltung."""
        rng = np.random.default_rng(signal_length)
        signal = rng.standard_normal(signal_length)
        kernel = rng.standard_normal(kernel_length)

        result = FftConvolver(signal_length, kernel_length)(signal, kernel)

        np.testing.assert_allclose(result, convolve(signal, kernel), atol=1e-9)

    def test_large_random_integers(self):
        """1000 x 46500 Zufallszahlen: Abweichung < 1/10 Standardabweichung."""
        rng = np.random.default_rng(42)
        signal = rng.integers(-100, 100, 1000).astype(float)
        kernel = rng.integers(-100, 100, 46500).astype(float)

        result = FftConvolver(1000, 46500)(signal, kernel)
        expected = convolve(signal, kernel)

        assert len(result) == 47499
        assert np.max(np.abs(result - expected)) < np.std(expected) / 10

    def test_shorter_inputs(self):
        """Kürzere Eingaben werden ebenfalls mit Nullen aufgefüllt."""
        convolver = FftConvolver(10, 10)
        result = convolver(np.ones(3), np.ones(2))

        np.testing.assert_allclose(result, [1, 2, 2, 1], atol=1e-12)

    def test_output_array(self):
        """Ergebnis kann in vorhandenes Array geschrieben werden."""
        convolver = FftConvolver(4, 2)
        out = np.zeros(5)
        result = convolver(np.array([1.0, 2.0, 3.0, 4.0]), np.array([1.0, -1.0]), out=out)

        assert result is out
        np.testing.assert_allclose(out, [1, 1, 1, 1, -4], atol=1e-12)

    def test_repeatable(self):
        """Wiederholte Aufrufe liefern identische Ergebnisse."""
        rng = np.random.default_rng(7)
        signal = rng.standard_normal(100)
        kernel = rng.standard_normal(31)
        convolver = FftConvolver(100, 31)

        first = convolver(signal, kernel)
        second = convolver(signal, kernel)

        np.testing.assert_array_equal(first, second)

    def test_oversized_input(self):
        """Zu lange Eingabe wird abgelehnt."""
        convolver = FftConvolver(8, 4)

        with pytest.raises(SizeError):
            convolver(np.ones(9), np.ones(4))
        with pytest.raises(SizeError):
            convolver(np.ones(8), np.ones(5))

    def test_empty_input(self):
        """Leere Eingabe wird abgelehnt."""
        convolver = FftConvolver(8, 4)

        with pytest.raises(SizeError):
            convolver(np.array([]), np.ones(4))

    def test_wrong_output_length(self):
        """Falsche Ausgabelänge wird abgelehnt."""
        convolver = FftConvolver(8, 4)

        with pytest.raises(SizeError):
            convolver(np.ones(8), np.ones(4), out=np.zeros(8))
