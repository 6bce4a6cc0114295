"""
Tests für Resampling-Modul.
"""

import logging
import math

import pytest
import numpy as np

from dsp_engine.core.errors import ConfigError, SizeError
from dsp_engine.core.resample import (
    ResampleConfig,
    ResampleFactors,
    Resampler,
    compute_resample_factors,
    resample_range,
    resample_signal,
)
from dsp_engine.core.signals import ToneParams, tone


class TestResampleFactors:
    """Tests für Suche nach rationalen Faktoren."""

    @pytest.mark.parametrize("ratio", [27.65421, 0.8659, 1.5, 0.3, 44100 / 48000])
    def test_close_approximation(self, ratio):
        """Gefundenes Verhältnis liegt nahe am Ziel."""
        up, down = compute_resample_factors(ratio)

        assert 1 <= up <= 128
        assert 1 <= down <= 128
        assert abs(up / down - ratio) < 0.05

    def test_exact_fraction(self):
        """Darstellbare Brüche werden exakt gefunden."""
        assert compute_resample_factors(1.5) == ResampleFactors(3, 2)
        assert compute_resample_factors(0.75) == ResampleFactors(3, 4)

    def test_integer_ratio(self):
        """Ganzzahliges Verhältnis ergibt (r, 1)."""
        assert compute_resample_factors(3.0) == (3, 1)

    def test_ratio_property(self):
        """ratio ist upsample / downsample."""
        assert ResampleFactors(3, 4).ratio == pytest.approx(0.75)

    def test_bounds_respected(self):
        """Kleine Grenzen beschränken Zähler und Nenner."""
        up, down = compute_resample_factors(27.65421, max_numerator=60, max_denominator=10)

        assert up <= 60
        assert down <= 10

    @pytest.mark.parametrize("ratio", [0.0, -1.0])
    def test_non_positive_ratio(self, ratio):
        """Verhältnis <= 0 wird abgelehnt."""
        with pytest.raises(ConfigError):
            compute_resample_factors(ratio)

    @pytest.mark.parametrize("ratio,expected", [
        (100.3, (100, 1)),
        (127.9, (128, 1)),
        (64.6, (65, 1)),
    ])
    def test_large_ratio_integer_bound(self, ratio, expected):
        """Große Verhältnisse: ganzzahlige Grenze ist zulässig, Mediante nicht."""
        assert compute_resample_factors(ratio) == expected

    def test_integer_bound_beats_mediants(self):
        """Ganzzahlige Grenze gewinnt, wenn sie näher liegt als jede Mediante."""
        assert compute_resample_factors(1.00002) == (1, 1)
        assert compute_resample_factors(0.5, max_numerator=1, max_denominator=1) == (1, 1)

    def test_no_admissible_pair(self):
        """Keine zulässige Kombination innerhalb der Grenzen."""
        with pytest.raises(ConfigError):
            compute_resample_factors(200.0)
        with pytest.raises(ConfigError):
            compute_resample_factors(150.5)


class TestResampleConfig:
    """Tests für Resampler-Konfiguration."""

    @pytest.mark.parametrize("n,up,down", [
        (1000, 93, 13), (1000, 100, 1), (1000, 1, 5), (1000, 2, 3),
        (7, 1, 2), (10, 2, 3), (11, 3, 7), (99, 13, 93),
    ])
    def test_resampled_length_law(self, n, up, down):
        """Länge ist floor(N * U / D + 0.5)."""
        config = ResampleConfig(n, up, down, 1000.0, 100.0)

        assert config.resampled_length == math.floor(n * up / down + 0.5)
        assert config.upsampled_length == n * up

    def test_cutoff_upsampling(self):
        """Beim Upsampling gilt die engere Grenzfrequenz."""
        config = ResampleConfig(100, 3, 2, 1000.0, 300.0)

        assert config.cutoff_freq_hz == pytest.approx(300.0)

    def test_cutoff_downsampling(self):
        """Beim Downsampling gilt die weitere Grenzfrequenz."""
        config = ResampleConfig(100, 1, 4, 1000.0, 100.0)

        assert config.cutoff_freq_hz == pytest.approx(125.0)

    def test_rates(self):
        """Abgeleitete Abtastraten."""
        config = ResampleConfig(100, 2, 3, 10000.0, 3333.33)

        assert config.upsampled_freq_hz == pytest.approx(20000.0)
        assert config.resampled_freq_hz == pytest.approx(20000.0 / 3)

    @pytest.mark.parametrize("kwargs", [
        {"signal_length": 0},
        {"upsample_factor": 0},
        {"downsample_factor": -1},
        {"sampling_freq_hz": 0.0},
        {"max_cutoff_freq_hz": 0.0},
        {"num_filter_taps": 2},
        {"kaiser_beta": 0.0},
    ])
    def test_invalid_parameters(self, kwargs):
        """Ungültige Parameter werden abgelehnt."""
        params = {
            "signal_length": 100,
            "upsample_factor": 2,
            "downsample_factor": 3,
            "sampling_freq_hz": 1000.0,
            "max_cutoff_freq_hz": 300.0,
        }
        params.update(kwargs)

        with pytest.raises(ConfigError):
            ResampleConfig(**params)

    @pytest.mark.parametrize("signal_length,upsample_factor", [(1, 1), (2, 1), (1, 2)])
    def test_upsampled_block_too_short(self, signal_length, upsample_factor):
        """N * U <= 2 wird mit den eigenen Parametern abgelehnt."""
        with pytest.raises(ConfigError) as excinfo:
            ResampleConfig(signal_length, upsample_factor, 1, 1000.0, 400.0)

        assert excinfo.value.parameter == "signal_length * upsample_factor"

    def test_short_block_with_upsampling(self):
        """N = 2 ist mit U = 2 zulässig."""
        config = ResampleConfig(2, 2, 1, 1000.0, 400.0)

        assert config.upsampled_length == 4


class TestResampler:
    """Tests für Resampler."""

    def test_identity(self):
        """U = D = 1 gibt das Signal unverändert zurück."""
        signal = np.random.default_rng(0).standard_normal(256)
        resampler = Resampler(256, 1, 1, 1000.0, 500.0, num_filter_taps=101)

        result = resampler(signal)

        assert len(result) == 256
        np.testing.assert_allclose(result, signal, atol=1e-9)

    @pytest.mark.parametrize("n,up,down,fs,cutoff", [
        (1000, 93, 13, 100.0, 50.0),
        (1000, 100, 1, 100.0, 50.0),
        (1000, 1, 5, 10000.0, 1000.0),
        (1000, 2, 3, 10000.0, 3333.33),
    ])
    def test_output_length(self, n, up, down, fs, cutoff):
        """Ausgabe hat die berechnete Länge."""
        resampler = Resampler(n, up, down, fs, cutoff, num_filter_taps=1001, kaiser_beta=10.0)
        result = resampler(np.ones(n))

        assert resampler.resampled_length == math.floor(n * up / down + 0.5)
        assert len(result) == resampler.resampled_length

    def test_preserves_tone_rational(self):
        """2/3-Resampling erhält einen Sinuston."""
        fs = 10000.0
        params = ToneParams(1.0, 500.0)
        resampler = Resampler(1000, 2, 3, fs, 3333.33)

        result = resampler(tone(params, fs, 1000))
        expected = tone(params, resampler.resampled_freq_hz, resampler.resampled_length)

        # Ränder enthalten das Einschwingen des Filters
        np.testing.assert_allclose(result[200:460], expected[200:460], atol=1e-2)

    def test_preserves_tone_downsampling(self):
        """Downsampling um 5 erhält einen Sinuston unterhalb der Grenzfrequenz."""
        fs = 10000.0
        params = ToneParams(1.0, 200.0)
        resampler = Resampler(2000, 1, 5, fs, 1000.0)

        result = resampler(tone(params, fs, 2000))
        expected = tone(params, fs / 5, 400)

        np.testing.assert_allclose(result[120:280], expected[120:280], atol=1e-2)

    def test_output_array(self):
        """Ergebnis kann in vorhandenes Array geschrieben werden."""
        resampler = Resampler(100, 2, 1, 1000.0, 400.0, num_filter_taps=31)
        out = np.zeros(200)

        assert resampler(np.ones(100), out=out) is out

    def test_repeatable(self):
        """Wiederholte Aufrufe liefern identische Ergebnisse."""
        signal = np.random.default_rng(3).standard_normal(300)
        resampler = Resampler(300, 3, 2, 1000.0, 400.0, num_filter_taps=61)

        np.testing.assert_array_equal(resampler(signal), resampler(signal))

    def test_direct_convolution_mode(self):
        """Direkte Faltung liefert dasselbe Ergebnis wie FFT-Faltung."""
        signal = np.random.default_rng(4).standard_normal(120)
        fast = Resampler(120, 2, 3, 1000.0, 300.0, num_filter_taps=41)
        direct = Resampler(120, 2, 3, 1000.0, 300.0, num_filter_taps=41,
                           use_fast_convolution=False)

        np.testing.assert_allclose(fast(signal), direct(signal), atol=1e-10)

    def test_from_config(self):
        """Konstruktion aus Konfigurationsobjekt."""
        config = ResampleConfig(100, 3, 4, 1000.0, 300.0, num_filter_taps=31)
        resampler = Resampler.from_config(config)

        assert resampler.config is config
        assert len(resampler(np.ones(100))) == 75

    def test_zero_signal_length(self):
        """signal_length = 0 wird abgelehnt."""
        with pytest.raises(ConfigError):
            Resampler(0, 2, 3, 1000.0, 300.0)

    def test_cutoff_above_nyquist(self):
        """Grenzfrequenz oberhalb Nyquist wird beim Filterentwurf abgelehnt."""
        with pytest.raises(ConfigError):
            Resampler(100, 1, 2, 1000.0, 800.0, num_filter_taps=31)

    def test_length_mismatch(self):
        """Falsche Eingabelänge wird abgelehnt."""
        resampler = Resampler(100, 2, 3, 1000.0, 300.0, num_filter_taps=31)

        with pytest.raises(SizeError):
            resampler(np.ones(101))
        with pytest.raises(SizeError):
            resampler(np.ones(100), out=np.zeros(10))

    def test_complex_signal_rejected(self):
        """Komplexe Eingabe wird abgelehnt."""
        resampler = Resampler(100, 2, 3, 1000.0, 300.0, num_filter_taps=31)

        with pytest.raises(TypeError):
            resampler(np.ones(100, dtype=complex))

    def test_reinitialize(self):
        """Neu-Initialisierung ersetzt den kompletten Zustand."""
        resampler = Resampler(100, 2, 3, 1000.0, 300.0, num_filter_taps=31)
        resampler.reinitialize(50, 1, 2, 1000.0, 250.0, num_filter_taps=31)

        assert resampler.signal_length == 50
        assert resampler.resampled_length == 25
        assert len(resampler(np.ones(50))) == 25

    def test_failed_reinitialize_keeps_state(self):
        """Fehlgeschlagene Neu-Initialisierung lässt Zustand unverändert."""
        resampler = Resampler(100, 2, 3, 1000.0, 300.0, num_filter_taps=31)

        with pytest.raises(ConfigError):
            resampler.reinitialize(0, 2, 3, 1000.0, 300.0)

        assert resampler.signal_length == 100
        assert len(resampler(np.ones(100))) == 67


class TestResampleRange:
    """Tests für lineare Interpolation auf Ziellänge."""

    def test_endpoints_kept(self):
        """Erster und letzter Wert bleiben erhalten."""
        data = np.random.default_rng(5).standard_normal(37)
        result = resample_range(data, 100)

        assert result[0] == pytest.approx(data[0])
        assert result[-1] == pytest.approx(data[-1])

    def test_linear_ramp(self):
        """Rampe bleibt Rampe."""
        result = resample_range(np.arange(11, dtype=float), 21)

        np.testing.assert_allclose(result, np.arange(21) / 2)

    def test_same_length_copy(self):
        """Gleiche Länge liefert Kopie."""
        data = np.arange(5, dtype=float)
        result = resample_range(data, 5)

        np.testing.assert_array_equal(result, data)
        assert result is not data

    def test_invalid_arguments(self):
        """Leere Eingabe oder Ziellänge <= 0 wird abgelehnt."""
        with pytest.raises(SizeError):
            resample_range(np.array([]), 10)
        with pytest.raises(ConfigError):
            resample_range(np.ones(10), 0)


class TestResampleSignal:
    """Tests für Resampling mit Abtastraten."""

    def test_identity(self):
        """Kein Resampling bei gleicher Rate."""
        data = np.random.randn(1000)
        result = resample_signal(data, 44100, 44100)

        np.testing.assert_array_equal(result, data)

    def test_downsample(self):
        """Downsampling 44100 → 22050."""
        data = np.random.randn(4410)
        result = resample_signal(data, 44100, 22050)

        assert len(result) == 2205

    def test_upsample_stereo(self):
        """Upsampling von Stereo-Daten 22050 → 44100."""
        data = np.random.randn(500, 2)
        result = resample_signal(data, 22050, 44100, num_filter_taps=101)

        assert result.shape == (1000, 2)

    def test_rational_rates(self):
        """48000 → 44100 mit exakten Faktoren 147/160."""
        data = np.random.randn(480)
        result = resample_signal(data, 48000, 44100, max_numerator=200, max_denominator=200,
                                 num_filter_taps=101)

        assert len(result) == 441

    def test_preserves_dtype(self):
        """float32 bleibt float32."""
        data = np.random.randn(400).astype(np.float32)
        result = resample_signal(data, 8000, 4000, num_filter_taps=51)

        assert result.dtype == np.float32

    def test_integer_input_keeps_dtype(self):
        """int16 bleibt int16, Werte werden gerundet."""
        data = np.full(400, 1000, dtype=np.int16)
        result = resample_signal(data, 8000, 16000, num_filter_taps=51)

        assert result.dtype == np.int16
        assert len(result) == 800
        assert abs(int(result[400]) - 1000) <= 1

    def test_integer_input_clipped(self):
        """Überschwinger werden auf den int16-Bereich begrenzt."""
        data = np.zeros(200, dtype=np.int16)
        data[100:] = 32767
        result = resample_signal(data, 8000, 16000, num_filter_taps=51)

        assert result.dtype == np.int16
        assert result.max() == 32767
        assert result.min() >= -32768

    def test_approximated_ratio_warns(self, caplog):
        """Nicht darstellbares Verhältnis wird angenähert und protokolliert."""
        data = np.random.randn(100)

        with caplog.at_level(logging.WARNING, logger="dsp_engine.core.resample"):
            result = resample_signal(data, 44100, 44101, num_filter_taps=51)

        assert len(result) == 100
        assert any("exceeds factor bounds" in r.getMessage() for r in caplog.records)

    def test_large_ratio_uses_integer_factor(self, caplog):
        """1 kHz -> 100.3 kHz wird mit Faktor 100/1 angenähert."""
        data = np.random.randn(20)

        with caplog.at_level(logging.WARNING, logger="dsp_engine.core.resample"):
            result = resample_signal(data, 1000, 100300, num_filter_taps=51)

        assert len(result) == 2000
        assert any("100/1" in r.getMessage() for r in caplog.records)

    def test_invalid_rates(self):
        """Abtastraten <= 0 werden abgelehnt."""
        with pytest.raises(ConfigError):
            resample_signal(np.ones(10), 0, 44100)
