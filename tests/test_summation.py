"""Tests for subharmonic summation and low-frequency suppression."""

import numpy as np
import pytest

from shspitch import LogFrequencyAxis
from shspitch.spectrum import LogSpectrum, low_frequency_cutoff_bin, suppress_low_frequencies
from shspitch.summation import harmonic_shifts, subharmonic_summation


@pytest.fixture
def axis():
    """200 bins from 25 Hz, 24 bins per octave."""
    return LogFrequencyAxis.octave_scale(fmin=25.0, n_octaves=200 / 24, points_per_octave=24)


# =============================================================================
# Subharmonic summation
# =============================================================================

class TestSubharmonicSummation:
    """Test the shifted, compressed spectrum sum."""

    def test_harmonic_shifts(self):
        assert harmonic_shifts(4, 12) == [12, 19, 24]
        assert harmonic_shifts(2, 24) == [24]

    def test_impulse_spreads_to_subharmonics(self):
        x = np.zeros(60)
        x[40] = 1.0
        ss = subharmonic_summation(x, n_harmonics=3, compression_factor=0.5,
                                   points_per_octave=12)

        expected = np.zeros(60)
        expected[40] = 1.0 / 3
        expected[40 - 12] = 0.5 / 3
        expected[40 - 19] = 0.25 / 3
        np.testing.assert_allclose(ss, expected)

    def test_harmonics_reinforce_fundamental(self):
        x = np.zeros(100)
        for shift in (0, 24, 38):
            x[30 + shift] = 1.0
        ss = subharmonic_summation(x, 15, 0.85, 24)
        assert np.argmax(ss) == 30
        assert ss[30] == pytest.approx((1.0 + 0.85 + 0.85 ** 2) / 15)

    def test_shift_beyond_length_only_normalizes(self):
        x = np.arange(10, dtype=float)
        ss = subharmonic_summation(x, 4, 0.85, 24)
        np.testing.assert_allclose(ss, x / 4)

    def test_normalized_by_number_of_harmonics(self):
        # The division by n_harmonics is applied even after compression;
        # a flat spectrum with no overlapping shifts comes out at 1/n_harmonics.
        x = np.ones(5)
        ss = subharmonic_summation(x, 2, 1.0, 24)
        np.testing.assert_allclose(ss, np.full(5, 0.5))

    def test_negative_values_clamped(self):
        x = -np.ones(50)
        ss = subharmonic_summation(x, 5, 0.85, 12)
        assert np.all(ss == 0.0)

    def test_writes_into_buffer(self):
        x = np.random.default_rng(1).random(80)
        out = np.full(80, 123.0)
        result = subharmonic_summation(x, 6, 0.85, 12, out=out)
        assert result is out
        np.testing.assert_array_equal(out, subharmonic_summation(x, 6, 0.85, 12))

    def test_input_unchanged(self):
        x = np.random.default_rng(2).random(80)
        before = x.copy()
        subharmonic_summation(x, 6, 0.85, 12)
        np.testing.assert_array_equal(x, before)


# =============================================================================
# Low-frequency suppression
# =============================================================================

class TestLowFrequencySuppression:
    """Test zeroing of bins below lf_cut."""

    def test_cutoff_bin(self, axis):
        # ceil(log2(100)) = 7 -> (7 - log2(25)) * 24 = 56.55
        assert low_frequency_cutoff_bin(100.0, axis) == 56

    def test_zeroes_up_to_cutoff_bin(self, axis):
        x = np.ones(axis.n_bins)
        n = suppress_low_frequencies(x, 100.0, axis)
        assert n == 57
        assert np.all(x[:57] == 0.0)
        assert np.all(x[57:] == 1.0)

    def test_disabled(self, axis):
        x = np.ones(axis.n_bins)
        assert suppress_low_frequencies(x, 0.0, axis) == 0
        assert np.all(x == 1.0)

    def test_below_axis_zeroes_nothing(self, axis):
        x = np.ones(axis.n_bins)
        assert low_frequency_cutoff_bin(1.0, axis) < 0
        assert suppress_low_frequencies(x, 1.0, axis) == 0
        assert np.all(x == 1.0)

    def test_above_axis_zeroes_everything(self, axis):
        x = np.ones(axis.n_bins)
        assert low_frequency_cutoff_bin(20000.0, axis) >= axis.n_bins
        assert suppress_low_frequencies(x, 20000.0, axis) == axis.n_bins
        assert np.all(x == 0.0)


# =============================================================================
# LogSpectrum
# =============================================================================

class TestLogSpectrum:
    """Test the single-frame container."""

    def test_properties(self, axis):
        spectrum = LogSpectrum(np.zeros(axis.n_bins), axis)
        assert spectrum.n_bins == 200
        assert spectrum.get_frequency(24) == pytest.approx(50.0)
        assert len(spectrum.frequencies()) == 200

    def test_length_mismatch(self, axis):
        with pytest.raises(ValueError):
            LogSpectrum(np.zeros(10), axis)

    def test_not_1d(self, axis):
        with pytest.raises(ValueError):
            LogSpectrum(np.zeros((2, 200)), axis)

    def test_to_pitch_candidates(self, axis):
        x = np.zeros(axis.n_bins)
        x[[49, 50, 51]] = [0.5, 1.0, 0.5]
        candidates = LogSpectrum(x, axis).to_pitch_candidates()
        assert candidates.count >= 1
        assert candidates.best_frequency == pytest.approx(axis.frequency(50))
