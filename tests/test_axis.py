"""Tests for LogFrequencyAxis construction and bin/frequency conversion."""

import math
import warnings

import numpy as np
import pytest

from shspitch import LogFrequencyAxis, ShsConfigurationError, NonStandardAxisWarning


@pytest.fixture
def axis():
    """25 Hz to ~6.4 kHz, 24 bins per octave."""
    return LogFrequencyAxis.octave_scale(fmin=25.0, n_octaves=8, points_per_octave=24)


# =============================================================================
# Construction
# =============================================================================

class TestConstruction:
    """Test building axes from parameters and level metadata."""

    def test_octave_scale(self, axis):
        assert axis.n_bins == 192
        assert axis.base == 2.0
        assert axis.is_octave_scale
        assert axis.points_per_octave == 24
        assert axis.freq_step_log == pytest.approx(1.0 / 24)

    def test_from_level_metadata_octave_scale(self):
        fmin_log = math.log2(25.0)
        fmax_log = fmin_log + 191.0 / 24
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            axis = LogFrequencyAxis.from_level_metadata(
                25.0, 2.0 ** fmax_log, 8, 24, fmin_log, fmax_log, 192)

        assert axis.base == 2.0
        assert axis.freq_min_log == fmin_log
        assert axis.freq_step_log == pytest.approx(1.0 / 24)
        assert axis.octave_count == 8

    def test_base_close_to_two_is_snapped(self):
        fmin_log = math.log2(25.0) * (1 + 1e-9)
        axis = LogFrequencyAxis.from_level_metadata(
            25.0, 6400.0, 8, 24, fmin_log, fmin_log + 8, 192)
        assert axis.base == 2.0

    def test_non_standard_base_warns(self):
        fmin_log = math.log(25.0)
        with pytest.warns(NonStandardAxisWarning):
            axis = LogFrequencyAxis.from_level_metadata(
                25.0, 6400.0, 8, 24, fmin_log, fmin_log + 5.5, 192)

        assert axis.base == pytest.approx(math.e)
        assert not axis.is_octave_scale
        assert axis.frequency(0) == pytest.approx(25.0)

    def test_zero_octaves_is_fatal(self):
        with pytest.raises(ShsConfigurationError):
            LogFrequencyAxis.from_level_metadata(25.0, 6400.0, 0, 24, 4.64, 12.64, 192)

    def test_zero_octaves_direct_is_fatal(self):
        with pytest.raises(ShsConfigurationError):
            LogFrequencyAxis(2.0, 4.64, 1.0 / 24, 24, 0, 192)

    def test_underivable_base(self):
        with pytest.raises(ShsConfigurationError):
            LogFrequencyAxis.from_level_metadata(1.0, 100.0, 6, 24, 0.0, 6.0, 145)

    def test_too_few_bins(self):
        with pytest.raises(ShsConfigurationError):
            LogFrequencyAxis(2.0, 4.64, 1.0 / 24, 24, 1, 2)

    def test_flat_metadata_is_fatal(self):
        # fmax_log == fmin_log leaves no log-frequency step between bins
        fmin_log = math.log2(25.0)
        with pytest.raises(ShsConfigurationError):
            LogFrequencyAxis.from_level_metadata(
                25.0, 25.0, 8, 24, fmin_log, fmin_log, 200)

    def test_descending_metadata_is_fatal(self):
        fmin_log = math.log2(25.0)
        with pytest.raises(ShsConfigurationError):
            LogFrequencyAxis.from_level_metadata(
                25.0, 6400.0, 8, 24, fmin_log, fmin_log - 8, 192)

    @pytest.mark.parametrize("step", [0.0, -1.0 / 24, float("nan"), float("inf")])
    def test_invalid_step_is_fatal(self, step):
        with pytest.raises(ShsConfigurationError):
            LogFrequencyAxis(2.0, 4.64, step, 24, 8, 192)

    @pytest.mark.parametrize("ppo", [0, -24, float("nan")])
    def test_invalid_points_per_octave_is_fatal(self, ppo):
        with pytest.raises(ShsConfigurationError):
            LogFrequencyAxis(2.0, 4.64, 1.0 / 24, ppo, 8, 192)

    def test_octave_scale_rejects_non_positive_points_per_octave(self):
        with pytest.raises(ShsConfigurationError):
            LogFrequencyAxis.octave_scale(fmin=25.0, n_octaves=8, points_per_octave=0)

    def test_configuration_error_is_value_error(self):
        assert issubclass(ShsConfigurationError, ValueError)


# =============================================================================
# Conversions
# =============================================================================

class TestConversions:
    """Test bin <-> frequency mapping."""

    def test_first_bin_frequency(self, axis):
        assert axis.frequency(0) == pytest.approx(25.0)

    def test_one_octave_up(self, axis):
        assert axis.frequency(24) == pytest.approx(50.0)
        assert axis.frequency(48) == pytest.approx(100.0)

    def test_log_frequency(self, axis):
        assert axis.log_frequency(24) == pytest.approx(math.log2(50.0))

    def test_fractional_bin(self, axis):
        assert axis.frequency(12) == pytest.approx(25.0 * math.sqrt(2.0))

    def test_bin_from_frequency_inverts(self, axis):
        for b in (0, 10, 37.5, 191):
            assert axis.bin_from_frequency(axis.frequency(b)) == pytest.approx(b)

    def test_bin_from_frequency_rejects_non_positive(self, axis):
        with pytest.raises(ValueError):
            axis.bin_from_frequency(0.0)

    def test_frequencies_array(self, axis):
        freqs = axis.frequencies()
        assert len(freqs) == axis.n_bins
        assert np.all(np.diff(freqs) > 0)
        np.testing.assert_allclose(freqs[[0, 24, 48]], [25.0, 50.0, 100.0])

    def test_equality(self, axis):
        other = LogFrequencyAxis.octave_scale(fmin=25.0, n_octaves=8, points_per_octave=24)
        shorter = LogFrequencyAxis.octave_scale(fmin=25.0, n_octaves=7, points_per_octave=24)
        assert axis == other
        assert hash(axis) == hash(other)
        assert axis != shorter
