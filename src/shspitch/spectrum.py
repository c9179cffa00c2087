"""
LogSpectrum - Single magnitude spectrum frame on a log-frequency axis.

Also provides low-frequency suppression, which zeroes every bin up to a
cutoff frequency before summation.

The cutoff bin is computed as

    b = floor((ceil(log(lf_cut) / log(base)) - freq_min_log) / freq_step_log)

Note the ceil is taken in the log domain, so the cutoff is rounded up to the
next whole log unit (octave, for base 2) before it is mapped to a bin.
"""

import logging
import math

import numpy as np

from .axis import LogFrequencyAxis


logger = logging.getLogger(__name__)


class LogSpectrum:
    """
    One frame of a log-frequency magnitude spectrum.

    Attributes:
        values: Non-negative magnitudes, one per log-frequency bin
        axis: Frequency axis the bins refer to
    """

    def __init__(self, values: np.ndarray, axis: LogFrequencyAxis):
        """
        Create a LogSpectrum.

        Args:
            values: 1D array of magnitudes (length must match axis.n_bins)
            axis: Frequency axis

        Raises:
            ValueError: If values is not 1D or its length disagrees with the axis
        """
        values = np.asarray(values, dtype=np.float64)
        if values.ndim != 1:
            raise ValueError(f"Spectrum frame must be 1D. Got shape: {values.shape}")
        if len(values) != axis.n_bins:
            raise ValueError(
                f"Spectrum has {len(values)} bins but axis has {axis.n_bins}")

        self._values = values
        self._axis = axis

    @property
    def values(self) -> np.ndarray:
        """Magnitude values."""
        return self._values

    @property
    def axis(self) -> LogFrequencyAxis:
        """Frequency axis."""
        return self._axis

    @property
    def n_bins(self) -> int:
        """Number of bins."""
        return len(self._values)

    def get_frequency(self, bin_index: float) -> float:
        """Get frequency in Hz for a bin index."""
        return self._axis.frequency(bin_index)

    def frequencies(self) -> np.ndarray:
        """Frequency of every bin in Hz."""
        return self._axis.frequencies()

    def to_pitch_candidates(self, config=None):
        """
        Run SHS pitch detection on this frame.

        Args:
            config: ShsConfig (None = defaults)

        Returns:
            CandidateSet
        """
        from .detector import ShsPitchDetector
        return ShsPitchDetector(config, self._axis).analyze(self._values)

    def __repr__(self) -> str:
        return f"LogSpectrum({self.n_bins} bins, {self._axis!r})"


def low_frequency_cutoff_bin(lf_cut: float, axis: LogFrequencyAxis) -> int:
    """
    Highest bin index zeroed by a low-frequency cutoff.

    Args:
        lf_cut: Cutoff frequency in Hz (must be > 0)
        axis: Frequency axis

    Returns:
        Bin index (may be negative or >= n_bins)
    """
    log_cut = math.ceil(math.log(lf_cut) / math.log(axis.base))
    return int(math.floor((log_cut - axis.freq_min_log) / axis.freq_step_log))


def suppress_low_frequencies(values: np.ndarray, lf_cut: float,
                             axis: LogFrequencyAxis) -> int:
    """
    Zero every bin at or below the cutoff frequency, in place.

    Args:
        values: Spectrum magnitudes (modified in place)
        lf_cut: Cutoff frequency in Hz (<= 0 disables)
        axis: Frequency axis

    Returns:
        Number of bins zeroed
    """
    if lf_cut <= 0:
        return 0

    bin_index = low_frequency_cutoff_bin(lf_cut, axis)
    n = len(values)
    if bin_index < 0:
        n_zeroed = 0
    else:
        n_zeroed = min(bin_index + 1, n)
        values[:n_zeroed] = 0.0

    logger.debug("lfCut: <= bin %d from %d", bin_index, n)
    return n_zeroed
