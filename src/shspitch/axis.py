"""
LogFrequencyAxis - Bin-to-frequency mapping of a log-scaled spectrum.

The upstream log-spectrum stage describes its frequency axis with a small
block of level metadata:

    fmin, fmax          linear frequency of the first/last bin (Hz)
    n_octaves           number of octaves covered (0 = not a log spectrum)
    points_per_octave   bins per octave
    fmin_log, fmax_log  log-domain frequency of the first/last bin

Bin j sits at log-frequency  fmin_log + j * freq_step_log  and at linear
frequency  base ** (fmin_log + j * freq_step_log).

The log base is not transmitted; it is recovered from the first bin:

    base = exp(log(fmin) / fmin_log)

For an octave-scaled spectrum this is 2.0. Any other value is accepted but
reported with NonStandardAxisWarning.
"""

import math
import warnings

import numpy as np


BASE_TOLERANCE = 1e-5


class ShsConfigurationError(ValueError):
    """Raised when the axis or parameters cannot support pitch detection."""
    pass


class NonStandardAxisWarning(UserWarning):
    """The derived log base is not 2.0; processing continues with it."""
    pass


class LogFrequencyAxis:
    """
    Frequency axis of a log-scaled magnitude spectrum.

    Immutable for the lifetime of a configuration epoch.

    Attributes:
        base: Log base of the axis (2.0 for octave scaling)
        freq_min_log: Log-domain frequency of bin 0
        freq_step_log: Log-domain step between adjacent bins
        points_per_octave: Bins per octave
        octave_count: Number of octaves covered
        n_bins: Number of bins
    """

    def __init__(
        self,
        base: float,
        freq_min_log: float,
        freq_step_log: float,
        points_per_octave: float,
        octave_count: float,
        n_bins: int
    ):
        if octave_count == 0:
            raise ShsConfigurationError(
                "Axis has no valid octave count; input must be a log-scale "
                "spectrum with 'n_octaves' set in its level metadata."
            )
        if n_bins < 3:
            raise ShsConfigurationError(
                f"Need at least 3 spectral bins for peak picking, got {n_bins}"
            )
        if not base > 0 or base == 1.0 or not math.isfinite(base):
            raise ShsConfigurationError(f"Invalid log base: {base}")
        if not math.isfinite(freq_min_log):
            raise ShsConfigurationError(f"Invalid log frequency of bin 0: {freq_min_log}")
        # Bins must ascend in frequency
        if not (math.isfinite(freq_step_log) and freq_step_log > 0):
            raise ShsConfigurationError(
                f"Log frequency step must be finite and positive, got {freq_step_log}")
        if not (math.isfinite(points_per_octave) and points_per_octave > 0):
            raise ShsConfigurationError(
                f"points_per_octave must be positive, got {points_per_octave}")

        self._base = float(base)
        self._freq_min_log = float(freq_min_log)
        self._freq_step_log = float(freq_step_log)
        self._points_per_octave = float(points_per_octave)
        self._octave_count = float(octave_count)
        self._n_bins = int(n_bins)

    @classmethod
    def from_level_metadata(
        cls,
        fmin: float,
        fmax: float,
        n_octaves: float,
        points_per_octave: float,
        fmin_log: float,
        fmax_log: float,
        n_bins: int
    ) -> "LogFrequencyAxis":
        """
        Derive the axis from upstream level metadata.

        Args:
            fmin: Linear frequency of the first bin in Hz
            fmax: Linear frequency of the last bin in Hz (informational)
            n_octaves: Number of octaves (0 means not a log spectrum)
            points_per_octave: Bins per octave
            fmin_log: Log-domain frequency of the first bin
            fmax_log: Log-domain frequency of the last bin
            n_bins: Number of bins per frame

        Returns:
            LogFrequencyAxis

        Raises:
            ShsConfigurationError: If n_octaves is 0, the base cannot be
                derived from fmin/fmin_log, or fmax_log does not lie above
                fmin_log
        """
        if n_octaves == 0:
            raise ShsConfigurationError(
                "Cannot read a valid 'n_octaves' from the input level metadata; "
                "is the input a log(2) scale spectrum?"
            )
        if fmin <= 0 or fmin_log == 0:
            raise ShsConfigurationError(
                f"Cannot derive log base from fmin={fmin}, fmin_log={fmin_log}"
            )
        if n_bins < 3:
            raise ShsConfigurationError(
                f"Need at least 3 spectral bins for peak picking, got {n_bins}"
            )

        base = math.exp(math.log(fmin) / fmin_log)
        if abs(base - 2.0) < BASE_TOLERANCE:
            base = 2.0
        else:
            warnings.warn(
                f"Log base is not 2.0 (no octave scale spectrum): base={base:f}, "
                f"fmin={fmin:f}, fmin_log={fmin_log:f}",
                NonStandardAxisWarning,
                stacklevel=2
            )

        freq_step_log = (fmax_log - fmin_log) / (n_bins - 1)
        return cls(base, fmin_log, freq_step_log, points_per_octave, n_octaves, n_bins)

    @classmethod
    def octave_scale(
        cls,
        fmin: float,
        n_octaves: float,
        points_per_octave: int
    ) -> "LogFrequencyAxis":
        """
        Create a standard base-2 axis starting at fmin.

        The axis has n_octaves * points_per_octave bins, one every
        1/points_per_octave octave.

        Args:
            fmin: Frequency of the first bin in Hz
            n_octaves: Number of octaves covered
            points_per_octave: Bins per octave

        Returns:
            LogFrequencyAxis
        """
        if fmin <= 0:
            raise ShsConfigurationError(f"fmin must be positive, got {fmin}")
        if points_per_octave <= 0:
            raise ShsConfigurationError(
                f"points_per_octave must be positive, got {points_per_octave}")
        n_bins = int(round(n_octaves * points_per_octave))
        freq_min_log = math.log2(fmin)
        return cls(2.0, freq_min_log, 1.0 / points_per_octave,
                   points_per_octave, n_octaves, n_bins)

    @property
    def base(self) -> float:
        """Log base of the axis."""
        return self._base

    @property
    def freq_min_log(self) -> float:
        """Log-domain frequency of bin 0."""
        return self._freq_min_log

    @property
    def freq_step_log(self) -> float:
        """Log-domain step per bin."""
        return self._freq_step_log

    @property
    def points_per_octave(self) -> float:
        """Bins per octave."""
        return self._points_per_octave

    @property
    def octave_count(self) -> float:
        """Number of octaves covered."""
        return self._octave_count

    @property
    def n_bins(self) -> int:
        """Number of bins."""
        return self._n_bins

    @property
    def is_octave_scale(self) -> bool:
        """Whether the axis is base 2."""
        return self._base == 2.0

    def log_frequency(self, bin_index: float) -> float:
        """Log-domain frequency of a (possibly fractional) bin index."""
        return bin_index * self._freq_step_log + self._freq_min_log

    def to_hertz(self, log_frequency: float) -> float:
        """Convert a log-domain frequency to Hz."""
        return math.exp(log_frequency * math.log(self._base))

    def frequency(self, bin_index: float) -> float:
        """Linear frequency in Hz of a (possibly fractional) bin index."""
        return self.to_hertz(self.log_frequency(bin_index))

    def bin_from_frequency(self, frequency: float) -> float:
        """Fractional bin index of a linear frequency in Hz."""
        if frequency <= 0:
            raise ValueError(f"Frequency must be positive, got {frequency}")
        log_f = math.log(frequency) / math.log(self._base)
        return (log_f - self._freq_min_log) / self._freq_step_log

    def frequencies(self) -> np.ndarray:
        """Linear frequency of every bin in Hz."""
        log_f = self._freq_min_log + np.arange(self._n_bins) * self._freq_step_log
        return np.exp(log_f * np.log(self._base))

    def __eq__(self, other) -> bool:
        if not isinstance(other, LogFrequencyAxis):
            return NotImplemented
        return (self._base == other._base
                and self._freq_min_log == other._freq_min_log
                and self._freq_step_log == other._freq_step_log
                and self._points_per_octave == other._points_per_octave
                and self._octave_count == other._octave_count
                and self._n_bins == other._n_bins)

    def __hash__(self) -> int:
        return hash((self._base, self._freq_min_log, self._freq_step_log,
                     self._points_per_octave, self._octave_count, self._n_bins))

    def __repr__(self) -> str:
        return (f"LogFrequencyAxis({self._n_bins} bins, base={self._base:g}, "
                f"{self.frequency(0):.2f}-{self.frequency(self._n_bins - 1):.2f} Hz, "
                f"{self._points_per_octave:g} pts/oct)")
