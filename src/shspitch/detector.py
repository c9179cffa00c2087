"""
ShsPitchDetector - Subharmonic summation pitch detection, one frame at a time.

Per frame:
    1. Zero bins below lf_cut (on a private copy of the input)
    2. Subharmonic summation into the summation buffer
    3. Optionally forward the summation spectrum to a debug sink
    4. Peak picking (legacy or greedy admission)
    5. Parabolic interpolation of each candidate, bin -> Hz
    6. Voicing probability from the candidate score and the spectrum mean
    7. Optional octave correction

Buffers are allocated when the axis is configured and reused across frames.
A detector instance is not safe for concurrent use.

Usage:
    axis = LogFrequencyAxis.octave_scale(fmin=25.0, n_octaves=8, points_per_octave=24)
    detector = ShsPitchDetector(ShsConfig(greedy_peak_algo=True), axis)
    candidates = detector.analyze(log_spectrum_frame)
    print(candidates.best_frequency, candidates.best_voicing)
"""

import logging
from typing import Optional

import numpy as np

from .axis import LogFrequencyAxis, ShsConfigurationError
from .candidates import CandidateSet, correct_octave, estimate_voicing
from .config import ShsConfig
from .debug import ShsSpectrumSink
from .peaks import interpolate_peak, select_peaks
from .spectrum import suppress_low_frequencies
from .summation import subharmonic_summation


logger = logging.getLogger(__name__)


class ShsPitchDetector:
    """
    SHS pitch detection kernel.

    Attributes:
        config: ShsConfig parameters
        axis: Configured LogFrequencyAxis (None until configure() is called)
        debug_sink: Optional receiver of the summation spectrum
    """

    def __init__(
        self,
        config: Optional[ShsConfig] = None,
        axis: Optional[LogFrequencyAxis] = None,
        debug_sink: Optional[ShsSpectrumSink] = None
    ):
        """
        Create a detector.

        Args:
            config: Parameters (None = defaults)
            axis: Frequency axis (None = configure later)
            debug_sink: Receiver of SHS spectra, used when
                config.shs_spectrum_output is set
        """
        self._config = config if config is not None else ShsConfig()
        self._debug_sink = debug_sink

        self._axis = None
        self._input = None
        self._ss = None
        self._debug_vector = None
        self._mean_score = 0.0

        if axis is not None:
            self.configure(axis)

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    def configure(self, axis: LogFrequencyAxis) -> None:
        """
        Set the frequency axis and (re)allocate the frame buffers.

        Buffers are kept when the axis is unchanged.

        Raises:
            ShsConfigurationError: If the axis has no octave count
        """
        if axis.octave_count == 0:
            raise ShsConfigurationError("Axis is not configured (octave count is 0)")

        if axis == self._axis and self._ss is not None:
            return

        n = axis.n_bins
        self._axis = axis
        self._input = np.zeros(n)
        self._ss = np.zeros(n)
        self._debug_vector = None

        logger.info("SHS configured: %r, n_harmonics=%d, compression=%g, %s peaks",
                    axis, self._config.n_harmonics, self._config.compression_factor,
                    self._config.peak_selection.value)

    def configure_from_metadata(
        self,
        fmin: float,
        fmax: float,
        n_octaves: float,
        points_per_octave: float,
        fmin_log: float,
        fmax_log: float,
        n_bins: int
    ) -> LogFrequencyAxis:
        """
        Configure from upstream level metadata.

        See LogFrequencyAxis.from_level_metadata for the arguments.

        Returns:
            The derived axis
        """
        axis = LogFrequencyAxis.from_level_metadata(
            fmin, fmax, n_octaves, points_per_octave, fmin_log, fmax_log, n_bins)
        self.configure(axis)
        return axis

    @property
    def config(self) -> ShsConfig:
        """Detector parameters."""
        return self._config

    @property
    def axis(self) -> Optional[LogFrequencyAxis]:
        """Configured frequency axis."""
        return self._axis

    @property
    def configured(self) -> bool:
        """Whether an axis has been set."""
        return self._axis is not None

    @property
    def debug_sink(self) -> Optional[ShsSpectrumSink]:
        """Receiver of SHS spectra."""
        return self._debug_sink

    @debug_sink.setter
    def debug_sink(self, sink: Optional[ShsSpectrumSink]) -> None:
        self._debug_sink = sink

    @property
    def summation_spectrum(self) -> Optional[np.ndarray]:
        """Summation spectrum of the last processed frame (read-only view)."""
        if self._ss is None:
            return None
        view = self._ss.view()
        view.flags.writeable = False
        return view

    @property
    def mean_score(self) -> float:
        """Mean of the summation spectrum of the last processed frame."""
        return self._mean_score

    # -------------------------------------------------------------------------
    # Processing
    # -------------------------------------------------------------------------

    def detect_pitch(
        self,
        frame: np.ndarray,
        out_frequencies: np.ndarray,
        out_voicing: np.ndarray,
        out_scores: np.ndarray,
        n_candidates: Optional[int] = None
    ) -> int:
        """
        Detect F0 candidates in one log-frequency magnitude frame.

        Results are written to the output arrays; slots past the returned
        count are set to 0.

        Args:
            frame: Magnitudes, one per axis bin (not modified)
            out_frequencies: Receives candidate frequencies in Hz
            out_voicing: Receives voicing probabilities
            out_scores: Receives interpolated scores
            n_candidates: Capacity (None = len(out_frequencies))

        Returns:
            Number of valid candidates, or -1 if no axis is configured

        Raises:
            ValueError: If the frame length differs from the configured axis
                or the output arrays are shorter than n_candidates
        """
        if self._axis is None:
            return -1

        frame = np.asarray(frame, dtype=np.float64)
        if frame.ndim != 1:
            raise ValueError(f"Frame must be 1D. Got shape: {frame.shape}")
        if len(frame) != len(self._ss):
            raise ValueError(
                f"Frame has {len(frame)} bins, detector is configured for {len(self._ss)}")

        if n_candidates is None:
            n_candidates = len(out_frequencies)
        if n_candidates < 1:
            raise ValueError(f"n_candidates must be at least 1, got {n_candidates}")
        if min(len(out_frequencies), len(out_voicing), len(out_scores)) < n_candidates:
            raise ValueError(f"Output arrays must hold {n_candidates} candidates")

        config = self._config
        axis = self._axis
        ss = self._ss

        self._input[:] = frame
        suppress_low_frequencies(self._input, config.lf_cut, axis)

        subharmonic_summation(self._input, config.n_harmonics, config.compression_factor,
                              axis.points_per_octave, out=ss)

        if config.shs_spectrum_output and self._debug_sink is not None:
            if self._debug_vector is None:
                self._debug_vector = np.zeros(len(ss))
            self._debug_vector[:] = ss
            self._debug_sink.write(self._debug_vector)

        bins, raw_scores, count = select_peaks(ss, n_candidates, config.peak_selection)
        self._mean_score = float(np.mean(ss))

        out_frequencies[:n_candidates] = 0.0
        out_voicing[:n_candidates] = 0.0
        out_scores[:n_candidates] = 0.0

        for i in range(count):
            out_frequencies[i], out_scores[i] = interpolate_peak(ss, bins[i], axis)
        estimate_voicing(out_scores, self._mean_score, count, out_voicing)

        if config.octave_correction:
            correct_octave(out_frequencies, out_voicing, out_scores, count,
                           config.voicing_cutoff, config.n_harmonics,
                           config.compression_factor)

        logger.debug("SHS frame: %d candidates, mean score %g", count, self._mean_score)
        return count

    def analyze(self, frame: np.ndarray) -> CandidateSet:
        """
        Detect F0 candidates in one frame.

        Args:
            frame: Magnitudes, one per axis bin

        Returns:
            CandidateSet with config.n_candidates slots

        Raises:
            ShsConfigurationError: If no axis is configured
            ValueError: If the frame length differs from the configured axis
        """
        candidates = CandidateSet.empty(self._config.n_candidates)
        count = self.detect_pitch(frame, candidates.frequencies, candidates.voicing,
                                  candidates.scores)
        if count < 0:
            raise ShsConfigurationError(
                "No frequency axis configured; call configure() before processing frames")

        candidates.count = count
        candidates.mean_score = self._mean_score
        return candidates

    def __repr__(self) -> str:
        return f"ShsPitchDetector({self._axis!r}, {self._config!r})"
