"""
LogSpectrogram - Sequence of log-frequency magnitude frames.

Frames share one LogFrequencyAxis and are spaced time_step seconds apart,
the first one centred at t1. Building the log spectrogram from audio is the
job of an upstream stage; this class only holds its output.
"""

from typing import Iterator

import numpy as np

from .axis import LogFrequencyAxis
from .spectrum import LogSpectrum


class LogSpectrogram:
    """
    Time sequence of log-frequency spectra.

    Attributes:
        values: 2D array of magnitudes (n_bins x n_times)
        axis: Frequency axis shared by all frames
        time_step: Time step between frames
        t1: Time of the first frame
    """

    def __init__(
        self,
        values: np.ndarray,
        axis: LogFrequencyAxis,
        time_step: float,
        t1: float = 0.0
    ):
        """
        Create a LogSpectrogram.

        Args:
            values: 2D array of magnitudes (n_bins x n_times)
            axis: Frequency axis
            time_step: Time step between frames in seconds
            t1: Time of the first frame in seconds

        Raises:
            ValueError: If values is not 2D or its bin count disagrees with the axis
        """
        values = np.asarray(values, dtype=np.float64)
        if values.ndim != 2:
            raise ValueError(f"Spectrogram must be 2D (bins x frames). Got shape: {values.shape}")
        if values.shape[1] > 0 and values.shape[0] != axis.n_bins:
            raise ValueError(
                f"Spectrogram has {values.shape[0]} bins but axis has {axis.n_bins}")
        if time_step <= 0:
            raise ValueError(f"time_step must be positive, got {time_step}")

        self._values = values
        self._axis = axis
        self._time_step = float(time_step)
        self._t1 = float(t1)

    @classmethod
    def from_frames(cls, frames, axis: LogFrequencyAxis, time_step: float,
                    t1: float = 0.0) -> "LogSpectrogram":
        """Create from a sequence of 1D frames (each n_bins long)."""
        frames = [np.asarray(f, dtype=np.float64) for f in frames]
        if not frames:
            return cls(np.zeros((axis.n_bins, 0)), axis, time_step, t1)
        return cls(np.stack(frames, axis=1), axis, time_step, t1)

    @property
    def values(self) -> np.ndarray:
        """Magnitudes (n_bins x n_times)."""
        return self._values

    @property
    def axis(self) -> LogFrequencyAxis:
        """Frequency axis."""
        return self._axis

    @property
    def n_times(self) -> int:
        """Number of time frames."""
        return self._values.shape[1]

    @property
    def n_bins(self) -> int:
        """Number of frequency bins."""
        return self._axis.n_bins

    @property
    def time_step(self) -> float:
        """Time step between frames."""
        return self._time_step

    @property
    def t1(self) -> float:
        """Time of the first frame."""
        return self._t1

    def get_time_from_frame(self, frame: int) -> float:
        """Get time for a frame index (0-based)."""
        return self._t1 + frame * self._time_step

    def times(self) -> np.ndarray:
        """Get array of frame times."""
        return self._t1 + np.arange(self.n_times) * self._time_step

    def frequencies(self) -> np.ndarray:
        """Get array of bin frequencies in Hz."""
        return self._axis.frequencies()

    def frame(self, index: int) -> LogSpectrum:
        """Get one frame as a LogSpectrum."""
        return LogSpectrum(self._values[:, index], self._axis)

    def __iter__(self) -> Iterator[LogSpectrum]:
        for i in range(self.n_times):
            yield self.frame(i)

    def __len__(self) -> int:
        return self.n_times

    def to_pitch_shs(self, config=None, debug_sink=None) -> "Pitch":
        """
        Run SHS pitch detection on every frame.

        Args:
            config: ShsConfig (None = defaults)
            debug_sink: Optional receiver of the per-frame SHS spectra

        Returns:
            Pitch object
        """
        from .pitch import spectrogram_to_pitch
        return spectrogram_to_pitch(self, config, debug_sink)

    def __repr__(self) -> str:
        return f"LogSpectrogram({self.n_times} frames, {self._axis!r})"
