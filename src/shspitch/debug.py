"""
Sinks for the internal subharmonic sum spectrum.

When ``shs_spectrum_output`` is enabled, the detector hands every frame's
summation spectrum to a sink. The vector passed to ``write`` is reused by the
detector, so a sink that keeps it must copy it.
"""

from abc import ABC, abstractmethod
from typing import List

import numpy as np


class ShsSpectrumSink(ABC):
    """Receiver of per-frame SHS spectra."""

    @abstractmethod
    def write(self, spectrum: np.ndarray) -> None:
        """
        Receive one frame's summation spectrum.

        The array is the detector's own buffer and is overwritten on the next
        frame; copy it to keep it.
        """


class ShsSpectrumRecorder(ShsSpectrumSink):
    """In-memory sink keeping a copy of every SHS spectrum."""

    def __init__(self):
        self._frames: List[np.ndarray] = []

    def write(self, spectrum: np.ndarray) -> None:
        self._frames.append(np.array(spectrum, dtype=np.float64))

    @property
    def frames(self) -> List[np.ndarray]:
        """Recorded spectra in arrival order."""
        return self._frames

    @property
    def n_frames(self) -> int:
        """Number of recorded spectra."""
        return len(self._frames)

    def clear(self) -> None:
        """Drop all recorded spectra."""
        self._frames = []

    def to_array(self) -> np.ndarray:
        """Recorded spectra as an (n_bins x n_frames) array."""
        if not self._frames:
            return np.zeros((0, 0))
        return np.stack(self._frames, axis=1)

    def to_spectrogram(self, axis, time_step: float, t1: float = 0.0):
        """
        Recorded spectra as a LogSpectrogram on the given axis.

        Args:
            axis: LogFrequencyAxis of the analysed input
            time_step: Time between frames in seconds
            t1: Time of the first frame

        Returns:
            LogSpectrogram
        """
        from .spectrogram import LogSpectrogram
        return LogSpectrogram(self.to_array(), axis, time_step, t1)

    def __repr__(self) -> str:
        return f"ShsSpectrumRecorder({self.n_frames} frames)"
