"""
Pitch - F0 contour from subharmonic summation candidates.

Each frame keeps its ranked candidates. The frame's raw F0 is the first
candidate's frequency; the final F0 is the raw F0 when the first candidate's
voicing probability reaches voicing_cutoff, else 0 (unvoiced).

No smoothing across frames is applied. A Viterbi-style tracker can reorder
candidates downstream.
"""

import math
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from .config import ShsConfig
from .detector import ShsPitchDetector


@dataclass
class PitchCandidate:
    """A pitch candidate for a frame."""
    frequency: float  # Hz
    score: float      # Interpolated SHS score
    voicing: float    # Voicing probability


@dataclass
class PitchFrame:
    """Pitch analysis results for a single frame."""
    time: float                       # Time in seconds
    candidates: List[PitchCandidate]  # Ranked candidates (first is selected)
    voicing_cutoff: float             # Threshold for the voiced decision
    mean_score: float = 0.0           # Mean of the SHS spectrum

    @property
    def raw_frequency(self) -> float:
        """First candidate frequency regardless of voicing (0 if none)."""
        if self.candidates:
            return self.candidates[0].frequency
        return 0.0

    @property
    def voicing(self) -> float:
        """Voicing probability of the first candidate."""
        if self.candidates:
            return self.candidates[0].voicing
        return 0.0

    @property
    def score(self) -> float:
        """Score of the first candidate."""
        if self.candidates:
            return self.candidates[0].score
        return 0.0

    @property
    def voiced(self) -> bool:
        """Whether this frame is voiced."""
        return self.raw_frequency > 0.0 and self.voicing >= self.voicing_cutoff

    @property
    def frequency(self) -> float:
        """Selected pitch frequency (0 if unvoiced)."""
        return self.raw_frequency if self.voiced else 0.0


_UNIT_CONVERSIONS = {
    "hertz": lambda f: f,
    "semitones": lambda f: 12.0 * math.log2(f / 100.0),  # re 100 Hz
    "mel": lambda f: 1127.0 * math.log1p(f / 700.0),
    "erb": lambda f: 21.4 * math.log10(1.0 + 0.00437 * f),
}


def _convert_unit(frequency: float, unit: str) -> float:
    try:
        convert = _UNIT_CONVERSIONS[unit.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown unit {unit!r}; expected one of {sorted(_UNIT_CONVERSIONS)}") from None
    return float(convert(frequency))


class Pitch:
    """
    Pitch (F0) contour.

    Attributes:
        frames: List of PitchFrame objects
        time_step: Time step between frames
        voicing_cutoff: Voicing threshold used for the voiced decision
    """

    def __init__(self, frames: List[PitchFrame], time_step: float, voicing_cutoff: float):
        self._frames = frames
        self._time_step = time_step
        self._voicing_cutoff = voicing_cutoff

    @property
    def frames(self) -> List[PitchFrame]:
        """List of pitch frames."""
        return self._frames

    @property
    def n_frames(self) -> int:
        """Number of frames."""
        return len(self._frames)

    @property
    def time_step(self) -> float:
        """Time step between frames."""
        return self._time_step

    @property
    def voicing_cutoff(self) -> float:
        """Voicing threshold."""
        return self._voicing_cutoff

    def times(self) -> np.ndarray:
        """Get array of frame times."""
        return np.array([f.time for f in self._frames])

    def values(self) -> np.ndarray:
        """Get array of final pitch values (0 for unvoiced)."""
        return np.array([f.frequency for f in self._frames])

    def raw_values(self) -> np.ndarray:
        """Get array of first-candidate frequencies, voiced or not."""
        return np.array([f.raw_frequency for f in self._frames])

    def voicing(self) -> np.ndarray:
        """Get array of first-candidate voicing probabilities."""
        return np.array([f.voicing for f in self._frames])

    def scores(self) -> np.ndarray:
        """Get array of first-candidate scores."""
        return np.array([f.score for f in self._frames])

    def get_value_in_frame(self, index: int, unit: str = "Hertz") -> Optional[float]:
        """
        Get pitch value of a frame (0-based).

        Returns:
            Pitch value, or None if unvoiced or out of range
        """
        if index < 0 or index >= self.n_frames:
            return None
        frame = self._frames[index]
        if not frame.voiced:
            return None
        return _convert_unit(frame.frequency, unit)

    def get_value_at_time(
        self,
        time: float,
        unit: str = "Hertz",
        interpolation: str = "linear"
    ) -> Optional[float]:
        """
        Get pitch value at a specific time.

        Linear interpolation blends the two surrounding frames when both are
        voiced. Otherwise, and always for "nearest", the value of the frame
        closest to ``time`` is returned, so a voicing boundary lies halfway
        between a voiced and an unvoiced frame.

        Args:
            time: Time in seconds
            unit: "Hertz", "semitones" (re 100 Hz), "mel" or "erb"
            interpolation: "linear" or "nearest"

        Returns:
            Pitch value, or None if unvoiced or more than half a frame
            outside the track
        """
        if interpolation not in ("linear", "nearest"):
            raise ValueError(f"Unknown interpolation method: {interpolation}")
        if not self._frames:
            return None

        last = self.n_frames - 1
        position = (time - self._frames[0].time) / self._time_step
        if not -0.5 <= position <= last + 0.5:
            return None

        if interpolation == "linear":
            lower = math.floor(position)
            left = self._frames[max(lower, 0)]
            right = self._frames[min(lower + 1, last)]
            if left.voiced and right.voiced:
                weight = position - lower
                hz = (1.0 - weight) * left.frequency + weight * right.frequency
                return _convert_unit(hz, unit)

        nearest = min(max(math.floor(position + 0.5), 0), last)
        return self.get_value_in_frame(nearest, unit)

    def __repr__(self) -> str:
        return f"Pitch({self.n_frames} frames, time_step={self._time_step:g})"


def spectrogram_to_pitch(
    spectrogram: "LogSpectrogram",
    config: Optional[ShsConfig] = None,
    debug_sink=None
) -> Pitch:
    """
    Compute a pitch contour from a log-frequency spectrogram.

    Args:
        spectrogram: LogSpectrogram
        config: ShsConfig (None = defaults)
        debug_sink: Optional receiver of the per-frame SHS spectra

    Returns:
        Pitch object
    """
    config = config if config is not None else ShsConfig()
    detector = ShsPitchDetector(config, spectrogram.axis, debug_sink)

    frames = []
    for i, spectrum in enumerate(spectrogram):
        result = detector.analyze(spectrum.values)
        candidates = [PitchCandidate(f, s, v) for f, s, v in result.as_tuples()]
        frames.append(PitchFrame(spectrogram.get_time_from_frame(i), candidates,
                                 config.voicing_cutoff, result.mean_score))

    return Pitch(frames, spectrogram.time_step, config.voicing_cutoff)
