"""
Per-frame F0 candidate list: voicing estimation and octave correction.

Voicing probability of a candidate with interpolated score sc, given the
mean of the summation spectrum ss_mean:

    v = 1 - ss_mean / sc    if sc > 0 and sc > ss_mean
    v = 0                   otherwise

Octave correction walks the candidates in order and swaps candidate i into
first place when it is lower in frequency than the current first candidate,
roughly as voiced (v_i >= 0.9 * voicing_cutoff), and scores above

    score_0 / ((n_harmonics - 1) * compression_factor)

Each qualifying candidate swaps with whatever is first at that moment, so
several swaps can cascade within one frame.
"""

from dataclasses import dataclass
from typing import List

import numpy as np


@dataclass
class CandidateSet:
    """
    Fixed-capacity ranked F0 candidates of one frame.

    The three arrays are parallel and have length equal to the capacity.
    Entries past ``count`` are zero.

    Attributes:
        frequencies: Candidate frequencies in Hz
        scores: Interpolated SHS scores
        voicing: Voicing probabilities
        count: Number of valid candidates
        mean_score: Mean of the summation spectrum over all bins
    """
    frequencies: np.ndarray
    scores: np.ndarray
    voicing: np.ndarray
    count: int = 0
    mean_score: float = 0.0

    @classmethod
    def empty(cls, capacity: int) -> "CandidateSet":
        """Create a zeroed candidate set."""
        return cls(np.zeros(capacity), np.zeros(capacity), np.zeros(capacity))

    @property
    def capacity(self) -> int:
        """Maximum number of candidates."""
        return len(self.frequencies)

    @property
    def best_frequency(self) -> float:
        """Frequency of the first candidate (0 if none)."""
        return float(self.frequencies[0]) if self.count > 0 else 0.0

    @property
    def best_voicing(self) -> float:
        """Voicing probability of the first candidate (0 if none)."""
        return float(self.voicing[0]) if self.count > 0 else 0.0

    def as_tuples(self) -> List[tuple]:
        """Valid candidates as (frequency, score, voicing) tuples."""
        return [(float(self.frequencies[i]), float(self.scores[i]), float(self.voicing[i]))
                for i in range(self.count)]

    def __len__(self) -> int:
        return self.count


def voicing_probability(score: float, mean_score: float) -> float:
    """Voicing probability of one candidate."""
    if score > 0.0 and score > mean_score:
        return 1.0 - mean_score / score
    return 0.0


def estimate_voicing(scores: np.ndarray, mean_score: float, count: int,
                     out: np.ndarray) -> np.ndarray:
    """
    Fill ``out[:count]`` with voicing probabilities for the given scores.

    Returns:
        out
    """
    for i in range(count):
        out[i] = voicing_probability(scores[i], mean_score)
    return out


def correct_octave(
    frequencies: np.ndarray,
    voicing: np.ndarray,
    scores: np.ndarray,
    count: int,
    voicing_cutoff: float,
    n_harmonics: int,
    compression_factor: float
) -> int:
    """
    Prefer a lower-octave candidate as the first candidate, in place.

    Args:
        frequencies: Candidate frequencies in Hz
        voicing: Candidate voicing probabilities
        scores: Candidate scores
        count: Number of valid candidates
        voicing_cutoff: Voicing threshold
        n_harmonics: Number of harmonics used for summation
        compression_factor: Harmonic compression factor

    Returns:
        Number of swaps performed
    """
    ratio = 1.0 / ((n_harmonics - 1) * compression_factor)
    swaps = 0

    for i in range(count):
        lower = 0.0 < frequencies[i] < frequencies[0]
        voiced = voicing[i] > voicing_cutoff or voicing[i] >= 0.9 * voicing_cutoff
        strong = scores[i] > ratio * scores[0]
        if lower and voiced and strong:
            frequencies[0], frequencies[i] = frequencies[i], frequencies[0]
            voicing[0], voicing[i] = voicing[i], voicing[0]
            scores[0], scores[i] = scores[i], scores[0]
            swaps += 1

    return swaps
