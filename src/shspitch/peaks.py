"""
Peak picking on the subharmonic sum spectrum.

Only interior bins 1..N-2 are considered; a peak is a strict local maximum
SS[i-1] < SS[i] > SS[i+1]. Two admission rules fill the fixed-capacity
candidate list:

LEGACY (default):
    A peak is admitted only if it beats the current first candidate (or the
    list is still empty), and is then pushed in at slot 0. Once the global
    maximum has been seen, later lower peaks are never added, so the list may
    hold fewer candidates than peaks exist.

GREEDY:
    Every peak is inserted into a list kept in descending score order; the
    lowest entry falls off when capacity is exceeded.

Candidates are refined by fitting a parabola through the peak bin and its two
neighbours on the log-frequency axis.
"""

from enum import Enum
from typing import Tuple

import numpy as np

from .axis import LogFrequencyAxis


class PeakSelection(Enum):
    """Candidate admission rule."""
    LEGACY = "legacy"
    GREEDY = "greedy"


def _is_peak(ss: np.ndarray, i: int) -> bool:
    return ss[i - 1] < ss[i] and ss[i] > ss[i + 1]


def select_peaks_legacy(ss: np.ndarray, n_candidates: int) -> Tuple[np.ndarray, np.ndarray, int]:
    """
    Running-maximum peak selection.

    Args:
        ss: Summation spectrum
        n_candidates: Capacity of the candidate list

    Returns:
        (bins, scores, count): bin indices (as floats) and raw scores, both of
        length n_candidates and zero-filled past count
    """
    bins = np.zeros(n_candidates)
    scores = np.zeros(n_candidates)
    count = 0

    for i in range(1, len(ss) - 1):
        if _is_peak(ss, i) and (ss[i] > scores[0] or scores[0] == 0.0):
            bins[1:] = bins[:-1]
            scores[1:] = scores[:-1]
            bins[0] = i
            scores[0] = ss[i]
            if count < n_candidates:
                count += 1

    return bins, scores, count


def select_peaks_greedy(ss: np.ndarray, n_candidates: int) -> Tuple[np.ndarray, np.ndarray, int]:
    """
    Score-ranked peak selection.

    Each peak goes to the first slot that is empty or holds a strictly lower
    score; later slots move down by one. Equal scores keep discovery order.

    Args:
        ss: Summation spectrum
        n_candidates: Capacity of the candidate list

    Returns:
        (bins, scores, count), as for select_peaks_legacy
    """
    bins = np.zeros(n_candidates)
    scores = np.zeros(n_candidates)
    count = 0

    for i in range(1, len(ss) - 1):
        if not _is_peak(ss, i):
            continue
        for j in range(n_candidates):
            if scores[j] == 0.0 or scores[j] < ss[i]:
                bins[j + 1:] = bins[j:-1]
                scores[j + 1:] = scores[j:-1]
                bins[j] = i
                scores[j] = ss[i]
                if count < n_candidates:
                    count += 1
                break

    return bins, scores, count


_SELECTORS = {
    PeakSelection.LEGACY: select_peaks_legacy,
    PeakSelection.GREEDY: select_peaks_greedy,
}


def select_peaks(ss: np.ndarray, n_candidates: int,
                 selection: PeakSelection = PeakSelection.LEGACY) -> Tuple[np.ndarray, np.ndarray, int]:
    """Select peak candidates with the given admission rule."""
    return _SELECTORS[PeakSelection(selection)](ss, n_candidates)


def quadratic_vertex(x0: float, y0: float, x1: float, y1: float,
                     x2: float, y2: float) -> Tuple[float, float]:
    """
    Vertex of the parabola through three points.

    Falls back to (x1, y1) when the points are collinear or two abscissas
    coincide.

    Returns:
        (x, y) of the vertex
    """
    den = (x0 - x1) * (x0 - x2) * (x1 - x2)
    if den == 0.0:
        return x1, y1

    a = (x2 * (y1 - y0) + x1 * (y0 - y2) + x0 * (y2 - y1)) / den
    if a == 0.0:
        return x1, y1
    b = (x2 * x2 * (y0 - y1) + x1 * x1 * (y2 - y0) + x0 * x0 * (y1 - y2)) / den
    c = (x1 * x2 * (x1 - x2) * y0 + x2 * x0 * (x2 - x0) * y1
         + x0 * x1 * (x0 - x1) * y2) / den

    x = -b / (2.0 * a)
    y = c - b * b / (4.0 * a)
    return x, y


def interpolate_peak(ss: np.ndarray, bin_index: float,
                     axis: LogFrequencyAxis) -> Tuple[float, float]:
    """
    Refine a peak bin to sub-bin precision.

    Args:
        ss: Summation spectrum
        bin_index: Peak bin (interior, 1..N-2)
        axis: Frequency axis

    Returns:
        (frequency in Hz, interpolated score)
    """
    j = int(bin_index)
    if j < 1 or j > len(ss) - 2:
        raise IndexError(f"Peak bin {j} is not interior to a {len(ss)}-bin spectrum")

    f0 = axis.log_frequency(bin_index - 1.0)
    f1 = axis.log_frequency(bin_index)
    f2 = axis.log_frequency(bin_index + 1.0)

    fx, score = quadratic_vertex(f0, float(ss[j - 1]), f1, float(ss[j]), f2, float(ss[j + 1]))
    return axis.to_hertz(fx), score
