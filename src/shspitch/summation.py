"""
Subharmonic summation (Hermes 1988) on a log-frequency spectrum.

On a log-frequency axis, dividing a frequency by the harmonic order i is a
shift of points_per_octave * log2(i) bins toward bin 0. Summing the spectrum
with shifted copies of itself therefore piles the energy of the harmonics
i * F0 onto the bin of F0:

    SS[j] = X[j] + sum_{i=2}^{H} c^(i-1) * X[j + shift_i]
    shift_i = floor(points_per_octave * log2(i))

with c the compression factor. The result is divided by H and negative
values are clamped to 0.
"""

import math
from typing import List, Optional

import numpy as np


def harmonic_shifts(n_harmonics: int, points_per_octave: float) -> List[int]:
    """
    Bin shift for every harmonic order 2..n_harmonics.

    Args:
        n_harmonics: Highest harmonic order
        points_per_octave: Bins per octave of the axis

    Returns:
        List of integer shifts, index 0 belonging to harmonic order 2
    """
    return [int(math.floor(points_per_octave * math.log2(i)))
            for i in range(2, n_harmonics + 1)]


def subharmonic_summation(
    spectrum: np.ndarray,
    n_harmonics: int,
    compression_factor: float,
    points_per_octave: float,
    out: Optional[np.ndarray] = None
) -> np.ndarray:
    """
    Compute the subharmonic sum spectrum.

    Args:
        spectrum: Log-frequency magnitudes (length N)
        n_harmonics: Highest harmonic order summed
        compression_factor: Weight multiplier per successive harmonic
        points_per_octave: Bins per octave of the axis
        out: Buffer of length N to write into (None = allocate)

    Returns:
        The summation spectrum (``out`` if given)
    """
    n = len(spectrum)
    if out is None:
        out = np.empty(n)

    out[:] = spectrum

    scale = compression_factor
    for shift in harmonic_shifts(n_harmonics, points_per_octave):
        if shift < n:
            out[:n - shift] += spectrum[shift:] * scale
        scale *= compression_factor

    # Possibly redundant after compression, but absolute scores depend on it
    out /= n_harmonics
    np.maximum(out, 0.0, out=out)

    return out
