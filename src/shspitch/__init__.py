"""
shspitch - Subharmonic summation (SHS) pitch detection on log-frequency spectra.

The detector takes one log-frequency magnitude spectrum per frame and returns
a ranked list of F0 candidates with scores and voicing probabilities.

Usage:
    from shspitch import LogFrequencyAxis, ShsConfig, ShsPitchDetector

    axis = LogFrequencyAxis.octave_scale(fmin=25.0, n_octaves=8, points_per_octave=24)
    detector = ShsPitchDetector(ShsConfig(), axis)
    candidates = detector.analyze(frame)

    # Whole spectrogram
    from shspitch import LogSpectrogram
    pitch = LogSpectrogram(values, axis, time_step=0.01).to_pitch_shs()
    print(pitch.values())

Parameters can be loaded from a TOML file, see shspitch.config.load_config.
"""

from .axis import LogFrequencyAxis, ShsConfigurationError, NonStandardAxisWarning
from .config import ShsConfig, load_config
from .candidates import CandidateSet
from .peaks import PeakSelection
from .debug import ShsSpectrumSink, ShsSpectrumRecorder
from .detector import ShsPitchDetector
from .spectrum import LogSpectrum
from .spectrogram import LogSpectrogram
from .pitch import Pitch, PitchFrame, PitchCandidate, spectrogram_to_pitch

__version__ = "0.1.0"
__all__ = [
    "LogFrequencyAxis",
    "ShsConfigurationError",
    "NonStandardAxisWarning",
    "ShsConfig",
    "load_config",
    "CandidateSet",
    "PeakSelection",
    "ShsSpectrumSink",
    "ShsSpectrumRecorder",
    "ShsPitchDetector",
    "LogSpectrum",
    "LogSpectrogram",
    "Pitch",
    "PitchFrame",
    "PitchCandidate",
    "spectrogram_to_pitch",
]
