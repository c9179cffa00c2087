"""
Configuration for subharmonic summation pitch detection.

Parameters are constant within a configuration epoch. They can be given
directly, built from a mapping, or loaded from a TOML file:

    # shspitch.toml
    [shs]
    n_harmonics = 15
    compression_factor = 0.85
    voicing_cutoff = 0.70
    greedy_peak_algo = true

Config file lookup (first match wins):
    1. Explicit path passed to load_config()
    2. SHSPITCH_CONFIG environment variable
    3. ./shspitch.toml
    4. ~/.shspitch/config.toml
"""

import math
import numbers
import os
from dataclasses import dataclass, fields, asdict
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from .axis import ShsConfigurationError
from .peaks import PeakSelection


CONFIG_ENV_VAR = "SHSPITCH_CONFIG"

_INT_FIELDS = ("n_harmonics", "n_candidates")
_FLOAT_FIELDS = ("compression_factor", "voicing_cutoff", "lf_cut")
_FLAG_FIELDS = ("octave_correction", "greedy_peak_algo", "shs_spectrum_output")


def _check_types(config) -> None:
    """Reject values of the wrong kind before any range check runs."""
    # bool is an Integral, but True is never a meaningful count or weight
    for name in _INT_FIELDS:
        value = getattr(config, name)
        if isinstance(value, bool) or not isinstance(value, numbers.Integral):
            raise ShsConfigurationError(
                f"{name} must be an integer, got {value!r} ({type(value).__name__})")
    for name in _FLOAT_FIELDS:
        value = getattr(config, name)
        if isinstance(value, bool) or not isinstance(value, numbers.Real):
            raise ShsConfigurationError(
                f"{name} must be a number, got {value!r} ({type(value).__name__})")
        if not math.isfinite(value):
            raise ShsConfigurationError(f"{name} must be finite, got {value}")
    for name in _FLAG_FIELDS:
        value = getattr(config, name)
        if not isinstance(value, bool):
            raise ShsConfigurationError(
                f"{name} must be true or false, got {value!r} ({type(value).__name__})")


@dataclass(frozen=True)
class ShsConfig:
    """
    Scalar parameters of the SHS kernel.

    Attributes:
        n_harmonics: Highest harmonic order summed (orders 2..n_harmonics)
        compression_factor: Weight factor applied per successive harmonic
        voicing_cutoff: Minimum voicing probability of a voiced frame
        octave_correction: Prefer a lower-octave candidate when plausible
        greedy_peak_algo: Rank all peaks by score instead of the legacy rule
        shs_spectrum_output: Forward the summation spectrum to a debug sink
        lf_cut: Zero all bins up to this frequency in Hz (0 = off)
        n_candidates: Capacity of the per-frame candidate list
    """
    n_harmonics: int = 15
    compression_factor: float = 0.85
    voicing_cutoff: float = 0.70
    octave_correction: bool = False
    greedy_peak_algo: bool = False
    shs_spectrum_output: bool = False
    lf_cut: float = 0.0
    n_candidates: int = 3

    def __post_init__(self):
        _check_types(self)
        if self.n_harmonics < 2:
            raise ShsConfigurationError(
                f"n_harmonics must be at least 2, got {self.n_harmonics}")
        if not 0.0 < self.compression_factor <= 1.0:
            raise ShsConfigurationError(
                f"compression_factor must be in (0, 1], got {self.compression_factor}")
        if not 0.0 <= self.voicing_cutoff <= 1.0:
            raise ShsConfigurationError(
                f"voicing_cutoff must be in [0, 1], got {self.voicing_cutoff}")
        if self.n_candidates < 1:
            raise ShsConfigurationError(
                f"n_candidates must be at least 1, got {self.n_candidates}")
        if self.lf_cut < 0:
            raise ShsConfigurationError(
                f"lf_cut must be >= 0 (0 disables), got {self.lf_cut}")

    @property
    def peak_selection(self) -> PeakSelection:
        """Peak selection strategy implied by greedy_peak_algo."""
        return PeakSelection.GREEDY if self.greedy_peak_algo else PeakSelection.LEGACY

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "ShsConfig":
        """
        Build a config from a mapping of field names to values.

        Raises:
            ShsConfigurationError: On unknown keys or invalid values
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ShsConfigurationError(
                f"Unknown configuration keys: {unknown}. Known: {sorted(known)}")
        return cls(**dict(values))

    def to_dict(self) -> dict:
        """Field values as a plain dict."""
        return asdict(self)


def _find_config_file() -> Optional[Path]:
    """Locate a config file via environment variable or default locations."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        path = Path(env_path)
        if not path.exists():
            raise ShsConfigurationError(
                f"{CONFIG_ENV_VAR} points to missing file: {path}")
        return path

    local_config = Path("shspitch.toml")
    if local_config.exists():
        return local_config

    user_config = Path.home() / ".shspitch" / "config.toml"
    if user_config.exists():
        return user_config

    return None


def _read_toml(path: Path) -> dict:
    """Parse a TOML file with tomllib (Python 3.11+) or tomli."""
    try:
        import tomllib
    except ImportError:
        import tomli as tomllib

    with open(path, "rb") as f:
        try:
            return tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ShsConfigurationError(f"Malformed config file {path}: {e}") from e


def load_config(path: Optional[Union[str, Path]] = None) -> ShsConfig:
    """
    Load SHS parameters from a TOML file.

    Values are read from the [shs] table; missing keys keep their defaults.

    Args:
        path: Config file path (None = search default locations)

    Returns:
        ShsConfig (all defaults if no config file is found)

    Raises:
        ShsConfigurationError: If the file is missing, malformed or invalid
    """
    if path is not None:
        path = Path(path)
        if not path.exists():
            raise ShsConfigurationError(f"Config file not found: {path}")
    else:
        path = _find_config_file()
        if path is None:
            return ShsConfig()

    config = _read_toml(path)
    section = config.get("shs", {})
    if not isinstance(section, dict):
        raise ShsConfigurationError(f"[shs] in {path} must be a table")
    return ShsConfig.from_mapping(section)
