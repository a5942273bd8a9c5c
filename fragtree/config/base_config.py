from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional
import math
import yaml

from ..chem.deviation import Deviation
from ..errors import ConfigurationError


def find_fragtree_root() -> Path:
    """Find the fragtree root directory."""
    return Path(__file__).resolve().parent.parent.parent

FRAGTREE_ROOT = find_fragtree_root()


def check_multiplier(name: str, value: float) -> None:
    """Reject multipliers that are negative or not finite."""
    if value is None or not math.isfinite(value) or value < 0:
        raise ConfigurationError(
            f"{name}={value!r} is invalid. Multipliers have to be a positive (or zero) numerical value")


def check_positive(name: str, value: float) -> None:
    if value is None or not math.isfinite(value) or value <= 0:
        raise ConfigurationError(f"{name}={value!r} is invalid. Expected a positive finite value")


@dataclass
class BaseConfig:
    """Base configuration with common parameters."""
    # MS2 mass deviation: the allowed error is max(ppm * mz, absolute_tolerance)
    ppm: float = 10.0
    absolute_tolerance: float = 0.002

    verbose: bool = False

    @classmethod
    def from_file(cls, file_path: Optional[str]):
        """
        Creates a config instance by loading parameters from a YAML file.
        Any parameters in the YAML file will override the class defaults.
        """
        # If no file is provided, return a default config instance
        if not file_path:
            return cls()

        with open(file_path, 'r') as f:
            config_data = yaml.safe_load(f) or {}

        # Only keep keys that are fields of this dataclass so that a shared
        # parameter file can hold settings for several configs.
        valid_fields = {f.name for f in fields(cls)}
        filtered_data = {k: v for k, v in config_data.items() if k in valid_fields}

        return cls(**filtered_data)

    def __post_init__(self):
        """Validate tolerances eagerly."""
        if self.ppm is None or not math.isfinite(self.ppm) or self.ppm < 0:
            raise ConfigurationError(f"ppm={self.ppm!r} is invalid")
        check_positive('absolute_tolerance', self.absolute_tolerance)

    @property
    def ms2_deviation(self) -> Deviation:
        return Deviation(self.ppm, self.absolute_tolerance)
