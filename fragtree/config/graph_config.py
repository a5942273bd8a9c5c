from dataclasses import dataclass
from typing import List, Optional
import math

from .base_config import BaseConfig, check_positive
from ..chem.deviation import Deviation
from ..chem.ionization import Ionization
from ..errors import ConfigurationError


@dataclass
class GraphConfig(BaseConfig):
    """Configuration parameters for fragmentation graph construction."""

    # Fragment formula constraints
    min_rdbe: float = -0.5

    # Additional ionizations a fragment may carry. None means fragments
    # keep the ionization of the precursor.
    fragment_ionizations: Optional[List[str]] = None

    # Isotope peaks
    isotope_tolerance: float = 0.005  # Da, on top of the MS2 ppm window
    max_isotope_peaks: int = 3

    def __post_init__(self):
        super().__post_init__()
        if self.min_rdbe is None or not math.isfinite(self.min_rdbe):
            raise ConfigurationError(f"min_rdbe={self.min_rdbe!r} is invalid")
        check_positive('isotope_tolerance', self.isotope_tolerance)
        if self.max_isotope_peaks < 0:
            raise ConfigurationError(f"max_isotope_peaks={self.max_isotope_peaks!r} is invalid")
        if self.fragment_ionizations is not None:
            for name in self.fragment_ionizations:
                try:
                    Ionization.parse(name)
                except ValueError as e:
                    raise ConfigurationError(f"Unknown fragment ionization: {name}") from e

    @property
    def isotope_deviation(self) -> Deviation:
        return Deviation(self.ppm, self.isotope_tolerance)

    def ionizations_for(self, precursor_ionization: Ionization) -> List[Ionization]:
        """Ionizations fragments are allowed to carry, precursor ionization first."""
        ionizations = [precursor_ionization]
        for name in self.fragment_ionizations or []:
            ion = Ionization.parse(name)
            if ion not in ionizations:
                ionizations.append(ion)
        return ionizations
