from dataclasses import dataclass, field
from typing import Dict, Optional

from .graph_config import GraphConfig
from .scoring_config import ScoringConfig
from ..chem.deviation import Deviation
from ..chem.ionization import Ionization
from ..errors import ConfigurationError


def default_element_bounds() -> Dict[str, int]:
    return {'C': 40, 'H': 80, 'N': 8, 'O': 16, 'P': 2, 'S': 2}


@dataclass
class AnalysisConfig(GraphConfig, ScoringConfig):
    """Configuration for analysing a spectrum against many candidate formulas."""

    ionization: str = '[M+H]+'

    # Candidate enumeration from the precursor mass
    ms1_ppm: float = 5.0
    ms1_absolute_tolerance: float = 0.001
    elements: Dict[str, int] = field(default_factory=default_element_bounds)
    max_candidates: int = 20

    # Processing
    n_jobs: int = 1
    skip_failed: bool = True
    output_dir: Optional[str] = None

    def __post_init__(self):
        super().__post_init__()
        try:
            Ionization.parse(self.ionization)
        except ValueError as e:
            raise ConfigurationError(f"Unknown ionization: {self.ionization}") from e
        if self.max_candidates < 1:
            raise ConfigurationError(f"max_candidates={self.max_candidates!r} is invalid")
        for element, bound in self.elements.items():
            if bound < 0:
                raise ConfigurationError(f"Negative bound for element {element}")

    @property
    def precursor_ionization(self) -> Ionization:
        return Ionization.parse(self.ionization)

    @property
    def ms1_deviation(self) -> Deviation:
        return Deviation(self.ms1_ppm, self.ms1_absolute_tolerance)
