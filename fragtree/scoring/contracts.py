"""
Scorer contracts.

All scores are log-probabilities, so independent scorers combine by summation.
Scorers must be pure: they never keep state between calls and can be shared
between concurrently running analyses.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

from ..chem.deviation import Deviation
from ..chem.formula import MolecularFormula
from ..chem.ionization import Ionization
from ..model.graph import Decomposition
from ..model.peaks import ProcessedPeak


@dataclass(frozen=True)
class ScoringContext:
    """Read-only information about the analysis a scorer is invoked for."""
    peaks: Tuple[ProcessedPeak, ...]
    precursor_peak: ProcessedPeak
    precursor_formula: MolecularFormula
    ionization: Ionization
    deviation: Deviation


class PeakScorer(ABC):
    """Per-peak score contribution, added to every loss ending at the peak."""

    @abstractmethod
    def score(self, peaks: Sequence[ProcessedPeak], context: ScoringContext, scores: np.ndarray) -> None:
        """Add the score of peaks[i] to scores[i]."""


class PeakPairScorer(ABC):
    """Compatibility of explaining one peak as a loss-child of another."""

    @abstractmethod
    def score(self, peaks: Sequence[ProcessedPeak], context: ScoringContext, scores: np.ndarray) -> None:
        """Add the score of the pair (peaks[i], peaks[j]) to the symmetric matrix scores[i][j]."""


class DecompositionScorer(ABC):
    """Scores a loss between two decompositions, independent of peak position."""

    @abstractmethod
    def score(self, loss: MolecularFormula, source: Decomposition, target: Decomposition,
              context: ScoringContext) -> float:
        pass
