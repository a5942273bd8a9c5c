"""
Composition of scorers.

from .schema import ScoringSchema

schema = ScoringSchema(peak_scorers=[IntensityPeakScorer()])
node_scores = schema.peak_scores(peaks, context)

"""

from dataclasses import dataclass, field
from typing import List, Sequence

import math
import numpy as np

from ..chem.formula import MolecularFormula
from ..errors import ConfigurationError
from ..model.graph import Decomposition
from ..model.peaks import ProcessedPeak
from .contracts import DecompositionScorer, PeakPairScorer, PeakScorer, ScoringContext


@dataclass
class ScoringSchema:
    """The active scorers of an analysis. Scores of each kind are summed."""
    peak_scorers: List[PeakScorer] = field(default_factory=list)
    peak_pair_scorers: List[PeakPairScorer] = field(default_factory=list)
    decomposition_scorers: List[DecompositionScorer] = field(default_factory=list)

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """
        Raises:
            ConfigurationError: if a scorer does not implement the contract of its list
        """
        for name, contract, scorers in (
                ('peak_scorers', PeakScorer, self.peak_scorers),
                ('peak_pair_scorers', PeakPairScorer, self.peak_pair_scorers),
                ('decomposition_scorers', DecompositionScorer, self.decomposition_scorers)):
            for scorer in scorers:
                if not isinstance(scorer, contract):
                    raise ConfigurationError(
                        f"{type(scorer).__name__} in {name} does not implement {contract.__name__}")

    def peak_scores(self, peaks: Sequence[ProcessedPeak], context: ScoringContext) -> np.ndarray:
        scores = np.zeros(len(peaks), dtype=float)
        for scorer in self.peak_scorers:
            scorer.score(peaks, context, scores)
        return np.where(np.isfinite(scores), scores, -np.inf)

    def peak_pair_scores(self, peaks: Sequence[ProcessedPeak], context: ScoringContext) -> np.ndarray:
        scores = np.zeros((len(peaks), len(peaks)), dtype=float)
        for scorer in self.peak_pair_scorers:
            scorer.score(peaks, context, scores)
        return np.where(np.isfinite(scores), scores, -np.inf)

    def loss_score(self, loss: MolecularFormula, source: Decomposition, target: Decomposition,
                   context: ScoringContext) -> float:
        """Sum of all decomposition scores; -inf if any of them is not finite."""
        total = 0.0
        for scorer in self.decomposition_scorers:
            total += scorer.score(loss, source, target, context)
        return total if math.isfinite(total) else -math.inf
