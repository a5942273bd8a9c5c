"""Scorer contracts, their composition and default scorer implementations."""

from .contracts import ScoringContext, PeakScorer, PeakPairScorer, DecompositionScorer
from .schema import ScoringSchema
from .scorers import (
    IntensityPeakScorer, RelativeLossSizePairScorer, MassDeviationScorer,
    CommonLossScorer, LossSizeScorer, IsotopeIntensityScorer, default_scoring_schema
)

__all__ = [
    'ScoringContext',
    'PeakScorer',
    'PeakPairScorer',
    'DecompositionScorer',
    'ScoringSchema',
    'IntensityPeakScorer',
    'RelativeLossSizePairScorer',
    'MassDeviationScorer',
    'CommonLossScorer',
    'LossSizeScorer',
    'IsotopeIntensityScorer',
    'default_scoring_schema',
]
