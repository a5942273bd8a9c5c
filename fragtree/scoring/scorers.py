"""
Default scorers.

Simple, parameterized scoring models for peaks, peak pairs and losses. They
are meant as sensible defaults; analyses can plug in any scorer that
implements the contracts in `contracts.py`.
"""

import math
from typing import Iterable

import numpy as np
from scipy.stats import binom, norm

from ..chem.formula import MolecularFormula
from ..config.scoring_config import ScoringConfig
from .contracts import DecompositionScorer, PeakPairScorer, PeakScorer
from .schema import ScoringSchema

CARBON_13_ABUNDANCE = 0.0107

DEFAULT_COMMON_LOSSES = (
    'H2', 'CH4', 'H2O', 'NH3', 'HCN', 'CO', 'C2H4', 'CH2O', 'CH4O', 'H2S', 'C2H2O',
    'CO2', 'CH2O2', 'C2H4O2', 'SO3', 'HPO3', 'H3PO4', 'C6H10O5',
)


class IntensityPeakScorer(PeakScorer):
    """Rewards explaining intense peaks: multiplier * log(1 + 100 * relative intensity)."""

    def __init__(self, multiplier: float = 1.0):
        self.multiplier = multiplier

    def score(self, peaks, context, scores):
        rel = np.array([p.relative_intensity for p in peaks], dtype=float)
        scores += self.multiplier * np.log1p(100.0 * rel)


class RelativeLossSizePairScorer(PeakPairScorer):
    """Penalizes large losses relative to the heavier peak of the pair."""

    def __init__(self, multiplier: float = 0.5):
        self.multiplier = multiplier

    def score(self, peaks, context, scores):
        mz = np.array([p.mz for p in peaks], dtype=float)
        difference = np.abs(mz[:, None] - mz[None, :])
        heavier = np.maximum(mz[:, None], mz[None, :])
        scores -= self.multiplier * difference / heavier


class MassDeviationScorer(DecompositionScorer):
    """Log two-sided p-value of the target peak's mass error under a normal model."""

    def __init__(self, sd_ppm: float = 5.0, sd_absolute: float = 0.001):
        self.sd_ppm = sd_ppm
        self.sd_absolute = sd_absolute

    def score(self, loss, source, target, context):
        if target.isotope is not None or target.peak.synthetic:
            return 0.0
        expected = target.ion_mz
        sd = max(self.sd_ppm * expected * 1e-6, self.sd_absolute)
        return float(math.log(2.0) + norm.logsf(abs(target.peak.mz - expected) / sd))


class CommonLossScorer(DecompositionScorer):
    """Adds a bonus for frequently observed neutral losses."""

    def __init__(self, bonus: float = 1.0, losses: Iterable[str] = DEFAULT_COMMON_LOSSES):
        self.bonus = bonus
        self.losses = frozenset(MolecularFormula.parse(f) for f in losses)

    def score(self, loss, source, target, context):
        return self.bonus if loss in self.losses else 0.0


class LossSizeScorer(DecompositionScorer):
    """Log-normal prior on the loss mass, normalized to 0 at its mode."""

    def __init__(self, log_mean: float = 4.0, log_sd: float = 0.8, multiplier: float = 1.0):
        self.log_mean = log_mean
        self.log_sd = log_sd
        self.multiplier = multiplier

    def score(self, loss, source, target, context):
        if target.isotope is not None or loss.is_empty():
            return 0.0
        z = (math.log(loss.mass) - self.log_mean) / self.log_sd
        return -self.multiplier * z * z / 2


class IsotopeIntensityScorer(DecompositionScorer):
    """
    Compares the intensity ratio of consecutive isotope peaks with the ratio
    expected from the carbon count of the monoisotopic fragment.
    Only losses ending at isotope fragments are scored.
    """

    def __init__(self, multiplier: float = 1.0, log_ratio_sd: float = 0.5):
        self.multiplier = multiplier
        self.log_ratio_sd = log_ratio_sd

    def expected_ratio(self, carbons: int, isotope_index: int) -> float:
        """P(k 13C atoms) / P(k-1 13C atoms) for a binomial carbon distribution."""
        if carbons < isotope_index:
            return 0.0
        distribution = binom(carbons, CARBON_13_ABUNDANCE)
        return float(distribution.pmf(isotope_index) / distribution.pmf(isotope_index - 1))

    def score(self, loss, source, target, context):
        marker = target.isotope
        if marker is None or self.multiplier == 0:
            return 0.0
        expected = self.expected_ratio(marker.formula.number_of('C'), marker.isotope_index)
        if expected <= 0 or source.peak.intensity <= 0 or target.peak.intensity <= 0:
            return -math.inf
        z = math.log((target.peak.intensity / source.peak.intensity) / expected) / self.log_ratio_sd
        return -self.multiplier * z * z / 2


def default_scoring_schema(config: ScoringConfig) -> ScoringSchema:
    """Scoring schema built from the default scorers and their configured parameters."""
    return ScoringSchema(
        peak_scorers=[IntensityPeakScorer(config.intensity_multiplier)],
        peak_pair_scorers=[RelativeLossSizePairScorer(config.relative_loss_size_multiplier)],
        decomposition_scorers=[
            MassDeviationScorer(config.mass_error_sd_ppm, config.mass_error_sd_absolute),
            CommonLossScorer(config.common_loss_bonus),
            LossSizeScorer(config.loss_size_log_mean, config.loss_size_log_sd, config.loss_size_multiplier),
            IsotopeIntensityScorer(config.isotope_multiplier),
        ],
    )
