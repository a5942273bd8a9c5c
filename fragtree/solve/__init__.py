"""Heuristic extraction of fragmentation trees from fragmentation graphs."""

from .heuristic import CriticalPathInsertionHeuristic
from .isotopes import CriticalPathInsertionWithIsotopePeaks, solve

__all__ = ['CriticalPathInsertionHeuristic', 'CriticalPathInsertionWithIsotopePeaks', 'solve']
