"""Fragmentation tree analysis of spectra: candidate enumeration, tree computation and ranking."""

from .core import (
    FragmentationTreeAnalyzer, TreeResult, CandidateFailure, enumerate_candidates, compute_tree
)

__all__ = [
    'FragmentationTreeAnalyzer',
    'TreeResult',
    'CandidateFailure',
    'enumerate_candidates',
    'compute_tree',
]
