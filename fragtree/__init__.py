"""
fragtree: Fragmentation trees for tandem mass spectra
"""

__version__ = "0.1.0"

from . import config
from . import chem
from . import model
from . import scoring
from . import build
from . import solve
from . import analysis

from .config import AnalysisConfig, GraphConfig, ScoringConfig
from .chem import MolecularFormula, Ionization, Deviation
from .model import ProcessedPeak, FragmentationGraph, FragmentationTree
from .scoring import ScoringSchema, default_scoring_schema
from .build import FragmentationGraphBuilder
from .solve import CriticalPathInsertionHeuristic, CriticalPathInsertionWithIsotopePeaks
from .analysis import FragmentationTreeAnalyzer
from .errors import ConfigurationError, GraphInvariantError

__all__ = [
    'AnalysisConfig',
    'GraphConfig',
    'ScoringConfig',
    'MolecularFormula',
    'Ionization',
    'Deviation',
    'ProcessedPeak',
    'FragmentationGraph',
    'FragmentationTree',
    'ScoringSchema',
    'default_scoring_schema',
    'FragmentationGraphBuilder',
    'CriticalPathInsertionHeuristic',
    'CriticalPathInsertionWithIsotopePeaks',
    'FragmentationTreeAnalyzer',
    'ConfigurationError',
    'GraphInvariantError',
    "config", "chem", "model", "scoring", "build", "solve", "analysis",
]
