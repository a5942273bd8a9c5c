"""Data model: processed peaks, fragmentation graphs and fragmentation trees."""

from .peaks import (
    ProcessedPeak, IsotopeMarker, normalize_peaks, peaks_from_dataframe,
    find_precursor_peak, synthetic_precursor_peak
)
from .graph import FragmentationGraph, GraphFragment, Loss, Decomposition, ROOT_COLOR
from .tree import FragmentationTree, TreeFragment, TreeLoss

__all__ = [
    'ProcessedPeak',
    'IsotopeMarker',
    'normalize_peaks',
    'peaks_from_dataframe',
    'find_precursor_peak',
    'synthetic_precursor_peak',
    'FragmentationGraph',
    'GraphFragment',
    'Loss',
    'Decomposition',
    'ROOT_COLOR',
    'FragmentationTree',
    'TreeFragment',
    'TreeLoss',
]
