"""
Processed peaks.

Peak lists come from an external preprocessing step. Each peak carries a
unique integer index which is its color in the fragmentation graph.

from .peaks import peaks_from_dataframe

peaks = peaks_from_dataframe(pd.read_csv('spectrum.csv'))

"""

from dataclasses import dataclass, replace
from typing import Iterable, List, Optional

import numpy as np
import pandas as pd

from ..chem.deviation import Deviation
from ..chem.formula import MolecularFormula


@dataclass(frozen=True)
class ProcessedPeak:
    """A processed MS/MS peak. `index` is the peak's color."""
    index: int
    mz: float
    intensity: float
    relative_intensity: float = 0.0
    isotope_of: Optional[int] = None
    isotope_index: int = 0
    synthetic: bool = False

    @property
    def is_isotope(self) -> bool:
        return self.isotope_of is not None


@dataclass(frozen=True)
class IsotopeMarker:
    """Marks a graph fragment as explaining an isotope peak of another peak.

    `formula` is the formula of the monoisotopic fragment the isotope series belongs to.
    """
    monoisotopic_peak: int
    isotope_index: int
    formula: MolecularFormula = MolecularFormula.empty()


def normalize_peaks(peaks: Iterable[ProcessedPeak]) -> List[ProcessedPeak]:
    """
    Validate a peak list, fill in relative intensities and sort by m/z.

    Raises:
        ValueError: on duplicate indices, non-positive m/z or dangling isotope references
    """
    peaks = list(peaks)
    indices = [p.index for p in peaks]
    if len(set(indices)) != len(indices):
        raise ValueError("Peak indices must be unique")
    for p in peaks:
        if not np.isfinite(p.mz) or p.mz <= 0:
            raise ValueError(f"Invalid m/z for peak {p.index}: {p.mz}")
        if p.isotope_of is not None:
            if p.isotope_of not in indices or p.isotope_of == p.index:
                raise ValueError(f"Peak {p.index} is an isotope of unknown peak {p.isotope_of}")
            if p.isotope_index < 1:
                raise ValueError(f"Isotope peak {p.index} needs an isotope_index >= 1")

    max_intensity = max((p.intensity for p in peaks), default=0.0)
    if max_intensity > 0:
        peaks = [replace(p, relative_intensity=p.intensity / max_intensity) for p in peaks]
    return sorted(peaks, key=lambda p: (p.mz, p.index))


def peaks_from_dataframe(df: pd.DataFrame) -> List[ProcessedPeak]:
    """
    Build processed peaks from a DataFrame.

    Required columns are 'mz' and 'intensity'. Optional columns: 'index'
    (defaults to the row position), 'isotope_of' and 'isotope_index'.
    """
    missing = [c for c in ('mz', 'intensity') if c not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}")

    peaks = []
    for i, row in enumerate(df.to_dict(orient='records')):
        isotope_of = row.get('isotope_of')
        if isotope_of is not None and pd.isna(isotope_of):
            isotope_of = None
        isotope_index = row.get('isotope_index', 0)
        index = row.get('index', i)
        if pd.isna(index):
            raise ValueError(f"Row {i} has no peak index")
        peaks.append(ProcessedPeak(
            index=int(index),
            mz=float(row['mz']),
            intensity=float(row['intensity']),
            isotope_of=None if isotope_of is None else int(isotope_of),
            isotope_index=0 if pd.isna(isotope_index) else int(isotope_index),
        ))
    return normalize_peaks(peaks)


def find_precursor_peak(peaks: List[ProcessedPeak], precursor_mz: float,
                        deviation: Deviation) -> Optional[ProcessedPeak]:
    """The non-isotope peak closest to the precursor m/z within the deviation, if any."""
    best = None
    for p in peaks:
        if p.is_isotope or not deviation.in_error_window(precursor_mz, p.mz):
            continue
        if best is None or abs(p.mz - precursor_mz) < abs(best.mz - precursor_mz):
            best = p
    return best


def synthetic_precursor_peak(peaks: List[ProcessedPeak], precursor_mz: float) -> ProcessedPeak:
    """A zero-intensity stand-in for a precursor peak missing from the spectrum."""
    index = max((p.index for p in peaks), default=-1) + 1
    return ProcessedPeak(index=index, mz=precursor_mz, intensity=0.0, synthetic=True)
