"""
Bounded mass decomposition.

Enumerates all molecular formulas whose monoisotopic mass falls into a mass
window, given lower and upper bounds per element. Elements are processed
heaviest first and each recursion level restricts the count range with
precomputed residue bounds, so only counts that can still reach the window
are visited.

from .decomposition import MassDecomposer, decompose_subformulas

decomposer = MassDecomposer({'C': (0, 10), 'H': (0, 20), 'O': (0, 5)})
decomposer.decompose(180.0634, 0.001)

"""

import math
from typing import Dict, List, Optional, Tuple

from .formula import MolecularFormula, element_mass


class MassDecomposer:
    """Decomposes masses over an element alphabet with per-element bounds."""

    def __init__(self, element_bounds: Dict[str, Tuple[int, int]]):
        """
        Args:
            element_bounds: Dictionary mapping element symbols to (min_count, max_count)
        """
        elements = []
        for symbol, (low, high) in element_bounds.items():
            if low < 0 or high < low:
                raise ValueError(f"Invalid bounds for {symbol}: ({low}, {high})")
            if high > 0:
                elements.append((symbol, element_mass(symbol), low, high))
        # heaviest first for better pruning; symbol keeps the order total
        elements.sort(key=lambda x: (-x[1], x[0]))
        self.elements = elements

        n = len(elements)
        self.min_residues = [0.0] * (n + 1)
        self.max_residues = [0.0] * (n + 1)
        for i in range(n - 1, -1, -1):
            _, mass, low, high = elements[i]
            self.min_residues[i] = self.min_residues[i + 1] + low * mass
            self.max_residues[i] = self.max_residues[i + 1] + high * mass

    def decompose(self, mass: float, tolerance: float,
                  max_results: Optional[int] = None) -> List[MolecularFormula]:
        """
        Find all formulas with |formula.mass - mass| <= tolerance.

        Results are ordered by increasing mass error, then by formula.
        """
        if not self.elements:
            return []
        low, high = mass - tolerance, mass + tolerance
        if high < self.min_residues[0] or low > self.max_residues[0]:
            return []
        found: List[Tuple[float, MolecularFormula]] = []
        self._recurse(0, 0.0, [0] * len(self.elements), low, high, found, max_results)
        found.sort(key=lambda x: (abs(x[0] - mass), str(x[1])))
        return [f for _, f in found]

    def _recurse(self, level, current, counts, low, high, found, max_results):
        symbol, el_mass, min_count, max_count = self.elements[level]
        rest_min = self.min_residues[level + 1]
        rest_max = self.max_residues[level + 1]

        first = max(min_count, math.ceil((low - current - rest_max) / el_mass))
        last = min(max_count, math.floor((high - current - rest_min) / el_mass))
        last_level = level + 1 == len(self.elements)

        for count in range(first, last + 1):
            if max_results is not None and len(found) >= max_results:
                break
            counts[level] = count
            new_mass = current + count * el_mass
            if last_level:
                if low <= new_mass <= high:
                    formula = MolecularFormula.from_counts(
                        {self.elements[i][0]: c for i, c in enumerate(counts) if c})
                    found.append((formula.mass, formula))
            else:
                self._recurse(level + 1, new_mass, counts, low, high, found, max_results)
        counts[level] = 0


def decompose_subformulas(parent: MolecularFormula, mass: float, tolerance: float,
                          max_results: Optional[int] = None) -> List[MolecularFormula]:
    """All sub-formulas of parent (every element count <= parent's) within the mass window."""
    bounds = {el: (0, n) for el, n in parent if n > 0}
    return MassDecomposer(bounds).decompose(mass, tolerance, max_results)
