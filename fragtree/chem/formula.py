"""
Molecular formulas.

Formulas are immutable element->count mappings. Counts may become negative
after subtraction, which is how invalid losses are detected. Monoisotopic
masses come from the RDKit periodic table.

from .formula import MolecularFormula

glucose = MolecularFormula.parse('C6H12O6')
water = MolecularFormula.parse('H2O')
(glucose - water).mass

"""

import re
from functools import lru_cache, total_ordering
from typing import Dict, Iterator, List, Optional, Tuple

from rdkit.Chem import rdchem

_ELEMENT_PATTERN = re.compile(r'([A-Z][a-z]?)(\d*)')
_FORMULA_PATTERN = re.compile(r'(?:[A-Z][a-z]?\d*)*')

# Most common valences, used for the rings-plus-double-bonds equivalent
VALENCES = {
    'C': 4, 'H': 1, 'N': 3, 'O': 2, 'P': 3, 'S': 2, 'F': 1, 'Cl': 1, 'Br': 1, 'I': 1,
    'Si': 4, 'B': 3, 'Se': 2, 'Na': 1, 'K': 1,
}


@lru_cache(maxsize=None)
def element_mass(symbol: str) -> float:
    """Monoisotopic mass of the most common isotope of an element."""
    pt = rdchem.GetPeriodicTable()
    try:
        return pt.GetMostCommonIsotopeMass(symbol)
    except (RuntimeError, ValueError) as e:
        raise ValueError(f"Unknown element: {symbol}") from e


def _hill_key(symbol: str, has_carbon: bool) -> Tuple[int, str]:
    if has_carbon:
        if symbol == 'C':
            return (0, symbol)
        if symbol == 'H':
            return (1, symbol)
    return (2, symbol)


@total_ordering
class MolecularFormula:
    """An immutable molecular formula."""

    __slots__ = ('_counts', '_mass', '_hash')

    def __init__(self, counts: Optional[Dict[str, int]] = None):
        items = sorted((el, int(n)) for el, n in (counts or {}).items() if n != 0)
        self._counts: Tuple[Tuple[str, int], ...] = tuple(items)
        self._mass = sum(element_mass(el) * n for el, n in self._counts)
        self._hash = hash(self._counts)

    @classmethod
    def parse(cls, text: str) -> 'MolecularFormula':
        """
        Parse a formula string such as 'C6H12O6'. Repeated elements are summed.

        Raises:
            ValueError: if the text is not a formula or contains unknown elements
        """
        text = text.strip()
        if not _FORMULA_PATTERN.fullmatch(text):
            raise ValueError(f"Not a molecular formula: {text!r}")
        counts: Dict[str, int] = {}
        for el, n in _ELEMENT_PATTERN.findall(text):
            element_mass(el)
            counts[el] = counts.get(el, 0) + (int(n) if n else 1)
        return cls(counts)

    @classmethod
    def from_counts(cls, counts: Dict[str, int]) -> 'MolecularFormula':
        return cls(counts)

    @classmethod
    def empty(cls) -> 'MolecularFormula':
        return _EMPTY

    @property
    def mass(self) -> float:
        return self._mass

    def number_of(self, element: str) -> int:
        for el, n in self._counts:
            if el == element:
                return n
        return 0

    def elements(self) -> List[str]:
        return [el for el, _ in self._counts]

    def as_dict(self) -> Dict[str, int]:
        return dict(self._counts)

    def __iter__(self) -> Iterator[Tuple[str, int]]:
        return iter(self._counts)

    def __add__(self, other: 'MolecularFormula') -> 'MolecularFormula':
        counts = self.as_dict()
        for el, n in other._counts:
            counts[el] = counts.get(el, 0) + n
        return MolecularFormula(counts)

    def __sub__(self, other: 'MolecularFormula') -> 'MolecularFormula':
        counts = self.as_dict()
        for el, n in other._counts:
            counts[el] = counts.get(el, 0) - n
        return MolecularFormula(counts)

    def multiply(self, scalar: int) -> 'MolecularFormula':
        return MolecularFormula({el: n * scalar for el, n in self._counts})

    def is_subtractable(self, other: 'MolecularFormula') -> bool:
        """True if other can be subtracted without any element going negative."""
        for el, n in other._counts:
            if n > self.number_of(el):
                return False
        return True

    def is_all_positive_or_zero(self) -> bool:
        return all(n >= 0 for _, n in self._counts)

    def is_empty(self) -> bool:
        return not self._counts

    def atom_count(self) -> int:
        return sum(n for _, n in self._counts)

    def rdbe(self) -> float:
        """Rings plus double bonds equivalent."""
        total = 0
        for el, n in self._counts:
            total += (VALENCES.get(el, 2) - 2) * n
        return 1 + total / 2

    def __eq__(self, other):
        if not isinstance(other, MolecularFormula):
            return NotImplemented
        return self._counts == other._counts

    def __hash__(self):
        return self._hash

    def __lt__(self, other: 'MolecularFormula'):
        if not isinstance(other, MolecularFormula):
            return NotImplemented
        if self._mass != other._mass:
            return self._mass < other._mass
        return str(self) < str(other)

    def __str__(self) -> str:
        has_carbon = self.number_of('C') > 0
        parts = []
        for el, n in sorted(self._counts, key=lambda x: _hill_key(x[0], has_carbon)):
            parts.append(el if n == 1 else f"{el}{n}")
        return ''.join(parts)

    def __repr__(self) -> str:
        return f"MolecularFormula('{self}')"

    def __reduce__(self):
        return (MolecularFormula, (self.as_dict(),))


_EMPTY = MolecularFormula()
