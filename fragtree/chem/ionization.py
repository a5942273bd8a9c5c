"""
Ionization modes in adduct notation.

from .ionization import Ionization

protonated = Ionization.parse('[M+H]+')
protonated.neutral_to_mz(180.0634)  # 181.0707

"""

import re
from dataclasses import dataclass
from functools import lru_cache

from .formula import MolecularFormula

ELECTRON_MASS = 0.00054857990946
ISOTOPE_MASS_DIFFERENCE = 1.0033548  # 13C - 12C

_ADDUCT_PATTERN = re.compile(r'^\[M((?:[+-]\d*[A-Z][A-Za-z0-9]*)*)\](\d*)([+-])$')
_PART_PATTERN = re.compile(r'([+-])(\d*)([A-Z][A-Za-z0-9]*)')


@dataclass(frozen=True)
class Ionization:
    """An ionization mode such as [M+H]+ or [M-H]-."""
    name: str
    charge: int
    adduct: MolecularFormula
    mass_shift: float

    @classmethod
    def parse(cls, name: str) -> 'Ionization':
        """
        Parse adduct notation, e.g. '[M+H]+', '[M-H]-', '[M+NH4]+', '[M-H2O+H]+', '[M]+'.

        Raises:
            ValueError: for unparsable notation
        """
        return _parse_ionization(name.replace(' ', ''))

    def neutral_to_mz(self, mass: float) -> float:
        return (mass + self.mass_shift) / abs(self.charge)

    def mz_to_neutral(self, mz: float) -> float:
        return mz * abs(self.charge) - self.mass_shift

    def __str__(self) -> str:
        return self.name


@lru_cache(maxsize=None)
def _parse_ionization(name: str) -> Ionization:
    match = _ADDUCT_PATTERN.match(name)
    if match is None:
        raise ValueError(f"Unknown ionization: {name!r}")
    parts, charge_count, sign = match.groups()
    charge = int(charge_count) if charge_count else 1
    if sign == '-':
        charge = -charge

    adduct = MolecularFormula.empty()
    for part_sign, count, formula in _PART_PATTERN.findall(parts):
        term = MolecularFormula.parse(formula).multiply(int(count) if count else 1)
        adduct = adduct + term if part_sign == '+' else adduct - term

    mass_shift = adduct.mass - charge * ELECTRON_MASS
    return Ionization(name=name, charge=charge, adduct=adduct, mass_shift=mass_shift)
