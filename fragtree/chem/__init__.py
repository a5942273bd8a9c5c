"""Chemistry primitives: formulas, ionizations, mass deviations and decomposition."""

from .formula import MolecularFormula, element_mass
from .ionization import Ionization, ELECTRON_MASS, ISOTOPE_MASS_DIFFERENCE
from .deviation import Deviation
from .decomposition import MassDecomposer, decompose_subformulas

__all__ = [
    'MolecularFormula',
    'element_mass',
    'Ionization',
    'ELECTRON_MASS',
    'ISOTOPE_MASS_DIFFERENCE',
    'Deviation',
    'MassDecomposer',
    'decompose_subformulas',
]
