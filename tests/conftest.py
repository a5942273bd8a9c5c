"""
Shared fixtures: a phenylalanine [M+H]+ spectrum and small hand-made graphs.
"""
import pytest

from fragtree.chem import Ionization, MolecularFormula
from fragtree.config import AnalysisConfig
from fragtree.model import FragmentationGraph, IsotopeMarker, ProcessedPeak
from fragtree.scoring import default_scoring_schema

PHENYLALANINE_MZ = 166.08625505


def F(text):
    return MolecularFormula.parse(text)


@pytest.fixture
def protonated():
    return Ionization.parse('[M+H]+')


@pytest.fixture
def config():
    return AnalysisConfig()


@pytest.fixture
def schema(config):
    return default_scoring_schema(config)


@pytest.fixture
def phe_peaks():
    """Fragments of protonated phenylalanine: C7H6, C8H6, C8H9N, C9H9NO and the precursor."""
    return [
        ProcessedPeak(index=0, mz=91.05423, intensity=30.0),
        ProcessedPeak(index=1, mz=103.05423, intensity=20.0),
        ProcessedPeak(index=2, mz=120.08078, intensity=100.0),
        ProcessedPeak(index=3, mz=148.07569, intensity=10.0),
        ProcessedPeak(index=4, mz=PHENYLALANINE_MZ, intensity=40.0),
    ]


@pytest.fixture
def phe_peaks_with_isotope(phe_peaks):
    return phe_peaks + [
        ProcessedPeak(index=5, mz=121.08413, intensity=8.7, isotope_of=2, isotope_index=1),
    ]


@pytest.fixture
def diamond_graph(protonated):
    """
    root -> P(c0) -> A(c1) -> C(c3) -> E(c4)
                 \\-> B(c2) -> C
           A -> D(c3) -> E

    The best first path is root->P->B->C (4.5); A (2.0) is inserted second.
    """
    g = FragmentationGraph(F('C6H6O'), protonated)
    p = g.add_fragment(F('C6H6O'), protonated, 0)
    a = g.add_fragment(F('C6H6'), protonated, 1)
    b = g.add_fragment(F('C5H6'), protonated, 2)
    c = g.add_fragment(F('C4H4'), protonated, 3)
    d = g.add_fragment(F('C3H4'), protonated, 3)
    e = g.add_fragment(F('C2H2'), protonated, 4)
    g.add_loss(g.root, p, 1.0, formula=MolecularFormula.empty())
    g.add_loss(p, a, 2.0)
    g.add_loss(p, b, 0.5)
    g.add_loss(a, c, 1.0)
    g.add_loss(b, c, 3.0)
    g.add_loss(a, d, 0.2)
    g.add_loss(c, e, -0.5)
    g.add_loss(d, e, 0.1)
    return g


@pytest.fixture
def isotope_graph(protonated):
    """F (C6H5, color 3) with two isotope fragments of colors 4 and 5 hanging off it."""
    g = FragmentationGraph(F('C6H5'), protonated)
    f = g.add_fragment(F('C6H5'), protonated, 3)
    iso4 = g.add_fragment(MolecularFormula.empty(), protonated, 4,
                          isotope=IsotopeMarker(3, 1, F('C6H5')))
    iso5 = g.add_fragment(MolecularFormula.empty(), protonated, 5,
                          isotope=IsotopeMarker(3, 2, F('C6H5')))
    g.add_loss(g.root, f, 1.0, formula=MolecularFormula.empty())
    g.add_loss(f, iso4, 0.5, formula=MolecularFormula.empty())
    g.add_loss(f, iso5, 0.25, formula=MolecularFormula.empty())
    return g
