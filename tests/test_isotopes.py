import pytest

from fragtree.chem import Ionization, MolecularFormula
from fragtree.errors import GraphInvariantError
from fragtree.model import FragmentationGraph, IsotopeMarker
from fragtree.solve import CriticalPathInsertionHeuristic, CriticalPathInsertionWithIsotopePeaks, solve

ION = Ionization.parse('[M+H]+')
EMPTY = MolecularFormula.empty()


def F(text):
    return MolecularFormula.parse(text)


def chain_of_peaks(tree):
    return [f.peak_id for f in tree.path_to_root(tree.leaves()[0])][::-1]


def test_isotope_children_become_a_chain(isotope_graph):
    tree = solve(isotope_graph)
    assert chain_of_peaks(tree) == [3, 5, 4]
    assert [f.is_isotope for f in tree] == [False, True, True]
    assert tree.score == pytest.approx(1.75)
    assert tree.score == tree.edge_weight_sum()
    for f in tree.fragments[1:]:
        assert f.formula.is_empty()
        assert f.ionization == ION


def test_plain_heuristic_keeps_isotopes_as_siblings(isotope_graph):
    tree = CriticalPathInsertionHeuristic(isotope_graph).solve()
    assert sorted(f.peak_id for f in tree.children_of(tree.root)) == [4, 5]
    assert not any(f.is_isotope for f in tree)
    assert tree.score == pytest.approx(1.75)


def test_isotope_series_keeps_ancestor(protonated):
    g = FragmentationGraph(F('C6H5'), protonated)
    f = g.add_fragment(F('C6H5'), protonated, 3)
    iso4 = g.add_fragment(EMPTY, protonated, 4, isotope=IsotopeMarker(3, 1, F('C6H5')))
    iso5 = g.add_fragment(EMPTY, protonated, 5, isotope=IsotopeMarker(3, 2, F('C6H5')))
    g.add_loss(g.root, f, 1.0, formula=EMPTY)
    g.add_loss(f, iso4, 0.5, formula=EMPTY)
    g.add_loss(iso4, iso5, 0.25, formula=EMPTY)

    assert chain_of_peaks(CriticalPathInsertionHeuristic(g).solve()) == [3, 4, 5]
    tree = CriticalPathInsertionWithIsotopePeaks(g).solve()
    assert chain_of_peaks(tree) == [3, 5, 4]
    assert tree.score == pytest.approx(1.75)


def test_isotope_chains_hang_below_regular_fragments(protonated):
    g = FragmentationGraph(F('C7H7O'), protonated)
    p = g.add_fragment(F('C7H7O'), protonated, 0)
    f = g.add_fragment(F('C6H5'), protonated, 3)
    iso_p = g.add_fragment(EMPTY, protonated, 1, isotope=IsotopeMarker(0, 1, F('C7H7O')))
    iso_f = g.add_fragment(EMPTY, protonated, 4, isotope=IsotopeMarker(3, 1, F('C6H5')))
    g.add_loss(g.root, p, 1.0, formula=EMPTY)
    g.add_loss(p, f, 1.0)
    g.add_loss(p, iso_p, 0.5, formula=EMPTY)
    g.add_loss(f, iso_f, 0.5, formula=EMPTY)

    tree = solve(g)
    assert tree.score == pytest.approx(3.0)
    by_peak = {node.peak_id: node for node in tree}
    assert tree.parent_of(by_peak[1]) is tree.root
    assert tree.parent_of(by_peak[4]) is by_peak[3]
    # chains are attached in the order of their ancestors
    assert by_peak[1].vertex_id < by_peak[4].vertex_id


def test_custom_isotope_marker(protonated):
    g = FragmentationGraph(F('C6H5'), protonated)
    f = g.add_fragment(F('C6H5'), protonated, 3)
    first = g.add_fragment(EMPTY, protonated, 4)
    second = g.add_fragment(EMPTY, protonated, 5)
    g.add_loss(g.root, f, 1.0, formula=EMPTY)
    g.add_loss(f, first, 0.5)
    g.add_loss(f, second, 0.25)

    def marker(fragment):
        if fragment.color in (4, 5):
            return IsotopeMarker(3, fragment.color - 3)
        return None

    tree = solve(g, isotope_marker=marker)
    assert chain_of_peaks(tree) == [3, 5, 4]
    assert [f.is_isotope for f in tree] == [False, True, True]


def test_isotope_without_ancestor_in_tree_fails(isotope_graph):
    solver = CriticalPathInsertionWithIsotopePeaks(isotope_graph)
    root_loss = isotope_graph.loss(0)
    solver.color2edge = {3: root_loss}
    tree = solver.build_solution()
    assert len(tree) == 1

    orphan = FragmentationGraph(F('C6H5'), ION)
    a = orphan.add_fragment(F('C6H5'), ION, 3)
    b = orphan.add_fragment(F('C5H5'), ION, 2)
    iso = orphan.add_fragment(EMPTY, ION, 4, isotope=IsotopeMarker(2, 1, F('C5H5')))
    orphan.add_loss(orphan.root, a, 1.0, formula=EMPTY)
    orphan.add_loss(a, b, 1.0)
    loss = orphan.add_loss(b, iso, 1.0, formula=EMPTY)
    solver = CriticalPathInsertionWithIsotopePeaks(orphan)
    solver.color2edge = {3: orphan.loss(0), 4: loss}
    with pytest.raises(GraphInvariantError):
        solver.build_solution()
