import math

from fragtree.build import FragmentationGraphBuilder
from fragtree.chem import MolecularFormula
from fragtree.config import AnalysisConfig
from fragtree.model import ProcessedPeak
from fragtree.scoring import PeakScorer, ScoringSchema, default_scoring_schema
from fragtree.solve import solve

PHENYLALANINE = 'C9H11NO2'

PRECURSOR = MolecularFormula.parse(PHENYLALANINE)


class RejectSyntheticPeaks(PeakScorer):
    def score(self, peaks, context, scores):
        for i, p in enumerate(peaks):
            if p.synthetic:
                scores[i] = -math.inf


def build(peaks, protonated, config=None, schema=None):
    config = config or AnalysisConfig()
    schema = schema or default_scoring_schema(config)
    return FragmentationGraphBuilder(config, schema).build(peaks, PRECURSOR, protonated)


def test_precursor_is_the_single_root_child(phe_peaks, protonated):
    graph = build(phe_peaks, protonated)
    graph.validate()
    [root_loss] = graph.outgoing_losses(graph.root)
    precursor = graph.fragment(root_loss.target)
    assert precursor.vertex_id == 1
    assert precursor.formula == PRECURSOR
    assert precursor.color == 4
    assert root_loss.formula.is_empty()


def test_fragments_explain_peaks(phe_peaks, protonated):
    graph = build(phe_peaks, protonated)
    formulas = {(str(f.formula), f.color) for f in graph.fragments[1:]}
    assert ('C8H9N', 2) in formulas
    assert ('C9H9NO', 3) in formulas
    assert ('C7H6', 0) in formulas
    for fragment in graph.fragments[1:]:
        assert PRECURSOR.is_subtractable(fragment.formula)
        assert fragment.incoming


def test_losses_point_forward_and_shrink(phe_peaks, protonated):
    graph = build(phe_peaks, protonated)
    masses = [f.formula.mass for f in graph.fragments[1:]]
    assert masses == sorted(masses, reverse=True)
    for loss in graph.losses:
        assert loss.source < loss.target
        assert math.isfinite(loss.weight)
        if loss.source != 0:
            source, target = graph.fragment(loss.source), graph.fragment(loss.target)
            assert source.color != target.color
            assert loss.formula == source.formula - target.formula
    # losses are added grouped by target
    targets = [loss.target for loss in graph.losses]
    assert targets == sorted(targets)


def test_heavy_peaks_are_not_explained(phe_peaks, protonated):
    peaks = phe_peaks + [ProcessedPeak(index=9, mz=250.1, intensity=50.0)]
    graph = build(peaks, protonated)
    assert graph.fragments_with_color(9) == []


def test_missing_precursor_peak_is_synthesized(phe_peaks, protonated):
    graph = build(phe_peaks[:-1], protonated)
    precursor = graph.fragment(1)
    assert precursor.formula == PRECURSOR
    assert precursor.peak.synthetic
    assert precursor.color == 4
    assert not graph.is_empty()


def test_unscorable_precursor_gives_empty_graph(phe_peaks, protonated):
    schema = ScoringSchema(peak_scorers=[RejectSyntheticPeaks()])
    graph = build(phe_peaks[:-1], protonated, schema=schema)
    assert graph.is_empty()
    assert len(graph) == 1
    tree = solve(graph)
    assert len(tree) == 1
    assert tree.root_formula == PRECURSOR
    assert tree.score == 0.0


def test_isotope_fragments(phe_peaks_with_isotope, protonated):
    graph = build(phe_peaks_with_isotope, protonated)
    graph.validate()
    [iso] = graph.fragments_with_color(5)
    marker = graph.isotope_marker(iso)
    assert marker.monoisotopic_peak == 2
    assert marker.isotope_index == 1
    assert marker.formula == MolecularFormula.parse('C8H9N')
    assert iso.formula.is_empty()
    [loss] = graph.incoming_losses(iso)
    assert graph.fragment(loss.source).formula == MolecularFormula.parse('C8H9N')
    assert iso.vertex_id == len(graph) - 1


def test_isotope_peaks_beyond_limit_are_ignored(phe_peaks_with_isotope, protonated):
    graph = build(phe_peaks_with_isotope, protonated, config=AnalysisConfig(max_isotope_peaks=0))
    assert graph.fragments_with_color(5) == []


def test_builder_is_deterministic(phe_peaks_with_isotope, protonated):
    first = build(phe_peaks_with_isotope, protonated)
    second = build(list(reversed(phe_peaks_with_isotope)), protonated)
    assert [(str(f.formula), f.color) for f in first] == [(str(f.formula), f.color) for f in second]
    assert [(l.source, l.target, l.weight) for l in first.losses] == \
        [(l.source, l.target, l.weight) for l in second.losses]


def test_graph_exports_to_networkx(phe_peaks, protonated):
    graph = build(phe_peaks, protonated)
    G = graph.to_networkx()
    assert G.number_of_nodes() == len(graph)
    assert G.number_of_edges() == graph.number_of_edges()
    assert G.nodes[1]['formula'] == PHENYLALANINE
