"""
Fragmentation graph construction.

The builder explains every peak by the sub-formulas of the candidate
precursor formula that match its mass, and connects two candidates whenever
one can be obtained from the other by a neutral loss. Isotope peaks are
attached to the fragments of their monoisotopic peak.

You can use it like

from .graph_builder import FragmentationGraphBuilder

builder = FragmentationGraphBuilder(config, schema)
graph = builder.build(peaks, MolecularFormula.parse('C9H11NO2'), Ionization.parse('[M+H]+'))

"""

import math
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np

from ..chem.decomposition import decompose_subformulas
from ..chem.formula import MolecularFormula
from ..chem.ionization import ISOTOPE_MASS_DIFFERENCE, Ionization
from ..config.graph_config import GraphConfig
from ..model.graph import Decomposition, FragmentationGraph
from ..model.peaks import (
    IsotopeMarker, ProcessedPeak, find_precursor_peak, normalize_peaks, synthetic_precursor_peak
)
from ..scoring.contracts import ScoringContext
from ..scoring.schema import ScoringSchema


class FragmentationGraphBuilder:
    """Builds the fragmentation graph of one candidate precursor formula."""

    def __init__(self, config: GraphConfig, schema: ScoringSchema):
        self.config = config
        self.schema = schema
        self.schema.validate()

    def build(self, peaks: Iterable[ProcessedPeak], precursor_formula: MolecularFormula,
              ionization: Ionization) -> FragmentationGraph:
        """
        Build the fragmentation graph.

        Args:
            peaks: Processed peaks with unique indices
            precursor_formula: Candidate molecular formula of the precursor
            ionization: Ionization of the precursor ion

        Returns:
            FragmentationGraph; it has no fragments besides the root when the
            precursor itself cannot be scored
        """
        peaks = normalize_peaks(peaks)
        deviation = self.config.ms2_deviation
        precursor_mz = ionization.neutral_to_mz(precursor_formula.mass)

        precursor_peak = find_precursor_peak(peaks, precursor_mz, deviation)
        if precursor_peak is None:
            precursor_peak = synthetic_precursor_peak(peaks, precursor_mz)
            peaks = sorted(peaks + [precursor_peak], key=lambda p: (p.mz, p.index))

        context = ScoringContext(tuple(peaks), precursor_peak, precursor_formula, ionization, deviation)
        position = {p.index: i for i, p in enumerate(peaks)}
        node_scores = self.schema.peak_scores(peaks, context)
        pair_scores = self.schema.peak_pair_scores(peaks, context)

        graph = FragmentationGraph(precursor_formula, ionization, peaks)
        root_weight = float(node_scores[position[precursor_peak.index]])
        if not math.isfinite(root_weight):
            return graph

        precursor = Decomposition(precursor_formula, ionization, precursor_peak)
        staged = [precursor] + self._fragment_decompositions(peaks, precursor_peak, precursor_formula, ionization)
        edges = self._fragment_edges(staged, context, position, node_scores, pair_scores)
        staged, edges = self._add_isotope_decompositions(staged, edges, peaks, context, position,
                                                         node_scores, pair_scores)
        self._fill_graph(graph, staged, edges, root_weight)
        return graph

    def _fragment_decompositions(self, peaks: List[ProcessedPeak], precursor_peak: ProcessedPeak,
                                 precursor_formula: MolecularFormula,
                                 ionization: Ionization) -> List[Decomposition]:
        """Decompositions of all regular peaks, heaviest formula first."""
        deviation = self.config.ms2_deviation
        ionizations = self.config.ionizations_for(ionization)
        decompositions = []
        for peak in peaks:
            if peak.is_isotope or peak.index == precursor_peak.index:
                continue
            for ion_rank, ion in enumerate(ionizations):
                neutral_mass = ion.mz_to_neutral(peak.mz)
                tolerance = deviation.absolute_for(peak.mz) * abs(ion.charge)
                if neutral_mass - tolerance >= precursor_formula.mass:
                    continue
                for formula in decompose_subformulas(precursor_formula, neutral_mass, tolerance):
                    if formula == precursor_formula or formula.rdbe() < self.config.min_rdbe:
                        continue
                    decompositions.append((ion_rank, Decomposition(formula, ion, peak)))
        # descending formula mass keeps every loss pointing forward
        decompositions.sort(key=lambda x: (-x[1].formula.mass, -x[1].peak.mz, str(x[1].formula), x[0]))
        return [d for _, d in decompositions]

    def _loss_weight(self, loss: MolecularFormula, source: Decomposition, target: Decomposition,
                     context: ScoringContext, position: Dict[int, int],
                     node_scores: np.ndarray, pair_scores: np.ndarray) -> float:
        weight = (pair_scores[position[source.color], position[target.color]]
                  + self.schema.loss_score(loss, source, target, context)
                  + node_scores[position[target.color]])
        return float(weight) if math.isfinite(weight) else -math.inf

    def _fragment_edges(self, staged: List[Decomposition], context: ScoringContext,
                        position: Dict[int, int], node_scores: np.ndarray,
                        pair_scores: np.ndarray) -> List[Tuple[int, int, MolecularFormula, float]]:
        """Losses between all pairs of regular decompositions, as (source, target, loss, weight)."""
        edges = []
        for j in range(1, len(staged)):
            v = staged[j]
            for i in range(j):
                u = staged[i]
                if u.color == v.color or not v.formula.mass < u.formula.mass:
                    continue
                if not u.formula.is_subtractable(v.formula):
                    continue
                loss = u.formula - v.formula
                weight = self._loss_weight(loss, u, v, context, position, node_scores, pair_scores)
                if weight != -math.inf:
                    edges.append((i, j, loss, weight))
        return edges

    def _add_isotope_decompositions(self, staged, edges, peaks, context, position, node_scores, pair_scores):
        """Append isotope decompositions, each hanging off its predecessor in the isotope series."""
        isotope_deviation = self.config.isotope_deviation
        isotope_peaks = sorted((p for p in peaks if p.is_isotope), key=lambda p: (p.isotope_index, p.index))
        staged = list(staged)
        edges = list(edges)
        for peak in isotope_peaks:
            if peak.isotope_index > self.config.max_isotope_peaks:
                continue
            predecessor = self._isotope_predecessor(peaks, peak)
            if predecessor is None:
                continue
            for i in range(len(staged)):
                base = staged[i]
                if base.color != predecessor.index:
                    continue
                mono_formula = base.formula if base.isotope is None else base.isotope.formula
                expected = (base.ionization.neutral_to_mz(mono_formula.mass)
                            + peak.isotope_index * ISOTOPE_MASS_DIFFERENCE / abs(base.ionization.charge))
                if not isotope_deviation.in_error_window(expected, peak.mz):
                    continue
                marker = IsotopeMarker(peak.isotope_of, peak.isotope_index, mono_formula)
                iso = Decomposition(MolecularFormula.empty(), base.ionization, peak, marker)
                loss = MolecularFormula.empty()
                weight = self._loss_weight(loss, base, iso, context, position, node_scores, pair_scores)
                if weight == -math.inf:
                    continue
                staged.append(iso)
                edges.append((i, len(staged) - 1, loss, weight))
        return staged, edges

    @staticmethod
    def _isotope_predecessor(peaks: List[ProcessedPeak], peak: ProcessedPeak) -> Optional[ProcessedPeak]:
        if peak.isotope_index == 1:
            return next((p for p in peaks if p.index == peak.isotope_of), None)
        candidates = [p for p in peaks
                      if p.isotope_of == peak.isotope_of and p.isotope_index == peak.isotope_index - 1]
        return min(candidates, key=lambda p: p.index, default=None)

    @staticmethod
    def _fill_graph(graph: FragmentationGraph, staged: List[Decomposition],
                    edges: List[Tuple[int, int, MolecularFormula, float]], root_weight: float) -> None:
        """Add every staged decomposition reachable from the precursor, then their losses."""
        incoming: Dict[int, List[int]] = {}
        for k, (i, j, _, _) in enumerate(edges):
            incoming.setdefault(j, []).append(k)

        reachable = [False] * len(staged)
        reachable[0] = True
        for j in range(1, len(staged)):
            reachable[j] = any(reachable[edges[k][0]] for k in incoming.get(j, []))

        vertices = {}
        for j, d in enumerate(staged):
            if reachable[j]:
                vertices[j] = graph.add_fragment(d.formula, d.ionization, d.color, d.peak, d.isotope)

        graph.add_loss(graph.root, vertices[0], root_weight, formula=MolecularFormula.empty())
        for i, j, loss, weight in sorted(edges, key=lambda e: (e[1], e[0])):
            if reachable[i] and reachable[j]:
                graph.add_loss(vertices[i], vertices[j], weight, formula=loss)
