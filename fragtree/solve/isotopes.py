"""
Critical Path Insertion with isotope peaks.

Isotope fragments are selected like any other fragment, but during tree
assembly they are set aside and re-attached afterwards as linear chains below
the nearest non-isotope ancestor. Within a chain isotope peaks are ordered by
descending color.
"""

from typing import Dict, List, Optional

from ..chem.formula import MolecularFormula
from ..errors import GraphInvariantError
from ..model.graph import FragmentationGraph, GraphFragment, Loss
from ..model.tree import FragmentationTree, TreeFragment
from .heuristic import CriticalPathInsertionHeuristic, IsotopeMarkerLookup


class CriticalPathInsertionWithIsotopePeaks(CriticalPathInsertionHeuristic):

    def __init__(self, graph: FragmentationGraph, isotope_marker: Optional[IsotopeMarkerLookup] = None):
        super().__init__(graph)
        self.isotope_marker = isotope_marker or graph.isotope_marker

    def defer(self, target: GraphFragment) -> bool:
        return self.isotope_marker(target) is not None

    def attach_deferred(self, tree: FragmentationTree, nodes: Dict[int, TreeFragment],
                        deferred: List[Loss], score: float) -> float:
        if not deferred:
            return score
        graph = self.graph
        groups: Dict[int, List[Loss]] = {}
        for loss in deferred:
            ancestor = self._non_isotope_ancestor(graph.fragment(loss.source))
            if ancestor.vertex_id not in nodes:
                raise GraphInvariantError(
                    f"Isotope loss {loss.loss_id} has no non-isotope ancestor in the tree")
            groups.setdefault(ancestor.vertex_id, []).append(loss)

        ionization = graph.root.ionization
        for ancestor_id in sorted(groups, key=lambda v: nodes[v].vertex_id):
            chain = sorted(groups[ancestor_id], key=lambda l: -graph.fragment(l.target).color)
            node = nodes[ancestor_id]
            for loss in chain:
                node = tree.add_fragment(node, MolecularFormula.empty(), ionization,
                                         graph.fragment(loss.target).color, loss.weight, is_isotope=True)
                score += loss.weight
        return score

    def _non_isotope_ancestor(self, fragment: GraphFragment) -> GraphFragment:
        while self.isotope_marker(fragment) is not None:
            loss = self.color2edge.get(fragment.color)
            if loss is not None and loss.target == fragment.vertex_id:
                fragment = self.graph.fragment(loss.source)
            else:
                fragment = self.graph.parent_of(fragment)
            if fragment is None:
                raise GraphInvariantError("Isotope fragment without parent")
        return fragment


def solve(graph: FragmentationGraph, isotope_marker: Optional[IsotopeMarkerLookup] = None) -> FragmentationTree:
    """Compute the fragmentation tree of a graph, attaching isotope peaks as chains."""
    return CriticalPathInsertionWithIsotopePeaks(graph, isotope_marker).solve()
