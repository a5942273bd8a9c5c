"""
Fragmentation graphs.

A fragmentation graph is a DAG over candidate fragment formulas. Vertex 0 is
a synthetic root standing for the precursor ion; all other vertices explain
one peak each (their color). Several vertices may share a color when they
are alternative explanations of the same peak.

Vertices are kept in a topological arena: every loss points from a lower to
a higher vertex id. Losses reference vertices by id only.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

import math
import networkx as nx

from ..chem.formula import MolecularFormula
from ..chem.ionization import Ionization
from ..errors import GraphInvariantError
from .peaks import IsotopeMarker, ProcessedPeak

ROOT_COLOR = -1


@dataclass(eq=False)
class GraphFragment:
    """A vertex of the fragmentation graph; may have several candidate incoming losses."""
    vertex_id: int
    formula: MolecularFormula
    ionization: Ionization
    color: int
    peak: Optional[ProcessedPeak] = None
    incoming: List[int] = field(default_factory=list)
    outgoing: List[int] = field(default_factory=list)

    @property
    def is_root(self) -> bool:
        return self.vertex_id == 0

    @property
    def ion_mz(self) -> float:
        return self.ionization.neutral_to_mz(self.formula.mass)

    def __repr__(self):
        return f"GraphFragment({self.vertex_id}, {self.formula}, {self.ionization}, color={self.color})"


@dataclass(frozen=True)
class Decomposition:
    """A candidate explanation of one peak, before it becomes a graph vertex."""
    formula: MolecularFormula
    ionization: Ionization
    peak: ProcessedPeak
    isotope: Optional[IsotopeMarker] = None

    @property
    def color(self) -> int:
        return self.peak.index

    @property
    def ion_mz(self) -> float:
        return self.ionization.neutral_to_mz(self.formula.mass)


@dataclass(eq=False)
class Loss:
    """A directed edge source -> target; weight is its additive score."""
    loss_id: int
    source: int
    target: int
    formula: MolecularFormula
    weight: float


class FragmentationGraph:
    """Weighted DAG of candidate fragments for one candidate precursor formula."""

    def __init__(self, precursor_formula: MolecularFormula, ionization: Ionization,
                 peaks: Optional[List[ProcessedPeak]] = None):
        self.precursor_formula = precursor_formula
        self.ionization = ionization
        self.peaks = list(peaks or [])
        self._fragments: List[GraphFragment] = [
            GraphFragment(0, MolecularFormula.empty(), ionization, ROOT_COLOR)]
        self._losses: List[Loss] = []
        self._by_color: Dict[int, List[int]] = {}
        self._isotope_markers: Dict[int, IsotopeMarker] = {}

    @property
    def root(self) -> GraphFragment:
        return self._fragments[0]

    @property
    def fragments(self) -> List[GraphFragment]:
        return list(self._fragments)

    @property
    def losses(self) -> List[Loss]:
        return list(self._losses)

    def __len__(self) -> int:
        return len(self._fragments)

    def __iter__(self) -> Iterator[GraphFragment]:
        return iter(self._fragments)

    def number_of_edges(self) -> int:
        return len(self._losses)

    def is_empty(self) -> bool:
        return not self.root.outgoing

    def add_fragment(self, formula: MolecularFormula, ionization: Ionization, color: int,
                     peak: Optional[ProcessedPeak] = None,
                     isotope: Optional[IsotopeMarker] = None) -> GraphFragment:
        if color == ROOT_COLOR:
            raise GraphInvariantError("The root color is reserved for the synthetic root")
        fragment = GraphFragment(len(self._fragments), formula, ionization, color, peak)
        self._fragments.append(fragment)
        self._by_color.setdefault(color, []).append(fragment.vertex_id)
        if isotope is not None:
            self._isotope_markers[fragment.vertex_id] = isotope
        return fragment

    def add_loss(self, source: GraphFragment, target: GraphFragment, weight: float,
                 formula: Optional[MolecularFormula] = None) -> Loss:
        if not (self.is_own(source) and self.is_own(target)):
            raise GraphInvariantError(f"Loss {source} -> {target} references a foreign fragment")
        if source.vertex_id >= target.vertex_id:
            raise GraphInvariantError(
                f"Loss {source.vertex_id} -> {target.vertex_id} violates the topological vertex order")
        if formula is None:
            formula = source.formula - target.formula
        loss = Loss(len(self._losses), source.vertex_id, target.vertex_id, formula, weight)
        self._losses.append(loss)
        source.outgoing.append(loss.loss_id)
        target.incoming.append(loss.loss_id)
        return loss

    def fragment(self, vertex_id: int) -> GraphFragment:
        return self._fragments[vertex_id]

    def loss(self, loss_id: int) -> Loss:
        return self._losses[loss_id]

    def is_own(self, fragment: GraphFragment) -> bool:
        return (0 <= fragment.vertex_id < len(self._fragments)
                and self._fragments[fragment.vertex_id] is fragment)

    def incoming_losses(self, fragment: GraphFragment) -> List[Loss]:
        return [self._losses[i] for i in fragment.incoming]

    def outgoing_losses(self, fragment: GraphFragment) -> List[Loss]:
        return [self._losses[i] for i in fragment.outgoing]

    def children(self, fragment: GraphFragment) -> List[GraphFragment]:
        return [self._fragments[self._losses[i].target] for i in fragment.outgoing]

    def parent_of(self, fragment: GraphFragment) -> Optional[GraphFragment]:
        """Source of the first incoming loss."""
        if not fragment.incoming:
            return None
        return self._fragments[self._losses[fragment.incoming[0]].source]

    def best_incoming_loss(self, fragment: GraphFragment) -> Optional[Loss]:
        """Highest-weight incoming loss; the earliest one wins ties."""
        best = None
        for loss in self.incoming_losses(fragment):
            if best is None or loss.weight > best.weight:
                best = loss
        return best

    def fragments_with_color(self, color: int) -> List[GraphFragment]:
        return [self._fragments[i] for i in self._by_color.get(color, [])]

    def colors(self) -> List[int]:
        return sorted(self._by_color)

    def number_of_colors(self) -> int:
        return len(self._by_color)

    def isotope_marker(self, fragment: GraphFragment) -> Optional[IsotopeMarker]:
        return self._isotope_markers.get(fragment.vertex_id)

    def validate(self) -> None:
        """
        Check the structural invariants of the graph.

        Raises:
            GraphInvariantError: if any invariant is violated
        """
        if self.root.incoming:
            raise GraphInvariantError("The root must not have incoming losses")
        for loss in self._losses:
            if not (0 <= loss.source < len(self._fragments) and 0 <= loss.target < len(self._fragments)):
                raise GraphInvariantError(f"Loss {loss.loss_id} references a foreign fragment")
            if loss.source >= loss.target:
                raise GraphInvariantError(f"Loss {loss.loss_id} violates the topological vertex order")
            if not math.isfinite(loss.weight):
                raise GraphInvariantError(f"Loss {loss.loss_id} has a non-finite weight")
            if loss.source == 0:
                continue
            u, v = self._fragments[loss.source], self._fragments[loss.target]
            if u.color == v.color:
                raise GraphInvariantError(f"Loss {loss.loss_id} connects two fragments of color {u.color}")
            if loss.target in self._isotope_markers:
                # isotope fragments carry an empty formula
                if not v.formula.is_empty():
                    raise GraphInvariantError(f"Isotope fragment {v.vertex_id} must have an empty formula")
                continue
            if not u.formula.is_subtractable(v.formula) or not v.formula.mass < u.formula.mass:
                raise GraphInvariantError(f"{v.formula} is not a proper sub-formula of {u.formula}")
        for fragment in self._fragments[1:]:
            if not fragment.incoming:
                raise GraphInvariantError(f"Fragment {fragment.vertex_id} has no incoming loss")

    def to_networkx(self) -> nx.DiGraph:
        """Export as a NetworkX DiGraph; attributes are GraphML compatible."""
        G = nx.DiGraph()
        for f in self._fragments:
            G.add_node(f.vertex_id, formula=str(f.formula), ionization=str(f.ionization),
                       color=f.color, isotope=self.isotope_marker(f) is not None)
        for loss in self._losses:
            G.add_edge(loss.source, loss.target, weight=loss.weight, loss=str(loss.formula))
        return G
