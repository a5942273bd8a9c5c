"""
Fragmentation trees.

A fragmentation tree is the solver's output: a rooted arborescence in which
every fragment has exactly one parent. Fragments live in an arena and refer
to their parent and children by vertex id. Vertex ids follow insertion
order, so summing weights in vertex order reproduces the score exactly as
the solver accumulated it.

Use it like this

tree = solver.solve()
tree.score
for loss in tree.losses():
    print(loss.parent, loss.child, loss.weight)
tree.to_dataframe()
tree.write_graphml('tree.graphml')

"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

import json
import networkx as nx
import pandas as pd

from ..chem.formula import MolecularFormula
from ..chem.ionization import Ionization


@dataclass(eq=False)
class TreeFragment:
    """A tree vertex with exactly one incoming edge (none for the root)."""
    vertex_id: int
    formula: MolecularFormula
    ionization: Ionization
    peak_id: Optional[int]
    parent: Optional[int] = None
    children: List[int] = field(default_factory=list)
    incoming_weight: float = 0.0
    is_isotope: bool = False

    @property
    def is_root(self) -> bool:
        return self.parent is None


@dataclass(frozen=True)
class TreeLoss:
    parent: int
    child: int
    weight: float
    peak_id: Optional[int]
    formula: MolecularFormula


class FragmentationTree:
    """
    Rooted, colorful fragmentation tree.

    The root's incoming_weight is the score of the edge from the synthetic
    graph root, so `score` equals `edge_weight_sum()`.
    """

    def __init__(self, root_formula: MolecularFormula, ionization: Ionization,
                 root_peak_id: Optional[int] = None, root_weight: float = 0.0):
        self._fragments: List[TreeFragment] = [
            TreeFragment(0, root_formula, ionization, root_peak_id, incoming_weight=root_weight)]
        self.score = root_weight
        self._frozen = False

    @property
    def root(self) -> TreeFragment:
        return self._fragments[0]

    @property
    def root_formula(self) -> MolecularFormula:
        return self.root.formula

    @property
    def ionization(self) -> Ionization:
        return self.root.ionization

    @property
    def fragments(self) -> List[TreeFragment]:
        return list(self._fragments)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __len__(self) -> int:
        return len(self._fragments)

    def __iter__(self) -> Iterator[TreeFragment]:
        return iter(self._fragments)

    def fragment(self, vertex_id: int) -> TreeFragment:
        return self._fragments[vertex_id]

    def _check_mutable(self):
        if self._frozen:
            raise RuntimeError("Fragmentation trees are immutable once computed")

    def add_fragment(self, parent: TreeFragment, formula: MolecularFormula, ionization: Ionization,
                     peak_id: Optional[int], weight: float, is_isotope: bool = False) -> TreeFragment:
        """
        Attach a new fragment below parent.

        Raises:
            ValueError: if formula cannot be a child formula of the parent
        """
        self._check_mutable()
        if self._fragments[parent.vertex_id] is not parent:
            raise ValueError("parent does not belong to this tree")
        if not parent.formula.is_subtractable(formula):
            raise ValueError(f"{formula} cannot be child formula of {parent.formula}")
        child = TreeFragment(len(self._fragments), formula, ionization, peak_id,
                             parent=parent.vertex_id, incoming_weight=weight, is_isotope=is_isotope)
        self._fragments.append(child)
        parent.children.append(child.vertex_id)
        return child

    def set_score(self, score: float) -> None:
        self._check_mutable()
        self.score = score

    def freeze(self) -> 'FragmentationTree':
        self._frozen = True
        return self

    def parent_of(self, fragment: TreeFragment) -> Optional[TreeFragment]:
        return None if fragment.parent is None else self._fragments[fragment.parent]

    def children_of(self, fragment: TreeFragment) -> List[TreeFragment]:
        return [self._fragments[i] for i in fragment.children]

    def losses(self) -> List[TreeLoss]:
        result = []
        for f in self._fragments[1:]:
            parent = self._fragments[f.parent]
            loss_formula = MolecularFormula.empty() if f.is_isotope else parent.formula - f.formula
            result.append(TreeLoss(parent.vertex_id, f.vertex_id, f.incoming_weight, f.peak_id, loss_formula))
        return result

    def number_of_edges(self) -> int:
        return len(self._fragments) - 1

    def path_to_root(self, fragment: TreeFragment) -> List[TreeFragment]:
        path = [fragment]
        while path[-1].parent is not None:
            path.append(self._fragments[path[-1].parent])
        return path

    def pre_order(self) -> Iterator[TreeFragment]:
        stack = [self.root]
        while stack:
            f = stack.pop()
            yield f
            stack.extend(self._fragments[i] for i in reversed(f.children))

    def leaves(self) -> List[TreeFragment]:
        return [f for f in self._fragments if not f.children]

    def is_colorful(self) -> bool:
        """True if no peak id occurs twice on any root-to-leaf path."""
        for leaf in self.leaves():
            peak_ids = [f.peak_id for f in self.path_to_root(leaf) if f.peak_id is not None]
            if len(peak_ids) != len(set(peak_ids)):
                return False
        return True

    def edge_weight_sum(self) -> float:
        total = 0.0
        for f in self._fragments:
            total += f.incoming_weight
        return total

    def explained_peaks(self) -> List[int]:
        return sorted({f.peak_id for f in self._fragments if f.peak_id is not None})

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            'root': str(self.root_formula),
            'ionization': str(self.ionization),
            'score': self.score,
            'fragments': [
                {
                    'id': f.vertex_id,
                    'formula': str(f.formula),
                    'ionization': str(f.ionization),
                    'peak_id': f.peak_id,
                    'parent': f.parent,
                    'weight': f.incoming_weight,
                    'isotope': f.is_isotope,
                }
                for f in self._fragments
            ],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FragmentationTree':
        records = sorted(data['fragments'], key=lambda r: r['id'])
        root = records[0]
        if root['parent'] is not None:
            raise ValueError("The first fragment must be the root")
        tree = cls(MolecularFormula.parse(root['formula']), Ionization.parse(root['ionization']),
                   root_peak_id=root['peak_id'], root_weight=root['weight'])
        for r in records[1:]:
            tree.add_fragment(tree.fragment(r['parent']), MolecularFormula.parse(r['formula']),
                              Ionization.parse(r['ionization']), r['peak_id'], r['weight'],
                              is_isotope=r['isotope'])
        tree.set_score(data['score'])
        return tree.freeze()

    def to_json(self, **kwargs) -> str:
        return json.dumps(self.to_dict(), **kwargs)

    @classmethod
    def from_json(cls, text: str) -> 'FragmentationTree':
        return cls.from_dict(json.loads(text))

    def to_dataframe(self) -> pd.DataFrame:
        """One row per edge, including the root's incoming edge."""
        rows = [{
            'parent': None,
            'child': 0,
            'parent_formula': None,
            'child_formula': str(self.root_formula),
            'loss': None,
            'peak_id': self.root.peak_id,
            'weight': self.root.incoming_weight,
            'isotope': False,
        }]
        for loss in self.losses():
            rows.append({
                'parent': loss.parent,
                'child': loss.child,
                'parent_formula': str(self._fragments[loss.parent].formula),
                'child_formula': str(self._fragments[loss.child].formula),
                'loss': str(loss.formula),
                'peak_id': loss.peak_id,
                'weight': loss.weight,
                'isotope': self._fragments[loss.child].is_isotope,
            })
        return pd.DataFrame(rows)

    def to_networkx(self) -> nx.DiGraph:
        """Export as a NetworkX DiGraph; attributes are GraphML compatible."""
        G = nx.DiGraph(root=str(self.root_formula), ionization=str(self.ionization), score=self.score)
        for f in self._fragments:
            G.add_node(f.vertex_id, formula=str(f.formula), ionization=str(f.ionization),
                       peak_id=-1 if f.peak_id is None else f.peak_id,
                       weight=f.incoming_weight, isotope=f.is_isotope)
        for loss in self.losses():
            G.add_edge(loss.parent, loss.child, weight=loss.weight, loss=str(loss.formula))
        return G

    def write_graphml(self, filepath: str) -> None:
        nx.write_graphml(self.to_networkx(), filepath)
