"""
Critical Path Insertion heuristic for the maximum colorful subtree problem.

Starting from the synthetic root, the heuristic repeatedly inserts the
highest-scoring path that leaves the partial tree and visits only peaks
(colors) not explained yet. Paths are found with a dynamic program over the
topologically ordered vertex arena. Each loss is relaxed once per iteration;
checking that its target color is not already on the best path to its source
walks that path, so an iteration costs O(losses * path length). Only the
first path may start at the synthetic root. A committed path is never
revisited, and the search stops as soon as no path adds a positive score.

Ties are broken by enumeration order: per vertex the first incoming loss of
maximal score wins, and among end vertices of equal score the one with the
lowest vertex id wins.

You can use it like

from .heuristic import CriticalPathInsertionHeuristic

tree = CriticalPathInsertionHeuristic(graph).solve()

"""

from typing import Callable, Dict, List, Optional, Set, Tuple

from ..errors import GraphInvariantError
from ..model.graph import FragmentationGraph, GraphFragment, Loss
from ..model.peaks import IsotopeMarker
from ..model.tree import FragmentationTree, TreeFragment

IsotopeMarkerLookup = Callable[[GraphFragment], Optional[IsotopeMarker]]


class CriticalPathInsertionHeuristic:
    """
    Greedy approximation of the maximum colorful subtree of a fragmentation graph.

    All state is local to one solver instance; the graph is only read.
    """

    def __init__(self, graph: FragmentationGraph):
        self.graph = graph
        self.used_colors: Set[int] = set()
        self.in_tree: Set[int] = set()
        self.color2edge: Dict[int, Loss] = {}
        self.committed_scores: List[float] = []

    @property
    def iterations(self) -> int:
        return len(self.committed_scores)

    @property
    def committed_score(self) -> float:
        total = 0.0
        for gain in self.committed_scores:
            total += gain
        return total

    def solve(self) -> FragmentationTree:
        """
        Compute the tree.

        Raises:
            GraphInvariantError: if the graph violates its structural invariants
        """
        self.graph.validate()
        self.used_colors = set()
        self.in_tree = {self.graph.root.vertex_id}
        self.color2edge = {}
        self.committed_scores = []

        while True:
            path, gain = self.find_critical_path()
            if not path or gain <= 0:
                break
            self.insert_path(path)
            self.committed_scores.append(gain)

        return self.build_solution().freeze()

    def find_critical_path(self) -> Tuple[List[Loss], float]:
        """Best path from the partial tree over unused colors, and its score."""
        graph = self.graph
        best_score: List[Optional[float]] = [None] * len(graph)
        best_edge: List[Optional[Loss]] = [None] * len(graph)

        for v in graph:
            if v.vertex_id in self.in_tree or v.color in self.used_colors:
                continue
            for loss_id in v.incoming:
                loss = graph.loss(loss_id)
                u = loss.source
                if u in self.in_tree:
                    score = loss.weight
                elif best_score[u] is None or self._path_has_color(best_edge, u, v.color):
                    continue
                else:
                    score = best_score[u] + loss.weight
                if best_score[v.vertex_id] is None or score > best_score[v.vertex_id]:
                    best_score[v.vertex_id] = score
                    best_edge[v.vertex_id] = loss

        end, max_score = None, None
        for vertex_id, score in enumerate(best_score):
            if score is not None and (max_score is None or score > max_score):
                end, max_score = vertex_id, score
        if end is None:
            return [], 0.0

        path = []
        while end not in self.in_tree:
            loss = best_edge[end]
            path.append(loss)
            end = loss.source
        path.reverse()
        return path, max_score

    def _path_has_color(self, best_edge: List[Optional[Loss]], vertex_id: int, color: int) -> bool:
        while vertex_id not in self.in_tree:
            if self.graph.fragment(vertex_id).color == color:
                return True
            vertex_id = best_edge[vertex_id].source
        return False

    def insert_path(self, path: List[Loss]) -> None:
        root_id = self.graph.root.vertex_id
        for loss in path:
            target = self.graph.fragment(loss.target)
            self.in_tree.add(target.vertex_id)
            self.used_colors.add(target.color)
            self.color2edge[target.color] = loss
        if path and path[0].source == root_id:
            # the tree has a single top fragment; later paths start below it
            self.in_tree.discard(root_id)

    def build_solution(self) -> FragmentationTree:
        """Assemble the committed losses into a tree."""
        graph = self.graph
        if not self.color2edge:
            return self._single_fragment_tree()

        selected = sorted(self.color2edge.values(), key=lambda l: graph.fragment(l.target).color)
        for i, loss in enumerate(selected):
            if loss.source == graph.root.vertex_id:
                selected.insert(0, selected.pop(i))
                break
        root_loss = selected[0]
        if root_loss.source != graph.root.vertex_id:
            raise GraphInvariantError("No loss from the graph root was selected")

        top = graph.fragment(root_loss.target)
        tree = FragmentationTree(top.formula, top.ionization, top.color, root_loss.weight)
        nodes: Dict[int, TreeFragment] = {top.vertex_id: tree.root}
        score = root_loss.weight
        deferred: List[Loss] = []

        remaining = selected[1:]
        while remaining:
            unattached = []
            for loss in remaining:
                target = graph.fragment(loss.target)
                if self.defer(target):
                    deferred.append(loss)
                    continue
                parent = nodes.get(loss.source)
                if parent is None:
                    unattached.append(loss)
                    continue
                nodes[target.vertex_id] = tree.add_fragment(
                    parent, target.formula, target.ionization, target.color, loss.weight)
                score += loss.weight
            if len(unattached) == len(remaining):
                raise GraphInvariantError(
                    f"Losses {[l.loss_id for l in unattached]} have no source fragment in the tree")
            remaining = unattached

        score = self.attach_deferred(tree, nodes, deferred, score)
        tree.set_score(score)
        return tree

    def defer(self, target: GraphFragment) -> bool:
        """Whether a selected loss ending at target is attached after the main tree."""
        return False

    def attach_deferred(self, tree: FragmentationTree, nodes: Dict[int, TreeFragment],
                        deferred: List[Loss], score: float) -> float:
        return score

    def _single_fragment_tree(self) -> FragmentationTree:
        """Fallback when nothing was inserted: the best child of the root alone."""
        graph = self.graph
        best = None
        for loss in graph.outgoing_losses(graph.root):
            if best is None or loss.weight > best.weight:
                best = loss
        if best is None:
            return FragmentationTree(graph.precursor_formula, graph.ionization)
        fragment = graph.fragment(best.target)
        return FragmentationTree(fragment.formula, fragment.ionization, fragment.color, best.weight)
