"""
Core fragmentation tree analysis interface.

Computes one fragmentation tree per candidate precursor formula and ranks
the candidates by tree score. Every candidate is an independent invocation
of builder and solver, so candidates can be dispatched in parallel.

Use it like this

from fragtree.analysis import FragmentationTreeAnalyzer

analyzer = FragmentationTreeAnalyzer(AnalysisConfig(ionization='[M+H]+'))
results = analyzer.compute_trees(peaks, precursor_mz=166.0863)
ranking = analyzer.rank(results)
analyzer.save_results(results, 'out')

"""

import os
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

import pandas as pd
from joblib import Parallel, delayed

from ..build.graph_builder import FragmentationGraphBuilder
from ..chem.decomposition import MassDecomposer
from ..chem.formula import MolecularFormula
from ..chem.ionization import Ionization
from ..config.analysis_config import AnalysisConfig
from ..model.peaks import ProcessedPeak, normalize_peaks
from ..model.tree import FragmentationTree
from ..scoring.schema import ScoringSchema
from ..scoring.scorers import default_scoring_schema
from ..solve.isotopes import solve


@dataclass
class TreeResult:
    """Fragmentation tree of one candidate formula."""
    formula: MolecularFormula
    ionization: Ionization
    tree: FragmentationTree
    graph_fragments: int
    graph_losses: int
    explained_intensity: float

    @property
    def score(self) -> float:
        return self.tree.score


@dataclass
class CandidateFailure:
    """A candidate whose computation raised; kept so other candidates are unaffected."""
    formula: MolecularFormula
    ionization: Ionization
    error: str


def enumerate_candidates(precursor_mz: float, ionization: Ionization,
                         config: AnalysisConfig) -> List[MolecularFormula]:
    """
    Candidate precursor formulas within the MS1 deviation.

    Only formulas of even-electron neutral molecules (integral, non-negative
    RDBE) are kept. Candidates are ordered by mass error and truncated to
    config.max_candidates.
    """
    neutral_mass = ionization.mz_to_neutral(precursor_mz)
    tolerance = config.ms1_deviation.absolute_for(precursor_mz) * abs(ionization.charge)
    decomposer = MassDecomposer({el: (0, n) for el, n in config.elements.items()})
    candidates = []
    for formula in decomposer.decompose(neutral_mass, tolerance):
        rdbe = formula.rdbe()
        if rdbe >= 0 and float(rdbe).is_integer():
            candidates.append(formula)
        if len(candidates) >= config.max_candidates:
            break
    return candidates


def compute_tree(peaks: Sequence[ProcessedPeak], formula: MolecularFormula, ionization: Ionization,
                 config: AnalysisConfig, schema: ScoringSchema) -> TreeResult:
    """Build the graph of one candidate and solve it."""
    builder = FragmentationGraphBuilder(config, schema)
    graph = builder.build(peaks, formula, ionization)
    tree = solve(graph)

    explained = set(tree.explained_peaks())
    total = sum(p.intensity for p in peaks)
    explained_intensity = sum(p.intensity for p in peaks if p.index in explained) / total if total > 0 else 0.0
    return TreeResult(formula, ionization, tree, len(graph) - 1, graph.number_of_edges(), explained_intensity)


def _compute_candidate(peaks, formula, ionization, config, schema):
    try:
        return compute_tree(peaks, formula, ionization, config, schema)
    except Exception as e:
        if not config.skip_failed:
            raise
        return CandidateFailure(formula, ionization, f"{type(e).__name__}: {e}")


class FragmentationTreeAnalyzer:
    """
    Main interface for computing and ranking fragmentation trees of a spectrum.

    Example:
        >>> analyzer = FragmentationTreeAnalyzer()
        >>> results = analyzer.compute_trees(peaks, precursor_mz=181.0707)
        >>> analyzer.rank(results).head()
    """

    def __init__(self, config: Optional[AnalysisConfig] = None, schema: Optional[ScoringSchema] = None,
                 verbose: Optional[bool] = None):
        """
        Initialize the analyzer.

        Args:
            config: Analysis configuration (uses defaults if None)
            schema: Scoring schema (default scorers configured from config if None)
            verbose: Whether to print progress messages (defaults to config.verbose)
        """
        self.config = config or AnalysisConfig()
        self.schema = schema or default_scoring_schema(self.config)
        self.schema.validate()
        self.verbose = self.config.verbose if verbose is None else verbose
        self.failures: List[CandidateFailure] = []

    def _ionization(self, ionization: Union[str, Ionization, None]) -> Ionization:
        if ionization is None:
            return self.config.precursor_ionization
        if isinstance(ionization, str):
            return Ionization.parse(ionization)
        return ionization

    def compute_tree(self, peaks: Iterable[ProcessedPeak], formula: Union[str, MolecularFormula],
                     ionization: Union[str, Ionization, None] = None) -> FragmentationTree:
        """Fragmentation tree of a single candidate formula."""
        if isinstance(formula, str):
            formula = MolecularFormula.parse(formula)
        result = compute_tree(normalize_peaks(peaks), formula, self._ionization(ionization),
                              self.config, self.schema)
        return result.tree

    def compute_trees(self, peaks: Iterable[ProcessedPeak], precursor_mz: Optional[float] = None,
                      candidates: Optional[Iterable[Union[str, MolecularFormula]]] = None,
                      ionization: Union[str, Ionization, None] = None) -> List[TreeResult]:
        """
        Compute fragmentation trees for many candidate formulas.

        Args:
            peaks: Processed peaks of the spectrum
            precursor_mz: Precursor m/z, used to enumerate candidates if none are given
            candidates: Candidate precursor formulas
            ionization: Precursor ionization (defaults to config.ionization)

        Returns:
            Results sorted by decreasing score. Failed candidates are collected
            in self.failures when config.skip_failed is set.
        """
        ionization = self._ionization(ionization)
        peaks = normalize_peaks(peaks)
        if candidates is None:
            if precursor_mz is None:
                raise ValueError("Either precursor_mz or candidates must be given")
            candidates = enumerate_candidates(precursor_mz, ionization, self.config)
        candidates = [MolecularFormula.parse(c) if isinstance(c, str) else c for c in candidates]

        if self.verbose:
            print(f"Computing fragmentation trees for {len(candidates)} candidate formulas...")

        if self.config.n_jobs == 1:
            outcomes = [_compute_candidate(peaks, f, ionization, self.config, self.schema) for f in candidates]
        else:
            outcomes = Parallel(n_jobs=self.config.n_jobs)(
                delayed(_compute_candidate)(peaks, f, ionization, self.config, self.schema)
                for f in candidates
            )

        results = [o for o in outcomes if isinstance(o, TreeResult)]
        failures = [o for o in outcomes if isinstance(o, CandidateFailure)]
        for failure in failures:
            warnings.warn(f"Skipping candidate {failure.formula}: {failure.error}")
        self.failures = failures

        results.sort(key=lambda r: (-r.score, str(r.formula)))
        if self.verbose:
            print(f"Computed {len(results)} trees ({len(failures)} failed)")
            if results:
                print(f"Best candidate: {results[0].formula} (score {results[0].score:.3f})")
        return results

    def rank(self, results: List[TreeResult]) -> pd.DataFrame:
        """Ranking table of the results, best candidate first."""
        rows = []
        for r in sorted(results, key=lambda r: (-r.score, str(r.formula))):
            rows.append({
                'formula': str(r.formula),
                'ionization': str(r.ionization),
                'score': r.score,
                'fragments': len(r.tree),
                'explained_peaks': len(r.tree.explained_peaks()),
                'explained_intensity': r.explained_intensity,
                'graph_fragments': r.graph_fragments,
                'graph_losses': r.graph_losses,
            })
        ranking = pd.DataFrame(rows, columns=['formula', 'ionization', 'score', 'fragments', 'explained_peaks',
                                              'explained_intensity', 'graph_fragments', 'graph_losses'])
        ranking.insert(0, 'rank', range(1, len(ranking) + 1))
        return ranking

    def save_results(self, results: List[TreeResult], output_dir: str, graphml: bool = False) -> None:
        """Write ranking.csv and one JSON (and optionally GraphML) file per tree."""
        output_path = Path(output_dir)
        os.makedirs(output_path, exist_ok=True)
        self.rank(results).to_csv(output_path / 'ranking.csv', index=False)
        for r in results:
            name = f"{r.formula}_{r.ionization}".replace('[', '').replace(']', '')
            with open(output_path / f"{name}.json", 'w') as f:
                f.write(r.tree.to_json(indent=2))
            if graphml:
                r.tree.write_graphml(str(output_path / f"{name}.graphml"))
        if self.verbose:
            print(f"Results saved to: {output_path}")
