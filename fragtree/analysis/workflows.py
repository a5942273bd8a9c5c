"""
Command line workflow for fragmentation tree computation.

Examples:
    # Enumerate candidates from the precursor mass
    python -m fragtree.analysis.workflows spectrum.csv --precursor-mz 166.0863 -o results

    # Score given candidates only
    python -m fragtree.analysis.workflows spectrum.csv --precursor-mz 166.0863 --formula C9H11NO2 --formula C8H9N3O

The peak table needs 'mz' and 'intensity' columns; optional columns are
'index', 'isotope_of' and 'isotope_index'.
"""

import argparse
from dataclasses import replace

import pandas as pd

from ..config.analysis_config import AnalysisConfig
from ..model.peaks import peaks_from_dataframe
from .core import FragmentationTreeAnalyzer


def setup_argparse():
    """Set up command-line argument parsing.

    Returns:
        Configured ArgumentParser object
    """
    parser = argparse.ArgumentParser(
        prog='fragtree',
        description='Compute and rank fragmentation trees of an MS/MS spectrum.',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument('peaks', type=str, help='CSV file with the processed peak list')
    parser.add_argument('--precursor-mz', type=float, required=True, help='Precursor m/z')
    parser.add_argument('--formula', action='append', default=None,
                        help='Candidate precursor formula (repeatable); enumerated from the precursor m/z if omitted')
    parser.add_argument('--ionization', type=str, default=None, help='Precursor ionization, e.g. [M+H]+')
    parser.add_argument('--config', type=str, default=None, help='YAML parameter file')
    parser.add_argument('--n-jobs', type=int, default=None, help='Number of parallel jobs')
    parser.add_argument('--output', '-o', type=str, default=None, help='Output directory')
    parser.add_argument('--graphml', action='store_true', help='Also write trees as GraphML')
    parser.add_argument('--top', type=int, default=10, help='Number of ranked candidates to print')
    parser.add_argument('--quiet', action='store_true', help='Suppress progress messages')
    return parser


def main(args):
    config = AnalysisConfig.from_file(args.config)
    overrides = {'verbose': not args.quiet}
    if args.ionization:
        overrides['ionization'] = args.ionization
    if args.n_jobs is not None:
        overrides['n_jobs'] = args.n_jobs
    config = replace(config, **overrides)

    peaks = peaks_from_dataframe(pd.read_csv(args.peaks))
    analyzer = FragmentationTreeAnalyzer(config)
    results = analyzer.compute_trees(peaks, precursor_mz=args.precursor_mz, candidates=args.formula)

    ranking = analyzer.rank(results)
    print(ranking.head(args.top).to_string(index=False))

    output_dir = args.output or config.output_dir
    if output_dir:
        analyzer.save_results(results, output_dir, graphml=args.graphml)
    return ranking


if __name__ == "__main__":
    parser = setup_argparse()
    main(parser.parse_args())
