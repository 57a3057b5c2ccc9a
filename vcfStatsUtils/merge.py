#!/usr/bin/env python3

"""
merge.py

Merge several bcftools stats outputs into one stats file.

Usage:
    vcfStatsUtils merge chr1.chk chr2.chk chr3.chk -o merged.chk
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List

from vcfStatsUtils._version import __version__
from vcfStatsUtils.combined_report import combine_stats_files, provenance_lines
from vcfStatsUtils.exceptions import FormatError, MissingSampleError
from vcfStatsUtils.report_writer import render_combined_report


def add_arguments(parser: argparse.ArgumentParser) -> None:
    """Add command-line arguments for the 'merge' subcommand."""
    parser.add_argument('--version', action='version', version=f"vcfStatsUtils merge {__version__}")
    parser.add_argument(
        'stats',
        nargs='+',
        type=Path,
        help='bcftools stats output files, merged in the given order'
    )
    parser.add_argument(
        '-o', '--output',
        type=Path,
        help='Output file (default: standard output)'
    )
    parser.add_argument(
        '--quiet',
        action='store_true',
        help='Suppress progress messages'
    )
    parser.add_argument(
        '-l', '--log',
        action='store_true',
        help='Enable detailed logging'
    )


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Configure logging; warnings raised while merging are logged too."""
    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO
    logging.basicConfig(level=level, format='%(asctime)s %(levelname)s %(message)s',
                        datefmt='%Y-%m-%d %H:%M:%S')
    logging.captureWarnings(True)


def validate_inputs(paths: List[Path], minimum: int = 1) -> None:
    """Exit with an error when too few or missing input files are given."""
    if len(paths) < minimum:
        logging.error("Nothing to merge, at least two stats files are required")
        sys.exit(1)
    missing = [str(path) for path in paths if not path.exists()]
    if missing:
        logging.error(f"Input file(s) not found: {', '.join(missing)}")
        sys.exit(1)


def command_line(name: str, paths: List[Path]) -> str:
    return ' '.join(['vcfStatsUtils', name] + [str(path) for path in paths])


def main(args) -> None:
    """Main function for the 'merge' subcommand."""
    setup_logging(args.log, args.quiet)
    validate_inputs(args.stats, minimum=2)

    try:
        report = combine_stats_files(args.stats)
    except (FormatError, MissingSampleError, OSError) as e:
        logging.error(f"Merge failed: {e}")
        sys.exit(1)

    for line in provenance_lines(report):
        logging.info(line)

    text = render_combined_report(report, command_line('merge', args.stats))
    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        with open(args.output, 'w') as handle:
            handle.write(text)
        logging.info(f"Merged stats written to {args.output}")
    else:
        sys.stdout.write(text)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description='Merge bcftools stats output files.')
    add_arguments(parser)
    main(parser.parse_args())
