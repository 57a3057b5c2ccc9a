#!/usr/bin/env python3

"""
summarize.py

Summarize one or more bcftools stats outputs: merge them, log the headline
numbers of every file set and write the per-sample statistics as a table.
Depth and allele-frequency distributions can be written alongside.

Usage:
    vcfStatsUtils summary chr1.chk chr2.chk -o per_sample.tsv -d distributions/
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List

from vcfStatsUtils._version import __version__
from vcfStatsUtils.combined_report import combine_stats_files
from vcfStatsUtils.derived_stats import (
    bignum, concordance_by_af, counts_by_af, depth_distribution, headline_stats, summary_table
)
from vcfStatsUtils.exceptions import FormatError, MissingSampleError
from vcfStatsUtils.merge import setup_logging, validate_inputs


def add_arguments(parser: argparse.ArgumentParser) -> None:
    """Add command-line arguments for the 'summary' subcommand."""
    parser.add_argument('--version', action='version', version=f"vcfStatsUtils summary {__version__}")
    parser.add_argument('stats', nargs='+', type=Path,
                        help='bcftools stats output files')
    parser.add_argument('-o', '--output', type=Path,
                        help='Write per-sample statistics to this TSV file')
    parser.add_argument('-d', '--distributions', type=Path,
                        help='Also write depth and allele-frequency distributions as TSV files to this directory')
    parser.add_argument('--af-bin', type=float, default=0.01,
                        help='Allele-frequency bin width for the distribution tables (default: 0.01)')
    parser.add_argument('--quiet', action='store_true',
                        help='Suppress progress messages')
    parser.add_argument('-l', '--log', action='store_true',
                        help='Enable detailed logging')


def log_headlines(report) -> None:
    for set_id in report.file_ids():
        stats = headline_stats(report, set_id)
        logging.info(f"[{set_id}] {stats['files']}")
        logging.info(f"[{set_id}]   SNPs: {bignum(stats['snps'])}  ts/tv: {stats['tstv']}  "
                     f"indels: {bignum(stats['indels'])}  frameshift ratio: {stats['frameshift_ratio']}")
        if stats['inframe_ratio'] is not None:
            logging.info(f"[{set_id}]   in-frame/out-of-frame lengths: {stats['inframe_ratio']}")
        if stats['singletons']:
            s = stats['singletons']
            logging.info(f"[{set_id}]   singletons: {s['snps']}% of SNPs (ts/tv {s['tstv']}), "
                         f"{s['indels']}% of indels")
        if stats['median_depth'] is not None:
            logging.info(f"[{set_id}]   median genotype depth bin: {stats['median_depth']}")


def write_distributions(report, out_dir: Path, af_bin: float = 0.01) -> List[Path]:
    """
    Write the depth and allele-frequency distributions of every file set.

    Args:
        report: Combined report
        out_dir: Output directory, created if needed
        af_bin: Allele-frequency bin width

    Returns:
        Paths of the files written; empty tables are skipped
    """
    out_dir.mkdir(parents=True, exist_ok=True)
    written = []
    for set_id in report.file_ids():
        tables = {
            f"depth.{set_id}.tsv": depth_distribution(report, set_id),
            f"counts_by_af.{set_id}.tsv": counts_by_af(report, set_id, af_bin),
            f"concordance_by_af.{set_id}.tsv": concordance_by_af(report, set_id, bin_size=af_bin),
        }
        for name, table in tables.items():
            if table.empty:
                continue
            path = out_dir / name
            table.to_csv(path, sep='\t', index=False)
            written.append(path)
    logging.info(f"{len(written)} distribution table(s) written to {out_dir}")
    return written


def main(args) -> None:
    """Main function for the 'summary' subcommand."""
    setup_logging(args.log, args.quiet)
    validate_inputs(args.stats)

    try:
        report = combine_stats_files(args.stats)
    except (FormatError, MissingSampleError, OSError) as e:
        logging.error(f"Summary failed: {e}")
        sys.exit(1)

    log_headlines(report)

    if args.distributions:
        write_distributions(report, args.distributions, args.af_bin)

    table = summary_table(report)
    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        table.to_csv(args.output, sep='\t', index=False)
        logging.info(f"Per-sample statistics for {len(table)} samples written to {args.output}")
    elif not table.empty:
        sys.stdout.write(table.to_csv(sep='\t', index=False))


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description='Summarize bcftools stats output files.')
    add_arguments(parser)
    main(parser.parse_args())
