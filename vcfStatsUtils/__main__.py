# vcfStatsUtils/__main__.py

import argparse
from vcfStatsUtils._version import __version__

from vcfStatsUtils.merge import add_arguments as merge_add_args, main as merge_main
from vcfStatsUtils.summarize import add_arguments as summary_add_args, main as summary_main


def main():
    parser = argparse.ArgumentParser(prog="vcfStatsUtils")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command")

    # ---------------------
    # merge subcommand
    # ---------------------
    parser_merge = subparsers.add_parser("merge", help="Merge bcftools stats output files")
    merge_add_args(parser_merge)
    parser_merge.set_defaults(func=merge_main)

    # ---------------------
    # summary subcommand
    # ---------------------
    parser_summary = subparsers.add_parser("summary", help="Summarize bcftools stats output files")
    summary_add_args(parser_summary)
    parser_summary.set_defaults(func=summary_main)

    # Parse the command line and call the appropriate subcommand
    args = parser.parse_args()
    if hasattr(args, "func"):
        args.func(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
