"""
vcfStatsUtils: merge and summarize bcftools stats reports.
"""

from vcfStatsUtils._version import __version__
