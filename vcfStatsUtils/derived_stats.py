#!/usr/bin/env python3

"""
derived_stats.py

Display metrics derived from a combined report: per-sample ratios,
singleton rates, the depth distribution and its percentiles, and
allele-frequency distributions coarsened into fixed-width bins.
None of these feed back into the merge.
"""

import re
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from vcfStatsUtils.combined_report import CombinedReport
from vcfStatsUtils.histogram import percentile, rebin_values
from vcfStatsUtils.sections import (
    AF_INDELS, AF_SNPS, DP_BIN, DP_GENOTYPES, DP_GENOTYPE_PCT, FS_RATIO,
    GC_AF_AA_MATCH, GC_AF_AA_MISMATCH, GC_AF_GENOTYPES, GC_AF_R2,
    GC_AF_RA_MATCH, GC_AF_RA_MISMATCH, GC_AF_RR_MATCH, GC_AF_RR_MISMATCH,
    PSC_AVG_DEPTH, PSC_HETS, PSC_INDELS, PSC_NONREF_HOM, PSC_SINGLETONS, PSC_TS, PSC_TV,
    SIS_INDELS, SIS_REPEAT_CONSISTENT, SIS_REPEAT_INCONSISTENT, SIS_SNPS, SIS_TS, SIS_TV,
    TSTV_RATIO, Section
)
from vcfStatsUtils.stats_parser import as_number

_PLAIN_BIN = re.compile(r'^\d+$')

PER_SAMPLE_COLUMNS = ['sample_id', 'ts/tv', 'het/hom', 'nSNPs', 'nIndels',
                      'average_depth', 'nSingletons', 'sample']


def bignum(num: Any) -> str:
    """Format an integer with thousands separators; other values are returned as text."""
    if num is None:
        return ''
    text = str(num)
    if not text.isdigit():
        return text
    return f"{int(text):,}"


def per_sample_stats(report: CombinedReport, set_id: str) -> pd.DataFrame:
    """
    Per-sample ts/tv, het/hom and counts from the PSC section.

    Args:
        report: Combined report
        set_id: File-set id

    Returns:
        One row per sample, in report order
    """
    rows = []
    for i, rec in enumerate(report.get_values(Section.PSC.value, set_id)):
        ts, tv = as_number(rec[PSC_TS]), as_number(rec[PSC_TV])
        hets, hom = as_number(rec[PSC_HETS]), as_number(rec[PSC_NONREF_HOM])
        rows.append({
            'sample_id': i,
            'ts/tv': ts / tv if tv else 0.0,
            'het/hom': hets / hom if hom else 0.0,
            'nSNPs': ts + tv,
            'nIndels': as_number(rec[PSC_INDELS]),
            'average_depth': as_number(rec[PSC_AVG_DEPTH]),
            'nSingletons': as_number(rec[PSC_SINGLETONS]) if len(rec) > PSC_SINGLETONS else 0,
            'sample': rec[0],
        })
    return pd.DataFrame(rows, columns=PER_SAMPLE_COLUMNS)


def singleton_summary(report: CombinedReport, set_id: str) -> Optional[Dict[str, float]]:
    """
    Singleton rates of one set.

    Returns:
        Percentage of SNPs and indels which are singletons, the singleton
        ts/tv and the repeat-consistent fraction, or None without SiS data
    """
    si_vals = report.get_values(Section.SiS.value, set_id)
    if not si_vals:
        return None
    si = si_vals[0]
    consistent = as_number(si[SIS_REPEAT_CONSISTENT])
    inconsistent = as_number(si[SIS_REPEAT_INCONSISTENT])
    ts, tv = as_number(si[SIS_TS]), as_number(si[SIS_TV])

    af_vals = report.get_values(Section.AF.value, set_id)
    nsnps = sum(as_number(rec[AF_SNPS]) for rec in af_vals)
    nindels = sum(as_number(rec[AF_INDELS]) for rec in af_vals)
    return {
        'snps': round(as_number(si[SIS_SNPS]) * 100. / nsnps, 1) if nsnps else 0.0,
        'indels': round(as_number(si[SIS_INDELS]) * 100. / nindels, 1) if nindels else 0.0,
        'tstv': round(ts / tv, 2) if tv else 0.0,
        'irc': round(consistent / (consistent + inconsistent), 3) if inconsistent else 0.0,
    }


def inframe_ratio(report: CombinedReport, set_id: str) -> Optional[float]:
    """
    Ratio of indel lengths divisible by three to the others.

    Counts distinct lengths in the IDD section, not indels; None when
    every length is a multiple of three.
    """
    lengths = [int(as_number(rec[0])) for rec in report.get_values(Section.IDD.value, set_id)]
    n3 = sum(1 for length in lengths if length % 3 == 0)
    nn3 = len(lengths) - n3
    if not nn3:
        return None
    return round(n3 / nn3, 2)


def depth_distribution(report: CombinedReport, set_id: str) -> pd.DataFrame:
    """
    Fraction of genotypes per depth with its running total.

    Open-ended bins such as '>500' are skipped and the table stops once
    the cumulative fraction passes 99%.
    """
    rows = []
    total = 0.0
    for rec in report.get_values(Section.DP.value, set_id):
        if total > 99.:
            break
        if not _PLAIN_BIN.match(str(rec[DP_BIN])):
            continue
        fraction = float(as_number(rec[DP_GENOTYPE_PCT]))
        total += fraction
        rows.append({'depth': int(rec[DP_BIN]), 'cumulative': total, 'genotypes': fraction})
    return pd.DataFrame(rows, columns=['depth', 'cumulative', 'genotypes'])


def depth_percentiles(report: CombinedReport, set_id: str,
                      percentiles: Iterable[float] = (25, 50, 75)) -> Dict[float, str]:
    """
    Depth bins at the given percentiles of the genotype depth distribution.

    Returns:
        Mapping from percentile to the label of the bin holding it
    """
    vals = report.get_values(Section.DP.value, set_id)
    if not vals:
        return {}
    counts = [rec[DP_GENOTYPES] for rec in vals]
    return {p: str(vals[percentile(p, counts)][DP_BIN]) for p in percentiles}


def counts_by_af(report: CombinedReport, set_id: str, bin_size: float = 0.01) -> pd.DataFrame:
    """Number of SNPs and indels per allele-frequency bin, skipping empty bins."""
    rebinned = rebin_values(report.get_values(Section.AF.value, set_id), bin_size, 0)
    rows = [
        {'af': float(as_number(rec[0])), 'snps': rec[AF_SNPS], 'indels': rec[AF_INDELS]}
        for rec in rebinned if rec[AF_SNPS] or rec[AF_INDELS]
    ]
    return pd.DataFrame(rows, columns=['af', 'snps', 'indels'])


def _concordance(matches: float, mismatches: float) -> float:
    return matches / (matches + mismatches) if matches + mismatches else 1.0


def concordance_by_af(report: CombinedReport, set_id: str = '2',
                      section: str = Section.GCsAF.value, bin_size: float = 0.01) -> pd.DataFrame:
    """
    Genotype concordance and dosage r-squared per allele-frequency bin.

    r-squared is weighted by the number of genotypes before rebinning so
    that each bin reports the genotype-weighted mean.
    """
    vals = [list(rec) for rec in report.get_values(section, set_id)]
    for rec in vals:
        rec[GC_AF_R2] = as_number(rec[GC_AF_R2]) * as_number(rec[GC_AF_GENOTYPES])
    rows = []
    for rec in rebin_values(vals, bin_size, 0):
        rr = (rec[GC_AF_RR_MATCH], rec[GC_AF_RR_MISMATCH])
        ra = (rec[GC_AF_RA_MATCH], rec[GC_AF_RA_MISMATCH])
        aa = (rec[GC_AF_AA_MATCH], rec[GC_AF_AA_MISMATCH])
        genotypes = rec[GC_AF_GENOTYPES]
        rows.append({
            'af': float(as_number(rec[0])),
            'rr_concordance': _concordance(*rr),
            'ra_concordance': _concordance(*ra),
            'aa_concordance': _concordance(*aa),
            'nRR': sum(rr),
            'nRA': sum(ra),
            'nAA': sum(aa),
            'r2': rec[GC_AF_R2] / genotypes if genotypes else 1.0,
            'genotypes': genotypes,
        })
    return pd.DataFrame(rows, columns=['af', 'rr_concordance', 'ra_concordance', 'aa_concordance',
                                       'nRR', 'nRA', 'nAA', 'r2', 'genotypes'])


def headline_stats(report: CombinedReport, set_id: str) -> Dict[str, Any]:
    """Headline numbers of one set, as shown in the plot-vcfstats summary table."""
    tstv = report.get_values(Section.TSTV.value, set_id)
    fs = report.get_values(Section.FS.value, set_id)
    dp = depth_percentiles(report, set_id, (50,))
    return {
        'files': ' + '.join(report.file_names(set_id)),
        'snps': report.get_value(set_id, 'number of SNPs:'),
        'indels': report.get_value(set_id, 'number of indels:'),
        'tstv': tstv[0][TSTV_RATIO] if tstv else None,
        'frameshift_ratio': fs[0][FS_RATIO] if fs else None,
        'inframe_ratio': inframe_ratio(report, set_id),
        'singletons': singleton_summary(report, set_id),
        'median_depth': dp.get(50),
    }


def summary_table(report: CombinedReport, set_ids: Optional[List[str]] = None) -> pd.DataFrame:
    """Per-sample statistics of all sets, with the set id as first column."""
    frames = []
    for set_id in set_ids or report.file_ids():
        frame = per_sample_stats(report, set_id)
        frame.insert(0, 'id', set_id)
        frames.append(frame)
    if not frames:
        return pd.DataFrame(columns=['id'] + PER_SAMPLE_COLUMNS)
    return pd.concat(frames, ignore_index=True)

