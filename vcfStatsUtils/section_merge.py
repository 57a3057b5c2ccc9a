#!/usr/bin/env python3

"""
section_merge.py

Per-section rules for combining two bcftools stats reports.

Each section has its own arithmetic: counts are summed, derived ratios
and percentages are recomputed from the summed counts, averages are
carried as running averages weighted by the number of files merged so
far, and r-squared values are re-weighted by their genotype counts.
"""

import copy
import logging
import warnings
from typing import Any, Callable, Dict, List, Optional, Set

from vcfStatsUtils.exceptions import MissingSampleError, SchemaMismatchWarning
from vcfStatsUtils.filename_glob import FileProvenance
from vcfStatsUtils.record_merge import (
    add_fields, add_to_average, add_to_sample_values, add_to_values,
    cmp_num, cmp_num_op, cmp_str, require_samples, scale_column
)
from vcfStatsUtils.sections import (
    KEY_NUM, KEY_NUM_OP, KEY_STR, SAMPLES_KEY, Section, expected_definition, get_layout,
    DP_GENOTYPES, DP_GENOTYPE_PCT, DP_SITES, DP_SITE_PCT,
    FS_IN_FRAME, FS_OUT_FRAME, FS_RATIO, FS_IN_FRAME_1ST, FS_OUT_FRAME_1ST, FS_RATIO_1ST,
    GC_AF_GENOTYPES, GC_AF_R2, GC_S_NRD,
    ICL_DEL_CONSISTENT, ICL_DEL_INCONSISTENT, ICL_INS_CONSISTENT, ICL_INS_INCONSISTENT, ICL_RATIO,
    ICS_CONSISTENT, ICS_INCONSISTENT, ICS_RATIO,
    PSC_AVG_DEPTH, PSI_IN_FRAME, PSI_OUT_FRAME, PSI_RATIO,
    TSTV_RATIO, TSTV_RATIO_1ST, TSTV_TS, TSTV_TS_1ST, TSTV_TV, TSTV_TV_1ST
)
from vcfStatsUtils.stats_parser import Record, as_number

Strategy = Callable[[Any, Any, int], Any]

DP_WIDTH = 5


def ratio(num: float, den: float, digits: int) -> float:
    """num / den rounded to digits, or 0 when den is 0."""
    return round(num / den, digits) if den else 0.0


def merge_sn(dst: Dict[str, Any], src: Dict[str, Any], n: int) -> Dict[str, Any]:
    """Sum summary numbers; the number of samples describes the data set and is kept."""
    for key, value in src.items():
        if key not in dst:
            dst[key] = value
        elif key != SAMPLES_KEY:
            dst[key] = as_number(dst[key]) + as_number(value)
    return dst


def merge_tstv(dst: List[Record], src: List[Record], n: int) -> List[Record]:
    for a, b in zip(dst, src):
        add_fields(a, b, TSTV_TS, TSTV_TV + 1)
        a[TSTV_RATIO] = ratio(as_number(a[TSTV_TS]), as_number(a[TSTV_TV]), 2)
        add_fields(a, b, TSTV_TS_1ST, TSTV_TV_1ST + 1)
        a[TSTV_RATIO_1ST] = ratio(as_number(a[TSTV_TS_1ST]), as_number(a[TSTV_TV_1ST]), 2)
    return dst


def merge_by_bin(dst: List[Record], src: List[Record], n: int) -> List[Record]:
    return add_to_values(dst, src, cmp_num_op)


def merge_by_length(dst: List[Record], src: List[Record], n: int) -> List[Record]:
    return add_to_values(dst, src, cmp_num)


def merge_by_type(dst: List[Record], src: List[Record], n: int) -> List[Record]:
    return add_to_values(dst, src, cmp_str)


def _pad(record: Record, width: int) -> Record:
    if len(record) < width:
        record.extend([0] * (width - len(record)))
    return record


def merge_dp(dst: List[Record], src: List[Record], n: int) -> List[Record]:
    """
    Merge depth histograms and recompute the genotype and site percentages.

    Older stats files lack the number and fraction of sites; those columns
    are filled with zeros.
    """
    for record in dst:
        _pad(record, DP_WIDTH)
    add_to_values(dst, [_pad(list(record), DP_WIDTH) for record in src], cmp_num_op)

    gsum = sum(as_number(record[DP_GENOTYPES]) for record in dst)
    ssum = sum(as_number(record[DP_SITES]) for record in dst)
    for record in dst:
        record[DP_GENOTYPE_PCT] = as_number(record[DP_GENOTYPES]) * 100. / gsum if gsum else 0
        record[DP_SITE_PCT] = as_number(record[DP_SITES]) * 100. / ssum if ssum else 0
    return dst


def merge_gc_af(dst: List[Record], src: List[Record], n: int) -> List[Record]:
    """
    Merge genotype concordance by allele frequency.

    The dosage r-squared of each bin is an average over its genotypes, so
    it is weighted by the number of genotypes for the merge and divided by
    the merged number afterwards.
    """
    weighted = [_pad(list(record), GC_AF_GENOTYPES + 1) for record in src]
    for record in dst:
        _pad(record, GC_AF_GENOTYPES + 1)
    for record in dst + weighted:
        record[GC_AF_R2] = as_number(record[GC_AF_R2]) * as_number(record[GC_AF_GENOTYPES])
    add_to_values(dst, weighted, cmp_num_op)
    for record in dst:
        genotypes = as_number(record[GC_AF_GENOTYPES])
        record[GC_AF_R2] = record[GC_AF_R2] / genotypes if genotypes else 0
    return dst


def merge_nrd(dst: List[Record], src: List[Record], n: int) -> List[Record]:
    return add_to_average(dst, src, n)


def _average_then_sum(dst: List[Record], src: List[Record], n: int, col: int) -> List[Record]:
    require_samples(dst, src)
    scale_column(dst, col, n)
    add_to_sample_values(dst, src)
    scale_column(dst, col, 1. / (n + 1))
    return dst


def merge_gc_s(dst: List[Record], src: List[Record], n: int) -> List[Record]:
    """Average the non-reference discordance rate, sum the genotype counts."""
    return _average_then_sum(dst, src, n, GC_S_NRD)


def merge_psc(dst: List[Record], src: List[Record], n: int) -> List[Record]:
    """Average the mean depth, sum the per-sample counts."""
    return _average_then_sum(dst, src, n, PSC_AVG_DEPTH)


def merge_psi(dst: List[Record], src: List[Record], n: int) -> List[Record]:
    add_to_sample_values(dst, src)
    for record in dst:
        in_frame = as_number(record[PSI_IN_FRAME])
        out_frame = as_number(record[PSI_OUT_FRAME])
        _pad(record, PSI_RATIO + 1)
        record[PSI_RATIO] = ratio(out_frame, in_frame + out_frame, 2)
    return dst


def merge_fs(dst: List[Record], src: List[Record], n: int) -> List[Record]:
    for a, b in zip(dst, src):
        add_fields(a, b, FS_IN_FRAME, FS_RATIO)
        in_frame, out_frame = as_number(a[FS_IN_FRAME]), as_number(a[FS_OUT_FRAME])
        a[FS_RATIO] = ratio(out_frame, in_frame + out_frame, 2)

        add_fields(a, b, FS_IN_FRAME_1ST, FS_RATIO_1ST)
        in_frame, out_frame = as_number(a[FS_IN_FRAME_1ST]), as_number(a[FS_OUT_FRAME_1ST])
        a[FS_RATIO_1ST] = ratio(out_frame, in_frame + out_frame, 2)
    return dst


def merge_ics(dst: List[Record], src: List[Record], n: int) -> List[Record]:
    for a, b in zip(dst, src):
        add_fields(a, b, ICS_CONSISTENT, ICS_RATIO)
        consistent, inconsistent = as_number(a[ICS_CONSISTENT]), as_number(a[ICS_INCONSISTENT])
        a[ICS_RATIO] = ratio(consistent, consistent + inconsistent, 4)
    return dst


def merge_icl(dst: List[Record], src: List[Record], n: int) -> List[Record]:
    for a, b in zip(dst, src):
        add_fields(a, b, ICL_DEL_CONSISTENT, ICL_RATIO)
        consistent = as_number(a[ICL_DEL_CONSISTENT]) + as_number(a[ICL_INS_CONSISTENT])
        inconsistent = as_number(a[ICL_DEL_INCONSISTENT]) + as_number(a[ICL_INS_INCONSISTENT])
        # zero unless there are inconsistent repeats
        a[ICL_RATIO] = ratio(consistent, consistent + inconsistent, 4) if inconsistent else 0.0
    return dst


def skip_section(dst: Any, src: Any, n: int) -> Any:
    return dst


MERGE_STRATEGIES: Dict[str, Strategy] = {
    Section.SN.value: merge_sn,
    Section.TSTV.value: merge_tstv,
    Section.DP.value: merge_dp,
    Section.GCsAF.value: merge_gc_af,
    Section.GCiAF.value: merge_gc_af,
    Section.NRDs.value: merge_nrd,
    Section.NRDi.value: merge_nrd,
    Section.GCsS.value: merge_gc_s,
    Section.GCiS.value: merge_gc_s,
    Section.PSC.value: merge_psc,
    Section.PSI.value: merge_psi,
    Section.FS.value: merge_fs,
    Section.ICS.value: merge_ics,
    Section.ICL.value: merge_icl,
    Section.DBG.value: skip_section,
}


# Key-ordered unions, by the key kind of the section layout
KEY_UNIONS: Dict[str, Strategy] = {
    KEY_NUM_OP: merge_by_bin,
    KEY_NUM: merge_by_length,
    KEY_STR: merge_by_type,
}


def get_strategy(section_id: str) -> Strategy:
    """
    Merge rule for a section.

    Sections without a rule of their own are merged as a key-ordered union
    with the comparator matching their key kind; sections not in the
    catalogue are merged as bins.
    """
    strategy = MERGE_STRATEGIES.get(section_id)
    if strategy is not None:
        return strategy
    layout = get_layout(section_id)
    key_kind = layout.key_kind if layout else KEY_NUM_OP
    return KEY_UNIONS.get(key_kind, merge_by_bin)


def merge_id(dst: List[Record], src: List[Record], set_id: str,
             provenance: FileProvenance) -> List[Record]:
    """Replace the file names of a set by patterns covering both reports."""
    for i, record in enumerate(src):
        if i >= len(dst):
            dst.append(list(record))
            continue
        for j, name in enumerate(record):
            if j >= len(dst[i]):
                dst[i].append(name)
                continue
            dst[i][j] = provenance.reconcile((set_id, i, j), dst[i][j], name)
    return dst


def check_definition(section_id: str, observed: Optional[str], warned: Set[str]) -> bool:
    """
    Warn once per section when its definition line differs from the expected one.

    Args:
        section_id: Section tag
        observed: Definition line read from the report, if any
        warned: Sections already warned about, updated in place

    Returns:
        True if the definition line matches or cannot be checked
    """
    expected = expected_definition(section_id)
    if observed is None or expected is None or observed == expected:
        return True
    if section_id not in warned:
        warned.add(section_id)
        warnings.warn(
            f"Possible version mismatch, the definition line differs\n"
            f"\texpected: {expected}\n\tfound:    {observed}",
            SchemaMismatchWarning,
            stacklevel=2
        )
    return False


def merge_section(dst_section: Dict[str, Any], src_section: Dict[str, Any], section_id: str,
                  n: int, provenance: FileProvenance) -> Dict[str, Any]:
    """
    Merge all sets of one section into the accumulated section.

    Args:
        dst_section: Accumulated {set id: value} mapping, modified in place
        src_section: Section of the report being merged, left untouched
        section_id: Section tag
        n: Number of reports merged into dst_section so far
        provenance: Tracker for reconciled ID file names

    Returns:
        The accumulated section

    Raises:
        MissingSampleError: A per-sample section names an unknown sample
    """
    strategy = get_strategy(section_id)
    for set_id, value in src_section.items():
        if set_id not in dst_section:
            dst_section[set_id] = copy.deepcopy(value)
            continue
        if section_id == Section.ID.value:
            merge_id(dst_section[set_id], value, set_id, provenance)
            continue
        try:
            strategy(dst_section[set_id], value, n)
        except MissingSampleError as e:
            raise MissingSampleError(e.sample, f"{section_id} {set_id}") from e
    logging.debug(f"Merged section {section_id} ({len(src_section)} sets)")
    return dst_section
