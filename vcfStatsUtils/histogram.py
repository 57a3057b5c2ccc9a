#!/usr/bin/env python3

"""
histogram.py

Histogram helpers for stats sections: rebinning of dense distributions
into coarser fixed-width bins and nearest-rank percentiles over
frequency-weighted histograms.
"""

from typing import Any, Iterable, List, Sequence

import numpy as np

from vcfStatsUtils.stats_parser import Record, as_number


def _flush_bin(records: List[Record], col: int, width: int, avg: Sequence[int]) -> Record:
    block = np.array(
        [[as_number(rec[i]) if i < len(rec) else 0 for i in range(width)] for rec in records],
        dtype=float
    )
    sums = block.sum(axis=0)
    n = len(records)
    out: Record = []
    for icol in range(width):
        if icol == col:
            out.append(records[0][col])
        elif icol in avg:
            out.append(float(sums[icol]) / n)
        else:
            out.append(float(sums[icol]))
    return out


def rebin_values(vals: Sequence[Record], bin_size: float, col: int = 0,
                 avg: Iterable[int] = ()) -> List[Record]:
    """
    Coalesce consecutive records into bins of fixed width.

    A record stays in the current bin while its key is less than bin_size
    past the key of the bin's first record; otherwise the bin is closed
    and the record opens the next one. A key exactly bin_size past the
    start, up to floating-point error, opens a new bin, so 0.01-spaced
    keys rebinned at 0.01 stay apart. Each bin is labelled with its first
    key; other columns are summed, except the avg columns which are
    averaged over the records in the bin.

    Args:
        vals: Records sorted by the numeric key column
        bin_size: Bin width along the key
        col: Index of the key column
        avg: Columns to average instead of sum

    Returns:
        Rebinned records
    """
    avg = set(avg)
    if not vals:
        return []
    width = max(len(rec) for rec in vals)

    out: List[Record] = []
    current: List[Record] = []
    start = 0.0
    for rec in vals:
        key = as_number(rec[col])
        step = key - start
        if current and (step >= bin_size or np.isclose(step, bin_size, rtol=1e-9, atol=0.0)):
            out.append(_flush_bin(current, col, width, avg))
            current = []
        if not current:
            start = key
        current.append(rec)
    out.append(_flush_bin(current, col, width, avg))
    return out


def percentile(p: float, counts: Iterable[Any]) -> int:
    """
    Nearest-rank percentile of a frequency histogram.

    Args:
        p: Percentile between 0 and 100
        counts: Number of observations at index 0..n-1

    Returns:
        Index of the bin holding the requested rank
    """
    values = np.array([as_number(c) for c in counts], dtype=float)
    if values.size == 0:
        return 0
    total = values.sum()
    k = int(p * (total + 1) / 100.0)
    if k <= 0:
        return 0
    if k >= total:
        return int(values.size - 1)
    cumulative = np.cumsum(values)
    return int(np.searchsorted(cumulative, k, side='left'))
