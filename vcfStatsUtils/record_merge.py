#!/usr/bin/env python3

"""
record_merge.py

Generic merge primitives for lists of stats records.

Records are lists whose first field is the merge key. The key-ordered
union merges two lists sorted under a comparator, summing the fields of
records whose keys compare equal; the sample-keyed union sums per-sample
records and refuses samples the destination does not know about.
"""

import bisect
import functools
import re
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence

from vcfStatsUtils.exceptions import MissingSampleError
from vcfStatsUtils.stats_parser import Record, as_number

Comparator = Callable[[Any, Any], int]

PLAIN = '='
_OPERATOR_PATTERN = re.compile(r'^([^\d.+-]+)')


@dataclass(frozen=True, order=True)
class BinKey:
    """
    Histogram bin key such as '3', '<3' or '>500'.

    Keys order by numeric value first; at equal value the operator strings
    are compared lexically, with the plain key represented as '=', which
    places '<3' before '3' before '>3'.
    """
    value: float
    op: str = PLAIN

    @classmethod
    def parse(cls, key: Any) -> 'BinKey':
        """Split a key into its relational prefix and numeric remainder."""
        if isinstance(key, (int, float)):
            return cls(float(key))
        text = str(key).strip()
        match = _OPERATOR_PATTERN.match(text)
        if match:
            return cls(float(as_number(text[match.end():])), match.group(1))
        return cls(float(as_number(text)))

    def __str__(self) -> str:
        value = int(self.value) if self.value.is_integer() else self.value
        return f"{value}" if self.op == PLAIN else f"{self.op}{value}"


def _sign(diff: float) -> int:
    return (diff > 0) - (diff < 0)


def cmp_str(a: Any, b: Any) -> int:
    """Lexical comparison, used for substitution types."""
    a, b = str(a), str(b)
    return (a > b) - (a < b)


def cmp_num(a: Any, b: Any) -> int:
    """Plain numeric comparison, used for indel lengths."""
    return _sign(as_number(a) - as_number(b))


def cmp_num_op(a: Any, b: Any) -> int:
    """Numeric comparison of keys which may carry a '<' or '>' prefix."""
    ka, kb = BinKey.parse(a), BinKey.parse(b)
    return (ka > kb) - (ka < kb)


def add_fields(dst: Record, src: Record, start: int = 1, stop: Optional[int] = None) -> None:
    """
    Add src fields to dst in place.

    Args:
        dst: Record updated in place
        src: Record whose values are added
        start: First column to add
        stop: Column after the last to add, defaults to the end of src
    """
    stop = len(src) if stop is None else stop
    if len(dst) < stop:
        dst.extend([0] * (stop - len(dst)))
    for j in range(start, stop):
        value = src[j] if j < len(src) else 0
        dst[j] = as_number(dst[j]) + as_number(value)


def add_to_values(dst: List[Record], src: Sequence[Record], cmp: Comparator) -> List[Record]:
    """
    Merge src into dst, both sorted by their first field under cmp.

    Records with equal keys are summed field by field; other source
    records are inserted at their sorted position. The merged list has
    len(dst) + len(src) minus the number of key collisions.

    Args:
        dst: Destination records, modified in place
        src: Source records, left untouched
        cmp: Three-way comparator of two keys

    Returns:
        The destination list
    """
    sort_key = functools.cmp_to_key(cmp)
    for record in src:
        idx = bisect.bisect_left(dst, sort_key(record[0]), key=lambda rec: sort_key(rec[0]))
        if idx < len(dst) and cmp(record[0], dst[idx][0]) == 0:
            add_fields(dst[idx], record)
        else:
            dst.insert(idx, list(record))
    return dst


def require_samples(dst: Sequence[Record], src: Sequence[Record], section: str = '') -> None:
    """
    Check that every source sample exists in the destination.

    Raises:
        MissingSampleError: For the first source sample missing from dst
    """
    known = {record[0] for record in dst}
    for record in src:
        if record[0] not in known:
            raise MissingSampleError(record[0], section)


def add_to_sample_values(dst: List[Record], src: Sequence[Record], section: str = '') -> List[Record]:
    """
    Sum per-sample records of src into the matching records of dst.

    No samples are added; all source samples are checked before any
    destination record is changed.

    Args:
        dst: Destination records keyed by sample name, modified in place
        src: Source records keyed by sample name
        section: Section tag used in the error message

    Returns:
        The destination list

    Raises:
        MissingSampleError: A source sample is not present in dst
    """
    require_samples(dst, src, section)
    index = {record[0]: i for i, record in enumerate(dst)}
    for record in src:
        add_fields(dst[index[record[0]]], record)
    return dst


def add_to_average(dst: List[Record], src: Sequence[Record], n: int) -> List[Record]:
    """
    Fold src into a running elementwise average over n earlier files.

    Each field becomes (n * old + new) / (n + 1).
    """
    for i, record in enumerate(src):
        if i >= len(dst):
            dst.append([0] * len(record))
        row = dst[i]
        for j in range(max(len(row), len(record))):
            old = row[j] if j < len(row) else 0
            new = record[j] if j < len(record) else 0
            value = (n * as_number(old) + as_number(new)) / (n + 1)
            if j < len(row):
                row[j] = value
            else:
                row.append(value)
    return dst


def scale_column(records: List[Record], col: int, factor: float) -> None:
    """Multiply one column of every record by factor, in place."""
    for record in records:
        if col < len(record):
            record[col] = as_number(record[col]) * factor
