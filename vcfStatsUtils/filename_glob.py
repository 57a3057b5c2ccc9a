#!/usr/bin/env python3

"""
filename_glob.py

Reconcile the file names recorded in the ID section of merged reports.

When two reports describe different VCF files under the same set id, the
merged report names the set by a glob pattern covering both files, e.g.
'chr1.vcf.gz' and 'chr2.vcf.gz' become 'chr*.vcf.gz'. The files that went
into each pattern are tracked so they can be listed afterwards.
"""

from collections import Counter
from typing import Dict, List, Tuple

WILDCARD = '*'

# (set id, row, column) of a file name within the ID section
Identity = Tuple[str, int, int]


def reconcile_names(a: str, b: str) -> str:
    """
    Return a glob pattern matching both file names.

    The first wildcard of a, which may be a pattern from an earlier merge,
    is dropped; the longest common prefix and the longest common suffix
    not overlapping it are kept and the differing middle becomes a single
    wildcard.

    Args:
        a: Current file name or pattern
        b: Incoming file name

    Returns:
        a unchanged if both names are equal, otherwise the pattern
    """
    if a == b:
        return a
    a = a.replace(WILDCARD, '', 1)
    limit = min(len(a), len(b))
    prefix = 0
    while prefix < limit and a[prefix] == b[prefix]:
        prefix += 1
    suffix = 0
    while prefix + suffix < limit and a[len(a) - 1 - suffix] == b[len(b) - 1 - suffix]:
        suffix += 1
    return a[:prefix] + WILDCARD + a[len(a) - suffix:]


class FileProvenance:
    """Source file names behind each reconciled ID entry."""

    def __init__(self):
        self.files: Dict[Identity, Counter] = {}
        self.patterns: Dict[Identity, str] = {}

    def reconcile(self, identity: Identity, current: str, incoming: str) -> str:
        """
        Reconcile an incoming file name with the current name of an entry.

        The first reconciliation of an entry also counts the current name,
        which is the file name of the first report.

        Args:
            identity: (set id, row, column) of the entry
            current: File name or pattern currently stored
            incoming: File name from the report being merged

        Returns:
            The pattern to store
        """
        counts = self.files.get(identity)
        if counts is None:
            counts = self.files[identity] = Counter([current])
        counts[incoming] += 1
        pattern = reconcile_names(current, incoming)
        self.patterns[identity] = pattern
        return pattern

    def __len__(self) -> int:
        return len(self.files)

    def format_lines(self) -> List[str]:
        """
        Describe which files have been merged into which pattern.

        Returns:
            Lines with the pattern followed by its files, indented by tabs
        """
        lines: List[str] = []
        printed = set()
        for identity in sorted(self.files):
            pattern = self.patterns[identity]
            if pattern in printed:
                continue
            printed.add(pattern)
            lines.append(f"\t{pattern}")
            for name, n in self.files[identity].items():
                lines.append(f"\t\t{name}" + (f"\t..\t{n}x" if n > 1 else ''))
        return lines
