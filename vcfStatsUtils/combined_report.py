#!/usr/bin/env python3

"""
combined_report.py

Fold any number of parsed bcftools stats reports into one combined report.

The first report is copied, then every further report is merged into it,
left to right, section by section. Each merge step returns a new
CombinedReport so the accumulated state is passed around explicitly.
"""

import copy
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Set, Union

from vcfStatsUtils.exceptions import FormatError
from vcfStatsUtils.filename_glob import FileProvenance
from vcfStatsUtils.section_merge import check_definition, merge_section
from vcfStatsUtils.sections import Section
from vcfStatsUtils.stats_parser import Record, SectionTable, StatsFile, parse_stats_file


@dataclass
class CombinedReport:
    """Section table accumulated over one or more reports."""
    table: SectionTable
    def_lines: Dict[str, str] = field(default_factory=dict)
    sources: List[str] = field(default_factory=list)
    provenance: FileProvenance = field(default_factory=FileProvenance)
    warned: Set[str] = field(default_factory=set)

    @property
    def n_files(self) -> int:
        """Number of reports merged so far."""
        return len(self.sources)

    @classmethod
    def from_stats_file(cls, stats_file: StatsFile) -> 'CombinedReport':
        """Start a combined report from a copy of the first report."""
        report = cls(
            table=copy.deepcopy(stats_file.table),
            def_lines=dict(stats_file.def_lines),
            sources=[stats_file.path]
        )
        for section_id in stats_file.table:
            check_definition(section_id, stats_file.def_lines.get(section_id), report.warned)
        return report

    def file_ids(self) -> List[str]:
        """Consecutive set ids '0', '1', ... defined in the ID section."""
        ids = []
        sets = self.table.get(Section.ID.value, {})
        while str(len(ids)) in sets:
            ids.append(str(len(ids)))
        return ids

    def get_values(self, section_id: str, set_id: str) -> List[Record]:
        """Records of one section and set, or an empty list."""
        return self.table.get(section_id, {}).get(set_id, [])

    def get_value(self, set_id: str, key: str) -> Optional[Any]:
        """Summary number of one set, or None."""
        return self.table.get(Section.SN.value, {}).get(set_id, {}).get(key)

    def file_names(self, set_id: str) -> List[str]:
        """File names, or patterns, behind a set id."""
        rows = self.get_values(Section.ID.value, set_id)
        return list(rows[0]) if rows else []


def merge_stats(report: CombinedReport, stats_file: StatsFile) -> CombinedReport:
    """
    Merge one more report into a combined report.

    The given report is left untouched; if any section fails to merge no
    partial result is returned.

    Args:
        report: Reports combined so far
        stats_file: Next report

    Returns:
        New combined report including stats_file

    Raises:
        MissingSampleError: A per-sample section names an unknown sample
    """
    merged = copy.deepcopy(report)
    n = report.n_files
    logging.info(f"Merging {stats_file.path} ({n} file(s) merged so far)")
    for section_id, src_section in stats_file.table.items():
        check_definition(section_id, stats_file.def_lines.get(section_id), merged.warned)
        if section_id not in merged.table:
            merged.table[section_id] = copy.deepcopy(src_section)
            continue
        merge_section(merged.table[section_id], src_section, section_id, n, merged.provenance)
    merged.def_lines.update(stats_file.def_lines)
    merged.sources.append(stats_file.path)
    return merged


def combine_stats(stats_files: Iterable[StatsFile]) -> CombinedReport:
    """
    Combine parsed reports left to right.

    Raises:
        FormatError: No stats were found in the inputs
    """
    report: Optional[CombinedReport] = None
    for stats_file in stats_files:
        if report is None:
            report = CombinedReport.from_stats_file(stats_file)
        else:
            report = merge_stats(report, stats_file)
    if report is None or '0' not in report.table.get(Section.ID.value, {}):
        raise FormatError("Sanity check failed: no stats found by bcftools stats??")
    return report


def combine_stats_files(paths: Iterable[Union[str, Path]]) -> CombinedReport:
    """
    Parse and combine reports from disk.

    All files are parsed before merging starts, so a malformed file
    aborts the run before any merge state exists.

    Args:
        paths: Report files, merged in the given order

    Returns:
        The combined report
    """
    stats_files = [parse_stats_file(path) for path in paths]
    report = combine_stats(stats_files)
    logging.info(f"Combined {report.n_files} stats file(s) into {len(report.table)} sections")
    return report


def provenance_lines(report: CombinedReport) -> List[str]:
    """Lines describing how the input file names were coalesced."""
    if not len(report.provenance):
        return []
    return ["The vcfstats outputs have been merged as follows:"] + report.provenance.format_lines()
