#!/usr/bin/env python3

"""
report_writer.py

Write a combined report back out in the bcftools stats text format, so
that it can be merged again or handed to the usual plotting tools.
"""

from typing import Any, List, Optional, TextIO

from vcfStatsUtils.combined_report import CombinedReport
from vcfStatsUtils.sections import LAYOUTS, SECTIONS, SN_KEYS, Section, get_layout

PRODUCER = 'plot-vcfstats'


def format_field(value: Any, digits: Optional[int] = None) -> str:
    """
    Format one field for output.

    Args:
        value: Field value
        digits: Fixed number of decimals for ratio columns

    Returns:
        Text of the field
    """
    if isinstance(value, float):
        if digits is not None:
            return f"{value:.{digits}f}"
        if value.is_integer() and abs(value) < 1e15:
            return str(int(value))
        return repr(value)
    return str(value)


def _record_lines(report: CombinedReport, section_id: str) -> List[str]:
    layout = get_layout(section_id)
    precision = layout.precision if layout else {}
    lines = []
    for set_id in sorted(report.table[section_id]):
        for record in report.table[section_id][set_id]:
            fields = [format_field(value, precision.get(j)) for j, value in enumerate(record)]
            lines.append('\t'.join([section_id, set_id] + fields))
    return lines


def _summary_lines(report: CombinedReport) -> List[str]:
    layout = LAYOUTS[Section.SN.value]
    lines = [f"# {layout.header}", layout.definition]
    for set_id, values in sorted(report.table[Section.SN.value].items()):
        keys = [key for key in SN_KEYS if key in values]
        keys += [key for key in values if key not in SN_KEYS]
        for key in keys:
            lines.append(f"SN\t{set_id}\t{key}\t{format_field(values[key])}")
    return lines


def render_combined_report(report: CombinedReport, command_line: str = PRODUCER) -> str:
    """
    Render a combined report as bcftools stats text.

    Catalogued sections come first in their usual order with the summary
    numbers right after the ID section, followed by any other sections
    except DBG.

    Args:
        report: Combined report
        command_line: Command line recorded in the header

    Returns:
        Report text
    """
    table = report.table
    lines = [
        f"# This file was produced by {PRODUCER}, the command line was:",
        f"#   {command_line}",
        "#",
    ]
    has_summary = Section.SN.value in table
    summary_written = False
    for layout in SECTIONS:
        section_id = layout.tag.value
        if section_id == Section.SN.value or section_id not in table:
            continue
        lines.append(f"# {layout.header}")
        lines.append(layout.definition)
        lines.extend(_record_lines(report, section_id))
        if section_id == Section.ID.value and has_summary:
            lines.extend(_summary_lines(report))
            summary_written = True
    if has_summary and not summary_written:
        lines.extend(_summary_lines(report))

    for section_id in table:
        # DBG records are never merged
        if section_id in LAYOUTS or section_id == Section.DBG.value:
            continue
        if section_id in report.def_lines:
            lines.append(report.def_lines[section_id])
        lines.extend(_record_lines(report, section_id))
    return '\n'.join(lines) + '\n'


def write_combined_report(report: CombinedReport, handle: TextIO,
                          command_line: str = PRODUCER) -> None:
    """Write a combined report to an open text handle."""
    handle.write(render_combined_report(report, command_line))
