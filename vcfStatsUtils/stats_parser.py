#!/usr/bin/env python3

"""
stats_parser.py

Parse bcftools stats output (".chk" files) into section tables.

A section table maps a section tag to a mapping of file-set ids. For the
SN section each id holds an ordered {key: value} mapping; every other
section holds the list of records written for that id, in file order.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Union

from vcfStatsUtils.exceptions import FormatError
from vcfStatsUtils.sections import Section, get_layout

SIGNATURE_PATTERN = re.compile(r'^# This file was produced by \S*')
DEFINITION_PATTERN = re.compile(r'^#\s+(\S+)\t')

Record = List[Any]
SectionTable = Dict[str, Dict[str, Union[List[Record], Dict[str, Any]]]]


@dataclass(frozen=True)
class StatsFile:
    """One parsed stats report."""
    path: str
    table: SectionTable
    def_lines: Dict[str, str] = field(default_factory=dict)

    @property
    def sections(self) -> List[str]:
        return list(self.table)


def parse_field(token: str) -> Union[int, float, str]:
    """
    Convert a field to int or float where possible.

    Args:
        token: Raw tab-separated field

    Returns:
        The number, or the token unchanged when it is not numeric
    """
    try:
        return int(token)
    except ValueError:
        pass
    try:
        return float(token)
    except ValueError:
        return token


def as_number(value: Any) -> Union[int, float]:
    """Numeric value of a field; missing or non-numeric fields count as zero."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        parsed = parse_field(value.strip())
        if isinstance(parsed, (int, float)):
            return parsed
    return 0


def parse_record(section_id: str, tokens: List[str]) -> Record:
    """
    Build a record from the fields following the section tag and set id.

    The first field of keyed sections is kept verbatim so that bins such
    as '>500' and sample names survive unchanged.
    """
    layout = get_layout(section_id)
    if layout is not None and not layout.numeric:
        return list(tokens)
    if layout is None or layout.keyed:
        return tokens[:1] + [parse_field(token) for token in tokens[1:]]
    return [parse_field(token) for token in tokens]


def parse_stats_lines(lines: Iterable[str], source: str = '<stream>') -> StatsFile:
    """
    Parse the lines of one bcftools stats report.

    Args:
        lines: Lines of the report, with or without line terminators
        source: Name used in log and error messages

    Returns:
        Parsed StatsFile

    Raises:
        FormatError: The first line is not a bcftools stats signature
    """
    iterator = iter(lines)
    first = next(iterator, None)
    if first is None or not SIGNATURE_PATTERN.match(first):
        raise FormatError(f"{source}: sanity check failed, was this file generated by bcftools stats?")

    table: SectionTable = {}
    def_lines: Dict[str, str] = {}
    n_records = 0

    for line in iterator:
        line = line.rstrip()
        if not line:
            continue
        if line.startswith('#'):
            match = DEFINITION_PATTERN.match(line)
            if match:
                def_lines[match.group(1)] = line
            continue

        items = line.split('\t')
        if len(items) < 2:
            logging.debug(f"{source}: skipping line without a set id: {line}")
            continue
        section_id, set_id = items[0], items[1]
        if section_id == Section.SN.value:
            if len(items) < 4:
                logging.debug(f"{source}: skipping incomplete SN line: {line}")
                continue
            table.setdefault(section_id, {}).setdefault(set_id, {})[items[2]] = parse_field(items[-1])
        else:
            table.setdefault(section_id, {}).setdefault(set_id, []).append(
                parse_record(section_id, items[2:]))
        n_records += 1

    logging.debug(f"{source}: {n_records} records in {len(table)} sections ({', '.join(table)})")
    return StatsFile(path=source, table=table, def_lines=def_lines)


def parse_stats_file(path: Union[str, Path]) -> StatsFile:
    """
    Parse a bcftools stats report from disk.

    Args:
        path: Path to the report

    Returns:
        Parsed StatsFile

    Raises:
        FormatError: The file is not a bcftools stats report or not valid text
    """
    logging.info(f"Parsing bcftools stats output: {path}")
    try:
        with open(path, 'r', encoding='utf-8') as handle:
            return parse_stats_lines(handle, source=str(path))
    except UnicodeDecodeError as e:
        raise FormatError(f"{path}: not a text file, {e.reason} at byte {e.start}") from e
