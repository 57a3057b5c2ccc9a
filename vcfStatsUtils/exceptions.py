#!/usr/bin/env python3

"""
exceptions.py

Error and warning types raised while parsing and merging bcftools stats files.
"""


class FormatError(ValueError):
    """Input is not a bcftools stats report, or no stats were found in it."""


class MissingSampleError(KeyError):
    """A sample-keyed section references a sample absent from the merge target."""

    def __init__(self, sample: str, section: str = ''):
        self.sample = sample
        self.section = section
        where = f" in section {section}" if section else ''
        super().__init__(f"No such destination sample{where}: {sample}")

    def __str__(self) -> str:
        return self.args[0]


class SchemaMismatchWarning(UserWarning):
    """The definition line of a section differs from the expected layout."""
