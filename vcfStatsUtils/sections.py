#!/usr/bin/env python3

"""
sections.py

Catalogue of the sections found in bcftools stats reports.

Each section tag gets a SectionLayout describing its header, the definition
line bcftools writes for it, how its first field is keyed and which of its
columns hold recomputed ratios. Column positions are counted from the first
field after the file-set id, so for PSC the sample name is column 0.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class Section(str, Enum):
    """Section tags written by bcftools stats."""
    ID = 'ID'
    SN = 'SN'
    TSTV = 'TSTV'
    SiS = 'SiS'
    AF = 'AF'
    IDD = 'IDD'
    ST = 'ST'
    GCsAF = 'GCsAF'
    GCiAF = 'GCiAF'
    NRDs = 'NRDs'
    NRDi = 'NRDi'
    GCsS = 'GCsS'
    GCiS = 'GCiS'
    PSC = 'PSC'
    PSI = 'PSI'
    DP = 'DP'
    FS = 'FS'
    ICS = 'ICS'
    ICL = 'ICL'
    QUAL = 'QUAL'
    HWE = 'HWE'
    DBG = 'DBG'


# Key kinds
KEY_NUM_OP = 'num_op'   # numeric, optionally prefixed by '<' or '>'
KEY_NUM = 'num'
KEY_STR = 'str'
KEY_SAMPLE = 'sample'


@dataclass(frozen=True)
class SectionLayout:
    """Layout of one section of a stats report."""
    tag: Section
    header: str
    columns: List[str]
    key_kind: Optional[str] = None
    numeric: bool = True
    precision: Dict[int, int] = field(default_factory=dict)

    @property
    def definition(self) -> str:
        """The definition line bcftools writes for this section."""
        cols = '\t'.join(f"[{i + 3}]{name}" for i, name in enumerate(self.columns))
        return f"# {self.tag.value}\t[2]id\t{cols}"

    @property
    def keyed(self) -> bool:
        return self.key_kind is not None


# Column positions used by the merge strategies and summaries
TSTV_TS, TSTV_TV, TSTV_RATIO = 0, 1, 2
TSTV_TS_1ST, TSTV_TV_1ST, TSTV_RATIO_1ST = 3, 4, 5

SIS_SNPS, SIS_TS, SIS_TV, SIS_INDELS = 1, 2, 3, 4
SIS_REPEAT_CONSISTENT, SIS_REPEAT_INCONSISTENT = 5, 6

AF_SNPS, AF_INDELS = 1, 4

DP_BIN, DP_GENOTYPES, DP_GENOTYPE_PCT, DP_SITES, DP_SITE_PCT = 0, 1, 2, 3, 4

GC_AF_RR_MATCH, GC_AF_RA_MATCH, GC_AF_AA_MATCH = 1, 2, 3
GC_AF_RR_MISMATCH, GC_AF_RA_MISMATCH, GC_AF_AA_MISMATCH = 4, 5, 6
GC_AF_R2, GC_AF_GENOTYPES = 7, 8

GC_S_NRD = 1

PSC_REF_HOM, PSC_NONREF_HOM, PSC_HETS = 1, 2, 3
PSC_TS, PSC_TV, PSC_INDELS, PSC_AVG_DEPTH, PSC_SINGLETONS = 4, 5, 6, 7, 8

PSI_IN_FRAME, PSI_OUT_FRAME, PSI_RATIO = 1, 2, 4

FS_IN_FRAME, FS_OUT_FRAME, FS_RATIO = 0, 1, 3
FS_IN_FRAME_1ST, FS_OUT_FRAME_1ST, FS_RATIO_1ST = 4, 5, 7

ICS_CONSISTENT, ICS_INCONSISTENT, ICS_RATIO = 0, 1, 3

ICL_DEL_CONSISTENT, ICL_DEL_INCONSISTENT = 1, 2
ICL_INS_CONSISTENT, ICL_INS_INCONSISTENT = 3, 4
ICL_RATIO = 5

_GC_AF_COLUMNS = ['allele frequency', 'RR Hom matches', 'RA Het matches', 'AA Hom matches',
                  'RR Hom mismatches', 'RA Het mismatches', 'AA Hom mismatches',
                  'dosage r-squared', 'number of genotypes']
_GC_S_COLUMNS = ['sample', 'non-reference discordance rate', 'RR Hom matches', 'RA Het matches',
                 'AA Hom matches', 'RR Hom mismatches', 'RA Het mismatches', 'AA Hom mismatches',
                 'dosage r-squared']
_NRD_COLUMNS = ['NRD', 'Ref/Ref discordance', 'Ref/Alt discordance', 'Alt/Alt discordance']
_AF_COLUMNS = ['number of SNPs', 'number of transitions', 'number of transversions',
               'number of indels', 'repeat-consistent', 'repeat-inconsistent', 'not applicable']

# Ordered as they are written out when reports are merged
SECTIONS: List[SectionLayout] = [
    SectionLayout(Section.ID, 'Definition of sets',
                  ['tab-separated file names'], numeric=False),
    SectionLayout(Section.SN, 'SN, Summary numbers',
                  ['key', 'value']),
    SectionLayout(Section.TSTV, '# TSTV, transition/transversions:',
                  ['ts', 'tv', 'ts/tv', 'ts (1st ALT)', 'tv (1st ALT)', 'ts/tv (1st ALT)'],
                  precision={TSTV_RATIO: 2, TSTV_RATIO_1ST: 2}),
    SectionLayout(Section.SiS, 'Sis, Singleton stats',
                  ['allele count'] + _AF_COLUMNS, key_kind=KEY_NUM_OP),
    SectionLayout(Section.AF, 'AF, Stats by non-reference allele frequency',
                  ['allele frequency'] + _AF_COLUMNS, key_kind=KEY_NUM_OP),
    SectionLayout(Section.IDD, 'IDD, InDel distribution',
                  ['length (deletions negative)', 'count'], key_kind=KEY_NUM),
    SectionLayout(Section.ST, 'ST, Substitution types',
                  ['type', 'count'], key_kind=KEY_STR),
    SectionLayout(Section.GCsAF,
                  'GCsAF, Genotype concordance by non-reference allele frequency (SNPs)',
                  _GC_AF_COLUMNS, key_kind=KEY_NUM_OP),
    SectionLayout(Section.GCiAF,
                  'GCiAF, Genotype concordance by non-reference allele frequency (indels)',
                  _GC_AF_COLUMNS, key_kind=KEY_NUM_OP),
    SectionLayout(Section.NRDs, 'Non-Reference Discordance (NRD), SNPs', _NRD_COLUMNS),
    SectionLayout(Section.NRDi, 'Non-Reference Discordance (NRD), indels', _NRD_COLUMNS),
    SectionLayout(Section.GCsS, 'GCsS, Genotype concordance by sample (SNPs)',
                  _GC_S_COLUMNS, key_kind=KEY_SAMPLE),
    SectionLayout(Section.GCiS, 'GCiS, Genotype concordance by sample (indels)',
                  _GC_S_COLUMNS, key_kind=KEY_SAMPLE),
    SectionLayout(Section.PSC, 'PSC, Per-sample counts',
                  ['sample', 'nRefHom', 'nNonRefHom', 'nHets', 'nTransitions',
                   'nTransversions', 'nIndels', 'average depth', 'nSingletons'],
                  key_kind=KEY_SAMPLE),
    SectionLayout(Section.PSI, 'PSI, Per-sample Indels',
                  ['sample', 'in-frame', 'out-frame', 'not applicable',
                   'out/(in+out) ratio', 'nHets', 'nAA'],
                  key_kind=KEY_SAMPLE, precision={PSI_RATIO: 2}),
    SectionLayout(Section.DP, 'DP, Depth distribution',
                  ['bin', 'number of genotypes', 'fraction of genotypes (%)',
                   'number of sites', 'fraction of sites (%)'],
                  key_kind=KEY_NUM_OP),
    SectionLayout(Section.FS, 'FS, Indel frameshifts',
                  ['in-frame', 'out-frame', 'not applicable', 'out/(in+out) ratio',
                   'in-frame (1st ALT)', 'out-frame (1st ALT)', 'not applicable (1st ALT)',
                   'out/(in+out) ratio (1st ALT)'],
                  precision={FS_RATIO: 2, FS_RATIO_1ST: 2}),
    SectionLayout(Section.ICS, 'ICS, Indel context summary',
                  ['repeat-consistent', 'repeat-inconsistent', 'not applicable',
                   'c/(c+i) ratio'],
                  precision={ICS_RATIO: 4}),
    SectionLayout(Section.ICL, 'ICL, Indel context by length',
                  ['length of repeat element', 'repeat-consistent deletions)',
                   'repeat-inconsistent deletions', 'consistent insertions',
                   'inconsistent insertions', 'c/(c+i) ratio'],
                  precision={ICL_RATIO: 4}),
    SectionLayout(Section.QUAL, 'QUAL, Stats by quality',
                  ['Quality', 'number of SNPs', 'number of transitions (1st ALT)',
                   'number of transversions (1st ALT)', 'number of indels'],
                  key_kind=KEY_NUM_OP),
    SectionLayout(Section.HWE, 'HWE',
                  ['1st ALT allele frequency', 'Number of observations',
                   '25th percentile', 'median', '75th percentile'],
                  key_kind=KEY_NUM_OP),
]

LAYOUTS: Dict[str, SectionLayout] = {layout.tag.value: layout for layout in SECTIONS}

SAMPLES_KEY = 'number of samples:'

SN_KEYS: List[str] = [
    SAMPLES_KEY,
    'number of records:',
    'number of no-ALTs:',
    'number of SNPs:',
    'number of MNPs:',
    'number of indels:',
    'number of others:',
    'number of multiallelic sites:',
    'number of multiallelic SNP sites:',
]


def get_layout(section_id: str) -> Optional[SectionLayout]:
    """Return the layout for a section tag, or None for sections not catalogued."""
    return LAYOUTS.get(section_id)


def expected_definition(section_id: str) -> Optional[str]:
    """
    Return the definition line bcftools writes for a section.

    Args:
        section_id: Section tag, e.g. 'PSC'

    Returns:
        Definition line, or None when the section is not catalogued
    """
    layout = LAYOUTS.get(section_id)
    return layout.definition if layout else None
