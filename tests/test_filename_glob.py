#!/usr/bin/env python3

"""
test_filename_glob.py

Unit tests for file name reconciliation in the ID section.
"""

import unittest
from fnmatch import fnmatchcase

from vcfStatsUtils.filename_glob import FileProvenance, reconcile_names


class TestReconcileNames(unittest.TestCase):
    """Test glob patterns built from pairs of file names."""

    def test_identical_names(self):
        self.assertEqual(reconcile_names('calls.vcf.gz', 'calls.vcf.gz'), 'calls.vcf.gz')

    def test_differing_middle(self):
        """The differing middle becomes a single wildcard."""
        self.assertEqual(reconcile_names('sampleA.chk', 'sampleB.chk'), 'sample*.chk')
        self.assertEqual(reconcile_names('chr1.vcf.gz', 'chr2.vcf.gz'), 'chr*.vcf.gz')

    def test_different_lengths(self):
        self.assertEqual(reconcile_names('chr1.vcf.gz', 'chr10.vcf.gz'), 'chr1*.vcf.gz')

    def test_existing_pattern(self):
        """A pattern from an earlier merge absorbs further names."""
        self.assertEqual(reconcile_names('sample*.chk', 'sampleC.chk'), 'sample*.chk')

    def test_nothing_in_common(self):
        self.assertEqual(reconcile_names('a.vcf', 'b.txt'), '*')

    def test_pattern_matches_both(self):
        """The pattern matches both inputs under shell globbing."""
        pairs = [('x.chr1.vcf', 'x.chr22.vcf'), ('a', 'ab'), ('pre_mid_suf', 'pre_suf')]
        for a, b in pairs:
            pattern = reconcile_names(a, b)
            self.assertTrue(fnmatchcase(a, pattern), (a, pattern))
            self.assertTrue(fnmatchcase(b, pattern), (b, pattern))


class TestFileProvenance(unittest.TestCase):
    """Test tracking of files merged into each pattern."""

    def test_counts_and_lines(self):
        provenance = FileProvenance()
        identity = ('0', 0, 0)
        pattern = provenance.reconcile(identity, 'a.vcf', 'b.vcf')
        self.assertEqual(pattern, '*.vcf')
        pattern = provenance.reconcile(identity, pattern, 'a.vcf')
        self.assertEqual(pattern, '*.vcf')

        self.assertEqual(len(provenance), 1)
        self.assertEqual(provenance.files[identity], {'a.vcf': 2, 'b.vcf': 1})
        self.assertEqual(provenance.format_lines(), ['\t*.vcf', '\t\ta.vcf\t..\t2x', '\t\tb.vcf'])

    def test_shared_pattern_listed_once(self):
        """Entries reconciled to the same pattern are listed once."""
        provenance = FileProvenance()
        provenance.reconcile(('0', 0, 0), 'chr1.vcf', 'chr2.vcf')
        provenance.reconcile(('1', 0, 0), 'chr1.vcf', 'chr2.vcf')
        lines = provenance.format_lines()
        self.assertEqual(lines.count('\tchr*.vcf'), 1)

    def test_empty(self):
        provenance = FileProvenance()
        self.assertEqual(len(provenance), 0)
        self.assertEqual(provenance.format_lines(), [])


if __name__ == '__main__':
    unittest.main()
