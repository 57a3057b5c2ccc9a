#!/usr/bin/env python3

"""
test_combined_report.py

Integration tests for combining bcftools stats reports.
Tests merging of parsed files, the accumulated report state and writing
the combined report back out.
"""

import copy
import io
import shutil
import tempfile
import unittest
from pathlib import Path

from vcfStatsUtils.combined_report import (
    CombinedReport, combine_stats, combine_stats_files, merge_stats, provenance_lines
)
from vcfStatsUtils.exceptions import FormatError, MissingSampleError
from vcfStatsUtils.report_writer import format_field, render_combined_report, write_combined_report
from vcfStatsUtils.sections import get_layout
from vcfStatsUtils.stats_parser import parse_stats_lines

SIGNATURE = "# This file was produced by bcftools stats (1.9+htslib-1.9) and can be plotted using plot-vcfstats."


def report_a():
    return [
        SIGNATURE,
        get_layout('ID').definition,
        "ID\t0\tsampleA.vcf.gz",
        get_layout('SN').definition,
        "SN\t0\tnumber of samples:\t2",
        "SN\t0\tnumber of records:\t150",
        "SN\t0\tnumber of SNPs:\t140",
        "SN\t0\tnumber of indels:\t10",
        get_layout('TSTV').definition,
        "TSTV\t0\t100\t50\t2.00\t100\t50\t2.00",
        get_layout('SiS').definition,
        "SiS\t0\t1\t10\t6\t4\t2\t1\t1\t0",
        get_layout('AF').definition,
        "AF\t0\t0.000000\t10\t6\t4\t2\t1\t1\t0",
        "AF\t0\t0.490000\t130\t84\t46\t8\t5\t3\t0",
        get_layout('IDD').definition,
        "IDD\t0\t-2\t3",
        "IDD\t0\t1\t5",
        "IDD\t0\t3\t2",
        get_layout('ST').definition,
        "ST\t0\tA>C\t40",
        "ST\t0\tC>T\t60",
        get_layout('PSC').definition,
        "PSC\t0\tS1\t10\t20\t30\t60\t30\t5\t10.0\t4",
        "PSC\t0\tS2\t12\t18\t30\t40\t20\t5\t20.0\t6",
        get_layout('PSI').definition,
        "PSI\t0\tS1\t3\t2\t0\t0.40\t1\t1",
        "PSI\t0\tS2\t1\t3\t0\t0.75\t2\t0",
        get_layout('DP').definition,
        "DP\t0\t10\t5\t50.000000\t5\t50.000000",
        "DP\t0\t20\t5\t50.000000\t5\t50.000000",
        "# XYZ\t[2]id\t[3]key\t[4]count",
        "XYZ\t0\tfoo\t2",
    ]


def report_b():
    return [
        SIGNATURE,
        get_layout('ID').definition,
        "ID\t0\tsampleB.vcf.gz",
        get_layout('SN').definition,
        "SN\t0\tnumber of samples:\t2",
        "SN\t0\tnumber of records:\t50",
        "SN\t0\tnumber of SNPs:\t45",
        "SN\t0\tnumber of indels:\t5",
        get_layout('TSTV').definition,
        "TSTV\t0\t20\t10\t2.00\t20\t10\t2.00",
        get_layout('IDD').definition,
        "IDD\t0\t-1\t4",
        "IDD\t0\t1\t1",
        get_layout('ST').definition,
        "ST\t0\tA>C\t10",
        "ST\t0\tG>T\t5",
        get_layout('PSC').definition,
        "PSC\t0\tS1\t1\t2\t3\t4\t5\t6\t30.0\t7",
        "PSC\t0\tS2\t1\t2\t3\t4\t5\t6\t40.0\t7",
        get_layout('PSI').definition,
        "PSI\t0\tS2\t3\t1\t0\t0.25\t1\t1",
        get_layout('DP').definition,
        "DP\t0\t10\t5\t50.000000\t5\t50.000000",
        "DP\t0\t30\t5\t50.000000\t5\t50.000000",
    ]


class TestCombineStats(unittest.TestCase):
    """Test merging of two parsed reports."""

    def setUp(self):
        """Parse the two reports."""
        self.a = parse_stats_lines(report_a(), 'a.chk')
        self.b = parse_stats_lines(report_b(), 'b.chk')
        self.report = combine_stats([self.a, self.b])

    def test_sources(self):
        self.assertEqual(self.report.sources, ['a.chk', 'b.chk'])
        self.assertEqual(self.report.n_files, 2)
        self.assertEqual(self.report.file_ids(), ['0'])

    def test_summary_numbers(self):
        """Counts are summed, the number of samples is not."""
        self.assertEqual(self.report.get_value('0', 'number of samples:'), 2)
        self.assertEqual(self.report.get_value('0', 'number of records:'), 200)
        self.assertEqual(self.report.get_value('0', 'number of SNPs:'), 185)
        self.assertEqual(self.report.get_value('0', 'number of indels:'), 15)

    def test_tstv(self):
        self.assertEqual(self.report.get_values('TSTV', '0'), [[120, 60, 2.0, 120, 60, 2.0]])

    def test_per_sample_average_depth(self):
        psc = {rec[0]: rec for rec in self.report.get_values('PSC', '0')}
        self.assertAlmostEqual(psc['S1'][7], 20.0)
        self.assertAlmostEqual(psc['S2'][7], 30.0)
        self.assertEqual(psc['S1'][1:7], [11, 22, 33, 64, 35, 11])

    def test_keyed_unions(self):
        idd = self.report.get_values('IDD', '0')
        self.assertEqual([rec[0] for rec in idd], ['-2', '-1', '1', '3'])
        self.assertEqual(idd[2], ['1', 6])
        st = self.report.get_values('ST', '0')
        self.assertEqual(st, [['A>C', 50], ['C>T', 60], ['G>T', 5]])

    def test_sections_only_in_one_report(self):
        """Sections missing from later reports are carried over unchanged."""
        self.assertEqual(self.report.get_values('SiS', '0'), self.a.table['SiS']['0'])
        self.assertEqual(self.report.get_values('XYZ', '0'), [['foo', 2]])

    def test_depth_distribution(self):
        dp = self.report.get_values('DP', '0')
        self.assertEqual([rec[0] for rec in dp], ['10', '20', '30'])
        self.assertEqual([rec[1] for rec in dp], [10, 5, 5])
        self.assertEqual([rec[2] for rec in dp], [50.0, 25.0, 25.0])

    def test_file_names_reconciled(self):
        self.assertEqual(self.report.file_names('0'), ['sample*.vcf.gz'])
        lines = provenance_lines(self.report)
        self.assertEqual(lines[0], "The vcfstats outputs have been merged as follows:")
        self.assertIn('\t\tsampleA.vcf.gz', lines)
        self.assertIn('\t\tsampleB.vcf.gz', lines)

    def test_inputs_untouched(self):
        """Merging leaves the parsed inputs and the earlier report unchanged."""
        self.assertEqual(self.a.table, parse_stats_lines(report_a()).table)
        self.assertEqual(self.b.table, parse_stats_lines(report_b()).table)

        first = CombinedReport.from_stats_file(self.a)
        before = copy.deepcopy(first.table)
        merged = merge_stats(first, self.b)
        self.assertEqual(first.table, before)
        self.assertEqual(first.n_files, 1)
        self.assertEqual(merged.n_files, 2)

    def test_self_merge_doubles_counts(self):
        """Merging a report with itself doubles counts and keeps ratios and averages."""
        report = combine_stats([self.a, self.a])
        self.assertEqual(report.get_value('0', 'number of samples:'), 2)
        self.assertEqual(report.get_value('0', 'number of SNPs:'), 280)
        self.assertEqual(report.get_values('TSTV', '0'), [[200, 100, 2.0, 200, 100, 2.0]])
        self.assertEqual(report.get_values('IDD', '0'), [['-2', 6], ['1', 10], ['3', 4]])
        psc = report.get_values('PSC', '0')
        self.assertEqual([rec[7] for rec in psc], [10.0, 20.0])
        self.assertEqual(psc[0][1:7], [20, 40, 60, 120, 60, 10])
        self.assertEqual(report.file_names('0'), ['sampleA.vcf.gz'])

    def test_missing_sample(self):
        """A sample absent from the first report stops the merge."""
        lines = report_b()
        lines[lines.index("PSI\t0\tS2\t3\t1\t0\t0.25\t1\t1")] = "PSI\t0\tS9\t3\t1\t0\t0.25\t1\t1"
        c = parse_stats_lines(lines, 'c.chk')
        with self.assertRaises(MissingSampleError) as ctx:
            combine_stats([self.a, c])
        self.assertEqual(ctx.exception.sample, 'S9')

    def test_no_id_section(self):
        lines = [SIGNATURE, "SN\t0\tnumber of samples:\t2"]
        with self.assertRaises(FormatError):
            combine_stats([parse_stats_lines(lines)])

    def test_no_reports(self):
        with self.assertRaises(FormatError):
            combine_stats([])


class TestReportWriter(unittest.TestCase):
    """Test writing a combined report."""

    def setUp(self):
        """Combine the two reports."""
        self.report = combine_stats([parse_stats_lines(report_a(), 'a.chk'),
                                     parse_stats_lines(report_b(), 'b.chk')])

    def test_format_field(self):
        self.assertEqual(format_field(15.0), '15')
        self.assertEqual(format_field(0.875), '0.875')
        self.assertEqual(format_field(2.0, 2), '2.00')
        self.assertEqual(format_field(0.66666, 4), '0.6667')
        self.assertEqual(format_field('>500'), '>500')
        self.assertEqual(format_field(12), '12')

    def test_round_trip(self):
        """The written report parses back to the same tables."""
        text = render_combined_report(self.report, 'vcfStatsUtils merge a.chk b.chk')
        parsed = parse_stats_lines(text.splitlines())
        self.assertEqual(parsed.table, self.report.table)

    def test_layout(self):
        text = render_combined_report(self.report, 'vcfStatsUtils merge a.chk b.chk')
        lines = text.splitlines()
        self.assertEqual(lines[0], "# This file was produced by plot-vcfstats, the command line was:")
        self.assertEqual(lines[1], "#   vcfStatsUtils merge a.chk b.chk")

        id_line = lines.index("ID\t0\tsample*.vcf.gz")
        sn_line = lines.index("SN\t0\tnumber of samples:\t2")
        tstv_line = lines.index("TSTV\t0\t120\t60\t2.00\t120\t60\t2.00")
        self.assertLess(id_line, sn_line)
        self.assertLess(sn_line, tstv_line)

        self.assertIn(get_layout('PSC').definition, lines)
        self.assertIn("PSI\t0\tS2\t4\t4\t0\t0.50\t3\t1", lines)
        self.assertIn("# XYZ\t[2]id\t[3]key\t[4]count", lines)
        self.assertEqual(lines[-1], "XYZ\t0\tfoo\t2")

    def test_debug_section_not_written(self):
        """DBG lines of the first report are not carried into the output."""
        lines = report_a() + ["# DBG\t[2]id\t[3]msg", "DBG\t0\tmerge step 1"]
        report = combine_stats([parse_stats_lines(lines, 'a.chk'),
                                parse_stats_lines(report_b(), 'b.chk')])
        self.assertIn('DBG', report.table)
        text = render_combined_report(report)
        self.assertFalse(any(line.startswith('DBG') for line in text.splitlines()))
        self.assertNotIn('# DBG', text)
        self.assertIn("XYZ\t0\tfoo\t2", text.splitlines())

    def test_merge_written_report_again(self):
        """A written report can itself be merged."""
        text = render_combined_report(self.report)
        again = combine_stats([parse_stats_lines(text.splitlines(), 'ab.chk'),
                               parse_stats_lines(report_b(), 'b.chk')])
        self.assertEqual(again.get_value('0', 'number of SNPs:'), 230)
        self.assertEqual(again.file_names('0'), ['sample*.vcf.gz'])

    def test_write_to_handle(self):
        handle = io.StringIO()
        write_combined_report(self.report, handle)
        self.assertEqual(handle.getvalue(), render_combined_report(self.report))


class TestCombineStatsFiles(unittest.TestCase):
    """Test combining reports from disk."""

    def setUp(self):
        """Set up test environment."""
        self.temp_dir = tempfile.mkdtemp()
        self.temp_path = Path(self.temp_dir)

    def tearDown(self):
        """Clean up test environment."""
        shutil.rmtree(self.temp_dir)

    def _write(self, name, lines):
        path = self.temp_path / name
        with open(path, 'w') as f:
            f.write('\n'.join(lines) + '\n')
        return path

    def test_combine_files(self):
        paths = [self._write('a.chk', report_a()), self._write('b.chk', report_b())]
        report = combine_stats_files(paths)
        self.assertEqual(report.sources, [str(p) for p in paths])
        self.assertEqual(report.get_value('0', 'number of records:'), 200)

    def test_bad_file_aborts_before_merging(self):
        paths = [self._write('a.chk', report_a()), self._write('bad.chk', ['not a report'])]
        with self.assertRaises(FormatError):
            combine_stats_files(paths)


if __name__ == '__main__':
    unittest.main()
