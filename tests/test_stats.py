"""Tests for bugreport_collector/stats.py"""

import json
import unittest

from bugreport_collector.parser import parse_lines
from bugreport_collector.stats import compute_stats, format_stats_json, format_stats_text
from conftest import SAMPLE_LINES


class TestComputeStats(unittest.TestCase):
    def setUp(self):
        self.metrics = parse_lines(SAMPLE_LINES)

    def test_counts_by_kind(self):
        stats = compute_stats(self.metrics)
        self.assertEqual(stats.total_sections, 5)
        self.assertEqual(stats.section_counts, {"dumpstate": 3, "dumpsys": 2})

    def test_totals_by_kind(self):
        stats = compute_stats(self.metrics)
        self.assertAlmostEqual(stats.total_seconds["dumpstate"], 66.038)
        self.assertAlmostEqual(stats.total_seconds["dumpsys"], 24.792)

    def test_slowest_sorted_descending(self):
        stats = compute_stats(self.metrics, top_n=2)
        self.assertEqual(
            stats.slowest,
            [
                ("bugreport-duration-dumpstate_board()", 44.619),
                ("bugreport-dumpsys-duration-meminfo", 24.741),
            ],
        )

    def test_top_zero_lists_nothing(self):
        self.assertEqual(compute_stats(self.metrics, top_n=0).slowest, [])

    def test_empty_input(self):
        stats = compute_stats([])
        self.assertEqual(stats.total_sections, 0)
        self.assertEqual(stats.section_counts, {})
        self.assertEqual(stats.slowest, [])


class TestFormatStats(unittest.TestCase):
    def test_text(self):
        text = format_stats_text(compute_stats(parse_lines(SAMPLE_LINES), top_n=1))
        self.assertIn("Total sections: 5", text)
        self.assertIn("dumpstate", text)
        self.assertIn("Slowest sections (1):", text)
        self.assertIn("44.619s  bugreport-duration-dumpstate_board()", text)

    def test_text_empty(self):
        self.assertIn("No duration sections.", format_stats_text(compute_stats([])))

    def test_json(self):
        parsed = json.loads(format_stats_json(compute_stats(parse_lines(SAMPLE_LINES), top_n=1)))
        self.assertEqual(parsed["total_sections"], 5)
        self.assertEqual(parsed["section_counts"]["dumpsys"], 2)
        self.assertEqual(parsed["slowest"][0]["key"], "bugreport-duration-dumpstate_board()")


if __name__ == "__main__":
    unittest.main()
