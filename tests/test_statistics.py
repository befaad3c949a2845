"""
Tests for chain_fold.utils.statistics
"""

import json
import math
import unittest

import numpy as np

from chain_fold.algorithms.classical import run_deterministic_fold
from chain_fold.core.chain import ColorTag, initial_chain
from chain_fold.core.errors import InvalidInputError
from chain_fold.core.scoring import score_correctness
from chain_fold.core.target import build_target
from chain_fold.simulation import SimulationConfig, run_simulation
from chain_fold.utils.statistics import (
    _average_ranks,
    bootstrap_ci,
    cohens_d,
    compare_final_scores,
    correctness_trend,
    expected_correctness,
    summary_table,
    wilcoxon_signed_rank,
)


class TestBootstrap(unittest.TestCase):

    def test_constant_data(self):
        point, lo, hi = bootstrap_ci(np.full(20, 42.0), seed=0)
        self.assertEqual((point, lo, hi), (42.0, 42.0, 42.0))

    def test_interval_contains_mean(self):
        data = np.random.default_rng(1).normal(10.0, 2.0, size=200)
        point, lo, hi = bootstrap_ci(data, seed=1)
        self.assertLessEqual(lo, point)
        self.assertLessEqual(point, hi)
        self.assertAlmostEqual(point, float(np.mean(data)))

    def test_empty_raises(self):
        with self.assertRaises(InvalidInputError):
            bootstrap_ci(np.array([]))


class TestExpectedCorrectness(unittest.TestCase):

    def test_curve(self):
        curve = expected_correctness(10, 0.5)
        self.assertEqual(curve.shape, (11,))
        baseline = score_correctness(initial_chain(10, ColorTag.QUANTUM_INITIAL), build_target(10))
        self.assertEqual(curve[0], baseline)
        for s in range(1, 11):
            self.assertAlmostEqual(curve[s], 100.0 * s / 10 * 0.5)

    def test_non_decreasing(self):
        for p in (0.1, 0.4, 1.0):
            self.assertTrue(np.all(np.diff(expected_correctness(10, p)) >= 0))


class TestCorrectnessTrend(unittest.TestCase):

    def test_full_probability_ends_at_100(self):
        trend = correctness_trend(10, 1.0, n_trials=30, seed=3)
        self.assertEqual(trend.scores.shape, (30, 11))
        self.assertEqual(trend.mean[-1], 100.0)
        self.assertEqual(trend.std[-1], 0.0)

    def test_mean_tracks_expectation(self):
        trend = correctness_trend(10, 0.6, n_trials=400, seed=7)
        np.testing.assert_allclose(trend.mean, trend.expected, atol=5.0)
        self.assertEqual(trend.monotonic_violations(tolerance=1.0), [])
        self.assertTrue(np.all(trend.ci_lower <= trend.mean + 1e-9))
        self.assertTrue(np.all(trend.mean <= trend.ci_upper + 1e-9))

    def test_reproducible_with_seed(self):
        a = correctness_trend(6, 0.5, n_trials=10, seed=11)
        b = correctness_trend(6, 0.5, n_trials=10, seed=11)
        np.testing.assert_array_equal(a.scores, b.scores)

    def test_invalid_trials(self):
        with self.assertRaises(InvalidInputError):
            correctness_trend(10, 0.5, n_trials=0)

    def test_monotonic_violations_reports_drops(self):
        trend = correctness_trend(4, 0.5, n_trials=2, seed=0)
        trend.mean = np.array([0.0, 10.0, 5.0, 20.0])
        self.assertEqual(trend.monotonic_violations(), [2])
        self.assertEqual(trend.monotonic_violations(tolerance=6.0), [])


class TestComparisons(unittest.TestCase):

    def test_cohens_d(self):
        self.assertEqual(cohens_d([1, 2, 3], [1, 2, 3]), 0.0)
        self.assertGreater(cohens_d([5, 6, 7], [1, 2, 3]), 0.0)
        self.assertEqual(cohens_d([1], [2, 3]), 0.0)

    def test_cohens_d_constant_groups(self):
        self.assertEqual(cohens_d([5, 5, 5], [3, 3, 3]), math.inf)
        self.assertEqual(cohens_d([3, 3], [5, 5]), -math.inf)
        self.assertEqual(cohens_d([2, 2], [2, 2]), 0.0)

    def test_average_ranks_share_ties(self):
        ranks, ties = _average_ranks(np.array([1.0, 2.0, 2.0, 5.0]))
        np.testing.assert_array_equal(ranks, [1.0, 2.5, 2.5, 4.0])
        np.testing.assert_array_equal(ties, [1, 2, 1])

    def test_wilcoxon_identical(self):
        self.assertEqual(wilcoxon_signed_rank([1, 2, 3], [1, 2, 3]), (0.0, 1.0))

    def test_wilcoxon_shifted(self):
        x = np.arange(30, dtype=float) + 100.0
        y = np.arange(30, dtype=float) * 0.5
        w, p = wilcoxon_signed_rank(x, y)
        self.assertEqual(w, 0.0)
        self.assertLess(p, 0.001)

    def test_wilcoxon_all_tied_differences(self):
        # every pair differs by the same amount, as with a constant classical score
        w, p = wilcoxon_signed_rank(np.full(10, 100.0), np.full(10, 30.0))
        self.assertEqual(w, 0.0)
        self.assertLess(p, 0.01)
        self.assertGreater(p, 0.0)

    def test_wilcoxon_shape_mismatch(self):
        with self.assertRaises(InvalidInputError):
            wilcoxon_signed_rank([1, 2], [1, 2, 3])

    def test_compare_final_scores(self):
        cmp = compare_final_scores(np.array([40.0, 50.0, 60.0, 50.0]), 20.0)
        self.assertEqual(cmp.classical_final, 20.0)
        self.assertEqual(cmp.quantum_mean, 50.0)
        # s_pooled = sqrt(3 * (200/3) / 6); the classical group adds no variance
        self.assertAlmostEqual(cmp.effect_size, 30.0 / math.sqrt(200.0 / 6))
        self.assertEqual(cmp.wilcoxon_w, 0.0)
        self.assertEqual(cmp.to_dict()["effect_size"], cmp.effect_size)

    def test_constant_scores_export_null_effect(self):
        cmp = compare_final_scores(np.full(5, 100.0), 20.0)
        self.assertEqual(cmp.effect_size, math.inf)
        self.assertIsNone(cmp.to_dict()["effect_size"])


class TestTrendComparison(unittest.TestCase):

    def test_trend_compares_final_step_with_classical(self):
        trend = correctness_trend(10, 1.0, n_trials=12, seed=4)
        classical = run_deterministic_fold(10, build_target(10)).final_score
        cmp = trend.comparison
        self.assertLess(classical, 100.0)
        self.assertEqual(cmp.classical_final, classical)
        self.assertEqual(cmp.quantum_mean, 100.0)
        self.assertEqual(cmp.effect_size, math.inf)
        self.assertLess(cmp.p_value, 0.01)
        json.dumps(cmp.to_dict())

    def test_partial_probability_has_finite_effect(self):
        trend = correctness_trend(10, 0.5, n_trials=50, seed=8)
        cmp = trend.comparison
        np.testing.assert_allclose(cmp.quantum_mean, trend.mean[-1])
        self.assertTrue(math.isfinite(cmp.effect_size))
        self.assertGreaterEqual(cmp.p_value, 0.0)
        self.assertLessEqual(cmp.p_value, 1.0)


class TestSummaryTable(unittest.TestCase):

    def test_rows(self):
        result = run_simulation(SimulationConfig(probability=1.0, seed=2))
        table = summary_table(result)
        lines = table.splitlines()
        self.assertEqual(len(lines), 3 + 11 + 2)
        self.assertIn("Quantum %", lines[1])
        self.assertIn("final quantum 100.00%", lines[-1])
        # last quantum row: all ten units on target, no classical score
        self.assertEqual(lines[13].split(), ["10", "100.00", "10"])


if __name__ == "__main__":
    unittest.main()
