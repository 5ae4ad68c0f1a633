import math
import unittest

import numpy as np

from capwise.core.distribution import (
    build_percentile_table,
    cdf_sample,
    histogram,
    percentile,
    probability_positive,
    summarize,
)
from capwise.core.monte_carlo_validation import validate_distribution


class PercentileTests(unittest.TestCase):
    def test_linear_interpolation_between_ranks(self) -> None:
        values = [4.0, 1.0, 3.0, 2.0]
        self.assertAlmostEqual(percentile(values, 50), 2.5)
        self.assertAlmostEqual(percentile(values, 10), 1.3)
        self.assertAlmostEqual(percentile(values, 0), 1.0)
        self.assertAlmostEqual(percentile(values, 100), 4.0)

    def test_exact_rank_needs_no_interpolation(self) -> None:
        self.assertEqual(percentile([10.0, 20.0, 30.0], 50), 20.0)

    def test_monotone_in_level(self) -> None:
        rng = np.random.default_rng(5)
        levels = list(range(0, 101, 5))
        for size in (1, 2, 7, 250):
            values = rng.normal(0.0, 1_000.0, size=size)
            results = [percentile(values, p) for p in levels]
            for lower, upper in zip(results, results[1:]):
                self.assertLessEqual(lower, upper)

    def test_empty_is_nan(self) -> None:
        self.assertTrue(math.isnan(percentile([], 50)))


class HistogramTests(unittest.TestCase):
    def test_mass_is_conserved(self) -> None:
        rng = np.random.default_rng(9)
        values = rng.normal(size=1_003)
        for bins in (1, 2, 10, 22, 64):
            result = histogram(values, bins)
            self.assertEqual(len(result), bins)
            self.assertEqual(sum(b.count for b in result), len(values))

    def test_bins_span_min_to_max(self) -> None:
        result = histogram([0.0, 2.5, 10.0], 4)
        self.assertEqual(result[0].lower, 0.0)
        self.assertAlmostEqual(result[-1].upper, 10.0)
        self.assertEqual([b.count for b in result], [1, 1, 0, 1])

    def test_degenerate_span(self) -> None:
        for bins in (1, 5, 22):
            result = histogram([5.0, 5.0, 5.0], bins)
            self.assertEqual(result[0].count, 3)
            self.assertEqual(sum(b.count for b in result), 3)
            self.assertAlmostEqual(result[-1].upper - result[0].lower, 1.0)

    def test_empty_and_invalid_bin_count(self) -> None:
        self.assertEqual(histogram([], 10), [])
        self.assertEqual(len(histogram([1.0, 2.0], 0)), 1)


class CdfTests(unittest.TestCase):
    def test_sampled_ranks(self) -> None:
        points = cdf_sample(list(range(9, -1, -1)), 4)
        self.assertEqual([p.value for p in points], [0.0, 3.0, 6.0, 9.0])
        self.assertEqual([p.probability for p in points], [0.0, 3 / 9, 6 / 9, 1.0])

    def test_single_point_and_single_value(self) -> None:
        points = cdf_sample([3.0, 1.0, 2.0], 1)
        self.assertEqual(len(points), 1)
        self.assertEqual(points[0].value, 3.0)
        self.assertEqual(points[0].probability, 1.0)
        single = cdf_sample([7.0], 5)
        self.assertEqual(len(single), 5)
        self.assertTrue(all(p.value == 7.0 and p.probability == 1.0 for p in single))


class SummaryTests(unittest.TestCase):
    def test_probability_positive_is_strict(self) -> None:
        self.assertEqual(probability_positive([-1.0, 0.0, 1.0, 2.0]), 50.0)

    def test_headline_statistics(self) -> None:
        summary = summarize([1.0, 2.0, 3.0, 4.0])
        self.assertFalse(summary.is_empty)
        self.assertEqual(summary.count, 4)
        self.assertAlmostEqual(summary.mean, 2.5)
        self.assertAlmostEqual(summary.std, math.sqrt(1.25))
        self.assertAlmostEqual(summary.p10, 1.3)
        self.assertAlmostEqual(summary.p50, 2.5)
        self.assertAlmostEqual(summary.p90, 3.7)
        self.assertEqual(summary.probability_positive, 100.0)
        self.assertEqual(len(summary.histogram), 22)
        self.assertEqual(len(summary.cdf), 45)
        self.assertEqual(list(summary.histogram_frame().columns), ["lower", "upper", "count"])

    def test_empty_outcomes_give_no_data_summary(self) -> None:
        summary = summarize([])
        self.assertTrue(summary.is_empty)
        self.assertTrue(math.isnan(summary.mean))
        self.assertEqual(summary.histogram, [])
        self.assertEqual(summary.cdf, [])
        self.assertTrue(summary.summary_frame().empty)

    def test_each_call_builds_a_new_summary(self) -> None:
        values = [1.0, -2.0, 3.0]
        first = summarize(values)
        second = summarize(values)
        self.assertIsNot(first, second)
        self.assertEqual(first, second)
        with self.assertRaises(Exception):
            first.mean = 0.0  # type: ignore[misc]

    def test_custom_percentiles_and_ladder(self) -> None:
        values = np.arange(101, dtype=float)
        summary = summarize(values, percentiles=(5, 95))
        self.assertEqual(summary.percentiles, {5: 5.0, 95: 95.0})
        ladder = build_percentile_table(values)
        self.assertEqual(len(ladder), 19)
        self.assertEqual(ladder["npv"].iloc[0], 5.0)

    def test_fractional_percentiles_keep_their_own_levels(self) -> None:
        summary = summarize(np.arange(101, dtype=float), percentiles=(2.5, 2.9, 97.5))
        self.assertEqual(sorted(summary.percentiles), [2.5, 2.9, 97.5])
        self.assertAlmostEqual(summary.percentile(2.5), 2.5)
        self.assertAlmostEqual(summary.percentile(2.9), 2.9)
        self.assertAlmostEqual(summary.percentile(97.5), 97.5)
        self.assertTrue(math.isnan(summary.p10))
        metrics = list(summary.summary_frame()["metric"])
        self.assertIn("p2.5", metrics)
        self.assertIn("p97.5", metrics)


class DistributionValidationTests(unittest.TestCase):
    def test_empty_and_non_finite_fail(self) -> None:
        self.assertEqual(validate_distribution([]).status, "FAIL")
        result = validate_distribution([1.0, float("nan")])
        self.assertEqual(result.failed_checks, ["nan_or_inf_npv"])

    def test_warnings(self) -> None:
        flat = validate_distribution([5.0, 5.0, 5.0])
        self.assertEqual(flat.status, "PASS")
        self.assertIn("zero_dispersion", flat.warnings)
        losing = validate_distribution([-3.0, -2.0, 1.0])
        self.assertIn("majority_of_trials_lose_value", losing.to_dict()["warnings"])


if __name__ == "__main__":
    unittest.main()
