"""
Unit tests for the Lagrange Multiplier diagnostics.
"""
import unittest

import numpy as np

from burglary_spatial_analysis.core.exceptions import DegenerateStatisticError
from burglary_spatial_analysis.models.regression import fit_ols
from burglary_spatial_analysis.models.spatial.diagnostics import (
    LMDiagnostics, LMStatistic, lagrange_multiplier_tests
)
from burglary_spatial_analysis.models.spatial.weights import SpatialWeightMatrix

from helpers import burglary_grid


def make_diagnostics(lm_error, lm_lag, robust_lm_error, robust_lm_lag, statistics=(5.0, 5.0)):
    """LMDiagnostics from p-values of the four one-df tests."""
    err_stat, lag_stat = statistics
    return LMDiagnostics(
        lm_error=LMStatistic('lm_error', err_stat, 1, lm_error),
        lm_lag=LMStatistic('lm_lag', lag_stat, 1, lm_lag),
        robust_lm_error=LMStatistic('robust_lm_error', 1.0, 1, robust_lm_error),
        robust_lm_lag=LMStatistic('robust_lm_lag', 1.0, 1, robust_lm_lag),
        lm_sarma=LMStatistic('lm_sarma', 6.0, 2, 0.05),
    )


class TestLagrangeMultiplierTests(unittest.TestCase):
    """Tests for the LM statistics on a fitted model."""

    def setUp(self):
        """Set up test fixtures."""
        self.gdf = burglary_grid()
        self.w = SpatialWeightMatrix.from_geodataframe(self.gdf, rule='queen')
        self.model = fit_ols(self.gdf, 'burglary_rate', ['deprivation', 'students'])

    def test_all_statistics_reported(self):
        diagnostics = lagrange_multiplier_tests(self.model, self.w)

        names = [s.name for s in diagnostics.statistics()]
        self.assertEqual(
            names, ['lm_error', 'lm_lag', 'robust_lm_error', 'robust_lm_lag', 'lm_sarma']
        )
        for stat in diagnostics.statistics():
            self.assertTrue(np.isfinite(stat.statistic))
            self.assertTrue(0.0 <= stat.p_value <= 1.0)

    def test_degrees_of_freedom(self):
        diagnostics = lagrange_multiplier_tests(self.model, self.w)

        self.assertEqual(diagnostics.lm_error.df, 1)
        self.assertEqual(diagnostics.lm_lag.df, 1)
        self.assertEqual(diagnostics.robust_lm_error.df, 1)
        self.assertEqual(diagnostics.robust_lm_lag.df, 1)
        self.assertEqual(diagnostics.lm_sarma.df, 2)

    def test_to_frame(self):
        frame = lagrange_multiplier_tests(self.model, self.w).to_frame()

        self.assertEqual(list(frame.columns), ['statistic', 'df', 'p_value'])
        self.assertEqual(len(frame), 5)

    def test_row_order_of_data_does_not_matter(self):
        shuffled = self.gdf.sample(frac=1.0, random_state=5)
        model = fit_ols(shuffled, 'burglary_rate', ['deprivation', 'students'])

        original = lagrange_multiplier_tests(self.model, self.w)
        reordered = lagrange_multiplier_tests(model, self.w)

        self.assertAlmostEqual(original.lm_error.statistic, reordered.lm_error.statistic)
        self.assertAlmostEqual(original.lm_lag.statistic, reordered.lm_lag.statistic)

    def test_zero_weights_raise(self):
        w = SpatialWeightMatrix.zero_like(list(self.gdf.index))

        with self.assertRaises(DegenerateStatisticError):
            lagrange_multiplier_tests(self.model, w)


class TestSuggestSpecification(unittest.TestCase):
    """Tests for the advisory model-choice rule."""

    def test_neither_significant_is_ols(self):
        self.assertEqual(make_diagnostics(0.5, 0.5, 0.5, 0.5).suggest_specification(0.05), 'ols')

    def test_only_lag_significant(self):
        self.assertEqual(
            make_diagnostics(0.5, 0.01, 0.5, 0.5).suggest_specification(0.05), 'spatial_lag'
        )

    def test_only_error_significant(self):
        self.assertEqual(
            make_diagnostics(0.01, 0.5, 0.5, 0.5).suggest_specification(0.05), 'spatial_error'
        )

    def test_both_significant_robust_lag_decides(self):
        self.assertEqual(
            make_diagnostics(0.01, 0.01, 0.5, 0.01).suggest_specification(0.05), 'spatial_lag'
        )

    def test_both_significant_robust_error_decides(self):
        self.assertEqual(
            make_diagnostics(0.01, 0.01, 0.01, 0.5).suggest_specification(0.05), 'spatial_error'
        )

    def test_both_robust_significant_is_sarma(self):
        self.assertEqual(
            make_diagnostics(0.01, 0.01, 0.01, 0.01).suggest_specification(0.05), 'spatial_sarma'
        )

    def test_neither_robust_significant_uses_larger_statistic(self):
        diagnostics = make_diagnostics(0.01, 0.01, 0.5, 0.5, statistics=(9.0, 7.0))
        self.assertEqual(diagnostics.suggest_specification(0.05), 'spatial_error')

        diagnostics = make_diagnostics(0.01, 0.01, 0.5, 0.5, statistics=(7.0, 9.0))
        self.assertEqual(diagnostics.suggest_specification(0.05), 'spatial_lag')

    def test_statistic_significance(self):
        stat = LMStatistic('lm_lag', 4.5, 1, 0.034)

        self.assertTrue(stat.is_significant(0.05))
        self.assertFalse(stat.is_significant(0.01))


if __name__ == '__main__':
    unittest.main()
