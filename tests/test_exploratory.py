"""
Unit tests for the exploratory analysis functions.
"""
import unittest

import numpy as np
import pandas as pd

from burglary_spatial_analysis.analysis.exploratory import (
    correlation_tests, describe_variables, variance_inflation
)
from burglary_spatial_analysis.core.exceptions import ValidationError


class TestExploratory(unittest.TestCase):
    """Tests for descriptive statistics, correlations and VIF."""

    def setUp(self):
        """Set up test fixtures."""
        rng = np.random.RandomState(3)
        n = 100
        self.df = pd.DataFrame({
            'strong': rng.normal(0, 1, n),
            'weak': rng.normal(0, 1, n),
        })
        self.df['rate'] = 3.0 * self.df['strong'] + 0.2 * self.df['weak'] + rng.normal(0, 0.5, n)
        self.df['near_copy'] = self.df['strong'] + rng.normal(0, 0.01, n)

    def test_describe_variables(self):
        table = describe_variables(self.df, ['rate', 'strong'])

        self.assertEqual(list(table.index), ['rate', 'strong'])
        for column in ('mean', 'std', 'skewness', 'kurtosis', 'missing'):
            self.assertIn(column, table.columns)
        self.assertEqual(table.loc['rate', 'count'], 100)

    def test_describe_counts_missing(self):
        df = self.df.copy()
        df.loc[0, 'weak'] = np.nan

        self.assertEqual(describe_variables(df, ['weak']).loc['weak', 'missing'], 1)

    def test_correlations_sorted_by_magnitude(self):
        result = correlation_tests(self.df, 'rate', ['weak', 'strong'], method='pearson')

        self.assertEqual(list(result['covariate']), ['strong', 'weak'])
        self.assertTrue(result.loc[0, 'significant'])
        self.assertEqual(result.loc[0, 'n'], 100)

    def test_both_methods(self):
        result = correlation_tests(self.df, 'rate', ['weak', 'strong'], method='both')

        self.assertEqual(len(result), 4)
        self.assertEqual(set(result['method']), {'pearson', 'spearman'})

    def test_constant_covariate_skipped(self):
        df = self.df.assign(flat=1.0)

        result = correlation_tests(df, 'rate', ['flat'], method='pearson')

        self.assertTrue(result.empty)

    def test_invalid_method_raises(self):
        with self.assertRaises(ValidationError):
            correlation_tests(self.df, 'rate', ['strong'], method='kendall')

    def test_variance_inflation(self):
        vif = variance_inflation(self.df, ['strong', 'weak', 'near_copy'])

        self.assertEqual(list(vif.index), ['strong', 'weak', 'near_copy'])
        self.assertGreater(vif['strong'], 10)
        self.assertLess(vif['weak'], 2)

    def test_variance_inflation_single_covariate(self):
        vif = variance_inflation(self.df, ['strong'])

        self.assertEqual(vif['strong'], 1.0)


if __name__ == '__main__':
    unittest.main()
