"""
Integration tests for the analysis pipeline and reporting.
"""
import json
import os
import shutil
import tempfile
import unittest

from burglary_spatial_analysis.analysis.pipeline import AnalysisReport, run_analysis
from burglary_spatial_analysis.reporting.output_manager import save_report
from burglary_spatial_analysis.reporting.summaries import format_moran, format_report

from helpers import burglary_grid

COVARIATES = ['deprivation', 'students']


class TestRunAnalysis(unittest.TestCase):
    """Tests for the end-to-end analysis."""

    @classmethod
    def setUpClass(cls):
        """Run the analysis once for all tests."""
        cls.gdf = burglary_grid()
        cls.report = run_analysis(
            cls.gdf,
            outcome='burglary_rate',
            covariates=COVARIATES,
            count='burglary_count',
            contiguity='queen',
            run_ml=True,
        )

    def test_report_contents(self):
        report = self.report

        self.assertIsInstance(report, AnalysisReport)
        self.assertEqual(report.n_units, 36)
        self.assertEqual(report.covariates, COVARIATES)
        self.assertEqual(report.weights.n, 36)
        self.assertIsNotNone(report.outcome_moran)
        self.assertIsNotNone(report.residual_moran)
        self.assertIsNotNone(report.lm_tests)
        self.assertIsNotNone(report.slx)
        self.assertIsNotNone(report.ml_lag)
        self.assertIsNotNone(report.ml_error)
        self.assertIsNotNone(report.count_model)
        self.assertIn(
            report.suggested_specification,
            ('ols', 'spatial_lag', 'spatial_error', 'spatial_sarma')
        )

    def test_outcome_is_spatially_clustered(self):
        # The burglary rate follows the row-wise deprivation gradient
        self.assertGreater(self.report.outcome_moran.I, 0)
        self.assertEqual(self.report.outcome_moran.pattern, 'clustered')

    def test_model_comparison(self):
        comparison = self.report.model_comparison()

        self.assertEqual(
            list(comparison.index), ['ols', 'slx', 'ml_lag', 'ml_error', 'negative_binomial']
        )
        self.assertIn('aic', comparison.columns)

    def test_format_report(self):
        text = format_report(self.report)

        self.assertIn('Burglary Spatial Analysis Summary', text)
        self.assertIn('OLS Model Summary', text)
        self.assertIn("Moran's I: OLS residuals", text)
        self.assertIn('Lagrange Multiplier Diagnostics', text)
        self.assertIn('SLX Model Summary', text)
        self.assertIn('Spatial Lag Model Summary (Method: ML)', text)
        self.assertIn('Spatial Error Model Summary (Method: ML)', text)
        self.assertIn('Count Model Summary', text)

    def test_format_moran(self):
        text = format_moran(self.report.outcome_moran, "Moran's I: outcome")

        self.assertIn('randomization null', text)
        self.assertIn('Pattern: clustered', text)

    def test_save_report(self):
        temp_dir = tempfile.mkdtemp()
        try:
            output_dir = save_report(self.report, temp_dir)

            files = set(os.listdir(output_dir))
            for name in ('summary.txt', 'spatial_results.json', 'ols_coefficients.csv',
                         'lm_tests.csv', 'slx_coefficients.csv', 'slx_impacts.csv',
                         'ml_lag_coefficients.csv', 'count_model_coefficients.csv',
                         'manifest.json'):
                self.assertIn(name, files)

            with open(os.path.join(output_dir, 'spatial_results.json')) as f:
                results = json.load(f)
            self.assertEqual(results['n_units'], 36)
            self.assertEqual(results['ml_lag']['parameter'], 'rho')
        finally:
            shutil.rmtree(temp_dir, ignore_errors=True)


class TestDegenerateSteps(unittest.TestCase):
    """Degenerate diagnostics are noted rather than fatal."""

    def test_constant_outcome_noted(self):
        gdf = burglary_grid().assign(burglary_rate=5.0)

        report = run_analysis(gdf, outcome='burglary_rate', covariates=COVARIATES)

        self.assertIsNone(report.outcome_moran)
        self.assertTrue(any("Moran's I of the outcome" in note for note in report.notes))


if __name__ == '__main__':
    unittest.main()
