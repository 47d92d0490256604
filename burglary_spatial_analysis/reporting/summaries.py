"""
Plain-text summaries for Burglary Spatial Analysis results.
"""
import logging
from typing import Optional

import numpy as np
import pandas as pd

from burglary_spatial_analysis.models.regression import CountModelResult, FittedModel
from burglary_spatial_analysis.models.spatial.autocorrelation import MoranResult
from burglary_spatial_analysis.models.spatial.diagnostics import LMDiagnostics
from burglary_spatial_analysis.models.spatial.lag_model import MLSpatialResult, SLXResult

# Initialize logger
logger = logging.getLogger(__name__)

RULE = "=" * 60
SUBRULE = "-" * 60


def _fmt(value, spec: str = '.4f') -> str:
    if value is None or (isinstance(value, float) and np.isnan(value)):
        return 'n/a'
    return format(value, spec)


def _coefficient_rows(table: pd.DataFrame) -> str:
    rows = f"{'Variable':<24} {'Coefficient':>12} {'Std Error':>12} {'p-value':>10}\n"
    rows += SUBRULE + "\n"
    for name, row in table.iterrows():
        rows += (
            f"{str(name):<24} {_fmt(row['coefficient']):>12} "
            f"{_fmt(row['std_error']):>12} {_fmt(row['p_value']):>10}\n"
        )
    return rows


def format_ols(model: FittedModel) -> str:
    summary = "OLS Model Summary\n"
    summary += RULE + "\n\n"
    summary += f"Dependent Variable: {model.outcome}\n"
    summary += f"Independent Variables: {', '.join(model.covariates)}\n\n"
    summary += f"R-squared: {model.r_squared:.4f}\n"
    summary += f"Adjusted R-squared: {model.adj_r_squared:.4f}\n"
    summary += f"AIC: {model.aic:.4f}\n"
    summary += f"BIC: {model.bic:.4f}\n"
    summary += f"Number of Observations: {model.n_obs}\n\n"
    summary += "Coefficients:\n"
    summary += _coefficient_rows(model.coefficient_table())
    return summary


def format_moran(result: MoranResult, title: Optional[str] = None) -> str:
    title = title or f"Moran's I: {result.variable or 'variable'}"
    summary = f"{title}\n"
    summary += "-" * len(title) + "\n"
    summary += f"I: {result.I:.4f}\n"
    summary += f"E[I]: {result.expected_I:.4f}\n"
    summary += f"Var[I]: {result.variance:.6f}\n"
    summary += f"z-score: {result.z_score:.4f}\n"
    summary += f"p-value: {result.p_value:.4f} ({result.null} null"
    if result.permutations:
        summary += f", {result.permutations} permutations"
    summary += ")\n"
    summary += f"Pattern: {result.pattern}\n"
    return summary


def format_lm_tests(diagnostics: LMDiagnostics, alpha: float = 0.05) -> str:
    summary = "Lagrange Multiplier Diagnostics\n"
    summary += "-------------------------------\n"
    labels = {
        'lm_error': 'LM Error',
        'lm_lag': 'LM Lag',
        'robust_lm_error': 'Robust LM Error',
        'robust_lm_lag': 'Robust LM Lag',
        'lm_sarma': 'LM SARMA',
    }
    for stat in diagnostics.statistics():
        summary += (
            f"{labels[stat.name]}: {stat.statistic:.4f} "
            f"(df={stat.df}, p-value: {stat.p_value:.4f})\n"
        )
    summary += f"Recommended model: {diagnostics.suggest_specification(alpha)}\n"
    return summary


def format_slx(result: SLXResult) -> str:
    summary = "SLX Model Summary (Method: OLS)\n"
    summary += RULE + "\n\n"
    summary += f"Dependent Variable: {result.model.outcome}\n"
    summary += f"R-squared: {result.r_squared:.4f}\n"
    summary += f"AIC: {result.aic:.4f}\n"
    summary += f"RSS: {result.rss:.4f}\n"
    summary += f"Number of Observations: {result.n_obs}\n"
    if result.flagged_lag_columns:
        summary += f"Zero-variance lag terms: {', '.join(result.flagged_lag_columns)}\n"
    summary += "\nCoefficients:\n"
    summary += _coefficient_rows(result.coefficient_table())

    summary += "\nImpacts:\n"
    summary += f"{'Variable':<24} {'Direct':>12} {'Indirect':>12} {'Total':>12}\n"
    summary += SUBRULE + "\n"
    for name, row in result.impacts().iterrows():
        summary += (
            f"{str(name):<24} {_fmt(row['direct']):>12} "
            f"{_fmt(row['indirect']):>12} {_fmt(row['total']):>12}\n"
        )
    return summary


def format_ml_model(result: MLSpatialResult) -> str:
    title = 'Spatial Lag' if result.model_type == 'spatial_lag' else 'Spatial Error'
    summary = f"{title} Model Summary (Method: ML)\n"
    summary += RULE + "\n\n"
    summary += f"Pseudo R-squared: {_fmt(result.pseudo_r_squared)}\n"
    summary += f"AIC: {_fmt(result.aic)}\n"
    summary += f"Log-Likelihood: {_fmt(result.log_likelihood)}\n"
    summary += f"Number of Observations: {result.n_obs}\n\n"
    summary += (
        f"{title} ({result.spatial_parameter_name}): {result.spatial_parameter:.4f} "
        f"(p-value: {result.spatial_p_value:.4f})\n\n"
    )
    summary += "Coefficients:\n"
    summary += _coefficient_rows(result.coefficient_table())
    return summary


def format_count_model(result: CountModelResult) -> str:
    summary = f"Count Model Summary ({result.family})\n"
    summary += RULE + "\n\n"
    summary += f"Dependent Variable: {result.outcome}\n"
    summary += f"Log-Likelihood: {result.log_likelihood:.4f}\n"
    summary += f"AIC: {result.aic:.4f}\n"
    summary += f"Pseudo R-squared: {result.pseudo_r_squared:.4f}\n"
    summary += f"Pearson dispersion: {result.dispersion:.4f}\n"
    if result.alpha is not None:
        summary += f"Alpha: {result.alpha:.4f}\n"
    if not result.converged:
        summary += "Warning: the optimiser did not converge\n"
    summary += "\nIncidence rate ratios:\n"
    for name, irr in result.incidence_rate_ratios.items():
        summary += f"{str(name):<24} {irr:>12.4f} (p-value: {_fmt(result.p_values[name])})\n"
    return summary


def format_report(report, alpha: float = 0.05) -> str:
    """
    Full plain-text summary of an ``AnalysisReport``.

    Args:
        report: Result of ``run_analysis``.
        alpha: Significance level for the model recommendation.

    Returns:
        Multi-section text summary.
    """
    logger.info("Formatting analysis summary")

    summary = "Burglary Spatial Analysis Summary\n"
    summary += "=================================\n\n"
    summary += f"Outcome: {report.outcome}\n"
    summary += f"Covariates: {', '.join(report.covariates)}\n"
    summary += f"Areal units: {report.n_units}\n"
    summary += f"Contiguity: {report.contiguity} ({len(report.weights.islands)} islands)\n"
    summary += f"Generated: {report.timestamp}\n\n"

    summary += "Descriptive Statistics\n"
    summary += "----------------------\n"
    summary += report.descriptives[['mean', 'std', 'min', 'max', 'skewness']].round(4).to_string()
    summary += "\n\n"

    if not report.correlations.empty:
        summary += "Correlations with Outcome\n"
        summary += "-------------------------\n"
        summary += report.correlations.round(4).to_string(index=False)
        summary += "\n\n"

    summary += format_ols(report.ols) + "\n"

    if report.outcome_moran is not None:
        summary += format_moran(report.outcome_moran, "Moran's I: outcome") + "\n"
    if report.residual_moran is not None:
        summary += format_moran(report.residual_moran, "Moran's I: OLS residuals") + "\n"
    if report.lm_tests is not None:
        summary += format_lm_tests(report.lm_tests, alpha) + "\n"
    if report.slx is not None:
        summary += format_slx(report.slx) + "\n"
    for result in (report.ml_lag, report.ml_error):
        if result is not None:
            summary += format_ml_model(result) + "\n"
    if report.count_model is not None:
        summary += format_count_model(report.count_model) + "\n"

    summary += "Model Comparison\n"
    summary += "----------------\n"
    summary += report.model_comparison().round(4).to_string() + "\n"

    if report.notes:
        summary += "\nNotes\n"
        summary += "-----\n"
        for note in report.notes:
            summary += f"- {note}\n"

    return summary
