"""
End-to-end burglary analysis for Burglary Spatial Analysis.

Chains exploratory statistics, the OLS baseline, contiguity weights,
Moran's I, the LM diagnostics and the spatial models into one report.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence

import geopandas as gpd
import pandas as pd

from burglary_spatial_analysis.core.config import config
from burglary_spatial_analysis.core.decorators import performance_tracker
from burglary_spatial_analysis.core.exceptions import (
    BurglaryAnalysisError, DegenerateStatisticError
)
from burglary_spatial_analysis.data.loaders import select_columns
from burglary_spatial_analysis.models.regression import (
    CountModelResult, FittedModel, fit_count_model, fit_ols
)
from burglary_spatial_analysis.models.spatial.autocorrelation import (
    MoranResult, global_moran, residual_moran
)
from burglary_spatial_analysis.models.spatial.diagnostics import (
    LMDiagnostics, lagrange_multiplier_tests
)
from burglary_spatial_analysis.models.spatial.error_model import fit_spatial_error_ml
from burglary_spatial_analysis.models.spatial.lag_model import (
    MLSpatialResult, SLXResult, fit_spatial_lag_ml, fit_spatial_lag_x
)
from burglary_spatial_analysis.models.spatial.weights import SpatialWeightMatrix
from burglary_spatial_analysis.analysis.exploratory import (
    correlation_tests, describe_variables, variance_inflation
)

# Initialize logger
logger = logging.getLogger(__name__)


@dataclass
class AnalysisReport:
    """Everything produced by one run of ``run_analysis``."""
    outcome: str
    covariates: List[str]
    n_units: int
    contiguity: str
    descriptives: pd.DataFrame = field(repr=False)
    correlations: pd.DataFrame = field(repr=False)
    vif: pd.Series = field(repr=False)
    weights: SpatialWeightMatrix = field(repr=False)
    ols: FittedModel = field(repr=False)
    outcome_moran: Optional[MoranResult] = None
    residual_moran: Optional[MoranResult] = None
    lm_tests: Optional[LMDiagnostics] = None
    slx: Optional[SLXResult] = None
    ml_lag: Optional[MLSpatialResult] = None
    ml_error: Optional[MLSpatialResult] = None
    count_model: Optional[CountModelResult] = None
    suggested_specification: Optional[str] = None
    notes: List[str] = field(default_factory=list)
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    def model_comparison(self) -> pd.DataFrame:
        """Fit statistics of every model estimated in this run."""
        rows = {
            'ols': {'r_squared': self.ols.r_squared, 'aic': self.ols.aic, 'n_obs': self.ols.n_obs},
        }
        if self.slx is not None:
            rows['slx'] = {'r_squared': self.slx.r_squared, 'aic': self.slx.aic, 'n_obs': self.slx.n_obs}
        for name, result in (('ml_lag', self.ml_lag), ('ml_error', self.ml_error)):
            if result is not None:
                rows[name] = {
                    'r_squared': result.pseudo_r_squared, 'aic': result.aic, 'n_obs': result.n_obs
                }
        if self.count_model is not None:
            rows[self.count_model.family] = {
                'r_squared': self.count_model.pseudo_r_squared,
                'aic': self.count_model.aic,
                'n_obs': self.count_model.n_obs,
            }
        return pd.DataFrame.from_dict(rows, orient='index')


def _safe_step(report: AnalysisReport, label: str, func, *args, **kwargs):
    """Run an optional step; a degenerate statistic is recorded, not fatal."""
    try:
        return func(*args, **kwargs)
    except DegenerateStatisticError as e:
        message = f"{label} skipped: {e}"
        logger.warning(message)
        report.notes.append(message)
        return None


@performance_tracker(level="info")
def run_analysis(
    gdf: gpd.GeoDataFrame,
    outcome: Optional[str] = None,
    covariates: Optional[Sequence[str]] = None,
    count: Optional[str] = None,
    contiguity: Optional[str] = None,
    method: Optional[str] = None,
    island_policy: Optional[str] = None,
    null: Optional[str] = None,
    permutations: Optional[int] = None,
    log_outcome: Optional[bool] = None,
    run_ml: bool = False,
    alpha: Optional[float] = None
) -> AnalysisReport:
    """
    Run the full spatial analysis of burglary over areal units.

    Arguments left as None fall back to the configuration.

    Args:
        gdf: Areal units indexed by unit id with polygon geometries.
        outcome: Burglary rate column.
        covariates: Neighbourhood covariates.
        count: Optional raw burglary count column for the count model.
        contiguity: 'queen' or 'rook'.
        method: 'geometry' or 'vertex' adjacency detection.
        island_policy: 'warn' or 'raise'.
        null: Moran's I null distribution.
        permutations: Permutations for the permutation null.
        log_outcome: Model log1p(outcome).
        run_ml: Also fit the ML spatial lag and spatial error models.
        alpha: Significance level.

    Returns:
        AnalysisReport.

    Raises:
        BurglaryAnalysisError: If the data, weights or baseline model fail.
                               Moran's I and the LM tests on degenerate
                               inputs are noted in the report instead.
    """
    outcome = outcome or config.get('data.outcome')
    covariates = list(covariates or config.get('data.covariates', []))
    contiguity = contiguity or config.get('spatial.contiguity', 'queen')
    method = method or config.get('spatial.method', 'geometry')
    log_outcome = log_outcome if log_outcome is not None else config.get('analysis.log_outcome', False)
    alpha = alpha if alpha is not None else config.get('analysis.significance_level', 0.05)

    logger.info(
        f"Starting burglary analysis of {outcome} on {len(covariates)} covariates",
        extra={"step": "start", "outcome": outcome}
    )

    data = select_columns(gdf, outcome, covariates, count=count)

    descriptives = describe_variables(data, [outcome] + covariates)
    correlations = correlation_tests(data, outcome, covariates, alpha=alpha)
    vif = variance_inflation(data, covariates)

    ols = fit_ols(data, outcome, covariates, log_outcome=log_outcome)
    w = SpatialWeightMatrix.from_geodataframe(
        data, rule=contiguity, method=method, island_policy=island_policy
    )

    report = AnalysisReport(
        outcome=outcome,
        covariates=covariates,
        n_units=len(data),
        contiguity=contiguity,
        descriptives=descriptives,
        correlations=correlations,
        vif=vif,
        weights=w,
        ols=ols,
    )
    if w.islands:
        report.notes.append(f"{len(w.islands)} units have no {contiguity} neighbors")

    report.outcome_moran = _safe_step(
        report, "Moran's I of the outcome", global_moran,
        ols.y, w, null=null, permutations=permutations, alpha=alpha
    )
    report.residual_moran = _safe_step(
        report, "Moran's I of the OLS residuals", residual_moran, ols, w, alpha=alpha
    )
    report.lm_tests = _safe_step(report, "LM diagnostics", lagrange_multiplier_tests, ols, w)
    if report.lm_tests is not None:
        report.suggested_specification = report.lm_tests.suggest_specification(alpha)

    report.slx = fit_spatial_lag_x(data, outcome, covariates, w, log_outcome=log_outcome)

    if run_ml:
        if w.islands:
            logger.warning("ML spatial models are fitted with island rows left at zero")
        # Same dependent variable as the OLS fit
        ml_data = data.assign(**{ols.outcome: ols.y})
        report.ml_lag = fit_spatial_lag_ml(ml_data, ols.outcome, covariates, w)
        report.ml_error = fit_spatial_error_ml(ml_data, ols.outcome, covariates, w)

    if count is not None:
        family = config.get('analysis.count_family', 'negative_binomial')
        try:
            report.count_model = fit_count_model(data, count, covariates, family=family)
        except BurglaryAnalysisError as e:
            message = f"{family} count model failed: {e}"
            logger.warning(message)
            report.notes.append(message)

    logger.info(
        f"Analysis complete for {report.n_units} units; "
        f"suggested specification: {report.suggested_specification}",
        extra={"step": "complete", "n_units": report.n_units, "outcome": outcome}
    )
    return report
