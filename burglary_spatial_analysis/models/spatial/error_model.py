"""
Spatial Error Model module for Burglary Spatial Analysis.

The spatial error model y = X b + u, u = lambda W u + e is the alternative
the LM diagnostics point to when error dependence dominates.
"""
import logging
from typing import Sequence

import pandas as pd
import spreg

from burglary_spatial_analysis.core.decorators import handle_errors, performance_tracker
from burglary_spatial_analysis.models.spatial.lag_model import (
    MLSpatialResult, ml_inputs, ml_result_from_spreg
)
from burglary_spatial_analysis.models.spatial.weights import SpatialWeightMatrix

# Initialize logger
logger = logging.getLogger(__name__)


@handle_errors
@performance_tracker()
def fit_spatial_error_ml(
    data: pd.DataFrame,
    outcome: str,
    covariates: Sequence[str],
    w: SpatialWeightMatrix,
    method: str = 'full'
) -> MLSpatialResult:
    """
    Estimate the spatial error model by maximum likelihood.

    Args:
        data: Frame indexed by unit id covering exactly ``w.ids``.
        outcome: Dependent variable column.
        covariates: Explanatory columns.
        w: Row-standardised spatial weights.
        method: spreg log-determinant method ('full', 'lu' or 'ord').

    Returns:
        MLSpatialResult with ``spatial_parameter_name='lambda'``.
    """
    logger.info(f"Estimating ML spatial error model with outcome={outcome}")
    y, x, index = ml_inputs(data, outcome, covariates, w)

    fitted = spreg.ML_Error(
        y, x, w.w, method=method,
        name_y=outcome, name_x=list(covariates), name_w=w.rule, name_ds='areal_units'
    )
    result = ml_result_from_spreg(fitted, 'spatial_error', 'lambda', index)

    logger.info(
        f"Estimated ML spatial error model: lambda={result.spatial_parameter:.4f} "
        f"(p={result.spatial_p_value:.4g}), log-likelihood={result.log_likelihood:.2f}"
    )
    return result
