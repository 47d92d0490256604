"""
Spatial Lag Model module for Burglary Spatial Analysis.

Two estimators are provided:

* ``fit_spatial_lag_x``: the spatially-lagged-X (SLX) model
  y = a + X b + (W X) g + e, fitted by OLS. Each covariate gets a lagged
  counterpart ``W_<name>``; the constant is not lagged.
* ``fit_spatial_lag_ml``: the simultaneous spatial lag model
  y = rho W y + X b + e, fitted by maximum likelihood with spreg.
"""
import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

import numpy as np
import pandas as pd
import statsmodels.api as sm
import spreg

from burglary_spatial_analysis.core.decorators import handle_errors, performance_tracker
from burglary_spatial_analysis.core.exceptions import ValidationError
from burglary_spatial_analysis.models.regression import (
    FittedModel, fit_design, validate_model_frame
)
from burglary_spatial_analysis.models.spatial.weights import SpatialWeightMatrix

# Initialize logger
logger = logging.getLogger(__name__)

LAG_PREFIX = 'W_'


@dataclass(frozen=True, eq=False)
class SLXResult:
    """
    Spatially-lagged-X regression.

    Attributes:
        model: OLS fit on the augmented design actually estimated.
        direct_terms: Covariate names.
        lag_terms: Lagged covariate names, one per covariate.
        flagged_lag_columns: Lag columns with zero variance, left out of
            the fit and reported with coefficient 0 and NaN standard error.
        coefficients, std_errors, t_values, p_values: Coefficient table over
            const, direct and every lag term.
    """
    model: FittedModel
    direct_terms: Tuple[str, ...]
    lag_terms: Tuple[str, ...]
    flagged_lag_columns: Tuple[str, ...]
    coefficients: pd.Series = field(repr=False)
    std_errors: pd.Series = field(repr=False)
    t_values: pd.Series = field(repr=False)
    p_values: pd.Series = field(repr=False)

    @property
    def rss(self) -> float:
        return self.model.rss

    @property
    def r_squared(self) -> float:
        return self.model.r_squared

    @property
    def adj_r_squared(self) -> float:
        return self.model.adj_r_squared

    @property
    def aic(self) -> float:
        return self.model.aic

    @property
    def n_obs(self) -> int:
        return self.model.n_obs

    def coefficient_table(self) -> pd.DataFrame:
        table = pd.DataFrame({
            'coefficient': self.coefficients,
            'std_error': self.std_errors,
            't_value': self.t_values,
            'p_value': self.p_values,
        })
        table['term'] = ['lag' if name in self.lag_terms else 'direct' for name in table.index]
        table['flagged'] = table.index.isin(self.flagged_lag_columns)
        return table

    def impacts(self) -> pd.DataFrame:
        """
        Direct, indirect and total impacts per covariate.

        For SLX the direct impact is the covariate's coefficient, the
        indirect (spillover) impact is its lag coefficient, and the total is
        their sum.
        """
        rows = {}
        for name in self.direct_terms:
            direct = float(self.coefficients[name])
            indirect = float(self.coefficients[f"{LAG_PREFIX}{name}"])
            rows[name] = {'direct': direct, 'indirect': indirect, 'total': direct + indirect}
        return pd.DataFrame.from_dict(rows, orient='index')


@dataclass(frozen=True, eq=False)
class MLSpatialResult:
    """Maximum-likelihood spatial lag or spatial error model."""
    model_type: str
    spatial_parameter_name: str
    spatial_parameter: float
    spatial_std_error: float
    spatial_z_value: float
    spatial_p_value: float
    coefficients: pd.Series = field(repr=False)
    std_errors: pd.Series = field(repr=False)
    z_values: pd.Series = field(repr=False)
    p_values: pd.Series = field(repr=False)
    log_likelihood: float = np.nan
    aic: float = np.nan
    schwarz: float = np.nan
    pseudo_r_squared: float = np.nan
    n_obs: int = 0
    residuals: Optional[pd.Series] = field(default=None, repr=False)

    def coefficient_table(self) -> pd.DataFrame:
        return pd.DataFrame({
            'coefficient': self.coefficients,
            'std_error': self.std_errors,
            'z_value': self.z_values,
            'p_value': self.p_values,
        })


def _aligned_frame(data: pd.DataFrame, w: SpatialWeightMatrix) -> pd.DataFrame:
    """Rows of ``data`` in weights order; both must cover the same units."""
    missing = [unit for unit in w.ids if unit not in data.index]
    if missing or len(data) != w.n:
        raise ValidationError(
            f"Data ({len(data)} rows) and weights ({w.n} units) cover different units"
            + (f", e.g. missing {missing[:5]}" if missing else "")
        )
    return data.loc[w.ids]


def _is_constant(column: pd.Series) -> bool:
    values = column.to_numpy(dtype=float)
    scale = max(1.0, float(np.abs(values).max()))
    return float(np.ptp(values)) <= 1e-12 * scale


@handle_errors
@performance_tracker()
def fit_spatial_lag_x(
    data: pd.DataFrame,
    outcome: str,
    covariates: Sequence[str],
    w: SpatialWeightMatrix,
    log_outcome: bool = False
) -> SLXResult:
    """
    Estimate the spatially-lagged-X model by OLS.

    Args:
        data: Frame indexed by unit id covering exactly ``w.ids``.
        outcome: Dependent variable column.
        covariates: Explanatory columns; each is lagged with ``w``.
        w: Row-standardised spatial weights.
        log_outcome: Model log1p(outcome).

    Returns:
        SLXResult. With an all-zero ``w`` every lag column is flagged and
        the fit equals plain OLS on the original design.

    Raises:
        ValidationError: If columns are missing or the data and weights
                         cover different units.
        SingularMatrixError: If the augmented design is rank deficient.
    """
    covariates = list(covariates)
    logger.info(f"Estimating SLX model with outcome={outcome}, covariates={covariates}")

    validate_model_frame(data, outcome, covariates)
    frame = _aligned_frame(data, w)

    y = frame[outcome].astype(float)
    name = outcome
    if log_outcome:
        if (y < 0).any():
            raise ValidationError(f"Cannot log-transform negative values of {outcome}")
        y = np.log1p(y)
        name = f"log1p_{outcome}"
    y = y.rename(name)

    X = frame[covariates].astype(float)
    WX = w.lag_frame(X, prefix=LAG_PREFIX)
    lag_terms = tuple(WX.columns)

    flagged = tuple(col for col in lag_terms if _is_constant(WX[col]))
    if flagged:
        logger.warning(f"Lag columns with zero variance left out of the fit: {list(flagged)}")

    kept = [col for col in lag_terms if col not in flagged]
    design = sm.add_constant(pd.concat([X, WX[kept]], axis=1), has_constant='add')

    model = fit_design(y, design, outcome=name)

    order = list(design.columns) + list(flagged)
    coefficients = model.params.reindex(order)
    std_errors = model.std_errors.reindex(order)
    t_values = model.t_values.reindex(order)
    p_values = model.p_values.reindex(order)
    coefficients[list(flagged)] = 0.0

    # Report in const, direct, lag order
    ordered = ['const'] + covariates + list(lag_terms)

    result = SLXResult(
        model=model,
        direct_terms=tuple(covariates),
        lag_terms=lag_terms,
        flagged_lag_columns=flagged,
        coefficients=coefficients.reindex(ordered),
        std_errors=std_errors.reindex(ordered),
        t_values=t_values.reindex(ordered),
        p_values=p_values.reindex(ordered),
    )

    logger.info(f"Estimated SLX model with R-squared={model.r_squared:.4f}, RSS={model.rss:.4f}")
    return result


def ml_result_from_spreg(
    fitted, model_type: str, parameter_name: str, index: pd.Index
) -> MLSpatialResult:
    """Collect the estimates of a fitted spreg ML model."""
    names = list(fitted.name_x)
    betas = np.asarray(fitted.betas, dtype=float).ravel()
    std_err = np.asarray(fitted.std_err, dtype=float).ravel()
    z_stat = np.asarray(fitted.z_stat, dtype=float).reshape(-1, 2)

    k = min(len(names), len(betas), len(std_err), len(z_stat))
    names, betas, std_err, z_stat = names[:k], betas[:k], std_err[:k], z_stat[:k]

    # The spatial parameter is the last estimate in spreg's output
    spatial = k - 1
    direct = slice(0, spatial)

    return MLSpatialResult(
        model_type=model_type,
        spatial_parameter_name=parameter_name,
        spatial_parameter=float(betas[spatial]),
        spatial_std_error=float(std_err[spatial]),
        spatial_z_value=float(z_stat[spatial, 0]),
        spatial_p_value=float(z_stat[spatial, 1]),
        coefficients=pd.Series(betas[direct], index=names[direct]),
        std_errors=pd.Series(std_err[direct], index=names[direct]),
        z_values=pd.Series(z_stat[direct, 0], index=names[direct]),
        p_values=pd.Series(z_stat[direct, 1], index=names[direct]),
        log_likelihood=float(fitted.logll),
        aic=float(fitted.aic),
        schwarz=float(fitted.schwarz),
        pseudo_r_squared=float(fitted.pr2),
        n_obs=int(fitted.n),
        residuals=pd.Series(np.asarray(fitted.u, dtype=float).ravel(), index=index),
    )


def ml_inputs(
    data: pd.DataFrame, outcome: str, covariates: Sequence[str], w: SpatialWeightMatrix
) -> Tuple[np.ndarray, np.ndarray, pd.Index]:
    """Arrays in weights order for the spreg ML estimators."""
    validate_model_frame(data, outcome, covariates)
    frame = _aligned_frame(data, w)
    y = frame[outcome].to_numpy(dtype=float).reshape(-1, 1)
    x = frame[list(covariates)].to_numpy(dtype=float)
    return y, x, frame.index


@handle_errors
@performance_tracker()
def fit_spatial_lag_ml(
    data: pd.DataFrame,
    outcome: str,
    covariates: Sequence[str],
    w: SpatialWeightMatrix,
    method: str = 'full'
) -> MLSpatialResult:
    """
    Estimate the simultaneous spatial lag model by maximum likelihood.

    Args:
        data: Frame indexed by unit id covering exactly ``w.ids``.
        outcome: Dependent variable column.
        covariates: Explanatory columns.
        w: Row-standardised spatial weights.
        method: spreg log-determinant method ('full', 'lu' or 'ord').

    Returns:
        MLSpatialResult with ``spatial_parameter_name='rho'``.
    """
    logger.info(f"Estimating ML spatial lag model with outcome={outcome}")
    y, x, index = ml_inputs(data, outcome, covariates, w)

    fitted = spreg.ML_Lag(
        y, x, w.w, method=method,
        name_y=outcome, name_x=list(covariates), name_w=w.rule, name_ds='areal_units'
    )
    result = ml_result_from_spreg(fitted, 'spatial_lag', 'rho', index)

    logger.info(
        f"Estimated ML spatial lag model: rho={result.spatial_parameter:.4f} "
        f"(p={result.spatial_p_value:.4g}), log-likelihood={result.log_likelihood:.2f}"
    )
    return result
