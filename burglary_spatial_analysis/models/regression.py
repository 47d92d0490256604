"""
Baseline regression models for Burglary Spatial Analysis.

This module fits the non-spatial models relating neighbourhood covariates
to burglary: an OLS model of the burglary rate (optionally log1p-transformed)
and a count model (Poisson or negative binomial) of the raw burglary count.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
import statsmodels.api as sm
import spreg

from burglary_spatial_analysis.core.decorators import handle_errors, performance_tracker
from burglary_spatial_analysis.core.exceptions import (
    ModelError, SingularMatrixError, ValidationError
)
from burglary_spatial_analysis.data.validators import validate_columns

# Initialize logger
logger = logging.getLogger(__name__)

CONSTANT = 'const'
COUNT_FAMILIES = ('poisson', 'negative_binomial')


@dataclass(frozen=True, eq=False)
class FittedModel:
    """
    Result of an OLS fit. Read-only input to the spatial diagnostics.

    Attributes:
        outcome: Name of the dependent variable as fitted.
        regressors: Column names of the design matrix, constant first.
        y: Dependent variable indexed by unit id.
        X: Design matrix (with constant) indexed by unit id.
        params, std_errors, t_values, p_values: Coefficient table columns.
        residuals, fitted_values: Per-unit series.
        df_resid: Residual degrees of freedom.
        rss: Residual sum of squares.
        r_squared, adj_r_squared, aic, bic: Fit statistics.
    """
    outcome: str
    regressors: Tuple[str, ...]
    y: pd.Series = field(repr=False)
    X: pd.DataFrame = field(repr=False)
    params: pd.Series = field(repr=False)
    std_errors: pd.Series = field(repr=False)
    t_values: pd.Series = field(repr=False)
    p_values: pd.Series = field(repr=False)
    residuals: pd.Series = field(repr=False)
    fitted_values: pd.Series = field(repr=False)
    df_resid: float
    rss: float
    r_squared: float
    adj_r_squared: float
    aic: float
    bic: float

    @property
    def n_obs(self) -> int:
        return int(len(self.y))

    @property
    def k(self) -> int:
        return int(self.X.shape[1])

    @property
    def covariates(self) -> List[str]:
        """Regressors other than the constant."""
        return [name for name in self.regressors if name != CONSTANT]

    def coefficient_table(self) -> pd.DataFrame:
        return pd.DataFrame({
            'coefficient': self.params,
            'std_error': self.std_errors,
            't_value': self.t_values,
            'p_value': self.p_values,
        })

    def to_spreg(self, order: Optional[Sequence] = None) -> spreg.OLS:
        """
        Equivalent spreg OLS object, used by the spatial diagnostics.

        spreg adds its own constant, so only the non-constant regressors are
        passed; the estimates match this model's.

        Args:
            order: Unit ids giving the row order expected by a weights
                   matrix. Must cover exactly the model's observations.
        """
        if not self.covariates:
            raise ModelError("Spatial diagnostics need at least one non-constant regressor")

        y_frame, x_frame = self.y, self.X[self.covariates]
        if order is not None:
            order = list(order)
            if len(order) != self.n_obs or not self.y.index.isin(order).all():
                raise ValidationError(
                    f"Weights cover {len(order)} units but the model has {self.n_obs} observations "
                    f"with different identifiers"
                )
            y_frame, x_frame = y_frame.loc[order], x_frame.loc[order]

        y = y_frame.to_numpy(dtype=float).reshape(-1, 1)
        x = x_frame.to_numpy(dtype=float)
        return spreg.OLS(
            y, x, nonspat_diag=False,
            name_y=self.outcome, name_x=self.covariates
        )


@dataclass(frozen=True, eq=False)
class CountModelResult:
    """Poisson or negative binomial model of the raw burglary count."""
    family: str
    outcome: str
    params: pd.Series = field(repr=False)
    std_errors: pd.Series = field(repr=False)
    p_values: pd.Series = field(repr=False)
    log_likelihood: float
    aic: float
    pseudo_r_squared: float
    dispersion: float
    n_obs: int
    converged: bool
    alpha: Optional[float] = None

    @property
    def incidence_rate_ratios(self) -> pd.Series:
        """exp(beta) for each regressor."""
        return np.exp(self.params.drop('alpha', errors='ignore'))

    def coefficient_table(self) -> pd.DataFrame:
        table = pd.DataFrame({
            'coefficient': self.params,
            'std_error': self.std_errors,
            'p_value': self.p_values,
        })
        table['irr'] = self.incidence_rate_ratios
        return table


def check_full_rank(X: pd.DataFrame, context: str = 'design matrix') -> int:
    """
    Raise SingularMatrixError unless ``X`` has full column rank.

    Returns:
        The rank of ``X``.
    """
    values = X.to_numpy(dtype=float)
    rank = int(np.linalg.matrix_rank(values))
    if rank < values.shape[1]:
        logger.error(f"Rank-deficient {context}: rank {rank} < {values.shape[1]} columns")
        raise SingularMatrixError(
            f"Rank-deficient {context}: rank {rank} with {values.shape[1]} columns "
            f"({', '.join(map(str, X.columns))})",
            rank=rank, n_columns=values.shape[1]
        )
    return rank


def validate_model_frame(df: pd.DataFrame, outcome: str, covariates: Sequence[str]) -> None:
    """Check that a frame can support a regression of ``outcome`` on ``covariates``."""
    covariates = list(covariates)
    if not covariates:
        raise ValidationError("At least one covariate is required")
    if outcome in covariates:
        raise ValidationError(f"Outcome {outcome} also listed as a covariate")

    validate_columns(df, [outcome] + covariates)

    if df[[outcome] + covariates].isna().any().any():
        raise ValidationError("Missing values in model columns; select complete cases first")

    if len(df) <= len(covariates) + 1:
        raise ValidationError(
            f"Not enough observations ({len(df)}) for {len(covariates) + 1} parameters"
        )


def fit_design(y: pd.Series, X: pd.DataFrame, outcome: Optional[str] = None) -> FittedModel:
    """
    Fit OLS on an explicit design matrix.

    Args:
        y: Dependent variable.
        X: Design matrix, including the constant column if one is wanted.
        outcome: Name recorded for the dependent variable.

    Returns:
        FittedModel.

    Raises:
        SingularMatrixError: If ``X`` is rank deficient.
    """
    check_full_rank(X)

    results = sm.OLS(y.astype(float), X.astype(float)).fit()

    return FittedModel(
        outcome=outcome or str(y.name),
        regressors=tuple(X.columns),
        y=y.astype(float),
        X=X.astype(float),
        params=results.params,
        std_errors=results.bse,
        t_values=results.tvalues,
        p_values=results.pvalues,
        residuals=results.resid,
        fitted_values=results.fittedvalues,
        df_resid=float(results.df_resid),
        rss=float(results.ssr),
        r_squared=float(results.rsquared),
        adj_r_squared=float(results.rsquared_adj),
        aic=float(results.aic),
        bic=float(results.bic),
    )


@handle_errors
@performance_tracker()
def fit_ols(
    df: pd.DataFrame, outcome: str, covariates: Sequence[str],
    log_outcome: bool = False
) -> FittedModel:
    """
    Estimate an OLS model of ``outcome`` on ``covariates`` plus a constant.

    Args:
        df: Frame indexed by unit id.
        outcome: Dependent variable column (burglary rate).
        covariates: Explanatory columns.
        log_outcome: Model log1p(outcome) instead of the raw rate.

    Returns:
        FittedModel.

    Raises:
        ValidationError: If columns are missing, non-numeric or incomplete.
        SingularMatrixError: If the design matrix is rank deficient.
    """
    logger.info(f"Estimating OLS model with outcome={outcome}, covariates={list(covariates)}")
    validate_model_frame(df, outcome, covariates)

    y = df[outcome].astype(float)
    name = outcome
    if log_outcome:
        if (y < 0).any():
            raise ValidationError(f"Cannot log-transform negative values of {outcome}")
        y = np.log1p(y)
        name = f"log1p_{outcome}"
    y = y.rename(name)

    X = sm.add_constant(df[list(covariates)].astype(float), has_constant='add')
    model = fit_design(y, X, outcome=name)

    logger.info(f"Estimated OLS model with R-squared={model.r_squared:.4f}")
    return model


@handle_errors
@performance_tracker()
def fit_count_model(
    df: pd.DataFrame, count: str, covariates: Sequence[str],
    family: str = 'negative_binomial', exposure: Optional[str] = None
) -> CountModelResult:
    """
    Estimate a count model of the raw burglary count.

    Args:
        df: Frame indexed by unit id.
        count: Non-negative count column.
        covariates: Explanatory columns.
        family: 'poisson' or 'negative_binomial' (alpha estimated by ML).
        exposure: Optional strictly positive exposure column (e.g. households).

    Returns:
        CountModelResult.
    """
    if family not in COUNT_FAMILIES:
        raise ValidationError(f"Invalid count family: {family}")

    logger.info(f"Estimating {family} count model with outcome={count}")
    validate_model_frame(df, count, covariates)

    y = df[count].astype(float)
    if (y < 0).any():
        raise ValidationError(f"Count column {count} has negative values")

    X = sm.add_constant(df[list(covariates)].astype(float), has_constant='add')
    check_full_rank(X)

    exposure_values = None
    if exposure is not None:
        validate_columns(df, [exposure])
        exposure_values = df[exposure].astype(float)
        if (exposure_values <= 0).any():
            raise ValidationError(f"Exposure column {exposure} must be strictly positive")

    if family == 'poisson':
        model = sm.Poisson(y, X, exposure=exposure_values)
    else:
        model = sm.NegativeBinomial(y, X, exposure=exposure_values)
    results = model.fit(disp=0, maxiter=200)

    mu = results.predict()
    dispersion = float(np.sum((y - mu) ** 2 / mu) / results.df_resid)
    converged = bool(results.mle_retvals.get('converged', True))
    if not converged:
        logger.warning(f"{family} model did not converge")

    alpha = float(results.params['alpha']) if family == 'negative_binomial' else None

    logger.info(f"Estimated {family} model: log-likelihood={results.llf:.2f}, dispersion={dispersion:.3f}")
    return CountModelResult(
        family=family,
        outcome=count,
        params=results.params,
        std_errors=results.bse,
        p_values=results.pvalues,
        log_likelihood=float(results.llf),
        aic=float(results.aic),
        pseudo_r_squared=float(results.prsquared),
        dispersion=dispersion,
        n_obs=int(results.nobs),
        converged=converged,
        alpha=alpha,
    )
