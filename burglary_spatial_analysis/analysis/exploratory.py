"""
Exploratory data analysis for Burglary Spatial Analysis.
"""
import logging
from typing import Optional, Sequence

import numpy as np
import pandas as pd
from scipy import stats
from statsmodels.stats.outliers_influence import variance_inflation_factor
import statsmodels.api as sm

from burglary_spatial_analysis.core.config import config
from burglary_spatial_analysis.core.decorators import handle_errors, performance_tracker
from burglary_spatial_analysis.core.exceptions import ValidationError
from burglary_spatial_analysis.data.validators import validate_columns

# Initialize logger
logger = logging.getLogger(__name__)

CORRELATION_METHODS = ('pearson', 'spearman', 'both')


@handle_errors
def describe_variables(df: pd.DataFrame, columns: Sequence[str]) -> pd.DataFrame:
    """
    Summary statistics for the modelling variables.

    Args:
        df: Areal-unit frame.
        columns: Numeric columns to describe.

    Returns:
        DataFrame with one row per column: count, mean, std, min, quartiles,
        max, skewness, kurtosis and missing count.
    """
    columns = list(columns)
    validate_columns(df, columns)

    table = df[columns].describe().T
    table['skewness'] = df[columns].skew()
    table['kurtosis'] = df[columns].kurt()
    table['missing'] = df[columns].isna().sum()

    for col in columns:
        if abs(table.loc[col, 'skewness']) > 1:
            logger.info(f"{col} is strongly skewed (skewness={table.loc[col, 'skewness']:.2f})")

    return table


def _correlate(x: np.ndarray, y: np.ndarray, method: str):
    if method == 'pearson':
        result = stats.pearsonr(x, y)
    else:
        result = stats.spearmanr(x, y)
    return float(result[0]), float(result[1])


@handle_errors
@performance_tracker()
def correlation_tests(
    df: pd.DataFrame,
    outcome: str,
    covariates: Sequence[str],
    method: str = 'both',
    alpha: Optional[float] = None
) -> pd.DataFrame:
    """
    Correlation of each covariate with the outcome.

    Args:
        df: Areal-unit frame.
        outcome: Outcome column.
        covariates: Columns to correlate with the outcome.
        method: 'pearson', 'spearman' or 'both'.
        alpha: Significance level. Defaults to ``analysis.significance_level``.

    Returns:
        DataFrame with columns covariate, method, r, p_value, n and
        significant, sorted by descending |r|.
    """
    if method not in CORRELATION_METHODS:
        raise ValidationError(f"Invalid correlation method: {method}")
    alpha = alpha if alpha is not None else config.get('analysis.significance_level', 0.05)

    covariates = list(covariates)
    validate_columns(df, [outcome] + covariates)
    methods = ['pearson', 'spearman'] if method == 'both' else [method]

    rows = []
    for col in covariates:
        pair = df[[outcome, col]].dropna()
        n = len(pair)
        if n < 3:
            logger.warning(f"Skipping correlation of {col}: only {n} complete observations")
            continue
        if pair[col].nunique() < 2 or pair[outcome].nunique() < 2:
            logger.warning(f"Skipping correlation of {col}: constant values")
            continue

        for m in methods:
            r, p = _correlate(pair[outcome].to_numpy(dtype=float), pair[col].to_numpy(dtype=float), m)
            rows.append({
                'covariate': col,
                'method': m,
                'r': r,
                'p_value': p,
                'n': n,
                'significant': p < alpha,
            })

    result = pd.DataFrame(rows, columns=['covariate', 'method', 'r', 'p_value', 'n', 'significant'])
    if result.empty:
        return result

    result = result.reindex(result['r'].abs().sort_values(ascending=False).index)
    return result.reset_index(drop=True)


@handle_errors
def variance_inflation(df: pd.DataFrame, covariates: Sequence[str]) -> pd.Series:
    """
    Variance inflation factors for the covariates.

    Computed on the design with a constant; the constant's own VIF is not
    reported. Values above 10 are logged as a multicollinearity warning.

    Returns:
        Series of VIF values indexed by covariate.
    """
    covariates = list(covariates)
    if len(covariates) < 2:
        return pd.Series(1.0, index=covariates, name='vif')

    validate_columns(df, covariates)
    X = sm.add_constant(df[covariates].dropna().astype(float), has_constant='add')
    values = X.to_numpy()

    vif = pd.Series(
        [variance_inflation_factor(values, i) for i in range(1, values.shape[1])],
        index=covariates,
        name='vif',
    )

    high = vif[vif > 10]
    if not high.empty:
        logger.warning(f"High multicollinearity (VIF > 10): {high.round(2).to_dict()}")

    return vif
