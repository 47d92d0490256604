"""
Global spatial autocorrelation for Burglary Spatial Analysis.

Moran's I is

    I = (n / S0) * sum_ij w_ij z_i z_j / sum_i z_i^2,   z = x - mean(x)

computed with ``esda.moran.Moran``. Inference uses one of three nulls:

* ``randomization`` (default): closed-form moments under randomisation.
* ``normality``: closed-form moments under normality.
* ``permutation``: conditional permutation; p-value is esda's folded
  pseudo p-value and the moments come from the reference distribution.

The analytic p-values are two-sided.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Tuple, Union

import numpy as np
import pandas as pd
from esda.moran import Moran
import spreg

from burglary_spatial_analysis.core.config import config
from burglary_spatial_analysis.core.decorators import handle_errors
from burglary_spatial_analysis.core.exceptions import DegenerateStatisticError, ValidationError
from burglary_spatial_analysis.models.regression import FittedModel
from burglary_spatial_analysis.models.spatial.weights import SpatialWeightMatrix

# Initialize logger
logger = logging.getLogger(__name__)

NULLS = ('randomization', 'normality', 'permutation')


@dataclass(frozen=True)
class MoranResult:
    """Global Moran's I with its null moments and interpretation."""
    I: float
    expected_I: float
    variance: float
    z_score: float
    p_value: float
    null: str
    n: int
    permutations: int
    pattern: str
    interpretation: str
    variable: Optional[str] = None

    def is_significant(self, alpha: float = 0.05) -> bool:
        return self.p_value < alpha

    def as_dict(self) -> dict:
        return {
            'variable': self.variable,
            'I': self.I,
            'expected_I': self.expected_I,
            'variance': self.variance,
            'z_score': self.z_score,
            'p_value': self.p_value,
            'null': self.null,
            'n': self.n,
            'permutations': self.permutations,
            'pattern': self.pattern,
        }


def _strength(I: float) -> str:
    magnitude = abs(I)
    if magnitude < 0.3:
        return 'weak'
    if magnitude < 0.6:
        return 'moderate'
    return 'strong'


def interpret_moran(
    I: float, expected_I: float, p_value: float, alpha: float = 0.05
) -> Tuple[str, str]:
    """
    Map a Moran's I result onto a spatial pattern.

    Values towards +1 indicate clustering of similar values, values towards
    -1 indicate dispersion (neighbors unlike each other), and values near
    the null expectation indicate no spatial pattern.

    Returns:
        Tuple of the pattern ('clustered', 'dispersed' or 'random') and a
        one-sentence description.
    """
    if p_value < alpha and I > expected_I:
        pattern = 'clustered'
        description = f"{_strength(I)} clustering of similar values"
    elif p_value < alpha and I < expected_I:
        pattern = 'dispersed'
        description = f"{_strength(I)} dispersion, neighbouring values tend to differ"
    else:
        pattern = 'random'
        description = "no significant spatial pattern"

    sentence = (
        f"Moran's I = {I:.4f} (E[I] = {expected_I:.4f}, p = {p_value:.4g}): {description}"
    )
    return pattern, sentence


def _scalar(value) -> float:
    return float(np.asarray(value, dtype=float).ravel()[0])


def _check_variance(values: np.ndarray, label: str) -> None:
    if not np.all(np.isfinite(values)):
        raise ValidationError(f"{label} contains missing or non-finite values")

    spread = float(np.std(values))
    scale = max(1.0, float(np.abs(values).max()))
    if spread <= 1e-12 * scale:
        logger.error(f"Moran's I undefined for {label}: zero variance")
        raise DegenerateStatisticError(
            f"Moran's I is undefined for {label}: the values have zero variance"
        )


@handle_errors
def global_moran(
    values: Union[pd.Series, np.ndarray],
    w: SpatialWeightMatrix,
    null: Optional[str] = None,
    permutations: Optional[int] = None,
    alpha: Optional[float] = None,
    seed: Optional[int] = None
) -> MoranResult:
    """
    Global Moran's I of a variable.

    Args:
        values: Series indexed by unit id, or an array in ``w.ids`` order.
        w: Row-standardised spatial weights.
        null: 'randomization' (default), 'normality' or 'permutation'.
        permutations: Number of permutations for the 'permutation' null.
                      Defaults to ``moran.permutations``.
        alpha: Significance level used for the interpretation.
        seed: Seed for the permutation draw. Defaults to ``moran.seed``.

    Returns:
        MoranResult.

    Raises:
        ValidationError: If values are missing, non-finite or misaligned.
        DegenerateStatisticError: If the values have zero variance or the
                                  weights are all zero.
    """
    null = null or config.get('moran.null', 'randomization')
    if null not in NULLS:
        raise ValidationError(f"Invalid null distribution: {null}")
    alpha = alpha if alpha is not None else config.get('analysis.significance_level', 0.05)

    name = values.name if isinstance(values, pd.Series) else None
    arr = w.align(values)
    _check_variance(arr, name or 'variable')

    if w.s0 == 0:
        raise DegenerateStatisticError("Moran's I is undefined when every weight is zero")

    n_perm = 0
    if null == 'permutation':
        n_perm = int(permutations if permutations is not None else config.get('moran.permutations', 999))
        if n_perm < 1:
            raise ValidationError("Permutation inference needs at least one permutation")
        seed = seed if seed is not None else config.get('moran.seed')
        if seed is not None:
            np.random.seed(seed)

    logger.info(f"Calculating Moran's I for {name or 'variable'} under {null} null")
    mi = Moran(arr, w.w, transformation='r', permutations=n_perm, two_tailed=True)

    if null == 'randomization':
        expected, variance, z, p = mi.EI, mi.VI_rand, mi.z_rand, mi.p_rand
    elif null == 'normality':
        expected, variance, z, p = mi.EI, mi.VI_norm, mi.z_norm, mi.p_norm
    else:
        expected, variance, z, p = mi.EI_sim, mi.VI_sim, mi.z_sim, mi.p_sim

    pattern, sentence = interpret_moran(float(mi.I), float(expected), float(p), alpha)
    logger.info(sentence)

    return MoranResult(
        I=float(mi.I),
        expected_I=float(expected),
        variance=float(variance),
        z_score=float(z),
        p_value=float(p),
        null=null,
        n=int(mi.n),
        permutations=n_perm,
        pattern=pattern,
        interpretation=sentence,
        variable=name,
    )


@handle_errors
def residual_moran(
    model: FittedModel, w: SpatialWeightMatrix, alpha: Optional[float] = None
) -> MoranResult:
    """
    Moran's I of OLS residuals.

    Uses the Cliff-Ord moments for regression residuals (spreg ``MoranRes``),
    whose expectation depends on the design matrix rather than -1/(n-1).

    Args:
        model: Fitted OLS model.
        w: Row-standardised spatial weights over the model's units.
        alpha: Significance level used for the interpretation.

    Returns:
        MoranResult with ``null='residual'``.
    """
    alpha = alpha if alpha is not None else config.get('analysis.significance_level', 0.05)
    _check_variance(model.residuals.to_numpy(dtype=float), 'OLS residuals')

    if w.s0 == 0:
        raise DegenerateStatisticError("Moran's I is undefined when every weight is zero")

    logger.info(f"Calculating Moran's I for residuals of {model.outcome} model")
    ols = model.to_spreg(order=w.ids)
    mr = spreg.MoranRes(ols, w.w, z=True)

    I = _scalar(mr.I)
    expected = _scalar(mr.eI)
    variance = _scalar(mr.vI)
    if variance <= 0:
        raise DegenerateStatisticError("Residual Moran's I variance is not positive")
    z = (I - expected) / np.sqrt(variance)
    p = _scalar(mr.p_norm)

    pattern, sentence = interpret_moran(I, expected, p, alpha)
    logger.info(sentence)

    return MoranResult(
        I=I,
        expected_I=expected,
        variance=variance,
        z_score=float(z),
        p_value=p,
        null='residual',
        n=model.n_obs,
        permutations=0,
        pattern=pattern,
        interpretation=sentence,
        variable=f"residuals({model.outcome})",
    )
