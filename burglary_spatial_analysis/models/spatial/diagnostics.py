"""
Lagrange Multiplier diagnostics for Burglary Spatial Analysis.

Given an OLS fit and a spatial weights matrix, reports the LM tests of
Anselin et al. (1996) for spatial error and spatial lag dependence, their
robust counterparts and the joint SARMA test. The model-choice rule in
``LMDiagnostics.suggest_specification`` is advice for the analyst; nothing
in the package branches on it automatically.
"""
import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np
import pandas as pd
import spreg

from burglary_spatial_analysis.core.config import config
from burglary_spatial_analysis.core.decorators import handle_errors, performance_tracker
from burglary_spatial_analysis.core.exceptions import DegenerateStatisticError
from burglary_spatial_analysis.models.regression import FittedModel
from burglary_spatial_analysis.models.spatial.weights import SpatialWeightMatrix

# Initialize logger
logger = logging.getLogger(__name__)

SPREG_TESTS = {
    'lm_error': ('lme', 1),
    'lm_lag': ('lml', 1),
    'robust_lm_error': ('rlme', 1),
    'robust_lm_lag': ('rlml', 1),
    'lm_sarma': ('sarma', 2),
}


@dataclass(frozen=True)
class LMStatistic:
    """A chi-squared test statistic with its degrees of freedom and p-value."""
    name: str
    statistic: float
    df: int
    p_value: float

    def is_significant(self, alpha: float = 0.05) -> bool:
        return self.p_value < alpha


@dataclass(frozen=True)
class LMDiagnostics:
    """The five LM statistics for one OLS model and weights matrix."""
    lm_error: LMStatistic
    lm_lag: LMStatistic
    robust_lm_error: LMStatistic
    robust_lm_lag: LMStatistic
    lm_sarma: LMStatistic
    outcome: Optional[str] = None

    def statistics(self):
        return [self.lm_error, self.lm_lag, self.robust_lm_error, self.robust_lm_lag, self.lm_sarma]

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            [(s.statistic, s.df, s.p_value) for s in self.statistics()],
            index=[s.name for s in self.statistics()],
            columns=['statistic', 'df', 'p_value'],
        )

    def suggest_specification(self, alpha: Optional[float] = None) -> str:
        """
        Advisory model choice from the LM decision rule.

        * Neither simple test significant: 'ols'.
        * Only one simple test significant: that specification.
        * Both significant: the robust tests decide. If only RLMlag is
          significant the answer is 'spatial_lag', if only RLMerr it is
          'spatial_error', if both 'spatial_sarma'. If neither robust test
          is significant the larger simple statistic decides.

        Returns:
            One of 'ols', 'spatial_lag', 'spatial_error', 'spatial_sarma'.
        """
        alpha = alpha if alpha is not None else config.get('analysis.significance_level', 0.05)

        lag = self.lm_lag.is_significant(alpha)
        err = self.lm_error.is_significant(alpha)

        if not lag and not err:
            return 'ols'
        if lag and not err:
            return 'spatial_lag'
        if err and not lag:
            return 'spatial_error'

        robust_lag = self.robust_lm_lag.is_significant(alpha)
        robust_err = self.robust_lm_error.is_significant(alpha)

        if robust_lag and not robust_err:
            return 'spatial_lag'
        if robust_err and not robust_lag:
            return 'spatial_error'
        if robust_lag and robust_err:
            return 'spatial_sarma'
        return 'spatial_lag' if self.lm_lag.statistic >= self.lm_error.statistic else 'spatial_error'


def _scalar(value) -> float:
    return float(np.asarray(value, dtype=float).ravel()[0])


@handle_errors
@performance_tracker()
def lagrange_multiplier_tests(model: FittedModel, w: SpatialWeightMatrix) -> LMDiagnostics:
    """
    LM tests for spatial dependence in the residuals of an OLS model.

    Args:
        model: Fitted OLS model (with constant).
        w: Row-standardised spatial weights over the model's units.

    Returns:
        LMDiagnostics with LMerr, LMlag, RLMerr, RLMlag (1 df each) and
        SARMA (2 df).

    Raises:
        DegenerateStatisticError: If the residuals have zero variance or
                                  every weight is zero.
        ValidationError: If the weights and model cover different units.
    """
    logger.info(f"Running LM diagnostics for {model.outcome} model")

    if w.s0 == 0:
        raise DegenerateStatisticError("LM tests are undefined when every weight is zero")
    scale = max(1.0, float(np.abs(model.y).max()))
    if float(np.std(model.residuals)) <= 1e-12 * scale:
        raise DegenerateStatisticError("LM tests are undefined for a model with zero residual variance")

    ols = model.to_spreg(order=w.ids)
    lms = spreg.LMtests(ols, w.w, tests=[code for code, _ in SPREG_TESTS.values()])

    results = {}
    for name, (code, df) in SPREG_TESTS.items():
        statistic, p_value = getattr(lms, code)
        results[name] = LMStatistic(
            name=name, statistic=_scalar(statistic), df=df, p_value=_scalar(p_value)
        )
        logger.debug(f"{name}: {results[name].statistic:.4f} (p={results[name].p_value:.4g})")

    diagnostics = LMDiagnostics(outcome=model.outcome, **results)
    logger.info(
        f"LM diagnostics: LMlag={diagnostics.lm_lag.statistic:.3f}, "
        f"LMerr={diagnostics.lm_error.statistic:.3f}, "
        f"suggested specification={diagnostics.suggest_specification()}"
    )
    return diagnostics
