"""
Models module for Burglary Spatial Analysis.
"""
from .regression import (
    FittedModel, CountModelResult, fit_ols, fit_count_model, fit_design,
    check_full_rank, validate_model_frame
)
from .spatial import (
    Adjacency, build_adjacency, SpatialWeightMatrix,
    MoranResult, global_moran, residual_moran, interpret_moran,
    LMStatistic, LMDiagnostics, lagrange_multiplier_tests,
    SLXResult, MLSpatialResult, fit_spatial_lag_x, fit_spatial_lag_ml,
    fit_spatial_error_ml
)

__all__ = [
    'FittedModel', 'CountModelResult', 'fit_ols', 'fit_count_model', 'fit_design',
    'check_full_rank', 'validate_model_frame',
    'Adjacency', 'build_adjacency', 'SpatialWeightMatrix',
    'MoranResult', 'global_moran', 'residual_moran', 'interpret_moran',
    'LMStatistic', 'LMDiagnostics', 'lagrange_multiplier_tests',
    'SLXResult', 'MLSpatialResult', 'fit_spatial_lag_x', 'fit_spatial_lag_ml',
    'fit_spatial_error_ml',
]
