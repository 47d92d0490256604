"""
Spatial models for Burglary Spatial Analysis.
"""
from .contiguity import Adjacency, build_adjacency
from .weights import SpatialWeightMatrix
from .autocorrelation import MoranResult, global_moran, residual_moran, interpret_moran
from .diagnostics import LMStatistic, LMDiagnostics, lagrange_multiplier_tests
from .lag_model import SLXResult, MLSpatialResult, fit_spatial_lag_x, fit_spatial_lag_ml
from .error_model import fit_spatial_error_ml

__all__ = [
    'Adjacency', 'build_adjacency',
    'SpatialWeightMatrix',
    'MoranResult', 'global_moran', 'residual_moran', 'interpret_moran',
    'LMStatistic', 'LMDiagnostics', 'lagrange_multiplier_tests',
    'SLXResult', 'MLSpatialResult', 'fit_spatial_lag_x', 'fit_spatial_lag_ml',
    'fit_spatial_error_ml',
]
