"""
Data loading and validation for Burglary Spatial Analysis.
"""
from .loaders import load_areal_units, select_columns
from .validators import validate_geometries, validate_columns, validate_unique_ids

__all__ = [
    'load_areal_units', 'select_columns',
    'validate_geometries', 'validate_columns', 'validate_unique_ids',
]
