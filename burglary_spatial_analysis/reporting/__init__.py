"""
Reporting module for Burglary Spatial Analysis.
"""
from .summaries import (
    format_report, format_ols, format_moran, format_lm_tests,
    format_slx, format_ml_model, format_count_model
)
from .output_manager import NumpyEncoder, OutputManager, save_report

__all__ = [
    'format_report', 'format_ols', 'format_moran', 'format_lm_tests',
    'format_slx', 'format_ml_model', 'format_count_model',
    'NumpyEncoder', 'OutputManager', 'save_report',
]
