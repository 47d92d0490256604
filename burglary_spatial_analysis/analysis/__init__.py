"""
Analysis module for Burglary Spatial Analysis.
"""
from .exploratory import describe_variables, correlation_tests, variance_inflation
from .pipeline import AnalysisReport, run_analysis

__all__ = [
    'describe_variables', 'correlation_tests', 'variance_inflation',
    'AnalysisReport', 'run_analysis',
]
