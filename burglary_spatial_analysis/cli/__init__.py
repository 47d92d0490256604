"""
Command-line interface for Burglary Spatial Analysis.
"""
from .app import main
from .parsers import create_parser, parse_covariates
from .commands import run_analysis, apply_overrides

__all__ = [
    'main',
    'create_parser',
    'parse_covariates',
    'run_analysis',
    'apply_overrides'
]
