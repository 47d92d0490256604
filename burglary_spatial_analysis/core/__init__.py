"""
Core module for Burglary Spatial Analysis.
"""
from .config import Config, config, initialize_config, DEFAULT_CONFIG
from .decorators import handle_errors, performance_tracker
from .exceptions import (
    BurglaryAnalysisError, ConfigurationError, ValidationError, DataProcessingError,
    GeometryError, IslandError, ModelError, SingularMatrixError,
    DegenerateStatisticError, IslandWarning
)
from .logging_setup import setup_logging, setup_logging_from_config, JsonFormatter

__all__ = [
    'Config', 'config', 'initialize_config', 'DEFAULT_CONFIG',
    'handle_errors', 'performance_tracker',
    'BurglaryAnalysisError', 'ConfigurationError', 'ValidationError', 'DataProcessingError',
    'GeometryError', 'IslandError', 'ModelError', 'SingularMatrixError',
    'DegenerateStatisticError', 'IslandWarning',
    'setup_logging', 'setup_logging_from_config', 'JsonFormatter'
]
