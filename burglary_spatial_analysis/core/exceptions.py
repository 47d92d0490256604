"""
Custom exception classes for Burglary Spatial Analysis.
"""


class BurglaryAnalysisError(Exception):
    """Base exception for all Burglary Spatial Analysis errors."""

    def __init__(self, message: str, original_error: Exception = None):
        self.message = message
        self.original_error = original_error
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.original_error:
            return f"{self.message} (Original error: {str(self.original_error)})"
        return self.message


class ConfigurationError(BurglaryAnalysisError):
    """Error in configuration settings."""
    pass


class ValidationError(BurglaryAnalysisError):
    """Error in data validation."""
    pass


class DataProcessingError(BurglaryAnalysisError):
    """Error while loading or preparing the areal-unit dataset."""
    pass


class GeometryError(ValidationError):
    """Missing, empty, non-polygonal or invalid geometry."""
    pass


class IslandError(BurglaryAnalysisError):
    """Areal units without neighbors under the 'raise' island policy."""

    def __init__(self, message: str, islands=None):
        super().__init__(message)
        self.islands = list(islands or [])


class ModelError(BurglaryAnalysisError):
    """Base class for model-related errors."""
    pass


class SingularMatrixError(ModelError):
    """Design matrix is rank deficient."""

    def __init__(self, message: str, rank: int = None, n_columns: int = None):
        super().__init__(message)
        self.rank = rank
        self.n_columns = n_columns


class DegenerateStatisticError(ModelError):
    """A test statistic is undefined for the given input (e.g. zero variance)."""
    pass


class IslandWarning(UserWarning):
    """Emitted when weights contain zero-filled rows for isolated units."""
    pass
