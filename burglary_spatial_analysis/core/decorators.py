"""
Common decorators for Burglary Spatial Analysis.

Both decorators log through the decorated function's own module logger so
that timings and failures appear under e.g.
``burglary_spatial_analysis.models.spatial.weights``.
"""
import time
import logging
import functools
from typing import Any, Callable, Optional, TypeVar, cast

from .exceptions import BurglaryAnalysisError, ModelError

F = TypeVar('F', bound=Callable[..., Any])


def _qualified(func: Callable) -> str:
    return f"{func.__module__.rsplit('.', 1)[-1]}.{func.__name__}"


def handle_errors(func: F) -> F:
    """
    Wrap unexpected failures of a numerical step in ModelError.

    Package errors (validation, geometry, degenerate statistics) pass
    through unchanged so callers can react to them. Anything else, such as
    a LinAlgError from statsmodels or a ValueError from spreg, is logged
    with its traceback and re-raised as ModelError chaining the original.

    Args:
        func: Function to decorate.

    Returns:
        Decorated function.
    """
    func_logger = logging.getLogger(func.__module__)

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except BurglaryAnalysisError:
            raise
        except Exception as e:
            where = _qualified(func)
            func_logger.error(f"{type(e).__name__} in {where}: {e}", exc_info=True)
            raise ModelError(f"{where} failed: {e}", original_error=e) from e

    return cast(F, wrapper)


def performance_tracker(name: Optional[str] = None, level: str = "debug") -> Callable[[F], F]:
    """Log the wall time of each call at ``level``; failures are timed at debug."""
    def decorator(func: F) -> F:
        func_logger = logging.getLogger(func.__module__)
        label = name or func.__name__
        log_method = getattr(func_logger, level.lower(), func_logger.debug)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            start_time = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                func_logger.debug(f"{label} failed after {time.perf_counter() - start_time:.3f}s: {e}")
                raise
            log_method(f"{label} completed in {time.perf_counter() - start_time:.3f}s", extra={"step": label})
            return result

        return cast(F, wrapper)
    return decorator
