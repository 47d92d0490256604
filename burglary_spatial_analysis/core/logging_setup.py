"""
Logging configuration for Burglary Spatial Analysis.

Console output always goes to stderr. A dated log file under
``directories.logs_dir`` is added unless disabled. Analysis steps may attach
context through ``extra={'step': ..., 'n_units': ...}``; the JSON formatter
keeps those fields.
"""
import os
import json
import logging
import datetime
from pathlib import Path
from typing import Dict, Optional

from .config import config

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_FILE_PREFIX = 'burglary_analysis'

# Record attributes copied into JSON output when present
CONTEXT_FIELDS = ('step', 'n_units', 'outcome', 'rule')


class JsonFormatter(logging.Formatter):
    """One JSON object per record, with any analysis context attached."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            'time': datetime.datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'where': f"{record.module}.{record.funcName}:{record.lineno}",
        }

        context = {name: getattr(record, name) for name in CONTEXT_FIELDS if hasattr(record, name)}
        if context:
            entry['context'] = context

        if record.exc_info:
            entry['error'] = {
                'type': record.exc_info[0].__name__,
                'message': str(record.exc_info[1]),
                'traceback': self.formatException(record.exc_info),
            }

        return json.dumps(entry, default=str)


def _level(name: str, fallback: int = logging.INFO) -> int:
    return getattr(logging, str(name).upper(), fallback)


def log_file_path(log_dir: str) -> str:
    """Dated log file inside ``log_dir``, creating the directory."""
    Path(log_dir).mkdir(parents=True, exist_ok=True)
    stamp = datetime.datetime.now().strftime("%Y%m%d")
    return os.path.join(log_dir, f"{LOG_FILE_PREFIX}_{stamp}.log")


def setup_logging(
    log_level: str = "INFO",
    log_dir: Optional[str] = None,
    json_format: bool = False,
    verbose_libraries: Optional[Dict[str, str]] = None,
    log_to_file: bool = True
) -> Optional[str]:
    """
    Replace the root logger's handlers with console and file handlers.

    Args:
        log_level: Level name for the root logger and its handlers.
        log_dir: Directory for the log file. Defaults to ``directories.logs_dir``.
        json_format: Emit JSON records instead of plain text.
        verbose_libraries: Per-library level overrides, e.g. {'fiona': 'WARNING'}.
        log_to_file: Also write to a dated log file.

    Returns:
        Path of the log file, or None when logging to the console only.
    """
    level = _level(log_level)
    formatter = JsonFormatter() if json_format else logging.Formatter(LOG_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handlers = [logging.StreamHandler()]
    log_file = None
    if log_to_file:
        log_file = log_file_path(log_dir or config.get('directories.logs_dir', 'logs'))
        handlers.append(logging.FileHandler(log_file))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    for lib, lib_level in (verbose_libraries or {}).items():
        logging.getLogger(lib).setLevel(_level(lib_level, logging.WARNING))

    logging.getLogger(__name__).info(
        f"Logging initialized at level {log_level}" + (f", writing to {log_file}" if log_file else "")
    )
    return log_file


def setup_logging_from_config(log_level: Optional[str] = None, log_to_file: bool = True) -> Optional[str]:
    """Initialize logging from application configuration."""
    return setup_logging(
        log_level=log_level or config.get('logging.log_level', 'INFO'),
        log_dir=config.get('directories.logs_dir'),
        json_format=config.get('logging.json_format', False),
        verbose_libraries=config.get('logging.verbose_libraries', {}),
        log_to_file=log_to_file
    )
