"""
Configuration management for Burglary Spatial Analysis.
"""
import copy
import os
import logging
from pathlib import Path
from typing import Dict, Any, Optional

import yaml

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    'data': {
        'path': 'data/burglary_lsoa.geojson',
        'id_column': 'LSOA11CD',
        'outcome': 'burglary_rate',
        'count': None,
        'covariates': [
            'imd_score',
            'income_score',
            'employment_score',
            'pct_social_rented',
            'pct_students',
            'population_density',
        ],
    },
    'spatial': {
        'contiguity': 'queen',
        'method': 'geometry',
        'island_policy': 'warn',
    },
    'moran': {
        'null': 'randomization',
        'permutations': 999,
        'seed': 12345,
    },
    'analysis': {
        'significance_level': 0.05,
        'log_outcome': False,
        'count_family': 'negative_binomial',
    },
    'directories': {
        'results_dir': 'results',
        'logs_dir': 'results/logs',
    },
    'logging': {
        'log_level': 'INFO',
        'verbose_libraries': {
            'fiona': 'WARNING',
            'pyogrio': 'WARNING',
            'matplotlib': 'WARNING',
        },
    },
}

VALID_CHOICES = {
    'spatial.contiguity': ('queen', 'rook'),
    'spatial.method': ('geometry', 'vertex'),
    'spatial.island_policy': ('warn', 'raise'),
    'moran.null': ('randomization', 'normality', 'permutation'),
    'analysis.count_family': ('poisson', 'negative_binomial'),
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively overlay ``override`` onto ``base``."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class Config:
    """
    Configuration manager for the application.

    Values come from the in-code defaults, overlaid by the YAML file at
    ``config_path`` when one is given and exists.
    """

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration from file or defaults."""
        self.config_path = config_path
        self.config = self._load_config()
        self.validate()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file merged over the defaults."""
        if not self.config_path:
            return copy.deepcopy(DEFAULT_CONFIG)

        if not os.path.exists(self.config_path):
            logger.warning(f"Configuration file not found: {self.config_path}, using defaults")
            return copy.deepcopy(DEFAULT_CONFIG)

        try:
            with open(self.config_path, 'r') as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {self.config_path}", original_error=e) from e

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigurationError(f"Configuration root must be a mapping: {self.config_path}")

        logger.info(f"Loaded configuration from {self.config_path}")
        return _merge(DEFAULT_CONFIG, loaded)

    def validate(self) -> None:
        """Check enumerated settings against their allowed values."""
        for key, choices in VALID_CHOICES.items():
            value = self.get(key)
            if value not in choices:
                raise ConfigurationError(
                    f"Invalid value for '{key}': {value!r} (expected one of {', '.join(choices)})"
                )

        alpha = self.get('analysis.significance_level')
        if not isinstance(alpha, (int, float)) or not 0 < alpha < 1:
            raise ConfigurationError(f"analysis.significance_level must be in (0, 1), got {alpha!r}")

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation."""
        keys = key_path.split('.')
        result = self.config

        for key in keys:
            if isinstance(result, dict) and key in result:
                result = result[key]
            else:
                return default

        return result

    def get_path(self, key_path: str) -> Path:
        """Get a directory path from configuration, ensuring it exists."""
        path_str = self.get(key_path)
        if not path_str:
            raise ConfigurationError(f"Path configuration '{key_path}' not found")

        path = Path(path_str)
        path.mkdir(parents=True, exist_ok=True)
        return path

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot notation."""
        keys = key_path.split('.')
        target = self.config

        for key in keys[:-1]:
            if key not in target:
                target[key] = {}
            target = target[key]

        target[keys[-1]] = value

    def save(self, path: Optional[str] = None) -> None:
        """Save current configuration to file."""
        save_path = path or self.config_path
        if not save_path:
            raise ConfigurationError("No path specified for saving configuration")

        Path(save_path).parent.mkdir(parents=True, exist_ok=True)
        with open(save_path, 'w') as f:
            yaml.safe_dump(self.config, f, default_flow_style=False, sort_keys=False)

        logger.info(f"Saved configuration to {save_path}")


# Global configuration instance
config = Config()


def initialize_config(config_path: Optional[str] = None) -> Config:
    """
    Initialize the global configuration.

    The shared instance is updated in place so that modules which imported
    ``config`` earlier see the new values.
    """
    loaded = Config(config_path)
    config.config_path = loaded.config_path
    config.config = loaded.config
    return config
