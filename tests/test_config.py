"""
Unit tests for configuration management.
"""
import os
import shutil
import tempfile
import unittest

import yaml

from burglary_spatial_analysis.core.config import (
    DEFAULT_CONFIG, Config, config, initialize_config
)
from burglary_spatial_analysis.core.exceptions import ConfigurationError


class TestConfig(unittest.TestCase):
    """Tests for the Config class."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        """Clean up test fixtures."""
        initialize_config(None)
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _write(self, content: str) -> str:
        path = os.path.join(self.temp_dir, 'config.yaml')
        with open(path, 'w') as f:
            f.write(content)
        return path

    def test_defaults(self):
        cfg = Config()

        self.assertEqual(cfg.get('spatial.contiguity'), 'queen')
        self.assertEqual(cfg.get('spatial.island_policy'), 'warn')
        self.assertEqual(cfg.get('moran.null'), 'randomization')
        self.assertEqual(cfg.get('analysis.significance_level'), 0.05)
        self.assertEqual(cfg.get('data.covariates'), DEFAULT_CONFIG['data']['covariates'])

    def test_yaml_overrides_are_merged(self):
        path = self._write("spatial:\n  contiguity: rook\nmoran:\n  permutations: 99\n")

        cfg = Config(path)

        self.assertEqual(cfg.get('spatial.contiguity'), 'rook')
        self.assertEqual(cfg.get('spatial.island_policy'), 'warn')
        self.assertEqual(cfg.get('moran.permutations'), 99)
        self.assertEqual(cfg.get('moran.null'), 'randomization')

    def test_missing_file_uses_defaults(self):
        cfg = Config(os.path.join(self.temp_dir, 'absent.yaml'))

        self.assertEqual(cfg.get('spatial.contiguity'), 'queen')

    def test_invalid_choice_raises(self):
        path = self._write("spatial:\n  contiguity: bishop\n")

        with self.assertRaises(ConfigurationError):
            Config(path)

    def test_invalid_significance_level_raises(self):
        path = self._write("analysis:\n  significance_level: 5\n")

        with self.assertRaises(ConfigurationError):
            Config(path)

    def test_invalid_yaml_raises(self):
        path = self._write("spatial: [unclosed\n")

        with self.assertRaises(ConfigurationError):
            Config(path)

    def test_get_and_set(self):
        cfg = Config()

        cfg.set('moran.seed', 7)
        cfg.set('new.nested.key', 'value')

        self.assertEqual(cfg.get('moran.seed'), 7)
        self.assertEqual(cfg.get('new.nested.key'), 'value')
        self.assertIsNone(cfg.get('does.not.exist'))
        self.assertEqual(cfg.get('does.not.exist', 'fallback'), 'fallback')

    def test_defaults_are_not_shared(self):
        cfg = Config()
        cfg.set('spatial.contiguity', 'rook')

        self.assertEqual(DEFAULT_CONFIG['spatial']['contiguity'], 'queen')

    def test_save_round_trip(self):
        cfg = Config()
        cfg.set('spatial.contiguity', 'rook')
        path = os.path.join(self.temp_dir, 'saved', 'config.yaml')

        cfg.save(path)

        with open(path) as f:
            saved = yaml.safe_load(f)
        self.assertEqual(saved['spatial']['contiguity'], 'rook')
        self.assertEqual(Config(path).get('spatial.contiguity'), 'rook')

    def test_get_path_creates_directory(self):
        cfg = Config()
        target = os.path.join(self.temp_dir, 'results')
        cfg.set('directories.results_dir', target)

        path = cfg.get_path('directories.results_dir')

        self.assertTrue(path.is_dir())

    def test_initialize_config_updates_shared_instance(self):
        path = self._write("spatial:\n  method: vertex\n")

        returned = initialize_config(path)

        self.assertIs(returned, config)
        self.assertEqual(config.get('spatial.method'), 'vertex')


if __name__ == '__main__':
    unittest.main()
