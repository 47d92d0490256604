"""
Unit tests for the data loading functions.
"""
import os
import shutil
import tempfile
import unittest

import numpy as np

from burglary_spatial_analysis.core.exceptions import DataProcessingError, ValidationError
from burglary_spatial_analysis.data.loaders import load_areal_units, select_columns

from helpers import burglary_grid


class TestLoadArealUnits(unittest.TestCase):
    """Tests for reading areal-unit files."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.gdf = burglary_grid(3, 3)
        self.path = os.path.join(self.temp_dir, 'units.geojson')
        self.gdf.reset_index().to_file(self.path, driver='GeoJSON')

    def tearDown(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_load_indexes_by_id(self):
        loaded = load_areal_units(self.path, id_column='unit_id')

        self.assertEqual(list(loaded.index), list(self.gdf.index))
        self.assertIn('burglary_rate', loaded.columns)
        self.assertEqual(len(loaded), 9)

    def test_missing_id_column_raises(self):
        with self.assertRaises(ValidationError):
            load_areal_units(self.path, id_column='LSOA11CD')

    def test_duplicate_ids_raise(self):
        duplicated = self.gdf.reset_index()
        duplicated.loc[1, 'unit_id'] = duplicated.loc[0, 'unit_id']
        path = os.path.join(self.temp_dir, 'duplicated.geojson')
        duplicated.to_file(path, driver='GeoJSON')

        with self.assertRaises(ValidationError):
            load_areal_units(path, id_column='unit_id')

    def test_missing_file_raises(self):
        with self.assertRaises(DataProcessingError):
            load_areal_units(os.path.join(self.temp_dir, 'absent.geojson'))

    def test_unsupported_format_raises(self):
        path = os.path.join(self.temp_dir, 'units.txt')
        with open(path, 'w') as f:
            f.write('not spatial data')

        with self.assertRaises(DataProcessingError):
            load_areal_units(path)


class TestSelectColumns(unittest.TestCase):
    """Tests for selecting the modelling columns."""

    def setUp(self):
        """Set up test fixtures."""
        self.gdf = burglary_grid(3, 3)

    def test_keeps_requested_columns_and_geometry(self):
        selected = select_columns(self.gdf, 'burglary_rate', ['deprivation'], count='burglary_count')

        self.assertEqual(
            list(selected.columns), ['burglary_rate', 'deprivation', 'burglary_count', 'geometry']
        )

    def test_drops_incomplete_rows(self):
        gdf = self.gdf.copy()
        gdf.loc[gdf.index[0], 'deprivation'] = np.nan
        gdf['students'] = gdf['students'].astype(object)
        gdf.loc[gdf.index[1], 'students'] = 'n/a'

        with self.assertLogs('burglary_spatial_analysis.data.loaders', level='WARNING'):
            selected = select_columns(gdf, 'burglary_rate', ['deprivation', 'students'])

        self.assertEqual(len(selected), 7)
        self.assertNotIn(gdf.index[0], selected.index)
        self.assertTrue(np.issubdtype(selected['students'].dtype, np.number))

    def test_no_complete_rows_raises(self):
        gdf = self.gdf.assign(deprivation=np.nan)

        with self.assertRaises(DataProcessingError):
            select_columns(gdf, 'burglary_rate', ['deprivation'])

    def test_missing_column_raises(self):
        with self.assertRaises(ValidationError):
            select_columns(self.gdf, 'burglary_rate', ['absent'])


if __name__ == '__main__':
    unittest.main()
