"""
Unit tests for the polygon contiguity module.
"""
import unittest

import geopandas as gpd
from shapely.geometry import Point, Polygon, box

from burglary_spatial_analysis.core.exceptions import GeometryError, ValidationError
from burglary_spatial_analysis.models.spatial.contiguity import build_adjacency

from helpers import add_island, grid, unit_id


class TestGridContiguity(unittest.TestCase):
    """Neighbor counts on regular lattices."""

    def test_two_by_two_degrees(self):
        """Every cell of a 2x2 grid has 2 rook and 3 queen neighbors."""
        gdf = grid(2, 2)

        rook = build_adjacency(gdf, rule='rook')
        queen = build_adjacency(gdf, rule='queen')

        self.assertEqual(set(rook.cardinalities().values()), {2})
        self.assertEqual(set(queen.cardinalities().values()), {3})
        self.assertEqual(len(rook.pairs()), 4)
        self.assertEqual(len(queen.pairs()), 6)

    def test_diagonal_cells_are_queen_only(self):
        gdf = grid(2, 2)

        rook = build_adjacency(gdf, rule='rook')
        queen = build_adjacency(gdf, rule='queen')

        self.assertNotIn(unit_id(1, 1), rook.neighbors[unit_id(0, 0)])
        self.assertIn(unit_id(1, 1), queen.neighbors[unit_id(0, 0)])

    def test_three_by_three_centre_and_corner(self):
        gdf = grid(3, 3)

        rook = build_adjacency(gdf, rule='rook')
        queen = build_adjacency(gdf, rule='queen')

        self.assertEqual(rook.cardinalities()[unit_id(1, 1)], 4)
        self.assertEqual(queen.cardinalities()[unit_id(1, 1)], 8)
        self.assertEqual(rook.cardinalities()[unit_id(0, 0)], 2)
        self.assertEqual(queen.cardinalities()[unit_id(0, 0)], 3)

    def test_rook_is_subset_of_queen(self):
        gdf = grid(4, 5)

        rook = build_adjacency(gdf, rule='rook')
        queen = build_adjacency(gdf, rule='queen')

        for unit in gdf.index:
            self.assertTrue(rook.neighbors[unit] <= queen.neighbors[unit])

    def test_relation_is_symmetric_and_irreflexive(self):
        adjacency = build_adjacency(grid(4, 4), rule='queen')

        self.assertTrue(adjacency.is_symmetric())
        for unit in adjacency.ids:
            self.assertNotIn(unit, adjacency.neighbors[unit])

    def test_ids_follow_input_order(self):
        gdf = grid(3, 3)
        adjacency = build_adjacency(gdf)

        self.assertEqual(adjacency.ids, tuple(gdf.index))

    def test_neighbor_sets_do_not_depend_on_row_order(self):
        gdf = grid(4, 4)
        shuffled = gdf.sample(frac=1.0, random_state=7)

        original = build_adjacency(gdf, rule='rook')
        reordered = build_adjacency(shuffled, rule='rook')

        self.assertEqual(original.neighbors, reordered.neighbors)

    def test_min_shared_length_filters_rook_pairs(self):
        adjacency = build_adjacency(grid(2, 2), rule='rook', min_shared_length=2.0)

        self.assertEqual(len(adjacency.pairs()), 0)
        self.assertEqual(len(adjacency.islands), 4)

    def test_vertex_method_matches_geometry_on_grid(self):
        gdf = grid(3, 4)

        for rule in ('queen', 'rook'):
            geometric = build_adjacency(gdf, rule=rule, method='geometry')
            vertex = build_adjacency(gdf, rule=rule, method='vertex')
            self.assertEqual(geometric.neighbors, vertex.neighbors)

    def test_to_w_preserves_neighbors(self):
        adjacency = build_adjacency(grid(3, 3), rule='queen')
        w = adjacency.to_w()

        self.assertEqual(list(w.id_order), list(adjacency.ids))
        for unit in adjacency.ids:
            self.assertEqual(set(w.neighbors[unit]), set(adjacency.neighbors[unit]))


class TestIslandsAndErrors(unittest.TestCase):
    """Islands, invalid input and option checks."""

    def test_isolated_unit_is_island(self):
        gdf = add_island(grid(2, 2))

        adjacency = build_adjacency(gdf, rule='queen')

        self.assertTrue(adjacency.has_islands)
        self.assertEqual(adjacency.islands, ('island',))
        self.assertEqual(adjacency.neighbors['island'], frozenset())

    def test_invalid_polygon_raises_geometry_error(self):
        bowtie = Polygon([(0, 0), (1, 1), (1, 0), (0, 1)])
        gdf = gpd.GeoDataFrame({'geometry': [box(2, 2, 3, 3), bowtie]}, index=['a', 'b'])

        with self.assertRaises(GeometryError) as ctx:
            build_adjacency(gdf)
        self.assertIn('b', str(ctx.exception))

    def test_point_geometry_raises_geometry_error(self):
        gdf = gpd.GeoDataFrame({'geometry': [box(0, 0, 1, 1), Point(5, 5)]}, index=['a', 'b'])

        with self.assertRaises(GeometryError):
            build_adjacency(gdf)

    def test_empty_geometry_raises_geometry_error(self):
        gdf = gpd.GeoDataFrame({'geometry': [box(0, 0, 1, 1), Polygon()]}, index=['a', 'b'])

        with self.assertRaises(GeometryError):
            build_adjacency(gdf)

    def test_geometry_error_is_validation_error(self):
        self.assertTrue(issubclass(GeometryError, ValidationError))

    def test_duplicate_ids_raise(self):
        gdf = gpd.GeoDataFrame(
            {'geometry': [box(0, 0, 1, 1), box(1, 0, 2, 1)]}, index=['a', 'a']
        )

        with self.assertRaises(ValidationError):
            build_adjacency(gdf)

    def test_invalid_rule_raises(self):
        with self.assertRaises(ValidationError):
            build_adjacency(grid(2, 2), rule='bishop')

    def test_invalid_method_raises(self):
        with self.assertRaises(ValidationError):
            build_adjacency(grid(2, 2), method='raster')


if __name__ == '__main__':
    unittest.main()
