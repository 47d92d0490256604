"""
Polygon contiguity module for Burglary Spatial Analysis.

Derives the neighbor relation between areal units from shared polygon
boundaries. Two rules are supported:

* ``queen``: the boundaries share at least one point.
* ``rook``: the boundaries share a segment of positive length.

Every rook pair is therefore also a queen pair. Units without neighbors are
kept as islands.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Hashable, List, Tuple

import numpy as np
import geopandas as gpd
import shapely
from shapely import STRtree
import libpysal.weights as weights

from burglary_spatial_analysis.core.decorators import performance_tracker
from burglary_spatial_analysis.core.exceptions import ValidationError
from burglary_spatial_analysis.data.validators import validate_geometries, validate_unique_ids

# Initialize logger
logger = logging.getLogger(__name__)

RULES = ('queen', 'rook')
METHODS = ('geometry', 'vertex')


@dataclass(frozen=True)
class Adjacency:
    """
    Symmetric neighbor relation over areal-unit identifiers.

    Attributes:
        rule: Contiguity rule used ('queen' or 'rook').
        ids: Unit identifiers in input order.
        neighbors: Mapping from identifier to the frozenset of its neighbors.
        islands: Identifiers with no neighbors, in input order.
    """
    rule: str
    ids: Tuple[Hashable, ...]
    neighbors: Dict[Hashable, FrozenSet[Hashable]] = field(repr=False)
    islands: Tuple[Hashable, ...] = ()

    @property
    def n(self) -> int:
        return len(self.ids)

    @property
    def has_islands(self) -> bool:
        return len(self.islands) > 0

    def cardinalities(self) -> Dict[Hashable, int]:
        """Number of neighbors per unit."""
        return {i: len(self.neighbors[i]) for i in self.ids}

    def is_symmetric(self) -> bool:
        return all(i in self.neighbors[j] for i in self.ids for j in self.neighbors[i])

    def pairs(self) -> List[Tuple[Hashable, Hashable]]:
        """Unordered neighbor pairs, each listed once in input order."""
        position = {unit: k for k, unit in enumerate(self.ids)}
        return sorted(
            ((i, j) for i in self.ids for j in self.neighbors[i] if position[i] < position[j]),
            key=lambda pair: (position[pair[0]], position[pair[1]])
        )

    def to_w(self) -> weights.W:
        """Binary libpysal weights with the same ids and neighbor sets."""
        position = {unit: k for k, unit in enumerate(self.ids)}
        neighbors = {
            i: sorted(self.neighbors[i], key=position.__getitem__) for i in self.ids
        }
        return weights.W(neighbors, id_order=list(self.ids), silence_warnings=True)


def _check_options(rule: str, method: str) -> None:
    if rule not in RULES:
        raise ValidationError(f"Invalid contiguity rule: {rule} (expected 'queen' or 'rook')")
    if method not in METHODS:
        raise ValidationError(f"Invalid contiguity method: {method} (expected 'geometry' or 'vertex')")


def _geometric_pairs(geoms: np.ndarray, rule: str, min_shared_length: float) -> List[Tuple[int, int]]:
    """Positional (i, j) pairs, i < j, that satisfy the contiguity rule."""
    tree = STRtree(geoms)
    left, right = tree.query(geoms, predicate='intersects')

    candidates = left < right
    left, right = left[candidates], right[candidates]
    if len(left) == 0:
        return []

    boundaries = shapely.boundary(geoms)
    shared = shapely.intersection(boundaries[left], boundaries[right])

    if rule == 'queen':
        keep = ~shapely.is_empty(shared)
    else:
        keep = shapely.length(shared) > min_shared_length

    return list(zip(left[keep].tolist(), right[keep].tolist()))


def _vertex_pairs(gdf: gpd.GeoDataFrame, rule: str) -> List[Tuple[int, int]]:
    """Positional pairs from libpysal's shared-vertex contiguity."""
    positional = gdf.reset_index(drop=True)
    builder = weights.Queen if rule == 'queen' else weights.Rook
    w = builder.from_dataframe(positional, silence_warnings=True)

    pairs = []
    for i, nbrs in w.neighbors.items():
        pairs.extend((int(i), int(j)) for j in nbrs if int(i) < int(j))
    return pairs


@performance_tracker()
def build_adjacency(
    gdf: gpd.GeoDataFrame,
    rule: str = 'queen',
    method: str = 'geometry',
    min_shared_length: float = 0.0
) -> Adjacency:
    """
    Build the contiguity relation between the polygons of ``gdf``.

    Args:
        gdf: GeoDataFrame indexed by unit identifier, one polygon per row.
        rule: 'queen' (any shared boundary point) or 'rook' (shared edge).
        method: 'geometry' intersects boundaries directly; 'vertex' uses
                libpysal's shared-vertex algorithm, which is faster but
                only sees neighbors whose boundaries share vertices.
        min_shared_length: Shared boundary length a rook pair must exceed.

    Returns:
        Adjacency relation. Neighbor sets do not depend on row order.

    Raises:
        ValidationError: If the options are invalid or identifiers repeat.
        GeometryError: If any geometry is missing, empty, non-polygonal or invalid.
    """
    _check_options(rule, method)
    validate_geometries(gdf)
    validate_unique_ids(gdf.index)

    logger.info(
        f"Building {rule} contiguity for {len(gdf)} units using {method} method",
        extra={"step": "contiguity", "n_units": len(gdf), "rule": rule}
    )

    ids = tuple(gdf.index)
    if method == 'geometry':
        geoms = np.asarray(gdf.geometry.values, dtype=object)
        pairs = _geometric_pairs(geoms, rule, min_shared_length)
    else:
        pairs = _vertex_pairs(gdf, rule)

    collected: Dict[Hashable, set] = {unit: set() for unit in ids}
    for i, j in pairs:
        collected[ids[i]].add(ids[j])
        collected[ids[j]].add(ids[i])

    neighbors = {unit: frozenset(nbrs) for unit, nbrs in collected.items()}
    islands = tuple(unit for unit in ids if not neighbors[unit])

    if islands:
        logger.warning(f"{len(islands)} units have no {rule} neighbors: {list(islands)[:10]}")

    adjacency = Adjacency(rule=rule, ids=ids, neighbors=neighbors, islands=islands)
    logger.info(
        f"Built {rule} contiguity: {len(pairs)} neighbor pairs, "
        f"mean {2 * len(pairs) / max(len(ids), 1):.2f} neighbors per unit"
    )
    return adjacency
