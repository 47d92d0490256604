"""
Spatial weight matrix module for Burglary Spatial Analysis.

This module provides the SpatialWeightMatrix class, a row-standardised
libpysal weights object tied to the adjacency it was derived from.

Island policy: rows for units without neighbors cannot be standardised.
Under the 'warn' policy they are left as zero rows and an IslandWarning is
emitted; under 'raise' construction fails with IslandError.
"""
import logging
import warnings
from typing import Dict, Hashable, List, Optional, Sequence, Union

import numpy as np
import pandas as pd
import geopandas as gpd
from scipy import sparse
import libpysal.weights as weights

from burglary_spatial_analysis.core.config import config
from burglary_spatial_analysis.core.exceptions import (
    IslandError, IslandWarning, ValidationError
)
from burglary_spatial_analysis.models.spatial.contiguity import Adjacency, build_adjacency

# Initialize logger
logger = logging.getLogger(__name__)

ISLAND_POLICIES = ('warn', 'raise')


class SpatialWeightMatrix:
    """
    Row-standardised spatial weights for areal units.

    Instances are built once from an adjacency relation and are not
    modified afterwards; diagnostics only read from them.

    Attributes:
        w (weights.W): Row-standardised libpysal weights.
        ids (List): Unit identifiers in matrix order.
        islands (List): Identifiers whose rows are zero.
        rule (str): Contiguity rule the weights came from.
    """

    def __init__(self, w: weights.W, rule: str = 'custom', islands: Optional[Sequence] = None):
        """
        Wrap an existing libpysal weights object.

        Prefer ``from_adjacency`` or ``from_geodataframe``; this constructor
        takes ``w`` as given and row-standardises it.

        Args:
            w: libpysal weights object.
            rule: Label for the neighbor rule.
            islands: Identifiers with no neighbors.
        """
        w.transform = 'r'
        self.w = w
        self.ids = list(w.id_order)
        self.islands = list(islands) if islands is not None else list(w.islands)
        self.rule = rule

    @classmethod
    def from_adjacency(
        cls, adjacency: Adjacency, island_policy: Optional[str] = None
    ) -> 'SpatialWeightMatrix':
        """
        Row-standardise an adjacency relation.

        Args:
            adjacency: Neighbor relation from ``build_adjacency``.
            island_policy: 'warn' or 'raise'. Defaults to ``spatial.island_policy``.

        Returns:
            Spatial weight matrix with rows summing to 1 (zero for islands).

        Raises:
            IslandError: If islands exist and the policy is 'raise'.
        """
        policy = island_policy or config.get('spatial.island_policy', 'warn')
        if policy not in ISLAND_POLICIES:
            raise ValidationError(f"Invalid island policy: {policy}")

        if adjacency.has_islands:
            islands = list(adjacency.islands)
            message = (
                f"{len(islands)} of {adjacency.n} units have no {adjacency.rule} neighbors; "
                f"their weight rows are zero"
            )
            if policy == 'raise':
                logger.error(message)
                raise IslandError(message, islands=islands)

            logger.warning(f"{message}: {islands[:10]}")
            warnings.warn(message, IslandWarning, stacklevel=2)

        logger.info(f"Row-standardising {adjacency.rule} weights for {adjacency.n} units")
        return cls(adjacency.to_w(), rule=adjacency.rule, islands=adjacency.islands)

    @classmethod
    def from_geodataframe(
        cls, gdf: gpd.GeoDataFrame, rule: str = 'queen', method: str = 'geometry',
        island_policy: Optional[str] = None
    ) -> 'SpatialWeightMatrix':
        """Build contiguity from ``gdf`` and row-standardise it."""
        adjacency = build_adjacency(gdf, rule=rule, method=method)
        return cls.from_adjacency(adjacency, island_policy=island_policy)

    @classmethod
    def zero_like(cls, ids: Sequence[Hashable]) -> 'SpatialWeightMatrix':
        """All-zero weights over ``ids`` (every unit an island)."""
        neighbors = {unit: [] for unit in ids}
        w = weights.W(neighbors, id_order=list(ids), silence_warnings=True)
        return cls(w, rule='zero', islands=list(ids))

    @property
    def n(self) -> int:
        return self.w.n

    @property
    def s0(self) -> float:
        """Sum of all weights."""
        return float(self.w.s0)

    def sparse(self) -> sparse.csr_matrix:
        """Sparse CSR representation in ``ids`` order."""
        return sparse.csr_matrix(self.w.sparse)

    def dense(self) -> pd.DataFrame:
        """Dense matrix labelled by unit identifier."""
        return pd.DataFrame(self.sparse().toarray(), index=self.ids, columns=self.ids)

    def row_sums(self) -> pd.Series:
        return pd.Series(np.asarray(self.sparse().sum(axis=1)).ravel(), index=self.ids)

    def check_row_standardised(self, tol: float = 1e-10) -> bool:
        """
        True if every non-island row sums to 1 and island rows sum to 0.
        """
        sums = self.row_sums()
        is_island = sums.index.isin(self.islands)
        rows_ok = np.allclose(sums[~is_island].values, 1.0, atol=tol)
        islands_ok = np.allclose(sums[is_island].values, 0.0, atol=tol)
        return bool(rows_ok and islands_ok)

    def align(self, values: Union[pd.Series, np.ndarray, Sequence[float]]) -> np.ndarray:
        """
        Return ``values`` as a float array in matrix order.

        A Series is aligned on its index; anything else must already be in
        ``ids`` order.

        Raises:
            ValidationError: If lengths differ or identifiers are missing.
        """
        if isinstance(values, pd.Series):
            missing = [unit for unit in self.ids if unit not in values.index]
            if missing:
                raise ValidationError(
                    f"Values missing for {len(missing)} units, e.g. {missing[:5]}"
                )
            return values.loc[self.ids].to_numpy(dtype=float)

        arr = np.asarray(values, dtype=float).ravel()
        if arr.shape[0] != self.n:
            raise ValidationError(f"Expected {self.n} values, got {arr.shape[0]}")
        return arr

    def spatial_lag(self, values: Union[pd.Series, np.ndarray]) -> pd.Series:
        """
        Spatial lag W·x of a variable.

        Args:
            values: Series indexed by unit id, or an array in ``ids`` order.

        Returns:
            Series of lagged values indexed by unit id.
        """
        arr = self.align(values)
        return pd.Series(weights.lag_spatial(self.w, arr), index=self.ids)

    def lag_frame(self, frame: pd.DataFrame, prefix: str = 'W_') -> pd.DataFrame:
        """Spatial lag of every column of ``frame`` (aligned on its index)."""
        lagged = {f"{prefix}{col}": self.spatial_lag(frame[col]) for col in frame.columns}
        return pd.DataFrame(lagged, index=self.ids)

    def neighbors_of(self, unit_id: Hashable) -> List[Hashable]:
        try:
            return list(self.w.neighbors[unit_id])
        except KeyError:
            raise ValidationError(f"Invalid unit ID: {unit_id}")

    def weights_of(self, unit_id: Hashable) -> Dict[Hashable, float]:
        """Mapping from each neighbor of ``unit_id`` to its weight."""
        try:
            return dict(zip(self.w.neighbors[unit_id], self.w.weights[unit_id]))
        except KeyError:
            raise ValidationError(f"Invalid unit ID: {unit_id}")

    def __repr__(self) -> str:
        return (
            f"SpatialWeightMatrix(rule={self.rule!r}, n={self.n}, "
            f"islands={len(self.islands)})"
        )
