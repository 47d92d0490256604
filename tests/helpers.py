"""
Shared fixtures for the Burglary Spatial Analysis tests.
"""
import numpy as np
import pandas as pd
import geopandas as gpd
from shapely.geometry import box


def unit_id(row: int, col: int) -> str:
    return f"r{row}c{col}"


def grid(rows: int, cols: int, size: float = 1.0) -> gpd.GeoDataFrame:
    """Square lattice of ``rows`` x ``cols`` cells indexed by ``r<row>c<col>``."""
    records = []
    for r in range(rows):
        for c in range(cols):
            records.append({
                'unit_id': unit_id(r, c),
                'row': r,
                'col': c,
                'geometry': box(c * size, r * size, (c + 1) * size, (r + 1) * size),
            })
    return gpd.GeoDataFrame(records, geometry='geometry').set_index('unit_id')


def burglary_grid(rows: int = 6, cols: int = 6, seed: int = 42) -> gpd.GeoDataFrame:
    """Lattice with covariates, a burglary rate and a burglary count."""
    gdf = grid(rows, cols)
    rng = np.random.RandomState(seed)
    n = len(gdf)

    gdf['deprivation'] = gdf['row'] + rng.normal(0, 0.5, n)
    gdf['students'] = rng.uniform(0, 10, n)
    gdf['burglary_rate'] = (
        2.0 + 1.5 * gdf['deprivation'] - 0.3 * gdf['students'] + rng.normal(0, 1.0, n)
    )
    mu = np.exp(0.5 + 0.2 * gdf['deprivation'])
    gdf['burglary_count'] = rng.poisson(mu).astype(float)
    return gdf


def add_island(gdf: gpd.GeoDataFrame, name: str = 'island') -> gpd.GeoDataFrame:
    """Append a unit far away from every other cell."""
    extra = gpd.GeoDataFrame(
        {'row': [-1], 'col': [-1], 'geometry': [box(100, 100, 101, 101)]},
        index=pd.Index([name], name=gdf.index.name),
        geometry='geometry',
    )
    return pd.concat([gdf[['row', 'col', 'geometry']], extra])
