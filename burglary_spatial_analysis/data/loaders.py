"""
Data loading functions for Burglary Spatial Analysis.

The input is a pre-cleaned areal-unit dataset (one polygon per unit with
numeric covariates and the burglary outcome). Cleaning happens upstream;
these loaders only read, index and select.
"""
import os
import logging
from typing import List, Optional, Sequence

import pandas as pd
import geopandas as gpd

from burglary_spatial_analysis.core.decorators import performance_tracker
from burglary_spatial_analysis.core.exceptions import DataProcessingError, ValidationError
from .validators import validate_columns, validate_unique_ids

logger = logging.getLogger(__name__)

VECTOR_SUFFIXES = ('.geojson', '.json', '.gpkg', '.shp', '.zip')
PARQUET_SUFFIXES = ('.parquet', '.geoparquet')


@performance_tracker()
def load_areal_units(
    file_path: str,
    id_column: Optional[str] = None,
    layer: Optional[str] = None
) -> gpd.GeoDataFrame:
    """
    Load an areal-unit dataset and index it by unit identifier.

    Args:
        file_path: Path to a GeoJSON, GeoPackage, Shapefile or GeoParquet file.
        id_column: Column holding the unit identifier. If None the file's
                   row order is used as the identifier.
        layer: Layer name for multi-layer sources such as GeoPackages.

    Returns:
        GeoDataFrame indexed by ``id_column``.

    Raises:
        DataProcessingError: If the file is missing, unreadable or has an
                             unsupported format.
        ValidationError: If the id column is missing or holds duplicates.
    """
    if not os.path.exists(file_path):
        raise DataProcessingError(f"Data file not found: {file_path}")

    suffix = os.path.splitext(file_path)[1].lower()
    logger.info(f"Loading areal units from {file_path}")

    try:
        if suffix in PARQUET_SUFFIXES:
            gdf = gpd.read_parquet(file_path)
        elif suffix in VECTOR_SUFFIXES:
            gdf = gpd.read_file(file_path, layer=layer) if layer else gpd.read_file(file_path)
        else:
            raise DataProcessingError(f"Unsupported file format: {file_path}")
    except DataProcessingError:
        raise
    except Exception as e:
        logger.error(f"Error reading {file_path}: {e}")
        raise DataProcessingError(f"Error reading {file_path}", original_error=e) from e

    if id_column is not None:
        if id_column not in gdf.columns:
            raise ValidationError(f"Identifier column {id_column} not found in data")
        gdf = gdf.set_index(id_column)
        validate_unique_ids(gdf.index)

    logger.info(f"Loaded {len(gdf)} areal units with {len(gdf.columns) - 1} attributes")
    return gdf


def select_columns(
    gdf: gpd.GeoDataFrame,
    outcome: str,
    covariates: Sequence[str],
    count: Optional[str] = None
) -> gpd.GeoDataFrame:
    """
    Keep the modelling columns, coerced to numeric, and drop incomplete rows.

    Args:
        gdf: Areal-unit frame.
        outcome: Outcome (rate) column.
        covariates: Explanatory columns.
        count: Optional raw-count column.

    Returns:
        A copy with the geometry plus the requested columns, restricted to
        rows where every requested column is present.
    """
    columns: List[str] = [outcome] + list(covariates)
    if count is not None and count not in columns:
        columns.append(count)

    validate_columns(gdf, columns, numeric=False)

    selected = gdf[columns + [gdf.geometry.name]].copy()
    for col in columns:
        selected[col] = pd.to_numeric(selected[col], errors='coerce')

    incomplete = selected[columns].isna().any(axis=1)
    if incomplete.any():
        logger.warning(
            f"Dropping {int(incomplete.sum())} of {len(selected)} units with missing or non-numeric values"
        )
        selected = selected.loc[~incomplete]

    if len(selected) == 0:
        raise DataProcessingError("No complete observations remain after column selection")

    return selected
