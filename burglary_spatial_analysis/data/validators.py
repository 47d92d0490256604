"""
Data validation functions for Burglary Spatial Analysis.

Geometry problems are fatal: adjacency cannot be derived from missing,
empty or self-intersecting polygons, so they raise GeometryError rather
than being repaired silently.
"""
import logging
from typing import Iterable, List

import pandas as pd
import geopandas as gpd
from shapely.validation import explain_validity

from burglary_spatial_analysis.core.exceptions import GeometryError, ValidationError

logger = logging.getLogger(__name__)

POLYGON_TYPES = ('Polygon', 'MultiPolygon')

# Number of offending ids quoted in error messages
_MAX_REPORTED = 5


def _preview(ids: List) -> str:
    shown = ', '.join(str(i) for i in ids[:_MAX_REPORTED])
    if len(ids) > _MAX_REPORTED:
        shown += f", ... ({len(ids)} in total)"
    return shown


def validate_geometries(gdf: gpd.GeoDataFrame) -> bool:
    """
    Validate the polygon geometries of an areal-unit frame.

    Args:
        gdf: GeoDataFrame with one polygon per areal unit.

    Returns:
        True if every geometry is a non-empty, valid polygon.

    Raises:
        ValidationError: If the input is not a GeoDataFrame or has no rows.
        GeometryError: If any geometry is missing, empty, non-polygonal or invalid.
    """
    if not isinstance(gdf, gpd.GeoDataFrame):
        raise ValidationError("Data is not a GeoDataFrame")

    if len(gdf) == 0:
        raise ValidationError("GeoDataFrame has no rows")

    geoms = gdf.geometry

    missing = list(gdf.index[geoms.isna()])
    if missing:
        logger.error(f"Missing geometries for {len(missing)} units")
        raise GeometryError(f"Missing geometries for units: {_preview(missing)}")

    empty = list(gdf.index[geoms.is_empty])
    if empty:
        logger.error(f"Empty geometries for {len(empty)} units")
        raise GeometryError(f"Empty geometries for units: {_preview(empty)}")

    wrong_type = list(gdf.index[~geoms.geom_type.isin(POLYGON_TYPES)])
    if wrong_type:
        logger.error(f"Non-polygon geometries for {len(wrong_type)} units")
        raise GeometryError(f"Non-polygon geometries for units: {_preview(wrong_type)}")

    invalid_mask = ~geoms.is_valid
    if invalid_mask.any():
        invalid = list(gdf.index[invalid_mask])
        reason = explain_validity(geoms[invalid_mask].iloc[0])
        logger.error(f"Invalid geometries for {len(invalid)} units: {reason}")
        raise GeometryError(f"Invalid geometries for units: {_preview(invalid)} ({reason})")

    logger.debug(f"Validated {len(gdf)} polygon geometries")
    return True


def validate_columns(df: pd.DataFrame, columns: Iterable[str], numeric: bool = True) -> bool:
    """
    Check that the given columns exist and, optionally, are numeric.

    Raises:
        ValidationError: If a column is missing or not numeric.
    """
    columns = list(columns)
    missing = [col for col in columns if col not in df.columns]
    if missing:
        logger.error(f"Missing required columns: {missing}")
        raise ValidationError(f"Missing required columns: {', '.join(missing)}")

    if numeric:
        non_numeric = [col for col in columns if not pd.api.types.is_numeric_dtype(df[col])]
        if non_numeric:
            logger.error(f"Non-numeric columns: {non_numeric}")
            raise ValidationError(f"Columns must be numeric: {', '.join(non_numeric)}")

    return True


def validate_unique_ids(index: pd.Index) -> bool:
    """Raise ValidationError if the areal-unit identifiers are not unique."""
    duplicated = index[index.duplicated()].unique().tolist()
    if duplicated:
        logger.error(f"Duplicate unit identifiers: {duplicated[:_MAX_REPORTED]}")
        raise ValidationError(f"Duplicate unit identifiers: {_preview(duplicated)}")
    return True
