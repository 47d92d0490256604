"""
Argument parsing utilities for Burglary Spatial Analysis CLI.
"""
import argparse
import logging
from typing import List, Optional

logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for the command line interface."""
    parser = argparse.ArgumentParser(
        prog="burglary-spatial",
        description="Burglary Spatial Analysis - contiguity weights, Moran's I and spatial regression",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    # Config file
    parser.add_argument(
        "--config", "-c",
        dest="config_path",
        help="Path to configuration file (YAML)",
        default=None
    )

    # Input options
    parser.add_argument(
        "--data", "-d",
        dest="data_path",
        help="Path to areal-unit file (GeoJSON, GeoPackage, Shapefile or GeoParquet); overrides data.path",
        default=None
    )

    parser.add_argument(
        "--id-column",
        dest="id_column",
        help="Unit identifier column; overrides data.id_column",
        default=None
    )

    parser.add_argument(
        "--outcome",
        help="Burglary rate column; overrides data.outcome",
        default=None
    )

    parser.add_argument(
        "--covariates",
        help="Comma-separated covariate columns; overrides data.covariates",
        default=None
    )

    parser.add_argument(
        "--count",
        help="Raw burglary count column; enables the count model",
        default=None
    )

    # Spatial options
    parser.add_argument(
        "--contiguity",
        choices=["queen", "rook"],
        help="Contiguity rule; overrides spatial.contiguity",
        default=None
    )

    parser.add_argument(
        "--method",
        choices=["geometry", "vertex"],
        help="Adjacency detection method; overrides spatial.method",
        default=None
    )

    parser.add_argument(
        "--permutations",
        type=int,
        help="Use the permutation null for Moran's I with this many permutations",
        default=None
    )

    parser.add_argument(
        "--ml",
        action="store_true",
        help="Also fit maximum-likelihood spatial lag and spatial error models"
    )

    # Output options
    parser.add_argument(
        "--output", "-o",
        dest="output_dir",
        help="Output directory for results; overrides directories.results_dir",
        default=None
    )

    # Logging options
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    return parser


def parse_covariates(covariates_str: Optional[str]) -> List[str]:
    """Parse comma-separated list of covariates."""
    if not covariates_str:
        return []

    return [c.strip() for c in covariates_str.split(",") if c.strip()]
