"""
Command implementation for Burglary Spatial Analysis CLI.
"""
import time
import logging
import argparse
from typing import Any, Dict

from burglary_spatial_analysis.core.config import config, initialize_config
from burglary_spatial_analysis.core.exceptions import ConfigurationError
from burglary_spatial_analysis.core.logging_setup import setup_logging_from_config
from burglary_spatial_analysis.data.loaders import load_areal_units
from burglary_spatial_analysis.analysis.pipeline import run_analysis as run_pipeline
from burglary_spatial_analysis.reporting.output_manager import save_report

from .parsers import parse_covariates

logger = logging.getLogger(__name__)


def apply_overrides(args: argparse.Namespace) -> None:
    """Copy command-line options onto the configuration."""
    if args.data_path:
        config.set('data.path', args.data_path)
    if args.id_column:
        config.set('data.id_column', args.id_column)
    if args.outcome:
        config.set('data.outcome', args.outcome)
    if args.covariates:
        config.set('data.covariates', parse_covariates(args.covariates))
    if args.count:
        config.set('data.count', args.count)
    if args.contiguity:
        config.set('spatial.contiguity', args.contiguity)
    if args.method:
        config.set('spatial.method', args.method)
    if args.permutations is not None:
        config.set('moran.null', 'permutation')
        config.set('moran.permutations', args.permutations)
    if args.output_dir:
        config.set('directories.results_dir', args.output_dir)

    config.validate()


def run_analysis(args: argparse.Namespace) -> Dict[str, Any]:
    """Run the burglary analysis with the given arguments."""
    start_time = time.time()

    # Initialize configuration
    initialize_config(args.config_path)
    apply_overrides(args)

    # Set up logging
    log_level = "DEBUG" if args.debug else "INFO" if args.verbose else None
    setup_logging_from_config(log_level=log_level)

    logger.info("Starting Burglary Spatial Analysis")
    if args.config_path:
        logger.info(f"Configuration loaded from: {args.config_path}")

    covariates = config.get('data.covariates') or []
    if not covariates:
        raise ConfigurationError("No covariates configured; pass --covariates or set data.covariates")

    data_path = config.get('data.path')
    logger.info(f"Loading areal units from: {data_path}")
    gdf = load_areal_units(data_path, id_column=config.get('data.id_column'))

    report = run_pipeline(
        gdf,
        outcome=config.get('data.outcome'),
        covariates=covariates,
        count=config.get('data.count'),
        run_ml=args.ml,
    )

    output_dir = save_report(report, config.get('directories.results_dir'))

    elapsed_time = time.time() - start_time
    logger.info(f"Analysis completed in {elapsed_time:.2f} seconds")

    return {
        "report": report,
        "output_dir": output_dir,
        "suggested_specification": report.suggested_specification,
        "total_time": elapsed_time,
    }
