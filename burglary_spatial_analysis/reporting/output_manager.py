"""
Output file management for Burglary Spatial Analysis.
"""
import os
import json
import logging
from datetime import datetime
from typing import Any, Dict, Optional

import numpy as np
import pandas as pd

from burglary_spatial_analysis.core.config import config
from burglary_spatial_analysis.core.exceptions import DataProcessingError
from burglary_spatial_analysis.reporting.summaries import format_report

logger = logging.getLogger(__name__)


class NumpyEncoder(json.JSONEncoder):
    """JSON encoder that handles NumPy types."""

    def default(self, obj):
        if isinstance(obj, np.integer):
            return int(obj)
        elif isinstance(obj, np.floating):
            return None if np.isnan(obj) else float(obj)
        elif isinstance(obj, np.ndarray):
            return obj.tolist()
        elif isinstance(obj, np.bool_):
            return bool(obj)
        elif isinstance(obj, (datetime, pd.Timestamp)):
            return obj.isoformat()
        return super(NumpyEncoder, self).default(obj)


class OutputManager:
    """Writes the files of one analysis run into a dated directory."""

    def __init__(self, output_dir: Optional[str] = None, analysis_name: str = 'burglary'):
        self.base_dir = output_dir or config.get('directories.results_dir', 'results')
        self.analysis_name = analysis_name
        self.timestamp = datetime.now().strftime("%Y%m%d")

        self.analysis_dir = os.path.join(self.base_dir, f"{self.analysis_name}_{self.timestamp}")
        os.makedirs(self.analysis_dir, exist_ok=True)
        logger.info(f"Set up output directory at {self.analysis_dir}")

        self.manifest: Dict[str, Any] = {
            "timestamp": self.timestamp,
            "analysis": self.analysis_name,
            "files": []
        }

    def _path(self, filename: str) -> str:
        return os.path.join(self.analysis_dir, filename)

    def _register(self, filename: str, kind: str) -> None:
        self.manifest["files"].append({"path": filename, "type": kind})

    def save_text(self, text: str, filename: str) -> str:
        """Save plain text to a file."""
        file_path = self._path(filename)
        try:
            with open(file_path, 'w', encoding='utf-8') as f:
                f.write(text)
        except OSError as e:
            raise DataProcessingError(f"Error saving text to {file_path}", original_error=e) from e

        self._register(filename, "text")
        logger.info(f"Saved text to {file_path}")
        return file_path

    def save_json(self, data: Dict[str, Any], filename: str) -> str:
        """Save data as JSON file."""
        file_path = self._path(filename)
        try:
            with open(file_path, 'w') as f:
                json.dump(data, f, cls=NumpyEncoder, indent=2)
        except (OSError, TypeError) as e:
            raise DataProcessingError(f"Error saving JSON to {file_path}", original_error=e) from e

        self._register(filename, "json")
        logger.info(f"Saved JSON to {file_path}")
        return file_path

    def save_csv(self, df: pd.DataFrame, filename: str, index: bool = True) -> str:
        """Save DataFrame as CSV file."""
        file_path = self._path(filename)
        try:
            df.to_csv(file_path, index=index)
        except OSError as e:
            raise DataProcessingError(f"Error saving CSV to {file_path}", original_error=e) from e

        self._register(filename, "csv")
        logger.info(f"Saved CSV to {file_path}")
        return file_path

    def save_manifest(self) -> str:
        """Save manifest file with listing of all outputs."""
        return self.save_json(self.manifest, "manifest.json")


def _spatial_results(report) -> Dict[str, Any]:
    results: Dict[str, Any] = {
        "outcome": report.outcome,
        "covariates": report.covariates,
        "n_units": report.n_units,
        "contiguity": report.contiguity,
        "islands": list(report.weights.islands),
        "suggested_specification": report.suggested_specification,
        "notes": report.notes,
        "timestamp": report.timestamp,
    }
    if report.outcome_moran is not None:
        results["outcome_moran"] = report.outcome_moran.as_dict()
    if report.residual_moran is not None:
        results["residual_moran"] = report.residual_moran.as_dict()
    if report.lm_tests is not None:
        results["lm_tests"] = report.lm_tests.to_frame().to_dict(orient='index')
    for name, result in (('ml_lag', report.ml_lag), ('ml_error', report.ml_error)):
        if result is not None:
            results[name] = {
                "parameter": result.spatial_parameter_name,
                "value": result.spatial_parameter,
                "std_error": result.spatial_std_error,
                "p_value": result.spatial_p_value,
                "log_likelihood": result.log_likelihood,
                "aic": result.aic,
            }
    return results


def save_report(report, output_dir: Optional[str] = None) -> str:
    """
    Write the summary, result JSON and coefficient tables of a run.

    Args:
        report: Result of ``run_analysis``.
        output_dir: Base results directory. Defaults to ``directories.results_dir``.

    Returns:
        Directory the files were written to.
    """
    manager = OutputManager(output_dir)
    alpha = config.get('analysis.significance_level', 0.05)

    manager.save_text(format_report(report, alpha), "summary.txt")
    manager.save_json(_spatial_results(report), "spatial_results.json")

    manager.save_csv(report.descriptives, "descriptives.csv")
    manager.save_csv(report.correlations, "correlations.csv", index=False)
    manager.save_csv(report.vif.to_frame(), "vif.csv")
    manager.save_csv(report.ols.coefficient_table(), "ols_coefficients.csv")
    manager.save_csv(report.model_comparison(), "model_comparison.csv")

    if report.lm_tests is not None:
        manager.save_csv(report.lm_tests.to_frame(), "lm_tests.csv")
    if report.slx is not None:
        manager.save_csv(report.slx.coefficient_table(), "slx_coefficients.csv")
        manager.save_csv(report.slx.impacts(), "slx_impacts.csv")
    for name, result in (('ml_lag', report.ml_lag), ('ml_error', report.ml_error)):
        if result is not None:
            manager.save_csv(result.coefficient_table(), f"{name}_coefficients.csv")
    if report.count_model is not None:
        manager.save_csv(report.count_model.coefficient_table(), "count_model_coefficients.csv")

    manager.save_manifest()
    logger.info(f"Saved analysis outputs to {manager.analysis_dir}")
    return manager.analysis_dir
