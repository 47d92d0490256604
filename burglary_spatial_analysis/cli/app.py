#!/usr/bin/env python
"""
app.py

Command-line application for Burglary Spatial Analysis.
"""
import sys
import logging
from typing import List, Optional

from burglary_spatial_analysis.core.exceptions import BurglaryAnalysisError

from .commands import run_analysis
from .parsers import create_parser

logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for ``burglary-spatial``. Returns the process exit code."""
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        result = run_analysis(args)
    except BurglaryAnalysisError as e:
        logger.error(f"Analysis failed with error: {e}")
        return 1
    except Exception as e:
        logger.exception(f"Analysis failed with unexpected error: {e}")
        return 1

    logger.info(f"Results saved to: {result['output_dir']}")
    logger.info(f"Suggested specification: {result['suggested_specification']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
