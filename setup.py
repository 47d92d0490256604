#!/usr/bin/env python
"""
Setup script for Burglary Spatial Analysis package.

This package provides tools for analysing the spatial distribution of
burglary over areal units, with a focus on spatial econometric methods.
"""
from setuptools import setup, find_packages

setup(
    name="burglary_spatial_analysis",
    version="1.0.0",
    description="Spatial econometric analysis of burglary over areal units",
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    install_requires=[
        "numpy>=1.20.0",
        "pandas>=1.3.0",
        "scipy>=1.7.0",
        "statsmodels>=0.13.0",
        "geopandas>=0.12.0",
        "shapely>=2.0.0",
        "libpysal>=4.7.0",
        "esda>=2.4.0",
        "spreg>=1.3.0",
        "pyyaml>=6.0",
    ],
    extras_require={
        "dev": [
            "pytest>=6.0.0",
            "pytest-cov>=2.12.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "burglary-spatial=burglary_spatial_analysis.cli.app:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Information Analysis",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
    ],
    python_requires=">=3.9",
)
