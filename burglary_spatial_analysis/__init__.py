"""
Burglary Spatial Analysis.

Spatial econometric analysis of residential burglary over areal units:
polygon contiguity, row-standardised weights, Moran's I, Lagrange
Multiplier diagnostics and spatial lag models.
"""
__version__ = "1.0.0"
