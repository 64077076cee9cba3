"""
Visualization Module

This module provides tools for creating interactive visualizations
and exporting solar panel power results.
"""

from .interactive_plots import PowerPlots
from .data_export import DataExporter, ExportMetadata

__all__ = ["PowerPlots", "DataExporter", "ExportMetadata"]
