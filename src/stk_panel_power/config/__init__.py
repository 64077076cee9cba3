"""
Configuration Module

This module provides tools for handling request configuration,
data formats, and input validation.
"""

from .scenario_config import (
    AnalysisWindow,
    ClassicalOrbitalElements,
    PanelPowerRequest,
    SatelliteSpec,
    ScenarioConfig,
    SessionOptions,
    SolarPanelGroupSet,
)
from .data_formats import PowerTimeSeries

__all__ = [
    "AnalysisWindow",
    "ClassicalOrbitalElements",
    "PanelPowerRequest",
    "PowerTimeSeries",
    "SatelliteSpec",
    "ScenarioConfig",
    "SessionOptions",
    "SolarPanelGroupSet",
]
