"""
STK Solar Panel Power
=====================

Computes solar panel power over time for satellites with non-standard
geometry by driving STK's solar panel tool through its automation
interface. Orbit propagation, attitude and illumination are all computed
by STK; this package configures the scenario and reads the results back.

Main Components:
- STK connection with version fallback
- Scoped automation session
- Connect command descriptors
- Solar panel power analysis
- Configuration, export and plotting

Usage:
    >>> from stk_panel_power import generate_solar_panel_power
    >>> data = generate_solar_panel_power(
    ...     "1 Jan 2020 00:00:00", "1 Jan 2020 01:00:00", 60,
    ...     [7000, 0.001, 51.6, 0, 0, 0], "1 Jan 2020 00:00:00",
    ...     "sat.dae", 2, ["PanelA", "PanelB"], group_index=1)
"""

from .analysis.panel_power import SolarPanelPowerAnalysis, generate_solar_panel_power
from .config.data_formats import PowerTimeSeries
from .config.scenario_config import PanelPowerRequest
from .exceptions import (
    DataFormatError,
    PanelGroupIndexError,
    StkConnectionError,
    StkPanelPowerError,
)

__version__ = "1.0.0"

__all__ = [
    "SolarPanelPowerAnalysis",
    "generate_solar_panel_power",
    "PowerTimeSeries",
    "PanelPowerRequest",
    "DataFormatError",
    "PanelGroupIndexError",
    "StkConnectionError",
    "StkPanelPowerError",
]
