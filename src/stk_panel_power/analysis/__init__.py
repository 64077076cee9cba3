"""
Analysis Module

This module runs STK's solar panel power tool and returns the power
produced by a panel group over time.
"""

from .panel_power import SolarPanelPowerAnalysis, generate_solar_panel_power

__all__ = ["SolarPanelPowerAnalysis", "generate_solar_panel_power"]
