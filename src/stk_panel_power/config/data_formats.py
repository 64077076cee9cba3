"""
Data Formats Module

This module defines the date strings exchanged with STK and the power time
series returned by the solar panel tool. STK accepts and emits Gregorian UTC
dates such as ``1 Jan 2020 00:00:00.000``; results are read back in epoch
seconds and watts.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional, Sequence

import numpy as np
import pandas as pd

from ..exceptions import DataFormatError


STK_DATE_FORMATS = ("%d %b %Y %H:%M:%S.%f", "%d %b %Y %H:%M:%S", "%d %b %Y %H:%M")


def parse_stk_date(value: str) -> datetime:
    """
    Parse an STK UTCG date string

    Args:
        value: Date such as "1 Jan 2020 00:00:00.000"

    Returns:
        Naive UTC datetime
    """
    text = " ".join(str(value).split())
    for fmt in STK_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    raise ValueError(f"Unrecognised STK date: {value!r}")


@dataclass(frozen=True)
class PowerTimeSeries:
    """Power produced by one solar panel group at each analysis step"""
    group_name: str
    group_index: int
    time_s: np.ndarray
    power_W: np.ndarray
    metadata: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        time_s = np.asarray(self.time_s, dtype=float).reshape(-1)
        power_W = np.asarray(self.power_W, dtype=float).reshape(-1)

        if time_s.shape != power_W.shape:
            raise DataFormatError(
                f"Time and power lengths differ: {time_s.size} vs {power_W.size}"
            )
        if not np.all(np.isfinite(time_s)) or not np.all(np.isfinite(power_W)):
            raise DataFormatError("Power series contains non-finite values")
        if time_s.size > 1 and not np.all(np.diff(time_s) > 0):
            raise DataFormatError("Time offsets must be strictly increasing")

        time_s.setflags(write=False)
        power_W.setflags(write=False)
        object.__setattr__(self, 'time_s', time_s)
        object.__setattr__(self, 'power_W', power_W)

    @classmethod
    def from_values(cls, group_name: str, group_index: int,
                    times: Sequence, powers: Sequence,
                    metadata: Optional[Dict[str, str]] = None) -> "PowerTimeSeries":
        """
        Build a series from the raw tuples a data provider returns

        Args:
            group_name: Solar panel group name
            group_index: 1-based group index
            times: Time offsets in seconds
            powers: Power values in watts
            metadata: Optional descriptive fields

        Returns:
            Validated power time series
        """
        try:
            time_s = np.array(list(times), dtype=float)
            power_W = np.array(list(powers), dtype=float)
        except (TypeError, ValueError) as e:
            raise DataFormatError(f"Non-numeric data returned for group {group_name}: {e}")

        return cls(group_name=group_name, group_index=group_index,
                   time_s=time_s, power_W=power_W, metadata=dict(metadata or {}))

    def __len__(self) -> int:
        return int(self.time_s.size)

    @property
    def duration_s(self) -> float:
        if len(self) == 0:
            return 0.0
        return float(self.time_s[-1] - self.time_s[0])

    def to_array(self) -> np.ndarray:
        """Return the two-column (time, power) array"""
        return np.column_stack((self.time_s, self.power_W))

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame({'Time_s': self.time_s, 'Power_W': self.power_W})

    def energy_Wh(self) -> float:
        """Energy over the window by trapezoidal integration"""
        if len(self) < 2:
            return 0.0
        dt = np.diff(self.time_s)
        mean_power = (self.power_W[1:] + self.power_W[:-1]) / 2.0
        return float(np.sum(dt * mean_power) / 3600.0)

    def cumulative_energy_Wh(self) -> np.ndarray:
        """Running trapezoidal energy at each sample, starting from zero"""
        if len(self) == 0:
            return np.zeros(0)
        t, p = self.time_s, self.power_W
        return np.concatenate(([0.0], np.cumsum(np.diff(t) * (p[1:] + p[:-1]) / 2) / 3600))

    def summary(self) -> Dict[str, float]:
        """
        Summary statistics of the series

        Returns:
            Dictionary with sample count, power extremes, mean, energy and
            the fraction of samples producing power
        """
        if len(self) == 0:
            return {
                'samples': 0,
                'duration_s': 0.0,
                'min_power_W': math.nan,
                'max_power_W': math.nan,
                'mean_power_W': math.nan,
                'energy_Wh': 0.0,
                'sunlit_fraction': math.nan,
            }

        return {
            'samples': len(self),
            'duration_s': self.duration_s,
            'min_power_W': float(np.min(self.power_W)),
            'max_power_W': float(np.max(self.power_W)),
            'mean_power_W': float(np.mean(self.power_W)),
            'energy_Wh': self.energy_Wh(),
            'sunlit_fraction': float(np.mean(self.power_W > 0)),
        }

