"""
Data Export
===========

Handles export of solar panel power results in various formats.

This module provides CSV, JSON and Excel export of a power time series
together with its summary statistics.

Classes:
    ExportMetadata: Descriptive fields written with every export
    DataExporter: Main data export class
"""

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from ..config.data_formats import PowerTimeSeries


@dataclass
class ExportMetadata:
    """Metadata attached to exported results"""
    scenario_name: str
    group_name: str
    group_index: int
    export_timestamp: datetime = field(default_factory=datetime.now)
    software_version: str = "1.0.0"
    units: Dict[str, str] = field(default_factory=lambda: {"time": "s", "power": "W"})
    notes: str = ""

    def to_dict(self) -> Dict:
        data = asdict(self)
        data['export_timestamp'] = self.export_timestamp.isoformat()
        return data


class DataExporter:
    """Main data export class"""

    def __init__(self, export_dir: str = "exports"):
        """
        Initialize data exporter

        Args:
            export_dir: Directory receiving exported files
        """
        self.export_dir = Path(export_dir)
        self.export_dir.mkdir(parents=True, exist_ok=True)

    def _filepath(self, series: PowerTimeSeries, suffix: str,
                  filename: Optional[str]) -> Path:
        if filename is None:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            filename = f"panel_power_{series.group_name}_{timestamp}{suffix}"
        return self.export_dir / filename

    def _metadata(self, series: PowerTimeSeries,
                  metadata: Optional[ExportMetadata]) -> ExportMetadata:
        if metadata is not None:
            return metadata
        return ExportMetadata(
            scenario_name=series.metadata.get('scenario', ''),
            group_name=series.group_name,
            group_index=series.group_index,
        )

    def export_csv(self, series: PowerTimeSeries, filename: str = None) -> str:
        """
        Export a power series to CSV, with a summary CSV alongside

        Args:
            series: Power time series
            filename: Optional custom filename

        Returns:
            Path to exported file
        """
        filepath = self._filepath(series, ".csv", filename)

        df = series.to_dataframe()
        df['Time_min'] = df['Time_s'] / 60.0
        df.to_csv(filepath, index=False)

        summary_filepath = filepath.with_name(f"summary_{filepath.name}")
        self._summary_frame(series).to_csv(summary_filepath, index=False)

        return str(filepath)

    def export_json(self, series: PowerTimeSeries, filename: str = None,
                    metadata: Optional[ExportMetadata] = None) -> str:
        """
        Export a power series to JSON

        Args:
            series: Power time series
            filename: Optional custom filename
            metadata: Optional export metadata

        Returns:
            Path to exported file
        """
        filepath = self._filepath(series, ".json", filename)

        export_data = {
            'metadata': self._metadata(series, metadata).to_dict(),
            'run': dict(series.metadata),
            'time_series': {
                'time_s': series.time_s.tolist(),
                'power_W': series.power_W.tolist()
            },
            'summary': series.summary()
        }

        with open(filepath, 'w') as f:
            json.dump(export_data, f, indent=2)

        return str(filepath)

    def export_excel(self, series: PowerTimeSeries, filename: str = None,
                     metadata: Optional[ExportMetadata] = None) -> str:
        """
        Export a power series to Excel with time series, summary and
        metadata sheets

        Args:
            series: Power time series
            filename: Optional custom filename
            metadata: Optional export metadata

        Returns:
            Path to exported file
        """
        filepath = self._filepath(series, ".xlsx", filename)

        with pd.ExcelWriter(filepath, engine='openpyxl') as writer:
            main_df = pd.DataFrame({
                'Time (s)': series.time_s,
                'Time (min)': series.time_s / 60.0,
                'Power (W)': series.power_W
            })
            main_df.to_excel(writer, sheet_name='Time Series', index=False)

            self._summary_frame(series).to_excel(writer, sheet_name='Summary', index=False)

            meta = self._metadata(series, metadata).to_dict()
            meta['units'] = json.dumps(meta['units'])
            meta_df = pd.DataFrame(list(meta.items()), columns=['Field', 'Value'])
            meta_df.to_excel(writer, sheet_name='Metadata', index=False)

        return str(filepath)

    def export(self, series: PowerTimeSeries, formats: List[str],
               basename: str, metadata: Optional[ExportMetadata] = None) -> Dict[str, str]:
        """
        Export in several formats at once

        Args:
            series: Power time series
            formats: Any of "csv", "json", "excel"
            basename: File name without suffix
            metadata: Optional export metadata

        Returns:
            Dictionary of format to path
        """
        generated = {}
        for fmt in formats:
            fmt = fmt.lower()
            if fmt == "csv":
                generated['csv'] = self.export_csv(series, f"{basename}.csv")
            elif fmt == "json":
                generated['json'] = self.export_json(series, f"{basename}.json", metadata)
            elif fmt in ("excel", "xlsx"):
                generated['excel'] = self.export_excel(series, f"{basename}.xlsx", metadata)
            else:
                raise ValueError(f"Unsupported export format: {fmt}")
        return generated

    def _summary_frame(self, series: PowerTimeSeries) -> pd.DataFrame:
        summary = series.summary()
        labels = {
            'samples': 'Samples',
            'duration_s': 'Duration (s)',
            'min_power_W': 'Min Power (W)',
            'max_power_W': 'Max Power (W)',
            'mean_power_W': 'Mean Power (W)',
            'energy_Wh': 'Energy (Wh)',
            'sunlit_fraction': 'Sunlit Fraction',
        }
        return pd.DataFrame({
            'Metric': [labels[key] for key in labels],
            'Value': [summary[key] for key in labels]
        })
