"""
Interactive Plots Module

This module creates interactive visualizations of solar panel power
computed by STK using Plotly.
"""

from pathlib import Path
from typing import Dict, Optional

import plotly.graph_objects as go
from plotly.subplots import make_subplots

from ..config.data_formats import PowerTimeSeries


class PowerPlots:
    """Interactive plots of solar panel power time series"""

    def __init__(self, theme: str = "plotly_white"):
        """
        Initialize plots

        Args:
            theme: Plotly theme for styling
        """
        self.theme = theme

    def plot_power(self, series: PowerTimeSeries,
                   title: Optional[str] = None) -> go.Figure:
        """
        Power over the analysis window with the mean marked

        Args:
            series: Power time series
            title: Plot title

        Returns:
            Plotly figure object
        """
        title = title or f"Solar Panel Power - {series.group_name}"
        fig = go.Figure()
        if len(series) == 0:
            fig.update_layout(title=title, template=self.theme)
            return fig

        fig.add_trace(
            go.Scatter(
                x=series.time_s / 60.0,
                y=series.power_W,
                mode='lines+markers',
                name=series.group_name,
                line=dict(color='royalblue', width=2),
                hovertemplate='Time: %{x:.1f} min<br>Power: %{y:.2f} W<extra></extra>'
            )
        )

        summary = series.summary()
        fig.add_hline(
            y=summary['mean_power_W'],
            line_dash="dash",
            line_color="gray",
            annotation_text=f"Mean {summary['mean_power_W']:.1f} W"
        )

        fig.update_layout(
            title=title,
            xaxis_title="Time from start (min)",
            yaxis_title="Power (W)",
            template=self.theme,
            hovermode='x unified'
        )
        return fig

    def compare_groups(self, groups: Dict[str, PowerTimeSeries],
                       title: str = "Solar Panel Group Comparison") -> go.Figure:
        """Overlay several groups, with cumulative energy below"""
        fig = make_subplots(rows=2, cols=1, shared_xaxes=True,
                            subplot_titles=('Power', 'Cumulative Energy'),
                            vertical_spacing=0.1)

        for name, series in groups.items():
            minutes = series.time_s / 60.0
            fig.add_trace(go.Scatter(x=minutes, y=series.power_W, mode='lines', name=name),
                          row=1, col=1)

            fig.add_trace(go.Scatter(x=minutes, y=series.cumulative_energy_Wh(), mode='lines',
                                     name=f"{name} energy", showlegend=False),
                          row=2, col=1)

        fig.update_yaxes(title_text="Power (W)", row=1, col=1)
        fig.update_yaxes(title_text="Energy (Wh)", row=2, col=1)
        fig.update_xaxes(title_text="Time from start (min)", row=2, col=1)
        fig.update_layout(title=title, template=self.theme)
        return fig

    def export_plot(self, fig: go.Figure, filename: str) -> str:
        """Write a figure to standalone HTML"""
        path = Path(filename)
        path.parent.mkdir(parents=True, exist_ok=True)
        fig.write_html(str(path), include_plotlyjs='cdn')
        return str(path)
