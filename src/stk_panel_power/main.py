"""
STK Solar Panel Power - Main Interface

This module provides the main interface for solar panel power runs. It ties
configuration, the STK analysis, plotting and export together behind a
high-level API and a command line.

Usage:
    from stk_panel_power.main import SolarPanelPowerModel

    model = SolarPanelPowerModel()
    model.load_scenario('config/panels.yaml')
    series = model.run_simulation()
    model.export_results('results/')
"""

import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from .analysis.panel_power import SolarPanelPowerAnalysis
from .automation.session import StkSession
from .config.data_formats import PowerTimeSeries
from .config.scenario_config import PanelPowerRequest, ScenarioConfig, SessionOptions
from .exceptions import StkConnectionError
from .visualization.data_export import DataExporter, ExportMetadata
from .visualization.interactive_plots import PowerPlots


logger = logging.getLogger(__name__)


class SolarPanelPowerModel:
    """
    Main interface for STK solar panel power runs.

    Features:
    - Request loading from JSON/YAML or templates
    - STK run with scoped session lifecycle
    - Interactive plots
    - CSV/JSON/Excel export
    """

    def __init__(self, config: Optional[PanelPowerRequest] = None,
                 session_factory: Optional[Callable[[SessionOptions], StkSession]] = None,
                 log_level: str = "INFO"):
        """
        Initialize model

        Args:
            config: Request to run
            session_factory: Builds STK sessions; comtypes is used by default
            log_level: Logging level
        """
        logger.setLevel(getattr(logging, log_level.upper()))

        self.config = config
        self.session_factory = session_factory
        self.scenario_manager = ScenarioConfig()

        self.result: Optional[PowerTimeSeries] = None
        self.group_results: Dict[str, PowerTimeSeries] = {}
        self.plotter = PowerPlots()

    @property
    def is_initialized(self) -> bool:
        return self.config is not None

    @property
    def is_simulation_complete(self) -> bool:
        return self.result is not None

    def load_scenario(self, filepath: str) -> bool:
        """
        Load request from file

        Args:
            filepath: Path to configuration file

        Returns:
            True if successful
        """
        try:
            logger.info(f"Loading scenario from {filepath}")
            self.config = self.scenario_manager.load_config(filepath)
            self.result = None
            self.group_results = {}
            logger.info("Scenario loaded successfully")
            return True

        except (FileNotFoundError, ValueError) as e:
            logger.error(f"Failed to load scenario: {e}")
            return False

    def create_scenario_from_template(self, template_name: str, **kwargs) -> bool:
        """
        Create request from predefined template

        Args:
            template_name: Name of template
            **kwargs: Configuration overrides

        Returns:
            True if successful
        """
        try:
            logger.info(f"Creating scenario from template: {template_name}")
            self.config = self.scenario_manager.create_from_template(template_name, **kwargs)
            self.result = None
            self.group_results = {}
            logger.info("Scenario created successfully")
            return True

        except ValueError as e:
            logger.error(f"Failed to create scenario: {e}")
            return False

    def run_simulation(self, all_groups: bool = False) -> Optional[PowerTimeSeries]:
        """
        Run the request in STK

        Args:
            all_groups: Also read back every registered group into
                ``group_results``

        Returns:
            Power time series, or None when STK could not be reached
        """
        if not self.is_initialized:
            raise ValueError("Model not initialized. Load a scenario first.")

        logger.info(f"Running {self.config.scenario_name} in STK...")
        analysis = SolarPanelPowerAnalysis(self.config, session_factory=self.session_factory)

        try:
            if all_groups:
                self.group_results = analysis.run_all_groups()
            else:
                analysis.run()
                self.group_results = {}
            self.result = analysis.result
        except StkConnectionError as e:
            logger.error(str(e))
            self.result = None
            self.group_results = {}

        return self.result

    def plot_results(self, save_path: Optional[str] = None):
        """
        Generate the power plot

        Args:
            save_path: Optional directory to save the HTML plot

        Returns:
            Plotly figure
        """
        if not self.is_simulation_complete:
            raise ValueError("No simulation results available. Run simulation first.")

        fig = self.plotter.plot_power(
            self.result, title=f"{self.config.scenario_name} - {self.result.group_name}"
        )
        if save_path:
            self.plotter.export_plot(fig, str(Path(save_path) / "panel_power.html"))
            if len(self.group_results) > 1:
                comparison = self.plotter.compare_groups(
                    self.group_results, title=f"{self.config.scenario_name} - all groups"
                )
                self.plotter.export_plot(comparison, str(Path(save_path) / "panel_groups.html"))
        return fig

    def export_results(self, output_dir: str, formats: Optional[List[str]] = None) -> Dict[str, str]:
        """
        Export results and the request that produced them

        Args:
            output_dir: Output directory path
            formats: Export formats

        Returns:
            Dictionary of format to path
        """
        if not self.is_simulation_complete:
            raise ValueError("No simulation results available. Run simulation first.")

        formats = formats or ["csv", "json"]
        logger.info(f"Exporting results to {output_dir}...")

        exporter = DataExporter(output_dir)
        metadata = ExportMetadata(
            scenario_name=self.config.scenario_name,
            group_name=self.result.group_name,
            group_index=self.result.group_index,
            notes=self.config.description or ""
        )
        generated = exporter.export(self.result, formats,
                                    f"{self.config.scenario_name}_power", metadata)
        for name, series in self.group_results.items():
            generated[f"group_{name}"] = exporter.export_csv(
                series, f"{self.config.scenario_name}_{name}_power.csv"
            )

        config_path = Path(output_dir) / f"{self.config.scenario_name}_config.json"
        self.scenario_manager.save_config(self.config, str(config_path))
        generated['config'] = str(config_path)

        logger.info(f"Results exported to {output_dir}")
        return generated

    def get_summary(self) -> Dict[str, Any]:
        if not self.is_simulation_complete:
            return {"status": "No simulation completed"}

        return {
            'scenario': {
                'name': self.config.scenario_name,
                'description': self.config.description
            },
            'group': {
                'name': self.result.group_name,
                'index': self.result.group_index
            },
            'performance': self.result.summary()
        }

    def list_available_templates(self) -> List[str]:
        return self.scenario_manager.list_templates()

    def get_configuration_info(self) -> Dict[str, Any]:
        if not self.config:
            return {"status": "No configuration loaded"}

        return self.scenario_manager.generate_config_summary(self.config)


def main(argv: Optional[List[str]] = None,
         session_factory: Optional[Callable[[SessionOptions], StkSession]] = None) -> int:
    """
    Command line interface for STK solar panel power runs

    Args:
        argv: Arguments; sys.argv is used when omitted
        session_factory: Builds STK sessions; comtypes is used by default

    Returns:
        Process exit code
    """
    import argparse

    parser = argparse.ArgumentParser(description="STK Solar Panel Power")
    parser.add_argument("config", nargs="?", help="Configuration file path")
    parser.add_argument("--output", "-o", help="Output directory", default="results")
    parser.add_argument("--formats", nargs="+", default=["csv", "json"],
                        help="Export formats (csv, json, excel)")
    parser.add_argument("--plots", action="store_true", help="Generate plots")
    parser.add_argument("--template", help="Create scenario from template")
    parser.add_argument("--model-file", help="Satellite model file used with --template")
    parser.add_argument("--keep-open", action="store_true", help="Leave STK open afterwards")
    parser.add_argument("--all-groups", action="store_true",
                        help="Read back and compare every panel group")
    parser.add_argument("--list-templates", action="store_true", help="List available templates")
    parser.add_argument("--log-level", default="INFO", help="Logging level")

    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level.upper()))

    model = SolarPanelPowerModel(session_factory=session_factory, log_level=args.log_level)

    if args.list_templates:
        print("Available templates:")
        for template in model.list_available_templates():
            print(f"  - {template}")
        return 0

    if args.template:
        overrides = {}
        if args.model_file:
            overrides['satellite'] = {'model_file': args.model_file}
        success = model.create_scenario_from_template(args.template, **overrides)
    elif args.config:
        success = model.load_scenario(args.config)
    else:
        parser.error("a configuration file or --template is required")

    if not success:
        print("Failed to load configuration")
        return 1

    if args.keep_open:
        model.config.session.keep_open = True

    print("Running STK solar panel analysis...")
    if model.run_simulation(all_groups=args.all_groups) is None:
        print("Could not reach STK")
        return 1

    if args.plots:
        print("Generating plots...")
        model.plot_results(save_path=args.output)

    print("Exporting results...")
    model.export_results(args.output, args.formats)

    summary = model.get_summary()
    performance = summary['performance']
    print("\nSolar Panel Summary:")
    print(f"  Group: {summary['group']['name']} (#{summary['group']['index']})")
    print(f"  Samples: {performance['samples']}")
    print(f"  Max Power: {performance['max_power_W']:.2f} W")
    print(f"  Mean Power: {performance['mean_power_W']:.2f} W")
    print(f"  Energy: {performance['energy_Wh']:.2f} Wh")
    print(f"  Sunlit Fraction: {performance['sunlit_fraction'] * 100:.1f}%")
    for name, series in model.group_results.items():
        print(f"  {name}: {series.energy_Wh():.2f} Wh")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
