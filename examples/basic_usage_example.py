#!/usr/bin/env python3
"""
Basic Usage Example for STK Solar Panel Power

This example runs STK's solar panel tool for a two-group satellite on an
ISS-like orbit and exports the power of the first group. It needs a Windows
machine with STK 10, 11 or 12 installed and a satellite model whose solar
panel groups are named PanelA and PanelB.

    python examples/basic_usage_example.py C:/models/my_sat.dae
"""

import logging
import sys

from stk_panel_power.main import SolarPanelPowerModel

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main(model_file: str):
    """Main example function"""
    print("=" * 60)
    print("STK Solar Panel Power - Basic Usage Example")
    print("=" * 60)

    model = SolarPanelPowerModel()

    print("\n1. Available scenario templates:")
    for template in model.list_available_templates():
        print(f"   - {template}")

    print("\n2. Creating ISS-like scenario...")
    success = model.create_scenario_from_template(
        "ISS_Like",
        scenario_name="Example_Panels",
        satellite={"model_file": model_file},
        group_index=1
    )
    if not success:
        print("Failed to create scenario")
        return

    info = model.get_configuration_info()
    print(f"   Window: {info['window']['start']} -> {info['window']['stop']}")
    print(f"   Step: {info['window']['step_s']} s")
    print(f"   Groups: {', '.join(info['panel_groups'])}")

    print("\n3. Running STK...")
    series = model.run_simulation()
    if series is None:
        print("Could not reach STK")
        return

    print("\n4. Exporting results...")
    files = model.export_results("results", formats=["csv", "json", "excel"])
    for fmt, path in files.items():
        print(f"   {fmt}: {path}")

    summary = model.get_summary()['performance']
    print(f"\nMean power: {summary['mean_power_W']:.2f} W, "
          f"energy: {summary['energy_Wh']:.2f} Wh")


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print(__doc__)
        sys.exit(1)
    main(sys.argv[1])
