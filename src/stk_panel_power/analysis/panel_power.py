"""
Solar Panel Power Analysis

Runs STK's solar panel tool for a satellite described by an external 3-D
model and returns the power produced by one panel group over the analysis
window. STK performs orbit propagation, attitude, illumination and power
computation; this module only drives the session in the required order
and reads the results back.

Usage:
    from stk_panel_power.analysis.panel_power import generate_solar_panel_power

    data = generate_solar_panel_power(
        "1 Jan 2020 00:00:00", "1 Jan 2020 01:00:00", 60,
        [7000, 0.001, 51.6, 0, 0, 0], "1 Jan 2020 00:00:00",
        "C:/models/sat.dae", 2, ["PanelA", "PanelB"], group_index=1)
"""

import logging
import math
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence

import numpy as np

from ..automation import commands
from ..automation.session import StkSession
from ..config.data_formats import PowerTimeSeries
from ..config.scenario_config import (
    AnalysisWindow,
    ClassicalOrbitalElements,
    PanelPowerRequest,
    SatelliteSpec,
    SessionOptions,
    SolarPanelGroupSet,
)
from ..exceptions import DataFormatError, PanelGroupIndexError, StkConnectionError


logger = logging.getLogger(__name__)

SOLAR_PANEL_PROVIDER = "Solar Panel Power"
TIME_DATASET = "Time"
POWER_DATASET = "Power"


def expected_sample_count(window: AnalysisWindow) -> int:
    """Number of samples STK reports over the window, both ends included"""
    return int(math.floor(window.duration_s / window.step_s + 1e-9)) + 1


def default_session_factory(options: SessionOptions) -> StkSession:
    return StkSession(versions=options.versions, visible=options.visible,
                      keep_open=options.keep_open)


class SolarPanelPowerAnalysis:
    """
    STK solar panel power run for one request.

    The automation calls are issued in a fixed order: scenario window and
    epoch, satellite, propagator and step, initial state, attitude,
    propagation, model file, time unit, group registration, render method,
    panel computation, power unit and data retrieval.
    """

    def __init__(self, request: PanelPowerRequest,
                 session_factory: Optional[Callable[[SessionOptions], StkSession]] = None):
        """
        Initialize analysis

        Args:
            request: Validated request
            session_factory: Builds the STK session from the request's options
        """
        self.request = request
        self.session_factory = session_factory or default_session_factory
        self.group_index = self._check_group_index(request.selected_group_index)
        self.result: Optional[PowerTimeSeries] = None
        self.group_results: Dict[str, PowerTimeSeries] = {}

    def _check_group_index(self, index: int) -> int:
        count = len(self.request.panel_groups)
        if index < 1 or index > count:
            raise PanelGroupIndexError(
                f"Solar panel group {index} requested but only {count} registered"
            )
        return index

    def run(self) -> PowerTimeSeries:
        """
        Execute the run

        Returns:
            Power time series of the requested group

        Raises:
            StkConnectionError: no STK version could be reached
        """
        started = datetime.now()

        with self.session_factory(self.request.session) as session:
            provider_result = self._run_in_session(session)
            self.result = self.extract_group(provider_result)

        elapsed = (datetime.now() - started).total_seconds()
        logger.info(f"Solar panel run finished in {elapsed:.1f} s "
                    f"({len(self.result)} samples for group {self.result.group_name})")
        return self.result

    def run_all_groups(self) -> Dict[str, PowerTimeSeries]:
        """
        Execute the run and read back every registered group

        Returns:
            Power time series keyed by group name, in registration order.
            ``result`` is set to the selected group.
        """
        started = datetime.now()

        with self.session_factory(self.request.session) as session:
            provider_result = self._run_in_session(session)
            self.group_results = self.extract_all_groups(provider_result)

        self.result = self.group_results[self.request.panel_groups.name_at(self.group_index)]
        elapsed = (datetime.now() - started).total_seconds()
        logger.info(f"Solar panel run finished in {elapsed:.1f} s "
                    f"({len(self.group_results)} groups)")
        return self.group_results

    def _run_in_session(self, session: StkSession):
        request = self.request
        window = request.window
        orbit = request.orbit
        satellite_spec = request.satellite

        session.new_scenario(request.session.scenario_name, window.start, window.stop)

        stk_object, satellite = session.insert_satellite(satellite_spec.name)
        propagator = session.set_propagator(satellite, satellite_spec.propagator.value,
                                            window.step_s)
        session.assign_classical_state(propagator, *orbit.as_assign_classical_args(),
                                       epoch=orbit.epoch)
        session.set_attitude_profile(satellite, satellite_spec.attitude.value)
        session.propagate(propagator)
        session.set_model_file(satellite, satellite_spec.model_file)

        session.set_unit('DateFormat', 'EpSec')

        for command in self.build_commands():
            session.execute_command(command)

        session.set_unit('Power', 'W')

        logger.info(f"Reading solar panel power for {len(request.panel_groups)} groups")
        return session.exec_time_var_provider(stk_object, SOLAR_PANEL_PROVIDER, window.step_s)

    def build_commands(self) -> List[commands.ConnectCommand]:
        """Connect commands that register the groups and run the panel tool"""
        request = self.request
        path = commands.satellite_path(request.satellite.name)
        return [
            commands.solar_panel_visualization(path, request.panel_groups.names),
            commands.set_render_method(request.session.render_method,
                                       request.session.window_id),
            commands.solar_panel_compute(path, request.window.start,
                                         request.window.stop, request.window.step_s),
        ]

    def extract_group(self, provider_result, group_index: Optional[int] = None) -> PowerTimeSeries:
        """
        Pull the time and power datasets of one group

        Sections are addressed by the 1-based group index, the way the
        solar panel tool has always been read (the last group is
        ``Sections.Item(group_count)``). Should STK ever put a leading
        total section in front of the groups, Count only grows, so the
        bound below never rejects a registered group.

        Args:
            provider_result: Result of the solar panel data provider
            group_index: 1-based group; defaults to the selected group

        Returns:
            Power time series
        """
        index = self.group_index if group_index is None else self._check_group_index(group_index)
        sections = provider_result.Sections
        count = getattr(sections, 'Count', None)
        if count is not None and index > count:
            raise PanelGroupIndexError(
                f"STK returned {count} solar panel sections, group {index} requested"
            )

        section = sections.Item(index)
        datasets = section.Intervals.Item(0).DataSets
        times = datasets.GetDataSetByName(TIME_DATASET).GetValues()
        powers = datasets.GetDataSetByName(POWER_DATASET).GetValues()

        series = PowerTimeSeries.from_values(
            group_name=self.request.panel_groups.name_at(index),
            group_index=index,
            times=times,
            powers=powers,
            metadata={
                'scenario': self.request.scenario_name,
                'start': self.request.window.start,
                'stop': self.request.window.stop,
                'step_s': str(self.request.window.step_s),
            }
        )

        if len(series) == 0:
            raise DataFormatError(f"No solar panel data for group {series.group_name}")
        expected = expected_sample_count(self.request.window)
        if len(series) != expected:
            logger.warning(f"STK returned {len(series)} samples, expected {expected}")

        return series

    def extract_all_groups(self, provider_result) -> Dict[str, PowerTimeSeries]:
        """Every registered group's series, keyed by group name"""
        return {
            name: self.extract_group(provider_result, index)
            for index, name in enumerate(self.request.panel_groups.names, start=1)
        }


def build_request(start_date: str, end_date: str, time_step: float,
                  coes: Sequence[float], sat_epoch_date: str, model_file_location: str,
                  num_groups: int, group_names: Sequence[str],
                  group_index: Optional[int] = None,
                  session: Optional[SessionOptions] = None) -> PanelPowerRequest:
    """Assemble a validated request from positional inputs"""
    return PanelPowerRequest(
        window=AnalysisWindow(start=start_date, stop=end_date, step_s=time_step),
        orbit=ClassicalOrbitalElements.from_sequence(coes, sat_epoch_date),
        satellite=SatelliteSpec(model_file=model_file_location),
        panel_groups=SolarPanelGroupSet(names=list(group_names), count=num_groups),
        group_index=group_index,
        session=session or SessionOptions(),
    )


def generate_solar_panel_power(start_date: str, end_date: str, time_step: float,
                               coes: Sequence[float], sat_epoch_date: str,
                               model_file_location: str, num_groups: int,
                               group_names: Sequence[str],
                               group_index: Optional[int] = None,
                               session: Optional[SessionOptions] = None,
                               session_factory: Optional[Callable[[SessionOptions], StkSession]] = None
                               ) -> Optional[np.ndarray]:
    """
    Solar panel power of one group over the analysis window

    Args:
        start_date: Analysis start, STK date string
        end_date: Analysis stop, STK date string
        time_step: Analysis step [s]
        coes: Six classical orbital elements (a [km], e, i, argp, RAAN,
            true anomaly [deg])
        sat_epoch_date: Date at which the elements are valid
        model_file_location: Satellite model file
        num_groups: Number of solar panel groups
        group_names: Solar panel group names
        group_index: 1-based group to return; defaults to the last group
        session: Session options
        session_factory: Builds the STK session

    Returns:
        (n, 2) array of time offsets [s] and power [W], or None when no
        STK version could be reached
    """
    request = build_request(start_date, end_date, time_step, coes, sat_epoch_date,
                            model_file_location, num_groups, group_names,
                            group_index=group_index, session=session)
    analysis = SolarPanelPowerAnalysis(request, session_factory=session_factory)

    try:
        series = analysis.run()
    except StkConnectionError as e:
        logger.error(str(e))
        return None

    return series.to_array()
