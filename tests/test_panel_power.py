"""
Tests for the STK solar panel power run against the fake object model.
"""

import logging
from types import SimpleNamespace

import numpy as np
import pytest

from stk_panel_power.analysis.panel_power import (
    SolarPanelPowerAnalysis,
    build_request,
    expected_sample_count,
    generate_solar_panel_power,
)
from stk_panel_power.automation.session import StkInterfaces, StkSession
from stk_panel_power.config.scenario_config import AnalysisWindow, SessionOptions
from stk_panel_power.exceptions import PanelGroupIndexError
from fake_stk import FakeComError, FakeResult, FakeStk, make_section


START = "1 Jan 2020 00:00:00"
STOP = "1 Jan 2020 01:00:00"
COES = [7000, 0.001, 51.6, 0, 0, 0]


def run(model_file, session_factory, **kwargs):
    options = dict(group_index=1)
    options.update(kwargs)
    return generate_solar_panel_power(START, STOP, 60, COES, START, model_file,
                                      2, ["PanelA", "PanelB"],
                                      session_factory=session_factory, **options)


class TestEndToEnd:
    """Test the full run for a two-group satellite"""

    def test_two_column_power_array(self, model_file, session_factory):
        data = run(model_file, session_factory)

        assert data.shape == (61, 2)
        assert data[0, 0] == 0.0
        assert data[-1, 0] == 3600.0
        assert np.all(np.diff(data[:, 0]) > 0)
        assert np.all(data[:, 1] >= 0)
        assert np.all(data[:, 1] <= 100.0)

    def test_second_group(self, model_file, session_factory):
        first = run(model_file, session_factory, group_index=1)
        second = run(model_file, session_factory, group_index=2)

        assert second.shape == first.shape
        assert not np.array_equal(first[:, 1], second[:, 1])

    def test_defaults_to_last_group(self, model_file, session_factory):
        last = run(model_file, session_factory, group_index=2)
        default = run(model_file, session_factory, group_index=None)
        assert np.array_equal(last, default)

    def test_row_count_matches_stepping(self, model_file, session_factory):
        data = generate_solar_panel_power(START, "1 Jan 2020 00:10:00", 30, COES, START,
                                          model_file, 1, ["PanelA"],
                                          session_factory=session_factory)
        window = AnalysisWindow(start=START, stop="1 Jan 2020 00:10:00", step_s=30)

        assert expected_sample_count(window) == 21
        assert data.shape == (21, 2)

    def test_step_not_dividing_window(self):
        window = AnalysisWindow(start=START, stop="1 Jan 2020 00:01:40", step_s=30)
        assert expected_sample_count(window) == 4


class TestCallSequence:
    """Test the order of automation calls"""

    def test_fixed_order(self, model_file, fake_stk, session_factory):
        run(model_file, session_factory)

        names = fake_stk.call_names()
        assert names == [
            "NewScenario",
            "SetTimePeriod",
            "ScenarioEpoch",
            "Rewind",
            "Children.New",
            "SetPropagatorType",
            "Step",
            "AssignClassical",
            "InitialStateEpoch",
            "SetProfileType",
            "Propagate",
            "ModelFilename",
            "SetCurrentUnit",
            "ExecuteCommand",
            "ExecuteCommand",
            "ExecuteCommand",
            "SetCurrentUnit",
            "DataProviders.Item",
            "Exec",
            "CloseScenario",
            "Quit",
        ]

    def test_call_arguments(self, model_file, fake_stk, session_factory):
        run(model_file, session_factory)
        calls = fake_stk.calls

        assert f"SetTimePeriod:{START}|{STOP}" in calls
        assert f"ScenarioEpoch:{START}" in calls
        assert "Children.New:18:Sat" in calls
        assert "SetPropagatorType:ePropagatorHPOP" in calls
        assert any(call.startswith("Step:60") for call in calls)
        assert f"InitialStateEpoch:{START}" in calls
        assert "SetProfileType:eProfileNadiralignmentwithECFvelocityconstraint" in calls
        assert f"ModelFilename:{model_file}" in calls
        assert "SetCurrentUnit:DateFormat=EpSec" in calls
        assert "SetCurrentUnit:Power=W" in calls
        assert "DataProviders.Item:Solar Panel Power" in calls
        assert any(call.startswith("Exec:0.0|3600.0|60") for call in calls)

    def test_commands(self, model_file, fake_stk, session_factory):
        run(model_file, session_factory)

        assert fake_stk.commands == [
            "VO */Satellite/Sat SolarPanel Visualization Radius On 1 "
            "AddGroup PanelA AddGroup PanelB View On",
            "Window3D * SetRenderMethod Method PBuffer WindowID 2",
            'VO */Satellite/Sat SolarPanel Compute "1 Jan 2020 00:00:00" "1 Jan 2020 01:00:00" 60',
        ]
        assert fake_stk.groups == ["PanelA", "PanelB"]

    def test_single_group_registration(self, model_file, fake_stk, session_factory):
        generate_solar_panel_power(START, STOP, 60, COES, START, model_file, 1, ["PanelA"],
                                   session_factory=session_factory)
        assert fake_stk.commands[0].count("AddGroup") == 1
        assert fake_stk.groups == ["PanelA"]


class TestFailures:
    """Test connection and configuration failures"""

    def test_unreachable_returns_none(self, model_file, caplog):
        stk = FakeStk(available=[])

        def factory(options):
            return StkSession(versions=options.versions, factory=stk.factory)

        with caplog.at_level(logging.ERROR):
            data = run(model_file, factory)

        assert data is None
        assert stk.attempted == ["STK11.Application", "STK10.Application", "STK12.Application"]
        assert stk.calls == []
        assert "Could not reach any STK installation" in caplog.text

    def test_group_index_beyond_registered(self, model_file, fake_stk, session_factory):
        with pytest.raises(PanelGroupIndexError):
            run(model_file, session_factory, group_index=3)
        assert fake_stk.attempted == []

    def test_rejected_command_propagates(self, model_file):
        stk = FakeStk(reject_command="SolarPanel Compute")

        def factory(options):
            return StkSession(versions=options.versions, factory=stk.factory)

        with pytest.raises(FakeComError):
            run(model_file, factory)

        assert "Exec" not in stk.call_names()
        assert stk.applications[0].quit_called

    def test_fewer_sections_than_requested(self, model_file):
        request = build_request(START, STOP, 60, COES, START, model_file, 2,
                                ["PanelA", "PanelB"], group_index=2)
        analysis = SolarPanelPowerAnalysis(request)
        result = FakeResult([make_section((0.0, 60.0), (1.0, 2.0))])

        with pytest.raises(PanelGroupIndexError):
            analysis.extract_group(result)

    def test_short_series_is_kept(self, model_file, caplog):
        stk = FakeStk(sample_count=60)

        def factory(options):
            return StkSession(versions=options.versions, factory=stk.factory)

        with caplog.at_level(logging.WARNING):
            data = run(model_file, factory)

        assert data.shape == (60, 2)
        assert "expected 61" in caplog.text


class TestSessionOptions:
    def test_keep_open(self, model_file, fake_stk, session_factory):
        run(model_file, session_factory, session=SessionOptions(keep_open=True))

        assert "Quit" not in fake_stk.call_names()
        assert "CloseScenario" not in fake_stk.call_names()
        assert fake_stk.applications[0].UserControl is True

    def test_scenario_name(self, model_file, fake_stk, session_factory):
        run(model_file, session_factory, session=SessionOptions(scenario_name="Panels"))
        assert fake_stk.calls[0] == "NewScenario:Panels"

    def test_analysis_keeps_result(self, model_file, session_factory):
        request = build_request(START, STOP, 60, COES, START, model_file, 2,
                                ["PanelA", "PanelB"], group_index=1)
        analysis = SolarPanelPowerAnalysis(request, session_factory=session_factory)
        series = analysis.run()

        assert analysis.result is series
        assert series.group_name == "PanelA"
        assert series.metadata["start"] == START


def generated_interfaces():
    """Namespaces shaped like the generated STKObjects and STKUtil modules"""
    interface_names = ("IAgScenario", "IAgSatellite", "IAgVePropagatorHPOP",
                       "IAgVeOrbitAttitudeStandard", "IAgVOModelFile", "IAgDataPrvTimeVar")
    objects = SimpleNamespace(
        ePropagatorHPOP=7,
        eProfileNadiralignmentwithECFvelocityconstraint=9,
        **{name: type(name, (), {}) for name in interface_names}
    )
    utilities = SimpleNamespace(eCoordinateSystemJ2000=3)
    return StkInterfaces(objects, utilities)


class TestGeneratedInterfaces:
    """Test casts and enums against generated STK wrappers"""

    def test_enum_lookup_by_module(self):
        interfaces = generated_interfaces()

        assert interfaces.enum("eCoordinateSystemJ2000") == 3
        assert interfaces.enum("ePropagatorHPOP") == 7
        with pytest.raises(AttributeError):
            interfaces.objects.eCoordinateSystemJ2000

    def test_run_casts_and_resolves_enums(self, model_file):
        stk = FakeStk()

        def factory(options):
            return StkSession(versions=options.versions, factory=stk.factory,
                              interfaces=generated_interfaces())

        data = run(model_file, factory)

        assert data.shape == (61, 2)
        assert stk.queried == [
            "IAgScenario",
            "IAgSatellite",
            "IAgVePropagatorHPOP",
            "IAgVeOrbitAttitudeStandard",
            "IAgVOModelFile",
            "IAgDataPrvTimeVar",
        ]
        assert "SetPropagatorType:7" in stk.calls
        assert "SetProfileType:9" in stk.calls

        assign = next(call for call in stk.calls if call.startswith("AssignClassical:"))
        args = assign.split(":", 1)[1].split("|")
        assert args[0] == "3"
        assert [float(value) for value in args[1:]] == [7000.0, 0.001, 51.6, 0.0, 0.0, 0.0]


class TestAllGroups:
    """Test reading back every registered group"""

    def test_run_all_groups(self, model_file, fake_stk, session_factory):
        request = build_request(START, STOP, 60, COES, START, model_file, 2,
                                ["PanelA", "PanelB"], group_index=1)
        analysis = SolarPanelPowerAnalysis(request, session_factory=session_factory)
        groups = analysis.run_all_groups()

        assert list(groups) == ["PanelA", "PanelB"]
        assert [series.group_index for series in groups.values()] == [1, 2]
        assert all(len(series) == 61 for series in groups.values())
        assert not np.array_equal(groups["PanelA"].power_W, groups["PanelB"].power_W)
        assert analysis.result is groups["PanelA"]
        assert fake_stk.call_names().count("Exec") == 1

    def test_extract_all_groups_needs_every_section(self, model_file):
        request = build_request(START, STOP, 60, COES, START, model_file, 2,
                                ["PanelA", "PanelB"])
        analysis = SolarPanelPowerAnalysis(request)
        result = FakeResult([make_section((0.0, 60.0), (1.0, 2.0))])

        with pytest.raises(PanelGroupIndexError):
            analysis.extract_all_groups(result)

    def test_last_group_is_read_by_group_count(self, model_file):
        request = build_request(START, STOP, 60, COES, START, model_file, 2,
                                ["PanelA", "PanelB"])
        analysis = SolarPanelPowerAnalysis(request)
        result = FakeResult([make_section((0.0, 60.0), (1.0, 2.0)),
                             make_section((0.0, 60.0), (3.0, 4.0))])

        series = analysis.extract_group(result)

        assert series.group_name == "PanelB"
        assert list(series.power_W) == [3.0, 4.0]
