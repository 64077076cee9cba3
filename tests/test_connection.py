"""
Tests for STK connection with version fallback.
"""

import pytest

from stk_panel_power.automation.connection import (
    ConnectionFailure,
    StkConnection,
    connect,
    prog_id,
)
from stk_panel_power.automation.session import StkSession
from stk_panel_power.exceptions import StkConnectionError
from fake_stk import FakeComError, FakeStk


class TestConnect:
    """Test the fallback order over STK versions"""

    def test_prog_id(self):
        assert prog_id(11) == "STK11.Application"

    def test_first_available_version_wins(self):
        """STK11 is tried first and nothing after it"""
        stk = FakeStk(available=["STK11.Application", "STK10.Application", "STK12.Application"])
        result = connect(factory=stk.factory)

        assert isinstance(result, StkConnection)
        assert result.version == 11
        assert stk.attempted == ["STK11.Application"]

    def test_falls_back_to_stk10(self):
        stk = FakeStk(available=["STK10.Application", "STK12.Application"])
        result = connect(factory=stk.factory)

        assert isinstance(result, StkConnection)
        assert result.version == 10
        assert stk.attempted == ["STK11.Application", "STK10.Application"]

    def test_falls_back_to_stk12_last(self):
        stk = FakeStk(available=["STK12.Application"])
        result = connect(factory=stk.factory)

        assert result.version == 12
        assert stk.attempted == ["STK11.Application", "STK10.Application", "STK12.Application"]
        assert [a.succeeded for a in result.attempts] == [False, False, True]

    def test_all_versions_rejected(self):
        """Every attempt is recorded in the failure"""
        stk = FakeStk(available=[])
        result = connect(factory=stk.factory)

        assert isinstance(result, ConnectionFailure)
        assert [a.version for a in result.attempts] == [11, 10, 12]
        assert all(a.error for a in result.attempts)
        assert "STK11, STK10, STK12" in str(result)

    def test_custom_version_order(self):
        stk = FakeStk(available=["STK12.Application", "STK11.Application"])
        result = connect(versions=[12, 11], factory=stk.factory)

        assert result.version == 12
        assert stk.attempted == ["STK12.Application"]

    def test_root_is_personality2(self):
        stk = FakeStk()
        result = connect(factory=stk.factory)
        assert result.root is result.application.Personality2


class TestSessionLifecycle:
    """Test scoped acquisition and release of STK"""

    def test_open_raises_when_unreachable(self):
        stk = FakeStk(available=[])
        session = StkSession(factory=stk.factory)

        with pytest.raises(StkConnectionError) as excinfo:
            session.open()

        assert isinstance(excinfo.value.failure, ConnectionFailure)
        assert not session.is_open

    def test_context_manager_quits_application(self):
        stk = FakeStk()
        with StkSession(factory=stk.factory) as session:
            session.new_scenario("Sim", "1 Jan 2020 00:00:00", "1 Jan 2020 01:00:00")
            application = session.connection.application
            root = session.root
            assert application.Visible is True

        assert root.closed
        assert application.quit_called
        assert not session.is_open

    def test_keep_open_leaves_application_running(self):
        stk = FakeStk()
        with StkSession(factory=stk.factory, keep_open=True) as session:
            session.new_scenario("Sim", "1 Jan 2020 00:00:00", "1 Jan 2020 01:00:00")
            application = session.connection.application
            root = session.root

        assert application.UserControl is True
        assert not application.quit_called
        assert not root.closed

    def test_released_when_body_raises(self):
        stk = FakeStk()
        with pytest.raises(RuntimeError):
            with StkSession(factory=stk.factory) as session:
                application = session.connection.application
                raise RuntimeError("boom")

        assert application.quit_called

    def test_satellite_requires_scenario(self):
        stk = FakeStk()
        with StkSession(factory=stk.factory) as session:
            with pytest.raises(RuntimeError):
                session.insert_satellite("Sat")

    def test_quits_when_close_scenario_fails(self):
        stk = FakeStk(fail_close=True)
        session = StkSession(factory=stk.factory)

        with pytest.raises(FakeComError):
            with session:
                session.new_scenario("Sim", "1 Jan 2020 00:00:00", "1 Jan 2020 01:00:00")

        assert stk.applications[0].quit_called
        assert stk.call_names()[-2:] == ["CloseScenario", "Quit"]
        assert not session.is_open

    def test_quits_when_setup_after_connect_fails(self):
        stk = FakeStk(fail_visible=True)
        session = StkSession(factory=stk.factory)

        with pytest.raises(FakeComError):
            with session:
                pass

        assert stk.applications[0].quit_called
        assert not session.is_open
        assert session.root is None
