"""
Shared fixtures for the STK solar panel power tests.
"""

import sys
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent))

from stk_panel_power.automation.session import StkSession
from fake_stk import FakeStk


@pytest.fixture
def model_file(tmp_path):
    """Placeholder satellite model on disk"""
    path = tmp_path / "two_group_sat.dae"
    path.write_text("<COLLADA/>")
    return str(path)


@pytest.fixture
def fake_stk():
    return FakeStk()


@pytest.fixture
def session_factory(fake_stk):
    """Builds sessions bound to the fake STK"""
    def factory(options):
        return StkSession(versions=options.versions, factory=fake_stk.factory,
                          visible=options.visible, keep_open=options.keep_open)
    return factory
