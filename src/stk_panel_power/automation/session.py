"""
STK Session Module

Owns one STK application handle and its object root for the duration of a
run. Every automation call used by the solar panel analysis goes through
this class, so callers never touch the COM object model directly.

When attached through comtypes, objects returned by the object root are
generic interfaces and must be cast with QueryInterface before their
specialised members are reachable. Interfaces and most enumerations come
from the generated ``comtypes.gen.STKObjects`` module; the shared
enumerations (coordinate systems among them) live in ``comtypes.gen.STKUtil``.
A session built around another automation object (e.g. a test double)
passes ``interfaces=None`` and uses the objects and enum names as given.
"""

import logging
from typing import Any, Callable, Optional, Sequence

from .commands import ConnectCommand
from .connection import DEFAULT_STK_VERSIONS, StkConnection, ConnectionFailure, connect
from ..exceptions import StkConnectionError


logger = logging.getLogger(__name__)

SATELLITE_CLASS = 18  # eSatellite


# Enumerations defined in STKUtil rather than STKObjects
UTIL_ENUM_PREFIXES = ('eCoordinateSystem',)


class StkInterfaces:
    """Generated STKObjects and STKUtil wrappers used for casts and enums"""

    def __init__(self, objects: Any, utilities: Any):
        self.objects = objects
        self.utilities = utilities

    def interface(self, name: str):
        return getattr(self.objects, name)

    def enum(self, name: str):
        module = self.utilities if name.startswith(UTIL_ENUM_PREFIXES) else self.objects
        return getattr(module, name)


def load_stk_interfaces() -> StkInterfaces:
    """Generated STK object model wrappers; available once Personality2 was read"""
    from comtypes.gen import STKObjects
    from comtypes.gen import STKUtil

    return StkInterfaces(STKObjects, STKUtil)


class StkSession:
    """
    Scoped STK automation session.

    Usage:
        with StkSession() as session:
            scenario = session.new_scenario("Sim", start, stop)
            ...
    """

    def __init__(self, versions: Sequence[int] = DEFAULT_STK_VERSIONS,
                 factory: Optional[Callable[[str], Any]] = None,
                 interfaces: Optional[StkInterfaces] = None, visible: bool = True,
                 keep_open: bool = False):
        """
        Initialize session

        Args:
            versions: STK major versions in connection order
            factory: Callable creating the application from a ProgID;
                comtypes is used when omitted
            interfaces: Generated wrappers used for QueryInterface and enums
            visible: Show the STK window
            keep_open: Leave STK and the scenario open on close
        """
        self.versions = tuple(versions)
        self.factory = factory
        self.interfaces = interfaces
        self.visible = visible
        self.keep_open = keep_open

        self.connection: Optional[StkConnection] = None
        self.root = None
        self.scenario = None
        self.scenario_object = None

    @property
    def is_open(self) -> bool:
        return self.connection is not None

    def open(self) -> "StkSession":
        """Attach to STK; raises StkConnectionError if no version responds"""
        result = connect(self.versions, self.factory)
        if isinstance(result, ConnectionFailure):
            raise StkConnectionError(result)

        application = result.application
        try:
            application.Visible = self.visible
            if self.keep_open:
                application.UserControl = True
            root = result.root

            if self.factory is None and self.interfaces is None:
                self.interfaces = load_stk_interfaces()
        except Exception:
            logger.error(f"STK{result.version} attached but setup failed; quitting")
            application.Quit()
            raise

        self.connection = result
        self.root = root
        logger.info(f"STK{result.version} session opened")
        return self

    def close(self):
        """Close the scenario and release the application unless kept open"""
        if not self.is_open:
            return

        try:
            if self.keep_open:
                logger.info("Leaving STK session open")
            elif self.scenario is not None:
                logger.debug("Closing scenario")
                self.root.CloseScenario()
        finally:
            application = self.connection.application
            self.connection = None
            self.root = None
            self.scenario = None
            self.scenario_object = None
            if not self.keep_open:
                logger.debug("Quitting STK")
                application.Quit()

    def __enter__(self) -> "StkSession":
        return self.open()

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()
        return False

    def _query(self, obj, interface: str):
        if self.interfaces is None:
            return obj
        return obj.QueryInterface(self.interfaces.interface(interface))

    def _enum(self, name: str):
        if self.interfaces is None:
            return name
        return self.interfaces.enum(name)

    def _require_open(self):
        if not self.is_open:
            raise RuntimeError("STK session is not open")

    # Scenario

    def new_scenario(self, name: str, start: str, stop: str):
        """
        Create a scenario, set its analysis period and epoch, and rewind

        Args:
            name: Scenario name
            start: Analysis start date
            stop: Analysis stop date

        Returns:
            The scenario interface
        """
        self._require_open()
        logger.debug(f"Creating scenario {name}: {start} -> {stop}")
        self.root.NewScenario(name)
        self.scenario_object = self.root.CurrentScenario
        self.scenario = self._query(self.scenario_object, 'IAgScenario')
        self.scenario.SetTimePeriod(start, stop)
        self.scenario.Epoch = self.scenario.StartTime
        self.root.Rewind()
        return self.scenario

    def set_unit(self, dimension: str, unit: str):
        """Set a unit preference, e.g. ('DateFormat', 'EpSec') or ('Power', 'W')"""
        self._require_open()
        logger.debug(f"Unit preference {dimension} = {unit}")
        self.root.UnitPreferences.Item(dimension).SetCurrentUnit(unit)

    def execute_command(self, command: ConnectCommand):
        """Send a Connect command"""
        self._require_open()
        text = command.serialize()
        logger.debug(f"Connect: {text}")
        return self.root.ExecuteCommand(text)

    # Satellite

    def insert_satellite(self, name: str):
        """
        Insert a satellite into the current scenario

        Returns:
            (stk_object, satellite) pair: the generic object and its
            satellite interface
        """
        if self.scenario_object is None:
            raise RuntimeError("No scenario has been created")

        logger.debug(f"Inserting satellite {name}")
        stk_object = self.scenario_object.Children.New(SATELLITE_CLASS, name)
        return stk_object, self._query(stk_object, 'IAgSatellite')

    def set_propagator(self, satellite, propagator_type: str, step_s: float):
        logger.debug(f"Propagator {propagator_type}, step {step_s} s")
        satellite.SetPropagatorType(self._enum(propagator_type))
        propagator = self._propagator(satellite, propagator_type)
        propagator.Step = step_s
        return propagator

    def _propagator(self, satellite, propagator_type: str):
        interface = {
            'ePropagatorHPOP': 'IAgVePropagatorHPOP',
            'ePropagatorJ2Perturbation': 'IAgVePropagatorJ2Perturbation',
            'ePropagatorTwoBody': 'IAgVePropagatorTwoBody',
        }[propagator_type]
        return self._query(satellite.Propagator, interface)

    def assign_classical_state(self, propagator, coordinate_system: str,
                               sma_km: float, ecc: float, inc_deg: float,
                               argp_deg: float, raan_deg: float, truan_deg: float,
                               epoch: str):
        """Assign the initial state from classical elements valid at epoch"""
        logger.debug(f"Initial state a={sma_km} e={ecc} i={inc_deg} "
                     f"w={argp_deg} RAAN={raan_deg} nu={truan_deg} at {epoch}")
        initial_state = propagator.InitialState
        initial_state.Representation.AssignClassical(
            self._enum(coordinate_system), sma_km, ecc, inc_deg,
            argp_deg, raan_deg, truan_deg
        )
        initial_state.Epoch = epoch

    def set_attitude_profile(self, satellite, profile: str):
        logger.debug(f"Attitude profile {profile}")
        attitude = self._query(satellite.Attitude, 'IAgVeOrbitAttitudeStandard')
        attitude.Basic.SetProfileType(self._enum(profile))

    def propagate(self, propagator):
        logger.debug("Propagating")
        propagator.Propagate()

    def set_model_file(self, satellite, filename: str):
        """Use an external 3-D model for the satellite's shape"""
        logger.debug(f"Model file {filename}")
        model_data = self._query(satellite.VO.Model.ModelData, 'IAgVOModelFile')
        model_data.Filename = filename

    # Data providers

    def exec_time_var_provider(self, stk_object, provider: str, step_s: float):
        """
        Execute a time-varying data provider over the scenario period

        Args:
            stk_object: Generic object owning the provider
            provider: Data provider name
            step_s: Sampling step in seconds

        Returns:
            Data provider result
        """
        if self.scenario is None:
            raise RuntimeError("No scenario has been created")

        logger.debug(f"Data provider '{provider}' step {step_s} s")
        data_provider = self._query(stk_object.DataProviders.Item(provider), 'IAgDataPrvTimeVar')
        return data_provider.Exec(self.scenario.StartTime, self.scenario.StopTime, step_s)
