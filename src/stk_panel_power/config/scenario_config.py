"""
Scenario Configuration Module

This module handles configuration of an STK solar panel power run: the
analysis window, the satellite's classical orbital elements, its model file
and solar panel groups. It provides validated configuration schemas,
JSON/YAML loading and saving, and predefined mission templates.

References:
- STK Object Model: IAgScenario, IAgSatellite, IAgVePropagatorHPOP
- STK Connect: VO SolarPanel command
- Pydantic configuration management
"""

import json
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .data_formats import parse_stk_date


class PropagatorType(str, Enum):
    """Satellite propagators used for solar panel runs"""
    HPOP = "ePropagatorHPOP"
    J2_PERTURBATION = "ePropagatorJ2Perturbation"
    TWO_BODY = "ePropagatorTwoBody"


class AttitudeProfile(str, Enum):
    """Basic attitude profiles"""
    NADIR_ECF_VELOCITY = "eProfileNadiralignmentwithECFvelocityconstraint"
    NADIR_ECI_VELOCITY = "eProfileNadiralignmentwithECIvelocityconstraint"
    SUN_ALIGNMENT_NADIR = "eProfileSunalignmentwithnadirconstraint"


class CoordinateSystem(str, Enum):
    """Coordinate systems for the initial orbital state"""
    J2000 = "eCoordinateSystemJ2000"
    ICRF = "eCoordinateSystemICRF"
    TRUE_OF_DATE = "eCoordinateSystemTrueOfDate"


class AnalysisWindow(BaseModel):
    """Scenario analysis period and step"""
    start: str = Field(..., description="Start date, STK UTCG format")
    stop: str = Field(..., description="Stop date, STK UTCG format")
    step_s: float = Field(..., gt=0, description="Analysis step in seconds")

    @field_validator('start', 'stop')
    @classmethod
    def validate_date(cls, v):
        parse_stk_date(v)
        return v

    @model_validator(mode='after')
    def validate_order(self):
        if parse_stk_date(self.start) >= parse_stk_date(self.stop):
            raise ValueError("Analysis window start must precede stop")
        return self

    @property
    def duration_s(self) -> float:
        return (parse_stk_date(self.stop) - parse_stk_date(self.start)).total_seconds()


class ClassicalOrbitalElements(BaseModel):
    """Classical orbital elements and the epoch at which they are valid"""
    semi_major_axis_km: float = Field(..., gt=0, description="Semi-major axis")
    eccentricity: float = Field(..., ge=0, lt=1, description="Eccentricity")
    inclination_deg: float = Field(..., ge=0, le=180, description="Inclination")
    arg_perigee_deg: float = Field(0.0, description="Argument of perigee")
    raan_deg: float = Field(0.0, description="Right ascension of the ascending node")
    true_anomaly_deg: float = Field(0.0, description="True anomaly")
    epoch: str = Field(..., description="Epoch of the elements, STK UTCG format")
    coordinate_system: CoordinateSystem = Field(CoordinateSystem.J2000)

    @field_validator('epoch')
    @classmethod
    def validate_epoch(cls, v):
        parse_stk_date(v)
        return v

    @classmethod
    def from_sequence(cls, coes: Sequence[float], epoch: str) -> "ClassicalOrbitalElements":
        """
        Build elements from the ordered six-element vector

        Args:
            coes: (a [km], e, i [deg], argument of perigee [deg],
                   RAAN [deg], true anomaly [deg])
            epoch: Epoch of the elements

        Returns:
            Validated orbital elements
        """
        values = list(coes)
        if len(values) != 6:
            raise ValueError(f"Expected six classical orbital elements, got {len(values)}")

        sma, ecc, inc, argper, raan, truan = values
        return cls(semi_major_axis_km=sma, eccentricity=ecc, inclination_deg=inc,
                   arg_perigee_deg=argper, raan_deg=raan, true_anomaly_deg=truan,
                   epoch=epoch)

    def as_assign_classical_args(self) -> tuple:
        """Arguments for AssignClassical, in the order STK expects"""
        return (self.coordinate_system.value, self.semi_major_axis_km, self.eccentricity,
                self.inclination_deg, self.arg_perigee_deg, self.raan_deg,
                self.true_anomaly_deg)


class SolarPanelGroupSet(BaseModel):
    """Ordered solar panel groups defined in the satellite model"""
    names: List[str] = Field(..., min_length=1, description="Group names in the model file")
    count: Optional[int] = Field(None, gt=0, description="Declared number of groups")

    @field_validator('names')
    @classmethod
    def validate_names(cls, v):
        cleaned = [name.strip() for name in v]
        if any(not name for name in cleaned):
            raise ValueError("Solar panel group names must not be empty")
        if len(set(cleaned)) != len(cleaned):
            raise ValueError("Solar panel group names must be unique")
        return cleaned

    @model_validator(mode='after')
    def validate_count(self):
        if self.count is None:
            self.count = len(self.names)
        elif self.count != len(self.names):
            raise ValueError(
                f"Declared {self.count} solar panel groups but {len(self.names)} names given"
            )
        return self

    def name_at(self, index: int) -> str:
        """Name of the group at a 1-based index"""
        return self.names[index - 1]

    def __len__(self) -> int:
        return len(self.names)


class SatelliteSpec(BaseModel):
    """Satellite object settings"""
    name: str = Field("Sat", pattern=r"^[A-Za-z0-9_\-]+$", description="STK object name")
    model_file: str = Field(..., description="Path to the satellite .cae/.dae model")
    propagator: PropagatorType = Field(PropagatorType.HPOP)
    attitude: AttitudeProfile = Field(AttitudeProfile.NADIR_ECF_VELOCITY)
    check_model_exists: bool = Field(True, description="Require the model file to exist locally")

    model_config = ConfigDict(protected_namespaces=())

    @model_validator(mode='after')
    def validate_model_file(self):
        if self.check_model_exists and not Path(self.model_file).is_file():
            raise ValueError(f"Satellite model file not found: {self.model_file}")
        return self


class SessionOptions(BaseModel):
    """How the STK application is attached and released"""
    versions: List[int] = Field(default_factory=lambda: [11, 10, 12],
                                description="STK major versions in connection order")
    visible: bool = Field(True, description="Show the STK window")
    keep_open: bool = Field(False, description="Leave STK and the scenario open afterwards")
    scenario_name: str = Field("Sim", description="Name of the scenario to create")
    render_method: str = Field("PBuffer", description="3-D window render method")
    window_id: int = Field(2, ge=1, description="3-D window used for the panel tool")

    @field_validator('versions')
    @classmethod
    def validate_versions(cls, v):
        if not v:
            raise ValueError("At least one STK version is required")
        return v


class PanelPowerRequest(BaseModel):
    """Complete solar panel power run"""
    window: AnalysisWindow
    orbit: ClassicalOrbitalElements
    satellite: SatelliteSpec
    panel_groups: SolarPanelGroupSet
    group_index: Optional[int] = Field(None, ge=1, description="1-based group to read back")
    session: SessionOptions = Field(default_factory=SessionOptions)
    scenario_name: str = Field("Solar_Panel_Power", description="Run name used for exports")
    description: Optional[str] = Field(None, description="Run description")

    model_config = ConfigDict(extra="forbid")

    @property
    def selected_group_index(self) -> int:
        """Requested group, defaulting to the last registered group"""
        if self.group_index is None:
            return len(self.panel_groups)
        return self.group_index


class ScenarioConfig:
    """
    Request configuration management.

    Features:
    - JSON/YAML configuration loading and validation
    - Pre-defined mission templates
    - Configuration import/export
    """

    def __init__(self):
        """Initialize scenario configuration manager"""
        self.config: Optional[PanelPowerRequest] = None
        self.templates = self._load_default_templates()

    def load_config(self, filepath: str) -> PanelPowerRequest:
        """
        Load configuration from file

        Args:
            filepath: Path to configuration file

        Returns:
            Validated request
        """
        path = Path(filepath)

        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {filepath}")

        try:
            with open(path, 'r') as f:
                if path.suffix.lower() in ['.yaml', '.yml']:
                    data = yaml.safe_load(f)
                else:
                    data = json.load(f)

            self._resolve_model_path(data, path.parent)
            self.config = PanelPowerRequest(**data)
            return self.config

        except Exception as e:
            raise ValueError(f"Error loading configuration: {e}") from e

    def save_config(self, config: PanelPowerRequest, filepath: str, format: str = "json"):
        """
        Save configuration to file

        Args:
            config: Request to save
            filepath: Output file path
            format: Output format ("json" or "yaml")
        """
        path = Path(filepath)
        path.parent.mkdir(parents=True, exist_ok=True)

        data = config.model_dump(mode='json')

        with open(path, 'w') as f:
            if format.lower() in ['yaml', 'yml']:
                yaml.safe_dump(data, f, default_flow_style=False, indent=2)
            else:
                json.dump(data, f, indent=2)

    def create_from_template(self, template_name: str, **kwargs) -> PanelPowerRequest:
        """
        Create configuration from predefined template

        Args:
            template_name: Name of template
            **kwargs: Parameters to override; model_file is required

        Returns:
            Validated request
        """
        if template_name not in self.templates:
            raise ValueError(f"Template not found: {template_name}")

        template_data = json.loads(json.dumps(self.templates[template_name]))
        self._deep_update(template_data, kwargs)

        return PanelPowerRequest(**template_data)

    def list_templates(self) -> List[str]:
        return list(self.templates.keys())

    def _resolve_model_path(self, data: Dict, base_dir: Path):
        """Make a relative model file path relative to the config file"""
        satellite = data.get('satellite') if isinstance(data, dict) else None
        if not isinstance(satellite, dict) or not satellite.get('model_file'):
            return

        model_path = Path(satellite['model_file'])
        if not model_path.is_absolute():
            satellite['model_file'] = str(base_dir / model_path)

    def _load_default_templates(self) -> Dict[str, Dict]:
        """Load default mission templates"""
        return {
            "ISS_Like": {
                "scenario_name": "ISS_Like_Panels",
                "description": "ISS-like LEO orbit over one hour",
                "window": {
                    "start": "1 Jan 2020 00:00:00.000",
                    "stop": "1 Jan 2020 01:00:00.000",
                    "step_s": 60
                },
                "orbit": {
                    "semi_major_axis_km": 6786.0,
                    "eccentricity": 0.0005,
                    "inclination_deg": 51.64,
                    "arg_perigee_deg": 0.0,
                    "raan_deg": 0.0,
                    "true_anomaly_deg": 0.0,
                    "epoch": "1 Jan 2020 00:00:00.000"
                },
                "satellite": {
                    "name": "Sat"
                },
                "panel_groups": {
                    "names": ["PanelA", "PanelB"]
                }
            },

            "SSO_Imager": {
                "scenario_name": "SSO_Imager_Panels",
                "description": "Sun-synchronous imager over one day",
                "window": {
                    "start": "21 Jun 2021 00:00:00.000",
                    "stop": "22 Jun 2021 00:00:00.000",
                    "step_s": 300
                },
                "orbit": {
                    "semi_major_axis_km": 7078.137,
                    "eccentricity": 0.001,
                    "inclination_deg": 98.19,
                    "arg_perigee_deg": 90.0,
                    "raan_deg": 270.0,
                    "true_anomaly_deg": 0.0,
                    "epoch": "21 Jun 2021 00:00:00.000"
                },
                "satellite": {
                    "name": "Imager"
                },
                "panel_groups": {
                    "names": ["WingPlusY", "WingMinusY", "BodyMinusZ"]
                }
            }
        }

    def _deep_update(self, base_dict: Dict, update_dict: Dict):
        """Deep update dictionary"""
        for key, value in update_dict.items():
            if key in base_dict and isinstance(base_dict[key], dict) and isinstance(value, dict):
                self._deep_update(base_dict[key], value)
            else:
                base_dict[key] = value

    def generate_config_summary(self, config: PanelPowerRequest) -> Dict:
        """
        Generate configuration summary

        Args:
            config: Request

        Returns:
            Configuration summary dictionary
        """
        return {
            'scenario_name': config.scenario_name,
            'description': config.description,
            'window': {
                'start': config.window.start,
                'stop': config.window.stop,
                'step_s': config.window.step_s,
                'duration_s': config.window.duration_s
            },
            'orbit': config.orbit.model_dump(mode='json'),
            'satellite': {
                'name': config.satellite.name,
                'model_file': config.satellite.model_file,
                'propagator': config.satellite.propagator.value,
                'attitude': config.satellite.attitude.value
            },
            'panel_groups': list(config.panel_groups.names),
            'group_index': config.selected_group_index,
            'stk_versions': list(config.session.versions)
        }
