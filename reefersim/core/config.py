"""
Configuration management for reefer container simulation.

This module provides typed configuration dataclasses for the container
geometry, boundary conditions, cargo, cooling unit and numerical settings,
with support for loading from YAML or JSON files.

Usage:
    from reefersim.core.config import (
        ContainerConfig,
        GeometryConfig,
        Vector3D,
        load_config,
        create_container_config,
    )

    # Load from file
    config = create_container_config(load_config("container.yaml"))

    # Or build the geometry from system dimensions
    geometry = GeometryConfig.create(Vector3D(12.0, 2.6, 2.4), 4, 2, 2)
"""

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union
import json
import logging
import math

import numpy as np
import yaml

from reefersim.core.constants import (
    CONVECTIVE_SAFETY,
    DIFFUSIVE_SAFETY,
    EPSILON,
    EXCHANGE_SAFETY,
    MASS_FLOW_SAFETY,
    MAX_INITIAL_TEMPERATURE,
    MAX_TEMPERATURE,
    MIN_INITIAL_TEMPERATURE,
    MIN_TEMPERATURE,
    OBSTACLE_ENHANCEMENT,
    POSITION_ALPHA,
    POSITION_BETA,
    RESPIRATION_HEAT_PER_MG,
    STANDARD_PRESSURE,
    TURBULENCE_PENALTY,
    VARIATION_PENALTY,
)
from reefersim.core.errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Vector3D:
    """Dimensions along the flow (x), vertical (y) and lateral (z) axes."""

    x: float  # m
    y: float  # m
    z: float  # m

    @property
    def volume(self) -> float:
        return self.x * self.y * self.z

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)


@dataclass
class ToleranceConfig:
    """Relative error bounds used by the different validators."""

    geometric: float = 1e-6
    conservation: float = 1e-4
    properties: float = 1e-3
    control: float = 1e-2


@dataclass
class GeometryConfig:
    """
    Spatial discretization of the container.

    The container is split into ``num_zones`` slices along the airflow,
    ``num_layers`` vertical layers and ``num_pallets`` lateral positions.
    ``initial_temperatures`` is indexed [zone][layer][pallet]; when empty,
    every zone starts at ``default_temperature``.
    """

    zone_dimensions: Vector3D
    system_dimensions: Vector3D
    num_zones: int = 1
    num_layers: int = 1
    num_pallets: int = 1
    packing_factor: float = 0.5  # - produce volume fraction
    default_temperature: float = 20.0  # °C
    initial_temperatures: List[List[List[float]]] = field(default_factory=list)
    tolerance: ToleranceConfig = field(default_factory=ToleranceConfig)

    @classmethod
    def create(
        cls,
        system_dimensions: Vector3D,
        num_zones: int,
        num_layers: int = 1,
        num_pallets: int = 1,
        packing_factor: float = 0.5,
        default_temperature: float = 20.0,
        overrides: Optional[Dict[Tuple[int, int, int], float]] = None,
        tolerance: Optional[ToleranceConfig] = None,
    ) -> "GeometryConfig":
        """
        Build a geometry whose zone dimensions divide the system evenly.

        Args:
            system_dimensions: Inner container dimensions (m)
            num_zones: Number of slices along the airflow
            num_layers: Number of vertical layers
            num_pallets: Number of lateral pallet positions
            packing_factor: Produce volume fraction in (0, 1)
            default_temperature: Initial temperature for every zone (°C)
            overrides: Initial temperatures for specific (zone, layer, pallet)
            tolerance: Validation tolerances

        Returns:
            A validated GeometryConfig

        Raises:
            ConfigurationError: If any count is not positive or the result is invalid
        """
        for name, count in (
            ("num_zones", num_zones),
            ("num_layers", num_layers),
            ("num_pallets", num_pallets),
        ):
            if count < 1:
                raise ConfigurationError(f"{name} must be at least 1, got {count}", name, count, 1)

        temperatures = np.full((num_zones, num_layers, num_pallets), float(default_temperature))
        for (i, j, k), value in (overrides or {}).items():
            temperatures[i, j, k] = value

        geometry = cls(
            zone_dimensions=Vector3D(
                system_dimensions.x / num_zones,
                system_dimensions.y / num_layers,
                system_dimensions.z / num_pallets,
            ),
            system_dimensions=system_dimensions,
            num_zones=num_zones,
            num_layers=num_layers,
            num_pallets=num_pallets,
            packing_factor=packing_factor,
            default_temperature=default_temperature,
            initial_temperatures=temperatures.tolist(),
            tolerance=tolerance or ToleranceConfig(),
        )
        geometry.validate()
        return geometry

    @property
    def counts(self) -> Tuple[int, int, int]:
        return (self.num_zones, self.num_layers, self.num_pallets)

    @property
    def zone_length(self) -> float:
        """Zone length along the airflow (m)."""
        return self.zone_dimensions.x

    def initial_temperature(self, zone: int, layer: int, pallet: int) -> float:
        """Initial product and air temperature for one zone (°C)."""
        if not self.initial_temperatures:
            return self.default_temperature
        return float(self.initial_temperatures[zone][layer][pallet])

    def validate(self) -> None:
        """
        Check dimensional consistency, packing factor and initial temperatures.

        Raises:
            ConfigurationError: On the first violated constraint
        """
        for label, vector in (("zone", self.zone_dimensions), ("system", self.system_dimensions)):
            for axis, value in zip("xyz", vector.as_tuple()):
                if not value > 0:
                    raise ConfigurationError(
                        f"{label} dimension {axis} must be positive, got {value}",
                        f"{label}_dimensions.{axis}",
                        value,
                        0.0,
                    )

        for name, count in zip(("num_zones", "num_layers", "num_pallets"), self.counts):
            if count < 1:
                raise ConfigurationError(f"{name} must be at least 1, got {count}", name, count, 1)

        for axis, zone_size, count, total in zip(
            "xyz", self.zone_dimensions.as_tuple(), self.counts, self.system_dimensions.as_tuple()
        ):
            if abs(zone_size * count - total) > self.tolerance.geometric * total:
                raise ConfigurationError(
                    f"Zone dimension {axis}={zone_size} x {count} does not match "
                    f"system dimension {total}",
                    f"zone_dimensions.{axis}",
                    zone_size * count,
                    total,
                )

        if not 0.0 < self.packing_factor < 1.0:
            raise ConfigurationError(
                f"Packing factor must be in (0, 1), got {self.packing_factor}",
                "packing_factor",
                self.packing_factor,
                (0.0, 1.0),
            )

        if self.initial_temperatures:
            values = np.asarray(self.initial_temperatures, dtype=float)
            if values.shape != self.counts:
                raise ConfigurationError(
                    f"Initial temperatures have shape {values.shape}, expected {self.counts}",
                    "initial_temperatures",
                    values.shape,
                    self.counts,
                )
            temperatures = values.ravel()
        else:
            temperatures = np.array([self.default_temperature])

        bound = (MIN_INITIAL_TEMPERATURE, MAX_INITIAL_TEMPERATURE)
        for value in temperatures:
            if not (math.isfinite(value) and bound[0] <= value <= bound[1]):
                raise ConfigurationError(
                    f"Initial temperature {value} °C outside {bound}",
                    "initial_temperature",
                    float(value),
                    bound,
                )


@dataclass(frozen=True)
class BoundaryConfig:
    """Boundary conditions driving the airflow and heat exchange."""

    wall_temperature: float = 20.0  # °C
    inlet_temperature: float = 5.0  # °C
    inlet_humidity: float = 0.005  # kg/kg dry air
    inlet_pressure: float = STANDARD_PRESSURE + 100.0  # Pa
    outlet_pressure: float = STANDARD_PRESSURE  # Pa
    wall_u_value: float = 0.4  # W/(m²·K) - insulated container envelope

    def validate(self) -> None:
        for name in ("inlet_pressure", "outlet_pressure"):
            value = getattr(self, name)
            if not value > 0:
                raise ConfigurationError(f"{name} must be positive, got {value}", name, value, 0.0)
        if self.inlet_humidity < 0:
            raise ConfigurationError(
                f"inlet_humidity must be non-negative, got {self.inlet_humidity}",
                "inlet_humidity",
                self.inlet_humidity,
                0.0,
            )
        if self.wall_u_value < 0:
            raise ConfigurationError(
                f"wall_u_value must be non-negative, got {self.wall_u_value}",
                "wall_u_value",
                self.wall_u_value,
                0.0,
            )


@dataclass
class CommodityConfig:
    """Thermal and respiration properties of the cargo (defaults: strawberry)."""

    name: str = "strawberry"
    density: float = 920.0  # kg/m³
    specific_heat: float = 3900.0  # J/(kg·K)
    respiration_rate: float = 15.0  # mg CO2/(kg·h) at reference temperature
    respiration_coefficient: float = 0.1  # 1/K
    reference_temperature: float = 5.0  # °C
    respiration_heat: float = RESPIRATION_HEAT_PER_MG  # J/mg CO2
    water_activity: float = 0.98  # -
    wetness_factor: float = 0.02  # - fraction of surface acting as free water
    initial_moisture: float = 0.908  # kg water/kg product

    def validate(self) -> None:
        for name in ("density", "specific_heat", "respiration_heat"):
            value = getattr(self, name)
            if not value > 0:
                raise ConfigurationError(f"{name} must be positive, got {value}", name, value, 0.0)
        for name in ("water_activity", "wetness_factor", "initial_moisture"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ConfigurationError(f"{name} must be in [0, 1], got {value}", name, value, (0.0, 1.0))
        if self.respiration_rate < 0:
            raise ConfigurationError(
                f"respiration_rate must be non-negative, got {self.respiration_rate}",
                "respiration_rate",
                self.respiration_rate,
                0.0,
            )


@dataclass
class PackagingConfig:
    """Corrugated or plastic boxes holding the produce."""

    box_dimensions: Vector3D = field(default_factory=lambda: Vector3D(0.6, 0.4, 0.15))
    wall_thickness: float = 0.002  # m
    material_density: float = 1200.0  # kg/m³
    specific_heat: float = 1700.0  # J/(kg·K)

    def mass_per_produce_volume(self) -> float:
        """Box wall mass per m³ of packed produce (kg/m³)."""
        box = self.box_dimensions
        surface = 2.0 * (box.x * box.y + box.y * box.z + box.x * box.z)
        return surface * self.wall_thickness * self.material_density / box.volume

    def validate(self) -> None:
        for name in ("wall_thickness", "material_density", "specific_heat"):
            value = getattr(self, name)
            if not value > 0:
                raise ConfigurationError(f"{name} must be positive, got {value}", name, value, 0.0)


@dataclass
class CoolingUnitConfig:
    """Settings of the refrigeration unit controller."""

    target_temperature: float = 5.0  # °C
    target_humidity: float = 0.007  # kg/kg dry air
    min_coil_temperature: float = 0.0  # °C
    max_power: float = 3000.0  # W - thermodynamic cooling capacity
    tcpi_target: float = 0.95  # -
    control_update_interval: float = 60.0  # s
    variation_penalty: float = VARIATION_PENALTY  # - gamma
    turbulence_penalty: float = TURBULENCE_PENALTY  # -

    def validate(self) -> None:
        if self.min_coil_temperature > self.target_temperature:
            raise ConfigurationError(
                f"Minimum coil temperature {self.min_coil_temperature} °C above target "
                f"{self.target_temperature} °C",
                "min_coil_temperature",
                self.min_coil_temperature,
                self.target_temperature,
            )
        if not self.max_power > 0:
            raise ConfigurationError(
                f"max_power must be positive, got {self.max_power}", "max_power", self.max_power, 0.0
            )
        if not 0.0 < self.tcpi_target <= 1.0:
            raise ConfigurationError(
                f"tcpi_target must be in (0, 1], got {self.tcpi_target}",
                "tcpi_target",
                self.tcpi_target,
                (0.0, 1.0),
            )
        if self.control_update_interval < 0:
            raise ConfigurationError(
                f"control_update_interval must be non-negative, got {self.control_update_interval}",
                "control_update_interval",
                self.control_update_interval,
                0.0,
            )


@dataclass
class PowerSupplyConfig:
    """Electrical supply feeding the cooling unit."""

    max_power: float = 5000.0  # W

    def validate(self) -> None:
        if self.max_power < 0:
            raise ConfigurationError(
                f"Power supply max_power must be non-negative, got {self.max_power}",
                "power_supply.max_power",
                self.max_power,
                0.0,
            )


@dataclass
class SimulationConfig:
    """Numerical settings for the integration."""

    max_time_step: Optional[float] = None  # s, cap on the adaptive step
    min_temperature: float = MIN_TEMPERATURE  # °C
    max_temperature: float = MAX_TEMPERATURE  # °C
    turbulence_fluctuation: float = 0.0  # - amplitude of h fluctuation, 0 disables
    random_seed: Optional[int] = None
    obstacle_factor: float = OBSTACLE_ENHANCEMENT  # -
    position_alpha: float = POSITION_ALPHA  # -
    position_beta: float = POSITION_BETA  # -
    # Time step safety divisors
    convective_safety: float = CONVECTIVE_SAFETY
    diffusive_safety: float = DIFFUSIVE_SAFETY
    mass_flow_safety: float = MASS_FLOW_SAFETY
    exchange_safety: float = EXCHANGE_SAFETY
    epsilon: float = EPSILON  # floor for divisors

    def validate(self) -> None:
        for name in (
            "convective_safety",
            "diffusive_safety",
            "mass_flow_safety",
            "exchange_safety",
            "epsilon",
        ):
            value = getattr(self, name)
            if not value > 0:
                raise ConfigurationError(f"{name} must be positive, got {value}", name, value, 0.0)
        if self.min_temperature >= self.max_temperature:
            raise ConfigurationError(
                "min_temperature must be below max_temperature",
                "min_temperature",
                self.min_temperature,
                self.max_temperature,
            )
        if self.max_time_step is not None and not self.max_time_step > 0:
            raise ConfigurationError(
                f"max_time_step must be positive, got {self.max_time_step}",
                "max_time_step",
                self.max_time_step,
                0.0,
            )
        if self.turbulence_fluctuation < 0:
            raise ConfigurationError(
                "turbulence_fluctuation must be non-negative",
                "turbulence_fluctuation",
                self.turbulence_fluctuation,
                0.0,
            )


@dataclass
class ContainerConfig:
    """Complete container configuration."""

    geometry: GeometryConfig
    name: str = "Reefer-1"
    boundary: BoundaryConfig = field(default_factory=BoundaryConfig)
    commodity: CommodityConfig = field(default_factory=CommodityConfig)
    packaging: PackagingConfig = field(default_factory=PackagingConfig)
    cooling_unit: CoolingUnitConfig = field(default_factory=CoolingUnitConfig)
    power_supply: PowerSupplyConfig = field(default_factory=PowerSupplyConfig)
    simulation: SimulationConfig = field(default_factory=SimulationConfig)

    def validate(self) -> None:
        """Validate every section, raising ConfigurationError on the first failure."""
        self.geometry.validate()
        self.boundary.validate()
        self.commodity.validate()
        self.packaging.validate()
        self.cooling_unit.validate()
        self.power_supply.validate()
        self.simulation.validate()


def load_config(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load configuration from a YAML or JSON file.

    Args:
        path: Path to the configuration file

    Returns:
        Dictionary of configuration values

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file format is not supported
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(path, "r") as f:
        if path.suffix in (".yaml", ".yml"):
            return yaml.safe_load(f)
        elif path.suffix == ".json":
            return json.load(f)
        else:
            raise ValueError(f"Unsupported config file format: {path.suffix}")


def save_config(config: Dict[str, Any], path: Union[str, Path]) -> None:
    """
    Save configuration to a YAML or JSON file.

    Args:
        config: Configuration dictionary to save
        path: Path to save the configuration file
    """
    path = Path(path)

    with open(path, "w") as f:
        if path.suffix in (".yaml", ".yml"):
            yaml.safe_dump(config, f, default_flow_style=False, sort_keys=False)
        elif path.suffix == ".json":
            json.dump(config, f, indent=2)
        else:
            raise ValueError(f"Unsupported config file format: {path.suffix}")


def config_to_dict(config: Any) -> Dict[str, Any]:
    """
    Convert a dataclass config to a dictionary.

    Args:
        config: A dataclass instance

    Returns:
        Dictionary representation
    """
    return asdict(config)


def _vector(value: Any) -> Vector3D:
    if isinstance(value, Vector3D):
        return value
    if isinstance(value, dict):
        return Vector3D(**value)
    return Vector3D(*value)


def create_geometry_config(data: Dict[str, Any]) -> GeometryConfig:
    """Create a GeometryConfig from a dictionary."""
    data = dict(data)
    data["zone_dimensions"] = _vector(data["zone_dimensions"])
    data["system_dimensions"] = _vector(data["system_dimensions"])
    if "tolerance" in data and isinstance(data["tolerance"], dict):
        data["tolerance"] = ToleranceConfig(**data["tolerance"])
    return GeometryConfig(**data)


def create_packaging_config(data: Dict[str, Any]) -> PackagingConfig:
    """Create a PackagingConfig from a dictionary."""
    data = dict(data)
    if "box_dimensions" in data:
        data["box_dimensions"] = _vector(data["box_dimensions"])
    return PackagingConfig(**data)


def create_container_config(data: Dict[str, Any]) -> ContainerConfig:
    """
    Create a ContainerConfig from a dictionary, e.g. one returned by load_config.

    Nested sections may be given as dictionaries; missing sections use defaults.
    The result is validated before it is returned.
    """
    data = dict(data)
    data["geometry"] = create_geometry_config(data["geometry"])
    if isinstance(data.get("boundary"), dict):
        data["boundary"] = BoundaryConfig(**data["boundary"])
    if isinstance(data.get("commodity"), dict):
        data["commodity"] = CommodityConfig(**data["commodity"])
    if isinstance(data.get("packaging"), dict):
        data["packaging"] = create_packaging_config(data["packaging"])
    if isinstance(data.get("cooling_unit"), dict):
        data["cooling_unit"] = CoolingUnitConfig(**data["cooling_unit"])
    if isinstance(data.get("power_supply"), dict):
        data["power_supply"] = PowerSupplyConfig(**data["power_supply"])
    if isinstance(data.get("simulation"), dict):
        data["simulation"] = SimulationConfig(**data["simulation"])

    config = ContainerConfig(**data)
    config.validate()
    logger.debug("Created container config %s with %s zones", config.name, config.geometry.counts)
    return config


def get_default_config() -> ContainerConfig:
    """Get a default 40 ft high-cube container configuration for testing."""
    return ContainerConfig(
        name="Reefer-1",
        geometry=GeometryConfig.create(
            Vector3D(11.6, 2.5, 2.3),
            num_zones=4,
            num_layers=2,
            num_pallets=2,
        ),
    )
