"""
Refrigeration unit model and its feedback controller.

The cooling unit removes sensible and latent heat from the return air. Its
cooling power is adjusted at most once per control interval from the
Turbulent Cooling Performance Index (TCPI), a score of how evenly and
efficiently the load is being cooled. The coil temperature follows the
power ratio between the target temperature and the minimum coil
temperature.

Usage:
    from reefersim.controls.cooling_unit import CoolingUnit, PerformanceSample

    unit = CoolingUnit(CoolingUnitConfig(), PowerSupplyConfig())
    unit.update_cooling_power([PerformanceSample(0.6)], current_time=60.0)
    result = unit.calculate_dehumidification(12.0, 0.008, 1.5)
"""

from dataclasses import dataclass
import logging
import math
from typing import Any, Dict, NamedTuple, Optional, Sequence

import numpy as np

from reefersim.core.config import CoolingUnitConfig, PowerSupplyConfig
from reefersim.core.constants import (
    DEFAULT_TURBULENCE_INTENSITY,
    DEHUMIDIFICATION_THRESHOLD,
    EPSILON,
    HUMIDITY_GATE_SCALE,
    MIN_TCPI,
    STANDARD_PRESSURE,
    TEMPERATURE_GATE_SCALE,
    TURBULENCE_PENALTY,
    VARIATION_PENALTY,
)
from reefersim.equipment.base import EquipmentType, PlantEquipment
from reefersim.physics.properties import (
    dew_point_from_humidity,
    latent_heat,
    saturation_humidity_ratio,
    specific_heat,
)

logger = logging.getLogger(__name__)


class PerformanceSample(NamedTuple):
    """Cooling performance of one zone, as seen by the controller."""

    cooling_efficiency: float  # - actual over maximum possible cooling
    turbulence_intensity: float = DEFAULT_TURBULENCE_INTENSITY  # -


@dataclass(frozen=True)
class CoolingUnitState:
    """Snapshot of the controller state."""

    coil_temperature: float  # °C
    dew_point: float  # °C
    current_power: float  # W
    rated_power: float  # W
    tcpi: float  # -
    last_update_time: float  # s


class DehumidificationResult(NamedTuple):
    """Moisture and heat removed from an air stream."""

    water_removed: float  # kg/s
    sensible_heat: float  # W
    latent_heat: float  # W

    @property
    def total_heat(self) -> float:
        return self.sensible_heat + self.latent_heat


def calculate_tcpi(
    samples: Sequence[PerformanceSample],
    variation_penalty: float = VARIATION_PENALTY,
    turbulence_penalty: float = TURBULENCE_PENALTY,
) -> float:
    """
    Turbulent Cooling Performance Index.

    TCPI = (mean / E) * (1 - gamma * std / mean) with E = 1 + p * I², written
    as max(0, mean - gamma * std) / E so a zero mean efficiency gives 0
    instead of a division by zero.

    Args:
        samples: Per-zone performance samples
        variation_penalty: Weight gamma of the cross-zone spread
        turbulence_penalty: Weight p of the turbulence energy factor

    Returns:
        TCPI in [0, 1]; 1.0 when there are no samples
    """
    if not samples:
        return 1.0
    efficiencies = np.array([s.cooling_efficiency for s in samples], dtype=float)
    intensities = np.array([s.turbulence_intensity for s in samples], dtype=float)
    mean = float(np.mean(efficiencies))
    spread = float(np.std(efficiencies))
    energy_factor = 1.0 + turbulence_penalty * float(np.mean(intensities)) ** 2
    return min(1.0, max(0.0, mean - variation_penalty * spread) / energy_factor)


def actual_cooling_power(rated_power: float, load: float, max_load: float, tcpi: float) -> float:
    """
    Power drawn to serve a cooling load.

    Uses rated * r^TCPI with r = load / max_load clipped to [0, 1]: output
    grows with load and shrinks as TCPI rises. The exponent 1/TCPI is not
    used; for r < 1 it makes the output grow with TCPI.

    Args:
        rated_power: Rated power of the unit (W)
        load: Cooling load (W)
        max_load: Load at which the unit runs at rated power (W)
        tcpi: Current TCPI
    """
    ratio = min(1.0, max(0.0, load / max(max_load, EPSILON)))
    return rated_power * ratio ** max(tcpi, MIN_TCPI)


def _activation(excess: float, scale: float) -> float:
    # Smooth step: 0 for excess <= 0, continuous slope at 0, tends to 1.
    return math.tanh(max(excess, 0.0) / scale) ** 2


def dehumidification_rate(
    mass_flow: float,
    humidity: float,
    air_temp: float,
    surface_temp: float,
    pressure: float = STANDARD_PRESSURE,
) -> float:
    """
    Water condensed on a cold surface (kg/s).

    Condensation is gated smoothly on the air being warmer than the surface
    and on the air holding more water than saturated air at the surface
    temperature. Rates below 1e-7 kg/s are returned as exactly 0.

    Args:
        mass_flow: Air mass flow over the coil (kg/s)
        humidity: Air humidity ratio (kg/kg)
        air_temp: Air temperature (°C)
        surface_temp: Condensing surface temperature (°C)
        pressure: Total pressure (Pa)
    """
    excess = humidity - saturation_humidity_ratio(surface_temp, pressure)
    gate = _activation(air_temp - surface_temp, TEMPERATURE_GATE_SCALE) * _activation(
        excess, HUMIDITY_GATE_SCALE
    )
    rate = abs(mass_flow) * max(excess, 0.0) * gate
    if abs(rate) < DEHUMIDIFICATION_THRESHOLD:
        return 0.0
    return rate


class CoolingUnit(PlantEquipment):
    """
    Refrigeration unit with TCPI feedback control.

    Attributes:
        settings: Controller settings
        power_supply: Electrical supply limits
        capacity: Rated power, min(thermodynamic max, electrical max) (W)
        current_load: Current cooling power (W)
    """

    @classmethod
    def from_config(
        cls,
        config: CoolingUnitConfig,
        power_supply: Optional[PowerSupplyConfig] = None,
        name: str = "Cooling-Unit",
    ) -> "CoolingUnit":
        """Create a CoolingUnit from configuration dataclasses.

        Args:
            config: CoolingUnitConfig with controller settings
            power_supply: Electrical supply; defaults to PowerSupplyConfig()
            name: Name of the unit

        Returns:
            A new CoolingUnit instance
        """
        if not isinstance(config, CoolingUnitConfig):
            raise TypeError(f"Expected CoolingUnitConfig, got {type(config).__name__}")
        return cls(config, power_supply or PowerSupplyConfig(), name=name)

    def __init__(
        self,
        settings: CoolingUnitConfig,
        power_supply: PowerSupplyConfig,
        name: str = "Cooling-Unit",
    ) -> None:
        """
        Initialize the cooling unit at zero power with the coil at target.

        Args:
            settings: Controller settings
            power_supply: Electrical supply limits
            name: Name of the unit
        """
        super().__init__(name, EquipmentType.COOLING_UNIT)
        settings.validate()
        power_supply.validate()
        self.settings = settings
        self.power_supply = power_supply
        self.capacity = min(settings.max_power, power_supply.max_power)
        self.current_load = 0.0
        self.coil_temperature = settings.target_temperature
        self.dew_point = dew_point_from_humidity(
            settings.target_temperature, settings.target_humidity
        )
        self._tcpi = 1.0
        self._last_update_time = 0.0

        logger.info(
            "Cooling unit %s rated %.0f W, target %.1f °C, dew point %.1f °C",
            name,
            self.capacity,
            settings.target_temperature,
            self.dew_point,
        )

    @property
    def rated_power(self) -> float:
        return self.capacity

    @property
    def current_power(self) -> float:
        return self.current_load

    @property
    def tcpi(self) -> float:
        """TCPI computed at the last control update."""
        return self._tcpi

    @property
    def condensing_temperature(self) -> float:
        """Temperature at which moisture condenses on the coil (°C)."""
        return max(self.coil_temperature, self.dew_point)

    @property
    def state(self) -> CoolingUnitState:
        return CoolingUnitState(
            coil_temperature=self.coil_temperature,
            dew_point=self.dew_point,
            current_power=self.current_load,
            rated_power=self.capacity,
            tcpi=self._tcpi,
            last_update_time=self._last_update_time,
        )

    def _update_coil_temperature(self) -> None:
        target = self.settings.target_temperature
        self.coil_temperature = target - self.load_ratio * (
            target - self.settings.min_coil_temperature
        )

    def update_cooling_power(
        self, samples: Sequence[PerformanceSample], current_time: float
    ) -> bool:
        """
        Adjust cooling power from the latest performance samples.

        Does nothing until ``control_update_interval`` seconds have passed
        since the last update (or since t = 0 before the first update).

        Args:
            samples: Per-zone performance samples
            current_time: Simulation time (s)

        Returns:
            True if the controller updated, False if rate limited
        """
        if current_time - self._last_update_time < self.settings.control_update_interval:
            return False

        self._tcpi = calculate_tcpi(
            samples, self.settings.variation_penalty, self.settings.turbulence_penalty
        )
        desired = self.capacity * self.settings.tcpi_target / max(self._tcpi, MIN_TCPI)
        self.current_load = min(self.capacity, max(0.0, desired))
        self._update_coil_temperature()
        self._last_update_time = current_time

        logger.debug(
            "%s at t=%.1f s: TCPI=%.3f power=%.0f W coil=%.2f °C",
            self.name,
            current_time,
            self._tcpi,
            self.current_load,
            self.coil_temperature,
        )
        return True

    def update_power_supply(self, power_supply: PowerSupplyConfig) -> None:
        """
        Apply new electrical supply limits immediately.

        The rated power is re-clamped and the current power reduced if it
        exceeds the new limit.
        """
        power_supply.validate()
        self.power_supply = power_supply
        self.capacity = min(self.settings.max_power, power_supply.max_power)
        if self.current_load > self.capacity:
            logger.warning(
                "%s power reduced from %.0f W to %.0f W by supply limit",
                self.name,
                self.current_load,
                self.capacity,
            )
            self.current_load = self.capacity
        self._update_coil_temperature()

    def calculate_dehumidification(
        self,
        air_temp: float,
        humidity: float,
        mass_flow: float,
        pressure: float = STANDARD_PRESSURE,
    ) -> DehumidificationResult:
        """
        Heat and moisture removed from air passing the coil.

        Args:
            air_temp: Return air temperature (°C)
            humidity: Return air humidity ratio (kg/kg)
            mass_flow: Air mass flow (kg/s)
            pressure: Total pressure (Pa)

        Returns:
            DehumidificationResult with water removal and heat rates
        """
        surface = self.condensing_temperature
        water = dehumidification_rate(mass_flow, humidity, air_temp, surface, pressure)
        sensible = abs(mass_flow) * specific_heat(air_temp) * max(air_temp - surface, 0.0)
        return DehumidificationResult(
            water_removed=water,
            sensible_heat=sensible,
            latent_heat=water * latent_heat(surface),
        )

    def electrical_power(self, load: float) -> float:
        """Electrical power drawn to serve ``load`` at the current TCPI (W)."""
        return actual_cooling_power(self.capacity, load, self.capacity, self._tcpi)

    def get_process_variables(self) -> Dict[str, Any]:
        """Return a dictionary of all process variables for the cooling unit."""
        return {
            "name": self.name,
            "coil_temperature": self.coil_temperature,
            "dew_point": self.dew_point,
            "current_power": self.current_load,
            "rated_power": self.capacity,
            "load_ratio": self.load_ratio,
            "tcpi": self._tcpi,
            "target_temperature": self.settings.target_temperature,
            "power_supply_limit": self.power_supply.max_power,
        }

    @classmethod
    def get_process_variables_metadata(cls) -> Dict[str, Dict[str, Any]]:
        """Return metadata for all process variables."""
        return {
            "name": {
                "type": str,
                "label": "Cooling Unit Name",
                "description": "Unique identifier for the cooling unit",
            },
            "coil_temperature": {
                "type": float,
                "label": "Coil Temperature",
                "description": "Evaporator coil surface temperature",
                "unit": "°C",
            },
            "dew_point": {
                "type": float,
                "label": "Dew Point",
                "description": "Dew point of air at the target conditions",
                "unit": "°C",
            },
            "current_power": {
                "type": float,
                "label": "Cooling Power",
                "description": "Current cooling power",
                "unit": "W",
            },
            "rated_power": {
                "type": float,
                "label": "Rated Power",
                "description": "Lesser of thermodynamic and power supply limits",
                "unit": "W",
            },
            "load_ratio": {
                "type": float,
                "label": "Load Ratio",
                "description": "Current power as a fraction of rated power (0-1)",
                "unit": "fraction",
            },
            "tcpi": {
                "type": float,
                "label": "TCPI",
                "description": "Turbulent cooling performance index (0-1)",
            },
            "target_temperature": {
                "type": float,
                "label": "Target Temperature",
                "description": "Cargo temperature set point",
                "unit": "°C",
            },
            "power_supply_limit": {
                "type": float,
                "label": "Power Supply Limit",
                "description": "Maximum power available from the supply",
                "unit": "W",
            },
        }

    def __str__(self) -> str:
        """Return string representation of cooling unit state."""
        return (
            f"Cooling Unit {self.name}: "
            f"Power={self.current_load:.0f}/{self.capacity:.0f} W, "
            f"Coil={self.coil_temperature:.1f}°C, "
            f"TCPI={self._tcpi:.3f}"
        )
