"""
Reefer container simulation.

``ReeferContainer`` owns the zone grid and advances it in time. Each step it
picks a stable time step, marches every flow line from the supply end to the
return end, replaces the grid with the new states, checks conservation,
records a PerformanceSnapshot and, when a cooling unit is attached, lets the
unit condition the return air into the next step's supply air.

Usage:
    from reefersim.container import ReeferContainer
    from reefersim.core.config import get_default_config

    container = ReeferContainer.from_config(get_default_config())
    snapshots = container.run(duration=120.0)
    print(snapshots[-1].average_temperature)
"""

from dataclasses import dataclass, replace
import logging
import math
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from reefersim.controls.cooling_unit import CoolingUnit, PerformanceSample, calculate_tcpi
from reefersim.controls.timestep import system_time_step
from reefersim.core.config import BoundaryConfig, ContainerConfig
from reefersim.core.constants import EPSILON, KELVIN_OFFSET, MIN_TCPI
from reefersim.equipment.base import Equipment, EquipmentType
from reefersim.integrator import InletConditions, ZoneFluxes, ZoneIntegrator
from reefersim.physics.performance import (
    coefficient_of_performance,
    cooling_effectiveness,
    cooling_efficiency,
    cooling_rate_index,
    uniformity_index,
)
from reefersim.physics.properties import specific_heat
from reefersim.zones import GridShape, ZoneGrid, ZoneIndex, ZoneState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PerformanceSnapshot:
    """Container-wide metrics after one step, derived from the zone grid."""

    time: float  # s
    time_step: float  # s
    average_temperature: float  # °C, product
    average_air_temperature: float  # °C
    temperature_std: float  # K, product
    uniformity_index: float  # -
    total_heat_transfer: float  # W, product to air
    cooling_effectiveness: float  # -
    cooling_rate_index: float  # -
    tcpi: float  # -
    energy_removed: float  # J, cumulative from the product
    mass_residual: float  # -
    energy_residual: float  # -
    supply_temperature: float  # °C
    cooling_power: float = 0.0  # W
    coefficient_of_performance: float = 0.0  # -


class ReturnAir:
    """Mass-flow weighted mix of the air leaving every flow line."""

    __slots__ = ("temperature", "humidity", "pressure", "mass_flow")

    def __init__(self, outlets: Sequence[ZoneState]) -> None:
        flows = np.array([max(s.mass_flow, 0.0) for s in outlets])
        total = float(flows.sum())
        weights = flows / total if total > EPSILON else np.full(len(outlets), 1.0 / len(outlets))
        self.temperature = float(np.dot(weights, [s.air_temperature for s in outlets]))
        self.humidity = float(np.dot(weights, [s.air_humidity for s in outlets]))
        self.pressure = float(np.dot(weights, [s.pressure for s in outlets]))
        self.mass_flow = total


class ReeferContainer(Equipment):
    """
    Zonal forced-air cooling simulation of one container.

    Attributes:
        config: Container configuration
        boundary: Current boundary conditions, replaced by the cooling unit
        grid: Current zone states
        time: Simulation time (s)
        history: PerformanceSnapshot of every completed step
        grid_history: Zone grids after every step when ``record_grids`` is set
    """

    @classmethod
    def from_config(
        cls,
        config: ContainerConfig,
        with_cooling_unit: bool = True,
        rng: Optional[np.random.Generator] = None,
        record_grids: bool = False,
    ) -> "ReeferContainer":
        """Create a container, and optionally its cooling unit, from a ContainerConfig.

        Args:
            config: ContainerConfig dataclass
            with_cooling_unit: Attach a CoolingUnit built from the same config
            rng: Generator for the turbulent fluctuation term
            record_grids: Keep every zone grid in ``grid_history``

        Returns:
            A new ReeferContainer instance
        """
        if not isinstance(config, ContainerConfig):
            raise TypeError(f"Expected ContainerConfig, got {type(config).__name__}")

        cooling_unit = None
        if with_cooling_unit:
            cooling_unit = CoolingUnit.from_config(
                config.cooling_unit, config.power_supply, name=f"{config.name}-CU"
            )
        return cls(config, cooling_unit=cooling_unit, rng=rng, record_grids=record_grids)

    def __init__(
        self,
        config: ContainerConfig,
        cooling_unit: Optional[CoolingUnit] = None,
        rng: Optional[np.random.Generator] = None,
        record_grids: bool = False,
    ) -> None:
        """
        Initialize the container with every zone at its initial temperature.

        Args:
            config: Container configuration, validated here
            cooling_unit: Unit conditioning the supply air; with None the
                boundary conditions stay fixed
            rng: Generator for the turbulent fluctuation term; when None and
                ``simulation.random_seed`` is set, one is seeded from it
            record_grids: Keep every zone grid in ``grid_history``
        """
        super().__init__(config.name, EquipmentType.CONTAINER)
        config.validate()
        self.config = config
        self.cooling_unit = cooling_unit
        self.boundary: BoundaryConfig = config.boundary
        if rng is None and config.simulation.random_seed is not None:
            rng = np.random.default_rng(config.simulation.random_seed)
        self.integrator = ZoneIntegrator(config, rng)

        shape = GridShape(*config.geometry.counts)
        self.grid = ZoneGrid.uniform(
            shape, lambda index: self.integrator.initial_state(index, self.boundary)
        )
        self.initial_average_temperature = float(
            np.mean([s.product_temperature for s in self.grid.states()])
        )
        self.time = 0.0
        self.energy_removed = 0.0
        self.history: List[PerformanceSnapshot] = []
        self.record_grids = record_grids
        self.grid_history: List[ZoneGrid] = [self.grid] if record_grids else []

        logger.info(
            "Container %s: %d x %d x %d zones, %.1f t of %s at %.1f °C",
            self.name,
            *shape,
            self.integrator.zone.product_mass * shape.size / 1000.0,
            config.commodity.name,
            self.initial_average_temperature,
        )

    @property
    def shape(self) -> GridShape:
        return self.grid.shape

    @property
    def latest(self) -> Optional[PerformanceSnapshot]:
        return self.history[-1] if self.history else None

    def _march(self, dt: float, tcpi: float) -> Tuple[Dict[ZoneIndex, ZoneState], Dict[ZoneIndex, ZoneFluxes]]:
        shape = self.grid.shape
        states: Dict[ZoneIndex, ZoneState] = {}
        fluxes: Dict[ZoneIndex, ZoneFluxes] = {}
        for layer in range(shape.num_layers):
            for pallet in range(shape.num_pallets):
                # Flow lines are independent; zones along a line are not.
                inlet = InletConditions.from_boundary(self.boundary)
                for zone in range(shape.num_zones):
                    index = ZoneIndex(zone, layer, pallet)
                    step = self.integrator.integrate(
                        index, self.grid[index], inlet, dt, self.boundary, tcpi
                    )
                    states[index] = step.state
                    fluxes[index] = step.fluxes
                    inlet = InletConditions.from_state(step.state)
        return states, fluxes

    def _residuals(
        self,
        new_grid: ZoneGrid,
        fluxes: Dict[ZoneIndex, ZoneFluxes],
        dt: float,
    ) -> Tuple[float, float]:
        """Relative mass continuity and energy balance residuals of the step."""
        zone = self.integrator.zone
        mass_residual = 0.0
        for _, state in new_grid:
            expected = state.density * state.velocity * zone.flow_area
            mass_residual = max(
                mass_residual, abs(state.mass_flow - expected) / max(abs(state.mass_flow), EPSILON)
            )

        change = 0.0
        sources = 0.0
        scale = 0.0
        for index, old in self.grid:
            new = new_grid[index]
            flux = fluxes[index]
            air_capacity = old.density * zone.air_volume * specific_heat(old.air_temperature)
            change += zone.heat_capacity * (new.product_temperature - old.product_temperature)
            change += air_capacity * (new.air_temperature - old.air_temperature)
            sources += dt * (
                flux.respiration_heat - flux.evaporative_heat + flux.wall_heat + flux.advected_heat
            )
            scale += zone.heat_capacity * abs(old.product_temperature) + abs(old.energy)
        energy_residual = abs(change - sources) / max(scale, EPSILON)
        return mass_residual, energy_residual

    def _condition_supply_air(self) -> Tuple[float, float]:
        """Let the cooling unit turn the return air into supply air.

        Returns:
            Cooling delivered (W) and coefficient of performance
        """
        unit = self.cooling_unit
        returned = ReturnAir(self.grid.outlet_states())
        if returned.mass_flow <= EPSILON:
            return 0.0, 0.0

        result = unit.calculate_dehumidification(
            returned.temperature, returned.humidity, returned.mass_flow, returned.pressure
        )
        demand = result.total_heat
        delivered = min(demand, unit.current_power)
        scale = delivered / demand if demand > EPSILON else 0.0
        sensible = result.sensible_heat * scale
        water = result.water_removed * scale

        supply_temp = returned.temperature - sensible / (
            returned.mass_flow * specific_heat(returned.temperature)
        )
        supply_humidity = max(0.0, returned.humidity - water / returned.mass_flow)
        self.boundary = replace(
            self.boundary, inlet_temperature=supply_temp, inlet_humidity=supply_humidity
        )
        cop = coefficient_of_performance(
            sensible, result.latent_heat * scale, unit.electrical_power(delivered)
        )
        return delivered, cop

    def step(self) -> PerformanceSnapshot:
        """
        Advance the whole container by one adaptive time step.

        Returns:
            PerformanceSnapshot of the new state

        Raises:
            NumericalDomainError: If the time step or any zone state is invalid;
                the grid is left at the last valid state
        """
        geometry = self.config.geometry
        tcpi = max(self.cooling_unit.tcpi, MIN_TCPI) if self.cooling_unit else 1.0
        dt = system_time_step(
            self.grid,
            geometry,
            self.config.simulation,
            lambda index, state: self.integrator.heat_exchange(index, state, self.boundary, tcpi),
        )

        states, fluxes = self._march(dt, tcpi)
        new_grid = self.grid.replace(states)

        mass_residual, energy_residual = self._residuals(new_grid, fluxes, dt)
        tolerance = geometry.tolerance.conservation
        if mass_residual > tolerance:
            logger.warning(
                "%s t=%.3f s: mass continuity residual %.2e exceeds %.1e",
                self.name,
                self.time + dt,
                mass_residual,
                tolerance,
            )
        if energy_residual > tolerance:
            logger.warning(
                "%s t=%.3f s: energy balance residual %.2e exceeds %.1e",
                self.name,
                self.time + dt,
                energy_residual,
                tolerance,
            )

        self.grid = new_grid
        self.time += dt
        self.energy_removed += dt * sum(
            f.convective_heat + f.evaporative_heat - f.respiration_heat for f in fluxes.values()
        )
        if self.record_grids:
            self.grid_history.append(new_grid)

        supply_temp = self.boundary.inlet_temperature
        reference = self.cooling_unit.coil_temperature if self.cooling_unit else supply_temp
        samples = [
            PerformanceSample(
                cooling_efficiency(state.product_temperature, state.air_temperature, reference),
                fluxes[index].turbulence_intensity,
            )
            for index, state in new_grid
        ]

        cooling_power = 0.0
        cop = 0.0
        if self.cooling_unit is not None:
            self.cooling_unit.update_cooling_power(samples, self.time)
            cooling_power, cop = self._condition_supply_air()

        product = np.array([s.product_temperature for s in new_grid.states()])
        air = np.array([s.air_temperature for s in new_grid.states()])
        average = float(np.mean(product))
        settings = self.config.cooling_unit
        snapshot = PerformanceSnapshot(
            time=self.time,
            time_step=dt,
            average_temperature=average,
            average_air_temperature=float(np.mean(air)),
            temperature_std=float(np.std(product)),
            uniformity_index=uniformity_index(product + KELVIN_OFFSET),
            total_heat_transfer=sum(f.convective_heat for f in fluxes.values()),
            cooling_effectiveness=cooling_effectiveness(
                self.boundary.wall_temperature, average, supply_temp
            ),
            cooling_rate_index=cooling_rate_index(
                average, float(np.mean(air)), self.initial_average_temperature, supply_temp
            ),
            tcpi=calculate_tcpi(samples, settings.variation_penalty, settings.turbulence_penalty),
            energy_removed=self.energy_removed,
            mass_residual=mass_residual,
            energy_residual=energy_residual,
            supply_temperature=supply_temp,
            cooling_power=cooling_power,
            coefficient_of_performance=cop,
        )
        self.history.append(snapshot)

        logger.debug(
            "%s t=%.3f s dt=%.4f s: product %.2f °C air %.2f °C",
            self.name,
            self.time,
            dt,
            snapshot.average_temperature,
            snapshot.average_air_temperature,
        )
        return snapshot

    def run(self, duration: Optional[float] = None, steps: Optional[int] = None) -> List[PerformanceSnapshot]:
        """
        Advance the simulation for a duration, a number of steps, or both.

        Stops at whichever limit is reached first.

        Args:
            duration: Simulated time to advance (s)
            steps: Maximum number of steps

        Returns:
            Snapshots produced by this call
        """
        if duration is None and steps is None:
            raise ValueError("run() needs a duration or a number of steps")

        end_time = self.time + duration if duration is not None else math.inf
        max_steps = steps if steps is not None else math.inf
        snapshots: List[PerformanceSnapshot] = []
        while self.time < end_time and len(snapshots) < max_steps:
            snapshots.append(self.step())

        logger.info(
            "%s ran %d steps to t=%.1f s, product %.2f °C",
            self.name,
            len(snapshots),
            self.time,
            snapshots[-1].average_temperature if snapshots else self.initial_average_temperature,
        )
        return snapshots

    def get_process_variables(self) -> Dict[str, Any]:
        """Return a dictionary of all process variables for the container."""
        latest = self.latest
        states = self.grid.states()
        return {
            "name": self.name,
            "time": self.time,
            "num_zones": len(states),
            "average_temperature": float(np.mean([s.product_temperature for s in states])),
            "average_air_temperature": float(np.mean([s.air_temperature for s in states])),
            "supply_temperature": self.boundary.inlet_temperature,
            "supply_humidity": self.boundary.inlet_humidity,
            "tcpi": latest.tcpi if latest else 1.0,
            "uniformity_index": latest.uniformity_index if latest else 0.0,
            "energy_removed": self.energy_removed,
            "cooling_power": latest.cooling_power if latest else 0.0,
        }

    @classmethod
    def get_process_variables_metadata(cls) -> Dict[str, Dict[str, Any]]:
        """Return metadata for all process variables."""
        return {
            "name": {
                "type": str,
                "label": "Container Name",
                "description": "Unique identifier for the container",
            },
            "time": {
                "type": float,
                "label": "Simulation Time",
                "description": "Elapsed simulated time",
                "unit": "s",
            },
            "num_zones": {
                "type": int,
                "label": "Zone Count",
                "description": "Number of zones in the grid",
            },
            "average_temperature": {
                "type": float,
                "label": "Average Product Temperature",
                "description": "Mean product temperature over all zones",
                "unit": "°C",
            },
            "average_air_temperature": {
                "type": float,
                "label": "Average Air Temperature",
                "description": "Mean air temperature over all zones",
                "unit": "°C",
            },
            "supply_temperature": {
                "type": float,
                "label": "Supply Air Temperature",
                "description": "Temperature of air entering the load",
                "unit": "°C",
            },
            "supply_humidity": {
                "type": float,
                "label": "Supply Air Humidity",
                "description": "Humidity ratio of air entering the load",
                "unit": "kg/kg",
            },
            "tcpi": {
                "type": float,
                "label": "TCPI",
                "description": "Turbulent cooling performance index (0-1)",
            },
            "uniformity_index": {
                "type": float,
                "label": "Uniformity Index",
                "description": "Product temperature standard deviation over mean",
            },
            "energy_removed": {
                "type": float,
                "label": "Energy Removed",
                "description": "Heat removed from the product since the start",
                "unit": "J",
            },
            "cooling_power": {
                "type": float,
                "label": "Cooling Power",
                "description": "Cooling delivered by the unit",
                "unit": "W",
            },
        }

    def __str__(self) -> str:
        """Return string representation of container state."""
        pv = self.get_process_variables()
        return (
            f"Container {self.name}: t={self.time:.1f}s, "
            f"Product={pv['average_temperature']:.2f}°C, "
            f"Air={pv['average_air_temperature']:.2f}°C, "
            f"Supply={pv['supply_temperature']:.2f}°C"
        )
