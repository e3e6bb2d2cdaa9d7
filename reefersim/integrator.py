"""
Explicit time integration of a single zone.

A zone exchanges heat and moisture between its produce and the air flowing
through it, gains heat through the container envelope, and receives air from
the zone upstream. ``ZoneIntegrator.integrate`` advances one zone by one
forward Euler step and returns a new ZoneState without touching the old one.

Usage:
    from reefersim.integrator import InletConditions, ZoneIntegrator

    integrator = ZoneIntegrator(config)
    state = integrator.initial_state(index, config.boundary)
    step = integrator.integrate(index, state, InletConditions.from_boundary(boundary), dt, boundary)
    new_state = step.state
"""

import logging
import math
from typing import NamedTuple, Optional, Tuple

import numpy as np

from reefersim.core.config import BoundaryConfig, ContainerConfig
from reefersim.core.constants import EPSILON
from reefersim.core.errors import NumericalDomainError
from reefersim.physics.flow import (
    convective_coefficient,
    development_factor,
    flow_area,
    fluctuating_coefficient,
    friction_factor,
    hydraulic_diameter,
    initial_velocity,
    produce_surface_area,
    reynolds_number,
    turbulence_intensity,
)
from reefersim.physics.heat_transfer import (
    convective_heat,
    evaporation_rate,
    evaporative_heat,
    heat_transfer_coefficient,
    mass_transfer_coefficient,
    position_factor,
    respiration_heat,
    vapor_pressure_deficit,
    wall_heat_gain,
)
from reefersim.physics.properties import (
    AirProperties,
    air_density,
    air_properties,
    dynamic_viscosity,
    saturation_humidity_ratio,
    specific_heat,
)
from reefersim.zones import ZoneIndex, ZoneState

logger = logging.getLogger(__name__)


class InletConditions(NamedTuple):
    """Air entering a zone."""

    temperature: float  # °C
    humidity: float  # kg/kg
    pressure: float  # Pa

    @classmethod
    def from_boundary(cls, boundary: BoundaryConfig) -> "InletConditions":
        return cls(boundary.inlet_temperature, boundary.inlet_humidity, boundary.inlet_pressure)

    @classmethod
    def from_state(cls, state: ZoneState) -> "InletConditions":
        """Outlet of an upstream zone."""
        return cls(state.air_temperature, state.air_humidity, state.pressure)


class ZoneFluxes(NamedTuple):
    """Heat and mass exchange of one zone during one step."""

    respiration_heat: float  # W
    convective_heat: float  # W, product to air
    evaporative_heat: float  # W
    wall_heat: float  # W, envelope to air
    evaporation_rate: float  # kg/s
    advected_heat: float  # W, mdot cp (T_in - T_air)
    reynolds_number: float
    turbulence_intensity: float
    heat_transfer_coefficient: float  # W/(m²·K)
    friction_factor: float


class HeatExchange(NamedTuple):
    """Heat capacities and exchange conductances bounding the explicit step."""

    air_capacity: float  # J/K
    air_conductance: float  # W/K, product + through-flow + envelope
    product_capacity: float  # J/K
    product_conductance: float  # W/K


class ZoneStep(NamedTuple):
    """Result of integrating one zone over one step."""

    state: ZoneState
    fluxes: ZoneFluxes


class ZoneGeometry(NamedTuple):
    """Quantities shared by every zone of a uniform grid."""

    length: float  # m
    flow_area: float  # m²
    hydraulic_diameter: float  # m
    air_volume: float  # m³
    product_surface: float  # m²
    product_mass: float  # kg
    heat_capacity: float  # J/K, produce plus packaging

    @classmethod
    def from_config(cls, config: ContainerConfig) -> "ZoneGeometry":
        geometry = config.geometry
        dims = geometry.zone_dimensions
        packing = geometry.packing_factor
        area = flow_area(dims.y, dims.z, packing)
        product_volume = dims.volume * packing
        product_mass = config.commodity.density * product_volume
        packaging_mass = config.packaging.mass_per_produce_volume() * product_volume
        return cls(
            length=dims.x,
            flow_area=area,
            hydraulic_diameter=hydraulic_diameter(dims.x, dims.y, dims.z, packing),
            air_volume=area * dims.x,
            product_surface=produce_surface_area(dims.volume, packing),
            product_mass=product_mass,
            heat_capacity=product_mass * config.commodity.specific_heat
            + packaging_mass * config.packaging.specific_heat,
        )


class ZoneIntegrator:
    """
    Forward Euler integrator for zone states.

    Attributes:
        config: Container configuration
        zone: Geometry shared by all zones
        rng: Generator for the turbulent fluctuation of the heat transfer
            coefficient, None for a deterministic run
    """

    def __init__(self, config: ContainerConfig, rng: Optional[np.random.Generator] = None) -> None:
        self.config = config
        self.zone = ZoneGeometry.from_config(config)
        self.rng = rng

    def envelope_area(self, index: ZoneIndex) -> float:
        """Area of container floor, roof and side walls bounding a zone (m²)."""
        geometry = self.config.geometry
        dims = geometry.zone_dimensions
        area = 0.0
        if index.layer == 0:
            area += dims.x * dims.z
        if index.layer == geometry.num_layers - 1:
            area += dims.x * dims.z
        if index.pallet == 0:
            area += dims.x * dims.y
        if index.pallet == geometry.num_pallets - 1:
            area += dims.x * dims.y
        return area

    def _zone_pressure_drop(self, index: ZoneIndex, inlet_pressure: float, boundary: BoundaryConfig) -> float:
        remaining = self.config.geometry.num_zones - index.zone
        return (inlet_pressure - boundary.outlet_pressure) / remaining

    def initial_state(self, index: ZoneIndex, boundary: BoundaryConfig) -> ZoneState:
        """
        Starting state of a zone at rest temperature with developing flow.

        Pressure falls linearly from inlet to outlet; the velocity comes from
        a loss-coefficient estimate over the full container length.
        """
        geometry = self.config.geometry
        zone = self.zone
        temp = geometry.initial_temperature(*index)
        total_drop = boundary.inlet_pressure - boundary.outlet_pressure
        pressure = boundary.inlet_pressure - total_drop * (index.zone + 1) / geometry.num_zones
        density = air_density(temp, pressure)
        speed = initial_velocity(
            total_drop, density, geometry.system_dimensions.x, zone.hydraulic_diameter
        )
        speed = math.copysign(speed, total_drop)
        humidity = min(boundary.inlet_humidity, saturation_humidity_ratio(temp, pressure))
        reynolds = reynolds_number(density, speed, zone.hydraulic_diameter, dynamic_viscosity(temp))

        return ZoneState(
            product_temperature=temp,
            product_moisture=self.config.commodity.initial_moisture,
            air_temperature=temp,
            air_humidity=humidity,
            velocity=speed,
            pressure=pressure,
            density=density,
            mass_flow=density * speed * zone.flow_area,
            energy=density * zone.air_volume * specific_heat(temp) * temp,
            development_factor=development_factor(
                (index.zone + 1) * zone.length, reynolds, zone.hydraulic_diameter
            ),
        )

    def _coefficient(
        self, index: ZoneIndex, state: ZoneState, props: AirProperties, tcpi: float
    ) -> Tuple[float, float, float]:
        # Mean product-air coefficient, Reynolds number and turbulence intensity
        zone = self.zone
        settings = self.config.simulation
        reynolds = reynolds_number(
            props.density, state.velocity, zone.hydraulic_diameter, props.viscosity
        )
        intensity = turbulence_intensity(reynolds, settings.obstacle_factor)
        base_h = convective_coefficient(
            reynolds, props.prandtl, props.conductivity, zone.hydraulic_diameter
        )
        h = heat_transfer_coefficient(
            base_h,
            position_factor(
                index.layer,
                self.config.geometry.num_layers,
                settings.position_alpha,
                settings.position_beta,
            ),
            tcpi,
            state.development_factor,
        )
        return h, reynolds, intensity

    def heat_exchange(
        self, index: ZoneIndex, state: ZoneState, boundary: BoundaryConfig, tcpi: float = 1.0
    ) -> HeatExchange:
        """
        Capacities and conductances of the air and product of one zone.

        Their ratios are the thermal time constants the explicit update must
        resolve; they stay finite when there is no flow through the zone.

        Args:
            index: Position of the zone
            state: Current zone state
            boundary: Boundary conditions for the envelope
            tcpi: Current TCPI scaling the heat transfer coefficient

        Returns:
            HeatExchange for the zone
        """
        zone = self.zone
        props = air_properties(state.air_temperature, state.pressure)
        h, _, _ = self._coefficient(index, state, props, tcpi)
        product_conductance = h * zone.product_surface
        air_conductance = (
            product_conductance
            + max(state.mass_flow, 0.0) * props.specific_heat
            + boundary.wall_u_value * self.envelope_area(index)
        )
        return HeatExchange(
            air_capacity=max(props.density * zone.air_volume, EPSILON) * props.specific_heat,
            air_conductance=air_conductance,
            product_capacity=zone.heat_capacity,
            product_conductance=product_conductance,
        )

    def integrate(
        self,
        index: ZoneIndex,
        state: ZoneState,
        inlet: InletConditions,
        dt: float,
        boundary: BoundaryConfig,
        tcpi: float = 1.0,
    ) -> ZoneStep:
        """
        Advance one zone by one time step.

        Args:
            index: Position of the zone
            state: State at the start of the step
            inlet: Air entering the zone (boundary or upstream outlet)
            dt: Time step (s)
            boundary: Boundary conditions for wall and outlet
            tcpi: Current TCPI scaling the heat transfer coefficient

        Returns:
            ZoneStep with the new state and the exchange rates used

        Raises:
            NumericalDomainError: If dt is invalid or the new state is not finite
        """
        if not (math.isfinite(dt) and dt > 0):
            raise NumericalDomainError(f"Invalid time step {dt}", "time_step", dt, index)

        config = self.config
        commodity = config.commodity
        settings = config.simulation
        zone = self.zone

        props = air_properties(state.air_temperature, state.pressure)
        h, reynolds, intensity = self._coefficient(index, state, props, tcpi)
        friction = friction_factor(reynolds, zone.hydraulic_diameter)
        h = fluctuating_coefficient(h, intensity, settings.turbulence_fluctuation, self.rng)

        # Exchange rates at the start of the step
        q_resp = respiration_heat(state.product_temperature, zone.product_mass, commodity)
        q_conv = convective_heat(h, zone.product_surface, state.product_temperature, state.air_temperature)
        deficit = vapor_pressure_deficit(
            state.product_temperature, commodity.water_activity, state.air_humidity, state.pressure
        )
        m_evap = evaporation_rate(
            mass_transfer_coefficient(h, props.density, props.specific_heat),
            zone.product_surface,
            commodity.wetness_factor,
            deficit,
            state.product_temperature,
        )
        q_evap = evaporative_heat(m_evap, state.product_temperature)
        q_wall = wall_heat_gain(
            boundary.wall_u_value, self.envelope_area(index), boundary.wall_temperature, state.air_temperature
        )

        mass_flow = max(state.mass_flow, 0.0)
        air_mass = max(props.density * zone.air_volume, EPSILON)
        q_adv = mass_flow * props.specific_heat * (inlet.temperature - state.air_temperature)

        # Forward Euler
        product_temp = state.product_temperature + dt * (q_resp - q_conv - q_evap) / zone.heat_capacity
        moisture = state.product_moisture - dt * m_evap / zone.product_mass
        air_temp = state.air_temperature + dt * (q_adv + q_conv + q_wall) / (air_mass * props.specific_heat)
        humidity = state.air_humidity + dt * (mass_flow * (inlet.humidity - state.air_humidity) + m_evap) / air_mass

        drop = self._zone_pressure_drop(index, inlet.pressure, boundary)
        acceleration = drop / (props.density * zone.length) - friction * state.velocity * abs(
            state.velocity
        ) / (2.0 * zone.hydraulic_diameter)
        speed = state.velocity + dt * acceleration
        pressure = inlet.pressure - drop

        for quantity, value in (
            ("product_temperature", product_temp),
            ("product_moisture", moisture),
            ("air_temperature", air_temp),
            ("air_humidity", humidity),
            ("velocity", speed),
            ("pressure", pressure),
        ):
            if not math.isfinite(value):
                raise NumericalDomainError(f"{quantity} became {value}", quantity, value, index)

        low, high = settings.min_temperature, settings.max_temperature
        product_temp = min(max(product_temp, low), high)
        air_temp = min(max(air_temp, low), high)
        moisture = min(max(moisture, 0.0), 1.0)
        humidity = min(max(humidity, 0.0), saturation_humidity_ratio(air_temp, pressure))

        density = air_density(air_temp, pressure)
        viscosity = dynamic_viscosity(air_temp)
        new_reynolds = reynolds_number(density, speed, zone.hydraulic_diameter, viscosity)

        new_state = ZoneState(
            product_temperature=product_temp,
            product_moisture=moisture,
            air_temperature=air_temp,
            air_humidity=humidity,
            velocity=speed,
            pressure=pressure,
            density=density,
            mass_flow=density * speed * zone.flow_area,
            energy=density * zone.air_volume * specific_heat(air_temp) * air_temp,
            development_factor=development_factor(
                (index.zone + 1) * zone.length, new_reynolds, zone.hydraulic_diameter
            ),
        )
        bad = new_state.non_finite_fields()
        if bad:
            raise NumericalDomainError(f"Non-finite {', '.join(bad)}", bad[0], getattr(new_state, bad[0]), index)

        return ZoneStep(
            state=new_state,
            fluxes=ZoneFluxes(
                respiration_heat=q_resp,
                convective_heat=q_conv,
                evaporative_heat=q_evap,
                wall_heat=q_wall,
                evaporation_rate=m_evap,
                advected_heat=q_adv,
                reynolds_number=reynolds,
                turbulence_intensity=intensity,
                heat_transfer_coefficient=h,
                friction_factor=friction,
            ),
        )
