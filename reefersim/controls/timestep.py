"""
Adaptive time step selection.

The explicit scheme is kept stable by taking the smallest of its time
scales: advection across one zone (CFL), diffusion across one zone (Fourier),
the residence time of the zone air (mass flow) and, when the heat exchange of
the zone is known, the thermal time constants of its air and product. Each is
divided by a safety factor from SimulationConfig. The step is recomputed
every step and shared by all zones.
"""

import logging
import math
from typing import Callable, NamedTuple, Optional

from reefersim.core.config import GeometryConfig, SimulationConfig
from reefersim.core.errors import NumericalDomainError
from reefersim.integrator import HeatExchange
from reefersim.physics.flow import flow_area
from reefersim.physics.properties import thermal_diffusivity
from reefersim.zones import ZoneGrid, ZoneIndex, ZoneState

logger = logging.getLogger(__name__)

ExchangeModel = Callable[[ZoneIndex, ZoneState], HeatExchange]


class TimeScales(NamedTuple):
    """Candidate time steps of one zone (s)."""

    convective: float
    diffusive: float
    mass_flow: float
    air_exchange: float = math.inf
    product_exchange: float = math.inf

    @property
    def limiting(self) -> float:
        return min(self)


def time_step_candidates(
    length: float,
    velocity: float,
    diffusivity: float,
    density: float,
    area: float,
    mass_flow: float,
    exchange: Optional[HeatExchange] = None,
    settings: Optional[SimulationConfig] = None,
) -> TimeScales:
    """
    Compute the stability time scales of a zone.

    Args:
        length: Zone length along the airflow (m)
        velocity: Bulk velocity (m/s)
        diffusivity: Air thermal diffusivity (m²/s)
        density: Air density (kg/m³)
        area: Flow area (m²)
        mass_flow: Mass flow rate (kg/s)
        exchange: Heat capacities and conductances of the zone; without it
            the thermal time constants are not limiting
        settings: Safety divisors and divisor floor; defaults to SimulationConfig()

    Returns:
        TimeScales with every candidate limit

    Example:
        >>> time_step_candidates(0.75, 2.0, 2e-5, 1.2, 3.0, 7.2).convective
        0.0375
    """
    settings = settings or SimulationConfig()
    epsilon = settings.epsilon
    air_exchange = product_exchange = math.inf
    if exchange is not None:
        air_exchange = exchange.air_capacity / (
            settings.exchange_safety * max(exchange.air_conductance, epsilon)
        )
        product_exchange = exchange.product_capacity / (
            settings.exchange_safety * max(exchange.product_conductance, epsilon)
        )
    return TimeScales(
        convective=length / (settings.convective_safety * max(abs(velocity), epsilon)),
        diffusive=length**2 / (settings.diffusive_safety * max(diffusivity, epsilon)),
        mass_flow=density * area * length / (settings.mass_flow_safety * max(abs(mass_flow), epsilon)),
        air_exchange=air_exchange,
        product_exchange=product_exchange,
    )


def zone_time_step(
    length: float,
    velocity: float,
    diffusivity: float,
    density: float,
    area: float,
    mass_flow: float,
    exchange: Optional[HeatExchange] = None,
    settings: Optional[SimulationConfig] = None,
) -> float:
    """Stable time step of a single zone (s)."""
    return time_step_candidates(
        length, velocity, diffusivity, density, area, mass_flow, exchange, settings
    ).limiting


def system_time_step(
    grid: ZoneGrid,
    geometry: GeometryConfig,
    settings: Optional[SimulationConfig] = None,
    exchange: Optional[ExchangeModel] = None,
) -> float:
    """
    Global time step, the minimum over all zones.

    Args:
        grid: Current zone states
        geometry: Container geometry
        settings: Numerical settings; ``max_time_step`` caps the result
        exchange: Callable giving the HeatExchange of a zone, usually
            ``ZoneIntegrator.heat_exchange`` bound to the current boundary.
            Required for a stable step when the flow through a zone stalls.

    Returns:
        Time step (s)

    Raises:
        NumericalDomainError: If the step is not finite or not positive
    """
    settings = settings or SimulationConfig()
    length = geometry.zone_length
    area = flow_area(geometry.zone_dimensions.y, geometry.zone_dimensions.z, geometry.packing_factor)

    dt = math.inf
    limiting_zone = None
    for index, state in grid:
        step = zone_time_step(
            length,
            state.velocity,
            thermal_diffusivity(state.air_temperature, state.pressure),
            state.density,
            area,
            state.mass_flow,
            exchange(index, state) if exchange is not None else None,
            settings,
        )
        if step < dt or math.isnan(step):
            dt = step
            limiting_zone = index
            if math.isnan(step):
                break

    if settings.max_time_step is not None:
        dt = min(dt, settings.max_time_step)

    if not (math.isfinite(dt) and dt > 0):
        raise NumericalDomainError(f"Invalid time step {dt}", "time_step", dt, limiting_zone)

    logger.debug("Time step %.4g s limited by zone %s", dt, limiting_zone)
    return dt
