"""
Airflow through a packed pallet zone.

The zone is treated as an obstructed duct: the produce reduces the open
cross-section and adds wetted surface, which together set the hydraulic
diameter. Reynolds number, turbulence intensity, friction factor and the
convective heat transfer coefficient follow from the usual duct-flow
correlations, selected by regime.

Usage:
    from reefersim.physics.flow import flow_area, hydraulic_diameter, reynolds_number

    area = flow_area(2.6, 2.4, 0.5)
    diameter = hydraulic_diameter(0.75, 2.6, 2.4, 0.5)
    re = reynolds_number(1.2, 2.0, diameter, 1.8e-5)
"""

import math
from typing import Optional

import numpy as np

from reefersim.core.constants import (
    BASE_RESISTANCE,
    BLASIUS_COEFFICIENT,
    BLASIUS_EXPONENT,
    COLEBROOK_INITIAL_GUESS,
    COLEBROOK_MAX_ITERATIONS,
    COLEBROOK_TOLERANCE,
    DEFAULT_ROUGHNESS,
    DEVELOPMENT_DECAY,
    DITTUS_BOELTER_COEFFICIENT,
    DITTUS_BOELTER_PR_EXPONENT,
    DITTUS_BOELTER_RE_EXPONENT,
    EPSILON,
    LAMINAR_ENTRY_COEFFICIENT,
    LAMINAR_FRICTION_CONSTANT,
    LAMINAR_LIMIT,
    LAMINAR_NUSSELT,
    MINOR_LOSS_COEFFICIENT,
    SMOOTH_PIPE_LIMIT,
    SMOOTH_RELATIVE_ROUGHNESS,
    SPECIFIC_SURFACE_AREA,
    TURBULENCE_COEFFICIENT,
    TURBULENCE_EXPONENT,
    TURBULENT_ENTRY_COEFFICIENT,
    TURBULENT_LIMIT,
)
from reefersim.core.errors import ConfigurationError, NumericalDomainError


def _check_packing(packing_factor: float) -> None:
    if not 0.0 <= packing_factor < 1.0:
        raise ConfigurationError(
            f"Packing factor must be in [0, 1), got {packing_factor}",
            "packing_factor",
            packing_factor,
            (0.0, 1.0),
        )


def flow_area(height: float, width: float, packing_factor: float) -> float:
    """
    Open cross-section available to the air.

    Args:
        height: Zone height (m)
        width: Zone width (m)
        packing_factor: Produce volume fraction in [0, 1)

    Returns:
        Flow area (m²)

    Raises:
        ConfigurationError: If the packing factor is out of range or the area is not positive
    """
    _check_packing(packing_factor)
    area = height * width * (1.0 - packing_factor)
    if not area > 0:
        raise ConfigurationError(f"Flow area must be positive, got {area}", "flow_area", area, 0.0)
    return area


def produce_surface_area(volume: float, packing_factor: float) -> float:
    """Exposed produce surface in a zone (m²)."""
    _check_packing(packing_factor)
    return SPECIFIC_SURFACE_AREA * volume * packing_factor


def hydraulic_diameter(length: float, height: float, width: float, packing_factor: float) -> float:
    """
    Hydraulic diameter 4A/P of a packed zone.

    The wetted perimeter is the duct perimeter plus the produce surface per
    unit length, so packing both narrows and roughens the passage.

    Args:
        length: Zone length along the airflow (m)
        height: Zone height (m)
        width: Zone width (m)
        packing_factor: Produce volume fraction in [0, 1)

    Returns:
        Hydraulic diameter (m)
    """
    area = flow_area(height, width, packing_factor)
    produce_perimeter = produce_surface_area(length * height * width, packing_factor) / length
    perimeter = 2.0 * (height + width) + produce_perimeter
    return 4.0 * area / perimeter


def velocity(mass_flow: float, density: float, area: float) -> float:
    """Bulk velocity from mass flow (m/s)."""
    return mass_flow / (max(density, EPSILON) * max(area, EPSILON))


def reynolds_number(density: float, velocity: float, diameter: float, viscosity: float) -> float:
    """
    Reynolds number rho |v| D / mu.

    Args:
        density: Air density (kg/m³)
        velocity: Bulk velocity (m/s)
        diameter: Hydraulic diameter (m)
        viscosity: Dynamic viscosity (Pa·s)

    Returns:
        Reynolds number (dimensionless)
    """
    if not viscosity > 0:
        raise NumericalDomainError(f"Viscosity must be positive, got {viscosity}", "viscosity", viscosity)
    return density * abs(velocity) * diameter / viscosity


def turbulence_intensity(reynolds: float, obstacle_factor: float = 1.0) -> float:
    """
    Turbulence intensity from the empirical duct correlation I = 0.16 Re^(-1/8).

    Args:
        reynolds: Reynolds number
        obstacle_factor: Enhancement for produce-induced mixing

    Returns:
        Turbulence intensity (dimensionless), 0 for stagnant flow
    """
    if reynolds <= 0:
        return 0.0
    return TURBULENCE_COEFFICIENT * reynolds**TURBULENCE_EXPONENT * obstacle_factor


def _blasius(reynolds: float) -> float:
    return BLASIUS_COEFFICIENT * reynolds**BLASIUS_EXPONENT


def friction_factor(
    reynolds: float, diameter: float, roughness: float = DEFAULT_ROUGHNESS
) -> float:
    """
    Darcy friction factor.

    Laminar flow uses 64/Re. Turbulent flow uses Blasius for smooth passages
    below Re = 1e5, otherwise Colebrook-White solved by fixed-point
    iteration, falling back to Blasius if it does not converge.

    Args:
        reynolds: Reynolds number
        diameter: Hydraulic diameter (m)
        roughness: Absolute surface roughness (m)

    Returns:
        Friction factor (dimensionless)
    """
    reynolds = max(reynolds, EPSILON)
    if reynolds < LAMINAR_LIMIT:
        return LAMINAR_FRICTION_CONSTANT / reynolds

    relative_roughness = roughness / max(diameter, EPSILON)
    if reynolds < SMOOTH_PIPE_LIMIT and relative_roughness < SMOOTH_RELATIVE_ROUGHNESS:
        return _blasius(reynolds)

    f = COLEBROOK_INITIAL_GUESS
    for _ in range(COLEBROOK_MAX_ITERATIONS):
        rhs = -2.0 * math.log10(relative_roughness / 3.7 + 2.51 / (reynolds * math.sqrt(f)))
        f_new = 1.0 / rhs**2
        if abs(f_new - f) < COLEBROOK_TOLERANCE:
            return f_new
        f = f_new
    return _blasius(reynolds)


def nusselt_number(reynolds: float, prandtl: float) -> float:
    """
    Nusselt number by flow regime.

    Re < 2300 gives the laminar constant, 2300 <= Re < 10000 the Gnielinski
    correlation and Re >= 10000 Dittus-Boelter.
    """
    if reynolds < LAMINAR_LIMIT:
        return LAMINAR_NUSSELT
    if reynolds < TURBULENT_LIMIT:
        f = (0.790 * math.log(reynolds) - 1.64) ** -2
        numerator = (f / 8.0) * (reynolds - 1000.0) * prandtl
        denominator = 1.0 + 12.7 * math.sqrt(f / 8.0) * (prandtl ** (2.0 / 3.0) - 1.0)
        return max(numerator / denominator, LAMINAR_NUSSELT)
    return (
        DITTUS_BOELTER_COEFFICIENT
        * reynolds**DITTUS_BOELTER_RE_EXPONENT
        * prandtl**DITTUS_BOELTER_PR_EXPONENT
    )


def convective_coefficient(
    reynolds: float, prandtl: float, conductivity: float, diameter: float
) -> float:
    """Convective heat transfer coefficient h = Nu k / D (W/(m²·K))."""
    return nusselt_number(reynolds, prandtl) * conductivity / max(diameter, EPSILON)


def resistance_factor(packing_factor: float) -> float:
    """Flow resistance factor, growing with packing."""
    _check_packing(packing_factor)
    return BASE_RESISTANCE * (1.0 + packing_factor)


def pressure_drop(density: float, velocity: float, packing_factor: float) -> float:
    """Pressure drop across a packed zone (Pa)."""
    return resistance_factor(packing_factor) * 0.5 * density * velocity**2


def entry_length(reynolds: float, diameter: float) -> float:
    """Hydrodynamic entry length (m), laminar 0.05 Re D and turbulent 10 D."""
    if reynolds < LAMINAR_LIMIT:
        return max(LAMINAR_ENTRY_COEFFICIENT * reynolds * diameter, EPSILON)
    return TURBULENT_ENTRY_COEFFICIENT * diameter


def development_factor(distance: float, reynolds: float, diameter: float) -> float:
    """
    Flow development, approaching 1 exponentially with distance from the inlet.

    Args:
        distance: Distance from the inlet (m)
        reynolds: Reynolds number
        diameter: Hydraulic diameter (m)

    Returns:
        Development factor in [0, 1]
    """
    length = entry_length(reynolds, diameter)
    return min(1.0, max(0.0, 1.0 - math.exp(-DEVELOPMENT_DECAY * distance / length)))


def initial_velocity(
    pressure_difference: float, density: float, length: float, diameter: float
) -> float:
    """
    Starting velocity from a loss-coefficient estimate.

    Uses v = sqrt(2 |dp| / (rho K)) with K = L/D plus entry and exit losses.
    """
    loss = length / max(diameter, EPSILON) + MINOR_LOSS_COEFFICIENT
    return math.sqrt(2.0 * abs(pressure_difference) / (max(density, EPSILON) * loss))


def fluctuating_coefficient(
    coefficient: float,
    intensity: float,
    amplitude: float,
    rng: Optional[np.random.Generator] = None,
) -> float:
    """
    Heat transfer coefficient with a random turbulent fluctuation.

    Args:
        coefficient: Mean heat transfer coefficient (W/(m²·K))
        intensity: Turbulence intensity
        amplitude: Scale of the fluctuation, 0 disables it
        rng: Seeded numpy generator; no fluctuation when None

    Returns:
        h * (1 + amplitude * I * N(0, 1)), never negative
    """
    if rng is None or amplitude <= 0:
        return coefficient
    return coefficient * max(0.0, 1.0 + amplitude * intensity * rng.standard_normal())
