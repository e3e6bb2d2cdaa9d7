"""
Heat and mass exchange between produce and air.

Sign convention: every heat rate is positive when heat flows from the
product to the air (or from the environment into the air for the wall
gain). The product energy balance is therefore

    m cp dTp/dt = Q_resp - Q_conv - Q_evap

Usage:
    from reefersim.physics.heat_transfer import respiration_heat, convective_heat

    q_resp = respiration_heat(8.0, 500.0, commodity)
    q_conv = convective_heat(12.0, 40.0, 8.0, 5.0)
"""

import math

from reefersim.core.config import CommodityConfig
from reefersim.core.constants import (
    ENTRY_ENHANCEMENT,
    EPSILON,
    GAS_CONSTANT_VAPOR,
    KELVIN_OFFSET,
    POSITION_ALPHA,
    POSITION_BETA,
    SECONDS_PER_HOUR,
)
from reefersim.physics.properties import latent_heat, saturation_pressure, vapor_pressure


def respiration_rate(
    temp: float, reference_rate: float, coefficient: float, reference_temp: float
) -> float:
    """
    Respiration rate with exponential temperature dependence.

    Args:
        temp: Product temperature (°C)
        reference_rate: Rate at the reference temperature (mg CO2/(kg·h))
        coefficient: Temperature coefficient k (1/K)
        reference_temp: Reference temperature (°C)

    Returns:
        Respiration rate (mg CO2/(kg·h))
    """
    return reference_rate * math.exp(coefficient * (temp - reference_temp))


def respiration_heat(temp: float, mass: float, commodity: CommodityConfig) -> float:
    """
    Heat released by respiration (W).

    The hourly rate is converted to a per-second rate, so a reference rate
    of 3600 mg/(kg·h) with 1 J/mg releases 1 W per kg at the reference
    temperature.
    """
    rate = respiration_rate(
        temp,
        commodity.respiration_rate,
        commodity.respiration_coefficient,
        commodity.reference_temperature,
    )
    return rate * mass * commodity.respiration_heat / SECONDS_PER_HOUR


def position_factor(
    layer: int, num_layers: int, alpha: float = POSITION_ALPHA, beta: float = POSITION_BETA
) -> float:
    """
    Vertical non-uniformity of heat transfer.

    Air short-circuits over the top of the load, so layers near the floor see
    less effective exchange: 1 - alpha * exp(-beta * h) with h the relative
    height of the layer centre.
    """
    relative_height = (layer + 0.5) / max(num_layers, 1)
    return 1.0 - alpha * math.exp(-beta * relative_height)


def heat_transfer_coefficient(
    base_coefficient: float, position: float, tcpi: float, development: float
) -> float:
    """
    Effective product-air heat transfer coefficient (W/(m²·K)).

    Args:
        base_coefficient: Coefficient from the Nusselt correlation
        position: Vertical position factor (0, 1]
        tcpi: Turbulent cooling performance index (0, 1]
        development: Flow development factor [0, 1]; undeveloped flow
            near the inlet enhances exchange
    """
    entry = 1.0 + ENTRY_ENHANCEMENT * (1.0 - development)
    return base_coefficient * position * tcpi * entry


def convective_heat(coefficient: float, area: float, product_temp: float, air_temp: float) -> float:
    """Convective heat from product to air (W)."""
    return coefficient * area * (product_temp - air_temp)


def mass_transfer_coefficient(coefficient: float, density: float, specific_heat: float) -> float:
    """Mass transfer coefficient from the Lewis analogy (m/s)."""
    return coefficient / (max(density, EPSILON) * max(specific_heat, EPSILON))


def vapor_pressure_deficit(
    product_temp: float, water_activity: float, humidity_ratio: float, pressure: float
) -> float:
    """
    Vapor pressure deficit between the product surface and the air (Pa).

    Negative values mean the air is wetter than the surface.
    """
    return saturation_pressure(product_temp) * water_activity - vapor_pressure(
        humidity_ratio, pressure
    )


def evaporation_rate(
    mass_coefficient: float,
    area: float,
    wetness_factor: float,
    deficit: float,
    product_temp: float,
) -> float:
    """
    Water evaporated from the product surface (kg/s).

    Args:
        mass_coefficient: Mass transfer coefficient (m/s)
        area: Product surface area (m²)
        wetness_factor: Fraction of the surface behaving as free water
        deficit: Vapor pressure deficit (Pa)
        product_temp: Product temperature (°C)
    """
    return (
        mass_coefficient
        * area
        * wetness_factor
        * deficit
        / (GAS_CONSTANT_VAPOR * (product_temp + KELVIN_OFFSET))
    )


def evaporative_heat(rate: float, product_temp: float) -> float:
    """Latent heat carried away by evaporation (W)."""
    return rate * latent_heat(product_temp)


def wall_heat_gain(u_value: float, area: float, wall_temp: float, air_temp: float) -> float:
    """Heat leaking through the container envelope into the air (W)."""
    return u_value * area * (wall_temp - air_temp)
