"""
Thermophysical properties of moist air.

Pure functions of temperature (°C) and, where relevant, pressure (Pa). Every
function returns a finite value or raises NumericalDomainError naming the
quantity that left its domain.

Usage:
    from reefersim.physics.properties import air_density, saturation_humidity_ratio

    rho = air_density(5.0)  # ≈ 1.27 kg/m³
    w_sat = saturation_humidity_ratio(5.0, 101325.0)  # ≈ 0.0054 kg/kg
"""

import math
from typing import NamedTuple

from reefersim.core.constants import (
    ABSOLUTE_ZERO,
    CONDUCTIVITY_INTERCEPT,
    CONDUCTIVITY_SLOPE,
    GAS_CONSTANT_AIR,
    KELVIN_OFFSET,
    LATENT_HEAT_REFERENCE,
    LATENT_HEAT_SLOPE,
    MAGNUS_A,
    MAGNUS_B,
    MAGNUS_COEFFICIENT,
    MOLECULAR_WEIGHT_RATIO,
    SPECIFIC_HEAT_INTERCEPT,
    SPECIFIC_HEAT_SLOPE,
    STANDARD_PRESSURE,
    SUTHERLAND_CONSTANT,
    SUTHERLAND_REFERENCE_TEMP,
    SUTHERLAND_REFERENCE_VISCOSITY,
)
from reefersim.core.errors import NumericalDomainError


class AirProperties(NamedTuple):
    """Bundle of air properties at one temperature and pressure."""

    density: float  # kg/m³
    viscosity: float  # Pa·s
    conductivity: float  # W/(m·K)
    specific_heat: float  # J/(kg·K)
    diffusivity: float  # m²/s
    prandtl: float  # -


def _check_temperature(temp: float) -> None:
    if not math.isfinite(temp):
        raise NumericalDomainError(f"Temperature is not finite: {temp}", "temperature", temp)
    if temp < ABSOLUTE_ZERO:
        raise NumericalDomainError(
            f"Temperature {temp} °C is below absolute zero", "temperature", temp
        )


def _positive(value: float, quantity: str) -> float:
    if not (math.isfinite(value) and value > 0):
        raise NumericalDomainError(f"{quantity} evaluated to {value}", quantity, value)
    return value


def air_density(temp: float, pressure: float = STANDARD_PRESSURE) -> float:
    """
    Calculate dry air density from the ideal gas law.

    Args:
        temp: Air temperature (°C)
        pressure: Absolute pressure (Pa)

    Returns:
        Density (kg/m³)

    Raises:
        NumericalDomainError: If the temperature is below absolute zero
            or the pressure is not positive

    Example:
        >>> round(air_density(20.0), 3)
        1.204
    """
    _check_temperature(temp)
    _positive(pressure, "pressure")
    kelvin = temp + KELVIN_OFFSET
    if kelvin <= 0:
        raise NumericalDomainError(f"Temperature {temp} °C is at absolute zero", "temperature", temp)
    return _positive(pressure / (GAS_CONSTANT_AIR * kelvin), "density")


def dynamic_viscosity(temp: float) -> float:
    """
    Calculate dynamic viscosity of air with Sutherland's law.

    Args:
        temp: Air temperature (°C)

    Returns:
        Dynamic viscosity (Pa·s)
    """
    _check_temperature(temp)
    kelvin = temp + KELVIN_OFFSET
    ratio = (kelvin / SUTHERLAND_REFERENCE_TEMP) ** 1.5
    viscosity = (
        SUTHERLAND_REFERENCE_VISCOSITY
        * ratio
        * (SUTHERLAND_REFERENCE_TEMP + SUTHERLAND_CONSTANT)
        / (kelvin + SUTHERLAND_CONSTANT)
    )
    return _positive(viscosity, "viscosity")


def thermal_conductivity(temp: float) -> float:
    """Thermal conductivity of air (W/(m·K)), linear fit."""
    _check_temperature(temp)
    return _positive(CONDUCTIVITY_INTERCEPT + CONDUCTIVITY_SLOPE * temp, "thermal_conductivity")


def specific_heat(temp: float) -> float:
    """Specific heat of air at constant pressure (J/(kg·K)), linear fit."""
    _check_temperature(temp)
    return _positive(SPECIFIC_HEAT_INTERCEPT + SPECIFIC_HEAT_SLOPE * temp, "specific_heat")


def thermal_diffusivity(temp: float, pressure: float = STANDARD_PRESSURE) -> float:
    """Thermal diffusivity alpha = k / (rho * cp) (m²/s)."""
    return _positive(
        thermal_conductivity(temp) / (air_density(temp, pressure) * specific_heat(temp)),
        "thermal_diffusivity",
    )


def prandtl_number(temp: float) -> float:
    """Prandtl number mu * cp / k (dimensionless)."""
    return _positive(
        dynamic_viscosity(temp) * specific_heat(temp) / thermal_conductivity(temp), "prandtl"
    )


def air_properties(temp: float, pressure: float = STANDARD_PRESSURE) -> AirProperties:
    """Evaluate all air properties at once."""
    density = air_density(temp, pressure)
    viscosity = dynamic_viscosity(temp)
    conductivity = thermal_conductivity(temp)
    cp = specific_heat(temp)
    return AirProperties(
        density=density,
        viscosity=viscosity,
        conductivity=conductivity,
        specific_heat=cp,
        diffusivity=conductivity / (density * cp),
        prandtl=viscosity * cp / conductivity,
    )


# =============================================================================
# Psychrometrics
# =============================================================================


def saturation_pressure(temp: float) -> float:
    """
    Saturation vapor pressure over water (Magnus form).

    Args:
        temp: Temperature (°C)

    Returns:
        Saturation pressure (Pa)

    Example:
        >>> round(saturation_pressure(20.0))
        2338
    """
    _check_temperature(temp)
    if temp + MAGNUS_B <= 0:
        raise NumericalDomainError(
            f"Temperature {temp} °C outside the Magnus correlation range", "temperature", temp
        )
    return _positive(
        MAGNUS_COEFFICIENT * math.exp(MAGNUS_A * temp / (temp + MAGNUS_B)), "saturation_pressure"
    )


def saturation_humidity_ratio(temp: float, pressure: float = STANDARD_PRESSURE) -> float:
    """
    Humidity ratio of saturated air.

    Args:
        temp: Temperature (°C)
        pressure: Total pressure (Pa)

    Returns:
        Saturation humidity ratio (kg water/kg dry air)

    Raises:
        NumericalDomainError: If the saturation pressure reaches the total pressure
    """
    p_sat = saturation_pressure(temp)
    if p_sat >= pressure:
        raise NumericalDomainError(
            f"Saturation pressure {p_sat:.1f} Pa at {temp} °C exceeds total pressure {pressure} Pa",
            "saturation_pressure",
            p_sat,
        )
    return MOLECULAR_WEIGHT_RATIO * p_sat / (pressure - p_sat)


def vapor_pressure(humidity_ratio: float, pressure: float = STANDARD_PRESSURE) -> float:
    """Partial pressure of water vapor for a given humidity ratio (Pa)."""
    if humidity_ratio < 0 or not math.isfinite(humidity_ratio):
        raise NumericalDomainError(
            f"Humidity ratio {humidity_ratio} is invalid", "humidity_ratio", humidity_ratio
        )
    return humidity_ratio * pressure / (MOLECULAR_WEIGHT_RATIO + humidity_ratio)


def relative_humidity(
    temp: float, humidity_ratio: float, pressure: float = STANDARD_PRESSURE
) -> float:
    """Relative humidity (0-1, may exceed 1 for supersaturated input)."""
    return vapor_pressure(humidity_ratio, pressure) / saturation_pressure(temp)


def dew_point(temp: float, rh: float) -> float:
    """
    Dew point temperature from the inverted Magnus relation.

    Args:
        temp: Dry bulb temperature (°C)
        rh: Relative humidity, clamped to (0, 1]

    Returns:
        Dew point (°C), never above ``temp``
    """
    _check_temperature(temp)
    rh = min(max(rh, 1e-6), 1.0)
    gamma = math.log(rh) + MAGNUS_A * temp / (MAGNUS_B + temp)
    return MAGNUS_B * gamma / (MAGNUS_A - gamma)


def dew_point_from_humidity(
    temp: float, humidity_ratio: float, pressure: float = STANDARD_PRESSURE
) -> float:
    """Dew point of air at ``temp`` holding ``humidity_ratio`` (°C)."""
    return dew_point(temp, relative_humidity(temp, humidity_ratio, pressure))


def latent_heat(temp: float) -> float:
    """Latent heat of vaporization of water (J/kg), linear in temperature."""
    _check_temperature(temp)
    return _positive(LATENT_HEAT_REFERENCE - LATENT_HEAT_SLOPE * temp, "latent_heat")
