"""Scalar performance indices computed from zone temperatures."""

from typing import Sequence

import numpy as np

from reefersim.core.constants import EPSILON


def uniformity_index(values: Sequence[float]) -> float:
    """
    Coefficient of variation std/|mean|; 0 for an empty set or zero mean.

    Temperatures should be absolute (K): in °C the index diverges as the
    mean approaches 0 °C, a normal precooling target.
    """
    if len(values) == 0:
        return 0.0
    data = np.asarray(values, dtype=float)
    mean = float(np.mean(data))
    if mean == 0.0:
        return 0.0
    return float(np.std(data)) / abs(mean)


def cooling_effectiveness(wall_temp: float, average_temp: float, inlet_temp: float) -> float:
    """Fraction of the available temperature difference achieved."""
    available = wall_temp - inlet_temp
    if abs(available) < EPSILON:
        return 0.0
    return (wall_temp - average_temp) / available


def cooling_rate_index(
    product_temp: float, air_temp: float, initial_product_temp: float, supply_temp: float
) -> float:
    """Remaining driving force relative to the initial one (1 at start, 0 when cooled)."""
    initial = initial_product_temp - supply_temp
    if abs(initial) < EPSILON:
        return 0.0
    return (product_temp - air_temp) / initial


def cooling_efficiency(product_temp: float, air_temp: float, coil_temp: float) -> float:
    """
    Actual over maximum possible cooling of a zone, clipped to [0, 1].

    The product is cooled by h A (Tp - Ta); the most it could get is with air
    at the coil temperature, h A (Tp - Tcoil). The ratio does not depend on h.

    Args:
        product_temp: Product temperature (°C)
        air_temp: Local air temperature (°C)
        coil_temp: Coldest air the cooling unit can supply (°C)

    Returns:
        Efficiency in [0, 1]; 1.0 when the product is already at coil temperature
    """
    possible = product_temp - coil_temp
    if possible <= EPSILON:
        return 1.0
    return min(1.0, max(0.0, (product_temp - air_temp) / possible))


def coefficient_of_performance(sensible: float, latent: float, power: float) -> float:
    """Cooling delivered per unit of electrical power, 0 when no power is drawn."""
    if power <= EPSILON:
        return 0.0
    return (sensible + latent) / power
