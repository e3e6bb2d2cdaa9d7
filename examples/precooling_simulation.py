#!/usr/bin/env python
"""
Example simulation of precooling a container of strawberries.

A 40 ft reefer loaded with 4 zones along the airflow, 2 layers and 2 pallet
columns is cooled from 20 °C by its own cooling unit. Progress is printed
once per simulated minute.
"""

import logging

from reefersim.container import ReeferContainer
from reefersim.core.config import get_default_config

logging.basicConfig(level=logging.INFO)


def main():
    config = get_default_config()
    container = ReeferContainer.from_config(config)

    print(f"Precooling {config.commodity.name} in {config.name}")
    print(container.cooling_unit)

    for minute in range(1, 11):
        container.run(duration=60.0)
        snapshot = container.latest
        print(
            f"{minute:3d} min: product {snapshot.average_temperature:6.2f}°C, "
            f"air {snapshot.average_air_temperature:6.2f}°C, "
            f"supply {snapshot.supply_temperature:6.2f}°C, "
            f"TCPI {snapshot.tcpi:.3f}, "
            f"cooling {snapshot.cooling_power:6.0f} W"
        )

    print()
    print(container)
    print(f"Energy removed: {container.energy_removed / 1000.0:.1f} kJ")
    print(f"Uniformity index: {container.latest.uniformity_index:.4f}")


if __name__ == "__main__":
    main()
