"""Physics models for reefer container simulation."""

from reefersim.physics.properties import (
    AirProperties,
    air_density,
    air_properties,
    dew_point,
    dew_point_from_humidity,
    dynamic_viscosity,
    latent_heat,
    prandtl_number,
    relative_humidity,
    saturation_humidity_ratio,
    saturation_pressure,
    specific_heat,
    thermal_conductivity,
    thermal_diffusivity,
    vapor_pressure,
)
from reefersim.physics.flow import (
    convective_coefficient,
    development_factor,
    entry_length,
    flow_area,
    fluctuating_coefficient,
    friction_factor,
    hydraulic_diameter,
    initial_velocity,
    nusselt_number,
    pressure_drop,
    produce_surface_area,
    resistance_factor,
    reynolds_number,
    turbulence_intensity,
    velocity,
)
from reefersim.physics.heat_transfer import (
    convective_heat,
    evaporation_rate,
    evaporative_heat,
    heat_transfer_coefficient,
    mass_transfer_coefficient,
    position_factor,
    respiration_heat,
    respiration_rate,
    vapor_pressure_deficit,
    wall_heat_gain,
)
from reefersim.physics.performance import (
    coefficient_of_performance,
    cooling_effectiveness,
    cooling_efficiency,
    cooling_rate_index,
    uniformity_index,
)

__all__ = [
    # Properties
    "AirProperties",
    "air_density",
    "air_properties",
    "dew_point",
    "dew_point_from_humidity",
    "dynamic_viscosity",
    "latent_heat",
    "prandtl_number",
    "relative_humidity",
    "saturation_humidity_ratio",
    "saturation_pressure",
    "specific_heat",
    "thermal_conductivity",
    "thermal_diffusivity",
    "vapor_pressure",
    # Flow
    "convective_coefficient",
    "development_factor",
    "entry_length",
    "flow_area",
    "fluctuating_coefficient",
    "friction_factor",
    "hydraulic_diameter",
    "initial_velocity",
    "nusselt_number",
    "pressure_drop",
    "produce_surface_area",
    "resistance_factor",
    "reynolds_number",
    "turbulence_intensity",
    "velocity",
    # Heat and mass transfer
    "convective_heat",
    "evaporation_rate",
    "evaporative_heat",
    "heat_transfer_coefficient",
    "mass_transfer_coefficient",
    "position_factor",
    "respiration_heat",
    "respiration_rate",
    "vapor_pressure_deficit",
    "wall_heat_gain",
    # Performance
    "coefficient_of_performance",
    "cooling_effectiveness",
    "cooling_efficiency",
    "cooling_rate_index",
    "uniformity_index",
]
