"""Core configuration, constants and errors for reefer simulation."""

from reefersim.core.config import (
    # Config dataclasses
    Vector3D,
    ToleranceConfig,
    GeometryConfig,
    BoundaryConfig,
    CommodityConfig,
    PackagingConfig,
    CoolingUnitConfig,
    PowerSupplyConfig,
    SimulationConfig,
    ContainerConfig,
    # Config utilities
    load_config,
    save_config,
    config_to_dict,
    create_container_config,
    get_default_config,
)
from reefersim.core.constants import (
    ABSOLUTE_ZERO,
    EPSILON,
    GAS_CONSTANT_AIR,
    GAS_CONSTANT_VAPOR,
    KELVIN_OFFSET,
    LAMINAR_LIMIT,
    STANDARD_PRESSURE,
    TURBULENT_LIMIT,
)
from reefersim.core.errors import ConfigurationError, NumericalDomainError

__all__ = [
    # Config dataclasses
    "Vector3D",
    "ToleranceConfig",
    "GeometryConfig",
    "BoundaryConfig",
    "CommodityConfig",
    "PackagingConfig",
    "CoolingUnitConfig",
    "PowerSupplyConfig",
    "SimulationConfig",
    "ContainerConfig",
    # Config utilities
    "load_config",
    "save_config",
    "config_to_dict",
    "create_container_config",
    "get_default_config",
    # Constants
    "ABSOLUTE_ZERO",
    "EPSILON",
    "GAS_CONSTANT_AIR",
    "GAS_CONSTANT_VAPOR",
    "KELVIN_OFFSET",
    "LAMINAR_LIMIT",
    "STANDARD_PRESSURE",
    "TURBULENT_LIMIT",
    # Errors
    "ConfigurationError",
    "NumericalDomainError",
]
