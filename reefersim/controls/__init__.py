"""Time step and cooling unit control."""

from reefersim.controls.timestep import (
    TimeScales,
    system_time_step,
    time_step_candidates,
    zone_time_step,
)
from reefersim.controls.cooling_unit import (
    CoolingUnit,
    CoolingUnitState,
    DehumidificationResult,
    PerformanceSample,
    actual_cooling_power,
    calculate_tcpi,
    dehumidification_rate,
)

__all__ = [
    "TimeScales",
    "system_time_step",
    "time_step_candidates",
    "zone_time_step",
    "CoolingUnit",
    "CoolingUnitState",
    "DehumidificationResult",
    "PerformanceSample",
    "actual_cooling_power",
    "calculate_tcpi",
    "dehumidification_rate",
]
