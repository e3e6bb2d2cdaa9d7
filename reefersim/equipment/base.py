"""
Abstract base class for simulated equipment.

This module defines the common interface shared by the container model and
its cooling unit. It provides a consistent API for:
- Process variable access (get_process_variables, get_process_variables_metadata)
- String representation

Usage:
    from reefersim.equipment.base import Equipment

    class MyEquipment(Equipment):
        def get_process_variables(self) -> Dict[str, Any]:
            return {"name": self.name, "value": self.value}

        @classmethod
        def get_process_variables_metadata(cls) -> Dict[str, Dict[str, Any]]:
            return {"name": {"type": str, "label": "Name"}, ...}
"""

from abc import ABC, abstractmethod
from enum import Enum, auto
from typing import Any, Dict


class EquipmentType(Enum):
    """Enumeration of equipment types for categorization."""

    CONTAINER = auto()
    COOLING_UNIT = auto()
    OTHER = auto()


class Equipment(ABC):
    """
    Abstract base class for all simulated equipment.

    Attributes:
        name: Unique identifier for the equipment
        equipment_type: Type of equipment (from EquipmentType enum)

    Abstract Methods:
        get_process_variables: Return current state as dictionary
        get_process_variables_metadata: Return metadata for all variables
    """

    def __init__(self, name: str, equipment_type: EquipmentType = EquipmentType.OTHER) -> None:
        """
        Initialize base equipment.

        Args:
            name: Unique identifier for this equipment
            equipment_type: Type classification for this equipment
        """
        self.name = name
        self.equipment_type = equipment_type

    @abstractmethod
    def get_process_variables(self) -> Dict[str, Any]:
        """
        Return a dictionary of all process variables and their current values.

        Returns:
            Dictionary mapping variable names to their current values.
            Must include at least 'name' key.

        Example:
            {
                "name": "Reefer-1",
                "average_temperature": 7.4,
                "tcpi": 0.82,
            }
        """

    @classmethod
    @abstractmethod
    def get_process_variables_metadata(cls) -> Dict[str, Dict[str, Any]]:
        """
        Return metadata describing all process variables.

        Returns:
            Dictionary mapping variable names to their metadata dictionaries.
            Each metadata dict contains at least 'type' and 'label'.

        Example:
            {
                "coil_temperature": {
                    "type": float,
                    "label": "Coil Temperature",
                    "description": "Evaporator coil surface temperature",
                    "unit": "°C"
                }
            }
        """

    def __str__(self) -> str:
        """Return string representation of equipment."""
        return f"{self.__class__.__name__}({self.name})"

    def __repr__(self) -> str:
        """Return detailed string representation."""
        return f"{self.__class__.__name__}(name={self.name!r}, type={self.equipment_type.name})"


class PlantEquipment(Equipment):
    """
    Abstract base class for equipment with a rated capacity.

    Attributes:
        capacity: Rated capacity (W)
        current_load: Current output (W)
    """

    def __init__(self, name: str, equipment_type: EquipmentType) -> None:
        super().__init__(name, equipment_type)
        self.capacity: float = 0.0
        self.current_load: float = 0.0

    @property
    def load_ratio(self) -> float:
        """Current load as a fraction of capacity."""
        if self.capacity <= 0:
            return 0.0
        return self.current_load / self.capacity
