"""Equipment base classes."""

from reefersim.equipment.base import Equipment, EquipmentType, PlantEquipment

__all__ = ["Equipment", "EquipmentType", "PlantEquipment"]
