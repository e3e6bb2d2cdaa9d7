"""
Exception types raised by the simulation.

Both error types subclass ValueError so callers that only care about invalid
input can catch that, while the attributes give enough context to locate the
fault (which quantity, what value, which bound, which zone).
"""

from typing import Any, Optional


class ConfigurationError(ValueError):
    """Invalid configuration detected at validation time."""

    def __init__(
        self,
        message: str,
        quantity: Optional[str] = None,
        value: Any = None,
        bound: Any = None,
    ) -> None:
        super().__init__(message)
        self.quantity = quantity
        self.value = value
        self.bound = bound


class NumericalDomainError(ValueError):
    """A computation left its valid numerical domain."""

    def __init__(
        self,
        message: str,
        quantity: Optional[str] = None,
        value: Any = None,
        zone: Any = None,
    ) -> None:
        if zone is not None:
            message = f"{message} (zone {tuple(zone)})"
        super().__init__(message)
        self.quantity = quantity
        self.value = value
        self.zone = zone
