"""
Zone state and the zone grid.

The container volume is divided along three axes: zones along the airflow,
vertical layers and lateral pallet positions. Each zone holds an immutable
ZoneState. The grid stores states in a flat tuple addressed by an offset
computed from the index, and is replaced as a whole every time step.

Usage:
    from reefersim.zones import GridShape, ZoneGrid, ZoneIndex

    shape = GridShape(4, 2, 2)
    grid = ZoneGrid.uniform(shape, lambda index: make_state(index))
    state = grid[ZoneIndex(0, 1, 1)]
"""

from dataclasses import dataclass, replace
import math
from typing import Callable, Iterator, NamedTuple, Sequence, Tuple



class ZoneIndex(NamedTuple):
    """Position of a zone: flow-axis zone, vertical layer, lateral pallet."""

    zone: int
    layer: int
    pallet: int


class GridShape(NamedTuple):
    """Extents of the zone grid."""

    num_zones: int
    num_layers: int
    num_pallets: int

    @property
    def size(self) -> int:
        return self.num_zones * self.num_layers * self.num_pallets

    def offset(self, index: Tuple[int, int, int]) -> int:
        """
        Flat offset of a zone index.

        Raises:
            IndexError: If any component is outside the grid extents
        """
        i, j, k = index
        if not (0 <= i < self.num_zones and 0 <= j < self.num_layers and 0 <= k < self.num_pallets):
            raise IndexError(f"Zone index {tuple(index)} outside grid extents {tuple(self)}")
        return (i * self.num_layers + j) * self.num_pallets + k

    def indices(self) -> Iterator[ZoneIndex]:
        """All indices in flow order (zone outermost)."""
        for i in range(self.num_zones):
            for j in range(self.num_layers):
                for k in range(self.num_pallets):
                    yield ZoneIndex(i, j, k)


@dataclass(frozen=True)
class ZoneState:
    """Thermodynamic state of one zone at one instant."""

    product_temperature: float  # °C
    product_moisture: float  # kg water/kg product
    air_temperature: float  # °C
    air_humidity: float  # kg water/kg dry air
    velocity: float  # m/s
    pressure: float  # Pa
    density: float  # kg/m³
    mass_flow: float  # kg/s
    energy: float  # J, sensible energy of the zone air
    development_factor: float = 0.0  # -

    def evolve(self, **changes) -> "ZoneState":
        """Return a copy with some fields replaced."""
        return replace(self, **changes)

    def non_finite_fields(self) -> Tuple[str, ...]:
        """Names of fields holding NaN or infinity."""
        return tuple(
            name for name, value in self.__dict__.items() if not math.isfinite(value)
        )


class ZoneGrid:
    """
    Immutable arena of zone states indexed by ZoneIndex.

    Attributes:
        shape: Grid extents
    """

    __slots__ = ("shape", "_states")

    def __init__(self, shape: GridShape, states: Sequence[ZoneState]) -> None:
        if len(states) != shape.size:
            raise ValueError(f"Grid of shape {tuple(shape)} needs {shape.size} states, got {len(states)}")
        self.shape = shape
        self._states: Tuple[ZoneState, ...] = tuple(states)

    @classmethod
    def uniform(cls, shape: GridShape, factory: Callable[[ZoneIndex], ZoneState]) -> "ZoneGrid":
        """Build a grid by calling ``factory`` for every index in flow order."""
        return cls(shape, [factory(index) for index in shape.indices()])

    def __getitem__(self, index: Tuple[int, int, int]) -> ZoneState:
        return self._states[self.shape.offset(index)]

    def __len__(self) -> int:
        return len(self._states)

    def __iter__(self) -> Iterator[Tuple[ZoneIndex, ZoneState]]:
        for index in self.shape.indices():
            yield index, self._states[self.shape.offset(index)]

    def states(self) -> Tuple[ZoneState, ...]:
        return self._states

    def flow_line(self, layer: int, pallet: int) -> Tuple[ZoneState, ...]:
        """States along the airflow at one layer and pallet position."""
        return tuple(self[(i, layer, pallet)] for i in range(self.shape.num_zones))

    def outlet_states(self) -> Tuple[ZoneState, ...]:
        """States of the last zone of every flow line."""
        last = self.shape.num_zones - 1
        return tuple(
            self[(last, j, k)]
            for j in range(self.shape.num_layers)
            for k in range(self.shape.num_pallets)
        )

    def replace(self, updates: dict) -> "ZoneGrid":
        """Return a new grid with the states at the given indices replaced."""
        states = list(self._states)
        for index, state in updates.items():
            states[self.shape.offset(index)] = state
        return ZoneGrid(self.shape, states)

    def __repr__(self) -> str:
        return f"ZoneGrid(shape={tuple(self.shape)})"
