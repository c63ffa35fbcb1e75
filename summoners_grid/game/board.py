from dataclasses import dataclass, field
from typing import Optional, TYPE_CHECKING, Union

import numpy as np
from numpy.typing import NDArray

from ..core.config import RulesConfig
from ..core.data import Side, Territory, Vector2, VectorArray, PositionLike, as_vector, chebyshev_distance

if TYPE_CHECKING:
    from .unit_state import UnitState


_SIDE_TERRITORY = {
    Side.PLAYER_A: Territory.PLAYER_A,
    Side.PLAYER_B: Territory.PLAYER_B,
}


@dataclass
class Board:
    """Fixed-size grid with one unit per cell and one cell per unit.

    All distances are Chebyshev distances. Invalid requests (out of bounds,
    occupied cell, unknown unit) return False and leave the board untouched.
    """
    width: int = 14
    height: int = 12
    territory_rows: int = 3
    _units: list["UnitState"] = field(default_factory=list)
    unit_id_to_index: dict[str, int] = field(default_factory=dict)
    occupancy: np.ndarray = field(init=False)  # Stores unit indices (-1 for empty)

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Board dimensions must be positive, got {self.width}x{self.height}")
        if self.territory_rows < 0 or 2 * self.territory_rows > self.height:
            raise ValueError(
                f"territory_rows={self.territory_rows} does not fit a board of height {self.height}"
            )
        # Indexed [y, x]; int16 supports far more units than a board can hold
        self.occupancy = np.full((self.height, self.width), -1, dtype=np.int16)

    @classmethod
    def from_config(cls, config: RulesConfig) -> "Board":
        return cls(config.board_width, config.board_height, config.territory_rows)

    # ============== Positions ==============

    @staticmethod
    def _coords(x: Union[int, PositionLike], y: Optional[int] = None) -> Vector2:
        if y is None:
            return as_vector(x)  # type: ignore[arg-type]
        return Vector2(int(x), int(y))  # type: ignore[arg-type]

    def is_valid_position(self, x: Union[int, PositionLike], y: Optional[int] = None) -> bool:
        """Bounds check; accepts (x, y) ints or a single position."""
        pos = self._coords(x, y)
        return 0 <= pos.x < self.width and 0 <= pos.y < self.height

    @staticmethod
    def distance(a: PositionLike, b: PositionLike) -> int:
        """Chebyshev distance, the only metric the board uses."""
        return chebyshev_distance(a, b)

    def get_occupied_mask(self) -> NDArray[np.bool_]:
        """Boolean [y, x] mask of occupied cells."""
        return self.occupancy >= 0

    def _distance_grid(self, center: Vector2) -> NDArray[np.int64]:
        """Chebyshev distance from center to every cell, indexed [y, x]."""
        y_coords, x_coords = np.mgrid[0:self.height, 0:self.width]
        return np.maximum(np.abs(x_coords - center.x), np.abs(y_coords - center.y))

    # ============== Occupancy ==============

    def get_unit_at(self, x: Union[int, PositionLike], y: Optional[int] = None) -> Optional["UnitState"]:
        """Unit occupying a cell, or None for empty or out-of-bounds cells."""
        pos = self._coords(x, y)
        if not self.is_valid_position(pos):
            return None
        unit_index = int(self.occupancy[pos.y, pos.x])
        if unit_index < 0:
            return None
        return self._units[unit_index]

    def get_unit(self, unit_id: str) -> Optional["UnitState"]:
        unit_index = self.unit_id_to_index.get(unit_id)
        if unit_index is None:
            return None
        return self._units[unit_index]

    def contains(self, unit: "UnitState") -> bool:
        return self.get_unit(unit.unit_id) is unit

    def list_units(self) -> list["UnitState"]:
        """All units on the board in placement order."""
        return list(self._units)

    def place_unit(self, unit: "UnitState", position: PositionLike) -> bool:
        """Put a unit on an empty cell.

        Fails without mutation if the cell is invalid or occupied, or if the
        unit is already on the board.
        """
        pos = as_vector(position)
        if not self.is_valid_position(pos):
            return False
        if self.get_unit_at(pos) is not None:
            return False
        if unit.unit_id in self.unit_id_to_index:
            return False

        unit_index = len(self._units)
        self._units.append(unit)
        self.unit_id_to_index[unit.unit_id] = unit_index
        self.occupancy[pos.y, pos.x] = unit_index
        unit.update_position(pos, board=self)
        return True

    def move_unit(self, unit: "UnitState", position: PositionLike) -> bool:
        """Relocate a unit on the board without charging movement.

        Fails without mutation if the unit is not on this board or the
        destination is invalid or occupied.
        """
        pos = as_vector(position)
        if not self.contains(unit):
            return False
        if not self.is_valid_position(pos):
            return False
        if self.get_unit_at(pos) is not None:
            return False

        unit_index = self.unit_id_to_index[unit.unit_id]
        old_position = unit.position
        self.occupancy[old_position.y, old_position.x] = -1
        self.occupancy[pos.y, pos.x] = unit_index
        unit.update_position(pos, board=self)
        return True

    def remove_unit(self, unit: "UnitState") -> bool:
        """Clear a unit's cell; False if it was not on the board."""
        unit_index = self.unit_id_to_index.get(unit.unit_id)
        if unit_index is None:
            return False

        removed = self._units[unit_index]
        self.occupancy[removed.position.y, removed.position.x] = -1
        del self.unit_id_to_index[unit.unit_id]
        self._units.pop(unit_index)

        for uid, idx in self.unit_id_to_index.items():
            if idx > unit_index:
                self.unit_id_to_index[uid] = idx - 1
        self._reindex_occupancy_after_removal(unit_index)

        removed.detach_from_board(self)
        return True

    def _reindex_occupancy_after_removal(self, removed_index: int) -> None:
        """Shift occupancy indices down after list compaction."""
        indices_to_update = self.occupancy > removed_index
        self.occupancy[indices_to_update] -= 1

    # ============== Movement and Targeting ==============

    def valid_movement_positions(self, unit: "UnitState") -> list[Vector2]:
        """Empty cells within the unit's remaining movement, excluding its own cell."""
        max_move = unit.remaining_movement
        if max_move <= 0:
            return []

        distances = self._distance_grid(unit.position)
        valid_mask = (distances <= max_move) & (distances > 0) & ~self.get_occupied_mask()

        y_coords, x_coords = np.where(valid_mask)
        positions = np.column_stack((x_coords, y_coords)).astype(np.int16)
        return VectorArray(positions).to_vector_list()

    def can_move_unit_to(self, unit: "UnitState", position: PositionLike) -> bool:
        """Whether a move is inside bounds, unoccupied and within remaining movement."""
        pos = as_vector(position)
        if not self.is_valid_position(pos) or self.get_unit_at(pos) is not None:
            return False
        distance = chebyshev_distance(unit.position, pos)
        return 0 < distance <= unit.remaining_movement

    def valid_attack_targets(self, unit: "UnitState") -> list["UnitState"]:
        """Enemy units within the unit's attack range."""
        attack_range = unit.attack_range
        return [
            other for other in self._units
            if other.owner != unit.owner
            and not other.is_defeated()
            and chebyshev_distance(unit.position, other.position) <= attack_range
        ]

    def cells_in_range(self, center: PositionLike, max_range: int) -> VectorArray:
        """All valid cells within max_range of center (center included)."""
        distances = self._distance_grid(as_vector(center))
        y_coords, x_coords = np.where(distances <= max_range)
        return VectorArray(np.column_stack((x_coords, y_coords)).astype(np.int16))

    # ============== Territory ==============

    def territory_of(self, position: PositionLike) -> Territory:
        """Home zone of player A (top rows), player B (bottom rows) or neutral."""
        pos = as_vector(position)
        if pos.y < self.territory_rows:
            return Territory.PLAYER_A
        if pos.y >= self.height - self.territory_rows:
            return Territory.PLAYER_B
        return Territory.NEUTRAL

    def is_in_territory(self, position: PositionLike, side: Side) -> bool:
        return self.territory_of(position) is _SIDE_TERRITORY[side]

    def units_in_territory(self, side: Side) -> list["UnitState"]:
        """Units of either side standing in a side's home zone."""
        return [unit for unit in self._units if self.is_in_territory(unit.position, side)]

    def valid_summon_positions(self, side: Side) -> list[Vector2]:
        """Empty cells in a side's home zone."""
        if side is Side.PLAYER_A:
            rows = range(0, self.territory_rows)
        else:
            rows = range(self.height - self.territory_rows, self.height)
        return [
            Vector2(x, y)
            for y in rows
            for x in range(self.width)
            if self.occupancy[y, x] < 0
        ]
