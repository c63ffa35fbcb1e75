"""Spatial data structures shared by the board and the units.

Positions use (x, y) ordering: x is the column, y is the row. Rows 0-2 and
9-11 of the reference 14x12 board are the two home territories.
"""

from dataclasses import dataclass
from typing import Iterator, Optional, Union

import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class Vector2:
    """Immutable 2D grid coordinate.

    Distances on the grid are always Chebyshev ("king move") distances, so a
    diagonal step costs the same as an orthogonal one.
    """
    x: int
    y: int

    def __add__(self, other: "Vector2") -> "Vector2":
        """Vector addition."""
        return Vector2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Vector2") -> "Vector2":
        """Vector subtraction."""
        return Vector2(self.x - other.x, self.y - other.y)

    def __iter__(self) -> Iterator[int]:
        """Make Vector2 iterable for unpacking (x, y order)."""
        yield self.x
        yield self.y

    def __repr__(self) -> str:
        return f"Vector2({self.x}, {self.y})"

    def distance_to(self, other: "Vector2") -> int:
        """Chebyshev distance to another vector."""
        return chebyshev_distance(self, other)

    @classmethod
    def from_tuple(cls, coords: tuple[int, int]) -> "Vector2":
        """Create Vector2 from an (x, y) tuple."""
        return cls(int(coords[0]), int(coords[1]))

    def to_tuple(self) -> tuple[int, int]:
        """Convert to an (x, y) tuple."""
        return (self.x, self.y)


PositionLike = Union[Vector2, tuple[int, int]]


def as_vector(position: PositionLike) -> Vector2:
    """Normalize a Vector2 or an (x, y) tuple into a Vector2."""
    if isinstance(position, Vector2):
        return position
    return Vector2.from_tuple(position)


def chebyshev_distance(a: PositionLike, b: PositionLike) -> int:
    """max(|dx|, |dy|) between two positions."""
    ax, ay = as_vector(a)
    bx, by = as_vector(b)
    return max(abs(ax - bx), abs(ay - by))


class VectorArray:
    """Collection of positions backed by an (N, 2) numpy array in (x, y) order.

    Used for batch range queries over the board.
    """

    def __init__(self, vectors: Optional[Union[list[Vector2], NDArray[np.int16]]] = None):
        if vectors is None:
            self._data = np.empty((0, 2), dtype=np.int16)
        elif isinstance(vectors, list):
            if not vectors:
                self._data = np.empty((0, 2), dtype=np.int16)
            else:
                self._data = np.array([[v.x, v.y] for v in vectors], dtype=np.int16)
        else:
            if vectors.ndim != 2 or vectors.shape[-1] != 2:
                raise ValueError("Numpy array must have shape (N, 2)")
            self._data = vectors.astype(np.int16)

    @property
    def data(self) -> NDArray[np.int16]:
        return self._data

    @property
    def x_coords(self) -> NDArray[np.int16]:
        return self._data[:, 0]

    @property
    def y_coords(self) -> NDArray[np.int16]:
        return self._data[:, 1]

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[Vector2]:
        for row in self._data:
            yield Vector2(int(row[0]), int(row[1]))

    def __contains__(self, position: object) -> bool:
        if not isinstance(position, (Vector2, tuple)):
            return False
        target = as_vector(position)
        if len(self._data) == 0:
            return False
        return bool(np.any((self._data[:, 0] == target.x) & (self._data[:, 1] == target.y)))

    def to_vector_list(self) -> list[Vector2]:
        """Convert to a list of Vector2 objects."""
        return list(self)

    def chebyshev_distances_to(self, target: PositionLike) -> NDArray[np.int16]:
        """Chebyshev distance from every position to a target point."""
        point = as_vector(target)
        dx = np.abs(self.x_coords - point.x)
        dy = np.abs(self.y_coords - point.y)
        return np.maximum(dx, dy)

    def filter_by_distance(self, center: PositionLike, max_distance: int) -> "VectorArray":
        """Keep positions within a Chebyshev distance of center."""
        mask = self.chebyshev_distances_to(center) <= max_distance
        return VectorArray(self._data[mask])
