"""Core data structures and definitions.

This package contains fundamental data types and game definitions:
- data_structures.py: Vector2 and VectorArray for grid positions
- game_enums.py: Centralized enums for sides, roles, attributes and actions
"""

from .data_structures import Vector2, VectorArray, PositionLike, as_vector, chebyshev_distance
from .game_enums import (
    Side,
    Territory,
    RoleFamily,
    Species,
    Attribute,
    EquipmentSlot,
    WeaponType,
    ActionKind,
    StatName,
    SIDE_NAMES,
    TERRITORY_NAMES,
    ACTION_KIND_NAMES,
    WEAPON_ACTION_KINDS,
)

__all__ = [
    "Vector2",
    "VectorArray",
    "PositionLike",
    "as_vector",
    "chebyshev_distance",
    "Side",
    "Territory",
    "RoleFamily",
    "Species",
    "Attribute",
    "EquipmentSlot",
    "WeaponType",
    "ActionKind",
    "StatName",
    "SIDE_NAMES",
    "TERRITORY_NAMES",
    "ACTION_KIND_NAMES",
    "WEAPON_ACTION_KINDS",
]
