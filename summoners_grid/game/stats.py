"""Stat blocks and the pure stat model.

A summon's current stats are always recomputed wholesale from its template,
role, level, equipment and active modifiers:

    value = floor((base + floor(level * growth)) * (1 + role_modifier))
            + sum(equipment bonuses) + sum(active modifiers)

Reconciling current hp across a recompute is the unit's job, not this
module's.
"""

import math
from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import Iterable, Mapping, Optional, Sequence, TYPE_CHECKING, Union

import numpy as np

from ..core.data import StatName

if TYPE_CHECKING:
    from .templates import BaseUnitTemplate, RoleTemplate, EquipmentItem


# Attribute name on Stats/StatFractions for each catalog key
STAT_FIELDS: dict[StatName, str] = {
    StatName.STR: "strength",
    StatName.END: "endurance",
    StatName.DEF: "defense",
    StatName.INT: "intelligence",
    StatName.SPI: "spirit",
    StatName.MDF: "magic_defense",
    StatName.SPD: "speed",
    StatName.ACC: "accuracy",
    StatName.LCK: "luck",
}

StatKey = Union[StatName, str]


def _stat_name(key: StatKey) -> StatName:
    if isinstance(key, StatName):
        return key
    return StatName(key)


class _StatVector:
    """Shared keyed access for the nine-attribute records."""

    def get(self, key: StatKey):
        return getattr(self, STAT_FIELDS[_stat_name(key)])

    def __getitem__(self, key: StatKey):
        return self.get(key)

    def to_dict(self) -> dict[str, float]:
        """Catalog-keyed dict ({"str": ..., "end": ...})."""
        return {stat.value: self.get(stat) for stat in StatName}

    def to_array(self) -> np.ndarray:
        """Values in StatName order as a float64 array."""
        return np.array([self.get(stat) for stat in StatName], dtype=np.float64)


@dataclass(frozen=True)
class Stats(_StatVector):
    """Integer stat block."""
    strength: int = 0
    endurance: int = 0
    defense: int = 0
    intelligence: int = 0
    spirit: int = 0
    magic_defense: int = 0
    speed: int = 0
    accuracy: int = 0
    luck: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[StatKey, int]) -> "Stats":
        """Build from catalog keys or StatName keys; missing stats are 0."""
        values = {STAT_FIELDS[_stat_name(key)]: int(value) for key, value in data.items()}
        return cls(**values)

    def __str__(self) -> str:
        return " ".join(f"{stat.value.upper()}:{self.get(stat)}" for stat in StatName)


@dataclass(frozen=True)
class StatFractions(_StatVector):
    """Per-stat fractional values: growth rates and role modifiers."""
    strength: float = 0.0
    endurance: float = 0.0
    defense: float = 0.0
    intelligence: float = 0.0
    spirit: float = 0.0
    magic_defense: float = 0.0
    speed: float = 0.0
    accuracy: float = 0.0
    luck: float = 0.0

    @classmethod
    def from_dict(cls, data: Mapping[StatKey, float]) -> "StatFractions":
        values = {STAT_FIELDS[_stat_name(key)]: float(value) for key, value in data.items()}
        return cls(**values)


class ModifierTarget(Enum):
    """Non-stat quantities a modifier can raise."""
    WEAPON_POWER = "weapon_power"


class ModifierExpiry(Enum):
    """When a time-boxed modifier stops applying."""
    END_OF_TURN = auto()   # dropped at the next turn-flag reset
    TURNS = auto()         # dropped after remaining_turns resets
    PERMANENT = auto()


@dataclass(frozen=True)
class StatModifier:
    """A temporary bonus (or malus) folded into stat computation."""
    stat: Union[StatName, ModifierTarget]
    value: int
    expiry: ModifierExpiry = ModifierExpiry.END_OF_TURN
    remaining_turns: int = 1
    source: str = ""

    def tick(self) -> Optional["StatModifier"]:
        """Advance one turn boundary; None once the modifier has expired."""
        if self.expiry is ModifierExpiry.PERMANENT:
            return self
        if self.expiry is ModifierExpiry.END_OF_TURN:
            return None
        if self.remaining_turns <= 1:
            return None
        return replace(self, remaining_turns=self.remaining_turns - 1)


def compute_stats(
    template: "BaseUnitTemplate",
    role: "RoleTemplate",
    level: int,
    equipment: Optional[Sequence["EquipmentItem"]] = None,
    modifiers: Iterable[StatModifier] = (),
) -> Stats:
    """Compute a stat block.

    Args:
        template: Species/base-stat/growth definition
        role: Role whose multiplicative modifiers apply after growth
        level: Current level, must be non-negative
        equipment: Items whose flat bonuses are added last; defaults to the
            template's own equipment
        modifiers: Active time-boxed modifiers, added after equipment

    Raises:
        ValueError: If level is negative
    """
    if level < 0:
        raise ValueError(f"Level must be non-negative, got {level}")
    if template is None or role is None:
        raise ValueError("compute_stats requires both a template and a role")

    items = template.equipment if equipment is None else equipment

    base = template.base_stats.to_array()
    growth = template.growth_rates.to_array()
    role_mod = role.stat_modifiers.to_array()

    # Floor after growth, floor again after the role modifier
    grown = base + np.floor(level * growth)
    values = np.floor(grown * (1.0 + role_mod)).astype(np.int64)

    for item in items:
        values += item.stat_bonuses.to_array().astype(np.int64)

    for modifier in modifiers:
        if isinstance(modifier.stat, StatName):
            values[list(StatName).index(modifier.stat)] += modifier.value

    values = np.maximum(values, 0)
    return Stats(**{STAT_FIELDS[stat]: int(values[i]) for i, stat in enumerate(StatName)})


def compute_max_hp(stats: Stats) -> int:
    """floor(50 + end^1.5)."""
    return math.floor(50 + stats.endurance ** 1.5)


def compute_movement_speed(stats: Stats) -> int:
    """max(0, 2 + floor((spd - 10) / 5))."""
    return max(0, 2 + (stats.speed - 10) // 5)


def weapon_power_bonus(modifiers: Iterable[StatModifier]) -> int:
    """Sum of active weapon-power modifiers."""
    return sum(m.value for m in modifiers if m.stat is ModifierTarget.WEAPON_POWER)
