"""Centralized game enums and constants.

This module contains all core game enums that are used across multiple modules,
eliminating duplication and providing a single source of truth.
"""

from enum import Enum, auto


class Side(Enum):
    """The two players sharing a board."""
    PLAYER_A = "A"
    PLAYER_B = "B"

    @property
    def opponent(self) -> "Side":
        return Side.PLAYER_B if self is Side.PLAYER_A else Side.PLAYER_A


class Territory(Enum):
    """Board zones used by objective and scoring logic."""
    PLAYER_A = "player-a"
    PLAYER_B = "player-b"
    NEUTRAL = "neutral"


class RoleFamily(Enum):
    """Role families a summon can belong to."""
    WARRIOR = "Warrior"
    MAGICIAN = "Magician"
    SCOUT = "Scout"


class Species(Enum):
    """Summon species."""
    GIGNEN = "Gignen"
    FAE = "Fae"
    STONEHEART = "Stoneheart"
    WILDERLING = "Wilderling"
    ANGAR = "Angar"
    DEMAR = "Demar"
    CREPTILIS = "Creptilis"


class Attribute(Enum):
    """Elemental attribute carried by weapons and actions."""
    FIRE = "Fire"
    WATER = "Water"
    EARTH = "Earth"
    WIND = "Wind"
    LIGHT = "Light"
    DARK = "Dark"
    NATURE = "Nature"
    NEUTRAL = "Neutral"


class EquipmentSlot(Enum):
    """Equipment slots on a summon."""
    WEAPON = "Weapon"
    OFFHAND = "Offhand"
    ARMOR = "Armor"
    ACCESSORY = "Accessory"


class WeaponType(Enum):
    """Weapon families; selects the damage formula of a basic attack."""
    MELEE = "melee"
    BOW = "bow"
    MAGIC = "magic"


class ActionKind(Enum):
    """Kinds of combat action the resolver understands."""
    BASIC_ATTACK = auto()
    BOW_ATTACK = auto()
    MAGICAL_ATTACK = auto()
    HEAL = auto()
    UNARMED_ATTACK = auto()
    SUPPORT = auto()  # buffs and utility; never rolled by the resolver


class StatName(Enum):
    """The nine stat attributes, valued by their catalog keys."""
    STR = "str"
    END = "end"
    DEF = "def"
    INT = "int"
    SPI = "spi"
    MDF = "mdf"
    SPD = "spd"
    ACC = "acc"
    LCK = "lck"


# Convenience mappings for display
SIDE_NAMES = {
    Side.PLAYER_A: "Player A",
    Side.PLAYER_B: "Player B",
}

TERRITORY_NAMES = {
    Territory.PLAYER_A: "Player A Territory",
    Territory.PLAYER_B: "Player B Territory",
    Territory.NEUTRAL: "Neutral Ground",
}

ACTION_KIND_NAMES = {
    ActionKind.BASIC_ATTACK: "Physical",
    ActionKind.BOW_ATTACK: "Bow",
    ActionKind.MAGICAL_ATTACK: "Magical",
    ActionKind.HEAL: "Healing",
    ActionKind.UNARMED_ATTACK: "Unarmed",
    ActionKind.SUPPORT: "Support",
}

WEAPON_ACTION_KINDS = {
    WeaponType.MELEE: ActionKind.BASIC_ATTACK,
    WeaponType.BOW: ActionKind.BOW_ATTACK,
    WeaponType.MAGIC: ActionKind.MAGICAL_ATTACK,
}
