"""Immutable catalog records consumed by the rules kernel.

Templates, roles, equipment and actions are loaded once per match from the
content catalog and shared between units. Units hold references to them and
never mutate them.
"""

from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

from ..core.data import (
    ActionKind,
    Attribute,
    EquipmentSlot,
    RoleFamily,
    Species,
    WeaponType,
    WEAPON_ACTION_KINDS,
)
from .stats import Stats, StatFractions

if TYPE_CHECKING:
    from .effects import Effect


@dataclass(frozen=True)
class EquipmentItem:
    """A weapon or piece of gear."""
    item_id: str
    name: str
    slot: EquipmentSlot
    power: int = 0
    range: int = 1
    attribute: Attribute = Attribute.NEUTRAL
    weapon_type: Optional[WeaponType] = None
    stat_bonuses: Stats = Stats()

    def __post_init__(self):
        if self.range < 0:
            raise ValueError(f"Equipment {self.item_id} has negative range {self.range}")
        if self.slot is EquipmentSlot.WEAPON and self.weapon_type is None:
            # Untyped weapons swing like a sword
            object.__setattr__(self, 'weapon_type', WeaponType.MELEE)

    @property
    def is_weapon(self) -> bool:
        return self.slot is EquipmentSlot.WEAPON

    @property
    def action_kind(self) -> ActionKind:
        """Damage formula a basic attack with this weapon uses."""
        return WEAPON_ACTION_KINDS[self.weapon_type or WeaponType.MELEE]


@dataclass(frozen=True)
class BaseUnitTemplate:
    """Species, base stats, growth rates and starting equipment of a summon."""
    template_id: str
    name: str
    species: Species
    base_stats: Stats
    growth_rates: StatFractions
    equipment: tuple[EquipmentItem, ...] = ()

    @property
    def weapon(self) -> Optional[EquipmentItem]:
        for item in self.equipment:
            if item.is_weapon:
                return item
        return None


@dataclass(frozen=True)
class RoleTemplate:
    """A role card: family plus multiplicative stat modifiers."""
    role_id: str
    name: str
    family: RoleFamily
    stat_modifiers: StatFractions = StatFractions()
    tier: int = 1


@dataclass(frozen=True)
class ActionDescriptor:
    """An attack, heal or buff a summon can perform.

    power is the base power of a spell or heal. For weapon attacks it is a
    bonus added on top of the weapon's own power. base_accuracy of None
    falls back to the weapon/unarmed default.
    """
    action_id: str
    name: str
    kind: ActionKind
    power: int = 0
    base_accuracy: Optional[int] = None
    attribute: Attribute = Attribute.NEUTRAL
    weapon: Optional[EquipmentItem] = None
    required_family: Optional[RoleFamily] = None
    effects: tuple["Effect", ...] = ()
    description: str = ""

    @classmethod
    def basic_attack(cls, weapon: Optional[EquipmentItem], power_bonus: int = 0) -> "ActionDescriptor":
        """The basic attack of a summon holding weapon (or nothing)."""
        if weapon is None:
            return cls(
                action_id="basic-unarmed",
                name="Unarmed Strike",
                kind=ActionKind.UNARMED_ATTACK,
            )
        return cls(
            action_id=f"basic-{weapon.item_id}",
            name=weapon.name,
            kind=weapon.action_kind,
            power=power_bonus,
            attribute=weapon.attribute,
            weapon=weapon,
        )

    @property
    def is_weapon_action(self) -> bool:
        return self.kind in (ActionKind.BASIC_ATTACK, ActionKind.BOW_ATTACK)

    @property
    def is_heal(self) -> bool:
        return self.kind is ActionKind.HEAL
