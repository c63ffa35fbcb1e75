"""
Battle calculation for hit, crit and damage prediction.

This module computes forecasts separate from actual combat resolution, so a
client can show damage/hit/crit predictions without drawing rolls or
touching unit state. It uses the same formula functions as the resolver.
"""
import math
from dataclasses import dataclass
from typing import Optional

from ..core.data import chebyshev_distance
from .combat_resolver import CombatResolver, calculate_crit_chance
from .templates import ActionDescriptor
from .unit_state import UnitState


@dataclass(frozen=True)
class BattleForecast:
    """Predicted result of one action, before any roll."""
    attacker_name: str
    defender_name: str
    action_name: str
    to_hit: float
    hit_threshold: int       # rolls strictly below this hit
    crit_chance: int
    damage: int              # amount on a normal hit
    critical_damage: int     # amount on a critical hit
    attack_range: int
    in_range: bool
    is_heal: bool = False
    lethal: bool = False     # a normal hit defeats the defender

    @property
    def hit_percent(self) -> int:
        return self.hit_threshold


class BattleCalculator:
    """Calculates battle forecasts using a resolver's configuration."""

    def __init__(self, resolver: Optional[CombatResolver] = None):
        self.resolver = resolver if resolver is not None else CombatResolver()

    def forecast(
        self,
        attacker: UnitState,
        defender: UnitState,
        action: Optional[ActionDescriptor] = None
    ) -> BattleForecast:
        """
        Calculate the complete forecast of attacker using action on defender.

        Args:
            attacker: The acting unit
            defender: The target unit
            action: Action to forecast (the attacker's basic attack when None)

        Returns:
            BattleForecast with all prediction values
        """
        if action is None:
            action = attacker.basic_attack_action()

        to_hit = self.resolver.to_hit_for(action, attacker.stats)
        damage = self.resolver.calculate_amount(action, attacker.stats, defender.stats, critical=False)
        critical_damage = self.resolver.calculate_amount(action, attacker.stats, defender.stats, critical=True)

        attack_range = action.weapon.range if action.weapon is not None else attacker.attack_range
        in_range = chebyshev_distance(attacker.position, defender.position) <= attack_range

        return BattleForecast(
            attacker_name=attacker.display_name(),
            defender_name=defender.display_name(),
            action_name=action.name,
            to_hit=round(to_hit, 1),
            hit_threshold=math.floor(to_hit),
            crit_chance=calculate_crit_chance(attacker.stats.luck),
            damage=damage,
            critical_damage=critical_damage,
            attack_range=attack_range,
            in_range=in_range,
            is_heal=action.is_heal,
            lethal=not action.is_heal and damage >= defender.current_hp,
        )
