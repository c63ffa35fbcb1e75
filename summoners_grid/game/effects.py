"""Card effects as a closed set of typed variants.

Action cards carry a tuple of effects. Each variant holds only its own typed
parameters, and apply_effect() interprets them by exhaustive dispatch; there
are no opaque callbacks.

Variants:
- Damage: resolve a damaging action through the CombatResolver
- Heal: resolve a healing action through the CombatResolver
- BuffWeaponPower: time-boxed bonus to the target's weapon power
- StatBuff: time-boxed bonus (or malus) to one stat
- RestoreMovement: the target may move its full speed again this turn
- GrantAttack: the target may attack again this turn
"""

from dataclasses import dataclass, field
from typing import Optional, Union

from ..core.data import ActionKind, Attribute, StatName
from .combat_resolver import CombatOutcome, CombatResolver
from .stats import ModifierExpiry, ModifierTarget, StatModifier
from .templates import ActionDescriptor
from .unit_state import UnitState


@dataclass(frozen=True)
class Damage:
    kind: ActionKind = ActionKind.MAGICAL_ATTACK
    power: int = 0
    base_accuracy: Optional[int] = None
    attribute: Attribute = Attribute.NEUTRAL


@dataclass(frozen=True)
class Heal:
    power: int = 0
    base_accuracy: Optional[int] = None
    attribute: Attribute = Attribute.LIGHT


@dataclass(frozen=True)
class BuffWeaponPower:
    amount: int
    expiry: ModifierExpiry = ModifierExpiry.END_OF_TURN
    turns: int = 1


@dataclass(frozen=True)
class StatBuff:
    stat: StatName
    amount: int
    expiry: ModifierExpiry = ModifierExpiry.END_OF_TURN
    turns: int = 1


@dataclass(frozen=True)
class RestoreMovement:
    pass


@dataclass(frozen=True)
class GrantAttack:
    pass


Effect = Union[Damage, Heal, BuffWeaponPower, StatBuff, RestoreMovement, GrantAttack]

EFFECT_TYPES: dict[str, type] = {
    "damage": Damage,
    "heal": Heal,
    "buff_weapon_power": BuffWeaponPower,
    "stat_buff": StatBuff,
    "restore_movement": RestoreMovement,
    "grant_attack": GrantAttack,
}


@dataclass
class EffectResult:
    """Result of applying one effect."""
    success: bool
    outcome: Optional[CombatOutcome] = None
    log: list[str] = field(default_factory=list)

    @classmethod
    def applied(cls, message: str, outcome: Optional[CombatOutcome] = None) -> "EffectResult":
        log = list(outcome.log) if outcome is not None else []
        log.append(message)
        return cls(success=outcome.success if outcome is not None else True, outcome=outcome, log=log)

    @classmethod
    def failed(cls, reason: str) -> "EffectResult":
        return cls(success=False, log=[reason])


def apply_effect(
    effect: Effect,
    caster: UnitState,
    target: UnitState,
    resolver: CombatResolver,
    source: str = ""
) -> EffectResult:
    """Apply a single effect from caster to target and commit it.

    Raises:
        TypeError: If effect is not one of the known variants
    """
    label = source or effect.__class__.__name__
    target_name = target.display_name()

    if isinstance(effect, Damage):
        action = ActionDescriptor(
            action_id=f"effect-{label}",
            name=label,
            kind=effect.kind,
            power=effect.power,
            base_accuracy=effect.base_accuracy,
            attribute=effect.attribute,
        )
        outcome = caster.perform(action, target, resolver)
        if outcome.success:
            message = (
                f"{label} deals {outcome.amount} {effect.attribute.value.lower()} damage to {target_name}"
                f"{' (Critical!)' if outcome.critical else ''}"
            )
        else:
            message = f"{label} misses {target_name}"
        return EffectResult.applied(message, outcome)

    if isinstance(effect, Heal):
        action = ActionDescriptor(
            action_id=f"effect-{label}",
            name=label,
            kind=ActionKind.HEAL,
            power=effect.power,
            base_accuracy=effect.base_accuracy,
            attribute=effect.attribute,
        )
        outcome = caster.perform(action, target, resolver)
        if outcome.success:
            message = (
                f"{label} restores {outcome.amount} HP to {target_name}"
                f"{' (Critical!)' if outcome.critical else ''}"
            )
        else:
            message = f"{label} fails to heal {target_name}"
        return EffectResult.applied(message, outcome)

    if isinstance(effect, BuffWeaponPower):
        if target.weapon is None:
            return EffectResult.failed(f"{label} requires {target_name} to hold a weapon")
        target.add_modifier(StatModifier(
            stat=ModifierTarget.WEAPON_POWER,
            value=effect.amount,
            expiry=effect.expiry,
            remaining_turns=effect.turns,
            source=label,
        ))
        return EffectResult.applied(f"{label} enhances {target_name}'s weapon (+{effect.amount} power)")

    if isinstance(effect, StatBuff):
        target.add_modifier(StatModifier(
            stat=effect.stat,
            value=effect.amount,
            expiry=effect.expiry,
            remaining_turns=effect.turns,
            source=label,
        ))
        return EffectResult.applied(f"{label} changes {target_name}'s {effect.stat.value.upper()} by {effect.amount:+d}")

    if isinstance(effect, RestoreMovement):
        target.restore_movement()
        return EffectResult.applied(f"{label} restores {target_name}'s movement")

    if isinstance(effect, GrantAttack):
        target.grant_attack()
        return EffectResult.applied(f"{label} lets {target_name} attack again")

    raise TypeError(f"Unknown effect variant: {effect!r}")


def effects_of(action: ActionDescriptor) -> tuple[Effect, ...]:
    """Explicit effects of an action, or the implicit one its kind implies."""
    if action.effects:
        return action.effects
    if action.kind is ActionKind.HEAL:
        return (Heal(power=action.power, base_accuracy=action.base_accuracy, attribute=action.attribute),)
    if action.kind is ActionKind.SUPPORT:
        return ()
    return (Damage(kind=action.kind, power=action.power, base_accuracy=action.base_accuracy,
                   attribute=action.attribute),)


def resolve_action(
    action: ActionDescriptor,
    caster: UnitState,
    target: UnitState,
    resolver: CombatResolver
) -> list[EffectResult]:
    """Apply every effect of an action card in order.

    An action restricted to a role family fails as a whole, with no effect
    applied, when the caster belongs to another family.
    """
    if action.required_family is not None and caster.role.family is not action.required_family:
        return [EffectResult.failed(
            f"{action.name} requires a {action.required_family.value}-family caster"
        )]
    if caster.is_defeated():
        return [EffectResult.failed(f"{caster.display_name()} is defeated and cannot act")]

    return [apply_effect(effect, caster, target, resolver, source=action.name) for effect in effects_of(action)]
