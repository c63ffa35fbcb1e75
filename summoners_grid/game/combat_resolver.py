"""
Combat resolution for attacks and heals.

Every action goes through the same five stages, each of which may end the
resolution early:

1. Target validation: range check when positions and a weapon are supplied
2. Hit roll: base accuracy + ACC/10 against a d100
3. Critical roll: floor(LCK * 0.3375 + 1.65) against a second d100
4. Amount: the damage or heal formula of the action kind
5. Effect application: the target's resulting hp, clamped to [0, max hp]

The resolver is a pure function over snapshots. It never touches unit or
board state; callers commit the returned CombatOutcome themselves.
"""
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, Union

import numpy as np

from ..core.config import RulesConfig, DEFAULT_RULES
from ..core.data import ActionKind, Attribute, PositionLike, chebyshev_distance, ACTION_KIND_NAMES
from .stats import Stats
from .templates import ActionDescriptor


CRIT_LUCK_FACTOR = 0.3375
CRIT_BASE = 1.65


# ============== Random Sources ==============

class RandomSource(ABC):
    """Supplier of d100 rolls: uniform integers in [0, 100)."""

    @abstractmethod
    def roll(self) -> int:
        """Draw the next roll."""


class UniformRandomSource(RandomSource):
    """Non-deterministic rolls from a numpy Generator."""

    def __init__(self, generator: Optional[np.random.Generator] = None):
        self._generator = generator if generator is not None else np.random.default_rng()

    def roll(self) -> int:
        return int(self._generator.integers(0, 100))


def stable_hash(text: str) -> int:
    """31-multiplier string hash over UTF-16 code units, wrapped to signed 32 bits."""
    encoded = text.encode("utf-16-be")
    value = 0
    for i in range(0, len(encoded), 2):
        code_unit = (encoded[i] << 8) | encoded[i + 1]
        value = (value * 31 + code_unit) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return value


class SeededRandomSource(RandomSource):
    """Reproducible rolls derived from a seed and a draw counter.

    Draw n hashes the string seed + str(n); the same seed always yields the
    same roll sequence, which is what replays and cross-client checks rely on.
    """

    def __init__(self, seed: Union[str, int]):
        self.seed = str(seed)
        self.counter = 0

    def roll(self) -> int:
        self.counter += 1
        return abs(stable_hash(f"{self.seed}{self.counter}")) % 100


class ReplayRandomSource(RandomSource):
    """Replays recorded rolls in order, e.g. from an audited match log."""

    def __init__(self, rolls):
        self._rolls = [int(r) for r in rolls]
        self._index = 0

    def roll(self) -> int:
        if self._index >= len(self._rolls):
            raise IndexError(f"Replay exhausted after {len(self._rolls)} rolls")
        value = self._rolls[self._index]
        if not 0 <= value < 100:
            raise ValueError(f"Recorded roll {value} is outside [0, 100)")
        self._index += 1
        return value

    @property
    def remaining(self) -> int:
        return len(self._rolls) - self._index


# ============== Outcome Types ==============

@dataclass(frozen=True)
class HitResult:
    """Result of the hit roll."""
    to_hit: float
    rolled: int
    hit: bool


@dataclass(frozen=True)
class CriticalResult:
    """Result of the critical roll."""
    crit_chance: int
    rolled: int
    critical: bool


NO_HIT = HitResult(to_hit=0.0, rolled=0, hit=False)
NO_CRITICAL = CriticalResult(crit_chance=0, rolled=0, critical=False)


@dataclass(frozen=True)
class CombatSnapshot:
    """Frozen view of a combatant at resolution time."""
    stats: Stats
    current_hp: int = 0
    max_hp: int = 0
    unit_id: str = ""


@dataclass(frozen=True)
class CombatOutcome:
    """Everything a caller needs to commit a resolved action.

    amount is always non-negative; is_heal tells whether it restores or
    removes hp. hp_change gives the signed delta.
    """
    success: bool
    hit_result: HitResult
    critical_result: CriticalResult
    amount: int
    resulting_hp: int
    defeated: bool
    is_heal: bool = False
    kind: Optional[ActionKind] = None
    attribute: Attribute = Attribute.NEUTRAL
    log: tuple[str, ...] = field(default_factory=tuple)
    # True when the action was refused before any roll was drawn
    rejected: bool = False

    @property
    def damage_or_heal(self) -> int:
        return self.amount

    @property
    def hp_change(self) -> int:
        return self.amount if self.is_heal else -self.amount

    @property
    def hit(self) -> bool:
        return self.hit_result.hit

    @property
    def critical(self) -> bool:
        return self.critical_result.critical


# ============== Formulas ==============

def calculate_to_hit(accuracy: int, base_accuracy: float, cap: Optional[float] = None) -> float:
    """base_accuracy + accuracy / 10, optionally capped."""
    to_hit = base_accuracy + accuracy / 10
    if cap is not None:
        to_hit = min(cap, to_hit)
    return to_hit


def calculate_crit_chance(luck: int) -> int:
    """floor(luck * 0.3375 + 1.65)."""
    return math.floor(luck * CRIT_LUCK_FACTOR + CRIT_BASE)


def _defensive(value: int) -> int:
    # A zero defense would divide by zero; it counts as 1
    return max(1, value)


def physical_damage(attacker: Stats, target: Stats, weapon_power: int, crit_multiplier: float = 1.0) -> int:
    """STR * (1 + power/100) * (STR / DEF) * crit."""
    damage = (attacker.strength
              * (1 + weapon_power / 100)
              * (attacker.strength / _defensive(target.defense))
              * crit_multiplier)
    return math.floor(damage)


def bow_damage(attacker: Stats, target: Stats, weapon_power: int, crit_multiplier: float = 1.0) -> int:
    """((STR + ACC) / 2) * (1 + power/100) * (STR / DEF) * crit."""
    average_str_acc = (attacker.strength + attacker.accuracy) / 2
    damage = (average_str_acc
              * (1 + weapon_power / 100)
              * (attacker.strength / _defensive(target.defense))
              * crit_multiplier)
    return math.floor(damage)


def magical_damage(attacker: Stats, target: Stats, base_power: int, crit_multiplier: float = 1.0) -> int:
    """INT * (1 + power/100) * (INT / MDF) * crit."""
    damage = (attacker.intelligence
              * (1 + base_power / 100)
              * (attacker.intelligence / _defensive(target.magic_defense))
              * crit_multiplier)
    return math.floor(damage)


def healing_amount(caster: Stats, base_power: int, crit_multiplier: float = 1.0) -> int:
    """SPI * (1 + power/100) * crit."""
    return math.floor(caster.spirit * (1 + base_power / 100) * crit_multiplier)


def unarmed_damage(attacker: Stats, target: Stats, power_factor: float = 0.5, crit_multiplier: float = 1.0) -> int:
    """STR * 0.5 * (STR / DEF)."""
    damage = (attacker.strength
              * power_factor
              * (attacker.strength / _defensive(target.defense))
              * crit_multiplier)
    return math.floor(damage)


def effective_power(action: ActionDescriptor) -> int:
    """Power fed to the formula: weapon power (if any) plus the action's own power.

    Heals ignore the weapon.
    """
    if action.kind is ActionKind.HEAL or action.weapon is None:
        return action.power
    return action.weapon.power + action.power


# ============== Resolver ==============

class CombatResolver:
    """Resolves actions between two combatant snapshots.

    Each instance owns exactly one RandomSource for its lifetime, so a seeded
    resolver replays identically when fed the same sequence of resolve() calls.
    """

    def __init__(self, random_source: Optional[RandomSource] = None, config: RulesConfig = DEFAULT_RULES):
        self.random_source = random_source if random_source is not None else UniformRandomSource()
        self.config = config

    @classmethod
    def seeded(cls, seed: Union[str, int], config: RulesConfig = DEFAULT_RULES) -> "CombatResolver":
        """Resolver in deterministic mode."""
        return cls(SeededRandomSource(seed), config)

    @property
    def is_deterministic(self) -> bool:
        return isinstance(self.random_source, SeededRandomSource)

    def base_accuracy_for(self, action: ActionDescriptor) -> int:
        """The action's own base accuracy, else the weapon or unarmed default."""
        if action.base_accuracy is not None:
            return action.base_accuracy
        if action.kind is ActionKind.UNARMED_ATTACK:
            return self.config.unarmed_base_accuracy
        return self.config.weapon_base_accuracy

    def to_hit_for(self, action: ActionDescriptor, attacker: Stats) -> float:
        """Hit chance of an action; heals are never capped."""
        cap = None if action.is_heal else self.config.hit_chance_cap
        return calculate_to_hit(attacker.accuracy, self.base_accuracy_for(action), cap)

    def calculate_amount(
        self,
        action: ActionDescriptor,
        attacker: Stats,
        target: Stats,
        critical: bool
    ) -> int:
        """Stage 4: damage or heal amount of an action (always non-negative)."""
        crit_multiplier = self.config.crit_multiplier if critical else 1.0
        power = effective_power(action)

        if action.kind is ActionKind.BASIC_ATTACK:
            return physical_damage(attacker, target, power, crit_multiplier)
        if action.kind is ActionKind.BOW_ATTACK:
            return bow_damage(attacker, target, power, crit_multiplier)
        if action.kind is ActionKind.MAGICAL_ATTACK:
            return magical_damage(attacker, target, power, crit_multiplier)
        if action.kind is ActionKind.HEAL:
            return healing_amount(attacker, power, crit_multiplier)
        if action.kind is ActionKind.UNARMED_ATTACK:
            unarmed_multiplier = crit_multiplier if self.config.unarmed_crits else 1.0
            return unarmed_damage(attacker, target, self.config.unarmed_power_factor, unarmed_multiplier)
        raise TypeError(f"Unhandled action kind: {action.kind}")

    def resolve(
        self,
        action: ActionDescriptor,
        attacker: Union[CombatSnapshot, Stats],
        target: CombatSnapshot,
        positions: Optional[tuple[PositionLike, PositionLike]] = None
    ) -> CombatOutcome:
        """Run the five-stage pipeline.

        Args:
            action: What is being done
            attacker: Attacker (or caster) snapshot; bare Stats are accepted
            target: Target snapshot with current and max hp
            positions: Optional (attacker position, target position) for the
                range check; the check only runs when the action carries a weapon

        Returns:
            CombatOutcome; success is False for range rejections and misses

        Raises:
            TypeError: If target is not a CombatSnapshot; raised before any roll
        """
        if not isinstance(target, CombatSnapshot):
            raise TypeError(f"Target must be a CombatSnapshot, got {type(target).__name__}")
        attacker_stats = attacker.stats if isinstance(attacker, CombatSnapshot) else attacker
        log: list[str] = []

        if action.kind is ActionKind.SUPPORT:
            return self.reject(action, target, f"{action.name} is not a combat action")

        # Stage 1: target validation
        if positions is not None and action.weapon is not None:
            distance = chebyshev_distance(positions[0], positions[1])
            weapon_range = action.weapon.range
            if distance > weapon_range:
                log.append(f"Attack failed: Target out of range (distance {distance}, range {weapon_range})")
                return self._failed(action, target, NO_HIT, log)
            log.append(f"Target in range ({weapon_range})")

        # Stage 2: hit roll
        to_hit = self.to_hit_for(action, attacker_stats)
        rolled = self.random_source.roll()
        # Rolls are integers, so only the whole part of to_hit can be beaten
        hit_result = HitResult(to_hit=round(to_hit, 1), rolled=rolled, hit=rolled < math.floor(to_hit))
        log.append(
            f"Hit chance: {hit_result.to_hit}%, rolled: {rolled} - {'HIT' if hit_result.hit else 'MISS'}"
        )
        if not hit_result.hit:
            return self._failed(action, target, hit_result, log)

        # Stage 3: critical roll
        crit_chance = calculate_crit_chance(attacker_stats.luck)
        crit_rolled = self.random_source.roll()
        critical_result = CriticalResult(crit_chance=crit_chance, rolled=crit_rolled, critical=crit_rolled < crit_chance)
        log.append(
            f"Critical chance: {crit_chance}%, rolled: {crit_rolled} - "
            f"{'CRITICAL' if critical_result.critical else 'NORMAL'}"
        )

        # Stage 4: amount
        amount = self.calculate_amount(action, attacker_stats, target.stats, critical_result.critical)
        kind_name = ACTION_KIND_NAMES[action.kind]
        if action.is_heal:
            log.append(f"{kind_name}: {amount} (base power: {effective_power(action)})")
        else:
            log.append(f"{kind_name} damage: {amount} (power: {effective_power(action)})")

        # Stage 5: effect application
        delta = amount if action.is_heal else -amount
        resulting_hp = max(0, min(target.max_hp, target.current_hp + delta))
        defeated = resulting_hp <= 0
        if defeated:
            log.append(f"Target defeated! (HP: {target.current_hp} -> 0)")
        else:
            log.append(f"Target HP: {target.current_hp} -> {resulting_hp}")

        return CombatOutcome(
            success=True,
            hit_result=hit_result,
            critical_result=critical_result,
            amount=amount,
            resulting_hp=resulting_hp,
            defeated=defeated,
            is_heal=action.is_heal,
            kind=action.kind,
            attribute=action.attribute,
            log=tuple(log),
        )

    def reject(self, action: ActionDescriptor, target: CombatSnapshot, reason: str) -> CombatOutcome:
        """Outcome for an action refused before any roll (e.g. already attacked)."""
        return self._failed(action, target, NO_HIT, [f"Action rejected: {reason}"])

    def _failed(
        self,
        action: ActionDescriptor,
        target: CombatSnapshot,
        hit_result: HitResult,
        log: list[str]
    ) -> CombatOutcome:
        return CombatOutcome(
            success=False,
            hit_result=hit_result,
            critical_result=NO_CRITICAL,
            amount=0,
            resulting_hp=target.current_hp,
            defeated=target.current_hp <= 0,
            is_heal=action.is_heal,
            kind=action.kind,
            attribute=action.attribute,
            log=tuple(log),
            rejected=hit_result is NO_HIT,
        )
