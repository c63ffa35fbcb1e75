"""Rules of the game: stats, board, combat resolution and match orchestration."""

from .board import Board
from .battle_calculator import BattleCalculator, BattleForecast
from .catalog import Catalog, CatalogError
from .combat_resolver import (
    CombatOutcome,
    CombatResolver,
    CombatSnapshot,
    RandomSource,
    ReplayRandomSource,
    SeededRandomSource,
    UniformRandomSource,
)
from .effects import (
    BuffWeaponPower,
    Damage,
    EffectResult,
    GrantAttack,
    Heal,
    RestoreMovement,
    StatBuff,
    apply_effect,
    resolve_action,
)
from .log_manager import LogCategory, LogLevel, LogManager
from .match import Match
from .stats import ModifierExpiry, StatModifier, Stats, compute_max_hp, compute_stats
from .templates import ActionDescriptor, BaseUnitTemplate, EquipmentItem, RoleTemplate
from .unit_state import UnitState

__all__ = [
    "Board",
    "BattleCalculator",
    "BattleForecast",
    "Catalog",
    "CatalogError",
    "CombatOutcome",
    "CombatResolver",
    "CombatSnapshot",
    "RandomSource",
    "ReplayRandomSource",
    "SeededRandomSource",
    "UniformRandomSource",
    "BuffWeaponPower",
    "Damage",
    "EffectResult",
    "GrantAttack",
    "Heal",
    "RestoreMovement",
    "StatBuff",
    "apply_effect",
    "resolve_action",
    "LogCategory",
    "LogLevel",
    "LogManager",
    "Match",
    "ModifierExpiry",
    "StatModifier",
    "Stats",
    "compute_max_hp",
    "compute_stats",
    "ActionDescriptor",
    "BaseUnitTemplate",
    "EquipmentItem",
    "RoleTemplate",
    "UnitState",
]
