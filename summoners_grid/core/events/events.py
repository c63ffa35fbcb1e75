"""Match events and their payloads.

Event Design Principles:
- Events are immutable dataclasses with rich object payloads
- Every event carries the turn number it was emitted on
- Events use proper enums instead of magic strings
- Combat outcomes travel as-is; subscribers never recompute them
"""

from abc import ABC
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING

from ..data import Side

if TYPE_CHECKING:
    from ..data.data_structures import Vector2
    from ...game.unit_state import UnitState
    from ...game.combat_resolver import CombatOutcome
    from ...game.log_manager import LogCategory, LogLevel


class EventType(Enum):
    """Types of match events that managers can subscribe to."""
    # Unit Events
    UNIT_PLACED = auto()
    UNIT_MOVED = auto()
    UNIT_ATTACKED = auto()
    UNIT_HEALED = auto()
    UNIT_DEFEATED = auto()
    UNIT_LEVELED_UP = auto()

    # Turn Events
    TURN_FLAGS_RESET = auto()

    # Logging Events
    LOG_MESSAGE = auto()


@dataclass(frozen=True)
class MatchEvent(ABC):
    """Base class for all match events."""
    turn: int
    event_type: EventType = field(init=False)


@dataclass(frozen=True)
class UnitPlaced(MatchEvent):
    """Emitted when a unit is summoned onto the board."""
    unit: "UnitState"
    position: "Vector2"

    def __post_init__(self):
        # Set event_type since dataclass frozen=True prevents normal assignment
        object.__setattr__(self, 'event_type', EventType.UNIT_PLACED)


@dataclass(frozen=True)
class UnitMoved(MatchEvent):
    """Emitted after a unit moved; unit.position holds the destination."""
    unit: "UnitState"
    from_position: "Vector2"
    cost: int

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.UNIT_MOVED)


@dataclass(frozen=True)
class UnitAttacked(MatchEvent):
    """Emitted after a damaging action has been resolved and committed."""
    attacker: "UnitState"
    target: "UnitState"
    outcome: "CombatOutcome"

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.UNIT_ATTACKED)


@dataclass(frozen=True)
class UnitHealed(MatchEvent):
    """Emitted after a healing action has been resolved and committed."""
    caster: "UnitState"
    target: "UnitState"
    outcome: "CombatOutcome"

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.UNIT_HEALED)


@dataclass(frozen=True)
class UnitDefeated(MatchEvent):
    """Emitted when a unit reaches 0 hp and leaves the board."""
    unit: "UnitState"
    position: "Vector2"

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.UNIT_DEFEATED)


@dataclass(frozen=True)
class UnitLeveledUp(MatchEvent):
    """Emitted after a level-up recomputed a unit's stats."""
    unit: "UnitState"
    old_level: int
    new_level: int

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.UNIT_LEVELED_UP)


@dataclass(frozen=True)
class TurnFlagsReset(MatchEvent):
    """Emitted when the turn controller resets a side's per-turn flags."""
    side: Side
    unit_ids: tuple[str, ...]

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.TURN_FLAGS_RESET)


@dataclass(frozen=True)
class LogMessage(MatchEvent):
    """Emitted when a log line is produced."""
    message: str
    category: "LogCategory"
    level: "LogLevel"
    source: str

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.LOG_MESSAGE)
