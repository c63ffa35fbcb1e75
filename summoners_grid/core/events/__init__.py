"""Event system for publisher-subscriber communication.

This package contains the event-driven plumbing of a match:
- event_manager.py: Publisher-subscriber event routing
- events.py: Event definitions emitted by the match
"""

from .event_manager import EventManager, EventPriority, QueuedEvent
from .events import (
    MatchEvent,
    EventType,
    UnitPlaced,
    UnitMoved,
    UnitAttacked,
    UnitHealed,
    UnitDefeated,
    UnitLeveledUp,
    TurnFlagsReset,
    LogMessage,
)

__all__ = [
    "EventManager",
    "EventPriority",
    "QueuedEvent",
    "MatchEvent",
    "EventType",
    "UnitPlaced",
    "UnitMoved",
    "UnitAttacked",
    "UnitHealed",
    "UnitDefeated",
    "UnitLeveledUp",
    "TurnFlagsReset",
    "LogMessage",
]
