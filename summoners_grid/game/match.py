"""
One match: the board, its units and the collaborators that act on them.

Match is the unit of isolation. It owns exactly one Board, one
CombatResolver, one EventManager and one lock; every mutating operation runs
under that lock, so two matches never share mutable state and one match
never interleaves two operations. The turn controller drives it from the
outside by calling reset_turn_flags() at each turn boundary.
"""
import threading
from typing import Optional

from ..core.config import RulesConfig, DEFAULT_RULES
from ..core.data import Side, PositionLike, as_vector
from ..core.events import (
    EventManager,
    LogMessage,
    MatchEvent,
    TurnFlagsReset,
    UnitAttacked,
    UnitDefeated,
    UnitHealed,
    UnitLeveledUp,
    UnitMoved,
    UnitPlaced,
)
from .board import Board
from .combat_resolver import CombatOutcome, CombatResolver
from .effects import EffectResult, resolve_action
from .log_manager import LogCategory, LogLevel, LogManager
from .templates import ActionDescriptor, BaseUnitTemplate, RoleTemplate
from .unit_state import UnitState


class Match:
    """Per-match container guarding board and unit mutation with one lock."""

    def __init__(
        self,
        config: RulesConfig = DEFAULT_RULES,
        resolver: Optional[CombatResolver] = None,
        event_manager: Optional[EventManager] = None,
    ):
        self.config = config
        self.board = Board.from_config(config)
        self.resolver = resolver if resolver is not None else CombatResolver(config=config)
        self.event_manager = event_manager if event_manager is not None else EventManager()
        self.log_manager = LogManager(self.event_manager)
        self.turn = 1
        self.units: dict[str, UnitState] = {}
        self._lock = threading.RLock()

    # ============== Event Helpers ==============

    def _emit(self, event: MatchEvent) -> None:
        self.event_manager.publish_immediate(event, source="Match")

    def _log(self, message: str, category: LogCategory = LogCategory.SYSTEM,
             level: LogLevel = LogLevel.INFO) -> None:
        self._emit(LogMessage(
            turn=self.turn,
            message=message,
            category=category,
            level=level,
            source="Match",
        ))

    def _log_outcome(self, outcome: CombatOutcome) -> None:
        for line in outcome.log:
            self._log(line, LogCategory.BATTLE)

    # ============== Setup ==============

    def summon(
        self,
        unit_id: str,
        template: BaseUnitTemplate,
        role: RoleTemplate,
        side: Side,
        position: PositionLike,
        level: Optional[int] = None,
    ) -> Optional[UnitState]:
        """Create a unit and place it in its owner's home territory.

        Returns:
            The placed unit, or None if the cell is outside the side's
            territory, invalid or occupied, or the id is already in use
        """
        pos = as_vector(position)
        with self._lock:
            if unit_id in self.units:
                self._log(f"Summon failed: unit id {unit_id} already in use", LogCategory.WARNING, LogLevel.WARNING)
                return None
            if not self.board.is_valid_position(pos) or not self.board.is_in_territory(pos, side):
                self._log(
                    f"Summon failed: ({pos.x}, {pos.y}) is not in {side.name} territory",
                    LogCategory.WARNING, LogLevel.WARNING
                )
                return None

            unit = UnitState(unit_id, template, role, side, pos, level=level, config=self.config)
            if not self.board.place_unit(unit, pos):
                self._log(f"Summon failed: ({pos.x}, {pos.y}) is occupied", LogCategory.WARNING, LogLevel.WARNING)
                return None

            self.units[unit_id] = unit
            self._emit(UnitPlaced(turn=self.turn, unit=unit, position=pos))
            self._log(f"{unit.display_name()} summoned at ({pos.x}, {pos.y})")
            return unit

    # ============== Unit Operations ==============

    def move(self, unit: UnitState, position: PositionLike) -> bool:
        """Move a unit, paying Chebyshev distance from its remaining movement."""
        pos = as_vector(position)
        with self._lock:
            origin = unit.position
            if not unit.move_to(pos):
                self._log(
                    f"{unit.display_name()} cannot move to ({pos.x}, {pos.y})",
                    LogCategory.MOVEMENT, LogLevel.DEBUG
                )
                return False

            cost = self.board.distance(origin, pos)
            self._emit(UnitMoved(turn=self.turn, unit=unit, from_position=origin, cost=cost))
            self._log(
                f"{unit.display_name()} moved ({origin.x}, {origin.y}) -> ({pos.x}, {pos.y})",
                LogCategory.MOVEMENT
            )
            return True

    def attack(self, attacker: UnitState, target: UnitState) -> CombatOutcome:
        """Basic attack; defeated targets stay on the board until remove_defeated()."""
        with self._lock:
            outcome = attacker.attack(target, self.resolver)
            self._log_outcome(outcome)
            if not outcome.rejected:
                self._emit(UnitAttacked(turn=self.turn, attacker=attacker, target=target, outcome=outcome))
            if outcome.success and target.is_defeated():
                self._emit(UnitDefeated(turn=self.turn, unit=target, position=target.position))
            return outcome

    def use_action(self, caster: UnitState, action: ActionDescriptor, target: UnitState) -> list[EffectResult]:
        """Play an action card from caster on target."""
        with self._lock:
            was_defeated = target.is_defeated()
            results = resolve_action(action, caster, target, self.resolver)
            for result in results:
                for line in result.log:
                    self._log(line, LogCategory.BATTLE)
                outcome = result.outcome
                if outcome is None or outcome.rejected:
                    continue
                if outcome.is_heal:
                    self._emit(UnitHealed(turn=self.turn, caster=caster, target=target, outcome=outcome))
                else:
                    self._emit(UnitAttacked(turn=self.turn, attacker=caster, target=target, outcome=outcome))
            if not was_defeated and target.is_defeated():
                self._emit(UnitDefeated(turn=self.turn, unit=target, position=target.position))
            return results

    def level_up(self, unit: UnitState) -> None:
        with self._lock:
            old_level = unit.level
            unit.level_up()
            self._emit(UnitLeveledUp(turn=self.turn, unit=unit, old_level=old_level, new_level=unit.level))
            self._log(f"{unit.unit_id} reached level {unit.level} ({unit.status_text()})")

    # ============== Turn Control ==============

    def reset_turn_flags(self, side: Side) -> None:
        """Turn boundary for one side: clear its units' flags and advance the turn."""
        with self._lock:
            units = self.units_of(side)
            for unit in units:
                unit.reset_turn_flags()
            self._emit(TurnFlagsReset(turn=self.turn, side=side, unit_ids=tuple(u.unit_id for u in units)))
            self.turn += 1

    def remove_defeated(self) -> list[UnitState]:
        """Take defeated units off the board and out of the match."""
        with self._lock:
            defeated = [unit for unit in self.units.values() if unit.is_defeated()]
            for unit in defeated:
                self.board.remove_unit(unit)
                del self.units[unit.unit_id]
                self._log(f"{unit.display_name()} ({unit.unit_id}) removed from the board", LogCategory.BATTLE)
            return defeated

    # ============== Queries ==============

    def units_of(self, side: Side) -> list[UnitState]:
        with self._lock:
            return [unit for unit in self.units.values() if unit.owner is side]

    def get_unit(self, unit_id: str) -> Optional[UnitState]:
        with self._lock:
            return self.units.get(unit_id)
