"""Battle state of a summoned unit.

UnitState combines the derived stats of a summon with its mutable battle
state (hp, position, per-turn flags, temporary modifiers) and orchestrates
calls into the Board and the CombatResolver, committing their results.

Examples:
    unit = UnitState("a-1", gignen_warrior, warrior_role, Side.PLAYER_A)
    board.place_unit(unit, (3, 1))
    unit.move_to((4, 2))            # charges Chebyshev distance
    outcome = unit.attack(enemy, resolver)
    unit.reset_turn_flags()         # called by the turn controller
"""

from typing import Optional, Sequence, TYPE_CHECKING

from ..core.config import RulesConfig, DEFAULT_RULES
from ..core.data import Side, Vector2, PositionLike, as_vector, chebyshev_distance
from .combat_resolver import CombatOutcome, CombatResolver, CombatSnapshot
from .stats import (
    Stats,
    StatModifier,
    compute_max_hp,
    compute_movement_speed,
    compute_stats,
    weapon_power_bonus,
)
from .templates import ActionDescriptor, BaseUnitTemplate, EquipmentItem, RoleTemplate

if TYPE_CHECKING:
    from .board import Board


class UnitState:
    """Mutable battle state of one summon.

    Templates, role and equipment are shared immutable catalog data; the unit
    only holds references to them.
    """

    def __init__(
        self,
        unit_id: str,
        template: BaseUnitTemplate,
        role: RoleTemplate,
        owner: Side,
        position: PositionLike = Vector2(0, 0),
        level: Optional[int] = None,
        equipment: Optional[Sequence[EquipmentItem]] = None,
        config: RulesConfig = DEFAULT_RULES,
    ):
        """Create a unit at the configured starting level with full hp.

        Raises:
            ValueError: If level is negative or template/role are missing
        """
        if template is None or role is None:
            raise ValueError(f"Unit {unit_id} needs both a template and a role")

        self.unit_id = unit_id
        self.template = template
        self.role = role
        self.owner = owner
        self.position = as_vector(position)
        self.level = config.starting_level if level is None else level
        if self.level < 0:
            raise ValueError(f"Unit {unit_id} cannot start at negative level {self.level}")
        self.equipment: tuple[EquipmentItem, ...] = tuple(
            template.equipment if equipment is None else equipment
        )
        self.config = config
        self.modifiers: list[StatModifier] = []

        self.has_attacked_this_turn = False
        self.has_moved_this_turn = False
        self.movement_used = 0

        self.board: Optional["Board"] = None

        self.stats = Stats()
        self.max_hp = 0
        self.current_hp = 0
        self._recalculate_stats(initial=True)

    # ============== Stats ==============

    def _recalculate_stats(self, initial: bool = False) -> None:
        """Recompute stats wholesale and reconcile hp.

        Absolute damage taken is preserved across the recompute, never the hp
        fraction, and a living unit is never dropped to 0 by it.
        """
        self.stats = compute_stats(self.template, self.role, self.level, self.equipment, self.modifiers)
        new_max_hp = compute_max_hp(self.stats)

        if initial:
            self.max_hp = new_max_hp
            self.current_hp = new_max_hp
            return

        if self.is_defeated():
            self.max_hp = new_max_hp
            return

        damage_taken = self.max_hp - self.current_hp
        self.max_hp = new_max_hp
        self.current_hp = max(1, self.max_hp - damage_taken)

    def level_up(self) -> None:
        """Gain a level and recompute stats."""
        self.level += 1
        self._recalculate_stats()

    def get_stats(self) -> Stats:
        return self.stats

    def add_modifier(self, modifier: StatModifier) -> None:
        """Attach a time-boxed modifier and recompute stats."""
        self.modifiers.append(modifier)
        self._recalculate_stats()

    def _tick_modifiers(self) -> None:
        ticked = [m.tick() for m in self.modifiers]
        remaining = [m for m in ticked if m is not None]
        if remaining != self.modifiers:
            self.modifiers = remaining
            self._recalculate_stats()

    @property
    def weapon(self) -> Optional[EquipmentItem]:
        for item in self.equipment:
            if item.is_weapon:
                return item
        return None

    @property
    def weapon_power_bonus(self) -> int:
        return weapon_power_bonus(self.modifiers)

    @property
    def attack_range(self) -> int:
        """Weapon range, 1 when unarmed."""
        weapon = self.weapon
        return weapon.range if weapon is not None else 1

    # ============== Movement ==============

    @property
    def movement_speed(self) -> int:
        return compute_movement_speed(self.stats)

    @property
    def remaining_movement(self) -> int:
        return max(0, self.movement_speed - self.movement_used)

    def can_move_to(self, position: PositionLike) -> bool:
        """Whether the destination is within remaining movement (and free, when on a board)."""
        pos = as_vector(position)
        if self.is_defeated():
            return False
        if self.board is not None:
            return self.board.can_move_unit_to(self, pos)
        if not (0 <= pos.x < self.config.board_width and 0 <= pos.y < self.config.board_height):
            return False
        distance = chebyshev_distance(self.position, pos)
        return 0 < distance <= self.remaining_movement

    def move_to(self, position: PositionLike) -> bool:
        """Move and pay the Chebyshev distance from remaining movement.

        Returns:
            False (and nothing changes) if the move is not allowed
        """
        pos = as_vector(position)
        if not self.can_move_to(pos):
            return False

        cost = chebyshev_distance(self.position, pos)
        if self.board is not None:
            if not self.board.move_unit(self, pos):
                return False
        else:
            self.position = pos

        self.movement_used += cost
        self.has_moved_this_turn = True
        return True

    def update_position(self, position: Vector2, board: Optional["Board"] = None) -> None:
        """Update the stored position. Does NOT update board occupancy.

        Only the Board calls this; external code moves units through
        move_to() or board.move_unit().
        """
        self.position = position
        if board is not None:
            self.board = board

    def detach_from_board(self, board: "Board") -> None:
        if self.board is board:
            self.board = None

    # ============== Combat ==============

    def snapshot(self) -> CombatSnapshot:
        """Frozen view handed to the resolver."""
        return CombatSnapshot(
            stats=self.stats,
            current_hp=self.current_hp,
            max_hp=self.max_hp,
            unit_id=self.unit_id,
        )

    def basic_attack_action(self) -> ActionDescriptor:
        """The weapon (or unarmed) attack, including weapon-power modifiers."""
        return ActionDescriptor.basic_attack(self.weapon, self.weapon_power_bonus)

    def is_enemy_of(self, other: "UnitState") -> bool:
        return self.owner != other.owner

    def can_attack(self) -> bool:
        return not self.has_attacked_this_turn and not self.is_defeated()

    def can_attack_target(self, target: "UnitState") -> bool:
        if not self.can_attack() or not self.is_enemy_of(target) or target.is_defeated():
            return False
        return chebyshev_distance(self.position, target.position) <= self.attack_range

    def attack(self, target: "UnitState", resolver: CombatResolver) -> CombatOutcome:
        """Basic attack against target; commits the outcome onto the target.

        A unit that already attacked this turn gets a rejected outcome without
        any roll being drawn. Range failures are rejected the same way. Hits
        and misses both use up the attack.

        Args:
            target: Unit being attacked
            resolver: Resolver of the match; its random source supplies the rolls

        Returns:
            The resolved (or rejected) CombatOutcome, already committed
        """
        action = self.basic_attack_action()
        target_snapshot = target.snapshot()

        if self.has_attacked_this_turn:
            return resolver.reject(action, target_snapshot, f"{self.unit_id} has already attacked this turn")
        if self.is_defeated():
            return resolver.reject(action, target_snapshot, f"{self.unit_id} is defeated")
        if not self.is_enemy_of(target):
            return resolver.reject(action, target_snapshot, f"{target.unit_id} is not an enemy")
        if target.is_defeated():
            return resolver.reject(action, target_snapshot, f"{target.unit_id} is already defeated")
        distance = chebyshev_distance(self.position, target.position)
        if distance > self.attack_range:
            return resolver.reject(
                action, target_snapshot,
                f"target out of range (distance {distance}, range {self.attack_range})"
            )

        outcome = resolver.resolve(
            action, self.snapshot(), target_snapshot, positions=(self.position, target.position)
        )
        if not outcome.rejected:
            self.has_attacked_this_turn = True
        target.apply_outcome(outcome)
        return outcome

    def perform(self, action: ActionDescriptor, target: "UnitState", resolver: CombatResolver) -> CombatOutcome:
        """Resolve an action card (spell, heal) on target and commit it.

        Unlike attack(), this does not consume the unit's attack for the turn.
        """
        outcome = resolver.resolve(
            action, self.snapshot(), target.snapshot(), positions=(self.position, target.position)
        )
        target.apply_outcome(outcome)
        return outcome

    def apply_outcome(self, outcome: CombatOutcome) -> None:
        """Commit a resolved outcome in which this unit was the target."""
        if not outcome.success:
            return
        if outcome.is_heal:
            self.heal(outcome.amount)
        else:
            self.take_damage(outcome.amount)

    def take_damage(self, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"Damage must be non-negative, got {amount}")
        self.current_hp = max(0, self.current_hp - amount)

    def heal(self, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"Heal amount must be non-negative, got {amount}")
        self.current_hp = min(self.max_hp, self.current_hp + amount)

    def is_defeated(self) -> bool:
        return self.current_hp <= 0

    # ============== Turn Flags ==============

    def restore_movement(self) -> None:
        self.movement_used = 0

    def grant_attack(self) -> None:
        self.has_attacked_this_turn = False

    def reset_turn_flags(self) -> None:
        """Turn boundary: clear per-turn flags and expire modifiers."""
        self.has_attacked_this_turn = False
        self.has_moved_this_turn = False
        self.movement_used = 0
        self._tick_modifiers()

    # ============== Display ==============

    def display_name(self) -> str:
        return f"L{self.level} {self.template.species.value} {self.role.name}"

    def status_text(self) -> str:
        return f"{self.current_hp}/{self.max_hp} HP"

    def __repr__(self) -> str:
        return (
            f"UnitState({self.unit_id!r}, {self.display_name()}, {self.owner.name}, "
            f"({self.position.x}, {self.position.y}), {self.status_text()})"
        )
