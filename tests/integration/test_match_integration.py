"""
Integration tests for a full match.

Exercises summoning from the demo catalog, movement, combat, action cards,
events and logging together through the Match object.
"""
import pytest
from unittest.mock import Mock

from summoners_grid.core.data import Side, Vector2
from summoners_grid.core.events import EventType
from summoners_grid.game.combat_resolver import CombatResolver, ReplayRandomSource
from summoners_grid.game.log_manager import LogCategory
from summoners_grid.game.match import Match


@pytest.fixture
def match():
    return Match(resolver=CombatResolver(ReplayRandomSource([0, 99] * 20)))


@pytest.fixture
def lineup(match, catalog):
    """A warrior and magician for A facing a scout for B."""
    warrior = match.summon("a-warrior", catalog.get_template("demo-gignen-warrior"),
                           catalog.get_role("020"), Side.PLAYER_A, (5, 2))
    magician = match.summon("a-magician", catalog.get_template("demo-gignen-magician"),
                            catalog.get_role("021"), Side.PLAYER_A, (6, 2))
    scout = match.summon("b-scout", catalog.get_template("demo-gignen-scout"),
                         catalog.get_role("022"), Side.PLAYER_B, (5, 9))
    return warrior, magician, scout


class TestSummoning:
    """Test match setup."""

    def test_summon_places_units(self, match, lineup):
        warrior, magician, scout = lineup
        assert match.board.get_unit_at(5, 2) is warrior
        assert match.units_of(Side.PLAYER_A) == [warrior, magician]
        assert match.units_of(Side.PLAYER_B) == [scout]
        assert match.get_unit("b-scout") is scout
        assert warrior.level == 5

    def test_summon_outside_territory_fails(self, match, catalog):
        unit = match.summon("a-1", catalog.get_template("demo-gignen-warrior"),
                            catalog.get_role("020"), Side.PLAYER_A, (5, 5))
        assert unit is None
        assert match.board.list_units() == []

    def test_summon_duplicate_id_or_cell_fails(self, match, catalog, lineup):
        template, role = catalog.get_template("demo-gignen-warrior"), catalog.get_role("020")
        assert match.summon("a-warrior", template, role, Side.PLAYER_A, (0, 0)) is None
        assert match.summon("a-other", template, role, Side.PLAYER_A, (5, 2)) is None

    def test_summon_publishes_event(self, catalog):
        match = Match()
        subscriber = Mock()
        match.event_manager.subscribe(EventType.UNIT_PLACED, subscriber)
        match.summon("a-1", catalog.get_template("demo-gignen-warrior"),
                     catalog.get_role("020"), Side.PLAYER_A, (0, 0))
        subscriber.assert_called_once()
        assert subscriber.call_args[0][0].position == Vector2(0, 0)


class TestTurnFlow:
    """Test a few turns of play."""

    def test_move_and_attack(self, match, lineup):
        warrior, _, scout = lineup
        attacked = Mock()
        match.event_manager.subscribe(EventType.UNIT_ATTACKED, attacked)

        # Warrior speed 15 gives 3 points per turn
        assert match.move(warrior, (5, 4))
        assert not match.move(warrior, (5, 6))
        assert warrior.remaining_movement == 1
        match.reset_turn_flags(Side.PLAYER_A)
        assert match.move(scout, (5, 5))

        outcome = match.attack(warrior, scout)

        assert outcome.success
        assert scout.current_hp == scout.max_hp - outcome.amount
        attacked.assert_called_once()
        assert warrior.has_attacked_this_turn

        battle_lines = [m.text for m in match.log_manager.get_messages(categories={LogCategory.BATTLE})]
        assert battle_lines == list(outcome.log)

    def test_second_attack_rejected_until_reset(self, match, lineup):
        warrior, _, scout = lineup
        match.board.move_unit(scout, (5, 3))
        match.attack(warrior, scout)

        rejected = match.attack(warrior, scout)
        assert rejected.rejected

        match.reset_turn_flags(Side.PLAYER_A)
        assert match.attack(warrior, scout).success
        assert match.turn == 2

    def test_defeat_and_removal(self, match, lineup):
        warrior, _, scout = lineup
        defeated = Mock()
        match.event_manager.subscribe(EventType.UNIT_DEFEATED, defeated)
        match.board.move_unit(scout, (5, 3))
        scout.take_damage(scout.max_hp - 1)

        outcome = match.attack(warrior, scout)

        assert outcome.defeated
        assert scout.is_defeated()
        defeated.assert_called_once()
        assert match.remove_defeated() == [scout]
        assert match.board.get_unit_at(5, 3) is None
        assert match.units_of(Side.PLAYER_B) == []

    def test_level_up_event(self, match, lineup):
        warrior = lineup[0]
        leveled = Mock()
        match.event_manager.subscribe(EventType.UNIT_LEVELED_UP, leveled)
        match.level_up(warrior)
        assert warrior.level == 6
        event = leveled.call_args[0][0]
        assert (event.old_level, event.new_level) == (5, 6)


class TestActionCards:
    """Test demo action cards through the match."""

    def test_blast_bolt(self, match, catalog, lineup):
        _, magician, scout = lineup
        attacked = Mock()
        match.event_manager.subscribe(EventType.UNIT_ATTACKED, attacked)
        results = match.use_action(magician, catalog.get_action("001"), scout)
        assert results[0].success
        assert scout.current_hp == scout.max_hp - results[0].outcome.amount
        attacked.assert_called_once()
        # Card actions do not use up the basic attack
        assert magician.can_attack()

    def test_healing_hands(self, match, catalog, lineup):
        warrior, magician, _ = lineup
        healed = Mock()
        match.event_manager.subscribe(EventType.UNIT_HEALED, healed)
        warrior.take_damage(40)
        results = match.use_action(magician, catalog.get_action("006"), warrior)
        assert results[0].success
        assert warrior.current_hp == min(warrior.max_hp, warrior.max_hp - 40 + results[0].outcome.amount)
        healed.assert_called_once()

    def test_sharpened_blade_requires_warrior(self, match, catalog, lineup):
        warrior, magician, _ = lineup
        blade = catalog.get_action("005")
        assert not match.use_action(magician, blade, warrior)[0].success
        assert match.use_action(warrior, blade, warrior)[0].success
        assert warrior.basic_attack_action().power == 10
        match.reset_turn_flags(Side.PLAYER_A)
        assert warrior.basic_attack_action().power == 0

    def test_rush(self, match, catalog, lineup):
        _, _, scout = lineup
        match.move(scout, (5, 5))
        scout.has_attacked_this_turn = True
        match.use_action(scout, catalog.get_action("009"), scout)
        assert scout.remaining_movement == scout.movement_speed
        assert scout.can_attack()


class TestSeededMatches:
    """Test reproducibility of seeded matches."""

    def play(self, catalog, seed):
        match = Match(resolver=CombatResolver.seeded(seed))
        warrior = match.summon("a-warrior", catalog.get_template("demo-gignen-warrior"),
                               catalog.get_role("020"), Side.PLAYER_A, (5, 2))
        scout = match.summon("b-scout", catalog.get_template("demo-gignen-scout"),
                             catalog.get_role("022"), Side.PLAYER_B, (5, 9))
        match.board.move_unit(scout, (5, 3))
        outcomes = []
        for _ in range(5):
            outcomes.append(match.attack(warrior, scout))
            match.reset_turn_flags(Side.PLAYER_A)
        return [(o.hit, o.critical, o.amount, o.resulting_hp) for o in outcomes]

    def test_same_seed_same_match(self, catalog):
        assert self.play(catalog, "seed-1") == self.play(catalog, "seed-1")
