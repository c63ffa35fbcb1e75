"""
Unit tests for the CombatResolver.

Tests every stage of the pipeline with recorded rolls, the damage formulas,
and the random sources.
"""
import pytest
import numpy as np

from summoners_grid.core.config import RulesConfig
from summoners_grid.core.data import ActionKind, EquipmentSlot
from summoners_grid.game.combat_resolver import (
    CombatResolver,
    CombatSnapshot,
    ReplayRandomSource,
    SeededRandomSource,
    UniformRandomSource,
    bow_damage,
    calculate_crit_chance,
    calculate_to_hit,
    effective_power,
    healing_amount,
    magical_damage,
    physical_damage,
    stable_hash,
    unarmed_damage,
)
from summoners_grid.game.stats import Stats
from summoners_grid.game.templates import ActionDescriptor, EquipmentItem
from tests.conftest import TestDataBuilder, replay_resolver


def sword_attack(power=40, weapon_range=1):
    return ActionDescriptor.basic_attack(TestDataBuilder.sword(power, weapon_range))


def target_snapshot(hp=100, **stats):
    return CombatSnapshot(stats=Stats(**stats), current_hp=hp, max_hp=100, unit_id="target")


class TestFormulas:
    """Test the pure formula functions."""

    def test_to_hit(self):
        assert calculate_to_hit(12, 85) == pytest.approx(86.2)
        assert calculate_to_hit(100, 90, cap=95) == 95

    def test_crit_chance_reference(self):
        """lck 19 gives floor(8.0625) = 8."""
        assert calculate_crit_chance(19) == 8
        assert calculate_crit_chance(0) == 1

    def test_physical_reference(self):
        attacker, target = Stats(strength=18), Stats(defense=15)
        assert physical_damage(attacker, target, 40) == 30
        assert physical_damage(attacker, target, 40, crit_multiplier=1.5) == 45

    def test_bow(self):
        # (18 + 12) / 2 * 1.3 * 1.2 = 23.4
        assert bow_damage(Stats(strength=18, accuracy=12), Stats(defense=15), 30) == 23

    def test_magical(self):
        # 20 * 1.6 * (20 / 15) = 42.67
        assert magical_damage(Stats(intelligence=20), Stats(magic_defense=15), 60) == 42

    def test_healing(self):
        # 21 * 1.4 = 29.4
        assert healing_amount(Stats(spirit=21), 40) == 29

    def test_unarmed(self):
        # 18 * 0.5 * 1.2 = 10.8
        assert unarmed_damage(Stats(strength=18), Stats(defense=15)) == 10

    def test_zero_defense_counts_as_one(self):
        assert unarmed_damage(Stats(strength=10), Stats(defense=0)) == 50
        assert magical_damage(Stats(intelligence=10), Stats(magic_defense=0), 0) == 100

    def test_effective_power(self):
        sword = TestDataBuilder.sword(power=40)
        assert effective_power(ActionDescriptor.basic_attack(sword, power_bonus=10)) == 50
        heal = ActionDescriptor("h", "Heal", ActionKind.HEAL, power=40, weapon=sword)
        assert effective_power(heal) == 40


class TestHitStage:
    """Test the hit roll."""

    def test_reference_threshold(self):
        """acc 12 with base 85: roll 86 misses and roll 85 hits."""
        action = ActionDescriptor("strike", "Strike", ActionKind.BASIC_ATTACK, base_accuracy=85,
                                  weapon=TestDataBuilder.sword())
        attacker = Stats(strength=18, accuracy=12)

        miss = replay_resolver(86).resolve(action, attacker, target_snapshot(defense=15))
        assert not miss.success
        assert not miss.hit
        assert miss.hit_result.to_hit == pytest.approx(86.2)

        hit = replay_resolver(85, 99).resolve(action, attacker, target_snapshot(defense=15))
        assert hit.success
        assert hit.hit

    def test_miss_leaves_hp_and_skips_crit_roll(self):
        source = ReplayRandomSource([99, 0])
        resolver = CombatResolver(source)
        outcome = resolver.resolve(sword_attack(), Stats(strength=18), target_snapshot(hp=70, defense=15))

        assert not outcome.success
        assert not outcome.rejected
        assert outcome.resulting_hp == 70
        assert outcome.amount == 0
        assert not outcome.defeated
        assert source.remaining == 1
        assert outcome.log[-1] == "Hit chance: 90.0%, rolled: 99 - MISS"

    def test_hit_chance_capped(self):
        attacker = Stats(strength=18, accuracy=100)
        assert not replay_resolver(95).resolve(sword_attack(), attacker, target_snapshot(defense=15)).hit
        assert replay_resolver(94, 99).resolve(sword_attack(), attacker, target_snapshot(defense=15)).hit

    def test_cap_can_be_disabled(self):
        resolver = CombatResolver(ReplayRandomSource([98, 99]), RulesConfig(hit_chance_cap=None))
        outcome = resolver.resolve(sword_attack(), Stats(strength=18, accuracy=100), target_snapshot(defense=15))
        assert outcome.hit

    def test_heals_ignore_hit_cap(self):
        heal = ActionDescriptor("heal", "Healing Hands", ActionKind.HEAL, power=40, base_accuracy=100)
        resolver = replay_resolver(99, 99)
        assert resolver.to_hit_for(heal, Stats()) == 100
        outcome = resolver.resolve(heal, Stats(spirit=21), target_snapshot(hp=50))
        assert outcome.hit
        assert outcome.resulting_hp == 79

    def test_unarmed_default_accuracy(self):
        resolver = CombatResolver()
        unarmed = ActionDescriptor.basic_attack(None)
        assert resolver.base_accuracy_for(unarmed) == 85
        assert resolver.base_accuracy_for(sword_attack()) == 90


class TestCriticalStage:
    """Test the critical roll and damage stage."""

    @pytest.mark.parametrize("roll,critical", [(0, True), (7, True), (8, False), (99, False)])
    def test_crit_threshold(self, roll, critical):
        outcome = replay_resolver(0, roll).resolve(
            sword_attack(), Stats(strength=18, luck=19), target_snapshot(defense=15)
        )
        assert outcome.critical is critical
        assert outcome.amount == (45 if critical else 30)

    def test_physical_outcome(self):
        outcome = replay_resolver(0, 99).resolve(sword_attack(), Stats(strength=18), target_snapshot(defense=15))
        assert outcome.success
        assert outcome.damage_or_heal == 30
        assert outcome.resulting_hp == 70
        assert outcome.hp_change == -30
        assert outcome.kind is ActionKind.BASIC_ATTACK
        assert outcome.log == (
            "Hit chance: 90.0%, rolled: 0 - HIT",
            "Critical chance: 1%, rolled: 99 - NORMAL",
            "Physical damage: 30 (power: 40)",
            "Target HP: 100 -> 70",
        )

    def test_unarmed_ignores_crit_multiplier(self):
        outcome = replay_resolver(0, 0).resolve(
            ActionDescriptor.basic_attack(None), Stats(strength=18), target_snapshot(defense=15)
        )
        assert outcome.critical
        assert outcome.amount == 10

    def test_unarmed_crits_when_enabled(self):
        resolver = CombatResolver(ReplayRandomSource([0, 0]), RulesConfig(unarmed_crits=True))
        outcome = resolver.resolve(ActionDescriptor.basic_attack(None), Stats(strength=18), target_snapshot(defense=15))
        # 18 * 0.5 * 1.2 * 1.5 = 16.2
        assert outcome.amount == 16

    def test_bow_uses_bow_formula(self):
        action = ActionDescriptor.basic_attack(TestDataBuilder.bow(power=30))
        outcome = replay_resolver(0, 99).resolve(action, Stats(strength=18, accuracy=12), target_snapshot(defense=15))
        assert outcome.kind is ActionKind.BOW_ATTACK
        assert outcome.amount == 23


class TestApplicationStage:
    """Test hp clamping and the defeat boundary."""

    def test_exact_lethal_damage_defeats(self):
        outcome = replay_resolver(0, 99).resolve(sword_attack(), Stats(strength=18), target_snapshot(hp=30, defense=15))
        assert outcome.resulting_hp == 0
        assert outcome.defeated
        assert outcome.log[-1] == "Target defeated! (HP: 30 -> 0)"

    def test_one_hp_left_survives(self):
        outcome = replay_resolver(0, 99).resolve(sword_attack(), Stats(strength=18), target_snapshot(hp=31, defense=15))
        assert outcome.resulting_hp == 1
        assert not outcome.defeated

    def test_overkill_clamped_to_zero(self):
        outcome = replay_resolver(0, 99).resolve(sword_attack(), Stats(strength=18), target_snapshot(hp=5, defense=15))
        assert outcome.resulting_hp == 0
        assert outcome.amount == 30

    def test_heal_clamped_to_max(self):
        heal = ActionDescriptor("heal", "Healing Hands", ActionKind.HEAL, power=40)
        outcome = replay_resolver(0, 99).resolve(heal, Stats(spirit=21), target_snapshot(hp=90))
        assert outcome.is_heal
        assert outcome.amount == 29
        assert outcome.hp_change == 29
        assert outcome.resulting_hp == 100
        assert "Healing: 29 (base power: 40)" in outcome.log


class TestTargetValidation:
    """Test the range stage and rejections."""

    def test_out_of_range_draws_no_roll(self):
        source = ReplayRandomSource([0, 0])
        outcome = CombatResolver(source).resolve(
            sword_attack(weapon_range=1), Stats(strength=18), target_snapshot(defense=15),
            positions=((0, 0), (3, 0))
        )
        assert not outcome.success
        assert outcome.log == ("Attack failed: Target out of range (distance 3, range 1)",)
        assert source.remaining == 2

    def test_in_range_logged(self):
        outcome = replay_resolver(0, 99).resolve(
            sword_attack(weapon_range=2), Stats(strength=18), target_snapshot(defense=15),
            positions=((0, 0), (2, 2))
        )
        assert outcome.success
        assert outcome.log[0] == "Target in range (2)"

    def test_support_action_rejected(self):
        buff = ActionDescriptor("buff", "Sharpened Blade", ActionKind.SUPPORT)
        outcome = CombatResolver(ReplayRandomSource([])).resolve(buff, Stats(), target_snapshot())
        assert outcome.rejected
        assert not outcome.success

    def test_bare_stats_target_raises_before_rolling(self):
        """Only snapshots carry hp, so bare stats are refused before any draw."""
        source = SeededRandomSource("strict-target")
        resolver = CombatResolver(source)
        with pytest.raises(TypeError):
            resolver.resolve(sword_attack(), Stats(strength=18), Stats(defense=15))
        assert source.counter == 0

    def test_reject(self):
        outcome = CombatResolver().reject(sword_attack(), target_snapshot(hp=40), "already attacked")
        assert outcome.rejected
        assert outcome.resulting_hp == 40
        assert outcome.log == ("Action rejected: already attacked",)


class TestRandomSources:
    """Test the random sources."""

    def test_stable_hash_matches_known_values(self):
        assert stable_hash("a1") == 3056
        assert stable_hash("hello") == 99162322
        assert stable_hash("") == 0

    def test_stable_hash_wraps_to_signed_32_bits(self):
        value = stable_hash("a much longer seed string that overflows")
        assert -2**31 <= value < 2**31

    def test_seeded_sequence(self):
        source = SeededRandomSource("a")
        assert [source.roll(), source.roll()] == [56, 57]
        assert source.counter == 2

    def test_same_seed_same_sequence(self):
        first = SeededRandomSource("match-42")
        second = SeededRandomSource("match-42")
        rolls = [first.roll() for _ in range(50)]
        assert rolls == [second.roll() for _ in range(50)]
        assert all(0 <= r < 100 for r in rolls)

    def test_seeded_resolver_replays(self):
        def run():
            resolver = CombatResolver.seeded("replay-seed")
            return [
                resolver.resolve(sword_attack(), Stats(strength=18, luck=19), target_snapshot(defense=15))
                for _ in range(10)
            ]
        assert run() == run()
        assert CombatResolver.seeded("x").is_deterministic
        assert not CombatResolver().is_deterministic

    def test_uniform_source_range(self):
        source = UniformRandomSource(np.random.default_rng(7))
        assert all(0 <= source.roll() < 100 for _ in range(200))

    def test_replay_exhausted(self):
        source = ReplayRandomSource([5])
        assert source.roll() == 5
        with pytest.raises(IndexError):
            source.roll()

    def test_replay_rejects_out_of_range(self):
        with pytest.raises(ValueError):
            ReplayRandomSource([100]).roll()
