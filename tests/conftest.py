"""
Basic test fixtures for the summoners_grid test suite.

Provides small hand-built templates with zero growth so that a unit's stats
equal its base stats, plus the packaged demo catalog.
"""

import sys
import os
import pytest

# Add the project root to the Python path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

from summoners_grid.core.config import RulesConfig
from summoners_grid.core.data import EquipmentSlot, RoleFamily, Side, Species, WeaponType
from summoners_grid.core.events import EventManager
from summoners_grid.game.board import Board
from summoners_grid.game.catalog import Catalog
from summoners_grid.game.combat_resolver import CombatResolver, ReplayRandomSource
from summoners_grid.game.stats import StatFractions, Stats
from summoners_grid.game.templates import BaseUnitTemplate, EquipmentItem, RoleTemplate
from summoners_grid.game.unit_state import UnitState


class TestDataBuilder:
    """Builders for hand-made catalog records."""

    @staticmethod
    def template(template_id="test-summon", equipment=(), growth=None, **base):
        return BaseUnitTemplate(
            template_id=template_id,
            name="Test Summon",
            species=Species.GIGNEN,
            base_stats=Stats(**base),
            growth_rates=growth or StatFractions(),
            equipment=tuple(equipment),
        )

    @staticmethod
    def role(family=RoleFamily.WARRIOR, **modifiers):
        return RoleTemplate(
            role_id=f"test-{family.value.lower()}",
            name=family.value,
            family=family,
            stat_modifiers=StatFractions(**modifiers),
        )

    @staticmethod
    def sword(power=40, weapon_range=1):
        return EquipmentItem(
            item_id="test-sword",
            name="Test Sword",
            slot=EquipmentSlot.WEAPON,
            power=power,
            range=weapon_range,
            weapon_type=WeaponType.MELEE,
        )

    @staticmethod
    def bow(power=30, weapon_range=3):
        return EquipmentItem(
            item_id="test-bow",
            name="Test Bow",
            slot=EquipmentSlot.WEAPON,
            power=power,
            range=weapon_range,
            weapon_type=WeaponType.BOW,
        )

    @staticmethod
    def unit(unit_id, owner=Side.PLAYER_A, position=(0, 0), equipment=(), family=RoleFamily.WARRIOR, **base):
        base.setdefault("endurance", 13)
        return UnitState(
            unit_id,
            TestDataBuilder.template(equipment=equipment, **base),
            TestDataBuilder.role(family),
            owner,
            position,
            level=0,
        )


@pytest.fixture
def event_manager():
    """Create an event manager for testing."""
    return EventManager(enable_debug_logging=False)


@pytest.fixture
def board():
    """Reference-size 14x12 board."""
    return Board()


@pytest.fixture
def small_board():
    """Create a small 5x5 board for testing."""
    return Board(width=5, height=5, territory_rows=1)


@pytest.fixture
def catalog():
    """The packaged demo catalog."""
    return Catalog.from_yaml()


@pytest.fixture
def rules():
    return RulesConfig()


def replay_resolver(*rolls):
    """Resolver that draws the given rolls in order."""
    return CombatResolver(ReplayRandomSource(rolls))
