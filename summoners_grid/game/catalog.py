"""Content catalog loading.

The catalog holds the immutable records a match is set up from: summon
templates, roles, equipment and action cards. It is loaded from a YAML file
(the packaged demo catalog by default) once per match setup and never
mutated afterwards.
"""

import os
from pathlib import Path
from typing import Any, Optional

import yaml

from ..core.data import (
    ActionKind,
    Attribute,
    EquipmentSlot,
    RoleFamily,
    Species,
    StatName,
    WeaponType,
)
from .effects import EFFECT_TYPES, Effect
from .stats import ModifierExpiry, StatFractions, Stats
from .templates import ActionDescriptor, BaseUnitTemplate, EquipmentItem, RoleTemplate


DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent.parent / "assets" / "catalog.yaml"


class CatalogError(KeyError):
    """Unknown catalog id: corrupted catalog data or caller misuse."""


# Effect fields that hold enums, and how to parse them
_EFFECT_FIELD_PARSERS = {
    "kind": lambda value: ActionKind[value],
    "attribute": Attribute,
    "stat": StatName,
    "expiry": lambda value: ModifierExpiry[value],
}


def _parse_effect(data: dict[str, Any]) -> Effect:
    params = dict(data)
    effect_type = params.pop("type")
    effect_class = EFFECT_TYPES[effect_type]
    for key, parser in _EFFECT_FIELD_PARSERS.items():
        if key in params:
            params[key] = parser(params[key])
    return effect_class(**params)


class Catalog:
    """Read-only lookup of catalog records by id."""

    def __init__(self, data: dict[str, Any], source: str = "<memory>"):
        """Parse raw catalog data.

        Raises:
            ValueError: If the data is malformed or references unknown ids
        """
        self.source = source
        try:
            self.equipment: dict[str, EquipmentItem] = {
                str(item_id): self._parse_equipment(str(item_id), item)
                for item_id, item in (data.get("equipment") or {}).items()
            }
            self.roles: dict[str, RoleTemplate] = {
                str(role_id): self._parse_role(str(role_id), role)
                for role_id, role in (data.get("roles") or {}).items()
            }
            self.templates: dict[str, BaseUnitTemplate] = {
                str(template_id): self._parse_template(str(template_id), template)
                for template_id, template in (data.get("summons") or {}).items()
            }
            self.actions: dict[str, ActionDescriptor] = {
                str(action_id): self._parse_action(str(action_id), action)
                for action_id, action in (data.get("actions") or {}).items()
            }
        except CatalogError as e:
            raise ValueError(f"Invalid reference in catalog {source}: {e}")
        except KeyError as e:
            raise ValueError(f"Invalid catalog structure in {source}: missing or unknown key {e}")
        except (TypeError, AttributeError) as e:
            raise ValueError(f"Invalid catalog entry in {source}: {e}")

    @classmethod
    def from_yaml(cls, path: Optional[str] = None) -> "Catalog":
        """Load a catalog from YAML (the packaged demo catalog by default)."""
        yaml_path = path or str(DEFAULT_CATALOG_PATH)
        if not os.path.exists(yaml_path):
            raise FileNotFoundError(f"Catalog file not found: {yaml_path}")

        with open(yaml_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

        if not isinstance(data, dict):
            raise ValueError(f"Invalid catalog structure in {yaml_path}: expected a mapping")
        return cls(data, source=yaml_path)

    # ============== Parsing ==============

    def _parse_equipment(self, item_id: str, data: dict[str, Any]) -> EquipmentItem:
        weapon_type = data.get("weapon_type")
        return EquipmentItem(
            item_id=item_id,
            name=data["name"],
            slot=EquipmentSlot(data["slot"]),
            power=int(data.get("power", 0)),
            range=int(data.get("range", 1)),
            attribute=Attribute(data.get("attribute", Attribute.NEUTRAL.value)),
            weapon_type=WeaponType(weapon_type) if weapon_type else None,
            stat_bonuses=Stats.from_dict(data.get("stat_bonuses") or {}),
        )

    def _parse_role(self, role_id: str, data: dict[str, Any]) -> RoleTemplate:
        return RoleTemplate(
            role_id=role_id,
            name=data["name"],
            family=RoleFamily(data["family"]),
            stat_modifiers=StatFractions.from_dict(data.get("stat_modifiers") or {}),
            tier=int(data.get("tier", 1)),
        )

    def _parse_template(self, template_id: str, data: dict[str, Any]) -> BaseUnitTemplate:
        return BaseUnitTemplate(
            template_id=template_id,
            name=data["name"],
            species=Species(data["species"]),
            base_stats=Stats.from_dict(data["base_stats"]),
            growth_rates=StatFractions.from_dict(data["growth_rates"]),
            equipment=tuple(self.get_equipment(str(item_id)) for item_id in data.get("equipment") or ()),
        )

    def _parse_action(self, action_id: str, data: dict[str, Any]) -> ActionDescriptor:
        required_family = data.get("required_family")
        weapon_id = data.get("weapon")
        base_accuracy = data.get("base_accuracy")
        return ActionDescriptor(
            action_id=action_id,
            name=data["name"],
            kind=ActionKind[data["kind"]],
            power=int(data.get("power", 0)),
            base_accuracy=int(base_accuracy) if base_accuracy is not None else None,
            attribute=Attribute(data.get("attribute", Attribute.NEUTRAL.value)),
            weapon=self.get_equipment(str(weapon_id)) if weapon_id is not None else None,
            required_family=RoleFamily(required_family) if required_family else None,
            effects=tuple(_parse_effect(effect) for effect in data.get("effects") or ()),
            description=data.get("description", ""),
        )

    # ============== Lookups ==============

    def get_equipment(self, item_id: str) -> EquipmentItem:
        if item_id not in self.equipment:
            raise CatalogError(f"No equipment with id {item_id!r}")
        return self.equipment[item_id]

    def get_role(self, role_id: str) -> RoleTemplate:
        if role_id not in self.roles:
            raise CatalogError(f"No role with id {role_id!r}")
        return self.roles[role_id]

    def get_template(self, template_id: str) -> BaseUnitTemplate:
        if template_id not in self.templates:
            raise CatalogError(f"No summon template with id {template_id!r}")
        return self.templates[template_id]

    def get_action(self, action_id: str) -> ActionDescriptor:
        if action_id not in self.actions:
            raise CatalogError(f"No action with id {action_id!r}")
        return self.actions[action_id]

    def find_role(self, name: str) -> RoleTemplate:
        """Role by display name (e.g. "Warrior")."""
        for role in self.roles.values():
            if role.name == name:
                return role
        raise CatalogError(f"No role named {name!r}")
