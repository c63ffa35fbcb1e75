"""Rules configuration loader.

The numeric rules of the kernel (board size, territory depth, accuracy
defaults, critical multiplier, hit cap) live in a YAML file so that variant
rule sets can be tried without touching the engine. Defaults match the
reference game.
"""

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

import yaml


DEFAULT_RULES_PATH = Path(__file__).resolve().parent.parent / "assets" / "rules.yaml"


@dataclass(frozen=True)
class RulesConfig:
    """Tunable constants of the rules kernel."""

    board_width: int = 14
    board_height: int = 12
    # Depth in rows of each side's home zone
    territory_rows: int = 3
    starting_level: int = 5
    crit_multiplier: float = 1.5
    # None disables the cap
    hit_chance_cap: Optional[float] = 95.0
    weapon_base_accuracy: int = 90
    unarmed_base_accuracy: int = 85
    unarmed_power_factor: float = 0.5
    unarmed_crits: bool = False

    def __post_init__(self):
        if self.board_width <= 0 or self.board_height <= 0:
            raise ValueError(
                f"Board dimensions must be positive, got {self.board_width}x{self.board_height}"
            )
        if self.territory_rows < 0 or 2 * self.territory_rows > self.board_height:
            raise ValueError(
                f"territory_rows={self.territory_rows} does not fit a board of height {self.board_height}"
            )
        if self.starting_level < 0:
            raise ValueError(f"starting_level must be non-negative, got {self.starting_level}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RulesConfig":
        """Build a config from a mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown rules keys: {', '.join(sorted(unknown))}")
        return cls(**data)

    @classmethod
    def from_yaml(cls, path: Optional[str] = None) -> "RulesConfig":
        """Load rules from a YAML file (the packaged rules.yaml by default)."""
        yaml_path = path or str(DEFAULT_RULES_PATH)
        if not os.path.exists(yaml_path):
            raise FileNotFoundError(f"Rules file not found: {yaml_path}")

        with open(yaml_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Invalid rules structure in {yaml_path}: expected a mapping")
        return cls.from_dict(data.get("rules", data))


DEFAULT_RULES = RulesConfig()
