from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Tuple

from rpcore.domain.models.stats import canonical_stat


@dataclass(frozen=True)
class AttackProfile:
    attack_stat: str
    defense_stat: str
    damage_stat: str
    skill_id: str


@dataclass(frozen=True)
class WeaponProfile:
    base_damage: int
    ranged: bool = False


@dataclass(frozen=True)
class Ruleset:
    key: str
    display_name: str
    stat_names: Tuple[str, ...]
    attack_profiles: Mapping[str, AttackProfile]
    weapon_profiles: Mapping[str, WeaponProfile]
    default_policy: str
    catalogue_table: str
    catalogue_type_column: str
    reset_values: Mapping[str, Any] = field(default_factory=dict)

    def expand_stat(self, stat: str | None) -> Tuple[str, ...]:
        key = canonical_stat(stat)
        if not key:
            return ()
        if key == "all":
            return self.stat_names
        return (key,)

    def knows_stat(self, stat: str | None) -> bool:
        return canonical_stat(stat) in self.stat_names

    def attack_profile(self, attack_type: str) -> Optional[AttackProfile]:
        return self.attack_profiles.get(attack_type)

    def weapon_profile(self, weapon_type: str) -> Optional[WeaponProfile]:
        return self.weapon_profiles.get(weapon_type)
