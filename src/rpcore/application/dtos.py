from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from rpcore.domain.models.effect import ActiveEffect, EffectDefinition
from rpcore.domain.models.stats import CharacterProfile, LiveStats


@dataclass(frozen=True)
class CombatantState:
    profile: CharacterProfile
    active_effects: Tuple[ActiveEffect, ...] = ()
    live_stats: Optional[LiveStats] = None


@dataclass(frozen=True)
class AttackConfig:
    attack_type: str
    weapon_type: str


@dataclass(frozen=True)
class WeaponValidation:
    valid: bool
    error: Optional[str] = None


@dataclass(frozen=True)
class EffectResult:
    effect_id: str
    success: bool
    definition: Optional[EffectDefinition] = None
    damage: int = 0
    heal: int = 0
    roll_info: str = ""

    @property
    def target(self) -> str:
        return self.definition.target if self.definition else "self"


@dataclass(frozen=True)
class EffectContribution:
    name: str
    value: int


@dataclass(frozen=True)
class StatBreakdown:
    stat: str
    base_value: int
    stat_value_contributions: Tuple[EffectContribution, ...]
    effective_value: int
    tier_modifier: int
    roll_bonus_contributions: Tuple[EffectContribution, ...]
    roll_bonus: int
    total: int
    formatted: str


@dataclass(frozen=True)
class DefenseBreakdown:
    base_target_number: int
    stat: StatBreakdown
    target_number: int
    formatted: str


@dataclass(frozen=True)
class AttackOutcome:
    attacker_name: str
    defender_name: str
    policy: str
    hit: bool
    is_critical_hit: bool
    is_critical_miss: bool
    attacker_roll: int
    attack_modifier: int
    skill_bonus: int
    attacker_total: int
    defender_roll: Optional[int]
    defense_modifier: int
    defender_total: int
    attacker_breakdown: str
    defender_breakdown: str
    base_damage: int = 0
    stat_damage_bonus: int = 0
    damage_reduction: int = 0
    damage: int = 0
    message: str = ""


@dataclass(frozen=True)
class AttackResolution:
    success: bool
    outcome: Optional[AttackOutcome] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class TurnResult:
    effects: Tuple[ActiveEffect, ...]
    live_stats: LiveStats
    healing_applied: int
    heal_effect_names: Tuple[str, ...] = ()

    def apply_healing(self, hp_current: int, hp_max: int) -> int:
        return max(0, min(hp_max, hp_current + self.healing_applied))


@dataclass(frozen=True)
class SceneClearResult:
    effects: Tuple[ActiveEffect, ...]
    live_stats: LiveStats
