from __future__ import annotations

from typing import List, Sequence

from rpcore.application.dtos import DefenseBreakdown, EffectContribution, StatBreakdown
from rpcore.application.services.balance_tables import DEFAULT_TARGET_NUMBER
from rpcore.domain.models.effect import ActiveEffect, EffectCategory, ModifierType
from rpcore.domain.models.ruleset import Ruleset
from rpcore.domain.models.stats import (
    CharacterProfile,
    LiveStats,
    canonical_stat,
    display_stat,
    stat_tier_modifier,
)
from rpcore.domain.repositories import EffectCatalogue

UNATTRIBUTED_CONTRIBUTION = "Other"


def effective_stat_modifier(profile: CharacterProfile, live_stats: LiveStats, stat: str) -> int:
    effective_value = profile.attribute(stat) + live_stats.stat_value(stat)
    return stat_tier_modifier(effective_value) + live_stats.roll_bonus(stat)


def _format_contribution(contribution: EffectContribution) -> str:
    if contribution.value >= 0:
        return f"+{contribution.name}({contribution.value})"
    return f"{contribution.name}({contribution.value})"


def _with_residual(contributions: List[EffectContribution], channel_total: int) -> tuple[EffectContribution, ...]:
    residual = channel_total - sum(item.value for item in contributions)
    if residual:
        contributions.append(EffectContribution(name=UNATTRIBUTED_CONTRIBUTION, value=residual))
    return tuple(contributions)


def detailed_stat_calculation(
    profile: CharacterProfile,
    live_stats: LiveStats,
    stat: str,
    effects: Sequence[ActiveEffect],
    catalogue: EffectCatalogue,
    ruleset: Ruleset,
) -> StatBreakdown:
    """Explain a stat modifier effect by effect.

    Channel totals are read from ``live_stats`` exactly as
    :func:`effective_stat_modifier` reads them; whatever the listed effects do
    not account for is reported as an ``Other`` contribution, so ``total``
    always equals the terse modifier.
    """
    key = canonical_stat(stat)
    stat_value_items: List[EffectContribution] = []
    roll_bonus_items: List[EffectContribution] = []
    for effect in effects:
        definition = catalogue.get_effect_definition(effect.effect_id)
        if definition is None or definition.category != EffectCategory.STAT_MODIFIER:
            continue
        if key not in ruleset.expand_stat(definition.stat) or not definition.modifier:
            continue
        item = EffectContribution(name=effect.display_name, value=definition.modifier)
        if definition.effective_modifier_type == ModifierType.ROLL_BONUS:
            roll_bonus_items.append(item)
        else:
            stat_value_items.append(item)

    base_value = profile.attribute(key)
    stat_values = _with_residual(stat_value_items, live_stats.stat_value(key))
    roll_bonuses = _with_residual(roll_bonus_items, live_stats.roll_bonus(key))
    effective_value = base_value + live_stats.stat_value(key)
    tier = stat_tier_modifier(effective_value)
    roll_bonus = live_stats.roll_bonus(key)

    label = display_stat(key)
    if stat_values:
        parts = " ".join(_format_contribution(item) for item in stat_values)
        formatted = f"{label}[{base_value} {parts} ={effective_value}]({tier:+d})"
    else:
        formatted = f"{label}[{base_value}]({tier:+d})"
    if roll_bonuses:
        formatted += " " + " ".join(_format_contribution(item) for item in roll_bonuses)

    return StatBreakdown(
        stat=key,
        base_value=base_value,
        stat_value_contributions=stat_values,
        effective_value=effective_value,
        tier_modifier=tier,
        roll_bonus_contributions=roll_bonuses,
        roll_bonus=roll_bonus,
        total=tier + roll_bonus,
        formatted=formatted,
    )


def detailed_defense_calculation(
    profile: CharacterProfile,
    live_stats: LiveStats,
    stat: str,
    effects: Sequence[ActiveEffect],
    catalogue: EffectCatalogue,
    ruleset: Ruleset,
    base_target_number: int = DEFAULT_TARGET_NUMBER,
) -> DefenseBreakdown:
    breakdown = detailed_stat_calculation(profile, live_stats, stat, effects, catalogue, ruleset)
    target_number = base_target_number + breakdown.total
    return DefenseBreakdown(
        base_target_number=base_target_number,
        stat=breakdown,
        target_number=target_number,
        formatted=f"{base_target_number} + {breakdown.formatted} = {target_number}",
    )
