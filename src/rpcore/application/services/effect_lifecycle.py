from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from rpcore.application.dtos import EffectResult, SceneClearResult, TurnResult
from rpcore.domain.models.effect import (
    ActiveEffect,
    EffectCategory,
    ModifierType,
    SourceInfo,
    leading_integer,
    utc_timestamp,
)
from rpcore.domain.models.ruleset import Ruleset
from rpcore.domain.models.stats import CharacterProfile, LiveStats
from rpcore.domain.repositories import EffectCatalogue


class EffectLifecycleService:
    def __init__(
        self,
        catalogue: EffectCatalogue,
        ruleset: Ruleset,
        clock: Callable[[], str] = utc_timestamp,
    ) -> None:
        self.catalogue = catalogue
        self.ruleset = ruleset
        self.clock = clock
        self._logger = logging.getLogger(__name__)

    def apply_effect(
        self,
        current_effects: Sequence[ActiveEffect],
        effect_result: EffectResult,
        *,
        caster_name: Optional[str] = None,
        source: Optional[SourceInfo] = None,
    ) -> Tuple[ActiveEffect, ...]:
        """Store a successful effect, keeping one entry per effect id.

        An existing entry is only replaced when the new application lasts
        strictly longer; weaker or equal re-applications change nothing.
        """
        effects = tuple(current_effects)
        definition = effect_result.definition
        if not effect_result.success or definition is None:
            return effects

        duration = definition.parsed_duration
        if not duration.is_stored:
            return effects
        turns_left = duration.initial_turns
        if turns_left <= 0:
            return effects

        source = source or SourceInfo()
        candidate = ActiveEffect(
            effect_id=definition.id,
            name=definition.name,
            duration=definition.duration,
            turns_left=turns_left,
            applied_at=self.clock(),
            caster_name=caster_name,
            source_id=source.source_id,
            source_name=source.source_name,
            source_kind=source.source_kind,
        )

        for index, existing in enumerate(effects):
            if existing.effect_id != definition.id:
                continue
            if turns_left > existing.turns_left:
                return effects[:index] + (candidate,) + effects[index + 1 :]
            return effects
        return effects + (candidate,)

    def recalculate_live_stats(self, profile: CharacterProfile, effects: Sequence[ActiveEffect]) -> LiveStats:
        stat_values: Dict[str, int] = {}
        roll_bonuses: Dict[str, int] = {}
        flags: Dict[str, str] = {}

        for effect in effects:
            definition = self.catalogue.get_effect_definition(effect.effect_id)
            if definition is None:
                self._logger.debug(
                    "Skipping active effect with no catalogue entry",
                    extra={"effect_id": effect.effect_id, "character": profile.name},
                )
                continue

            if definition.category == EffectCategory.STAT_MODIFIER:
                channel = roll_bonuses if definition.effective_modifier_type == ModifierType.ROLL_BONUS else stat_values
                for stat in self.ruleset.expand_stat(definition.stat):
                    channel[stat] = channel.get(stat, 0) + definition.modifier
            elif definition.category == EffectCategory.CONTROL and definition.control_type:
                flags[definition.control_type] = definition.name
            elif definition.category == EffectCategory.SPECIAL and definition.type:
                flags[definition.type] = definition.name

        return LiveStats.build(stat_values, roll_bonuses, flags, reset_values=self.ruleset.reset_values)

    def process_turn(self, effects: Sequence[ActiveEffect], profile: CharacterProfile) -> TurnResult:
        healing = 0
        heal_names: List[str] = []
        for effect in effects:
            definition = self.catalogue.get_effect_definition(effect.effect_id)
            if definition is None or definition.category != EffectCategory.HEAL:
                continue
            if definition.parsed_duration.kind == "immediate" or not definition.heal_formula:
                continue
            amount = leading_integer(definition.heal_formula)
            if amount > 0:
                healing += amount
                heal_names.append(effect.name)

        remaining: List[ActiveEffect] = []
        for effect in effects:
            if effect.is_scene:
                remaining.append(effect)
                continue
            turns_left = effect.turns_left - 1
            if turns_left > 0:
                remaining.append(replace(effect, turns_left=turns_left))

        kept = tuple(remaining)
        return TurnResult(
            effects=kept,
            live_stats=self.recalculate_live_stats(profile, kept),
            healing_applied=healing,
            heal_effect_names=tuple(heal_names),
        )

    def clear_scene(self, effects: Sequence[ActiveEffect], profile: CharacterProfile) -> SceneClearResult:
        kept = []
        for effect in effects:
            definition = self.catalogue.get_effect_definition(effect.effect_id)
            if definition is not None and definition.parsed_duration.kind == "permanent":
                kept.append(effect)
        kept_effects = tuple(kept)
        return SceneClearResult(
            effects=kept_effects,
            live_stats=self.recalculate_live_stats(profile, kept_effects),
        )

    def damage_reduction(self, effects: Sequence[ActiveEffect]) -> int:
        total = 0
        for effect in effects:
            definition = self.catalogue.get_effect_definition(effect.effect_id)
            if definition is not None and definition.reduces_damage:
                total += definition.damage_reduction
        return max(0, total)

    @staticmethod
    def has_control_effect(live_stats: LiveStats, control_type: str) -> bool:
        return bool(live_stats.flag(control_type))

    @staticmethod
    def effects_for_target(results: Sequence[EffectResult], target: str) -> Tuple[EffectResult, ...]:
        return tuple(result for result in results if result.target == target)
