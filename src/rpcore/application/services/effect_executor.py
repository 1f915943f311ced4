from __future__ import annotations

import logging
import math
import random
from typing import Optional

from rpcore.application.dtos import CombatantState, EffectResult
from rpcore.application.services.balance_tables import D20_SIDES, DEFAULT_TARGET_NUMBER
from rpcore.application.services.effect_lifecycle import EffectLifecycleService
from rpcore.application.services.stat_pipeline import effective_stat_modifier
from rpcore.domain.models.effect import EffectCategory, EffectDefinition, leading_integer
from rpcore.domain.models.ruleset import Ruleset
from rpcore.domain.repositories import EffectCatalogue


class EffectExecutor:
    """Run a catalogue effect once: checks roll, damage and heal formulas evaluate."""

    def __init__(
        self,
        catalogue: EffectCatalogue,
        ruleset: Ruleset,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.catalogue = catalogue
        self.ruleset = ruleset
        self.lifecycle = EffectLifecycleService(catalogue, ruleset)
        self.rng = rng or random.Random()
        self._logger = logging.getLogger(__name__)

    def set_seed(self, seed: int) -> None:
        self.rng.seed(seed)

    def _modifier(self, combatant: CombatantState, stat: Optional[str]) -> int:
        if not self.ruleset.knows_stat(stat):
            return 0
        live_stats = combatant.live_stats
        if live_stats is None:
            live_stats = self.lifecycle.recalculate_live_stats(combatant.profile, combatant.active_effects)
        return effective_stat_modifier(combatant.profile, live_stats, stat)

    def _formula_amount(self, formula: str, caster: CombatantState) -> int:
        amount = leading_integer(formula)
        parts = formula.split("+", 1)
        if len(parts) == 2:
            amount += self._modifier(caster, parts[1].strip())
        return amount

    def _target_number(self, definition: EffectDefinition, target: Optional[CombatantState]) -> int:
        if definition.check_vs == "enemy_stat" and definition.check_vs_stat and target is not None:
            return DEFAULT_TARGET_NUMBER + self._modifier(target, definition.check_vs_stat)
        if definition.check_vs == "fixed" and definition.check_tn is not None:
            return definition.check_tn
        return DEFAULT_TARGET_NUMBER

    def execute(
        self,
        effect_id: str,
        caster: CombatantState,
        target: Optional[CombatantState] = None,
    ) -> Optional[EffectResult]:
        definition = self.catalogue.get_effect_definition(effect_id)
        if definition is None:
            self._logger.warning("Effect definition not found", extra={"effect_id": effect_id})
            return None

        if definition.category == EffectCategory.CHECK:
            roll = self.rng.randint(1, D20_SIDES)
            modifier = self._modifier(caster, definition.check_stat)
            total = roll + modifier
            target_number = self._target_number(definition, target)
            return EffectResult(
                effect_id=effect_id,
                success=total >= target_number,
                definition=definition,
                roll_info=f"Roll: {roll}+{modifier}={total} vs TN:{target_number}",
            )

        if definition.category == EffectCategory.DAMAGE:
            if definition.damage_formula:
                damage = self._formula_amount(definition.damage_formula, caster)
            else:
                damage = definition.damage_fixed or 0
            return EffectResult(effect_id=effect_id, success=True, definition=definition, damage=max(0, damage))

        if definition.category == EffectCategory.HEAL:
            formula = definition.heal_formula or ""
            if formula.replace(" ", "").lower().startswith("maxhp*"):
                try:
                    fraction = float(formula.split("*", 1)[1])
                except ValueError:
                    fraction = 0.0
                heal = math.floor(caster.profile.hp_max * fraction)
            else:
                heal = self._formula_amount(formula, caster)
            return EffectResult(effect_id=effect_id, success=True, definition=definition, heal=max(0, heal))

        return EffectResult(effect_id=effect_id, success=True, definition=definition)
