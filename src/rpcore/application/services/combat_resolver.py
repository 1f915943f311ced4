from __future__ import annotations

import logging
import random
from dataclasses import replace
from typing import Optional

from rpcore.application.dtos import (
    AttackConfig,
    AttackOutcome,
    AttackResolution,
    CombatantState,
    WeaponValidation,
)
from rpcore.application.services.balance_tables import (
    CRITICAL_DAMAGE_MULTIPLIER,
    D20_SIDES,
    MINIMUM_HIT_DAMAGE,
    NATURAL_CRITICAL,
    NATURAL_FUMBLE,
)
from rpcore.application.services.effect_lifecycle import EffectLifecycleService
from rpcore.application.services.explanation_formatter import format_attack_message
from rpcore.application.services.resolution_policy import (
    FixedTargetNumberPolicy,
    ResolutionPolicy,
    resolution_policy_for,
)
from rpcore.application.services.stat_pipeline import (
    detailed_defense_calculation,
    detailed_stat_calculation,
    effective_stat_modifier,
)
from rpcore.domain.models.ruleset import Ruleset
from rpcore.domain.models.stats import CharacterProfile, LiveStats
from rpcore.domain.repositories import EffectCatalogue


class CombatResolver:
    """Resolve one attack between two combatants into a structured outcome.

    The resolver holds no combat state between calls; the only thing it owns
    is the d20 source, which can be seeded or swapped for tests and replays.
    """

    def __init__(
        self,
        catalogue: EffectCatalogue,
        ruleset: Ruleset,
        policy: Optional[ResolutionPolicy] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.catalogue = catalogue
        self.ruleset = ruleset
        self.policy = policy or resolution_policy_for(ruleset.default_policy)
        self.lifecycle = EffectLifecycleService(catalogue, ruleset)
        self.rng = rng or random.Random()
        self._logger = logging.getLogger(__name__)

    def set_seed(self, seed: int) -> None:
        self.rng.seed(seed)

    def validate_attack(self, config: AttackConfig) -> WeaponValidation:
        if self.ruleset.attack_profile(config.attack_type) is None:
            return WeaponValidation(False, f"Invalid attack type: {config.attack_type}")
        weapon = self.ruleset.weapon_profile(config.weapon_type)
        if weapon is None:
            return WeaponValidation(False, f"Invalid weapon type: {config.weapon_type}")

        if config.attack_type == "melee_unarmed" and config.weapon_type != "unarmed":
            return WeaponValidation(False, "Unarmed attacks cannot use weapons")
        if config.attack_type == "melee_weapon" and config.weapon_type == "unarmed":
            return WeaponValidation(False, "Weapon attacks require a weapon")
        if config.attack_type == "ranged" and not weapon.ranged:
            return WeaponValidation(False, "Ranged attacks require a bow or crossbow")
        if config.attack_type == "melee_weapon" and weapon.ranged:
            return WeaponValidation(False, "Cannot use ranged weapons for melee attacks")
        return WeaponValidation(True)

    def _live_stats(self, combatant: CombatantState) -> LiveStats:
        if combatant.live_stats is not None:
            return combatant.live_stats
        return self.lifecycle.recalculate_live_stats(combatant.profile, combatant.active_effects)

    def resolve_attack(
        self,
        attacker: CombatantState,
        defender: CombatantState,
        config: AttackConfig,
    ) -> AttackResolution:
        validation = self.validate_attack(config)
        if not validation.valid:
            self._logger.info(
                "Attack rejected",
                extra={"attack_type": config.attack_type, "weapon_type": config.weapon_type, "reason": validation.error},
            )
            return AttackResolution(success=False, error=validation.error)

        profile = self.ruleset.attack_profile(config.attack_type)
        weapon = self.ruleset.weapon_profile(config.weapon_type)
        attacker_live = self._live_stats(attacker)
        defender_live = self._live_stats(defender)

        attack_detail = detailed_stat_calculation(
            attacker.profile, attacker_live, profile.attack_stat, attacker.active_effects, self.catalogue, self.ruleset
        )
        attack_modifier = effective_stat_modifier(attacker.profile, attacker_live, profile.attack_stat)
        defense_modifier = effective_stat_modifier(defender.profile, defender_live, profile.defense_stat)
        skill_bonus = attacker.profile.skill_level(profile.skill_id)

        attacker_roll = self.rng.randint(1, D20_SIDES)
        defense = self.policy.roll_defense(self.rng, defense_modifier)
        attacker_total = attacker_roll + attack_modifier + skill_bonus

        is_critical_hit = attacker_roll == NATURAL_CRITICAL
        is_critical_miss = attacker_roll == NATURAL_FUMBLE
        if is_critical_hit:
            hit = True
        elif is_critical_miss:
            hit = False
        else:
            hit = self.policy.beats(attacker_total, defense.total)

        attacker_breakdown = f"d20({attacker_roll})+{attack_detail.formatted}"
        if skill_bonus > 0:
            attacker_breakdown += f"+{skill_bonus}"
        attacker_breakdown += f"={attacker_total}"

        if isinstance(self.policy, FixedTargetNumberPolicy):
            defense_detail = detailed_defense_calculation(
                defender.profile,
                defender_live,
                profile.defense_stat,
                defender.active_effects,
                self.catalogue,
                self.ruleset,
                base_target_number=self.policy.base_target_number,
            )
            defender_breakdown = f"TN:{defense_detail.formatted}"
        else:
            defense_detail = detailed_stat_calculation(
                defender.profile, defender_live, profile.defense_stat, defender.active_effects, self.catalogue, self.ruleset
            )
            defender_breakdown = f"d20({defense.roll})+{defense_detail.formatted}={defense.total}"

        base_damage = stat_damage_bonus = damage_reduction = damage = 0
        if hit:
            base_damage = weapon.base_damage
            stat_damage_bonus = effective_stat_modifier(attacker.profile, attacker_live, profile.damage_stat)
            damage_reduction = self.lifecycle.damage_reduction(defender.active_effects)
            damage = max(MINIMUM_HIT_DAMAGE, base_damage + stat_damage_bonus + skill_bonus - damage_reduction)
            if is_critical_hit:
                damage *= CRITICAL_DAMAGE_MULTIPLIER

        outcome = AttackOutcome(
            attacker_name=attacker.profile.name,
            defender_name=defender.profile.name,
            policy=self.policy.key,
            hit=hit,
            is_critical_hit=is_critical_hit,
            is_critical_miss=is_critical_miss,
            attacker_roll=attacker_roll,
            attack_modifier=attack_modifier,
            skill_bonus=skill_bonus,
            attacker_total=attacker_total,
            defender_roll=defense.roll,
            defense_modifier=defense_modifier,
            defender_total=defense.total,
            attacker_breakdown=attacker_breakdown,
            defender_breakdown=defender_breakdown,
            base_damage=base_damage,
            stat_damage_bonus=stat_damage_bonus,
            damage_reduction=damage_reduction,
            damage=damage,
        )
        outcome = replace(outcome, message=format_attack_message(outcome))
        self._logger.debug("Attack resolved", extra={"combat_message": outcome.message})
        return AttackResolution(success=True, outcome=outcome)

    def calculate_direct_damage(
        self,
        profile: CharacterProfile,
        live_stats: LiveStats,
        base_damage: int,
        stat: Optional[str] = None,
    ) -> int:
        bonus = effective_stat_modifier(profile, live_stats, stat) if self.ruleset.knows_stat(stat) else 0
        return max(MINIMUM_HIT_DAMAGE, base_damage + bonus)
