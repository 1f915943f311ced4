from __future__ import annotations

from typing import Dict, List, Sequence, Tuple
from urllib.parse import quote

from rpcore.application.dtos import AttackOutcome
from rpcore.application.services.balance_tables import CRITICAL_DAMAGE_MULTIPLIER, duration_label
from rpcore.domain.models.effect import ActiveEffect, EffectCategory, EffectDefinition, ModifierType, leading_integer
from rpcore.domain.models.ruleset import Ruleset
from rpcore.domain.models.stats import LiveStats, canonical_stat, display_stat
from rpcore.domain.repositories import EffectCatalogue

SECTION_LABELS = {
    "stats": "🔮 Effects",
    "utility": "🔧 Utilities",
    "special": "✨ Special",
    "defense": "🛡️ Defense",
    "healing": "💚 Healing",
    "control": "⛓️ Control",
}

TARGET_LABELS = {
    "enemy": "Enemy",
    "self": "Self",
    "ally": "Ally",
    "area": "Area",
    "all_enemies": "All Enemies",
    "all_allies": "All Allies",
    "single": "Single",
}


def _duration(effect: ActiveEffect) -> str:
    return duration_label(effect.turns_left, is_scene=effect.is_scene)


def _attributed(effect: ActiveEffect) -> str:
    return f"{effect.display_name} by {effect.caster_name or 'Unknown'}({_duration(effect)})"


class ExplanationFormatter:
    def __init__(self, catalogue: EffectCatalogue, ruleset: Ruleset) -> None:
        self.catalogue = catalogue
        self.ruleset = ruleset

    def format_live_stats(self, live_stats: LiveStats, effects: Sequence[ActiveEffect]) -> str:
        """Group a character's active effects into one labelled line per section.

        Stat lines follow the normalised live stats, so modifiers that cancel
        out are omitted. Defense totals count only damage-reducing effects,
        matching what an attack subtracts.
        """
        stat_groups: Dict[Tuple[str, ModifierType], List[ActiveEffect]] = {}
        utilities: List[str] = []
        specials: List[str] = []
        controls: List[str] = []
        reduction_names: List[str] = []
        other_defenses: List[str] = []
        defense_total = 0
        healing_names: List[str] = []
        healing_total = 0

        for effect in effects:
            definition = self.catalogue.get_effect_definition(effect.effect_id)
            if definition is None:
                continue
            category = definition.category
            if category == EffectCategory.STAT_MODIFIER:
                for stat in self.ruleset.expand_stat(definition.stat):
                    stat_groups.setdefault((stat, definition.effective_modifier_type), []).append(effect)
            elif category == EffectCategory.UTILITY:
                utilities.append(_attributed(effect))
            elif category == EffectCategory.SPECIAL:
                specials.append(_attributed(effect))
            elif category == EffectCategory.DEFENSE:
                if definition.reduces_damage:
                    defense_total += definition.damage_reduction
                    reduction_names.append(f"{effect.display_name}({_duration(effect)})")
                else:
                    other_defenses.append(f"{effect.display_name}({_duration(effect)})")
            elif category == EffectCategory.HEAL:
                amount = leading_integer(definition.heal_formula)
                if amount > 0:
                    healing_total += amount
                    healing_names.append(f"{effect.display_name}({_duration(effect)})")
            elif category == EffectCategory.CONTROL:
                controls.append(_attributed(effect))

        sections: List[str] = []
        stat_lines = self._stat_lines(live_stats, stat_groups)
        if stat_lines:
            sections.append(f"{SECTION_LABELS['stats']}: " + ", ".join(stat_lines))
        if utilities:
            sections.append(f"{SECTION_LABELS['utility']}: " + ", ".join(utilities))
        if specials:
            sections.append(f"{SECTION_LABELS['special']}: " + ", ".join(specials))
        if reduction_names or other_defenses:
            parts = list(other_defenses)
            if reduction_names:
                parts.insert(0, f"Damage Reduction -{max(0, defense_total)} ({', '.join(reduction_names)})")
            sections.append(f"{SECTION_LABELS['defense']}: " + ", ".join(parts))
        if healing_names:
            sections.append(f"{SECTION_LABELS['healing']}: +{healing_total} HP/turn ({', '.join(healing_names)})")
        if controls:
            sections.append(f"{SECTION_LABELS['control']}: " + ", ".join(controls))
        return "\n".join(sections)

    @staticmethod
    def _stat_lines(
        live_stats: LiveStats,
        groups: Dict[Tuple[str, ModifierType], List[ActiveEffect]],
    ) -> List[str]:
        lines = []
        for (stat, modifier_type), members in groups.items():
            if modifier_type == ModifierType.ROLL_BONUS:
                total = live_stats.roll_bonuses.get(stat)
                label, marker = f"{display_stat(stat)} Roll Bonus", "roll"
            else:
                total = live_stats.stat_values.get(stat)
                label, marker = display_stat(stat), "stat"
            if not total:
                continue
            names = ", ".join(f"{effect.display_name}[{marker}]({_duration(effect)})" for effect in members)
            lines.append(f"{label} {total:+d} ({names})")
        return lines


def describe_effect(definition: EffectDefinition) -> str:
    """One-line summary of a catalogue effect, e.g. ``+2 Physical (3 turns) [Self]``."""
    category = definition.category
    if category == EffectCategory.DAMAGE:
        amount = definition.damage_formula or str(definition.damage_fixed or 0)
        text = " ".join(part for part in (amount, definition.damage_type, "damage") if part)
    elif category == EffectCategory.HEAL:
        text = f"Heals {definition.heal_formula or 0} HP"
    elif category == EffectCategory.STAT_MODIFIER:
        text = f"{definition.modifier:+d} {display_stat(canonical_stat(definition.stat))}"
        if definition.effective_modifier_type == ModifierType.ROLL_BONUS:
            text += " Roll Bonus"
    elif category == EffectCategory.DEFENSE:
        text = f"Damage Reduction -{definition.damage_reduction}"
    elif category == EffectCategory.CHECK:
        stat = display_stat(canonical_stat(definition.check_stat)) or "Roll"
        if definition.check_vs == "enemy_stat" and definition.check_vs_stat:
            versus = f"enemy {display_stat(canonical_stat(definition.check_vs_stat))}"
        elif definition.check_vs == "fixed" and definition.check_tn is not None:
            versus = f"TN {definition.check_tn}"
        else:
            versus = "TN 10"
        text = f"{stat} check vs {versus}"
    else:
        text = definition.name

    duration = definition.parsed_duration
    if duration.kind == "turns":
        text += f" ({duration.turns} turn{'' if duration.turns == 1 else 's'})"
    elif duration.kind in {"scene", "permanent"}:
        text += f" ({duration.kind})"
    return f"{text} [{TARGET_LABELS.get(definition.target, definition.target)}]"


def format_damage_arithmetic(outcome: AttackOutcome) -> str:
    raw = f"{outcome.base_damage}{outcome.stat_damage_bonus:+d}{outcome.skill_bonus:+d}"
    if outcome.damage_reduction > 0:
        raw += f"-{outcome.damage_reduction}"
    reduced = outcome.base_damage + outcome.stat_damage_bonus + outcome.skill_bonus - outcome.damage_reduction
    if reduced < 1:
        raw = f"max(1,{raw})"
    if outcome.is_critical_hit:
        return f"({raw})×{CRITICAL_DAMAGE_MULTIPLIER}={outcome.damage}"
    return f"{raw}={outcome.damage}"


def format_attack_message(outcome: AttackOutcome) -> str:
    head = (
        f"{outcome.attacker_name} {outcome.attacker_breakdown} vs "
        f"{outcome.defender_name} {outcome.defender_breakdown}"
    )
    if outcome.is_critical_miss:
        return f"{head} → Critical Miss!"
    if not outcome.hit:
        return f"{head} → Miss!"
    verdict = "Critical Hit!" if outcome.is_critical_hit else "Hit!"
    return f"{head} → {verdict} Damage: {format_damage_arithmetic(outcome)}"


def format_attack_summary_line(outcome: AttackOutcome, target_hp: int, target_hp_max: int) -> str:
    """Pipe-separated line consumed by in-world HUD scripts."""
    if outcome.is_critical_hit:
        flag = "CRITICAL"
    elif outcome.is_critical_miss:
        flag = "FUMBLE"
    else:
        flag = ""
    fields = [
        "ATTACK",
        "HIT" if outcome.hit else "MISS",
        outcome.attacker_name,
        outcome.defender_name,
        str(outcome.attacker_roll),
        str(outcome.attacker_total),
        "-" if outcome.defender_roll is None else str(outcome.defender_roll),
        str(outcome.defender_total),
        str(outcome.damage),
        str(target_hp),
        str(target_hp_max),
        flag,
    ]
    return "|".join(fields)


def encode_for_hud(text: str) -> str:
    return quote(text, safe="")
