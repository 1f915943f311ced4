import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from rpcore.application.dtos import AttackOutcome, EffectResult
from rpcore.application.services.balance_tables import ARKANA
from rpcore.application.services.effect_lifecycle import EffectLifecycleService
from rpcore.application.services.explanation_formatter import (
    ExplanationFormatter,
    describe_effect,
    encode_for_hud,
    format_attack_summary_line,
)
from rpcore.domain.models.effect import ActiveEffect, SourceInfo, SourceKind
from rpcore.domain.models.stats import LiveStats, character_profile_from_mapping
from rpcore.infrastructure.inmemory.inmemory_effect_catalogue import ARKANA_EFFECT_ROWS, InMemoryEffectCatalogue

_EXTRA_ROWS = (
    {"id": "defense_blur", "name": "Blur", "category": "defense", "type": "evasion", "damageReduction": 4,
     "target": "self", "duration": "turns:2"},
    {"id": "debuff_physical_1", "name": "Fatigue", "category": "stat_modifier", "stat": "Physical",
     "modifier": -1, "target": "enemy", "duration": "turns:2"},
    {"id": "heal_tenth_over_time", "name": "Nanite Drip", "category": "heal", "healFormula": "maxHP * 0.1",
     "target": "self", "duration": "turns:3"},
)


class ExplanationFormatterTests(unittest.TestCase):
    def setUp(self) -> None:
        self.catalogue = InMemoryEffectCatalogue.from_rows(ARKANA_EFFECT_ROWS + _EXTRA_ROWS)
        self.lifecycle = EffectLifecycleService(self.catalogue, ARKANA, clock=lambda: "2026-01-01T00:00:00+00:00")
        self.formatter = ExplanationFormatter(self.catalogue, ARKANA)
        self.profile = character_profile_from_mapping("Kael", {"physical": 3}, hp_current=20, hp_max=20)

    def _apply(self, effects, effect_id, **kwargs):
        definition = self.catalogue.get_effect_definition(effect_id)
        return self.lifecycle.apply_effect(effects, EffectResult(effect_id, True, definition), **kwargs)

    def _explain(self, effects) -> str:
        return self.formatter.format_live_stats(self.lifecycle.recalculate_live_stats(self.profile, effects), effects)

    def test_no_effects_yields_empty_string(self) -> None:
        self.assertEqual("", self.formatter.format_live_stats(LiveStats(), ()))

    def test_unknown_effects_yield_empty_string(self) -> None:
        orphan = ActiveEffect("retired", "Retired", "turns:2", 2, "2026-01-01T00:00:00+00:00")
        self.assertEqual("", self._explain((orphan,)))

    def test_sections_follow_fixed_order(self) -> None:
        effects = self._apply((), "control_stun_1", caster_name="Rhea")
        effects = self._apply(effects, "defense_reduction_3")
        effects = self._apply(
            effects,
            "buff_physical_1",
            source=SourceInfo(source_name="Adrenal Surge", source_kind=SourceKind.POWER),
        )

        self.assertEqual(
            "🔮 Effects: Physical +1 (Adrenal Surge[power][stat](3 turns left))\n"
            "🛡️ Defense: Damage Reduction -3 (Hardened Skin(3 turns left))\n"
            "⛓️ Control: Stunned by Rhea(1 turn left)",
            self._explain(effects),
        )

    def test_roll_bonus_and_stat_value_are_separate_lines(self) -> None:
        effects = self._apply(self._apply((), "buff_physical_1"), "buff_attack_2")
        self.assertEqual(
            "🔮 Effects: Physical +1 (Physical Boost[stat](3 turns left)), "
            "Physical Roll Bonus +2 (Targeting Assist[roll](2 turns left))",
            self._explain(effects),
        )

    def test_utility_special_and_healing_sections(self) -> None:
        effects = self._apply((), "utility_eavesdrop")
        effects = self._apply(effects, "special_shadowform")
        effects = self._apply(effects, "heal_over_time_2")

        explanation = self._explain(effects)

        self.assertEqual(
            [
                "🔧 Utilities: Eavesdrop by Unknown(scene)",
                "✨ Special: Shadowform by Unknown(2 turns left)",
                "💚 Healing: +3 HP/turn (Regeneration(2 turns left))",
            ],
            explanation.split("\n"),
        )

    def test_special_effects_name_their_caster(self) -> None:
        effects = self._apply((), "special_shadowform", caster_name="Alice")
        self.assertEqual("✨ Special: Shadowform by Alice(2 turns left)", self._explain(effects))

    def test_defense_total_matches_damage_reduction(self) -> None:
        effects = self._apply(self._apply((), "defense_reduction_3"), "defense_blur")

        self.assertEqual(3, self.lifecycle.damage_reduction(effects))
        self.assertEqual(
            "🛡️ Defense: Damage Reduction -3 (Hardened Skin(3 turns left)), Blur(2 turns left)",
            self._explain(effects),
        )

    def test_non_reducing_defense_has_no_reduction_total(self) -> None:
        effects = self._apply((), "defense_blur")

        self.assertEqual(0, self.lifecycle.damage_reduction(effects))
        self.assertEqual("🛡️ Defense: Blur(2 turns left)", self._explain(effects))

    def test_zero_amount_heal_over_time_is_not_listed(self) -> None:
        effects = self._apply(self._apply((), "heal_tenth_over_time"), "heal_over_time_2")
        self.assertEqual("💚 Healing: +3 HP/turn (Regeneration(2 turns left))", self._explain(effects))

    def test_cancelled_modifiers_are_omitted(self) -> None:
        effects = self._apply(self._apply((), "buff_physical_1"), "debuff_physical_1")
        self.assertEqual("", self._explain(effects))

    def test_all_stat_effect_lists_each_stat(self) -> None:
        effects = self._apply((), "buff_defense_all_5")
        self.assertEqual(
            "🔮 Effects: "
            "Physical Roll Bonus +1 (Overclock[roll](2 turns left)), "
            "Dexterity Roll Bonus +1 (Overclock[roll](2 turns left)), "
            "Mental Roll Bonus +1 (Overclock[roll](2 turns left)), "
            "Perception Roll Bonus +1 (Overclock[roll](2 turns left))",
            self._explain(effects),
        )

    def test_each_effect_appears_in_exactly_one_section(self) -> None:
        effects = ()
        for effect_id in ("buff_dexterity_3", "control_stun_1", "defense_reduction_5_scene", "utility_eavesdrop"):
            effects = self._apply(effects, effect_id)
        explanation = self._explain(effects)
        for name in ("Quickened Reflexes", "Stunned", "Kinetic Barrier", "Eavesdrop"):
            self.assertEqual(1, explanation.count(name))


class EffectDescriptionTests(unittest.TestCase):
    def setUp(self) -> None:
        self.catalogue = InMemoryEffectCatalogue.from_rows(ARKANA_EFFECT_ROWS)

    def _describe(self, effect_id: str) -> str:
        return describe_effect(self.catalogue.get_effect_definition(effect_id))

    def test_describes_each_category(self) -> None:
        self.assertEqual("+1 Physical (3 turns) [Self]", self._describe("buff_physical_1"))
        self.assertEqual("+2 Physical Roll Bonus (2 turns) [Self]", self._describe("buff_attack_2"))
        self.assertEqual("Damage Reduction -5 (scene) [Self]", self._describe("defense_reduction_5_scene"))
        self.assertEqual("3+Mental fire damage [Enemy]", self._describe("damage_fire"))
        self.assertEqual("Heals maxHP * 0.1 HP [Self]", self._describe("heal_tenth"))
        self.assertEqual("Mental check vs TN 12 [Self]", self._describe("check_mental_vs_tn12"))
        self.assertEqual("Stunned (1 turn) [Enemy]", self._describe("control_stun_1"))


class HudLineTests(unittest.TestCase):
    def test_summary_line_fields(self) -> None:
        outcome = AttackOutcome(
            attacker_name="Kael",
            defender_name="Rhea",
            policy="fixed_tn",
            hit=True,
            is_critical_hit=True,
            is_critical_miss=False,
            attacker_roll=20,
            attack_modifier=2,
            skill_bonus=0,
            attacker_total=22,
            defender_roll=None,
            defense_modifier=0,
            defender_total=10,
            attacker_breakdown="d20(20)+Physical[3](+2)=22",
            defender_breakdown="TN:10 + Dexterity[2](+0) = 10",
            base_damage=4,
            stat_damage_bonus=2,
            damage=12,
        )
        self.assertEqual(
            "ATTACK|HIT|Kael|Rhea|20|22|-|10|12|8|20|CRITICAL",
            format_attack_summary_line(outcome, 8, 20),
        )

    def test_encode_for_hud_escapes_separators(self) -> None:
        self.assertEqual("a%20b%7Cc%0Ad", encode_for_hud("a b|c\nd"))


if __name__ == "__main__":
    unittest.main()
