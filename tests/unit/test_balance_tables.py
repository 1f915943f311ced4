import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from rpcore.application.services.balance_tables import (
    ARKANA,
    GOREAN,
    POLICY_CONTESTED,
    POLICY_FIXED_TN,
    duration_label,
    ruleset_for,
)


class BalanceTablesTests(unittest.TestCase):
    def test_ruleset_lookup_is_case_insensitive_with_gorean_fallback(self) -> None:
        self.assertIs(ARKANA, ruleset_for(" Arkana "))
        self.assertIs(GOREAN, ruleset_for("gorean"))
        self.assertIs(GOREAN, ruleset_for("unknown"))
        self.assertIs(GOREAN, ruleset_for(None))

    def test_default_policies_per_ruleset(self) -> None:
        self.assertEqual(POLICY_CONTESTED, GOREAN.default_policy)
        self.assertEqual(POLICY_FIXED_TN, ARKANA.default_policy)

    def test_all_expands_to_every_stat(self) -> None:
        self.assertEqual(("physical", "dexterity", "mental", "perception"), ARKANA.expand_stat("all"))
        self.assertEqual(("strength",), GOREAN.expand_stat("Strength"))
        self.assertEqual((), GOREAN.expand_stat(None))

    def test_attack_and_weapon_tables(self) -> None:
        self.assertEqual("dexterity", ARKANA.attack_profile("melee_weapon").defense_stat)
        self.assertEqual("swordplay", GOREAN.attack_profile("melee_weapon").skill_id)
        self.assertTrue(GOREAN.weapon_profile("crossbow").ranged)
        self.assertIsNone(ARKANA.weapon_profile("trebuchet"))

    def test_duration_labels(self) -> None:
        self.assertEqual("scene", duration_label(999, is_scene=True))
        self.assertEqual("1 turn left", duration_label(1, is_scene=False))
        self.assertEqual("3 turns left", duration_label(3, is_scene=False))


if __name__ == "__main__":
    unittest.main()
