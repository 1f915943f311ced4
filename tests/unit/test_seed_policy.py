import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from rpcore.application.services.seed_policy import attack_seed, derive_rng, derive_seed


class SeedPolicyTests(unittest.TestCase):
    def test_same_context_same_seed(self) -> None:
        context = {"round": 3, "attacker": "Kael", "defender": "Rhea", "config": {"weapon": "bow"}}
        self.assertEqual(derive_seed("combat.attack", context), derive_seed("combat.attack", context))

    def test_context_key_order_does_not_change_seed(self) -> None:
        context_a = {"a": 1, "b": {"x": 2, "y": 3}}
        context_b = {"b": {"y": 3, "x": 2}, "a": 1}
        self.assertEqual(derive_seed("combat.attack", context_a), derive_seed("combat.attack", context_b))

    def test_namespace_changes_seed(self) -> None:
        context = {"round": 1}
        self.assertNotEqual(derive_seed("combat.attack", context), derive_seed("effect.check", context))

    def test_unordered_set_values_produce_stable_seed(self) -> None:
        context_a = {"effects": {"control_stun_1", "buff_physical_1"}}
        context_b = {"effects": {"buff_physical_1", "control_stun_1"}}
        self.assertEqual(derive_seed("combat.attack", context_a), derive_seed("combat.attack", context_b))

    def test_non_finite_float_in_context_raises(self) -> None:
        with self.assertRaises(ValueError):
            derive_seed("combat.attack", {"bonus": float("nan")})

    def test_derive_rng_is_deterministic_for_same_context(self) -> None:
        context = {"round": 12, "attacker": "Tarl"}
        self.assertEqual(
            derive_rng("combat.attack", context).randint(1, 20),
            derive_rng("combat.attack", context).randint(1, 20),
        )

    def test_attack_seed_varies_by_round_and_attacker(self) -> None:
        self.assertEqual(attack_seed(7, 1, "Kael"), derive_seed("combat.attack", {"seed": 7, "round": 1, "attacker": "Kael"}))
        self.assertNotEqual(attack_seed(7, 1, "Kael"), attack_seed(7, 2, "Kael"))
        self.assertNotEqual(attack_seed(7, 1, "Kael"), attack_seed(7, 1, "Rhea"))

    def test_seed_fits_in_32_bits(self) -> None:
        self.assertLess(derive_seed("combat.attack", {"round": 1}), 2**32)


if __name__ == "__main__":
    unittest.main()
