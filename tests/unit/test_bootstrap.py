import os
import sys
from pathlib import Path
import unittest
from unittest import mock

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from rpcore.application.dtos import AttackConfig, CombatantState
from rpcore.bootstrap import create_engine_services
from rpcore.domain.models.stats import character_profile_from_mapping
from rpcore.infrastructure.inmemory.inmemory_effect_catalogue import InMemoryEffectCatalogue


def _duelist(name: str) -> CombatantState:
    attributes = {"strength": 3, "agility": 3, "intellect": 2, "perception": 2, "charisma": 2}
    return CombatantState(profile=character_profile_from_mapping(name, attributes, hp_current=20, hp_max=20))


class BootstrapTests(unittest.TestCase):
    def test_defaults_to_gorean_in_memory(self) -> None:
        services = create_engine_services()
        self.assertEqual("gorean", services.ruleset.key)
        self.assertEqual("contested", services.resolver.policy.key)
        self.assertIsInstance(services.catalogue, InMemoryEffectCatalogue)
        self.assertIsNotNone(services.catalogue.get_effect_definition("defense_shield_wall"))

    def test_ruleset_and_policy_from_environment(self) -> None:
        with mock.patch.dict(os.environ, {"RPG_RULESET": "arkana"}):
            self.assertEqual("fixed_tn", create_engine_services().resolver.policy.key)
        with mock.patch.dict(os.environ, {"RPG_RULESET": "arkana", "RPG_RESOLUTION_POLICY": "contested"}):
            services = create_engine_services()
        self.assertEqual("arkana", services.ruleset.key)
        self.assertEqual("contested", services.resolver.policy.key)

    def test_unknown_policy_falls_back_to_ruleset_default(self) -> None:
        services = create_engine_services(ruleset_key="arkana", policy_key="best_of_three")
        self.assertEqual("fixed_tn", services.resolver.policy.key)

    def test_combat_seed_makes_attacks_reproducible(self) -> None:
        config = AttackConfig("melee_weapon", "light_weapon")
        outcomes = []
        for _ in range(2):
            with mock.patch.dict(os.environ, {"RPG_COMBAT_SEED": "1234"}):
                services = create_engine_services()
            outcomes.append(services.resolver.resolve_attack(_duelist("Tarl"), _duelist("Kamchak"), config).outcome)
        self.assertEqual(outcomes[0], outcomes[1])

    def test_non_integer_seed_is_ignored(self) -> None:
        with mock.patch.dict(os.environ, {"RPG_COMBAT_SEED": "lucky"}):
            with self.assertLogs("rpcore.bootstrap", level="WARNING"):
                create_engine_services()

    def test_sql_catalogue_failure_falls_back_to_memory(self) -> None:
        with mock.patch.dict(os.environ, {"RPG_DATABASE_URL": "sqlite:///:memory:"}):
            with mock.patch("rpcore.bootstrap._build_sql_catalogue", side_effect=RuntimeError("no driver")):
                services = create_engine_services()
        self.assertIsInstance(services.catalogue, InMemoryEffectCatalogue)


if __name__ == "__main__":
    unittest.main()
