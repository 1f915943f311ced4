from pathlib import Path
import argparse
import logging
import sys
from dataclasses import replace

from dotenv import load_dotenv

# Ensure the src directory is on sys.path when running as a script
_SRC_DIR = Path(__file__).resolve().parents[1]
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from rpcore.application.dtos import AttackConfig, CombatantState
from rpcore.application.services.seed_policy import attack_seed
from rpcore.bootstrap import EngineServices, create_engine_services
from rpcore.domain.models.effect import SourceInfo, SourceKind
from rpcore.domain.models.stats import CharacterSkill, character_profile_from_mapping
from rpcore.presentation.combat_log_view import render_attack, render_effects

load_dotenv()

_DEMO_ROSTERS = {
    "arkana": (
        {
            "name": "Kael",
            "attributes": {"Physical": 3, "Dexterity": 2, "Mental": 2, "Perception": 2},
            "skills": (CharacterSkill("melee_weapons", 1, "Melee Weapons"),),
            "hp": 20,
            "opening": ("buff_physical_1", "Adrenal Surge", SourceKind.POWER),
        },
        {
            "name": "Rhea",
            "attributes": {"Physical": 2, "Dexterity": 3, "Mental": 3, "Perception": 2},
            "skills": (CharacterSkill("melee_weapons", 1, "Melee Weapons"),),
            "hp": 18,
            "opening": ("defense_reduction_3", "Dermal Plating", SourceKind.CYBERNETIC),
        },
    ),
    "gorean": (
        {
            "name": "Tarl",
            "attributes": {"strength": 4, "agility": 3, "intellect": 2, "perception": 3, "charisma": 2},
            "skills": (CharacterSkill("swordplay", 2, "Swordplay"),),
            "hp": 20,
            "opening": ("buff_agility_1", "Combat Expertise", SourceKind.ABILITY),
        },
        {
            "name": "Marlenus",
            "attributes": {"strength": 5, "agility": 2, "intellect": 2, "perception": 2, "charisma": 4},
            "skills": (CharacterSkill("swordplay", 1, "Swordplay"),),
            "hp": 22,
            "opening": ("defense_shield_wall", "Shield Wall", SourceKind.ABILITY),
        },
    ),
}


def _build_combatant(services: EngineServices, entry: dict) -> CombatantState:
    profile = character_profile_from_mapping(
        entry["name"],
        entry["attributes"],
        skills=entry["skills"],
        hp_current=entry["hp"],
        hp_max=entry["hp"],
    )
    effect_id, source_name, source_kind = entry["opening"]
    state = CombatantState(profile=profile)
    result = services.executor.execute(effect_id, state)
    effects = ()
    if result is not None:
        effects = services.lifecycle.apply_effect(
            (),
            result,
            caster_name=profile.name,
            source=SourceInfo(source_id=effect_id, source_name=source_name, source_kind=source_kind),
        )
    return CombatantState(
        profile=profile,
        active_effects=effects,
        live_stats=services.lifecycle.recalculate_live_stats(profile, effects),
    )


def _end_turn(services: EngineServices, state: CombatantState) -> CombatantState:
    turn = services.lifecycle.process_turn(state.active_effects, state.profile)
    hp = turn.apply_healing(state.profile.hp_current, state.profile.hp_max)
    return CombatantState(
        profile=replace(state.profile, hp_current=hp),
        active_effects=turn.effects,
        live_stats=turn.live_stats,
    )


def run_duel(services: EngineServices, rounds: int, seed: int | None = None) -> None:
    first, second = (_build_combatant(services, entry) for entry in _DEMO_ROSTERS[services.ruleset.key])
    for state in (first, second):
        render_effects(state.profile.name, services.formatter.format_live_stats(state.live_stats, state.active_effects))

    config = AttackConfig(attack_type="melee_weapon", weapon_type="medium_weapon")
    attacker, defender = first, second
    for round_no in range(1, rounds + 1):
        if seed is not None:
            services.resolver.set_seed(attack_seed(seed, round_no, attacker.profile.name))
        resolution = services.resolver.resolve_attack(attacker, defender, config)
        if not resolution.success:
            print(f"Attack rejected: {resolution.error}")
            return
        outcome = resolution.outcome
        hp = max(0, defender.profile.hp_current - outcome.damage)
        defender = replace(defender, profile=replace(defender.profile, hp_current=hp))
        render_attack(outcome, hp, defender.profile.hp_max)
        if hp <= 0:
            print(f"{defender.profile.name} falls in round {round_no}.")
            return
        attacker, defender = _end_turn(services, defender), _end_turn(services, attacker)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Run a seeded demo exchange through the combat engine")
    parser.add_argument("--ruleset", choices=["gorean", "arkana"], default=None)
    parser.add_argument("--policy", choices=["contested", "fixed_tn"], default=None)
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible rolls")
    parser.add_argument("--rounds", type=int, default=6, help="Maximum number of attacks")
    parser.add_argument("--verbose", action="store_true", help="Log engine decisions at debug level")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    try:
        services = create_engine_services(ruleset_key=args.ruleset, policy_key=args.policy, seed=args.seed)
        run_duel(services, rounds=max(1, args.rounds), seed=args.seed)
    except KeyboardInterrupt:
        print("\nSession ended.")
    except Exception as exc:
        print("An unexpected error occurred. The duel closed safely.")
        print(f"Reason: {exc}")
        print("Startup issues: verify RPG_DATABASE_URL or unset it to use the built-in catalogue.")


if __name__ == "__main__":
    main()
