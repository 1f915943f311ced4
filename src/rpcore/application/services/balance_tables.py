from __future__ import annotations

from rpcore.domain.models.ruleset import AttackProfile, Ruleset, WeaponProfile


D20_SIDES = 20
NATURAL_CRITICAL = 20
NATURAL_FUMBLE = 1

DEFAULT_TARGET_NUMBER = 10
MINIMUM_HIT_DAMAGE = 1
CRITICAL_DAMAGE_MULTIPLIER = 2

POLICY_CONTESTED = "contested"
POLICY_FIXED_TN = "fixed_tn"

WEAPON_PROFILES = {
    "unarmed": WeaponProfile(base_damage=2),
    "light_weapon": WeaponProfile(base_damage=3),
    "medium_weapon": WeaponProfile(base_damage=4),
    "heavy_weapon": WeaponProfile(base_damage=5),
    "bow": WeaponProfile(base_damage=4, ranged=True),
    "crossbow": WeaponProfile(base_damage=5, ranged=True),
}

GOREAN_STATS = ("strength", "agility", "intellect", "perception", "charisma")
ARKANA_STATS = ("physical", "dexterity", "mental", "perception")

GOREAN_ATTACKS = {
    "melee_unarmed": AttackProfile("strength", "agility", "strength", "unarmed_combat"),
    "melee_weapon": AttackProfile("strength", "agility", "strength", "swordplay"),
    "ranged": AttackProfile("perception", "agility", "perception", "archery"),
}

ARKANA_ATTACKS = {
    "melee_unarmed": AttackProfile("physical", "dexterity", "physical", "unarmed_combat"),
    "melee_weapon": AttackProfile("physical", "dexterity", "physical", "melee_weapons"),
    "ranged": AttackProfile("dexterity", "dexterity", "dexterity", "marksmanship"),
}

GOREAN = Ruleset(
    key="gorean",
    display_name="Gorean",
    stat_names=GOREAN_STATS,
    attack_profiles=GOREAN_ATTACKS,
    weapon_profiles=WEAPON_PROFILES,
    default_policy=POLICY_CONTESTED,
    catalogue_table="gorean_data",
    catalogue_type_column="type",
)

ARKANA = Ruleset(
    key="arkana",
    display_name="Arkana",
    stat_names=ARKANA_STATS,
    attack_profiles=ARKANA_ATTACKS,
    weapon_profiles=WEAPON_PROFILES,
    default_policy=POLICY_FIXED_TN,
    catalogue_table="arkana_data",
    catalogue_type_column="arkana_data_type",
)

RULESETS = {GOREAN.key: GOREAN, ARKANA.key: ARKANA}


def ruleset_for(key: str | None) -> Ruleset:
    normalized = str(key or "").strip().lower()
    return RULESETS.get(normalized, GOREAN)


def duration_label(turns_left: int, *, is_scene: bool) -> str:
    if is_scene:
        return "scene"
    if turns_left == 1:
        return "1 turn left"
    return f"{turns_left} turns left"
