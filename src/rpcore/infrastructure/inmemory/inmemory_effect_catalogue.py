from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Optional

from rpcore.domain.models.effect import EffectDefinition
from rpcore.domain.repositories import EffectCatalogue


class InMemoryEffectCatalogue(EffectCatalogue):
    def __init__(self, definitions: Dict[str, EffectDefinition] | None = None) -> None:
        self._definitions: Dict[str, EffectDefinition] = dict(definitions or {})

    @classmethod
    def from_rows(cls, rows: Iterable[Mapping[str, Any]]) -> "InMemoryEffectCatalogue":
        definitions: Dict[str, EffectDefinition] = {}
        for row in rows:
            definition = EffectDefinition.from_mapping(row)
            if definition is not None:
                definitions[definition.id] = definition
        return cls(definitions)

    def get_effect_definition(self, effect_id: str) -> Optional[EffectDefinition]:
        return self._definitions.get(str(effect_id or ""))


ARKANA_EFFECT_ROWS = (
    {"id": "buff_physical_1", "name": "Physical Boost", "category": "stat_modifier", "stat": "Physical",
     "modifier": 1, "modifierType": "stat_value", "target": "self", "duration": "turns:3"},
    {"id": "buff_dexterity_3", "name": "Quickened Reflexes", "category": "stat_modifier", "stat": "Dexterity",
     "modifier": 3, "target": "self", "duration": "scene"},
    {"id": "buff_attack_2", "name": "Targeting Assist", "category": "stat_modifier", "stat": "Physical",
     "modifier": 2, "modifierType": "roll_bonus", "target": "self", "duration": "turns:2"},
    {"id": "buff_mental_1_turn", "name": "Focus", "category": "stat_modifier", "stat": "Mental",
     "modifier": 1, "target": "self", "duration": "turns:1"},
    {"id": "buff_defense_all_5", "name": "Overclock", "category": "stat_modifier", "stat": "all",
     "modifier": 1, "modifierType": "roll_bonus", "target": "self", "duration": "turns:2"},
    {"id": "debuff_physical_minus_2", "name": "Weakness", "category": "stat_modifier", "stat": "Physical",
     "modifier": -2, "target": "enemy", "duration": "turns:2"},
    {"id": "check_mental_vs_tn12", "name": "Mental Focus Check", "category": "check", "checkStat": "Mental",
     "checkVs": "fixed", "checkTN": 12, "target": "self", "duration": "immediate"},
    {"id": "check_mental_vs_mental", "name": "Mind Clash", "category": "check", "checkStat": "Mental",
     "checkVs": "enemy_stat", "checkVsStat": "Mental", "target": "enemy", "duration": "immediate"},
    {"id": "damage_fire", "name": "Fire Blast", "category": "damage", "damageFormula": "3+Mental",
     "damageType": "fire", "target": "enemy", "duration": "immediate"},
    {"id": "heal_over_time_2", "name": "Regeneration", "category": "heal", "healFormula": "3",
     "target": "self", "duration": "turns:2"},
    {"id": "heal_tenth", "name": "Field Patch", "category": "heal", "healFormula": "maxHP * 0.1",
     "target": "self", "duration": "immediate"},
    {"id": "control_stun_1", "name": "Stunned", "category": "control", "controlType": "stun",
     "target": "enemy", "duration": "turns:1"},
    {"id": "defense_reduction_3", "name": "Hardened Skin", "category": "defense", "type": "reduction",
     "damageReduction": 3, "target": "self", "duration": "turns:3"},
    {"id": "defense_reduction_5_scene", "name": "Kinetic Barrier", "category": "defense",
     "damageReduction": 5, "target": "self", "duration": "scene"},
    {"id": "utility_eavesdrop", "name": "Eavesdrop", "category": "utility", "utilityType": "eavesdrop",
     "target": "self", "duration": "scene"},
    {"id": "special_shadowform", "name": "Shadowform", "category": "special", "type": "shadowform",
     "target": "self", "duration": "turns:2"},
    {"id": "buff_cyber_arm", "name": "Cybernetic Arm", "category": "stat_modifier", "stat": "Physical",
     "modifier": 1, "target": "self", "duration": "permanent"},
)

GOREAN_EFFECT_ROWS = (
    {"id": "buff_strength_2", "description": "Battle Cry", "category": "stat_modifier", "stat": "strength",
     "modifier": 2, "modifierType": "roll_bonus", "target": "all_allies", "duration": "turns:2"},
    {"id": "buff_agility_1", "description": "Combat Expertise", "category": "stat_modifier", "stat": "agility",
     "modifier": 1, "target": "self", "duration": "scene"},
    {"id": "debuff_agility_1", "description": "Entangled", "category": "stat_modifier", "stat": "agility",
     "modifier": -1, "target": "enemy", "duration": "turns:2"},
    {"id": "check_capture_throw", "description": "Capture Throw", "category": "check", "checkStat": "agility",
     "checkVs": "tn", "targetNumber": 12, "target": "enemy", "duration": "immediate"},
    {"id": "heal_second_wind", "description": "Second Wind", "category": "heal", "healFormula": "2+strength",
     "target": "self", "duration": "immediate"},
    {"id": "control_bound", "description": "Bound", "category": "control", "controlType": "bound",
     "target": "enemy", "duration": "turns:2"},
    {"id": "defense_shield_wall", "description": "Shield Wall", "category": "defense", "damageReduction": 2,
     "target": "self", "duration": "scene"},
)


def default_effect_rows(ruleset_key: str) -> tuple[Mapping[str, Any], ...]:
    if ruleset_key == "arkana":
        return ARKANA_EFFECT_ROWS
    return GOREAN_EFFECT_ROWS
