from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping, Optional

SCENE_TURNS = 999


class EffectCategory(str, Enum):
    CHECK = "check"
    DAMAGE = "damage"
    HEAL = "heal"
    STAT_MODIFIER = "stat_modifier"
    CONTROL = "control"
    UTILITY = "utility"
    DEFENSE = "defense"
    SPECIAL = "special"


class ModifierType(str, Enum):
    STAT_VALUE = "stat_value"
    ROLL_BONUS = "roll_bonus"


class SourceKind(str, Enum):
    POWER = "power"
    PERK = "perk"
    CYBERNETIC = "cybernetic"
    MAGIC = "magic"
    ABILITY = "ability"


_LEADING_INT = re.compile(r"^\s*(-?\d+)")

EFFECT_TARGETS = ("self", "enemy", "ally", "area", "all_enemies", "all_allies", "single")


@dataclass(frozen=True)
class EffectDuration:
    kind: str
    turns: int = 0

    @property
    def is_stored(self) -> bool:
        return self.kind in {"scene", "turns"}

    @property
    def initial_turns(self) -> int:
        if self.kind == "scene":
            return SCENE_TURNS
        if self.kind == "turns":
            return self.turns
        return 0


def parse_duration(raw: str | None) -> EffectDuration:
    """Parse ``immediate``, ``permanent``, ``scene`` or ``turns:<N>``.

    Anything unrecognised behaves like ``immediate`` and is never stored.
    """
    text = str(raw or "").strip().lower()
    if text in {"immediate", "permanent", "scene"}:
        return EffectDuration(kind=text)
    if text.startswith("turns:"):
        try:
            return EffectDuration(kind="turns", turns=int(text.split(":", 1)[1]))
        except ValueError:
            return EffectDuration(kind="immediate")
    return EffectDuration(kind="immediate")


def leading_integer(formula: str | None) -> int:
    """Return the integer a formula such as ``"3+Mental"`` starts with, or 0."""
    head = str(formula or "").split("+", 1)[0]
    match = _LEADING_INT.match(head)
    return int(match.group(1)) if match else 0


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class EffectDefinition:
    id: str
    name: str
    category: EffectCategory
    target: str = "self"
    duration: str = "immediate"
    description: str = ""
    type: Optional[str] = None
    check_stat: Optional[str] = None
    check_vs: Optional[str] = None
    check_vs_stat: Optional[str] = None
    check_tn: Optional[int] = None
    damage_formula: Optional[str] = None
    damage_fixed: Optional[int] = None
    damage_type: Optional[str] = None
    heal_formula: Optional[str] = None
    stat: Optional[str] = None
    modifier: int = 0
    modifier_type: Optional[ModifierType] = None
    control_type: Optional[str] = None
    utility_type: Optional[str] = None
    damage_reduction: int = 0

    @property
    def parsed_duration(self) -> EffectDuration:
        return parse_duration(self.duration)

    @property
    def effective_modifier_type(self) -> ModifierType:
        return self.modifier_type or ModifierType.STAT_VALUE

    @property
    def reduces_damage(self) -> bool:
        return self.category == EffectCategory.DEFENSE and self.type in (None, "reduction")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Optional["EffectDefinition"]:
        """Build a definition from a catalogue row, or None when it is not a known category."""
        try:
            category = EffectCategory(str(data.get("category", "")).strip().lower())
        except ValueError:
            return None
        effect_id = str(data.get("id", "")).strip()
        if not effect_id:
            return None

        check_vs = _optional_str(data.get("checkVs"))
        if check_vs == "tn":
            check_vs = "fixed"
        check_tn = _optional_int(data.get("checkTN"))
        if check_tn is None:
            check_tn = _optional_int(data.get("targetNumber"))

        raw_modifier_type = _optional_str(data.get("modifierType"))
        try:
            modifier_type = ModifierType(raw_modifier_type) if raw_modifier_type else None
        except ValueError:
            modifier_type = None

        description = str(data.get("description") or "")
        return cls(
            id=effect_id,
            name=str(data.get("name") or description or effect_id),
            category=category,
            target=str(data.get("target") or "self"),
            duration=str(data.get("duration") or "immediate"),
            description=description,
            type=_optional_str(data.get("type") or data.get("defenseType")),
            check_stat=_optional_str(data.get("checkStat")),
            check_vs=check_vs,
            check_vs_stat=_optional_str(data.get("checkVsStat")),
            check_tn=check_tn,
            damage_formula=_optional_str(data.get("damageFormula")),
            damage_fixed=_optional_int(data.get("damageFixed")),
            damage_type=_optional_str(data.get("damageType")),
            heal_formula=_optional_str(data.get("healFormula")),
            stat=_optional_str(data.get("stat")),
            modifier=_optional_int(data.get("modifier")) or 0,
            modifier_type=modifier_type,
            control_type=_optional_str(data.get("controlType")),
            utility_type=_optional_str(data.get("utilityType")),
            damage_reduction=_optional_int(data.get("damageReduction")) or 0,
        )


@dataclass(frozen=True)
class SourceInfo:
    source_id: Optional[str] = None
    source_name: Optional[str] = None
    source_kind: Optional[SourceKind] = None


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class ActiveEffect:
    effect_id: str
    name: str
    duration: str
    turns_left: int
    applied_at: str
    caster_name: Optional[str] = None
    source_id: Optional[str] = None
    source_name: Optional[str] = None
    source_kind: Optional[SourceKind] = None

    @property
    def is_scene(self) -> bool:
        return parse_duration(self.duration).kind == "scene"

    @property
    def display_name(self) -> str:
        if self.source_name:
            kind = self.source_kind.value if self.source_kind else "ability"
            return f"{self.source_name}[{kind}]"
        return self.name

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "effectId": self.effect_id,
            "name": self.name,
            "duration": self.duration,
            "turnsLeft": self.turns_left,
            "appliedAt": self.applied_at,
        }
        if self.caster_name:
            payload["casterName"] = self.caster_name
        if self.source_id:
            payload["sourceId"] = self.source_id
        if self.source_name:
            payload["sourceName"] = self.source_name
        if self.source_kind:
            payload["sourceType"] = self.source_kind.value
        return payload

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ActiveEffect":
        turns = data.get("turnsLeft", data.get("turnsRemaining", 0))
        raw_kind = _optional_str(data.get("sourceType"))
        try:
            source_kind = SourceKind(raw_kind) if raw_kind else None
        except ValueError:
            source_kind = None
        return cls(
            effect_id=str(data.get("effectId", "")),
            name=str(data.get("name", "")),
            duration=str(data.get("duration", "")),
            turns_left=_optional_int(turns) or 0,
            applied_at=str(data.get("appliedAt") or ""),
            caster_name=_optional_str(data.get("casterName")),
            source_id=_optional_str(data.get("sourceId")),
            source_name=_optional_str(data.get("sourceName")),
            source_kind=source_kind,
        )
