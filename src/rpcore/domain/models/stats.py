from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

_TIER_FLOOR = -3
_TIER_CEILING = 6
_TIER_MODIFIERS = {1: -2, 2: 0, 3: 2, 4: 4}

ROLL_BONUS_SUFFIX = "_rollbonus"


def stat_tier_modifier(value: int | None) -> int:
    """Map an effective attribute onto the roll modifier tier table, clamped at both ends."""
    try:
        score = int(value)
    except Exception:
        return 0
    if score <= 0:
        return _TIER_FLOOR
    if score >= 5:
        return _TIER_CEILING
    return _TIER_MODIFIERS[score]


def canonical_stat(name: str | None) -> str:
    return str(name or "").strip().lower()


def display_stat(name: str) -> str:
    return name[:1].upper() + name[1:] if name else name


@dataclass(frozen=True)
class CharacterSkill:
    skill_id: str
    level: int = 0
    skill_name: str = ""


@dataclass(frozen=True)
class CharacterProfile:
    name: str
    attributes: Mapping[str, int] = field(default_factory=dict)
    skills: Tuple[CharacterSkill, ...] = ()
    hp_current: int = 0
    hp_max: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "attributes", {canonical_stat(key): value for key, value in dict(self.attributes).items()}
        )

    def attribute(self, stat: str) -> int:
        try:
            return int(self.attributes.get(canonical_stat(stat), 0))
        except (TypeError, ValueError):
            return 0

    def skill_level(self, skill_id: str) -> int:
        for skill in self.skills:
            if skill.skill_id == skill_id:
                return max(0, int(skill.level))
        return 0


def character_profile_from_mapping(name: str, attributes: Mapping[str, Any] | None, **kwargs: Any) -> CharacterProfile:
    attrs: Dict[str, int] = {}
    for key, value in (attributes or {}).items():
        try:
            attrs[canonical_stat(key)] = int(value)
        except (TypeError, ValueError):
            attrs[canonical_stat(key)] = 0
    return CharacterProfile(name=name, attributes=attrs, **kwargs)


@dataclass(frozen=True)
class LiveStats:
    """Sparse live modifiers derived from a character's active effects.

    ``stat_values`` shift the attribute before the tier lookup, ``roll_bonuses``
    are added after it and ``flags`` carry control/special markers.
    """

    stat_values: Mapping[str, int] = field(default_factory=dict)
    roll_bonuses: Mapping[str, int] = field(default_factory=dict)
    flags: Mapping[str, str] = field(default_factory=dict)

    def stat_value(self, stat: str) -> int:
        return int(self.stat_values.get(canonical_stat(stat), 0))

    def roll_bonus(self, stat: str) -> int:
        return int(self.roll_bonuses.get(canonical_stat(stat), 0))

    def flag(self, key: str) -> Optional[str]:
        return self.flags.get(key)

    @property
    def is_empty(self) -> bool:
        return not (self.stat_values or self.roll_bonuses or self.flags)

    @classmethod
    def build(
        cls,
        stat_values: Mapping[str, int],
        roll_bonuses: Mapping[str, int],
        flags: Mapping[str, str],
        reset_values: Mapping[str, Any] | None = None,
    ) -> "LiveStats":
        resets = reset_values or {}
        return cls(
            stat_values={
                key: value
                for key, value in stat_values.items()
                if value != resets.get(display_stat(key), 0)
            },
            roll_bonuses={
                key: value
                for key, value in roll_bonuses.items()
                if value != resets.get(f"{display_stat(key)}{ROLL_BONUS_SUFFIX}", 0)
            },
            flags={key: value for key, value in flags.items() if value != resets.get(key, "")},
        )

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        for key, value in self.stat_values.items():
            payload[display_stat(key)] = value
        for key, value in self.roll_bonuses.items():
            payload[f"{display_stat(key)}{ROLL_BONUS_SUFFIX}"] = value
        payload.update(self.flags)
        return payload

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any] | None, stat_names: Tuple[str, ...]) -> "LiveStats":
        stat_values: Dict[str, int] = {}
        roll_bonuses: Dict[str, int] = {}
        flags: Dict[str, str] = {}
        known = set(stat_names)
        for key, value in (payload or {}).items():
            lowered = canonical_stat(key)
            if lowered.endswith(ROLL_BONUS_SUFFIX) and lowered[: -len(ROLL_BONUS_SUFFIX)] in known:
                roll_bonuses[lowered[: -len(ROLL_BONUS_SUFFIX)]] = int(value)
            elif lowered in known and isinstance(value, (int, float)):
                stat_values[lowered] = int(value)
            else:
                flags[str(key)] = str(value)
        return cls.build(stat_values, roll_bonuses, flags)
