from __future__ import annotations

import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional

from rpcore.application.services.balance_tables import (
    D20_SIDES,
    DEFAULT_TARGET_NUMBER,
    POLICY_CONTESTED,
    POLICY_FIXED_TN,
)


@dataclass(frozen=True)
class DefenseRoll:
    roll: Optional[int]
    total: int


class ResolutionPolicy(ABC):
    key: str = ""

    @abstractmethod
    def roll_defense(self, rng: random.Random, defense_modifier: int) -> DefenseRoll:
        raise NotImplementedError

    @abstractmethod
    def beats(self, attacker_total: int, defender_total: int) -> bool:
        raise NotImplementedError


class ContestedRollPolicy(ResolutionPolicy):
    """Defender rolls a d20 too; ties go to the defender."""

    key = POLICY_CONTESTED

    def roll_defense(self, rng: random.Random, defense_modifier: int) -> DefenseRoll:
        roll = rng.randint(1, D20_SIDES)
        return DefenseRoll(roll=roll, total=roll + defense_modifier)

    def beats(self, attacker_total: int, defender_total: int) -> bool:
        return attacker_total > defender_total


class FixedTargetNumberPolicy(ResolutionPolicy):
    """Attacker must meet ``base + defense modifier``; no defender roll."""

    key = POLICY_FIXED_TN

    def __init__(self, base_target_number: int = DEFAULT_TARGET_NUMBER) -> None:
        self.base_target_number = base_target_number

    def roll_defense(self, rng: random.Random, defense_modifier: int) -> DefenseRoll:
        return DefenseRoll(roll=None, total=self.base_target_number + defense_modifier)

    def beats(self, attacker_total: int, defender_total: int) -> bool:
        return attacker_total >= defender_total


_POLICIES: Dict[str, type[ResolutionPolicy]] = {
    POLICY_CONTESTED: ContestedRollPolicy,
    POLICY_FIXED_TN: FixedTargetNumberPolicy,
}


def resolution_policy_for(key: str | None, default: str = POLICY_CONTESTED) -> ResolutionPolicy:
    normalized = str(key or "").strip().lower()
    policy_cls = _POLICIES.get(normalized) or _POLICIES.get(default, ContestedRollPolicy)
    return policy_cls()
