from __future__ import annotations

import hashlib
import json
import random
from enum import Enum
from typing import Any, Mapping

ATTACK_NAMESPACE = "combat.attack"


def _encode_context_value(value: Any) -> Any:
    # json.dumps falls back here for values it cannot serialise itself
    if isinstance(value, (set, frozenset)):
        return sorted(json.dumps(item, sort_keys=True, default=_encode_context_value) for item in value)
    if isinstance(value, Enum):
        return value.value
    return str(value)


def derive_seed(namespace: str, context: Mapping[str, Any]) -> int:
    """Stable 32-bit seed for a combat action, e.g. ``derive_seed("combat.attack", {...})``.

    Context keys are sorted and sets are ordered by their encoded members, so
    equal contexts always produce the same seed. Non-finite floats raise
    ``ValueError``.
    """
    canonical = json.dumps(
        [namespace, {str(key): value for key, value in context.items()}],
        sort_keys=True,
        separators=(",", ":"),
        default=_encode_context_value,
        allow_nan=False,
    )
    digest = hashlib.sha256(canonical.encode("utf-8")).digest()
    return int.from_bytes(digest[:4], "big")


def derive_rng(namespace: str, context: Mapping[str, Any]) -> random.Random:
    return random.Random(derive_seed(namespace, context))


def attack_seed(base_seed: int, round_no: int, attacker_name: str) -> int:
    return derive_seed(ATTACK_NAMESPACE, {"seed": base_seed, "round": round_no, "attacker": attacker_name})
