import logging
import os
from dataclasses import dataclass
from typing import Optional

from rpcore.application.services.balance_tables import ruleset_for
from rpcore.application.services.combat_resolver import CombatResolver
from rpcore.application.services.effect_executor import EffectExecutor
from rpcore.application.services.effect_lifecycle import EffectLifecycleService
from rpcore.application.services.explanation_formatter import ExplanationFormatter
from rpcore.application.services.resolution_policy import resolution_policy_for
from rpcore.domain.models.ruleset import Ruleset
from rpcore.domain.repositories import EffectCatalogue
from rpcore.infrastructure.inmemory.inmemory_effect_catalogue import InMemoryEffectCatalogue, default_effect_rows

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineServices:
    ruleset: Ruleset
    catalogue: EffectCatalogue
    lifecycle: EffectLifecycleService
    executor: EffectExecutor
    resolver: CombatResolver
    formatter: ExplanationFormatter


def _combat_seed() -> Optional[int]:
    raw = os.getenv("RPG_COMBAT_SEED", "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer RPG_COMBAT_SEED", extra={"value": raw})
        return None


def _build_inmemory_catalogue(ruleset: Ruleset) -> EffectCatalogue:
    return InMemoryEffectCatalogue.from_rows(default_effect_rows(ruleset.key))


def _build_sql_catalogue(ruleset: Ruleset) -> EffectCatalogue:
    from rpcore.infrastructure.db.sql.repos import SqlEffectCatalogue

    return SqlEffectCatalogue(ruleset)


def create_engine_services(
    ruleset_key: Optional[str] = None,
    policy_key: Optional[str] = None,
    seed: Optional[int] = None,
) -> EngineServices:
    ruleset = ruleset_for(ruleset_key or os.getenv("RPG_RULESET", "gorean"))
    policy = resolution_policy_for(
        policy_key or os.getenv("RPG_RESOLUTION_POLICY") or ruleset.default_policy,
        default=ruleset.default_policy,
    )

    catalogue: Optional[EffectCatalogue] = None
    if os.getenv("RPG_DATABASE_URL"):
        try:
            catalogue = _build_sql_catalogue(ruleset)
        except Exception as exc:
            logger.warning("SQL catalogue unavailable, falling back to in-memory: %s", exc)
    if catalogue is None:
        catalogue = _build_inmemory_catalogue(ruleset)

    resolver = CombatResolver(catalogue, ruleset, policy=policy)
    executor = EffectExecutor(catalogue, ruleset)
    combat_seed = seed if seed is not None else _combat_seed()
    if combat_seed is not None:
        resolver.set_seed(combat_seed)
        executor.set_seed(combat_seed)

    return EngineServices(
        ruleset=ruleset,
        catalogue=catalogue,
        lifecycle=EffectLifecycleService(catalogue, ruleset),
        executor=executor,
        resolver=resolver,
        formatter=ExplanationFormatter(catalogue, ruleset),
    )
