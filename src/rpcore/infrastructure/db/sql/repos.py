import json
import logging
from typing import Dict, Optional

from sqlalchemy import text

from rpcore.domain.models.effect import EffectDefinition
from rpcore.domain.models.ruleset import Ruleset
from rpcore.domain.repositories import EffectCatalogue
from .connection import SessionLocal

logger = logging.getLogger(__name__)

_SAFE_IDENTIFIERS = {"gorean_data", "arkana_data", "type", "arkana_data_type"}


class SqlEffectCatalogue(EffectCatalogue):
    """Effect definitions stored as JSON rows in a per-system data table.

    Rows are read once per id and cached for the lifetime of the catalogue;
    the table is never written.
    """

    def __init__(self, ruleset: Ruleset) -> None:
        if ruleset.catalogue_table not in _SAFE_IDENTIFIERS or ruleset.catalogue_type_column not in _SAFE_IDENTIFIERS:
            raise ValueError(f"Unsupported catalogue table for ruleset {ruleset.key}")
        self.ruleset = ruleset
        self._cache: Dict[str, Optional[EffectDefinition]] = {}

    def get_effect_definition(self, effect_id: str) -> Optional[EffectDefinition]:
        key = str(effect_id or "")
        if key in self._cache:
            return self._cache[key]

        with SessionLocal() as session:
            row = session.execute(
                text(
                    f"""
                    SELECT id, json_data
                    FROM {self.ruleset.catalogue_table}
                    WHERE id = :effect_id AND {self.ruleset.catalogue_type_column} = 'effect'
                    """
                ),
                {"effect_id": key},
            ).first()

        definition = None
        if row is not None:
            payload = row.json_data
            if isinstance(payload, (str, bytes)):
                try:
                    payload = json.loads(payload)
                except ValueError:
                    logger.warning("Malformed effect row", extra={"effect_id": key})
                    payload = None
            if isinstance(payload, dict):
                definition = EffectDefinition.from_mapping({"id": row.id, **payload})
        self._cache[key] = definition
        return definition
