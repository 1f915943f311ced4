from abc import ABC, abstractmethod
from typing import Optional

from rpcore.domain.models.effect import EffectDefinition


class EffectCatalogue(ABC):
    """Read-only lookup of effect definitions by id."""

    @abstractmethod
    def get_effect_definition(self, effect_id: str) -> Optional[EffectDefinition]:
        raise NotImplementedError
