"""Abstract repository for PromoRule aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from storefront.domain.model.promo_rule import PromoRule


class PromoRuleRepository(ABC):

    @abstractmethod
    def list_live(self, now: datetime) -> list[PromoRule]:
        """Return rules that are active at ``now``, newest first (higher ID first)."""

    @abstractmethod
    def list_all(self) -> list[PromoRule]:
        """Return every rule, newest first."""

    @abstractmethod
    def save(self, rule: PromoRule) -> None:
        """Persist a new or updated rule (assigns an ID to new ones)."""
