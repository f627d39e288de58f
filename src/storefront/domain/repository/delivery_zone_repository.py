"""Abstract repository for DeliveryZone reference data."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.delivery_zone import DeliveryZone


class DeliveryZoneRepository(ABC):

    @abstractmethod
    def get_by_code(self, code: str) -> DeliveryZone | None:
        """Return the zone with this (normalized) code, active or not."""

    @abstractmethod
    def list_active(self) -> list[DeliveryZone]:
        """Return active zones ordered by name."""

    @abstractmethod
    def save(self, zone: DeliveryZone) -> None:
        """Insert or replace a zone keyed by its code."""
