"""JSON-document-backed implementation of DeliveryZoneRepository."""

from __future__ import annotations

from storefront.domain.model.delivery_zone import DeliveryZone
from storefront.domain.model.value_objects import Money, normalize_code
from storefront.domain.repository.delivery_zone_repository import DeliveryZoneRepository
from storefront.infrastructure.persistence.json_store import upsert


class JsonDeliveryZoneRepository(DeliveryZoneRepository):

    def __init__(self, doc: dict) -> None:
        self._rows: list[dict] = doc["zones"]

    def get_by_code(self, code: str) -> DeliveryZone | None:
        code = normalize_code(code)
        for raw in self._rows:
            if raw["code"] == code:
                return self._to_domain(raw)
        return None

    def list_active(self) -> list[DeliveryZone]:
        return [self._to_domain(raw) for raw in self._rows if raw.get("is_active", True)]

    def save(self, zone: DeliveryZone) -> None:
        upsert(self._rows, self._to_raw(zone), key="code")

    @staticmethod
    def _to_raw(zone: DeliveryZone) -> dict:
        return {
            "code": zone.code,
            "name": zone.name,
            "flat_fee": zone.flat_fee.amount,
            "currency": zone.flat_fee.currency,
            "is_covered": zone.is_covered,
            "is_active": zone.is_active,
        }

    @staticmethod
    def _to_domain(raw: dict) -> DeliveryZone:
        return DeliveryZone(
            code=raw["code"],
            name=raw["name"],
            flat_fee=Money(raw["flat_fee"], raw.get("currency", "NGN")),
            is_covered=raw.get("is_covered", True),
            is_active=raw.get("is_active", True),
        )
