"""Domain service: Delivery Zone pricing.

Delivery is a flat fee per zone, with no distance or weight component.
An unknown or inactive zone is an input error; a known zone that is
not covered yet is a soft failure returned as a quote so callers can
still show the customer which drop-off point they picked.
"""

from __future__ import annotations

from storefront.domain.exceptions import InvalidDeliveryZoneError, ValidationError
from storefront.domain.model.delivery_zone import (
    QUOTE_OK,
    QUOTE_UNCOVERED,
    DeliveryQuote,
    DeliveryZone,
)
from storefront.domain.model.value_objects import Money, normalize_code
from storefront.domain.repository.delivery_zone_repository import DeliveryZoneRepository


class DeliveryZoneCalculator:

    def __init__(self, zone_repo: DeliveryZoneRepository) -> None:
        self._zone_repo = zone_repo

    def calculate(self, zone_code: str, subtotal: Money) -> DeliveryQuote:
        code = normalize_code(zone_code)
        if not code:
            raise InvalidDeliveryZoneError("Delivery location is required")
        if not isinstance(subtotal, Money):
            raise ValidationError("Subtotal must be a non-negative whole amount")

        zone = self._zone_repo.get_by_code(code)
        if zone is None or not zone.is_active:
            raise InvalidDeliveryZoneError()

        if not zone.is_covered:
            return DeliveryQuote(
                status=QUOTE_UNCOVERED,
                zone=zone,
                subtotal=subtotal,
                delivery_fee=Money.zero(subtotal.currency),
                grand_total=subtotal,
                error=f"Delivery is not available in {zone.name} yet",
            )

        return DeliveryQuote(
            status=QUOTE_OK,
            zone=zone,
            subtotal=subtotal,
            delivery_fee=zone.flat_fee,
            grand_total=subtotal + zone.flat_fee,
        )

    def list_zones(self) -> list[DeliveryZone]:
        return self._zone_repo.list_active()
