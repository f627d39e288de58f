"""Delivery zones: static reference data for flat-fee shipping."""

from __future__ import annotations

from dataclasses import dataclass

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.value_objects import Money, normalize_code


@dataclass
class DeliveryZone:
    """A named drop-off area with a flat delivery fee.

    ``is_covered`` is independent of ``is_active``: an active but
    uncovered zone is a known location we cannot deliver to yet.
    """

    code: str
    name: str
    flat_fee: Money
    is_covered: bool = True
    is_active: bool = True

    def __post_init__(self) -> None:
        self.code = normalize_code(self.code)
        if not self.code:
            raise ValidationError("Zone code is required")
        if not self.name or not self.name.strip():
            raise ValidationError("Zone name is required")


QUOTE_OK = "ok"
QUOTE_UNCOVERED = "uncovered"


@dataclass(frozen=True)
class DeliveryQuote:
    """Result of pricing delivery to a zone for a given subtotal."""

    status: str
    zone: DeliveryZone
    subtotal: Money
    delivery_fee: Money
    grand_total: Money
    error: str | None = None

    @property
    def is_covered(self) -> bool:
        return self.status == QUOTE_OK
