"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.

Some rejections carry a snapshot of the entity that caused them (the zone
for an uncovered drop-off point, the coupon for an expired code) so callers
can render a specific message instead of a generic failure.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from storefront.domain.model.coupon import Coupon
    from storefront.domain.model.delivery_zone import DeliveryQuote


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class EmptyCartError(ValidationError):
    """None of the requested cart lines survived catalog resolution."""

    def __init__(self, message: str = "No valid cart items") -> None:
        super().__init__(message)


class InvalidDeliveryZoneError(ValidationError):
    """The zone code is blank, unknown or inactive."""

    def __init__(self, message: str = "Invalid delivery location") -> None:
        super().__init__(message)


class DeliveryZoneUncoveredError(DomainException):
    """The zone exists but deliveries there are currently unavailable."""

    def __init__(self, quote: DeliveryQuote) -> None:
        self.quote = quote
        super().__init__(quote.error or f"Delivery is not available in {quote.zone.name}")

    @property
    def zone(self):
        return self.quote.zone


class InvalidCouponError(DomainException):
    """A coupon code was rejected by validation."""

    def __init__(
        self,
        code: str,
        reason: str,
        coupon: Coupon | None = None,
    ) -> None:
        self.code = code
        self.reason = reason
        self.coupon = coupon
        super().__init__(reason)


class CouponExhaustedError(InvalidCouponError):
    """The conditional redemption lost the race at the usage boundary."""

    def __init__(self, code: str, coupon: Coupon | None = None) -> None:
        super().__init__(code, "Coupon usage limit reached", coupon)


class InvalidStatusTransitionError(ValidationError):
    """An order status change is not allowed."""


class PaymentGatewayError(DomainException):
    """The payment provider was unreachable or rejected the request."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


class RateLimitExceededError(DomainException):
    """Too many requests for one client and route inside the window."""


class AuthenticationError(DomainException):
    """Admin credentials or token were missing, wrong or expired."""
