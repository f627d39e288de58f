"""Ports for collaborators that live outside the application.

Handlers depend on these abstractions only; the infrastructure layer
provides the concrete adapters.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

from storefront.domain.model.order import Order, OrderStatus
from storefront.domain.model.product import LowStockSummary
from storefront.domain.model.value_objects import Money


class NotificationService(ABC):
    """Fire-and-forget customer and admin notifications."""

    @abstractmethod
    def notify_new_order(self, order: Order) -> None:
        """Tell the customer (and store admins) about a new order."""

    @abstractmethod
    def notify_status_changed(
        self,
        order: Order,
        previous_status: OrderStatus,
        next_status: OrderStatus,
    ) -> None:
        """Tell the customer their order moved to ``next_status``."""


class PaymentVerification(Enum):
    SUCCESS = "success"
    PENDING = "pending"
    FAILED = "failed"


@dataclass(frozen=True)
class PaymentInitialization:
    authorization_url: str
    access_code: str
    reference: str


class PaymentGateway(ABC):

    @abstractmethod
    def initialize_transaction(
        self,
        amount: Money,
        reference: str,
        email: str,
        callback_url: str,
        metadata: dict | None = None,
    ) -> PaymentInitialization:
        """Open a hosted card payment and return where to send the customer."""

    @abstractmethod
    def verify_transaction(self, reference: str) -> PaymentVerification:
        """Ask the provider whether ``reference`` was charged."""


class RateLimiter(ABC):

    @abstractmethod
    def allow(self, key: str) -> bool:
        """Record a hit for ``key``; False when the key is over its limit."""


class TokenSigner(ABC):
    """Stateless signed tokens: claims plus an expiry, nothing stored."""

    @abstractmethod
    def sign(self, claims: dict, ttl_seconds: int) -> str:
        ...

    @abstractmethod
    def verify(self, token: str) -> dict | None:
        """Return the claims, or None for a forged, malformed or expired token."""


@dataclass(frozen=True)
class DeliveryReport:
    sent: int = 0
    failed: int = 0
    skipped: bool = False


class StockAlertService(ABC):
    """Admin stock alerts, delivered while the caller waits."""

    @abstractmethod
    def notify_low_stock_summary(self, summary: LowStockSummary) -> DeliveryReport:
        ...
