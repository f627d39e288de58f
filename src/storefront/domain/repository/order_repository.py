"""Abstract repositories for the Order aggregate and its timeline."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.order import Order, OrderStatus
from storefront.domain.model.timeline import OrderTimelineEvent


class OrderRepository(ABC):

    @abstractmethod
    def next_id(self) -> int:
        """Generate the next unique order ID."""

    @abstractmethod
    def get_by_id(self, order_id: int) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def get_by_reference(self, reference: str) -> Order | None:
        """Return an order by its payment reference, or None if not found."""

    @abstractmethod
    def list(self, status: OrderStatus | None = None) -> list[Order]:
        """Return orders newest first, optionally filtered by status."""

    @abstractmethod
    def save(self, order: Order) -> None:
        """Persist a new or updated order (assigns an ID to new ones)."""


class TimelineRepository(ABC):

    @abstractmethod
    def append(self, event: OrderTimelineEvent) -> OrderTimelineEvent:
        """Store an event and return it with its assigned ID."""

    @abstractmethod
    def list_for_order(self, order_id: int) -> list[OrderTimelineEvent]:
        """Return an order's events in the order they were written."""
