"""Abstract repository for notification delivery records."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.notification_log import NotificationLog


class NotificationLogRepository(ABC):

    @abstractmethod
    def append(self, entry: NotificationLog) -> None:
        """Store a delivery record."""

    @abstractmethod
    def list_for_order(self, order_id: int) -> list[NotificationLog]:
        """Return delivery records for one order, oldest first."""
