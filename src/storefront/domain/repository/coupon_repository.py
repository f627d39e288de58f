"""Abstract repository for Coupon aggregate and its usage ledger."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.coupon import Coupon, CouponUsage


class CouponRepository(ABC):

    @abstractmethod
    def get_by_code(self, code: str) -> Coupon | None:
        """Return the coupon matching ``code`` case-insensitively, or None."""

    @abstractmethod
    def get_by_id(self, coupon_id: int) -> Coupon | None:
        """Return a coupon by its ID, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[Coupon]:
        """Return every coupon, newest first."""

    @abstractmethod
    def save(self, coupon: Coupon) -> None:
        """Persist a new or updated coupon (assigns an ID to new ones)."""

    @abstractmethod
    def redeem(self, coupon_id: int) -> bool:
        """Increment ``used_count`` only while it is below ``usage_limit``.

        Returns False when the coupon is missing or already exhausted, in
        which case nothing is changed.
        """

    @abstractmethod
    def add_usage(self, usage: CouponUsage) -> None:
        """Append a usage row."""

    @abstractmethod
    def count_usages_by_email(self, coupon_id: int, customer_email: str) -> int:
        """Number of orders ``customer_email`` has placed with this coupon."""
