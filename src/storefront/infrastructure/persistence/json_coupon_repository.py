"""JSON-document-backed implementation of CouponRepository."""

from __future__ import annotations

from storefront.domain.model.coupon import Coupon, CouponUsage, DiscountType
from storefront.domain.model.value_objects import normalize_code, normalize_email
from storefront.domain.repository.coupon_repository import CouponRepository
from storefront.infrastructure.persistence.json_store import (
    dump_datetime,
    dump_money,
    load_datetime,
    load_money,
    next_id,
    upsert,
)


class JsonCouponRepository(CouponRepository):

    def __init__(self, doc: dict) -> None:
        self._rows: list[dict] = doc["coupons"]
        self._usages: list[dict] = doc["coupon_usages"]

    # --- CouponRepository interface -------------------------------------------

    def get_by_code(self, code: str) -> Coupon | None:
        key = normalize_code(code)
        for raw in self._rows:
            if normalize_code(raw["code"]) == key:
                return self._to_domain(raw)
        return None

    def get_by_id(self, coupon_id: int) -> Coupon | None:
        raw = self._find(coupon_id)
        return self._to_domain(raw) if raw is not None else None

    def list_all(self) -> list[Coupon]:
        return [self._to_domain(raw) for raw in self._rows]

    def save(self, coupon: Coupon) -> None:
        if coupon.id is None:
            coupon.id = next_id(self._rows)
        upsert(self._rows, self._to_raw(coupon))

    def redeem(self, coupon_id: int) -> bool:
        raw = self._find(coupon_id)
        if raw is None:
            return False
        limit = raw.get("usage_limit")
        if limit is not None and raw["used_count"] >= limit:
            return False
        raw["used_count"] += 1
        return True

    def add_usage(self, usage: CouponUsage) -> None:
        self._usages.append(
            {
                "id": next_id(self._usages),
                "coupon_id": usage.coupon_id,
                "order_id": usage.order_id,
                "customer_email": normalize_email(usage.customer_email),
                "created_at": dump_datetime(usage.created_at),
            }
        )

    def count_usages_by_email(self, coupon_id: int, customer_email: str) -> int:
        email = normalize_email(customer_email)
        return sum(
            1
            for u in self._usages
            if u["coupon_id"] == coupon_id and u["customer_email"] == email
        )

    # --- Serialization --------------------------------------------------------

    def _find(self, coupon_id: int) -> dict | None:
        for raw in self._rows:
            if raw["id"] == coupon_id:
                return raw
        return None

    @staticmethod
    def _to_raw(coupon: Coupon) -> dict:
        return {
            "id": coupon.id,
            "code": coupon.code,
            "description": coupon.description,
            "discount_type": coupon.discount_type.value,
            "discount_value": coupon.discount_value,
            "min_order_amount": dump_money(coupon.min_order_amount),
            "max_discount_amount": dump_money(coupon.max_discount_amount),
            "starts_at": dump_datetime(coupon.starts_at),
            "ends_at": dump_datetime(coupon.ends_at),
            "usage_limit": coupon.usage_limit,
            "used_count": coupon.used_count,
            "per_customer_limit": coupon.per_customer_limit,
            "is_active": coupon.is_active,
            "created_at": dump_datetime(coupon.created_at),
        }

    @staticmethod
    def _to_domain(raw: dict) -> Coupon:
        return Coupon(
            id=raw["id"],
            code=raw["code"],
            description=raw.get("description", ""),
            discount_type=DiscountType(raw["discount_type"]),
            discount_value=raw["discount_value"],
            min_order_amount=load_money(raw.get("min_order_amount")),
            max_discount_amount=load_money(raw.get("max_discount_amount")),
            starts_at=load_datetime(raw.get("starts_at")),
            ends_at=load_datetime(raw.get("ends_at")),
            usage_limit=raw.get("usage_limit"),
            used_count=raw.get("used_count", 0),
            per_customer_limit=raw.get("per_customer_limit"),
            is_active=raw.get("is_active", True),
            created_at=load_datetime(raw["created_at"]),
        )
