"""Domain service: Promotional rule engine.

Every live rule is evaluated against the cart, newest rule first.  Rules
stack, but they share a single budget: the running promo discount can
never exceed the cart subtotal, so a rule evaluated late may contribute
less than its face value (or nothing at all).
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field, replace
from datetime import datetime

from storefront.domain.model.order import OrderLineItem
from storefront.domain.model.promo_rule import PromoRule, PromoRuleType
from storefront.domain.model.value_objects import Money, utc_now
from storefront.domain.repository.promo_rule_repository import PromoRuleRepository


@dataclass(frozen=True)
class PromoBreakdownLine:
    rule_id: int
    name: str
    rule_type: PromoRuleType
    discount: Money


@dataclass(frozen=True)
class PromoApplication:
    promo_discount: Money
    applied_rule_ids: tuple[int, ...] = ()
    breakdown: tuple[PromoBreakdownLine, ...] = field(default_factory=tuple)

    def capped(self, limit: Money) -> PromoApplication:
        """Shrink to at most ``limit``, newest rule first; rules left with nothing drop out."""
        if self.promo_discount <= limit:
            return self
        remaining = limit
        kept: list[PromoBreakdownLine] = []
        for line in self.breakdown:
            share = line.discount.cap(remaining)
            if share.is_zero:
                break
            kept.append(replace(line, discount=share))
            remaining = remaining.less(share)
        total = Money.zero(limit.currency)
        for line in kept:
            total = total + line.discount
        return PromoApplication(
            promo_discount=total,
            applied_rule_ids=tuple(line.rule_id for line in kept),
            breakdown=tuple(kept),
        )


class PromoRuleEngine:

    def __init__(
        self,
        promo_repo: PromoRuleRepository,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._promo_repo = promo_repo
        self._clock = clock

    def apply(self, items: Sequence[OrderLineItem], subtotal: Money) -> PromoApplication:
        rules = sorted(
            self._promo_repo.list_live(self._clock()),
            key=lambda r: (r.created_at, r.id or 0),
            reverse=True,
        )

        total = Money.zero(subtotal.currency)
        applied: list[int] = []
        breakdown: list[PromoBreakdownLine] = []

        for rule in rules:
            if not self._is_eligible(rule, items, subtotal):
                continue

            remaining = subtotal.less(total)
            discount = self._rule_discount(rule, items, subtotal).cap(remaining)
            if discount.is_zero:
                continue

            total = total + discount
            applied.append(rule.id)
            breakdown.append(
                PromoBreakdownLine(
                    rule_id=rule.id,
                    name=rule.name,
                    rule_type=rule.rule_type,
                    discount=discount,
                )
            )

        return PromoApplication(
            promo_discount=total,
            applied_rule_ids=tuple(applied),
            breakdown=tuple(breakdown),
        )

    # --- Rule evaluation ------------------------------------------------------

    @staticmethod
    def _is_eligible(
        rule: PromoRule, items: Sequence[OrderLineItem], subtotal: Money
    ) -> bool:
        if subtotal < rule.min_cart_amount:
            return False
        if rule.category is None:
            return True
        return any(item.category == rule.category for item in items)

    @staticmethod
    def _rule_discount(
        rule: PromoRule, items: Sequence[OrderLineItem], subtotal: Money
    ) -> Money:
        if rule.rule_type is PromoRuleType.DISCOUNT:
            return rule.discount_type.discount_for(rule.discount_value, subtotal)

        # BOGO: free units come from the designated product's line only
        for item in items:
            if item.product_id == rule.bogo_product_id:
                free_units = (item.quantity.value // rule.bogo_buy_qty) * rule.bogo_get_qty
                return item.unit_price * free_units
        return Money.zero(subtotal.currency)
