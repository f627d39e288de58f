"""Domain service: checkout risk scoring.

A small additive heuristic.  Every matching signal adds points and a
flag; the total decides the level, and anything above "low" lands in
the admin manual-review queue.
"""

from __future__ import annotations

from storefront.domain.model.risk import ReviewStatus, RiskAssessment, RiskLevel
from storefront.domain.model.value_objects import Money

DEFAULT_HIGH_AMOUNT_THRESHOLD = 1_500_000
DEFAULT_REVIEW_THRESHOLD = 45
HIGH_RISK_SCORE = 70

GUEST_CHECKOUT_POINTS = 20
MISSING_PHONE_POINTS = 15
HIGH_AMOUNT_POINTS = 35
SUSPICIOUS_EMAIL_POINTS = 20


class RiskScorer:

    def __init__(
        self,
        high_amount_threshold: int = DEFAULT_HIGH_AMOUNT_THRESHOLD,
        review_threshold: int = DEFAULT_REVIEW_THRESHOLD,
    ) -> None:
        self._high_amount_threshold = high_amount_threshold
        self._review_threshold = review_threshold

    def score(
        self,
        customer_email: str | None,
        customer_phone: str | None,
        amount: Money,
        is_guest: bool,
    ) -> RiskAssessment:
        score = 0
        flags: list[str] = []

        if is_guest:
            score += GUEST_CHECKOUT_POINTS
            flags.append("guest_checkout")
        if not (customer_phone or "").strip():
            score += MISSING_PHONE_POINTS
            flags.append("missing_phone")
        if amount.amount > self._high_amount_threshold:
            score += HIGH_AMOUNT_POINTS
            flags.append("high_amount")
        if "@" not in (customer_email or ""):
            score += SUSPICIOUS_EMAIL_POINTS
            flags.append("suspicious_email")

        if score >= HIGH_RISK_SCORE:
            level = RiskLevel.HIGH
        elif score >= self._review_threshold:
            level = RiskLevel.MEDIUM
        else:
            level = RiskLevel.LOW

        review = ReviewStatus.CLEAR if level is RiskLevel.LOW else ReviewStatus.QUEUED
        return RiskAssessment(
            score=score,
            level=level,
            flags=tuple(flags),
            manual_review_status=review,
        )
