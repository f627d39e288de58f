"""Risk assessment attached to every order at checkout."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class RiskLevel(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ReviewStatus(Enum):
    CLEAR = "clear"
    QUEUED = "queued"


@dataclass(frozen=True)
class RiskAssessment:
    score: int
    level: RiskLevel
    flags: tuple[str, ...]
    manual_review_status: ReviewStatus

    @property
    def needs_review(self) -> bool:
        return self.manual_review_status is ReviewStatus.QUEUED
