"""Order timeline: the append-only audit trail of an order."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class TimelineEventType(Enum):
    ORDER_CREATED = "order_created"
    STATUS_CHANGED = "status_changed"
    PAYMENT_CONFIRMED = "payment_confirmed"
    NOTE_ADDED = "note_added"


@dataclass(frozen=True)
class OrderTimelineEvent:
    """One entry in an order's history. Never updated once written."""

    order_id: int
    event_type: TimelineEventType
    message: str
    actor: str
    payload: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    id: int | None = None
