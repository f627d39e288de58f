"""Delivery record for every customer/admin notification attempt."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class NotificationStatus(Enum):
    SENT = "sent"
    FALLBACK = "fallback"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class NotificationLog:
    event_type: str
    channel: str
    recipient: str
    status: NotificationStatus
    order_id: int | None = None
    error_message: str | None = None
    payload: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    id: int | None = None
