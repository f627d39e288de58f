"""JSON-document-backed implementation of NotificationLogRepository."""

from __future__ import annotations

from storefront.domain.model.notification_log import NotificationLog, NotificationStatus
from storefront.domain.repository.notification_log_repository import (
    NotificationLogRepository,
)
from storefront.infrastructure.persistence.json_store import (
    dump_datetime,
    load_datetime,
    next_id,
)


class JsonNotificationLogRepository(NotificationLogRepository):

    def __init__(self, doc: dict) -> None:
        self._rows: list[dict] = doc["notification_logs"]

    def append(self, entry: NotificationLog) -> None:
        self._rows.append(
            {
                "id": next_id(self._rows),
                "order_id": entry.order_id,
                "event_type": entry.event_type,
                "channel": entry.channel,
                "recipient": entry.recipient,
                "status": entry.status.value,
                "error_message": entry.error_message,
                "payload": dict(entry.payload),
                "created_at": dump_datetime(entry.created_at),
            }
        )

    def list_for_order(self, order_id: int) -> list[NotificationLog]:
        return [
            NotificationLog(
                id=raw["id"],
                order_id=raw["order_id"],
                event_type=raw["event_type"],
                channel=raw["channel"],
                recipient=raw["recipient"],
                status=NotificationStatus(raw["status"]),
                error_message=raw.get("error_message"),
                payload=raw.get("payload", {}),
                created_at=load_datetime(raw["created_at"]),
            )
            for raw in self._rows
            if raw["order_id"] == order_id
        ]
