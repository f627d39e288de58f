"""Single JSON document holding every collection of the store.

All reads and writes go through one file, ``store.json``.  Writers take
an exclusive lock on a sidecar lock file and replace the document
atomically, so a crash never leaves a half-written store behind.
"""

from __future__ import annotations

import fcntl
import json
import os
import tempfile
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Iterator

from storefront.domain.model.value_objects import Money

STORE_FILE = "store.json"
LOCK_FILE = ".store.lock"
SCHEMA_VERSION = 1

COLLECTIONS = (
    "products",
    "zones",
    "coupons",
    "coupon_usages",
    "promo_rules",
    "orders",
    "timeline",
    "notification_logs",
)


def empty_document() -> dict[str, Any]:
    doc: dict[str, Any] = {"schema_version": SCHEMA_VERSION}
    for name in COLLECTIONS:
        doc[name] = []
    return doc


class JsonDocumentStore:
    """Loads and saves the store document under ``data_dir``."""

    def __init__(self, data_dir: Path) -> None:
        self.data_dir = Path(data_dir)
        self.path = self.data_dir / STORE_FILE

    def _ensure_dir(self) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)

    @contextmanager
    def lock(self) -> Iterator[None]:
        """Hold an exclusive lock on the store for a read-modify-write cycle."""
        self._ensure_dir()
        with open(self.data_dir / LOCK_FILE, "w") as lock_file:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)

    def load(self) -> dict[str, Any]:
        if not self.path.exists():
            return empty_document()

        with open(self.path, "r", encoding="utf-8") as f:
            doc = json.load(f)
        # Collections added after the file was first written.
        for name in COLLECTIONS:
            doc.setdefault(name, [])
        return doc

    def save(self, doc: dict[str, Any]) -> None:
        """Write the document atomically (temp file + rename)."""
        self._ensure_dir()

        fd, temp_path = tempfile.mkstemp(dir=self.data_dir, prefix=".store_", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(doc, f, indent=2, ensure_ascii=False)
                f.write("\n")
            os.replace(temp_path, self.path)
        except Exception:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise


# --- Field helpers shared by the repositories ---------------------------------

def dump_datetime(moment: datetime | None) -> str | None:
    return moment.isoformat() if moment is not None else None


def load_datetime(raw: str | None) -> datetime | None:
    return datetime.fromisoformat(raw) if raw else None


def dump_money(money: Money | None) -> int | None:
    return money.amount if money is not None else None


def load_money(raw: int | None, currency: str = "NGN") -> Money | None:
    return Money(raw, currency) if raw is not None else None


def next_id(rows: list[dict]) -> int:
    if not rows:
        return 1
    return max(r["id"] for r in rows) + 1


def upsert(rows: list[dict], raw: dict, key: str = "id") -> None:
    """Replace the row with the same ``key`` or append a new one."""
    for i, existing in enumerate(rows):
        if existing[key] == raw[key]:
            rows[i] = raw
            return
    rows.append(raw)
