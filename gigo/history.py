"""
Upscale History
===============

Bounded, most-recent-first log of rewrites, persisted through a
``KeyValueStore`` so it survives restarts. The maximum size is read from
settings on every insert; shrinking ``historySize`` trims the log on the next
insert.

``insert`` is a read-modify-write on the persisted log. Callers serialize
their inserts; two concurrent inserts may lose an entry.
"""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from .config import Settings
from .interfaces import KeyValueStore

logger = logging.getLogger(__name__)

HISTORY_KEY = "gigo.history"


@dataclass(frozen=True)
class HistoryEntry:
    """One recorded rewrite"""

    original: str
    upscaled: str
    timestamp: int  # epoch milliseconds

    def to_dict(self) -> dict[str, Any]:
        return {
            "original": self.original,
            "upscaled": self.upscaled,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HistoryEntry:
        return cls(
            original=str(data["original"]),
            upscaled=str(data["upscaled"]),
            timestamp=int(data["timestamp"]),
        )


def now_ms() -> int:
    return int(time.time() * 1000)


class HistoryStore:
    """Owns the persisted history log; the only writer of ``HISTORY_KEY``"""

    def __init__(self, storage: KeyValueStore, settings: Settings) -> None:
        self.storage = storage
        self.settings = settings

    def list(self) -> list[HistoryEntry]:
        """Persisted entries, most recent first"""
        raw = self.storage.get(HISTORY_KEY, [])
        if not isinstance(raw, list):
            logger.warning(f"Ignoring malformed history value of type {type(raw).__name__}")
            return []

        entries: list[HistoryEntry] = []
        for item in raw:
            try:
                entries.append(HistoryEntry.from_dict(item))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed history record: {e}")
        return entries

    def get(self, index: int) -> HistoryEntry | None:
        entries = self.list()
        if 0 <= index < len(entries):
            return entries[index]
        return None

    def insert(self, original: str, upscaled: str) -> HistoryEntry:
        """Record a rewrite at the head of the log and trim to the size limit"""
        entry = HistoryEntry(original=original, upscaled=upscaled, timestamp=now_ms())
        max_size = self.settings.history_size()

        entries = [entry, *self.list()][:max_size]
        self.storage.set(HISTORY_KEY, [e.to_dict() for e in entries])
        logger.debug(f"History now holds {len(entries)} of max {max_size} entries")
        return entry


def format_timestamp(timestamp: int) -> str:
    """Short local date, e.g. 'Oct 19, 14:05'"""
    moment = datetime.fromtimestamp(timestamp / 1000)
    return f"{moment:%b} {moment.day}, {moment:%H:%M}"


def preview(text: str, max_length: int = 50) -> str:
    """Single-line preview, truncated with '...'"""
    one_line = re.sub(r"\s+", " ", text).strip()
    if len(one_line) <= max_length:
        return one_line
    return one_line[: max_length - 3] + "..."
