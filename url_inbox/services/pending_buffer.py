"""Pending share buffer: URL-deduplicated items waiting for the consuming app."""

from __future__ import annotations

import json
import threading
from collections.abc import Iterable
from typing import Any

from url_inbox.core.logging import get_logger
from url_inbox.core.settings import get_settings
from url_inbox.models.share import SharedItem
from url_inbox.services.kv_store import KeyValueStore

logger = get_logger(__name__)


def _parse_items(raw: str | None, slot_key: str) -> list[SharedItem]:
    """Decode a stored slot; anything unreadable counts as an empty buffer."""
    if raw is None or not raw.strip():
        return []
    try:
        decoded = json.loads(raw)
    except (TypeError, ValueError) as exc:
        logger.warning(
            "Pending slot %s is not valid JSON, treating as empty: %s",
            slot_key,
            exc,
            extra={"component": "pending_buffer", "operation": "parse_slot"},
        )
        return []
    if not isinstance(decoded, list):
        logger.warning(
            "Pending slot %s does not hold a list, treating as empty",
            slot_key,
            extra={"component": "pending_buffer", "operation": "parse_slot"},
        )
        return []

    items: list[SharedItem] = []
    for entry in decoded:
        if not isinstance(entry, dict):
            continue
        url = entry.get("url")
        if not isinstance(url, str) or not url:
            continue
        title = entry.get("title")
        items.append(SharedItem(url=url, title=title if isinstance(title, str) else ""))
    return items


def _dump_items(items: Iterable[SharedItem]) -> str:
    payload: list[dict[str, Any]] = [item.model_dump() for item in items]
    return json.dumps(payload, ensure_ascii=False)


class PendingBuffer:
    """Ordered ``{url, title}`` records persisted under one store slot.

    No two buffered items share a URL. ``append`` merges and ``drain`` returns
    everything and leaves the slot empty; both hold the same lock, so a drain
    never sees half of an appended batch.
    """

    def __init__(self, store: KeyValueStore, slot_key: str | None = None):
        self.store = store
        self.slot_key = slot_key or get_settings().pending_slot_key
        self._lock = threading.Lock()

    def _load(self) -> list[SharedItem]:
        try:
            raw = self.store.get(self.slot_key)
        except Exception as exc:
            logger.warning(
                "Failed to read pending slot %s: %s",
                self.slot_key,
                exc,
                extra={"component": "pending_buffer", "operation": "load"},
            )
            return []
        return _parse_items(raw, self.slot_key)

    def _save(self, items: list[SharedItem]) -> None:
        self.store.set(self.slot_key, _dump_items(items))

    def peek(self) -> list[SharedItem]:
        """Return buffered items without consuming them."""
        with self._lock:
            return self._load()

    def append(self, items: Iterable[SharedItem]) -> list[SharedItem]:
        """Merge items into the buffer, skipping URLs that are already present.

        Args:
            items: Items to add, in order.

        Returns:
            The items that were actually added.
        """
        incoming = list(items)
        if not incoming:
            return []

        with self._lock:
            existing = self._load()
            seen = {item.url for item in existing}
            added: list[SharedItem] = []
            for item in incoming:
                if item.url in seen:
                    continue
                seen.add(item.url)
                added.append(item)
            if added:
                self._save(existing + added)

        logger.info(
            "Buffered %d shared item(s), skipped %d duplicate(s)",
            len(added),
            len(incoming) - len(added),
        )
        return added

    def drain(self) -> list[SharedItem]:
        """Return every buffered item and clear the buffer."""
        with self._lock:
            items = self._load()
            self._save([])
        if items:
            logger.info("Drained %d shared item(s)", len(items))
        return items

    def consume_json(self) -> str:
        """Drain the buffer as a JSON array string; ``"[]"`` when nothing is readable."""
        try:
            return _dump_items(self.drain())
        except Exception:
            logger.exception(
                "Failed to drain pending buffer",
                extra={"component": "pending_buffer", "operation": "consume_json"},
            )
            return "[]"
