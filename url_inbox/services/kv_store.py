"""String key-value stores backing the pending share buffer."""

from __future__ import annotations

import threading
from typing import Protocol

from sqlalchemy.orm import sessionmaker

from url_inbox.core.db import get_db, get_session_factory
from url_inbox.core.logging import get_logger
from url_inbox.core.settings import get_settings
from url_inbox.models.schema import BufferSlot

logger = get_logger(__name__)


class KeyValueStore(Protocol):
    """Opaque get/set string store."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class InMemoryKeyValueStore:
    """Process-local store, used in tests and with ``STORE_BACKEND=memory``."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._values: dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._values[key] = value


class SqlKeyValueStore:
    """Store slots as rows of ``share_buffer_slots`` through SQLAlchemy."""

    def __init__(self, session_factory: sessionmaker | None = None):
        self._session_factory = session_factory

    def _factory(self) -> sessionmaker:
        return self._session_factory or get_session_factory()

    def get(self, key: str) -> str | None:
        with get_db(self._factory()) as db:
            slot = db.get(BufferSlot, key)
            return slot.value if slot is not None else None

    def set(self, key: str, value: str) -> None:
        with get_db(self._factory()) as db:
            slot = db.get(BufferSlot, key)
            if slot is None:
                db.add(BufferSlot(key=key, value=value))
            else:
                slot.value = value
        logger.debug("Stored slot %s (%d chars)", key, len(value))


def build_store() -> KeyValueStore:
    """Create the store selected by ``STORE_BACKEND``."""
    settings = get_settings()
    if settings.store_backend == "memory":
        return InMemoryKeyValueStore()
    return SqlKeyValueStore()
