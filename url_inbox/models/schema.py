from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, String, Text

from url_inbox.core.db import Base


def _utcnow() -> datetime:
    return datetime.now(UTC)


class BufferSlot(Base):
    """One named slot of the share key-value store.

    The value is an opaque string; the pending buffer keeps a JSON array here.
    """

    __tablename__ = "share_buffer_slots"

    key = Column(String(200), primary_key=True)
    value = Column(Text, nullable=False, default="")
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    def __repr__(self):
        return f"<BufferSlot(key={self.key!r}, size={len(self.value or '')})>"
