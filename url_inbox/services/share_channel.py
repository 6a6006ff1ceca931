"""Method-call surface the consuming app uses to pull shared URLs."""

from __future__ import annotations

from dataclasses import dataclass

from url_inbox.core.logging import get_logger
from url_inbox.core.settings import get_settings
from url_inbox.services.pending_buffer import PendingBuffer

logger = get_logger(__name__)

CONSUME_SHARED_URLS = "consumeSharedUrls"


@dataclass(frozen=True)
class MethodResult:
    """Outcome of a channel call: a string payload or "not implemented"."""

    implemented: bool
    payload: str | None = None

    @classmethod
    def success(cls, payload: str) -> MethodResult:
        return cls(implemented=True, payload=payload)

    @classmethod
    def not_implemented(cls) -> MethodResult:
        return cls(implemented=False)


class ShareChannel:
    def __init__(self, buffer: PendingBuffer, name: str | None = None):
        self.buffer = buffer
        self.name = name or get_settings().channel_name

    def invoke(self, method: str) -> MethodResult:
        """Run a channel method; unknown methods report not-implemented."""
        if method == CONSUME_SHARED_URLS:
            return MethodResult.success(self.buffer.consume_json())
        logger.warning("Channel %s received unsupported method %s", self.name, method)
        return MethodResult.not_implemented()
