"""FastAPI dependencies for the share buffer services."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from url_inbox.services.kv_store import build_store
from url_inbox.services.pending_buffer import PendingBuffer
from url_inbox.services.share_channel import ShareChannel
from url_inbox.services.share_intake import ShareIntakeOrchestrator


@lru_cache
def get_pending_buffer() -> PendingBuffer:
    """Process-wide buffer; one instance so its lock covers every request."""
    return PendingBuffer(build_store())


def get_orchestrator(
    buffer: Annotated[PendingBuffer, Depends(get_pending_buffer)],
) -> ShareIntakeOrchestrator:
    return ShareIntakeOrchestrator(buffer)


def get_share_channel(
    buffer: Annotated[PendingBuffer, Depends(get_pending_buffer)],
) -> ShareChannel:
    return ShareChannel(buffer)
