"""Endpoints for share intake and draining the pending buffer."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from fastapi.responses import JSONResponse

from url_inbox.core.deps import get_orchestrator, get_pending_buffer, get_share_channel
from url_inbox.core.logging import get_logger
from url_inbox.models.share import SharedItem, ShareEventEnvelope, ShareIntakeResponse
from url_inbox.services.pending_buffer import PendingBuffer
from url_inbox.services.share_channel import ShareChannel
from url_inbox.services.share_intake import (
    ShareIntakeOrchestrator,
    UnsupportedShareEventError,
    routable_deep_link,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/share", tags=["share"])


@router.post(
    "/events",
    response_model=ShareIntakeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a share event",
    description="Extract URLs and titles from a share event and add them to the pending buffer.",
)
async def submit_share_event(
    payload: ShareEventEnvelope,
    orchestrator: Annotated[ShareIntakeOrchestrator, Depends(get_orchestrator)],
) -> ShareIntakeResponse:
    """Run one share event through the intake pipeline."""
    try:
        added = await orchestrator.dispatch(payload.event)
    except UnsupportedShareEventError as exc:
        raise HTTPException(status_code=status.HTTP_501_NOT_IMPLEMENTED, detail=str(exc)) from exc

    if added:
        result = ShareIntakeResponse(accepted=added, message=f"Buffered {len(added)} item(s)")
        status_code = status.HTTP_201_CREATED
    else:
        result = ShareIntakeResponse(accepted=[], message="No new URLs to buffer")
        status_code = status.HTTP_200_OK
    return JSONResponse(status_code=status_code, content=result.model_dump(mode="json"))


@router.post(
    "/channel/{method}",
    summary="Invoke a share channel method",
    responses={501: {"description": "Method not implemented"}},
)
def invoke_channel_method(
    method: str,
    channel: Annotated[ShareChannel, Depends(get_share_channel)],
) -> Response:
    """Call a channel method by name (``consumeSharedUrls``)."""
    result = channel.invoke(method)
    if not result.implemented:
        raise HTTPException(
            status_code=status.HTTP_501_NOT_IMPLEMENTED,
            detail=f"Method {method} is not implemented",
        )
    return Response(content=result.payload, media_type="application/json")


@router.post("/consume", response_model=list[SharedItem], summary="Drain the pending buffer")
def consume_shared_items(
    buffer: Annotated[PendingBuffer, Depends(get_pending_buffer)],
) -> list[SharedItem]:
    return buffer.drain()


@router.get("/pending", response_model=list[SharedItem], summary="Peek at the pending buffer")
def list_pending_items(
    buffer: Annotated[PendingBuffer, Depends(get_pending_buffer)],
) -> list[SharedItem]:
    return buffer.peek()


@router.get("/deep-link", summary="Resolve what deep-link routing may see for a view URL")
def resolve_deep_link(url: Annotated[str, Query(min_length=1)]) -> dict[str, str | None]:
    return {"route": routable_deep_link(url)}
