"""Turn incoming share events into buffered ``{url, title}`` items."""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any, Protocol
from urllib.parse import urlparse

from url_inbox.core.logging import get_logger
from url_inbox.core.settings import get_settings
from url_inbox.models.share import (
    AttachmentListShare,
    DirectViewShare,
    MultipleTextsShare,
    SharedItem,
    SingleTextShare,
)
from url_inbox.services.pending_buffer import PendingBuffer
from url_inbox.services.title_inference import TitleHeuristics, infer_title, remove_url
from url_inbox.services.url_extraction import extract_urls
from url_inbox.services.url_normalizer import normalize_url_token

logger = get_logger(__name__)

CompletionCallback = Callable[[list[SharedItem]], Awaitable[None] | None]


class UnsupportedShareEventError(ValueError):
    """Raised for event objects the orchestrator does not know how to handle."""


class AttachmentProvider(Protocol):
    """An extension attachment whose payload is loaded asynchronously."""

    kind: str

    async def load(self) -> Any: ...


@dataclass
class StaticAttachmentProvider:
    """Attachment whose payload is already in memory."""

    kind: str
    payload: Any

    async def load(self) -> Any:
        return self.payload


def is_auth_callback_url(
    raw: str, reserved_scheme: str | None = None, marker: str | None = None
) -> bool:
    """Return True for the app's own login callback, which must never be buffered.

    Args:
        raw: URL string from a view/deep-link event.
        reserved_scheme: App-private scheme (defaults to settings).
        marker: Callback host/marker (defaults to settings).

    Returns:
        True when ``raw`` mentions the marker anywhere, or parses to the reserved
        scheme with the marker as host. Unparseable input is not a callback.
    """
    settings = get_settings()
    scheme = (reserved_scheme or settings.reserved_scheme).lower()
    marker = (marker or settings.callback_marker).lower()

    if marker in raw.lower():
        return True
    try:
        parsed = urlparse(raw)
        host = parsed.hostname or ""
    except ValueError as exc:
        logger.debug("Could not parse view URL, treating as non-callback: %s", exc)
        return False
    return parsed.scheme.lower() == scheme and host.lower() == marker


def routable_deep_link(
    raw: str | None, reserved_scheme: str | None = None, marker: str | None = None
) -> str | None:
    """Return the URL generic deep-link routing may see for a view event.

    Only the reserved login callback is passed through (to the auth handler);
    every other view URL is stripped so shared links never hijack navigation.
    """
    if not raw:
        return None
    settings = get_settings()
    scheme = (reserved_scheme or settings.reserved_scheme).lower()
    marker = (marker or settings.callback_marker).lower()
    try:
        parsed = urlparse(raw)
        host = parsed.hostname or ""
    except ValueError:
        return None
    if parsed.scheme.lower() == scheme and host.lower() == marker:
        return raw
    return None


def _urls_from_url_payload(payload: str) -> list[str]:
    """URLs contributed by a URL attachment.

    A single token with a scheme is kept as loaded, and an allow-listed bare
    domain gets normalized; anything else is free text for the extractor.
    """
    candidate = payload.strip()
    if not candidate:
        return []
    if len(candidate.split()) == 1:
        if "://" in candidate:
            return [candidate]
        normalized = normalize_url_token(candidate)
        if normalized is not None:
            return [normalized]
    return extract_urls(candidate)


def _dedupe_trimmed(urls: Sequence[str]) -> list[str]:
    unique: dict[str, None] = {}
    for url in urls:
        cleaned = url.strip()
        if cleaned:
            unique.setdefault(cleaned, None)
    return list(unique)


class ShareIntakeOrchestrator:
    """Dispatch share events to extraction/title inference and buffer the results."""

    def __init__(
        self,
        buffer: PendingBuffer,
        heuristics: TitleHeuristics | None = None,
        attachment_timeout_seconds: float | None = None,
    ):
        self.buffer = buffer
        self.heuristics = heuristics or TitleHeuristics.from_settings()
        if attachment_timeout_seconds is None:
            attachment_timeout_seconds = get_settings().attachment_load_timeout_seconds
        self.attachment_timeout_seconds = attachment_timeout_seconds

    def handle_event(self, event: object) -> list[SharedItem]:
        """Handle a text, multiple-text or view event synchronously.

        Returns:
            Items newly added to the buffer.

        Raises:
            UnsupportedShareEventError: For attachment lists (see :meth:`dispatch`)
                and unknown event objects.
        """
        if isinstance(event, SingleTextShare):
            items = self._items_from_text(event)
        elif isinstance(event, MultipleTextsShare):
            items = self._items_from_multiple_texts(event)
        elif isinstance(event, DirectViewShare):
            items = self._items_from_view(event)
        elif isinstance(event, AttachmentListShare):
            raise UnsupportedShareEventError(
                "Attachment lists load asynchronously; use dispatch() or handle_attachments()"
            )
        else:
            raise UnsupportedShareEventError(f"Unsupported share event: {type(event).__name__}")

        if not items:
            return []
        return self.buffer.append(items)

    async def dispatch(self, event: object) -> list[SharedItem]:
        """Handle any share event, awaiting attachment loads when needed.

        Buffer writes run in a worker thread so store I/O stays off the event loop.
        """
        if isinstance(event, AttachmentListShare):
            providers = [
                StaticAttachmentProvider(kind=attachment.kind, payload=attachment.payload)
                for attachment in event.attachments
            ]
            return await self.handle_attachments(providers)
        return await asyncio.to_thread(self.handle_event, event)

    def _items_from_text(self, event: SingleTextShare) -> list[SharedItem]:
        urls = extract_urls(event.text)
        logger.debug(
            "Text share: %d chars, subject %d chars, %d url(s)",
            len(event.text),
            len(event.subject),
            len(urls),
        )
        items = [
            SharedItem(
                url=url,
                title=infer_title(event.text, url, event.subject, heuristics=self.heuristics),
            )
            for url in urls
        ]
        if event.stream_uri:
            items.append(SharedItem(url=event.stream_uri, title=""))
        return items

    def _items_from_multiple_texts(self, event: MultipleTextsShare) -> list[SharedItem]:
        items: list[SharedItem] = []
        for text in event.texts:
            for url in extract_urls(text):
                items.append(SharedItem(url=url, title=remove_url(text, url).strip()))
        return items

    def _items_from_view(self, event: DirectViewShare) -> list[SharedItem]:
        if not event.url.strip():
            return []
        if is_auth_callback_url(event.url):
            logger.info("Ignoring login callback view event")
            return []
        return [SharedItem(url=event.url, title="")]

    async def _load_attachment(self, provider: AttachmentProvider) -> Any:
        if self.attachment_timeout_seconds:
            return await asyncio.wait_for(provider.load(), self.attachment_timeout_seconds)
        return await provider.load()

    async def handle_attachments(
        self,
        providers: Sequence[AttachmentProvider],
        on_complete: CompletionCallback | None = None,
    ) -> list[SharedItem]:
        """Load extension attachments concurrently and buffer every URL found.

        All loads are joined before anything is appended; a failed or timed-out
        load contributes nothing. ``on_complete`` runs only after the append.

        Args:
            providers: Attachments with ``kind`` ``"url"`` or ``"text"``.
            on_complete: Optional sync or async callback receiving the added items.

        Returns:
            Items newly added to the buffer.
        """
        results = await asyncio.gather(
            *(self._load_attachment(provider) for provider in providers),
            return_exceptions=True,
        )

        collected: list[str] = []
        for provider, result in zip(providers, results, strict=True):
            if isinstance(result, BaseException):
                logger.warning(
                    "Attachment load failed (%s): %s",
                    provider.kind,
                    type(result).__name__,
                    extra={"component": "share_intake", "operation": "load_attachment"},
                )
                continue
            if result is None:
                continue
            if provider.kind == "url":
                collected.extend(_urls_from_url_payload(str(result)))
            elif provider.kind == "text":
                collected.extend(extract_urls(str(result)))
            else:
                logger.debug("Skipping attachment of unsupported kind %s", provider.kind)

        items = [SharedItem(url=url, title="") for url in _dedupe_trimmed(collected)]
        added = await asyncio.to_thread(self.buffer.append, items) if items else []
        logger.info(
            "Attachment share: %d provider(s), %d url(s), %d added",
            len(providers),
            len(items),
            len(added),
        )

        if on_complete is not None:
            outcome = on_complete(added)
            if inspect.isawaitable(outcome):
                await outcome
        return added
