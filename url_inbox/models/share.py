"""Pydantic models for shared items and incoming share events."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, Field


class SharedItem(BaseModel):
    """A buffered share: the extracted URL and a best-effort title.

    Identity is ``url``; two items with the same url are duplicates.
    """

    url: str = Field(..., min_length=1, description="Extraction-normalized URL")
    title: str = Field("", description="Human-readable title, possibly empty")


class SingleTextShare(BaseModel):
    """Plain-text share, optionally with a subject line and a raw stream URI."""

    kind: Literal["text"] = "text"
    text: str = ""
    subject: str = ""
    stream_uri: str | None = Field(
        None, description="Raw URI attached to the share; buffered without extraction"
    )


class MultipleTextsShare(BaseModel):
    """Share carrying several independent text items."""

    kind: Literal["multiple_texts"] = "multiple_texts"
    texts: list[str] = Field(default_factory=list)


class DirectViewShare(BaseModel):
    """Deep link / open-URL event carrying a single raw URL."""

    kind: Literal["view"] = "view"
    url: str


class Attachment(BaseModel):
    """Extension attachment that has already been materialized."""

    kind: Literal["url", "text"]
    payload: str


class AttachmentListShare(BaseModel):
    """Share-extension event with a list of attachments."""

    kind: Literal["attachments"] = "attachments"
    attachments: list[Attachment] = Field(default_factory=list)


ShareEvent = Annotated[
    SingleTextShare | MultipleTextsShare | DirectViewShare | AttachmentListShare,
    Field(discriminator="kind"),
]


class ShareEventEnvelope(BaseModel):
    """Request body wrapper so the event union can be validated on its own."""

    event: ShareEvent

    class Config:
        json_schema_extra = {
            "example": {
                "event": {
                    "kind": "text",
                    "text": "Check this out\nhttps://example.com/article",
                    "subject": "",
                }
            }
        }


class ShareIntakeResponse(BaseModel):
    """Items offered to the pending buffer for one event."""

    accepted: list[SharedItem] = Field(default_factory=list)
    message: str = Field(..., description="Human-readable status message")
