"""Data models for decoded RSS feeds."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class FeedItem(BaseModel):
    """A single RSS <item>.

    Fields are passed through exactly as decoded; missing elements become
    empty strings rather than validation errors.
    """

    model_config = ConfigDict(frozen=True)

    title: str = ""
    description: str = ""
    link: str = ""
    guid: str = Field(default="", description="Unique item identifier, used as the event UID")
    published_at: str = Field(default="", description="Raw <pubDate> text, not yet normalized")


class Feed(BaseModel):
    """An RSS channel and its items in document order."""

    model_config = ConfigDict(frozen=True)

    title: str = ""
    description: str = ""
    items: tuple[FeedItem, ...] = ()
