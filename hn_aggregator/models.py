from datetime import datetime, timezone
from typing import Literal, Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, field_validator

ITEM_PAGE_URL = "https://news.ycombinator.com/item?id={id}"

ItemType = Literal["story", "comment", "job", "poll", "pollopt"]


def relative_age(timestamp: Optional[int], now: Optional[datetime] = None) -> str:
    """
    Convert a Unix timestamp to a relative age such as "3 hours ago".

    Args:
        timestamp: Seconds since the epoch, or None
        now: Reference instant (defaults to the current UTC time)

    Returns:
        The human-readable age, or an empty string when there is no timestamp
    """
    if not timestamp:
        return ""
    now = now or datetime.now(timezone.utc)
    seconds = (now - datetime.fromtimestamp(timestamp, timezone.utc)).total_seconds()
    minutes = seconds / 60
    hours = minutes / 60
    days = hours / 24

    if minutes < 1:
        return "just now"
    if minutes < 60:
        return f"{int(minutes)} minutes ago"
    if hours < 24:
        return f"{int(hours)} hours ago"
    if days < 30:
        return f"{int(days)} days ago"
    if days < 365:
        return f"{int(days / 30)} months ago"
    return f"{int(days / 365)} years ago"


class Item(BaseModel):
    """A Hacker News item: story, comment, job, poll or poll option."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    type: Optional[ItemType] = None
    by: Optional[str] = None
    time: Optional[int] = None
    text: Optional[str] = None
    url: Optional[str] = None
    score: int = 0
    title: Optional[str] = None
    descendants: int = 0
    parent: Optional[int] = None
    poll: Optional[int] = None
    kids: tuple[int, ...] = ()
    parts: tuple[int, ...] = ()
    deleted: bool = False
    dead: bool = False

    @field_validator("kids", "parts", mode="before")
    @classmethod
    def _null_ids(cls, value):
        return () if value is None else value

    @field_validator("score", "descendants", mode="before")
    @classmethod
    def _null_counts(cls, value):
        return 0 if value is None else value

    @field_validator("deleted", "dead", mode="before")
    @classmethod
    def _null_flags(cls, value):
        return False if value is None else value

    @property
    def display_url(self) -> str:
        """The external URL for link posts, otherwise the item's own page."""
        return self.url or ITEM_PAGE_URL.format(id=self.id)

    @property
    def domain(self) -> str:
        """Bare host of the external URL without a leading "www."."""
        if not self.url:
            return ""
        try:
            host = urlsplit(self.url).hostname or ""
        except ValueError:
            return ""
        if host.startswith("www."):
            host = host[4:]
        return host

    @property
    def created_at(self) -> Optional[datetime]:
        if not self.time:
            return None
        return datetime.fromtimestamp(self.time, timezone.utc)

    @property
    def time_ago(self) -> str:
        return relative_age(self.time)

    @property
    def is_story(self) -> bool:
        return self.type == "story"

    @property
    def is_comment(self) -> bool:
        return self.type == "comment"

    @property
    def is_job(self) -> bool:
        return self.type == "job"

    @property
    def is_poll(self) -> bool:
        return self.type == "poll"

    @property
    def is_poll_option(self) -> bool:
        return self.type == "pollopt"

    @property
    def is_live(self) -> bool:
        """True unless the item is deleted or dead."""
        return not (self.deleted or self.dead)


class UserProfile(BaseModel):
    """A Hacker News user profile."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    created: int = 0
    karma: int = 0
    about: Optional[str] = None
    submitted: tuple[int, ...] = ()

    @field_validator("submitted", mode="before")
    @classmethod
    def _null_submitted(cls, value):
        return () if value is None else value

    @property
    def created_at(self) -> Optional[datetime]:
        if not self.created:
            return None
        return datetime.fromtimestamp(self.created, timezone.utc)

    @property
    def member_since(self) -> str:
        """Account creation month, e.g. "October 2007"."""
        created_at = self.created_at
        return created_at.strftime("%B %Y") if created_at else ""


class CommentNode(BaseModel):
    """A comment placed in an assembled tree, with its resolution depth."""

    model_config = ConfigDict(frozen=True)

    item: Item
    depth: int

    @property
    def parent_id(self) -> int:
        # Malformed records without a parent nest under 0
        return self.item.parent if self.item.parent is not None else 0


class ActiveUpdates(BaseModel):
    """Payload of the updates feed; only ``items`` drives the active view."""

    model_config = ConfigDict(extra="ignore")

    items: list[int] = []
    profiles: list[str] = []


class ChangeReport(BaseModel):
    """Result of a refresh check."""

    model_config = ConfigDict(populate_by_name=True)

    list_changed: bool = Field(alias="listChanged")
    scores: dict[int, int] = {}
