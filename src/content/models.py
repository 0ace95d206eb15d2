"""Content domain models — pure Pydantic v2 data types.

A Post moves through two independent axes: its visibility status
(draft or published) and a soft-delete overlay (``is_deleted`` plus
``deleted_at``).  Records are persisted with the camelCase field names
of the stored layout, so every model uses a camel alias generator.
"""

from __future__ import annotations

import math
import uuid
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

CURRENT_SCHEMA_VERSION = 1
DEFAULT_AUTHOR = "irsal"
EXCERPT_LENGTH = 150

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


class PostStatus(StrEnum):
    """Visibility of a post, independent of deletion."""

    DRAFT = "draft"
    PUBLISHED = "published"


class PostFilter(StrEnum):
    """Listing filters offered by the author dashboard."""

    ALL = "all"
    DRAFT = "draft"
    PUBLISHED = "published"
    TRASH = "trash"


class _StoredModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


def _ensure_aware(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class Comment(_StoredModel):
    """A reader comment.  Append-only child of exactly one post."""

    id: str
    author_username: str
    content: str
    date: datetime

    @field_validator("date")
    @classmethod
    def _aware(cls, value: datetime) -> datetime:
        return _ensure_aware(value)  # type: ignore[return-value]


class Post(_StoredModel):
    """A unit of authored content."""

    id: str
    title: str
    excerpt: str = ""
    content: str = ""
    date: datetime
    read_time: str = ""
    tags: list[str] = Field(default_factory=list)
    likes: int = 0
    shares: int = 0
    author_username: str = DEFAULT_AUTHOR
    comments: list[Comment] = Field(default_factory=list)
    status: PostStatus = PostStatus.DRAFT
    last_edited: datetime | None = None
    is_deleted: bool = False
    deleted_at: datetime | None = None
    schema_version: int = CURRENT_SCHEMA_VERSION

    @field_validator("date", "last_edited", "deleted_at")
    @classmethod
    def _aware(cls, value: datetime | None) -> datetime | None:
        return _ensure_aware(value)

    @property
    def last_touched(self) -> datetime:
        """When the post last changed: ``last_edited``, else creation date."""
        return self.last_edited or self.date

    @property
    def engagement(self) -> int:
        """Trending score: likes + comment count + shares."""
        return self.likes + len(self.comments) + self.shares

    @property
    def is_public(self) -> bool:
        return self.status == PostStatus.PUBLISHED and not self.is_deleted

    def to_stored(self) -> dict[str, Any]:
        """Return the JSON-ready dict in the persisted layout."""
        return self.model_dump(mode="json", by_alias=True)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def new_id(now: datetime) -> str:
    """Time-based identifier, unique even for ids minted in the same millisecond."""
    return f"{int(now.timestamp() * 1000)}-{uuid.uuid4().hex[:6]}"


def word_count(text: str) -> int:
    """Number of whitespace-separated tokens."""
    return len(text.split())


def compute_read_time(content: str, words_per_minute: int = 200) -> str:
    """Read-time label such as ``"3 min baca"``."""
    return f"{math.ceil(word_count(content) / words_per_minute)} min baca"


def default_excerpt(content: str) -> str:
    return content[:EXCERPT_LENGTH] + "..."


# ---------------------------------------------------------------------------
# Schema migration
# ---------------------------------------------------------------------------


def _as_int(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _as_str(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return value if isinstance(value, str) else str(value)


def _as_str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if v is not None]


def _as_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return _ensure_aware(value)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000, tz=UTC)
    if isinstance(value, str) and value:
        try:
            return _ensure_aware(datetime.fromisoformat(value.replace("Z", "+00:00")))
        except ValueError:
            return None
    return None


def _migrate_comment(raw: Any, index: int) -> Comment | None:
    if not isinstance(raw, dict):
        return None
    return Comment(
        id=_as_str(raw.get("id"), f"c{index}"),
        author_username=_as_str(raw.get("authorUsername"), "anonim"),
        content=_as_str(raw.get("content")),
        date=_as_datetime(raw.get("date")) or _EPOCH,
    )


def migrate_post(raw: Any) -> Post | None:
    """Upgrade a stored record of any schema version to the current one.

    Pure and total: missing or malformed fields receive defaults (likes
    and shares 0, no comments, status published, not deleted).  Returns
    None only for entries that cannot be a post at all (not a mapping,
    or without an id).

    The same normalization applies whatever ``schemaVersion`` a record
    claims, so a current-version record with gaps is repaired too.
    """
    if not isinstance(raw, dict):
        return None

    post_id = _as_str(raw.get("id"))
    if not post_id:
        return None

    created = _as_datetime(raw.get("date")) or _as_datetime(raw.get("lastEdited")) or _EPOCH
    try:
        status = PostStatus(raw.get("status") or PostStatus.PUBLISHED)
    except ValueError:
        status = PostStatus.PUBLISHED
    is_deleted = bool(raw.get("isDeleted") or False)
    raw_comments = raw.get("comments")
    comments: list[Comment] = []
    if isinstance(raw_comments, list):
        for i, item in enumerate(raw_comments):
            comment = _migrate_comment(item, i)
            if comment is not None:
                comments.append(comment)

    return Post(
        id=post_id,
        title=_as_str(raw.get("title")),
        excerpt=_as_str(raw.get("excerpt")),
        content=_as_str(raw.get("content")),
        date=created,
        read_time=_as_str(raw.get("readTime")),
        tags=_as_str_list(raw.get("tags")),
        likes=_as_int(raw.get("likes")),
        shares=_as_int(raw.get("shares")),
        author_username=_as_str(raw.get("authorUsername")) or DEFAULT_AUTHOR,
        comments=comments,
        status=status,
        last_edited=_as_datetime(raw.get("lastEdited")) or created,
        is_deleted=is_deleted,
        deleted_at=_as_datetime(raw.get("deletedAt")) if is_deleted else None,
        schema_version=CURRENT_SCHEMA_VERSION,
    )
