"""Draft snapshot data types.

A snapshot is a partial copy of an editor buffer.  It is stored
flattened (the draft fields next to ``id`` and a millisecond
``timestamp``) so that payloads written by the browser editor remain
readable.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from taman.content.models import PostStatus


class DraftFields(BaseModel):
    """The editable subset of a post.  Every field is optional."""

    model_config = ConfigDict(extra="ignore")

    title: str | None = None
    content: str | None = None
    excerpt: str | None = None
    tags: list[str] | None = None
    status: PostStatus | None = None

    def merged(self, **changes: Any) -> DraftFields:
        return self.model_copy(update={k: v for k, v in changes.items() if v is not None})


class Snapshot(DraftFields):
    """A timestamped recovery copy of a draft, keyed by post id or sentinel."""

    id: str
    timestamp: datetime

    @field_validator("timestamp", mode="before")
    @classmethod
    def _from_millis(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return datetime.fromtimestamp(value / 1000, tz=UTC)
        return value

    @field_validator("timestamp")
    @classmethod
    def _aware(cls, value: datetime) -> datetime:
        return value if value.tzinfo else value.replace(tzinfo=UTC)

    @field_serializer("timestamp")
    def _to_millis(self, value: datetime) -> int:
        return int(value.timestamp() * 1000)

    @property
    def fields(self) -> DraftFields:
        return DraftFields.model_validate(self.model_dump(include=set(DraftFields.model_fields)))


class RecoveryOffer(BaseModel):
    """A snapshot the editor should propose to restore."""

    key: str
    snapshot: Snapshot
    is_new_post: bool = False
    saved_at: datetime | None = Field(
        default=None, description="Durable record's last change, when one exists."
    )
