"""Content domain — post models, retention policy and the post repository.

A single Post model tracks content from draft through publication, with
a soft-delete overlay feeding a time-limited trash.
"""

from taman.content.models import (
    CURRENT_SCHEMA_VERSION,
    Comment,
    Post,
    PostFilter,
    PostStatus,
    migrate_post,
)
from taman.content.retention import RetentionPolicy, TrashState
from taman.content.stats import AuthorStats
from taman.content.store import PostRepository

__all__ = [
    "CURRENT_SCHEMA_VERSION",
    "AuthorStats",
    "Comment",
    "Post",
    "PostFilter",
    "PostRepository",
    "PostStatus",
    "RetentionPolicy",
    "TrashState",
    "migrate_post",
]
