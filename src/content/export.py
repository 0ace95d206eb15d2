"""Markdown and JSON export of an author's writing."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any

from taman.content.models import Post

_WHITESPACE_RE = re.compile(r"\s+")


def to_markdown(post: Post) -> str:
    """Render a post as a standalone markdown document."""
    byline = f"*Ditulis oleh {post.author_username} pada {post.date.strftime('%d/%m/%Y')}*"
    parts = [f"# {post.title}", "", byline, ""]
    if post.excerpt:
        parts.extend([f"> {post.excerpt}", ""])
    parts.append(post.content)
    return "\n".join(parts)


def markdown_filename(post: Post) -> str:
    return f"{_WHITESPACE_RE.sub('_', post.title).lower()}.md"


def export_archive(user: dict[str, Any], posts: list[Post], now: datetime) -> dict[str, Any]:
    """Bundle a user profile and their posts into a JSON-ready backup.

    ``user`` must already be stripped of credentials.
    """
    return {
        "user": user,
        "posts": [p.to_stored() for p in posts],
        "exportedAt": now.isoformat(),
    }


def archive_filename(username: str, now: datetime) -> str:
    return f"backup_{username}_{now.date().isoformat()}.json"
