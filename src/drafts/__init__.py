"""Drafts domain — session-scoped snapshots and the editor recovery flow."""

from taman.drafts.editor import EditorSession, parse_tags
from taman.drafts.models import DraftFields, RecoveryOffer, Snapshot
from taman.drafts.snapshots import (
    NEW_POST_KEY,
    AutosaveDebouncer,
    SnapshotCache,
    should_offer_recovery,
)

__all__ = [
    "NEW_POST_KEY",
    "AutosaveDebouncer",
    "DraftFields",
    "EditorSession",
    "RecoveryOffer",
    "Snapshot",
    "SnapshotCache",
    "parse_tags",
    "should_offer_recovery",
]
