"""Error types shared across the taman domains.

``CorruptDataError`` never reaches callers of the repositories: they
catch it, log a warning and carry on with an empty collection.
"""

from __future__ import annotations


class TamanError(Exception):
    """Base error for all taman failures."""


class ValidationError(TamanError):
    """A required field is empty or a uniqueness rule is violated.

    Raised before any write happens, so no partial state is persisted.
    """

    def __init__(self, message: str, *, field: str = "") -> None:
        super().__init__(message)
        self.field = field


class NotAuthenticatedError(TamanError):
    """An action requiring a logged-in user was attempted without one."""


class CorruptDataError(TamanError):
    """A stored payload could not be parsed."""

    def __init__(self, key: str, reason: str = "") -> None:
        super().__init__(f"Corrupt payload under key {key!r}: {reason}".rstrip(": "))
        self.key = key
