"""Identity domain — users, sessions and the follow graph."""

from taman.identity.directory import SessionStore, UserDirectory
from taman.identity.models import RegistrationRequest, Session, Theme, User

__all__ = [
    "RegistrationRequest",
    "Session",
    "SessionStore",
    "Theme",
    "User",
    "UserDirectory",
]
