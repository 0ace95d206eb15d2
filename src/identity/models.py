"""Identity domain models."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Theme(StrEnum):
    LIGHT = "light"
    DARK = "dark"


class User(BaseModel):
    """A registered writer.

    ``followers`` and ``following`` hold usernames.  The follow graph is
    kept symmetric: A in B.followers exactly when B in A.following.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    username: str
    password: str = ""  # salted hash, see taman.identity.passwords
    name: str
    bio: str = ""
    profile_picture: str | None = None
    followers: list[str] = Field(default_factory=list)
    following: list[str] = Field(default_factory=list)
    email: str = ""
    pen_name: str | None = None
    writing_themes: list[str] = Field(default_factory=list)
    writing_style: str | None = None
    featured_post_ids: list[str] = Field(default_factory=list)
    is_public: bool = True
    show_bio: bool = True
    show_stats: bool = True
    preferred_theme: Theme | None = None
    has_onboarded: bool = False

    @property
    def display_name(self) -> str:
        return self.pen_name or self.name

    def to_stored(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    def public_profile(self) -> dict[str, Any]:
        """Stored layout without credentials, for exports."""
        return self.model_dump(mode="json", by_alias=True, exclude={"password"})


class Session(BaseModel):
    """Explicit session context passed to identity operations."""

    username: str


class RegistrationRequest(BaseModel):
    """Fields accepted by ``UserDirectory.register``."""

    username: str
    password: str
    name: str
    email: str = ""
    bio: str = ""
    pen_name: str | None = None
    profile_picture: str | None = None
