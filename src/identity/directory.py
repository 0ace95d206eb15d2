"""User directory: registration, login, follow graph, profiles.

Users live as one collection under a store key.  The logged-in user is
tracked by a persisted session pointer, but every operation that acts
on behalf of a user takes an explicit ``Session`` instead of reading the
pointer implicitly.
"""

from __future__ import annotations

import logging
import random
import re
import uuid
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from taman.content.store import PostRepository
from taman.identity.models import RegistrationRequest, Session, User
from taman.identity.passwords import hash_password, verify_password
from taman.shared.errors import CorruptDataError, NotAuthenticatedError, ValidationError
from taman.storage import KeyValueStore, read_json, write_json

logger = logging.getLogger(__name__)

USERS_KEY = "lumina_users"
SESSION_KEY = "lumina_current_user_username"
MAX_USERNAME_ATTEMPTS = 10

# Fields a profile update may not touch; credentials and the follow
# graph have dedicated operations.
_PROTECTED_FIELDS = {"username", "password", "followers", "following"}
_WHITESPACE_RE = re.compile(r"\s+")


class SessionStore:
    """Persists the username of the logged-in user."""

    def __init__(self, store: KeyValueStore, key: str = SESSION_KEY) -> None:
        self._store = store
        self._key = key

    def load(self) -> Session | None:
        try:
            username = read_json(self._store, self._key)
        except CorruptDataError:
            logger.warning("Unreadable session pointer under %s, logging out", self._key)
            return None
        return Session(username=username) if isinstance(username, str) and username else None

    def save(self, session: Session) -> None:
        write_json(self._store, self._key, session.username)

    def clear(self) -> None:
        self._store.remove(self._key)


class UserDirectory:
    """CRUD over users plus the symmetric follow graph."""

    def __init__(
        self,
        store: KeyValueStore,
        *,
        key: str = USERS_KEY,
        sessions: SessionStore | None = None,
        posts: PostRepository | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._store = store
        self._key = key
        self.sessions = sessions or SessionStore(store)
        self._posts = posts
        self._rng = rng or random.Random()

    # ── Private helpers ──────────────────────────────────────────

    def _load(self) -> list[User]:
        try:
            raw = read_json(self._store, self._key)
        except CorruptDataError:
            logger.warning("Corrupt user collection under %s, treating as empty", self._key)
            return []
        if not isinstance(raw, list):
            return []
        users: list[User] = []
        for item in raw:
            try:
                users.append(User.model_validate(item))
            except PydanticValidationError:
                logger.warning("Skipping unreadable user record: %r", item)
        return users

    def _write(self, users: list[User]) -> None:
        write_json(self._store, self._key, [u.to_stored() for u in users])

    @staticmethod
    def _find(users: list[User], username: str) -> User | None:
        return next((u for u in users if u.username == username), None)

    def _require_session(self, session: Session | None) -> Session:
        if session is None:
            raise NotAuthenticatedError("Sesi telah berakhir. Mohon login kembali.")
        return session

    # ── Read operations ──────────────────────────────────────────

    def all(self) -> list[User]:
        return self._load()

    def get(self, username: str) -> User | None:
        return self._find(self._load(), username)

    def current(self, session: Session | None) -> User | None:
        """The user behind ``session``, or None if it no longer exists."""
        if session is None:
            return None
        return self.get(session.username)

    def search(self, query: str = "") -> list[User]:
        """Match name, username or pen name, case-insensitively."""
        users = self._load()
        if not query:
            return users
        needle = query.lower()
        return [
            u
            for u in users
            if needle in u.name.lower()
            or needle in u.username.lower()
            or (u.pen_name is not None and needle in u.pen_name.lower())
        ]

    # ── Registration & login ─────────────────────────────────────

    def register(self, request: RegistrationRequest) -> User:
        """Create a user.

        Raises:
            ValidationError: Missing required field, or the username or
                email is already taken.
        """
        if not (request.username.strip() and request.password and request.name.strip()):
            raise ValidationError("Mohon lengkapi semua data wajib.")

        users = self._load()
        if self._find(users, request.username) is not None:
            raise ValidationError("Username sudah digunakan.", field="username")
        if request.email and any(u.email == request.email for u in users):
            raise ValidationError("Email sudah terdaftar.", field="email")

        user = User(
            username=request.username,
            password=hash_password(request.password),
            name=request.name,
            email=request.email,
            bio=request.bio,
            pen_name=request.pen_name,
            profile_picture=request.profile_picture,
        )
        users.append(user)
        self._write(users)
        logger.info("Registered user %s", user.username)
        return user

    def login(self, identifier: str, password: str) -> Session | None:
        """Log in by username or email.  Returns None on bad credentials."""
        for user in self._load():
            matches_id = user.username == identifier or (user.email and user.email == identifier)
            if matches_id and verify_password(password, user.password):
                session = Session(username=user.username)
                self.sessions.save(session)
                return session
        return None

    def login_with_oauth(self, email: str, name: str, picture: str | None = None) -> Session:
        """Log in an externally authenticated identity, registering it if new.

        New accounts get a username derived from the display name, with a
        random numeric suffix on collisions.  They have no local password.
        """
        users = self._load()
        existing = next((u for u in users if u.email and u.email == email), None)
        if existing is None:
            existing = User(
                username=self._derive_username(name, users),
                name=name,
                email=email,
                profile_picture=picture,
            )
            users.append(existing)
            self._write(users)
            logger.info("Registered user %s from external login", existing.username)

        session = Session(username=existing.username)
        self.sessions.save(session)
        return session

    def _derive_username(self, name: str, users: list[User]) -> str:
        base = _WHITESPACE_RE.sub("", name.lower()) or "penulis"
        taken = {u.username for u in users}
        candidate = base
        for _ in range(MAX_USERNAME_ATTEMPTS):
            if candidate not in taken:
                return candidate
            candidate = f"{base}{self._rng.randrange(1000)}"
        return f"{base}{uuid.uuid4().hex[:8]}"

    def logout(self) -> None:
        self.sessions.clear()

    # ── Follow graph ─────────────────────────────────────────────

    def toggle_follow(self, session: Session | None, target_username: str) -> bool:
        """Follow or unfollow ``target_username``.

        Returns True when the session user now follows the target, False
        after an unfollow or when the request is invalid (no session,
        self-follow, unknown user).
        """
        if session is None or session.username == target_username:
            return False

        users = self._load()
        me = self._find(users, session.username)
        target = self._find(users, target_username)
        if me is None or target is None:
            return False

        if target_username in me.following:
            me.following = [u for u in me.following if u != target_username]
            target.followers = [u for u in target.followers if u != me.username]
            now_following = False
        else:
            me.following.append(target_username)
            target.followers.append(me.username)
            now_following = True

        self._write(users)
        return now_following

    # ── Profile ──────────────────────────────────────────────────

    def update_profile(self, session: Session | None, **changes: Any) -> User:
        """Merge profile ``changes`` into the session user's record.

        Credentials and follow edges are never overwritten here.

        Raises:
            NotAuthenticatedError: No session, or its user no longer exists.
            ValidationError: A change does not fit the profile schema.
        """
        session = self._require_session(session)
        users = self._load()
        user = self._find(users, session.username)
        if user is None:
            raise NotAuthenticatedError("Akun tidak ditemukan.")

        allowed = {k: v for k, v in changes.items() if k not in _PROTECTED_FIELDS}
        try:
            updated = User.model_validate({**user.model_dump(), **allowed})
        except PydanticValidationError as exc:
            raise ValidationError(f"Profil tidak valid: {exc.errors()[0]['msg']}") from exc

        users[users.index(user)] = updated
        self._write(users)
        return updated

    def delete_account(self, session: Session | None) -> int:
        """Remove the session user, their follow edges, and trash their posts.

        Ends the session.  Returns the number of posts moved to the trash.
        """
        session = self._require_session(session)
        username = session.username
        users = [u for u in self._load() if u.username != username]
        for user in users:
            user.followers = [u for u in user.followers if u != username]
            user.following = [u for u in user.following if u != username]
        self._write(users)

        trashed = self._posts.soft_delete_by_author(username) if self._posts else 0
        self.logout()
        logger.info("Deleted account %s (%d post(s) trashed)", username, trashed)
        return trashed
