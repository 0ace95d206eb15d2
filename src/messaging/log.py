"""Append-only direct message log.

Conversations are not stored; they are derived from the log on demand.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError as PydanticValidationError

from taman.content.models import new_id
from taman.messaging.models import Message
from taman.shared.clock import Clock, utcnow
from taman.shared.errors import CorruptDataError, ValidationError
from taman.storage import KeyValueStore, read_json, write_json

logger = logging.getLogger(__name__)

MESSAGES_KEY = "lumina_messages"


class MessageLog:
    def __init__(
        self,
        store: KeyValueStore,
        *,
        key: str = MESSAGES_KEY,
        clock: Clock = utcnow,
    ) -> None:
        self._store = store
        self._key = key
        self._clock = clock

    def _load(self) -> list[Message]:
        try:
            raw = read_json(self._store, self._key)
        except CorruptDataError:
            logger.warning("Corrupt message log under %s, treating as empty", self._key)
            return []
        if not isinstance(raw, list):
            return []
        messages: list[Message] = []
        for item in raw:
            try:
                messages.append(Message.model_validate(item))
            except PydanticValidationError:
                logger.warning("Skipping unreadable message record: %r", item)
        return messages

    def _write(self, messages: list[Message]) -> None:
        write_json(
            self._store,
            self._key,
            [m.model_dump(mode="json", by_alias=True) for m in messages],
        )

    def send(self, sender: str, receiver: str, content: str) -> Message:
        """Append a message and return it.

        Raises:
            ValidationError: If the message body is blank.
        """
        if not content.strip():
            raise ValidationError("Pesan tidak boleh kosong.", field="content")
        now = self._clock()
        message = Message(
            id=new_id(now),
            sender_username=sender,
            receiver_username=receiver,
            content=content,
            timestamp=now,
        )
        messages = self._load()
        messages.append(message)
        self._write(messages)
        return message

    def between(self, a: str, b: str) -> list[Message]:
        """The conversation between two users, oldest first."""
        return sorted(
            (m for m in self._load() if m.involves(a, b)),
            key=lambda m: m.timestamp,
        )

    def conversations(self, username: str) -> list[str]:
        """Everyone ``username`` has exchanged messages with, first contact first."""
        partners: dict[str, None] = {}
        for m in self._load():
            if m.sender_username == username:
                partners.setdefault(m.receiver_username)
            if m.receiver_username == username:
                partners.setdefault(m.sender_username)
        return list(partners)

    def unread_count(self, username: str, partner: str | None = None) -> int:
        return sum(
            1
            for m in self._load()
            if m.receiver_username == username
            and not m.is_read
            and (partner is None or m.sender_username == partner)
        )

    def mark_read(self, reader: str, partner: str) -> int:
        """Flag every message from ``partner`` to ``reader`` as read."""
        messages = self._load()
        changed = 0
        for m in messages:
            if m.receiver_username == reader and m.sender_username == partner and not m.is_read:
                m.is_read = True
                changed += 1
        if changed:
            self._write(messages)
        return changed
