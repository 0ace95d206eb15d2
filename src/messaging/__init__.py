"""Messaging domain — direct messages between users."""

from taman.messaging.log import MessageLog
from taman.messaging.models import Message

__all__ = ["Message", "MessageLog"]
