"""Direct message model."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Message(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    id: str
    sender_username: str
    receiver_username: str
    content: str
    timestamp: datetime
    is_read: bool = False

    def involves(self, a: str, b: str) -> bool:
        return {self.sender_username, self.receiver_username} == {a, b}
