"""Chat schemas."""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, field_validator

MAX_MESSAGE_LENGTH = 500


class ChatMessage(BaseModel):
    id: str
    sender: str
    text: str = Field(max_length=MAX_MESSAGE_LENGTH)
    timestamp: datetime

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, ts: datetime) -> datetime:
        # naive timestamps come from older clients; treat them as UTC
        return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)


class ChatSendRequest(BaseModel):
    text: str


class ChatSendResponse(BaseModel):
    sent: bool
    message: Optional[ChatMessage] = None


class ChatLogResponse(BaseModel):
    family_id: str
    messages: list[ChatMessage]
