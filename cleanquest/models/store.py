"""Local key/value store model."""

from datetime import datetime, timezone

from sqlmodel import Field, SQLModel


class StoreEntry(SQLModel, table=True):
    __tablename__ = "store_entries"

    key: str = Field(primary_key=True)  # 'accounts' | 'families' | 'chats' | 'currentUser' | 'selectedFamily'
    value: bytes  # whole-record JSON snapshot
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
