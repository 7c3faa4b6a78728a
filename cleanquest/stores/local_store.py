"""Local store: durable on-device key/value persistence.

Each key holds a whole-record JSON snapshot (the entire map, never a delta).
Components only write the keys they own; reads are unrestricted.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.engine import Engine
from sqlmodel import Session

from cleanquest.models.store import StoreEntry

logger = logging.getLogger(__name__)

ACCOUNTS_KEY = "accounts"
FAMILIES_KEY = "families"
CHATS_KEY = "chats"
CURRENT_USER_KEY = "currentUser"
SELECTED_FAMILY_KEY = "selectedFamily"


class LocalStore:
    """SQLite-backed key/value store for one device."""

    def __init__(self, engine: Engine):
        self._engine = engine

    def get(self, key: str) -> bytes | None:
        with Session(self._engine) as session:
            entry = session.get(StoreEntry, key)
            return entry.value if entry else None

    def set(self, key: str, value: bytes) -> None:
        with Session(self._engine) as session:
            entry = session.get(StoreEntry, key)
            if entry:
                entry.value = value
                entry.updated_at = datetime.now(timezone.utc)
            else:
                entry = StoreEntry(key=key, value=value)
            session.add(entry)
            session.commit()

    def get_json(self, key: str, default: Any = None) -> Any:
        """Read and decode a JSON snapshot. Unreadable values yield the default."""
        raw = self.get(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning("Local store key %r is not valid JSON: %s", key, e)
            return default

    def set_json(self, key: str, data: Any) -> None:
        self.set(key, json.dumps(data, ensure_ascii=False).encode("utf-8"))
