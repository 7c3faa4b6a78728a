"""Family chat log.

Messages are appended to an in-memory log per family id, hydrated from the
local store at startup and flushed back on every append. Each message is also
written to the remote registry under chats/{code}/{messageId}.

The remote keeps messages as an unordered map, so the initial load sorts
them by timestamp. After that, the view is local insertion order: messages
sent from other devices are not merged in until the next load_remote().
"""

import logging
from datetime import datetime, timezone

from pydantic import ValidationError

from cleanquest.schemas.chat import MAX_MESSAGE_LENGTH, ChatMessage
from cleanquest.schemas.family import FamilyProfile
from cleanquest.stores.local_store import CHATS_KEY, LocalStore
from cleanquest.stores.remote_registry import RemoteGateway, RemoteUnavailable
from cleanquest.utils.security import new_message_id

logger = logging.getLogger(__name__)


class MessageTooLong(ValueError):
    kind = "MessageTooLong"


def chat_path(code: str, message_id: str | None = None) -> str:
    return f"chats/{code}/{message_id}" if message_id else f"chats/{code}"


def _parse_messages(raw_messages) -> list[ChatMessage]:
    messages = []
    for raw in raw_messages:
        try:
            messages.append(ChatMessage.model_validate(raw))
        except ValidationError as e:
            logger.warning("Dropping malformed chat message: %s", e.errors()[:1])
    return messages


class ChatLogService:
    def __init__(self, local: LocalStore, remote: RemoteGateway, max_length: int = MAX_MESSAGE_LENGTH):
        self.local = local
        self.remote = remote
        # stored messages are validated against MAX_MESSAGE_LENGTH on read
        self.max_length = min(max_length, MAX_MESSAGE_LENGTH)
        self._logs: dict[str, list[ChatMessage]] = {}
        self._hydrate()

    def _hydrate(self) -> None:
        data = self.local.get_json(CHATS_KEY, {})
        if not isinstance(data, dict):
            return
        for family_id, raw_messages in data.items():
            if isinstance(raw_messages, list):
                self._logs[family_id] = _parse_messages(raw_messages)

    def _flush(self) -> None:
        self.local.set_json(
            CHATS_KEY,
            {
                family_id: [m.model_dump(mode="json") for m in messages]
                for family_id, messages in self._logs.items()
            },
        )

    def ensure_log(self, family_id: str) -> None:
        """Create an empty log for the family if none exists yet."""
        if family_id not in self._logs:
            self._logs[family_id] = []
            self._flush()

    async def append(self, family: FamilyProfile, sender: str, text: str) -> ChatMessage | None:
        """Send a message. Blank text is ignored and returns None."""
        if not text.strip():
            return None
        if len(text) > self.max_length:
            raise MessageTooLong(f"Message is longer than {self.max_length} characters")

        message = ChatMessage(
            id=new_message_id(),
            sender=sender,
            text=text,
            timestamp=datetime.now(timezone.utc),
        )
        self._logs.setdefault(family.id, []).append(message)
        self._flush()

        await self.remote.write(chat_path(family.code, message.id), message.model_dump(mode="json"))
        return message

    def list_messages(self, family_id: str) -> list[ChatMessage]:
        """Messages in local insertion order."""
        return list(self._logs.get(family_id, []))

    async def load_remote(self, family: FamilyProfile) -> list[ChatMessage]:
        """Initial load: replace the local log with the remote one, sorted by time.

        Falls back to the local log when the remote is unavailable or holds
        nothing for this family. Messages that only ever reached the local
        log are dropped by a successful load.
        """
        try:
            raw = await self.remote.read(chat_path(family.code))
        except RemoteUnavailable as e:
            logger.info("Chat load for %s: remote unavailable (%s), using local log", family.code, e)
            return self.list_messages(family.id)
        if not isinstance(raw, dict):
            # nothing published for this family yet
            return self.list_messages(family.id)

        messages = sorted(_parse_messages(raw.values()), key=lambda m: m.timestamp)
        self._logs[family.id] = messages
        self._flush()
        return list(messages)
