"""
Per-session conversation state.

A ConversationSession is loaded at the start of a chat request, passed
explicitly through it, and saved at the end. History is a capped FIFO: only
the most recent ``history_limit`` messages are kept, both in memory and in
Redis.
"""

import uuid
from collections import deque
from typing import Deque, Iterable, List, Optional

from ai_editor.models.chat import ChatMessage, ChatRole
from ai_editor.services.redis_client import RedisClient
from ai_editor.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_HISTORY_LIMIT = 20


def new_session_id() -> str:
    return uuid.uuid4().hex


class ConversationSession:
    """History of one chat session, bounded to the last ``limit`` messages."""

    def __init__(
        self,
        session_id: str,
        messages: Iterable[ChatMessage] = (),
        limit: int = DEFAULT_HISTORY_LIMIT
    ):
        self.session_id = session_id
        self.limit = limit
        self._messages: Deque[ChatMessage] = deque(messages, maxlen=limit)
        self._unsaved: List[ChatMessage] = []

    @property
    def history(self) -> List[ChatMessage]:
        """Messages oldest first."""
        return list(self._messages)

    @property
    def unsaved(self) -> List[ChatMessage]:
        return list(self._unsaved)

    def add(self, role: ChatRole, content: str) -> ChatMessage:
        message = ChatMessage(role=role, content=content)
        self._messages.append(message)
        self._unsaved.append(message)
        return message

    def mark_saved(self) -> None:
        self._unsaved.clear()


class ConversationStore:
    """Loads and saves ConversationSessions in Redis."""

    def __init__(
        self,
        redis_client: RedisClient,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        ttl_seconds: int = 86400
    ):
        self.redis_client = redis_client
        self.history_limit = history_limit
        self.ttl_seconds = ttl_seconds

    async def load(self, session_id: Optional[str] = None) -> ConversationSession:
        """
        Load a session, or start a new one when ``session_id`` is not given.

        Raises:
            RedisConnectionError: If Redis is unreachable
        """
        if not session_id:
            session_id = new_session_id()
            logger.info("Started new chat session", extra={"session_id": session_id})
            return ConversationSession(session_id, limit=self.history_limit)

        entries = await self.redis_client.get_history(session_id)
        messages = [ChatMessage.model_validate_json(entry) for entry in entries]
        logger.debug(
            f"Loaded {len(messages)} history messages",
            extra={"session_id": session_id}
        )
        return ConversationSession(session_id, messages, limit=self.history_limit)

    async def save(self, session: ConversationSession) -> None:
        """
        Persist messages added since the session was loaded.

        Raises:
            RedisConnectionError: If Redis is unreachable
        """
        entries = [message.model_dump_json() for message in session.unsaved]
        await self.redis_client.append_history(
            session.session_id,
            entries,
            max_length=self.history_limit,
            ttl_seconds=self.ttl_seconds,
        )
        session.mark_saved()
