"""Per-user conversational memory backed by ``cachetools.TTLCache``.

Each user id maps to a :class:`ConversationSession` holding that user's
messages in append order.  Sessions are created lazily and bounded in two
ways:

* **Idle expiry** -- a session untouched for ``session_ttl`` seconds is
  dropped.  Every append refreshes the timer.
* **Capacity** -- at most ``max_sessions`` sessions are held; the cache
  evicts the least recently used one beyond that.

``max_messages`` optionally caps a single session's history by dropping
the oldest user/assistant pair.  The default of ``0`` keeps everything,
so :meth:`ConversationMemoryStore.append` never loses messages unless a
cap is configured.

Callers that read history and then append (the synthesizer) hold
:meth:`ConversationMemoryStore.lock` for the user across the whole
sequence.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime

import structlog
from cachetools import TTLCache

from ragchat.models.conversation import ChatMessage, MessageRole
from ragchat.models.rag import utc_now
from ragchat.utils.concurrency import KeyedLock

logger = structlog.get_logger(logger_name=__name__)


@dataclass
class ConversationSession:
    """Mutable container for one user's message history."""

    user_id: str
    messages: list[ChatMessage] = field(default_factory=list)
    created_at: datetime = field(default_factory=utc_now)


class ConversationMemoryStore:
    """Maps user ids to conversation sessions.

    Parameters
    ----------
    max_sessions:
        Maximum number of live sessions.
    session_ttl:
        Seconds of inactivity after which a session expires.
    max_messages:
        Per-session history cap; ``0`` means unlimited.
    """

    def __init__(
        self,
        max_sessions: int = 10000,
        session_ttl: float = 86400,
        max_messages: int = 0,
    ) -> None:
        self._sessions: TTLCache[str, ConversationSession] = TTLCache(
            maxsize=max_sessions, ttl=session_ttl
        )
        self._max_messages = max_messages
        self._locks = KeyedLock()

    # ------------------------------------------------------------------
    # Session access
    # ------------------------------------------------------------------

    def get_or_create(self, user_id: str) -> ConversationSession:
        session = self._sessions.get(user_id)
        if session is None:
            session = ConversationSession(user_id=user_id)
            self._sessions[user_id] = session
            logger.debug("memory_session_created", user_id=user_id)
        return session

    def append(self, user_id: str, role: MessageRole, content: str) -> ChatMessage:
        """Append one message at the end of *user_id*'s history."""
        session = self.get_or_create(user_id)
        message = ChatMessage(role=role, content=content)
        session.messages.append(message)

        if self._max_messages > 0:
            while len(session.messages) > self._max_messages:
                # Drop a whole exchange so history never starts mid-pair.
                del session.messages[: min(2, len(session.messages) - 1)]

        # Re-assigning refreshes the entry's TTL.
        self._sessions[user_id] = session
        return message

    def get_messages(self, user_id: str) -> list[ChatMessage]:
        """Return a copy of *user_id*'s history without creating a session."""
        session = self._sessions.get(user_id)
        return list(session.messages) if session is not None else []

    def clear(self, user_id: str) -> bool:
        """Remove *user_id*'s session.  Returns whether one existed."""
        existed = self._sessions.pop(user_id, None) is not None
        logger.info("memory_cleared", user_id=user_id, existed=existed)
        return existed

    def lock(self, user_id: str) -> asyncio.Lock:
        """Lock serialising read-generate-append sequences for *user_id*."""
        return self._locks.get(user_id)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def session_count(self) -> int:
        self._sessions.expire()
        return len(self._sessions)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._sessions
