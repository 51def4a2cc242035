"""
Session storage for copilot conversations.

Transcripts are kept in a TTL cache keyed by session id. Every append
re-inserts the transcript, so the TTL counts from the last activity and
the cache drops the least recently used session when it is full.
"""
import asyncio
import logging
import weakref
from typing import Optional

from cachetools import TTLCache

from copilot.config import settings
from copilot.models import ChatMessage, Transcript
from copilot.chat.prompts import GREETING, build_system_prompt

logger = logging.getLogger(__name__)


class SessionStore:
    """Per-session transcripts with bounded size and idle expiry."""

    def __init__(
        self,
        maxsize: Optional[int] = None,
        ttl: Optional[float] = None,
        system_prompt: Optional[str] = None
    ):
        """
        Args:
            maxsize: Maximum number of sessions kept (default from settings)
            ttl: Seconds a session survives without activity (default from settings)
            system_prompt: Prompt new transcripts start with
        """
        self.cache: TTLCache = TTLCache(
            maxsize=maxsize or settings.session_cache_maxsize,
            ttl=ttl or settings.session_cache_ttl
        )
        self.system_prompt = system_prompt or build_system_prompt(settings.append_question_tags)
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()
        self.hits = 0
        self.misses = 0

    def get(self, session_id: str) -> Transcript | None:
        """Retrieve a session transcript without creating one."""
        return self.cache.get(session_id)

    def get_or_create(self, session_id: str) -> Transcript:
        """Return the session's transcript, creating a seeded one if needed.

        A new transcript holds the system prompt followed by the greeting.
        """
        transcript = self.cache.get(session_id)
        if transcript is not None:
            self.hits += 1
            return transcript

        self.misses += 1
        transcript = Transcript(
            session_id=session_id,
            messages=[
                ChatMessage(role="system", content=self.system_prompt),
                ChatMessage(role="assistant", content=GREETING),
            ]
        )
        self.cache[session_id] = transcript
        logger.info(f"Created session {session_id}")
        return transcript

    def append(self, session_id: str, message: ChatMessage) -> None:
        """Append a message to an existing session's transcript.

        Does nothing if the session does not exist.
        """
        transcript = self.cache.get(session_id)
        if transcript is None:
            logger.debug(f"Ignoring append to unknown session {session_id}")
            return

        transcript.append(message)
        # Re-insert to restart the idle timer
        self.cache[session_id] = transcript

    def delete(self, session_id: str) -> None:
        """Remove a session."""
        self.cache.pop(session_id, None)

    def lock(self, session_id: str) -> asyncio.Lock:
        """Lock serializing queries for one session.

        The lock lives as long as someone holds a reference to it.
        """
        lock = self._locks.get(session_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[session_id] = lock
        return lock

    def clear_expired(self) -> int:
        """Drop expired sessions.

        Returns:
            Number of sessions cleared
        """
        initial_size = len(self.cache)
        self.cache.expire()
        return initial_size - len(self.cache)

    def stats(self) -> dict:
        """Get cache statistics (size, maxsize, ttl, hit rate)."""
        lookups = self.hits + self.misses
        return {
            "current_size": len(self.cache),
            "maxsize": self.cache.maxsize,
            "ttl_seconds": self.cache.ttl,
            "hit_rate": self.hits / lookups if lookups else 0.0
        }
