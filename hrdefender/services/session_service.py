"""
Chat Session Service - in-memory multi-turn chat sessions.

Each session pins one provider and keeps the ordered message history, so
every turn is answered with the full conversation as context.

Lifecycle:
    created -> active (repeated message exchange) -> ended

A session ends on explicit request (end_session) or when it has been idle
longer than the idle timeout. Idle sessions are removed by a background
sweep; get_session() also treats them as gone before the sweep runs.

Design follows the TTL service pattern:
- In-memory storage, lost on restart
- Cleanup loop as one asyncio task, started/stopped with the app lifespan
- No locks: all access happens on the single event loop

Bounds:
- At most max_sessions sessions; creating one more evicts the least
  recently active session
- At most max_messages messages per history (oldest dropped first)

Usage:
    service = ChatSessionService(factory, idle_timeout_seconds=1800)

    session = service.create_session(provider="anthropic", context={"topic": "..."})
    reply = await service.send_message(session.id, "What should I document first?")

    async for chunk in service.stream_message(session.id, "And after that?"):
        ...

    service.end_session(session.id)
"""

import asyncio
import logging
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional, Dict, Any, AsyncIterator, List

from hrdefender.core.errors import ProviderError, ProviderUnavailableError, SessionNotFoundError
from hrdefender.ai.factory import AIServiceFactory
from hrdefender.ai.monitoring import AIMonitor
from hrdefender.ai.prompts.chat_prompts import build_chat_system_prompt
from hrdefender.ai.providers.base import AIProvider, ChatMessage
from hrdefender.ai.tasks import TaskType


logger = logging.getLogger("hrdefender.sessions")


class SessionStatus(str, Enum):
    ACTIVE = "active"
    ENDED = "ended"


@dataclass
class ChatSession:
    """
    A live chat session.

    Owned by ChatSessionService; callers get references for reading only.
    """
    id: str
    provider: str
    messages: List[ChatMessage] = field(default_factory=list)
    context: Dict[str, Any] = field(default_factory=dict)
    status: SessionStatus = SessionStatus.ACTIVE
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    last_active_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def touch(self) -> None:
        self.last_active_at = datetime.now(timezone.utc)

    def is_idle(self, timeout: timedelta) -> bool:
        """Check if the session has been idle longer than timeout."""
        return datetime.now(timezone.utc) - self.last_active_at > timeout

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.id,
            "provider": self.provider,
            "status": self.status.value,
            "message_count": len(self.messages),
            "context": self.context,
            "created_at": self.created_at.isoformat(),
            "last_active_at": self.last_active_at.isoformat(),
        }


class ChatSessionService:
    """
    Service for managing chat sessions.

    The session map is an OrderedDict kept in last-activity order, so the
    least recently active session is always first.
    """

    def __init__(
        self,
        factory: AIServiceFactory,
        idle_timeout_seconds: int = 30 * 60,
        max_sessions: int = 500,
        max_messages: int = 50,
        monitor: Optional[AIMonitor] = None,
    ):
        self._factory = factory
        self._sessions: "OrderedDict[str, ChatSession]" = OrderedDict()
        self._idle_timeout = timedelta(seconds=idle_timeout_seconds)
        self._max_sessions = max_sessions
        self._max_messages = max_messages
        self._monitor = monitor
        self._cleanup_task: Optional[asyncio.Task] = None

    # -------------------------------------------------------------------------
    # SESSION LIFECYCLE
    # -------------------------------------------------------------------------

    def create_session(
        self,
        provider: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> ChatSession:
        """
        Create a session pinned to one provider.

        Args:
            provider: Preferred provider name (selector rules apply)
            context: Optional {"role", "task", "topic", "document"}

        Raises:
            ProviderUnavailableError: No provider is registered
            UnknownProviderError: Strict selection and provider is unknown
        """
        selection = self._factory.select(
            task_type=TaskType.QUESTION_ANSWERING,
            preferred_provider=provider,
        )
        if selection.provider is None:
            raise ProviderUnavailableError("No AI provider is available for chat")

        if len(self._sessions) >= self._max_sessions:
            self._evict_least_recent()

        session = ChatSession(
            id=str(uuid.uuid4()),
            provider=selection.provider.name,
            context=dict(context or {}),
        )
        self._sessions[session.id] = session

        logger.info(f"Created chat session {session.id} (provider: {session.provider})")
        if self._monitor:
            self._monitor.track_event(session.id, "session_created", {
                "provider": session.provider,
                "fallback": selection.fallback,
            })
        return session

    def get_session(self, session_id: str) -> Optional[ChatSession]:
        """
        Get an active session.

        Returns None for unknown, ended or idle-expired sessions.
        """
        session = self._sessions.get(session_id)
        if session is None or session.status != SessionStatus.ACTIVE:
            return None

        if session.is_idle(self._idle_timeout):
            self._remove(session_id, reason="idle timeout")
            return None

        return session

    def end_session(self, session_id: str) -> bool:
        """
        End a session explicitly.

        Returns:
            True if an active session was ended, False if it did not exist
        """
        session = self.get_session(session_id)
        if session is None:
            return False

        self._remove(session_id, reason="ended by client")
        return True

    # -------------------------------------------------------------------------
    # MESSAGING
    # -------------------------------------------------------------------------

    async def send_message(self, session_id: str, text: str) -> ChatMessage:
        """
        Send a user message and wait for the full assistant reply.

        If the session ends while the provider call is in flight, the reply
        is still returned but the ended session is left as it was.

        Raises:
            SessionNotFoundError: Unknown, ended or expired session
            ProviderError: The provider call failed (history is left unchanged)
        """
        session = self._require(session_id)
        provider = self._provider_for(session)

        user_message = ChatMessage(role="user", content=text)
        self._append(session, user_message)

        response = await provider.chat(
            list(session.messages),
            system_prompt=build_chat_system_prompt(session.context),
        )
        if not response.success:
            self._discard(session, user_message)
            raise ProviderError(response.error or "Chat request failed", provider=provider.name)

        reply = ChatMessage(role="assistant", content=response.content)
        self._append(session, reply)
        return reply

    def stream_message(self, session_id: str, text: str) -> AsyncIterator[str]:
        """
        Send a user message and stream the assistant reply.

        The session is checked immediately (so callers can answer 404 before
        streaming starts). The assistant reply is appended to the history
        only after the stream completes.

        Raises:
            SessionNotFoundError: Unknown, ended or expired session
        """
        session = self._require(session_id)
        provider = self._provider_for(session)
        return self._stream(session, provider, text)

    async def _stream(self, session: ChatSession, provider: AIProvider, text: str) -> AsyncIterator[str]:
        user_message = ChatMessage(role="user", content=text)
        self._append(session, user_message)

        chunks: List[str] = []
        completed = False
        try:
            async for chunk in provider.stream_chat(
                list(session.messages),
                system_prompt=build_chat_system_prompt(session.context),
            ):
                chunks.append(chunk)
                session.touch()
                yield chunk
            completed = True
        finally:
            if completed:
                self._append(session, ChatMessage(role="assistant", content="".join(chunks)))
            else:
                # Failed or abandoned stream: keep the history as it was
                self._discard(session, user_message)

    # -------------------------------------------------------------------------
    # CLEANUP
    # -------------------------------------------------------------------------

    def cleanup_expired(self) -> int:
        """
        Remove all idle-expired sessions.

        Returns:
            Number of sessions removed
        """
        expired = [
            session_id for session_id, session in self._sessions.items()
            if session.is_idle(self._idle_timeout)
        ]

        for session_id in expired:
            self._remove(session_id, reason="idle timeout")

        if expired:
            logger.info(f"Cleaned up {len(expired)} idle chat sessions")

        return len(expired)

    async def start_cleanup_loop(self, interval_seconds: int = 5 * 60):
        """
        Start background task to cleanup idle sessions periodically.

        Args:
            interval_seconds: How often to run cleanup (default 5 minutes)
        """
        if self._cleanup_task is not None:
            logger.warning("Cleanup loop already running")
            return

        async def cleanup_loop():
            while True:
                try:
                    await asyncio.sleep(interval_seconds)
                    self.cleanup_expired()
                except asyncio.CancelledError:
                    break
                except Exception as e:
                    logger.error(f"Cleanup loop error: {e}")

        self._cleanup_task = asyncio.create_task(cleanup_loop())
        logger.info(f"Started session cleanup loop (interval: {interval_seconds}s)")

    async def stop_cleanup_loop(self):
        """Stop the background cleanup task."""
        if self._cleanup_task is not None:
            self._cleanup_task.cancel()
            try:
                await self._cleanup_task
            except asyncio.CancelledError:
                pass
            self._cleanup_task = None
            logger.info("Stopped session cleanup loop")

    # -------------------------------------------------------------------------
    # UTILITIES
    # -------------------------------------------------------------------------

    def active_session_count(self) -> int:
        return len(self.active_session_ids())

    def active_session_ids(self) -> List[str]:
        """Ids of sessions that are active and not idle-expired."""
        return [
            session_id for session_id, session in self._sessions.items()
            if session.status == SessionStatus.ACTIVE and not session.is_idle(self._idle_timeout)
        ]

    # -------------------------------------------------------------------------
    # PRIVATE
    # -------------------------------------------------------------------------

    def _require(self, session_id: str) -> ChatSession:
        session = self.get_session(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def _provider_for(self, session: ChatSession) -> AIProvider:
        provider = self._factory.get_service(session.provider)
        if provider is None:
            raise ProviderUnavailableError("No AI provider is available for chat")
        return provider

    def _append(self, session: ChatSession, message: ChatMessage) -> None:
        session.messages.append(message)
        if len(session.messages) > self._max_messages:
            del session.messages[:len(session.messages) - self._max_messages]
            # Providers expect the history to open with a user turn
            while session.messages and session.messages[0].role != "user":
                session.messages.pop(0)
        session.touch()
        # The session may have been ended, evicted or swept while a provider call was awaited
        if session.status != SessionStatus.ACTIVE or session.id not in self._sessions:
            logger.info(f"Chat session {session.id} ended while a reply was in flight")
            return
        self._sessions.move_to_end(session.id)

    def _discard(self, session: ChatSession, message: ChatMessage) -> None:
        if message in session.messages:
            session.messages.remove(message)

    def _evict_least_recent(self) -> None:
        session_id = next(iter(self._sessions))
        logger.warning(f"Session limit ({self._max_sessions}) reached, evicting {session_id}")
        self._remove(session_id, reason="evicted")

    def _remove(self, session_id: str, reason: str) -> None:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return
        session.status = SessionStatus.ENDED
        logger.info(f"Chat session {session_id} ended ({reason})")
        if self._monitor:
            self._monitor.track_event(session_id, "session_ended", {"reason": reason})
