"""
Live Router - multi-turn chat sessions with optional streaming.

Endpoints:
    GET    /ai/live/status               service availability and sessions
    POST   /ai/live/sessions             create a session (201)
    POST   /ai/live/messages             send a message (JSON, or SSE with stream=true)
    GET    /ai/live/messages/stream      send a message, answer as SSE (EventSource clients)
    DELETE /ai/live/sessions/{id}        end a session

SSE framing:
    data: {"text": "<chunk>"}\\n\\n         one per chunk
    data: {"done": true}\\n\\n              after the last chunk
    data: {"error": "...", "message": "..."}\\n\\n   on failure, then the stream closes

The session is validated before the stream starts, so an unknown session is
a plain 404 rather than an error frame.
"""

import asyncio
import json
import logging
from typing import AsyncIterator, Dict, Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sse_starlette.sse import EventSourceResponse, ServerSentEvent

from hrdefender.core.config import Settings
from hrdefender.core.errors import ProviderError
from hrdefender.ai.factory import AIServiceFactory
from hrdefender.ai.monitoring import AIMonitor
from hrdefender.deps import get_factory, get_monitor, get_session_service, get_settings
from hrdefender.routers.errors import to_http_exception
from hrdefender.schemas.live import (
    CreateSessionRequest,
    LiveStatusResponse,
    MessageResponse,
    SendMessageRequest,
    SessionResponse,
)
from hrdefender.services.session_service import ChatSessionService


logger = logging.getLogger("hrdefender.routers.live")

router = APIRouter(prefix="/ai/live", tags=["live"])

STREAM_ERROR_MESSAGE = "The AI provider failed while streaming the response"

# Frames end with a blank line: "data: {...}\n\n"
SSE_SEPARATOR = "\n"


# ---------------------------------------------------------------------------
# SSE HELPERS
# ---------------------------------------------------------------------------

def sse_event(payload: Dict[str, Any]) -> ServerSentEvent:
    """One server-sent event carrying a JSON payload."""
    return ServerSentEvent(data=json.dumps(payload), sep=SSE_SEPARATOR)


async def _sse_events(
    request: Request,
    chunks: AsyncIterator[str],
    session_id: str,
    monitor: AIMonitor,
) -> AsyncIterator[ServerSentEvent]:
    """
    Wrap a chunk iterator into SSE events.

    Stops early (without a done event) when the client disconnects; closing
    the chunk iterator discards the unanswered user message from history.
    """
    try:
        async for chunk in chunks:
            if await request.is_disconnected():
                logger.info(f"Client disconnected from session {session_id} stream")
                monitor.track_event(session_id, "stream_cancelled")
                return
            yield sse_event({"text": chunk})
        yield sse_event({"done": True})
    except ProviderError as e:
        logger.error(f"Stream failed for session {session_id}: {e}", exc_info=True)
        monitor.track_error(session_id, str(e), stage="stream", metadata={"provider": e.provider})
        yield sse_event({"error": "provider_error", "message": STREAM_ERROR_MESSAGE})
    except asyncio.CancelledError:
        # EventSourceResponse cancels the generator when the client goes away
        logger.info(f"SSE stream for session {session_id} cancelled")
        monitor.track_event(session_id, "stream_cancelled")
        raise
    except Exception as e:
        logger.error(f"Unexpected error streaming session {session_id}: {e}", exc_info=True)
        monitor.track_error(session_id, str(e), stage="stream")
        yield sse_event({"error": "stream_error", "message": STREAM_ERROR_MESSAGE})
    finally:
        await chunks.aclose()


def _streaming_response(
    request: Request,
    service: ChatSessionService,
    monitor: AIMonitor,
    session_id: str,
    message: str,
) -> EventSourceResponse:
    try:
        chunks = service.stream_message(session_id, message)
    except Exception as e:
        raise to_http_exception(e, "stream message") from e

    return EventSourceResponse(_sse_events(request, chunks, session_id, monitor), sep=SSE_SEPARATOR)


# ---------------------------------------------------------------------------
# ENDPOINTS
# ---------------------------------------------------------------------------

@router.get("/status", response_model=LiveStatusResponse)
async def live_status(
    factory: AIServiceFactory = Depends(get_factory),
    service: ChatSessionService = Depends(get_session_service),
    settings: Settings = Depends(get_settings),
):
    """Whether chat is available, and which sessions are active."""
    providers = factory.available_providers()
    session_ids = service.active_session_ids()
    return LiveStatusResponse(
        available=bool(providers),
        providers=providers,
        active_sessions=len(session_ids),
        session_ids=session_ids,
        idle_timeout_seconds=settings.SESSION_IDLE_TIMEOUT_SECONDS,
    )


@router.post("/sessions", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(
    request: CreateSessionRequest,
    service: ChatSessionService = Depends(get_session_service),
):
    """
    Create a chat session.

    The provider is fixed for the lifetime of the session. An optional
    context (role, task, topic, document) shapes the system prompt.
    """
    context = request.context.model_dump(exclude_none=True) if request.context else None
    try:
        session = service.create_session(provider=request.provider, context=context)
    except Exception as e:
        raise to_http_exception(e, "create session") from e

    return SessionResponse(**session.to_dict())


@router.post("/messages", response_model=MessageResponse)
async def send_message(
    body: SendMessageRequest,
    request: Request,
    service: ChatSessionService = Depends(get_session_service),
    monitor: AIMonitor = Depends(get_monitor),
):
    """
    Send a message to a session.

    With `stream: true` the reply is sent as server-sent events instead of
    a JSON body.
    """
    if body.stream:
        return _streaming_response(request, service, monitor, body.session_id, body.message)

    try:
        reply = await service.send_message(body.session_id, body.message)
    except Exception as e:
        raise to_http_exception(e, "send message") from e

    return MessageResponse(
        session_id=body.session_id,
        role=reply.role,
        content=reply.content,
        timestamp=reply.timestamp,
    )


@router.get("/messages/stream")
async def stream_message(
    request: Request,
    session_id: str = Query(..., min_length=1),
    message: str = Query(..., min_length=1),
    service: ChatSessionService = Depends(get_session_service),
    monitor: AIMonitor = Depends(get_monitor),
):
    """Send a message and stream the reply (for EventSource clients, which can only GET)."""
    return _streaming_response(request, service, monitor, session_id, message)


@router.delete("/sessions/{session_id}")
async def end_session(
    session_id: str,
    service: ChatSessionService = Depends(get_session_service),
):
    """End a session. Unknown or already ended sessions answer 404."""
    if not service.end_session(session_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Session {session_id} not found")
    return {"success": True, "session_id": session_id}
