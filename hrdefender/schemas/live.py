"""
Pydantic schemas for the /ai/live chat-session endpoints.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from hrdefender.schemas.ai import CamelModel


class SessionContext(CamelModel):
    """Optional context pinned to a session and folded into its system prompt."""
    role: Optional[str] = Field(default=None, description="Who the user is, e.g. 'case worker'")
    task: Optional[str] = Field(default=None, description="What the user is working on")
    topic: Optional[str] = None
    document: Optional[str] = Field(default=None, description="Document text the chat is about")


class CreateSessionRequest(CamelModel):
    provider: Optional[str] = Field(default=None, description="Preferred provider for this session")
    context: Optional[SessionContext] = None


class SessionResponse(BaseModel):
    session_id: str
    provider: str
    status: str
    message_count: int
    context: Dict[str, Any]
    created_at: datetime
    last_active_at: datetime


class SendMessageRequest(CamelModel):
    """
    Request for POST /ai/live/messages.

    Example:
    {
        "sessionId": "8c1f...",
        "message": "Which evidence should we secure first?",
        "stream": false
    }
    """
    session_id: str = Field(..., description="Session to send the message to")
    message: str = Field(..., description="User message")
    stream: bool = Field(default=False, description="Answer as a server-sent event stream")

    @field_validator("message")
    @classmethod
    def _check_message(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value


class MessageResponse(BaseModel):
    success: bool = True
    session_id: str
    role: str
    content: str
    timestamp: datetime


class LiveStatusResponse(BaseModel):
    available: bool
    providers: List[str]
    active_sessions: int
    session_ids: List[str]
    idle_timeout_seconds: int
