"""
Exceptions raised by the AI gateway.

Routers translate these into HTTP responses:
- ProviderUnavailableError -> 503
- UnknownProviderError / HandlerValidationError -> 400
- SessionNotFoundError / HandlerNotFoundError -> 404
- ProviderError -> 500 (generic message)
"""

from typing import Optional


class AIServiceError(Exception):
    """Base exception for all AI gateway errors."""
    pass


class ProviderError(AIServiceError):
    """Raised when a provider call fails (network, rate limit, bad response)."""

    def __init__(self, message: str, provider: Optional[str] = None):
        super().__init__(message)
        self.provider = provider


class ProviderUnavailableError(AIServiceError):
    """Raised when no provider is registered to serve a request."""
    pass


class UnknownProviderError(AIServiceError):
    """Raised in strict mode when the preferred provider is not registered."""

    def __init__(self, provider: str):
        super().__init__(f"Unknown AI provider: {provider}")
        self.provider = provider


class SessionNotFoundError(AIServiceError):
    """Raised when a chat session does not exist, ended, or idled out."""

    def __init__(self, session_id: str):
        super().__init__(f"Session {session_id} not found")
        self.session_id = session_id


class HandlerNotFoundError(AIServiceError):
    """Raised when invoking a handler name that is not registered."""
    pass


class HandlerValidationError(AIServiceError):
    """Raised when handler parameters fail validation."""
    pass
