"""
Translation of gateway exceptions into HTTP errors.

Routers call to_http_exception() from their except blocks, so every endpoint
maps the same exception to the same status code. Provider failures are
logged with the traceback and answered with a generic message; upstream
error text never reaches the client.
"""

import logging

from fastapi import HTTPException, status

from hrdefender.core.errors import (
    HandlerNotFoundError,
    HandlerValidationError,
    ProviderError,
    ProviderUnavailableError,
    SessionNotFoundError,
    UnknownProviderError,
)

logger = logging.getLogger("hrdefender.routers")


def to_http_exception(exc: Exception, action: str) -> HTTPException:
    """
    Map an exception raised while performing `action` to an HTTPException.

    Args:
        exc: The caught exception
        action: Human-readable description, e.g. "generate content"
    """
    if isinstance(exc, ProviderUnavailableError):
        logger.warning(f"Cannot {action}: {exc}")
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))

    if isinstance(exc, (UnknownProviderError, HandlerValidationError)):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    if isinstance(exc, (SessionNotFoundError, HandlerNotFoundError)):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))

    if isinstance(exc, ProviderError):
        logger.error(f"Failed to {action} (provider: {exc.provider}): {exc}", exc_info=exc)
    else:
        logger.error(f"Failed to {action}: {exc}", exc_info=exc)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}",
    )
