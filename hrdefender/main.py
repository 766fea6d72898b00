"""
Main application entry point - FastAPI app instance and configuration.
This is where the ASGI application is created and configured.
Run with: uvicorn hrdefender.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hrdefender.core.config import Settings, get_settings
from hrdefender.ai.factory import build_default_factory
from hrdefender.ai.handlers import HandlerRegistry, register_builtin_handlers
from hrdefender.ai.monitoring import AIMonitor
from hrdefender.routers import ai, functions, legal_resources, live
from hrdefender.services.ai_service import AIGatewayService
from hrdefender.services.session_service import ChatSessionService

logger = logging.getLogger("hrdefender.main")


# ---------------------------------------------------------------------------
# LIFESPAN
# ---------------------------------------------------------------------------
# The session sweep runs as one background task for the app's lifetime.
@asynccontextmanager
async def lifespan(app: FastAPI):
    session_service: ChatSessionService = app.state.session_service
    await session_service.start_cleanup_loop(app.state.settings.SESSION_CLEANUP_INTERVAL_SECONDS)
    logger.info(f"AI providers available: {app.state.factory.available_providers()}")
    yield
    await session_service.stop_cleanup_loop()


# ---------------------------------------------------------------------------
# VALIDATION ERRORS
# ---------------------------------------------------------------------------
# FastAPI answers invalid bodies with 422; clients of this API expect 400 with
# the offending field spelled out.
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
        detail = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    else:
        detail = "Invalid request"
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": detail})


# ---------------------------------------------------------------------------
# APPLICATION FACTORY
# ---------------------------------------------------------------------------
def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application and its services.

    Every long-lived service is created here and attached to app.state:
    - settings: the Settings instance
    - factory: provider registry and selector
    - monitor: AI logging and metrics
    - ai_service: request orchestration for /ai
    - session_service: chat sessions for /ai/live
    - handler_registry: handlers for /functions

    Args:
        settings: Settings to use (defaults to the environment-loaded settings)
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.APP_NAME,
        debug=settings.DEBUG,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    monitor = AIMonitor()
    factory = build_default_factory(settings)

    app.state.settings = settings
    app.state.monitor = monitor
    app.state.factory = factory
    app.state.ai_service = AIGatewayService(factory, monitor)
    app.state.session_service = ChatSessionService(
        factory,
        idle_timeout_seconds=settings.SESSION_IDLE_TIMEOUT_SECONDS,
        max_sessions=settings.MAX_CHAT_SESSIONS,
        max_messages=settings.MAX_SESSION_MESSAGES,
        monitor=monitor,
    )
    app.state.handler_registry = register_builtin_handlers(HandlerRegistry())

    # -----------------------------------------------------------------------
    # CORS MIDDLEWARE
    # -----------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # -----------------------------------------------------------------------
    # REGISTER ROUTERS
    # -----------------------------------------------------------------------
    # ai.router: /ai/generate-content, /ai/analyze-document, ... /ai/status, /ai/stats
    # live.router: /ai/live/... chat sessions and streaming
    # legal_resources.router: /legal-resources
    # functions.router: /functions
    app.include_router(ai.router)
    app.include_router(live.router)
    app.include_router(legal_resources.router)
    app.include_router(functions.router)

    @app.get("/health", tags=["health"])
    def health_check():
        """
        Simple health check endpoint.

        Does NOT call any AI provider; use /ai/status for provider details.

        Returns:
            {"status": "ok"}
        """
        return {"status": "ok"}

    return app


app = create_app()
