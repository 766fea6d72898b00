"""
Dependencies module - reusable FastAPI dependencies for route handlers.

All long-lived services are created once in create_app() and stored on
app.state. Route handlers pull them in with Depends(...), so tests can build
an app with their own Settings or swap a service on app.state.
"""

from fastapi import Request

from hrdefender.core.config import Settings
from hrdefender.ai.factory import AIServiceFactory
from hrdefender.ai.handlers import HandlerRegistry
from hrdefender.ai.monitoring import AIMonitor
from hrdefender.services.ai_service import AIGatewayService
from hrdefender.services.session_service import ChatSessionService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_factory(request: Request) -> AIServiceFactory:
    """Provider selector holding one adapter per registered provider."""
    return request.app.state.factory


def get_monitor(request: Request) -> AIMonitor:
    return request.app.state.monitor


def get_ai_service(request: Request) -> AIGatewayService:
    return request.app.state.ai_service


def get_session_service(request: Request) -> ChatSessionService:
    return request.app.state.session_service


def get_handler_registry(request: Request) -> HandlerRegistry:
    return request.app.state.handler_registry
