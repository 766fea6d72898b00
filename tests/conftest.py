"""
Test configuration and fixtures for pytest.

This module provides shared fixtures used across all tests:
- Settings with no API keys (only the mock provider is registered)
- FakeProvider: a scriptable AIProvider for routing and error tests
- App and test client (FastAPI TestClient)

No test talks to a real AI provider.
"""

import asyncio

import pytest
from typing import Any, AsyncIterator, Dict, Generator, List, Optional

from fastapi.testclient import TestClient
from sse_starlette.sse import AppStatus

from hrdefender.core.config import Settings
from hrdefender.core.errors import ProviderError
from hrdefender.ai.providers.base import (
    AIProvider,
    AIResponse,
    ChatMessage,
    ProviderType,
    TokenUsage,
)
from hrdefender.main import create_app


# ---------------------------------------------------------------------------
# FAKE PROVIDER
# ---------------------------------------------------------------------------

class FakeProvider(AIProvider):
    """
    Scriptable provider that records every primitive call.

    Args:
        provider_type: Which provider this fake stands in for
        content: Text returned by generate / generate_json / chat
        success: False makes every primitive return a failed AIResponse
        chunks: Chunks yielded by stream_chat (defaults to content split in two)
        stream_error_after: Raise ProviderError after this many chunks
        gate: chat waits on this event before answering
    """

    def __init__(
        self,
        provider_type: ProviderType = ProviderType.OPENAI,
        content: str = "fake content",
        success: bool = True,
        chunks: Optional[List[str]] = None,
        stream_error_after: Optional[int] = None,
        gate: Optional[asyncio.Event] = None,
    ):
        self.provider_type = provider_type
        self.model = f"{provider_type.value}-fake"
        self.default_max_tokens = 1024
        self.content = content
        self.success = success
        self.chunks = chunks
        self.stream_error_after = stream_error_after
        self.gate = gate
        self.calls: List[Dict[str, Any]] = []

    def _response(self) -> AIResponse:
        if not self.success:
            return AIResponse(
                content="",
                provider=self.provider_type,
                model=self.model,
                success=False,
                error="upstream exploded: secret-internal-detail",
            )
        return AIResponse(
            content=self.content,
            provider=self.provider_type,
            model=self.model,
            usage=TokenUsage(prompt_tokens=10, completion_tokens=5),
            latency_ms=12.5,
        )

    async def generate(self, prompt, system_prompt=None, temperature=0.7, max_tokens=1024, **kwargs):
        self.calls.append({
            "method": "generate",
            "prompt": prompt,
            "system_prompt": system_prompt,
            "temperature": temperature,
            "max_tokens": max_tokens,
        })
        return self._response()

    async def generate_json(self, prompt, system_prompt=None, **kwargs):
        self.calls.append({"method": "generate_json", "prompt": prompt, "system_prompt": system_prompt})
        return self._response()

    async def chat(self, messages: List[ChatMessage], system_prompt=None, temperature=0.7, max_tokens=1024):
        self.calls.append({
            "method": "chat",
            "messages": [(m.role, m.content) for m in messages],
            "system_prompt": system_prompt,
        })
        if self.gate is not None:
            await self.gate.wait()
        return self._response()

    async def stream_chat(
        self,
        messages: List[ChatMessage],
        system_prompt=None,
        temperature=0.7,
        max_tokens=1024,
    ) -> AsyncIterator[str]:
        self.calls.append({"method": "stream_chat", "messages": [(m.role, m.content) for m in messages]})
        chunks = self.chunks if self.chunks is not None else [self.content[:4], self.content[4:]]
        for index, chunk in enumerate(chunks):
            if self.stream_error_after is not None and index >= self.stream_error_after:
                raise ProviderError("stream broke", provider=self.name)
            yield chunk


# ---------------------------------------------------------------------------
# SETTINGS & APP FIXTURES
# ---------------------------------------------------------------------------

def make_settings(**overrides) -> Settings:
    """Settings isolated from the environment and any .env file."""
    values = {
        "GEMINI_API_KEY": "",
        "OPENAI_API_KEY": "",
        "ANTHROPIC_API_KEY": "",
        "DEFAULT_AI_PROVIDER": "mock",
        "ENABLE_MOCK_PROVIDER": True,
        "STRICT_PROVIDER_SELECTION": False,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture(autouse=True)
def reset_sse_app_status():
    """
    sse-starlette keeps its shutdown event on a class attribute, bound to
    the first event loop that used it; every TestClient runs its own loop.
    """
    AppStatus.should_exit_event = None
    yield
    AppStatus.should_exit_event = None


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def app(settings: Settings):
    return create_app(settings)


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    """
    Test client with the app lifespan running (session cleanup loop).
    """
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def fake_openai() -> FakeProvider:
    return FakeProvider(ProviderType.OPENAI)
