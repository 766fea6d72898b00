"""
Tests for AI Providers - base classes, capabilities and mocked SDK calls.

This module tests:
- TokenUsage / AIResponse dataclasses
- Capability methods built on the primitives (generate_content, analyze_document, ...)
- OpenAI, Anthropic and Gemini adapters against mocked SDK clients
- The deterministic mock provider

We mock LLM calls to ensure tests are:
- Fast (no network calls)
- Reliable (no API flakiness)
- Free (no token costs)
"""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from hrdefender.core.errors import ProviderError
from hrdefender.ai.providers.base import (
    AIResponse,
    ChatMessage,
    GenerationParams,
    ProviderType,
    TokenUsage,
)
from hrdefender.ai.providers.anthropic_provider import AnthropicProvider
from hrdefender.ai.providers.gemini import GeminiProvider, SAFETY_SETTINGS
from hrdefender.ai.providers.mock_provider import MockProvider
from hrdefender.ai.providers.openai_provider import OpenAIProvider
from hrdefender.ai.tasks import OutputFormat, TaskType

from conftest import FakeProvider


# ===========================================================================
# DATACLASSES
# ===========================================================================

class TestTokenUsage:
    """Tests for TokenUsage dataclass."""

    def test_auto_calculate_total(self):
        usage = TokenUsage(prompt_tokens=100, completion_tokens=50)
        assert usage.total_tokens == 150

    def test_explicit_total_preserved(self):
        usage = TokenUsage(prompt_tokens=100, completion_tokens=50, total_tokens=200)
        assert usage.total_tokens == 200


class TestAIResponse:
    """Tests for AIResponse dataclass."""

    def test_defaults_to_success(self):
        response = AIResponse(content="Hello", provider=ProviderType.GEMINI, model="gemini-2.5-flash")

        assert response.success is True
        assert response.error is None
        assert response.usage.total_tokens == 0

    def test_to_dict_truncates_content(self):
        response = AIResponse(content="x" * 150, provider=ProviderType.OPENAI, model="gpt-4o")

        data = response.to_dict()

        assert data["provider"] == "openai"
        assert data["content"].endswith("...")
        assert len(data["content"]) == 103


# ===========================================================================
# CAPABILITIES (base class)
# ===========================================================================

class TestGenerateContent:
    """generate_content builds the system prompt and raises on failure."""

    @pytest.mark.asyncio
    async def test_json_output_lowers_temperature(self):
        provider = FakeProvider(content='{"a": 1}')

        await provider.generate_content(GenerationParams(prompt="List facts", output_format=OutputFormat.JSON))

        call = provider.calls[0]
        assert call["temperature"] == 0.2
        assert "valid JSON" in call["system_prompt"]

    @pytest.mark.asyncio
    async def test_explicit_temperature_wins(self):
        provider = FakeProvider()

        await provider.generate_content(
            GenerationParams(prompt="List facts", temperature=1.1, output_format=OutputFormat.JSON)
        )

        assert provider.calls[0]["temperature"] == 1.1

    @pytest.mark.asyncio
    async def test_default_max_tokens_used(self):
        provider = FakeProvider()

        await provider.generate_content(GenerationParams(prompt="Hello"))

        assert provider.calls[0]["max_tokens"] == provider.default_max_tokens
        assert provider.calls[0]["temperature"] == 0.7

    @pytest.mark.asyncio
    async def test_task_type_shapes_system_prompt(self):
        provider = FakeProvider()

        await provider.generate_content(GenerationParams(prompt="Text", task_type=TaskType.TRANSLATION))

        assert "Translate faithfully" in provider.calls[0]["system_prompt"]

    @pytest.mark.asyncio
    async def test_enrichment_appends_resources(self):
        provider = FakeProvider()

        await provider.generate_content(GenerationParams(
            prompt="How do I contact the special rapporteur about urgent appeals?",
            enrich_with_resources=True,
        ))

        assert "Relevant OHCHR resources" in provider.calls[0]["prompt"]

    @pytest.mark.asyncio
    async def test_failure_raises_provider_error(self):
        provider = FakeProvider(success=False)

        with pytest.raises(ProviderError) as exc_info:
            await provider.generate_content(GenerationParams(prompt="Hello"))

        assert exc_info.value.provider == "openai"


class TestAnalysisCapabilities:
    """analyze_document / detect_patterns / suggest_strategy normalization."""

    @pytest.mark.asyncio
    async def test_analyze_document_fenced_json(self):
        provider = FakeProvider(content='Sure:\n```json\n{"parties": ["Police"], "sentiment": "negative"}\n```')

        result = await provider.analyze_document({"content": "Incident on 3 March"})

        assert result.parties == ["Police"]
        assert result.sentiment == "negative"
        assert not result.degraded

    @pytest.mark.asyncio
    async def test_analyze_document_german_keys(self):
        provider = FakeProvider(content=json.dumps({
            "beteiligte_parteien": ["Polizei"],
            "rechtliche_grundlagen": [{"reference": "GG Art. 8", "description": "Versammlungsfreiheit"}],
        }))

        result = await provider.analyze_document({"content": "Vorfall am 3. März"})

        assert result.parties == ["Polizei"]
        assert result.legal_bases[0]["reference"] == "GG Art. 8"

    @pytest.mark.asyncio
    async def test_analyze_document_prose_uses_heuristic(self):
        provider = FakeProvider(content=(
            "Parties:\n"
            "- Local police\n"
            "- Protesters\n"
            "Legal bases:\n"
            "- ICCPR Art. 21: Freedom of assembly\n"
            "Sentiment: negative\n"
        ))

        result = await provider.analyze_document({"content": "Protest report"})

        assert result.parties == ["Local police", "Protesters"]
        assert result.legal_bases == [{"reference": "ICCPR Art. 21", "description": "Freedom of assembly"}]
        assert result.sentiment == "negative"

    @pytest.mark.asyncio
    async def test_analyze_document_degraded(self):
        provider = FakeProvider(content="I cannot help with that")

        result = await provider.analyze_document({"content": "Report"})

        assert result.degraded
        assert result.raw_response == "I cannot help with that"

    @pytest.mark.asyncio
    async def test_detect_patterns_truncates_and_attributes(self):
        provider = FakeProvider(content='{"patterns": [{"name": "Night raids", "description": "Raids after dark"}]}')
        documents = [
            {"id": "d1", "content": "a" * 5000, "context": "c" * 900},
            {"id": "d2", "content": "Second report"},
        ]

        result = await provider.detect_patterns(documents)

        prompt = provider.calls[0]["prompt"]
        assert "a" * 2000 + "..." in prompt
        assert "a" * 2001 not in prompt
        assert "c" * 500 + "..." in prompt
        assert result.patterns[0]["document_ids"] == ["d1", "d2"]

    @pytest.mark.asyncio
    async def test_suggest_strategy_uses_generate_json(self):
        provider = FakeProvider(content=json.dumps({
            "legalApproach": "Strategic litigation",
            "recommendedActions": {"immediate": "Secure evidence", "shortTerm": ["File complaint"]},
        }))

        result = await provider.suggest_strategy({"summary": "Arbitrary detention"})

        assert provider.calls[0]["method"] == "generate_json"
        assert result.legal_approach == "Strategic litigation"
        assert result.recommended_actions.immediate == ["Secure evidence"]
        assert result.recommended_actions.short_term == ["File complaint"]

    @pytest.mark.asyncio
    async def test_capability_failure_raises(self):
        provider = FakeProvider(success=False)

        with pytest.raises(ProviderError):
            await provider.detect_patterns([{"id": "1", "content": "a"}, {"id": "2", "content": "b"}])


# ===========================================================================
# OPENAI
# ===========================================================================

def _openai_completion(content: str):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=SimpleNamespace(prompt_tokens=12, completion_tokens=8),
    )


async def _async_iter(items):
    for item in items:
        yield item


class TestOpenAIProvider:

    @pytest.fixture
    def provider(self):
        provider = OpenAIProvider(model="gpt-4o", api_key="sk-test")
        provider._client = MagicMock()
        return provider

    @pytest.mark.asyncio
    async def test_generate_success(self, provider):
        provider._client.chat.completions.create = AsyncMock(return_value=_openai_completion("Hello"))

        response = await provider.generate("Hi", system_prompt="Be brief", max_tokens=50)

        assert response.success
        assert response.content == "Hello"
        assert response.usage.total_tokens == 20
        kwargs = provider._client.chat.completions.create.call_args.kwargs
        assert kwargs["messages"][0] == {"role": "system", "content": "Be brief"}
        assert kwargs["max_tokens"] == 50

    @pytest.mark.asyncio
    async def test_generate_failure_never_raises(self, provider):
        provider._client.chat.completions.create = AsyncMock(side_effect=RuntimeError("rate limited"))

        response = await provider.generate("Hi")

        assert response.success is False
        assert "rate limited" in response.error

    @pytest.mark.asyncio
    async def test_generate_json_uses_json_mode(self, provider):
        provider._client.chat.completions.create = AsyncMock(return_value=_openai_completion('{"ok": true}'))

        response = await provider.generate_json("Give JSON")

        assert response.success
        kwargs = provider._client.chat.completions.create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["temperature"] == 0.2

    @pytest.mark.asyncio
    async def test_generate_json_returns_unparseable_output(self, provider):
        provider._client.chat.completions.create = AsyncMock(return_value=_openai_completion("not json"))

        response = await provider.generate_json("Give JSON")

        assert response.success
        assert response.content == "not json"

    @pytest.mark.asyncio
    async def test_truncated_strategy_json_degrades(self, provider):
        truncated = '{"legal_approach": "litigation", "key_arguments": ["a", "b'
        provider._client.chat.completions.create = AsyncMock(return_value=_openai_completion(truncated))

        result = await provider.suggest_strategy({"summary": "Arbitrary detention"})

        assert result.degraded
        assert result.raw_response == truncated

    @pytest.mark.asyncio
    async def test_missing_key(self):
        provider = OpenAIProvider(model="gpt-4o", api_key="")

        response = await provider.generate("Hi")

        assert response.success is False
        assert "not configured" in response.error

    @pytest.mark.asyncio
    async def test_stream_chat_yields_deltas(self, provider):
        chunks = [
            SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content="Hel"))]),
            SimpleNamespace(choices=[]),
            SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=None))]),
            SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content="lo"))]),
        ]
        provider._client.chat.completions.create = AsyncMock(return_value=_async_iter(chunks))

        result = [c async for c in provider.stream_chat([ChatMessage(role="user", content="Hi")])]

        assert result == ["Hel", "lo"]
        assert provider._client.chat.completions.create.call_args.kwargs["stream"] is True

    @pytest.mark.asyncio
    async def test_stream_chat_failure_raises(self, provider):
        provider._client.chat.completions.create = AsyncMock(side_effect=RuntimeError("boom"))

        with pytest.raises(ProviderError):
            async for _ in provider.stream_chat([ChatMessage(role="user", content="Hi")]):
                pass


# ===========================================================================
# ANTHROPIC
# ===========================================================================

class _FakeMessageStream:
    """Stand-in for the SDK's async MessageStream context manager."""

    def __init__(self, texts):
        self._texts = texts

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False

    @property
    def text_stream(self):
        return _async_iter(self._texts)


class TestAnthropicProvider:

    @pytest.fixture
    def provider(self):
        provider = AnthropicProvider(model="claude-sonnet-4-5", api_key="test-key")
        provider._client = MagicMock()
        return provider

    @pytest.mark.asyncio
    async def test_chat_passes_history_and_system(self, provider):
        provider._client.messages.create = AsyncMock(return_value=SimpleNamespace(
            content=[SimpleNamespace(text="Part 1 "), SimpleNamespace(text="Part 2")],
            usage=SimpleNamespace(input_tokens=30, output_tokens=10),
        ))
        history = [
            ChatMessage(role="user", content="Hi"),
            ChatMessage(role="assistant", content="Hello"),
            ChatMessage(role="user", content="Help me"),
        ]

        response = await provider.chat(history, system_prompt="You help defenders")

        assert response.content == "Part 1 Part 2"
        assert response.usage.total_tokens == 40
        kwargs = provider._client.messages.create.call_args.kwargs
        assert kwargs["system"] == "You help defenders"
        assert [m["role"] for m in kwargs["messages"]] == ["user", "assistant", "user"]

    @pytest.mark.asyncio
    async def test_generate_json_strips_and_instructs(self, provider):
        provider._client.messages.create = AsyncMock(return_value=SimpleNamespace(
            content=[SimpleNamespace(text='  {"a": 1}\n')],
            usage=SimpleNamespace(input_tokens=1, output_tokens=1),
        ))

        response = await provider.generate_json("JSON please", system_prompt="Base")

        assert response.content == '{"a": 1}'
        assert "valid JSON only" in provider._client.messages.create.call_args.kwargs["system"]

    @pytest.mark.asyncio
    async def test_stream_chat(self, provider):
        provider._client.messages.stream = MagicMock(return_value=_FakeMessageStream(["a", "", "b"]))

        result = [c async for c in provider.stream_chat([ChatMessage(role="user", content="Hi")])]

        assert result == ["a", "b"]

    @pytest.mark.asyncio
    async def test_failure_returns_error_response(self, provider):
        provider._client.messages.create = AsyncMock(side_effect=RuntimeError("overloaded"))

        response = await provider.generate("Hi")

        assert response.success is False
        assert response.provider == ProviderType.ANTHROPIC


# ===========================================================================
# GEMINI
# ===========================================================================

def _gemini_response(text: str):
    return SimpleNamespace(
        text=text,
        usage_metadata=SimpleNamespace(prompt_token_count=7, candidates_token_count=3),
    )


class TestGeminiProvider:

    @pytest.fixture
    def provider(self):
        provider = GeminiProvider(model="gemini-2.5-flash", api_key="test-key")
        provider._client = MagicMock()
        return provider

    def test_safety_settings_cover_four_categories(self):
        assert len(SAFETY_SETTINGS) == 4

    @pytest.mark.asyncio
    async def test_generate_sends_safety_settings(self, provider):
        provider._client.aio.models.generate_content = AsyncMock(return_value=_gemini_response("ok"))

        response = await provider.generate("Hi", system_prompt="Be careful")

        assert response.content == "ok"
        assert response.usage.total_tokens == 10
        config = provider._client.aio.models.generate_content.call_args.kwargs["config"]
        assert len(config.safety_settings) == 4
        assert config.system_instruction == "Be careful"

    @pytest.mark.asyncio
    async def test_generate_json_sets_mime_type(self, provider):
        provider._client.aio.models.generate_content = AsyncMock(return_value=_gemini_response(' {"a": 1} '))

        response = await provider.generate_json("Give JSON")

        assert response.content == '{"a": 1}'
        config = provider._client.aio.models.generate_content.call_args.kwargs["config"]
        assert config.response_mime_type == "application/json"

    @pytest.mark.asyncio
    async def test_chat_maps_assistant_to_model_role(self, provider):
        provider._client.aio.models.generate_content = AsyncMock(return_value=_gemini_response("ok"))

        await provider.chat([
            ChatMessage(role="user", content="Hi"),
            ChatMessage(role="assistant", content="Hello"),
        ])

        contents = provider._client.aio.models.generate_content.call_args.kwargs["contents"]
        assert [c.role for c in contents] == ["user", "model"]

    @pytest.mark.asyncio
    async def test_stream_chat(self, provider):
        provider._client.aio.models.generate_content_stream = AsyncMock(return_value=_async_iter([
            SimpleNamespace(text="Hel"), SimpleNamespace(text=None), SimpleNamespace(text="lo"),
        ]))

        result = [c async for c in provider.stream_chat([ChatMessage(role="user", content="Hi")])]

        assert result == ["Hel", "lo"]

    @pytest.mark.asyncio
    async def test_failure_returns_error_response(self, provider):
        provider._client.aio.models.generate_content = AsyncMock(side_effect=RuntimeError("quota"))

        response = await provider.generate("Hi")

        assert response.success is False
        assert response.error == "quota"


# ===========================================================================
# MOCK PROVIDER
# ===========================================================================

class TestMockProvider:

    @pytest.mark.asyncio
    async def test_generate_is_deterministic(self):
        provider = MockProvider()

        first = await provider.generate("Describe the situation in detail please")
        second = await provider.generate("Describe the situation in detail please")

        assert first.content == second.content
        assert first.content.startswith("Generated content based on:")

    @pytest.mark.asyncio
    async def test_generate_json_when_asked(self):
        provider = MockProvider()

        response = await provider.generate("Hi", system_prompt="Return your answer as valid JSON.")

        assert "content" in json.loads(response.content)

    @pytest.mark.asyncio
    async def test_stream_chat_rebuilds_reply(self):
        provider = MockProvider()
        messages = [ChatMessage(role="user", content="what now")]

        chunks = [c async for c in provider.stream_chat(messages)]

        assert "".join(chunks) == (await provider.chat(messages)).content == "Mock reply to: what now"

    @pytest.mark.asyncio
    async def test_canned_patterns_reference_documents(self):
        provider = MockProvider()

        result = await provider.detect_patterns([{"id": "a", "content": "x"}, {"id": "b", "content": "y"}])

        assert all(p["document_ids"] == ["a", "b"] for p in result.patterns)

