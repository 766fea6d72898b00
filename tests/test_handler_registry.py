"""
Tests for the Handler Registry and the built-in handlers.

Tests for:
- HandlerDefinition validation
- HandlerRegistry registration, alias lookup and invocation
- Built-in handlers (document type, legal resources, keywords, word count)
"""

import pytest

from hrdefender.core.errors import HandlerNotFoundError, HandlerValidationError
from hrdefender.ai.handlers import HandlerDefinition, HandlerRegistry, register_builtin_handlers


# ===========================================================================
# HANDLERDEFINITION TESTS
# ===========================================================================

class TestHandlerDefinition:

    @pytest.fixture
    def handler(self):
        return HandlerDefinition(
            name="echo",
            description="Echo the text",
            func=lambda text, upper=False: text.upper() if upper else text,
            required_params={"text"},
            optional_params={"upper"},
        )

    def test_valid_parameters(self, handler):
        assert handler.validate({"text": "hi"}) == (True, None)
        assert handler.validate({"text": "hi", "upper": True}) == (True, None)

    def test_missing_required(self, handler):
        assert handler.validate({}) == (False, "Missing required parameter: text")

    def test_blank_string_counts_as_missing(self, handler):
        is_valid, _ = handler.validate({"text": "   "})
        assert is_valid is False

    def test_unexpected_parameter(self, handler):
        is_valid, error = handler.validate({"text": "hi", "__import__": "os"})

        assert is_valid is False
        assert "__import__" in error

    def test_wrong_type_rejected(self):
        handler = HandlerDefinition(
            name="repeat",
            description="Repeat the text",
            func=lambda text, times=1: text * times,
            required_params={"text"},
            optional_params={"times"},
            param_types={"text": str, "times": int},
        )

        assert handler.validate({"text": "hi", "times": 2}) == (True, None)
        assert handler.validate({"text": 123}) == (False, "Parameter 'text' must be of type str")
        assert handler.validate({"text": "hi", "times": "many"}) == (
            False, "Parameter 'times' must be of type int",
        )
        assert handler.validate({"text": "hi", "times": True})[0] is False

    def test_to_dict(self, handler):
        assert handler.to_dict() == {
            "name": "echo",
            "description": "Echo the text",
            "required_params": ["text"],
            "optional_params": ["upper"],
            "aliases": [],
        }


# ===========================================================================
# HANDLERREGISTRY TESTS
# ===========================================================================

class TestHandlerRegistry:

    @pytest.fixture
    def registry(self):
        registry = HandlerRegistry()
        registry.register(HandlerDefinition(
            name="shout",
            description="Uppercase",
            func=lambda text: text.upper(),
            required_params={"text"},
            aliases={"loud"},
        ))
        return registry

    def test_lookup_by_alias(self, registry):
        assert registry.get_handler("LOUD").name == "shout"
        assert registry.has_handler("shout")
        assert not registry.has_handler("whisper")

    def test_duplicate_registration_rejected(self, registry):
        with pytest.raises(ValueError):
            registry.register(HandlerDefinition(name="loud", description="dup", func=lambda: None))

    def test_validate_unknown(self, registry):
        assert registry.validate("whisper", {}) == (False, "Unknown handler: whisper")

    @pytest.mark.asyncio
    async def test_invoke(self, registry):
        assert await registry.invoke("loud", {"text": "hello"}) == "HELLO"

    @pytest.mark.asyncio
    async def test_invoke_async_handler(self, registry):
        async def slow_echo(text):
            return text

        registry.register(HandlerDefinition(
            name="slow_echo", description="Async echo", func=slow_echo, required_params={"text"},
        ))

        assert await registry.invoke("slow_echo", {"text": "hi"}) == "hi"

    @pytest.mark.asyncio
    async def test_invoke_unknown(self, registry):
        with pytest.raises(HandlerNotFoundError):
            await registry.invoke("eval", {"code": "1+1"})

    @pytest.mark.asyncio
    async def test_invoke_missing_parameter(self, registry):
        with pytest.raises(HandlerValidationError) as exc_info:
            await registry.invoke("shout", {})

        assert "text" in str(exc_info.value)


# ===========================================================================
# BUILT-IN HANDLERS
# ===========================================================================

class TestBuiltinHandlers:

    @pytest.fixture
    def registry(self):
        return register_builtin_handlers(HandlerRegistry())

    def test_all_registered(self, registry):
        assert registry.list_handler_names() == [
            "detect_document_type",
            "search_legal_resources",
            "extract_keywords",
            "word_count",
        ]

    @pytest.mark.asyncio
    async def test_detect_document_type(self, registry):
        result = await registry.invoke("detect_document_type", {"content": "Incident on 12 May in the capital"})
        assert result == {"document_type": "event"}

    @pytest.mark.asyncio
    async def test_detect_document_type_unknown(self, registry):
        result = await registry.invoke("document_type", {"content": "Lorem ipsum"})
        assert result == {"document_type": None}

    @pytest.mark.asyncio
    async def test_search_legal_resources(self, registry):
        result = await registry.invoke("search_legal_resources", {"query": "special procedures"})

        ids = {resource["id"] for resource in result}
        assert {"sp-database", "sp-communications", "uhri"} <= ids

    @pytest.mark.asyncio
    async def test_search_legal_resources_bad_type(self, registry):
        with pytest.raises(HandlerValidationError):
            await registry.invoke("legal_resources", {"query": "upr", "type": "spaceship"})

    @pytest.mark.asyncio
    async def test_extract_keywords_by_frequency(self, registry):
        text = "Detention detention detention. Torture torture. Hearing."

        result = await registry.invoke("keywords", {"text": text, "max_keywords": 2})

        assert result == ["detention", "torture"]

    @pytest.mark.asyncio
    async def test_word_count(self, registry):
        result = await registry.invoke("word_count", {"text": "one two\nthree"})
        assert result == {"words": 3, "characters": 13, "lines": 2}

    @pytest.mark.asyncio
    async def test_word_count_rejects_non_string(self, registry):
        with pytest.raises(HandlerValidationError) as exc_info:
            await registry.invoke("word_count", {"text": 123})

        assert str(exc_info.value) == "Parameter 'text' must be of type str"

    @pytest.mark.asyncio
    async def test_extract_keywords_rejects_non_numeric_limit(self, registry):
        with pytest.raises(HandlerValidationError):
            await registry.invoke("extract_keywords", {"text": "Detention hearing", "max_keywords": "many"})

    @pytest.mark.asyncio
    async def test_extract_keywords_rejects_negative_limit(self, registry):
        with pytest.raises(HandlerValidationError):
            await registry.invoke("extract_keywords", {"text": "Detention hearing", "max_keywords": -1})

    @pytest.mark.asyncio
    async def test_extract_keywords_zero_limit(self, registry):
        assert await registry.invoke("extract_keywords", {"text": "Detention hearing", "max_keywords": 0}) == []
