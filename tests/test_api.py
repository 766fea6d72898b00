"""
HTTP tests for the gateway routes (FastAPI TestClient).

Only the mock provider is registered by default; tests that need scripted
output register a FakeProvider on app.state.factory.
"""

import json

from fastapi.testclient import TestClient

from hrdefender.ai.providers.base import ProviderType
from hrdefender.main import create_app

from conftest import FakeProvider, make_settings


class _BrokenStreamProvider(FakeProvider):
    """Streams one chunk, then fails with a non-provider error."""

    async def stream_chat(self, messages, system_prompt=None, temperature=0.7, max_tokens=1024):
        yield "partial"
        raise RuntimeError("socket reset: secret-internal-detail")


def _sse_payloads(body: str):
    """Decode every `data: {...}` frame of an SSE body."""
    return [
        json.loads(line[len("data: "):])
        for line in body.split("\n")
        if line.startswith("data: ")
    ]


# ===========================================================================
# /ai/generate-content
# ===========================================================================

class TestGenerateContent:

    def test_mock_provider_by_default(self, client):
        response = client.post("/ai/generate-content", json={"prompt": "Summarize the hearing"})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["provider"] == "mock"
        assert data["content"].startswith("Generated content based on")
        assert data["data"] is None

    def test_json_output_is_normalized(self, app, client):
        app.state.factory.register("openai", FakeProvider(ProviderType.OPENAI, content='```json\n{"a": 1}\n```'))

        response = client.post("/ai/generate-content", json={
            "prompt": "Give me JSON",
            "outputFormat": "json",
            "preferredProvider": "openai",
        })

        assert response.status_code == 200
        assert response.json()["data"] == {"a": 1}
        assert response.json()["content"] == '```json\n{"a": 1}\n```'

    def test_camel_case_fields(self, app, client):
        fake = FakeProvider(ProviderType.OPENAI)
        app.state.factory.register("openai", fake)

        response = client.post("/ai/generate-content", json={
            "prompt": "Hello",
            "maxTokens": 50,
            "preferredProvider": "openai",
        })

        assert response.status_code == 200
        assert fake.calls[-1]["max_tokens"] == 50

    def test_snake_case_fields(self, app, client):
        fake = FakeProvider(ProviderType.OPENAI)
        app.state.factory.register("openai", fake)

        client.post("/ai/generate-content", json={"prompt": "Hello", "max_tokens": 60, "preferred_provider": "openai"})

        assert fake.calls[-1]["max_tokens"] == 60

    def test_unknown_preferred_provider_falls_back(self, client):
        response = client.post("/ai/generate-content", json={"prompt": "Hi", "preferredProvider": "nonexistent"})

        assert response.status_code == 200
        assert response.json()["provider"] == "mock"

    def test_unknown_preferred_provider_strict(self):
        app = create_app(make_settings(STRICT_PROVIDER_SELECTION=True))
        client = TestClient(app)

        response = client.post("/ai/generate-content", json={"prompt": "Hi", "preferredProvider": "nonexistent"})

        assert response.status_code == 400
        assert "nonexistent" in response.json()["detail"]

    def test_empty_prompt_rejected(self, client):
        response = client.post("/ai/generate-content", json={"prompt": "   "})

        assert response.status_code == 400
        assert response.json()["detail"].startswith("prompt")

    def test_missing_prompt_rejected(self, client):
        assert client.post("/ai/generate-content", json={}).status_code == 400

    def test_temperature_out_of_range(self, client):
        response = client.post("/ai/generate-content", json={"prompt": "Hi", "temperature": 3})
        assert response.status_code == 400

    def test_max_tokens_must_be_positive(self, client):
        response = client.post("/ai/generate-content", json={"prompt": "Hi", "maxTokens": 0})
        assert response.status_code == 400

    def test_no_provider_is_503(self):
        app = create_app(make_settings(ENABLE_MOCK_PROVIDER=False))
        client = TestClient(app)

        response = client.post("/ai/generate-content", json={"prompt": "Hi"})

        assert response.status_code == 503

    def test_provider_failure_is_generic_500(self, app, client):
        app.state.factory.register("openai", FakeProvider(ProviderType.OPENAI, success=False))

        response = client.post("/ai/generate-content", json={"prompt": "Hi", "preferredProvider": "openai"})

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to generate content"
        assert "secret-internal-detail" not in response.text

    def test_enrich_with_resources(self, app, client):
        fake = FakeProvider(ProviderType.OPENAI)
        app.state.factory.register("openai", fake)

        client.post("/ai/generate-content", json={
            "prompt": "How does the ratification of treaties work?",
            "enrichWithResources": True,
            "preferredProvider": "openai",
        })

        assert "Relevant OHCHR resources" in fake.calls[-1]["prompt"]


# ===========================================================================
# CAPABILITIES
# ===========================================================================

class TestCapabilities:

    def test_analyze_document_detects_type(self, client):
        response = client.post("/ai/analyze-document", json={
            "title": "Protest report",
            "content": "Incident on 4 April: police detained three journalists.",
        })

        assert response.status_code == 200
        data = response.json()
        assert data["detected_document_type"] == "event"
        assert data["analysis"]["parties"] == ["Person A", "Organisation B"]
        assert data["provider"] == "mock"

    def test_analyze_document_with_scripted_provider(self, app, client):
        fake = FakeProvider(ProviderType.OPENAI, content='{"parties": ["Ministry"], "sentiment": "negative"}')
        app.state.factory.register("openai", fake)

        response = client.post("/ai/analyze-document", json={"content": "A long report"})

        assert response.status_code == 200
        assert response.json()["provider"] == "openai"
        assert response.json()["analysis"]["parties"] == ["Ministry"]

    def test_detect_patterns(self, client):
        response = client.post("/ai/detect-patterns", json={"documents": [
            {"id": "doc-1", "content": "Night raid in district A"},
            {"id": "doc-2", "content": "Night raid in district B"},
        ]})

        assert response.status_code == 200
        assert len(response.json()["analysis"]["patterns"]) == 2

    def test_detect_patterns_needs_two_documents(self, client):
        response = client.post("/ai/detect-patterns", json={"documents": [{"id": "doc-1", "content": "Alone"}]})

        assert response.status_code == 400
        assert response.json()["detail"].startswith("documents")

    def test_suggest_strategy(self, client):
        response = client.post("/ai/suggest-strategy", json={"caseData": {"summary": "Arbitrary detention"}})

        assert response.status_code == 200
        assert response.json()["strategy"]["legal_approach"] == "Human rights framework litigation"

    def test_suggest_strategy_empty_case(self, client):
        assert client.post("/ai/suggest-strategy", json={"caseData": {}}).status_code == 400

    def test_brainstorming(self, app, client):
        app.state.factory.register(
            "anthropic",
            FakeProvider(ProviderType.ANTHROPIC, content='{"ideas": ["Petition", "Vigil"]}'),
        )

        response = client.post("/ai/brainstorming", json={"topic": "Press freedom campaign"})

        assert response.status_code == 200
        assert response.json()["ideas"] == ["Petition", "Vigil"]
        assert response.json()["provider"] == "anthropic"

    def test_brainstorming_plain_text_ideas(self, app, client):
        app.state.factory.register(
            "anthropic",
            FakeProvider(ProviderType.ANTHROPIC, content="- Petition\n- Vigil\n- Open letter"),
        )

        response = client.post("/ai/brainstorming", json={"topic": "Press freedom campaign"})

        assert response.json()["ideas"] == ["Petition", "Vigil", "Open letter"]

    def test_help(self, client):
        response = client.post("/ai/help", json={"question": "How do I submit to the UPR?"})

        assert response.status_code == 200
        assert response.json()["answer"].startswith("Generated content based on")
        assert response.json()["model"] == "mock-1"


# ===========================================================================
# STATUS & STATS
# ===========================================================================

class TestStatus:

    def test_status(self, client):
        response = client.get("/ai/status")

        assert response.json() == {
            "providers": ["mock"],
            "default_provider": "mock",
            "mock_enabled": True,
            "active_sessions": 0,
        }

    def test_stats_track_requests(self, client):
        client.post("/ai/generate-content", json={"prompt": "One"})
        client.post("/ai/generate-content", json={"prompt": "Two", "preferredProvider": "nonexistent"})

        data = client.get("/ai/stats").json()

        assert data["total_requests"] == 2
        assert data["requests_by_operation"] == {"generate_content": 2}
        assert data["requests_by_provider"] == {"mock": 2}
        assert data["selection_fallbacks"] == 1

    def test_stats_count_selection_errors(self):
        app = create_app(make_settings(ENABLE_MOCK_PROVIDER=False))
        client = TestClient(app)

        client.post("/ai/generate-content", json={"prompt": "Hi"})

        assert client.get("/ai/stats").json()["errors_by_stage"] == {"selection": 1}

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}


# ===========================================================================
# /ai/live
# ===========================================================================

class TestLive:

    def _create(self, client, **body):
        response = client.post("/ai/live/sessions", json=body)
        assert response.status_code == 201
        return response.json()

    def test_create_session(self, client):
        session = self._create(client, context={"role": "case worker"})

        assert session["provider"] == "mock"
        assert session["status"] == "active"
        assert session["context"] == {"role": "case worker"}
        assert session["message_count"] == 0

    def test_send_message(self, client):
        session = self._create(client)

        response = client.post("/ai/live/messages", json={"sessionId": session["session_id"], "message": "Hello"})

        assert response.status_code == 200
        assert response.json()["role"] == "assistant"
        assert response.json()["content"] == "Mock reply to: Hello"

    def test_send_message_unknown_session(self, client):
        response = client.post("/ai/live/messages", json={"sessionId": "missing", "message": "Hello"})
        assert response.status_code == 404

    def test_send_blank_message(self, client):
        session = self._create(client)

        response = client.post("/ai/live/messages", json={"sessionId": session["session_id"], "message": " "})

        assert response.status_code == 400

    def test_stream_message(self, client):
        session = self._create(client)

        response = client.post("/ai/live/messages", json={
            "sessionId": session["session_id"],
            "message": "hello there",
            "stream": True,
        })

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        payloads = _sse_payloads(response.text)
        assert payloads[-1] == {"done": True}
        assert "".join(p["text"] for p in payloads[:-1]) == "Mock reply to: hello there"

    def test_stream_via_get(self, client):
        session = self._create(client)

        response = client.get("/ai/live/messages/stream", params={
            "session_id": session["session_id"],
            "message": "hi",
        })

        assert _sse_payloads(response.text)[-1] == {"done": True}

    def test_streamed_reply_joins_history(self, app, client):
        session = self._create(client)
        client.post("/ai/live/messages", json={"sessionId": session["session_id"], "message": "one", "stream": True})

        stored = app.state.session_service.get_session(session["session_id"])

        assert [m.content for m in stored.messages] == ["one", "Mock reply to: one"]

    def test_stream_error_frame(self, app, client):
        app.state.factory.register(
            "openai",
            FakeProvider(ProviderType.OPENAI, chunks=["partial", "never"], stream_error_after=1),
        )
        session = self._create(client, provider="openai")

        response = client.post("/ai/live/messages", json={
            "sessionId": session["session_id"],
            "message": "Hello",
            "stream": True,
        })

        payloads = _sse_payloads(response.text)
        assert payloads[0] == {"text": "partial"}
        assert payloads[-1]["error"] == "provider_error"
        assert "stream broke" not in response.text
        assert {"done": True} not in payloads

    def test_unexpected_stream_failure_still_closes_with_error_frame(self, app, client):
        app.state.factory.register("openai", _BrokenStreamProvider(ProviderType.OPENAI))
        session = self._create(client, provider="openai")

        response = client.post("/ai/live/messages", json={
            "sessionId": session["session_id"],
            "message": "Hello",
            "stream": True,
        })

        payloads = _sse_payloads(response.text)
        assert payloads[0] == {"text": "partial"}
        assert payloads[-1]["error"] == "stream_error"
        assert "secret-internal-detail" not in response.text
        stored = app.state.session_service.get_session(session["session_id"])
        assert stored.messages == []

    def test_stream_unknown_session_is_404(self, client):
        response = client.post("/ai/live/messages", json={"sessionId": "missing", "message": "Hi", "stream": True})
        assert response.status_code == 404

    def test_end_session(self, client):
        session = self._create(client)

        first = client.delete(f"/ai/live/sessions/{session['session_id']}")
        second = client.delete(f"/ai/live/sessions/{session['session_id']}")

        assert first.status_code == 200
        assert first.json() == {"success": True, "session_id": session["session_id"]}
        assert second.status_code == 404

    def test_live_status(self, client):
        session = self._create(client)

        data = client.get("/ai/live/status").json()

        assert data["available"] is True
        assert data["session_ids"] == [session["session_id"]]
        assert data["active_sessions"] == 1
        assert data["idle_timeout_seconds"] == 30 * 60


# ===========================================================================
# /legal-resources and /functions
# ===========================================================================

class TestLegalResources:

    def test_list_all(self, client):
        assert client.get("/legal-resources").json()["count"] == 12

    def test_search(self, client):
        data = client.get("/legal-resources", params={"q": "special procedures"}).json()
        assert data["count"] == 3

    def test_filter_by_type(self, client):
        data = client.get("/legal-resources", params={"type": "portal"}).json()
        assert [r["id"] for r in data["resources"]] == ["upr-documentation"]

    def test_invalid_type(self, client):
        assert client.get("/legal-resources", params={"type": "spaceship"}).status_code == 400

    def test_get_by_id(self, client):
        assert client.get("/legal-resources/uhri").json()["url"] == "http://uhri.ohchr.org"
        assert client.get("/legal-resources/missing").status_code == 404


class TestFunctions:

    def test_list(self, client):
        data = client.get("/functions").json()

        assert data["count"] == 4
        assert {h["name"] for h in data["handlers"]} == {
            "detect_document_type", "search_legal_resources", "extract_keywords", "word_count",
        }

    def test_invoke(self, client):
        response = client.post("/functions/word_count/invoke", json={"parameters": {"text": "a b c"}})

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "handler": "word_count",
            "result": {"words": 3, "characters": 5, "lines": 1},
        }

    def test_invoke_by_alias(self, client):
        response = client.post("/functions/keywords/invoke", json={"parameters": {"text": "Detention hearing"}})

        assert response.json()["handler"] == "extract_keywords"

    def test_unknown_handler(self, client):
        response = client.post("/functions/eval/invoke", json={"parameters": {"code": "1"}})
        assert response.status_code == 404

    def test_missing_parameter(self, client):
        response = client.post("/functions/word_count/invoke", json={"parameters": {}})

        assert response.status_code == 400
        assert response.json()["detail"] == "Missing required parameter: text"

    def test_handler_level_validation(self, client):
        response = client.post(
            "/functions/search_legal_resources/invoke",
            json={"parameters": {"query": "upr", "type": "spaceship"}},
        )
        assert response.status_code == 400

    def test_wrong_parameter_type(self, client):
        response = client.post("/functions/word_count/invoke", json={"parameters": {"text": 123}})

        assert response.status_code == 400
        assert response.json()["detail"] == "Parameter 'text' must be of type str"

    def test_non_numeric_max_keywords(self, client):
        response = client.post(
            "/functions/extract_keywords/invoke",
            json={"parameters": {"text": "Detention hearing", "max_keywords": "many"}},
        )
        assert response.status_code == 400

    def test_negative_max_keywords(self, client):
        response = client.post(
            "/functions/extract_keywords/invoke",
            json={"parameters": {"text": "Detention hearing", "max_keywords": -1}},
        )
        assert response.status_code == 400
