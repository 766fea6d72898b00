"""
Tests for AIMonitor metrics aggregation and structured log lines.
"""

import json

import pytest

from hrdefender.ai.monitoring import AIMonitor
from hrdefender.ai.providers.base import AIResponse, ProviderType, TokenUsage


@pytest.fixture
def monitor():
    return AIMonitor()


class TestMetrics:

    def test_cost_estimate(self, monitor):
        monitor.track_response(
            request_id="r1",
            provider="openai",
            model="gpt-4o",
            content="ok",
            prompt_tokens=1_000_000,
            completion_tokens=0,
            latency_ms=100.0,
        )

        stats = monitor.get_stats()
        assert stats.estimated_total_cost == pytest.approx(2.50)
        assert stats.to_dict()["estimated_total_cost"] == "$2.5000"

    def test_mock_is_free(self, monitor):
        monitor.track_response("r1", "mock", "mock-model", "ok", 500, 500, 1.0)
        assert monitor.get_stats().estimated_total_cost == 0.0

    def test_aggregates_by_provider_and_operation(self, monitor):
        response = AIResponse(
            content="done",
            provider=ProviderType.ANTHROPIC,
            model="claude",
            usage=TokenUsage(prompt_tokens=10, completion_tokens=20),
            latency_ms=50.0,
        )

        monitor.track_response_from_ai_response("r1", response, operation="help")
        monitor.track_completion("r2", "openai", "gpt-4o", "analyze_document", latency_ms=150.0, success=False)

        data = monitor.get_stats().to_dict()
        assert data["total_requests"] == 2
        assert data["failed_requests"] == 1
        assert data["success_rate"] == "50.0%"
        assert data["avg_latency_ms"] == 100.0
        assert data["tokens_by_provider"] == {"anthropic": 30, "openai": 0}
        assert data["requests_by_operation"] == {"help": 1, "analyze_document": 1}

    def test_selection_fallback_counted(self, monitor):
        monitor.track_selection("r1", "legal_strategy", "nonexistent", "anthropic", "routing_table")
        monitor.track_selection("r2", "legal_strategy", "anthropic", "anthropic", "preferred")
        monitor.track_selection("r3", None, None, "mock", "default")

        assert monitor.get_stats().selection_fallbacks == 1

    def test_errors_by_stage(self, monitor):
        monitor.track_error("r1", "no provider", stage="selection")
        monitor.track_error("r2", "timeout", stage="provider")
        monitor.track_error("r3", "timeout", stage="provider")

        assert monitor.get_stats().errors_by_stage == {"selection": 1, "provider": 2}

    def test_recent_requests_newest_first(self, monitor):
        for index in range(3):
            monitor.track_response(f"r{index}", "mock", "mock-model", "", 0, 0, 1.0)

        assert [m.request_id for m in monitor.get_recent_requests(limit=2)] == ["r2", "r1"]

    def test_history_is_bounded(self):
        monitor = AIMonitor(max_history=2)
        for index in range(5):
            monitor.track_response(f"r{index}", "mock", "mock-model", "", 0, 0, 1.0)

        assert len(monitor.get_recent_requests(limit=10)) == 2
        assert monitor.get_stats().total_requests == 5

    def test_reset(self, monitor):
        monitor.track_error("r1", "boom", stage="provider")
        monitor.track_response("r1", "mock", "mock-model", "", 0, 0, 1.0)

        monitor.reset()

        assert monitor.get_stats().total_requests == 0
        assert monitor.get_stats().errors_by_stage == {}


class TestLogLines:

    def test_request_log_is_json(self, monitor, caplog):
        with caplog.at_level("INFO", logger="hrdefender.ai"):
            monitor.track_request("r1", "x" * 300, "gemini", "gemini-2.5-flash", operation="brainstorm")

        message = caplog.records[-1].getMessage()
        payload = json.loads(message.split("AI Request: ", 1)[1])
        assert payload["event"] == "ai_request"
        assert payload["prompt_length"] == 300
        assert payload["prompt_preview"].endswith("...")

    def test_failed_response_logs_warning(self, monitor, caplog):
        with caplog.at_level("INFO", logger="hrdefender.ai"):
            monitor.track_response("r1", "openai", "gpt-4o", "", 0, 0, 5.0, success=False, error="rate limited")

        record = caplog.records[-1]
        assert record.levelname == "WARNING"
        assert "rate limited" in record.getMessage()
