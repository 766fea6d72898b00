"""
AI Monitor - Unified logging and metrics tracking.

One call tracks everything:
- Structured JSON logs
- In-memory metrics aggregation
- Cost estimation

The monitor is created once in create_app() and shared through app.state,
so tests get a fresh instance per application.

Usage:
    monitor = AIMonitor()

    monitor.track_selection(
        request_id="abc123",
        task_type="document_analysis",
        preferred_provider=None,
        selected_provider="openai",
        reason="routing_table",
    )

    monitor.track_request(
        request_id="abc123",
        prompt="Analyse this report...",
        provider="openai",
        model="gpt-4o",
        operation="analyze_document",
    )

    monitor.track_response_from_ai_response("abc123", response)

    stats = monitor.get_stats().to_dict()
"""

import json
import logging
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from threading import Lock
from typing import Dict, List, Optional, Any

from hrdefender.ai.providers.base import AIResponse


# ---------------------------------------------------------------------------
# LOGGING SETUP
# ---------------------------------------------------------------------------
logger = logging.getLogger("hrdefender.ai")
logger.setLevel(logging.INFO)

if not logger.handlers:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.INFO)
    formatter = logging.Formatter(
        '[%(asctime)s] %(levelname)s [%(name)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _preview(text: str, limit: int = 100) -> str:
    return text[:limit] + "..." if len(text) > limit else text


# ---------------------------------------------------------------------------
# METRICS DATA CLASSES
# ---------------------------------------------------------------------------
@dataclass
class RequestMetrics:
    """Metrics for a single provider call."""
    request_id: str
    provider: str
    model: str
    operation: str
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int
    latency_ms: float
    success: bool
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    estimated_cost: float = 0.0


@dataclass
class AggregatedMetrics:
    """Aggregated metrics since start-up (or the last reset)."""
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    total_tokens: int = 0
    total_prompt_tokens: int = 0
    total_completion_tokens: int = 0
    total_latency_ms: float = 0.0
    estimated_total_cost: float = 0.0
    requests_by_provider: Dict[str, int] = field(default_factory=dict)
    tokens_by_provider: Dict[str, int] = field(default_factory=dict)
    requests_by_operation: Dict[str, int] = field(default_factory=dict)
    selection_fallbacks: int = 0
    errors_by_stage: Dict[str, int] = field(default_factory=dict)

    @property
    def avg_latency_ms(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return self.total_latency_ms / self.total_requests

    @property
    def success_rate(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return (self.successful_requests / self.total_requests) * 100

    def to_dict(self) -> Dict:
        return {
            "total_requests": self.total_requests,
            "successful_requests": self.successful_requests,
            "failed_requests": self.failed_requests,
            "success_rate": f"{self.success_rate:.1f}%",
            "total_tokens": self.total_tokens,
            "prompt_tokens": self.total_prompt_tokens,
            "completion_tokens": self.total_completion_tokens,
            "avg_latency_ms": round(self.avg_latency_ms, 2),
            "estimated_total_cost": f"${self.estimated_total_cost:.4f}",
            "requests_by_provider": dict(self.requests_by_provider),
            "tokens_by_provider": dict(self.tokens_by_provider),
            "requests_by_operation": dict(self.requests_by_operation),
            "selection_fallbacks": self.selection_fallbacks,
            "errors_by_stage": dict(self.errors_by_stage),
        }


# ---------------------------------------------------------------------------
# UNIFIED AI MONITOR
# ---------------------------------------------------------------------------
class AIMonitor:
    """
    Unified AI monitoring: logging + metrics in one call.

    Each track_* method:
    1. Writes a structured JSON log line on the "hrdefender.ai" logger
    2. Updates in-memory metrics where relevant

    Cost Model (per 1M tokens):
    - Gemini Flash: ~$0.30 input, ~$2.50 output
    - GPT-4o: ~$2.50 input, ~$10 output
    - Claude Sonnet: ~$3 input, ~$15 output
    - Mock: free
    """

    COST_PER_1M_TOKENS = {
        "gemini": {"input": 0.30, "output": 2.50},
        "openai": {"input": 2.50, "output": 10.0},
        "anthropic": {"input": 3.0, "output": 15.0},
        "mock": {"input": 0.0, "output": 0.0},
    }

    def __init__(self, max_history: int = 1000):
        self._logger = logger
        self._history: List[RequestMetrics] = []
        self._max_history = max_history
        self._lock = Lock()
        self._aggregated = AggregatedMetrics()

    # -----------------------------------------------------------------------
    # MAIN TRACKING METHODS
    # -----------------------------------------------------------------------

    def track_selection(
        self,
        request_id: str,
        task_type: Optional[str],
        preferred_provider: Optional[str],
        selected_provider: Optional[str],
        reason: str,
        prefer_low_cost: bool = False,
    ) -> None:
        """
        Track a Provider Selector decision.

        reason is one of: preferred, routing_table, default, first_registered,
        none. A preferred provider that was not honoured counts as a fallback.
        """
        fallback = bool(preferred_provider) and reason != "preferred"

        log_data = {
            "event": "provider_selection",
            "request_id": request_id,
            "task_type": task_type,
            "preferred_provider": preferred_provider,
            "prefer_low_cost": prefer_low_cost,
            "selected_provider": selected_provider,
            "reason": reason,
            "fallback": fallback,
            "timestamp": _utc_now(),
        }

        if fallback:
            with self._lock:
                self._aggregated.selection_fallbacks += 1
            self._logger.warning(f"Provider Selection: {json.dumps(log_data)}")
        else:
            self._logger.info(f"Provider Selection: {json.dumps(log_data)}")

    def track_request(
        self,
        request_id: str,
        prompt: str,
        provider: str,
        model: str,
        operation: str = "generate_content",
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Track the start of an AI request.

        Call this when sending a request to an AI provider.
        """
        log_data = {
            "event": "ai_request",
            "request_id": request_id,
            "provider": provider,
            "model": model,
            "operation": operation,
            "prompt_length": len(prompt),
            "prompt_preview": _preview(prompt),
            "timestamp": _utc_now(),
        }

        if metadata:
            log_data["metadata"] = metadata

        self._logger.info(f"AI Request: {json.dumps(log_data, default=str)}")

    def track_response(
        self,
        request_id: str,
        provider: str,
        model: str,
        content: str,
        prompt_tokens: int,
        completion_tokens: int,
        latency_ms: float,
        operation: str = "generate_content",
        success: bool = True,
        error: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Track an AI response (logs + metrics in one call).

        Call this after receiving a response from an AI provider.
        """
        total_tokens = prompt_tokens + completion_tokens
        cost = self._estimate_cost(provider, prompt_tokens, completion_tokens)

        metrics = RequestMetrics(
            request_id=request_id,
            provider=provider,
            model=model,
            operation=operation,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=total_tokens,
            latency_ms=latency_ms,
            success=success,
            estimated_cost=cost,
        )

        with self._lock:
            self._history.append(metrics)
            if len(self._history) > self._max_history:
                self._history = self._history[-self._max_history:]
            self._update_aggregated(metrics)

        log_data = {
            "event": "ai_response",
            "request_id": request_id,
            "provider": provider,
            "model": model,
            "operation": operation,
            "success": success,
            "latency_ms": round(latency_ms, 2),
            "tokens": {
                "prompt": prompt_tokens,
                "completion": completion_tokens,
                "total": total_tokens,
            },
            "estimated_cost": f"${cost:.6f}",
            "response_length": len(content) if content else 0,
            "timestamp": _utc_now(),
        }

        if error:
            log_data["error"] = error

        if metadata:
            log_data["metadata"] = metadata

        level = logging.INFO if success else logging.WARNING
        self._logger.log(level, f"AI Response: {json.dumps(log_data, default=str)}")

    def track_response_from_ai_response(
        self,
        request_id: str,
        response: AIResponse,
        operation: str = "generate_content",
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Track response using an AIResponse object directly.

        Convenience method when you have the full AIResponse.
        """
        provider = response.provider.value if hasattr(response.provider, 'value') else str(response.provider)

        self.track_response(
            request_id=request_id,
            provider=provider,
            model=response.model,
            content=response.content,
            prompt_tokens=response.usage.prompt_tokens if response.usage else 0,
            completion_tokens=response.usage.completion_tokens if response.usage else 0,
            latency_ms=response.latency_ms,
            operation=operation,
            success=response.success,
            error=response.error,
            metadata=metadata,
        )

    def track_completion(
        self,
        request_id: str,
        provider: str,
        model: str,
        operation: str,
        latency_ms: float,
        success: bool = True,
        error: Optional[str] = None,
    ) -> None:
        """
        Track a capability call that does not expose token usage.

        analyze_document / detect_patterns / suggest_strategy return parsed
        results, not AIResponse objects, so only latency and outcome are known.
        """
        self.track_response(
            request_id=request_id,
            provider=provider,
            model=model,
            content="",
            prompt_tokens=0,
            completion_tokens=0,
            latency_ms=latency_ms,
            operation=operation,
            success=success,
            error=error,
        )

    def track_error(
        self,
        request_id: str,
        error: str,
        stage: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Track an error in the AI pipeline (selection, provider, stream, ...)."""
        with self._lock:
            self._aggregated.errors_by_stage[stage] = \
                self._aggregated.errors_by_stage.get(stage, 0) + 1

        log_data = {
            "event": "ai_error",
            "request_id": request_id,
            "error": error,
            "stage": stage,
            "timestamp": _utc_now(),
        }

        if metadata:
            log_data["metadata"] = metadata

        self._logger.error(f"AI Error: {json.dumps(log_data, default=str)}")

    def track_event(
        self,
        request_id: str,
        event_type: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Track a generic event (session created, stream cancelled, ...)."""
        log_data = {
            "event": event_type,
            "request_id": request_id,
            "timestamp": _utc_now(),
        }

        if data:
            log_data.update(data)

        self._logger.info(f"AI Event: {json.dumps(log_data, default=str)}")

    # -----------------------------------------------------------------------
    # METRICS METHODS
    # -----------------------------------------------------------------------

    def get_stats(self) -> AggregatedMetrics:
        """Get current aggregated statistics."""
        with self._lock:
            return self._aggregated

    def get_recent_requests(self, limit: int = 10) -> List[RequestMetrics]:
        """Get recent requests, newest first."""
        with self._lock:
            return list(reversed(self._history[-limit:]))

    def reset(self) -> None:
        """Reset all metrics (useful for testing)."""
        with self._lock:
            self._history = []
            self._aggregated = AggregatedMetrics()

    # -----------------------------------------------------------------------
    # PRIVATE METHODS
    # -----------------------------------------------------------------------

    def _estimate_cost(self, provider: str, prompt_tokens: int, completion_tokens: int) -> float:
        """Estimate cost in USD."""
        costs = self.COST_PER_1M_TOKENS.get(provider.lower(), {"input": 0, "output": 0})
        input_cost = (prompt_tokens / 1_000_000) * costs["input"]
        output_cost = (completion_tokens / 1_000_000) * costs["output"]
        return input_cost + output_cost

    def _update_aggregated(self, metrics: RequestMetrics) -> None:
        """Update aggregated metrics with a new request."""
        aggregated = self._aggregated
        aggregated.total_requests += 1

        if metrics.success:
            aggregated.successful_requests += 1
        else:
            aggregated.failed_requests += 1

        aggregated.total_tokens += metrics.total_tokens
        aggregated.total_prompt_tokens += metrics.prompt_tokens
        aggregated.total_completion_tokens += metrics.completion_tokens
        aggregated.total_latency_ms += metrics.latency_ms
        aggregated.estimated_total_cost += metrics.estimated_cost

        provider = metrics.provider
        aggregated.requests_by_provider[provider] = aggregated.requests_by_provider.get(provider, 0) + 1
        aggregated.tokens_by_provider[provider] = \
            aggregated.tokens_by_provider.get(provider, 0) + metrics.total_tokens
        aggregated.requests_by_operation[metrics.operation] = \
            aggregated.requests_by_operation.get(metrics.operation, 0) + 1
