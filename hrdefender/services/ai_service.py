"""
AI Gateway Service - request orchestration for the AI endpoints.

One method per endpoint, each following the same pipeline:

    select provider -> log selection -> call adapter -> normalize -> log response

Routers stay thin: they translate request models into calls here and
exceptions into HTTP status codes.

Raises (from every operation):
    ProviderUnavailableError: no provider registered (503)
    UnknownProviderError: strict selection, unknown preferred provider (400)
    ProviderError: the provider call failed (500)
"""

import time
import uuid
import logging
from dataclasses import dataclass, field
from typing import Optional, Any, Dict, List

from hrdefender.core.errors import ProviderError, ProviderUnavailableError
from hrdefender.ai.factory import AIServiceFactory, Selection
from hrdefender.ai.monitoring import AIMonitor
from hrdefender.ai.normalizer import extract_json
from hrdefender.ai.prompts.analysis_prompts import (
    HELP_SYSTEM_PROMPT,
    build_brainstorming_prompt,
    build_help_prompt,
)
from hrdefender.ai.providers.base import AIProvider, AIResponse, GenerationParams
from hrdefender.ai.tasks import OutputFormat, TaskType
from hrdefender.services.document_types import detect_document_type

logger = logging.getLogger("hrdefender.ai.service")


@dataclass
class GenerationOutcome:
    """Result of generate_content, ready for the response model."""
    content: str
    provider: str
    model: str
    data: Optional[Any] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class CapabilityOutcome:
    """Result of a structured capability (analysis, patterns, strategy)."""
    result: Any
    provider: str
    model: str
    detected_document_type: Optional[str] = None


class AIGatewayService:
    """Runs AI requests against the provider chosen by the factory."""

    def __init__(self, factory: AIServiceFactory, monitor: AIMonitor):
        self.factory = factory
        self.monitor = monitor

    # -----------------------------------------------------------------------
    # SELECTION
    # -----------------------------------------------------------------------

    def _select(
        self,
        request_id: str,
        task_type: Optional[TaskType],
        preferred_provider: Optional[str],
        prefer_low_cost: bool,
    ) -> Selection:
        selection = self.factory.select(
            task_type=task_type,
            preferred_provider=preferred_provider,
            prefer_low_cost=prefer_low_cost,
        )
        self.monitor.track_selection(
            request_id=request_id,
            task_type=TaskType(task_type).value if task_type else None,
            preferred_provider=preferred_provider,
            selected_provider=selection.provider_name,
            reason=selection.reason,
            prefer_low_cost=prefer_low_cost,
        )
        if selection.provider is None:
            self.monitor.track_error(request_id, "No AI provider registered", stage="selection")
            raise ProviderUnavailableError("No AI provider is available")
        return selection

    def _provider_error(self, request_id: str, provider: AIProvider, operation: str, error: ProviderError):
        self.monitor.track_error(
            request_id,
            str(error),
            stage="provider",
            metadata={"provider": provider.name, "operation": operation},
        )

    # -----------------------------------------------------------------------
    # CONTENT GENERATION
    # -----------------------------------------------------------------------

    async def generate_content(
        self,
        params: GenerationParams,
        preferred_provider: Optional[str] = None,
        prefer_low_cost: bool = False,
    ) -> GenerationOutcome:
        """
        Generate content; JSON output is run through the normalizer.

        The normalized value lands in GenerationOutcome.data; content keeps
        the raw model text.
        """
        request_id = str(uuid.uuid4())
        selection = self._select(request_id, params.task_type, preferred_provider, prefer_low_cost)
        provider = selection.provider

        self.monitor.track_request(
            request_id=request_id,
            prompt=params.prompt,
            provider=provider.name,
            model=provider.model,
            operation="generate_content",
        )

        try:
            response: AIResponse = await provider.generate_content(params)
        except ProviderError as e:
            self.monitor.track_response(
                request_id=request_id,
                provider=provider.name,
                model=provider.model,
                content="",
                prompt_tokens=0,
                completion_tokens=0,
                latency_ms=0.0,
                success=False,
                error=str(e),
            )
            self._provider_error(request_id, provider, "generate_content", e)
            raise

        self.monitor.track_response_from_ai_response(request_id, response)

        outcome = GenerationOutcome(
            content=response.content,
            provider=provider.name,
            model=response.model or provider.model,
            metadata={"selection": selection.reason, "fallback": selection.fallback},
        )

        if params.output_format is not None and OutputFormat(params.output_format) == OutputFormat.JSON:
            normalized = extract_json(response.content)
            outcome.data = normalized.value
            outcome.metadata["normalization_stage"] = normalized.stage.value

        return outcome

    # -----------------------------------------------------------------------
    # STRUCTURED CAPABILITIES
    # -----------------------------------------------------------------------

    async def _run_capability(
        self,
        operation: str,
        task_type: TaskType,
        preferred_provider: Optional[str],
        prefer_low_cost: bool,
        prompt_preview: str,
        call,
    ) -> CapabilityOutcome:
        """Shared select / track / call / track pipeline."""
        request_id = str(uuid.uuid4())
        selection = self._select(request_id, task_type, preferred_provider, prefer_low_cost)
        provider = selection.provider

        self.monitor.track_request(
            request_id=request_id,
            prompt=prompt_preview,
            provider=provider.name,
            model=provider.model,
            operation=operation,
        )

        start_time = time.time()
        try:
            result = await call(provider)
        except ProviderError as e:
            self.monitor.track_completion(
                request_id, provider.name, provider.model, operation,
                latency_ms=(time.time() - start_time) * 1000,
                success=False,
                error=str(e),
            )
            self._provider_error(request_id, provider, operation, e)
            raise

        self.monitor.track_completion(
            request_id, provider.name, provider.model, operation,
            latency_ms=(time.time() - start_time) * 1000,
        )
        if getattr(result, "degraded", False):
            logger.warning(f"{operation} via {provider.name} returned a degraded result")

        return CapabilityOutcome(result=result, provider=provider.name, model=provider.model)

    async def analyze_document(
        self,
        document: Dict[str, Any],
        task_type: Optional[TaskType] = None,
        preferred_provider: Optional[str] = None,
        prefer_low_cost: bool = False,
    ) -> CapabilityOutcome:
        """
        Analyze one document.

        When the caller gives no type, the detected document type is passed
        to the prompt.
        """
        detected = detect_document_type(document["content"])
        document = dict(document)
        if not document.get("type") and detected:
            document["type"] = detected.value

        outcome = await self._run_capability(
            operation="analyze_document",
            task_type=task_type or TaskType.DOCUMENT_ANALYSIS,
            preferred_provider=preferred_provider,
            prefer_low_cost=prefer_low_cost,
            prompt_preview=document["content"],
            call=lambda provider: provider.analyze_document(document),
        )
        outcome.detected_document_type = detected.value if detected else None
        return outcome

    async def detect_patterns(
        self,
        documents: List[Dict[str, Any]],
        preferred_provider: Optional[str] = None,
        prefer_low_cost: bool = False,
    ) -> CapabilityOutcome:
        return await self._run_capability(
            operation="detect_patterns",
            task_type=TaskType.PATTERN_DETECTION,
            preferred_provider=preferred_provider,
            prefer_low_cost=prefer_low_cost,
            prompt_preview=" | ".join(str(doc.get("content", ""))[:50] for doc in documents),
            call=lambda provider: provider.detect_patterns(documents),
        )

    async def suggest_strategy(
        self,
        case_data: Dict[str, Any],
        preferred_provider: Optional[str] = None,
        prefer_low_cost: bool = False,
    ) -> CapabilityOutcome:
        return await self._run_capability(
            operation="suggest_strategy",
            task_type=TaskType.LEGAL_STRATEGY,
            preferred_provider=preferred_provider,
            prefer_low_cost=prefer_low_cost,
            prompt_preview=str(case_data),
            call=lambda provider: provider.suggest_strategy(case_data),
        )

    # -----------------------------------------------------------------------
    # BRAINSTORMING & HELP
    # -----------------------------------------------------------------------

    async def brainstorm(
        self,
        topic: str,
        context: Optional[str] = None,
        temperature: Optional[float] = None,
        preferred_provider: Optional[str] = None,
    ) -> GenerationOutcome:
        """
        Brainstorm ideas for a topic.

        data["ideas"] holds the idea list; a model that ignores the JSON
        format gets its text split into one idea per line.
        """
        outcome = await self.generate_content(
            GenerationParams(
                prompt=build_brainstorming_prompt(topic, context),
                temperature=temperature if temperature is not None else 0.9,
                task_type=TaskType.BRAINSTORMING,
                output_format=OutputFormat.JSON,
            ),
            preferred_provider=preferred_provider,
        )
        outcome.data = {"ideas": _ideas_from(outcome.data, outcome.content)}
        return outcome

    async def help(
        self,
        question: str,
        context: Optional[str] = None,
        preferred_provider: Optional[str] = None,
    ) -> GenerationOutcome:
        """Answer a question about the platform or human rights work."""
        request_id = str(uuid.uuid4())
        selection = self._select(request_id, TaskType.QUESTION_ANSWERING, preferred_provider, True)
        provider = selection.provider

        prompt = build_help_prompt(question, context)
        self.monitor.track_request(request_id, prompt, provider.name, provider.model, operation="help")

        response = await provider.generate(
            prompt=prompt,
            system_prompt=HELP_SYSTEM_PROMPT,
            temperature=0.3,
            max_tokens=provider.default_max_tokens,
        )
        self.monitor.track_response_from_ai_response(request_id, response, operation="help")
        if not response.success:
            error = ProviderError(response.error or "Help request failed", provider=provider.name)
            self._provider_error(request_id, provider, "help", error)
            raise error

        return GenerationOutcome(content=response.content, provider=provider.name, model=response.model)


def _ideas_from(data: Any, text: str) -> List[Any]:
    """Pull the idea list out of normalized brainstorming output."""
    if isinstance(data, dict):
        if isinstance(data.get("ideas"), list):
            return data["ideas"]
        if "error" in data and "raw_response" in data:
            data = None
        else:
            for value in data.values():
                if isinstance(value, list):
                    return value
            return [data] if data else []
    if isinstance(data, list):
        return data

    lines = [line.strip().lstrip("-*•0123456789.) ").strip() for line in (text or "").splitlines()]
    return [line for line in lines if line]
