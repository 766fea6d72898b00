"""
AI Router - content generation and the advocacy capabilities.

HTTP handling only; all work is delegated to AIGatewayService.

Request flow:
=============
```
┌─────────────────┐
│  POST /ai/...   │
└────────┬────────┘
         │  pydantic validation (400 on failure)
         ▼
┌─────────────────┐
│ AIGatewayService│  ← selection, monitoring, normalization
└────────┬────────┘
         │
         ▼
┌─────────────────┐
│ Provider Adapter│  ← OpenAI / Gemini / Anthropic / Mock
└─────────────────┘
```
"""

import logging

from fastapi import APIRouter, Depends

from hrdefender.core.config import Settings
from hrdefender.ai.factory import AIServiceFactory
from hrdefender.ai.monitoring import AIMonitor
from hrdefender.ai.providers.base import GenerationParams
from hrdefender.deps import (
    get_ai_service,
    get_factory,
    get_monitor,
    get_session_service,
    get_settings,
)
from hrdefender.routers.errors import to_http_exception
from hrdefender.schemas.ai import (
    AIStatsResponse,
    AIStatusResponse,
    AnalyzeDocumentRequest,
    AnalyzeDocumentResponse,
    BrainstormingRequest,
    BrainstormingResponse,
    DetectPatternsRequest,
    DetectPatternsResponse,
    GenerateContentRequest,
    GenerateContentResponse,
    HelpRequest,
    HelpResponse,
    SuggestStrategyRequest,
    SuggestStrategyResponse,
)
from hrdefender.services.ai_service import AIGatewayService
from hrdefender.services.session_service import ChatSessionService


# ---------------------------------------------------------------------------
# LOGGER SETUP
# ---------------------------------------------------------------------------
logger = logging.getLogger("hrdefender.routers.ai")


# ---------------------------------------------------------------------------
# ROUTER SETUP
# ---------------------------------------------------------------------------
router = APIRouter(prefix="/ai", tags=["ai"])


# ---------------------------------------------------------------------------
# ENDPOINTS
# ---------------------------------------------------------------------------

@router.post("/generate-content", response_model=GenerateContentResponse)
async def generate_content(
    request: GenerateContentRequest,
    service: AIGatewayService = Depends(get_ai_service),
):
    """
    Generate content with the best provider for the task.

    With `output_format: "json"`, `data` holds the object extracted from the
    model output (or an error object with the raw text when extraction
    failed); `content` always holds the raw text.
    """
    params = GenerationParams(
        prompt=request.prompt,
        max_tokens=request.max_tokens,
        temperature=request.temperature,
        task_type=request.task_type,
        output_format=request.output_format,
        enrich_with_resources=request.enrich_with_resources,
        document_type=request.document_type,
    )
    try:
        outcome = await service.generate_content(
            params,
            preferred_provider=request.preferred_provider,
            prefer_low_cost=request.prefer_low_cost,
        )
    except Exception as e:
        raise to_http_exception(e, "generate content") from e

    return GenerateContentResponse(
        content=outcome.content,
        data=outcome.data,
        provider=outcome.provider,
        model=outcome.model,
    )


@router.post("/analyze-document", response_model=AnalyzeDocumentResponse)
async def analyze_document(
    request: AnalyzeDocumentRequest,
    service: AIGatewayService = Depends(get_ai_service),
):
    """
    Analyze a document: parties, legal bases, key facts, human-rights
    implications, timeline, contradictions and suggested actions.

    The document type is detected from the content when not given.
    """
    document = {"title": request.title, "type": request.type, "content": request.content}
    try:
        outcome = await service.analyze_document(
            document,
            task_type=request.task_type,
            preferred_provider=request.preferred_provider,
            prefer_low_cost=request.prefer_low_cost,
        )
    except Exception as e:
        raise to_http_exception(e, "analyze document") from e

    return AnalyzeDocumentResponse(
        analysis=outcome.result.to_dict(),
        detected_document_type=outcome.detected_document_type,
        provider=outcome.provider,
    )


@router.post("/detect-patterns", response_model=DetectPatternsResponse)
async def detect_patterns(
    request: DetectPatternsRequest,
    service: AIGatewayService = Depends(get_ai_service),
):
    """Find patterns, themes, connections and anomalies across documents."""
    documents = [doc.model_dump() for doc in request.documents]
    try:
        outcome = await service.detect_patterns(
            documents,
            preferred_provider=request.preferred_provider,
            prefer_low_cost=request.prefer_low_cost,
        )
    except Exception as e:
        raise to_http_exception(e, "detect patterns") from e

    return DetectPatternsResponse(analysis=outcome.result.to_dict(), provider=outcome.provider)


@router.post("/suggest-strategy", response_model=SuggestStrategyResponse)
async def suggest_strategy(
    request: SuggestStrategyRequest,
    service: AIGatewayService = Depends(get_ai_service),
):
    """Suggest a legal strategy for a case."""
    try:
        outcome = await service.suggest_strategy(
            request.case_data,
            preferred_provider=request.preferred_provider,
            prefer_low_cost=request.prefer_low_cost,
        )
    except Exception as e:
        raise to_http_exception(e, "suggest strategy") from e

    return SuggestStrategyResponse(strategy=outcome.result.to_dict(), provider=outcome.provider)


@router.post("/brainstorming", response_model=BrainstormingResponse)
async def brainstorming(
    request: BrainstormingRequest,
    service: AIGatewayService = Depends(get_ai_service),
):
    """Generate campaign or advocacy ideas for a topic."""
    try:
        outcome = await service.brainstorm(
            request.topic,
            context=request.context,
            temperature=request.temperature,
            preferred_provider=request.preferred_provider,
        )
    except Exception as e:
        raise to_http_exception(e, "brainstorm") from e

    return BrainstormingResponse(ideas=outcome.data["ideas"], provider=outcome.provider)


@router.post("/help", response_model=HelpResponse)
async def help_request(
    request: HelpRequest,
    service: AIGatewayService = Depends(get_ai_service),
):
    """Answer a question about the platform or human-rights work."""
    try:
        outcome = await service.help(
            request.question,
            context=request.context,
            preferred_provider=request.preferred_provider,
        )
    except Exception as e:
        raise to_http_exception(e, "answer help request") from e

    return HelpResponse(answer=outcome.content, provider=outcome.provider, model=outcome.model)


@router.get("/status", response_model=AIStatusResponse)
async def get_status(
    factory: AIServiceFactory = Depends(get_factory),
    sessions: ChatSessionService = Depends(get_session_service),
    settings: Settings = Depends(get_settings),
):
    """Registered providers, the default provider and the live session count."""
    default = factory.get_default_service()
    return AIStatusResponse(
        providers=factory.available_providers(),
        default_provider=default.name if default else None,
        mock_enabled=settings.ENABLE_MOCK_PROVIDER,
        active_sessions=sessions.active_session_count(),
    )


@router.get("/stats", response_model=AIStatsResponse)
async def get_stats(monitor: AIMonitor = Depends(get_monitor)):
    """
    Get AI usage statistics.

    Returns aggregated metrics since start-up including:
    - Total requests processed
    - Success/failure rates
    - Token usage
    - Estimated costs
    - Selection fallbacks and errors per pipeline stage
    """
    stats = monitor.get_stats()
    return AIStatsResponse(
        total_requests=stats.total_requests,
        successful_requests=stats.successful_requests,
        failed_requests=stats.failed_requests,
        success_rate=f"{stats.success_rate:.1f}%",
        total_tokens=stats.total_tokens,
        avg_latency_ms=round(stats.avg_latency_ms, 2),
        estimated_total_cost=f"${stats.estimated_total_cost:.4f}",
        requests_by_provider=stats.requests_by_provider,
        requests_by_operation=stats.requests_by_operation,
        selection_fallbacks=stats.selection_fallbacks,
        errors_by_stage=stats.errors_by_stage,
    )
