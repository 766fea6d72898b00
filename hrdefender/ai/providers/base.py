"""
Base AI Provider - Abstract interface for all LLM providers.

This module defines the contract that all AI providers must follow.
It ensures consistent behavior regardless of which provider is used.

Design Pattern: Strategy + Template Method
==========================================
Each provider implements four primitives against its own SDK:

    generate / generate_json / chat / stream_chat

The base class builds the advocacy capabilities on top of them:

    generate_content / analyze_document / detect_patterns / suggest_strategy

so the Provider Selector can hand any adapter to a route handler.

Error contract:
- Primitives never raise. Failures come back as AIResponse(success=False).
- Capability methods raise ProviderError when the primitive failed, so the
  route handler can surface a 500.

Example:
    provider = GeminiProvider()
    response = await provider.generate_content(GenerationParams(prompt="..."))
    print(response.content)
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Any, AsyncIterator, Dict, List
from enum import Enum
import logging

from hrdefender.core.errors import ProviderError
from hrdefender.ai.normalizer import normalize_json
from hrdefender.ai.normalizer.heuristics import (
    extract_analysis_sections,
    extract_pattern_sections,
    extract_strategy_sections,
)
from hrdefender.ai.prompts.system_prompts import build_system_prompt
from hrdefender.ai.prompts.analysis_prompts import (
    DOCUMENT_ANALYSIS_SYSTEM_PROMPT,
    PATTERN_DETECTION_SYSTEM_PROMPT,
    STRATEGY_SYSTEM_PROMPT,
    build_document_analysis_prompt,
    build_pattern_detection_prompt,
    build_strategy_prompt,
)
from hrdefender.ai.schemas.results import AnalysisResult, PatternResult, StrategyResult
from hrdefender.ai.tasks import OutputFormat, TaskType
from hrdefender.services.legal_resources import enrich_prompt

logger = logging.getLogger("hrdefender.ai")


class ProviderType(str, Enum):
    """Enum of supported AI providers."""
    GEMINI = "gemini"
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    MOCK = "mock"


@dataclass
class TokenUsage:
    """
    Token usage statistics for an AI request.

    Used for:
    - Cost tracking (tokens = money)
    - Rate limiting awareness
    """
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def __post_init__(self):
        """Calculate total if not provided."""
        if self.total_tokens == 0:
            self.total_tokens = self.prompt_tokens + self.completion_tokens


@dataclass
class AIResponse:
    """
    Standardized response from any AI provider.

    Attributes:
        content: The generated text response
        provider: Which provider generated this response
        model: The specific model used
        usage: Token usage statistics
        latency_ms: How long the request took
        success: Whether the request succeeded
        error: Error message if failed
        raw_response: Original provider response (for debugging)
        metadata: Additional provider-specific data
        created_at: Timestamp of the response
    """
    content: str
    provider: ProviderType
    model: str
    usage: TokenUsage = field(default_factory=TokenUsage)
    latency_ms: float = 0.0
    success: bool = True
    error: Optional[str] = None
    raw_response: Optional[Any] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "content": self.content[:100] + "..." if len(self.content) > 100 else self.content,
            "provider": self.provider.value,
            "model": self.model,
            "tokens": {
                "prompt": self.usage.prompt_tokens,
                "completion": self.usage.completion_tokens,
                "total": self.usage.total_tokens,
            },
            "latency_ms": self.latency_ms,
            "success": self.success,
            "error": self.error,
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class ChatMessage:
    """A single message in a multi-turn conversation."""
    role: str  # "user" or "assistant"
    content: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "role": self.role,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class GenerationParams:
    """
    Generic content-generation request, independent of any provider.

    Attributes:
        prompt: The user's prompt
        max_tokens: Response length limit (provider default if None)
        temperature: Creativity; None lets the output format decide
        task_type: Biases the system prompt
        output_format: json / markdown / html / text
        enrich_with_resources: Append matching OHCHR resources to the prompt
        document_type: Optional document type hint for the system prompt
    """
    prompt: str
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    task_type: Optional[TaskType] = None
    output_format: Optional[OutputFormat] = None
    enrich_with_resources: bool = False
    document_type: Optional[str] = None


class AIProvider(ABC):
    """
    Abstract base class for AI providers.

    All AI providers (Gemini, OpenAI, Anthropic, Mock) must implement the
    four primitives. The advocacy capabilities are shared here.
    """

    provider_type: ProviderType
    model: str = ""
    default_max_tokens: int = 1024

    @property
    def name(self) -> str:
        return self.provider_type.value

    # -----------------------------------------------------------------------
    # PRIMITIVES (provider-specific, never raise)
    # -----------------------------------------------------------------------

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1024,
        **kwargs
    ) -> AIResponse:
        """
        Generate a response from the AI model.

        Args:
            prompt: The user's message/query
            system_prompt: Optional system instructions for the model
            temperature: Creativity level (0=deterministic, 1=creative)
            max_tokens: Maximum tokens in the response
            **kwargs: Provider-specific options

        Returns:
            AIResponse with the generated content. Errors are captured in
            AIResponse.error, never raised.
        """
        pass

    @abstractmethod
    async def generate_json(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        **kwargs
    ) -> AIResponse:
        """
        Generate a JSON response from the AI model.

        The provider should enforce JSON output where its API supports it.
        """
        pass

    @abstractmethod
    async def chat(
        self,
        messages: List[ChatMessage],
        system_prompt: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1024,
    ) -> AIResponse:
        """Answer the last user message given the ordered history."""
        pass

    @abstractmethod
    def stream_chat(
        self,
        messages: List[ChatMessage],
        system_prompt: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1024,
    ) -> AsyncIterator[str]:
        """
        Stream the answer to the last user message chunk by chunk.

        Unlike the other primitives, a stream cannot carry an error response,
        so failures raise ProviderError.
        """
        pass

    # -----------------------------------------------------------------------
    # CAPABILITIES (shared)
    # -----------------------------------------------------------------------

    async def generate_content(self, params: GenerationParams) -> AIResponse:
        """
        Generate free-form content for a GenerationParams request.

        JSON output lowers the default temperature to 0.2.

        Raises:
            ProviderError: If the provider call failed
        """
        system_prompt = build_system_prompt(
            task_type=params.task_type,
            output_format=params.output_format,
            document_type=params.document_type,
        )

        prompt = params.prompt
        if params.enrich_with_resources:
            prompt = enrich_prompt(prompt)

        temperature = params.temperature
        if temperature is None:
            temperature = 0.2 if params.output_format == OutputFormat.JSON else 0.7

        response = await self.generate(
            prompt=prompt,
            system_prompt=system_prompt,
            temperature=temperature,
            max_tokens=params.max_tokens or self.default_max_tokens,
        )
        return self._ensure_success(response)

    async def analyze_document(self, document: Dict[str, Any]) -> AnalysisResult:
        """
        Analyze a document from a human-rights perspective.

        Args:
            document: {"title"?, "type"?, "content"}

        Raises:
            ProviderError: If the provider call failed
        """
        prompt = build_document_analysis_prompt(
            content=document["content"],
            title=document.get("title"),
            document_type=document.get("type"),
        )
        response = self._ensure_success(await self.generate(
            prompt=prompt,
            system_prompt=DOCUMENT_ANALYSIS_SYSTEM_PROMPT,
            temperature=0.2,
            max_tokens=max(self.default_max_tokens, 4096),
        ))

        data = normalize_json(response.content, heuristic=extract_analysis_sections)
        return AnalysisResult.from_raw(data, raw_text=response.content)

    async def detect_patterns(self, documents: List[Dict[str, Any]]) -> PatternResult:
        """
        Detect recurring patterns across several documents.

        Args:
            documents: [{"id", "content", "context"?}, ...]

        Raises:
            ProviderError: If the provider call failed
        """
        prompt = build_pattern_detection_prompt(documents)
        response = self._ensure_success(await self.generate(
            prompt=prompt,
            system_prompt=PATTERN_DETECTION_SYSTEM_PROMPT,
            temperature=0.2,
            max_tokens=max(self.default_max_tokens, 4096),
        ))

        data = normalize_json(response.content, heuristic=extract_pattern_sections)
        return PatternResult.from_raw(
            data,
            raw_text=response.content,
            document_ids=[doc.get("id") for doc in documents],
        )

    async def suggest_strategy(self, case_data: Dict[str, Any]) -> StrategyResult:
        """
        Suggest a legal strategy for a case.

        Raises:
            ProviderError: If the provider call failed
        """
        response = self._ensure_success(await self.generate_json(
            prompt=build_strategy_prompt(case_data),
            system_prompt=STRATEGY_SYSTEM_PROMPT,
        ))

        data = normalize_json(response.content, heuristic=extract_strategy_sections)
        return StrategyResult.from_raw(data, raw_text=response.content)

    # -----------------------------------------------------------------------
    # HELPERS
    # -----------------------------------------------------------------------

    def _measure_latency(self, start_time: float) -> float:
        """Calculate latency in milliseconds."""
        return (time.time() - start_time) * 1000

    def _create_error_response(
        self,
        error: str,
        model: str,
        latency_ms: float = 0.0
    ) -> AIResponse:
        """
        Create a standardized error response.

        Used when a provider fails to ensure consistent error handling.
        """
        logger.error(f"AI Provider Error [{self.provider_type.value}]: {error}")
        return AIResponse(
            content="",
            provider=self.provider_type,
            model=model,
            latency_ms=latency_ms,
            success=False,
            error=error,
        )

    def _ensure_success(self, response: AIResponse) -> AIResponse:
        """Turn a failed primitive response into a ProviderError."""
        if not response.success:
            raise ProviderError(
                response.error or f"{self.name} request failed",
                provider=self.name,
            )
        return response
