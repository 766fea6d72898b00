"""
Pydantic schemas for the /ai endpoints.

Requests accept both snake_case and camelCase field names
(`max_tokens` / `maxTokens`, `preferred_provider` / `preferredProvider`, ...).
Responses are always snake_case.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from hrdefender.ai.tasks import OutputFormat, TaskType


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Base for request bodies: camelCase aliases, snake_case still accepted."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _not_blank(value: str) -> str:
    if not value or not value.strip():
        raise ValueError("must not be empty")
    return value


# ============== GENERATE CONTENT ==============

class GenerateContentRequest(CamelModel):
    """
    Request for POST /ai/generate-content.

    Example:
    {
        "prompt": "Summarize the attached incident report",
        "taskType": "summarization",
        "outputFormat": "json"
    }
    """
    prompt: str = Field(..., description="Prompt sent to the model")
    max_tokens: Optional[int] = Field(default=None, gt=0, description="Upper bound for generated tokens")
    temperature: Optional[float] = Field(default=None, ge=0, le=2, description="Sampling temperature 0-2")
    task_type: Optional[TaskType] = Field(default=None, description="Task category used for provider routing")
    preferred_provider: Optional[str] = Field(default=None, description="Provider to use when registered")
    prefer_low_cost: bool = Field(default=False, description="Route to low-cost candidates")
    output_format: Optional[OutputFormat] = Field(default=None, description="json, markdown, html or text")
    enrich_with_resources: bool = Field(default=False, description="Append matching OHCHR resources to the prompt")
    document_type: Optional[str] = Field(default=None, description="Document type hint for the system prompt")

    _check_prompt = field_validator("prompt")(_not_blank)


class GenerateContentResponse(BaseModel):
    success: bool = True
    content: str
    data: Optional[Any] = Field(default=None, description="Normalized object when output_format is json")
    provider: str
    model: str
    timestamp: datetime = Field(default_factory=_utcnow)


# ============== DOCUMENT ANALYSIS ==============

class AnalyzeDocumentRequest(CamelModel):
    title: Optional[str] = Field(default=None, description="Document title")
    content: str = Field(..., description="Document text")
    type: Optional[str] = Field(default=None, description="Document type, detected when omitted")
    task_type: Optional[TaskType] = None
    preferred_provider: Optional[str] = None
    prefer_low_cost: bool = False

    _check_content = field_validator("content")(_not_blank)


class AnalyzeDocumentResponse(BaseModel):
    success: bool = True
    analysis: Dict[str, Any]
    detected_document_type: Optional[str] = None
    provider: str
    timestamp: datetime = Field(default_factory=_utcnow)


# ============== PATTERN DETECTION ==============

class PatternDocument(CamelModel):
    id: str = Field(..., description="Document identifier, echoed in pattern results")
    content: str
    context: Optional[str] = None

    _check_content = field_validator("content")(_not_blank)


class DetectPatternsRequest(CamelModel):
    documents: List[PatternDocument] = Field(..., min_length=2, description="At least two documents")
    preferred_provider: Optional[str] = None
    prefer_low_cost: bool = False


class DetectPatternsResponse(BaseModel):
    success: bool = True
    analysis: Dict[str, Any]
    provider: str
    timestamp: datetime = Field(default_factory=_utcnow)


# ============== STRATEGY ==============

class SuggestStrategyRequest(CamelModel):
    case_data: Dict[str, Any] = Field(..., description="Free-form case description")
    preferred_provider: Optional[str] = None
    prefer_low_cost: bool = False

    @field_validator("case_data")
    @classmethod
    def _check_case_data(cls, value: Dict[str, Any]) -> Dict[str, Any]:
        if not value:
            raise ValueError("must not be empty")
        return value


class SuggestStrategyResponse(BaseModel):
    success: bool = True
    strategy: Dict[str, Any]
    provider: str
    timestamp: datetime = Field(default_factory=_utcnow)


# ============== BRAINSTORMING & HELP ==============

class BrainstormingRequest(CamelModel):
    topic: str = Field(..., description="Topic to brainstorm about")
    context: Optional[str] = None
    temperature: Optional[float] = Field(default=None, ge=0, le=2)
    preferred_provider: Optional[str] = None

    _check_topic = field_validator("topic")(_not_blank)


class BrainstormingResponse(BaseModel):
    success: bool = True
    ideas: List[Any]
    provider: str
    timestamp: datetime = Field(default_factory=_utcnow)


class HelpRequest(CamelModel):
    question: str
    context: Optional[str] = None
    preferred_provider: Optional[str] = None

    _check_question = field_validator("question")(_not_blank)


class HelpResponse(BaseModel):
    success: bool = True
    answer: str
    provider: str
    model: str
    timestamp: datetime = Field(default_factory=_utcnow)


# ============== STATUS & STATS ==============

class AIStatusResponse(BaseModel):
    providers: List[str]
    default_provider: Optional[str]
    mock_enabled: bool
    active_sessions: int


class AIStatsResponse(BaseModel):
    """Response schema for /ai/stats."""
    total_requests: int
    successful_requests: int
    failed_requests: int
    success_rate: str
    total_tokens: int
    avg_latency_ms: float
    estimated_total_cost: str
    requests_by_provider: Dict[str, int]
    requests_by_operation: Dict[str, int]
    selection_fallbacks: int
    errors_by_stage: Dict[str, int]
