"""
Mock Provider - deterministic offline backend.

Registered when ENABLE_MOCK_PROVIDER is true so the API is usable in
development and demos without any API key. Nothing here touches the network
and every answer is a pure function of the input.
"""

import json
import time
import asyncio
import logging
from typing import Optional, Any, AsyncIterator, Dict, List

from hrdefender.ai.providers.base import (
    AIProvider,
    AIResponse,
    ChatMessage,
    ProviderType,
    TokenUsage
)
from hrdefender.ai.schemas.results import AnalysisResult, PatternResult, StrategyResult

logger = logging.getLogger("hrdefender.ai.mock")

PROMPT_PREVIEW_CHARS = 30


def _preview(text: str) -> str:
    return f'"{text[:PROMPT_PREVIEW_CHARS]}..."'


def _estimate_tokens(text: str) -> int:
    return len(text.split())


class MockProvider(AIProvider):
    """
    Canned-response provider.

    - generate: echoes a preview of the prompt, as JSON when the system
      prompt asks for JSON
    - analyze_document / detect_patterns / suggest_strategy: fixed sample
      results
    - chat / stream_chat: echo the last user message
    """

    provider_type = ProviderType.MOCK

    def __init__(self, model: str = "mock-1", default_max_tokens: int = 1024, stream_delay: float = 0.0):
        self.model = model
        self.default_max_tokens = default_max_tokens
        self.stream_delay = stream_delay
        logger.info("Mock provider initialized")

    def _response(self, content: str, prompt: str, start_time: float) -> AIResponse:
        return AIResponse(
            content=content,
            provider=self.provider_type,
            model=self.model,
            usage=TokenUsage(
                prompt_tokens=_estimate_tokens(prompt),
                completion_tokens=_estimate_tokens(content),
            ),
            latency_ms=self._measure_latency(start_time),
            success=True,
        )

    async def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1024,
        **kwargs
    ) -> AIResponse:
        start_time = time.time()
        text = f"Generated content based on: {_preview(prompt)}"
        if system_prompt and "valid JSON" in system_prompt:
            return self._response(json.dumps({"content": text}), prompt, start_time)
        return self._response(text, prompt, start_time)

    async def generate_json(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        **kwargs
    ) -> AIResponse:
        start_time = time.time()
        content = json.dumps({"content": f"Generated content based on: {_preview(prompt)}"})
        return self._response(content, prompt, start_time)

    def _reply_to(self, messages: List[ChatMessage]) -> str:
        last_user = next((m.content for m in reversed(messages) if m.role == "user"), "")
        return f"Mock reply to: {last_user}"

    async def chat(
        self,
        messages: List[ChatMessage],
        system_prompt: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1024,
    ) -> AIResponse:
        start_time = time.time()
        prompt = "\n".join(m.content for m in messages)
        return self._response(self._reply_to(messages), prompt, start_time)

    async def stream_chat(
        self,
        messages: List[ChatMessage],
        system_prompt: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1024,
    ) -> AsyncIterator[str]:
        words = self._reply_to(messages).split(" ")
        for index, word in enumerate(words):
            if self.stream_delay:
                await asyncio.sleep(self.stream_delay)
            yield word if index == len(words) - 1 else word + " "

    # -----------------------------------------------------------------------
    # CANNED CAPABILITIES
    # -----------------------------------------------------------------------

    async def analyze_document(self, document: Dict[str, Any]) -> AnalysisResult:
        return AnalysisResult.from_raw({
            "parties": ["Person A", "Organisation B"],
            "legal_bases": [
                {"reference": "UDHR Article 1", "description": "Equality in dignity and rights"},
                {"reference": "ECHR Article 5", "description": "Right to liberty and security"},
            ],
            "key_facts": ["Key finding 1", "Key finding 2"],
            "human_rights_implications": ["Possible restriction of freedom of assembly"],
            "keywords": ["human rights", "documentation", "analysis"],
            "sentiment": "neutral",
            "suggested_actions": ["Verify the account with a second source"],
            "contradictions": [],
        })

    async def detect_patterns(self, documents: List[Dict[str, Any]]) -> PatternResult:
        return PatternResult.from_raw(
            {
                "patterns": [
                    {"name": "Pattern 1", "description": "Description of pattern 1", "confidence": 0.85},
                    {"name": "Pattern 2", "description": "Description of pattern 2", "confidence": 0.72},
                ],
                "themes": ["Freedom of expression"],
            },
            document_ids=[doc.get("id") for doc in documents],
        )

    async def suggest_strategy(self, case_data: Dict[str, Any]) -> StrategyResult:
        return StrategyResult.from_raw({
            "legal_approach": "Human rights framework litigation",
            "applicable_laws": ["ICCPR", "UDHR"],
            "key_arguments": ["Recommendation 1", "Recommendation 2", "Recommendation 3"],
            "recommended_actions": {
                "immediate": ["Secure evidence"],
                "short_term": ["Submit a communication to the relevant special procedure"],
                "long_term": ["Prepare an individual complaint to the treaty body"],
            },
            "success_probability": 0.5,
            "resources_required": "Medium",
        })
