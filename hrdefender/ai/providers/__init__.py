"""
AI Providers Module - Unified clients for multiple LLM providers.

This module provides consistent interfaces to different AI providers:
- Google Gemini (fast, low cost default)
- OpenAI (GPT-4o for analysis and structured output)
- Anthropic (Claude for legal strategy and reasoning)
- Mock (deterministic, offline)

Each provider has the same interface, making them interchangeable:
    response = await provider.generate(prompt, **kwargs)
    result = await provider.analyze_document({"content": "..."})

Why separate providers?
======================
1. Cost optimization: Use cheaper models when the caller prefers low cost
2. Specialization: Each model excels at different things
3. Availability: Only providers with a configured key are registered
"""

from hrdefender.ai.providers.base import (
    AIProvider,
    AIResponse,
    ChatMessage,
    GenerationParams,
    ProviderType,
    TokenUsage,
)
from hrdefender.ai.providers.gemini import GeminiProvider
from hrdefender.ai.providers.openai_provider import OpenAIProvider
from hrdefender.ai.providers.anthropic_provider import AnthropicProvider
from hrdefender.ai.providers.mock_provider import MockProvider

__all__ = [
    "AIProvider",
    "AIResponse",
    "ChatMessage",
    "GenerationParams",
    "ProviderType",
    "TokenUsage",
    "GeminiProvider",
    "OpenAIProvider",
    "AnthropicProvider",
    "MockProvider",
]
