"""
OpenAI Provider - GPT client for analytical tasks.

OpenAI's models (GPT-4o, etc.) are used for tasks requiring:
- Careful document analysis
- Cross-document pattern detection
- Structured (JSON) output
- Code generation

Role in the gateway:
===================
The Provider Selector routes document analysis, pattern detection, legal
analysis, risk assessment, data analysis and code generation to GPT first.

API Documentation: https://platform.openai.com/docs/api-reference
"""

import time
import json
import logging
from typing import Optional, Any, AsyncIterator, Dict, List

from openai import AsyncOpenAI

from hrdefender.core.errors import ProviderError
from hrdefender.ai.providers.base import (
    AIProvider,
    AIResponse,
    ChatMessage,
    ProviderType,
    TokenUsage
)

logger = logging.getLogger("hrdefender.ai.openai")


class OpenAIProvider(AIProvider):
    """
    OpenAI GPT provider implementation.

    Usage:
        provider = OpenAIProvider(model="gpt-4o", api_key="sk-...")
        response = await provider.generate("Summarize this report...")

        # For structured output:
        response = await provider.generate_json(
            prompt="List the parties in this document...",
            system_prompt="Return JSON with a 'parties' array"
        )
    """

    provider_type = ProviderType.OPENAI

    def __init__(self, model: str, api_key: str, default_max_tokens: int = 1024):
        """
        Initialize the OpenAI provider.

        Args:
            model: Model name (e.g. settings.OPENAI_MODEL)
            api_key: API key (e.g. settings.OPENAI_API_KEY)
            default_max_tokens: Used when a request sets no max_tokens
        """
        self.model = model
        self.api_key = api_key
        self.default_max_tokens = default_max_tokens

        # Initialize async client
        if self.api_key:
            self._client = AsyncOpenAI(api_key=self.api_key)
            logger.info(f"OpenAI provider initialized with model: {self.model}")
        else:
            self._client = None
            logger.warning("OpenAI API key not configured - provider unavailable")

    def _build_messages(
        self,
        messages: List[ChatMessage],
        system_prompt: Optional[str] = None,
    ) -> List[Dict[str, str]]:
        payload = []
        if system_prompt:
            payload.append({"role": "system", "content": system_prompt})
        payload.extend({"role": m.role, "content": m.content} for m in messages)
        return payload

    def _extract_usage(self, response: Any) -> TokenUsage:
        return TokenUsage(
            prompt_tokens=response.usage.prompt_tokens if response.usage else 0,
            completion_tokens=response.usage.completion_tokens if response.usage else 0,
        )

    async def _complete(
        self,
        messages: List[Dict[str, str]],
        temperature: float,
        max_tokens: int,
        label: str,
        **extra
    ) -> AIResponse:
        """Run one chat completion and wrap it in an AIResponse."""
        start_time = time.time()

        if not self._client:
            return self._create_error_response(
                error="OpenAI API key not configured",
                model=self.model,
                latency_ms=self._measure_latency(start_time)
            )

        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
                **extra
            )

            latency_ms = self._measure_latency(start_time)
            content = response.choices[0].message.content or ""
            usage = self._extract_usage(response)

            logger.info(f"OpenAI {label} completed in {latency_ms:.0f}ms, tokens: {usage.total_tokens}")

            return AIResponse(
                content=content,
                provider=self.provider_type,
                model=self.model,
                usage=usage,
                latency_ms=latency_ms,
                success=True,
                raw_response=response,
            )

        except Exception as e:
            latency_ms = self._measure_latency(start_time)
            logger.error(f"OpenAI {label} failed: {e}")
            return self._create_error_response(
                error=str(e),
                model=self.model,
                latency_ms=latency_ms
            )

    async def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1024,
        **kwargs
    ) -> AIResponse:
        """
        Generate a response using OpenAI GPT.

        Args:
            prompt: The user's message
            system_prompt: Optional system instructions
            temperature: Creativity (0-2)
            max_tokens: Maximum response length

        Returns:
            AIResponse with the generated content
        """
        messages = self._build_messages([ChatMessage(role="user", content=prompt)], system_prompt)
        return await self._complete(messages, temperature, max_tokens, label="request")

    async def generate_json(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        **kwargs
    ) -> AIResponse:
        """
        Generate a JSON response using OpenAI.

        Uses OpenAI's JSON mode for reliable structured output.

        Args:
            prompt: The user's message
            system_prompt: System prompt (should include the JSON structure)

        Returns:
            AIResponse with the raw JSON content string, not validated
        """
        system_content = system_prompt or ""
        system_content += "\n\nYou must respond with valid JSON only, no explanation."
        messages = [
            {"role": "system", "content": system_content},
            {"role": "user", "content": prompt},
        ]

        response = await self._complete(
            messages,
            temperature=kwargs.get("temperature", 0.2),  # Low temperature for consistency
            max_tokens=kwargs.get("max_tokens", max(self.default_max_tokens, 2048)),
            label="JSON request",
            response_format={"type": "json_object"},
        )
        if not response.success:
            return response

        # Unparseable output (e.g. truncated at max_tokens) is left to the normalizer
        try:
            json.loads(response.content or "{}")
        except json.JSONDecodeError as e:
            logger.warning(f"OpenAI returned invalid JSON: {e}")
        return response

    async def chat(
        self,
        messages: List[ChatMessage],
        system_prompt: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1024,
    ) -> AIResponse:
        """Answer the last message given the full conversation history."""
        payload = self._build_messages(messages, system_prompt)
        return await self._complete(payload, temperature, max_tokens, label="chat")

    async def stream_chat(
        self,
        messages: List[ChatMessage],
        system_prompt: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1024,
    ) -> AsyncIterator[str]:
        """
        Stream a chat answer as text deltas.

        Raises:
            ProviderError: If the client is not configured or the stream fails
        """
        if not self._client:
            raise ProviderError("OpenAI API key not configured", provider=self.name)

        try:
            stream = await self._client.chat.completions.create(
                model=self.model,
                messages=self._build_messages(messages, system_prompt),
                temperature=temperature,
                max_tokens=max_tokens,
                stream=True,
            )
            async for chunk in stream:
                if not chunk.choices:
                    continue
                delta = chunk.choices[0].delta.content
                if delta:
                    yield delta
        except ProviderError:
            raise
        except Exception as e:
            logger.error(f"OpenAI stream failed: {e}")
            raise ProviderError(str(e), provider=self.name) from e
