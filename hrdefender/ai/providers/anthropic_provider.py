"""
Anthropic Provider - Claude client for deep reasoning.

Claude (by Anthropic) is used for tasks requiring:
- Legal strategy and nuanced argumentation
- Careful reasoning over long documents
- Brainstorming and advocacy writing

Role in the gateway:
===================
The Provider Selector routes legal strategy first to Claude, and uses it as
the second choice for analysis tasks.

API Documentation: https://docs.anthropic.com/en/api
"""

import time
import logging
from typing import Optional, Any, AsyncIterator, Dict, List

from anthropic import AsyncAnthropic

from hrdefender.core.errors import ProviderError
from hrdefender.ai.providers.base import (
    AIProvider,
    AIResponse,
    ChatMessage,
    ProviderType,
    TokenUsage
)

logger = logging.getLogger("hrdefender.ai.anthropic")


class AnthropicProvider(AIProvider):
    """
    Anthropic Claude provider implementation.

    Claude is our "thinker" - used for tasks that require:
    - Deep multi-step reasoning
    - Legal evaluation of options
    - Strategic planning

    Usage:
        provider = AnthropicProvider(model="claude-sonnet-4-5", api_key="...")
        response = await provider.generate("Assess this case...")
    """

    provider_type = ProviderType.ANTHROPIC

    def __init__(self, model: str, api_key: str, default_max_tokens: int = 1024):
        """
        Initialize the Anthropic provider.

        Args:
            model: Model name (e.g. settings.ANTHROPIC_MODEL)
            api_key: API key (e.g. settings.ANTHROPIC_API_KEY)
            default_max_tokens: Used when a request sets no max_tokens
        """
        self.model = model
        self.api_key = api_key
        self.default_max_tokens = default_max_tokens

        if self.api_key:
            self._client = AsyncAnthropic(api_key=self.api_key)
            logger.info(f"Anthropic provider initialized with model: {self.model}")
        else:
            self._client = None
            logger.warning("Anthropic API key not configured - provider unavailable")

    def _extract_text(self, response: Any) -> str:
        # Claude returns a list of content blocks
        content = ""
        if response.content:
            for block in response.content:
                if hasattr(block, 'text'):
                    content += block.text
        return content

    def _extract_usage(self, response: Any) -> TokenUsage:
        return TokenUsage(
            prompt_tokens=response.usage.input_tokens if response.usage else 0,
            completion_tokens=response.usage.output_tokens if response.usage else 0,
        )

    def _request_params(
        self,
        messages: List[ChatMessage],
        system_prompt: Optional[str],
        temperature: float,
        max_tokens: int,
    ) -> Dict[str, Any]:
        request_params = {
            "model": self.model,
            "max_tokens": max_tokens,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
            "temperature": temperature,
        }

        # Add system prompt if provided
        if system_prompt:
            request_params["system"] = system_prompt
        return request_params

    async def _create(self, request_params: Dict[str, Any], label: str) -> AIResponse:
        """Run one messages.create call and wrap it in an AIResponse."""
        start_time = time.time()

        if not self._client:
            return self._create_error_response(
                error="Anthropic API key not configured",
                model=self.model,
                latency_ms=self._measure_latency(start_time)
            )

        try:
            response = await self._client.messages.create(**request_params)

            latency_ms = self._measure_latency(start_time)
            content = self._extract_text(response)
            usage = self._extract_usage(response)

            logger.info(f"Anthropic {label} completed in {latency_ms:.0f}ms, tokens: {usage.total_tokens}")

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
            logger.error(f"Anthropic {label} failed: {e}")
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
        Generate a response using Claude.

        Args:
            prompt: The user's message
            system_prompt: Optional system instructions
            temperature: Creativity (0-1)
            max_tokens: Maximum response length

        Returns:
            AIResponse with the generated content
        """
        request_params = self._request_params(
            [ChatMessage(role="user", content=prompt)],
            system_prompt,
            temperature,
            max_tokens,
        )
        return await self._create(request_params, label="request")

    async def generate_json(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        **kwargs
    ) -> AIResponse:
        """
        Generate a JSON response using Claude.

        Claude doesn't have a native JSON mode, but is very good at following
        instructions for structured output. Whatever comes back is handed to
        the Response Normalizer by the caller.
        """
        json_system = system_prompt or ""
        json_system += "\n\nIMPORTANT: You must respond with valid JSON only. No explanation, no markdown code blocks - just the raw JSON object."

        request_params = self._request_params(
            [ChatMessage(role="user", content=prompt)],
            json_system,
            temperature=kwargs.get("temperature", 0.2),  # Low for consistency
            max_tokens=kwargs.get("max_tokens", max(self.default_max_tokens, 2048)),
        )
        response = await self._create(request_params, label="JSON request")
        if response.success:
            response.content = response.content.strip()
        return response

    async def chat(
        self,
        messages: List[ChatMessage],
        system_prompt: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1024,
    ) -> AIResponse:
        """Answer the last message given the full conversation history."""
        request_params = self._request_params(messages, system_prompt, temperature, max_tokens)
        return await self._create(request_params, label="chat")

    async def stream_chat(
        self,
        messages: List[ChatMessage],
        system_prompt: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1024,
    ) -> AsyncIterator[str]:
        """
        Stream a chat answer using the Messages streaming helper.

        Raises:
            ProviderError: If the client is not configured or the stream fails
        """
        if not self._client:
            raise ProviderError("Anthropic API key not configured", provider=self.name)

        request_params = self._request_params(messages, system_prompt, temperature, max_tokens)
        try:
            async with self._client.messages.stream(**request_params) as stream:
                async for text in stream.text_stream:
                    if text:
                        yield text
        except Exception as e:
            logger.error(f"Anthropic stream failed: {e}")
            raise ProviderError(str(e), provider=self.name) from e
