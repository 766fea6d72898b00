"""
Gemini Provider - Google's GenAI SDK.

Gemini Flash is the fast, low-cost default: question answering, summaries,
translation, moderation, and the low-cost choice for every task category.

Every request carries safety thresholds (harassment, hate speech, sexually
explicit, dangerous content blocked at medium and above). Material about
human rights abuses is often graphic; the thresholds stop the model from
producing abusive content without blocking documentation of it.
"""

import time
import logging
from typing import Optional, Any, AsyncIterator, List

from google import genai
from google.genai import types

from hrdefender.core.errors import ProviderError
from hrdefender.ai.providers.base import (
    AIProvider,
    AIResponse,
    ChatMessage,
    ProviderType,
    TokenUsage
)

logger = logging.getLogger("hrdefender.ai.gemini")


SAFETY_SETTINGS = [
    types.SafetySetting(
        category=category,
        threshold=types.HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
    )
    for category in (
        types.HarmCategory.HARM_CATEGORY_HARASSMENT,
        types.HarmCategory.HARM_CATEGORY_HATE_SPEECH,
        types.HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT,
        types.HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
    )
]


class GeminiProvider(AIProvider):
    provider_type = ProviderType.GEMINI

    def __init__(self, model: str, api_key: str, default_max_tokens: int = 1024):
        self.model = model
        self.api_key = api_key
        self.default_max_tokens = default_max_tokens

        if self.api_key:
            self._client = genai.Client(api_key=self.api_key)
            logger.info(f"Gemini provider initialized with model: {self.model}")
        else:
            self._client = None
            logger.warning("Gemini API key not configured")

    def _config(
        self,
        system_prompt: Optional[str],
        temperature: float,
        max_tokens: int,
        **extra
    ) -> types.GenerateContentConfig:
        # The system prompt goes into the config, not the contents
        return types.GenerateContentConfig(
            temperature=temperature,
            max_output_tokens=max_tokens,
            system_instruction=system_prompt,
            safety_settings=SAFETY_SETTINGS,
            **extra
        )

    def _to_contents(self, messages: List[ChatMessage]) -> List[types.Content]:
        """Gemini calls the assistant role "model"."""
        return [
            types.Content(
                role="model" if m.role == "assistant" else "user",
                parts=[types.Part(text=m.content)],
            )
            for m in messages
        ]

    async def _generate(
        self,
        contents: Any,
        config: types.GenerateContentConfig,
        label: str,
    ) -> AIResponse:
        start_time = time.time()

        if not self._client:
            return self._error("API key missing", start_time)

        try:
            response = await self._client.aio.models.generate_content(
                model=self.model,
                contents=contents,
                config=config
            )

            latency_ms = self._measure_latency(start_time)
            usage = self._extract_usage(response)
            logger.info(f"Gemini {label} completed in {latency_ms:.0f}ms, tokens: {usage.total_tokens}")

            return AIResponse(
                content=response.text or "",
                provider=self.provider_type,
                model=self.model,
                usage=usage,
                latency_ms=latency_ms,
                success=True,
                raw_response=response,
            )

        except Exception as e:
            logger.error(f"Gemini {label} failed: {e}")
            return self._error(str(e), start_time)

    async def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1024,
        **kwargs
    ) -> AIResponse:
        config = self._config(system_prompt, temperature, max_tokens)
        return await self._generate(prompt, config, label="request")

    async def generate_json(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        **kwargs
    ) -> AIResponse:
        # JSON mode is native in the v2 SDK
        config = self._config(
            system_prompt,
            temperature=kwargs.get("temperature", 0.2),
            max_tokens=kwargs.get("max_tokens", max(self.default_max_tokens, 2048)),
            response_mime_type="application/json",
        )
        response = await self._generate(
            f"{prompt}\n\nIMPORTANT: Respond ONLY with valid JSON.",
            config,
            label="JSON request",
        )
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
        config = self._config(system_prompt, temperature, max_tokens)
        return await self._generate(self._to_contents(messages), config, label="chat")

    async def stream_chat(
        self,
        messages: List[ChatMessage],
        system_prompt: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1024,
    ) -> AsyncIterator[str]:
        if not self._client:
            raise ProviderError("Gemini API key not configured", provider=self.name)

        try:
            stream = await self._client.aio.models.generate_content_stream(
                model=self.model,
                contents=self._to_contents(messages),
                config=self._config(system_prompt, temperature, max_tokens),
            )
            async for chunk in stream:
                if chunk.text:
                    yield chunk.text
        except Exception as e:
            logger.error(f"Gemini stream failed: {e}")
            raise ProviderError(str(e), provider=self.name) from e

    # --- PRIVATE HELPERS ---

    def _extract_usage(self, response):
        # The SDK sometimes returns None when no usage is reported
        meta = response.usage_metadata
        prompt_t = (meta.prompt_token_count or 0) if meta else 0
        comp_t = (meta.candidates_token_count or 0) if meta else 0
        return TokenUsage(prompt_tokens=prompt_t, completion_tokens=comp_t)

    def _error(self, msg, start_time):
        return self._create_error_response(
            error=msg, model=self.model, latency_ms=self._measure_latency(start_time)
        )
