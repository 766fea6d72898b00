"""
AI Service Factory - the Provider Selector.

Holds one adapter per registered provider and picks one per request.

Selection Rules:
===============
1. A registered preferred provider wins unconditionally.
2. An unregistered preferred provider is logged and ignored (or, with
   strict selection enabled, rejected with UnknownProviderError).
3. The task type is looked up in ROUTING_TABLE; the first registered
   candidate wins. prefer_low_cost switches to the low-cost candidates.
4. Otherwise the default provider, then the first registered provider.
5. No providers registered: None. Callers answer with 503.

Selection is static: no learning, no load balancing, no health checks.

Usage:
    factory = build_default_factory(settings)
    provider = factory.select_optimal_service(
        task_type=TaskType.DOCUMENT_ANALYSIS,
        preferred_provider="anthropic",
    )
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Union

from hrdefender.core.config import Settings
from hrdefender.core.errors import UnknownProviderError
from hrdefender.ai.providers.base import AIProvider, ProviderType
from hrdefender.ai.providers.gemini import GeminiProvider
from hrdefender.ai.providers.openai_provider import OpenAIProvider
from hrdefender.ai.providers.anthropic_provider import AnthropicProvider
from hrdefender.ai.providers.mock_provider import MockProvider
from hrdefender.ai.tasks import TaskType

logger = logging.getLogger("hrdefender.ai.factory")


@dataclass(frozen=True)
class RoutingRule:
    """Candidate providers for one task type, best first."""
    capability: List[str]
    low_cost: List[str]


_ANALYTICAL = RoutingRule(capability=["openai", "anthropic"], low_cost=["gemini"])
_GENERAL = RoutingRule(capability=["gemini"], low_cost=["gemini"])
_CREATIVE = RoutingRule(capability=["anthropic", "gemini"], low_cost=["gemini"])

ROUTING_TABLE: Dict[TaskType, RoutingRule] = {
    TaskType.DOCUMENT_ANALYSIS: _ANALYTICAL,
    TaskType.PATTERN_DETECTION: _ANALYTICAL,
    TaskType.LEGAL_ANALYSIS: _ANALYTICAL,
    TaskType.RISK_ASSESSMENT: _ANALYTICAL,
    TaskType.DATA_ANALYSIS: _ANALYTICAL,
    TaskType.LEGAL_STRATEGY: RoutingRule(capability=["anthropic", "openai"], low_cost=["gemini"]),
    TaskType.QUESTION_ANSWERING: _GENERAL,
    TaskType.TEXT_GENERATION: _GENERAL,
    TaskType.SUMMARIZATION: _GENERAL,
    TaskType.TRANSLATION: _GENERAL,
    TaskType.CONTENT_MODERATION: _GENERAL,
    TaskType.BRAINSTORMING: _CREATIVE,
    TaskType.CREATIVE_WRITING: _CREATIVE,
    TaskType.CODE_GENERATION: RoutingRule(capability=["openai"], low_cost=["gemini"]),
}


@dataclass
class Selection:
    """Outcome of a selection: the adapter (or None) and why it was chosen."""
    provider: Optional[AIProvider]
    reason: str
    fallback: bool = False

    @property
    def provider_name(self) -> Optional[str]:
        return self.provider.name if self.provider else None


class AIServiceFactory:
    """
    Registry of provider adapters plus the selection logic.

    Adapters are registered at start-up and live for the process lifetime.
    """

    def __init__(self, default_provider: Optional[str] = None, strict: bool = False):
        self._services: Dict[str, AIProvider] = {}
        self.default_provider = default_provider.lower() if default_provider else None
        self.strict = strict

    # -----------------------------------------------------------------------
    # REGISTRY
    # -----------------------------------------------------------------------

    def register(self, name: Union[str, ProviderType], provider: AIProvider) -> None:
        """Register (or replace) the adapter for a provider name."""
        key = name.value if isinstance(name, ProviderType) else name.lower()
        if key in self._services:
            logger.warning(f"Replacing registered provider: {key}")
        self._services[key] = provider
        logger.info(f"Registered AI provider: {key} ({provider.model})")

    def available_providers(self) -> List[str]:
        """Registered provider names, in registration order."""
        return list(self._services.keys())

    def get_default_service(self) -> Optional[AIProvider]:
        """Default provider, else the first registered one, else None."""
        if self.default_provider and self.default_provider in self._services:
            return self._services[self.default_provider]
        if self._services:
            return next(iter(self._services.values()))
        return None

    def get_service(self, name: str) -> Optional[AIProvider]:
        """Adapter by name, falling back to the default service."""
        return self._services.get((name or "").lower()) or self.get_default_service()

    # -----------------------------------------------------------------------
    # SELECTION
    # -----------------------------------------------------------------------

    def select(
        self,
        task_type: Optional[TaskType] = None,
        preferred_provider: Optional[str] = None,
        prefer_low_cost: bool = False,
    ) -> Selection:
        """
        Pick an adapter and report the rule that picked it.

        Raises:
            UnknownProviderError: strict mode and preferred_provider is not registered
        """
        fallback = False

        if preferred_provider:
            key = preferred_provider.lower()
            if key in self._services:
                return Selection(self._services[key], reason="preferred")

            if self.strict:
                raise UnknownProviderError(preferred_provider)

            logger.warning(
                f"Preferred provider '{preferred_provider}' is not registered, "
                f"falling back (available: {self.available_providers()})"
            )
            fallback = True

        if task_type is not None:
            rule = ROUTING_TABLE.get(TaskType(task_type))
            if rule:
                candidates = rule.low_cost if prefer_low_cost else rule.capability
                for candidate in candidates:
                    if candidate in self._services:
                        return Selection(self._services[candidate], reason="routing_table", fallback=fallback)

        if self.default_provider and self.default_provider in self._services:
            return Selection(self._services[self.default_provider], reason="default", fallback=fallback)

        if self._services:
            return Selection(next(iter(self._services.values())), reason="first_registered", fallback=fallback)

        logger.error("No AI providers registered")
        return Selection(None, reason="none", fallback=fallback)

    def select_optimal_service(
        self,
        task_type: Optional[TaskType] = None,
        preferred_provider: Optional[str] = None,
        prefer_low_cost: bool = False,
    ) -> Optional[AIProvider]:
        """
        Pick one adapter for a request.

        Returns:
            The chosen adapter, or None when no provider is registered
        """
        return self.select(task_type, preferred_provider, prefer_low_cost).provider


def build_default_factory(settings: Settings) -> AIServiceFactory:
    """
    Create the factory and register every configured provider.

    A hosted provider is registered only when its API key is set. The mock
    provider is registered when ENABLE_MOCK_PROVIDER is true.
    """
    factory = AIServiceFactory(
        default_provider=settings.DEFAULT_AI_PROVIDER,
        strict=settings.STRICT_PROVIDER_SELECTION,
    )
    max_tokens = settings.DEFAULT_MAX_TOKENS

    if settings.GEMINI_API_KEY:
        factory.register(
            ProviderType.GEMINI,
            GeminiProvider(settings.GEMINI_MODEL, settings.GEMINI_API_KEY, max_tokens),
        )
    if settings.OPENAI_API_KEY:
        factory.register(
            ProviderType.OPENAI,
            OpenAIProvider(settings.OPENAI_MODEL, settings.OPENAI_API_KEY, max_tokens),
        )
    if settings.ANTHROPIC_API_KEY:
        factory.register(
            ProviderType.ANTHROPIC,
            AnthropicProvider(settings.ANTHROPIC_MODEL, settings.ANTHROPIC_API_KEY, max_tokens),
        )
    if settings.ENABLE_MOCK_PROVIDER:
        factory.register(ProviderType.MOCK, MockProvider(default_max_tokens=max_tokens))

    if not factory.available_providers():
        logger.warning("No AI providers configured - AI endpoints will answer 503")
    return factory
