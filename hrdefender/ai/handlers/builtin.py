"""
Built-in handlers exposed through /functions.

Each handler is a small deterministic utility over the gateway's own data:
document type detection, OHCHR resource search, keyword extraction and a
word count. None of them calls a provider.
"""

import re
from collections import Counter
from typing import Any, Dict, List, Optional

from hrdefender.ai.handlers.registry import HandlerDefinition, HandlerRegistry
from hrdefender.services.document_types import detect_document_type
from hrdefender.core.errors import HandlerValidationError
from hrdefender.services.legal_resources import ResourceType, extract_keywords, search_resources

DEFAULT_MAX_KEYWORDS = 10


def _detect_document_type(content: str) -> Dict[str, Any]:
    document_type = detect_document_type(content)
    return {"document_type": document_type.value if document_type else None}


def _search_legal_resources(query: str, type: Optional[str] = None) -> List[Dict[str, Any]]:
    if type is not None and type not in {t.value for t in ResourceType}:
        raise HandlerValidationError(f"Unknown resource type: {type}")
    return [resource.to_dict() for resource in search_resources(query, resource_type=type)]


def _extract_keywords(text: str, max_keywords: int = DEFAULT_MAX_KEYWORDS) -> List[str]:
    """Most frequent words first, ties in order of appearance."""
    if max_keywords < 0:
        raise HandlerValidationError("max_keywords must not be negative")
    words = extract_keywords(text)
    counts = Counter(
        token.lower().strip("-") for token in re.findall(r"[A-Za-zÀ-ÿ\-]+", text)
    )
    ranked = sorted(words, key=lambda word: (-counts.get(word, 0), words.index(word)))
    return ranked[:max_keywords]


def _word_count(text: str) -> Dict[str, int]:
    return {
        "words": len(text.split()),
        "characters": len(text),
        "lines": len(text.splitlines()) if text else 0,
    }


def register_builtin_handlers(registry: HandlerRegistry) -> HandlerRegistry:
    """Register all built-in handlers and return the registry."""
    registry.register(HandlerDefinition(
        name="detect_document_type",
        description="Classify a document (event, act, security survey, relocation request, ...)",
        func=_detect_document_type,
        required_params={"content"},
        param_types={"content": str},
        aliases={"document_type"},
    ))

    registry.register(HandlerDefinition(
        name="search_legal_resources",
        description="Search the OHCHR resource catalogue",
        func=_search_legal_resources,
        required_params={"query"},
        optional_params={"type"},
        param_types={"query": str, "type": str},
        aliases={"legal_resources"},
    ))

    registry.register(HandlerDefinition(
        name="extract_keywords",
        description="Extract the most frequent keywords from a text",
        func=_extract_keywords,
        required_params={"text"},
        optional_params={"max_keywords"},
        param_types={"text": str, "max_keywords": int},
        aliases={"keywords"},
    ))

    registry.register(HandlerDefinition(
        name="word_count",
        description="Count words, characters and lines in a text",
        func=_word_count,
        required_params={"text"},
        param_types={"text": str},
    ))

    return registry
