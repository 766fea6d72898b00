"""
Response Normalizer - turn free-form model text into structured data.

LLMs are asked for JSON but do not always comply. They wrap it in markdown
fences, prepend a sentence of chatter, or answer in plain prose. This module
applies a fixed sequence of extraction stages and stops at the first one that
yields a value:

    1. whole text          -> json.loads(text.strip())
    2. fenced code block   -> ```json ... ``` or ``` ... ```
    3. brace span          -> first "{" to last "}"
    4. heuristic           -> line splitting into a best-guess dict
    5. degraded            -> {"error": ..., "raw_response": text[:2000]}

The normalizer never raises. Valid JSON input round-trips exactly.

Usage:
    from hrdefender.ai.normalizer import normalize_json

    data = normalize_json('Here you go:\\n```json\\n{"a": 1}\\n```')
    # {"a": 1}
"""

import json
import re
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

from hrdefender.ai.normalizer.heuristics import split_key_value_lines

logger = logging.getLogger("hrdefender.ai.normalizer")

# Degraded results keep at most this many characters of the raw text
RAW_RESPONSE_LIMIT = 2000

FENCED_BLOCK_PATTERN = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```", re.IGNORECASE)
BRACE_SPAN_PATTERN = re.compile(r"\{[\s\S]*\}")

Heuristic = Callable[[str], Dict[str, Any]]


class NormalizationStage(str, Enum):
    """Which extraction stage produced the value."""
    DIRECT = "direct"
    FENCED_BLOCK = "fenced_block"
    BRACE_SPAN = "brace_span"
    HEURISTIC = "heuristic"
    DEGRADED = "degraded"


@dataclass
class NormalizedResult:
    """Extracted value plus the stage that produced it (for logging/tests)."""
    value: Any
    stage: NormalizationStage

    @property
    def degraded(self) -> bool:
        return self.stage == NormalizationStage.DEGRADED


def _try_parse(candidate: str) -> Optional[Any]:
    """Parse candidate as JSON, returning None when it is not valid JSON."""
    if not candidate:
        return None
    try:
        return json.loads(candidate)
    except (json.JSONDecodeError, ValueError):
        return None


def extract_json(text: Optional[str], heuristic: Optional[Heuristic] = None) -> NormalizedResult:
    """
    Run the extraction stages and report which one succeeded.

    Args:
        text: Raw model output (None is treated as empty)
        heuristic: Optional caller-supplied line splitter used in stage 4.
            Defaults to the generic "key: value" / bullet-list splitter.

    Returns:
        NormalizedResult with the extracted value and its stage
    """
    text = text or ""

    # Stage 1: the whole text is JSON. A literal null is still a valid value.
    stripped = text.strip()
    if stripped:
        try:
            return NormalizedResult(json.loads(stripped), NormalizationStage.DIRECT)
        except (json.JSONDecodeError, ValueError):
            pass

    # Stage 2: fenced code block
    for block in FENCED_BLOCK_PATTERN.findall(text):
        value = _try_parse(block.strip())
        if value is not None:
            return NormalizedResult(value, NormalizationStage.FENCED_BLOCK)

    # Stage 3: first "{" to last "}"
    match = BRACE_SPAN_PATTERN.search(text)
    if match:
        value = _try_parse(match.group(0))
        if value is not None:
            return NormalizedResult(value, NormalizationStage.BRACE_SPAN)

    # Stage 4: heuristic line splitting (only a non-empty result counts)
    splitter = heuristic or split_key_value_lines
    try:
        value = splitter(text)
    except Exception as e:
        logger.warning(f"Heuristic extraction failed: {e}")
        value = None
    if value:
        return NormalizedResult(value, NormalizationStage.HEURISTIC)

    # Stage 5: degraded
    logger.warning(f"Could not extract structured data from model output ({len(text)} chars)")
    return NormalizedResult(
        {
            "error": "Could not extract structured data from the model response",
            "raw_response": text[:RAW_RESPONSE_LIMIT],
        },
        NormalizationStage.DEGRADED,
    )


def normalize_json(text: Optional[str], heuristic: Optional[Heuristic] = None) -> Any:
    """
    Extract structured data from model text. Never raises.

    Returns the parsed JSON value, a heuristic dict, or the degraded
    {"error", "raw_response"} object.
    """
    result = extract_json(text, heuristic=heuristic)
    if result.stage != NormalizationStage.DIRECT:
        logger.debug(f"Normalized model output via stage: {result.stage.value}")
    return result.value


__all__ = [
    "NormalizationStage",
    "NormalizedResult",
    "RAW_RESPONSE_LIMIT",
    "extract_json",
    "normalize_json",
]
