"""
Result Schemas - loosely typed results of the advocacy capabilities.

Model output is free-form, so these models guarantee very little:
- every field is optional
- unknown keys are preserved (extra="allow")
- scalar values for list fields are wrapped in a list
- German and camelCase keys from older prompts are mapped to English names

A degraded result (the normalizer could not find structure) carries
`error` and `raw_response` instead of content.

Usage:
======
```python
data = normalize_json(response.content, heuristic=extract_analysis_sections)
result = AnalysisResult.from_raw(data, raw_text=response.content)
if result.error:
    logger.warning(result.error)
```
"""

import logging
from typing import ClassVar, Optional, Dict, Any, List

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger("hrdefender.ai.results")

RAW_RESPONSE_LIMIT = 2000


# ---------------------------------------------------------------------------
# KEY ALIASES
# ---------------------------------------------------------------------------

ANALYSIS_KEY_ALIASES = {
    "beteiligte_parteien": "parties",
    "rechtliche_grundlagen": "legal_bases",
    "legalBases": "legal_bases",
    "zentrale_fakten": "key_facts",
    "keyFacts": "key_facts",
    "menschenrechtliche_implikationen": "human_rights_implications",
    "humanRightsImplications": "human_rights_implications",
    "verbindungen": "connections",
    "zeitliche_abfolge": "timeline",
    "schlüsselwörter": "keywords",
    "schluesselwoerter": "keywords",
    "suggestedActions": "suggested_actions",
    "empfohlene_massnahmen": "suggested_actions",
    "widersprüche": "contradictions",
    "rawResponse": "raw_response",
}

PATTERN_KEY_ALIASES = {
    "muster": "patterns",
    "hauptthemen": "themes",
    "verbindungen": "connections",
    "anomalien": "anomalies",
    "rawResponse": "raw_response",
}

STRATEGY_KEY_ALIASES = {
    "legalApproach": "legal_approach",
    "applicableLaws": "applicable_laws",
    "keyArguments": "key_arguments",
    "evidenceNeeded": "evidence_needed",
    "potentialChallenges": "potential_challenges",
    "recommendedActions": "recommended_actions",
    "alternativeApproaches": "alternative_approaches",
    "successProbability": "success_probability",
    "resourcesRequired": "resources_required",
    "rawResponse": "raw_response",
}

PATTERN_ITEM_KEY_ALIASES = {
    "documentIds": "document_ids",
    "humanRightsDomains": "human_rights_domains",
    "geographicScope": "geographic_scope",
    "temporalTrends": "temporal_trends",
}

RECOMMENDED_ACTION_KEY_ALIASES = {
    "shortTerm": "short_term",
    "longTerm": "long_term",
}


def _rename_keys(data: Dict[str, Any], aliases: Dict[str, str]) -> Dict[str, Any]:
    """Map aliased keys to canonical names. Canonical keys win on conflict."""
    renamed: Dict[str, Any] = {}
    for key, value in data.items():
        canonical = aliases.get(key, key)
        if canonical in renamed and canonical == aliases.get(key):
            continue
        renamed[canonical] = value
    return renamed


def _as_list(value: Any) -> Optional[List[Any]]:
    if value is None:
        return None
    if isinstance(value, list):
        return value
    if isinstance(value, str) and not value.strip():
        return []
    return [value]


def _prepare(
    data: Any,
    raw_text: Optional[str],
    aliases: Dict[str, str],
    list_fields: List[str],
) -> Dict[str, Any]:
    """Common from_raw preprocessing for all result models."""
    if not isinstance(data, dict):
        logger.warning(f"Expected a JSON object from the model, got {type(data).__name__}")
        return {
            "error": "Model response did not contain a JSON object",
            "raw_response": (raw_text or "")[:RAW_RESPONSE_LIMIT],
        }

    prepared = _rename_keys(data, aliases)
    for name in ("error", "raw_response"):
        if prepared.get(name) is not None and not isinstance(prepared[name], str):
            prepared[name] = str(prepared[name])
    for name in list_fields:
        if name in prepared:
            prepared[name] = _as_list(prepared[name])
    return prepared


class _LooseResult(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    error: Optional[str] = Field(
        default=None,
        description="Set when structured data could not be extracted"
    )
    raw_response: Optional[str] = Field(
        default=None,
        description="Truncated raw model output for degraded results"
    )

    @property
    def degraded(self) -> bool:
        return self.error is not None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize without unset/None fields."""
        return self.model_dump(exclude_none=True)


# ---------------------------------------------------------------------------
# DOCUMENT ANALYSIS
# ---------------------------------------------------------------------------

class AnalysisResult(_LooseResult):
    """
    Human-rights analysis of a single document.

    Example:
    ```json
    {
      "parties": ["Local police", "Protesters"],
      "legal_bases": [{"reference": "ICCPR Art. 21", "description": "Freedom of assembly"}],
      "sentiment": "negative"
    }
    ```
    """
    parties: Optional[List[Any]] = None
    legal_bases: Optional[List[Any]] = Field(
        default=None,
        description="List of {reference, description}"
    )
    key_facts: Optional[List[Any]] = None
    human_rights_implications: Optional[List[Any]] = None
    connections: Optional[List[Any]] = None
    timeline: Optional[List[Any]] = None
    keywords: Optional[List[Any]] = None
    sentiment: Optional[Any] = None
    suggested_actions: Optional[List[Any]] = None
    contradictions: Optional[List[Any]] = Field(
        default=None,
        description="List of {statement1, statement2, explanation}"
    )

    LIST_FIELDS: ClassVar[List[str]] = [
        "parties", "legal_bases", "key_facts", "human_rights_implications",
        "connections", "timeline", "keywords", "suggested_actions", "contradictions",
    ]

    @classmethod
    def from_raw(cls, data: Any, raw_text: Optional[str] = None) -> "AnalysisResult":
        """Build from normalizer output. Never raises on odd model output."""
        return cls.model_validate(_prepare(data, raw_text, ANALYSIS_KEY_ALIASES, cls.LIST_FIELDS))


# ---------------------------------------------------------------------------
# PATTERN DETECTION
# ---------------------------------------------------------------------------

class PatternResult(_LooseResult):
    """
    Patterns detected across several documents.

    Each pattern is a dict with at least name and description; document_ids,
    evidence, confidence and recommendations are common extras.
    """
    patterns: Optional[List[Any]] = None
    themes: Optional[List[Any]] = None
    connections: Optional[List[Any]] = None
    anomalies: Optional[List[Any]] = None

    LIST_FIELDS: ClassVar[List[str]] = ["patterns", "themes", "connections", "anomalies"]

    @classmethod
    def from_raw(
        cls,
        data: Any,
        raw_text: Optional[str] = None,
        document_ids: Optional[List[Any]] = None,
    ) -> "PatternResult":
        """
        Build from normalizer output.

        Patterns without document_ids are attributed to all analyzed
        documents (the heuristic stage cannot tell which ones they came from).
        """
        prepared = _prepare(data, raw_text, PATTERN_KEY_ALIASES, cls.LIST_FIELDS)

        patterns = prepared.get("patterns")
        if patterns:
            normalized = []
            for pattern in patterns:
                if isinstance(pattern, dict):
                    pattern = _rename_keys(pattern, PATTERN_ITEM_KEY_ALIASES)
                    if document_ids and "document_ids" not in pattern:
                        pattern["document_ids"] = list(document_ids)
                else:
                    pattern = {"name": str(pattern), "description": str(pattern)}
                normalized.append(pattern)
            prepared["patterns"] = normalized

        return cls.model_validate(prepared)


# ---------------------------------------------------------------------------
# LEGAL STRATEGY
# ---------------------------------------------------------------------------

class RecommendedActions(BaseModel):
    """Recommended actions grouped by time horizon."""
    model_config = ConfigDict(extra="allow")

    immediate: List[Any] = Field(default_factory=list)
    short_term: List[Any] = Field(default_factory=list)
    long_term: List[Any] = Field(default_factory=list)


class StrategyResult(_LooseResult):
    """Suggested legal strategy for a case."""
    legal_approach: Optional[Any] = None
    applicable_laws: Optional[List[Any]] = None
    key_arguments: Optional[List[Any]] = None
    evidence_needed: Optional[List[Any]] = None
    potential_challenges: Optional[List[Any]] = None
    recommended_actions: Optional[RecommendedActions] = None
    alternative_approaches: Optional[List[Any]] = None
    success_probability: Optional[Any] = None
    resources_required: Optional[Any] = None

    LIST_FIELDS: ClassVar[List[str]] = [
        "applicable_laws", "key_arguments", "evidence_needed",
        "potential_challenges", "alternative_approaches",
    ]

    @classmethod
    def from_raw(cls, data: Any, raw_text: Optional[str] = None) -> "StrategyResult":
        prepared = _prepare(data, raw_text, STRATEGY_KEY_ALIASES, cls.LIST_FIELDS)

        actions = prepared.get("recommended_actions")
        if isinstance(actions, dict):
            actions = _rename_keys(actions, RECOMMENDED_ACTION_KEY_ALIASES)
            prepared["recommended_actions"] = {
                key: (_as_list(value) or []) if key in ("immediate", "short_term", "long_term") else value
                for key, value in actions.items()
            }
        elif actions is not None:
            prepared["recommended_actions"] = {"immediate": _as_list(actions) or []}

        return cls.model_validate(prepared)
