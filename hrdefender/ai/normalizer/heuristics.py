"""
Heuristic line splitters used as the last structured stage of the normalizer.

When a model answers in prose or markdown instead of JSON, these functions
split the text into sections by recognizable headings ("Parties:",
"## Key Facts", "3. LEGAL BASES") and turn each section body into a list of
items. Headings are matched case-insensitively in English and in the German
wording older prompts produced.

Each splitter returns an empty dict when nothing recognizable was found, so
the normalizer can move on to its degraded result.
"""

import re
from typing import Any, Dict, List, Optional, Tuple

# Leading list markers: "-", "*", "•", "1.", "2)"
BULLET_PATTERN = re.compile(r"^\s*(?:[-*•]+|\d+[.)])\s+")

# Markdown decoration around headings: "## ", "**", "__"
HEADING_DECORATION = re.compile(r"^[#\s]*|[*_]{2}")

# Generic "key: value" line
KEY_VALUE_PATTERN = re.compile(r"^([A-Za-zÄÖÜäöüß][\wÄÖÜäöüß \-/]{0,60}?)\s*:\s*(.*)$")


# ---------------------------------------------------------------------------
# SECTION HEADINGS
# ---------------------------------------------------------------------------
# field name -> heading aliases (lowercase)

ANALYSIS_HEADINGS: Dict[str, List[str]] = {
    "parties": ["parties", "parties involved", "involved parties", "beteiligte parteien"],
    "legal_bases": ["legal bases", "legal basis", "legal framework", "rechtliche grundlagen"],
    "key_facts": ["key facts", "facts", "zentrale fakten"],
    "human_rights_implications": [
        "human rights implications", "implications", "menschenrechtliche implikationen",
    ],
    "connections": ["connections", "verbindungen"],
    "timeline": ["timeline", "chronology", "zeitliche abfolge"],
    "keywords": ["keywords", "schlüsselwörter"],
    "sentiment": ["sentiment"],
    "suggested_actions": [
        "suggested actions", "recommended actions", "recommendations", "empfohlene massnahmen",
    ],
    "contradictions": ["contradictions", "widersprüche"],
}

PATTERN_HEADINGS: Dict[str, List[str]] = {
    "patterns": ["patterns", "recurring patterns", "muster"],
    "themes": ["themes", "main themes", "hauptthemen"],
    "connections": ["connections", "verbindungen"],
    "anomalies": ["anomalies", "anomalien", "auffälligkeiten"],
}

STRATEGY_HEADINGS: Dict[str, List[str]] = {
    "legal_approach": ["legal approach", "approach", "rechtlicher ansatz"],
    "applicable_laws": ["applicable laws", "relevant laws", "anwendbare gesetze"],
    "key_arguments": ["key arguments", "arguments", "hauptargumente"],
    "evidence_needed": ["evidence needed", "required evidence", "benötigte beweise"],
    "potential_challenges": ["potential challenges", "challenges", "risks", "herausforderungen"],
    "immediate": ["immediate actions", "immediate", "sofortmaßnahmen"],
    "short_term": ["short-term actions", "short term", "short-term", "kurzfristig"],
    "long_term": ["long-term actions", "long term", "long-term", "langfristig"],
    "alternative_approaches": ["alternative approaches", "alternatives"],
    "success_probability": ["success probability", "likelihood of success", "erfolgsaussichten"],
    "resources_required": ["resources required", "required resources", "resources"],
}

SINGLE_VALUE_FIELDS = {"sentiment", "legal_approach", "success_probability"}


def _clean_heading(line: str) -> str:
    text = HEADING_DECORATION.sub("", line.strip())
    text = re.sub(r"^\d+[.)]\s*", "", text)
    return text.strip().strip("*_").strip()


def _strip_bullet(line: str) -> str:
    return BULLET_PATTERN.sub("", line).strip().strip("*_").strip()


def _match_heading(line: str, headings: Dict[str, List[str]]) -> Optional[Tuple[str, str]]:
    """
    Match a line against known headings.

    Returns:
        (field name, inline remainder) or None. "Sentiment: negative" gives
        ("sentiment", "negative").
    """
    cleaned = _clean_heading(line)
    lowered = cleaned.lower()
    for field_name, aliases in headings.items():
        for alias in sorted(aliases, key=len, reverse=True):
            if lowered == alias:
                return field_name, ""
            if lowered.startswith(alias) and lowered[len(alias):].lstrip().startswith(":"):
                remainder = cleaned[len(alias):].lstrip()[1:].strip().strip("*_").strip()
                return field_name, remainder
    return None


def split_sections(text: str, headings: Dict[str, List[str]]) -> Dict[str, List[str]]:
    """
    Split text into {field: [items]} by the given headings.

    Lines before the first heading and lines under unknown headings are
    ignored. Only fields with at least one item are returned.
    """
    sections: Dict[str, List[str]] = {}
    current: Optional[str] = None

    for raw_line in (text or "").splitlines():
        if not raw_line.strip():
            continue

        heading = _match_heading(raw_line, headings)
        if heading:
            current, remainder = heading
            sections.setdefault(current, [])
            if remainder:
                sections[current].append(remainder)
            continue

        if current is not None:
            item = _strip_bullet(raw_line)
            if item:
                sections[current].append(item)

    return {key: items for key, items in sections.items() if items}


def split_key_value_lines(text: str) -> Dict[str, Any]:
    """
    Generic splitter: "key: value" lines and bullet lists under "Heading:".

    Example:
        Title: Report
        Findings:
        - one
        - two

    becomes {"title": "Report", "findings": ["one", "two"]}. Prose without
    either shape yields {}.
    """
    result: Dict[str, Any] = {}
    current: Optional[str] = None

    for raw_line in (text or "").splitlines():
        line = raw_line.strip()
        if not line:
            continue

        if BULLET_PATTERN.match(line):
            item = _strip_bullet(line)
            if not item:
                continue
            key = current or "items"
            existing = result.get(key)
            if not isinstance(existing, list):
                existing = [] if existing in (None, "") else [existing]
                result[key] = existing
            existing.append(item)
            continue

        match = KEY_VALUE_PATTERN.match(_clean_heading(line))
        if match:
            key = re.sub(r"[\s\-/]+", "_", match.group(1).strip().lower())
            value = match.group(2).strip()
            if value:
                result[key] = value
                current = None
            else:
                result.setdefault(key, [])
                current = key

    return {key: value for key, value in result.items() if value not in ([], "")}


def _split_pair(item: str, separator: str) -> Tuple[str, str]:
    parts = item.split(separator, 1)
    if len(parts) == 2:
        return parts[0].strip(), parts[1].strip()
    return item.strip(), ""


def _to_legal_bases(items: List[str]) -> List[Dict[str, str]]:
    bases = []
    for item in items:
        reference, description = _split_pair(item, ":")
        bases.append({"reference": reference, "description": description})
    return bases


def _to_contradictions(items: List[str]) -> List[Dict[str, str]]:
    """Parse "A vs. B: why" lines into contradiction objects."""
    contradictions = []
    for item in items:
        if " vs. " in item:
            statement1, rest = _split_pair(item, " vs. ")
            statement2, explanation = _split_pair(rest, ":")
        else:
            statement1, statement2, explanation = item, "", ""
        contradictions.append({
            "statement1": statement1,
            "statement2": statement2,
            "explanation": explanation,
        })
    return contradictions


def _flatten_single_values(sections: Dict[str, List[str]]) -> Dict[str, Any]:
    result: Dict[str, Any] = {}
    for key, items in sections.items():
        result[key] = " ".join(items) if key in SINGLE_VALUE_FIELDS else items
    return result


def extract_analysis_sections(text: str) -> Dict[str, Any]:
    """Best-guess AnalysisResult dict from a prose document analysis."""
    result = _flatten_single_values(split_sections(text, ANALYSIS_HEADINGS))
    if "legal_bases" in result:
        result["legal_bases"] = _to_legal_bases(result["legal_bases"])
    if "contradictions" in result:
        result["contradictions"] = _to_contradictions(result["contradictions"])
    return result


def extract_pattern_sections(text: str) -> Dict[str, Any]:
    """
    Best-guess PatternResult dict from a prose pattern analysis.

    Pattern items of the form "Name: description" become pattern objects.
    """
    result: Dict[str, Any] = split_sections(text, PATTERN_HEADINGS)
    if "patterns" in result:
        patterns = []
        for item in result["patterns"]:
            name, description = _split_pair(item, ":")
            patterns.append({"name": name, "description": description or name})
        result["patterns"] = patterns
    return result


def extract_strategy_sections(text: str) -> Dict[str, Any]:
    """Best-guess StrategyResult dict from a prose strategy answer."""
    result = _flatten_single_values(split_sections(text, STRATEGY_HEADINGS))

    recommended = {
        horizon: result.pop(horizon)
        for horizon in ("immediate", "short_term", "long_term")
        if horizon in result
    }
    if recommended:
        result["recommended_actions"] = recommended
    return result
