"""
Analysis Prompts - templates for the advocacy capabilities.

Used by AIProvider.analyze_document / detect_patterns / suggest_strategy and
by the brainstorming and help endpoints. Each template spells out the JSON
structure expected back; the Response Normalizer copes with models that
ignore it.
"""

import json
from typing import Any, Dict, List, Optional


# Per-document character limits for pattern detection prompts
MAX_DOCUMENT_CHARS = 2000
MAX_CONTEXT_CHARS = 500


def truncate_text(text: str, max_chars: int) -> str:
    """
    Truncate text to max_chars, marking the cut with "...".

    Example:
        >>> truncate_text("abcdef", 3)
        'abc...'
    """
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + "..."


# ---------------------------------------------------------------------------
# DOCUMENT ANALYSIS
# ---------------------------------------------------------------------------

DOCUMENT_ANALYSIS_SYSTEM_PROMPT = """You are a specialised assistant for human rights defenders.
You analyse documents and extract the information relevant from a human rights perspective.
Always respond with valid JSON."""

DOCUMENT_ANALYSIS_TEMPLATE = """Analyse the following document from a human rights perspective.

{header}DOCUMENT CONTENT:
{content}

Extract:
1. PARTIES (people, organisations, institutions involved)
2. LEGAL BASES (relevant laws, norms, international agreements)
3. KEY FACTS (most important events and information)
4. HUMAN RIGHTS IMPLICATIONS (affected rights, potential violations)
5. CONNECTIONS (links to other cases, patterns or trends)
6. TIMELINE (chronological sequence of events, if recognisable)
7. KEYWORDS (for categorisation and search)
8. SENTIMENT (tone of the document)
9. SUGGESTED ACTIONS (based on the analysis)
10. CONTRADICTIONS (inconsistencies identified in the document)

If something is uncertain, write "unknown" instead of speculating.

Respond with JSON in this structure:
{{
  "parties": ["Person/Group 1", "Person/Group 2"],
  "legal_bases": [{{"reference": "Law/Treaty", "description": "Relevant aspects"}}],
  "key_facts": ["Fact 1", "Fact 2"],
  "human_rights_implications": ["Implication 1"],
  "connections": ["Connection 1"],
  "timeline": ["Event 1", "Event 2"],
  "keywords": ["Keyword 1", "Keyword 2"],
  "sentiment": "positive | neutral | negative",
  "suggested_actions": ["Action 1"],
  "contradictions": [{{"statement1": "...", "statement2": "...", "explanation": "..."}}]
}}"""


def build_document_analysis_prompt(
    content: str,
    title: Optional[str] = None,
    document_type: Optional[str] = None,
) -> str:
    """Build the user prompt for a single-document analysis."""
    header = ""
    if title:
        header += f"TITLE: {title}\n"
    if document_type:
        header += f"DOCUMENT TYPE: {document_type}\n"
    if header:
        header += "\n"
    return DOCUMENT_ANALYSIS_TEMPLATE.format(header=header, content=content)


# ---------------------------------------------------------------------------
# PATTERN DETECTION
# ---------------------------------------------------------------------------

PATTERN_DETECTION_SYSTEM_PROMPT = """You are a specialised analyst for human rights defenders.
You evaluate collections of documents and identify patterns across them.
Your output is well-formed, precise JSON."""

PATTERN_OUTPUT_FORMAT = """## OUTPUT FORMAT (JSON):
{
  "patterns": [
    {
      "name": "Name of the pattern",
      "description": "Detailed description",
      "document_ids": ["ids of the documents where it occurs"],
      "evidence": ["Passage 1", "Passage 2"],
      "human_rights_domains": ["Affected domain"],
      "confidence": 0.0,
      "recommendations": ["Recommended measure"]
    }
  ],
  "themes": ["Main theme 1"],
  "connections": [{"from": "document id", "to": "document id", "description": "..."}],
  "anomalies": ["Anomaly 1"]
}"""


def build_pattern_detection_prompt(documents: List[Dict[str, Any]]) -> str:
    """
    Build the pattern detection prompt.

    Document content is truncated to MAX_DOCUMENT_CHARS and context to
    MAX_CONTEXT_CHARS to stay inside model token limits.
    """
    lines = [
        "## TASK: HUMAN RIGHTS PATTERN DETECTION",
        "",
        "Analyse the following documents and identify recurring patterns, connections and "
        "trends that could be relevant for human rights defenders.",
        "",
        "## DOCUMENTS TO ANALYSE:",
        "",
    ]
    for doc in documents:
        lines.append(f"### DOCUMENT {doc.get('id')}:")
        lines.append(truncate_text(str(doc.get("content", "")), MAX_DOCUMENT_CHARS))
        lines.append("")
        if doc.get("context"):
            lines.append(f"ADDITIONAL CONTEXT FOR DOCUMENT {doc.get('id')}:")
            lines.append(truncate_text(str(doc["context"]), MAX_CONTEXT_CHARS))
            lines.append("")

    lines.append(PATTERN_OUTPUT_FORMAT)
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# LEGAL STRATEGY
# ---------------------------------------------------------------------------

STRATEGY_SYSTEM_PROMPT = """You are an experienced human rights lawyer with a deep understanding
of international legal systems and human rights standards."""

STRATEGY_TEMPLATE = """Develop a legal strategy for the following human rights case:

{case_data}

Consider international human rights standards, relevant precedents and practical
constraints. The strategy should cover short-term as well as long-term goals.

Respond with JSON in this structure:
{{
  "legal_approach": "Overall legal approach",
  "applicable_laws": ["Applicable laws and standards"],
  "key_arguments": ["Main arguments"],
  "evidence_needed": ["Evidence required"],
  "potential_challenges": ["Possible challenges"],
  "recommended_actions": {{
    "immediate": ["Immediate actions"],
    "short_term": ["Short-term actions"],
    "long_term": ["Long-term actions"]
  }},
  "alternative_approaches": ["Alternative approaches"],
  "success_probability": 0.0,
  "resources_required": "Resources needed"
}}"""


def build_strategy_prompt(case_data: Dict[str, Any]) -> str:
    return STRATEGY_TEMPLATE.format(
        case_data=json.dumps(case_data, indent=2, ensure_ascii=False, default=str)
    )


# ---------------------------------------------------------------------------
# BRAINSTORMING & HELP
# ---------------------------------------------------------------------------

BRAINSTORMING_TEMPLATE = """Brainstorm ideas for the following topic in the context of human rights work:

TOPIC: {topic}
{context_section}
Return JSON with this structure:
{{
  "ideas": [
    {{"title": "Short title", "description": "One or two sentences", "feasibility": "low | medium | high"}}
  ]
}}"""


def build_brainstorming_prompt(topic: str, context: Optional[str] = None) -> str:
    context_section = f"CONTEXT: {truncate_text(context, MAX_CONTEXT_CHARS)}\n" if context else ""
    return BRAINSTORMING_TEMPLATE.format(topic=topic, context_section=context_section)


HELP_SYSTEM_PROMPT = """You are the in-app help assistant of a platform for human rights defenders.
The platform offers campaign management, document analysis, pattern detection,
legal strategy suggestions, legal resources from the OHCHR and a live chat assistant.
Answer questions about using the platform and about human rights work briefly and practically."""


def build_help_prompt(question: str, context: Optional[str] = None) -> str:
    if context:
        return f"The user is currently working on: {truncate_text(context, MAX_CONTEXT_CHARS)}\n\nQuestion: {question}"
    return question
