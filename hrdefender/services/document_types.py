"""
Document Type Detection - classify a document before analysis.

Human rights documentation follows the HURIDOCS event standard plus a few
operational document kinds (security surveys, relocation requests, grants).
Detection is a keyword heuristic: the first type whose cue phrases appear in
the content wins, in the order of DOCUMENT_TYPE_CUES. Cues cover English and
German wording, matched case-insensitively.

Usage:
    detect_document_type("Incident on 12 May: police dispersed the protest")
    # DocumentType.EVENT
"""

from enum import Enum
from typing import Dict, List, Optional


class DocumentType(str, Enum):
    """Document categories recognized by the heuristic."""
    EVENT = "event"
    ACT = "act"
    INVOLVEMENT = "involvement"
    SECURITY_SURVEY = "security_survey"
    RELOCATION_REQUEST = "relocation_request"
    EMERGENCY_GRANT = "emergency_grant"
    FUNDING_PLAN = "funding_plan"
    DEFENDER_RESOURCE = "defender_resource"


# Checked in order; the first match wins.
DOCUMENT_TYPE_CUES: Dict[DocumentType, List[str]] = {
    DocumentType.EVENT: [
        "documentation of an", "event of", "incident on", "date of the event",
        "dokumentation einer", "ereignis vom", "vorfall am", "datum des ereignisses",
    ],
    DocumentType.ACT: [
        "administrative act", "official act", "legal act", "legislation",
        "behördliche handlung", "verwaltungsakt", "rechtsakt", "gesetzgebung",
    ],
    DocumentType.INVOLVEMENT: [
        "form of involvement", "persons involved", "role of the person",
        "beteiligungsform", "involvierte personen",
    ],
    DocumentType.SECURITY_SURVEY: [
        "security risk", "threat analysis", "security survey", "risk assessment",
        "sicherheitsrisiko", "bedrohungsanalyse", "sicherheitsumfrage", "risikobewertung",
    ],
    DocumentType.RELOCATION_REQUEST: [
        "relocation", "resettlement", "asylum application",
        "umsiedlung", "asylantrag",
    ],
    DocumentType.EMERGENCY_GRANT: [
        "emergency grant", "emergency funding", "urgent assistance",
        "notfallzuschuss", "soforthilfe", "notfallfinanzierung",
    ],
    DocumentType.FUNDING_PLAN: [
        "funding plan", "budget", "financial plan", "cost breakdown",
        "finanzierungsplan", "finanzplan", "kostenaufstellung",
    ],
    DocumentType.DEFENDER_RESOURCE: [
        "guideline", "handbook", "training material", "toolkit",
        "leitfaden", "handbuch", "schulungsmaterial",
    ],
}


def detect_document_type(content: str) -> Optional[DocumentType]:
    """
    Detect the document type from its content.

    Returns:
        The first matching DocumentType, or None when no cue matches
    """
    lowered = (content or "").lower()
    for document_type, cues in DOCUMENT_TYPE_CUES.items():
        if any(cue in lowered for cue in cues):
            return document_type
    return None
