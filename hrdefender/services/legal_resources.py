"""
Legal Resources - static catalogue of OHCHR databases and portals.

Used in two places:
- GET /legal-resources lets clients search the catalogue
- generate_content(enrich_with_resources=True) appends the best-matching
  resources to the prompt so the model can point users to primary sources

The catalogue is static data; nothing here touches the network.

Usage:
    from hrdefender.services.legal_resources import search_resources, enrich_prompt

    search_resources("special procedures")
    enrich_prompt("How do I file an individual complaint with a treaty body?")
"""

import re
import logging
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional

logger = logging.getLogger("hrdefender.legal_resources")


class ResourceType(str, Enum):
    """Kind of OHCHR resource."""
    DATABASE = "database"
    DOCUMENT_COLLECTION = "document_collection"
    DASHBOARD = "dashboard"
    PORTAL = "portal"
    REGISTRATION = "registration"


@dataclass
class LegalResource:
    """A single OHCHR resource."""
    id: str
    name: str
    url: str
    description: str
    type: ResourceType
    keywords: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["type"] = self.type.value
        return data


# ---------------------------------------------------------------------------
# CATALOGUE
# ---------------------------------------------------------------------------

OHCHR_RESOURCES: List[LegalResource] = [
    LegalResource(
        id="ads-database",
        name="Anti-Discrimination Database",
        url="http://adsdatabase.ohchr.org/",
        description="Information, policies and measures at international, regional and national level "
                    "to combat racism, racial discrimination, xenophobia and related intolerance.",
        type=ResourceType.DATABASE,
        keywords=["anti-discrimination", "discrimination", "racism", "xenophobia", "intolerance", "policy", "laws"],
    ),
    LegalResource(
        id="hre-database",
        name="Human Rights Education and Training Database",
        url="http://hre.ohchr.org",
        description="Worldwide search for institutions, programmes and materials promoting human rights "
                    "education and training.",
        type=ResourceType.DATABASE,
        keywords=["education", "training", "materials", "programmes", "institutions"],
    ),
    LegalResource(
        id="jurisprudence-database",
        name="Jurisprudence Database (Treaty Bodies)",
        url="http://juris.ohchr.org",
        description="Access to the jurisprudence of the UN treaty bodies that examine individual complaints.",
        type=ResourceType.DATABASE,
        keywords=["jurisprudence", "case law", "treaty bodies", "individual complaint", "decisions", "views"],
    ),
    LegalResource(
        id="ratification-dashboard",
        name="Status of Ratification Interactive Dashboard",
        url="http://indicators.ohchr.org",
        description="Visualised current status of ratification of the international human rights treaties.",
        type=ResourceType.DASHBOARD,
        keywords=["ratification", "treaties", "status", "dashboard", "map"],
    ),
    LegalResource(
        id="udhr-translations",
        name="Universal Declaration of Human Rights Translations",
        url="https://www.ohchr.org/en/human-rights/universal-declaration/universal-declaration-human-rights/"
            "about-universal-declaration-human-rights-translation-project",
        description="Translations of the Universal Declaration of Human Rights into more than 500 languages and dialects.",
        type=ResourceType.DOCUMENT_COLLECTION,
        keywords=["udhr", "universal declaration", "translations", "languages"],
    ),
    LegalResource(
        id="uhri",
        name="Universal Human Rights Index (UHRI)",
        url="http://uhri.ohchr.org",
        description="Country-specific human rights recommendations from UN mechanisms "
                    "(treaty bodies, special procedures, UPR).",
        type=ResourceType.DATABASE,
        keywords=["uhri", "recommendations", "un mechanisms", "treaty bodies", "special procedures", "upr", "country reports"],
    ),
    LegalResource(
        id="charter-bodies-database",
        name="UN Charter-Based Bodies Database",
        url="https://ap.ohchr.org/Documents/gmainec.aspx",
        description="Documents and information on the Charter-based human rights bodies "
                    "(Human Rights Council, Commission on Human Rights).",
        type=ResourceType.DATABASE,
        keywords=["charter bodies", "human rights council", "hrc", "commission", "resolutions"],
    ),
    LegalResource(
        id="treaty-bodies-database",
        name="UN Treaty Bodies Database",
        url="http://tbinternet.ohchr.org/",
        description="Documents and information on the core international human rights treaties and "
                    "their monitoring committees.",
        type=ResourceType.DATABASE,
        keywords=["treaty bodies", "committees", "state reports", "concluding observations", "treaties"],
    ),
    LegalResource(
        id="upr-documentation",
        name="Universal Periodic Review (UPR) Documentation",
        url="https://www.ohchr.org/en/hr-bodies/upr/documentation",
        description="Information and documents about States under review in the UPR process "
                    "(submitted by States, the UN and NGOs).",
        type=ResourceType.PORTAL,
        keywords=["upr", "universal periodic review", "country reports", "stakeholders", "ngo submissions"],
    ),
    LegalResource(
        id="sp-database",
        name="Special Procedures Database (Mandates & Visits)",
        url="http://spinternet.ohchr.org",
        description="Documents and information on the mandates and country visits of the special "
                    "procedures of the Human Rights Council.",
        type=ResourceType.DATABASE,
        keywords=["special procedures", "special rapporteur", "mandates", "country visits", "reports"],
    ),
    LegalResource(
        id="sp-communications",
        name="Special Procedures Communication Reports",
        url="https://spcommreports.ohchr.org",
        description="Search communications sent by special procedures and replies from States and other "
                    "actors since 2011.",
        type=ResourceType.DATABASE,
        keywords=["special procedures", "communications", "allegation letters", "urgent appeals", "replies"],
    ),
    LegalResource(
        id="ngo-registration",
        name="NGO Registration (Human Rights Council Statements)",
        url="https://ngoreg.ohchr.org",
        description="Portal for NGOs to register oral and written statements for Human Rights Council sessions.",
        type=ResourceType.REGISTRATION,
        keywords=["ngo", "registration", "human rights council", "statements", "accreditation"],
    ),
]

_RESOURCES_BY_ID = {resource.id: resource for resource in OHCHR_RESOURCES}

# Prompt words shorter than this are ignored when matching keywords
MIN_KEYWORD_LENGTH = 4


def get_resource(resource_id: str) -> Optional[LegalResource]:
    """Look up a resource by id."""
    return _RESOURCES_BY_ID.get(resource_id)


def list_resources(resource_type: Optional[ResourceType] = None) -> List[LegalResource]:
    if resource_type is None:
        return list(OHCHR_RESOURCES)
    return [r for r in OHCHR_RESOURCES if r.type == ResourceType(resource_type)]


def search_resources(
    query: str,
    resource_type: Optional[ResourceType] = None,
) -> List[LegalResource]:
    """
    Case-insensitive substring search over name, description and keywords.

    An empty query returns every resource (optionally filtered by type).
    """
    candidates = list_resources(resource_type)
    needle = (query or "").strip().lower()
    if not needle:
        return candidates

    return [
        resource for resource in candidates
        if needle in resource.name.lower()
        or needle in resource.description.lower()
        or any(needle in keyword for keyword in resource.keywords)
    ]


def find_resources_by_keywords(keywords: List[str], max_results: int = 5) -> List[LegalResource]:
    """
    Rank resources by keyword overlap.

    Scoring per keyword:
    - 1.0 if it overlaps a resource keyword (either contains the other)
    - 0.5 if it appears in the resource name
    - 0.3 if it appears in the description

    Only resources with a positive score are returned, best first.
    """
    scored = []
    for resource in OHCHR_RESOURCES:
        score = 0.0
        for keyword in keywords:
            needle = keyword.lower()
            if any(needle in k or k in needle for k in resource.keywords):
                score += 1.0
            if needle in resource.name.lower():
                score += 0.5
            if needle in resource.description.lower():
                score += 0.3
        if score > 0:
            scored.append((score, resource))

    scored.sort(key=lambda item: item[0], reverse=True)
    return [resource for _, resource in scored[:max_results]]


def extract_keywords(text: str) -> List[str]:
    """Lowercase words of at least MIN_KEYWORD_LENGTH letters, in order, deduplicated."""
    seen = []
    for word in re.findall(r"[A-Za-zÀ-ÿ\-]+", text or ""):
        lowered = word.lower().strip("-")
        if len(lowered) >= MIN_KEYWORD_LENGTH and lowered not in seen:
            seen.append(lowered)
    return seen


def enrich_prompt(prompt: str, max_results: int = 3) -> str:
    """
    Append the best-matching OHCHR resources to a prompt.

    Returns the prompt unchanged when nothing matches.
    """
    matches = find_resources_by_keywords(extract_keywords(prompt), max_results=max_results)
    if not matches:
        return prompt

    logger.debug(f"Enriching prompt with {len(matches)} OHCHR resources")
    lines = [prompt, "", "Relevant OHCHR resources you may refer to:"]
    for resource in matches:
        lines.append(f"- {resource.name} ({resource.url}): {resource.description}")
    return "\n".join(lines)
