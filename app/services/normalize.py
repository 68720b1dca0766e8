"""
Common helpers for turning raw alumni records into AlumniResult objects.
Two branches, one per source: vector-index metadata and relational rows. Both yield the same shape.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from app.schemas import AlumniResult
from milo.retrieval.utils import UNKNOWN_NAME, keyword_overlap

DEFAULT_RELEVANCE = 0
FALLBACK_BASE_SCORE = 50

UNKNOWN = UNKNOWN_NAME
NO_ROLE = "Position not specified"
NO_COMPANY = "Company not specified"
NO_LOCATION = "Location not specified"
NO_MAJOR = "Major not specified"
NO_YEAR = "Year not specified"


def format_snippet(text: str, length: int = 320) -> str:
    """
    Truncate `text` to at most `length` characters. Append an ellipsis if it was shortened.

    Args:
        text: The full text to trim.
        length: Maximum number of characters to retain.

    Returns:
        The original text if shorter than `length`, otherwise a truncated version with `…`.
    """
    if not text:
        return ""
    text = text.strip()
    if len(text) <= length:
        return text
    return text[:length] + "…"


def _pick(source: Dict[str, Any], *keys: str, default: str) -> Any:
    for key in keys:
        value = source.get(key)
        if isinstance(value, str):
            value = value.strip()
        if value not in (None, ""):
            return value
    return default


def _year(value: Any) -> Any:
    if isinstance(value, (str, int)) and not isinstance(value, bool):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return str(value)


def career_trajectory(major: Any, role: Any, company: Any) -> str:
    return f"{major} → {role} at {company}"


def vector_relevance(score: Any) -> float:
    """Similarity scaled to [0, 100] and clamped there; missing or bad scores get the floor."""
    try:
        scaled = round(float(score) * 100)
    except (TypeError, ValueError):
        return float(DEFAULT_RELEVANCE)
    return float(min(100, max(0, scaled)))


def fallback_relevance(terms: Sequence[str], matched: int) -> float:
    """Deterministic score for relational rows: 50 plus up to 50 for term overlap."""
    if not terms:
        return float(FALLBACK_BASE_SCORE)
    share = min(matched, len(terms)) / len(terms)
    return float(FALLBACK_BASE_SCORE + round((100 - FALLBACK_BASE_SCORE) * share))


def from_vector_match(hit: Dict[str, Any], query: str, *, snippet_chars: int = 600) -> AlumniResult:
    """
    Build an AlumniResult from a vector-index hit.

    Args:
        hit: {"score": float, "metadata": dict} as returned by VectorStorePort.query.
        query: The search text, echoed in match_reason.
        snippet_chars: Cap for text_snippet.

    Returns:
        AlumniResult with placeholders for any missing metadata field.
    """
    md = (hit.get("metadata") or {}) if isinstance(hit, dict) else {}
    role = _pick(md, "latest_position", "current_role", default=NO_ROLE)
    company = _pick(md, "current_company", default=NO_COMPANY)
    major = _pick(md, "yale_major", "major", default=NO_MAJOR)

    return AlumniResult(
        name=str(_pick(md, "name", default=UNKNOWN)),
        current_role=str(role),
        current_company=str(company),
        current_location=str(_pick(md, "city", "location", default=NO_LOCATION)),
        linkedin_url=str(_pick(md, "linkedin_url", default="")),
        major=str(major),
        graduation_year=_year(_pick(md, "yale_class", "graduation_year", default=NO_YEAR)),
        relevance_score=vector_relevance(hit.get("score") if isinstance(hit, dict) else None),
        match_reason=f"Relevant to: {query}",
        text_snippet=format_snippet(str(md.get("text_snippet") or ""), snippet_chars),
        career_trajectory=career_trajectory(major, role, company),
    )


def from_relational_row(
    row: Dict[str, Any],
    query: str,
    terms: Sequence[str] = (),
    *,
    company: Optional[str] = None,
) -> AlumniResult:
    """Build an AlumniResult from a people/educations row; the score comes from term overlap."""
    name = str(_pick(row, "name", default=UNKNOWN))
    role = str(_pick(row, "position", "current_role", default=NO_ROLE))
    current_company = str(_pick(row, "current_company_name", "current_company", default=company or NO_COMPANY))
    major = str(_pick(row, "field", "major", default=NO_MAJOR))
    location = str(_pick(row, "location", "current_location", default=NO_LOCATION))

    matched = keyword_overlap(terms, (role, current_company, major, location))
    if terms and matched:
        reason = f"Yale alum matching {matched} of {len(terms)} search terms for: {query}"
    else:
        reason = f"Yale alum related to: {query}"

    return AlumniResult(
        name=name,
        current_role=role,
        current_company=current_company,
        current_location=location,
        linkedin_url=str(_pick(row, "url", "linkedin_url", default="")),
        major=major,
        graduation_year=_year(_pick(row, "end_year", "graduation_year", default=NO_YEAR)),
        relevance_score=fallback_relevance(terms, matched),
        match_reason=reason,
        text_snippet=f"{name} | Yale | {major} | {role} at {current_company}",
        career_trajectory=career_trajectory(major, role, current_company),
    )
