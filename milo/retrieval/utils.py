"""
Shared retrieval utilities for the API, the CLI and the LangChain retriever.
Keeps affiliation filtering, score floors, term extraction and ranking consistent across call sites.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, TypeVar

EDUCATION_KEYS = ("education_1", "education")
AFFILIATION = "yale"

# Words that carry no search signal for the relational LIKE filter.
STOP_WORDS = frozenset({
    "a", "an", "and", "are", "at", "for", "from", "in", "into", "is", "of", "on", "or",
    "the", "to", "with", "who", "what", "where", "work", "working", "people", "find",
    "me", "my", "i", "want", "looking", "like", "jobs", "job", "yale", "alumni",
})
MAX_TERMS = 8

# Placeholder for records without a name; never treated as a duplicate.
UNKNOWN_NAME = "Unknown"

T = TypeVar("T")


@dataclass(frozen=True)
class RetrievalSettings:
    top_k: int
    min_score: float
    limit: int


DEFAULT_CALL_SITES: Dict[str, RetrievalSettings] = {
    "alumni": RetrievalSettings(top_k=10, min_score=0.5, limit=6),
    "similar": RetrievalSettings(top_k=15, min_score=0.4, limit=8),
    "company": RetrievalSettings(top_k=20, min_score=0.0, limit=3),
}


def resolve_retrieval_settings(
    cfg: Optional[Dict[str, Any]],
    default: RetrievalSettings,
) -> RetrievalSettings:
    """Normalise one call site's knobs from YAML into a RetrievalSettings, falling back field by field."""
    cfg = cfg or {}

    def _to_int(value, *, fallback: int, minimum: int = 1) -> int:
        try:
            return max(minimum, int(value))
        except (TypeError, ValueError):
            return fallback

    def _to_float(value, *, fallback: float) -> float:
        try:
            return min(1.0, max(0.0, float(value)))
        except (TypeError, ValueError):
            return fallback

    return RetrievalSettings(
        top_k=_to_int(cfg.get("top_k"), fallback=default.top_k),
        min_score=_to_float(cfg.get("min_score"), fallback=default.min_score),
        limit=_to_int(cfg.get("limit"), fallback=default.limit),
    )


def is_yale_affiliated(metadata: Optional[Dict[str, Any]]) -> bool:
    """Substring check on the education and snippet fields; the index has no school column."""
    if not metadata:
        return False
    fields = [metadata.get(key) for key in EDUCATION_KEYS]
    fields.append(metadata.get("text_snippet"))
    return any(AFFILIATION in str(value).lower() for value in fields if value)


def passes_score_floor(hit: Dict[str, Any], min_score: float) -> bool:
    score = hit.get("score")
    if score is None:
        return min_score <= 0.0
    try:
        return float(score) >= min_score
    except (TypeError, ValueError):
        return False


def company_matches(current_company: Optional[str], company: str) -> bool:
    """Loose company match: substring either way, or the target's first word."""
    current = (current_company or "").strip().lower()
    target = (company or "").strip().lower()
    if not current or not target:
        return False
    if target in current or current in target:
        return True
    first = target.split()[0]
    return len(first) >= 3 and first in current


def search_terms(text: str, limit: int = MAX_TERMS) -> List[str]:
    """Lower-cased distinct words of `text`, minus stop words, in first-seen order."""
    terms: List[str] = []
    for tok in re.findall(r"[a-z0-9][a-z0-9+#&.-]*", (text or "").lower()):
        tok = tok.strip(".-")
        if len(tok) < 2 or tok in STOP_WORDS or tok in terms:
            continue
        terms.append(tok)
        if len(terms) >= limit:
            break
    return terms


def keyword_overlap(terms: Sequence[str], fields: Iterable[Any]) -> int:
    """How many of `terms` appear in the concatenated fields."""
    haystack = " ".join(str(f) for f in fields if f).lower()
    return sum(1 for t in terms if t in haystack)


def rank_and_truncate(results: Sequence[T], limit: int) -> List[T]:
    """Sort by relevance_score (desc), keep the first result per name, cap at `limit`.
    Unnamed records share a placeholder name, so they are kept individually."""
    ordered = sorted(results, key=lambda r: getattr(r, "relevance_score", 0.0), reverse=True)
    seen = set()
    unique: List[T] = []
    for r in ordered:
        key = (getattr(r, "name", "") or "").strip().lower()
        if key and key != UNKNOWN_NAME.lower() and key in seen:
            continue
        seen.add(key)
        unique.append(r)
        if len(unique) >= limit:
            break
    return unique
