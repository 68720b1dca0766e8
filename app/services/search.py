"""
Alumni search orchestration: embed -> vector query -> Yale filter -> score floor -> normalize -> rank.
Falls back to a parameterized SQL search when the vector path raises or comes back empty.
Nothing here raises to the caller; every external call is wrapped and logged.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from app.ports import EmbedderPort, RelationalStorePort, VectorStorePort
from app.schemas import AlumniResult, CompanyAlumni
from app.services.formulate import ProfileLike, formulate, interests_of, profile_text, as_profile_dict
from app.services.normalize import from_relational_row, from_vector_match
from milo.retrieval.sql import company_alumni_query, fallback_alumni_query
from milo.retrieval.utils import (
    DEFAULT_CALL_SITES,
    RetrievalSettings,
    company_matches,
    is_yale_affiliated,
    passes_score_floor,
    rank_and_truncate,
    search_terms,
)

logger = logging.getLogger(__name__)

VARIATION_TEMPLATES = (
    "{q}",
    "{q} Yale alumni",
    "Yale {q} professionals",
    "{q} careers Yale",
    "Yale graduates {q}",
)


@dataclass(frozen=True)
class SearchOutcome:
    results: List[AlumniResult]
    source: str  # "vector" | "relational" | "none"


def _personalize(results: Sequence[AlumniResult], profile: ProfileLike) -> List[AlumniResult]:
    major = str(as_profile_dict(profile).get("major") or "").strip()
    if not major:
        return list(results)
    out = []
    for r in results:
        if r.major.strip().lower() == major.lower():
            r = r.model_copy(update={"match_reason": f"{r.match_reason}; shares your major ({major})"})
        out.append(r)
    return out


class AlumniSearch:
    def __init__(
        self,
        emb: EmbedderPort,
        store: VectorStorePort,
        sql: RelationalStorePort,
        *,
        call_sites: Optional[Dict[str, RetrievalSettings]] = None,
        fallback_rows: int = 10,
        company_rows: int = 5,
        metadata_filter: bool = False,
    ):
        self.emb, self.store, self.sql = emb, store, sql
        self.call_sites = {**DEFAULT_CALL_SITES, **(call_sites or {})}
        self.fallback_rows = max(1, int(fallback_rows))
        self.company_rows = max(1, int(company_rows))
        self.metadata_filter = metadata_filter

    def settings_for(self, call_site: str) -> RetrievalSettings:
        settings = self.call_sites.get(call_site)
        if settings is None:
            logger.warning("unknown call site %r; using 'alumni' settings", call_site)
            settings = self.call_sites["alumni"]
        return settings

    # ------------------------------------------------------------------ public API
    async def search(self, search_text: str, profile: ProfileLike = None, *, call_site: str = "alumni") -> List[AlumniResult]:
        """Ranked, deduplicated, capped alumni for `search_text`; [] when both paths fail."""
        outcome = await self.search_with_source(search_text, profile, call_site=call_site)
        return outcome.results

    async def search_with_source(
        self,
        search_text: str,
        profile: ProfileLike = None,
        *,
        call_site: str = "alumni",
    ) -> SearchOutcome:
        settings = self.settings_for(call_site)
        text = (search_text or "").strip()

        results: List[AlumniResult] = []
        try:
            results = await self._vector_search(text, settings)
        except Exception as exc:
            logger.warning("vector search failed for %r (%s: %s); using SQL fallback",
                           text, type(exc).__name__, exc)

        source = "vector"
        if not results:
            source = "relational"
            try:
                results = await self._relational_search(text, settings)
            except Exception as exc:
                logger.warning("relational fallback failed for %r (%s: %s)", text, type(exc).__name__, exc)
                results = []

        if not results:
            logger.info("no alumni found for %r [%s]", text, call_site)
            return SearchOutcome(results=[], source="none")

        logger.info("%d alumni for %r via %s [%s]", len(results), text, source, call_site)
        return SearchOutcome(results=_personalize(results, profile), source=source)

    async def find_similar(self, profile: ProfileLike, query: str = "") -> List[AlumniResult]:
        """Alumni with a background like the user's; needs at least a major."""
        if not str(as_profile_dict(profile).get("major") or "").strip():
            logger.info("similar alumni search skipped: profile has no major")
            return []
        return await self.search(profile_text(profile, query), profile, call_site="similar")

    async def find_at_companies(
        self,
        companies: Sequence[str],
        query: str = "",
        profile: ProfileLike = None,
    ) -> List[CompanyAlumni]:
        names = [c.strip() for c in companies if c and c.strip()]
        groups = await asyncio.gather(*(self._alumni_at_company(c, query, profile) for c in names))
        return [CompanyAlumni(company=c, alumni=g) for c, g in zip(names, groups) if g]

    async def search_variations(self, query: str, profile: ProfileLike = None, limit: int = 10) -> List[AlumniResult]:
        """Run several phrasings concurrently and merge them; best score per name wins."""
        q = (query or "").strip()
        texts = [formulate(t.format(q=q), profile) for t in VARIATION_TEMPLATES]
        batches = await asyncio.gather(*(self.search(t, profile) for t in texts))
        merged = [r for batch in batches for r in batch]
        return rank_and_truncate(merged, limit)

    # ------------------------------------------------------------------ paths
    async def _vector_search(self, text: str, settings: RetrievalSettings) -> List[AlumniResult]:
        hits = await self._vector_hits(text, settings)
        kept = [h for h in hits if passes_score_floor(h, settings.min_score)]
        return rank_and_truncate([from_vector_match(h, text) for h in kept], settings.limit)

    async def _vector_hits(self, text: str, settings: RetrievalSettings) -> List[Dict[str, Any]]:
        vector = await asyncio.to_thread(self.emb.embed_query, text)
        filt = {"yale_affiliated": {"$eq": True}} if self.metadata_filter else None
        hits = await asyncio.to_thread(
            self.store.query, vector, settings.top_k, include_metadata=True, filter=filt
        )
        yale = [h for h in hits or [] if is_yale_affiliated(h.get("metadata"))]
        logger.debug("vector query: %d hits, %d Yale-affiliated", len(hits or []), len(yale))
        return yale

    async def _relational_search(self, text: str, settings: RetrievalSettings) -> List[AlumniResult]:
        terms = search_terms(text)
        sql, params = fallback_alumni_query(terms, self.fallback_rows)
        rows = await asyncio.to_thread(self.sql.query, sql, params)
        results = [from_relational_row(row, text, terms) for row in rows]
        return rank_and_truncate(results, min(settings.limit, self.fallback_rows))

    async def _alumni_at_company(self, company: str, query: str, profile: ProfileLike) -> List[AlumniResult]:
        settings = self.settings_for("company")
        p = as_profile_dict(profile)
        text = " ".join(
            f"Yale alumni working at {company} {query or ''} {p.get('major') or ''} {interests_of(p)}".split()
        )

        results: List[AlumniResult] = []
        try:
            hits = await self._vector_hits(text, settings)
            kept = [
                h for h in hits
                if passes_score_floor(h, settings.min_score)
                and company_matches((h.get("metadata") or {}).get("current_company"), company)
            ]
            results = rank_and_truncate([from_vector_match(h, text) for h in kept], settings.limit)
        except Exception as exc:
            logger.warning("vector company search failed for %s (%s: %s)", company, type(exc).__name__, exc)

        if results:
            return results

        try:
            sql, params = company_alumni_query(company, self.company_rows)
            rows = await asyncio.to_thread(self.sql.query, sql, params)
        except Exception as exc:
            logger.warning("relational company search failed for %s (%s: %s)", company, type(exc).__name__, exc)
            return []
        terms = search_terms(company)
        return rank_and_truncate(
            [from_relational_row(row, text, terms, company=company) for row in rows],
            min(settings.limit, self.company_rows),
        )
