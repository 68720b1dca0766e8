"""
Company and career-path insights read straight from the relational alumni dataset,
plus LLM networking advice layered on top of them.
Unlike AlumniSearch these calls let QueryError and CompletionError propagate; the router turns them into a 500.
"""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from typing import Any, Dict, List, Optional

from app.ports import CompletionError, LLMPort, RelationalStorePort
from app.schemas import AlumniAnalysis, CompanyAnalysis, CompanyInsights, Experience
from app.services.chat import parse_json_payload
from app.services.prompting import (
    COMPANY_ANALYSIS_SYSTEM,
    PROFILE_ANALYSIS_SYSTEM,
    build_company_analysis_prompt,
    build_profile_analysis_prompt,
)
from milo.retrieval.sql import EXPERIENCES_SQL, YALE_EDUCATION_SQL, company_history_query

logger = logging.getLogger(__name__)

SENIORITY_LEVELS = ("entry_level", "mid_level", "senior_level", "executive_level")
REFERRAL_LEVELS = ("high", "medium", "low")
CURRENT = "Present"
MAX_PATHS = 5

ANALYSIS_TEMPERATURE = 0.7
PROFILE_ANALYSIS_TOKENS = 800
COMPANY_ANALYSIS_TOKENS = 1000


def seniority(title: str) -> str:
    """Keyword bucket for a job title; checked in this order, first hit wins."""
    t = (title or "").lower()
    if any(k in t for k in ("senior", "lead", "principal")):
        return "senior_level"
    if any(k in t for k in ("director", "vp", "head", "chief")):
        return "executive_level"
    if any(k in t for k in ("manager", "analyst")):
        return "mid_level"
    return "entry_level"


def yale_connection(education: List[Dict[str, Any]]) -> str:
    if not education:
        return ""
    first = education[0]
    degree, end_year = first.get("degree"), first.get("end_year")
    if degree and end_year:
        return f"Yale {degree} '{str(end_year)[-2:]}"
    return "Yale Alumni"


def to_experience(row: Dict[str, Any]) -> Experience:
    end = row.get("end_date")
    return Experience(
        company=row.get("company"),
        title=row.get("title"),
        start_date=None if row.get("start_date") is None else str(row.get("start_date")),
        end_date=None if end is None else str(end),
        location=row.get("location"),
        description=row.get("description"),
        is_current=end is None or end == CURRENT,
    )


def previous_employer(experiences: List[Dict[str, Any]]) -> Optional[str]:
    """Company of the first role that is not current, or None."""
    for exp in experiences:
        if not exp.get("is_current"):
            return exp.get("company")
    return None


def career_paths(alumni: List[Dict[str, Any]], company: Optional[str] = None) -> List[str]:
    """Distinct 'previous employer → company' moves, at most MAX_PATHS.
    Without `company` each alumnus's current company is the destination."""
    paths: List[str] = []
    for a in alumni:
        experiences = a.get("experiences") or []
        if len(experiences) < 2:
            continue
        prev = previous_employer(experiences)
        if not prev:
            continue
        path = f"{prev} → {company or a.get('current_company')}"
        if path not in paths:
            paths.append(path)
    return paths[:MAX_PATHS]


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _text_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(v).strip() for v in value if isinstance(v, (str, int, float)) and str(v).strip()]


def to_alumni_analysis(payload: Any) -> AlumniAnalysis:
    if not isinstance(payload, dict):
        return AlumniAnalysis()
    referral = _text(payload.get("referral_potential")).lower()
    return AlumniAnalysis(
        networking_strategy=_text(payload.get("networking_strategy")),
        career_advice=_text(payload.get("career_advice")),
        connection_approach=_text(payload.get("connection_approach")),
        key_questions=_text_list(payload.get("key_questions")),
        referral_potential=referral if referral in REFERRAL_LEVELS else "unknown",
        value_proposition=_text(payload.get("value_proposition")),
    )


class AlumniInsights:
    def __init__(self, sql: RelationalStorePort, llm: Optional[LLMPort] = None, *, max_alumni: int = 10):
        self.sql = sql
        self.llm = llm
        self.max_alumni = max_alumni

    async def trajectory(self, person_id: str) -> List[Experience]:
        """Experiences for one person, current role first, then by end date descending."""
        rows = await asyncio.to_thread(self.sql.query, EXPERIENCES_SQL, [person_id])
        return [to_experience(r) for r in rows]

    async def _details(self, person: Dict[str, Any]) -> Dict[str, Any]:
        pid = person.get("person_id")
        experiences, education = await asyncio.gather(
            self.trajectory(pid),
            asyncio.to_thread(self.sql.query, YALE_EDUCATION_SQL, [pid]),
        )
        return {
            **person,
            "experiences": [e.model_dump() for e in experiences],
            "education": education,
            "yale_connection": yale_connection(education),
        }

    async def company_alumni(self, company: str) -> CompanyInsights:
        company = (company or "").strip()
        sql, params = company_history_query(company, self.max_alumni)
        people = await asyncio.to_thread(self.sql.query, sql, params)
        alumni = await asyncio.gather(*(self._details(p) for p in people))

        levels = Counter({level: 0 for level in SENIORITY_LEVELS})
        locations: Counter = Counter()
        for a in alumni:
            levels[seniority(a.get("current_title") or "")] += 1
            if a.get("location"):
                locations[a["location"]] += 1

        logger.info("company insights for %r: %d alumni", company, len(alumni))
        return CompanyInsights(
            company=company,
            alumni_count=len(alumni),
            alumni=list(alumni),
            career_trajectories={level: levels[level] for level in SENIORITY_LEVELS},
            common_paths=career_paths(alumni),
            top_locations=[loc for loc, _ in locations.most_common(5)],
        )

    async def _ask(self, system: str, user: str, max_tokens: int) -> Any:
        if self.llm is None:
            raise CompletionError("no language model configured for insights")
        text, _usage = await asyncio.to_thread(self.llm.chat, system, user, ANALYSIS_TEMPERATURE, max_tokens)
        return parse_json_payload(text)

    async def analyze_profile(self, alumni: Dict[str, Any]) -> AlumniAnalysis:
        """Networking advice for one alumnus. An unparseable reply gives empty advice, not an error."""
        payload = await self._ask(
            PROFILE_ANALYSIS_SYSTEM, build_profile_analysis_prompt(alumni), PROFILE_ANALYSIS_TOKENS
        )
        if not isinstance(payload, dict):
            logger.info("profile analysis for %r fell back to empty advice", alumni.get("name"))
        return to_alumni_analysis(payload)

    async def analyze_company(
        self, company: str, alumni: Optional[List[Dict[str, Any]]] = None
    ) -> CompanyAnalysis:
        """
        Read on one company's alumni network. Profiles are fetched from the database when not given.
        Company name and alumni count always come from the data, never from the model.
        """
        company = (company or "").strip()
        if alumni is None:
            alumni = (await self.company_alumni(company)).alumni
        paths = career_paths(alumni, company)
        payload = await self._ask(
            COMPANY_ANALYSIS_SYSTEM, build_company_analysis_prompt(company, alumni, paths), COMPANY_ANALYSIS_TOKENS
        )
        if not isinstance(payload, dict):
            logger.info("company analysis for %r fell back to the raw paths", company)
            payload = {}
        return CompanyAnalysis(
            company=company,
            alumni_count=len(alumni),
            networking_opportunities=_text(payload.get("networking_opportunities")),
            common_paths=_text_list(payload.get("common_paths")) or paths,
            hiring_patterns=_text(payload.get("hiring_patterns")),
            referral_strategy=_text(payload.get("referral_strategy")),
            key_contacts=_text_list(payload.get("key_contacts")),
        )
