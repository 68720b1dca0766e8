"""
Chat pipeline: one user message fans out into concurrent steps streamed back as they finish.
  immediate       one-sentence acknowledgement, typed out (a failure here ends the stream)
  intent          parsed intent JSON, or a neutral default
  pathways        relevant companies, or []
  alumni          LLM-written search query -> AlumniSearch.search
  similar_alumni  AlumniSearch.find_similar on the profile
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from typing import Any, Dict, List, Optional

from app.ports import LLMPort
from app.services.formulate import ProfileLike, formulate
from app.services.prompting import (
    ALUMNI_QUERY_SYSTEM,
    DEFAULT_THINKING,
    IMMEDIATE_SYSTEM,
    INTENT_SYSTEM,
    ONBOARDING_FALLBACK,
    ONBOARDING_SYSTEM,
    PATHWAYS_SYSTEM,
    build_onboarding_prompt,
    render_system,
)
from app.services.search import AlumniSearch
from app.services.streaming import Step, StreamingResponder, collect

logger = logging.getLogger(__name__)

_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def parse_json_payload(text: Optional[str]) -> Any:
    """Parse LLM output as JSON, tolerating code fences and chatter around the payload. None if unparseable."""
    raw = _FENCE.sub("", (text or "").strip()).strip()
    if not raw:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        pass
    # first {...} or [...] span in the reply
    starts = [i for i in (raw.find("{"), raw.find("[")) if i >= 0]
    if starts:
        start = min(starts)
        end = raw.rfind("}" if raw[start] == "{" else "]")
        if end > start:
            try:
                return json.loads(raw[start:end + 1])
            except json.JSONDecodeError:
                pass
    logger.warning("could not parse JSON from LLM reply: %.120r", raw)
    return None


def default_intent() -> Dict[str, Any]:
    return {"thinking_message": DEFAULT_THINKING, "search_focus": "alumni", "key_terms": []}


def _pathway(item: Any) -> Optional[Dict[str, Any]]:
    if not isinstance(item, dict) or not str(item.get("name") or "").strip():
        return None
    try:
        relevance = max(0.0, min(10.0, float(item.get("relevance", 0))))
    except (TypeError, ValueError):
        relevance = 0.0
    return {
        "name": str(item["name"]).strip(),
        "domain": str(item.get("domain") or ""),
        "relevance": relevance,
        "description": str(item.get("description") or ""),
    }


class ChatPipeline:
    def __init__(self, llm: LLMPort, search: AlumniSearch, *, char_delay: float = 0.02):
        self.llm = llm
        self.search = search
        self.char_delay = char_delay

    async def _chat(self, system: str, user: str, temperature: float, max_tokens: int) -> str:
        text, _usage = await asyncio.to_thread(self.llm.chat, system, user, temperature, max_tokens)
        return text

    async def _structured(self, template: str, query: str, profile: ProfileLike, max_tokens: int) -> Any:
        try:
            text = await self._chat(render_system(template, profile), query, 0.3, max_tokens)
        except Exception as exc:
            logger.warning("structured completion failed (%s: %s)", type(exc).__name__, exc)
            return None
        return parse_json_payload(text)

    # ------------------------------------------------------------------ steps
    async def immediate(self, query: str, profile: ProfileLike = None) -> str:
        text = await self._chat(render_system(IMMEDIATE_SYSTEM, profile), query, 0.7, 60)
        return text.strip()

    async def intent(self, query: str, profile: ProfileLike = None) -> Dict[str, Any]:
        parsed = await self._structured(INTENT_SYSTEM, query, profile, 200)
        if not isinstance(parsed, dict):
            return default_intent()
        return {**default_intent(), **parsed}

    async def pathways(self, query: str, profile: ProfileLike = None) -> List[Dict[str, Any]]:
        parsed = await self._structured(PATHWAYS_SYSTEM, query, profile, 800)
        if isinstance(parsed, dict):
            parsed = parsed.get("companies")
        if not isinstance(parsed, list):
            return []
        return [p for p in (_pathway(item) for item in parsed) if p]

    async def alumni(self, query: str, profile: ProfileLike = None) -> List[Dict[str, Any]]:
        parsed = await self._structured(ALUMNI_QUERY_SYSTEM, query, profile, 200)
        search_query = query
        if isinstance(parsed, dict) and str(parsed.get("search_query") or "").strip():
            search_query = str(parsed["search_query"]).strip()
        results = await self.search.search(formulate(search_query, profile), profile)
        return [r.model_dump() for r in results]

    async def similar_alumni(self, query: str, profile: ProfileLike = None) -> List[Dict[str, Any]]:
        results = await self.search.find_similar(profile, query)
        return [r.model_dump() for r in results]

    # ------------------------------------------------------------------ entrypoints
    def responder(self, query: str, profile: ProfileLike = None, *, char_delay: Optional[float] = None) -> StreamingResponder:
        q = (query or "").strip()
        steps = [
            Step("immediate", lambda: self.immediate(q, profile), text=True),
            Step("intent", lambda: self.intent(q, profile)),
            Step("pathways", lambda: self.pathways(q, profile)),
            Step("alumni", lambda: self.alumni(q, profile)),
            Step("similar_alumni", lambda: self.similar_alumni(q, profile)),
        ]
        return StreamingResponder(steps, char_delay=self.char_delay if char_delay is None else char_delay)

    def stream(self, query: str, profile: ProfileLike = None):
        return self.responder(query, profile).stream()

    async def respond(self, query: str, profile: ProfileLike = None) -> Dict[str, Any]:
        """Non-streaming variant: the final value of every step (plus "error" if the stream failed)."""
        return await collect(self.responder(query, profile, char_delay=0.0))

    async def onboarding_reply(self, question: str, answer: str, step: int = 1, total_steps: int = 1) -> str:
        system = ONBOARDING_SYSTEM.format(step=step, total_steps=total_steps)
        try:
            text = await self._chat(system, build_onboarding_prompt(question, answer), 0.8, 100)
        except Exception as exc:
            logger.warning("onboarding reply failed (%s: %s)", type(exc).__name__, exc)
            return ONBOARDING_FALLBACK
        return text.strip() or ONBOARDING_FALLBACK
