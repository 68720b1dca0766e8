import asyncio
import json

from app.services.chat import ChatPipeline, parse_json_payload
from app.services.prompting import DEFAULT_THINKING, ONBOARDING_FALLBACK, user_context
from app.services.search import AlumniSearch
from conftest import StubEmbedder, StubLLM, StubSQL, StubVectorStore, make_hit

INTENT = json.dumps({"thinking_message": "Looking for fintech PM roles", "key_terms": ["fintech"]})
PATHWAYS = "```json\n" + json.dumps([
    {"name": "Stripe", "domain": "stripe.com", "relevance": 9, "description": "payments"},
    {"name": "", "domain": "blank.com"},
    {"name": "Plaid", "relevance": "high"},
]) + "\n```"
ALUMNI_QUERY = json.dumps({"search_query": "product managers at fintech companies"})

REPLIES = {
    "opportunity scout": "On it, pulling fintech PM paths.",
    "discovery engine": INTENT,
    "company discovery": PATHWAYS,
    "semantic search queries": ALUMNI_QUERY,
}


def _pipeline(llm, hits=None):
    emb = StubEmbedder()
    search = AlumniSearch(emb, StubVectorStore(hits if hits is not None else [make_hit("Ada", 0.9)]), StubSQL())
    return ChatPipeline(llm, search, char_delay=0), emb


def test_parse_json_payload_variants(caplog):
    assert parse_json_payload('{"a": 1}') == {"a": 1}
    assert parse_json_payload("```json\n[1, 2]\n```") == [1, 2]
    assert parse_json_payload('Sure! Here you go: {"a": [1]} hope that helps') == {"a": [1]}
    assert parse_json_payload("") is None
    assert parse_json_payload("not json at all") is None
    assert "could not parse" in caplog.text


def test_stream_emits_every_step_then_complete():
    pipe, _ = _pipeline(StubLLM(REPLIES))
    profile = {"name": "Sam", "major": "Economics"}

    async def go():
        return [e async for e in pipe.stream("fintech product management", profile)]

    events = asyncio.run(go())
    types = [e["type"] for e in events]
    assert types[-1] == "complete"
    assert {"immediate", "intent", "pathways", "alumni", "similar_alumni"} <= set(types)
    immediate = [e["data"] for e in events if e["type"] == "immediate"]
    assert immediate[-1] == "On it, pulling fintech PM paths."


def test_respond_collects_structured_values():
    pipe, emb = _pipeline(StubLLM(REPLIES))
    out = asyncio.run(pipe.respond("fintech product management", {"major": "Economics"}))

    assert out["intent"]["thinking_message"] == "Looking for fintech PM roles"
    assert [p["name"] for p in out["pathways"]] == ["Stripe", "Plaid"]
    assert out["pathways"][1]["relevance"] == 0.0
    assert out["alumni"][0]["name"] == "Ada"
    assert out["similar_alumni"][0]["name"] == "Ada"
    assert "error" not in out
    # the LLM-written query is what gets embedded, blended with the profile
    assert "product managers at fintech companies Yale alumni Economics" in emb.calls


def test_malformed_json_degrades_to_neutral_values():
    llm = StubLLM({"opportunity scout": "Got it."}, default="I can't format that")
    pipe, emb = _pipeline(llm)
    out = asyncio.run(pipe.respond("biotech"))
    assert out["intent"]["thinking_message"] == DEFAULT_THINKING
    assert out["pathways"] == []
    assert out["similar_alumni"] == []
    # falls back to the raw query for the alumni search
    assert "biotech Yale alumni" in emb.calls


def test_structured_step_failures_do_not_end_the_stream():
    llm = StubLLM({"opportunity scout": "Got it."}, fail_on=("discovery engine", "company discovery"))
    pipe, _ = _pipeline(llm)
    out = asyncio.run(pipe.respond("law"))
    assert "error" not in out
    assert out["pathways"] == []


def test_immediate_failure_is_a_stream_error():
    pipe, _ = _pipeline(StubLLM(REPLIES, fail_on=("opportunity scout",)))
    out = asyncio.run(pipe.respond("anything"))
    assert "immediate" in out["error"]


def test_onboarding_reply_and_fallback():
    pipe, _ = _pipeline(StubLLM({"onboarding assistant": "  Great choice, Sam!  "}))
    assert asyncio.run(pipe.onboarding_reply("What's your major?", "Economics", 1, 5)) == "Great choice, Sam!"

    failing, _ = _pipeline(StubLLM(fail_on=("onboarding assistant",)))
    assert asyncio.run(failing.onboarding_reply("Q", "A")) == ONBOARDING_FALLBACK


def test_user_context_renders_profile():
    assert user_context(None) == ""
    block = user_context({"name": "Sam", "skills": ["SQL", "Python"]})
    assert "- Name: Sam" in block
    assert "- Skills: SQL, Python" in block
    assert "- Major: Not specified" in block
