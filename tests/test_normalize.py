import pytest

from app.schemas import AlumniResult
from app.services.normalize import (
    DEFAULT_RELEVANCE,
    NO_COMPANY,
    NO_LOCATION,
    NO_MAJOR,
    NO_ROLE,
    NO_YEAR,
    UNKNOWN,
    fallback_relevance,
    format_snippet,
    from_relational_row,
    from_vector_match,
    vector_relevance,
)
from conftest import make_hit, make_row

FIELDS = set(AlumniResult.model_fields)


def test_vector_match_maps_metadata():
    r = from_vector_match(make_hit("Ada Park", 0.873, latest_position="PM", current_company="Stripe"), "fintech")
    assert r.name == "Ada Park"
    assert r.current_role == "PM"
    assert r.current_company == "Stripe"
    assert r.current_location == "New York"
    assert r.major == "Economics"
    assert r.graduation_year == "2019"
    assert r.relevance_score == 87
    assert r.match_reason == "Relevant to: fintech"
    assert r.career_trajectory == "Economics → PM at Stripe"


def test_vector_match_fills_placeholders_for_missing_fields():
    r = from_vector_match({"score": None, "metadata": {"current_company": "   "}}, "q")
    assert r.name == UNKNOWN
    assert r.current_role == NO_ROLE
    assert r.current_company == NO_COMPANY
    assert r.current_location == NO_LOCATION
    assert r.major == NO_MAJOR
    assert r.graduation_year == NO_YEAR
    assert r.relevance_score == DEFAULT_RELEVANCE
    assert r.linkedin_url == ""
    assert set(r.model_dump()) == FIELDS


def test_vector_match_truncates_snippet():
    r = from_vector_match(make_hit("A", text_snippet="x" * 50), "q", snippet_chars=10)
    assert r.text_snippet == "x" * 10 + "…"


def test_relational_row_builds_snippet_and_score():
    row = make_row("Cara Diaz", end_year=2016.0)
    r = from_relational_row(row, "stripe engineer", ["stripe", "engineer", "python"])
    assert r.current_company == "Stripe"
    assert r.graduation_year == 2016
    assert r.text_snippet == "Cara Diaz | Yale | Computer Science | Software Engineer at Stripe"
    assert r.relevance_score == 50 + round(50 * 2 / 3)
    assert r.match_reason.startswith("Yale alum matching 2 of 3 search terms")


def test_relational_row_without_terms_scores_base():
    r = from_relational_row(make_row("Ben Cole", current_company_name=None), "anything", (), company="Jane Street")
    assert r.relevance_score == 50
    assert r.current_company == "Jane Street"
    assert r.match_reason == "Yale alum related to: anything"


@pytest.mark.parametrize("terms,matched,expected", [((), 0, 50), (("a",), 1, 100), (("a", "b"), 0, 50), (("a", "b", "c", "d"), 1, 62)])
def test_fallback_relevance_is_deterministic(terms, matched, expected):
    assert fallback_relevance(terms, matched) == expected


def test_both_sources_share_one_shape():
    a = from_vector_match(make_hit("A"), "q").model_dump()
    b = from_relational_row(make_row("B"), "q").model_dump()
    assert set(a) == set(b) == FIELDS


def test_format_snippet_short_text_untouched():
    assert format_snippet("  hello  ", 10) == "hello"
    assert format_snippet("", 10) == ""


@pytest.mark.parametrize("score,expected", [(3.2, 100), (1.0, 100), (0.456, 46), (-0.4, 0), ("0.5", 50), ("n/a", DEFAULT_RELEVANCE)])
def test_vector_relevance_stays_in_range(score, expected):
    assert vector_relevance(score) == expected
