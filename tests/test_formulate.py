from app.schemas import Profile
from app.services.formulate import formulate, interests_of, profile_text


def test_formulate_blends_profile_in_order():
    profile = {"major": "Economics", "interests": ["fintech", "payments"], "skills": "SQL", "location": "NYC"}
    assert formulate("product manager", profile) == "product manager Yale alumni Economics fintech payments SQL NYC"


def test_formulate_without_profile_still_biases_toward_yale():
    assert formulate("  quant   trading ", None) == "quant trading Yale alumni"


def test_formulate_is_deterministic_and_accepts_models():
    p = Profile(major="History", preferred_industries=["Law"], interests="ignored when industries exist")
    first = formulate("policy", p)
    assert first == formulate("policy", p)
    assert first == "policy Yale alumni History Law"


def test_empty_query_and_profile_gives_bias_phrase_only():
    assert formulate("", {}) == "Yale alumni"


def test_interests_fall_back_when_no_preferred_industries():
    assert interests_of({"interests": "climate"}) == "climate"
    assert interests_of({"preferred_industries": [], "interests": ["a", "b"]}) == "a b"


def test_profile_text_leads_with_background():
    text = profile_text({"major": "Biology", "skills": ["PCR"], "location": "Boston"}, "biotech")
    assert text == "Biology PCR Boston biotech"
