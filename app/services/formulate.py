"""
Query formulation: blend the user's query with their profile so the embedding leans toward their context.
Pure functions; same inputs always give the same text.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Union

from app.schemas import Profile

ProfileLike = Optional[Union[Profile, Mapping[str, Any]]]

BIAS_PHRASE = "Yale alumni"


def as_profile_dict(profile: ProfileLike) -> dict:
    if profile is None:
        return {}
    if isinstance(profile, Profile):
        return profile.model_dump(exclude_none=True)
    return dict(profile)


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple, set)):
        return " ".join(str(v).strip() for v in value if v is not None and str(v).strip())
    return str(value).strip()


def _join(*parts: str) -> str:
    return " ".join(" ".join(parts).split())


def interests_of(profile: ProfileLike) -> str:
    p = as_profile_dict(profile)
    return _text(p.get("preferred_industries")) or _text(p.get("interests"))


def formulate(raw_query: Optional[str], profile: ProfileLike = None) -> str:
    """Raw query + "Yale alumni" + major, interests, skills and location."""
    p = as_profile_dict(profile)
    return _join(
        _text(raw_query),
        BIAS_PHRASE,
        _text(p.get("major")),
        interests_of(p),
        _text(p.get("skills")),
        _text(p.get("location")),
    )


def profile_text(profile: ProfileLike, query: Optional[str] = "") -> str:
    """Profile-first text for the similar-alumni search."""
    p = as_profile_dict(profile)
    return _join(
        _text(p.get("major")),
        interests_of(p),
        _text(p.get("skills")),
        _text(p.get("location")),
        _text(query),
    )
