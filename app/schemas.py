# app/schemas.py
# Purpose: Pydantic models for the alumni search + chat API so the JSON contract stays stable.

from typing import Any, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field


class Profile(BaseModel):
    """Onboarding profile; every field optional and passed explicitly per request."""
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    major: Optional[str] = None
    interests: Optional[Union[str, List[str]]] = None
    preferred_industries: Optional[List[str]] = None
    skills: Optional[Union[str, List[str]]] = None
    location: Optional[str] = None
    preferred_locations: Optional[List[str]] = None
    graduation_year: Optional[Union[str, int]] = None


class AlumniResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    current_role: str
    current_company: str
    current_location: str
    linkedin_url: str = ""
    major: str
    graduation_year: Union[str, int]
    relevance_score: float
    match_reason: str
    text_snippet: str
    career_trajectory: str


class CompanyAlumni(BaseModel):
    company: str
    alumni: List[AlumniResult]


class SearchRequest(BaseModel):
    query: str = Field(..., min_length=1)
    profile: Optional[Profile] = None
    call_site: Literal["alumni", "similar", "company"] = "alumni"


class SearchResponse(BaseModel):
    query: str
    search_text: str
    source: Literal["vector", "relational", "none"]
    count: int
    results: List[AlumniResult]
    latency_ms: Optional[int] = None


class SimilarRequest(BaseModel):
    profile: Profile
    query: str = ""


class CompaniesRequest(BaseModel):
    companies: List[str] = Field(..., min_length=1, max_length=10)
    query: str = ""
    profile: Optional[Profile] = None


class CompanyInsightsRequest(BaseModel):
    company: str = Field(..., min_length=1)


class Experience(BaseModel):
    company: Optional[str] = None
    title: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    is_current: bool = False


class CompanyInsights(BaseModel):
    company: str
    alumni_count: int
    alumni: List[Dict[str, Any]]
    career_trajectories: Dict[str, int]
    common_paths: List[str]
    top_locations: List[str]


class AlumniAnalysisRequest(BaseModel):
    alumni_profile: Dict[str, Any]


class CompanyAnalysisRequest(BaseModel):
    company: str = Field(..., min_length=1)
    # omitted: looked up from the alumni database
    alumni_profiles: Optional[List[Dict[str, Any]]] = None


class AlumniAnalysis(BaseModel):
    networking_strategy: str = ""
    career_advice: str = ""
    connection_approach: str = ""
    key_questions: List[str] = Field(default_factory=list)
    referral_potential: Literal["high", "medium", "low", "unknown"] = "unknown"
    value_proposition: str = ""


class CompanyAnalysis(BaseModel):
    company: str
    alumni_count: int
    networking_opportunities: str = ""
    common_paths: List[str] = Field(default_factory=list)
    hiring_patterns: str = ""
    referral_strategy: str = ""
    key_contacts: List[str] = Field(default_factory=list)


class ChatRequest(BaseModel):
    query: str = Field(..., min_length=1)
    profile: Optional[Profile] = None


class OnboardingRequest(BaseModel):
    question: str
    answer: str
    step: int = Field(1, ge=1)
    total_steps: int = Field(1, ge=1)
