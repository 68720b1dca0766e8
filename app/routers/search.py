# app/routers/search.py
# Purpose: alumni search endpoints.
# - POST /api/search: formulate the query with the profile, then vector search with SQL fallback.
# - POST /api/search/similar: alumni with a background like the user's.
# - POST /api/search/companies: Yale alumni at each of a list of companies.
# Search never raises for upstream failures; an empty result is a 200.

from time import perf_counter
from typing import List

from fastapi import APIRouter

from app import factory
from app.schemas import (
    AlumniResult,
    CompaniesRequest,
    CompanyAlumni,
    SearchRequest,
    SearchResponse,
    SimilarRequest,
)
from app.services.formulate import formulate

router = APIRouter(tags=["search"])


@router.post("/search", response_model=SearchResponse)
async def search(req: SearchRequest):
    t0 = perf_counter()
    query = req.query.strip()
    search_text = formulate(query, req.profile)
    outcome = await factory.build_search().search_with_source(search_text, req.profile, call_site=req.call_site)
    return SearchResponse(
        query=query,
        search_text=search_text,
        source=outcome.source,
        count=len(outcome.results),
        results=outcome.results,
        latency_ms=int((perf_counter() - t0) * 1000),
    )


@router.post("/search/similar", response_model=List[AlumniResult])
async def similar(req: SimilarRequest):
    return await factory.build_search().find_similar(req.profile, req.query)


@router.post("/search/companies", response_model=List[CompanyAlumni])
async def companies(req: CompaniesRequest):
    return await factory.build_search().find_at_companies(req.companies, req.query, req.profile)
