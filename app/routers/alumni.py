# app/routers/alumni.py
# Purpose: company insights and career trajectories straight from the alumni database,
# plus LLM networking advice on top of them.

import logging
from typing import List

from fastapi import APIRouter, HTTPException

from app import factory
from app.ports import UpstreamError
from app.schemas import (
    AlumniAnalysis,
    AlumniAnalysisRequest,
    CompanyAnalysis,
    CompanyAnalysisRequest,
    CompanyInsights,
    CompanyInsightsRequest,
    Experience,
)

router = APIRouter(tags=["alumni"])
logger = logging.getLogger(__name__)


def _company(name: str) -> str:
    company = name.strip()
    if not company:
        raise HTTPException(status_code=400, detail="Company name is required.")
    return company


@router.post("/alumni/company", response_model=CompanyInsights)
async def company_insights(req: CompanyInsightsRequest):
    company = _company(req.company)
    try:
        return await factory.build_insights().company_alumni(company)
    except UpstreamError as e:
        logger.warning("company insights failed for %r: %s", company, e)
        raise HTTPException(status_code=500, detail="Failed to fetch alumni data.")


@router.get("/alumni/{person_id}/trajectory", response_model=List[Experience])
async def trajectory(person_id: str):
    try:
        return await factory.build_insights().trajectory(person_id)
    except UpstreamError as e:
        logger.warning("trajectory failed for %s: %s", person_id, e)
        raise HTTPException(status_code=500, detail="Failed to fetch career trajectory.")


@router.post("/alumni/analyze", response_model=AlumniAnalysis)
async def analyze_alumni(req: AlumniAnalysisRequest):
    try:
        return await factory.build_insights().analyze_profile(req.alumni_profile)
    except UpstreamError as e:
        logger.warning("alumni analysis failed for %r: %s", req.alumni_profile.get("name"), e)
        raise HTTPException(status_code=500, detail="Failed to analyze alumni profile.")


@router.post("/alumni/company/analyze", response_model=CompanyAnalysis)
async def analyze_company(req: CompanyAnalysisRequest):
    company = _company(req.company)
    try:
        return await factory.build_insights().analyze_company(company, req.alumni_profiles)
    except UpstreamError as e:
        logger.warning("company analysis failed for %r: %s", company, e)
        raise HTTPException(status_code=500, detail="Failed to analyze company insights.")
