# Purpose:
# Defines the /api/health endpoint for the Milo alumni API.
# - Reports which providers and retrieval knobs are wired, without calling them.
# - Useful for monitoring and deployment readiness checks.
# app/routers/health.py
from dataclasses import asdict

from fastapi import APIRouter

from app import factory

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
    search = factory.build_search()
    return {
        "status": "ok",
        "embedder": type(search.emb).__name__,
        "vector_store": type(search.store).__name__,
        "relational": type(search.sql).__name__,
        "call_sites": {name: asdict(s) for name, s in search.call_sites.items()},
    }
