"""
app/main.py

FastAPI application entrypoint.
- Configures logging from settings.
- Registers all routers (health, search, alumni, chat).
- Adds CORS for local dev (restrict in production).
- Provides a friendly "/" redirect to Swagger docs to avoid confusing 404s.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse

from app.routers import alumni, chat, health, search
from app.setting import settings

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("milo.api")

app = FastAPI(
    title="Milo Alumni API",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

# CORS for local frontend dev
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def unhandled(request: Request, exc: Exception):
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": f"internal error: {type(exc).__name__}"})


# Root: be nice during dev instead of 404ing
@app.get("/", include_in_schema=False)
def root():
    return RedirectResponse(url="/docs")


# Quick ping that doesn't touch any provider
@app.get("/api/ping", include_in_schema=False)
def ping():
    return JSONResponse({"status": "ok", "service": "milo-alumni", "version": "0.1.0"})


app.include_router(health.router, prefix="/api", tags=["health"])
app.include_router(search.router, prefix="/api", tags=["search"])
app.include_router(alumni.router, prefix="/api", tags=["alumni"])
app.include_router(chat.router, prefix="/api", tags=["chat"])
