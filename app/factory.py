"""
app/factory.py

Builds the alumni search, chat pipeline and insights service from the YAML runtime config.
- Swaps providers by config (no code edits).
- Per-call-site retrieval knobs (top_k, min_score, limit) come from `retrieval.<call_site>`.
- Builders are cached so every request shares one set of SDK clients.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from app.adapters.embed_openai import OpenAIEmbeddingAdapter
from app.adapters.llm_openai import OpenAIAdapter
from app.adapters.sql_sqlite import SQLiteStoreAdapter
from app.adapters.vector_pinecone import PineconeStoreAdapter
from app.services.chat import ChatPipeline
from app.services.insights import AlumniInsights
from app.services.search import AlumniSearch
from app.setting import settings
from milo.retrieval.utils import DEFAULT_CALL_SITES, resolve_retrieval_settings

load_dotenv()

logger = logging.getLogger(__name__)


def _load_cfg(cfg_path: Optional[str | Path] = None) -> Dict[str, Any]:
    p = Path(cfg_path or os.environ.get("MILO_RUNTIME") or settings.runtime_config).expanduser()
    if not p.exists():
        logger.warning("runtime config not found at %s; using built-in defaults", p)
        return {}
    with p.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _build_embedder(cfg: Dict[str, Any]) -> OpenAIEmbeddingAdapter:
    emb_cfg = cfg.get("embedder", {}) or {}
    adapter = (emb_cfg.get("adapter") or "openai").lower()
    if adapter != "openai":
        raise ValueError(f"Unknown embedder.adapter: {adapter}")
    return OpenAIEmbeddingAdapter(
        model=emb_cfg.get("model", settings.embedding_model),
        dimensions=int(emb_cfg.get("dimensions", settings.embedding_dimensions)),
        api_key=settings.openai_api_key,
    )


def _build_vector_store(cfg: Dict[str, Any]) -> PineconeStoreAdapter:
    vs_cfg = cfg.get("vector_store", {}) or {}
    adapter = (vs_cfg.get("adapter") or "pinecone").lower()
    if adapter != "pinecone":
        raise ValueError(f"Unknown vector_store.adapter: {adapter}")
    return PineconeStoreAdapter(
        index_name=vs_cfg.get("index", settings.pinecone_index),
        api_key=settings.pinecone_api_key,
        namespace=vs_cfg.get("namespace", settings.pinecone_namespace),
    )


def _build_relational(cfg: Dict[str, Any]) -> SQLiteStoreAdapter:
    rel_cfg = cfg.get("relational", {}) or {}
    adapter = (rel_cfg.get("adapter") or "sqlite").lower()
    if adapter != "sqlite":
        raise ValueError(f"Unknown relational.adapter: {adapter}")
    return SQLiteStoreAdapter(
        db_path=rel_cfg.get("path", settings.sqlite_path),
        timeout=float(rel_cfg.get("timeout", 10.0)),
    )


def _build_llm(cfg: Dict[str, Any]) -> OpenAIAdapter:
    llm_cfg = cfg.get("llm", {}) or {}
    adapter = (llm_cfg.get("adapter") or "openai").lower()
    if adapter != "openai":
        raise ValueError(f"Unknown llm.adapter: {adapter}")
    return OpenAIAdapter(model=llm_cfg.get("model", settings.chat_model), api_key=settings.openai_api_key)


def search_from_cfg(cfg: Dict[str, Any], emb, store, sql) -> AlumniSearch:
    """Wire an AlumniSearch from config sections and already-built ports."""
    r_cfg = cfg.get("retrieval", {}) or {}
    call_sites = {
        name: resolve_retrieval_settings(r_cfg.get(name), default)
        for name, default in DEFAULT_CALL_SITES.items()
    }
    fb_cfg = cfg.get("fallback", {}) or {}
    return AlumniSearch(
        emb,
        store,
        sql,
        call_sites=call_sites,
        fallback_rows=int(fb_cfg.get("rows", 10)),
        company_rows=int(fb_cfg.get("company_rows", 5)),
        metadata_filter=bool(r_cfg.get("metadata_filter", False)),
    )


@lru_cache(maxsize=1)
def build_search(cfg_path: Optional[str] = None) -> AlumniSearch:
    cfg = _load_cfg(cfg_path)
    return search_from_cfg(cfg, _build_embedder(cfg), _build_vector_store(cfg), _build_relational(cfg))


@lru_cache(maxsize=1)
def build_chat(cfg_path: Optional[str] = None) -> ChatPipeline:
    cfg = _load_cfg(cfg_path)
    stream_cfg = cfg.get("stream", {}) or {}
    char_delay = float(stream_cfg.get("char_delay_ms", 20)) / 1000.0
    return ChatPipeline(_build_llm(cfg), build_search(cfg_path), char_delay=char_delay)


@lru_cache(maxsize=1)
def build_insights(cfg_path: Optional[str] = None) -> AlumniInsights:
    cfg = _load_cfg(cfg_path)
    return AlumniInsights(_build_relational(cfg), llm=_build_llm(cfg))


def build_retriever(cfg_path: Optional[str] = None, call_site: str = "alumni"):
    """LangChain view over the cached AlumniSearch."""
    from milo.langchain_adapters import AlumniRetriever

    return AlumniRetriever(search=build_search(cfg_path), call_site=call_site)
