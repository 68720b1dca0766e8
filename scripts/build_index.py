#!/usr/bin/env python
"""
Build the Pinecone alumni index from the SQLite dataset using the same adapters as the API.
Inputs:
  - SQLite database with people / educations tables (settings.sqlite_path by default)
Outputs:
  - Vectors upserted into the Pinecone index, one per person, with metadata the search reads:
    name, latest_position, current_company, city, linkedin_url, yale_major, yale_class,
    education_1, text_snippet and the yale_affiliated flag.
"""

import argparse
import logging
from typing import Any, Dict, Iterator, List

from dotenv import load_dotenv

from app.adapters.embed_openai import OpenAIEmbeddingAdapter
from app.adapters.sql_sqlite import SQLiteStoreAdapter
from app.adapters.vector_pinecone import PineconeStoreAdapter
from app.setting import settings
from milo.retrieval.sql import INDEX_PROFILES_SQL
from milo.retrieval.utils import is_yale_affiliated

logger = logging.getLogger("milo.build_index")


def snippet_for(row: Dict[str, Any]) -> str:
    parts = [
        row.get("name"),
        row.get("position"),
        f"at {row['current_company_name']}" if row.get("current_company_name") else None,
        row.get("location"),
        " ".join(str(v) for v in (row.get("education"), row.get("degree"), row.get("field")) if v) or None,
        row.get("about"),
    ]
    return " | ".join(str(p).strip() for p in parts if p and str(p).strip())


def to_metadata(row: Dict[str, Any]) -> Dict[str, Any]:
    """Pinecone metadata for one person; None values are dropped since the index rejects them."""
    md = {
        "name": row.get("name"),
        "latest_position": row.get("position"),
        "current_company": row.get("current_company_name"),
        "city": row.get("location"),
        "linkedin_url": row.get("url"),
        "yale_major": row.get("field"),
        "yale_class": str(row["end_year"]) if row.get("end_year") is not None else None,
        "education_1": row.get("education"),
        "text_snippet": snippet_for(row),
    }
    md = {k: v for k, v in md.items() if v not in (None, "")}
    md["yale_affiliated"] = is_yale_affiliated(md)
    return md


def unique_people(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """First row per person_id; later rows are extra Yale educations."""
    seen, out = set(), []
    for row in rows:
        pid = row.get("person_id")
        if pid is None or pid in seen:
            continue
        seen.add(pid)
        out.append(row)
    return out


def batched(items: List[Any], size: int) -> Iterator[List[Any]]:
    for i in range(0, len(items), max(1, size)):
        yield items[i:i + size]


def build_records(rows: List[Dict[str, Any]], emb, batch: int = 100) -> Iterator[List[Dict[str, Any]]]:
    """Yield upsert-ready batches of {"id", "values", "metadata"}."""
    for chunk in batched(rows, batch):
        metas = [to_metadata(r) for r in chunk]
        vectors = emb.embed_texts([m["text_snippet"] for m in metas])
        yield [
            {"id": str(r["person_id"]), "values": v, "metadata": m}
            for r, v, m in zip(chunk, vectors, metas)
        ]


def main(argv=None):
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    ap = argparse.ArgumentParser(description="Embed the alumni dataset into Pinecone")
    ap.add_argument("--db", default=str(settings.sqlite_path))
    ap.add_argument("--index", default=settings.pinecone_index)
    ap.add_argument("--namespace", default=settings.pinecone_namespace)
    ap.add_argument("--model", default=settings.embedding_model)
    ap.add_argument("--dimensions", type=int, default=settings.embedding_dimensions)
    ap.add_argument("--batch", type=int, default=100)
    ap.add_argument("--limit", type=int, default=0, help="index at most N people (0 = all)")
    ap.add_argument("--yale-only", action="store_true", help="skip people without a Yale education")
    ap.add_argument("--dry-run", action="store_true", help="embed nothing, just report what would be indexed")
    args = ap.parse_args(argv)

    rows = unique_people(SQLiteStoreAdapter(args.db).query(INDEX_PROFILES_SQL))
    if args.yale_only:
        rows = [r for r in rows if r.get("education")]
    if args.limit:
        rows = rows[:args.limit]
    if not rows:
        raise SystemExit(f"No people found in {args.db}.")

    if args.dry_run:
        yale = sum(1 for r in rows if to_metadata(r)["yale_affiliated"])
        print({"people": len(rows), "yale_affiliated": yale, "index": args.index})
        return

    emb = OpenAIEmbeddingAdapter(args.model, dimensions=args.dimensions, api_key=settings.openai_api_key)
    store = PineconeStoreAdapter(args.index, api_key=settings.pinecone_api_key, namespace=args.namespace)

    total = 0
    for records in build_records(rows, emb, args.batch):
        total += store.upsert(records)
        logger.info("upserted %d/%d", total, len(rows))

    print({"people": len(rows), "upserted": total, "index": args.index, "dim": args.dimensions})


if __name__ == "__main__":
    main()
