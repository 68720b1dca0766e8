#!/usr/bin/env python
"""
Alumni search CLI that matches the API stack.
- Uses the same factory as /api/search, so the vector path, SQL fallback and ranking are identical.
- Optional profile fields are blended into the query the same way the API does it.

Usage:
  python -m scripts.query_alumni --q "product management fintech" --major Economics
  python -m scripts.query_alumni --q "biotech" --call-site similar --json

Example:
  >>> python -m scripts.query_alumni --q "quant trading"
   1  87.0  Jane Doe | Quant Researcher at Jane Street | Mathematics '19 [vector]
"""

import argparse
import asyncio
import json

from app.factory import build_search
from app.services.formulate import formulate


def _profile(args) -> dict:
    profile = {
        "major": args.major,
        "interests": args.interests,
        "skills": args.skills,
        "location": args.location,
    }
    return {k: v for k, v in profile.items() if v}


def format_line(rank: int, result, source: str) -> str:
    year = result.graduation_year
    year = f"'{str(year)[-2:]}" if str(year).isdigit() else str(year)
    return (
        f"{rank:>2} {result.relevance_score:>5.1f}  {result.name} | "
        f"{result.current_role} at {result.current_company} | {result.major} {year} [{source}]"
    )


def main(argv=None, search=None):
    ap = argparse.ArgumentParser(description="Search Yale alumni")
    ap.add_argument("--q", required=True, help="query text")
    ap.add_argument("--major")
    ap.add_argument("--interests")
    ap.add_argument("--skills")
    ap.add_argument("--location")
    ap.add_argument("--call-site", default="alumni", choices=("alumni", "similar", "company"))
    ap.add_argument("--config", help="runtime YAML (defaults to MILO_RUNTIME or configs/runtime.yaml)")
    ap.add_argument("--json", action="store_true", help="output JSON lines instead of pretty text")
    ap.add_argument("--show-reason", action="store_true", help="print match_reason under each result")
    args = ap.parse_args(argv)

    search = search or build_search(args.config)
    profile = _profile(args)
    search_text = formulate(args.q, profile)
    outcome = asyncio.run(search.search_with_source(search_text, profile, call_site=args.call_site))

    if args.json:
        for r in outcome.results:
            print(json.dumps({**r.model_dump(), "source": outcome.source}, ensure_ascii=False))
        return outcome

    if not outcome.results:
        print(f"No alumni found for: {search_text}")
        return outcome

    for rank, r in enumerate(outcome.results, 1):
        print(format_line(rank, r, outcome.source))
        if args.show_reason:
            print(f"    {r.match_reason}")
    return outcome


if __name__ == "__main__":
    main()
