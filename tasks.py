# tasks.py
# Invoke is the source of truth.
#   invoke api            -> run the FastAPI app (uvicorn)
#   invoke index          -> embed the SQLite alumni dataset into Pinecone
#   invoke query --q ...  -> CLI search through the same stack as /api/search
#   invoke test           -> pytest

from invoke import task
import os, sys, subprocess
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

PY       = sys.executable
API_HOST = os.environ.get("HOST", "0.0.0.0")
API_PORT = int(os.environ.get("PORT", "8000"))
DB_PATH  = Path(os.environ.get("SQLITE_PATH", "data/yale.db"))


def _run(cmd, env: dict | None = None, **kwargs):
    """Run shell cmd with repo root on PYTHONPATH, plus optional env overrides."""
    base = os.environ.copy()
    root = str(Path(".").resolve())
    base["PYTHONPATH"] = f'{root}{os.pathsep}{base.get("PYTHONPATH","")}'
    if env:
        base.update(env)
    print(f"$ {cmd}")
    return subprocess.run(cmd, shell=True, check=True, env=base, **kwargs)


@task
def api(c, reload=True):
    """Start FastAPI."""
    reload_flag = "--reload" if str(reload).lower() != "false" else ""
    _run(f'{PY} -m uvicorn app.main:app --host {API_HOST} --port {API_PORT} {reload_flag}')


@task
def index(c, batch=100, limit=0, yale_only=False, dry_run=False):
    """Embed people from the SQLite dataset and upsert them into Pinecone."""
    if not DB_PATH.exists():
        raise SystemExit(f"Alumni database not found at {DB_PATH}. Set SQLITE_PATH or drop yale.db into data/.")
    flags = " --yale-only" if yale_only else ""
    flags += " --dry-run" if dry_run else ""
    _run(f'{PY} -m scripts.build_index --db {DB_PATH} --batch {batch} --limit {limit}{flags}')


@task
def query(c, q, major="", call_site="alumni", json=False):
    """CLI search against the configured providers."""
    extra = f' --major "{major}"' if major else ""
    extra += " --json" if json else ""
    _run(f'{PY} -m scripts.query_alumni --q "{q}" --call-site {call_site}{extra}')


@task
def test(c, k=""):
    """Run the test suite (-k to filter)."""
    selector = f' -k "{k}"' if k else ""
    _run(f"{PY} -m pytest -q{selector}")
