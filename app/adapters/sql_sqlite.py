"""
Adapter for the Yale alumni SQLite dataset (tables: people, educations, experiences).
Connections are opened read-only, one per query, so concurrent requests never share a handle.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Any, Dict, List, Sequence

from app.ports import RelationalStorePort, QueryError


class SQLiteStoreAdapter(RelationalStorePort):
    def __init__(self, db_path: str | Path, timeout: float = 10.0):
        self.db_path = Path(db_path).expanduser()
        self.timeout = timeout

    def _connect(self) -> sqlite3.Connection:
        if not self.db_path.exists():
            raise QueryError(f"alumni database not found: {self.db_path}")
        uri = f"{self.db_path.resolve().as_uri()}?mode=ro"
        conn = sqlite3.connect(uri, uri=True, timeout=self.timeout, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def query(self, sql: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        try:
            conn = self._connect()
        except sqlite3.Error as e:
            raise QueryError(f"could not open alumni database {self.db_path}: {e}") from e
        try:
            rows = conn.execute(sql, tuple(params)).fetchall()
        except sqlite3.Error as e:
            raise QueryError(f"alumni query failed: {e}") from e
        finally:
            conn.close()
        return [dict(r) for r in rows]
