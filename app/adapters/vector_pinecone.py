"""
Adapter for a Pinecone serverless index holding one vector per alumni profile.
Implements VectorStorePort; search only reads, upsert is used by scripts/build_index.py.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pinecone import Pinecone

from app.ports import VectorStorePort, IndexQueryError


def _field(obj: Any, name: str, default: Any = None) -> Any:
    # SDK responses are objects; older clients and mocks hand back dicts
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)


class PineconeStoreAdapter(VectorStorePort):
    def __init__(self, index_name: str, api_key: Optional[str] = None, namespace: Optional[str] = None):
        if not index_name:
            raise ValueError("Pinecone index name is required (PINECONE_INDEX)")
        self.index_name = index_name
        self.api_key = api_key
        self.namespace = namespace or None
        self._index = None

    @property
    def index(self):
        # connected on first use so a missing or rejected key degrades like any other query failure
        if self._index is None:
            try:
                pc = Pinecone(api_key=self.api_key) if self.api_key else Pinecone()
                self._index = pc.Index(self.index_name)
            except Exception as e:
                raise IndexQueryError(f"Pinecone index {self.index_name!r} unavailable: {e}") from e
        return self._index

    def query(
        self,
        vector: List[float],
        top_k: int,
        include_metadata: bool = True,
        filter: Optional[Dict[str, Any]] = None,
    ) -> List[Dict[str, Any]]:
        kwargs: Dict[str, Any] = {
            "vector": list(vector),
            "top_k": int(top_k),
            "include_metadata": include_metadata,
        }
        if filter:
            kwargs["filter"] = filter
        if self.namespace:
            kwargs["namespace"] = self.namespace

        try:
            resp = self.index.query(**kwargs)
        except Exception as e:
            raise IndexQueryError(f"Pinecone query on {self.index_name!r} failed: {e}") from e

        hits = []
        for match in _field(resp, "matches", None) or []:
            score = _field(match, "score")
            hits.append({
                "id": _field(match, "id"),
                "score": float(score) if score is not None else None,
                "metadata": dict(_field(match, "metadata", None) or {}),
            })
        return hits

    def upsert(self, records: List[Dict[str, Any]]) -> int:
        """Upsert records shaped like {"id", "values", "metadata"}; returns the upserted count."""
        if not records:
            return 0
        try:
            resp = self.index.upsert(vectors=records, namespace=self.namespace) if self.namespace \
                else self.index.upsert(vectors=records)
        except Exception as e:
            raise IndexQueryError(f"Pinecone upsert on {self.index_name!r} failed: {e}") from e
        count = _field(resp, "upserted_count", None)
        return int(count) if count is not None else len(records)
