"""
Port interfaces for the external collaborators (embeddings, vector index, relational store, LLM).
Adapters in app/adapters implement these so providers can be swapped from configs/runtime.yaml.
Every port raises a subclass of UpstreamError; callers decide whether that is fatal.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Tuple


class UpstreamError(RuntimeError):
    """An external service call failed (quota, auth, network, bad request)."""


class EmbeddingError(UpstreamError):
    pass


class IndexQueryError(UpstreamError):
    pass


class QueryError(UpstreamError):
    pass


class CompletionError(UpstreamError):
    pass


class EmbedderPort(ABC):
    @abstractmethod
    def embed_query(self, text: str) -> List[float]:
        ...

    def embed_texts(self, texts: List[str]) -> List[List[float]]:
        return [self.embed_query(t) for t in texts]


class VectorStorePort(ABC):
    @abstractmethod
    def query(
        self,
        vector: List[float],
        top_k: int,
        include_metadata: bool = True,
        filter: Optional[Dict[str, Any]] = None,
    ) -> List[Dict[str, Any]]:
        """Return hits shaped like {"id": str, "score": float, "metadata": dict}."""

    def upsert(self, records: List[Dict[str, Any]]) -> int:
        raise NotImplementedError(f"{type(self).__name__} is read-only")


class RelationalStorePort(ABC):
    @abstractmethod
    def query(self, sql: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        ...


class LLMPort(ABC):
    @abstractmethod
    def chat(self, system: str, user: str, temperature: float, max_tokens: int) -> Tuple[str, Dict]:
        ...
