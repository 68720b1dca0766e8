"""
Adapter for OpenAI embeddings.
Requests a reduced dimensionality (512 by default) so it matches the Pinecone index.
The client is created on first use; a missing or rejected key surfaces as EmbeddingError.
"""

from typing import List, Optional

from openai import OpenAI, OpenAIError

from app.ports import EmbedderPort, EmbeddingError


class OpenAIEmbeddingAdapter(EmbedderPort):
    def __init__(self, model: str = "text-embedding-3-small", dimensions: int = 512, api_key: Optional[str] = None):
        self.model = model
        self.dimensions = dimensions
        self.api_key = api_key
        self._client = None

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            try:
                self._client = OpenAI(api_key=self.api_key) if self.api_key else OpenAI()
            except OpenAIError as e:
                raise EmbeddingError(f"OpenAI client unavailable: {e}") from e
        return self._client

    def _create(self, payload):
        client = self.client
        try:
            return client.embeddings.create(model=self.model, input=payload, dimensions=self.dimensions)
        except OpenAIError as e:
            raise EmbeddingError(f"embedding request failed: {e}") from e

    def embed_texts(self, texts: List[str]) -> List[List[float]]:
        """Embed a batch of texts into dense vectors."""
        if not texts:
            return []
        resp = self._create(texts)
        return [item.embedding for item in sorted(resp.data, key=lambda d: d.index)]

    def embed_query(self, text: str) -> List[float]:
        """Embed a single query text into a dense vector."""
        resp = self._create(text)
        if not resp.data:
            raise EmbeddingError("embedding response contained no vectors")
        return list(resp.data[0].embedding)
