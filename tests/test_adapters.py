import pytest

from app.adapters.embed_openai import OpenAIEmbeddingAdapter
from app.adapters.llm_openai import OpenAIAdapter
from app.adapters.vector_pinecone import PineconeStoreAdapter
from app.ports import CompletionError, EmbeddingError, IndexQueryError


@pytest.fixture
def no_keys(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("PINECONE_API_KEY", raising=False)


def test_adapters_construct_without_credentials(no_keys):
    OpenAIEmbeddingAdapter()
    OpenAIAdapter(model="gpt-4o")
    PineconeStoreAdapter("yale-alumni")


def test_missing_openai_key_is_an_embedding_error(no_keys):
    with pytest.raises(EmbeddingError):
        OpenAIEmbeddingAdapter().embed_query("fintech")


def test_missing_openai_key_is_a_completion_error(no_keys):
    with pytest.raises(CompletionError):
        OpenAIAdapter(model="gpt-4o").chat("system", "user", 0.2, 10)


def test_missing_pinecone_key_is_an_index_error(no_keys):
    with pytest.raises(IndexQueryError):
        PineconeStoreAdapter("yale-alumni").query([0.1, 0.2], top_k=3)
