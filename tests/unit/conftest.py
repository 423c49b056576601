"""Pytest configuration and fixtures for unit tests."""
import httpx
import pytest

from ragfs.embedding_client import EmbeddingClient
from ragfs.rag.chunker import SentenceChunker
from ragfs.rag.store_infinity import InfinityStore
from tests.unit.helpers import (
    EMBEDDING_URL,
    STORE_URL,
    FakeEmbedder,
    FakeStore,
    Recorder,
    RegexSentenceTokenizer,
)


@pytest.fixture
def tokenizer():
    return RegexSentenceTokenizer()


@pytest.fixture
def chunker(tokenizer):
    return SentenceChunker(tokenizer=tokenizer)


@pytest.fixture
def fake_embedder():
    return FakeEmbedder()


@pytest.fixture
def fake_store():
    return FakeStore()


@pytest.fixture
def embedding_client():
    """Factory: EmbeddingClient whose HTTP calls go to a Recorder."""

    def factory(*responses):
        recorder = Recorder(*responses)
        client = EmbeddingClient(
            base_url=EMBEDDING_URL,
            model="test-model",
            http_client=httpx.Client(transport=httpx.MockTransport(recorder)),
        )
        return client, recorder

    return factory


@pytest.fixture
def store_client():
    """Factory: InfinityStore whose HTTP calls go to a Recorder."""

    def factory(*responses):
        recorder = Recorder(*responses)
        store = InfinityStore(
            base_url=STORE_URL,
            database="rfs",
            table="data",
            http_client=httpx.Client(transport=httpx.MockTransport(recorder)),
        )
        return store, recorder

    return factory
