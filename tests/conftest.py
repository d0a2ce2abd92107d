"""Test configuration and fixtures for ragrouter tests.

This module provides reusable test fixtures organized by functionality:
- Constants and test data
- Deterministic embedding and chat model fakes
- OpenAI response helpers
- Ingestion, retriever and session factories
"""

import hashlib
import re
from collections.abc import Callable
from pathlib import Path
from unittest.mock import Mock

import numpy as np
import pytest

from ragrouter import (
    ChatMemory,
    ChatModel,
    ConversationTurn,
    EmbeddingService,
    EmbeddingStoreContentRetriever,
    IngestionPipeline,
    RetrievalAugmentor,
    RetrievedContent,
    TextSegment,
)

PROJECT_ROOT = Path(__file__).resolve().parent.parent
TEST_DATA_DIR = Path(__file__).resolve().parent / "data"


class TestConstants:
    """Centralized test constants shared across the test suite."""

    TEST_API_KEY = "test-key"
    TEST_EMBEDDING_MODEL = "text-embedding-3-small"
    TEST_CHAT_MODEL = "gpt-test"
    EMBEDDING_DIMENSION = 64

    CHUNK_SIZE = 300
    CHUNK_OVERLAP = 30
    MAX_RESULTS = 2
    MIN_SCORE = 0.5


class KeywordEmbeddingService:
    """Bag-of-words embeddings hashed into a fixed number of buckets.

    Texts sharing words get a positive cosine similarity, unrelated texts
    score near zero, and results are identical across runs.
    """

    def __init__(self, dimension: int = TestConstants.EMBEDDING_DIMENSION) -> None:
        self.dimension = dimension
        self.calls: list[str] = []

    def _bucket(self, word: str) -> int:
        digest = hashlib.sha256(word.encode("utf-8")).digest()
        return int.from_bytes(digest[:4], byteorder="big") % self.dimension

    def embed(self, text: str) -> np.ndarray:
        self.calls.append(text)
        vector = np.zeros(self.dimension, dtype=np.float32)
        for word in re.findall(r"[a-z0-9]+", text.lower()):
            vector[self._bucket(word)] += 1.0
        norm = np.linalg.norm(vector)
        return vector / norm if norm else vector

    def embed_batch(self, texts: list[str]) -> list[np.ndarray]:
        return [self.embed(text) for text in texts]


class ScriptedChatModel:
    """Chat model fake returning canned replies and recording every prompt.

    ``replies`` is either a list consumed in order (an Exception instance is
    raised instead of returned) or a callable mapping the prompt to a reply.
    """

    def __init__(self, replies: list | Callable | None = None) -> None:
        self.replies = replies if replies is not None else []
        self.prompts: list = []

    def generate(self, prompt, *, max_tokens=None, temperature=None) -> str:  # noqa: ARG002
        self.prompts.append(prompt)
        if callable(self.replies):
            reply = self.replies(prompt)
        else:
            reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


class StubRetriever:
    """Retriever returning fixed content, or raising a given error."""

    def __init__(self, name: str, texts: list[str] | None = None, error=None) -> None:
        self.name = name
        self.texts = texts or []
        self.error = error
        self.calls = 0

    def __repr__(self) -> str:
        return f"StubRetriever({self.name!r})"

    def retrieve(self, query, max_results=None, min_score=None):  # noqa: ARG002
        self.calls += 1
        if self.error is not None:
            raise self.error
        score = 1.0
        contents = []
        for text in self.texts:
            contents.append(
                RetrievedContent(segment=TextSegment(text=text), score=score, source=self.name)
            )
            score -= 0.1
        return contents


def create_mock_openai_response(embeddings: list[list[float]]) -> Mock:
    """Create a mock OpenAI embeddings API response.

    Returns:
        Mock object representing OpenAI embeddings API response.
    """
    mock_response = Mock()
    mock_response.data = [Mock(embedding=emb) for emb in embeddings]
    return mock_response


def create_mock_chat_response(content: str | None) -> Mock:
    """Create a mock OpenAI chat completion response.

    Returns:
        Mock object representing OpenAI chat completion response.
    """
    mock_response = Mock()
    mock_response.choices = [Mock(message=Mock(content=content))]
    return mock_response


def make_turn(index: int) -> ConversationTurn:
    return ConversationTurn(
        user_question=f"Question {index}",
        bot_response=f"Answer {index}",
        retrieved_contexts=[],
        timestamp="2026-01-01T00:00:00+00:00",
    )


@pytest.fixture
def keyword_embedding_service():
    return KeywordEmbeddingService()


@pytest.fixture
def scripted_chat_model_factory():
    """Factory for ScriptedChatModel instances."""

    def _create(replies=None):  # noqa: ANN202
        return ScriptedChatModel(replies)

    return _create


@pytest.fixture
def stub_retriever_factory():
    def _create(name, texts=None, error=None):  # noqa: ANN202
        return StubRetriever(name, texts, error)

    return _create


@pytest.fixture
def embedding_service():
    return EmbeddingService(
        api_key=TestConstants.TEST_API_KEY, model=TestConstants.TEST_EMBEDDING_MODEL
    )


@pytest.fixture
def chat_model():
    return ChatModel(
        api_key=TestConstants.TEST_API_KEY, model=TestConstants.TEST_CHAT_MODEL
    )


@pytest.fixture(scope="session")
def sample_document_path():
    return TEST_DATA_DIR / "rag.txt"


@pytest.fixture(scope="session")
def threat_report_path():
    return TEST_DATA_DIR / "threat_report.txt"


@pytest.fixture
def ingestion_pipeline(keyword_embedding_service):
    return IngestionPipeline(
        keyword_embedding_service,
        chunk_size=TestConstants.CHUNK_SIZE,
        overlap=TestConstants.CHUNK_OVERLAP,
        vector_backend="faiss",
    )


@pytest.fixture
def document_retriever_factory(ingestion_pipeline):
    """Ingest a file and wrap the store in a retriever named after it."""

    def _create(path, max_results=TestConstants.MAX_RESULTS, min_score=TestConstants.MIN_SCORE):  # noqa: ANN202
        store = ingestion_pipeline.ingest_file(path)
        return EmbeddingStoreContentRetriever(
            store,
            ingestion_pipeline.embedding_service,
            name=path.name,
            max_results=max_results,
            min_score=min_score,
        )

    return _create


@pytest.fixture
def rag_retriever(document_retriever_factory, sample_document_path):
    return document_retriever_factory(sample_document_path)


@pytest.fixture
def memory_factory():
    def _create(max_turns=5, turns=0):  # noqa: ANN202
        memory = ChatMemory(max_turns=max_turns)
        for i in range(turns):
            memory.add(make_turn(i))
        return memory

    return _create


@pytest.fixture
def augmentor_factory():
    def _create(router, *, parallel=False):  # noqa: ANN202
        return RetrievalAugmentor(router, parallel=parallel)

    return _create
