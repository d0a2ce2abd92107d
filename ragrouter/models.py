"""Data models for the routing and retrieval-augmentation pipeline."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Document:
    """Parsed text of a source document plus its metadata."""

    text: str
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def source(self) -> str:
        return str(self.metadata.get("source", "document"))


@dataclass(frozen=True)
class TextSegment:
    """A contiguous slice of a document, the unit of embedding and retrieval."""

    text: str
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Query:
    """The user's current question."""

    text: str
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class EmbeddingMatch:
    """A single nearest-neighbour hit returned by an embedding store."""

    embedding_id: str
    segment: TextSegment
    score: float


@dataclass(frozen=True)
class RetrievedContent:
    """A segment fetched for a query, with its score and source label.

    Web results carry the provider score when one is returned, otherwise None.
    """

    segment: TextSegment
    score: float | None
    source: str


@dataclass(frozen=True)
class WebSearchResult:
    """One ranked hit from a web search provider."""

    title: str
    snippet: str
    url: str
    score: float | None = None


@dataclass
class AugmentedRequest:
    """Chat messages ready for the generation model, plus the context used."""

    query: Query
    messages: list[dict[str, str]]
    contents: list[RetrievedContent] = field(default_factory=list)

    @property
    def has_context(self) -> bool:
        return bool(self.contents)


@dataclass
class ConversationTurn:
    """Represents a single turn in the conversation."""

    user_question: str
    bot_response: str
    retrieved_contexts: list[RetrievedContent]
    timestamp: str
