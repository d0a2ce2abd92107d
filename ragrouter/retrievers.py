"""Content retrievers: one knowledge source behind a uniform interface."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from .config import config
from .models import Query, RetrievedContent, TextSegment

if TYPE_CHECKING:
    from .embeddings import EmbeddingService
    from .vector_store import EmbeddingStore
    from .web_search import TavilyWebSearchEngine

logger = config.get_logger(__name__)


class ContentRetriever(Protocol):
    """Anything that can fetch scored content for a query."""

    name: str

    def retrieve(
        self,
        query: Query,
        max_results: int | None = None,
        min_score: float | None = None,
    ) -> list[RetrievedContent]: ...


class EmbeddingStoreContentRetriever:
    """Vector search over one embedding store.

    A retriever whose store is None (its source failed to ingest) is
    permanently empty.
    """

    def __init__(
        self,
        store: EmbeddingStore | None,
        embedding_service: EmbeddingService,
        *,
        name: str,
        max_results: int | None = None,
        min_score: float | None = None,
    ) -> None:
        """Bind the retriever to a store and the model that built it.

        Args:
            store: Store to search, or None if the source is unavailable.
            embedding_service: Must be the service used at ingestion time.
            name: Source identifier attached to every result.
            max_results: Result cap. If None, uses config.RETRIEVER_MAX_RESULTS.
            min_score: Relevance floor in [0, 1]. If None, uses
                config.RETRIEVER_MIN_SCORE.
        """
        self.store = store
        self.embedding_service = embedding_service
        self.name = name
        self.max_results = (
            max_results if max_results is not None else config.RETRIEVER_MAX_RESULTS
        )
        self.min_score = (
            min_score if min_score is not None else config.RETRIEVER_MIN_SCORE
        )

    def __repr__(self) -> str:
        return f"EmbeddingStoreContentRetriever(name={self.name!r})"

    def retrieve(
        self,
        query: Query,
        max_results: int | None = None,
        min_score: float | None = None,
    ) -> list[RetrievedContent]:
        """Embed the query and return the closest segments above the floor.

        Args:
            query: The user query.
            max_results: Overrides the bound result cap for this call.
            min_score: Overrides the bound relevance floor for this call.

        Returns:
            At most ``max_results`` items, best first; never padded.
        """
        if self.store is None or len(self.store) == 0:
            logger.debug("Retriever '%s' has no indexed content", self.name)
            return []

        query_embedding = self.embedding_service.embed(query.text)
        matches = self.store.search(
            query_embedding,
            max_results=max_results if max_results is not None else self.max_results,
            min_score=min_score if min_score is not None else self.min_score,
        )
        logger.info(
            "Retriever '%s' found %d segments for query", self.name, len(matches)
        )
        return [
            RetrievedContent(segment=match.segment, score=match.score, source=self.name)
            for match in matches
        ]


class WebSearchContentRetriever:
    """Live web search; results are returned in provider order, unfiltered."""

    def __init__(
        self,
        engine: TavilyWebSearchEngine,
        *,
        name: str = "web",
        max_results: int | None = None,
    ) -> None:
        self.engine = engine
        self.name = name
        self.max_results = (
            max_results if max_results is not None else config.WEB_SEARCH_MAX_RESULTS
        )

    def __repr__(self) -> str:
        return f"WebSearchContentRetriever(name={self.name!r})"

    def retrieve(
        self,
        query: Query,
        max_results: int | None = None,
        min_score: float | None = None,  # noqa: ARG002
    ) -> list[RetrievedContent]:
        limit = max_results if max_results is not None else self.max_results
        results = self.engine.search(query.text, max_results=limit)
        contents: list[RetrievedContent] = []
        for rank, result in enumerate(results[:limit]):
            text = f"{result.title}\n{result.snippet}" if result.title else result.snippet
            contents.append(
                RetrievedContent(
                    segment=TextSegment(
                        text=text,
                        metadata={"url": result.url, "title": result.title, "rank": rank},
                    ),
                    score=result.score,
                    source=self.name,
                )
            )
        logger.info("Retriever '%s' returned %d web results", self.name, len(contents))
        return contents
