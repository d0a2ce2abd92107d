"""ragrouter - selective retrieval augmentation for conversational QA."""

from .augmentor import RetrievalAugmentor
from .conversation import ChatMemory, ConversationSession
from .document_processing import DocumentLoader, TextChunker
from .embeddings import EmbeddingService
from .exceptions import (
    ConfigurationError,
    GenerationError,
    RagRouterError,
    RetrievalError,
    SourceUnavailableError,
)
from .llm import ChatModel
from .models import (
    AugmentedRequest,
    ConversationTurn,
    Document,
    EmbeddingMatch,
    Query,
    RetrievedContent,
    TextSegment,
    WebSearchResult,
)
from .pipeline import IngestionPipeline
from .retrievers import (
    ContentRetriever,
    EmbeddingStoreContentRetriever,
    WebSearchContentRetriever,
)
from .routing import (
    LanguageModelQueryRouter,
    QueryRouter,
    StaticQueryRouter,
    TopicGateQueryRouter,
)
from .vector_store import FaissEmbeddingStore, NumpyEmbeddingStore, get_embedding_store
from .web_search import TavilyWebSearchEngine

__all__ = [
    "AugmentedRequest",
    "ChatMemory",
    "ChatModel",
    "ConfigurationError",
    "ContentRetriever",
    "ConversationSession",
    "ConversationTurn",
    "Document",
    "DocumentLoader",
    "EmbeddingMatch",
    "EmbeddingService",
    "EmbeddingStoreContentRetriever",
    "FaissEmbeddingStore",
    "GenerationError",
    "IngestionPipeline",
    "LanguageModelQueryRouter",
    "NumpyEmbeddingStore",
    "Query",
    "QueryRouter",
    "RagRouterError",
    "RetrievalAugmentor",
    "RetrievalError",
    "RetrievedContent",
    "SourceUnavailableError",
    "StaticQueryRouter",
    "TavilyWebSearchEngine",
    "TextChunker",
    "TextSegment",
    "TopicGateQueryRouter",
    "WebSearchContentRetriever",
    "WebSearchResult",
    "get_embedding_store",
]
