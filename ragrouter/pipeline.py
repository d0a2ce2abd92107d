"""Ingestion pipeline: Load -> Split -> Embed -> Store."""

from pathlib import Path
from typing import cast

import numpy as np
from openai import OpenAIError
from pypdf.errors import PyPdfError

from .config import config
from .document_processing import DocumentLoader, TextChunker
from .embeddings import EmbeddingService
from .exceptions import SourceUnavailableError
from .models import Document
from .vector_store import EmbeddingStore, VectorBackend, get_embedding_store

logger = config.get_logger(__name__)


class IngestionPipeline:
    """Builds one fresh embedding store per document.

    A store is returned only once every segment has been embedded and
    inserted; any failure leaves the caller with nothing.
    """

    def __init__(
        self,
        embedding_service: EmbeddingService,
        chunk_size: int | None = None,
        overlap: int | None = None,
        vector_backend: VectorBackend | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            embedding_service: Model used for segments; retrievers over the
                resulting stores must embed queries with the same service.
            chunk_size: Size of text chunks. If None, uses config.CHUNK_SIZE.
            overlap: Overlap between chunks. If None, uses config.CHUNK_OVERLAP.
            vector_backend: Store backend ("faiss" | "numpy"). If None, uses
                config.VECTOR_BACKEND.
        """
        if chunk_size is None:
            chunk_size = config.CHUNK_SIZE
        if overlap is None:
            overlap = config.CHUNK_OVERLAP

        self.chunker = TextChunker(chunk_size=chunk_size, overlap=overlap)
        self.embedding_service = embedding_service
        backend_value = vector_backend or config.VECTOR_BACKEND
        self.vector_backend = cast("VectorBackend", backend_value.lower())

    def ingest(self, document: Document) -> EmbeddingStore:
        """Split, embed and index a parsed document.

        Returns:
            A populated embedding store holding every segment of the document.

        Raises:
            SourceUnavailableError: If the document has no text.
        """
        if not document.text.strip():
            raise SourceUnavailableError(document.source, "document is empty")

        segments = self.chunker.split(document)
        embeddings: list[np.ndarray] = self.embedding_service.embed_batch(
            [segment.text for segment in segments]
        )

        store = get_embedding_store(self.vector_backend)
        store.add_all(embeddings, segments)
        logger.info(
            "Ingested '%s': %d segments added to %s store",
            document.source,
            len(segments),
            store.backend,
        )
        return store

    def ingest_file(self, file_path: Path) -> EmbeddingStore:
        """Load a file from disk and ingest it.

        Returns:
            A populated embedding store for the file.

        Raises:
            SourceUnavailableError: If the file is missing, unreadable, of an
                unsupported type, cannot be parsed, or its segments cannot
                be embedded.
        """
        logger.info("Starting ingestion for document: %s", file_path)
        try:
            document = DocumentLoader.load_document(Path(file_path))
        except (OSError, UnicodeDecodeError, ValueError, PyPdfError) as e:
            raise SourceUnavailableError(str(file_path), str(e)) from e
        try:
            return self.ingest(document)
        except (OpenAIError, ValueError) as e:
            logger.exception("Embedding failed for document: %s", file_path)
            raise SourceUnavailableError(str(file_path), str(e)) from e
