"""FAISS-backed in-memory embedding store."""

from __future__ import annotations

import faiss
import numpy as np

from ragrouter.config import config
from ragrouter.vector_store.base import BaseEmbeddingStore

logger = config.get_logger(__name__)


class FaissEmbeddingStore(BaseEmbeddingStore):
    """Exact inner-product search over normalized vectors with FAISS."""

    backend = "faiss"

    def __init__(self) -> None:
        """Start with no index; it is created on the first insert."""
        super().__init__()
        self.index: faiss.IndexIDMap | None = None

    def _init_index(self, dimension: int) -> None:
        """Initialize FAISS index for the first batch of vectors."""
        base_index = faiss.IndexFlatIP(dimension)
        self.index = faiss.IndexIDMap(base_index)
        logger.info("Initialized FAISS IndexIDMap with dimension %d", dimension)

    def _add_vectors(self, matrix: np.ndarray, positions: np.ndarray) -> None:
        if self.index is None:
            self._init_index(matrix.shape[1])
        ids_array = np.asarray(positions, dtype="int64")
        try:
            self.index.add_with_ids(matrix, ids_array)  # pyright: ignore[reportCallIssue,reportOptionalMemberAccess]
        except RuntimeError:
            logger.exception(
                "FAISS index does not support add_with_ids; ensure IndexIDMap is used."
            )
            raise

    def _cosine_scores(self, query: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        index = self.index
        if index is None or index.ntotal == 0:
            return np.empty(0, dtype="int64"), np.empty(0, dtype="float32")

        # Fetch every vector; tie order is applied by the caller.
        scores, vector_ids = index.search(  # pyright: ignore[reportCallIssue]
            query.reshape(1, -1).astype("float32"),
            index.ntotal,
        )
        keep = vector_ids[0] != -1  # faiss returns -1 for empty results
        return vector_ids[0][keep], scores[0][keep]
