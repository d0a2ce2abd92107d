"""Brute-force numpy embedding store."""

from __future__ import annotations

import numpy as np

from ragrouter.vector_store.base import BaseEmbeddingStore


class NumpyEmbeddingStore(BaseEmbeddingStore):
    """Keeps normalized vectors in one matrix and scores with a dot product."""

    backend = "numpy"

    def __init__(self) -> None:
        super().__init__()
        self.embeddings: np.ndarray | None = None

    def _add_vectors(self, matrix: np.ndarray, positions: np.ndarray) -> None:  # noqa: ARG002
        if self.embeddings is None:
            self.embeddings = matrix
        else:
            self.embeddings = np.vstack([self.embeddings, matrix])

    def _cosine_scores(self, query: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        if self.embeddings is None:
            return np.empty(0, dtype="int64"), np.empty(0, dtype="float32")
        cosines = self.embeddings @ query
        return np.arange(len(cosines)), cosines
