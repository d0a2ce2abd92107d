"""Embedding store backends and factory."""

from __future__ import annotations

from typing import Literal

from ragrouter.config import config

from .base import BaseEmbeddingStore, relevance_score
from .faiss_store import FaissEmbeddingStore
from .numpy_store import NumpyEmbeddingStore

VectorBackend = Literal["faiss", "numpy"]

EmbeddingStore = FaissEmbeddingStore | NumpyEmbeddingStore


def get_embedding_store(store: VectorBackend | None = None) -> EmbeddingStore:
    """Return a fresh, empty embedding store.

    Args:
        store: Backend name ("faiss" | "numpy"). If None, uses
            config.VECTOR_BACKEND.

    Raises:
        ValueError: If an unsupported backend is requested.
    """
    backend = (store if store is not None else config.VECTOR_BACKEND).lower()

    if backend == "faiss":
        return FaissEmbeddingStore()

    if backend == "numpy":
        return NumpyEmbeddingStore()

    msg = f"Unsupported vector store backend: {store}"
    raise ValueError(msg)


__all__ = [
    "BaseEmbeddingStore",
    "EmbeddingStore",
    "FaissEmbeddingStore",
    "NumpyEmbeddingStore",
    "VectorBackend",
    "get_embedding_store",
    "relevance_score",
]
