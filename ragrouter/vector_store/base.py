"""Shared bookkeeping for in-memory embedding stores."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

import numpy as np

from ragrouter.config import config
from ragrouter.models import EmbeddingMatch, TextSegment

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = config.get_logger(__name__)


def relevance_score(cosine: float | np.ndarray) -> float | np.ndarray:
    """Map cosine similarity in [-1, 1] onto a relevance score in [0, 1].

    Accepts a scalar or an array of similarities.

    Returns:
        ``(cosine + 1) / 2``, clipped to [0, 1]; a float for scalar input.
    """
    scores = np.clip((np.asarray(cosine, dtype="float64") + 1.0) / 2.0, 0.0, 1.0)
    return float(scores) if scores.ndim == 0 else scores


class BaseEmbeddingStore:
    """Common id assignment, segment bookkeeping and result ordering.

    Subclasses hold the vectors and implement ``_add_vectors`` and
    ``_cosine_scores``. Every entry gets an opaque string id plus a dense
    integer position that records insertion order.
    """

    backend = "base"

    def __init__(self) -> None:
        self.dimension: int | None = None
        self._ids: list[str] = []
        self._segments: list[TextSegment] = []

    def __len__(self) -> int:
        return len(self._segments)

    @staticmethod
    def _normalize(embeddings: np.ndarray) -> np.ndarray:
        """L2-normalize rows so inner product equals cosine similarity.

        Returns:
            float32 matrix; zero rows are left as zeros.
        """
        matrix = np.atleast_2d(np.asarray(embeddings, dtype="float32"))
        norms = np.linalg.norm(matrix, axis=1, keepdims=True)
        norms[norms == 0] = 1.0
        return matrix / norms

    def _check_dimension(self, dimension: int) -> None:
        if self.dimension is None:
            self.dimension = dimension
        elif dimension != self.dimension:
            msg = (
                f"Embedding dimension {dimension} does not match "
                f"store dimension {self.dimension}"
            )
            raise ValueError(msg)

    def add(self, embedding: np.ndarray, segment: TextSegment) -> str:
        """Insert one (embedding, segment) pair.

        Returns:
            The id assigned to the new entry.
        """
        return self.add_all([embedding], [segment])[0]

    def add_all(
        self,
        embeddings: Sequence[np.ndarray],
        segments: Sequence[TextSegment],
    ) -> list[str]:
        """Insert (embedding, segment) pairs in order.

        Returns:
            The ids assigned to the new entries, in input order.

        Raises:
            ValueError: If the inputs differ in length or in vector dimension.
        """
        if len(embeddings) != len(segments):
            msg = (
                f"Got {len(embeddings)} embeddings for {len(segments)} segments"
            )
            raise ValueError(msg)
        if not segments:
            return []

        matrix = self._normalize(np.vstack([np.ravel(e) for e in embeddings]))
        self._check_dimension(matrix.shape[1])

        first_position = len(self._segments)
        positions = np.arange(first_position, first_position + len(segments))
        self._add_vectors(matrix, positions)

        new_ids = [uuid.uuid4().hex for _ in segments]
        self._ids.extend(new_ids)
        self._segments.extend(segments)
        logger.debug("Added %d vectors to %s store", len(new_ids), self.backend)
        return new_ids

    def search(
        self,
        query_embedding: np.ndarray,
        max_results: int = 5,
        min_score: float = 0.0,
    ) -> list[EmbeddingMatch]:
        """Return up to ``max_results`` entries scoring at least ``min_score``.

        Ordered by descending relevance; equal scores keep insertion order.
        An empty store yields an empty list.

        Returns:
            Matches with relevance scores in [0, 1].
        """
        if max_results <= 0 or not self._segments:
            return []

        query = self._normalize(query_embedding)
        if query.shape[1] != self.dimension:
            msg = (
                f"Query dimension {query.shape[1]} does not match "
                f"store dimension {self.dimension}"
            )
            raise ValueError(msg)

        positions, cosines = self._cosine_scores(query[0])
        scores = relevance_score(np.atleast_1d(cosines))
        order = np.lexsort((positions, -scores))

        matches: list[EmbeddingMatch] = []
        for idx in order:
            if scores[idx] < min_score:
                break
            position = int(positions[idx])
            matches.append(
                EmbeddingMatch(
                    embedding_id=self._ids[position],
                    segment=self._segments[position],
                    score=float(scores[idx]),
                )
            )
            if len(matches) == max_results:
                break
        return matches

    def _add_vectors(self, matrix: np.ndarray, positions: np.ndarray) -> None:
        raise NotImplementedError

    def _cosine_scores(self, query: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        """Score the query against every stored vector.

        Returns:
            Parallel arrays of (insertion positions, cosine similarities).
        """
        raise NotImplementedError
