"""OpenAI embeddings service."""

from typing import Any

import numpy as np
from openai import OpenAI

from .config import config

logger = config.get_logger(__name__)


class EmbeddingService:
    """Embeds segments and queries with one OpenAI embedding model.

    The same instance must serve ingestion and query time for a given store,
    otherwise the vectors live in different spaces.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        dimensions: int | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize the EmbeddingService with OpenAI API key and model.

        Args:
            api_key: OpenAI API key. If None,
                reads from OPENAI_API_KEY environment variable.
            model: Embedding model name. If None, uses config.EMBEDDING_MODEL.
            dimensions: Requested output dimensionality, for models that
                support shortening. If None, the model default is used.
            timeout: Per-request timeout in seconds. If None, uses
                config.REQUEST_TIMEOUT.
        """
        api_key = api_key or config.get_openai_api_key()
        default_headers = config.get_api_headers()
        self.client = OpenAI(
            api_key=api_key,
            base_url=config.OPENAI_BASE_URL,
            default_headers=default_headers or None,
            timeout=timeout if timeout is not None else config.REQUEST_TIMEOUT,
        )
        self.model = model or config.EMBEDDING_MODEL
        self.dimensions = dimensions

    def _request(self, payload: str | list[str]) -> list[np.ndarray]:
        kwargs: dict[str, Any] = {"model": self.model, "input": payload}
        if self.dimensions is not None:
            kwargs["dimensions"] = self.dimensions
        response = self.client.embeddings.create(**kwargs)
        return [np.array(data.embedding, dtype="float32") for data in response.data]

    def embed(self, text: str) -> np.ndarray:
        """Get embedding for a single text.

        Returns:
            np.ndarray: The embedding vector for the input text.
        """
        try:
            embedding = self._request(text)[0]
        except Exception:
            logger.exception("Error generating embedding")
            raise
        else:
            return embedding

    def embed_batch(
        self,
        texts: list[str],
        batch_size: int = 100,
    ) -> list[np.ndarray]:
        """Get embeddings for multiple texts in batches.

        Args:
            texts: List of input texts to generate embeddings for.
            batch_size: Number of texts sent per API call.

        Returns:
            list[np.ndarray]: One embedding vector per input text, in order.

        Raises:
            ValueError: If the API returns a different number of vectors than
                texts sent.
        """
        embeddings: list[np.ndarray] = []

        for i in range(0, len(texts), batch_size):
            batch_texts = texts[i : i + batch_size]
            try:
                batch_embeddings = self._request(batch_texts)
            except Exception:
                logger.exception("Error generating batch embeddings")
                raise
            if len(batch_embeddings) != len(batch_texts):
                msg = (
                    f"Embedding API returned {len(batch_embeddings)} vectors "
                    f"for {len(batch_texts)} texts"
                )
                raise ValueError(msg)
            embeddings.extend(batch_embeddings)
            logger.debug("Generated embeddings for batch %d", i // batch_size + 1)

        return embeddings
