"""Tavily web search client over httpx."""

from typing import Any

import httpx

from .config import config
from .exceptions import RetrievalError
from .models import WebSearchResult

logger = config.get_logger(__name__)


class TavilyWebSearchEngine:
    """Minimal client for the Tavily search API.

    Sends ``POST /search`` with the API key in the JSON body and returns the
    provider-ranked hits as ``WebSearchResult`` objects, in the order received.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the search client.

        Args:
            api_key: Tavily API key. If None, reads TAVILY_API_KEY.
            base_url: API root. If None, uses config.TAVILY_BASE_URL.
            timeout: Request timeout in seconds. If None, uses
                config.REQUEST_TIMEOUT.
            transport: Optional httpx transport, used to stub the API in tests.
        """
        self.api_key = api_key or config.get_tavily_api_key()
        self.base_url = (base_url or config.TAVILY_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else config.REQUEST_TIMEOUT
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=self.timeout,
            headers=config.get_api_headers(),
            transport=transport,
        )

    def search(self, query: str, max_results: int = 5) -> list[WebSearchResult]:
        """Run one web search.

        Args:
            query: Search text.
            max_results: Number of hits requested from the provider.

        Returns:
            Ranked list of results, possibly empty.

        Raises:
            RetrievalError: On transport errors, timeouts, or non-2xx responses.
        """
        payload: dict[str, Any] = {
            "api_key": self.api_key,
            "query": query,
            "max_results": max_results,
        }
        try:
            response = self._client.post("/search", json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            logger.error("Web search timed out after %ss", self.timeout)
            raise RetrievalError(f"Web search timed out: {e}") from e
        except httpx.HTTPStatusError as e:
            logger.error("Web search returned HTTP %s", e.response.status_code)
            raise RetrievalError(
                f"Web search failed with status {e.response.status_code}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Web search request failed: %s", e)
            raise RetrievalError(f"Web search failed: {e}") from e

        results = [
            WebSearchResult(
                title=item.get("title") or "",
                snippet=item.get("content") or "",
                url=item.get("url") or "",
                score=item.get("score"),
            )
            for item in data.get("results", [])
        ]
        logger.debug("Web search returned %d results", len(results))
        return results[:max_results]

    def close(self) -> None:
        """Release the underlying HTTP connection pool."""
        self._client.close()
