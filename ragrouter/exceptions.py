"""Error taxonomy for the routing and retrieval-augmentation pipeline."""


class RagRouterError(Exception):
    """Base class for all errors raised by ragrouter."""


class ConfigurationError(RagRouterError, ValueError):
    """Missing credential or invalid parameter detected at startup."""


class SourceUnavailableError(RagRouterError):
    """A document could not be loaded, parsed, or embedded."""

    def __init__(self, source: str, reason: str) -> None:
        """Record the failing source and why it failed."""
        self.source = source
        self.reason = reason
        super().__init__(f"Source unavailable: {source} ({reason})")


class RetrievalError(RagRouterError):
    """A store or search service failed while fetching content."""


class GenerationError(RagRouterError):
    """The final answer-generation call failed or timed out."""
