"""Configuration management for the ragrouter application."""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

from .exceptions import ConfigurationError

env_path = Path(__file__).parent.parent / ".env"

if env_path.exists():
    load_dotenv(env_path)

ROUTER_STRATEGIES = ("topic", "static", "classifier")


class Config:
    """Application configuration loaded from environment variables."""

    # OpenAI Configuration
    @classmethod
    def get_openai_api_key(cls) -> str:
        """Get OpenAI API key from environment variables.

        Returns:
            OpenAI API key from environment or empty string if not set.
        """
        return os.getenv("OPENAI_API_KEY", "")

    @classmethod
    def get_tavily_api_key(cls) -> str:
        """Get Tavily web search API key from environment variables.

        Returns:
            Tavily API key from environment or empty string if not set.
        """
        return os.getenv("TAVILY_API_KEY", "")

    OPENAI_BASE_URL: str | None = os.getenv("OPENAI_BASE_URL")
    TAVILY_BASE_URL: str = os.getenv("TAVILY_BASE_URL", "https://api.tavily.com")

    # Logging Configuration
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    OPENAI_LOG_LEVEL: str = os.getenv("OPENAI_LOG_LEVEL", "WARNING").upper()
    HTTPX_LOG_LEVEL: str = os.getenv("HTTPX_LOG_LEVEL", "WARNING").upper()

    # Application Settings
    REQUEST_TIMEOUT: float = float(os.getenv("REQUEST_TIMEOUT", "30.0"))
    END_SENTINEL: str = os.getenv("END_SENTINEL", "exit")

    # Ingestion Configuration
    CHUNK_SIZE: int = int(os.getenv("CHUNK_SIZE", "300"))
    CHUNK_OVERLAP: int = int(os.getenv("CHUNK_OVERLAP", "30"))
    EMBEDDING_MODEL: str = os.getenv("EMBEDDING_MODEL", "text-embedding-3-small")
    VECTOR_BACKEND: str = os.getenv("VECTOR_BACKEND", "faiss").lower()

    # Retrieval Configuration
    RETRIEVER_MAX_RESULTS: int = int(os.getenv("RETRIEVER_MAX_RESULTS", "2"))
    RETRIEVER_MIN_SCORE: float = float(os.getenv("RETRIEVER_MIN_SCORE", "0.5"))
    WEB_SEARCH_MAX_RESULTS: int = int(os.getenv("WEB_SEARCH_MAX_RESULTS", "5"))

    # Chat Model Configuration
    CHAT_MODEL: str = os.getenv("CHAT_MODEL", "gpt-4.1-nano-2025-04-14")
    CHAT_MAX_TOKENS: int = int(os.getenv("CHAT_MAX_TOKENS", "500"))
    CHAT_TEMPERATURE: float = float(os.getenv("CHAT_TEMPERATURE", "0.3"))
    HISTORY_MAX_TURNS: int = int(os.getenv("HISTORY_MAX_TURNS", "5"))

    # Routing Configuration
    ROUTER_STRATEGY: str = os.getenv("ROUTER_STRATEGY", "topic").lower()
    ROUTER_TOPIC: str = os.getenv(
        "ROUTER_TOPIC",
        "AI (Artificial Intelligence) or RAG (Retrieval-Augmented Generation)",
    )
    ROUTER_MAX_TOKENS: int = int(os.getenv("ROUTER_MAX_TOKENS", "20"))
    ROUTER_TEMPERATURE: float = float(os.getenv("ROUTER_TEMPERATURE", "0.0"))

    # API Header Configuration
    API_USER_AGENT: str = os.getenv("API_USER_AGENT", "ragrouter/0.1")

    @classmethod
    def validate(cls) -> None:
        """Validate required configuration values.

        Raises:
            ConfigurationError: If OPENAI_API_KEY is not set or the router
                strategy is unknown.
        """
        if not cls.get_openai_api_key():
            msg = (
                "OPENAI_API_KEY is required. Please set it in .env file or environment."
            )
            raise ConfigurationError(msg)
        if cls.ROUTER_STRATEGY not in ROUTER_STRATEGIES:
            msg = (
                f"Unknown ROUTER_STRATEGY '{cls.ROUTER_STRATEGY}'. "
                f"Expected one of: {', '.join(ROUTER_STRATEGIES)}"
            )
            raise ConfigurationError(msg)
        cls.validate_split(cls.CHUNK_SIZE, cls.CHUNK_OVERLAP)

    @classmethod
    def validate_web_search(cls) -> None:
        """Validate configuration needed by the web search retriever.

        Raises:
            ConfigurationError: If TAVILY_API_KEY is not set.
        """
        if not cls.get_tavily_api_key():
            msg = "TAVILY_API_KEY is required when web search is enabled."
            raise ConfigurationError(msg)

    @staticmethod
    def validate_split(chunk_size: int, overlap: int) -> None:
        """Check segment size and overlap.

        Raises:
            ConfigurationError: If either value is negative, the size is zero,
                or the overlap is not smaller than the size.
        """
        if chunk_size <= 0 or overlap < 0:
            msg = (
                f"Invalid split parameters: size={chunk_size}, overlap={overlap}. "
                "Size must be positive and overlap non-negative."
            )
            raise ConfigurationError(msg)
        if overlap >= chunk_size:
            msg = f"Chunk overlap ({overlap}) must be smaller than size ({chunk_size})"
            raise ConfigurationError(msg)

    @classmethod
    def setup_logging(cls) -> None:
        """Configure console logging for the CLI process.

        Called once by the entry point, never at import time. The ``openai``
        and ``httpx`` loggers get their own levels so request traces stay quiet
        unless asked for.
        """
        logging.basicConfig(
            level=getattr(logging, cls.LOG_LEVEL, logging.INFO),
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )

        for name, level in (
            ("openai", cls.OPENAI_LOG_LEVEL),
            ("httpx", cls.HTTPX_LOG_LEVEL),
        ):
            logging.getLogger(name).setLevel(getattr(logging, level, logging.WARNING))

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """Return the named module logger; handlers come from setup_logging."""
        return logging.getLogger(name)

    @classmethod
    def get_api_headers(cls) -> dict[str, str]:
        """Build default headers for outbound API calls.

        Returns:
            Mapping of header names to values used on outbound HTTP requests.
        """
        headers: dict[str, str] = {}

        if cls.API_USER_AGENT:
            headers["User-Agent"] = cls.API_USER_AGENT

        return headers


config = Config()
