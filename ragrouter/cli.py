"""Command-line entry point: ingest documents, then chat in a line loop."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from .augmentor import RetrievalAugmentor
from .config import ROUTER_STRATEGIES, config
from .conversation import ChatMemory, ConversationSession
from .embeddings import EmbeddingService
from .exceptions import ConfigurationError, GenerationError, SourceUnavailableError
from .llm import ChatModel
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
from .web_search import TavilyWebSearchEngine

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

logger = config.get_logger(__name__)

DEFAULT_WEB_DESCRIPTION = "Answers questions that need current information from the web"


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Build the CLI parser and read command-line arguments."""  # noqa: DOC201
    parser = argparse.ArgumentParser(
        description="Chat with selective retrieval over local documents and the web.",
    )
    parser.add_argument(
        "--strategy",
        choices=ROUTER_STRATEGIES,
        default=config.ROUTER_STRATEGY,
        help="Routing strategy (default: ROUTER_STRATEGY or 'topic').",
    )
    parser.add_argument(
        "--document",
        dest="documents",
        type=Path,
        action="append",
        default=[],
        help="Document to index (repeatable; 'topic' uses exactly one).",
    )
    parser.add_argument(
        "--source",
        dest="sources",
        nargs=2,
        metavar=("PATH", "DESCRIPTION"),
        action="append",
        default=[],
        help="Document plus what it answers, for the 'classifier' strategy.",
    )
    parser.add_argument(
        "--topic",
        default=config.ROUTER_TOPIC,
        help="Topic checked by the 'topic' strategy.",
    )
    parser.add_argument(
        "--web",
        action="store_true",
        help="Add a Tavily web search source (needs TAVILY_API_KEY).",
    )
    parser.add_argument(
        "--web-description",
        default=DEFAULT_WEB_DESCRIPTION,
        help="Description of the web source for the 'classifier' strategy.",
    )
    parser.add_argument(
        "--vector-backend",
        choices=("faiss", "numpy"),
        default=config.VECTOR_BACKEND,
        help="Embedding store backend (default: VECTOR_BACKEND or 'faiss').",
    )
    parser.add_argument(
        "--parallel",
        action="store_true",
        help="Query selected sources concurrently.",
    )
    return parser.parse_args(argv)


def validate_args(args: argparse.Namespace) -> None:
    """Check that the sources given fit the chosen strategy.

    Raises:
        ConfigurationError: On a strategy/source mismatch.
    """
    if args.strategy == "topic" and len(args.documents) != 1:
        msg = "The 'topic' strategy needs exactly one --document"
        raise ConfigurationError(msg)
    if args.strategy == "static" and not (args.documents or args.web):
        msg = "The 'static' strategy needs at least one --document or --web"
        raise ConfigurationError(msg)
    if args.strategy == "classifier" and not args.sources:
        msg = "The 'classifier' strategy needs at least one --source PATH DESCRIPTION"
        raise ConfigurationError(msg)
    if args.web:
        config.validate_web_search()


def build_document_retriever(
    pipeline: IngestionPipeline, path: Path
) -> EmbeddingStoreContentRetriever:
    """Ingest one document and wrap its store in a retriever.

    A document that fails to ingest yields a retriever with no store, which
    always returns nothing.

    Returns:
        Retriever named after the document file.
    """
    try:
        store = pipeline.ingest_file(path)
    except SourceUnavailableError as e:
        logger.error("Skipping source: %s", e)  # noqa: TRY400
        store = None
    return EmbeddingStoreContentRetriever(
        store, pipeline.embedding_service, name=path.name
    )


def build_router(
    args: argparse.Namespace,
    pipeline: IngestionPipeline,
    chat_model: ChatModel,
    web_retriever: ContentRetriever | None = None,
) -> QueryRouter:
    """Create the retrievers and the router for the chosen strategy.

    Returns:
        A router ready to use.
    """
    if args.strategy == "topic":
        retriever = build_document_retriever(pipeline, args.documents[0])
        return TopicGateQueryRouter(chat_model, retriever, topic=args.topic)

    if args.strategy == "static":
        retrievers: list[ContentRetriever] = [
            build_document_retriever(pipeline, path) for path in args.documents
        ]
        if web_retriever is not None:
            retrievers.append(web_retriever)
        return StaticQueryRouter(*retrievers)

    descriptions: dict[ContentRetriever, str] = {}
    for path, description in args.sources:
        descriptions[build_document_retriever(pipeline, Path(path))] = description
    if web_retriever is not None:
        descriptions[web_retriever] = args.web_description
    return LanguageModelQueryRouter(chat_model, descriptions)


def run_conversation(
    session: ConversationSession,
    read_line: Callable[[str], str] = input,
    write: Callable[[str], None] = print,
) -> None:
    """Read questions line by line until the end sentinel or end of input."""
    write(f"Ask a question ('{session.end_sentinel}' to quit).")
    while True:
        try:
            question = read_line("\nYou: ")
        except EOFError:
            break

        if not question.strip():
            continue
        if session.is_end(question):
            break

        try:
            answer = session.turn(question)
        except GenerationError as e:
            write(f"Error: could not generate an answer ({e})")
            continue
        write(f"Assistant: {answer}")

    session.end()
    write("Conversation ended.")


def main(argv: Sequence[str] | None = None) -> int:
    """Validate configuration, ingest sources and start the chat loop."""  # noqa: DOC201
    args = parse_args(argv)

    config.setup_logging()

    try:
        config.validate()
        validate_args(args)
    except ConfigurationError:
        logger.exception("Configuration invalid")
        return 1

    embedding_service = EmbeddingService()
    chat_model = ChatModel()
    pipeline = IngestionPipeline(embedding_service, vector_backend=args.vector_backend)

    web_engine = TavilyWebSearchEngine() if args.web else None
    web_retriever = WebSearchContentRetriever(web_engine) if web_engine else None

    router = build_router(args, pipeline, chat_model, web_retriever)
    session = ConversationSession(
        RetrievalAugmentor(router, parallel=args.parallel),
        chat_model,
        memory=ChatMemory(),
    )

    try:
        run_conversation(session)
    except KeyboardInterrupt:
        logger.info("Stopped by user")
    finally:
        if web_engine is not None:
            web_engine.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
