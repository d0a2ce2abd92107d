"""Retrieval augmentation: route, fetch, merge, and build the chat request."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

from .config import config
from .models import AugmentedRequest, ConversationTurn, Query, RetrievedContent

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .retrievers import ContentRetriever
    from .routing import QueryRouter

logger = config.get_logger(__name__)

SYSTEM_PROMPT = (
    "You are a helpful assistant. Use the conversation history to keep context "
    "continuity. When reference information is attached to the question, base "
    "your answer on it and say so if it does not contain the answer."
)


class RetrievalAugmentor:
    """Turns a query plus chat history into a generation request.

    Retrievers chosen by the router are called independently; their results
    are concatenated in router-selection order, each source keeping its own
    ranking. Scores from different sources are never compared.
    """

    def __init__(
        self,
        query_router: QueryRouter,
        *,
        system_prompt: str = SYSTEM_PROMPT,
        parallel: bool = False,
    ) -> None:
        """Initialize the augmentor.

        Args:
            query_router: Strategy deciding which retrievers apply.
            system_prompt: Task framing placed first in every request.
            parallel: Fan out to selected retrievers in a thread pool.
        """
        self.query_router = query_router
        self.system_prompt = system_prompt
        self.parallel = parallel

    @staticmethod
    def _safe_retrieve(
        retriever: ContentRetriever, query: Query
    ) -> list[RetrievedContent]:
        try:
            return retriever.retrieve(query)
        except Exception:  # noqa: BLE001
            logger.warning(
                "Retriever %r failed; it contributes no content this turn",
                retriever,
                exc_info=True,
            )
            return []

    def retrieve_all(
        self,
        query: Query,
        retrievers: Sequence[ContentRetriever],
    ) -> list[RetrievedContent]:
        """Invoke every retriever and merge the results.

        Returns:
            Results grouped by retriever, in the given retriever order.
        """
        if not retrievers:
            return []

        if self.parallel and len(retrievers) > 1:
            with ThreadPoolExecutor(max_workers=len(retrievers)) as executor:
                per_source = list(
                    executor.map(lambda r: self._safe_retrieve(r, query), retrievers)
                )
        else:
            per_source = [self._safe_retrieve(r, query) for r in retrievers]

        merged: list[RetrievedContent] = []
        for contents in per_source:
            merged.extend(contents)
        return merged

    @staticmethod
    def format_contents(contents: Sequence[RetrievedContent]) -> str:
        """Render retrieved items as labeled context blocks.

        Returns:
            One block per item, numbered in merged order.
        """
        blocks = []
        for i, content in enumerate(contents):
            score = "n/a" if content.score is None else f"{content.score:.4f}"
            url = content.segment.metadata.get("url")
            origin = f"{content.source} ({url})" if url else content.source
            blocks.append(
                f"[Context {i + 1}] (Source: {origin}, Score: {score})\n"
                f"{content.segment.text}"
            )
        return "\n\n".join(blocks)

    def build_user_message(
        self, query: Query, contents: Sequence[RetrievedContent]
    ) -> str:
        if not contents:
            return query.text
        return (
            f"{query.text}\n\n"
            "Answer using the following information:\n"
            f"{self.format_contents(contents)}"
        )

    def augment(
        self,
        query: Query,
        chat_history: Sequence[ConversationTurn] = (),
    ) -> AugmentedRequest:
        """Route the query, fetch content, and assemble the chat messages.

        Returns:
            The request for the generation model; with no selected retrievers
            it carries no context and is a plain chat request.
        """
        retrievers = self.query_router.route(query)
        contents = self.retrieve_all(query, retrievers)
        if retrievers:
            logger.info(
                "Merged %d items from %d sources", len(contents), len(retrievers)
            )

        messages: list[dict[str, str]] = [
            {"role": "system", "content": self.system_prompt}
        ]
        for turn in chat_history:
            messages.append({"role": "user", "content": turn.user_question})
            messages.append({"role": "assistant", "content": turn.bot_response})
        messages.append(
            {"role": "user", "content": self.build_user_message(query, contents)}
        )

        return AugmentedRequest(query=query, messages=messages, contents=contents)
