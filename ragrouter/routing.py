"""Query routers: decide which content retrievers apply to a query.

Three interchangeable strategies share one capability, ``route(query)``:

- ``TopicGateQueryRouter`` asks the chat model a yes/no question about a
  single topic and selects its one retriever on an affirmative reply.
- ``StaticQueryRouter`` always selects every retriever it was built with.
- ``LanguageModelQueryRouter`` shows the chat model a numbered list of source
  descriptions and selects whichever sources the reply names.

Routing is best effort: when the classification call fails the router logs
the error and selects nothing, so the turn proceeds without retrieval.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Protocol

from .config import config
from .models import Query
from .retrievers import ContentRetriever

logger = config.get_logger(__name__)

TOPIC_GATE_PROMPT = (
    "Does the query '{query}' concern {topic}? "
    "Answer only with 'yes' or 'no'."
)

SOURCE_SELECTION_PROMPT = (
    "Based on the user query, choose the data source(s) most likely to hold "
    "the information needed to answer it.\n"
    "Options:\n"
    "{options}\n"
    "0: none of the above\n"
    "Answer with a single number or several numbers separated by commas, "
    "and nothing else.\n"
    "User query: {query}"
)

_NUMBER = re.compile(r"\b\d+\b")
_NONE_OPTION = re.compile(r"\b0+\b")
_NONE_WORD = re.compile(r"\bnone\b", re.IGNORECASE)


class TextGenerator(Protocol):
    def generate(
        self,
        prompt: str,
        *,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> str: ...


class QueryRouter(Protocol):
    """Selects the ordered list of retrievers to consult for a query."""

    def route(self, query: Query) -> list[ContentRetriever]: ...


def _classify(chat_model: TextGenerator, prompt: str) -> str | None:
    """Run a routing prompt; None means the call failed.

    Returns:
        The model reply, or None on any error.
    """
    try:
        return chat_model.generate(
            prompt,
            max_tokens=config.ROUTER_MAX_TOKENS,
            temperature=config.ROUTER_TEMPERATURE,
        )
    except Exception:  # noqa: BLE001
        logger.warning(
            "Routing call failed; continuing without retrieval", exc_info=True
        )
        return None


class TopicGateQueryRouter:
    """Binary gate: one retriever, selected only when the query is on topic."""

    def __init__(
        self,
        chat_model: TextGenerator,
        retriever: ContentRetriever,
        topic: str | None = None,
        affirmative_tokens: Sequence[str] = ("yes",),
    ) -> None:
        self.chat_model = chat_model
        self.retriever = retriever
        self.topic = topic or config.ROUTER_TOPIC
        self.affirmative_tokens = tuple(t.lower() for t in affirmative_tokens)

    def build_prompt(self, query: Query) -> str:
        return TOPIC_GATE_PROMPT.format(query=query.text, topic=self.topic)

    def is_affirmative(self, reply: str | None) -> bool:
        if not reply:
            return False
        normalized = reply.strip().lower()
        return any(token in normalized for token in self.affirmative_tokens)

    def route(self, query: Query) -> list[ContentRetriever]:
        reply = _classify(self.chat_model, self.build_prompt(query))
        if self.is_affirmative(reply):
            logger.info("Routing: retrieval enabled (model reply: %r)", reply)
            return [self.retriever]
        logger.info("Routing: no retrieval (model reply: %r)", reply)
        return []


class StaticQueryRouter:
    """Fan-out to every configured retriever, for every query."""

    def __init__(self, *retrievers: ContentRetriever) -> None:
        self.retrievers = list(retrievers)

    def route(self, query: Query) -> list[ContentRetriever]:  # noqa: ARG002
        return list(self.retrievers)


class LanguageModelQueryRouter:
    """Lets the chat model pick sources from their descriptions.

    The reply is matched against the option numbers shown in the prompt; a
    reply that quotes a description verbatim (case-insensitive) also selects
    it. Anything else selects nothing. Selected retrievers are returned in the
    order their descriptions were given, without duplicates.
    """

    def __init__(
        self,
        chat_model: TextGenerator,
        descriptions: Mapping[ContentRetriever, str],
    ) -> None:
        """Store the retriever-to-description mapping.

        Args:
            chat_model: Model used for the classification prompt.
            descriptions: What each retriever can answer. Iteration order
                fixes the option numbers, starting at 1.

        Raises:
            ValueError: If no retrievers are given.
        """
        if not descriptions:
            msg = "LanguageModelQueryRouter needs at least one retriever"
            raise ValueError(msg)
        self.chat_model = chat_model
        self.options: list[tuple[ContentRetriever, str]] = list(descriptions.items())

    def build_prompt(self, query: Query) -> str:
        options = "\n".join(
            f"{number}: {description}"
            for number, (_, description) in enumerate(self.options, start=1)
        )
        return SOURCE_SELECTION_PROMPT.format(options=options, query=query.text)

    def parse_reply(self, reply: str | None) -> list[ContentRetriever]:
        """Map a free-text reply onto the subset of retrievers it names.

        A standalone ``0`` means "none of the above" and selects nothing. The
        word "none" does the same unless option numbers come before it; only
        the text preceding it is read.

        Returns:
            Selected retrievers in option order; empty if none match.
        """
        if not reply:
            return []
        if _NONE_OPTION.search(reply):
            return []

        none_word = _NONE_WORD.search(reply)
        if none_word:
            reply = reply[: none_word.start()]

        selected: set[int] = set()
        for token in _NUMBER.findall(reply):
            number = int(token)
            if 1 <= number <= len(self.options):
                selected.add(number - 1)

        lowered = reply.lower()
        for position, (_, description) in enumerate(self.options):
            if description.strip() and description.strip().lower() in lowered:
                selected.add(position)

        return [self.options[position][0] for position in sorted(selected)]

    def route(self, query: Query) -> list[ContentRetriever]:
        reply = _classify(self.chat_model, self.build_prompt(query))
        retrievers = self.parse_reply(reply)
        logger.info(
            "Routing: %d of %d sources selected (model reply: %r)",
            len(retrievers),
            len(self.options),
            reply,
        )
        return retrievers
