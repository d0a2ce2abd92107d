"""Conversation session with a bounded chat history."""

from __future__ import annotations

import datetime
from collections import deque
from typing import TYPE_CHECKING

from .config import config
from .models import ConversationTurn, Query

if TYPE_CHECKING:
    from .augmentor import RetrievalAugmentor
    from .llm import ChatModel

logger = config.get_logger(__name__)


class ChatMemory:
    """Ordered window of the most recent turns; the oldest is evicted first."""

    def __init__(self, max_turns: int | None = None) -> None:
        """Create an empty window.

        Args:
            max_turns: Window size in turns. If None, uses
                config.HISTORY_MAX_TURNS.

        Raises:
            ValueError: If the window size is not positive.
        """
        self.max_turns = max_turns if max_turns is not None else config.HISTORY_MAX_TURNS
        if self.max_turns <= 0:
            msg = f"History window must be positive, got {self.max_turns}"
            raise ValueError(msg)
        self._turns: deque[ConversationTurn] = deque()

    def __len__(self) -> int:
        return len(self._turns)

    def add(self, turn: ConversationTurn) -> None:
        self._turns.append(turn)
        while len(self._turns) > self.max_turns:
            evicted = self._turns.popleft()
            logger.debug("Evicted oldest turn: %s", evicted.user_question[:50])

    def turns(self) -> list[ConversationTurn]:
        return list(self._turns)

    def clear(self) -> None:
        self._turns.clear()


class ConversationSession:
    """Drives one conversation: augment, generate, record."""

    def __init__(
        self,
        augmentor: RetrievalAugmentor,
        chat_model: ChatModel,
        memory: ChatMemory | None = None,
        end_sentinel: str | None = None,
    ) -> None:
        """Initialize the session.

        Args:
            augmentor: Builds the generation request for each query.
            chat_model: Produces the final answer.
            memory: History window owned by this session. If None, a new
                window of config.HISTORY_MAX_TURNS is created.
            end_sentinel: Input that ends the session, compared
                case-insensitively. If None, uses config.END_SENTINEL.
        """
        self.augmentor = augmentor
        self.chat_model = chat_model
        self.memory = memory if memory is not None else ChatMemory()
        self.end_sentinel = (end_sentinel or config.END_SENTINEL).strip().lower()
        self.closed = False

    def is_end(self, text: str) -> bool:
        return text.strip().lower() == self.end_sentinel

    def turn(self, question: str) -> str:
        """Answer one question and record it in history.

        Returns:
            The generated answer.

        Raises:
            RuntimeError: If the session has already ended.
            GenerationError: If the answer call fails; history is unchanged
                and the session stays usable.
        """
        if self.closed:
            msg = "Conversation session has ended"
            raise RuntimeError(msg)

        logger.info("Processing question: %s", question)
        query = Query(text=question)
        request = self.augmentor.augment(query, self.memory.turns())
        answer = self.chat_model.generate(request.messages)

        self.memory.add(
            ConversationTurn(
                user_question=question,
                bot_response=answer,
                retrieved_contexts=request.contents,
                timestamp=datetime.datetime.now(tz=datetime.UTC).isoformat(),
            )
        )
        return answer

    def end(self) -> None:
        """End the session and drop its history."""
        self.closed = True
        self.memory.clear()
        logger.info("Conversation ended.")
